# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Diagnostic output for versiongate.

versiongate is embedded in host apps, so it never prints unless asked to.
Components log through a small Logger protocol with two levels:

- Verbose: decisions worth seeing when troubleshooting a gate (fetch
  failures, cache invalidation, suppressed gates, signal delivery)
- Debug: request-level detail (URLs, query parameters, joined evaluations)

Every message carries a subsystem prefix from the constants below, printed
as ``[PREFIX] message``.

The process-wide default is SilentLogger. The CLI and
VersionGate.configure(verbose=True) install a DefaultLogger; components
built with an explicit ``logger=`` ignore the global one.

Example:
    ```python
    import sys
    from versiongate.logging import ENGINE, get_global_logger, get_logger, set_global_logger

    set_global_logger(get_logger(verbose=True, stream=sys.stderr))
    get_global_logger().verbose(ENGINE, "Evaluating gate policy")
    ```
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO

# Subsystem prefixes
ENGINE = "ENGINE"
CACHE = "CACHE"
STATE = "STATE"
HTTP = "HTTP"
SIGNAL = "SIGNAL"
CONFIG = "CONFIG"


class Logger(Protocol):
    """Protocol for logger implementations."""

    def verbose(self, prefix: str, message: str) -> None:
        """Log a troubleshooting message.

        Args:
            prefix: Subsystem prefix (e.g., ENGINE, CACHE).
            message: Log message.
        """
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Log request-level detail."""
        ...


class DefaultLogger:
    """Writes ``[PREFIX] message`` lines to a stream (stdout by default).

    Debug implies verbose.
    """

    def __init__(
        self,
        verbose: bool = False,
        debug: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        self._verbose = verbose or debug
        self._debug = debug
        self._stream = stream

    def _write(self, prefix: str, message: str) -> None:
        # Resolved per call so pytest's capsys and redirected stdout apply.
        stream = self._stream if self._stream is not None else sys.stdout
        print(f"[{prefix}] {message}", file=stream)

    def verbose(self, prefix: str, message: str) -> None:
        if self._verbose:
            self._write(prefix, message)

    def debug(self, prefix: str, message: str) -> None:
        if self._debug:
            self._write(prefix, message)


class SilentLogger:
    """Logger that drops everything. The library default."""

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def debug(self, prefix: str, message: str) -> None:
        pass


_global_logger: Logger = SilentLogger()


def get_logger(
    verbose: bool = False, debug: bool = False, stream: TextIO | None = None
) -> Logger:
    """Build a DefaultLogger with the given verbosity and output stream."""
    return DefaultLogger(verbose=verbose, debug=debug, stream=stream)


def get_global_logger() -> Logger:
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Replace the process-wide logger.

    Note:
        This affects every versiongate component created without an
        explicit logger. Pass ``logger=`` to the constructors instead when
        several clients share one process.
    """
    global _global_logger
    _global_logger = logger
