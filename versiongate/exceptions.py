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

"""Exception hierarchy for versiongate.

This module defines a small exception hierarchy that lets library users
tell the different failure kinds apart:

- ConfigError: Client configuration problems (YAML parse, missing fields,
  unset environment variables)
- NetworkError: Transport failures (connection errors, HTTP errors, bad JSON)
- StateError: Persistent state problems (corrupted state file)

All exceptions inherit from VersionGateError, so callers can catch every
versiongate error with a single except clause.

None of these ever escape ComplianceDecisionEngine.evaluate(). The engine
fails open: the worst outcome of any failure is "no block shown".

Example:
    Catching configuration errors:
        ```python
        from versiongate.config import load_client_config
        from versiongate.exceptions import ConfigError

        try:
            config = load_client_config(Path("versiongate.yaml"))
        except ConfigError as e:
            print(f"Config error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "VersionGateError",
    "ConfigError",
    "NetworkError",
    "StateError",
]


class VersionGateError(Exception):
    """Base exception for all versiongate errors."""

    pass


class ConfigError(VersionGateError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, non-mapping top level)
    - Missing or invalid configuration fields
    - Environment variables referenced as ${VAR} that are not set
    """

    pass


class NetworkError(VersionGateError):
    """Raised for transport-related errors.

    Raised inside ApiClient for connection failures, non-2xx responses and
    undecodable bodies. ApiClient.fetch_policy converts it to None before it
    reaches the engine, which then falls back to the cached policy.
    """

    pass


class StateError(VersionGateError):
    """Raised when the persisted state file cannot be used.

    The corrupted file is backed up and replaced with fresh defaults before
    this is raised, so a retry always starts from a clean slate.
    """

    pass
