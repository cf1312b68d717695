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

"""Analytics signals for versiongate.

Signals are named events with an optional string value. The client sends
three of them on its own:

- ``_first_launch``: once per install (persisted flag, consumed once)
- ``_app_open``: on every configure/foreground trigger
- ``_gate_enforced``: whenever the engine returns a block verdict; the value
  is the running app version

Delivery is fire-and-forget. A sender never reports failures back to the
caller, never retries and never queues.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import locale
import platform
from typing import Any, Protocol

UNKNOWN = "unknown"


class DefaultSignals:
    FIRST_LAUNCH = "_first_launch"
    APP_OPEN = "_app_open"
    GATE_ENFORCED = "_gate_enforced"


@dataclass(frozen=True)
class Signal:
    """A single analytics event.

    Attributes:
        name: Event name (e.g., "_app_open").
        value: Optional payload; empty string when unused.

    """

    name: str
    value: str = ""

    def __str__(self) -> str:
        return self.name if not self.value else f"{self.name}: {self.value}"


class SignalEmitter(Protocol):
    """Anything that accepts named events. Must not raise to the caller."""

    def send_signal(self, name: str, value: str = "") -> None: ...


@dataclass(frozen=True)
class SignalPayload:
    """Request body for the analytics endpoint."""

    os_version: str
    app_version: str
    country: str
    language: str
    platform: str
    device_model: str
    signals: list[Signal] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return {
            "osVersion": self.os_version,
            "appVersion": self.app_version,
            "country": self.country,
            "language": self.language,
            "platform": self.platform,
            "deviceModel": self.device_model,
            "signals": [asdict(s) for s in self.signals],
        }


def _locale_parts() -> tuple[str, str]:
    try:
        tag = locale.getlocale()[0]
    except ValueError:
        tag = None
    if not tag:
        return UNKNOWN, UNKNOWN
    language, _, country = tag.partition("_")
    return (country or UNKNOWN), (language or UNKNOWN)


def collect_device_metadata() -> dict[str, str]:
    """Collect host metadata for analytics payloads.

    Returns:
        Mapping with os_version, country, language, platform and
        device_model. Missing values are "unknown".
    """
    country, language = _locale_parts()
    return {
        "os_version": platform.release() or UNKNOWN,
        "country": country,
        "language": language,
        "platform": platform.system() or UNKNOWN,
        "device_model": platform.machine() or UNKNOWN,
    }
