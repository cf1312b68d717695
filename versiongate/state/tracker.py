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

"""State tracking implementation for versiongate.

This module implements the persistence layer the compliance engine uses
between app launches. One JSON file holds three sections:

- metadata: versiongate version, schema version, last write timestamp
- settings: analytics_enabled and first_launch flags
- gate: the last gate policy, tagged with the app version it was cached for

Key Features:

- JSON-based state storage (fast parsing, standard library)
- Write-through: every mutation is saved immediately
- Robust error handling (corrupted files are backed up and replaced)
- Auto-creation of state files and directories

StateTracker satisfies both the ComplianceCache protocol (read/write of a
single policy slot) and the SettingsStore protocol (the two persisted flags),
so one object can back an entire VersionGate client.

Example:
    High-level API with StateTracker:
        ```python
        from pathlib import Path
        from versiongate.state import StateTracker

        tracker = StateTracker(Path("state/versiongate.json"))

        policy = tracker.read()          # last cached GatePolicy or None
        tracker.write(new_policy)        # persist (None clears the slot)

        if tracker.first_launch:
            tracker.first_launch = False
        ```

    Low-level API with functions:
        ```python
        from versiongate.state import load_state, save_state

        state = load_state(Path("state/versiongate.json"))
        state["gate"] = None
        save_state(state, Path("state/versiongate.json"))
        ```

"""

from __future__ import annotations

from datetime import UTC, datetime
import json
from pathlib import Path
from typing import Any, Protocol

from versiongate import __version__
from versiongate.exceptions import StateError
from versiongate.logging import STATE, Logger, get_global_logger
from versiongate.policy.gates import GatePolicy, decode_policy, encode_policy

SCHEMA_VERSION = "1"


class ComplianceCache(Protocol):
    """Single durable slot holding the last-seen gate policy."""

    def read(self) -> GatePolicy | None:
        """Return the cached policy, or None if nothing usable is stored."""
        ...

    def write(self, policy: GatePolicy | None) -> None:
        """Persist a policy. Writing None clears the slot."""
        ...


class SettingsStore(Protocol):
    """Persisted client flags."""

    first_launch: bool
    analytics_enabled: bool


class StateTracker:
    """Manages versiongate state with automatic persistence.

    The file is loaded lazily on first access. Every setter and every
    write() saves immediately, so a process that is killed right after an
    evaluation still remembers the gate it showed.

    Attributes:
        state_file: Path to the JSON state file.
        state: In-memory state dictionary.

    """

    def __init__(self, state_file: Path, logger: Logger | None = None):
        """Initialize state tracker.

        Args:
            state_file: Path to JSON state file. Created if doesn't exist.
            logger: Logger for cache diagnostics. Defaults to the global one.

        """
        self.state_file = state_file
        self.state: dict[str, Any] = {}
        self._loaded = False
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    def load(self) -> dict[str, Any]:
        """Load state from file.

        Creates default state structure if file doesn't exist.
        Handles corrupted files by creating backup and starting fresh.

        Returns:
            Loaded state dictionary.

        Raises:
            StateError: If the file was corrupted (a backup was made and a
                fresh state file written before raising).
            OSError: If file permissions prevent reading.

        """
        try:
            self.state = load_state(self.state_file)
            _check_layout(self.state)
        except FileNotFoundError:
            # First run, create default state
            self.state = create_default_state()
            self.save()
        except ValueError as err:
            # JSONDecodeError, UnicodeDecodeError and layout errors
            backup = self.state_file.with_suffix(".json.backup")
            self.state_file.replace(backup)
            self.state = create_default_state()
            self.save()
            raise StateError(
                f"Corrupted state file backed up to {backup}. "
                f"Created fresh state file."
            ) from err
        finally:
            self._loaded = True

        return self.state

    def save(self) -> None:
        """Save current state to file.

        Updates metadata.last_updated timestamp automatically.

        Raises:
            OSError: If file permissions prevent writing.

        """
        self.state.setdefault("metadata", {})
        self.state["metadata"]["last_updated"] = datetime.now(UTC).isoformat()
        save_state(self.state, self.state_file)

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        try:
            self.load()
        except StateError as err:
            self.logger.verbose(STATE, f"Warning: {err}")
        except OSError as err:
            # Whatever was read (if anything) is not trusted
            self.logger.verbose(STATE, f"Warning: {err}")
            self.state = create_default_state()

    # ----------------------------
    # ComplianceCache
    # ----------------------------

    def read(self) -> GatePolicy | None:
        """Return the cached gate policy, or None.

        Never raises: unreadable or corrupted state counts as a cache miss.
        """
        self._ensure_loaded()
        raw = self.state.get("gate")
        if raw is None:
            return None
        return decode_policy(raw)

    def write(self, policy: GatePolicy | None) -> None:
        """Persist the gate policy (None clears it).

        Failures to write are logged and otherwise ignored; the in-memory
        copy is still updated.
        """
        self._ensure_loaded()
        self.state["gate"] = encode_policy(policy) if policy is not None else None
        self._persist()

    # ----------------------------
    # SettingsStore
    # ----------------------------

    def _get_setting(self, key: str, default: bool) -> bool:
        self._ensure_loaded()
        value = self.state.get("settings", {}).get(key, default)
        return value if isinstance(value, bool) else default

    def _set_setting(self, key: str, value: bool) -> None:
        self._ensure_loaded()
        self.state.setdefault("settings", {})[key] = bool(value)
        self._persist()

    @property
    def first_launch(self) -> bool:
        return self._get_setting("first_launch", True)

    @first_launch.setter
    def first_launch(self, value: bool) -> None:
        self._set_setting("first_launch", value)

    @property
    def analytics_enabled(self) -> bool:
        return self._get_setting("analytics_enabled", True)

    @analytics_enabled.setter
    def analytics_enabled(self, value: bool) -> None:
        self._set_setting("analytics_enabled", value)

    def _persist(self) -> None:
        try:
            self.save()
        except OSError as err:
            self.logger.verbose(STATE, f"Warning: Failed to save state: {err}")


def _check_layout(state: Any) -> None:
    """Raise ValueError unless ``state`` has the expected section types."""
    if not isinstance(state, dict):
        raise ValueError("top-level value is not an object")
    for section in ("metadata", "settings"):
        if section in state and not isinstance(state[section], dict):
            raise ValueError(f"'{section}' section is not an object")


def create_default_state() -> dict[str, Any]:
    """Create a default empty state structure.

    Returns:
        State with metadata, default settings and an empty gate slot.

    """
    return {
        "metadata": {
            "versiongate_version": __version__,
            "schema_version": SCHEMA_VERSION,
            "last_updated": datetime.now(UTC).isoformat(),
        },
        "settings": {
            "analytics_enabled": True,
            "first_launch": True,
        },
        "gate": None,
    }


def load_state(state_file: Path) -> dict[str, Any]:
    """Load state from JSON file.

    Args:
        state_file: Path to JSON state file.

    Returns:
        Loaded state dictionary.

    Raises:
        FileNotFoundError: If state file doesn't exist.
        json.JSONDecodeError: If file contains invalid JSON.
        OSError: If file cannot be read due to permissions.

    """
    with open(state_file, encoding="utf-8") as f:
        return json.load(f)


def save_state(state: dict[str, Any], state_file: Path) -> None:
    """Save state to JSON file with pretty-printing.

    Creates parent directories if needed. Uses 2-space indentation
    and sorted keys for consistent diffs.

    Args:
        state: State dictionary to save.
        state_file: Path to JSON state file.

    Raises:
        OSError: If file cannot be written due to permissions.

    """
    state_file.parent.mkdir(parents=True, exist_ok=True)

    with open(state_file, "w", encoding="utf-8") as f:
        json.dump(state, f, indent=2, sort_keys=True)
        f.write("\n")
