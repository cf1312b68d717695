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

"""State persistence for versiongate.

This package persists what the compliance engine must remember between
launches: the last gate policy (tagged with the app version it was cached
for) and the first-launch and analytics flags.

Public API:

- ComplianceCache: Protocol for the single policy slot (read/write)
- SettingsStore: Protocol for the persisted client flags
- StateTracker: JSON-file implementation of both protocols
- load_state: Load state from JSON file
- save_state: Save state to JSON file with pretty-printing

"""

from .tracker import (
    ComplianceCache,
    SettingsStore,
    StateTracker,
    load_state,
    save_state,
)

__all__ = [
    "ComplianceCache",
    "SettingsStore",
    "StateTracker",
    "load_state",
    "save_state",
]
