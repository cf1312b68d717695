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

"""Fetcher protocol for the decision engine.

Uses Protocol instead of ABC so that test doubles and alternative
transports only need a matching ``fetch_policy`` method.
"""

from __future__ import annotations

from typing import Protocol

from versiongate.policy.gates import GatePolicy


class PolicyFetcher(Protocol):
    """Source of fresh gate policies.

    Implementations must return None on any failure (network, decode) and
    should not raise; the engine still guards against it.
    """

    def fetch_policy(self, app_version: str) -> GatePolicy | None: ...
