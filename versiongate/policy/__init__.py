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

"""Gate policy model for versiongate.

Modules:

gates : module
    Severity codes, gate rules, the two evaluation modes, and defensive
    JSON decoding into a single GatePolicy.

Public API:

Severity : IntEnum
    forced / dismissable / modal / live, coded 0..3 like the backend.
GateRule : dataclass
    One minimum-version or blocked-version rule.
GatePolicy : dataclass
    Current update requirement plus display metadata.
decode_policy : function
    Decode a payload; never raises.
encode_policy : function
    Encode a policy for the cache.

Example:
    from versiongate.policy import decode_policy

    policy = decode_policy({"gateType": 0, "lastGateUpdate": "t"})
    print(policy.blocking_severity("1.0.0"))  # Severity.FORCED

"""

from .gates import (
    ClientComputed,
    GatePolicy,
    GateRule,
    ServerComputed,
    Severity,
    decode_policy,
    encode_policy,
)

__all__ = [
    "ClientComputed",
    "GatePolicy",
    "GateRule",
    "ServerComputed",
    "Severity",
    "decode_policy",
    "encode_policy",
]
