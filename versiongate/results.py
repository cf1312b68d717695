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

"""Public API return types for versiongate.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Reading a verdict:
        ```python
        verdict = engine.evaluate()
        if verdict.blocked:
            show_gate(dismissable=verdict.is_dismissable)
        ```
"""

from __future__ import annotations

from dataclasses import dataclass

from versiongate.policy.gates import GatePolicy, Severity


@dataclass(frozen=True)
class Verdict:
    """Result of one compliance evaluation.

    Attributes:
        blocked: True if the app must show the update gate.
        severity: Blocking severity when blocked, else None.
        is_dismissable: True if the user may skip the gate. Always False
            for forced gates and for no-block verdicts.
        is_new_gate: True if the policy's freshness token differs from the
            one on record before this evaluation.
        reason: Short machine-readable cause: "no-policy", "not-blocked",
            "already-shown" or "blocked".
        policy: The policy that was evaluated, if any. Carries the display
            metadata (latest_version, whats_new, store_url).
    """

    blocked: bool
    severity: Severity | None = None
    is_dismissable: bool = False
    is_new_gate: bool = False
    reason: str = "not-blocked"
    policy: GatePolicy | None = None

    @classmethod
    def no_block(
        cls,
        reason: str,
        policy: GatePolicy | None = None,
        is_new_gate: bool = False,
    ) -> Verdict:
        return cls(blocked=False, reason=reason, policy=policy, is_new_gate=is_new_gate)

    @classmethod
    def block(cls, severity: Severity, policy: GatePolicy, is_new_gate: bool) -> Verdict:
        return cls(
            blocked=True,
            severity=severity,
            is_dismissable=severity is not Severity.FORCED,
            is_new_gate=is_new_gate,
            reason="blocked",
            policy=policy,
        )
