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

"""Gate policy model and evaluation for versiongate.

A gate policy describes the current update requirement for an app. The
backend has served two response shapes over time, and both are accepted:

- SERVER-COMPUTED: the server already compared the app version and answers
  with a single ``gateType`` (0=forced, 1=dismissable, 2=modal, 3=live).
- CLIENT-COMPUTED: the server sends rules (``minVersion`` and
  ``blockedVersions``) and the client compares its own version.

Both are normalized at decode time into one GatePolicy whose
``blocking_severity()`` is the only evaluation entry point, so callers never
branch on the schema.

Decoding never fails. Every field is decoded on its own and falls back to a
safe default when missing or malformed:

- gateType -> LIVE (not blocked)
- rule type -> DISMISSABLE
- lastGateUpdate -> ""
- optional strings -> None
- lists -> empty

Example:
    Decode and evaluate a payload:
        ```python
        from versiongate.policy import decode_policy

        policy = decode_policy({
            "minVersion": {"version": "2.0.0", "type": 0},
            "lastGateUpdate": "2025-01-01T00:00:00Z",
        })
        policy.blocking_severity("1.4.0")   # Severity.FORCED
        policy.blocking_severity("2.0.0")   # None
        ```

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any, Union

from versiongate.versioning.keys import Version, parse_version

# storeUrls entry type for the iOS App Store
APP_STORE_TYPE = 0


class Severity(IntEnum):
    """Gate strength, numerically coded to match the backend."""

    FORCED = 0
    DISMISSABLE = 1
    MODAL = 2
    LIVE = 3

    @property
    def is_dismissable(self) -> bool:
        """True for gates the user may postpone (dismissable and modal)."""
        return self in (Severity.DISMISSABLE, Severity.MODAL)

    @property
    def is_forced(self) -> bool:
        return self is Severity.FORCED


def _decode_int(value: Any) -> int | None:
    # bool is an int subclass; JSON true/false is not a gate code
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _decode_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def decode_gate_type(value: Any) -> Severity:
    """Decode a policy-level ``gateType``; anything unrecognized is LIVE."""
    code = _decode_int(value)
    if code is None:
        return Severity.LIVE
    try:
        return Severity(code)
    except ValueError:
        return Severity.LIVE


def decode_rule_type(value: Any) -> Severity:
    """Decode a rule-level ``type``; anything but 0/1/2 is DISMISSABLE."""
    code = _decode_int(value)
    if code in (Severity.FORCED, Severity.DISMISSABLE, Severity.MODAL):
        return Severity(code)
    return Severity.DISMISSABLE


@dataclass(frozen=True)
class GateRule:
    """One rule row: a target version and the severity it carries.

    Attributes:
        version: Target version string as sent by the server.
        severity: FORCED, DISMISSABLE or MODAL.

    """

    version: str
    severity: Severity = Severity.DISMISSABLE

    @property
    def parsed_version(self) -> Version | None:
        return parse_version(self.version)

    @classmethod
    def from_payload(cls, data: Any) -> GateRule | None:
        """Decode a ``{"version": str, "type": int}`` object.

        Returns None when the entry is not an object or has no string
        version, since such a row can never match anything.
        """
        if not isinstance(data, Mapping):
            return None
        version = _decode_str(data.get("version"))
        if version is None:
            return None
        return cls(version=version, severity=decode_rule_type(data.get("type")))

    def to_payload(self) -> dict[str, Any]:
        return {"version": self.version, "type": int(self.severity)}


@dataclass(frozen=True)
class ServerComputed:
    """The server already decided; ``severity`` is the verdict (LIVE = open)."""

    severity: Severity = Severity.LIVE

    def blocking_severity(self, current: Version | None) -> Severity | None:
        return None if self.severity is Severity.LIVE else self.severity


@dataclass(frozen=True)
class ClientComputed:
    """Rules evaluated against the running app version on the device."""

    minimum_version: GateRule | None = None
    blocked_versions: tuple[GateRule, ...] = ()

    def blocking_severity(self, current: Version | None) -> Severity | None:
        """Minimum version first, then the blocklist in order.

        An unparseable running version or rule version never blocks.
        """
        if current is None:
            return None

        rule = self.minimum_version
        if rule is not None:
            target = rule.parsed_version
            if target is not None and current < target:
                return rule.severity

        for entry in self.blocked_versions:
            target = entry.parsed_version
            if target is not None and current == target:
                return entry.severity

        return None


Evaluation = Union[ServerComputed, ClientComputed]


@dataclass(frozen=True)
class GatePolicy:
    """The unit the decision engine reasons about.

    Attributes:
        evaluation: ServerComputed or ClientComputed, chosen at decode time.
        last_updated_at: Opaque freshness token (ISO-8601 in practice). Any
            change in value means the policy changed.
        latest_version: Latest version in the store, for display only.
        whats_new: Release notes, for display only.
        store_url: Store link, for display only.
        cached_for_app_version: App version the policy was cached for. Set by
            the engine when persisting, never by the server.

    """

    evaluation: Evaluation = ServerComputed()
    last_updated_at: str = ""
    latest_version: str | None = None
    whats_new: str | None = None
    store_url: str | None = None
    cached_for_app_version: str | None = None

    @property
    def is_server_computed(self) -> bool:
        return isinstance(self.evaluation, ServerComputed)

    def blocking_severity(self, current: Version | str) -> Severity | None:
        """Return the severity that blocks ``current``, or None if not blocked.

        Args:
            current: Running app version, parsed or as a string.

        Returns:
            FORCED, DISMISSABLE or MODAL when blocked; None otherwise.

        """
        if isinstance(current, str):
            current = parse_version(current)
        return self.evaluation.blocking_severity(current)

    def is_blocked(self, current: Version | str) -> bool:
        return self.blocking_severity(current) is not None

    def is_dismissable(self, current: Version | str) -> bool:
        severity = self.blocking_severity(current)
        return severity is not None and severity.is_dismissable

    def with_cached_app_version(self, app_version: str) -> GatePolicy:
        """Return a copy stamped with the app version it is cached for."""
        return replace(self, cached_for_app_version=app_version)


def _decode_store_url(payload: Mapping[str, Any]) -> str | None:
    direct = _decode_str(payload.get("storeUrl"))
    if direct is not None:
        return direct

    entries = payload.get("storeUrls")
    if not isinstance(entries, list):
        return None
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        if _decode_int(entry.get("type")) == APP_STORE_TYPE:
            url = _decode_str(entry.get("url"))
            if url is not None:
                return url
    return None


def _decode_evaluation(payload: Mapping[str, Any]) -> Evaluation:
    # A non-null gateType wins even when rule fields are also present.
    if payload.get("gateType") is not None:
        return ServerComputed(decode_gate_type(payload["gateType"]))

    if "minVersion" not in payload and "blockedVersions" not in payload:
        return ServerComputed()

    minimum = GateRule.from_payload(payload.get("minVersion"))

    raw_blocked = payload.get("blockedVersions")
    blocked: list[GateRule] = []
    if isinstance(raw_blocked, list):
        for item in raw_blocked:
            rule = GateRule.from_payload(item)
            if rule is not None:
                blocked.append(rule)

    return ClientComputed(minimum_version=minimum, blocked_versions=tuple(blocked))


def decode_policy(payload: Any) -> GatePolicy:
    """Decode a gate policy from a parsed JSON payload.

    This function never raises. A payload that is not a JSON object decodes
    to the default policy (server-computed, LIVE).

    Args:
        payload: Parsed JSON (normally a dict) from the API or the cache.

    Returns:
        The decoded policy, with defaults for every missing or bad field.

    Example:
        ```python
        policy = decode_policy({"gateType": "oops", "lastGateUpdate": "t"})
        policy.blocking_severity("1.0.0")   # None (gateType fell back to LIVE)
        ```

    """
    if not isinstance(payload, Mapping):
        return GatePolicy()

    return GatePolicy(
        evaluation=_decode_evaluation(payload),
        last_updated_at=_decode_str(payload.get("lastGateUpdate")) or "",
        latest_version=_decode_str(payload.get("latestVersion")),
        whats_new=_decode_str(payload.get("whatsNew")),
        store_url=_decode_store_url(payload),
        cached_for_app_version=_decode_str(payload.get("cachedForAppVersion")),
    )


def encode_policy(policy: GatePolicy) -> dict[str, Any]:
    """Encode a policy in wire shape for persistence.

    The output decodes back to an equal GatePolicy with decode_policy().
    """
    data: dict[str, Any] = {
        "lastGateUpdate": policy.last_updated_at,
        "latestVersion": policy.latest_version,
        "whatsNew": policy.whats_new,
        "storeUrl": policy.store_url,
        "cachedForAppVersion": policy.cached_for_app_version,
    }

    evaluation = policy.evaluation
    if isinstance(evaluation, ClientComputed):
        data["minVersion"] = (
            evaluation.minimum_version.to_payload()
            if evaluation.minimum_version is not None
            else None
        )
        data["blockedVersions"] = [r.to_payload() for r in evaluation.blocked_versions]
    else:
        data["gateType"] = int(evaluation.severity)

    return data
