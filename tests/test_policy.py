"""
Tests for versiongate.policy module.

Tests gate policy decoding and evaluation including:
- Server-computed gate types
- Client-computed minimum version and blocklist rules
- Defensive decoding of malformed payloads
- Schema precedence when both shapes are present
- Encoding for the cache
"""

from __future__ import annotations

import pytest

from versiongate.policy import (
    ClientComputed,
    GatePolicy,
    GateRule,
    ServerComputed,
    Severity,
    decode_policy,
    encode_policy,
)


class TestSeverity:
    """Tests for the Severity enum."""

    def test_raw_values_match_backend(self):
        """Test that numeric codes match the backend."""
        assert Severity.FORCED == 0
        assert Severity.DISMISSABLE == 1
        assert Severity.MODAL == 2
        assert Severity.LIVE == 3

    def test_dismissability(self):
        """Test which severities the user may postpone."""
        assert Severity.DISMISSABLE.is_dismissable
        assert Severity.MODAL.is_dismissable
        assert not Severity.FORCED.is_dismissable
        assert not Severity.LIVE.is_dismissable

    def test_forced(self):
        """Test that only FORCED is forced."""
        assert Severity.FORCED.is_forced
        assert not Severity.MODAL.is_forced


class TestServerComputedPolicy:
    """Tests for the server-computed schema."""

    def test_decode_complete(self, server_payload):
        """Test decoding every field of a complete payload."""
        policy = decode_policy(server_payload)

        assert policy.is_server_computed
        assert policy.evaluation == ServerComputed(Severity.DISMISSABLE)
        assert policy.last_updated_at == "2025-01-01T00:00:00Z"
        assert policy.latest_version == "2.0.0"
        assert policy.whats_new == "New features"
        assert policy.store_url == "https://apps.apple.com/app/id123"
        assert policy.cached_for_app_version is None

    @pytest.mark.parametrize(
        "gate_type, expected",
        [
            (0, Severity.FORCED),
            (1, Severity.DISMISSABLE),
            (2, Severity.MODAL),
        ],
    )
    def test_blocking_gate_types(self, gate_type, expected):
        """Test that non-live gate types block with their own severity."""
        policy = decode_policy({"gateType": gate_type, "lastGateUpdate": "t"})

        assert policy.blocking_severity("1.0.0") is expected
        assert policy.is_blocked("1.0.0")

    def test_live_not_blocked(self):
        """Test that live is not blocked and not dismissable."""
        policy = decode_policy({"gateType": 3, "lastGateUpdate": "t"})

        assert policy.blocking_severity("1.0.0") is None
        assert not policy.is_blocked("1.0.0")
        assert not policy.is_dismissable("1.0.0")

    def test_forced_not_dismissable(self):
        """Test that a forced gate is never dismissable."""
        policy = decode_policy({"gateType": 0})

        assert not policy.is_dismissable("1.0.0")

    def test_modal_dismissable(self):
        """Test that a modal gate is dismissable."""
        policy = decode_policy({"gateType": 2})

        assert policy.is_dismissable("1.0.0")


class TestClientComputedPolicy:
    """Tests for the client-computed schema."""

    def test_decode_rules(self, client_payload):
        """Test decoding minimum version, blocklist and store URL."""
        policy = decode_policy(client_payload)

        assert not policy.is_server_computed
        assert policy.evaluation == ClientComputed(
            minimum_version=GateRule("1.0.0", Severity.FORCED),
            blocked_versions=(
                GateRule("2.1.0", Severity.FORCED),
                GateRule("2.3.0", Severity.MODAL),
            ),
        )
        assert policy.store_url == "https://apps.apple.com/app/id123"

    def test_below_minimum_blocked(self):
        """Test that a version below the minimum is blocked with its severity."""
        policy = decode_policy({"minVersion": {"version": "2.0.0", "type": 0}})

        assert policy.blocking_severity("1.0.0") is Severity.FORCED

    def test_equal_to_minimum_not_blocked(self):
        """Test the boundary: equal to the minimum is allowed."""
        policy = decode_policy({"minVersion": {"version": "2.0.0", "type": 0}})

        assert policy.blocking_severity("2.0.0") is None
        assert policy.blocking_severity("2.0") is None

    def test_above_minimum_not_blocked(self):
        """Test that a newer version is not blocked."""
        policy = decode_policy({"minVersion": {"version": "2.0.0", "type": 0}})

        assert policy.blocking_severity("3.0.0") is None

    def test_blocklist_exact_match(self, client_payload):
        """Test that an exact blocklist match blocks."""
        policy = decode_policy(client_payload)

        assert policy.blocking_severity("2.1.0") is Severity.FORCED
        assert policy.blocking_severity("2.3.0") is Severity.MODAL
        assert policy.blocking_severity("2.2.0") is None

    def test_blocklist_match_ignores_trailing_zeros(self, client_payload):
        """Test that "2.1" matches a "2.1.0" blocklist entry."""
        policy = decode_policy(client_payload)

        assert policy.blocking_severity("2.1") is Severity.FORCED

    def test_minimum_checked_before_blocklist(self):
        """Test that the minimum version's severity wins when both trigger."""
        policy = decode_policy(
            {
                "minVersion": {"version": "3.0.0", "type": 2},
                "blockedVersions": [{"version": "2.0.0", "type": 0}],
            }
        )

        assert policy.blocking_severity("2.0.0") is Severity.MODAL

    def test_first_blocklist_match_wins(self):
        """Test that duplicate blocklist entries resolve in list order."""
        policy = decode_policy(
            {
                "blockedVersions": [
                    {"version": "1.5.0", "type": 2},
                    {"version": "1.5", "type": 0},
                ]
            }
        )

        assert policy.blocking_severity("1.5.0") is Severity.MODAL

    def test_unparseable_running_version_not_blocked(self):
        """Test that an unparseable app version fails open."""
        policy = decode_policy({"minVersion": {"version": "2.0.0", "type": 0}})

        assert policy.blocking_severity("unknown") is None

    def test_unparseable_rule_version_ignored(self):
        """Test that a rule with a garbage version never blocks."""
        policy = decode_policy(
            {
                "minVersion": {"version": "latest", "type": 0},
                "blockedVersions": [{"version": "", "type": 0}],
            }
        )

        assert policy.blocking_severity("1.0.0") is None

    @pytest.mark.parametrize("rule_type", [None, "0", 3, 99, -1, True])
    def test_unknown_rule_type_defaults_to_dismissable(self, rule_type):
        """Test that unrecognized rule codes become DISMISSABLE."""
        policy = decode_policy({"minVersion": {"version": "2.0.0", "type": rule_type}})

        assert policy.blocking_severity("1.0.0") is Severity.DISMISSABLE

    def test_missing_rule_type_defaults_to_dismissable(self):
        """Test that a rule without a type is DISMISSABLE."""
        policy = decode_policy({"minVersion": {"version": "2.0.0"}})

        assert policy.blocking_severity("1.0.0") is Severity.DISMISSABLE

    def test_malformed_rules_dropped(self):
        """Test that malformed blocklist entries are skipped individually."""
        policy = decode_policy(
            {
                "minVersion": "2.0.0",
                "blockedVersions": [
                    "1.0.0",
                    {"version": 1},
                    {"type": 0},
                    {"version": "1.1.0", "type": 0},
                ],
            }
        )

        assert policy.evaluation == ClientComputed(
            minimum_version=None,
            blocked_versions=(GateRule("1.1.0", Severity.FORCED),),
        )

    def test_blocklist_not_a_list(self):
        """Test that a non-list blocklist decodes as empty."""
        policy = decode_policy({"blockedVersions": {"version": "1.0.0"}})

        assert policy.evaluation == ClientComputed()
        assert policy.blocking_severity("1.0.0") is None

    def test_store_url_from_app_store_entry(self):
        """Test that only the App Store (type 0) URL is extracted."""
        policy = decode_policy(
            {
                "minVersion": None,
                "storeUrls": [
                    {"type": 1, "url": "https://other"},
                    {"type": 0, "url": "https://apps.apple.com/app/id9"},
                ],
            }
        )

        assert policy.store_url == "https://apps.apple.com/app/id9"

    def test_store_url_without_app_store_entry(self):
        """Test that storeUrls with no App Store entry yields None."""
        policy = decode_policy({"storeUrls": [{"type": 1, "url": "https://other"}]})

        assert policy.store_url is None


class TestDecodingResilience:
    """Tests for the never-fail decoding contract."""

    def test_empty_payload(self):
        """Test that {} decodes to the default policy."""
        policy = decode_policy({})

        assert policy == GatePolicy()
        assert policy.last_updated_at == ""
        assert policy.blocking_severity("1.0.0") is None

    def test_token_only_payload(self):
        """Test {"lastGateUpdate": "t"}: live, no display metadata."""
        policy = decode_policy({"lastGateUpdate": "t"})

        assert policy.is_server_computed
        assert policy.blocking_severity("1.0.0") is None
        assert policy.latest_version is None
        assert policy.whats_new is None
        assert policy.store_url is None

    @pytest.mark.parametrize("gate_type", ["1", None, 999, -1, 1.5, True, [], {}])
    def test_bad_gate_type_is_live(self, gate_type):
        """Test that bad gateType values decode to live without raising."""
        policy = decode_policy({"gateType": gate_type, "lastGateUpdate": "t"})

        assert policy.blocking_severity("1.0.0") is None

    @pytest.mark.parametrize("payload", [None, [], "gate", 42, [{"gateType": 0}]])
    def test_non_object_payload(self, payload):
        """Test that non-object payloads decode to the default policy."""
        assert decode_policy(payload) == GatePolicy()

    def test_wrong_typed_fields_default(self):
        """Test that each wrongly typed field falls back independently."""
        policy = decode_policy(
            {
                "gateType": 0,
                "lastGateUpdate": 12345,
                "latestVersion": 2,
                "whatsNew": ["a"],
                "storeUrl": {"url": "x"},
            }
        )

        assert policy.blocking_severity("1.0.0") is Severity.FORCED
        assert policy.last_updated_at == ""
        assert policy.latest_version is None
        assert policy.whats_new is None
        assert policy.store_url is None

    def test_unknown_keys_ignored(self):
        """Test that extra keys do not affect decoding."""
        policy = decode_policy({"gateType": 2, "somethingNew": {"x": 1}})

        assert policy.blocking_severity("1.0.0") is Severity.MODAL


class TestSchemaPrecedence:
    """Tests for payloads carrying both schema shapes."""

    def test_server_severity_wins(self):
        """Test that gateType takes precedence over rule fields."""
        policy = decode_policy(
            {
                "gateType": 3,
                "minVersion": {"version": "9.0.0", "type": 0},
            }
        )

        assert policy.is_server_computed
        assert policy.blocking_severity("1.0.0") is None

    def test_null_gate_type_uses_rules(self):
        """Test that a null gateType lets the rules decide."""
        policy = decode_policy(
            {
                "gateType": None,
                "minVersion": {"version": "9.0.0", "type": 0},
            }
        )

        assert not policy.is_server_computed
        assert policy.blocking_severity("1.0.0") is Severity.FORCED


class TestEncoding:
    """Tests for encode_policy and cache stamping."""

    def test_with_cached_app_version(self, server_payload):
        """Test that stamping returns a copy with the app version set."""
        policy = decode_policy(server_payload)
        stamped = policy.with_cached_app_version("1.0.0")

        assert stamped.cached_for_app_version == "1.0.0"
        assert stamped.evaluation == policy.evaluation
        assert stamped.last_updated_at == policy.last_updated_at
        assert policy.cached_for_app_version is None

    def test_server_computed_wire_shape(self, server_payload):
        """Test the persisted shape of a server-computed policy."""
        data = encode_policy(decode_policy(server_payload).with_cached_app_version("1.5.0"))

        assert data["gateType"] == 1
        assert data["lastGateUpdate"] == "2025-01-01T00:00:00Z"
        assert data["cachedForAppVersion"] == "1.5.0"
        assert "minVersion" not in data

    def test_client_computed_survives_cache(self, client_payload):
        """Test that a client-computed policy decodes back unchanged."""
        policy = decode_policy(client_payload).with_cached_app_version("2.2.0")

        assert decode_policy(encode_policy(policy)) == policy
