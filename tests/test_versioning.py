"""
Tests for versiongate.versioning module.

Tests version parsing and ordering including:
- Parsing of arbitrary-length dotted versions
- Rejection of strings without numeric components
- Zero-padded equality and hashing
- Numeric (not lexicographic) component ordering
- Total-order properties
"""

from __future__ import annotations

import itertools

import pytest

from versiongate.versioning import Version, compare_versions, is_older, parse_version


class TestParseVersion:
    """Tests for parse_version."""

    def test_parse_basic(self):
        """Test parsing a three-part version."""
        assert parse_version("1.2.3") == Version((1, 2, 3))
        assert parse_version("1.2.3").components == (1, 2, 3)

    def test_parse_arbitrary_length(self):
        """Test single-component and long versions."""
        assert parse_version("5").components == (5,)
        assert parse_version("1.2.3.4.5").components == (1, 2, 3, 4, 5)

    def test_parse_drops_non_numeric_components(self):
        """Test that non-integer components are dropped, not zeroed."""
        assert parse_version("1.beta.3").components == (1, 3)
        assert parse_version("1..2").components == (1, 2)
        assert parse_version("1.-2.3").components == (1, 3)

    @pytest.mark.parametrize("text", ["", "abc", "a.b.c", ".", "v", " "])
    def test_parse_failure_returns_none(self, text):
        """Test that strings with no integer component return None."""
        assert parse_version(text) is None

    def test_parse_non_string_returns_none(self):
        """Test that non-string input returns None instead of raising."""
        assert parse_version(None) is None
        assert parse_version(123) is None

    def test_str_round_trip(self):
        """Test that str() joins the parsed components."""
        assert str(parse_version("10.0.1")) == "10.0.1"


class TestVersionComparison:
    """Tests for version ordering."""

    def test_reflexive(self):
        """Test that every version compares equal to itself."""
        for text in ["0", "1.2.3", "10.20.30.40", "2025.1"]:
            v = parse_version(text)
            assert v.compare(v) == 0
            assert compare_versions(text, text) == 0

    def test_trailing_zeros_equal(self):
        """Test that trailing .0 groups do not affect equality."""
        assert compare_versions("1.2", "1.2.0") == 0
        assert compare_versions("1.2.0", "1.2.0.0") == 0
        assert parse_version("1.2") == parse_version("1.2.0.0")

    def test_hash_consistent_with_equality(self):
        """Test that equal versions hash alike and dedupe in sets."""
        assert hash(parse_version("1.2")) == hash(parse_version("1.2.0"))
        assert len({parse_version("1.2"), parse_version("1.2.0.0")}) == 1

    def test_monotonicity(self):
        """Test numeric ordering across major, minor and patch bumps."""
        assert compare_versions("1.9.0", "2.0.0") == -1
        assert compare_versions("1.9.0", "1.10.0") == -1
        assert compare_versions("1.0.0", "1.0.1") == -1
        assert compare_versions("2.0.0", "1.9.0") == 1

    def test_double_digit_components(self):
        """Test that "1.10.0" is newer than "1.9.0" (not string order)."""
        assert parse_version("1.10.0") > parse_version("1.9.0")

    def test_shorter_version_padded(self):
        """Test comparison between different lengths."""
        assert compare_versions("1", "1.0.1") == -1
        assert compare_versions("2", "1.99.99") == 1

    def test_rich_comparisons(self):
        """Test the comparison operators derived from compare()."""
        a, b = parse_version("1.2"), parse_version("1.3")
        assert a < b
        assert a <= b
        assert b > a
        assert b >= a
        assert a != b

    def test_total_order_properties(self):
        """Test antisymmetry and transitivity over a sample of versions."""
        samples = [
            parse_version(s)
            for s in ["0", "1", "1.0.1", "1.2", "1.2.0", "1.9", "1.10", "2", "2.0.0.1"]
        ]
        for a, b in itertools.product(samples, repeat=2):
            assert a.compare(b) == -b.compare(a)
        for a, b, c in itertools.product(samples, repeat=3):
            if a <= b and b <= c:
                assert a <= c

    def test_sorting(self):
        """Test that versions sort numerically."""
        versions = ["1.10.0", "1.2.0", "1.9.0", "2.0.0", "1.0"]
        assert sorted(versions, key=parse_version) == [
            "1.0",
            "1.2.0",
            "1.9.0",
            "1.10.0",
            "2.0.0",
        ]

    def test_compare_invalid_string_raises(self):
        """Test that compare_versions rejects unparseable strings."""
        with pytest.raises(ValueError, match="not a version string"):
            compare_versions("abc", "1.0")


class TestIsOlder:
    """Tests for is_older."""

    def test_is_older_true(self):
        """Test that strictly older versions return True."""
        assert is_older("1.0.0", "2.0.0")

    def test_is_older_equal_false(self):
        """Test that equal versions are not older."""
        assert not is_older("2.0.0", "2.0")

    def test_is_older_newer_false(self):
        """Test that newer versions are not older."""
        assert not is_older("3.0.0", "2.0.0")
