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

"""Core version comparison utilities for versiongate.

This module is format-agnostic: it does NOT talk to the network or touch
storage. It only parses and orders app version strings such as "1.2.3",
"5" or "1.2.3.4.5".

Ordering rules:

- A version is a sequence of non-negative integers of any length.
- The shorter sequence is right-padded with zeros before comparing, so
  "1.2" == "1.2.0" == "1.2.0.0".
- Components compare numerically, so "1.10.0" > "1.9.0" and
  "2.0.0" > "1.9.0".
"""

from __future__ import annotations

from dataclasses import dataclass
import functools
import re

_COMPONENT = re.compile(r"[0-9]+")


def _pad_equal(
    a: tuple[int, ...], b: tuple[int, ...]
) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Pad tuples with zeros so they align for element-wise comparison."""
    n = max(len(a), len(b))
    return a + (0,) * (n - len(a)), b + (0,) * (n - len(b))


def _strip_trailing_zeros(nums: tuple[int, ...]) -> tuple[int, ...]:
    end = len(nums)
    while end > 0 and nums[end - 1] == 0:
        end -= 1
    return nums[:end]


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """An immutable app version with an arbitrary number of components.

    Attributes:
        components: Parsed numeric components, in order (e.g., (1, 2, 3)).

    Example:
        ```python
        Version((1, 2)) == Version((1, 2, 0))   # True
        Version((1, 10)) > Version((1, 9))      # True
        ```

    """

    components: tuple[int, ...]

    def __str__(self) -> str:
        return ".".join(str(n) for n in self.components)

    def compare(self, other: Version) -> int:
        """Return -1, 0 or 1 as self is older than, equal to or newer than other."""
        a, b = _pad_equal(self.components, other.components)
        return (a > b) - (a < b)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self) -> int:
        # Must agree with padded equality: "1.2" and "1.2.0" hash alike.
        return hash(_strip_trailing_zeros(self.components))


def parse_version(text: object) -> Version | None:
    """Parse a dot-separated version string.

    Components that are not plain base-10 integers are dropped, so
    "1.beta.3" parses as (1, 3).

    Args:
        text: Version string (e.g., "1.2.3"). Non-strings are rejected.

    Returns:
        The parsed Version, or None if no integer component remains.

    Example:
        ```python
        parse_version("1.2.3")   # Version(components=(1, 2, 3))
        parse_version("abc")     # None
        parse_version("")        # None
        ```

    """
    if not isinstance(text, str):
        return None
    nums = tuple(int(p) for p in text.split(".") if _COMPONENT.fullmatch(p))
    if not nums:
        return None
    return Version(nums)


def _coerce(value: Version | str) -> Version:
    if isinstance(value, Version):
        return value
    parsed = parse_version(value)
    if parsed is None:
        raise ValueError(f"not a version string: {value!r}")
    return parsed


def compare_versions(a: Version | str, b: Version | str) -> int:
    """Compare two versions.

    Returns -1 if a < b, 0 if equal, 1 if a > b.

    Raises:
        ValueError: If either string has no integer component.
    """
    return _coerce(a).compare(_coerce(b))


def is_older(current: Version | str, target: Version | str) -> bool:
    """Return True iff 'current' is strictly older than 'target'."""
    return compare_versions(current, target) < 0
