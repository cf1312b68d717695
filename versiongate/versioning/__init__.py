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

"""Version parsing and comparison for versiongate.

Public API
----------
Version : dataclass
    Immutable version with an arbitrary number of numeric components.
parse_version : function
    Parse a dot-separated string, returning None when nothing numeric remains.
compare_versions : function
    Compare two versions, returning -1, 0, or 1.
is_older : function
    Check if the running version is strictly older than a target.

Examples
--------
    >>> from versiongate.versioning import compare_versions
    >>> compare_versions("1.10.0", "1.9.0")
    1
    >>> compare_versions("1.2", "1.2.0")
    0
"""

from .keys import Version, compare_versions, is_older, parse_version

__all__ = ["Version", "compare_versions", "is_older", "parse_version"]
