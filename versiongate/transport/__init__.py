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

"""Network transport for versiongate.

Public API:

- ApiClient: Gate policy fetcher and analytics sender over HTTP
- PolicyFetcher: Protocol the decision engine depends on

"""

from .api import DEFAULT_BASE_URL, ApiClient
from .base import PolicyFetcher

__all__ = ["DEFAULT_BASE_URL", "ApiClient", "PolicyFetcher"]
