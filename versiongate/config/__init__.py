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

"""Configuration loading for versiongate.

This module loads the client configuration from a YAML file, expanding
``${VAR}`` references from the environment (and from a ``.env`` file when
present).

Public API:

- load_client_config: Load and resolve a client config file
- validate_client_config: Static checks on a raw config mapping
- ClientConfig: Resolved configuration dataclass

Example:
    Basic usage:

        from pathlib import Path
        from versiongate.config import load_client_config

        config = load_client_config(Path("versiongate.yaml"))
        print(config.app_version)  # "1.4.0"

"""

from .loader import (
    ClientConfig,
    load_client_config,
    load_raw_config,
    validate_client_config,
)

__all__ = [
    "ClientConfig",
    "load_client_config",
    "load_raw_config",
    "validate_client_config",
]
