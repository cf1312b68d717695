"""
versiongate - client-side app version compliance

A Python library that decides, on each app launch or foreground event,
whether the installed app version must be blocked until the user updates,
and that remembers which non-critical gates were already shown.

versiongate provides:
  - Arbitrary-length version parsing and ordering ("1.2" == "1.2.0")
  - Gate policies from either server-computed or client-computed payloads
  - Defensive decoding: malformed payloads never raise
  - A decision engine with cache fallback and app-upgrade invalidation
  - Fire-and-forget analytics signals (first launch, app open, gate enforced)

Quick Start
-----------
Evaluate once against the live API:

    $ versiongate check versiongate.yaml

Evaluate a saved payload offline:

    $ versiongate evaluate payload.json --app-version 1.4.0

For full CLI documentation:

    $ versiongate --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    VersionGate client lifecycle.
engine : module
    ComplianceDecisionEngine.
config : package
    YAML client configuration.
policy : package
    Gate policy model and decoding.
state : package
    JSON state persistence (policy cache and client flags).
transport : package
    HTTP API client.
versioning : package
    Version parsing and comparison.

Public API
----------
    from versiongate.core import VersionGate
    from versiongate.engine import ComplianceDecisionEngine, Trigger
    from versiongate.policy import GatePolicy, Severity, decode_policy
    from versiongate.versioning import compare_versions, parse_version

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Client-side app version compliance gate"

# Re-export commonly used names for convenience
from versiongate.core import VersionGate
from versiongate.engine import ComplianceDecisionEngine, Trigger
from versiongate.policy import GatePolicy, Severity, decode_policy
from versiongate.results import Verdict
from versiongate.versioning import Version, compare_versions, parse_version

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "VersionGate",
    "ComplianceDecisionEngine",
    "Trigger",
    "GatePolicy",
    "Severity",
    "decode_policy",
    "Verdict",
    "Version",
    "compare_versions",
    "parse_version",
]
