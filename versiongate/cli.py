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

"""Command-line interface for versiongate.

This module provides the ``versiongate`` console script for checking an app
version against the live API, evaluating saved payloads offline, and
validating client configuration.

Commands:

    check: Run one live evaluation with persisted state
    evaluate: Evaluate a saved policy payload offline (no network, no state)
    compare: Compare two version strings
    validate: Validate a client config file

Example:
    Live check:
        ```bash
        $ versiongate check versiongate.yaml --verbose
        ```

    Offline evaluation:
        ```bash
        $ versiongate evaluate payload.json --app-version 1.4.0
        ```

Exit Codes:

- 0: Success
- 1: Error (configuration, unreadable payload, or invalid input)

Note:
    A blocked verdict is a successful run (exit 0); the verdict is printed.

"""

from __future__ import annotations

import argparse
from importlib.metadata import version
import json
from pathlib import Path
import sys

from versiongate.config import load_client_config, load_raw_config, validate_client_config
from versiongate.core import VersionGate
from versiongate.engine import Trigger
from versiongate.exceptions import ConfigError, VersionGateError
from versiongate.logging import get_logger, set_global_logger
from versiongate.policy import decode_policy
from versiongate.results import Verdict
from versiongate.state import StateTracker
from versiongate.transport import ApiClient
from versiongate.versioning import parse_version


def _print_verdict(verdict: Verdict, app_version: str) -> None:
    policy = verdict.policy
    print("=" * 70)
    print("VERDICT")
    print("=" * 70)
    print(f"App Version:     {app_version}")
    print(f"Blocked:         {'yes' if verdict.blocked else 'no'}")
    print(f"Reason:          {verdict.reason}")
    if verdict.severity is not None:
        print(f"Severity:        {verdict.severity.name.lower()}")
        print(f"Dismissable:     {'yes' if verdict.is_dismissable else 'no'}")
    if policy is not None:
        mode = "server-computed" if policy.is_server_computed else "client-computed"
        print(f"Policy Mode:     {mode}")
        print(f"Last Update:     {policy.last_updated_at or '-'}")
        print(f"Latest Version:  {policy.latest_version or '-'}")
        print(f"Store URL:       {policy.store_url or '-'}")
    print("=" * 70)


def cmd_check(args: argparse.Namespace) -> int:
    """Handler for 'versiongate check' command.

    Loads the config, configures a VersionGate client with persisted state,
    runs the configure-time evaluation and prints the verdict.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    try:
        config = load_client_config(Path(args.config))
    except ConfigError as err:
        print(f"Error: {err}")
        return 1

    app_version = args.app_version or config.app_version
    state_file = Path(args.state_file) if args.state_file else config.state_file

    # Synchronous signals: the process exits right after the check.
    client = ApiClient(
        config.api_key,
        base_url=config.base_url,
        timeout=config.timeout,
        store_type=config.store_type,
        background=False,
    )
    gate = VersionGate(StateTracker(state_file), client=client)
    if config.analytics_enabled is not None:
        gate.analytics_enabled = config.analytics_enabled

    try:
        verdict = gate.configure(api_key=config.api_key, app_version=app_version)
    except VersionGateError as err:
        print(f"Error: {err}")
        if args.verbose or args.debug:
            import traceback

            traceback.print_exc()
        return 1

    _print_verdict(verdict, app_version)
    return 0


def cmd_evaluate(args: argparse.Namespace) -> int:
    """Handler for 'versiongate evaluate' command.

    Decodes a saved policy payload and evaluates it against a version. No
    network calls, no state, no suppression of already-shown gates.
    """
    payload_path = Path(args.payload)
    if parse_version(args.app_version) is None:
        print(f"Error: Not a version string: {args.app_version!r}")
        return 1

    try:
        payload = json.loads(payload_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        print(f"Error: Payload file not found: {payload_path}")
        return 1
    except json.JSONDecodeError as err:
        print(f"Error: Invalid JSON in {payload_path}: {err}")
        return 1
    except UnicodeDecodeError as err:
        print(f"Error: Payload is not UTF-8 text: {payload_path}: {err}")
        return 1
    except OSError as err:
        print(f"Error: Cannot read payload {payload_path}: {err}")
        return 1

    policy = decode_policy(payload)
    severity = policy.blocking_severity(args.app_version)
    if severity is None:
        verdict = Verdict.no_block("not-blocked", policy)
    else:
        verdict = Verdict.block(severity, policy, is_new_gate=True)

    _print_verdict(verdict, args.app_version)
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    """Handler for 'versiongate compare' command."""
    a = parse_version(args.a)
    b = parse_version(args.b)
    for raw, parsed in ((args.a, a), (args.b, b)):
        if parsed is None:
            print(f"Error: Not a version string: {raw!r}")
            return 1

    result = a.compare(b)
    symbol = {-1: "<", 0: "==", 1: ">"}[result]
    print(f"{args.a} {symbol} {args.b}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'versiongate validate' command.

    Validates config syntax and fields without expanding environment
    variables or making network calls.
    """
    config_path = Path(args.config).resolve()
    print(f"Validating config: {config_path}")

    try:
        raw = load_raw_config(config_path)
    except ConfigError as err:
        print(f"  [X] {err}")
        print()
        print("[FAILED] Config validation failed.")
        return 1

    errors = validate_client_config(raw)
    for error in errors:
        print(f"  [X] {error}")

    print()
    if errors:
        print(f"[FAILED] Config validation failed with {len(errors)} error(s).")
        return 1
    print("[SUCCESS] Config is valid!")
    return 0


def main() -> None:
    """Main entry point for the versiongate CLI.

    This function is registered as the 'versiongate' console script in
    pyproject.toml.
    """
    parser = argparse.ArgumentParser(
        prog="versiongate",
        description="versiongate - client-side app version compliance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"versiongate {version('versiongate')}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'check' command
    parser_check = subparsers.add_parser(
        "check",
        help="Run one live evaluation with persisted state",
        description="Fetch the gate policy for the configured app version and print the verdict.",
    )
    parser_check.add_argument("config", help="Path to the client config YAML file")
    parser_check.add_argument(
        "--app-version",
        default=None,
        help="Override the app version from the config",
    )
    parser_check.add_argument(
        "--state-file",
        default=None,
        help="Override the state file from the config",
    )
    parser_check.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser_check.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )
    parser_check.set_defaults(func=cmd_check)

    # 'evaluate' command
    parser_evaluate = subparsers.add_parser(
        "evaluate",
        help="Evaluate a saved policy payload offline",
        description="Decode a policy JSON file and evaluate it against an app version.",
    )
    parser_evaluate.add_argument("payload", help="Path to the policy JSON file")
    parser_evaluate.add_argument(
        "--app-version",
        required=True,
        help="App version to evaluate",
    )
    parser_evaluate.set_defaults(func=cmd_evaluate)

    # 'compare' command
    parser_compare = subparsers.add_parser(
        "compare",
        help="Compare two version strings",
    )
    parser_compare.add_argument("a", help="First version")
    parser_compare.add_argument("b", help="Second version")
    parser_compare.set_defaults(func=cmd_compare)

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate a client config file (no network calls)",
    )
    parser_validate.add_argument("config", help="Path to the client config YAML file")
    parser_validate.set_defaults(func=cmd_validate)

    args = parser.parse_args()
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
