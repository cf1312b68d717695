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

"""Compliance decision engine for versiongate.

This module decides, on each launch or foreground trigger, whether the
running app version must be gated, and reconciles that decision with what
was shown before.

Evaluation Steps:
    0. Remember the freshness token on record (cached policy, else the
       in-memory one) before touching anything.
    1. Fetch a fresh policy. On success, persist it tagged with the running
       app version and adopt it.
    2. On fetch failure, load the cache. A cache written for another app
       version is stale: it is cleared and ignored.
    3. No policy at all -> no block.
    4. Not blocked for this version -> no block.
    5. Blocked:
       - non-forced gate with an unchanged token -> suppressed (no block)
       - otherwise -> block, emit ``_gate_enforced``, remember the token

Design Principles:
    - Fail open. No failure of the fetcher, cache or emitter may produce a
      block or escape evaluate().
    - Forced gates always interrupt, even when identical to the last one.
    - Non-forced gates show once per distinct policy revision.
    - Single owner: concurrent evaluate() calls are coalesced into one
      in-flight evaluation; later callers wait for its verdict.

Example:
    ```python
    from pathlib import Path
    from versiongate.engine import ComplianceDecisionEngine, Trigger
    from versiongate.state import StateTracker
    from versiongate.transport import ApiClient

    client = ApiClient("sk_live_123")
    engine = ComplianceDecisionEngine(
        fetcher=client,
        cache=StateTracker(Path("state/versiongate.json")),
        emitter=my_emitter,
        app_version="1.4.0",
    )
    verdict = engine.evaluate(Trigger.FOREGROUND)
    ```

"""

from __future__ import annotations

from concurrent.futures import Future
from enum import Enum
import threading

from versiongate.logging import CACHE, ENGINE, SIGNAL, Logger, get_global_logger
from versiongate.policy.gates import GatePolicy
from versiongate.results import Verdict
from versiongate.signals import DefaultSignals, SignalEmitter
from versiongate.state.tracker import ComplianceCache
from versiongate.transport.base import PolicyFetcher


class Trigger(str, Enum):
    """What caused an evaluation."""

    CONFIGURE = "configure"
    FOREGROUND = "foreground"


class ComplianceDecisionEngine:
    """Combines fetched or cached gate policies with prior state into a Verdict.

    Attributes:
        app_version: Running app version string supplied by the host.

    """

    def __init__(
        self,
        fetcher: PolicyFetcher,
        cache: ComplianceCache,
        emitter: SignalEmitter,
        app_version: str,
        logger: Logger | None = None,
    ) -> None:
        self.app_version = app_version
        self._fetcher = fetcher
        self._cache = cache
        self._emitter = emitter
        self._logger = logger

        self._current_policy: GatePolicy | None = None
        self._last_shown_update_token: str | None = None

        self._lock = threading.Lock()
        self._in_flight: Future[Verdict] | None = None

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    @property
    def current_policy(self) -> GatePolicy | None:
        return self._current_policy

    @property
    def last_shown_update_token(self) -> str | None:
        return self._last_shown_update_token

    def evaluate(self, trigger: Trigger = Trigger.FOREGROUND) -> Verdict:
        """Run one evaluation, or join the one already in flight.

        Args:
            trigger: What caused this evaluation (for diagnostics).

        Returns:
            The verdict. Callers that arrive while another evaluation is
            running receive that evaluation's verdict.

        """
        with self._lock:
            in_flight = self._in_flight
            if in_flight is None:
                future: Future[Verdict] = Future()
                self._in_flight = future

        if in_flight is not None:
            self.logger.debug(ENGINE, f"Joining in-flight evaluation ({trigger.value})")
            return in_flight.result()

        verdict: Verdict | None = None
        try:
            verdict = self._evaluate(trigger)
        except Exception as err:
            # Fail open: an engine bug must never lock users out.
            self.logger.verbose(ENGINE, f"Evaluation failed: {err}")
            verdict = Verdict.no_block("no-policy")
        finally:
            with self._lock:
                self._in_flight = None
            # Joiners are released even when the owner is interrupted
            # (KeyboardInterrupt, SystemExit); they fail open.
            future.set_result(verdict if verdict is not None else Verdict.no_block("no-policy"))

        return verdict

    def _evaluate(self, trigger: Trigger) -> Verdict:
        self.logger.verbose(
            ENGINE, f"Evaluating gate for {self.app_version!r} ({trigger.value})"
        )
        previous_token = self._previous_token()

        policy = self._fetch()
        if policy is None:
            policy = self.load_valid_cache()
            if policy is None:
                self.logger.verbose(ENGINE, "No gate policy available; not blocking")
                return Verdict.no_block("no-policy")
        self._current_policy = policy

        severity = policy.blocking_severity(self.app_version)
        is_new_gate = policy.last_updated_at != previous_token

        if severity is None:
            return Verdict.no_block("not-blocked", policy, is_new_gate)

        if not is_new_gate and not severity.is_forced:
            self.logger.verbose(
                ENGINE,
                f"Gate already shown before (lastGateUpdate: "
                f"{policy.last_updated_at}). Skipping {severity.name.lower()} gate.",
            )
            return Verdict.no_block("already-shown", policy, is_new_gate)

        self.logger.verbose(ENGINE, f"Gate type: {severity.name.lower()}")
        if is_new_gate:
            self.logger.verbose(
                ENGINE,
                f"New gate detected (lastGateUpdate changed from "
                f"{previous_token} to {policy.last_updated_at})",
            )

        self._emit(DefaultSignals.GATE_ENFORCED, self.app_version)
        self._last_shown_update_token = policy.last_updated_at
        return Verdict.block(severity, policy, is_new_gate)

    def _previous_token(self) -> str | None:
        cached = self._read_cache()
        if cached is not None:
            return cached.last_updated_at
        if self._current_policy is not None:
            return self._current_policy.last_updated_at
        return None

    def _fetch(self) -> GatePolicy | None:
        try:
            fetched = self._fetcher.fetch_policy(self.app_version)
        except Exception as err:
            self.logger.verbose(ENGINE, f"Fetcher raised, treating as unavailable: {err}")
            return None
        if fetched is None:
            return None

        stamped = fetched.with_cached_app_version(self.app_version)
        self._write_cache(stamped)
        self.logger.verbose(
            CACHE,
            f"Cached gate info for app version {self.app_version} - "
            f"latestVersion: {stamped.latest_version}, "
            f"whatsNew: {stamped.whats_new}, "
            f"lastGateUpdate: {stamped.last_updated_at}",
        )
        return stamped

    def load_valid_cache(self) -> GatePolicy | None:
        """Load the cached policy if it was cached for the running app version.

        A cached policy tagged with another app version (or untagged) is
        stale; the cache is cleared and None is returned.

        Returns:
            The cached policy, or None on a miss or stale entry.

        """
        cached = self._read_cache()
        if cached is None:
            return None

        if cached.cached_for_app_version != self.app_version:
            self.logger.verbose(
                CACHE,
                f"Cache invalidated - cached for version "
                f"{cached.cached_for_app_version} but current version is "
                f"{self.app_version}",
            )
            self._write_cache(None)
            return None

        self.logger.verbose(
            CACHE,
            f"Loaded cached gate info - latestVersion: {cached.latest_version}, "
            f"whatsNew: {cached.whats_new}, lastGateUpdate: {cached.last_updated_at}",
        )
        return cached

    def _read_cache(self) -> GatePolicy | None:
        try:
            return self._cache.read()
        except Exception as err:
            self.logger.verbose(CACHE, f"Warning: Failed to read cache: {err}")
            return None

    def _write_cache(self, policy: GatePolicy | None) -> None:
        try:
            self._cache.write(policy)
        except Exception as err:
            self.logger.verbose(CACHE, f"Warning: Failed to write cache: {err}")

    def _emit(self, name: str, value: str) -> None:
        try:
            self._emitter.send_signal(name, value)
        except Exception as err:
            self.logger.verbose(SIGNAL, f"Warning: Failed to send {name}: {err}")
