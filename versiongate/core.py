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

"""Client lifecycle orchestration for versiongate.

VersionGate is the object an app holds for its whole lifetime. It wires the
transport, the persisted state and the decision engine together and owns the
signal lifecycle around evaluations.

Lifecycle:
    1. configure(): build the API client, send ``_first_launch`` once per
       install, then run the first evaluation.
    2. handle_app_open(): call on every return to the foreground. Sends
       ``_app_open`` and re-evaluates.
    3. The host reads ``show_update_screen`` / ``verdict`` to drive its UI
       and calls dismiss_update_screen() when the user skips a
       dismissable gate.

Signals are fire-and-forget: analytics failures never reach the caller and
never change a verdict.

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from versiongate.core import VersionGate
        from versiongate.state import StateTracker

        gate = VersionGate(StateTracker(Path("state/versiongate.json")))
        verdict = gate.configure(api_key="sk_live_123", app_version="1.4.0")

        if gate.show_update_screen:
            render_gate(
                dismissable=verdict.is_dismissable,
                store_url=gate.gate_information.store_url,
            )
        ```

"""

from __future__ import annotations

from collections.abc import Sequence

from versiongate.engine import ComplianceDecisionEngine, Trigger
from versiongate.logging import (
    ENGINE,
    SIGNAL,
    Logger,
    get_global_logger,
    get_logger,
    set_global_logger,
)
from versiongate.policy.gates import GatePolicy
from versiongate.results import Verdict
from versiongate.signals import DefaultSignals, Signal
from versiongate.state.tracker import ComplianceCache, SettingsStore
from versiongate.transport.api import (
    APP_STORE,
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    ApiClient,
)


class VersionGate:
    """Entry point embedding version compliance into an app.

    Attributes:
        show_update_screen: True while a gate should be displayed.
        verdict: Last verdict that raised the update screen, if any.

    """

    def __init__(
        self,
        settings: SettingsStore,
        cache: ComplianceCache | None = None,
        client: ApiClient | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Persisted flags (first launch, analytics toggle).
            cache: Policy cache. Defaults to ``settings`` when it also
                implements ComplianceCache (as StateTracker does).
            client: Pre-built ApiClient; configure() builds one otherwise.
            logger: Logger to use instead of the global one.

        """
        self._settings = settings
        self._cache = cache if cache is not None else settings  # type: ignore[assignment]
        self._client = client
        self._logger = logger
        self._engine: ComplianceDecisionEngine | None = None
        self.app_version = ""
        self.show_update_screen = False
        self.verdict: Verdict | None = None

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    @property
    def analytics_enabled(self) -> bool:
        return self._settings.analytics_enabled

    @analytics_enabled.setter
    def analytics_enabled(self, value: bool) -> None:
        self._settings.analytics_enabled = value

    @property
    def gate_information(self) -> GatePolicy | None:
        """Policy currently held by the engine (display metadata included)."""
        return self._engine.current_policy if self._engine is not None else None

    @property
    def engine(self) -> ComplianceDecisionEngine | None:
        return self._engine

    def configure(
        self,
        api_key: str,
        app_version: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        store_type: int = APP_STORE,
        verbose: bool = False,
    ) -> Verdict:
        """Configure the client and run the first evaluation.

        Call this as early as possible in the app's lifecycle. Calling it
        again replaces the engine; an injected or previously built
        ApiClient is reused.

        Args:
            api_key: versiongate API key.
            app_version: Running app version (e.g., "1.4.0").
            base_url: API root URL.
            timeout: HTTP timeout in seconds.
            store_type: Store identifier sent with policy requests.
            verbose: If True, install a verbose global logger.

        Returns:
            The verdict of the first evaluation.

        """
        if verbose:
            set_global_logger(get_logger(verbose=True))

        self.app_version = app_version
        if self._client is None:
            self._client = ApiClient(
                api_key,
                base_url=base_url,
                timeout=timeout,
                store_type=store_type,
                logger=self._logger,
            )
        self._engine = ComplianceDecisionEngine(
            fetcher=self._client,
            cache=self._cache,
            emitter=self,
            app_version=app_version,
            logger=self._logger,
        )

        if self._settings.first_launch:
            self.send_signal(DefaultSignals.FIRST_LAUNCH)
            self._settings.first_launch = False

        return self.handle_app_open(Trigger.CONFIGURE)

    def handle_app_open(self, trigger: Trigger = Trigger.FOREGROUND) -> Verdict:
        """Send ``_app_open`` and re-evaluate the gate.

        Returns:
            The evaluation verdict. A no-block verdict if configure() has
            not run yet.

        """
        self.send_signal(DefaultSignals.APP_OPEN)

        if self._engine is None:
            self.logger.verbose(
                ENGINE, "Warning: handle_app_open called before configure()."
            )
            return Verdict.no_block("no-policy")

        verdict = self._engine.evaluate(trigger)
        if verdict.blocked:
            self.verdict = verdict
            self.show_update_screen = True
        return verdict

    def dismiss_update_screen(self) -> bool:
        """Hide the update screen if the current gate allows it.

        Returns:
            True if dismissed, False for forced gates.

        """
        if self.verdict is not None and not self.verdict.is_dismissable:
            self.logger.verbose(ENGINE, "Forced gate cannot be dismissed")
            return False
        self.show_update_screen = False
        return True

    def send_signal(self, name: str, value: str = "") -> None:
        """Send an analytics signal with an optional value."""
        self.send_signals([Signal(name=name, value=value)])

    def send_signals(self, signals: Sequence[Signal]) -> None:
        """Send multiple signals in one request.

        Dropped silently while analytics is disabled, and with a warning
        before configure(). Transport errors are never raised.
        """
        if not self.analytics_enabled:
            return

        if self._client is None:
            self.logger.verbose(
                SIGNAL,
                "Warning: send_signal called before configure(). "
                "Call configure(api_key=...) first.",
            )
            return

        try:
            self._client.send_signals(signals, self.app_version)
        except Exception as err:
            self.logger.verbose(SIGNAL, f"Warning: Failed to send signals: {err}")
