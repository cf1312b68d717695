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

"""HTTP transport for the versiongate API.

ApiClient talks to two endpoints:

- ``GET {base_url}v1/version``: the gate policy for this app version
  (query: storeType, appVersion)
- ``POST {base_url}v1``: analytics signals with device metadata

Both send the ``API-Key`` header plus JSON Content-Type and Accept headers.

Error Handling:
    - fetch_policy() never raises. Connection errors, non-2xx statuses,
      invalid JSON and non-object bodies all return None, which the engine
      treats as "fetch unavailable" and answers from the cache.
    - send_signals() never raises. Failures are logged and dropped.

Example:
    ```python
    from versiongate.transport import ApiClient

    client = ApiClient("sk_live_123")
    policy = client.fetch_policy("1.4.0")
    if policy is not None:
        print(policy.blocking_severity("1.4.0"))
    ```

"""

from __future__ import annotations

from collections.abc import Sequence
import json
import threading
from typing import Any

import requests

from versiongate.exceptions import NetworkError
from versiongate.logging import HTTP, SIGNAL, Logger, get_global_logger
from versiongate.policy.gates import GatePolicy, decode_policy
from versiongate.signals import Signal, SignalPayload, collect_device_metadata

DEFAULT_BASE_URL = "https://api.appsidekit.com/"
DEFAULT_TIMEOUT = 30
APP_STORE = 0


class ApiClient:
    """Client for the gate policy and analytics endpoints.

    Attributes:
        api_key: Key sent in the ``API-Key`` header.
        base_url: API root, always ending with "/".
        timeout: Per-request timeout in seconds.
        store_type: Store identifier sent with policy requests (0 = App Store).
        background: If True, send_signals() posts from a daemon thread.

    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        store_type: int = APP_STORE,
        background: bool = True,
        session: requests.Session | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.store_type = store_type
        self.background = background
        self._session = session or requests.Session()
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "API-Key": self.api_key,
        }

    def _get_json(self, url: str, params: dict[str, Any]) -> Any:
        """GET a URL and return the parsed JSON body.

        Raises:
            NetworkError: On connection failures, HTTP errors or bad JSON.
        """
        try:
            response = self._session.get(
                url, params=params, headers=self._headers(), timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as err:
            raise NetworkError(
                f"API request failed: {response.status_code} {response.reason}"
            ) from err
        except requests.exceptions.RequestException as err:
            raise NetworkError(f"Failed to call API: {err}") from err

        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as err:
            raise NetworkError(
                f"Invalid JSON response from API. Response: {response.text[:200]}"
            ) from err

    def fetch_policy(self, app_version: str) -> GatePolicy | None:
        """Fetch the current gate policy for ``app_version``.

        Args:
            app_version: Running app version, sent as a query parameter.

        Returns:
            The decoded policy, or None on any failure.

        """
        if not app_version:
            self.logger.verbose(
                HTTP, "Failed to get app version for gate information request"
            )
            return None

        url = self.base_url + "v1/version"
        params = {"storeType": str(self.store_type), "appVersion": app_version}
        self.logger.debug(HTTP, f"GET {url} {params}")

        try:
            data = self._get_json(url, params)
        except NetworkError as err:
            self.logger.verbose(HTTP, f"Failed to fetch gate information: {err}")
            return None

        if not isinstance(data, dict):
            self.logger.verbose(
                HTTP,
                f"Failed to decode gate information: expected object, got "
                f"{type(data).__name__}",
            )
            return None

        return decode_policy(data)

    def send_signals(self, signals: Sequence[Signal], app_version: str) -> None:
        """Post analytics signals; fire-and-forget.

        Args:
            signals: Signals to send. Nothing is sent for an empty list.
            app_version: Running app version for the payload.

        """
        if not signals:
            return

        payload = SignalPayload(
            app_version=app_version or "unknown",
            signals=list(signals),
            **collect_device_metadata(),
        )

        if self.background:
            thread = threading.Thread(
                target=self._post_signals, args=(payload,), daemon=True
            )
            thread.start()
        else:
            self._post_signals(payload)

    def _post_signals(self, payload: SignalPayload) -> None:
        names = [str(s) for s in payload.signals]
        try:
            response = self._session.post(
                self.base_url + "v1",
                json=payload.to_json(),
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as err:
            self.logger.verbose(SIGNAL, f"Sending signals {names} failed with error: {err}")
            return

        if response.status_code == 201:
            self.logger.verbose(SIGNAL, f"Signals {names} sent successfully")
        else:
            self.logger.verbose(
                SIGNAL,
                f"Signals {names} failed with status: {response.status_code}",
            )
