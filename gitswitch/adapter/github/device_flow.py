"""OAuth 2.0 Device Authorization Grant for GitHub.

Flow:
1. POST the client id and scope to the device-code endpoint
2. Show the user code and verification URI to the user
3. Poll the token endpoint every ``interval`` seconds until the user
   approves, denies, or the code expires

GitHub answers every poll with HTTP 200; the body says whether to keep
waiting (``authorization_pending``), back off (``slow_down``) or stop.
"""

import asyncio
from collections.abc import Callable
from typing import Any, Optional

import httpx
import logfire
from pydantic import SecretStr

from gitswitch.adapter.error import DeviceFlowError
from gitswitch.config import GitHubSettings
from gitswitch.domain.value import DeviceCodeGrant, DeviceFlowState

DEVICE_CODE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"

StateListener = Callable[[DeviceFlowState], None]


class DeviceFlowAuthenticator:
    """State machine for one device authorization attempt.

    States: idle -> loading -> waiting_for_auth -> authenticated | error.
    ``stop()`` halts polling without changing the published state.
    """

    def __init__(
        self,
        client_id: str,
        settings: GitHubSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_change: Optional[StateListener] = None,
    ) -> None:
        """Initialize device flow authenticator.

        Args:
            client_id: OAuth app client ID (empty means not configured)
            settings: GitHub endpoints, scope and polling settings
            transport: Optional httpx transport (tests pass a MockTransport)
            on_change: Called with every new state
        """
        self.client_id = client_id
        self.settings = settings
        self.transport = transport
        self.on_change = on_change

        self.state = DeviceFlowState.idle()
        self.session: Optional[DeviceCodeGrant] = None
        self.interval: float = 5.0

        self._stop = asyncio.Event()
        self._poll_task: Optional[asyncio.Task[None]] = None
        self._deadline: Optional[float] = None

    @property
    def user_code(self) -> Optional[str]:
        return self.session.user_code if self.session else None

    @property
    def verification_uri(self) -> Optional[str]:
        return self.session.verification_uri if self.session else None

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def _set_state(self, state: DeviceFlowState) -> None:
        self.state = state
        logfire.info("Device flow state changed", phase=state.phase.value)
        if self.on_change is not None:
            self.on_change(state)

    async def _post(self, url: str, payload: dict[str, str]) -> dict[str, Any]:
        async with httpx.AsyncClient(transport=self.transport) as client:
            response = await client.post(
                url,
                json=payload,
                headers={"Accept": "application/json"},
                timeout=self.settings.request_timeout,
            )
        if response.status_code != 200:
            raise DeviceFlowError(
                f"Unexpected response {response.status_code}: {response.text}"
            )
        data = response.json()
        if not isinstance(data, dict):
            raise DeviceFlowError("Unexpected response body")
        return data

    async def start(self) -> None:
        """Request a device code and begin polling.

        Without a configured client id this moves straight to the error
        state and makes no network call.
        """
        if not self.client_id:
            logfire.warn("Device flow started without client ID")
            self._set_state(DeviceFlowState.error("Client ID is missing"))
            return

        self._set_state(DeviceFlowState.loading())

        with logfire.span("device_flow.request_code"):
            try:
                data = await self._post(
                    self.settings.device_code_url,
                    {"client_id": self.client_id, "scope": self.settings.scope},
                )
                session = DeviceCodeGrant(
                    device_code=SecretStr(data["device_code"]),
                    user_code=data["user_code"],
                    verification_uri=data["verification_uri"],
                    expires_in=int(data.get("expires_in", 900)),
                    interval=float(data.get("interval", 5)),
                )
            except (httpx.HTTPError, DeviceFlowError, ValueError, KeyError, TypeError) as e:
                logfire.error("Device code request failed", error=str(e))
                self._set_state(DeviceFlowState.error(str(e) or type(e).__name__))
                return

        self.session = session
        self.interval = session.interval
        self._deadline = asyncio.get_running_loop().time() + session.expires_in
        self._stop.clear()
        self._set_state(DeviceFlowState.waiting_for_auth())

        self._poll_task = asyncio.create_task(self._poll_loop())

    async def poll_once(self) -> DeviceFlowState:
        """Make a single token request and apply its outcome.

        Transport failures are logged and leave the state unchanged.

        Returns:
            The state after the poll
        """
        if self.session is None or self.state.is_terminal:
            return self.state

        try:
            data = await self._post(
                self.settings.access_token_url,
                {
                    "client_id": self.client_id,
                    "device_code": self.session.device_code.get_secret_value(),
                    "grant_type": DEVICE_CODE_GRANT_TYPE,
                },
            )
        except (httpx.HTTPError, DeviceFlowError, ValueError) as e:
            logfire.warn("Device flow poll failed", error=str(e))
            return self.state

        access_token = data.get("access_token")
        if access_token:
            self._stop.set()
            self._set_state(DeviceFlowState.authenticated(access_token))
            return self.state

        error = data.get("error")
        if error == "authorization_pending":
            return self.state
        if error == "slow_down":
            self.interval += self.settings.slow_down_increment
            logfire.info("Device flow slowing down", interval=self.interval)
            return self.state

        self._stop.set()
        self._set_state(DeviceFlowState.error(error or "Unexpected token response"))
        return self.state

    async def _poll_loop(self) -> None:
        loop = asyncio.get_running_loop()
        while not self._stop.is_set():
            try:
                # Sleeping on the stop event lets stop() end the wait early
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval)
                break
            except asyncio.TimeoutError:
                pass

            if self._deadline is not None and loop.time() >= self._deadline:
                self._set_state(DeviceFlowState.error("expired_token"))
                break

            state = await self.poll_once()
            if state.is_terminal:
                break

    def stop(self) -> None:
        """Stop polling. A request already in flight still completes and is applied."""
        self._stop.set()

    async def wait(self) -> DeviceFlowState:
        """Wait for polling to end.

        Returns:
            The final state (terminal unless the flow was stopped)
        """
        if self._poll_task is not None:
            await self._poll_task
        return self.state
