"""Import reconciler.

Periodically reads the global git identity and folds it into the session:
a known email becomes the active identity, an unknown one is imported as a
new identity. Runs once immediately on start, then every interval.
"""

import asyncio
from collections.abc import Sequence
from typing import Optional

import logfire

from gitswitch.application.coordinator import SessionCoordinator
from gitswitch.domain.service import GitConfigClient, SecretStore
from gitswitch.domain.value import ObservedConfig, ReconcileOutcome


class ImportReconciler:
    """Background reconciliation of external git config.

    Never surfaces errors: anything that goes wrong counts as "nothing
    observed this cycle".
    """

    def __init__(
        self,
        coordinator: SessionCoordinator,
        git_config: GitConfigClient,
        secret_store: SecretStore,
        recovery_keys: Sequence[tuple[str, str]] = (
            ("github.com", "git"),
            ("https://github.com", "git"),
        ),
        interval_seconds: float = 5.0,
    ) -> None:
        """Initialize import reconciler.

        Args:
            coordinator: Session coordinator that applies the result
            git_config: Global git config client
            secret_store: Searched for a credential when importing
            recovery_keys: (service, account) pairs tried in order
            interval_seconds: Delay between passes
        """
        self.coordinator = coordinator
        self.git_config = git_config
        self.secret_store = secret_store
        self.recovery_keys = list(recovery_keys)
        self.interval_seconds = interval_seconds

        self._task: Optional[asyncio.Task[None]] = None
        self._stop = asyncio.Event()

    async def _observe(self) -> ObservedConfig:
        try:
            return await self.git_config.get_global_identity()
        except Exception as e:
            logfire.debug("Git config unavailable", error=str(e))
            return ObservedConfig()

    async def recover_credential(self) -> str:
        """Look for a credential left behind by other git tooling.

        Each recovery key is tried as a generic secret, then as a network
        password. The first non-empty value wins.

        Returns:
            The recovered credential, or an empty string
        """
        for service, account in self.recovery_keys:
            try:
                data = await self.secret_store.read(service, account)
                if data:
                    return data.decode("utf-8")
                password = await self.secret_store.read_network_password(service, account)
                if password:
                    return password
            except Exception as e:
                logfire.debug("Credential recovery lookup failed", service=service, error=str(e))
        return ""

    async def reconcile_once(self) -> ReconcileOutcome:
        """Run a single reconciliation pass."""
        observed = await self._observe()
        self.coordinator.record_observed(observed)

        if not observed.email:
            return ReconcileOutcome.NO_EMAIL

        if self.coordinator.switch_in_progress:
            return ReconcileOutcome.DEFERRED

        await self.coordinator.refresh()
        credential = ""
        if self.coordinator.find_by_email(observed.email) is None:
            credential = await self.recover_credential()

        outcome = await self.coordinator.apply_observed_config(observed, credential)
        if outcome not in (ReconcileOutcome.ALREADY_ACTIVE, ReconcileOutcome.NO_EMAIL):
            logfire.info("Reconciled git config", outcome=outcome.value, email=observed.email)
        return outcome

    async def _run(self) -> None:
        while not self._stop.is_set():
            try:
                await self.reconcile_once()
            except Exception as e:
                logfire.warn("Reconcile pass failed", error=str(e))
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass

    def start(self) -> asyncio.Task[None]:
        """Start periodic reconciliation with an immediate first pass."""
        if self._task is None or self._task.done():
            self._stop.clear()
            self._task = asyncio.create_task(self._run())
            logfire.info("Reconciler started", interval=self.interval_seconds)
        return self._task

    async def stop(self) -> None:
        """Stop periodic reconciliation and wait for the current pass."""
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None
