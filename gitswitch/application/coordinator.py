"""Session coordinator.

Owns the identity list and the active identity pointer, and performs the
multi-step switch against git config and the GitHub CLI.

All mutations of session state happen on the event loop under one lock,
and each one starts by re-reading stored state, which other gitswitch
processes may have changed. Failed writes keep local state until the next
successful save.

Remote switch steps run in background tasks that are serialized in the
order the switches were requested. Each switch carries a generation number;
once a newer switch has been requested an older one stops at its next step
boundary and leaves the error slot alone.
"""

import asyncio
from typing import Optional

import logfire

from gitswitch.adapter.error import AdapterError, CLINotInstalledError
from gitswitch.domain.error import NotFoundError, ValidationError
from gitswitch.domain.model import Identity
from gitswitch.domain.repository import SessionStateRepository
from gitswitch.domain.service import GitConfigClient, HostingCLIClient
from gitswitch.domain.value import IdentityId, ObservedConfig, ReconcileOutcome


class SessionCoordinator:
    """Central state machine for managed identities."""

    def __init__(
        self,
        repository: SessionStateRepository,
        git_config: GitConfigClient,
        cli: HostingCLIClient,
        hostname: str = "github.com",
    ) -> None:
        """Initialize session coordinator.

        Args:
            repository: Durable session state
            git_config: Global git config client
            cli: Hosting provider CLI client
            hostname: Host passed to every CLI call
        """
        self.repository = repository
        self.git_config = git_config
        self.cli = cli
        self.hostname = hostname

        self.identities: list[Identity] = []
        self.active_id: Optional[IdentityId] = None
        self.last_error: Optional[str] = None
        self.observed_name: Optional[str] = None
        self.observed_email: Optional[str] = None

        self._lock = asyncio.Lock()
        self._switch_lock = asyncio.Lock()
        self._generation = 0
        self._pending: set[asyncio.Task[None]] = set()
        self._unsaved: set[str] = set()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def active_identity(self) -> Optional[Identity]:
        if self.active_id is None:
            return None
        return next((i for i in self.identities if i.id == self.active_id), None)

    @property
    def switch_in_progress(self) -> bool:
        """True while any switch is queued or running."""
        return bool(self._pending)

    def get(self, identity_id: IdentityId) -> Identity:
        """Get identity by ID.

        Raises:
            NotFoundError: If no identity has this ID
        """
        for identity in self.identities:
            if identity.id == identity_id:
                return identity
        raise NotFoundError("Identity", str(identity_id))

    def find_by_email(self, email: str) -> Optional[Identity]:
        """First identity whose email equals ``email`` exactly."""
        return next((i for i in self.identities if i.email == email), None)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Load persisted identities and active pointer.

        Storage failures leave the coordinator empty.
        """
        try:
            identities = await self.repository.load_identities()
            active_id = await self.repository.load_active_id()
        except Exception as e:
            logfire.error("Failed to load session state", error=str(e))
            return

        async with self._lock:
            self.identities = list(identities)
            self.active_id = active_id
            self._unsaved.clear()
        logfire.info(
            "Session state loaded",
            identities=len(identities),
            active_id=str(active_id) if active_id else None,
        )

    async def refresh(self) -> None:
        """Re-read stored state written by other processes."""
        async with self._lock:
            await self._refresh()

    async def _refresh(self) -> None:
        # Caller holds _lock. Unsaved local changes win over storage.
        if self._unsaved:
            return
        try:
            identities = await self.repository.load_identities()
            active_id = await self.repository.load_active_id()
        except Exception as e:
            logfire.warn("Failed to refresh session state", error=str(e))
            return
        self.identities = list(identities)
        self.active_id = active_id

    async def _persist_identities(self, removed_ids: tuple[IdentityId, ...] = ()) -> None:
        # In-memory state stays authoritative when storage fails
        try:
            await self.repository.save_identities(list(self.identities), removed_ids)
        except Exception as e:
            self._unsaved.add("identities")
            logfire.warn("Failed to persist identities", error=str(e))
        else:
            self._unsaved.discard("identities")

    async def _persist_active_id(self) -> None:
        try:
            await self.repository.save_active_id(self.active_id)
        except Exception as e:
            self._unsaved.add("active_id")
            logfire.warn("Failed to persist active identity", error=str(e))
        else:
            self._unsaved.discard("active_id")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_identity(self, identity: Identity) -> Identity:
        """Append an identity and persist the list.

        Raises:
            ValidationError: If an identity with the same ID already exists
        """
        async with self._lock:
            await self._refresh()
            if any(existing.id == identity.id for existing in self.identities):
                raise ValidationError(f"Identity {identity.id} already exists")
            self.identities.append(identity)
            await self._persist_identities()

        logfire.info(
            "Identity added",
            identity_id=str(identity.id),
            display_name=identity.display_name,
            email=identity.email,
        )
        return identity

    async def remove_identity(self, identity_id: IdentityId) -> None:
        """Remove an identity.

        Clears the active pointer if it pointed at the removed identity.
        Live git and CLI state is left as it is.
        """
        async with self._lock:
            await self._refresh()
            removed = tuple(i.id for i in self.identities if i.id == identity_id)
            self.identities = [i for i in self.identities if i.id != identity_id]
            if self.active_id == identity_id:
                self.active_id = None
            await self._persist_identities(removed_ids=removed)
            await self._persist_active_id()

        logfire.info("Identity removed", identity_id=str(identity_id))

    async def update_identity(self, updated: Identity) -> Optional[asyncio.Task[None]]:
        """Replace an identity in place.

        Editing the active identity re-applies it to live config.

        Returns:
            The switch task if the active identity was edited, else None

        Raises:
            NotFoundError: If no identity has this ID
        """
        async with self._lock:
            await self._refresh()
            for index, existing in enumerate(self.identities):
                if existing.id == updated.id:
                    self.identities[index] = updated
                    break
            else:
                raise NotFoundError("Identity", str(updated.id))
            await self._persist_identities()
            is_active = self.active_id == updated.id

        logfire.info("Identity updated", identity_id=str(updated.id), active=is_active)

        if is_active:
            return await self.switch_to(updated)
        return None

    async def switch_to(self, identity: Identity) -> asyncio.Task[None]:
        """Make an identity active and apply it to git and the CLI.

        The active pointer is updated and persisted before any remote work.
        Remote steps run in a background task, in order:

        1. write user.name / user.email (fatal on failure)
        2. if the identity has a credential: require the CLI and switch its
           account (fatal on failure), then set up the git credential helper
        3. best-effort fetch of the remote username if not cached

        Identities without a credential never touch the CLI, so setup-git is
        skipped for them as well.

        Returns:
            Task running the remote steps. It never raises; failures land in
            ``last_error``.
        """
        async with self._lock:
            await self._refresh()
            self.active_id = identity.id
            await self._persist_active_id()
            self.last_error = None
            self._generation += 1
            generation = self._generation

        logfire.info(
            "Switch requested",
            identity_id=str(identity.id),
            display_name=identity.display_name,
            generation=generation,
        )

        task = asyncio.create_task(self._run_switch(identity, generation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def _superseded(self, generation: int) -> bool:
        return generation != self._generation

    async def _run_switch(self, identity: Identity, generation: int) -> None:
        async with self._switch_lock:
            with logfire.span(
                "switch_identity", identity_id=str(identity.id), generation=generation
            ):
                try:
                    if self._superseded(generation):
                        logfire.info("Switch superseded", generation=generation)
                        return
                    await self.git_config.set_global_identity(
                        identity.display_name, identity.email
                    )

                    if identity.has_credential:
                        if self._superseded(generation):
                            logfire.info("Switch superseded", generation=generation)
                            return
                        if not self.cli.is_installed():
                            raise CLINotInstalledError()
                        await self.cli.switch_account(identity.token, self.hostname)
                        await self.cli.setup_git()
                except AdapterError as e:
                    self._record_failure(generation, e.message)
                    return
                except Exception as e:
                    self._record_failure(generation, f"Failed to switch identity: {e}")
                    return

                logfire.info("Switch applied", identity_id=str(identity.id))

                if identity.has_credential and not identity.remote_username:
                    await self._fetch_remote_user(identity.id)

    def _record_failure(self, generation: int, message: str) -> None:
        if self._superseded(generation):
            logfire.warn("Superseded switch failed", error=message)
            return
        self.last_error = message
        logfire.error("Switch failed", error=message)

    async def _fetch_remote_user(self, identity_id: IdentityId) -> None:
        try:
            remote_user = await self.cli.user_info(self.hostname)
        except Exception as e:
            logfire.warn("Could not fetch remote username", error=str(e))
            return

        async with self._lock:
            await self._refresh()
            for index, existing in enumerate(self.identities):
                if existing.id == identity_id:
                    self.identities[index] = existing.with_remote_user(remote_user)
                    await self._persist_identities()
                    logfire.info(
                        "Remote username cached",
                        identity_id=str(identity_id),
                        username=remote_user.username,
                    )
                    break

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def record_observed(self, observed: ObservedConfig) -> None:
        """Remember the last externally observed name and email."""
        self.observed_name = observed.name
        self.observed_email = observed.email

    async def apply_observed_config(
        self, observed: ObservedConfig, credential: str = ""
    ) -> ReconcileOutcome:
        """Fold externally observed git config into session state.

        State is re-read from storage first so identities added by other
        processes are matched rather than duplicated or overwritten.

        Args:
            observed: Name and email read from global git config
            credential: Credential for a newly imported identity

        Returns:
            What was done
        """
        if not observed.email:
            return ReconcileOutcome.NO_EMAIL

        async with self._lock:
            if self.switch_in_progress:
                return ReconcileOutcome.DEFERRED
            await self._refresh()

            match = self.find_by_email(observed.email)
            if match is not None:
                if self.active_id == match.id:
                    return ReconcileOutcome.ALREADY_ACTIVE
                self.active_id = match.id
                await self._persist_active_id()
                logfire.info(
                    "Adopted externally configured identity",
                    identity_id=str(match.id),
                    email=match.email,
                )
                return ReconcileOutcome.ADOPTED

            imported = Identity(
                display_name=observed.name or observed.email,
                email=observed.email,
                credential=credential,
            )
            self.identities.append(imported)
            self.active_id = imported.id
            await self._persist_identities()
            await self._persist_active_id()

        logfire.info(
            "Imported external identity",
            identity_id=str(imported.id),
            email=imported.email,
            has_credential=imported.has_credential,
        )
        return ReconcileOutcome.IMPORTED

    async def close(self) -> None:
        """Wait for queued and running switches to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
