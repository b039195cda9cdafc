"""Command-line interface.

Every command builds the DI container, runs one async action against it
and closes it again, so pending switches finish before the process exits.
"""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import Optional, TypeVar

import logfire
import typer
from dishka import AsyncContainer
from pydantic import SecretStr

from gitswitch.adapter.error import AdapterError
from gitswitch.adapter.github.device_flow import DeviceFlowAuthenticator
from gitswitch.application.coordinator import SessionCoordinator
from gitswitch.application.reconciler import ImportReconciler
from gitswitch.application.usecase.auth import (
    DeviceLoginUseCase,
    SetClientIdRequest,
    SetClientIdUseCase,
)
from gitswitch.application.usecase.cli import CLIStatusUseCase, InstallCLIUseCase
from gitswitch.application.usecase.identity import (
    AddIdentityRequest,
    AddIdentityUseCase,
    IdentityResponse,
    LoginWithCLIRequest,
    LoginWithCLIUseCase,
    RemoveIdentityRequest,
    RemoveIdentityUseCase,
    SwitchIdentityRequest,
    SwitchIdentityUseCase,
    UpdateIdentityRequest,
    UpdateIdentityUseCase,
)
from gitswitch.config import Settings
from gitswitch.domain.error import DomainError, NotFoundError, ValidationError
from gitswitch.domain.model import Identity
from gitswitch.domain.service import GitConfigClient, HostingCLIClient
from gitswitch.domain.value import DeviceFlowPhase, DeviceFlowState
from gitswitch.util.di.container import create_container
from gitswitch.util.error import UtilError
from gitswitch.util.logging import setup_logging
from gitswitch.util.observability import configure_logfire, instrument_httpx

T = TypeVar("T")

app = typer.Typer(
    name="gitswitch",
    help="Switch the active git and GitHub identity.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs."),
) -> None:
    """Switch the active git and GitHub identity."""
    settings = Settings()
    if verbose:
        settings = settings.model_copy(update={"debug": True})
    setup_logging(settings)
    configure_logfire(settings)
    instrument_httpx()


def _run(action: Callable[[AsyncContainer], Awaitable[T]]) -> T:
    """Run an async action inside a fresh container.

    Known errors are printed and turned into exit code 1.
    """

    async def _main() -> T:
        container = create_container()
        try:
            async with container() as request_container:
                return await action(request_container)
        finally:
            await container.close()

    try:
        return asyncio.run(_main())
    except AdapterError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)
    except (DomainError, UtilError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


def resolve_identity(coordinator: SessionCoordinator, ref: str) -> Identity:
    """Find an identity by ID, ID prefix, email or display name.

    Raises:
        NotFoundError: If nothing matches
        ValidationError: If the reference matches more than one identity
    """
    ref = ref.strip()
    exact = [i for i in coordinator.identities if str(i.id) == ref]
    if exact:
        return exact[0]

    matches = [
        i
        for i in coordinator.identities
        if str(i.id).startswith(ref.lower()) or i.email == ref or i.display_name == ref
    ]
    if not matches:
        raise NotFoundError("Identity", ref)
    if len(matches) > 1:
        raise ValidationError(f"'{ref}' matches {len(matches)} identities, use the ID")
    return matches[0]


def _describe(identity: IdentityResponse | Identity, active: bool) -> str:
    if isinstance(identity, Identity):
        short_id = str(identity.id)[:8]
        name, email, remote = identity.display_name, identity.email, identity.remote_username
        credential = identity.masked_credential or "no credential"
    else:
        short_id = identity.identity_id[:8]
        name, email, remote = identity.display_name, identity.email, identity.remote_username
        credential = "credential stored" if identity.has_credential else "no credential"
    marker = "*" if active else " "
    remote_part = f" @{remote}" if remote else ""
    return f"{marker} {short_id}  {name} <{email}>{remote_part}  [{credential}]"


def _ask_token(ask: bool, token: str) -> str:
    if ask:
        return typer.prompt("Token", hide_input=True, default="", show_default=False)
    return token


@app.command("list")
def list_identities() -> None:
    """List managed identities. The active one is marked with *."""

    async def action(container: AsyncContainer) -> None:
        coordinator = await container.get(SessionCoordinator)
        if not coordinator.identities:
            typer.echo("No identities. Add one with 'gitswitch add' or 'gitswitch login-cli'.")
            return
        for identity in coordinator.identities:
            typer.echo(_describe(identity, identity.id == coordinator.active_id))

    _run(action)


@app.command("status")
def status() -> None:
    """Show the active identity and the live git and gh state."""

    async def action(container: AsyncContainer) -> None:
        coordinator = await container.get(SessionCoordinator)
        git_config = await container.get(GitConfigClient)
        cli = await container.get(HostingCLIClient)

        active = coordinator.active_identity
        typer.echo(f"Active identity: {_describe(active, True).strip() if active else 'none'}")

        observed = await git_config.get_global_identity()
        typer.echo(f"git user.name:   {observed.name or '(unset)'}")
        typer.echo(f"git user.email:  {observed.email or '(unset)'}")

        gh_user = await cli.current_user(coordinator.hostname)
        typer.echo(f"gh account:      {gh_user or '(not logged in)'}")

        if active is not None and observed.email and observed.email != active.email:
            typer.echo("Warning: git config does not match the active identity", err=True)

    _run(action)


@app.command("add")
def add(
    email: str = typer.Option("", "--email", "-e", help="Commit email."),
    name: str = typer.Option("", "--name", "-n", help="Commit author name."),
    token: str = typer.Option("", "--token", help="GitHub token (prefer --ask-token)."),
    ask_token: bool = typer.Option(False, "--ask-token", help="Prompt for the token."),
    switch: bool = typer.Option(False, "--switch", help="Switch to the new identity."),
) -> None:
    """Add an identity."""
    credential = _ask_token(ask_token, token)

    async def action(container: AsyncContainer) -> None:
        use_case = await container.get(AddIdentityUseCase)
        response = await use_case.execute(
            AddIdentityRequest(
                display_name=name, email=email, credential=SecretStr(credential)
            )
        )
        typer.echo(f"Added {_describe(response, False).strip()}")
        if switch:
            await _switch(container, response.identity_id)

    _run(action)


@app.command("edit")
def edit(
    identity: str = typer.Argument(..., help="ID, ID prefix, email or name."),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="New author name."),
    email: Optional[str] = typer.Option(None, "--email", "-e", help="New commit email."),
    token: Optional[str] = typer.Option(None, "--token", help="New GitHub token."),
    ask_token: bool = typer.Option(False, "--ask-token", help="Prompt for a new token."),
) -> None:
    """Edit an identity. Editing the active identity re-applies it."""
    credential = _ask_token(True, "") if ask_token else token

    async def action(container: AsyncContainer) -> None:
        coordinator = await container.get(SessionCoordinator)
        target = resolve_identity(coordinator, identity)
        use_case = await container.get(UpdateIdentityUseCase)
        response = await use_case.execute(
            UpdateIdentityRequest(
                identity_id=str(target.id),
                display_name=name,
                email=email,
                credential=SecretStr(credential) if credential is not None else None,
            )
        )
        typer.echo(f"Updated {_describe(response.identity, response.identity.active).strip()}")
        if response.error:
            typer.echo(f"Error: {response.error}", err=True)
            raise typer.Exit(code=1)

    _run(action)


@app.command("remove")
def remove(
    identity: str = typer.Argument(..., help="ID, ID prefix, email or name."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Remove an identity. Live git and gh state is left unchanged."""

    async def action(container: AsyncContainer) -> None:
        coordinator = await container.get(SessionCoordinator)
        target = resolve_identity(coordinator, identity)
        if not yes and not typer.confirm(f"Remove {target.display_name} <{target.email}>?"):
            raise typer.Abort()
        use_case = await container.get(RemoveIdentityUseCase)
        await use_case.execute(RemoveIdentityRequest(identity_id=str(target.id)))
        typer.echo(f"Removed {target.display_name}")

    _run(action)


async def _switch(container: AsyncContainer, identity_id: str) -> None:
    use_case = await container.get(SwitchIdentityUseCase)
    response = await use_case.execute(SwitchIdentityRequest(identity_id=identity_id))
    if response.error:
        typer.echo(f"Selected {response.identity.display_name}, but: {response.error}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Switched to {_describe(response.identity, True).strip()}")


@app.command("switch")
def switch(
    identity: str = typer.Argument(..., help="ID, ID prefix, email or name."),
) -> None:
    """Switch git config and the gh account to an identity."""

    async def action(container: AsyncContainer) -> None:
        coordinator = await container.get(SessionCoordinator)
        target = resolve_identity(coordinator, identity)
        await _switch(container, str(target.id))

    _run(action)


def _print_device_state(state: DeviceFlowState) -> None:
    if state.phase == DeviceFlowPhase.LOADING:
        typer.echo("Requesting device code...")
    elif state.phase == DeviceFlowPhase.ERROR:
        typer.echo(f"Device login failed: {state.message}", err=True)


@app.command("login-device")
def login_device(
    name: str = typer.Option("", "--name", "-n", help="Author name (defaults to username)."),
    email: str = typer.Option("", "--email", "-e", help="Commit email (defaults to noreply)."),
    switch: bool = typer.Option(False, "--switch", help="Switch to the new identity."),
) -> None:
    """Add an identity by authorizing this app in the browser with a device code."""

    async def action(container: AsyncContainer) -> None:
        device_login = await container.get(DeviceLoginUseCase)
        authenticator: DeviceFlowAuthenticator = await device_login.execute(
            on_change=_print_device_state
        )
        if authenticator.state.phase != DeviceFlowPhase.WAITING_FOR_AUTH:
            raise typer.Exit(code=1)

        typer.echo(f"Open {authenticator.verification_uri} and enter the code:")
        typer.echo(f"\n    {authenticator.user_code}\n")
        typer.echo("Waiting for authorization (Ctrl+C to cancel)...")

        try:
            state = await authenticator.wait()
        finally:
            authenticator.stop()

        if state.phase != DeviceFlowPhase.AUTHENTICATED or not state.credential:
            raise typer.Exit(code=1)

        add_identity = await container.get(AddIdentityUseCase)
        response = await add_identity.execute(
            AddIdentityRequest(display_name=name, email=email, credential=state.credential)
        )
        typer.echo(f"Added {_describe(response, False).strip()}")
        if switch:
            await _switch(container, response.identity_id)

    _run(action)


@app.command("login-cli")
def login_cli(
    name: str = typer.Option("", "--name", "-n", help="Author name (defaults to username)."),
    email: str = typer.Option("", "--email", "-e", help="Commit email (defaults to noreply)."),
    switch: bool = typer.Option(False, "--switch", help="Switch to the new identity."),
) -> None:
    """Add an identity by logging in through 'gh auth login --web'."""

    async def action(container: AsyncContainer) -> None:
        use_case = await container.get(LoginWithCLIUseCase)
        response = await use_case.execute(
            LoginWithCLIRequest(display_name=name, email=email),
            on_output=lambda text: typer.echo(text, nl=False),
        )
        typer.echo(f"Added {_describe(response, False).strip()}")
        if switch:
            await _switch(container, response.identity_id)

    _run(action)


@app.command("set-client-id")
def set_client_id(
    client_id: str = typer.Argument(..., help="OAuth app client ID ('' to clear)."),
) -> None:
    """Store the OAuth app client ID used by login-device."""

    async def action(container: AsyncContainer) -> None:
        use_case = await container.get(SetClientIdUseCase)
        await use_case.execute(SetClientIdRequest(client_id=client_id))
        typer.echo("Client ID saved" if client_id.strip() else "Client ID cleared")

    _run(action)


@app.command("cli-status")
def cli_status() -> None:
    """Check whether the GitHub CLI is installed."""

    async def action(container: AsyncContainer) -> None:
        use_case = await container.get(CLIStatusUseCase)
        report = await use_case.execute()
        typer.echo(report.message)
        if report.can_install:
            typer.echo("Run 'gitswitch cli-install' to install it with Homebrew.")

    _run(action)


@app.command("cli-install")
def cli_install() -> None:
    """Install the GitHub CLI with Homebrew."""

    async def action(container: AsyncContainer) -> None:
        use_case = await container.get(InstallCLIUseCase)
        typer.echo("Installing GitHub CLI...")
        report = await use_case.execute()
        typer.echo(report.message)

    _run(action)


async def watch_forever(container: AsyncContainer) -> None:
    """Run the import reconciler until cancelled."""
    reconciler = await container.get(ImportReconciler)
    reconciler.start()
    try:
        await asyncio.Event().wait()
    finally:
        await reconciler.stop()


@app.command("watch")
def watch() -> None:
    """Follow external git config changes until interrupted."""
    typer.echo("Watching git config (Ctrl+C to stop)...")
    try:
        _run(watch_forever)
    except KeyboardInterrupt:
        typer.echo("Stopped")


def main() -> None:
    """Console script entry point."""
    try:
        app()
    except Exception as e:
        # Unexpected error firewall
        logfire.error("Unexpected error", error=str(e), error_type=type(e).__name__)
        sys.stderr.write(f"Unexpected error: {e}\n")
        sys.exit(1)


if __name__ == "__main__":
    main()
