"""
Command-line interface for the MoodCheck journal.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any, Optional

import httpx
import typer

from .auth import LocalAuthClient
from .client import RemoteEntryStore
from .config import configure_logging, get_settings
from .errors import MoodCheckError
from .models import Mood
from .render import render_dashboard, render_entry_list, render_stats
from .viewmodel import MoodViewModel, SessionPhase, ViewState

app = typer.Typer(help="MoodCheck journal CLI")

_settings = get_settings()

BASE_URL_OPTION = typer.Option(
    _settings.base_url, "--url", help="Base URL of the MoodCheck service"
)
USER_OPTION = typer.Option(
    _settings.user, "--user", "-u", help="User name to sign in as"
)


# MARK: - Commands


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Record moods and review your history."""
    configure_logging("debug" if verbose else _settings.log_level)


@app.command()
def checkin(
    mood: str = typer.Argument(..., help="Mood emoji or label (angry, sad, neutral, good, great)"),
    note: str = typer.Option("", "--note", "-n", help="Optional note"),
    user: Optional[str] = USER_OPTION,
    base_url: str = BASE_URL_OPTION,
) -> None:
    """Record a mood check-in."""
    try:
        selected = Mood.parse(mood)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="MOOD")

    async def _checkin() -> None:
        vm = await _signed_in_view_model(user, base_url)
        try:
            vm.select_mood(selected)
            vm.set_note(note)
            if not await vm.submit():
                _print_notices(vm.state)
                raise typer.Exit(1)
            print(f"Saved {selected.value} {selected.label}")
            if vm.state.suggestion:
                print(vm.state.suggestion)
        finally:
            vm.close()

    _run_with_error_handling(_checkin(), base_url)


@app.command()
def history(
    user: Optional[str] = USER_OPTION,
    base_url: str = BASE_URL_OPTION,
) -> None:
    """Show stats, insights and recent entries."""

    async def _history() -> None:
        vm = await _signed_in_view_model(user, base_url)
        try:
            state = await vm.run_until(lambda s: not s.entries_loading)
            print(render_dashboard(state))
        finally:
            vm.close()

    _run_with_error_handling(_history(), base_url)


@app.command()
def delete(
    entry_id: str = typer.Argument(..., help="Id of the entry to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation"),
    user: Optional[str] = USER_OPTION,
    base_url: str = BASE_URL_OPTION,
) -> None:
    """Delete one entry."""

    def confirm(message: str) -> bool:
        return yes or typer.confirm(message)

    async def _delete() -> None:
        vm = await _signed_in_view_model(user, base_url, confirm=confirm)
        try:
            if await vm.delete_entry(entry_id):
                print("Entry deleted")
            elif vm.state.notices:
                _print_notices(vm.state)
                raise typer.Exit(1)
            else:
                print("Cancelled")
        finally:
            vm.close()

    _run_with_error_handling(_delete(), base_url)


@app.command()
def watch(
    user: Optional[str] = USER_OPTION,
    base_url: str = BASE_URL_OPTION,
) -> None:
    """Follow your entries and stats in real-time."""

    def on_update(state: ViewState) -> None:
        if state.entries_loading:
            return
        print(render_stats(state.stats) or "No stats yet")
        print(render_entry_list(state))
        print("-" * 40)

    async def _watch() -> None:
        vm = await _signed_in_view_model(user, base_url)
        print(f"Watching entries on {base_url}... (Ctrl+C to stop)")
        try:
            await vm.run(on_update)
        finally:
            vm.close()

    _run_with_error_handling(_watch(), base_url)


@app.command()
def serve(
    host: str = typer.Option(_settings.host, "--host", help="Interface to bind"),
    port: int = typer.Option(_settings.port, "--port", "-p", help="Port to listen on"),
) -> None:
    """Run the entry store service."""
    import uvicorn

    uvicorn.run(
        "moodcheck.server:app",
        host=host,
        port=port,
        log_level=_settings.log_level,
    )


# MARK: - Private Helpers


async def _signed_in_view_model(
    user: str | None, base_url: str, **kwargs: Any
) -> MoodViewModel:
    """Build a view-model for the user and wait until the session has resolved."""
    vm = MoodViewModel(
        LocalAuthClient(user),
        RemoteEntryStore(base_url),
        suggestion_seconds=_settings.suggestion_seconds,
        **kwargs,
    )
    vm.start()
    await vm.run_until(lambda s: s.phase is not SessionPhase.RESOLVING)

    if not await vm.sign_in():
        _print_notices(vm.state)
        vm.close()
        raise typer.Exit(1)

    await vm.run_until(lambda s: s.phase is SessionPhase.AUTHENTICATED)
    return vm


def _print_notices(state: ViewState) -> None:
    for notice in state.notices:
        print(f"Error: {notice}")


def _run_with_error_handling(coro: Coroutine[Any, Any, Any], base_url: str) -> None:
    """Run an async coroutine with standardized error handling."""
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        print("\nStopped")
        raise typer.Exit(0)
    except httpx.ConnectError:
        print(f"Error: Could not connect to {base_url}")
        raise typer.Exit(1)
    except MoodCheckError as e:
        print(f"Error: {e}")
        raise typer.Exit(1)
    except typer.Exit:
        raise
    except Exception as e:
        error_msg = str(e) or f"Unknown error of type {type(e).__name__}"
        print(f"Error: {error_msg}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
