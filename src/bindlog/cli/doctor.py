"""CLI commands for inspecting binding discovery and resolution."""

from __future__ import annotations

import typer

from bindlog.config import get_config
from bindlog.diagnostics import API_COMPATIBILITY_LIST, RecordingSink, is_ambiguous, is_compatible_version
from bindlog.discovery import BackendLocator, EntryPointLocator
from bindlog.errors import BindlogError
from bindlog.resolution import ResolutionContext, ResolutionState


def _locator() -> BackendLocator:
    """Locator used by the commands. Patched in tests."""
    return EntryPointLocator(get_config().entry_point_group)


def bindings() -> None:
    """List binding registrations visible to this interpreter."""
    config = get_config()
    try:
        candidates = _locator().find_candidates()
    except Exception as exc:
        typer.echo(f"Error getting binding registrations: {exc}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Entry-point group: {config.entry_point_group}")
    if not candidates:
        typer.echo("No bindings registered (logging would be disabled).")
        return
    for candidate in candidates:
        typer.echo(f"  {candidate.name}: {candidate.location}")
    if is_ambiguous(candidates):
        typer.echo(f"\nAmbiguous: {len(candidates)} bindings; the first one listed wins.")


def doctor() -> None:
    """Resolve in an isolated context and report what happened."""
    config = get_config()
    sink = RecordingSink()
    context = ResolutionContext(locator=_locator(), sink=sink, config=config)

    typer.echo(f"Platform vendor: {config.platform_vendor}"
               + (" (constrained: discovery skipped)" if config.is_constrained_platform else ""))
    try:
        context.get_logger_factory()
    except BindlogError as exc:
        typer.echo(f"Resolution raised {type(exc).__name__}: {exc}")

    typer.echo(f"State: {context.state.value}")
    if context.candidates is not None:
        typer.echo(f"Candidates: {len(context.candidates)}")
        for candidate in context.candidates:
            typer.echo(f"  {candidate.location}")

    binding = context.binding
    if binding is not None:
        typer.echo(f"Backend: {binding.backend_id}")
        requested = getattr(binding, "requested_api_version", None)
        if requested is None:
            typer.echo("API version: not declared")
        else:
            verdict = "compatible" if is_compatible_version(str(requested)) else "INCOMPATIBLE"
            typer.echo(f"API version: {requested} ({verdict} with {list(API_COMPATIBILITY_LIST)})")

    if sink.messages:
        typer.echo("\nDiagnostics:")
        for message in sink.messages:
            typer.echo(f"  {message}")

    if context.state is ResolutionState.FAILED:
        raise typer.Exit(1)
