"""bindlog CLI -- typer-based command interface.

Commands:
    bindlog bindings   List registered bindings, flag ambiguity
    bindlog doctor     Resolve in isolation and print state + diagnostics
"""

from __future__ import annotations

import typer

from bindlog.cli import doctor

app = typer.Typer(
    name="bindlog",
    help="Inspect logging binding discovery and resolution.",
    no_args_is_help=True,
)

app.command("bindings")(doctor.bindings)
app.command("doctor")(doctor.doctor)


def main() -> None:
    """Entry point for the bindlog CLI."""
    app()
