"""inkwell info — show where the journal lives."""

from __future__ import annotations

import click

from inkwell.core.cli.common import open_journal


@click.command()
@click.pass_context
def info(ctx) -> None:
    """Show storage location, size and sync state."""
    with open_journal(ctx) as journal:
        click.echo(journal.store.diagnostics())
        click.echo(f"Sync State: {journal.reconciler.state}")
