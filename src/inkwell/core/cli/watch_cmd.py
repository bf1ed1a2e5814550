"""inkwell watch — follow changes other devices make to the synchronized journal."""

from __future__ import annotations

import time

import click

from inkwell.core.cli.common import open_journal
from inkwell.core.events import JOURNAL_RELOADED, Event
from inkwell.journal import SyncState


@click.command()
@click.option("--interval", type=float, default=None, help="Seconds between checks (default: journal.watch_interval).")
@click.option("--once", is_flag=True, help="Check once and exit.")
@click.pass_context
def watch(ctx, interval, once) -> None:
    """Reload whenever the synchronized journal changes. Ctrl+C to stop."""
    interval = interval or float(ctx.obj["config"].get("journal.watch_interval", 2.0))

    with open_journal(ctx) as journal:
        if journal.reconciler.state is not SyncState.WATCHING:
            raise click.ClickException("Journal is local-only; configure journal.sync_container to watch.")

        def _announce(event: Event) -> None:
            click.echo(f"Reloaded {event.payload.get('count', 0)} entries ({event.payload.get('status')})")

        journal.events.on(JOURNAL_RELOADED, _announce)

        if once:
            journal.reconciler.poll()
            return

        click.echo(f"Watching {journal.store.path} every {interval:g}s. Press Ctrl+C to stop.")
        journal.reconciler.start_polling(interval)
        try:
            while True:
                journal.reconciler.process_pending()
                time.sleep(min(interval, 0.5))
        except KeyboardInterrupt:
            click.echo("Stopped.")
