"""inkwell add / list / show / edit / delete — manage journal entries."""

from __future__ import annotations

from pathlib import Path

import click

from inkwell.core.cli.common import open_journal, read_image

_DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M"]
_IMAGE = click.Path(exists=True, dir_okay=False, path_type=Path)


@click.command()
@click.argument("title")
@click.option("-c", "--content", default="", help="Entry body.")
@click.option("-m", "--mood", default="Happy", show_default=True, help="Mood label.")
@click.option("-d", "--date", type=click.DateTime(_DATE_FORMATS), default=None, help="Display date, UTC (default: now).")
@click.option("--image", type=_IMAGE, default=None, help="Attach a photo file.")
@click.pass_context
def add(ctx, title, content, mood, date, image) -> None:
    """Write a new entry."""
    with open_journal(ctx) as journal:
        entry_id = journal.store.create(
            title or "Untitled Entry",
            content,
            mood,
            date=date,
            image_data=read_image(image),
        )
    click.echo(entry_id)


@click.command("list")
@click.pass_context
def list_entries(ctx) -> None:
    """List entries, newest first."""
    with open_journal(ctx) as journal:
        entries = journal.store.list()
    if not entries:
        click.echo("No entries yet. Start your journal with 'inkwell add'.")
        return
    for position, entry in enumerate(entries):
        photo = " [photo]" if entry.has_image else ""
        click.echo(f"{position:>3}  {entry.id}  {entry.formatted_date:<12}  {entry.mood:<9}  {entry.title}{photo}")


@click.command()
@click.argument("entry_id")
@click.pass_context
def show(ctx, entry_id) -> None:
    """Print one entry."""
    with open_journal(ctx) as journal:
        entry = journal.store.get(entry_id)
    if entry is None:
        raise click.ClickException(f"No entry {entry_id}")
    click.echo(entry.title)
    click.echo(f"{entry.formatted_date} · {entry.mood}")
    if entry.has_image:
        click.echo(f"Photo: {len(entry.image_data)} bytes")
    click.echo("")
    click.echo(entry.content)


@click.command()
@click.argument("entry_id")
@click.option("-t", "--title", default=None)
@click.option("-c", "--content", default=None)
@click.option("-m", "--mood", default=None)
@click.option("-d", "--date", type=click.DateTime(_DATE_FORMATS), default=None)
@click.option("--image", type=_IMAGE, default=None, help="Replace the photo.")
@click.pass_context
def edit(ctx, entry_id, title, content, mood, date, image) -> None:
    """Change some fields of an entry. Omitted fields (and the photo) are kept."""
    with open_journal(ctx) as journal:
        updated = journal.store.update(
            entry_id,
            title=title,
            content=content,
            mood=mood,
            date=date,
            image_data=read_image(image),
        )
    if not updated:
        raise click.ClickException(f"No entry {entry_id}")
    click.echo(f"Updated {entry_id}")


@click.command()
@click.argument("entry_ids", nargs=-1)
@click.option("--at", "positions", type=int, multiple=True, help="Delete by list position (repeatable).")
@click.pass_context
def delete(ctx, entry_ids, positions) -> None:
    """Delete entries by id, or by position with --at."""
    if not entry_ids and not positions:
        raise click.UsageError("Give at least one entry id or --at position.")
    removed: list[str] = []
    with open_journal(ctx) as journal:
        if positions:
            try:
                removed.extend(journal.store.delete_at(positions))
            except IndexError as e:
                raise click.BadParameter(str(e), param_hint="--at") from e
        for entry_id in entry_ids:
            if journal.store.delete(entry_id):
                removed.append(entry_id)
            else:
                click.echo(f"No entry {entry_id}", err=True)
    for entry_id in removed:
        click.echo(f"Deleted {entry_id}")
