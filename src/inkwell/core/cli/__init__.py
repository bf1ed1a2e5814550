"""Inkwell CLI — entry point for the journal commands."""

import click

from inkwell import __version__


@click.group()
@click.version_option(version=__version__, package_name="inkwell")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default=None, help="Config file (YAML or JSON).")
@click.option("--profile", default=None, help="Journal profile, e.g. 'ios' or 'mac'.")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def main(ctx: click.Context, config_file: str | None, profile: str | None, verbose: bool) -> None:
    """Inkwell — a local-first journal that follows you across devices."""
    from inkwell.core.cli.common import load_config
    from inkwell.core.utils.logging import setup_logging_from_config

    config = load_config(config_file)
    setup_logging_from_config(config, verbose=verbose)
    ctx.obj = {"config": config, "profile": profile}


# Register subcommands (lazy imports keep startup fast)
from .entries_cmd import add, delete, edit, list_entries, show
from .info_cmd import info
from .watch_cmd import watch

main.add_command(add)
main.add_command(list_entries)
main.add_command(show)
main.add_command(edit)
main.add_command(delete)
main.add_command(info)
main.add_command(watch)
