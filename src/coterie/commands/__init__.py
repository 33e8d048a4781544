"""Subcommand modules for coterie.

Provides register_commands() which uses deferred imports to keep
``coterie --help`` fast as the codebase grows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group.

    3 groups (have subcommands) + 4 standalone commands.
    """
    # --- Groups ---
    from coterie.commands.import_cmd import import_group
    from coterie.commands.link import link
    from coterie.commands.object_cmd import object_group

    cli.add_command(object_group)
    cli.add_command(link)
    cli.add_command(import_group)

    # --- Standalone commands ---
    from coterie.commands.init_cmd import init_cmd
    from coterie.commands.layout import layout
    from coterie.commands.match import match
    from coterie.commands.taxonomy import taxonomy

    cli.add_command(init_cmd)
    cli.add_command(layout)
    cli.add_command(match)
    cli.add_command(taxonomy)
