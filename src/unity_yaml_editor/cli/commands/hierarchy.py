"""Hierarchy commands: reparent, clone and prefab unpacking."""

from typing import Optional

import click

from unity_yaml_editor.cli.logging import cli_command, get_cli_logger
from unity_yaml_editor.cli.output import emit_result
from unity_yaml_editor.cli.registry import get_context
from unity_yaml_editor.cli.resilience import handle_keyboard_interrupt, handle_unexpected_errors
from unity_yaml_editor.core import editor

logger = get_cli_logger()

file_argument = click.argument("file", type=click.Path(dir_okay=False))
by_id_option = click.option(
    "--by-id", is_flag=True, help="Treat identifiers as numeric fileIDs, not names."
)


@click.command("reparent")
@file_argument
@click.argument("child")
@click.argument("new_parent")
@by_id_option
@click.pass_context
@cli_command("reparent")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def reparent_cmd(ctx: click.Context, file: str, child: str, new_parent: str, by_id: bool) -> None:
    """Move CHILD under NEW_PARENT, or to the scene root with "root".

    \b
    Example:
        unity-yaml reparent Main.unity Enemy root
    """
    result, error = editor.reparent(file, child, new_parent, by_id=by_id)
    emit_result(result, error)


@click.command("clone")
@file_argument
@click.argument("target")
@click.option("--name", "new_name", help='Name of the copy (default: "<name> (1)").')
@by_id_option
@click.pass_context
@cli_command("clone")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def clone_cmd(
    ctx: click.Context, file: str, target: str, new_name: Optional[str], by_id: bool
) -> None:
    """Duplicate TARGET with its components and children under the same parent."""
    result, error = editor.clone_game_object(file, target, new_name=new_name, by_id=by_id)
    emit_result(result, error)


@click.command("unpack")
@file_argument
@click.argument("instance")
@click.pass_context
@cli_command("unpack")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def unpack_cmd(ctx: click.Context, file: str, instance: str) -> None:
    """Replace a PrefabInstance with regular GameObjects from its source prefab.

    The source prefab is located through the project's .meta GUIDs; use
    --project when FILE is outside the project tree.
    """
    resolver = get_context(ctx).guid_resolver(near=file)
    if resolver is None:
        logger.debug("No Unity project found for unpack", file=file)
    result, error = editor.unpack_prefab_instance(file, instance, resolver)
    emit_result(result, error)
