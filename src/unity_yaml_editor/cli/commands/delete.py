"""Commands that remove blocks and keep the hierarchy consistent."""

import click

from unity_yaml_editor.cli.logging import cli_command
from unity_yaml_editor.cli.output import emit_result
from unity_yaml_editor.cli.resilience import handle_keyboard_interrupt, handle_unexpected_errors
from unity_yaml_editor.core import editor

file_argument = click.argument("file", type=click.Path(dir_okay=False))
cascade_option = click.option(
    "--cascade/--no-cascade",
    default=True,
    show_default=True,
    help="Also delete descendants. --no-cascade refuses objects with children.",
)


@click.group("delete")
def delete_group() -> None:
    """Remove GameObjects, components, prefab instances and blocks."""
    pass


@delete_group.command("gameobject")
@file_argument
@click.argument("target")
@cascade_option
@click.option("--by-id", is_flag=True, help="Treat TARGET as a numeric fileID.")
@click.pass_context
@cli_command("delete-gameobject")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def delete_game_object_cmd(
    ctx: click.Context, file: str, target: str, cascade: bool, by_id: bool
) -> None:
    """Delete a GameObject with its components (and, by default, its children)."""
    result, error = editor.delete_game_object(file, target, cascade=cascade, by_id=by_id)
    emit_result(result, error)


@delete_group.command("component")
@file_argument
@click.argument("file_id")
@click.pass_context
@cli_command("remove-component")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def delete_component_cmd(ctx: click.Context, file: str, file_id: str) -> None:
    """Remove the component FILE_ID and unlink it from its GameObject."""
    result, error = editor.remove_component(file, file_id)
    emit_result(result, error)


@delete_group.command("prefab")
@file_argument
@click.argument("instance")
@click.pass_context
@cli_command("delete-prefab-instance")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def delete_prefab_cmd(ctx: click.Context, file: str, instance: str) -> None:
    """Delete a PrefabInstance with its stripped blocks and added objects."""
    result, error = editor.delete_prefab_instance(file, instance)
    emit_result(result, error)


@delete_group.command("block")
@file_argument
@click.argument("file_id")
@cascade_option
@click.pass_context
@cli_command("delete-block")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def delete_block_cmd(ctx: click.Context, file: str, file_id: str, cascade: bool) -> None:
    """Delete any block by FILE_ID, dispatching on its class."""
    result, error = editor.delete_block(file, file_id, cascade=cascade)
    emit_result(result, error)
