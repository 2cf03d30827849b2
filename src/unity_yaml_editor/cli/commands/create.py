"""Commands that add GameObjects and components."""

from typing import Optional

import click

from unity_yaml_editor.cli.logging import cli_command
from unity_yaml_editor.cli.output import emit_result
from unity_yaml_editor.cli.resilience import handle_keyboard_interrupt, handle_unexpected_errors
from unity_yaml_editor.core import editor

file_argument = click.argument("file", type=click.Path(dir_okay=False))
by_id_option = click.option(
    "--by-id", is_flag=True, help="Treat parent/owner as a numeric fileID, not a name."
)


@click.group("create")
def create_group() -> None:
    """Add GameObjects, components and blocks."""
    pass


@create_group.command("gameobject")
@file_argument
@click.argument("name")
@click.option("--parent", help="Parent GameObject name or fileID (default: scene root).")
@by_id_option
@click.pass_context
@cli_command("create-gameobject")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def create_game_object_cmd(
    ctx: click.Context, file: str, name: str, parent: Optional[str], by_id: bool
) -> None:
    """Create a GameObject named NAME with a Transform.

    Under a parent the new object inherits the parent's layer and is
    appended last among its siblings.
    """
    result, error = editor.create_game_object(file, name, parent=parent, by_id=by_id)
    emit_result(result, error)


@create_group.command("component")
@file_argument
@click.argument("game_object")
@click.argument("component")
@by_id_option
@click.pass_context
@cli_command("add-component")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def create_component_cmd(
    ctx: click.Context, file: str, game_object: str, component: str, by_id: bool
) -> None:
    """Attach a built-in COMPONENT (class name or id) to GAME_OBJECT.

    \b
    Example:
        unity-yaml create component Main.unity Player BoxCollider
    """
    result, error = editor.add_component(file, game_object, component, by_id=by_id)
    emit_result(result, error)


@create_group.command("block")
@file_argument
@click.argument("class_id")
@click.option("--name", help="Name for a new GameObject.")
@click.option("--parent", help="Parent GameObject (or owner, for components).")
@by_id_option
@click.pass_context
@cli_command("create-block")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def create_block_cmd(
    ctx: click.Context,
    file: str,
    class_id: str,
    name: Optional[str],
    parent: Optional[str],
    by_id: bool,
) -> None:
    """Create a block of CLASS_ID (numeric id or class name)."""
    result, error = editor.create_block(file, class_id, name=name, parent=parent, by_id=by_id)
    emit_result(result, error)
