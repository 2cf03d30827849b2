"""Field and override edit commands.

Every command loads the document, applies its edits in memory and saves
once. Failed edits leave the file untouched.
"""

import json
from pathlib import Path
from typing import Any, List, Optional

import click

from unity_yaml_editor.cli.logging import cli_command, get_cli_logger
from unity_yaml_editor.cli.output import emit_error, emit_result
from unity_yaml_editor.cli.resilience import handle_keyboard_interrupt, handle_unexpected_errors
from unity_yaml_editor.core import editor

logger = get_cli_logger()

file_argument = click.argument("file", type=click.Path(dir_okay=False))
by_id_option = click.option(
    "--by-id", is_flag=True, help="Treat the target as a numeric fileID, not a name."
)


@click.group("update")
def update_group() -> None:
    """Edit field values, sequences and prefab overrides."""
    pass


@update_group.command("field")
@file_argument
@click.argument("target")
@click.argument("path")
@click.argument("value")
@by_id_option
@click.pass_context
@cli_command("set-field")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def update_field_cmd(
    ctx: click.Context, file: str, target: str, path: str, value: str, by_id: bool
) -> None:
    """Set PATH on TARGET to VALUE, keeping the rest of the line intact.

    \b
    Examples:
        unity-yaml update field Main.unity Player m_IsActive 0
        unity-yaml update field Main.unity 400 m_LocalPosition.x 2.5 --by-id
    """
    result, error = editor.set_field(file, target, path, value, by_id=by_id)
    emit_result(result, error)


def _load_edits(edits: str) -> List[Any]:
    inline = edits.lstrip().startswith(("[", "{"))
    try:
        text = edits if inline else Path(edits).read_text(encoding="utf-8")
        data = json.loads(text)
    except json.JSONDecodeError as e:
        emit_error(
            f"Invalid JSON in batch edits: {e}",
            code="INVALID_JSON",
            error_type="validation",
            remediation='Pass a JSON list like [{"name": "Player", "path": "m_IsActive", "value": "0"}]',
        )
    except OSError as e:
        emit_error(
            f"Could not read batch edits file: {e}",
            code="IO_FAILURE",
            error_type="internal",
            details={"path": edits},
        )
    if isinstance(data, dict) and "edits" in data:
        data = data["edits"]
    if not isinstance(data, list):
        emit_error(
            "Batch edits must be a JSON list",
            code="VALIDATION_ERROR",
            error_type="validation",
            details={"field": "edits"},
        )
    return data


@update_group.command("batch")
@file_argument
@click.argument("edits")
@click.pass_context
@cli_command("batch")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def update_batch_cmd(ctx: click.Context, file: str, edits: str) -> None:
    """Apply several field edits with a single save.

    EDITS is a JSON list (inline, or the path of a .json file) of
    {"file_id" | "name", "path", "value"} objects. Any failing edit aborts
    the whole batch.
    """
    result, error = editor.batch_set_fields(file, _load_edits(edits))
    emit_result(result, error)


@update_group.command("array-insert")
@file_argument
@click.argument("target")
@click.argument("path")
@click.argument("value")
@click.option("--index", type=int, default=-1, show_default=True, help="Position; -1 appends.")
@by_id_option
@click.pass_context
@cli_command("array-insert")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def array_insert_cmd(
    ctx: click.Context,
    file: str,
    target: str,
    path: str,
    value: str,
    index: int,
    by_id: bool,
) -> None:
    """Insert VALUE into the sequence at PATH on TARGET."""
    result, error = editor.insert_array_element(file, target, path, value, index=index, by_id=by_id)
    emit_result(result, error)


@update_group.command("array-remove")
@file_argument
@click.argument("target")
@click.argument("path")
@click.option("--index", type=int, required=True, help="Element to remove (0-based).")
@by_id_option
@click.pass_context
@cli_command("array-remove")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def array_remove_cmd(
    ctx: click.Context, file: str, target: str, path: str, index: int, by_id: bool
) -> None:
    """Remove one element from the sequence at PATH on TARGET."""
    result, error = editor.remove_array_element(file, target, path, index, by_id=by_id)
    emit_result(result, error)


@update_group.command("override")
@file_argument
@click.argument("instance")
@click.argument("property_path")
@click.argument("value")
@click.option(
    "--target",
    "target",
    help="Override target: a fileID in the source prefab or a full {fileID, guid, type} ref.",
)
@click.option(
    "--object-reference",
    help="objectReference value, e.g. '{fileID: 0}' (default).",
)
@click.pass_context
@cli_command("set-override")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def override_cmd(
    ctx: click.Context,
    file: str,
    instance: str,
    property_path: str,
    value: str,
    target: Optional[str],
    object_reference: Optional[str],
) -> None:
    """Add or update a property override on a PrefabInstance."""
    result, error = editor.set_override(
        file, instance, property_path, value, target=target, object_reference=object_reference
    )
    emit_result(result, error)


@update_group.command("remove-override")
@file_argument
@click.argument("instance")
@click.argument("property_path")
@click.option("--target", "target", help="Only remove the entry for this target.")
@click.pass_context
@cli_command("remove-override")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def remove_override_cmd(
    ctx: click.Context, file: str, instance: str, property_path: str, target: Optional[str]
) -> None:
    """Remove a property override from a PrefabInstance."""
    result, error = editor.remove_override(file, instance, property_path, target=target)
    emit_result(result, error)


def _removed_list_command(name: str, kind: str, noun: str) -> click.Command:
    @update_group.command(
        name,
        help=(
            f"Mark a source-prefab {noun} as removed on a PrefabInstance.\n\n"
            "REFERENCE is a fileID in the source prefab or a full {fileID, guid, type} ref."
        ),
    )
    @file_argument
    @click.argument("instance")
    @click.argument("reference")
    @click.option("--remove", is_flag=True, help=f"Restore the {noun} instead of removing it.")
    @click.pass_context
    @cli_command(name)
    @handle_keyboard_interrupt()
    @handle_unexpected_errors()
    def command(ctx: click.Context, file: str, instance: str, reference: str, remove: bool) -> None:
        action = "remove" if remove else "add"
        result, error = editor.edit_removed_list(file, instance, kind, action, reference)
        emit_result(result, error)

    return command


removed_component_cmd = _removed_list_command("removed-component", "component", "component")
removed_game_object_cmd = _removed_list_command(
    "removed-gameobject", "game_object", "GameObject"
)
