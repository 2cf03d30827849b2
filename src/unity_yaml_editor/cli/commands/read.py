"""Read-only commands.

Provides commands for listing a scene, describing one block, reading a
single field, listing prefab overrides and searching by name.
"""

from typing import Optional

import click

from unity_yaml_editor.cli.logging import cli_command, get_cli_logger
from unity_yaml_editor.cli.output import emit_error, emit_result
from unity_yaml_editor.cli.registry import get_context
from unity_yaml_editor.cli.resilience import handle_keyboard_interrupt, handle_unexpected_errors
from unity_yaml_editor.core import editor
from unity_yaml_editor.core.pagination import CursorError, decode_offset

logger = get_cli_logger()

file_argument = click.argument("file", type=click.Path(dir_okay=False))
by_id_option = click.option(
    "--by-id", is_flag=True, help="Treat the target as a numeric fileID, not a name."
)
cursor_option = click.option("--cursor", help="Pagination cursor from a previous response.")
page_size_option = click.option("--page-size", type=int, help="Items per page (capped).")


def _offset(cursor: Optional[str]) -> int:
    try:
        return decode_offset(cursor)
    except CursorError as e:
        emit_error(
            str(e),
            code="INVALID_CURSOR",
            error_type="validation",
            remediation="Pass the cursor exactly as returned in meta.pagination.cursor.",
            details={"cursor": e.cursor, "reason": e.reason},
        )


@click.group("read")
def read_group() -> None:
    """Inspect scenes, prefabs and their blocks."""
    pass


@read_group.command("scene")
@file_argument
@cursor_option
@page_size_option
@click.option("--verbose", is_flag=True, help="Include components and active state.")
@click.option("--summary", is_flag=True, help="Show counts per component type instead.")
@click.pass_context
@cli_command("read-scene")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def read_scene_cmd(
    ctx: click.Context,
    file: str,
    cursor: Optional[str],
    page_size: Optional[int],
    verbose: bool,
    summary: bool,
) -> None:
    """List GameObjects and PrefabInstances in FILE in document order."""
    cli_ctx = get_context(ctx)
    result, error = editor.read_scene(
        file,
        offset=_offset(cursor),
        page_size=cli_ctx.page_size(page_size),
        verbose=verbose,
        summary=summary,
    )
    emit_result(result, error, title=file)


@read_group.command("block")
@file_argument
@click.argument("target")
@by_id_option
@click.pass_context
@cli_command("read-block")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def read_block_cmd(ctx: click.Context, file: str, target: str, by_id: bool) -> None:
    """Describe one block of FILE.

    TARGET is a GameObject name or a fileID.
    """
    result, error = editor.read_block(file, target, by_id=by_id)
    emit_result(result, error)


@read_group.command("field")
@file_argument
@click.argument("target")
@click.argument("path")
@by_id_option
@click.pass_context
@cli_command("read-field")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def read_field_cmd(ctx: click.Context, file: str, target: str, path: str, by_id: bool) -> None:
    """Read the value at PATH (e.g. m_LocalPosition.x) on TARGET."""
    result, error = editor.read_field(file, target, path, by_id=by_id)
    emit_result(result, error)


@read_group.command("array-length")
@file_argument
@click.argument("target")
@click.argument("path")
@by_id_option
@click.pass_context
@cli_command("array-length")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def array_length_cmd(ctx: click.Context, file: str, target: str, path: str, by_id: bool) -> None:
    """Number of elements in the sequence at PATH on TARGET."""
    result, error = editor.array_length(file, target, path, by_id=by_id)
    emit_result(result, error)


@read_group.command("overrides")
@file_argument
@click.argument("instance")
@click.pass_context
@cli_command("read-overrides")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def read_overrides_cmd(ctx: click.Context, file: str, instance: str) -> None:
    """List the m_Modifications entries of a PrefabInstance.

    INSTANCE is the instance's display name or fileID.
    """
    result, error = editor.list_overrides(file, instance)
    emit_result(result, error, title="Overrides")


@click.command("find")
@file_argument
@click.argument("pattern")
@click.option("--exact", is_flag=True, help="Case-sensitive exact name match.")
@cursor_option
@page_size_option
@click.pass_context
@cli_command("find")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def find_cmd(
    ctx: click.Context,
    file: str,
    pattern: str,
    exact: bool,
    cursor: Optional[str],
    page_size: Optional[int],
) -> None:
    """Search GameObjects and PrefabInstances in FILE by name.

    Fuzzy by default: results are scored and sorted best first.
    """
    cli_ctx = get_context(ctx)
    result, error = editor.find_objects(
        file,
        pattern,
        exact=exact,
        offset=_offset(cursor),
        page_size=cli_ctx.page_size(page_size),
    )
    emit_result(result, error, title=f"Matches for {pattern!r}")
