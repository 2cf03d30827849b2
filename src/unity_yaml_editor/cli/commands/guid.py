"""GUID cache commands.

Resolve asset GUIDs to project paths and rebuild the persisted cache.
"""

from typing import Optional

import click

from unity_yaml_editor.cli.config import CLIContext
from unity_yaml_editor.cli.logging import cli_command
from unity_yaml_editor.cli.output import emit_error, emit_result
from unity_yaml_editor.cli.registry import get_context
from unity_yaml_editor.cli.resilience import handle_keyboard_interrupt, handle_unexpected_errors
from unity_yaml_editor.core import editor
from unity_yaml_editor.core.guid_resolver import GuidResolver


def _require_resolver(cli_ctx: CLIContext, persist: Optional[bool]) -> GuidResolver:
    resolver = cli_ctx.guid_resolver()
    if resolver is None:
        emit_error(
            "No Unity project found",
            code="NOT_FOUND",
            error_type="not_found",
            remediation="Use --project or set UNITY_YAML_PROJECT_ROOT to the directory containing Assets/.",
        )
    if persist is not None:
        resolver.persist = persist
    return resolver


persist_option = click.option(
    "--persist/--no-persist",
    default=None,
    help="Read/write the JSON cache under .unity-yaml/ (default from config).",
)


@click.group("guid")
def guid_group() -> None:
    """Asset GUID lookups."""
    pass


@guid_group.command("resolve")
@click.argument("guid")
@persist_option
@click.pass_context
@cli_command("guid-resolve")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def guid_resolve_cmd(ctx: click.Context, guid: str, persist: Optional[bool]) -> None:
    """Print the asset path for GUID."""
    resolver = _require_resolver(get_context(ctx), persist)
    result, error = editor.resolve_guid(resolver, guid)
    emit_result(result, error)


@guid_group.command("rebuild")
@persist_option
@click.pass_context
@cli_command("guid-rebuild")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def guid_rebuild_cmd(ctx: click.Context, persist: Optional[bool]) -> None:
    """Rescan Assets/ and Packages/ for .meta GUIDs."""
    resolver = _require_resolver(get_context(ctx), persist)
    result, error = editor.rebuild_guid_cache(resolver)
    emit_result(result, error)
