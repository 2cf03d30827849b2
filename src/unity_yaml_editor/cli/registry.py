"""Command registry for the unity-yaml CLI.

Centralized registration of all command groups. Commands are organized
by verb (read, update, create, delete, ...).
"""

from typing import Optional

import click

from unity_yaml_editor.cli.config import CLIContext

# Module-level storage for CLI context (for testing)
_cli_context: Optional[CLIContext] = None


def set_context(ctx: CLIContext) -> None:
    """Set the CLI context at module level.

    Primarily used for testing when not using Click's context.
    """
    global _cli_context
    _cli_context = ctx


def get_context(ctx: Optional[click.Context] = None) -> CLIContext:
    """Get CLI context from Click context or module-level storage.

    Raises:
        RuntimeError: If no context is available.
    """
    if ctx is not None:
        obj = ctx.find_root().obj or {}
        if "cli_context" in obj:
            return obj["cli_context"]

    if _cli_context is not None:
        return _cli_context

    raise RuntimeError("No CLI context available. Call set_context() first.")


def register_all_commands(cli: click.Group) -> None:
    """Register all command groups with the CLI.

    Command groups are imported here to avoid circular imports with
    :mod:`unity_yaml_editor.cli.main`.
    """
    from unity_yaml_editor.cli.commands import (
        clone_cmd,
        create_group,
        delete_group,
        find_cmd,
        guid_group,
        read_group,
        reparent_cmd,
        trace_cmd,
        unpack_cmd,
        update_group,
        validate_cmd,
    )

    cli.add_command(read_group)
    cli.add_command(find_cmd)
    cli.add_command(update_group)
    cli.add_command(create_group)
    cli.add_command(delete_group)
    cli.add_command(reparent_cmd)
    cli.add_command(clone_cmd)
    cli.add_command(unpack_cmd)
    cli.add_command(trace_cmd)
    cli.add_command(guid_group)
    cli.add_command(validate_cmd)

    @cli.command("version")
    @click.pass_context
    def version(ctx: click.Context) -> None:
        """Show CLI version information."""
        from unity_yaml_editor import __version__
        from unity_yaml_editor.cli.output import emit_success

        cli_ctx = get_context(ctx)
        project_root = cli_ctx.project_root()

        emit_success(
            {
                "version": __version__,
                "name": "unity-yaml",
                "output_format": cli_ctx.output_format,
                "project_root": str(project_root) if project_root else None,
            }
        )
