"""Document validation command."""

import click

from unity_yaml_editor.cli.logging import cli_command
from unity_yaml_editor.cli.output import emit_result
from unity_yaml_editor.cli.resilience import handle_keyboard_interrupt, handle_unexpected_errors
from unity_yaml_editor.core import editor


@click.command("validate")
@click.argument("file", type=click.Path(dir_okay=False))
@click.pass_context
@cli_command("validate")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def validate_cmd(ctx: click.Context, file: str) -> None:
    """Check FILE's header, fileID uniqueness and GUID syntax.

    Issues are reported in the payload; the command only fails when FILE
    cannot be read at all.
    """
    result, error = editor.validate_file(file)
    emit_result(result, error, title="Validation")
