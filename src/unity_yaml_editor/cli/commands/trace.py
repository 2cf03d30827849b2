"""Reference tracing command."""

import click

from unity_yaml_editor.cli.logging import cli_command
from unity_yaml_editor.cli.output import emit_result
from unity_yaml_editor.cli.resilience import handle_keyboard_interrupt, handle_unexpected_errors
from unity_yaml_editor.core import editor
from unity_yaml_editor.core.references import DEFAULT_MAX_DEPTH


@click.command("trace")
@click.argument("file", type=click.Path(dir_okay=False))
@click.argument("start")
@click.option(
    "--direction",
    type=click.Choice(["in", "out", "both", "incoming", "outgoing"]),
    default="both",
    show_default=True,
    help="Follow references out of START, into it, or both.",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_DEPTH,
    show_default=True,
    help="Stop after this many hops.",
)
@click.option("--by-id", is_flag=True, help="Treat START as a numeric fileID.")
@click.pass_context
@cli_command("trace")
@handle_keyboard_interrupt()
@handle_unexpected_errors()
def trace_cmd(
    ctx: click.Context,
    file: str,
    start: str,
    direction: str,
    max_depth: int,
    by_id: bool,
) -> None:
    """Breadth-first walk of fileID references around START."""
    result, error = editor.trace_references(
        file, start, direction=direction, max_depth=max_depth, by_id=by_id
    )
    emit_result(result, error, title="References")
