"""unity-yaml CLI entry point.

JSON output by default; ``--format text`` for rich tables.
"""

from typing import Optional

import click

from unity_yaml_editor.cli.config import CLIContext
from unity_yaml_editor.cli.output import OUTPUT_FORMATS, set_output_format
from unity_yaml_editor.cli.registry import register_all_commands
from unity_yaml_editor.config import EditorConfig, set_config


@click.group()
@click.option(
    "--project",
    type=click.Path(file_okay=False),
    help="Unity project root (directory containing Assets/).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Output format (default: json, or [output] format from config).",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    help="Path to a unity-yaml.toml config file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log at DEBUG level to stderr.")
@click.pass_context
def cli(
    ctx: click.Context,
    project: Optional[str],
    output_format: Optional[str],
    config_file: Optional[str],
    verbose: bool,
) -> None:
    """unity-yaml - structure-preserving editor for Unity scenes and prefabs.

    All commands output response-v2 JSON envelopes for reliable parsing.
    """
    config = EditorConfig.from_env(config_file)
    if verbose:
        config.log_level = "DEBUG"
    set_config(config)
    config.setup_logging()

    cli_context = CLIContext(project=project, output_format=output_format, editor_config=config)
    set_output_format(cli_context.output_format)

    ctx.ensure_object(dict)
    ctx.obj["cli_context"] = cli_context


# Register all command groups
register_all_commands(cli)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
