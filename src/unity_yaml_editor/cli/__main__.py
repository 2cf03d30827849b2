"""Enables running the CLI via: python -m unity_yaml_editor.cli"""

from unity_yaml_editor.cli.main import cli

if __name__ == "__main__":
    cli()
