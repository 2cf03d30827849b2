"""CLI command groups.

The CLI is organized by verb (`read`, `update`, `create`, `delete`) plus
single commands for hierarchy moves, tracing, GUIDs and validation.
"""

from unity_yaml_editor.cli.commands.create import create_group
from unity_yaml_editor.cli.commands.delete import delete_group
from unity_yaml_editor.cli.commands.guid import guid_group
from unity_yaml_editor.cli.commands.hierarchy import clone_cmd, reparent_cmd, unpack_cmd
from unity_yaml_editor.cli.commands.read import find_cmd, read_group
from unity_yaml_editor.cli.commands.trace import trace_cmd
from unity_yaml_editor.cli.commands.update import update_group
from unity_yaml_editor.cli.commands.validate import validate_cmd

__all__ = [
    "clone_cmd",
    "create_group",
    "delete_group",
    "find_cmd",
    "guid_group",
    "read_group",
    "reparent_cmd",
    "trace_cmd",
    "unpack_cmd",
    "update_group",
    "validate_cmd",
]
