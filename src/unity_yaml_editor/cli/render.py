"""
Rich rendering for ``--format text``.

Turns a response-v2 envelope into terminal output:

- lists of objects become a :class:`rich.table.Table`
- scene listings (entries carrying ``parent``/``depth``) become a
  :class:`rich.tree.Tree`
- everything else is a two-column key/value table

JSON stays the default format. Text output is for people reading a
terminal and is not meant to be parsed.
"""

import json
import sys
from typing import Any, Dict, List, Mapping, Optional

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

HIERARCHY_KEYS = ("objects",)


def _format_value(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(", ", ": "), default=str)
    return str(value)


def _is_record_list(value: Any) -> bool:
    return isinstance(value, list) and bool(value) and all(isinstance(v, dict) for v in value)


def build_table(rows: List[Mapping[str, Any]], title: Optional[str] = None) -> Table:
    """Table with one column per key seen across ``rows``, in first-seen order."""
    columns: List[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)

    table = Table(title=title, show_header=True, header_style="bold cyan", border_style="blue")
    for column in columns:
        table.add_column(column, no_wrap=column in ("file_id", "name"), overflow="fold")
    for row in rows:
        table.add_row(*[_format_value(row.get(column)) for column in columns])
    return table


def build_key_value_table(data: Mapping[str, Any], title: Optional[str] = None) -> Table:
    table = Table(title=title, show_header=False, border_style="blue")
    table.add_column("key", style="cyan", no_wrap=True)
    table.add_column("value", overflow="fold")
    for key, value in data.items():
        table.add_row(key, _format_value(value))
    return table


def build_hierarchy_tree(entries: List[Mapping[str, Any]], title: str = "Hierarchy") -> Tree:
    """Tree of scene entries linked through their ``parent`` ids.

    Entries whose parent is not part of ``entries`` (for example on another
    page) hang off the root.
    """
    root = Tree(f"[bold]{title}[/bold]")
    nodes: Dict[Any, Tree] = {}
    by_id = {entry.get("file_id"): entry for entry in entries}

    def label(entry: Mapping[str, Any]) -> str:
        kind = entry.get("kind", "")
        style = "magenta" if kind == "PrefabInstance" else "green"
        text = f"[{style}]{entry.get('name') or '<unnamed>'}[/{style}] [dim]({entry.get('file_id')})[/dim]"
        components = entry.get("components")
        if components:
            text += f" [dim]{', '.join(components)}[/dim]"
        return text

    def attach(entry: Mapping[str, Any]) -> Tree:
        file_id = entry.get("file_id")
        if file_id in nodes:
            return nodes[file_id]
        parent_id = entry.get("parent")
        parent_entry = by_id.get(parent_id) if parent_id != file_id else None
        parent_node = attach(parent_entry) if parent_entry is not None else root
        nodes[file_id] = parent_node.add(label(entry))
        return nodes[file_id]

    for entry in entries:
        attach(entry)
    return root


def render_response(
    response: Mapping[str, Any],
    title: Optional[str] = None,
    console: Optional[Console] = None,
) -> None:
    """Print a success envelope for humans."""
    console = console or Console(file=sys.stdout)
    data: Dict[str, Any] = dict(response.get("data") or {})
    meta: Mapping[str, Any] = response.get("meta") or {}

    for key in HIERARCHY_KEYS:
        entries = data.get(key)
        if _is_record_list(entries) and all("parent" in e for e in entries):
            console.print(build_hierarchy_tree(entries, title=title or str(data.get("file", key))))
            data.pop(key)

    for key in list(data):
        value = data[key]
        if _is_record_list(value):
            console.print(build_table(value, title=key))
            data.pop(key)
        elif isinstance(value, dict) and value:
            console.print(build_key_value_table(value, title=key))
            data.pop(key)

    if data:
        console.print(build_key_value_table(data, title=title))

    for warning in meta.get("warnings") or []:
        console.print(f"[yellow]warning:[/yellow] {warning}")

    pagination = meta.get("pagination")
    if pagination and pagination.get("has_more"):
        console.print(
            f"[dim]{pagination.get('total_count')} total, more available with "
            f"--cursor {pagination.get('next_offset')}[/dim]"
        )
