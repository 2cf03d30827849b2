"""
Line scanners for Unity YAML block bodies.

A block body is handled as a list of text lines. Instead of parsing the YAML
value grammar, each helper scans for a section start (a ``key:`` line) and
walks forward by indentation until the next sibling key or the end of the
block. Unity writes top-level sequences at the same indentation as their key::

    m_Children:
    - {fileID: 200}
    - {fileID: 300}
    m_Father: {fileID: 0}

so a section also continues through ``- `` items at the key's own indentation.

Field paths:

    m_Name                       simple key
    m_LocalPosition.x            inline flow mapping or nested block keys
    m_Materials.Array.data[0]    one element of a sequence
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from unity_yaml_editor.core.errors import MalformedError, NotFoundError

_ARRAY_SUFFIX = re.compile(r"\.Array\.data\[(\d+)\]")
_SEGMENT = re.compile(r"^(?P<name>[^\[\]]+?)(?:\[(?P<index>\d+)\])?$")
_KEY_START = re.compile(r"[^\s:#{\[\-'\"]")


# ---------------------------------------------------------------------------
# Line primitives
# ---------------------------------------------------------------------------


def indent_of(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def is_blank(line: str) -> bool:
    return not line.strip()


def is_item(line: str) -> bool:
    stripped = line.lstrip(" ")
    return stripped == "-" or stripped.startswith("- ")


def split_comment(text: str) -> Tuple[str, str]:
    """Split ``text`` into (value, trailing comment).

    A comment starts at a ``#`` preceded by whitespace, outside quotes and
    flow collections. The whitespace before the ``#`` belongs to the comment.
    """
    depth = 0
    quote: Optional[str] = None
    for i, ch in enumerate(text):
        if quote:
            if ch == quote:
                quote = None
            continue
        if ch in "'\"" and (i == 0 or text[i - 1] in " {[,:"):
            quote = ch
        elif ch in "{[":
            depth += 1
        elif ch in "}]":
            depth = max(0, depth - 1)
        elif ch == "#" and depth == 0 and i > 0 and text[i - 1] in " \t":
            start = i
            while start > 0 and text[start - 1] in " \t":
                start -= 1
            return text[:start], text[start:]
    return text, ""


@dataclass
class KeyLine:
    """A parsed ``key: value`` line.

    ``value_start``/``value_end`` are column offsets of the value within the
    line, so a rewrite can keep everything else byte-identical.
    """

    indent: int
    key: str
    item: bool
    value: str
    comment: str
    value_start: int
    value_end: int

    @property
    def content_indent(self) -> int:
        """Column where the mapping content starts (after ``- `` for items)."""
        return self.indent + 2 if self.item else self.indent


def parse_key_line(line: str) -> Optional[KeyLine]:
    """Parse a ``[- ]key: value`` line, or return None for other lines."""
    indent = indent_of(line)
    pos = indent
    item = False
    if line.startswith("- ", pos):
        item = True
        pos += 2
        while pos < len(line) and line[pos] == " ":
            pos += 1

    if pos >= len(line) or not _KEY_START.match(line[pos]):
        return None

    colon = line.find(":", pos)
    while colon != -1 and colon + 1 < len(line) and line[colon + 1] not in " \t":
        colon = line.find(":", colon + 1)
    if colon == -1:
        return None

    key = line[pos:colon].rstrip()
    if not key:
        return None

    value_start = colon + 1
    while value_start < len(line) and line[value_start] in " \t":
        value_start += 1
    value, comment = split_comment(line[value_start:])
    return KeyLine(
        indent=indent,
        key=key,
        item=item,
        value=value,
        comment=comment,
        value_start=value_start,
        value_end=value_start + len(value),
    )


# ---------------------------------------------------------------------------
# Section scanning
# ---------------------------------------------------------------------------


def section_end(lines: List[str], index: int, limit: Optional[int] = None) -> int:
    """Return the index just past the last line that belongs to the key at ``index``.

    Continuation lines are deeper than the key's content column, or are
    sequence items at the same column (Unity's compact sequence style).
    Trailing blank lines are not part of the section.
    """
    limit = len(lines) if limit is None else limit
    head = parse_key_line(lines[index])
    if head is None:
        return index + 1

    base = head.content_indent
    end = index + 1
    for j in range(index + 1, limit):
        line = lines[j]
        if is_blank(line):
            continue
        ind = indent_of(line)
        if ind > base or (ind == base and not head.item and is_item(line)):
            end = j + 1
            continue
        break
    return end


def find_key(
    lines: List[str],
    key: str,
    start: int = 0,
    end: Optional[int] = None,
    indent: Optional[int] = None,
) -> Optional[int]:
    """First line index in ``[start, end)`` whose key equals ``key``.

    When ``indent`` is given, only keys whose content column equals it match.
    """
    end = len(lines) if end is None else end
    for i in range(start, end):
        parsed = parse_key_line(lines[i])
        if parsed is None or parsed.key != key:
            continue
        if indent is not None and parsed.content_indent != indent:
            continue
        return i
    return None


def child_indent(lines: List[str], start: int, end: int) -> Optional[int]:
    """Indentation of the first non-blank line in ``[start, end)``."""
    for i in range(start, end):
        if not is_blank(lines[i]):
            return indent_of(lines[i])
    return None


def list_items(lines: List[str], index: int) -> List[int]:
    """Line indices of the sequence items under the key at ``index``.

    Returns an empty list for ``key: []``.
    """
    head = parse_key_line(lines[index])
    if head is None or head.value.strip() == "[]":
        return []
    end = section_end(lines, index)
    item_indent = child_indent(lines, index + 1, end)
    if item_indent is None:
        return []
    return [
        i
        for i in range(index + 1, end)
        if indent_of(lines[i]) == item_indent and is_item(lines[i])
    ]


def item_end(lines: List[str], items: List[int], position: int, section_stop: int) -> int:
    """Index just past the item at ``items[position]`` (including its continuation lines)."""
    if position + 1 < len(items):
        return items[position + 1]
    stop = items[position] + 1
    for j in range(items[position] + 1, section_stop):
        if not is_blank(lines[j]):
            stop = j + 1
    return stop


def item_value(line: str) -> str:
    """Text after the ``- `` marker of a sequence item."""
    stripped = line.lstrip(" ")
    return stripped[2:] if stripped.startswith("- ") else ""


# ---------------------------------------------------------------------------
# Inline flow mappings
# ---------------------------------------------------------------------------


def flow_entries(text: str) -> List[Tuple[str, int, int]]:
    """Split an inline ``{k: v, ...}`` mapping into (key, value_start, value_end).

    Offsets are relative to ``text``. Returns an empty list if ``text`` is not
    a flow mapping.
    """
    stripped = text.strip()
    if not (stripped.startswith("{") and stripped.endswith("}")):
        return []

    base = text.index("{")
    close = text.rindex("}")
    entries: List[Tuple[str, int, int]] = []
    depth = 0
    seg_start = base + 1
    for i in range(base + 1, close + 1):
        ch = text[i]
        if ch in "{[":
            depth += 1
        elif ch in "}]" and i != close:
            depth -= 1
        if (ch == "," and depth == 0) or i == close:
            segment = text[seg_start:i]
            colon = segment.find(":")
            if colon != -1:
                key = segment[:colon].strip()
                v_start = seg_start + colon + 1
                while v_start < i and text[v_start] == " ":
                    v_start += 1
                v_end = i
                while v_end > v_start and text[v_end - 1] == " ":
                    v_end -= 1
                entries.append((key, v_start, v_end))
            seg_start = i + 1
    return entries


def flow_value(text: str, key: str) -> Optional[str]:
    for entry_key, start, end in flow_entries(text):
        if entry_key == key:
            return text[start:end]
    return None


# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------


@dataclass
class PathSegment:
    name: str
    index: Optional[int] = None


def parse_path(path: str) -> List[PathSegment]:
    """Split a field path into segments.

    ``m_Materials.Array.data[2]`` becomes ``[PathSegment("m_Materials", 2)]``.
    """
    if not path or not path.strip():
        raise NotFoundError("Field path must not be empty")

    normalized = _ARRAY_SUFFIX.sub(lambda m: f"[{m.group(1)}]", path.strip())
    segments: List[PathSegment] = []
    for raw in normalized.split("."):
        match = _SEGMENT.match(raw)
        if not match:
            raise NotFoundError(f"Invalid path segment '{raw}' in '{path}'")
        index = match.group("index")
        segments.append(PathSegment(match.group("name"), int(index) if index else None))
    return segments


@dataclass
class FieldLocation:
    """Where a field's value lives in the block text.

    Attributes:
        line_index: Index of the line holding the value
        line: Current text of that line
        value: Current value text (without comment)
        value_start: Column where the value starts
        value_end: Column where the value ends
        has_children: True if the key owns nested lines (a section)
    """

    path: str
    line_index: int
    line: str
    value: str
    value_start: int
    value_end: int
    has_children: bool = False
    comment: str = ""
    section: Tuple[int, int] = field(default=(0, 0))


def _location_for_key(lines: List[str], index: int, path: str) -> FieldLocation:
    parsed = parse_key_line(lines[index])
    if parsed is None:
        raise MalformedError(f"Line {index} of {path} is not a key line")
    end = section_end(lines, index)
    return FieldLocation(
        path=path,
        line_index=index,
        line=lines[index],
        value=parsed.value,
        value_start=parsed.value_start,
        value_end=parsed.value_end,
        has_children=end > index + 1,
        comment=parsed.comment,
        section=(index, end),
    )


def _location_for_item(lines: List[str], index: int, stop: int, path: str) -> FieldLocation:
    line = lines[index]
    value_start = indent_of(line) + 2
    value, comment = split_comment(line[value_start:])
    return FieldLocation(
        path=path,
        line_index=index,
        line=line,
        value=value,
        value_start=value_start,
        value_end=value_start + len(value),
        has_children=stop > index + 1,
        comment=comment,
        section=(index, stop),
    )


def _inline_location(loc: FieldLocation, key: str, path: str) -> Optional[FieldLocation]:
    text = loc.line[loc.value_start : loc.value_end]
    for entry_key, start, end in flow_entries(text):
        if entry_key == key:
            return FieldLocation(
                path=path,
                line_index=loc.line_index,
                line=loc.line,
                value=text[start:end],
                value_start=loc.value_start + start,
                value_end=loc.value_start + end,
                section=(loc.line_index, loc.line_index + 1),
            )
    return None


def locate(lines: List[str], path: str, start: int = 1) -> FieldLocation:
    """Resolve ``path`` to the line (and column span) holding its value.

    The first segment is searched at the block's top-level indentation,
    then anywhere in the body. Later segments must be direct children of the
    previous one, either keys inside an inline flow mapping or nested keys
    one indentation level deeper.

    Raises:
        NotFoundError: A key on the path does not exist.
        MalformedError: An array index is out of range or a segment
            cannot be navigated (e.g. a scalar where a mapping is expected).
    """
    segments = parse_path(path)
    root = parse_key_line(lines[start]) if start < len(lines) else None
    if root is not None and root.indent == 0 and not root.value:
        # "GameObject:" type line; the body is its mapping
        start += 1
    body_indent = child_indent(lines, start, len(lines))

    first = segments[0]
    index = find_key(lines, first.name, start, indent=body_indent)
    if index is None:
        index = find_key(lines, first.name, start)
    if index is None:
        raise NotFoundError(f"Property '{first.name}' not found")

    loc = _location_for_key(lines, index, path)
    loc = _apply_index(lines, loc, first, path)

    for segment in segments[1:]:
        inline = _inline_location(loc, segment.name, path)
        if inline is not None:
            if segment.index is not None:
                raise MalformedError(f"'{segment.name}' in '{path}' is not an array")
            loc = inline
            continue

        sec_start, sec_end = loc.section
        if sec_end <= loc.line_index + 1 and not lines[loc.line_index].lstrip().startswith("- "):
            raise NotFoundError(f"Property '{segment.name}' not found in '{path}'")

        head = parse_key_line(lines[sec_start])
        if head is not None and head.item and sec_start == loc.line_index and head.key == segment.name:
            # "- key: value" item whose first key is the segment
            index = sec_start
        else:
            if head is not None and head.item:
                wanted = head.content_indent
                search_from = sec_start
            else:
                wanted = child_indent(lines, sec_start + 1, sec_end)
                search_from = sec_start + 1
            index = find_key(lines, segment.name, search_from, sec_end, indent=wanted)
        if index is None:
            raise NotFoundError(f"Property '{segment.name}' not found in '{path}'")
        loc = _location_for_key(lines, index, path)
        loc = _apply_index(lines, loc, segment, path)

    return loc


def _apply_index(
    lines: List[str], loc: FieldLocation, segment: PathSegment, path: str
) -> FieldLocation:
    if segment.index is None:
        return loc
    items = list_items(lines, loc.line_index)
    if segment.index >= len(items):
        raise MalformedError(
            f"Array index {segment.index} out of range for '{segment.name}' (length {len(items)})"
        )
    stop = item_end(lines, items, segment.index, loc.section[1])
    return _location_for_item(lines, items[segment.index], stop, path)


def get_value(lines: List[str], path: str) -> str:
    return locate(lines, path).value


def set_value(lines: List[str], path: str, value: str) -> Tuple[str, str]:
    """Rewrite the value of ``path`` in ``lines`` (in place).

    Only the value substring changes; indentation, the separator after the
    colon, and any trailing comment are kept.

    Returns:
        Tuple of (old_line, new_line).

    Raises:
        MalformedError: The key owns nested lines and cannot take a scalar.
    """
    loc = locate(lines, path)
    if loc.has_children and not loc.value:
        raise MalformedError(
            f"Property '{path}' has nested fields; address a child path instead"
        )
    if "\n" in value:
        raise MalformedError("Values must be a single line")

    old = lines[loc.line_index]
    prefix = old[: loc.value_start]
    if prefix.endswith(":"):
        prefix += " "
    new = prefix + value + old[loc.value_end :]
    lines[loc.line_index] = new
    return old, new


# ---------------------------------------------------------------------------
# Sequence mutation
# ---------------------------------------------------------------------------


def _sequence_key(lines: List[str], path: str) -> Tuple[int, KeyLine]:
    loc = locate(lines, path)
    parsed = parse_key_line(lines[loc.line_index])
    if parsed is None or loc.value_start != parsed.value_start:
        raise MalformedError(f"'{path}' does not name a sequence key")
    if parsed.value.strip() not in ("", "[]"):
        raise MalformedError(f"'{path}' is not a sequence (value: {parsed.value})")
    return loc.line_index, parsed


def sequence_length(lines: List[str], path: str) -> int:
    index, _ = _sequence_key(lines, path)
    return len(list_items(lines, index))


def insert_item(lines: List[str], path: str, text: str, position: int = -1) -> int:
    """Insert a sequence item under ``path`` and return its index.

    ``text`` is the item body without the ``- `` marker; further lines of a
    multi-line item are indented two columns past the marker. ``position``
    -1 (or past the end) appends. ``key: []`` is converted to block form.
    """
    index, head = _sequence_key(lines, path)
    items = list_items(lines, index)

    if not items:
        item_indent = head.content_indent
        if head.value.strip() == "[]":
            line = lines[index]
            lines[index] = line[: head.value_start].rstrip(" ") + line[head.value_end :]
        insert_at = section_end(lines, index)
        position = 0
    else:
        item_indent = indent_of(lines[items[0]])
        if position < 0 or position >= len(items):
            position = len(items)
            insert_at = section_end(lines, index)
        else:
            insert_at = items[position]

    text_lines = text.split("\n")
    new_lines = [" " * item_indent + "- " + text_lines[0]]
    new_lines.extend(" " * (item_indent + 2) + extra for extra in text_lines[1:])
    lines[insert_at:insert_at] = new_lines
    return position


def remove_item(lines: List[str], path: str, position: int) -> str:
    """Remove the item at ``position`` under ``path`` and return its first-line value.

    Removing the last item leaves ``key: []``.
    """
    index, head = _sequence_key(lines, path)
    items = list_items(lines, index)
    if position < 0 or position >= len(items):
        raise MalformedError(
            f"Array index {position} out of range for '{path}' (length {len(items)})"
        )

    stop = item_end(lines, items, position, section_end(lines, index))
    removed = item_value(lines[items[position]])
    del lines[items[position] : stop]

    if len(items) == 1:
        line = lines[index]
        lines[index] = line[: head.value_start].rstrip(" ") + " []" + line[head.value_end :]
    return removed
