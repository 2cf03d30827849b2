"""
A single top-level block of a Unity YAML document.

Each block starts with a header line::

    --- !u!<class_id> &<file_id>[ stripped]

followed by a type line (``GameObject:``) and indented body lines. The raw
text is kept verbatim; field edits rewrite single lines in place through
:mod:`unity_yaml_editor.core.fields`.
"""

import re
from typing import Dict, List, Optional, Tuple

from unity_yaml_editor.core import fields
from unity_yaml_editor.core.class_ids import get_class_name
from unity_yaml_editor.core.errors import MalformedError, NotFoundError

HEADER_PATTERN = re.compile(r"^--- !u!(\d+) &(-?\d+)( stripped)?")

#: ``{fileID: N}`` or ``{fileID: N, guid: G, type: T}``
REF_PATTERN = re.compile(r"\{fileID:\s*(-?\d+)(?:,\s*guid:\s*([0-9A-Za-z]*))?[^{}]*\}")

_FILE_ID_TOKEN = re.compile(r"(fileID:\s*)(-?\d+)")


def parse_ref(value: Optional[str]) -> Optional[int]:
    """Extract the fileID from a ``{fileID: N, ...}`` value, or None."""
    if not value:
        return None
    match = REF_PATTERN.search(value)
    return int(match.group(1)) if match else None


def format_ref(file_id: int) -> str:
    return f"{{fileID: {file_id}}}"


class Block:
    """One ``--- !u!`` block.

    Attributes:
        file_id: Unique identifier within the document
        class_id: Unity class id from the ``!u!`` tag
        is_stripped: True for prefab-instance companion blocks
        dirty: True once the block text has been changed
    """

    def __init__(self, raw: str):
        match = HEADER_PATTERN.match(raw)
        if not match:
            raise MalformedError(f"Invalid block header: {raw.split(chr(10), 1)[0]!r}")
        self.class_id = int(match.group(1))
        self.file_id = int(match.group(2))
        self.is_stripped = match.group(3) is not None
        self._raw = raw
        self.dirty = False

    def __repr__(self) -> str:
        return f"Block({self.type_name} &{self.file_id})"

    # ------------------------------------------------------------------
    # Raw text
    # ------------------------------------------------------------------

    @property
    def raw(self) -> str:
        return self._raw

    @property
    def lines(self) -> List[str]:
        return self._raw.split("\n")

    @property
    def header_line(self) -> str:
        return self._raw.split("\n", 1)[0]

    @property
    def type_name(self) -> str:
        return get_class_name(self.class_id)

    @property
    def body(self) -> str:
        """Everything after the header line."""
        parts = self._raw.split("\n", 1)
        return parts[1] if len(parts) > 1 else ""

    def replace_raw(self, raw: str) -> None:
        """Replace the block text, keeping the header identity."""
        match = HEADER_PATTERN.match(raw)
        if not match or int(match.group(2)) != self.file_id:
            raise MalformedError(f"Replacement text does not keep header &{self.file_id}")
        self.class_id = int(match.group(1))
        self.is_stripped = match.group(3) is not None
        if raw != self._raw:
            self._raw = raw
            self.dirty = True

    def _commit(self, lines: List[str]) -> None:
        new_raw = "\n".join(lines)
        if new_raw != self._raw:
            self._raw = new_raw
            self.dirty = True

    # ------------------------------------------------------------------
    # Field access
    # ------------------------------------------------------------------

    def locate(self, path: str) -> fields.FieldLocation:
        return fields.locate(self.lines, path)

    def get_field(self, path: str) -> str:
        """Current value of ``path`` (raises NotFoundError/MalformedError)."""
        return fields.get_value(self.lines, path)

    def find_field(self, path: str) -> Optional[str]:
        """Current value of ``path``, or None if it cannot be located."""
        try:
            return self.get_field(path)
        except (NotFoundError, MalformedError):
            return None

    def has_field(self, path: str) -> bool:
        return self.find_field(path) is not None

    def set_field(self, path: str, value: str) -> Tuple[str, str]:
        """Rewrite one value in place and return (old_line, new_line)."""
        lines = self.lines
        old, new = fields.set_value(lines, path, value)
        self._commit(lines)
        return old, new

    def get_ref(self, path: str) -> Optional[int]:
        """fileID referenced by ``path`` (e.g. ``m_Father``), or None."""
        return parse_ref(self.find_field(path))

    @property
    def name(self) -> Optional[str]:
        value = self.find_field("m_Name")
        return value.strip() if value is not None else None

    # ------------------------------------------------------------------
    # Arrays
    # ------------------------------------------------------------------

    def array_length(self, path: str) -> int:
        return fields.sequence_length(self.lines, path)

    def array_values(self, path: str) -> List[str]:
        lines = self.lines
        loc = fields.locate(lines, path)
        return [fields.item_value(lines[i]) for i in fields.list_items(lines, loc.line_index)]

    def array_refs(self, path: str) -> List[int]:
        """fileIDs of the items of a reference list such as ``m_Children``."""
        refs = []
        for value in self.array_values(path):
            ref = parse_ref(value)
            if ref is not None:
                refs.append(ref)
        return refs

    def insert_array_element(self, path: str, value: str, index: int = -1) -> int:
        lines = self.lines
        position = fields.insert_item(lines, path, value, index)
        self._commit(lines)
        return position

    def remove_array_element(self, path: str, index: int) -> str:
        lines = self.lines
        removed = fields.remove_item(lines, path, index)
        self._commit(lines)
        return removed

    def find_array_ref(self, path: str, file_id: int) -> Optional[int]:
        """Index of the first item of ``path`` referencing ``file_id``."""
        for position, value in enumerate(self.array_values(path)):
            if parse_ref(value) == file_id:
                return position
        return None

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def file_id_refs(self, include_external: bool = False) -> List[int]:
        """Distinct non-zero fileIDs referenced in the body, in order of appearance.

        References carrying a non-empty ``guid`` point into another asset
        and are skipped unless ``include_external`` is set.
        """
        seen: Dict[int, None] = {}
        for match in REF_PATTERN.finditer(self.body):
            ref = int(match.group(1))
            if ref == 0:
                continue
            if match.group(2) and not include_external:
                continue
            seen.setdefault(ref, None)
        return list(seen)

    def remap_file_ids(self, mapping: Dict[int, int]) -> None:
        """Rewrite local ``fileID:`` references in the body through ``mapping``.

        References carrying a guid belong to another asset and are left alone.
        """
        header, _, body = self._raw.partition("\n")

        def _swap(match: "re.Match[str]") -> str:
            if match.group(2):
                return match.group(0)
            ref = int(match.group(1))
            if ref not in mapping:
                return match.group(0)
            return _FILE_ID_TOKEN.sub(
                lambda m: f"{m.group(1)}{mapping[ref]}", match.group(0), count=1
            )

        new_body = REF_PATTERN.sub(_swap, body)
        if new_body != body:
            self._raw = f"{header}\n{new_body}"
            self.dirty = True

    def clone(self, new_file_id: int, mapping: Optional[Dict[int, int]] = None) -> "Block":
        """Copy this block under a new fileID, remapping local references."""
        header, sep, body = self._raw.partition("\n")
        new_header = HEADER_PATTERN.sub(
            lambda m: f"--- !u!{m.group(1)} &{new_file_id}{m.group(3) or ''}", header, count=1
        )
        copy = Block(new_header + sep + body)
        if mapping:
            copy.remap_file_ids(mapping)
        copy.dirty = True
        return copy
