"""
In-memory Unity YAML document.

Loads a scene/prefab file into an ordered list of :class:`Block` objects,
indexes them by fileID and class id, and exposes the derived Transform
hierarchy. Saving re-joins the untouched header and block text so an
unmodified document round-trips byte-for-byte.
"""

import logging
import os
import re
import uuid
from dataclasses import dataclass
from difflib import SequenceMatcher
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from unity_yaml_editor.core.block import Block, format_ref, parse_ref
from unity_yaml_editor.core.class_ids import (
    GAME_OBJECT,
    PREFAB_INSTANCE,
    TRANSFORM_CLASS_IDS,
)
from unity_yaml_editor.core.errors import (
    AmbiguousMatchError,
    DocumentIOError,
    MalformedError,
    NotFoundError,
    NotRecognizedError,
    ValidationFailureError,
)
from unity_yaml_editor.core.tokenizer import (
    CRLF,
    LF,
    has_blocks,
    join_blocks,
    normalize_newlines,
    split_blocks,
)

logger = logging.getLogger(__name__)

YAML_SIGNATURE = "%YAML"

#: Minimum similarity ratio for a fuzzy (non-substring) name match
FUZZY_RATIO_THRESHOLD = 0.6


@dataclass
class NameMatch:
    """A name search hit."""

    file_id: int
    name: str
    kind: str
    score: float
    order: int

    def to_dict(self) -> Dict[str, Union[int, str, float]]:
        return {
            "file_id": self.file_id,
            "name": self.name,
            "kind": self.kind,
            "score": round(self.score, 2),
        }


def score_name(pattern: str, name: str) -> Optional[float]:
    """Fuzzy relevance of ``name`` for ``pattern`` (case-insensitive).

    100 for equality, 85 for a prefix, 70 for a substring; otherwise the
    ``SequenceMatcher`` ratio scaled into 0..50, or None below the threshold.
    """
    p = pattern.lower()
    n = name.lower()
    if not p:
        return None
    if p == n:
        return 100.0
    if n.startswith(p):
        return 85.0
    if p in n:
        return 70.0
    ratio = SequenceMatcher(None, p, n).ratio()
    if ratio < FUZZY_RATIO_THRESHOLD:
        return None
    return ratio * 50.0


class UnityDocument:
    """A parsed Unity YAML file.

    Blocks are parsed lazily on first access. Mutating helpers keep the
    fileID and class indexes in step with the block list.
    """

    def __init__(self, text: str = "", path: Optional[Union[str, Path]] = None):
        self.path: Optional[Path] = Path(path) if path is not None else None
        self._source = text
        self._parsed = False
        self._header = ""
        self._blocks: List[Block] = []
        self._by_id: Dict[int, Block] = {}
        self._by_class: Dict[int, List[Block]] = {}
        self._duplicate_ids: Set[int] = set()
        self._structure_dirty = False
        self._line_ending = LF

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Union[str, Path]) -> "UnityDocument":
        """Read ``path`` and check the Unity YAML signature.

        Raises:
            NotFoundError: The file does not exist.
            NotRecognizedError: The file is not Unity YAML.
            DocumentIOError: The file cannot be read.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise NotFoundError(f"File not found: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8", newline="") as f:
                text = f.read()
        except UnicodeDecodeError:
            raise NotRecognizedError(
                f'File "{file_path}" is not a Unity YAML file (not UTF-8 text)'
            )
        except OSError as e:
            raise DocumentIOError(f"Cannot read file {file_path}: {e}")

        if not text.lstrip("\ufeff").startswith(YAML_SIGNATURE) or not has_blocks(text):
            raise NotRecognizedError(
                f'File "{file_path}" is not a Unity YAML file (missing %YAML/!u! header)'
            )

        logger.debug("Loaded %s (%d bytes)", file_path, len(text))
        return cls(text, file_path)

    @classmethod
    def from_text(cls, text: str, path: Optional[Union[str, Path]] = None) -> "UnityDocument":
        return cls(text, path)

    def _ensure_parsed(self) -> None:
        if self._parsed:
            return
        normalized, self._line_ending = normalize_newlines(self._source)
        self._header, self._blocks = split_blocks(normalized)
        self._source = ""
        self._parsed = True
        self._reindex()

    def _reindex(self) -> None:
        self._by_id = {}
        self._by_class = {}
        self._duplicate_ids = set()
        for block in self._blocks:
            if block.file_id in self._by_id:
                self._duplicate_ids.add(block.file_id)
            else:
                self._by_id[block.file_id] = block
            self._by_class.setdefault(block.class_id, []).append(block)

    # ------------------------------------------------------------------
    # Basic access
    # ------------------------------------------------------------------

    @property
    def header(self) -> str:
        self._ensure_parsed()
        return self._header

    @property
    def blocks(self) -> List[Block]:
        self._ensure_parsed()
        return list(self._blocks)

    def __len__(self) -> int:
        self._ensure_parsed()
        return len(self._blocks)

    def __iter__(self):
        self._ensure_parsed()
        return iter(list(self._blocks))

    @property
    def line_ending(self) -> str:
        """Newline convention of the source text, re-applied on save."""
        self._ensure_parsed()
        return self._line_ending

    @property
    def dirty(self) -> bool:
        self._ensure_parsed()
        return self._structure_dirty or any(block.dirty for block in self._blocks)

    @property
    def file_ids(self) -> Set[int]:
        self._ensure_parsed()
        return set(self._by_id)

    def find_by_id(self, file_id: int) -> Optional[Block]:
        self._ensure_parsed()
        return self._by_id.get(int(file_id))

    def require_block(self, file_id: int, label: str = "Block") -> Block:
        block = self.find_by_id(file_id)
        if block is None:
            raise NotFoundError(f"{label} with fileID {file_id} not found")
        return block

    def find_by_class(self, class_id: int) -> List[Block]:
        self._ensure_parsed()
        return list(self._by_class.get(class_id, []))

    def game_objects(self) -> List[Block]:
        return self.find_by_class(GAME_OBJECT)

    def prefab_instances(self) -> List[Block]:
        return self.find_by_class(PREFAB_INSTANCE)

    def transforms(self) -> List[Block]:
        self._ensure_parsed()
        return [b for b in self._blocks if b.class_id in TRANSFORM_CLASS_IDS]

    # ------------------------------------------------------------------
    # Name lookup
    # ------------------------------------------------------------------

    @staticmethod
    def prefab_instance_name(block: Block) -> Optional[str]:
        """Instance name from the ``m_Name`` modification of a PrefabInstance."""
        lines = block.lines
        for i, line in enumerate(lines):
            stripped = line.strip()
            if stripped == "propertyPath: m_Name" and i + 1 < len(lines):
                value_line = lines[i + 1].strip()
                if value_line.startswith("value:"):
                    return value_line[len("value:"):].strip()
        return None

    def display_name(self, block: Block) -> Optional[str]:
        if block.class_id == PREFAB_INSTANCE:
            return self.prefab_instance_name(block)
        if block.class_id == GAME_OBJECT:
            return block.name
        owner = self.game_object_of(block)
        return owner.name if owner is not None else None

    def find_game_objects_by_name(self, name: str) -> List[Block]:
        return [go for go in self.game_objects() if not go.is_stripped and go.name == name]

    def find_prefab_instances_by_name(self, name: str) -> List[Block]:
        return [pi for pi in self.prefab_instances() if self.prefab_instance_name(pi) == name]

    def find_by_name(self, pattern: str, fuzzy: bool = True) -> List[NameMatch]:
        """Search GameObjects and PrefabInstances by display name.

        Exact mode compares case-sensitively; fuzzy mode scores with
        :func:`score_name`. Results are sorted by score descending with
        document order breaking ties.
        """
        self._ensure_parsed()
        matches: List[NameMatch] = []
        for order, block in enumerate(self._blocks):
            if block.is_stripped:
                continue
            if block.class_id == GAME_OBJECT:
                name, kind = block.name, "GameObject"
            elif block.class_id == PREFAB_INSTANCE:
                name, kind = self.prefab_instance_name(block), "PrefabInstance"
            else:
                continue
            if name is None:
                continue

            if fuzzy:
                score = score_name(pattern, name)
                if score is None:
                    continue
            elif name == pattern:
                score = 100.0
            else:
                continue
            matches.append(NameMatch(block.file_id, name, kind, score, order))

        matches.sort(key=lambda m: (-m.score, m.order))
        return matches

    # ------------------------------------------------------------------
    # GameObject / component relations
    # ------------------------------------------------------------------

    def component_ids(self, game_object: Block) -> List[int]:
        if not game_object.has_field("m_Component"):
            return []
        ids = []
        for value in game_object.array_values("m_Component"):
            ref = parse_ref(value)
            if ref is not None:
                ids.append(ref)
        return ids

    def components_of(self, game_object: Block) -> List[Block]:
        blocks = []
        for ref in self.component_ids(game_object):
            block = self.find_by_id(ref)
            if block is not None:
                blocks.append(block)
        return blocks

    def game_object_of(self, block: Block) -> Optional[Block]:
        ref = block.get_ref("m_GameObject")
        return self.find_by_id(ref) if ref else None

    def transform_of(self, game_object: Block) -> Optional[Block]:
        """The Transform/RectTransform attached to ``game_object``."""
        for component in self.components_of(game_object):
            if component.class_id in TRANSFORM_CLASS_IDS:
                return component
        for transform in self.transforms():
            if transform.get_ref("m_GameObject") == game_object.file_id:
                return transform
        return None

    # ------------------------------------------------------------------
    # Hierarchy relation
    # ------------------------------------------------------------------

    def parent_of(self, transform: Block) -> Optional[Block]:
        father = transform.get_ref("m_Father")
        return self.find_by_id(father) if father else None

    def children_of(self, transform: Block) -> List[int]:
        if not transform.has_field("m_Children"):
            return []
        return transform.array_refs("m_Children")

    def hierarchy(self) -> Dict[int, List[int]]:
        """Parent transform id -> child transform ids, derived from ``m_Father``.

        Scene roots are listed under key 0. Order follows the document.
        """
        relation: Dict[int, List[int]] = {}
        for transform in self.transforms():
            if transform.is_stripped:
                continue
            father = transform.get_ref("m_Father") or 0
            relation.setdefault(father, []).append(transform.file_id)
        return relation

    def descendants(self, transform: Block) -> List[Block]:
        """All transforms below ``transform`` (breadth-first, no duplicates).

        Follows both ``m_Children`` lists and ``m_Father`` back-references so
        a half-consistent file still yields the full subtree.
        """
        relation = self.hierarchy()
        result: List[Block] = []
        seen = {transform.file_id}
        queue = [transform]
        while queue:
            current = queue.pop(0)
            child_ids = list(self.children_of(current))
            for extra in relation.get(current.file_id, []):
                if extra not in child_ids:
                    child_ids.append(extra)
            for child_id in child_ids:
                if child_id in seen:
                    continue
                seen.add(child_id)
                child = self.find_by_id(child_id)
                if child is not None:
                    result.append(child)
                    queue.append(child)
        return result

    def is_ancestor(self, ancestor: Block, transform: Block) -> bool:
        """True if ``ancestor`` is ``transform`` or one of its parents."""
        seen: Set[int] = set()
        current: Optional[Block] = transform
        while current is not None and current.file_id not in seen:
            if current.file_id == ancestor.file_id:
                return True
            seen.add(current.file_id)
            current = self._hierarchy_parent(current)
        return False

    def _hierarchy_parent(self, transform: Block) -> Optional[Block]:
        # stripped Transforms hang off their instance's m_TransformParent
        if not transform.is_stripped:
            return self.parent_of(transform)
        instance = self.find_by_id(transform.get_ref("m_PrefabInstance") or 0)
        if instance is None:
            return None
        parent_id = instance.get_ref("m_Modification.m_TransformParent")
        return self.find_by_id(parent_id) if parent_id else None

    def hierarchy_roots(self) -> List[Block]:
        roots = []
        for transform in self.transforms():
            if transform.is_stripped:
                continue
            if not transform.get_ref("m_Father"):
                roots.append(transform)
        return roots

    def calculate_root_order(self, parent: Optional[Block]) -> int:
        """Sibling index a newly attached child would get under ``parent``."""
        if parent is None:
            return len(self.hierarchy_roots()) + len(self._root_prefab_instances())
        if parent.is_stripped:
            return len(self.hierarchy().get(parent.file_id, []))
        return len(self.children_of(parent))

    def _root_prefab_instances(self) -> List[Block]:
        roots = []
        for instance in self.prefab_instances():
            parent = instance.get_ref("m_Modification.m_TransformParent")
            if not parent:
                roots.append(instance)
        return roots

    def add_child(self, parent: Block, child_id: int) -> bool:
        """Append ``child_id`` to ``parent``'s ``m_Children`` (once)."""
        if parent.find_array_ref("m_Children", child_id) is not None:
            return False
        parent.insert_array_element("m_Children", format_ref(child_id))
        return True

    def remove_child(self, parent: Block, child_id: int) -> bool:
        """Remove ``child_id`` from ``parent``'s ``m_Children``."""
        if not parent.has_field("m_Children"):
            return False
        position = parent.find_array_ref("m_Children", child_id)
        if position is None:
            return False
        parent.remove_array_element("m_Children", position)
        return True

    # ------------------------------------------------------------------
    # Resolution helpers
    # ------------------------------------------------------------------

    def resolve_game_object(self, identifier: Union[str, int], by_id: bool = False) -> Block:
        """Resolve a GameObject by name, or by fileID when ``by_id``.

        A fileID of a component resolves to its owning GameObject. When
        resolving by name finds nothing and the identifier is numeric, it is
        tried as a fileID.

        Raises:
            NotFoundError: Nothing matches.
            AmbiguousMatchError: Several GameObjects share the name.
        """
        text = str(identifier).strip()
        if not by_id:
            matches = self.find_game_objects_by_name(text)
            if len(matches) > 1:
                raise AmbiguousMatchError(text, [m.file_id for m in matches])
            if matches:
                return matches[0]
            if not _is_int(text):
                raise NotFoundError(f'GameObject "{text}" not found')

        file_id = parse_file_id(text)
        block = self.find_by_id(file_id)
        if block is None:
            raise NotFoundError(f"GameObject with fileID {file_id} not found")
        if block.class_id == GAME_OBJECT:
            return block
        owner = self.game_object_of(block)
        if owner is None:
            raise NotFoundError(
                f"fileID {file_id} is a {block.type_name}, not a GameObject or component"
            )
        return owner

    def resolve_transform(self, identifier: Union[str, int], by_id: bool = False) -> Block:
        """Resolve the Transform of a GameObject, or a prefab instance's stripped root.

        Names that match no GameObject fall back to PrefabInstance names
        (the ``m_Name`` modification).
        """
        text = str(identifier).strip()
        if by_id or _is_int(text):
            if by_id or not self.find_game_objects_by_name(text):
                block = self.find_by_id(parse_file_id(text))
                if block is not None and block.class_id in TRANSFORM_CLASS_IDS:
                    return block
                if block is not None and block.class_id == PREFAB_INSTANCE:
                    return self._stripped_root_or_raise(block)

        try:
            game_object = self.resolve_game_object(text, by_id=by_id)
        except NotFoundError:
            if by_id:
                raise
            instances = self.find_prefab_instances_by_name(text)
            if len(instances) > 1:
                raise AmbiguousMatchError(
                    text, [i.file_id for i in instances], kind="PrefabInstances"
                )
            if not instances:
                raise
            return self._stripped_root_or_raise(instances[0])

        transform = self.transform_of(game_object)
        if transform is None:
            raise MalformedError(f'GameObject "{game_object.name}" has no Transform')
        return transform

    def _stripped_root_or_raise(self, instance: Block) -> Block:
        root = self.stripped_root_transform(instance)
        if root is None:
            raise MalformedError(
                f"PrefabInstance {instance.file_id} has no stripped root Transform"
            )
        return root

    def stripped_blocks_of(self, instance: Block) -> List[Block]:
        return [
            block
            for block in self._blocks_view()
            if block.is_stripped and block.get_ref("m_PrefabInstance") == instance.file_id
        ]

    def stripped_root_transform(self, instance: Block) -> Optional[Block]:
        """The stripped Transform of ``instance`` that hangs off ``m_TransformParent``."""
        parent_id = instance.get_ref("m_Modification.m_TransformParent") or 0
        candidates = [
            b for b in self.stripped_blocks_of(instance) if b.class_id in TRANSFORM_CLASS_IDS
        ]
        if not candidates:
            return None
        if parent_id:
            parent = self.find_by_id(parent_id)
            if parent is not None:
                for candidate in candidates:
                    if parent.find_array_ref("m_Children", candidate.file_id) is not None:
                        return candidate
        return candidates[0]

    def find_prefab_root(self) -> Optional[Tuple[Block, Block]]:
        """(GameObject, Transform) of the root object in a prefab file."""
        for transform in self.hierarchy_roots():
            game_object = self.game_object_of(transform)
            if game_object is not None:
                return game_object, transform
        return None

    def _blocks_view(self) -> List[Block]:
        self._ensure_parsed()
        return self._blocks

    # ------------------------------------------------------------------
    # Structural mutation
    # ------------------------------------------------------------------

    def generate_file_id(self, reserved: Iterable[int] = ()) -> int:
        """Random positive 63-bit fileID unused in this document."""
        taken = self.file_ids | set(reserved)
        while True:
            candidate = uuid.uuid4().int >> 65
            if candidate and candidate not in taken:
                return candidate

    def append_block(self, block: Union[Block, str]) -> Block:
        """Append a block (or raw block text) at the end of the document."""
        self._ensure_parsed()
        if isinstance(block, str):
            block = Block(block)
        if block.file_id in self._by_id:
            raise MalformedError(f"fileID {block.file_id} already exists in document")
        if self._blocks and not self._blocks[-1].raw.endswith("\n"):
            last = self._blocks[-1]
            last.replace_raw(last.raw + "\n")
        elif not self._blocks and self._header and not self._header.endswith("\n"):
            self._header += "\n"
        if not block.raw.endswith("\n"):
            block = Block(block.raw + "\n")
        self._blocks.append(block)
        self._by_id[block.file_id] = block
        self._by_class.setdefault(block.class_id, []).append(block)
        self._structure_dirty = True
        return block

    def remove_blocks(self, file_ids: Iterable[int]) -> int:
        """Remove every block whose fileID is in ``file_ids``."""
        self._ensure_parsed()
        doomed = set(file_ids)
        before = len(self._blocks)
        self._blocks = [b for b in self._blocks if b.file_id not in doomed]
        removed = before - len(self._blocks)
        if removed:
            self._structure_dirty = True
            self._reindex()
        return removed

    def replace_file_id_refs(self, mapping: Dict[int, int]) -> None:
        """Remap local references across every block."""
        for block in self._blocks_view():
            block.remap_file_ids(mapping)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def serialize(self) -> str:
        self._ensure_parsed()
        text = join_blocks(self._header, self._blocks)
        if self.line_ending == CRLF:
            text = text.replace(LF, CRLF)
        return text

    def validate(self) -> List[str]:
        """Structural problems that would make Unity reject the file."""
        self._ensure_parsed()
        issues = []
        if not self._header.lstrip("\ufeff").startswith("%YAML 1.1"):
            issues.append("Missing %YAML 1.1 header")
        if not self._blocks:
            issues.append("No --- !u! blocks found")
        for file_id in sorted(self._duplicate_ids):
            issues.append(f"Duplicate fileID {file_id}")
        for block in self._blocks:
            for match in _GUID_PATTERN.finditer(block.body):
                guid = match.group(1)
                if len(guid) != 32:
                    issues.append(
                        f"Block {block.file_id} has malformed guid '{guid}' ({len(guid)} chars)"
                    )
        return issues

    def save(self, path: Optional[Union[str, Path]] = None) -> int:
        """Atomically write the document and return the number of bytes written.

        Writes to ``<name>.tmp`` in the target directory, then replaces the
        target. The temp file is removed if anything fails.

        Raises:
            DocumentIOError: The directory is missing or the write failed.
        """
        target = Path(path) if path is not None else self.path
        if target is None:
            raise DocumentIOError("No output path for document")
        if not target.parent.is_dir():
            raise DocumentIOError(f"Directory does not exist: {target.parent}")

        data = self.serialize().encode("utf-8")
        temp_file = target.with_name(target.name + ".tmp")
        try:
            with open(temp_file, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            temp_file.replace(target)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise DocumentIOError(f"Failed to write {target}: {e}")

        self.path = target
        self._structure_dirty = False
        for block in self._blocks:
            block.dirty = False
        logger.info("Saved %s (%d bytes, %d blocks)", target, len(data), len(self._blocks))
        return len(data)


_GUID_PATTERN = re.compile(r"guid:\s*([0-9A-Za-z]+)")


def _is_int(text: str) -> bool:
    return text.lstrip("-").isdigit()


def parse_file_id(value: Union[str, int]) -> int:
    """Parse a user-supplied fileID.

    Raises:
        ValidationFailureError: ``value`` is not an integer.
    """
    text = str(value).strip()
    if not _is_int(text):
        raise ValidationFailureError(f"Invalid fileID '{text}': must be an integer", field="file_id")
    return int(text)
