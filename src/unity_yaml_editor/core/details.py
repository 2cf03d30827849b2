"""
Tagged views of blocks for read commands.

``describe_block`` picks the variant from the block's class id, so callers
dispatch on ``kind`` instead of probing for optional keys.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union

from unity_yaml_editor.core import fields
from unity_yaml_editor.core.block import Block, REF_PATTERN
from unity_yaml_editor.core.class_ids import (
    GAME_OBJECT,
    MONO_BEHAVIOUR,
    PREFAB_INSTANCE,
    TRANSFORM_CLASS_IDS,
)
from unity_yaml_editor.core.document import UnityDocument


@dataclass
class ComponentSummary:
    file_id: int
    class_id: int
    type_name: str
    script_guid: Optional[str] = None


@dataclass
class GameObjectDetail:
    file_id: int
    name: Optional[str]
    layer: Optional[int]
    tag: Optional[str]
    active: bool
    transform_id: Optional[int]
    parent_id: Optional[int]
    children: List[int] = field(default_factory=list)
    components: List[ComponentSummary] = field(default_factory=list)
    kind: str = "GameObject"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PrefabInstanceDetail:
    file_id: int
    name: Optional[str]
    source_guid: Optional[str]
    transform_parent: int
    modification_count: int
    removed_components: List[int] = field(default_factory=list)
    removed_game_objects: List[int] = field(default_factory=list)
    stripped_blocks: List[int] = field(default_factory=list)
    kind: str = "PrefabInstance"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ComponentDetail:
    file_id: int
    class_id: int
    type_name: str
    game_object_id: Optional[int]
    stripped: bool
    properties: Dict[str, str] = field(default_factory=dict)
    kind: str = "Component"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


BlockDetail = Union[GameObjectDetail, PrefabInstanceDetail, ComponentDetail]


def _int_or_none(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    text = value.strip()
    return int(text) if text.lstrip("-").isdigit() else None


def source_guid(block: Block) -> Optional[str]:
    """GUID of the asset a PrefabInstance (or MonoBehaviour script) points to."""
    path = "m_SourcePrefab" if block.class_id == PREFAB_INSTANCE else "m_Script"
    value = block.find_field(path)
    if value is None:
        return None
    match = REF_PATTERN.search(value)
    return match.group(2) if match and match.group(2) else None


def modification_count(block: Block) -> int:
    if not block.has_field("m_Modification.m_Modifications"):
        return 0
    return block.array_length("m_Modification.m_Modifications")


def _removed_refs(block: Block, key: str) -> List[int]:
    path = f"m_Modification.{key}"
    if not block.has_field(path):
        return []
    return block.array_refs(path)


def top_level_properties(block: Block) -> Dict[str, str]:
    """Top-level ``key: value`` pairs of a block body; sections map to ``""``."""
    lines = block.lines
    start = 1
    if start < len(lines) and not lines[start].startswith(" "):
        start += 1
    indent = fields.child_indent(lines, start, len(lines))
    props: Dict[str, str] = {}
    for line in lines[start:]:
        parsed = fields.parse_key_line(line)
        if parsed is None or parsed.item or parsed.indent != indent:
            continue
        props.setdefault(parsed.key, parsed.value)
    return props


def summarize_component(block: Block) -> ComponentSummary:
    guid = source_guid(block) if block.class_id == MONO_BEHAVIOUR else None
    return ComponentSummary(block.file_id, block.class_id, block.type_name, guid)


def describe_game_object(doc: UnityDocument, block: Block) -> GameObjectDetail:
    transform = doc.transform_of(block)
    parent_id = None
    children: List[int] = []
    if transform is not None:
        parent = doc.parent_of(transform)
        if parent is not None:
            owner = doc.game_object_of(parent)
            parent_id = owner.file_id if owner is not None else parent.file_id
        for child_id in doc.children_of(transform):
            child = doc.find_by_id(child_id)
            owner = doc.game_object_of(child) if child is not None else None
            children.append(owner.file_id if owner is not None else child_id)
    return GameObjectDetail(
        file_id=block.file_id,
        name=block.name,
        layer=_int_or_none(block.find_field("m_Layer")),
        tag=block.find_field("m_TagString"),
        active=(block.find_field("m_IsActive") or "1").strip() == "1",
        transform_id=transform.file_id if transform is not None else None,
        parent_id=parent_id,
        children=children,
        components=[summarize_component(c) for c in doc.components_of(block)],
    )


def describe_prefab_instance(doc: UnityDocument, block: Block) -> PrefabInstanceDetail:
    return PrefabInstanceDetail(
        file_id=block.file_id,
        name=doc.prefab_instance_name(block),
        source_guid=source_guid(block),
        transform_parent=block.get_ref("m_Modification.m_TransformParent") or 0,
        modification_count=modification_count(block),
        removed_components=_removed_refs(block, "m_RemovedComponents"),
        removed_game_objects=_removed_refs(block, "m_RemovedGameObjects"),
        stripped_blocks=[b.file_id for b in doc.stripped_blocks_of(block)],
    )


def describe_block(doc: UnityDocument, block: Block) -> BlockDetail:
    """Build the detail variant matching ``block.class_id``."""
    if block.class_id == GAME_OBJECT and not block.is_stripped:
        return describe_game_object(doc, block)
    if block.class_id == PREFAB_INSTANCE:
        return describe_prefab_instance(doc, block)
    return ComponentDetail(
        file_id=block.file_id,
        class_id=block.class_id,
        type_name=block.type_name,
        game_object_id=block.get_ref("m_GameObject"),
        stripped=block.is_stripped,
        properties=top_level_properties(block),
    )


# ---------------------------------------------------------------------------
# Scene listing
# ---------------------------------------------------------------------------


def _depth(doc: UnityDocument, transform: Optional[Block]) -> int:
    depth = 0
    seen = set()
    current = doc.parent_of(transform) if transform is not None else None
    while current is not None and current.file_id not in seen:
        seen.add(current.file_id)
        depth += 1
        current = doc.parent_of(current)
    return depth


def _owner_id(doc: UnityDocument, transform: Optional[Block]) -> Optional[int]:
    if transform is None:
        return None
    if transform.is_stripped:
        instance = transform.get_ref("m_PrefabInstance")
        return instance or transform.file_id
    owner = doc.game_object_of(transform)
    return owner.file_id if owner is not None else transform.file_id


def scene_entries(doc: UnityDocument, verbose: bool = False) -> List[Dict[str, Any]]:
    """GameObjects and PrefabInstances in document order with hierarchy info."""
    entries: List[Dict[str, Any]] = []
    for block in doc.blocks:
        if block.is_stripped:
            continue
        if block.class_id == GAME_OBJECT:
            transform = doc.transform_of(block)
            parent = doc.parent_of(transform) if transform is not None else None
            entry: Dict[str, Any] = {
                "kind": "GameObject",
                "name": block.name,
                "file_id": block.file_id,
                "parent": _owner_id(doc, parent),
                "depth": _depth(doc, transform),
            }
            if verbose:
                entry["active"] = (block.find_field("m_IsActive") or "1").strip() == "1"
                entry["components"] = [c.type_name for c in doc.components_of(block)]
        elif block.class_id == PREFAB_INSTANCE:
            parent_id = block.get_ref("m_Modification.m_TransformParent") or 0
            parent = doc.find_by_id(parent_id) if parent_id else None
            entry = {
                "kind": "PrefabInstance",
                "name": doc.prefab_instance_name(block),
                "file_id": block.file_id,
                "parent": _owner_id(doc, parent),
                "depth": _depth(doc, parent) + 1 if parent is not None else 0,
            }
            if verbose:
                entry["source_guid"] = source_guid(block)
                entry["modification_count"] = modification_count(block)
        else:
            continue
        entries.append(entry)
    return entries


def scene_summary(doc: UnityDocument) -> Dict[str, Any]:
    """Object counts plus a per-type component count."""
    counts: Dict[str, int] = {}
    for block in doc.blocks:
        if block.class_id in (GAME_OBJECT, PREFAB_INSTANCE) or block.is_stripped:
            continue
        if block.get_ref("m_GameObject") is None and block.class_id not in TRANSFORM_CLASS_IDS:
            continue
        counts[block.type_name] = counts.get(block.type_name, 0) + 1
    return {
        "game_object_count": len([g for g in doc.game_objects() if not g.is_stripped]),
        "prefab_instance_count": len(doc.prefab_instances()),
        "block_count": len(doc),
        "component_counts": dict(sorted(counts.items())),
    }
