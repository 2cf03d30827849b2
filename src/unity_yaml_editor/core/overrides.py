"""
PrefabInstance modification lists.

A PrefabInstance block records its local overrides under ``m_Modification``::

    m_Modification:
      serializedVersion: 3
      m_TransformParent: {fileID: 0}
      m_Modifications:
      - target: {fileID: 400000, guid: 5f3c..., type: 3}
        propertyPath: m_LocalPosition.x
        value: 2
        objectReference: {fileID: 0}
      m_RemovedComponents: []
      m_RemovedGameObjects: []

Entries are keyed by (target fileID, propertyPath). Duplicate paths may
coexist; lookups act on the first match.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from unity_yaml_editor.core import fields
from unity_yaml_editor.core.block import Block, REF_PATTERN, parse_ref
from unity_yaml_editor.core.class_ids import PREFAB_INSTANCE
from unity_yaml_editor.core.document import UnityDocument
from unity_yaml_editor.core.errors import (
    AmbiguousMatchError,
    MalformedError,
    NotFoundError,
    ValidationFailureError,
)
from unity_yaml_editor.core.templates import MODIFICATION_ENTRY
from unity_yaml_editor.core.validation import validate_value

logger = logging.getLogger(__name__)

MODIFICATIONS = "m_Modification.m_Modifications"
REMOVED_COMPONENTS = "m_Modification.m_RemovedComponents"
REMOVED_GAME_OBJECTS = "m_Modification.m_RemovedGameObjects"
ADDED_GAME_OBJECTS = "m_Modification.m_AddedGameObjects"
ADDED_COMPONENTS = "m_Modification.m_AddedComponents"
TRANSFORM_PARENT = "m_Modification.m_TransformParent"

NULL_REF = "{fileID: 0}"
PREFAB_ASSET_TYPE = 3


@dataclass
class Modification:
    """One ``m_Modifications`` entry."""

    index: int
    target: str
    property_path: str
    value: str
    object_reference: str

    @property
    def target_file_id(self) -> Optional[int]:
        return parse_ref(self.target)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "target": self.target,
            "target_file_id": self.target_file_id,
            "property_path": self.property_path,
            "value": self.value,
            "object_reference": self.object_reference,
        }


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def find_prefab_instance(doc: UnityDocument, identifier: Union[str, int]) -> Block:
    """Resolve a PrefabInstance by fileID or by its ``m_Name`` override.

    Raises:
        NotFoundError: No PrefabInstance matches.
        AmbiguousMatchError: Several instances carry the name.
    """
    text = str(identifier).strip()
    if text.lstrip("-").isdigit():
        block = doc.find_by_id(int(text))
        if block is not None and block.class_id == PREFAB_INSTANCE:
            return block

    matches = doc.find_prefab_instances_by_name(text)
    if len(matches) > 1:
        raise AmbiguousMatchError(text, [m.file_id for m in matches], kind="PrefabInstances")
    if not matches:
        raise NotFoundError(f"PrefabInstance {text} not found")
    return matches[0]


def _require_instance(block: Block) -> None:
    if block.class_id != PREFAB_INSTANCE:
        raise ValidationFailureError(
            f"Block {block.file_id} is a {block.type_name}, not a PrefabInstance",
            field="prefab_instance",
        )


def source_prefab_guid(instance: Block) -> Optional[str]:
    match = REF_PATTERN.search(instance.find_field("m_SourcePrefab") or "")
    return match.group(2) if match and match.group(2) else None


def _require_list(instance: Block, path: str) -> None:
    if not instance.has_field(path):
        key = path.rsplit(".", 1)[-1]
        raise MalformedError(f"{key} property not found in PrefabInstance {instance.file_id}")


def list_entries(block: Block, path: str) -> List[Dict[str, str]]:
    """Key/value pairs of each item of a list of mappings.

    A scalar item such as ``- {fileID: 5}`` yields ``{"": "{fileID: 5}"}``.
    """
    lines = block.lines
    loc = fields.locate(lines, path)
    items = fields.list_items(lines, loc.line_index)
    entries: List[Dict[str, str]] = []
    for position, start in enumerate(items):
        end = fields.item_end(lines, items, position, loc.section[1])
        values: Dict[str, str] = {}
        for i in range(start, end):
            parsed = fields.parse_key_line(lines[i])
            if parsed is not None:
                values.setdefault(parsed.key, parsed.value)
        if not values:
            values[""] = fields.item_value(lines[start])
        entries.append(values)
    return entries


def list_modifications(instance: Block) -> List[Modification]:
    """All entries of ``m_Modifications`` in order."""
    _require_instance(instance)
    _require_list(instance, MODIFICATIONS)
    return [
        Modification(
            index=position,
            target=values.get("target", NULL_REF),
            property_path=values.get("propertyPath", ""),
            value=values.get("value", ""),
            object_reference=values.get("objectReference", NULL_REF),
        )
        for position, values in enumerate(list_entries(instance, MODIFICATIONS))
    ]


def added_object_ids(instance: Block, path: str = ADDED_GAME_OBJECTS) -> List[int]:
    """fileIDs listed in ``m_AddedGameObjects``/``m_AddedComponents``.

    Handles both ``- addedObject: {fileID: N}`` entries and bare references.
    """
    if not instance.has_field(path):
        return []
    ids = []
    for values in list_entries(instance, path):
        ref = parse_ref(values.get("addedObject", values.get("", "")))
        if ref:
            ids.append(ref)
    return ids


def unlink_added_object(instance: Block, file_id: int, path: str = ADDED_GAME_OBJECTS) -> bool:
    """Drop the entry of ``path`` that adds ``file_id``."""
    if not instance.has_field(path):
        return False
    for position, values in enumerate(list_entries(instance, path)):
        if parse_ref(values.get("addedObject", values.get("", ""))) == file_id:
            instance.remove_array_element(path, position)
            return True
    return False


def find_modification(
    instance: Block, property_path: str, target: Optional[int] = None
) -> Optional[Modification]:
    """First entry matching ``property_path`` (and ``target`` fileID when given)."""
    for entry in list_modifications(instance):
        if entry.property_path != property_path:
            continue
        if target is not None and entry.target_file_id != target:
            continue
        return entry
    return None


def normalize_target(instance: Block, target: Union[str, int, None]) -> Optional[str]:
    """Turn a caller-supplied target into a ``{fileID: N, guid: G, type: 3}`` reference.

    A bare fileID is completed with the instance's source prefab GUID.
    """
    if target is None or str(target).strip() == "":
        return None
    text = str(target).strip()
    if text.lstrip("-").isdigit():
        guid = source_prefab_guid(instance)
        if guid is None:
            raise ValidationFailureError(
                f"PrefabInstance {instance.file_id} has no m_SourcePrefab guid; "
                "pass the full target reference",
                field="target",
            )
        return f"{{fileID: {int(text)}, guid: {guid}, type: {PREFAB_ASSET_TYPE}}}"
    if parse_ref(text) is None:
        raise ValidationFailureError(
            f"Invalid target reference '{text}' (expected {{fileID: N, guid: G, type: 3}})",
            field="target",
        )
    return text


# ---------------------------------------------------------------------------
# Modification list mutation
# ---------------------------------------------------------------------------


def upsert_override(
    doc: UnityDocument,
    instance: Block,
    property_path: str,
    value: str,
    target: Union[str, int, None] = None,
    object_reference: Optional[str] = None,
) -> Dict[str, Any]:
    """Replace the value of a matching override or append a new one.

    New entries need a target. Without an explicit one it is copied from an
    existing entry whose property path shares the same root property.

    Returns:
        Dict with ``action`` (``updated`` or ``added``) and the entry.
    """
    _require_instance(instance)
    validate_value(value)
    object_reference = object_reference or NULL_REF
    target_ref = normalize_target(instance, target)
    target_id = parse_ref(target_ref) if target_ref else None

    existing = find_modification(instance, property_path, target_id)
    if existing is not None:
        base = f"{MODIFICATIONS}[{existing.index}]"
        instance.set_field(f"{base}.value", value)
        instance.set_field(f"{base}.objectReference", object_reference)
        logger.debug(
            "Updated override %s on PrefabInstance %s", property_path, instance.file_id
        )
        return {
            "action": "updated",
            "index": existing.index,
            "property_path": property_path,
            "value": value,
            "target": existing.target,
        }

    if target_ref is None:
        root = property_path.split(".")[0]
        for entry in list_modifications(instance):
            if entry.property_path.split(".")[0] == root:
                target_ref = entry.target
                break
    if target_ref is None:
        raise ValidationFailureError(
            f'Cannot infer target for new override "{property_path}". '
            'Provide a target (e.g. "{fileID: 400000, guid: ..., type: 3}").',
            field="target",
        )

    entry_text = MODIFICATION_ENTRY.format(
        target=target_ref,
        property_path=property_path,
        value=value,
        object_reference=object_reference,
    )
    index = instance.insert_array_element(MODIFICATIONS, entry_text)
    logger.debug("Added override %s on PrefabInstance %s", property_path, instance.file_id)
    return {
        "action": "added",
        "index": index,
        "property_path": property_path,
        "value": value,
        "target": target_ref,
    }


def remove_override(
    doc: UnityDocument,
    instance: Block,
    property_path: str,
    target: Union[str, int, None] = None,
) -> Modification:
    """Remove the first override matching ``property_path`` (and ``target``).

    Raises:
        NotFoundError: No entry matches.
    """
    _require_instance(instance)
    target_ref = normalize_target(instance, target)
    target_id = parse_ref(target_ref) if target_ref else None
    entry = find_modification(instance, property_path, target_id)
    if entry is None:
        raise NotFoundError(
            f'Override "{property_path}" not found in PrefabInstance {instance.file_id}'
        )
    instance.remove_array_element(MODIFICATIONS, entry.index)
    logger.debug("Removed override %s from PrefabInstance %s", property_path, instance.file_id)
    return entry


# ---------------------------------------------------------------------------
# Removed-component / removed-GameObject lists
# ---------------------------------------------------------------------------


def _add_ref(instance: Block, path: str, reference: Union[str, int]) -> Dict[str, Any]:
    _require_instance(instance)
    _require_list(instance, path)
    ref_text = normalize_target(instance, reference)
    if ref_text is None:
        raise ValidationFailureError("Reference must not be empty", field="reference")
    file_id = parse_ref(ref_text)
    if instance.find_array_ref(path, file_id) is not None:
        return {"action": "unchanged", "reference": ref_text}
    index = instance.insert_array_element(path, ref_text)
    return {"action": "added", "reference": ref_text, "index": index}


def _remove_ref(instance: Block, path: str, reference: Union[str, int]) -> Dict[str, Any]:
    _require_instance(instance)
    _require_list(instance, path)
    ref_text = normalize_target(instance, reference)
    file_id = parse_ref(ref_text) if ref_text else None
    position = instance.find_array_ref(path, file_id) if file_id is not None else None
    if position is None:
        key = path.rsplit(".", 1)[-1]
        raise NotFoundError(f'Reference "{reference}" not found in {key}')
    removed = instance.remove_array_element(path, position)
    return {"action": "removed", "reference": removed, "index": position}


def add_removed_component(doc: UnityDocument, instance: Block, reference: Union[str, int]) -> Dict[str, Any]:
    return _add_ref(instance, REMOVED_COMPONENTS, reference)


def remove_removed_component(doc: UnityDocument, instance: Block, reference: Union[str, int]) -> Dict[str, Any]:
    return _remove_ref(instance, REMOVED_COMPONENTS, reference)


def add_removed_game_object(doc: UnityDocument, instance: Block, reference: Union[str, int]) -> Dict[str, Any]:
    return _add_ref(instance, REMOVED_GAME_OBJECTS, reference)


def remove_removed_game_object(doc: UnityDocument, instance: Block, reference: Union[str, int]) -> Dict[str, Any]:
    return _remove_ref(instance, REMOVED_GAME_OBJECTS, reference)
