"""
File-level editing operations.

Each function loads one document, applies its in-memory mutations and saves
exactly once. Expected failures come back as the second element of a
``(result, error)`` tuple instead of being raised:

    result, error = set_field("Main.unity", "Player", "m_IsActive", "0")
    if error:
        print(error.code, error.message)
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from unity_yaml_editor.core import overrides, structure
from unity_yaml_editor.core.block import Block
from unity_yaml_editor.core.class_ids import GAME_OBJECT
from unity_yaml_editor.core.details import describe_block, scene_entries, scene_summary
from unity_yaml_editor.core.document import UnityDocument, parse_file_id
from unity_yaml_editor.core.errors import (
    EditorError,
    NotFoundError,
    ValidationFailureError,
)
from unity_yaml_editor.core.guid_resolver import GuidResolver, find_project_root
from unity_yaml_editor.core.pagination import DEFAULT_PAGE_SIZE, paginate
from unity_yaml_editor.core.references import DEFAULT_MAX_DEPTH, trace
from unity_yaml_editor.core.validation import validate_document, validate_value

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
Result = Tuple[Optional[Dict[str, Any]], Optional[EditorError]]


def _run(
    file_path: PathLike,
    operation: Callable[[UnityDocument], Dict[str, Any]],
    save: bool = True,
) -> Result:
    """Load ``file_path``, apply ``operation`` and save once on success."""
    try:
        doc = UnityDocument.load(file_path)
        result = operation(doc)
        payload: Dict[str, Any] = {"file": str(file_path)}
        payload.update(result)
        if save:
            payload["bytes_written"] = doc.save()
        return payload, None
    except EditorError as e:
        logger.debug("%s failed on %s: %s", getattr(operation, "__name__", "operation"), file_path, e)
        return None, e


def resolve_block(doc: UnityDocument, target: Union[str, int], by_id: bool = False) -> Block:
    """A block by fileID, or a GameObject by name.

    Numeric targets are tried as fileIDs first unless a GameObject carries
    that exact name.
    """
    text = str(target).strip()
    if by_id:
        return doc.require_block(parse_file_id(text))
    if text.lstrip("-").isdigit() and not doc.find_game_objects_by_name(text):
        block = doc.find_by_id(int(text))
        if block is not None:
            return block
    return doc.resolve_game_object(text)


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


def read_scene(
    file_path: PathLike,
    offset: int = 0,
    page_size: int = DEFAULT_PAGE_SIZE,
    verbose: bool = False,
    summary: bool = False,
) -> Result:
    """List GameObjects and PrefabInstances (one page), or summary counts."""

    def operation(doc: UnityDocument) -> Dict[str, Any]:
        if summary:
            return {"summary": scene_summary(doc)}
        page = paginate(scene_entries(doc, verbose=verbose), offset, page_size)
        return {
            "objects": page.items,
            "count": len(page.items),
            "pagination": page.to_meta(),
        }

    return _run(file_path, operation, save=False)


def read_block(file_path: PathLike, target: Union[str, int], by_id: bool = False) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        return {"block": describe_block(doc, resolve_block(doc, target, by_id)).to_dict()}

    return _run(file_path, operation, save=False)


def read_field(
    file_path: PathLike, target: Union[str, int], path: str, by_id: bool = False
) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        block = resolve_block(doc, target, by_id)
        loc = block.locate(path)
        return {
            "file_id": block.file_id,
            "type": block.type_name,
            "path": path,
            "value": loc.value.strip(),
            "line": loc.line,
        }

    return _run(file_path, operation, save=False)


def find_objects(
    file_path: PathLike,
    pattern: str,
    exact: bool = False,
    offset: int = 0,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        matches = [m.to_dict() for m in doc.find_by_name(pattern, fuzzy=not exact)]
        page = paginate(matches, offset, page_size)
        return {
            "pattern": pattern,
            "fuzzy": not exact,
            "matches": page.items,
            "count": len(page.items),
            "pagination": page.to_meta(),
        }

    return _run(file_path, operation, save=False)


def list_overrides(file_path: PathLike, instance: Union[str, int]) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        block = overrides.find_prefab_instance(doc, instance)
        entries = overrides.list_modifications(block)
        return {
            "prefab_instance_id": block.file_id,
            "modifications": [e.to_dict() for e in entries],
            "count": len(entries),
        }

    return _run(file_path, operation, save=False)


def trace_references(
    file_path: PathLike,
    start: Union[str, int],
    direction: str = "both",
    max_depth: int = DEFAULT_MAX_DEPTH,
    by_id: bool = False,
) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        block = resolve_block(doc, start, by_id)
        return trace(doc, block.file_id, direction, max_depth).to_dict()

    return _run(file_path, operation, save=False)


def validate_file(file_path: PathLike) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        report = validate_document(doc, file_path)
        report.pop("file", None)
        return report

    return _run(file_path, operation, save=False)


# ---------------------------------------------------------------------------
# Field edits
# ---------------------------------------------------------------------------


def _set_one(doc: UnityDocument, target: Union[str, int], path: str, value: str, by_id: bool) -> Dict[str, Any]:
    validate_value(value)
    block = resolve_block(doc, target, by_id)
    old_line, new_line = block.set_field(path, value)
    logger.debug("Set %s on %s", path, block.file_id)
    return {
        "file_id": block.file_id,
        "path": path,
        "old_line": old_line,
        "new_line": new_line,
        "value": value,
    }


def set_field(
    file_path: PathLike,
    target: Union[str, int],
    path: str,
    value: str,
    by_id: bool = False,
) -> Result:
    """Rewrite one field value in place."""
    return _run(file_path, lambda doc: _set_one(doc, target, path, value, by_id))


def batch_set_fields(file_path: PathLike, edits: List[Dict[str, Any]]) -> Result:
    """Apply several field edits and save once.

    Each edit is ``{"file_id" | "name": ..., "path": ..., "value": ...}``. The
    first failing edit aborts the batch before anything is written.
    """

    def operation(doc: UnityDocument) -> Dict[str, Any]:
        if not edits:
            raise ValidationFailureError("Batch must contain at least one edit", field="edits")
        applied = []
        for position, edit in enumerate(edits):
            if not isinstance(edit, dict):
                raise ValidationFailureError(f"Edit {position} is not an object", field="edits")
            missing = [k for k in ("path", "value") if k not in edit]
            if missing or ("file_id" not in edit and "name" not in edit):
                raise ValidationFailureError(
                    f"Edit {position} needs file_id or name, path and value", field="edits"
                )
            by_id = "file_id" in edit
            target = edit["file_id"] if by_id else edit["name"]
            try:
                applied.append(_set_one(doc, target, str(edit["path"]), str(edit["value"]), by_id))
            except EditorError as e:
                e.message = f"Edit {position} failed: {e.message}"
                e.args = (e.message,)
                raise
        return {"applied": applied, "count": len(applied)}

    return _run(file_path, operation)


def array_length(file_path: PathLike, target: Union[str, int], path: str, by_id: bool = False) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        block = resolve_block(doc, target, by_id)
        return {"file_id": block.file_id, "path": path, "length": block.array_length(path)}

    return _run(file_path, operation, save=False)


def insert_array_element(
    file_path: PathLike,
    target: Union[str, int],
    path: str,
    value: str,
    index: int = -1,
    by_id: bool = False,
) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        validate_value(value)
        block = resolve_block(doc, target, by_id)
        position = block.insert_array_element(path, value, index)
        return {
            "file_id": block.file_id,
            "path": path,
            "index": position,
            "value": value,
            "length": block.array_length(path),
        }

    return _run(file_path, operation)


def remove_array_element(
    file_path: PathLike,
    target: Union[str, int],
    path: str,
    index: int,
    by_id: bool = False,
) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        block = resolve_block(doc, target, by_id)
        removed = block.remove_array_element(path, index)
        return {
            "file_id": block.file_id,
            "path": path,
            "index": index,
            "removed": removed,
            "length": block.array_length(path),
        }

    return _run(file_path, operation)


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------


def create_game_object(
    file_path: PathLike,
    name: str,
    parent: Optional[Union[str, int]] = None,
    by_id: bool = False,
) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        game_object, transform = structure.add_game_object(doc, name, parent, by_id)
        return {
            "name": name,
            "game_object_id": game_object.file_id,
            "transform_id": transform.file_id,
            "parent_transform_id": transform.get_ref("m_Father") or 0,
        }

    return _run(file_path, operation)


def add_component(
    file_path: PathLike,
    game_object: Union[str, int],
    component: str,
    by_id: bool = False,
) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        owner = doc.resolve_game_object(game_object, by_id=by_id)
        block = structure.add_component(doc, owner, component)
        return {
            "game_object_id": owner.file_id,
            "component_id": block.file_id,
            "class_id": block.class_id,
            "type": block.type_name,
        }

    return _run(file_path, operation)


def create_block(
    file_path: PathLike,
    class_id: Union[str, int],
    name: Optional[str] = None,
    parent: Optional[Union[str, int]] = None,
    by_id: bool = False,
) -> Result:
    """Create a GameObject (with Transform) or a built-in component by class."""

    def operation(doc: UnityDocument) -> Dict[str, Any]:
        block = structure.add_block(doc, class_id, name, parent=parent, by_id=by_id)
        result: Dict[str, Any] = {
            "file_id": block.file_id,
            "class_id": block.class_id,
            "type": block.type_name,
        }
        if block.class_id == GAME_OBJECT:
            transform = doc.transform_of(block)
            result["name"] = block.name
            result["transform_id"] = transform.file_id if transform is not None else None
        else:
            result["game_object_id"] = block.get_ref("m_GameObject")
        return result

    return _run(file_path, operation)


def remove_component(file_path: PathLike, file_id: Union[str, int]) -> Result:
    return _run(file_path, lambda doc: structure.remove_component(doc, parse_file_id(file_id)))


def delete_game_object(
    file_path: PathLike,
    target: Union[str, int],
    cascade: bool = True,
    by_id: bool = False,
) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        game_object = doc.resolve_game_object(target, by_id=by_id)
        result = structure.delete_game_object(doc, game_object, cascade=cascade)
        result["name"] = game_object.name
        return result

    return _run(file_path, operation)


def delete_block(file_path: PathLike, file_id: Union[str, int], cascade: bool = True) -> Result:
    return _run(
        file_path, lambda doc: structure.delete_block(doc, parse_file_id(file_id), cascade)
    )


def delete_prefab_instance(file_path: PathLike, instance: Union[str, int]) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        block = overrides.find_prefab_instance(doc, instance)
        result = structure.delete_prefab_instance(doc, block)
        result["prefab_instance_id"] = block.file_id
        return result

    return _run(file_path, operation)


def reparent(
    file_path: PathLike,
    child: Union[str, int],
    new_parent: Union[str, int],
    by_id: bool = False,
) -> Result:
    return _run(file_path, lambda doc: structure.reparent(doc, child, new_parent, by_id))


def clone_game_object(
    file_path: PathLike,
    target: Union[str, int],
    new_name: Optional[str] = None,
    by_id: bool = False,
) -> Result:
    return _run(file_path, lambda doc: structure.clone_block(doc, target, new_name, by_id))


def make_resolver(
    file_path: PathLike,
    project_root: Optional[PathLike] = None,
    cache_path: Optional[PathLike] = None,
    persist: bool = False,
) -> Optional[GuidResolver]:
    """Resolver for ``project_root``, or for the project enclosing ``file_path``."""
    root = Path(project_root) if project_root else find_project_root(Path(file_path).parent)
    if root is None:
        return None
    return GuidResolver(root, cache_path=cache_path, persist=persist)


def unpack_prefab_instance(
    file_path: PathLike,
    instance: Union[str, int],
    resolver: Optional[GuidResolver] = None,
) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        block = overrides.find_prefab_instance(doc, instance)
        result = structure.unpack_instance(doc, block, resolver)
        result["prefab_instance_id"] = block.file_id
        return result

    return _run(file_path, operation)


# ---------------------------------------------------------------------------
# Prefab overrides
# ---------------------------------------------------------------------------


def set_override(
    file_path: PathLike,
    instance: Union[str, int],
    property_path: str,
    value: str,
    target: Optional[str] = None,
    object_reference: Optional[str] = None,
) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        block = overrides.find_prefab_instance(doc, instance)
        result = overrides.upsert_override(
            doc, block, property_path, value, target=target, object_reference=object_reference
        )
        result["prefab_instance_id"] = block.file_id
        return result

    return _run(file_path, operation)


def remove_override(
    file_path: PathLike,
    instance: Union[str, int],
    property_path: str,
    target: Optional[str] = None,
) -> Result:
    def operation(doc: UnityDocument) -> Dict[str, Any]:
        block = overrides.find_prefab_instance(doc, instance)
        removed = overrides.remove_override(doc, block, property_path, target=target)
        return {"prefab_instance_id": block.file_id, "removed": removed.to_dict()}

    return _run(file_path, operation)


_REMOVED_LIST_OPERATIONS = {
    ("component", "add"): overrides.add_removed_component,
    ("component", "remove"): overrides.remove_removed_component,
    ("game_object", "add"): overrides.add_removed_game_object,
    ("game_object", "remove"): overrides.remove_removed_game_object,
}


def edit_removed_list(
    file_path: PathLike,
    instance: Union[str, int],
    kind: str,
    action: str,
    reference: str,
) -> Result:
    """Add to or remove from ``m_RemovedComponents``/``m_RemovedGameObjects``."""
    handler = _REMOVED_LIST_OPERATIONS.get((kind, action))
    if handler is None:
        return None, ValidationFailureError(
            f"Unsupported removed-list operation {action} {kind}", field="action"
        )

    def operation(doc: UnityDocument) -> Dict[str, Any]:
        block = overrides.find_prefab_instance(doc, instance)
        result = handler(doc, block, reference)
        result["prefab_instance_id"] = block.file_id
        return result

    return _run(file_path, operation)


# ---------------------------------------------------------------------------
# GUID cache
# ---------------------------------------------------------------------------


def resolve_guid(resolver: GuidResolver, guid: str) -> Result:
    path = resolver.resolve(guid)
    if path is None:
        return None, NotFoundError(f"GUID {guid} not found under {resolver.project_root}")
    return {"guid": guid.lower(), "path": str(path), "project_root": str(resolver.project_root)}, None


def rebuild_guid_cache(resolver: GuidResolver) -> Result:
    entries = resolver.rebuild()
    result: Dict[str, Any] = {
        "project_root": str(resolver.project_root),
        "entry_count": len(entries),
        "persisted": resolver.persist,
    }
    if resolver.persist:
        result["cache_path"] = str(resolver.cache_path)
    return result, None
