"""
Structural mutations: add, delete, reparent, clone and unpack blocks.

Every operation keeps fileIDs unique and keeps both directions of the
Transform hierarchy (``m_Father`` and the parent's ``m_Children``) in step.
Preconditions are checked before the first field is rewritten, so a failed
operation leaves the document untouched.
"""

import logging
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from unity_yaml_editor.core.block import Block, format_ref, parse_ref
from unity_yaml_editor.core.class_ids import (
    GAME_OBJECT,
    PREFAB_INSTANCE,
    TRANSFORM_CLASS_IDS,
    get_class_id,
    get_class_name,
)
from unity_yaml_editor.core.document import UnityDocument
from unity_yaml_editor.core.errors import (
    MalformedError,
    NotFoundError,
    TemplateUnresolvedError,
    ValidationFailureError,
)
from unity_yaml_editor.core.overrides import (
    ADDED_COMPONENTS,
    ADDED_GAME_OBJECTS,
    NULL_REF,
    TRANSFORM_PARENT,
    added_object_ids,
    list_modifications,
    source_prefab_guid,
    unlink_added_object,
)
from unity_yaml_editor.core.templates import (
    ADDED_GAME_OBJECT_ENTRY,
    COMPONENT_DEFAULTS,
    component_yaml,
    game_object_yaml,
)
from unity_yaml_editor.core.tokenizer import split_blocks
from unity_yaml_editor.core.validation import validate_name

logger = logging.getLogger(__name__)

ROOT = "root"

_PREFAB_LINK_FIELDS = ("m_CorrespondingSourceObject", "m_PrefabInstance", "m_PrefabAsset")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _instance_companions(doc: UnityDocument, instance_id: int) -> Set[int]:
    instance = doc.find_by_id(instance_id)
    ids = {instance_id}
    if instance is not None:
        ids.update(b.file_id for b in doc.stripped_blocks_of(instance))
    return ids


def collect_hierarchy(doc: UnityDocument, transform: Block) -> Set[int]:
    """fileIDs of ``transform`` and everything hanging below it.

    Includes the owning GameObjects and their components, nested
    PrefabInstances parented inside the subtree and their stripped blocks.
    """
    ids: Set[int] = set()
    pending = [transform]
    visited: Set[int] = set()
    while pending:
        current = pending.pop()
        if current.file_id in visited:
            continue
        visited.add(current.file_id)
        subtree = [current] + doc.descendants(current)
        subtree_ids = {t.file_id for t in subtree}
        for node in subtree:
            ids.add(node.file_id)
            if node.is_stripped:
                instance_id = node.get_ref("m_PrefabInstance")
                if instance_id:
                    ids.update(_instance_companions(doc, instance_id))
                continue
            owner = doc.game_object_of(node)
            if owner is not None:
                ids.add(owner.file_id)
                ids.update(doc.component_ids(owner))
        for instance in doc.prefab_instances():
            if instance.file_id in ids:
                continue
            if instance.get_ref(TRANSFORM_PARENT) in subtree_ids:
                companions = _instance_companions(doc, instance.file_id)
                ids.update(companions)
                for block_id in companions:
                    block = doc.find_by_id(block_id)
                    if block is not None and block.class_id in TRANSFORM_CLASS_IDS:
                        pending.append(block)
    return ids


def _owning_instance(doc: UnityDocument, transform: Optional[Block]) -> Optional[Block]:
    """PrefabInstance of a stripped transform, or None."""
    if transform is None or not transform.is_stripped:
        return None
    instance_id = transform.get_ref("m_PrefabInstance")
    return doc.find_by_id(instance_id) if instance_id else None


def _attach(doc: UnityDocument, parent: Block, transform_id: int, game_object_id: int) -> None:
    """Link a transform under ``parent``.

    Stripped Transforms carry no ``m_Children``; the owning instance records
    the GameObject in ``m_AddedGameObjects`` instead.
    """
    if not parent.is_stripped:
        doc.add_child(parent, transform_id)
        return
    instance = _owning_instance(doc, parent)
    if game_object_id and instance is not None and instance.has_field(ADDED_GAME_OBJECTS):
        source = parent.find_field("m_CorrespondingSourceObject") or NULL_REF
        instance.insert_array_element(
            ADDED_GAME_OBJECTS,
            ADDED_GAME_OBJECT_ENTRY.format(target=source, file_id=game_object_id),
        )


def _detach_from(doc: UnityDocument, parent: Block, transform_id: int, game_object_id: int) -> None:
    if not parent.is_stripped:
        doc.remove_child(parent, transform_id)
        return
    instance = _owning_instance(doc, parent)
    if game_object_id and instance is not None:
        unlink_added_object(instance, game_object_id)


def _parent_layer(doc: UnityDocument, parent: Optional[Block]) -> int:
    if parent is None:
        return 0
    owner = doc.game_object_of(parent)
    if owner is None:
        return 0
    value = (owner.find_field("m_Layer") or "0").strip()
    return int(value) if value.isdigit() else 0


def _set_if_present(block: Block, path: str, value: str) -> bool:
    if block.has_field(path):
        block.set_field(path, value)
        return True
    return False


def _duplicate_name_warnings(doc: UnityDocument, created: List[Block]) -> List[str]:
    counts: Dict[str, int] = {}
    for game_object in doc.game_objects():
        name = game_object.name or ""
        counts[name] = counts.get(name, 0) + 1
    warnings = []
    for game_object in created:
        count = counts.get(game_object.name or "", 0)
        if count >= 2:
            warnings.append(
                f'Duplicate name "{game_object.name}" now appears {count} times in scene. '
                f"Use fileID {game_object.file_id} to target this clone."
            )
    return warnings


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def add_game_object(
    doc: UnityDocument,
    name: str,
    parent: Union[str, int, None] = None,
    by_id: bool = False,
) -> Tuple[Block, Block]:
    """Create a GameObject with a Transform, optionally under ``parent``.

    The new object inherits the parent GameObject's layer. Under a prefab
    instance's stripped Transform the object is also recorded in the
    instance's ``m_AddedGameObjects``.

    Returns:
        Tuple of (GameObject block, Transform block).
    """
    validate_name(name, "GameObject name")
    parent_transform = doc.resolve_transform(parent, by_id=by_id) if parent is not None else None

    game_object_id = doc.generate_file_id()
    transform_id = doc.generate_file_id(reserved=[game_object_id])
    root_order = doc.calculate_root_order(parent_transform)
    _, blocks = split_blocks(
        game_object_yaml(
            game_object_id,
            transform_id,
            name,
            parent_id=parent_transform.file_id if parent_transform is not None else 0,
            root_order=root_order,
            layer=_parent_layer(doc, parent_transform),
        )
    )
    game_object, transform = (doc.append_block(b) for b in blocks)

    if parent_transform is not None:
        _attach(doc, parent_transform, transform_id, game_object_id)

    logger.info("Created GameObject %r (%s)", name, game_object_id)
    return game_object, transform


def add_component(doc: UnityDocument, game_object: Block, component: Union[str, int]) -> Block:
    """Attach a built-in component with default values to ``game_object``.

    Raises:
        ValidationFailureError: Unknown component type, or one that cannot be
            added this way (GameObject, Transform, scripts, prefab instances).
    """
    class_id = get_class_id(str(component))
    if class_id is None or class_id not in COMPONENT_DEFAULTS:
        supported = ", ".join(sorted(get_class_name(c) for c in COMPONENT_DEFAULTS))
        raise ValidationFailureError(
            f"Unknown or unsupported component type '{component}'. Supported: {supported}",
            field="component",
        )
    if game_object.class_id != GAME_OBJECT or game_object.is_stripped:
        raise ValidationFailureError(
            f"Block {game_object.file_id} is not a GameObject", field="game_object"
        )
    if not game_object.has_field("m_Component"):
        raise MalformedError(f"GameObject {game_object.file_id} has no m_Component list")

    component_id = doc.generate_file_id()
    block = doc.append_block(
        component_yaml(class_id, get_class_name(class_id), component_id, game_object.file_id)
    )
    game_object.insert_array_element("m_Component", f"component: {format_ref(component_id)}")
    logger.info(
        "Added %s (%s) to GameObject %s", block.type_name, component_id, game_object.file_id
    )
    return block


def add_block(
    doc: UnityDocument,
    class_id: Union[int, str],
    display_name: Optional[str] = None,
    parent: Union[str, int, None] = None,
    by_id: bool = False,
) -> Block:
    """Create a new block of ``class_id``.

    GameObjects are created with their Transform and linked under ``parent``.
    Built-in components are attached to the GameObject named by ``parent``.
    """
    resolved = get_class_id(str(class_id))
    if resolved == GAME_OBJECT:
        if display_name is None:
            raise ValidationFailureError("GameObject name cannot be empty", field="name")
        game_object, _ = add_game_object(doc, display_name, parent=parent, by_id=by_id)
        return game_object
    if resolved in COMPONENT_DEFAULTS:
        if parent is None:
            raise ValidationFailureError(
                "Components need a GameObject to attach to", field="parent"
            )
        owner = doc.resolve_game_object(parent, by_id=by_id)
        return add_component(doc, owner, resolved)
    raise ValidationFailureError(
        f"Cannot create blocks of class {class_id}", field="class_id"
    )


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


def remove_component(doc: UnityDocument, file_id: int) -> Dict[str, Any]:
    """Remove one component block and its ``m_Component`` entry."""
    block = doc.require_block(file_id, "Component")
    if block.class_id == GAME_OBJECT:
        raise ValidationFailureError(
            "Cannot remove a GameObject with remove-component. Use delete instead.",
            field="file_id",
        )
    if block.class_id in TRANSFORM_CLASS_IDS:
        raise ValidationFailureError(
            f"Cannot remove a {block.type_name} with remove-component. "
            "Use delete to remove the entire GameObject.",
            field="file_id",
        )
    if block.class_id == PREFAB_INSTANCE:
        raise ValidationFailureError(
            "Cannot remove a PrefabInstance with remove-component. Use delete instead.",
            field="file_id",
        )

    owner = doc.game_object_of(block)
    if owner is not None and owner.has_field("m_Component"):
        position = owner.find_array_ref("m_Component", file_id)
        if position is not None:
            owner.remove_array_element("m_Component", position)
    for instance in doc.prefab_instances():
        unlink_added_object(instance, file_id, ADDED_COMPONENTS)
    doc.remove_blocks([file_id])
    logger.info("Removed %s (%s)", block.type_name, file_id)
    return {"removed_file_id": file_id, "removed_class_id": block.class_id}


def _detach(doc: UnityDocument, transform: Block, keep: Set[int]) -> None:
    parent = doc.parent_of(transform)
    if parent is None or parent.file_id in keep:
        return
    doc.remove_child(parent, transform.file_id)


def delete_game_object(doc: UnityDocument, game_object: Block, cascade: bool = True) -> Dict[str, Any]:
    """Delete a GameObject, its components and (with ``cascade``) its subtree.

    Raises:
        ValidationFailureError: ``cascade`` is False and the object has children.
    """
    transform = doc.transform_of(game_object)
    ids = {game_object.file_id, *doc.component_ids(game_object)}
    if transform is not None:
        children = doc.descendants(transform)
        if children and not cascade:
            raise ValidationFailureError(
                f'GameObject "{game_object.name}" has {len(children)} descendant(s); '
                "delete with cascade to remove them too",
                field="cascade",
            )
        ids.update(collect_hierarchy(doc, transform))
        parent = doc.parent_of(transform)
        _detach(doc, transform, ids)
        instance = _owning_instance(doc, parent)
        if instance is not None:
            unlink_added_object(instance, game_object.file_id)

    removed = doc.remove_blocks(ids)
    logger.info("Deleted GameObject %r (%d blocks)", game_object.name, removed)
    return {"deleted_count": removed, "deleted_ids": sorted(ids)}


def delete_prefab_instance(doc: UnityDocument, instance: Block) -> Dict[str, Any]:
    """Delete a PrefabInstance with its stripped blocks and added objects."""
    if instance.class_id != PREFAB_INSTANCE:
        raise ValidationFailureError(
            f"Block {instance.file_id} is not a PrefabInstance", field="prefab_instance"
        )
    ids = _instance_companions(doc, instance.file_id)
    root = doc.stripped_root_transform(instance)

    for added_id in added_object_ids(instance, ADDED_GAME_OBJECTS):
        ids.add(added_id)
        added = doc.find_by_id(added_id)
        if added is not None and added.class_id == GAME_OBJECT:
            ids.update(doc.component_ids(added))
            added_transform = doc.transform_of(added)
            if added_transform is not None:
                ids.update(collect_hierarchy(doc, added_transform))
    ids.update(added_object_ids(instance, ADDED_COMPONENTS))

    for block_id in list(ids):
        block = doc.find_by_id(block_id)
        if block is not None and block.is_stripped and block.class_id in TRANSFORM_CLASS_IDS:
            ids.update(collect_hierarchy(doc, block))

    parent_id = instance.get_ref(TRANSFORM_PARENT) or 0
    if parent_id and root is not None and parent_id not in ids:
        parent = doc.find_by_id(parent_id)
        if parent is not None:
            doc.remove_child(parent, root.file_id)

    removed = doc.remove_blocks(ids)
    logger.info("Deleted PrefabInstance %s (%d blocks)", instance.file_id, removed)
    return {"deleted_count": removed, "deleted_ids": sorted(ids)}


def delete_block(doc: UnityDocument, file_id: int, cascade: bool = True) -> Dict[str, Any]:
    """Delete any block, dispatching on its class."""
    block = doc.require_block(file_id)
    if block.class_id == PREFAB_INSTANCE:
        return delete_prefab_instance(doc, block)
    if block.class_id == GAME_OBJECT:
        return delete_game_object(doc, block, cascade=cascade)
    if block.class_id in TRANSFORM_CLASS_IDS:
        owner = doc.game_object_of(block)
        if owner is None:
            raise MalformedError(f"{block.type_name} {file_id} has no GameObject")
        return delete_game_object(doc, owner, cascade=cascade)
    return remove_component(doc, file_id)


# ---------------------------------------------------------------------------
# Reparent
# ---------------------------------------------------------------------------


def reparent(
    doc: UnityDocument,
    child: Union[str, int],
    new_parent: Union[str, int],
    by_id: bool = False,
) -> Dict[str, Any]:
    """Move ``child`` under ``new_parent`` (or to the scene root with ``"root"``).

    Raises:
        AmbiguousMatchError: A name matches several GameObjects.
        ValidationFailureError: Self-parenting or a move into the child's own
            subtree.
        MalformedError: A hierarchy field needed for the move is missing.
    """
    child_transform = doc.resolve_transform(child, by_id=by_id)
    to_root = str(new_parent).strip().lower() == ROOT
    parent_transform = None if to_root else doc.resolve_transform(new_parent, by_id=by_id)

    instance = _owning_instance(doc, child_transform)
    if instance is not None:
        if not instance.has_field(TRANSFORM_PARENT):
            raise MalformedError(f"PrefabInstance {instance.file_id} has no m_TransformParent")
        old_parent_id = instance.get_ref(TRANSFORM_PARENT) or 0
        old_parent = doc.find_by_id(old_parent_id) if old_parent_id else None
    else:
        if not child_transform.has_field("m_Father"):
            raise MalformedError(f"{child_transform.type_name} {child_transform.file_id} has no m_Father")
        old_parent = doc.parent_of(child_transform)

    if parent_transform is not None:
        if parent_transform.file_id == child_transform.file_id:
            raise ValidationFailureError("Cannot parent a GameObject to itself", field="new_parent")
        if doc.is_ancestor(child_transform, parent_transform):
            raise ValidationFailureError(
                "Cannot reparent: new parent is a descendant of the child", field="new_parent"
            )
        if not parent_transform.is_stripped and not parent_transform.has_field("m_Children"):
            raise MalformedError(
                f"{parent_transform.type_name} {parent_transform.file_id} has no m_Children"
            )
    if (
        old_parent is not None
        and not old_parent.is_stripped
        and not old_parent.has_field("m_Children")
    ):
        raise MalformedError(f"{old_parent.type_name} {old_parent.file_id} has no m_Children")

    owner = doc.game_object_of(child_transform) if instance is None else None
    owner_id = owner.file_id if owner is not None else 0

    if parent_transform is None:
        root_order = len(
            [t for t in doc.hierarchy_roots() if t.file_id != child_transform.file_id]
        )
    else:
        root_order = doc.calculate_root_order(parent_transform)

    new_parent_id = parent_transform.file_id if parent_transform is not None else 0
    if old_parent is not None:
        _detach_from(doc, old_parent, child_transform.file_id, owner_id)
    if instance is not None:
        instance.set_field(TRANSFORM_PARENT, format_ref(new_parent_id))
    else:
        child_transform.set_field("m_Father", format_ref(new_parent_id))
        _set_if_present(child_transform, "m_RootOrder", str(root_order))
    if parent_transform is not None:
        _attach(doc, parent_transform, child_transform.file_id, owner_id)

    logger.info(
        "Reparented %s from %s to %s",
        child_transform.file_id,
        old_parent.file_id if old_parent is not None else 0,
        new_parent_id,
    )
    return {
        "child_transform_id": child_transform.file_id,
        "old_parent_transform_id": old_parent.file_id if old_parent is not None else 0,
        "new_parent_transform_id": new_parent_id,
        "root_order": root_order,
    }


# ---------------------------------------------------------------------------
# Clone
# ---------------------------------------------------------------------------


def _id_mapping(doc: UnityDocument, old_ids: Set[int]) -> Dict[int, int]:
    mapping: Dict[int, int] = {}
    for old_id in sorted(old_ids):
        mapping[old_id] = doc.generate_file_id(reserved=mapping.values())
    return mapping


def clone_block(
    doc: UnityDocument,
    target: Union[str, int],
    new_name: Optional[str] = None,
    by_id: bool = False,
) -> Dict[str, Any]:
    """Duplicate a GameObject with its components and descendants.

    References among the copied blocks point at the copies; references to
    anything else are kept.
    """
    if new_name is not None:
        validate_name(new_name, "New name")
    try:
        game_object = doc.resolve_game_object(target, by_id=by_id)
    except NotFoundError:
        instances = doc.find_prefab_instances_by_name(str(target))
        if instances:
            raise ValidationFailureError(
                f'"{target}" is a PrefabInstance (fileID: {instances[0].file_id}). '
                "Cloning PrefabInstances is not supported; unpack it first.",
                field="target",
            )
        raise

    transform = doc.transform_of(game_object)
    old_ids = {game_object.file_id, *doc.component_ids(game_object)}
    parent = None
    if transform is not None:
        old_ids.update(collect_hierarchy(doc, transform))
        parent = doc.parent_of(transform)
    old_ids = {i for i in old_ids if doc.find_by_id(i) is not None}

    mapping = _id_mapping(doc, old_ids)
    root_order = doc.calculate_root_order(parent)

    copies = [
        block.clone(mapping[block.file_id], mapping)
        for block in doc.blocks
        if block.file_id in mapping
    ]
    for copy in copies:
        doc.append_block(copy)

    clone_root = doc.require_block(mapping[game_object.file_id])
    clone_root.set_field("m_Name", new_name or f"{game_object.name} (1)")
    clone_transform = None
    if transform is not None:
        clone_transform = doc.require_block(mapping[transform.file_id])
        _set_if_present(clone_transform, "m_RootOrder", str(root_order))
        if parent is not None:
            doc.add_child(parent, clone_transform.file_id)

    cloned_objects = [c for c in copies if c.class_id == GAME_OBJECT and not c.is_stripped]
    logger.info("Cloned %r into %d blocks", game_object.name, len(copies))
    return {
        "game_object_id": clone_root.file_id,
        "transform_id": clone_transform.file_id if clone_transform is not None else None,
        "total_duplicated": len(copies),
        "cloned_objects": [{"name": c.name, "file_id": c.file_id} for c in cloned_objects],
        "id_map": {str(k): v for k, v in mapping.items()},
        "warnings": _duplicate_name_warnings(doc, cloned_objects),
    }


# ---------------------------------------------------------------------------
# Unpack
# ---------------------------------------------------------------------------


def _override_value(object_reference: str, value: str, mapping: Dict[int, int]) -> str:
    ref = parse_ref(object_reference)
    if not ref:
        return value
    if ref in mapping:
        return format_ref(mapping[ref])
    return object_reference


def unpack_instance(doc: UnityDocument, instance: Block, resolver: Any) -> Dict[str, Any]:
    """Replace a PrefabInstance with standalone copies of its source prefab.

    Args:
        doc: Scene or prefab document holding the instance
        instance: The PrefabInstance block
        resolver: A :class:`~unity_yaml_editor.core.guid_resolver.GuidResolver`

    Raises:
        TemplateUnresolvedError: The source prefab cannot be located.
    """
    if instance.class_id != PREFAB_INSTANCE:
        raise ValidationFailureError(
            f"Block {instance.file_id} is not a PrefabInstance", field="prefab_instance"
        )
    guid = source_prefab_guid(instance)
    if guid is None:
        raise MalformedError(
            f"Could not find m_SourcePrefab GUID in PrefabInstance block (fileID: {instance.file_id})"
        )
    source_path = resolver.resolve(guid) if resolver is not None else None
    if source_path is None or not source_path.is_file():
        searched = f" Searched: {resolver.project_root}" if resolver is not None else ""
        raise TemplateUnresolvedError(
            f"Could not resolve source prefab with GUID {guid}.{searched}", guid=guid
        )
    template = UnityDocument.load(source_path)

    # Template blocks dropped by the instance
    skipped: Set[int] = set()
    removed_refs = []
    for path in ("m_Modification.m_RemovedComponents", "m_Modification.m_RemovedGameObjects"):
        if instance.has_field(path):
            removed_refs.extend(instance.array_refs(path))
    for removed_id in removed_refs:
        skipped.add(removed_id)
        removed = template.find_by_id(removed_id)
        if removed is not None and removed.class_id == GAME_OBJECT:
            skipped.update(template.component_ids(removed))
            removed_transform = template.transform_of(removed)
            if removed_transform is not None:
                skipped.update(collect_hierarchy(template, removed_transform))

    kept = [b for b in template.blocks if b.file_id not in skipped]
    mapping = _id_mapping(doc, {b.file_id for b in kept})
    copies: List[Block] = []
    for block in kept:
        copy = block.clone(mapping[block.file_id], mapping)
        for field_name in _PREFAB_LINK_FIELDS:
            _set_if_present(copy, field_name, NULL_REF)
        for skipped_id in skipped:
            if copy.class_id in TRANSFORM_CLASS_IDS:
                doc.remove_child(copy, skipped_id)
            elif copy.class_id == GAME_OBJECT and copy.has_field("m_Component"):
                position = copy.find_array_ref("m_Component", skipped_id)
                if position is not None:
                    copy.remove_array_element("m_Component", position)
        copies.append(copy)
    by_new_id = {c.file_id: c for c in copies}

    warnings: List[str] = []
    modifications = []
    if instance.has_field("m_Modification.m_Modifications"):
        modifications = list_modifications(instance)
    for entry in modifications:
        target_id = entry.target_file_id
        copy = by_new_id.get(mapping.get(target_id, 0)) if target_id else None
        if copy is None:
            continue
        value = _override_value(entry.object_reference, entry.value, mapping)
        try:
            copy.set_field(entry.property_path, value)
        except (NotFoundError, MalformedError) as e:
            warnings.append(f"Skipped override {entry.property_path} on {copy.file_id}: {e}")

    root = template.find_prefab_root()
    parent_id = instance.get_ref(TRANSFORM_PARENT) or 0
    new_root_transform = None
    if root is not None and root[1].file_id in mapping:
        new_root_transform = by_new_id[mapping[root[1].file_id]]
        _set_if_present(new_root_transform, "m_Father", format_ref(parent_id))

    # Stripped companions map onto the materialized copies
    stripped = doc.stripped_blocks_of(instance)
    stripped_map: Dict[int, int] = {}
    for companion in stripped:
        source_id = companion.get_ref("m_CorrespondingSourceObject")
        if source_id in mapping:
            stripped_map[companion.file_id] = mapping[source_id]
    stripped_root = doc.stripped_root_transform(instance)
    if stripped_root is not None and new_root_transform is not None:
        stripped_map.setdefault(stripped_root.file_id, new_root_transform.file_id)

    added_children: List[Tuple[int, int]] = []
    added_components: List[Tuple[int, int]] = []
    for block in doc.blocks:
        if block.is_stripped or block.file_id == instance.file_id:
            continue
        father = block.get_ref("m_Father") if block.class_id in TRANSFORM_CLASS_IDS else None
        if father in stripped_map:
            added_children.append((stripped_map[father], block.file_id))
        owner = block.get_ref("m_GameObject")
        if owner in stripped_map and block.class_id not in TRANSFORM_CLASS_IDS:
            added_components.append((stripped_map[owner], block.file_id))

    doc.remove_blocks(_instance_companions(doc, instance.file_id))
    doc.replace_file_id_refs(stripped_map)
    for copy in copies:
        doc.append_block(copy)
    for parent_transform_id, child_id in added_children:
        doc.add_child(doc.require_block(parent_transform_id), child_id)
    for owner_id, component_id in added_components:
        owner = doc.require_block(owner_id)
        if owner.find_array_ref("m_Component", component_id) is None:
            owner.insert_array_element("m_Component", f"component: {format_ref(component_id)}")

    if parent_id and new_root_transform is not None:
        parent = doc.find_by_id(parent_id)
        if parent is not None:
            doc.add_child(parent, new_root_transform.file_id)

    logger.info(
        "Unpacked PrefabInstance %s from %s (%d blocks)", instance.file_id, source_path, len(copies)
    )
    return {
        "unpacked_count": len(copies),
        "root_game_object_id": mapping.get(root[0].file_id) if root is not None else None,
        "root_transform_id": new_root_transform.file_id if new_root_transform is not None else None,
        "source_path": str(source_path),
        "warnings": warnings,
    }
