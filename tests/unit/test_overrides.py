"""Tests for PrefabInstance override and removed-list editing."""

import pytest

from unity_yaml_editor.core import overrides
from unity_yaml_editor.core.document import UnityDocument
from unity_yaml_editor.core.errors import (
    MalformedError,
    NotFoundError,
    ValidationFailureError,
)

from tests.conftest import BASIC_SCENE, PREFAB_GUID, PREFAB_INSTANCE_SCENE


@pytest.fixture
def doc():
    return UnityDocument.from_text(PREFAB_INSTANCE_SCENE)


@pytest.fixture
def instance(doc):
    return doc.find_by_id(2000)


class TestLookup:
    def test_find_by_id_or_name(self, doc):
        assert overrides.find_prefab_instance(doc, "2000").file_id == 2000
        assert overrides.find_prefab_instance(doc, "Crate").file_id == 2000

    def test_find_missing(self, doc):
        with pytest.raises(NotFoundError, match="PrefabInstance Barrel not found"):
            overrides.find_prefab_instance(doc, "Barrel")

    def test_list_modifications(self, instance):
        entries = overrides.list_modifications(instance)
        assert [(e.index, e.property_path, e.value) for e in entries] == [
            (0, "m_Name", "Crate"),
            (1, "m_LocalPosition.x", "5"),
        ]
        assert entries[1].target_file_id == 4000001
        assert entries[0].to_dict()["object_reference"] == "{fileID: 0}"

    def test_list_modifications_on_non_instance(self, doc):
        with pytest.raises(ValidationFailureError):
            overrides.list_modifications(doc.find_by_id(1000))

    def test_source_prefab_guid(self, instance):
        assert overrides.source_prefab_guid(instance) == PREFAB_GUID

    def test_normalize_target(self, instance):
        assert overrides.normalize_target(instance, "4000000") == (
            f"{{fileID: 4000000, guid: {PREFAB_GUID}, type: 3}}"
        )
        assert overrides.normalize_target(instance, None) is None
        with pytest.raises(ValidationFailureError):
            overrides.normalize_target(instance, "not a ref")


class TestUpsert:
    """Updating and appending m_Modifications entries."""

    def test_update_existing(self, doc, instance):
        result = overrides.upsert_override(doc, instance, "m_LocalPosition.x", "7")
        assert result["action"] == "updated"
        assert result["index"] == 1
        assert overrides.find_modification(instance, "m_LocalPosition.x").value == "7"
        assert len(overrides.list_modifications(instance)) == 2

    def test_add_infers_target_from_sibling_property(self, doc, instance):
        result = overrides.upsert_override(doc, instance, "m_LocalPosition.y", "3")
        assert result["action"] == "added"
        assert result["index"] == 2
        entry = overrides.find_modification(instance, "m_LocalPosition.y")
        assert entry.target_file_id == 4000001
        assert entry.value == "3"

    def test_add_without_inferable_target(self, doc, instance):
        before = instance.raw
        with pytest.raises(ValidationFailureError) as exc_info:
            overrides.upsert_override(doc, instance, "m_IsActive", "0")
        assert exc_info.value.field == "target"
        assert instance.raw == before

    def test_add_with_bare_target(self, doc, instance):
        result = overrides.upsert_override(doc, instance, "m_IsActive", "0", target="4000000")
        assert result["target"] == f"{{fileID: 4000000, guid: {PREFAB_GUID}, type: 3}}"
        assert overrides.find_modification(instance, "m_IsActive", 4000000) is not None

    def test_object_reference_is_written(self, doc, instance):
        overrides.upsert_override(
            doc, instance, "m_LocalPosition.x", "0", object_reference="{fileID: 1100}"
        )
        entry = overrides.find_modification(instance, "m_LocalPosition.x")
        assert entry.object_reference == "{fileID: 1100}"

    def test_multiline_value_rejected(self, doc, instance):
        with pytest.raises(ValidationFailureError):
            overrides.upsert_override(doc, instance, "m_Name", "a\nb")


class TestRemoveOverride:
    def test_remove(self, doc, instance):
        removed = overrides.remove_override(doc, instance, "m_Name")
        assert removed.value == "Crate"
        assert [e.property_path for e in overrides.list_modifications(instance)] == [
            "m_LocalPosition.x"
        ]

    def test_remove_missing(self, doc, instance):
        with pytest.raises(NotFoundError):
            overrides.remove_override(doc, instance, "m_TagString")

    def test_remove_with_wrong_target(self, doc, instance):
        with pytest.raises(NotFoundError):
            overrides.remove_override(doc, instance, "m_Name", target="4000001")


class TestRemovedLists:
    """m_RemovedComponents / m_RemovedGameObjects."""

    def test_add_then_duplicate_then_remove(self, doc, instance):
        first = overrides.add_removed_component(doc, instance, "4000002")
        assert first["action"] == "added"
        assert first["index"] == 0
        assert instance.array_refs(overrides.REMOVED_COMPONENTS) == [4000002]

        second = overrides.add_removed_component(doc, instance, "4000002")
        assert second["action"] == "unchanged"
        assert instance.array_length(overrides.REMOVED_COMPONENTS) == 1

        removed = overrides.remove_removed_component(doc, instance, "4000002")
        assert removed["action"] == "removed"
        assert instance.get_field(overrides.REMOVED_COMPONENTS) == "[]"

    def test_removed_game_objects(self, doc, instance):
        overrides.add_removed_game_object(doc, instance, "4000010")
        assert instance.array_refs(overrides.REMOVED_GAME_OBJECTS) == [4000010]
        overrides.remove_removed_game_object(doc, instance, "4000010")
        assert instance.array_length(overrides.REMOVED_GAME_OBJECTS) == 0

    def test_remove_absent_reference(self, doc, instance):
        with pytest.raises(NotFoundError):
            overrides.remove_removed_component(doc, instance, "4000002")

    def test_missing_list_is_malformed(self, doc, instance):
        instance.replace_raw(instance.raw.replace("    m_RemovedComponents: []\n", ""))
        with pytest.raises(MalformedError):
            overrides.add_removed_component(doc, instance, "4000002")

    def test_non_instance_rejected(self):
        basic = UnityDocument.from_text(BASIC_SCENE)
        with pytest.raises(ValidationFailureError):
            overrides.add_removed_component(basic, basic.find_by_id(100), "400")


class TestAddedObjects:
    def test_added_ids_and_unlink(self, instance):
        instance.insert_array_element(
            overrides.ADDED_GAME_OBJECTS,
            "targetCorrespondingSourceObject: {fileID: 0}\ninsertIndex: -1\naddedObject: {fileID: 77}",
        )
        assert overrides.added_object_ids(instance) == [77]
        assert overrides.unlink_added_object(instance, 77) is True
        assert overrides.added_object_ids(instance) == []
        assert overrides.unlink_added_object(instance, 77) is False
