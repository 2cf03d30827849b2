"""Tests for field and override edit commands."""

import json

from unity_yaml_editor.cli.main import cli
from unity_yaml_editor.core.document import UnityDocument

from tests.conftest import BASIC_SCENE, PREFAB_GUID, parse_output, read_file, write_file


class TestUpdateField:
    """unity-yaml update field."""

    def test_set_by_name(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["update", "field", str(basic_scene), "Player", "m_IsActive", "0"])
        assert result.exit_code == 0, result.output
        data = parse_output(result)["data"]
        assert data["old_line"] == "  m_IsActive: 1"
        assert data["new_line"] == "  m_IsActive: 0"
        assert data["bytes_written"] > 0
        assert read_file(basic_scene) == BASIC_SCENE.replace("m_IsActive: 1", "m_IsActive: 0", 1)

    def test_set_inline_mapping_key_keeps_comment(self, cli_runner, basic_scene):
        result = cli_runner.invoke(
            cli, ["update", "field", str(basic_scene), "410", "m_Size.x", "4", "--by-id"]
        )
        assert result.exit_code == 0, result.output
        assert "  m_Size: {x: 4, y: 2, z: 1}  # collider size\n" in read_file(basic_scene)

    def test_missing_field_leaves_file(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["update", "field", str(basic_scene), "Player", "m_Nope", "1"])
        assert result.exit_code == 1
        assert parse_output(result)["data"]["error_code"] == "NOT_FOUND"
        assert read_file(basic_scene) == BASIC_SCENE

    def test_multiline_value_rejected(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["update", "field", str(basic_scene), "Player", "m_Name", "a\nb"])
        assert result.exit_code == 1
        assert parse_output(result)["data"]["error_code"] == "VALIDATION_ERROR"
        assert read_file(basic_scene) == BASIC_SCENE


class TestUpdateBatch:
    def test_inline_batch(self, cli_runner, basic_scene):
        edits = json.dumps(
            [
                {"name": "Player", "path": "m_Layer", "value": "3"},
                {"file_id": 600, "path": "m_LocalPosition.z", "value": "-20"},
            ]
        )
        result = cli_runner.invoke(cli, ["update", "batch", str(basic_scene), edits])
        assert result.exit_code == 0, result.output
        assert parse_output(result)["data"]["count"] == 2
        doc = UnityDocument.load(basic_scene)
        assert doc.find_by_id(100).get_field("m_Layer") == "3"
        assert doc.find_by_id(600).get_field("m_LocalPosition.z") == "-20"

    def test_batch_from_file(self, cli_runner, basic_scene, tmp_path):
        edits = write_file(
            tmp_path / "edits.json",
            json.dumps({"edits": [{"name": "Enemy", "path": "m_TagString", "value": "Respawn"}]}),
        )
        result = cli_runner.invoke(cli, ["update", "batch", str(basic_scene), str(edits)])
        assert result.exit_code == 0, result.output
        assert "m_TagString: Respawn" in read_file(basic_scene)

    def test_failing_edit_aborts_batch(self, cli_runner, basic_scene):
        edits = json.dumps(
            [
                {"name": "Player", "path": "m_Layer", "value": "3"},
                {"name": "Ghost", "path": "m_Layer", "value": "3"},
            ]
        )
        result = cli_runner.invoke(cli, ["update", "batch", str(basic_scene), edits])
        assert result.exit_code == 1
        data = parse_output(result)
        assert data["error"].startswith("Edit 1 failed:")
        assert read_file(basic_scene) == BASIC_SCENE

    def test_invalid_json(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["update", "batch", str(basic_scene), "[{"])
        assert result.exit_code == 1
        assert parse_output(result)["data"]["error_code"] == "INVALID_JSON"

    def test_incomplete_edit(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["update", "batch", str(basic_scene), '[{"path": "m_Layer"}]'])
        assert result.exit_code == 1
        assert parse_output(result)["data"]["details"]["field"] == "edits"


class TestArrayCommands:
    def test_insert_and_remove(self, cli_runner, basic_scene):
        result = cli_runner.invoke(
            cli,
            ["update", "array-insert", str(basic_scene), "420", "m_Materials", "{fileID: 0}", "--index", "0"],
        )
        assert result.exit_code == 0, result.output
        assert parse_output(result)["data"]["length"] == 3

        result = cli_runner.invoke(
            cli, ["update", "array-remove", str(basic_scene), "420", "m_Materials", "--index", "0"]
        )
        data = parse_output(result)["data"]
        assert data["removed"] == "{fileID: 0}"
        assert data["length"] == 2
        assert read_file(basic_scene) == BASIC_SCENE

    def test_remove_out_of_range(self, cli_runner, basic_scene):
        result = cli_runner.invoke(
            cli, ["update", "array-remove", str(basic_scene), "420", "m_Materials", "--index", "9"]
        )
        assert result.exit_code == 1
        assert parse_output(result)["data"]["error_code"] == "MALFORMED"


class TestOverrideCommands:
    """Prefab override edits."""

    def test_update_existing_override(self, cli_runner, prefab_scene):
        result = cli_runner.invoke(
            cli, ["update", "override", str(prefab_scene), "Crate", "m_LocalPosition.x", "7"]
        )
        assert result.exit_code == 0, result.output
        data = parse_output(result)["data"]
        assert data["action"] == "updated"
        assert "      value: 7\n" in read_file(prefab_scene)

    def test_add_override_with_target(self, cli_runner, prefab_scene):
        result = cli_runner.invoke(
            cli,
            ["update", "override", str(prefab_scene), "2000", "m_IsActive", "0", "--target", "4000000"],
        )
        data = parse_output(result)["data"]
        assert data["action"] == "added"
        assert data["target"] == f"{{fileID: 4000000, guid: {PREFAB_GUID}, type: 3}}"

    def test_add_override_without_target(self, cli_runner, prefab_scene):
        result = cli_runner.invoke(cli, ["update", "override", str(prefab_scene), "Crate", "m_IsActive", "0"])
        assert result.exit_code == 1
        data = parse_output(result)["data"]
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["details"]["field"] == "target"

    def test_remove_override(self, cli_runner, prefab_scene):
        result = cli_runner.invoke(cli, ["update", "remove-override", str(prefab_scene), "Crate", "m_Name"])
        assert result.exit_code == 0, result.output
        assert parse_output(result)["data"]["removed"]["value"] == "Crate"
        assert "propertyPath: m_Name" not in read_file(prefab_scene)

    def test_removed_component_round_trip(self, cli_runner, prefab_scene):
        original = read_file(prefab_scene)
        args = ["update", "removed-component", str(prefab_scene), "Crate", "4000002"]
        first = parse_output(cli_runner.invoke(cli, args))["data"]
        assert first["action"] == "added"
        second = parse_output(cli_runner.invoke(cli, args))["data"]
        assert second["action"] == "unchanged"
        removed = parse_output(cli_runner.invoke(cli, args + ["--remove"]))["data"]
        assert removed["action"] == "removed"
        assert read_file(prefab_scene) == original

    def test_removed_gameobject_unknown_instance(self, cli_runner, prefab_scene):
        result = cli_runner.invoke(
            cli, ["update", "removed-gameobject", str(prefab_scene), "Barrel", "4000010"]
        )
        assert result.exit_code == 1
        assert parse_output(result)["data"]["error_code"] == "NOT_FOUND"
