"""Tests for create, delete, reparent, clone and unpack commands."""

from unity_yaml_editor.cli.main import cli
from unity_yaml_editor.core.document import UnityDocument

from tests.conftest import BASIC_SCENE, parse_output, read_file


class TestCreate:
    def test_create_root_game_object(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["create", "gameobject", str(basic_scene), "Spawner"])
        assert result.exit_code == 0, result.output
        data = parse_output(result)["data"]
        assert data["parent_transform_id"] == 0
        doc = UnityDocument.load(basic_scene)
        transform = doc.find_by_id(data["transform_id"])
        assert transform.get_field("m_RootOrder") == "2"
        assert doc.find_by_id(data["game_object_id"]).name == "Spawner"

    def test_create_child(self, cli_runner, basic_scene):
        result = cli_runner.invoke(
            cli, ["create", "gameobject", str(basic_scene), "Weapon", "--parent", "Player"]
        )
        data = parse_output(result)["data"]
        assert data["parent_transform_id"] == 400
        doc = UnityDocument.load(basic_scene)
        assert doc.children_of(doc.find_by_id(400)) == [500, data["transform_id"]]
        assert doc.find_by_id(data["game_object_id"]).get_field("m_Layer") == "8"

    def test_invalid_name(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["create", "gameobject", str(basic_scene), "A/B"])
        assert result.exit_code == 1
        data = parse_output(result)["data"]
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["details"]["field"] == "gameobject name"
        assert read_file(basic_scene) == BASIC_SCENE

    def test_add_component(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["create", "component", str(basic_scene), "Enemy", "Rigidbody"])
        assert result.exit_code == 0, result.output
        data = parse_output(result)["data"]
        assert data["type"] == "Rigidbody"
        doc = UnityDocument.load(basic_scene)
        assert doc.component_ids(doc.find_by_id(200)) == [500, data["component_id"]]

    def test_add_unsupported_component(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["create", "component", str(basic_scene), "Enemy", "Transform"])
        assert result.exit_code == 1
        assert parse_output(result)["data"]["details"]["field"] == "component"

    def test_create_block(self, cli_runner, basic_scene):
        result = cli_runner.invoke(
            cli, ["create", "block", str(basic_scene), "1", "--name", "Marker", "--parent", "Enemy"]
        )
        data = parse_output(result)["data"]
        assert data["type"] == "GameObject"
        assert data["name"] == "Marker"
        assert data["transform_id"] is not None

    def test_create_under_prefab_instance(self, cli_runner, prefab_scene):
        result = cli_runner.invoke(
            cli, ["create", "gameobject", str(prefab_scene), "Label", "--parent", "Crate"]
        )
        assert result.exit_code == 0, result.output
        data = parse_output(result)["data"]
        assert data["parent_transform_id"] == 2200
        assert f"addedObject: {{fileID: {data['game_object_id']}}}" in read_file(prefab_scene)


class TestDelete:
    def test_delete_cascade(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["delete", "gameobject", str(basic_scene), "Player"])
        assert result.exit_code == 0, result.output
        data = parse_output(result)["data"]
        assert data["deleted_count"] == 6
        assert data["name"] == "Player"
        doc = UnityDocument.load(basic_scene)
        assert [b.file_id for b in doc.blocks] == [300, 600, 610]

    def test_delete_no_cascade_refused(self, cli_runner, basic_scene):
        result = cli_runner.invoke(
            cli, ["delete", "gameobject", str(basic_scene), "Player", "--no-cascade"]
        )
        assert result.exit_code == 1
        assert parse_output(result)["data"]["details"]["field"] == "cascade"
        assert read_file(basic_scene) == BASIC_SCENE

    def test_delete_component(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["delete", "component", str(basic_scene), "410"])
        assert parse_output(result)["data"]["removed_class_id"] == 65
        assert "--- !u!65 &410" not in read_file(basic_scene)

    def test_delete_component_rejects_transform(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["delete", "component", str(basic_scene), "400"])
        assert result.exit_code == 1
        assert parse_output(result)["data"]["error_code"] == "VALIDATION_ERROR"

    def test_delete_prefab(self, cli_runner, prefab_scene):
        result = cli_runner.invoke(cli, ["delete", "prefab", str(prefab_scene), "Crate"])
        data = parse_output(result)["data"]
        assert data["deleted_ids"] == [2000, 2200]
        assert "  m_Children: []\n" in read_file(prefab_scene)

    def test_delete_block_bad_id(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["delete", "block", str(basic_scene), "abc"])
        assert result.exit_code == 1
        assert parse_output(result)["data"]["details"]["field"] == "file_id"


class TestHierarchyCommands:
    def test_reparent_to_root(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["reparent", str(basic_scene), "Enemy", "root"])
        assert result.exit_code == 0, result.output
        data = parse_output(result)["data"]
        assert data["old_parent_transform_id"] == 400
        assert data["root_order"] == 2
        doc = UnityDocument.load(basic_scene)
        assert doc.hierarchy() == {0: [400, 500, 600]}

    def test_reparent_cycle(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["reparent", str(basic_scene), "Player", "Enemy"])
        assert result.exit_code == 1
        assert parse_output(result)["data"]["details"]["field"] == "new_parent"
        assert read_file(basic_scene) == BASIC_SCENE

    def test_clone(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["clone", str(basic_scene), "Player"])
        assert result.exit_code == 0, result.output
        data = parse_output(result)
        assert data["data"]["total_duplicated"] == 6
        assert len(data["meta"]["warnings"]) == 1
        doc = UnityDocument.load(basic_scene)
        assert [g.name for g in doc.game_objects()].count("Player (1)") == 1
        assert doc.validate() == []

    def test_clone_with_name(self, cli_runner, basic_scene):
        result = cli_runner.invoke(cli, ["clone", str(basic_scene), "Enemy", "--name", "Enemy2"])
        data = parse_output(result)["data"]
        doc = UnityDocument.load(basic_scene)
        assert doc.find_by_id(data["game_object_id"]).name == "Enemy2"
        assert data["transform_id"] in doc.children_of(doc.find_by_id(400))

    def test_unpack_detects_project(self, cli_runner, unity_project, prefab_scene):
        result = cli_runner.invoke(cli, ["unpack", str(prefab_scene), "Crate"])
        assert result.exit_code == 0, result.output
        data = parse_output(result)["data"]
        assert data["unpacked_count"] == 5
        doc = UnityDocument.load(prefab_scene)
        assert doc.prefab_instances() == []
        assert doc.find_by_id(data["root_game_object_id"]).name == "Crate"

    def test_unpack_unresolved(self, cli_runner, prefab_scene):
        result = cli_runner.invoke(cli, ["unpack", str(prefab_scene), "Crate"])
        assert result.exit_code == 1
        data = parse_output(result)["data"]
        assert data["error_code"] == "TEMPLATE_UNRESOLVED"
        assert data["details"]["guid"] == "a1b2c3d4e5f60718293a4b5c6d7e8f90"
