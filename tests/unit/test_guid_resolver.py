"""Tests for GUID lookup and the persisted cache."""

import json

from unity_yaml_editor.core.guid_resolver import GuidResolver, find_project_root, read_meta_guid

from tests.conftest import PREFAB_GUID, write_file


class TestProjectRoot:
    def test_found_from_nested_file(self, unity_project, prefab_scene):
        assert find_project_root(prefab_scene) == unity_project.resolve()

    def test_cache_dir_marks_root(self, tmp_path):
        (tmp_path / "tool" / ".unity-yaml").mkdir(parents=True)
        assert find_project_root(tmp_path / "tool") == (tmp_path / "tool").resolve()

    def test_none_outside_project(self, tmp_path):
        nested = tmp_path / "loose"
        nested.mkdir()
        assert find_project_root(nested) is None


class TestMetaFiles:
    def test_reads_guid(self, tmp_path):
        meta = write_file(tmp_path / "A.mat.meta", "fileFormatVersion: 2\nguid: ABCDEF0123456789ABCDEF0123456789\n")
        assert read_meta_guid(meta) == "abcdef0123456789abcdef0123456789"

    def test_missing_guid(self, tmp_path):
        meta = write_file(tmp_path / "B.meta", "fileFormatVersion: 2\n")
        assert read_meta_guid(meta) is None


class TestResolver:
    def test_resolve(self, unity_project):
        resolver = GuidResolver(unity_project)
        path = resolver.resolve(PREFAB_GUID)
        assert path == unity_project / "Assets" / "Prefabs" / "Crate.prefab"
        assert resolver.resolve(PREFAB_GUID.upper()) == path
        assert resolver.resolve("f" * 32) is None

    def test_no_cache_file_without_persist(self, unity_project):
        GuidResolver(unity_project).resolve(PREFAB_GUID)
        assert not (unity_project / ".unity-yaml" / "guid-cache.json").exists()

    def test_persisted_cache(self, unity_project):
        resolver = GuidResolver(unity_project, persist=True)
        resolver.resolve(PREFAB_GUID)
        cache = unity_project / ".unity-yaml" / "guid-cache.json"
        assert json.loads(cache.read_text()) == {PREFAB_GUID: "Assets/Prefabs/Crate.prefab"}

        reloaded = GuidResolver(unity_project, persist=True)
        assert reloaded.load() == {PREFAB_GUID: "Assets/Prefabs/Crate.prefab"}

    def test_stale_cache_entry_triggers_rescan(self, unity_project):
        cache = write_file(
            unity_project / ".unity-yaml" / "guid-cache.json",
            json.dumps({PREFAB_GUID: "Assets/Old/Crate.prefab"}),
        )
        resolver = GuidResolver(unity_project, cache_path=cache, persist=True)
        assert resolver.resolve(PREFAB_GUID) == unity_project / "Assets" / "Prefabs" / "Crate.prefab"

    def test_unreadable_cache_is_ignored(self, unity_project):
        write_file(unity_project / ".unity-yaml" / "guid-cache.json", "{not json")
        resolver = GuidResolver(unity_project, persist=True)
        assert resolver.load() is None
        assert resolver.resolve(PREFAB_GUID) is not None

    def test_rebuild_returns_entries(self, unity_project):
        entries = GuidResolver(unity_project).rebuild()
        assert entries == {PREFAB_GUID: "Assets/Prefabs/Crate.prefab"}

    def test_persisted_cache_used_without_rescan(self, unity_project):
        write_file(
            unity_project / ".unity-yaml" / "guid-cache.json",
            json.dumps({"f" * 32: "Assets/Prefabs/Crate.prefab"}),
        )
        resolver = GuidResolver(unity_project, persist=True)
        assert resolver.resolve("f" * 32) == unity_project / "Assets" / "Prefabs" / "Crate.prefab"
        assert resolver.resolve(PREFAB_GUID) is None
