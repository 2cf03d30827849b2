"""Tests for single-block access and reference handling."""

import pytest

from unity_yaml_editor.core.block import Block, format_ref, parse_ref
from unity_yaml_editor.core.errors import MalformedError

RENDERER = """\
--- !u!23 &420
MeshRenderer:
  m_GameObject: {fileID: 100}
  m_Enabled: 1
  m_Materials:
  - {fileID: 2100000, guid: 0123456789abcdef0123456789abcdef, type: 2}
  - {fileID: 0}
  m_ProbeAnchor: {fileID: 400}
"""


@pytest.fixture
def renderer():
    return Block(RENDERER)


class TestRefs:
    def test_parse_ref(self):
        assert parse_ref("{fileID: 42}") == 42
        assert parse_ref("{fileID: -7, guid: abc, type: 3}") == -7
        assert parse_ref("plain") is None
        assert parse_ref(None) is None

    def test_format_ref(self):
        assert format_ref(9) == "{fileID: 9}"


class TestBlockAccess:
    def test_header_fields(self, renderer):
        assert renderer.class_id == 23
        assert renderer.file_id == 420
        assert renderer.type_name == "MeshRenderer"
        assert renderer.is_stripped is False
        assert renderer.dirty is False

    def test_field_reads(self, renderer):
        assert renderer.get_field("m_Enabled") == "1"
        assert renderer.get_ref("m_GameObject") == 100
        assert renderer.find_field("m_Missing") is None
        assert renderer.has_field("m_Materials")
        assert renderer.name is None

    def test_array_helpers(self, renderer):
        assert renderer.array_length("m_Materials") == 2
        assert renderer.array_refs("m_Materials") == [2100000, 0]
        assert renderer.find_array_ref("m_Materials", 0) == 1

    def test_set_field_marks_dirty(self, renderer):
        old, new = renderer.set_field("m_Enabled", "0")
        assert old == "  m_Enabled: 1"
        assert new == "  m_Enabled: 0"
        assert renderer.dirty is True
        assert renderer.raw == RENDERER.replace("m_Enabled: 1", "m_Enabled: 0")

    def test_file_id_refs_skip_external_and_null(self, renderer):
        assert renderer.file_id_refs() == [100, 400]
        assert renderer.file_id_refs(include_external=True) == [100, 2100000, 400]


class TestRemapAndClone:
    def test_remap_leaves_guid_refs(self, renderer):
        renderer.remap_file_ids({100: 1, 400: 4, 2100000: 99})
        assert renderer.get_ref("m_GameObject") == 1
        assert renderer.get_ref("m_ProbeAnchor") == 4
        assert "fileID: 2100000, guid:" in renderer.raw

    def test_clone_gets_new_header(self, renderer):
        copy = renderer.clone(777, {100: 101})
        assert copy.file_id == 777
        assert copy.header_line == "--- !u!23 &777"
        assert copy.get_ref("m_GameObject") == 101
        assert renderer.get_ref("m_GameObject") == 100

    def test_replace_raw_must_keep_id(self, renderer):
        with pytest.raises(MalformedError):
            renderer.replace_raw("--- !u!23 &1\nMeshRenderer:\n")
