"""Tests for splitting documents into blocks and joining them back."""

import pytest

from unity_yaml_editor.core.block import Block
from unity_yaml_editor.core.errors import MalformedError
from unity_yaml_editor.core.tokenizer import (
    CRLF,
    LF,
    detect_line_ending,
    has_blocks,
    join_blocks,
    normalize_newlines,
    split_blocks,
)

from tests.conftest import BASIC_SCENE, HEADER


class TestLineEndings:
    def test_lf_default(self):
        assert detect_line_ending("a\nb\n") == LF

    def test_crlf_only_when_uniform(self):
        assert detect_line_ending("a\r\nb\r\n") == CRLF
        assert detect_line_ending("a\r\nb\n") == LF

    def test_normalize_returns_original_ending(self):
        text, ending = normalize_newlines("a\r\nb\r\n")
        assert text == "a\nb\n"
        assert ending == CRLF


class TestSplitBlocks:
    """Block splitting keeps every byte."""

    def test_has_blocks_needs_a_full_anchor(self):
        assert has_blocks(BASIC_SCENE)
        assert has_blocks(BASIC_SCENE.replace("\n", "\r\n"))
        assert not has_blocks(HEADER + "--- !u!GameObject\nm_Name: x\n")
        assert not has_blocks(HEADER)

    def test_header_and_block_count(self):
        header, blocks = split_blocks(BASIC_SCENE)
        assert header == HEADER
        assert [b.file_id for b in blocks] == [100, 400, 410, 420, 200, 500, 300, 600, 610]

    def test_join_is_identity(self):
        header, blocks = split_blocks(BASIC_SCENE)
        assert join_blocks(header, blocks) == BASIC_SCENE

    def test_no_anchor_yields_no_blocks(self):
        header, blocks = split_blocks("%YAML 1.1\nfoo: bar\n")
        assert header == "%YAML 1.1\nfoo: bar\n"
        assert blocks == []

    def test_stripped_and_negative_ids(self):
        text = HEADER + "--- !u!4 &-12 stripped\nTransform:\n  m_PrefabInstance: {fileID: 9}\n"
        _, blocks = split_blocks(text)
        assert blocks[0].file_id == -12
        assert blocks[0].is_stripped is True

    def test_invalid_header_rejected(self):
        with pytest.raises(MalformedError):
            Block("--- !x!1 &1\nGameObject:\n")
