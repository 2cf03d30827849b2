"""
Root pytest configuration and shared fixtures.

Provides small Unity scene/prefab documents written to ``tmp_path`` and a
helper for reading CLI envelopes.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

import pytest
from click.testing import CliRunner

from unity_yaml_editor.config import set_config

# Response contract version from responses.py
RESPONSE_CONTRACT_VERSION = "response-v2"

PREFAB_GUID = "a1b2c3d4e5f60718293a4b5c6d7e8f90"
MATERIAL_GUID = "0123456789abcdef0123456789abcdef"

HEADER = "%YAML 1.1\n%TAG !u! tag:unity3d.com,2011:\n"

BASIC_SCENE = HEADER + f"""\
--- !u!1 &100
GameObject:
  m_ObjectHideFlags: 0
  serializedVersion: 6
  m_Component:
  - component: {{fileID: 400}}
  - component: {{fileID: 410}}
  - component: {{fileID: 420}}
  m_Layer: 8
  m_Name: Player
  m_TagString: Player
  m_IsActive: 1
--- !u!4 &400
Transform:
  m_ObjectHideFlags: 0
  m_GameObject: {{fileID: 100}}
  m_LocalRotation: {{x: 0, y: 0, z: 0, w: 1}}
  m_LocalPosition: {{x: 1, y: 2, z: 3}}
  m_LocalScale: {{x: 1, y: 1, z: 1}}
  m_Children:
  - {{fileID: 500}}
  m_Father: {{fileID: 0}}
  m_RootOrder: 0
--- !u!65 &410
BoxCollider:
  m_ObjectHideFlags: 0
  m_GameObject: {{fileID: 100}}
  m_IsTrigger: 0
  m_Enabled: 1
  m_Size: {{x: 1, y: 2, z: 1}}  # collider size
  m_Center: {{x: 0, y: 0, z: 0}}
--- !u!23 &420
MeshRenderer:
  m_ObjectHideFlags: 0
  m_GameObject: {{fileID: 100}}
  m_Enabled: 1
  m_Materials:
  - {{fileID: 2100000, guid: {MATERIAL_GUID}, type: 2}}
  - {{fileID: 0}}
--- !u!1 &200
GameObject:
  m_ObjectHideFlags: 0
  serializedVersion: 6
  m_Component:
  - component: {{fileID: 500}}
  m_Layer: 0
  m_Name: Enemy
  m_TagString: Untagged
  m_IsActive: 1
--- !u!4 &500
Transform:
  m_ObjectHideFlags: 0
  m_GameObject: {{fileID: 200}}
  m_LocalRotation: {{x: 0, y: 0, z: 0, w: 1}}
  m_LocalPosition: {{x: 0, y: 0, z: 5}}
  m_LocalScale: {{x: 1, y: 1, z: 1}}
  m_Children: []
  m_Father: {{fileID: 400}}
  m_RootOrder: 0
--- !u!1 &300
GameObject:
  m_ObjectHideFlags: 0
  serializedVersion: 6
  m_Component:
  - component: {{fileID: 600}}
  - component: {{fileID: 610}}
  m_Layer: 0
  m_Name: Main Camera
  m_TagString: MainCamera
  m_IsActive: 1
--- !u!4 &600
Transform:
  m_ObjectHideFlags: 0
  m_GameObject: {{fileID: 300}}
  m_LocalRotation: {{x: 0, y: 0, z: 0, w: 1}}
  m_LocalPosition: {{x: 0, y: 1, z: -10}}
  m_LocalScale: {{x: 1, y: 1, z: 1}}
  m_Children: []
  m_Father: {{fileID: 0}}
  m_RootOrder: 1
--- !u!20 &610
Camera:
  m_ObjectHideFlags: 0
  m_GameObject: {{fileID: 300}}
  m_Enabled: 1
  field of view: 60
"""

PREFAB_INSTANCE_SCENE = HEADER + f"""\
--- !u!1 &1000
GameObject:
  m_ObjectHideFlags: 0
  serializedVersion: 6
  m_Component:
  - component: {{fileID: 1100}}
  m_Layer: 0
  m_Name: Level
  m_TagString: Untagged
  m_IsActive: 1
--- !u!4 &1100
Transform:
  m_ObjectHideFlags: 0
  m_GameObject: {{fileID: 1000}}
  m_LocalRotation: {{x: 0, y: 0, z: 0, w: 1}}
  m_LocalPosition: {{x: 0, y: 0, z: 0}}
  m_LocalScale: {{x: 1, y: 1, z: 1}}
  m_Children:
  - {{fileID: 2200}}
  m_Father: {{fileID: 0}}
  m_RootOrder: 0
--- !u!1001 &2000
PrefabInstance:
  m_ObjectHideFlags: 0
  serializedVersion: 2
  m_Modification:
    serializedVersion: 3
    m_TransformParent: {{fileID: 1100}}
    m_Modifications:
    - target: {{fileID: 4000000, guid: {PREFAB_GUID}, type: 3}}
      propertyPath: m_Name
      value: Crate
      objectReference: {{fileID: 0}}
    - target: {{fileID: 4000001, guid: {PREFAB_GUID}, type: 3}}
      propertyPath: m_LocalPosition.x
      value: 5
      objectReference: {{fileID: 0}}
    m_RemovedComponents: []
    m_RemovedGameObjects: []
    m_AddedGameObjects: []
    m_AddedComponents: []
  m_SourcePrefab: {{fileID: 100100000, guid: {PREFAB_GUID}, type: 3}}
--- !u!4 &2200 stripped
Transform:
  m_CorrespondingSourceObject: {{fileID: 4000001, guid: {PREFAB_GUID}, type: 3}}
  m_PrefabInstance: {{fileID: 2000}}
  m_PrefabAsset: {{fileID: 0}}
"""

CRATE_PREFAB = HEADER + """\
--- !u!1 &4000000
GameObject:
  m_ObjectHideFlags: 0
  m_CorrespondingSourceObject: {fileID: 0}
  m_PrefabInstance: {fileID: 0}
  m_PrefabAsset: {fileID: 0}
  serializedVersion: 6
  m_Component:
  - component: {fileID: 4000001}
  - component: {fileID: 4000002}
  m_Layer: 0
  m_Name: CratePrefab
  m_TagString: Untagged
  m_IsActive: 1
--- !u!4 &4000001
Transform:
  m_ObjectHideFlags: 0
  m_CorrespondingSourceObject: {fileID: 0}
  m_PrefabInstance: {fileID: 0}
  m_PrefabAsset: {fileID: 0}
  m_GameObject: {fileID: 4000000}
  m_LocalRotation: {x: 0, y: 0, z: 0, w: 1}
  m_LocalPosition: {x: 0, y: 0, z: 0}
  m_LocalScale: {x: 1, y: 1, z: 1}
  m_Children:
  - {fileID: 4000011}
  m_Father: {fileID: 0}
  m_RootOrder: 0
--- !u!65 &4000002
BoxCollider:
  m_ObjectHideFlags: 0
  m_CorrespondingSourceObject: {fileID: 0}
  m_PrefabInstance: {fileID: 0}
  m_PrefabAsset: {fileID: 0}
  m_GameObject: {fileID: 4000000}
  m_Enabled: 1
  m_Size: {x: 1, y: 1, z: 1}
--- !u!1 &4000010
GameObject:
  m_ObjectHideFlags: 0
  m_CorrespondingSourceObject: {fileID: 0}
  m_PrefabInstance: {fileID: 0}
  m_PrefabAsset: {fileID: 0}
  serializedVersion: 6
  m_Component:
  - component: {fileID: 4000011}
  m_Layer: 0
  m_Name: Lid
  m_TagString: Untagged
  m_IsActive: 1
--- !u!4 &4000011
Transform:
  m_ObjectHideFlags: 0
  m_CorrespondingSourceObject: {fileID: 0}
  m_PrefabInstance: {fileID: 0}
  m_PrefabAsset: {fileID: 0}
  m_GameObject: {fileID: 4000010}
  m_LocalRotation: {x: 0, y: 0, z: 0, w: 1}
  m_LocalPosition: {x: 0, y: 1, z: 0}
  m_LocalScale: {x: 1, y: 1, z: 1}
  m_Children: []
  m_Father: {fileID: 4000001}
  m_RootOrder: 0
"""

CYCLE_SCENE = HEADER + """\
--- !u!114 &1
MonoBehaviour:
  m_Target: {fileID: 2}
--- !u!114 &2
MonoBehaviour:
  m_Target: {fileID: 3}
--- !u!114 &3
MonoBehaviour:
  m_Target: {fileID: 1}
"""


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run each test with no UNITY_YAML_* variables and a fresh config."""
    for key in list(os.environ):
        if key.startswith("UNITY_YAML_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    set_config(None)
    yield
    set_config(None)
    package_logger = logging.getLogger("unity_yaml_editor")
    for handler in list(package_logger.handlers):
        if getattr(handler, "_unity_yaml_handler", False):
            package_logger.removeHandler(handler)


@pytest.fixture
def cli_runner():
    """Create a Click CLI runner."""
    return CliRunner()


def write_file(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    return path


def read_file(path: Path) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def parse_output(result: Any) -> Dict[str, Any]:
    """Parse the response envelope from a CliRunner result.

    Errors are written to stderr, which the runner may interleave with
    stdout, so the last JSON line wins.
    """
    lines = [line for line in result.output.splitlines() if line.startswith("{")]
    assert lines, f"no JSON envelope in output: {result.output!r}"
    return json.loads(lines[-1])


@pytest.fixture
def basic_scene(tmp_path) -> Path:
    """Player (with Enemy child) and Main Camera at the scene root."""
    return write_file(tmp_path / "Basic.unity", BASIC_SCENE)


@pytest.fixture
def prefab_scene(tmp_path) -> Path:
    """Level GameObject with a Crate PrefabInstance parented under it."""
    return write_file(tmp_path / "Assets" / "Scenes" / "Level.unity", PREFAB_INSTANCE_SCENE)


@pytest.fixture
def unity_project(tmp_path, prefab_scene) -> Path:
    """Project root with the Crate prefab and its .meta file."""
    write_file(tmp_path / "Assets" / "Prefabs" / "Crate.prefab", CRATE_PREFAB)
    write_file(
        tmp_path / "Assets" / "Prefabs" / "Crate.prefab.meta",
        f"fileFormatVersion: 2\nguid: {PREFAB_GUID}\nPrefabImporter:\n  externalObjects: {{}}\n",
    )
    return tmp_path


@pytest.fixture
def cycle_scene(tmp_path) -> Path:
    return write_file(tmp_path / "Cycle.unity", CYCLE_SCENE)
