"""Unity class identifiers used in `--- !u!<class_id>` block headers."""

from typing import Dict, Optional

GAME_OBJECT = 1
TRANSFORM = 4
MONO_BEHAVIOUR = 114
RECT_TRANSFORM = 224
PREFAB_INSTANCE = 1001

#: Spatial node classes that carry m_Father / m_Children
TRANSFORM_CLASS_IDS = frozenset({TRANSFORM, RECT_TRANSFORM})

UNITY_CLASS_IDS: Dict[int, str] = {
    1: "GameObject",
    4: "Transform",
    20: "Camera",
    23: "MeshRenderer",
    29: "OcclusionCullingSettings",
    33: "MeshFilter",
    54: "Rigidbody",
    64: "MeshCollider",
    65: "BoxCollider",
    81: "AudioListener",
    82: "AudioSource",
    95: "Animator",
    96: "TrailRenderer",
    104: "RenderSettings",
    108: "Light",
    111: "Animation",
    114: "MonoBehaviour",
    120: "LineRenderer",
    135: "SphereCollider",
    136: "CapsuleCollider",
    137: "SkinnedMeshRenderer",
    143: "CharacterController",
    157: "LightmapSettings",
    196: "NavMeshSettings",
    198: "ParticleSystem",
    205: "LODGroup",
    212: "SpriteRenderer",
    222: "CanvasRenderer",
    223: "Canvas",
    224: "RectTransform",
    225: "CanvasGroup",
    1001: "PrefabInstance",
    1660057539: "SceneRoots",
}

_NAME_TO_CLASS_ID: Dict[str, int] = {
    name.lower(): class_id for class_id, name in UNITY_CLASS_IDS.items()
}


def get_class_name(class_id: int) -> str:
    """Return the Unity type name for a class id (``Unknown_<id>`` if unmapped)."""
    return UNITY_CLASS_IDS.get(class_id, f"Unknown_{class_id}")


def get_class_id(name_or_id: str) -> Optional[int]:
    """Resolve a type name (case-insensitive) or numeric string to a class id."""
    text = str(name_or_id).strip()
    if text.isdigit():
        return int(text)
    return _NAME_TO_CLASS_ID.get(text.lower())
