"""Block text templates for newly created GameObjects and components."""

from typing import Dict

GAME_OBJECT_TEMPLATE = """\
--- !u!1 &{game_object_id}
GameObject:
  m_ObjectHideFlags: 0
  m_CorrespondingSourceObject: {{fileID: 0}}
  m_PrefabInstance: {{fileID: 0}}
  m_PrefabAsset: {{fileID: 0}}
  serializedVersion: 6
  m_Component:
  - component: {{fileID: {transform_id}}}
  m_Layer: {layer}
  m_Name: {name}
  m_TagString: Untagged
  m_Icon: {{fileID: 0}}
  m_NavMeshLayer: 0
  m_StaticEditorFlags: 0
  m_IsActive: 1
"""

TRANSFORM_TEMPLATE = """\
--- !u!4 &{transform_id}
Transform:
  m_ObjectHideFlags: 0
  m_CorrespondingSourceObject: {{fileID: 0}}
  m_PrefabInstance: {{fileID: 0}}
  m_PrefabAsset: {{fileID: 0}}
  m_GameObject: {{fileID: {game_object_id}}}
  serializedVersion: 2
  m_LocalRotation: {{x: 0, y: 0, z: 0, w: 1}}
  m_LocalPosition: {{x: 0, y: 0, z: 0}}
  m_LocalScale: {{x: 1, y: 1, z: 1}}
  m_ConstrainProportionsScale: 0
  m_Children: []
  m_Father: {{fileID: {parent_id}}}
  m_RootOrder: {root_order}
  m_LocalEulerAnglesHint: {{x: 0, y: 0, z: 0}}
"""

COMPONENT_TEMPLATE = """\
--- !u!{class_id} &{component_id}
{type_name}:
  m_ObjectHideFlags: 0
  m_CorrespondingSourceObject: {{fileID: 0}}
  m_PrefabInstance: {{fileID: 0}}
  m_PrefabAsset: {{fileID: 0}}
  m_GameObject: {{fileID: {game_object_id}}}
  m_Enabled: 1
"""

#: Body lines appended after the common component header, by class id
COMPONENT_DEFAULTS: Dict[int, str] = {
    20: (
        "  serializedVersion: 2\n"
        "  m_ClearFlags: 1\n"
        "  m_BackGroundColor: {r: 0.19215687, g: 0.3019608, b: 0.4745098, a: 0}\n"
        "  m_projectionMatrixMode: 1\n"
        "  near clip plane: 0.3\n"
        "  far clip plane: 1000\n"
        "  field of view: 60\n"
        "  orthographic: 0\n"
        "  orthographic size: 5\n"
        "  m_Depth: -1\n"
    ),
    23: "  m_CastShadows: 1\n  m_ReceiveShadows: 1\n  m_Materials:\n  - {fileID: 0}\n",
    33: "  m_Mesh: {fileID: 0}\n",
    54: (
        "  m_Mass: 1\n"
        "  m_Drag: 0\n"
        "  m_AngularDrag: 0.05\n"
        "  m_UseGravity: 1\n"
        "  m_IsKinematic: 0\n"
    ),
    64: "  m_IsTrigger: 0\n  m_Convex: 0\n  m_CookingOptions: 30\n  m_Mesh: {fileID: 0}\n",
    65: (
        "  m_IsTrigger: 0\n"
        "  m_Material: {fileID: 0}\n"
        "  m_Center: {x: 0, y: 0, z: 0}\n"
        "  m_Size: {x: 1, y: 1, z: 1}\n"
    ),
    81: "",
    82: (
        "  m_PlayOnAwake: 1\n"
        "  m_Volume: 1\n"
        "  m_Pitch: 1\n"
        "  m_Loop: 0\n"
        "  m_Mute: 0\n"
        "  m_Priority: 128\n"
    ),
    95: "  m_Controller: {fileID: 0}\n  m_ApplyRootMotion: 0\n",
    108: (
        "  m_Type: 1\n"
        "  m_Color: {r: 1, g: 0.95686275, b: 0.8392157, a: 1}\n"
        "  m_Intensity: 1\n"
        "  m_Range: 10\n"
        "  m_SpotAngle: 30\n"
        "  m_Shadows:\n"
        "    m_Type: 2\n"
    ),
    135: (
        "  m_IsTrigger: 0\n"
        "  m_Material: {fileID: 0}\n"
        "  m_Center: {x: 0, y: 0, z: 0}\n"
        "  m_Radius: 0.5\n"
    ),
    136: (
        "  m_IsTrigger: 0\n"
        "  m_Material: {fileID: 0}\n"
        "  m_Center: {x: 0, y: 0, z: 0}\n"
        "  m_Radius: 0.5\n"
        "  m_Height: 2\n"
        "  m_Direction: 1\n"
    ),
    143: (
        "  m_Height: 2\n"
        "  m_Radius: 0.5\n"
        "  m_SlopeLimit: 45\n"
        "  m_StepOffset: 0.3\n"
        "  m_SkinWidth: 0.08\n"
        "  m_Center: {x: 0, y: 0, z: 0}\n"
    ),
    212: (
        "  m_CastShadows: 0\n"
        "  m_ReceiveShadows: 0\n"
        "  m_Materials:\n"
        "  - {fileID: 0}\n"
        "  m_Color: {r: 1, g: 1, b: 1, a: 1}\n"
    ),
    222: "",
    223: "  m_RenderMode: 0\n  m_PixelPerfect: 0\n  m_SortingOrder: 0\n",
    225: "  m_Alpha: 1\n  m_Interactable: 1\n  m_BlocksRaycasts: 1\n  m_IgnoreParentGroups: 0\n",
}

ADDED_GAME_OBJECT_ENTRY = (
    "targetCorrespondingSourceObject: {target}\n"
    "insertIndex: -1\n"
    "addedObject: {{fileID: {file_id}}}"
)

MODIFICATION_ENTRY = (
    "target: {target}\n"
    "propertyPath: {property_path}\n"
    "value: {value}\n"
    "objectReference: {object_reference}"
)


def game_object_yaml(
    game_object_id: int,
    transform_id: int,
    name: str,
    parent_id: int = 0,
    root_order: int = 0,
    layer: int = 0,
) -> str:
    """GameObject + Transform block pair."""
    return GAME_OBJECT_TEMPLATE.format(
        game_object_id=game_object_id,
        transform_id=transform_id,
        name=name,
        layer=layer,
    ) + TRANSFORM_TEMPLATE.format(
        transform_id=transform_id,
        game_object_id=game_object_id,
        parent_id=parent_id,
        root_order=root_order,
    )


def component_yaml(class_id: int, type_name: str, component_id: int, game_object_id: int) -> str:
    text = COMPONENT_TEMPLATE.format(
        class_id=class_id,
        component_id=component_id,
        type_name=type_name,
        game_object_id=game_object_id,
    )
    return text + COMPONENT_DEFAULTS.get(class_id, "")
