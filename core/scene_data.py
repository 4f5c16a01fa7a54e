#!/usr/bin/env python3
"""
Scene Data Module
Format-agnostic data structures for the scene graph handed to the generator.

Readers (three.js JSON, USD) build these structures, and the JSX exporter
consumes them without knowledge of the source format. Nothing in here is
mutated by the generator: per-run decisions live in separate maps.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Tuple, Any
import uuid as uuid_lib


Vector3 = Tuple[float, float, float]

# three.js class names that count as meshes for duplicate detection
MESH_TYPES = {'Mesh', 'SkinnedMesh', 'InstancedMesh'}
CAMERA_TYPES = {'PerspectiveCamera', 'OrthographicCamera'}


def _new_uuid() -> str:
    return str(uuid_lib.uuid4()).upper()


@dataclass
class Geometry:
    """Geometry reference shared between meshes

    Attributes:
        uuid: Content-identity key; meshes sharing this key share geometry
        type: Geometry class name (e.g. "BufferGeometry")
        vertex_count: Optional vertex count reported by the provider, used to
                      detect inconsistent duplicates
    """
    uuid: str
    type: str = "BufferGeometry"
    vertex_count: Optional[int] = None


@dataclass(frozen=True)
class MaterialCapabilities:
    """Optional PBR fields a material exposes

    Attributes:
        has_clearcoat: Material carries a clearcoat value
        has_clearcoat_roughness: Material carries a clearcoat roughness value
    """
    has_clearcoat: bool = False
    has_clearcoat_roughness: bool = False


@dataclass
class Material:
    """Surface material

    Attributes:
        uuid: Material identity
        name: Material name (may be empty)
        type: Material class name (e.g. "MeshStandardMaterial")
        metalness: PBR metalness
        roughness: PBR roughness
        clearcoat: Clearcoat amount, None when the material has no clearcoat
        clearcoat_roughness: Clearcoat roughness, None when absent
        color: Tint as six-digit lowercase hex without '#'
    """
    uuid: str
    name: str = ""
    type: str = "MeshStandardMaterial"
    metalness: float = 0.0
    roughness: float = 1.0
    clearcoat: Optional[float] = None
    clearcoat_roughness: Optional[float] = None
    color: str = "ffffff"

    @property
    def capabilities(self) -> MaterialCapabilities:
        return MaterialCapabilities(
            has_clearcoat=self.clearcoat is not None,
            has_clearcoat_roughness=self.clearcoat_roughness is not None,
        )


@dataclass
class CameraParams:
    """Camera optical parameters (three.js conventions)

    Attributes:
        zoom: Zoom factor
        far: Far clipping plane
        near: Near clipping plane
        fov: Vertical field of view in degrees (perspective cameras)
    """
    zoom: float = 1.0
    far: float = 2000.0
    near: float = 0.1
    fov: float = 50.0


@dataclass
class LightParams:
    """Light parameters; None means the light type does not have the field"""
    intensity: Optional[float] = None
    angle: Optional[float] = None
    penumbra: Optional[float] = None
    decay: Optional[float] = None
    distance: Optional[float] = None


@dataclass
class Skeleton:
    """Skeleton bound to a skinned mesh

    Attributes:
        uuid: Skeleton identity
        bones: Bone node uuids in binding order
    """
    uuid: str
    bones: List[str] = field(default_factory=list)


@dataclass
class AnimationClip:
    """Animation clip

    Attributes:
        name: Clip name
        target_names: Optional explicit list of node names the clip drives
    """
    name: str
    target_names: Optional[List[str]] = None

    def references(self, node_name: str) -> bool:
        """Whether this clip refers to a node by name

        Case-sensitive substring test against the clip name, exact membership
        test against the explicit target list.
        """
        if node_name in self.name:
            return True
        return self.target_names is not None and node_name in self.target_names


@dataclass(eq=False)
class SceneNode:
    """Node of the scene graph

    Attributes:
        name: Display name
        type: three.js class name (Scene, Group, Mesh, Bone, PointLight, ...)
        uuid: Node identity, unique within a graph
        position: Local translation
        rotation: Local XYZ Euler rotation in radians
        scale: Local scale
        geometry: Geometry for mesh-like nodes
        material: Material for mesh-like nodes
        children: Ordered child nodes
        visible: Visibility flag
        cast_shadow: Shadow casting flag
        receive_shadow: Shadow receiving flag
        camera: Camera parameters for camera nodes
        light: Light parameters for light nodes
        up: Up vector
        color: Light color as hex, None for nodes without a color
        skeleton: Skeleton for skinned meshes
        morph_target_dictionary: Morph target name -> index
        morph_target_influences: Morph target weights
        user_data: Free-form metadata
    """
    name: str = ""
    type: str = "Object3D"
    uuid: str = field(default_factory=_new_uuid)
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Vector3 = (0.0, 0.0, 0.0)
    scale: Vector3 = (1.0, 1.0, 1.0)
    geometry: Optional[Geometry] = None
    material: Optional[Material] = None
    children: List['SceneNode'] = field(default_factory=list)
    visible: bool = True
    cast_shadow: bool = False
    receive_shadow: bool = False
    camera: Optional[CameraParams] = None
    light: Optional[LightParams] = None
    up: Vector3 = (0.0, 1.0, 0.0)
    color: Optional[str] = None
    skeleton: Optional[Skeleton] = None
    morph_target_dictionary: Optional[Dict[str, int]] = None
    morph_target_influences: Optional[List[float]] = None
    user_data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_mesh(self) -> bool:
        return self.type in MESH_TYPES

    @property
    def is_bone(self) -> bool:
        return self.type == 'Bone'

    @property
    def is_camera(self) -> bool:
        return self.type in CAMERA_TYPES

    def add(self, *nodes: 'SceneNode') -> 'SceneNode':
        """Append children and return self for chaining"""
        self.children.extend(nodes)
        return self


@dataclass
class SceneGraph:
    """Complete scene handed to the generator

    This is the format-agnostic value readers produce and exporters consume.

    Attributes:
        root: Root node (usually of type "Scene")
        animations: Animation clips shipped with the asset
    """
    root: SceneNode
    animations: List[AnimationClip] = field(default_factory=list)
