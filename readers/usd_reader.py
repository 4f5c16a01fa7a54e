#!/usr/bin/env python3
"""
USD Reader Module
Builds a SceneGraph from a USD stage (.usd, .usda, .usdc)

Mapping:
- Xform / Scope           -> Group
- Mesh                    -> Mesh (geometry identity is a hash of its topology)
- Camera                  -> PerspectiveCamera / OrthographicCamera
- SphereLight (shaped)    -> PointLight (SpotLight)
- DistantLight / RectLight -> DirectionalLight / RectAreaLight
- UsdPreviewSurface       -> MeshStandardMaterial (MeshPhysicalMaterial with clearcoat)
- anything else           -> raw prim type name
"""

import hashlib
import math
from typing import Dict, Optional

import numpy as np

from core.scene_data import (
    CameraParams,
    Geometry,
    LightParams,
    Material,
    SceneGraph,
    SceneNode,
)
from .base_reader import BaseReader

GROUP_TYPES = {'Xform', 'Scope', ''}
LIGHT_TYPES = {
    'SphereLight': 'PointLight',
    'DistantLight': 'DirectionalLight',
    'RectLight': 'RectAreaLight',
    'DiskLight': 'SpotLight',
}


def _rgb_to_hex(color) -> str:
    r, g, b = (int(round(max(0.0, min(1.0, float(c))) * 255)) for c in color)
    return f'{r:02x}{g:02x}{b:02x}'


class USDReader(BaseReader):
    """USD file reader implementing the BaseReader interface

    Reads the stage at its default time code. Transforms are local to the
    parent prim, matching three.js Object3D semantics.
    """

    def __init__(self, usd_file: str):
        """Open USD stage and initialize

        Args:
            usd_file: Path to USD file (.usd, .usda, .usdc)
        """
        super().__init__(usd_file)

        # Import USD libraries
        try:
            from pxr import Usd, UsdGeom, UsdLux, UsdShade
            self.Usd = Usd
            self.UsdGeom = UsdGeom
            self.UsdLux = UsdLux
            self.UsdShade = UsdShade
        except ImportError as e:
            raise ImportError(
                f"USD Python library (pxr) not found: {e}\n"
                "Install with: pip install usd-core"
            )

        self.stage = Usd.Stage.Open(str(self.file_path))
        if not self.stage:
            raise ValueError(f"Failed to open USD file: {usd_file}")

        self._time = Usd.TimeCode.Default()
        self._materials: Dict[str, Material] = {}

    def get_format_name(self) -> str:
        """Return human-readable format name"""
        return "USD"

    def read_scene(self) -> SceneGraph:
        self._materials = {}
        root = SceneNode(name='', type='Scene')
        for prim in self.stage.GetPseudoRoot().GetChildren():
            if not self._is_shading(prim):
                root.children.append(self._read_prim(prim))
        return SceneGraph(root=root)

    # === PRIMS ===

    def _is_shading(self, prim) -> bool:
        """Material networks are read through bindings, not as nodes"""
        return prim.IsA(self.UsdShade.Material) or prim.IsA(self.UsdShade.Shader)

    def _node_type(self, prim) -> str:
        type_name = prim.GetTypeName()
        if type_name in GROUP_TYPES:
            return 'Group'
        if prim.IsA(self.UsdGeom.Mesh):
            return 'Mesh'
        if prim.IsA(self.UsdGeom.Camera):
            projection = self.UsdGeom.Camera(prim).GetProjectionAttr().Get(self._time)
            return 'OrthographicCamera' if projection == 'orthographic' else 'PerspectiveCamera'
        if type_name in LIGHT_TYPES:
            if type_name == 'SphereLight' and self._cone_angle(prim) is not None:
                return 'SpotLight'
            return LIGHT_TYPES[type_name]
        return type_name

    def _read_prim(self, prim) -> SceneNode:
        node = SceneNode(
            name=prim.GetName(),
            type=self._node_type(prim),
            uuid=str(prim.GetPath()),
        )

        if prim.IsA(self.UsdGeom.Xformable):
            local_matrix = self.UsdGeom.Xformable(prim).GetLocalTransformation(self._time)
            # Gf matrices use row vectors; transpose to column-vector layout
            node.position, node.rotation, node.scale = self.decompose_matrix(np.array(local_matrix).T)

        if prim.IsA(self.UsdGeom.Imageable):
            visibility = self.UsdGeom.Imageable(prim).GetVisibilityAttr().Get(self._time)
            node.visible = visibility != self.UsdGeom.Tokens.invisible

        if node.type == 'Mesh':
            node.geometry = self._read_geometry(prim)
            node.material = self._read_bound_material(prim)
        elif node.type.endswith('Camera'):
            node.camera = self._read_camera(prim)
        elif node.type.endswith('Light'):
            node.light, node.color = self._read_light(prim)

        for child in prim.GetChildren():
            if not self._is_shading(child):
                node.children.append(self._read_prim(child))
        return node

    # === RESOURCES ===

    def _read_geometry(self, prim) -> Geometry:
        """Geometry keyed by a content hash so identical meshes share identity"""
        mesh = self.UsdGeom.Mesh(prim)
        points = mesh.GetPointsAttr().Get(self._time)
        indices = mesh.GetFaceVertexIndicesAttr().Get(self._time)
        counts = mesh.GetFaceVertexCountsAttr().Get(self._time)

        points_array = np.array(points if points else [], dtype=np.float32)
        digest = hashlib.sha1()
        digest.update(points_array.tobytes())
        digest.update(np.array(indices if indices else [], dtype=np.int32).tobytes())
        digest.update(np.array(counts if counts else [], dtype=np.int32).tobytes())

        return Geometry(
            uuid=digest.hexdigest(),
            type='BufferGeometry',
            vertex_count=len(points_array),
        )

    def _read_bound_material(self, prim) -> Optional[Material]:
        bound, _ = self.UsdShade.MaterialBindingAPI(prim).ComputeBoundMaterial()
        if not bound:
            return None

        key = str(bound.GetPath())
        if key in self._materials:
            return self._materials[key]

        material = Material(uuid=key, name=bound.GetPrim().GetName())
        shader = bound.ComputeSurfaceSource()[0]
        if shader and shader.GetIdAttr().Get() == 'UsdPreviewSurface':
            metallic = self._authored_input(shader, 'metallic')
            roughness = self._authored_input(shader, 'roughness')
            color = self._authored_input(shader, 'diffuseColor')
            if metallic is not None:
                material.metalness = float(metallic)
            if roughness is not None:
                material.roughness = float(roughness)
            if color is not None:
                material.color = _rgb_to_hex(color)

            clearcoat = self._authored_input(shader, 'clearcoat')
            if clearcoat is not None:
                material.type = 'MeshPhysicalMaterial'
                material.clearcoat = float(clearcoat)
                clearcoat_roughness = self._authored_input(shader, 'clearcoatRoughness')
                if clearcoat_roughness is not None:
                    material.clearcoat_roughness = float(clearcoat_roughness)

        self._materials[key] = material
        return material

    def _authored_input(self, shader, name):
        shader_input = shader.GetInput(name)
        if not shader_input or not shader_input.GetAttr().HasAuthoredValue():
            return None
        return shader_input.Get(self._time)

    def _read_camera(self, prim) -> CameraParams:
        camera = self.UsdGeom.Camera(prim)
        focal_length = camera.GetFocalLengthAttr().Get(self._time)
        v_aperture = camera.GetVerticalApertureAttr().Get(self._time)
        clipping = camera.GetClippingRangeAttr().Get(self._time)

        params = CameraParams()
        if focal_length and v_aperture:
            params.fov = math.degrees(2.0 * math.atan(v_aperture / (2.0 * focal_length)))
        if clipping is not None:
            params.near = float(clipping[0])
            params.far = float(clipping[1])
        return params

    def _cone_angle(self, prim) -> Optional[float]:
        if not prim.HasAPI(self.UsdLux.ShapingAPI):
            return None
        angle = self.UsdLux.ShapingAPI(prim).GetShapingConeAngleAttr().Get(self._time)
        return math.radians(angle) if angle is not None else None

    def _read_light(self, prim):
        light_api = self.UsdLux.LightAPI(prim)
        intensity = light_api.GetIntensityAttr().Get(self._time)
        color = light_api.GetColorAttr().Get(self._time)

        params = LightParams(intensity=float(intensity) if intensity is not None else None)
        angle = self._cone_angle(prim)
        if angle is not None:
            params.angle = angle
            softness = self.UsdLux.ShapingAPI(prim).GetShapingConeSoftnessAttr().Get(self._time)
            if softness is not None:
                params.penumbra = float(softness)

        return params, (_rgb_to_hex(color) if color is not None else None)
