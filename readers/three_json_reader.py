#!/usr/bin/env python3
"""
three.js JSON Reader Module
Reads the Object scene format written by three.js Object3D.toJSON()
(metadata.type == "Object", format 4.x).
"""

import json
from typing import Any, Dict, List, Optional

import numpy as np

from core.scene_data import (
    AnimationClip,
    CameraParams,
    Geometry,
    LightParams,
    Material,
    SceneGraph,
    SceneNode,
    Skeleton,
)
from core.validation import SceneValidationError, ValidationIssue
from .base_reader import BaseReader

LIGHT_FIELDS = ('intensity', 'angle', 'penumbra', 'decay', 'distance')


def _hex_color(value) -> Optional[str]:
    """three.js stores colors as 24-bit integers"""
    if value is None:
        return None
    if isinstance(value, str):
        return value.lstrip('#').lower()
    return f'{int(value) & 0xffffff:06x}'


class ThreeJSONReader(BaseReader):
    """three.js JSON scene reader

    Geometries, materials and skeletons are resolved by uuid. Node transforms
    come from the column-major "matrix" array when present, otherwise from
    explicit position/rotation/scale arrays.
    """

    def __init__(self, json_file: str):
        super().__init__(json_file)
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                self.data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse three.js JSON file {self.file_path}: {e}")

        if not isinstance(self.data, dict) or 'object' not in self.data:
            raise ValueError(f"Not a three.js Object scene (missing 'object'): {self.file_path}")

        self._issues: List[ValidationIssue] = []

    def get_format_name(self) -> str:
        return "three.js JSON"

    def read_scene(self) -> SceneGraph:
        self._issues = []
        geometries = self._read_geometries()
        materials = self._read_materials()
        skeletons = self._read_skeletons()

        root = self._read_object(self.data['object'], 'object', geometries, materials, skeletons)
        if self._issues:
            raise SceneValidationError(self._issues)

        return SceneGraph(root=root, animations=self._read_animations())

    # === RESOURCES ===

    def _read_geometries(self) -> Dict[str, Geometry]:
        result = {}
        for item in self.data.get('geometries', []):
            vertex_count = None
            position = item.get('data', {}).get('attributes', {}).get('position')
            if position and position.get('itemSize'):
                vertex_count = len(position.get('array', [])) // position['itemSize']
            result[item['uuid']] = Geometry(
                uuid=item['uuid'],
                type=item.get('type', 'BufferGeometry'),
                vertex_count=vertex_count,
            )
        return result

    def _read_materials(self) -> Dict[str, Material]:
        result = {}
        for item in self.data.get('materials', []):
            material = Material(
                uuid=item['uuid'],
                name=item.get('name', ''),
                type=item.get('type', 'MeshStandardMaterial'),
                clearcoat=item.get('clearcoat'),
                clearcoat_roughness=item.get('clearcoatRoughness'),
            )
            if 'metalness' in item:
                material.metalness = item['metalness']
            if 'roughness' in item:
                material.roughness = item['roughness']
            if 'color' in item:
                material.color = _hex_color(item['color'])
            result[item['uuid']] = material
        return result

    def _read_skeletons(self) -> Dict[str, Skeleton]:
        return {
            item['uuid']: Skeleton(uuid=item['uuid'], bones=list(item.get('bones', [])))
            for item in self.data.get('skeletons', [])
        }

    def _read_animations(self) -> List[AnimationClip]:
        clips = []
        for item in self.data.get('animations', []):
            target_names = item.get('targetNames')
            clips.append(AnimationClip(
                name=item.get('name', ''),
                target_names=list(target_names) if target_names is not None else None,
            ))
        return clips

    # === OBJECTS ===

    def _resolve(self, table: Dict[str, Any], ref, path: str, kind: str, code: str):
        if ref is None:
            return None
        # Multi-material meshes resolve to their first material
        if isinstance(ref, list):
            if not ref:
                return None
            ref = ref[0]
        if ref not in table:
            self._issues.append(ValidationIssue(path, f"references unknown {kind} '{ref}'", code))
            return None
        return table[ref]

    def _read_object(self, obj: Dict[str, Any], path: str, geometries, materials, skeletons) -> SceneNode:
        node = SceneNode(
            name=obj.get('name', ''),
            type=obj.get('type', 'Object3D'),
            visible=obj.get('visible', True),
            cast_shadow=obj.get('castShadow', False),
            receive_shadow=obj.get('receiveShadow', False),
            user_data=dict(obj.get('userData', {})),
        )
        if obj.get('uuid'):
            node.uuid = obj['uuid']

        if 'matrix' in obj:
            # Serialized column-major
            matrix = np.array(obj['matrix'], dtype=float).reshape(4, 4).T
            node.position, node.rotation, node.scale = self.decompose_matrix(matrix)
        else:
            if 'position' in obj:
                node.position = tuple(obj['position'])
            if 'rotation' in obj:
                node.rotation = tuple(obj['rotation'][:3])
            if 'scale' in obj:
                node.scale = tuple(obj['scale'])
        if 'up' in obj:
            node.up = tuple(obj['up'])

        node.geometry = self._resolve(geometries, obj.get('geometry'), path, 'geometry', 'missing_geometry')
        node.material = self._resolve(materials, obj.get('material'), path, 'material', 'dangling_material')
        node.skeleton = self._resolve(skeletons, obj.get('skeleton'), path, 'skeleton', 'invalid')

        if 'Camera' in node.type:
            defaults = CameraParams()
            node.camera = CameraParams(
                zoom=obj.get('zoom', defaults.zoom),
                far=obj.get('far', defaults.far),
                near=obj.get('near', defaults.near),
                fov=obj.get('fov', defaults.fov),
            )
        if node.type.endswith('Light'):
            node.light = LightParams(**{name: obj.get(name) for name in LIGHT_FIELDS})
            node.color = _hex_color(obj.get('color'))

        if 'morphTargetDictionary' in obj:
            node.morph_target_dictionary = dict(obj['morphTargetDictionary'])
        if 'morphTargetInfluences' in obj:
            node.morph_target_influences = list(obj['morphTargetInfluences'])

        for i, child in enumerate(obj.get('children', [])):
            node.children.append(
                self._read_object(child, f'{path}.children[{i}]', geometries, materials, skeletons)
            )
        return node
