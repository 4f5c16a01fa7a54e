#!/usr/bin/env python3
"""
Node Emitter Module
Bottom-up scene-graph to markup transform.

Each node folds into a NodeResult once all of its children have. Groups
that carry nothing are elided: their result splices the children's
fragments in place of a wrapper element. Results are fragment trees that
are rendered to text exactly once, so neither the fold nor the rendering
depends on the depth of the scene. Decisions are collected into a per-run
map; the scene graph itself is never written to.
"""

import json
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

import numpy as np

from core.scene_data import CameraParams, LightParams, SceneNode
from .dialect import MarkupDialect
from .generation_run import GenerationRun

DEFAULT_CAMERA = CameraParams()
DEFAULT_SPOT_ANGLE = math.pi / 3
DEFAULT_UP = (0.0, 1.0, 0.0)
ELIDABLE_TYPES = {'group', 'scene'}
SHADOW_TAGS = {'mesh'}

POSITION_BINDING = 'model_position'
ROTATION_BINDING = 'model_rotation'
SCALE_BINDING = 'model_scale'


@dataclass(frozen=True)
class NodeResult:
    """Outcome of emitting one node

    Attributes:
        open_line: Start tag (or the whole element when self-closing); empty when elided
        children: Results spliced between the start and end tags, or in place when elided
        close_line: End tag, empty for self-closing elements
        elided: The node was dropped as a redundant wrapper
        attributes_added: Attributes beyond the name attribute were emitted
        has_text: The result renders to non-empty text
    """
    open_line: str = ''
    children: Tuple['NodeResult', ...] = ()
    close_line: str = ''
    elided: bool = False
    attributes_added: bool = False
    has_text: bool = False

    @property
    def text(self) -> str:
        return render_result(self)


def render_result(result: NodeResult, indent: str = MarkupDialect.indent) -> str:
    """Join a result's fragments into indented text"""
    parts = []
    stack = [(result, 0)]
    while stack:
        item, depth = stack.pop()
        if isinstance(item, str):
            parts.append(indent * depth + item)
        elif item.elided:
            stack.extend((child, depth) for child in reversed(item.children))
        elif item.open_line:
            parts.append(indent * depth + item.open_line)
            if item.close_line:
                stack.append((item.close_line, depth))
                stack.extend((child, depth + 1) for child in reversed(item.children))
    return ''.join(parts)


@dataclass(frozen=True)
class EmitOutput:
    """Result of emitting a whole tree

    Attributes:
        text: Markup for the root
        decisions: Node uuid -> NodeResult, read-only
    """
    text: str
    decisions: Mapping[str, NodeResult]

    def is_elided(self, node: SceneNode) -> bool:
        result = self.decisions.get(node.uuid)
        return result is not None and result.elided


class AttributeBuilder:
    """Ordered attribute fragments for one element"""

    def __init__(self, dialect):
        self.dialect = dialect
        self.fragments: List[str] = []
        self.names: List[str] = []

    def __len__(self):
        return len(self.fragments)

    def __contains__(self, name):
        return name in self.names

    def _add(self, name, fragment):
        self.names.append(name)
        self.fragments.append(fragment)

    def expression(self, name: str, code: str) -> None:
        self._add(name, self.dialect.expression(name, code))

    def string(self, name: str, value: str) -> None:
        self._add(name, self.dialect.string(name, value))

    def flag(self, name: str) -> None:
        if name not in self.names:
            self._add(name, self.dialect.flag(name))


def post_order(root: SceneNode) -> Iterator[SceneNode]:
    """Children before parents; bones are leaves"""
    stack = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded or node.is_bone or not node.children:
            yield node
            continue
        stack.append((node, True))
        stack.extend((child, False) for child in reversed(node.children))


class NodeEmitter:
    """Emits the component tree for a scene graph

    Args:
        run: Generation run (options, walk result, formatter, dialect)
    """

    def __init__(self, run: GenerationRun):
        self.run = run
        self.options = run.options
        self.fmt = run.formatter
        self.dialect = run.dialect

    def emit(self, root: Optional[SceneNode] = None) -> EmitOutput:
        root = root or self.run.scene.root
        decisions: Dict[str, NodeResult] = {}
        for node in post_order(root):
            decisions[node.uuid] = self._emit_node(node, decisions)
        self.run.progress.flush()
        text = render_result(decisions[root.uuid], self.dialect.indent)
        return EmitOutput(text=text, decisions=MappingProxyType(decisions))

    def _needs_name(self, node: SceneNode) -> bool:
        if not node.name:
            return False
        if self.options.keep_names or node.morph_target_dictionary is not None:
            return True
        return any(clip.references(node.name) for clip in self.run.animations)

    def _emit_node(self, node: SceneNode, decisions: Dict[str, NodeResult]) -> NodeResult:
        """Fold one node whose children are already in decisions"""
        dialect = self.dialect
        fmt = self.fmt
        node_ref = dialect.node_ref(node.name)
        tag = dialect.normalize_type(node.type)
        self.run.progress.report(node.name)

        # Bones keep their live identity for skinning
        if node.is_bone:
            return NodeResult(open_line=dialect.reference(node_ref), has_text=True)

        children = tuple(decisions[child.uuid] for child in node.children)
        has_children_text = any(child.has_text for child in children)

        entry = None
        if self.options.instancing_requested:
            entry = self.run.walk.registry.instanced_entry(node, self.options.instance_all)
        element_tag = dialect.instance_tag(entry.name) if entry else tag

        attrs = AttributeBuilder(dialect)
        if self._needs_name(node):
            attrs.string('name', node.name)
        named_count = len(attrs)

        if node.is_camera:
            camera = node.camera or DEFAULT_CAMERA
            attrs.expression('makeDefault', 'false')
            if camera.zoom != DEFAULT_CAMERA.zoom:
                attrs.expression('zoom', fmt.value(camera.zoom))
            if camera.far != DEFAULT_CAMERA.far:
                attrs.expression('far', fmt.value(camera.far))
            if camera.near != DEFAULT_CAMERA.near:
                attrs.expression('near', fmt.value(camera.near))
            if node.type == 'PerspectiveCamera' and camera.fov != DEFAULT_CAMERA.fov:
                attrs.expression('fov', fmt.value(camera.fov))

        if entry is None:
            self._direct_attributes(node, tag, node_ref, attrs)

        if node.color and node.color.lower() != 'ffffff':
            attrs.string('color', f'#{node.color.lower()}')
        self._transform_attributes(node, attrs)
        if self.options.meta and node.user_data:
            attrs.expression('userData', json.dumps(node.user_data, separators=(',', ':')))

        attributes_added = len(attrs) > named_count
        if (not self.options.keep_groups and tag in ELIDABLE_TYPES
                and (not attributes_added or not node.children)):
            return NodeResult(children=children, elided=True,
                              attributes_added=attributes_added, has_text=has_children_text)
        if has_children_text:
            return NodeResult(
                open_line=dialect.start_tag(element_tag, attrs.fragments),
                children=children,
                close_line=dialect.end_tag(element_tag),
                attributes_added=attributes_added,
                has_text=True,
            )
        return NodeResult(
            open_line=dialect.start_tag(element_tag, attrs.fragments, self_closing=True),
            attributes_added=attributes_added,
            has_text=True,
        )

    def _direct_attributes(self, node: SceneNode, tag: str, node_ref: str, attrs: AttributeBuilder) -> None:
        """Attributes implied by a shared instance when the node is instanced"""
        fmt = self.fmt
        registry = self.run.walk.registry

        if tag in SHADOW_TAGS and self.options.shadows:
            attrs.flag('castShadow')
            attrs.flag('receiveShadow')

        if node.geometry is not None:
            attrs.expression('geometry', f'{node_ref}.geometry')

        material = node.material
        if material is not None:
            if material.name and registry.materials.get(material.name) == 1:
                attrs.expression('material', self.dialect.material_ref(material.name))
            else:
                attrs.expression('material', f'{node_ref}.material')

        if node.skeleton is not None:
            attrs.expression('skeleton', f'{node_ref}.skeleton')
        if not node.visible:
            attrs.expression('visible', 'false')
        if node.cast_shadow:
            attrs.flag('castShadow')
        if node.receive_shadow:
            attrs.flag('receiveShadow')
        if node.morph_target_dictionary is not None:
            attrs.expression('morphTargetDictionary', f'{node_ref}.morphTargetDictionary')
        if node.morph_target_influences is not None:
            attrs.expression('morphTargetInfluences', f'{node_ref}.morphTargetInfluences')

        light = node.light or LightParams()
        if light.intensity and fmt.round_value(light.intensity):
            attrs.expression('intensity', fmt.value(light.intensity))
        if light.angle and light.angle != DEFAULT_SPOT_ANGLE:
            attrs.expression('angle', fmt.round_angle(light.angle))
        if light.penumbra and fmt.round_value(light.penumbra) != 0:
            attrs.expression('penumbra', fmt.value(light.penumbra))
        if light.decay and fmt.round_value(light.decay) != 1:
            attrs.expression('decay', fmt.value(light.decay))
        if light.distance and fmt.round_value(light.distance) != 0:
            attrs.expression('distance', fmt.value(light.distance))

        if node.up is not None and tuple(float(v) for v in node.up) != DEFAULT_UP:
            attrs.expression('up', fmt.vector(node.up))

    def _transform_attributes(self, node: SceneNode, attrs: AttributeBuilder) -> None:
        fmt = self.fmt
        has_position = fmt.round_value(np.linalg.norm(node.position)) != 0
        has_rotation = fmt.round_value(np.linalg.norm(node.rotation)) != 0
        has_scale = any(fmt.round_value(v) != 1 for v in node.scale)

        if has_position:
            attrs.expression('position', POSITION_BINDING)
        if has_rotation:
            attrs.expression('rotation', ROTATION_BINDING)
        if has_scale:
            attrs.expression('scale', SCALE_BINDING)

    def dump(self, root: Optional[SceneNode] = None) -> List[str]:
        """Indented one-line-per-node description of the tree"""
        fmt = self.fmt
        lines = []
        stack = [(root or self.run.scene.root, 0)]
        while stack:
            node, depth = stack.pop()
            material = ''
            if node.material is not None:
                material = f'{node.material.name}-{node.material.uuid[:8]}'
            lines.append(
                f"{'  ' * depth}{node.type} {node.name} "
                f"pos: {fmt.vector(node.position)} "
                f"scale: {fmt.vector(node.scale)} "
                f"rot: {fmt.vector(node.rotation)} "
                f"mat: {material}"
            )
            stack.extend((child, depth + 1) for child in reversed(node.children))
        return lines
