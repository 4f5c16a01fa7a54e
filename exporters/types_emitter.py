#!/usr/bin/env python3
"""
Types Emitter Module
TypeScript descriptors for the loaded asset, its clips and the context.
"""

import json
from typing import List

from core.identifiers import property_key
from core.scene_data import SceneNode
from .controls_emitter import ControlsEmitter
from .generation_run import GenerationRun
from .node_emitter import EmitOutput


class TypesEmitter:
    """Emits GLTFResult, ActionName and ContextType declarations

    Args:
        run: Generation run
        emitted: Output of the node emitter, used to skip elided nodes
    """

    def __init__(self, run: GenerationRun, emitted: EmitOutput):
        self.run = run
        self.emitted = emitted

    def typed_nodes(self) -> List[SceneNode]:
        """Surviving named meshes, then top-level bones, unique by name"""
        nodes = self.run.walk.nodes
        parents = self.run.walk.parents
        meshes = [n for n in nodes if n.is_mesh and not self.emitted.is_elided(n)]
        bones = [
            n for n in nodes
            if n.is_bone and not (n.uuid in parents and parents[n.uuid].is_bone)
            and not self.emitted.is_elided(n)
        ]
        result = []
        seen = set()
        for node in meshes + bones:
            if not node.name or node.name in seen:
                continue
            seen.add(node.name)
            result.append(node)
        return result

    def render_gltf_result(self) -> str:
        indent = self.run.dialect.indent_block
        node_members = ''.join(f'{property_key(n.name)}: THREE.{n.type}\n' for n in self.typed_nodes())
        material_members = ''.join(f'{property_key(m.name)}: THREE.{m.type}\n' for m in self.run.walk.materials)
        body = (
            'nodes: {\n' + indent(node_members) + '}\n'
            + 'materials: {\n' + indent(material_members) + '}\n'
        )
        return 'type GLTFResult = GLTF & {\n' + indent(body) + '}\n'

    def render_action_names(self) -> str:
        clips = self.run.animations
        if not clips:
            return ''
        names = ' | '.join(json.dumps(clip.name) for clip in clips)
        return f'type ActionName = {names}\n'

    def render_context_type(self, controls: ControlsEmitter) -> str:
        return 'type ContextType = {\n' + self.run.dialect.indent_block(controls.render_context_type()) + '}\n'

    def render(self, controls: ControlsEmitter) -> str:
        parts = [self.render_gltf_result(), self.render_action_names(), self.render_context_type(controls)]
        return '\n'.join(part for part in parts if part)
