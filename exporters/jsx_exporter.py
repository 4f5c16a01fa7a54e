#!/usr/bin/env python3
"""
JSX Exporter Module
Assembles the React Three Fiber component unit for a scene graph

Output order:
- imports
- type descriptors (typed output only)
- color/download helpers
- InstancedModel (when geometries are instanced)
- PropContext with the default context
- Model: node tree, model/material/light controls, sync blocks
- useGLTF.preload
- CombinedModel host page: background controls, save/load, Canvas
"""

import json
import math
from dataclasses import replace
from pathlib import Path
from typing import Optional

from core.identifiers import property_key, quote
from core.options import GeneratorOptions
from core.scene_data import SceneGraph
from .base_exporter import BaseExporter
from .controls_emitter import ControlsEmitter, background_catalog
from .dialect import JSXDialect, MarkupDialect
from .generation_run import GenerationRun
from .node_emitter import EmitOutput, NodeEmitter
from .types_emitter import TypesEmitter

HOST_CLASS = 'h-screen items-center justify-center absolute inset-0 overflow-x-hidden z-0 min-h-screen'
SAVE_BUTTON_CLASS = 'absolute bg-black bottom-2 px-2 py-16 rounded-full text-white text-xl w-3/12'


class JSXExporter(BaseExporter):
    """React Three Fiber JSX/TSX exporter

    Produces a single source file containing the scene as a component tree,
    a leva control panel bound to a shared context, and a host component
    that can save and load that context as JSON.

    Args:
        progress_callback: Optional function to call for progress updates
        dialect: Markup dialect used for elements (JSXDialect by default)
    """

    def __init__(self, progress_callback=None, dialect: Optional[MarkupDialect] = None):
        super().__init__(progress_callback)
        self.dialect = dialect or JSXDialect()

    def get_format_name(self):
        return "React Three Fiber JSX"

    def get_file_extension(self, options: GeneratorOptions = None):
        return "tsx" if options is not None and options.types else "jsx"

    # === GENERATION ===

    def generate(self, scene: SceneGraph, options: GeneratorOptions = None) -> str:
        options = options or GeneratorOptions()
        if options.progress_callback is None and self.progress_callback is not None:
            options = _with_callback(options, self.progress_callback)

        run = GenerationRun.create(scene, options, self.dialect)
        emitter = NodeEmitter(run)

        if options.debug:
            for line in emitter.dump():
                self.log(line)

        emitted = emitter.emit()
        controls = ControlsEmitter(run)

        sections = [self._imports(run, emitted)]
        if options.types:
            sections.append(TypesEmitter(run, emitted).render(controls))
        sections.append(self._helpers(options.types))
        if run.walk.has_instances:
            sections.append(self._instanced_model(run))
        sections.append(self._context(run, controls))
        sections.append(self._model(run, emitted, controls))
        sections.append(f'useGLTF.preload({quote(options.url)})\n')
        sections.append(self._host(run, controls))
        return '\n'.join(sections)

    def export(self, scene: SceneGraph, output_path, shot_name, options: GeneratorOptions = None):
        """Generate and write <shot_name>.jsx (or .tsx)

        Returns:
            dict: Export results with keys:
                - 'success': bool
                - 'jsx_file': Path to created file
                - 'files': List of created files
                - 'message': Status message
        """
        options = options or GeneratorOptions()
        try:
            output_dir = self.validate_output_path(output_path)
            self.log(f"Generating {self.get_format_name()} for {shot_name}...")
            text = self.generate(scene, options)

            jsx_file = output_dir / f"{shot_name}.{self.get_file_extension(options)}"
            with open(jsx_file, 'w', encoding='utf-8') as f:
                f.write(text)

            self.log(f"✓ Component written to: {jsx_file}")

            return {
                'success': True,
                'jsx_file': str(jsx_file),
                'files': [str(jsx_file)],
                'message': f"Exported {jsx_file.name}",
            }

        except Exception as e:
            self.log(f"ERROR: {str(e)}")
            import traceback
            self.log(traceback.format_exc())
            return {
                'success': False,
                'message': f"Export failed: {str(e)}",
                'files': [],
            }

    # === SECTIONS ===

    def _loader_call(self, options: GeneratorOptions) -> str:
        args = quote(options.url)
        if options.draco:
            args += f', {json.dumps(options.draco)}'
        return f'useGLTF({args})' + (' as GLTFResult' if options.types else '')

    def _imports(self, run: GenerationRun, emitted: EmitOutput) -> str:
        options = run.options
        react = ['Suspense', 'useState', 'useContext', 'useEffect', 'useRef']
        if run.walk.has_instances:
            react.append('useMemo')
        drei = ['useGLTF', 'Cloud', 'OrbitControls', 'Stars']
        if run.walk.has_instances:
            drei.append('Merged')
        for camera in ('PerspectiveCamera', 'OrthographicCamera'):
            if f'<{camera}' in emitted.text:
                drei.append(camera)
        if run.animations:
            drei.append('useAnimations')

        lines = [
            "import * as THREE from 'three'",
            f"import React, {{ {', '.join(react)} }} from 'react'",
            "import { folder, Leva, useControls } from 'leva'",
            f"import {{ {', '.join(drei)} }} from '@react-three/drei'",
        ]
        if options.types:
            lines.append("import { GLTF } from 'three-stdlib'")
        lines.append("import { Canvas, useFrame } from '@react-three/fiber'")
        return '\n'.join(lines) + '\n'

    def _helpers(self, typed: bool) -> str:
        num = ': number' if typed else ''
        return (
            f'const componentToHex = (c{num}) => {{\n'
            '  const hex = c.toString(16)\n'
            "  return hex.length == 1 ? '0' + hex : hex\n"
            '}\n'
            '\n'
            f'const rgbToHex = (r{num}, g{num}, b{num}) => {{\n'
            "  return '#' + componentToHex(r) + componentToHex(g) + componentToHex(b)\n"
            '}\n'
            '\n'
            f"function download(content{': BlobPart' if typed else ''}, fileName{': string' if typed else ''}, "
            f"contentType{': string' if typed else ''}) {{\n"
            "  const a = document.createElement('a')\n"
            '  const file = new Blob([content], { type: contentType })\n'
            '  a.href = URL.createObjectURL(file)\n'
            '  a.download = fileName\n'
            '  a.click()\n'
            '}\n'
        )

    def _instanced_model(self, run: GenerationRun) -> str:
        dialect = self.dialect
        entries = ''.join(
            f'{property_key(entry.name)}: {dialect.node_ref(entry.node.name)},\n'
            for entry in run.walk.registry.geometries.values()
        )
        merged = dialect.element('Merged', ['meshes={instances}', '{...props}'],
                                 '{(instances) => <Model instances={instances} />}\n')
        body = (
            f'const {{ nodes }} = {self._loader_call(run.options)}\n'
            'const instances = useMemo(() => ({\n'
            + dialect.indent_block(entries)
            + '}), [nodes])\n'
            'return (\n'
            + dialect.indent_block(merged)
            + ')\n'
        )
        return 'function InstancedModel(props) {\n' + dialect.indent_block(body) + '}\n'

    def _context(self, run: GenerationRun, controls: ControlsEmitter) -> str:
        generic = '<ContextType>' if run.options.types else ''
        return (
            f'const PropContext = React.createContext{generic}({{\n'
            + self.dialect.indent_block(controls.render_context_defaults())
            + '})\n'
        )

    def _rig_elements(self, run: GenerationRun) -> str:
        dialect = self.dialect
        fmt = run.formatter
        text = ''
        for prefix in ('pointLight1', 'pointLight2', 'spotLight'):
            attrs = [
                dialect.expression('intensity', f'{prefix}Intensity'),
                dialect.expression('decay', f'{prefix}Decay'),
                dialect.expression('position', f'[{prefix}Pos.x, {prefix}Pos.y, {prefix}Pos.z]'),
                dialect.expression('rotation', f'[{prefix}Rotation.x, {prefix}Rotation.y, {prefix}Rotation.z]'),
            ]
            if prefix == 'spotLight':
                attrs.insert(1, dialect.expression('angle', fmt.round_angle(math.pi / 10)))
            tag = 'spotLight' if prefix == 'spotLight' else 'pointLight'
            text += dialect.element(tag, attrs, '')
        return text

    def _model(self, run: GenerationRun, emitted: EmitOutput, controls: ControlsEmitter) -> str:
        options = run.options
        dialect = self.dialect
        groups = controls.model_groups()

        params = '{ instances, ...props }' if run.walk.has_instances else '{ ...props }'
        if options.types:
            params += ": JSX.IntrinsicElements['group'] & { instances?: any }"

        assets = 'nodes, materials' + (', animations' if run.animations else '')
        header = [f"const group = {'useRef<THREE.Group>()' if options.types else 'useRef()'}",
                  f'const {{ {assets} }} = {self._loader_call(options)}']
        if run.animations:
            header.append('const { actions } = useAnimations(animations, group)')
        header.append('const context = useContext(PropContext)')

        tree = dialect.element('group', ['ref={group}', '{...props}', dialect.expression('dispose', 'null')],
                               emitted.text + self._rig_elements(run))
        body = (
            '\n'.join(header) + '\n\n'
            + controls.render_controls(groups) + '\n'
            + controls.render_frame_sync() + '\n'
            + controls.render_effect_sync(groups) + '\n'
            + 'return (\n' + dialect.indent_block(tree) + ')\n'
        )
        return f'function Model({params}) {{\n' + dialect.indent_block(body) + '}\n'

    def _decorations(self, run: GenerationRun) -> str:
        dialect = self.dialect
        text = dialect.element('ambientLight', [dialect.expression('intensity', '0.3')], '')
        text += dialect.element('Stars', [
            dialect.expression(attr, f'{attr}Stars')
            for attr in ('radius', 'depth', 'count', 'factor', 'saturation', 'fade')
        ], '')
        for suffix in ('One', 'Two', 'Three'):
            cloud = dialect.element('Cloud', [
                dialect.expression('opacity', f'opacityCloud{suffix}'),
                dialect.expression('speed', f'rotationSpeedCloud{suffix}'),
                dialect.expression('width', f'widthCloud{suffix}'),
                dialect.expression('depth', f'depthCloud{suffix}'),
                dialect.expression('segments', f'segmentsCloud{suffix}'),
            ], '')
            text += dialect.element('group', [dialect.expression('position', f'positionCloud{suffix}')], cloud)
        text += dialect.element('pointLight', [
            dialect.expression('position', 'positionPointLightTwo'),
            dialect.expression('intensity', 'intensityPointLightTwo'),
        ], '')
        text += dialect.element('OrbitControls', ['makeDefault', dialect.expression('enableZoom', 'false')], '')
        text += dialect.element('InstancedModel' if run.walk.has_instances else 'Model', [], '')
        return text

    def _host(self, run: GenerationRun, controls: ControlsEmitter) -> str:
        options = run.options
        dialect = self.dialect
        typed = options.types
        background = background_catalog()
        save_name = Path(options.file_name.split('?')[0]).stem + '-context.json'

        canvas_children = (
            dialect.element('spotLight', [
                dialect.expression('position', 'positionSpotLight'),
                dialect.expression('angle', 'angleSpotLight'),
                dialect.expression('penumbra', 'penumbraSpotLight'),
                dialect.expression('intensity', 'intensitySpotLight'),
            ], '')
            + dialect.element('pointLight', [
                dialect.expression('position', 'positionPointLightOne'),
                dialect.expression('intensity', 'intensityPointLightOne'),
            ], '')
            + dialect.element('Suspense', [dialect.expression('fallback', 'null')], self._decorations(run))
        )
        save_button = dialect.element('button', [
            dialect.string('className', SAVE_BUTTON_CLASS),
            dialect.expression('onClick', f"() => download(JSON.stringify(context), {quote(save_name)}, 'text/json')"),
        ], 'save\n')
        page = dialect.element('div', [
            dialect.string('className', HOST_CLASS),
            dialect.expression('style', '{ background: pageBackground }'),
        ], (
            dialect.element('Leva', ['flat', 'oneLineLabels'], '')
            + dialect.element('Canvas', [
                dialect.string('className', 'h-full w-full'),
                dialect.expression('camera', '{ position: [1, 2.5, 8] }'),
            ], canvas_children)
            + dialect.element('div', [dialect.string('className', 'absolute bottom-0 flex justify-center w-full')],
                              save_button)
            + dialect.element('div', [dialect.string('className', 'absolute bottom-0 left-0')],
                              dialect.element('input', [dialect.string('type', 'file'),
                                                        dialect.expression('onChange', 'handleChange')], ''))
        ))

        body = (
            'const context = useContext(PropContext)\n'
            "const [files, setFiles] = useState('')\n"
            '\n'
            f"const handleChange = (e{': any' if typed else ''}) => {{\n"
            '  const fileReader = new FileReader()\n'
            "  fileReader.readAsText(e.target.files[0], 'UTF-8')\n"
            '  fileReader.onload = (event) => {\n'
            f"    setFiles(event.target{'!' if typed else ''}.result{' as string' if typed else ''})\n"
            '  }\n'
            '}\n'
            '\n'
            'useEffect(() => {\n'
            '  if (files) {\n'
            '    Object.assign(context, JSON.parse(files))\n'
            '  }\n'
            '}, [files])\n'
            '\n'
            + controls.render_group(background) + '\n'
            + controls.render_effect_sync([background]) + '\n'
            'const pageBackground = backgroundGradient\n'
            '  ? `linear-gradient(to left, ${rgbToHex(color1.r, color1.g, color1.b)}, '
            '${rgbToHex(color2.r, color2.g, color2.b)})`\n'
            '  : rgbToHex(color1.r, color1.g, color1.b)\n'
            '\n'
            'return (\n' + dialect.indent_block(page) + ')\n'
        )
        return 'export default function CombinedModel() {\n' + dialect.indent_block(body) + '}\n'


def _with_callback(options: GeneratorOptions, callback) -> GeneratorOptions:
    return replace(options, progress_callback=callback)
