#!/usr/bin/env python3
"""
Controls Emitter Module
Derives the context schema, the leva control panels and the blocks that
keep materials and context in sync with the panels.

Everything is generated from one catalog of ControlGroup/ControlField
entries: the scene's materials and root transform plus a fixed decorative
rig (lights, background, clouds, stars). The same catalog drives the
default values, the TypeScript shape of the context, the control
descriptors and both synchronization blocks.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from core.identifiers import property_key, quote
from core.scene_data import Material, MaterialCapabilities
from .generation_run import GenerationRun

CONTEXT_PREFIX = 'ctx_'


class Angle(float):
    """Float default rendered through angle canonicalization"""


Bounds = Tuple[float, float, float]


@dataclass
class ControlField:
    """One editable parameter

    Attributes:
        name: Variable name of the control (context key is ctx_<name>)
        default: Default value (number, Angle, bool, str, list or dict)
        bounds: (min, max, step) for scalar fields
        axis_bounds: (min, max, step) applied to each of x/y/z for vector fields
    """
    name: str
    default: Any
    bounds: Optional[Bounds] = None
    axis_bounds: Optional[Bounds] = None

    @property
    def context_key(self) -> str:
        return CONTEXT_PREFIX + self.name


@dataclass
class ControlGroup:
    """Named panel (or folder) of controls"""
    title: str
    fields: List[ControlField] = field(default_factory=list)
    folders: List['ControlGroup'] = field(default_factory=list)

    def all_fields(self) -> List[ControlField]:
        result = list(self.fields)
        for folder in self.folders:
            result.extend(folder.all_fields())
        return result


MATERIAL_BOUNDS = (-1, 1, 0.1)
# Starting values of every material panel
MATERIAL_DEFAULTS = {
    'metalness': -1,
    'roughness': 1,
    'clearcoat': 0,
    'clearcoatRoughness': 0,
    'model_color': {'r': 255, 'b': 255, 'g': 255},
}
POSITION_AXIS_BOUNDS = (-15, 15, 1)
ROTATION_AXIS_BOUNDS = (-15, 15, 0.5)


def _xyz(x, y, z) -> Dict[str, Any]:
    return {'x': x, 'y': y, 'z': z}


def _light_rig(prefix: str, title: str, scalar_bounds: Bounds, rotation: Dict[str, Any]) -> ControlGroup:
    return ControlGroup(title, [
        ControlField(f'{prefix}Intensity', 0, bounds=scalar_bounds),
        ControlField(f'{prefix}Decay', 0, bounds=scalar_bounds),
        ControlField(f'{prefix}Pos', _xyz(0, 2, 1.5), axis_bounds=POSITION_AXIS_BOUNDS),
        ControlField(f'{prefix}Rotation', rotation, axis_bounds=ROTATION_AXIS_BOUNDS),
    ])


def light_rigs() -> List[ControlGroup]:
    """Two point lights and a spot light mounted next to the model"""
    return [
        _light_rig('pointLight1', 'PointLight1', (-2, 2, 1),
                   _xyz(Angle(-math.pi), Angle(-math.pi), Angle(-math.pi))),
        _light_rig('pointLight2', 'PointLight2', (-2, 2, 1),
                   _xyz(Angle(-math.pi), Angle(-math.pi), Angle(-math.pi))),
        _light_rig('spotLight', 'Spot Light', (-1, 1, 0.1),
                   _xyz(Angle(0), Angle(-math.pi), Angle(0))),
    ]


def _cloud(suffix: str, title: str, position, width, depth, segments) -> ControlGroup:
    return ControlGroup(title, [
        ControlField(f'positionCloud{suffix}', position),
        ControlField(f'opacityCloud{suffix}', 0.2, bounds=(0, 1, 0.1)),
        ControlField(f'rotationSpeedCloud{suffix}', 0.4, bounds=(0, 1, 0.1)),
        ControlField(f'widthCloud{suffix}', width, bounds=(0, 10, 0.1)),
        ControlField(f'depthCloud{suffix}', depth, bounds=(0, 10, 0.1)),
        ControlField(f'segmentsCloud{suffix}', segments, bounds=(0, 15, 1)),
    ])


def background_catalog() -> ControlGroup:
    """Decorative host-page rig: gradient, lights, clouds and a star field"""
    return ControlGroup('Background', folders=[
        ControlGroup('General', [
            ControlField('backgroundGradient', True),
            ControlField('color1', {'r': 2, 'g': 199, 'b': 132}),
            ControlField('color2', {'r': 125, 'g': 252, 'b': 211}),
        ]),
        ControlGroup('SpotLight', [
            ControlField('positionSpotLight', [3, 10, 3]),
            ControlField('angleSpotLight', 0.5, bounds=(0, 1, 0.1)),
            ControlField('penumbraSpotLight', 1, bounds=(0, 5, 0.1)),
            ControlField('intensitySpotLight', 0.2, bounds=(0, 3, 0.1)),
        ]),
        ControlGroup('PointLight1', [
            ControlField('positionPointLightOne', [10, 7, 10]),
            ControlField('intensityPointLightOne', 0.2, bounds=(0, 3, 0.1)),
        ]),
        ControlGroup('PointLight2', [
            ControlField('positionPointLightTwo', [5, 0.5, 5]),
            ControlField('intensityPointLightTwo', 1, bounds=(0, 3, 0.1)),
        ]),
        _cloud('One', 'Cloud1', [3, 10, 3], 1, 1.5, 2),
        _cloud('Two', 'Cloud2', [-8, 8, -6], 1, 1.5, 1),
        _cloud('Three', 'Cloud3', [-3, 15, -3], 2, 1, 6),
        ControlGroup('Stars', [
            ControlField('radiusStars', 100, bounds=(0, 300, 10)),
            ControlField('depthStars', 25, bounds=(0, 100, 5)),
            ControlField('countStars', 5000, bounds=(0, 10000, 100)),
            ControlField('factorStars', 4, bounds=(0, 15, 1)),
            ControlField('saturationStars', 1, bounds=(0, 1, 0.1)),
            ControlField('fadeStars', True),
        ]),
    ])


class ControlsEmitter:
    """Emits context defaults, control panels and sync blocks

    Args:
        run: Generation run
    """

    def __init__(self, run: GenerationRun):
        self.run = run
        self.fmt = run.formatter
        self.dialect = run.dialect

    # === CATALOG ===

    @property
    def materials(self) -> List[Material]:
        return self.run.walk.materials

    def capabilities(self, material: Material) -> MaterialCapabilities:
        return self.run.walk.capabilities[material.uuid]

    def model_group(self) -> ControlGroup:
        root = self.run.scene.root
        fmt = self.fmt
        scale = root.scale
        if scale[0] == scale[1] == scale[2]:
            scale_default = fmt.round_value(scale[0])
        else:
            scale_default = [fmt.round_value(v) for v in scale]
        return ControlGroup('Model', [
            ControlField('model_position', [fmt.round_value(v) for v in root.position]),
            ControlField('model_rotation', [fmt.round_value(v) for v in root.rotation]),
            ControlField('model_scale', scale_default),
        ])

    def material_group(self, index: int, material: Material) -> ControlGroup:
        caps = self.capabilities(material)
        fields = [
            ControlField(f'metalness{index}', MATERIAL_DEFAULTS['metalness'], bounds=MATERIAL_BOUNDS),
            ControlField(f'roughness{index}', MATERIAL_DEFAULTS['roughness'], bounds=MATERIAL_BOUNDS),
        ]
        if caps.has_clearcoat:
            fields.append(ControlField(f'clearcoat{index}', MATERIAL_DEFAULTS['clearcoat'], bounds=MATERIAL_BOUNDS))
        if caps.has_clearcoat_roughness:
            fields.append(ControlField(f'clearcoatRoughness{index}', MATERIAL_DEFAULTS['clearcoatRoughness'],
                                       bounds=MATERIAL_BOUNDS))
        fields.append(ControlField(f'model_color{index}', dict(MATERIAL_DEFAULTS['model_color'])))
        return ControlGroup(material.name, fields)

    def material_groups(self) -> List[ControlGroup]:
        return [self.material_group(i, material) for i, material in enumerate(self.materials)]

    def model_groups(self) -> List[ControlGroup]:
        """Panels mounted inside the model component"""
        return [self.model_group()] + self.material_groups() + light_rigs()

    def context_fields(self) -> List[ControlField]:
        """Every field of the context schema, in schema order"""
        fields = []
        for group in self.material_groups():
            fields.extend(group.fields)
        fields.extend(self.model_group().fields)
        for group in light_rigs():
            fields.extend(group.fields)
        fields.extend(background_catalog().all_fields())
        return fields

    # === LITERALS ===

    def literal(self, value: Any) -> str:
        """Render a default value as a JavaScript literal"""
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, Angle):
            return self.fmt.round_angle(value)
        if isinstance(value, (int, float)):
            return self.fmt.value(value)
        if isinstance(value, str):
            return quote(value)
        if isinstance(value, (list, tuple)):
            return '[' + ', '.join(self.literal(v) for v in value) + ']'
        if isinstance(value, dict):
            return '{ ' + ', '.join(f'{property_key(k)}: {self.literal(v)}' for k, v in value.items()) + ' }'
        raise TypeError(f"Unsupported default value: {value!r}")

    def type_of(self, value: Any) -> str:
        """TypeScript type of a default value"""
        if isinstance(value, bool):
            return 'boolean'
        if isinstance(value, (int, float)):
            return 'number'
        if isinstance(value, str):
            return 'string'
        if isinstance(value, (list, tuple)):
            return '[' + ', '.join(self.type_of(v) for v in value) + ']'
        if isinstance(value, dict):
            return '{ ' + ', '.join(f'{property_key(k)}: {self.type_of(v)}' for k, v in value.items()) + ' }'
        raise TypeError(f"Unsupported default value: {value!r}")

    def render_context_defaults(self) -> str:
        return ''.join(f'{f.context_key}: {self.literal(f.default)},\n' for f in self.context_fields())

    def render_context_type(self) -> str:
        return ''.join(f'{f.context_key}: {self.type_of(f.default)};\n' for f in self.context_fields())

    # === CONTROL DESCRIPTORS ===

    def _bounds(self, bounds: Bounds) -> str:
        low, high, step = (self.fmt.format_number(v) for v in bounds)
        return f'min: {low}, max: {high}, step: {step}'

    def render_field(self, control: ControlField) -> str:
        ref = f'context.{control.context_key}'
        if control.axis_bounds is not None:
            value = '{ ' + ', '.join(f'{axis}: {ref}.{axis}' for axis in control.default) + ' }'
            axes = ''.join(f'  {axis}: {{ {self._bounds(control.axis_bounds)} }},\n' for axis in control.default)
            return f'{control.name}: {{\n  value: {value},\n{axes}}},\n'
        if control.bounds is not None:
            return f'{control.name}: {{ value: {ref}, {self._bounds(control.bounds)} }},\n'
        return f'{control.name}: {ref},\n'

    def render_group_body(self, group: ControlGroup) -> str:
        body = ''.join(self.render_field(f) for f in group.fields)
        for folder in group.folders:
            inner = self.dialect.indent_block(self.render_group_body(folder))
            body += f'{property_key(folder.title)}: folder({{\n{inner}}}),\n'
        return body

    def render_group(self, group: ControlGroup) -> str:
        names = ', '.join(f.name for f in group.all_fields())
        body = self.dialect.indent_block(self.render_group_body(group))
        return f'const {{ {names} }} = useControls({quote(group.title)}, {{\n{body}}})\n'

    def render_controls(self, groups: List[ControlGroup]) -> str:
        return '\n'.join(self.render_group(group) for group in groups)

    # === SYNCHRONIZATION ===

    def render_frame_sync(self) -> str:
        """Per-frame block applying material controls to the live materials"""
        lines = []
        for i, material in enumerate(self.materials):
            ref = self.dialect.material_ref(material.name)
            caps = self.capabilities(material)
            lines.append(f'{ref}.metalness = metalness{i}')
            lines.append(f'{ref}.roughness = roughness{i}')
            if caps.has_clearcoat:
                lines.append(f'{ref}.clearcoat = clearcoat{i}')
            if caps.has_clearcoat_roughness:
                lines.append(f'{ref}.clearcoatRoughness = clearcoatRoughness{i}')
            color = f'model_color{i}'
            lines.append(f'{ref}.color = new THREE.Color(`rgb(${{{color}.r}}, ${{{color}.g}}, ${{{color}.b}})`)')
        body = ''.join(line + '\n' for line in lines)
        return 'useFrame(() => {\n' + self.dialect.indent_block(body) + '})\n'

    def render_effect_sync(self, groups: List[ControlGroup]) -> str:
        """Per-render block copying every control value back into the context"""
        body = ''.join(f'context.{f.context_key} = {f.name}\n'
                       for group in groups for f in group.all_fields())
        return 'useEffect(() => {\n' + self.dialect.indent_block(body) + '})\n'
