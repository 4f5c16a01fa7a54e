from conftest import make_cube_scene

from core.options import GeneratorOptions
from core.scene_data import AnimationClip, Geometry, Material, SceneGraph, SceneNode
from exporters.controls_emitter import ControlsEmitter, background_catalog, light_rigs
from exporters.generation_run import GenerationRun
from exporters.node_emitter import NodeEmitter
from exporters.types_emitter import TypesEmitter


def _controls(scene, **options):
    return ControlsEmitter(GenerationRun.create(scene, GeneratorOptions(**options)))


# -------------------------
# Context schema
# -------------------------

def test_context_defaults_for_cube(cube_scene):
    defaults = _controls(cube_scene).render_context_defaults()
    assert defaults.startswith(
        "ctx_metalness0: -1,\n"
        "ctx_roughness0: 1,\n"
        "ctx_model_color0: { r: 255, b: 255, g: 255 },\n"
        "ctx_model_position: [0, 0, 0],\n"
        "ctx_model_rotation: [0, 0, 0],\n"
        "ctx_model_scale: 1,\n"
    )
    assert "ctx_pointLight1Rotation: { x: -Math.PI, y: -Math.PI, z: -Math.PI },\n" in defaults
    assert "ctx_spotLightRotation: { x: 0, y: -Math.PI, z: 0 },\n" in defaults
    assert "ctx_backgroundGradient: true,\n" in defaults
    assert "ctx_color1: { r: 2, g: 199, b: 132 },\n" in defaults
    assert "ctx_countStars: 5000,\n" in defaults


def test_material_defaults_are_catalog_literals():
    scene = make_cube_scene(metalness=0.8, roughness=0.3, clearcoat=0.5, clearcoat_roughness=0.7, color="ff8000")
    defaults = _controls(scene).render_context_defaults()
    assert defaults.startswith(
        "ctx_metalness0: -1,\n"
        "ctx_roughness0: 1,\n"
        "ctx_clearcoat0: 0,\n"
        "ctx_clearcoatRoughness0: 0,\n"
        "ctx_model_color0: { r: 255, b: 255, g: 255 },\n"
    )


def test_root_transform_defaults():
    scene = make_cube_scene()
    scene.root.position = (1.0, 2.5, -0.004)
    scene.root.rotation = (0.0, 3.14159265, 0.0)
    scene.root.scale = (1.0, 2.0, 1.0)
    defaults = _controls(scene).render_context_defaults()
    assert "ctx_model_position: [1, 2.5, 0],\n" in defaults
    assert "ctx_model_rotation: [0, 3.14, 0],\n" in defaults
    assert "ctx_model_scale: [1, 2, 1],\n" in defaults


def test_context_type_mirrors_defaults(cube_scene):
    types = _controls(cube_scene).render_context_type()
    assert "ctx_metalness0: number;\n" in types
    assert "ctx_model_color0: { r: number, b: number, g: number };\n" in types
    assert "ctx_model_position: [number, number, number];\n" in types
    assert "ctx_fadeStars: boolean;\n" in types


def test_every_context_key_is_unique():
    paint = Material("m1", name="Paint", clearcoat=0.1, clearcoat_roughness=0.2)
    rubber = Material("m2", name="Rubber")
    root = SceneNode(type="Scene").add(
        SceneNode(name="A", type="Mesh", geometry=Geometry("a"), material=paint),
        SceneNode(name="B", type="Mesh", geometry=Geometry("b"), material=rubber),
    )
    keys = [f.context_key for f in _controls(SceneGraph(root)).context_fields()]
    assert len(keys) == len(set(keys))


# -------------------------
# Controls and sync blocks
# -------------------------

def test_material_panel(cube_scene):
    controls = _controls(cube_scene)
    panel = controls.render_group(controls.material_groups()[0])
    assert panel.startswith("const { metalness0, roughness0, model_color0 } = useControls('Material', {\n")
    assert "  metalness0: { value: context.ctx_metalness0, min: -1, max: 1, step: 0.1 },\n" in panel
    assert "  model_color0: context.ctx_model_color0,\n" in panel
    assert panel.endswith("})\n")


def test_clearcoat_controls_follow_capabilities():
    plain = _controls(make_cube_scene())
    coated = _controls(make_cube_scene(clearcoat=0.5))

    assert "clearcoat0" not in plain.render_controls(plain.model_groups())
    assert "clearcoat" not in plain.render_frame_sync()

    assert "ctx_clearcoat0: 0,\n" in coated.render_context_defaults()
    assert "ctx_clearcoatRoughness0" not in coated.render_context_defaults()
    assert "materials.Material.clearcoat = clearcoat0\n" in coated.render_frame_sync()


def test_frame_sync(cube_scene):
    sync = _controls(cube_scene).render_frame_sync()
    assert sync.startswith("useFrame(() => {\n")
    assert "  materials.Material.metalness = metalness0\n" in sync
    assert "  materials.Material.color = new THREE.Color(`rgb(${model_color0.r}, ${model_color0.g}, ${model_color0.b})`)\n" in sync


def test_effect_sync_covers_every_field(cube_scene):
    controls = _controls(cube_scene)
    groups = controls.model_groups()
    sync = controls.render_effect_sync(groups)
    for group in groups:
        for field in group.all_fields():
            assert f"context.{field.context_key} = {field.name}\n" in sync


def test_light_rigs_and_background_folders():
    assert [g.title for g in light_rigs()] == ["PointLight1", "PointLight2", "Spot Light"]
    background = background_catalog()
    assert [f.title for f in background.folders] == [
        "General", "SpotLight", "PointLight1", "PointLight2", "Cloud1", "Cloud2", "Cloud3", "Stars",
    ]


def test_background_panel_uses_folders(cube_scene):
    controls = _controls(cube_scene)
    panel = controls.render_group(background_catalog())
    assert "useControls('Background', {\n" in panel
    assert "  General: folder({\n" in panel
    assert "    backgroundGradient: context.ctx_backgroundGradient,\n" in panel


def test_vector_fields_have_per_axis_bounds(cube_scene):
    controls = _controls(cube_scene)
    panel = controls.render_group(light_rigs()[0])
    assert "  pointLight1Pos: {\n" in panel
    assert "    value: { x: context.ctx_pointLight1Pos.x, y: context.ctx_pointLight1Pos.y, " \
           "z: context.ctx_pointLight1Pos.z },\n" in panel
    assert "    x: { min: -15, max: 15, step: 1 },\n" in panel


# -------------------------
# Type descriptors
# -------------------------

def test_gltf_result_type():
    scene = make_cube_scene()
    scene.root.add(SceneNode(name="Hips", type="Bone").add(SceneNode(name="Spine", type="Bone")))
    scene.animations.append(AnimationClip("Walk"))
    scene.animations.append(AnimationClip("Run"))
    run = GenerationRun.create(scene, GeneratorOptions(types=True))
    emitted = NodeEmitter(run).emit()
    types = TypesEmitter(run, emitted)

    gltf = types.render_gltf_result()
    assert gltf.startswith("type GLTFResult = GLTF & {\n")
    assert "    Cube: THREE.Mesh\n" in gltf
    assert "    Hips: THREE.Bone\n" in gltf
    assert "Spine" not in gltf
    assert "    Material: THREE.MeshStandardMaterial\n" in gltf
    assert types.render_action_names() == 'type ActionName = "Walk" | "Run"\n'


def test_elided_and_duplicate_nodes_are_not_typed():
    root = SceneNode(name="Scene", type="Scene").add(
        SceneNode(name="Wrapper", type="Group").add(
            SceneNode(name="Part", type="Mesh", geometry=Geometry("a")),
            SceneNode(name="Part", type="Mesh", geometry=Geometry("b")),
        )
    )
    run = GenerationRun.create(SceneGraph(root), GeneratorOptions(types=True))
    typed = TypesEmitter(run, NodeEmitter(run).emit()).typed_nodes()
    assert [n.name for n in typed] == ["Part"]


def test_no_action_names_without_clips(cube_scene):
    run = GenerationRun.create(cube_scene, GeneratorOptions(types=True))
    assert TypesEmitter(run, NodeEmitter(run).emit()).render_action_names() == ""
