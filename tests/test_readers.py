import json
import math

import numpy as np
import pytest

from conftest import find_node

from core.validation import SceneValidationError
from readers import THREE_JSON_EXTENSIONS, create_reader, get_file_type, is_supported_format
from readers.base_reader import BaseReader
from readers.three_json_reader import ThreeJSONReader


# -------------------------
# Matrix decomposition
# -------------------------

def _rotation_z(angle):
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [c, -s, 0, 0],
        [s, c, 0, 0],
        [0, 0, 1, 0],
        [0, 0, 0, 1],
    ])


def test_decompose_translation():
    m = np.identity(4)
    m[0:3, 3] = [1, 2, 3]
    position, rotation, scale = BaseReader.decompose_matrix(m)
    assert position == (1.0, 2.0, 3.0)
    assert rotation == pytest.approx((0.0, 0.0, 0.0))
    assert scale == pytest.approx((1.0, 1.0, 1.0))


def test_decompose_rotation_and_scale():
    m = _rotation_z(math.pi / 2) @ np.diag([2.0, 2.0, 2.0, 1.0])
    _, rotation, scale = BaseReader.decompose_matrix(m)
    assert rotation == pytest.approx((0.0, 0.0, math.pi / 2))
    assert scale == pytest.approx((2.0, 2.0, 2.0))


def test_decompose_mirrored_scale():
    _, _, scale = BaseReader.decompose_matrix(np.diag([-1.0, 1.0, 1.0, 1.0]))
    assert scale == pytest.approx((-1.0, 1.0, 1.0))


# -------------------------
# three.js JSON
# -------------------------

def test_reads_three_json_scene(three_json_file):
    scene = ThreeJSONReader(str(three_json_file)).read_scene()
    root = scene.root
    assert root.type == "Scene"
    assert [c.name for c in root.children] == ["Hull", "Lamp"]

    hull = find_node(scene, "Hull")
    assert hull.uuid == "mesh-1"
    assert hull.position == (1.0, 2.0, 3.0)
    assert hull.cast_shadow
    assert hull.geometry.vertex_count == 3
    assert hull.material.name == "Paint"
    assert hull.material.color == "ff0000"
    assert hull.material.metalness == 0.5
    assert hull.material.capabilities.has_clearcoat
    assert not hull.material.capabilities.has_clearcoat_roughness

    lamp = find_node(scene, "Lamp")
    assert lamp.color == "00ff00"
    assert lamp.light.intensity == 2
    assert lamp.light.decay == 2
    assert lamp.light.angle is None

    assert [clip.name for clip in scene.animations] == ["HullAction"]


def test_explicit_transform_fields(tmp_path):
    data = {
        "object": {
            "type": "Group",
            "name": "Rig",
            "position": [0, 1, 0],
            "rotation": [0, 0.5, 0, "XYZ"],
            "scale": [2, 2, 2],
        }
    }
    path = tmp_path / "rig.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    root = ThreeJSONReader(str(path)).read_scene().root
    assert root.position == (0, 1, 0)
    assert root.rotation == (0, 0.5, 0)
    assert root.scale == (2, 2, 2)


def test_multi_material_uses_first(tmp_path):
    data = {
        "geometries": [{"uuid": "g", "type": "BufferGeometry"}],
        "materials": [{"uuid": "a", "name": "A"}, {"uuid": "b", "name": "B"}],
        "object": {"type": "Mesh", "name": "M", "geometry": "g", "material": ["b", "a"]},
    }
    path = tmp_path / "multi.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    assert ThreeJSONReader(str(path)).read_scene().root.material.name == "B"


def test_dangling_references_are_reported(tmp_path):
    data = {
        "object": {
            "type": "Scene",
            "children": [{"type": "Mesh", "name": "Ghost", "geometry": "missing", "material": "gone"}],
        }
    }
    path = tmp_path / "ghost.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    with pytest.raises(SceneValidationError) as exc:
        ThreeJSONReader(str(path)).read_scene()
    codes = {issue.code for issue in exc.value.issues}
    assert codes == {"missing_geometry", "dangling_material"}


def test_rejects_non_scene_json(tmp_path):
    path = tmp_path / "other.json"
    path.write_text(json.dumps({"hello": "world"}), encoding="utf-8")
    with pytest.raises(ValueError):
        ThreeJSONReader(str(path))


def test_rejects_missing_file(tmp_path):
    with pytest.raises(ValueError):
        ThreeJSONReader(str(tmp_path / "nope.json"))


# -------------------------
# Factory
# -------------------------

def test_create_reader_picks_by_extension(three_json_file, tmp_path):
    assert isinstance(create_reader(str(three_json_file)), ThreeJSONReader)
    assert get_file_type("scene.usda") == "usd"
    assert get_file_type("scene.json") == "three_json"
    assert is_supported_format("a.USDC")
    assert ".json" in THREE_JSON_EXTENSIONS
    with pytest.raises(ValueError):
        create_reader(str(tmp_path / "scene.fbx"))


# -------------------------
# USD
# -------------------------

def test_reads_usd_stage(tmp_path):
    pytest.importorskip("pxr")
    from pxr import Gf, Sdf, Usd, UsdGeom, UsdLux, UsdShade

    path = tmp_path / "stage.usda"
    stage = Usd.Stage.CreateNew(str(path))
    UsdGeom.Xform.Define(stage, "/World")
    points = [(0, 0, 0), (1, 0, 0), (0, 1, 0)]
    for name in ("BoltA", "BoltB"):
        mesh = UsdGeom.Mesh.Define(stage, f"/World/{name}")
        mesh.CreatePointsAttr(points)
        mesh.CreateFaceVertexCountsAttr([3])
        mesh.CreateFaceVertexIndicesAttr([0, 1, 2])
    UsdGeom.XformCommonAPI(stage.GetPrimAtPath("/World/BoltA")).SetTranslate(Gf.Vec3d(1, 2, 3))

    material = UsdShade.Material.Define(stage, "/World/Looks/Steel")
    shader = UsdShade.Shader.Define(stage, "/World/Looks/Steel/Surface")
    shader.CreateIdAttr("UsdPreviewSurface")
    shader.CreateInput("metallic", Sdf.ValueTypeNames.Float).Set(0.9)
    material.CreateSurfaceOutput().ConnectToSource(shader.ConnectableAPI(), "surface")
    UsdShade.MaterialBindingAPI.Apply(stage.GetPrimAtPath("/World/BoltA")).Bind(material)

    camera = UsdGeom.Camera.Define(stage, "/World/Cam")
    camera.CreateClippingRangeAttr(Gf.Vec2f(0.5, 500))
    UsdLux.SphereLight.Define(stage, "/World/Lamp").CreateIntensityAttr(3.0)
    stage.GetRootLayer().Save()

    scene = create_reader(str(path)).read_scene()
    world = scene.root.children[0]
    assert world.name == "World"
    assert world.type == "Group"

    bolt_a = find_node(scene, "BoltA")
    bolt_b = find_node(scene, "BoltB")
    assert bolt_a.type == "Mesh"
    assert bolt_a.geometry.uuid == bolt_b.geometry.uuid
    assert bolt_a.geometry.vertex_count == 3
    assert bolt_a.position == pytest.approx((1.0, 2.0, 3.0))
    assert bolt_a.material.name == "Steel"
    assert bolt_a.material.metalness == pytest.approx(0.9)

    cam = find_node(scene, "Cam")
    assert cam.type == "PerspectiveCamera"
    assert cam.camera.near == pytest.approx(0.5)
    assert cam.camera.far == pytest.approx(500)

    lamp = find_node(scene, "Lamp")
    assert lamp.type == "PointLight"
    assert lamp.light.intensity == pytest.approx(3.0)
