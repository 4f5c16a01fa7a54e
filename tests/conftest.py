import json

import pytest

from core.scene_data import Geometry, Material, SceneGraph, SceneNode


def make_cube_scene(**material_fields) -> SceneGraph:
    material = Material(uuid="mat-1", name="Material", **material_fields)
    cube = SceneNode(name="Cube", type="Mesh", uuid="cube", geometry=Geometry("geo-cube"), material=material)
    root = SceneNode(name="Scene", type="Scene", uuid="root").add(cube)
    return SceneGraph(root=root)


def find_node(scene, name):
    """First node with the given name, depth-first"""
    stack = [scene.root]
    while stack:
        node = stack.pop()
        if node.name == name:
            return node
        stack.extend(reversed(node.children))
    return None


@pytest.fixture
def cube_scene():
    return make_cube_scene()


@pytest.fixture
def three_json_file(tmp_path):
    """A small three.js Object scene with one mesh and one light"""
    data = {
        "metadata": {"version": 4.6, "type": "Object", "generator": "Object3D.toJSON"},
        "geometries": [
            {
                "uuid": "geo-1",
                "type": "BufferGeometry",
                "data": {"attributes": {"position": {"itemSize": 3, "type": "Float32Array",
                                                     "array": [0, 0, 0, 1, 0, 0, 0, 1, 0]}}},
            }
        ],
        "materials": [
            {"uuid": "mat-1", "type": "MeshPhysicalMaterial", "name": "Paint",
             "color": 16711680, "metalness": 0.5, "roughness": 0.25, "clearcoat": 1},
        ],
        "object": {
            "uuid": "scene-1",
            "type": "Scene",
            "name": "Scene",
            "matrix": [1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1],
            "children": [
                {
                    "uuid": "mesh-1",
                    "type": "Mesh",
                    "name": "Hull",
                    "geometry": "geo-1",
                    "material": "mat-1",
                    "castShadow": True,
                    "matrix": [1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 1, 2, 3, 1],
                },
                {
                    "uuid": "light-1",
                    "type": "PointLight",
                    "name": "Lamp",
                    "color": 65280,
                    "intensity": 2,
                    "distance": 10,
                    "decay": 2,
                },
            ],
        },
        "animations": [{"name": "HullAction", "tracks": []}],
    }
    path = tmp_path / "ship.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
