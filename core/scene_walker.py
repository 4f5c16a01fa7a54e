#!/usr/bin/env python3
"""
Scene Walker Module
Flattens the scene graph and detects duplicated materials and geometries.

The walk validates the graph as it goes: a malformed graph raises
SceneValidationError before the generator produces any text.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .scene_data import Material, MaterialCapabilities, SceneGraph, SceneNode
from .validation import SceneValidationError, ValidationIssue

FALLBACK_GEOMETRY_NAME = 'Part'


@dataclass
class GeometryEntry:
    """Registry entry for a geometry shared by several meshes

    Attributes:
        count: Number of meshes using the geometry
        name: Generated unique display name (used as instances.<name>)
        node: First mesh seen with this geometry
    """
    count: int
    name: str
    node: SceneNode


@dataclass
class DuplicateRegistry:
    """Usage counts for materials and geometries

    Attributes:
        materials: Material name -> number of meshes using it
        geometries: Geometry uuid -> GeometryEntry
    """
    materials: Dict[str, int] = field(default_factory=dict)
    geometries: Dict[str, GeometryEntry] = field(default_factory=dict)

    def unique_name(self, attempt: str) -> str:
        """First of attempt, attempt1, attempt2, ... not yet used"""
        used = {entry.name for entry in self.geometries.values()}
        index = 0
        candidate = attempt
        while candidate in used:
            index += 1
            candidate = f"{attempt}{index}"
        return candidate

    def register_geometry(self, node: SceneNode) -> None:
        key = node.geometry.uuid
        entry = self.geometries.get(key)
        if entry is not None:
            entry.count += 1
            return
        base = re.sub(r'[^a-zA-Z]', '', node.name or FALLBACK_GEOMETRY_NAME) or FALLBACK_GEOMETRY_NAME
        base = base[0].upper() + base[1:]
        self.geometries[key] = GeometryEntry(count=1, name=self.unique_name(base), node=node)

    def prune(self, instance_all: bool = False) -> None:
        """Drop geometries used only once unless every geometry is instanced"""
        if instance_all:
            return
        for key in [k for k, entry in self.geometries.items() if entry.count == 1]:
            del self.geometries[key]

    def instanced_entry(self, node: SceneNode, instance_all: bool = False) -> Optional[GeometryEntry]:
        """Registry entry a node should be instanced from, if any"""
        if node.geometry is None:
            return None
        entry = self.geometries.get(node.geometry.uuid)
        if entry is None or entry.count <= (0 if instance_all else 1):
            return None
        return entry


@dataclass
class WalkResult:
    """Everything the emitters need from one walk

    Attributes:
        nodes: All nodes in pre-order
        registry: Duplicate registry (already pruned)
        materials: Unique named materials in first-seen order
        capabilities: Material uuid -> capability record
        parents: Node uuid -> parent node (root is absent)
        has_instances: Instancing requested and at least one geometry qualifies
    """
    nodes: List[SceneNode]
    registry: DuplicateRegistry
    materials: List[Material]
    capabilities: Dict[str, MaterialCapabilities]
    parents: Dict[str, SceneNode]
    has_instances: bool = False


def _node_path(node: SceneNode, parents: Dict[str, SceneNode]) -> str:
    parts = []
    visited = set()
    current = node
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        parts.append(current.name or current.type)
        current = parents.get(current.uuid)
    return '/' + '/'.join(reversed(parts))


class SceneWalker:
    """Walks a scene graph once and builds the duplicate registry

    Args:
        instance: Instancing requested
        instance_all: Instance every geometry regardless of usage count
    """

    def __init__(self, instance: bool = False, instance_all: bool = False):
        self.instance = instance
        self.instance_all = instance_all

    def flatten(self, root: SceneNode, issues: List[ValidationIssue]) -> Tuple[List[SceneNode], Dict[str, SceneNode]]:
        """Pre-order list of nodes plus the parent map

        Nodes reachable more than once (cycles or shared children) are
        reported and not descended into again.
        """
        nodes = []
        parents = {}
        seen_objects = set()
        seen_uuids = {}
        stack = [(root, None)]
        while stack:
            node, parent = stack.pop()
            if id(node) in seen_objects:
                where = _node_path(parent, parents) if parent is not None else '/'
                issues.append(ValidationIssue(
                    path=where,
                    message=f"node '{node.name or node.type}' is reachable more than once (cycle or shared child)",
                    code='cycle',
                ))
                continue
            seen_objects.add(id(node))
            if parent is not None:
                parents[node.uuid] = parent
            if node.uuid in seen_uuids:
                issues.append(ValidationIssue(
                    path=_node_path(node, parents),
                    message=f"uuid {node.uuid} already used by '{seen_uuids[node.uuid].name}'",
                    code='duplicate_identity',
                ))
            else:
                seen_uuids[node.uuid] = node
            nodes.append(node)
            for child in reversed(node.children):
                stack.append((child, node))
        return nodes, parents

    def walk(self, scene: SceneGraph) -> WalkResult:
        """Flatten the graph, validate it and tally duplicates

        Raises:
            SceneValidationError: If the graph is malformed
        """
        issues: List[ValidationIssue] = []
        nodes, parents = self.flatten(scene.root, issues)

        registry = DuplicateRegistry()
        materials: List[Material] = []
        capabilities: Dict[str, MaterialCapabilities] = {}
        geometry_seen = {}

        for node in nodes:
            material = node.material
            if material is not None:
                if not isinstance(material, Material) or not material.uuid:
                    issues.append(ValidationIssue(
                        path=_node_path(node, parents),
                        message=f"material reference {material!r} does not resolve to a material",
                        code='dangling_material',
                    ))
                    continue
                if material.uuid not in capabilities:
                    capabilities[material.uuid] = material.capabilities
                    if material.name:
                        materials.append(material)

            if not node.is_mesh:
                continue

            if node.geometry is None:
                issues.append(ValidationIssue(
                    path=_node_path(node, parents),
                    message=f"{node.type} has no geometry",
                    code='missing_geometry',
                ))
                continue

            previous = geometry_seen.setdefault(node.geometry.uuid, node.geometry)
            if previous is not node.geometry and (
                    previous.type != node.geometry.type
                    or (previous.vertex_count is not None and node.geometry.vertex_count is not None
                        and previous.vertex_count != node.geometry.vertex_count)):
                issues.append(ValidationIssue(
                    path=_node_path(node, parents),
                    message=f"geometry {node.geometry.uuid} reported inconsistently "
                            f"({previous.type}/{previous.vertex_count} vs "
                            f"{node.geometry.type}/{node.geometry.vertex_count})",
                    code='inconsistent_geometry',
                ))
                continue

            if material is not None:
                registry.materials[material.name] = registry.materials.get(material.name, 0) + 1
            registry.register_geometry(node)

        if issues:
            raise SceneValidationError(issues)

        registry.prune(self.instance_all)
        has_instances = (self.instance or self.instance_all) and len(registry.geometries) > 0

        return WalkResult(
            nodes=nodes,
            registry=registry,
            materials=materials,
            capabilities=capabilities,
            parents=parents,
            has_instances=has_instances,
        )
