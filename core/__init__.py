#!/usr/bin/env python3
"""
Core Module
Format-agnostic scene graph, validation and the helpers shared by exporters.
"""

from .options import GeneratorOptions
from .scene_data import (
    AnimationClip,
    CameraParams,
    Geometry,
    LightParams,
    Material,
    MaterialCapabilities,
    SceneGraph,
    SceneNode,
    Skeleton,
)
from .scene_walker import DuplicateRegistry, SceneWalker, WalkResult
from .validation import SceneValidationError, ValidationIssue

__all__ = [
    'GeneratorOptions',
    'AnimationClip',
    'CameraParams',
    'Geometry',
    'LightParams',
    'Material',
    'MaterialCapabilities',
    'SceneGraph',
    'SceneNode',
    'Skeleton',
    'DuplicateRegistry',
    'SceneWalker',
    'WalkResult',
    'SceneValidationError',
    'ValidationIssue',
]
