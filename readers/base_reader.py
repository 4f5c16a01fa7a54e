#!/usr/bin/env python3
"""
Base Reader Module
Abstract interface for building a SceneGraph from a 3D scene file
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Tuple

import numpy as np

from core.scene_data import SceneGraph, Vector3


class BaseReader(ABC):
    """Abstract base class for scene file readers

    Provides a consistent interface for reading different scene formats.
    All format-specific readers (ThreeJSONReader, USDReader) must implement
    these methods. Readers never produce markup; they hand a SceneGraph to
    an exporter.
    """

    def __init__(self, file_path: str):
        """Initialize reader with file path

        Args:
            file_path: Path to the scene file
        """
        self.file_path = Path(file_path)
        if not self.file_path.exists():
            raise ValueError(f"Input file not found: {self.file_path}")

    @abstractmethod
    def get_format_name(self) -> str:
        """Return human-readable format name (e.g., 'three.js JSON', 'USD')"""
        pass

    @abstractmethod
    def read_scene(self) -> SceneGraph:
        """Build the scene graph

        Returns:
            SceneGraph: Root node and animation clips

        Raises:
            ValueError: If the file cannot be read
            SceneValidationError: If the file references missing resources
        """
        pass

    @staticmethod
    def decompose_matrix(matrix) -> Tuple[Vector3, Vector3, Vector3]:
        """Decompose a 4x4 column-vector matrix into translation, rotation, scale

        Rotation is returned as XYZ Euler angles in radians, the order
        three.js uses for Object3D.rotation.

        Args:
            matrix: 4x4 array-like, translation in the last column

        Returns:
            tuple: (position, rotation, scale)
        """
        m = np.asarray(matrix, dtype=float).reshape(4, 4)

        position = (float(m[0][3]), float(m[1][3]), float(m[2][3]))

        sx = np.linalg.norm(m[0:3, 0])
        sy = np.linalg.norm(m[0:3, 1])
        sz = np.linalg.norm(m[0:3, 2])
        # A negative determinant means one axis is mirrored; three.js flips x
        if np.linalg.det(m[0:3, 0:3]) < 0:
            sx = -sx
        scale = (float(sx), float(sy), float(sz))

        rot = np.zeros((3, 3))
        rot[:, 0] = m[0:3, 0] / sx if sx != 0 else m[0:3, 0]
        rot[:, 1] = m[0:3, 1] / sy if sy != 0 else m[0:3, 1]
        rot[:, 2] = m[0:3, 2] / sz if sz != 0 else m[0:3, 2]

        y = np.arcsin(np.clip(rot[0][2], -1.0, 1.0))
        if abs(rot[0][2]) < 0.9999999:
            x = np.arctan2(-rot[1][2], rot[2][2])
            z = np.arctan2(-rot[0][1], rot[0][0])
        else:
            # Gimbal lock
            x = np.arctan2(rot[2][1], rot[1][1])
            z = 0.0

        rotation = (float(x), float(y), float(z))
        return position, rotation, scale
