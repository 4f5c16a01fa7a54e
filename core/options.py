#!/usr/bin/env python3
"""
Generator Options Module
Configuration surface for one generation run.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass
class GeneratorOptions:
    """Options controlling JSX generation

    Attributes:
        precision: Decimal digits for emitted numbers
        instance: Instance geometries used by more than one mesh
        instance_all: Instance every geometry, even single-use ones
        keep_names: Always emit name attributes
        keep_groups: Keep empty/attribute-less groups instead of eliding them
        debug: Log an indented dump of the scene tree before generating
        types: Emit TypeScript (TSX) with type descriptors
        shadows: Add castShadow/receiveShadow to every mesh
        meta: Emit userData attributes
        file_name: Source asset locator used in useGLTF
        draco: Opaque decoder configuration, JSON-serialized into useGLTF
        progress_callback: Optional sink for progress messages
                           Signature: callback(message: str) -> None
        progress_interval: Minimum seconds between node progress reports
    """
    precision: int = 2
    instance: bool = False
    instance_all: bool = False
    keep_names: bool = False
    keep_groups: bool = False
    debug: bool = False
    types: bool = False
    shadows: bool = False
    meta: bool = False
    file_name: str = "model.glb"
    draco: Any = None
    progress_callback: Optional[Callable[[str], None]] = None
    progress_interval: float = 0.0

    @property
    def instancing_requested(self) -> bool:
        return self.instance or self.instance_all

    @property
    def url(self) -> str:
        """Asset URL; local files are served from the site root"""
        prefix = '' if self.file_name.lower().startswith('http') else '/'
        return prefix + self.file_name
