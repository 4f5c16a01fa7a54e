#!/usr/bin/env python3
"""
Base Exporter Module
Abstract base class ensuring consistent interface across all exporters

Exporters receive a SceneGraph and generator options; they never touch the
reader that produced the graph.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.options import GeneratorOptions
    from core.scene_data import SceneGraph


class BaseExporter(ABC):
    """Abstract base class for all format exporters

    Provides consistent interface and common utilities for all exporters.

    Key principles:
    - Single Responsibility: Each exporter handles ONE output format
    - Consistent Interface: All exporters implement the same methods
    - Shared Utilities: Common functionality (logging, path validation) provided here
    - Format Agnostic: Works with SceneGraph, not reader objects
    """

    def __init__(self, progress_callback=None):
        """Initialize exporter

        Args:
            progress_callback: Optional function to call for progress updates
                              Signature: callback(message: str) -> None
        """
        self.progress_callback = progress_callback

    def log(self, message):
        """Send progress/status message

        Args:
            message: Message to log
        """
        if self.progress_callback:
            self.progress_callback(message)
        print(message)

    @abstractmethod
    def generate(self, scene: 'SceneGraph', options: 'GeneratorOptions') -> str:
        """Generate the output text for a scene without touching the filesystem

        Args:
            scene: SceneGraph to convert
            options: Generator options

        Returns:
            str: Complete output unit

        Raises:
            SceneValidationError: If the scene graph is malformed
        """
        pass

    @abstractmethod
    def export(self, scene: 'SceneGraph', output_path, shot_name, options: 'GeneratorOptions' = None):
        """Generate and write the output file

        Args:
            scene: SceneGraph to convert
            output_path: Output directory path (Path object or string)
            shot_name: Base name for the written file
            options: Generator options (defaults when None)

        Returns:
            dict: Export results with format-specific keys
                  Should include at least:
                  - 'success': bool
                  - 'files': list of created file paths
                  - 'message': str status message
        """
        pass

    @abstractmethod
    def get_format_name(self):
        """Return human-readable format name

        Returns:
            str: Format name (e.g., "React Three Fiber JSX")
        """
        pass

    @abstractmethod
    def get_file_extension(self, options: 'GeneratorOptions' = None):
        """Return primary file extension for this format

        Returns:
            str: File extension without dot (e.g., "jsx", "tsx")
        """
        pass

    def validate_output_path(self, output_path):
        """Validate and create output directory if needed

        Args:
            output_path: Directory path to validate

        Returns:
            Path: Validated Path object

        Raises:
            ValueError: If path is invalid
        """
        path = Path(output_path)

        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ValueError(f"Cannot create output directory {path}: {e}")

        if not path.is_dir():
            raise ValueError(f"Output path is not a directory: {path}")

        return path

    def get_export_summary(self, result):
        """Generate human-readable summary of export results

        Args:
            result: Export result dict from export() method

        Returns:
            str: Formatted summary text
        """
        lines = []
        if result.get('success'):
            lines.append(f"✓ {self.get_format_name()} Export Complete")
        else:
            lines.append(f"✗ {self.get_format_name()} Export Failed")

        files = result.get('files', [])
        if files:
            lines.append(f"  Files created: {len(files)}")
            for file_path in files:
                lines.append(f"    - {Path(file_path).name}")

        if 'message' in result:
            lines.append(f"  {result['message']}")

        return "\n".join(lines)
