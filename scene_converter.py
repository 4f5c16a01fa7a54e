#!/usr/bin/env python3
"""
Scene to JSX Converter - Main Orchestrator Module
Coordinates reading a scene file and generating a React Three Fiber component
Supports three.js JSON (.json) and USD (.usd, .usda, .usdc) input
"""

from pathlib import Path

from core.options import GeneratorOptions
from exporters.jsx_exporter import JSXExporter
from readers import create_reader, get_file_type


class SceneToJSXConverter:
    """Scene converter (orchestrator/facade)

    This class coordinates the conversion process:
    1. Read input file ONCE into a SceneGraph (via readers module)
    2. Generate and write the component (via JSXExporter)

    Input formats supported:
    - three.js JSON Object scenes (.json)
    - USD (.usd, .usda, .usdc)
    """

    def __init__(self, progress_callback=None):
        """Initialize converter

        Args:
            progress_callback: Optional function to call for progress updates
                              Signature: callback(message: str) -> None
        """
        self.progress_callback = progress_callback

    def log(self, message):
        """Send progress updates to callback"""
        if self.progress_callback:
            self.progress_callback(message)
        print(message)

    def read_scene(self, input_file):
        """Read a scene file into a SceneGraph

        Args:
            input_file: Path to input scene file

        Returns:
            SceneGraph: The parsed scene
        """
        reader = create_reader(input_file)
        return reader.read_scene()

    def convert(self, input_file, output_dir, shot_name=None, options: GeneratorOptions = None):
        """Convert a scene file to a .jsx/.tsx component

        Args:
            input_file: Path to input scene file (.json, .usd, .usda, .usdc)
            output_dir: Output directory
            shot_name: Base name of the written file (default: input file stem)
            options: Generator options (defaults when None)

        Returns:
            dict: Results with keys:
                - 'success': bool
                - 'jsx': Exporter results (when the scene was read)
                - 'message': Summary message
        """
        options = options or GeneratorOptions()
        try:
            input_path = Path(input_file)
            shot_name = shot_name or input_path.stem
            file_type = get_file_type(str(input_path))
            format_name = "USD" if file_type == 'usd' else "three.js JSON"

            self.log(f"\n{'='*60}")
            self.log(f"Scene to JSX")
            self.log(f"{'='*60}")
            self.log(f"Input: {input_file} ({format_name})")
            self.log(f"Output: {output_dir}")
            self.log(f"Component: {shot_name}")
            self.log(f"{'='*60}\n")

            # Step 1: Read input file ONCE (auto-detect format)
            self.log(f"Step 1/2: Reading {format_name} file...")
            scene = self.read_scene(input_file)
            self.log(f"  - Root: {scene.root.type} '{scene.root.name}'")
            self.log(f"  - Animation clips: {len(scene.animations)}")

            # Step 2: Generate the component
            self.log("\nStep 2/2: Generating component...")
            exporter = JSXExporter(self.progress_callback)
            jsx_result = exporter.export(scene, output_dir, shot_name, options)

            results = {
                'success': jsx_result.get('success', False),
                'jsx': jsx_result,
                'message': jsx_result.get('message', ''),
            }

            self.log(f"\n{exporter.get_export_summary(jsx_result)}")
            self.log(f"{'='*60}\n")

            return results

        except Exception as e:
            self.log(f"\nERROR: {str(e)}")
            import traceback
            self.log(traceback.format_exc())
            return {
                'success': False,
                'message': f"Conversion failed: {str(e)}"
            }
