#!/usr/bin/env python3
"""
Scene to JSX - Command Line Version
Turns a three.js JSON or USD scene into a React Three Fiber component
"""

import argparse
import json
import sys
from pathlib import Path

from core.options import GeneratorOptions
from readers import SUPPORTED_EXTENSIONS, is_supported_format
from scene_converter import SceneToJSXConverter


def build_parser():
    parser = argparse.ArgumentParser(
        prog='s2jsx',
        description='Convert a three.js JSON (.json) or USD (.usd/.usda/.usdc) scene to a React Three Fiber component',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Plain JSX next to the input
  python s2jsx.py scene.json --output-dir ./src/components

  # TypeScript with instancing, served from a CDN
  python s2jsx.py scene.usda --output-dir ./out --types --instance --file-name https://cdn.example.com/scene.glb

  # Draco-compressed asset
  python s2jsx.py scene.json --output-dir ./out --draco '"/draco-gltf/"'

Supported input formats:
  .json    - three.js Object scene (Object3D.toJSON, format 4)
  .usd     - USD scene files (text or binary)
  .usda    - USD ASCII format
  .usdc    - USD crate (binary) format
        """
    )

    parser.add_argument('input', type=str, help='Input scene file (.json, .usd, .usda, .usdc)')
    parser.add_argument('--output-dir', type=str, default='.',
                        help='Output directory (default: current directory)')
    parser.add_argument('--shot-name', type=str,
                        help='Component file name (default: derived from input filename)')
    parser.add_argument('--file-name', type=str,
                        help='Asset path loaded by useGLTF (default: <input name>.glb)')
    parser.add_argument('--types', '-t', action='store_true',
                        help='Emit TypeScript (.tsx) with type definitions')
    parser.add_argument('--keepnames', '-k', action='store_true',
                        help='Keep original names')
    parser.add_argument('--keepgroups', '-K', action='store_true',
                        help='Keep (empty) groups, disable pruning')
    parser.add_argument('--meta', '-m', action='store_true',
                        help='Include metadata (as userData)')
    parser.add_argument('--shadows', '-s', action='store_true',
                        help='Let meshes cast and receive shadows')
    parser.add_argument('--precision', '-p', type=int, default=2,
                        help='Number of fractional digits (default: 2)')
    parser.add_argument('--instance', '-i', action='store_true',
                        help='Instance re-occuring geometry')
    parser.add_argument('--instanceall', '-I', action='store_true',
                        help='Instance every geometry (for cheaper re-use)')
    parser.add_argument('--draco', '-d', type=str,
                        help='Draco decoder config, as a JSON value (e.g. a quoted path)')
    parser.add_argument('--debug', '-D', action='store_true',
                        help='Log the scene tree before generating')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Print each scene node as it is emitted')
    parser.add_argument('--progress-interval', type=float, default=0.0,
                        help='Minimum seconds between batches of node messages with --verbose (default: 0)')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Validate input file exists
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    # Validate file extension
    file_ext = input_path.suffix.lower()
    if not is_supported_format(str(input_path)):
        print(f"Error: Unsupported file format: {file_ext}", file=sys.stderr)
        print(f"Supported formats: {', '.join(sorted(SUPPORTED_EXTENSIONS))}", file=sys.stderr)
        sys.exit(1)

    draco = None
    if args.draco is not None:
        try:
            draco = json.loads(args.draco)
        except json.JSONDecodeError:
            # A bare path is accepted as a string
            draco = args.draco

    def node_progress(name):
        print(f"  - {name or '(unnamed)'}")

    options = GeneratorOptions(
        precision=args.precision,
        instance=args.instance,
        instance_all=args.instanceall,
        keep_names=args.keepnames,
        keep_groups=args.keepgroups,
        debug=args.debug,
        types=args.types,
        shadows=args.shadows,
        meta=args.meta,
        file_name=args.file_name or f"{input_path.stem}.glb",
        draco=draco,
        progress_callback=node_progress if args.verbose else None,
        progress_interval=args.progress_interval,
    )

    shot_name = args.shot_name or input_path.stem
    converter = SceneToJSXConverter()

    try:
        results = converter.convert(
            input_file=str(input_path),
            output_dir=args.output_dir,
            shot_name=shot_name,
            options=options,
        )
    except Exception as e:
        print(f"\n✗ Conversion failed: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)

    if results.get('success'):
        print("\n" + "="*60)
        print("✓ Conversion completed successfully!")
        print(f"✓ Component: {results['jsx']['jsx_file']}")
        print("="*60)
    else:
        print("\n✗ Conversion failed:", file=sys.stderr)
        print(f"   {results.get('message', 'Check log above')}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
