#!/usr/bin/env python3
"""
Readers Module
Scene file readers for different formats (three.js JSON, USD)
"""

from pathlib import Path

from .base_reader import BaseReader
from .three_json_reader import ThreeJSONReader

# Supported file extensions
THREE_JSON_EXTENSIONS = {'.json'}
USD_EXTENSIONS = {'.usd', '.usda', '.usdc'}
SUPPORTED_EXTENSIONS = THREE_JSON_EXTENSIONS | USD_EXTENSIONS


def create_reader(input_file):
    """Factory function to create appropriate reader based on file extension

    Args:
        input_file: Path to input scene file

    Returns:
        BaseReader: ThreeJSONReader or USDReader instance

    Raises:
        ValueError: If file extension is not supported
    """
    path = Path(input_file)
    ext = path.suffix.lower()

    if ext in THREE_JSON_EXTENSIONS:
        return ThreeJSONReader(input_file)
    elif ext in USD_EXTENSIONS:
        # Lazy import to avoid requiring USD when only reading JSON
        from .usd_reader import USDReader
        return USDReader(input_file)
    else:
        raise ValueError(
            f"Unsupported file format: {ext}\n"
            f"Supported formats: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )


def get_file_type(input_file):
    """Get the file type string for a given file

    Returns:
        str: 'three_json', 'usd', or 'unknown'
    """
    ext = Path(input_file).suffix.lower()
    if ext in THREE_JSON_EXTENSIONS:
        return 'three_json'
    elif ext in USD_EXTENSIONS:
        return 'usd'
    return 'unknown'


def is_supported_format(input_file):
    """Check if a file has a supported format"""
    return Path(input_file).suffix.lower() in SUPPORTED_EXTENSIONS


__all__ = [
    'BaseReader',
    'ThreeJSONReader',
    'create_reader',
    'get_file_type',
    'is_supported_format',
    'THREE_JSON_EXTENSIONS',
    'USD_EXTENSIONS',
    'SUPPORTED_EXTENSIONS',
]
