#!/usr/bin/env python3
"""
Exporters Module
Scene graph to markup generators
"""

from .base_exporter import BaseExporter
from .dialect import JSXDialect, MarkupDialect
from .jsx_exporter import JSXExporter

__all__ = [
    'BaseExporter',
    'MarkupDialect',
    'JSXDialect',
    'JSXExporter',
]
