#!/usr/bin/env python3
"""
Markup Dialect Module
Renders elements and attributes for the declarative component tree.

The node emitter decides *what* to emit; a dialect decides how it is
spelled. JSXDialect targets React Three Fiber conventions.
"""

import json
from abc import ABC, abstractmethod
from typing import List

from core.identifiers import sanitize_name


class MarkupDialect(ABC):
    """Abstract base class for markup dialects"""

    indent = '  '
    pi_token = 'Math.PI'

    @abstractmethod
    def normalize_type(self, raw_type: str) -> str:
        """Element name for a three.js class name"""
        pass

    @abstractmethod
    def expression(self, name: str, code: str) -> str:
        """Attribute bound to an expression"""
        pass

    @abstractmethod
    def string(self, name: str, value: str) -> str:
        """Attribute bound to a string literal"""
        pass

    @abstractmethod
    def flag(self, name: str) -> str:
        """Boolean attribute set to true"""
        pass

    @abstractmethod
    def reference(self, code: str) -> str:
        """Element that mounts an existing live object as-is"""
        pass

    @abstractmethod
    def start_tag(self, tag: str, attributes: List[str], self_closing: bool = False) -> str:
        """Opening line of an element"""
        pass

    @abstractmethod
    def end_tag(self, tag: str) -> str:
        """Closing line of an element"""
        pass

    def element(self, tag: str, attributes: List[str], children: str) -> str:
        """Complete element, self-closing when children is empty"""
        if children:
            return self.start_tag(tag, attributes) + self.indent_block(children) + self.end_tag(tag)
        return self.start_tag(tag, attributes, self_closing=True)

    def node_ref(self, name: str) -> str:
        return 'nodes' + sanitize_name(name)

    def material_ref(self, name: str) -> str:
        return 'materials' + sanitize_name(name)

    def instance_tag(self, name: str) -> str:
        return f'instances.{name}'

    def indent_block(self, text: str, depth: int = 1) -> str:
        prefix = self.indent * depth
        return ''.join(prefix + line if line.strip() else line for line in text.splitlines(True))


class JSXDialect(MarkupDialect):
    """React Three Fiber JSX"""

    # Component names that are imported rather than intrinsic elements
    COMPONENT_TYPES = {
        'perspectiveCamera': 'PerspectiveCamera',
        'orthographicCamera': 'OrthographicCamera',
    }

    def normalize_type(self, raw_type: str) -> str:
        tag = raw_type[:1].lower() + raw_type[1:]
        # object3D renders as group, which three.js documents as the faster equivalent
        if tag == 'object3D':
            return 'group'
        return self.COMPONENT_TYPES.get(tag, tag)

    def expression(self, name: str, code: str) -> str:
        return f'{name}={{{code}}}'

    def string(self, name: str, value: str) -> str:
        if '"' in value or '\n' in value:
            return self.expression(name, json.dumps(value))
        return f'{name}="{value}"'

    def flag(self, name: str) -> str:
        return name

    def reference(self, code: str) -> str:
        return f'<primitive object={{{code}}} />\n'

    def start_tag(self, tag: str, attributes: List[str], self_closing: bool = False) -> str:
        head = f'<{tag}' + (' ' + ' '.join(attributes) if attributes else '')
        return f'{head} />\n' if self_closing else f'{head}>\n'

    def end_tag(self, tag: str) -> str:
        return f'</{tag}>\n'
