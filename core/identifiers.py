#!/usr/bin/env python3
"""
Identifier Module
Turns arbitrary node and material names into JavaScript property access.
"""

import re

_VAR_NAME = re.compile(r'^[A-Za-z_$][A-Za-z0-9_$]*$')

RESERVED_WORDS = frozenset({
    'break', 'case', 'catch', 'class', 'const', 'continue', 'debugger', 'default',
    'delete', 'do', 'else', 'enum', 'export', 'extends', 'false', 'finally', 'for',
    'function', 'if', 'implements', 'import', 'in', 'instanceof', 'interface',
    'let', 'new', 'null', 'package', 'private', 'protected', 'public', 'return',
    'static', 'super', 'switch', 'this', 'throw', 'true', 'try', 'typeof', 'var',
    'void', 'while', 'with', 'yield', 'await', 'arguments', 'eval',
})


def is_var_name(name: str) -> bool:
    """Check whether a name is usable as a bare JavaScript identifier

    Only ASCII identifiers are accepted; anything else is treated as unsafe.
    """
    return bool(name) and _VAR_NAME.match(name) is not None and name not in RESERVED_WORDS


def quote(name: str) -> str:
    """Single-quoted JavaScript string literal"""
    escaped = name.replace('\\', '\\\\').replace("'", "\\'").replace('\n', '\\n')
    return f"'{escaped}'"


def sanitize_name(name: str) -> str:
    """Property access suffix for a name

    Examples:
        "foo"     -> ".foo"
        "foo bar" -> "['foo bar']"
        ""        -> "['']"
    """
    return f".{name}" if is_var_name(name) else f"[{quote(name)}]"


def property_key(name: str) -> str:
    """Key for an object literal or type member"""
    return name if is_var_name(name) else quote(name)
