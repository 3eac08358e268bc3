"""Coercion helpers over generic parsed trees (dict / list / scalar)

Tree parsers collapse a list of one child element into a bare value and
carry element text next to attributes, so every adapter reads the tree
through these helpers instead of trusting its shape.
"""

import json
import re
from typing import Any, Dict, List, Optional, Tuple

# Slot holding element text when the element also has attributes
TEXT_KEY = 'value'
JSONLD_TEXT_KEY = '@value'

# Serialization prefixes that carry no namespace meaning
KNOWN_PREFIXES = ('epcis:', 'standard:', 'sbdh:')

_CLARK_NAME = re.compile(r'^\{[^}]*\}')


def as_list(node: Any) -> List[Any]:
    """Return `node` as a list: absent -> [], list -> itself, anything else -> [node]"""
    if node is None:
        return []
    if isinstance(node, list):
        return node
    return [node]


def as_mapping(node: Any) -> Dict[str, Any]:
    """Return `node` if it is a mapping, else an empty dict (e.g. for empty elements)"""
    return node if isinstance(node, dict) else {}


def unwrap_text_or_value(node: Any) -> Tuple[Any, Dict[str, Any]]:
    """Resolve a value that may be plain or wrapped next to sibling attributes

    Args:
        node: A string, a scalar, or a mapping carrying its content under a
            value slot (`value` or `@value`)

    Returns:
        Tuple of (value, auxiliary attributes). Mappings without a value slot
        are stringified as a last resort.
    """
    if node is None or isinstance(node, str):
        return node, {}
    if isinstance(node, dict):
        for slot in (TEXT_KEY, JSONLD_TEXT_KEY):
            if slot in node:
                aux = {k: v for k, v in node.items() if k != slot}
                return node[slot], aux
        return json.dumps(node, default=str), {}
    if isinstance(node, list):
        return json.dumps(node, default=str), {}
    return node, {}


def unwrap_text(node: Any) -> Optional[str]:
    """Unwrap a node and return its value as a string, or None"""
    value, _ = unwrap_text_or_value(node)
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def strip_namespace_prefix(name: str, known_only: bool = False) -> str:
    """Strip serialization noise from a tag or attribute name

    Args:
        name: Tag/attribute name, either `prefix:local` or Clark `{uri}local`
        known_only: Only strip the known EPCIS serialization prefixes, leaving
            other `prefix:` segments (e.g. JSON-LD extension terms) intact

    Returns:
        The local name
    """
    name = _CLARK_NAME.sub('', name)
    for prefix in KNOWN_PREFIXES:
        if name.startswith(prefix):
            return name[len(prefix):]
    if known_only:
        return name
    if ':' in name:
        return name.split(':', 1)[1]
    return name


def get_ci(node: Any, key: str) -> Any:
    """Case-insensitive key lookup; XML and JSON-LD headers differ only in casing"""
    if not isinstance(node, dict):
        return None
    if key in node:
        return node[key]
    lowered = key.lower()
    for candidate, value in node.items():
        if candidate.lower() == lowered:
            return value
    return None


def get_path(node: Any, *keys: str) -> Any:
    """Follow `keys` through nested mappings, returning None on the first miss"""
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node
