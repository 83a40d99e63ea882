"""
Virtual property discovery.

Entities expose computed properties through accessor methods named
``_get<Property>()``. This module finds those accessors inside the class
body and maps each to ``{property_name: return_type}``.
"""

import logging
import re
from typing import Dict, Optional, Sequence

from ..inflector import underscore
from ..tokenizer import TokenStream, T_CLASS, T_FUNCTION, T_STRING, tokenize_php
from .return_type import DEFAULT_RESOLVERS, ReturnTypeResolver, resolve_return_type

logger = logging.getLogger(__name__)

# Cheap gate run on raw text before tokenizing anything.
_ACCESSOR_DECLARATION_RE = re.compile(r'\bfunction\s+_get[A-Z][a-zA-Z0-9]+\s*\(\s*\)')

_ACCESSOR_NAME_RE = re.compile(r'^_get([A-Z][a-zA-Z0-9]+)$')


def accessor_property_name(method_name: str) -> Optional[str]:
    """``_getVirtualOne`` -> ``virtual_one``; None for non-accessor names."""
    match = _ACCESSOR_NAME_RE.match(method_name)
    if not match:
        return None
    return underscore(match.group(1))


class VirtualPropertyHintBuilder:
    """Build property hints for the virtual accessors of the first class."""

    def __init__(self, resolvers: Sequence[ReturnTypeResolver] = DEFAULT_RESOLVERS):
        self.resolvers = resolvers

    def build(self, content: str) -> Dict[str, str]:
        if not _ACCESSOR_DECLARATION_RE.search(content):
            return {}

        stream = tokenize_php(content)

        class_index = stream.find_next(T_CLASS, 0)
        if class_index is None:
            return {}
        class_end = stream[class_index].scope_closer
        if class_end is None:
            logger.debug("Class at line %d has no closing brace", stream[class_index].line)
            return {}

        return self._scan_class(stream, class_index, class_end)

    def _scan_class(self, stream: TokenStream, class_index: int, class_end: int) -> Dict[str, str]:
        properties: Dict[str, str] = {}

        start = class_index
        while start < class_end:
            function_index = stream.find_next(T_FUNCTION, start + 1, class_end)
            if function_index is None:
                break

            name_index = stream.find_next(T_STRING, function_index + 1, class_end)
            if name_index is None:
                break
            start = name_index

            prop = accessor_property_name(stream[name_index].content)
            if prop is None:
                continue

            properties[prop] = resolve_return_type(stream, function_index, self.resolvers)

        return properties
