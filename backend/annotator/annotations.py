"""
Docblock annotation objects.

Hint maps are rendered to ``@property <type> $<name>`` lines and parsed
back into PropertyAnnotation objects, which the writer compares against
the annotations already present in a class docblock.
"""

import re
from dataclasses import dataclass
from typing import List, Mapping, Optional


class AnnotationError(RuntimeError):
    """Raised when a rendered hint cannot be turned into an annotation."""
    pass


PROPERTY_TAGS = ('@property', '@property-read', '@property-write')

_PROPERTY_RE = re.compile(
    r'^\s*(?P<tag>@property(?:-read|-write)?)'
    r'\s+(?P<type>[^\s$]+)'
    r'\s+\$(?P<property>[A-Za-z_][A-Za-z0-9_]*)'
    r'(?P<description>\s.*)?$'
)


@dataclass(frozen=True)
class PropertyAnnotation:
    tag: str
    type: str
    property: str
    description: str = ''

    def build(self) -> str:
        text = f'{self.tag} {self.type} ${self.property}'
        if self.description:
            text += ' ' + self.description
        return text

    def matches(self, other: 'PropertyAnnotation') -> bool:
        """Same tag and property name, regardless of type."""
        return self.tag == other.tag and self.property == other.property

    def __str__(self) -> str:
        return self.build()


class AnnotationFactory:

    @staticmethod
    def create_from_string(text: str) -> Optional[PropertyAnnotation]:
        """Parse an ``@property`` line; None if the text is not one."""
        match = _PROPERTY_RE.match(text.strip())
        if not match:
            return None
        return PropertyAnnotation(
            tag=match.group('tag'),
            type=match.group('type'),
            property=match.group('property'),
            description=(match.group('description') or '').strip(),
        )

    @classmethod
    def create_all(cls, lines: List[str]) -> List[PropertyAnnotation]:
        """Parse every line, raising AnnotationError on the first failure."""
        annotations = []
        for line in lines:
            annotation = cls.create_from_string(line)
            if annotation is None:
                raise AnnotationError(f'Cannot factorize annotation `{line}`')
            annotations.append(annotation)
        return annotations


def property_hints(hints: Mapping[str, str]) -> List[str]:
    """Render ``{name: type}`` as ``@property type $name`` lines."""
    return [f'@property {hint_type} ${prop}' for prop, hint_type in hints.items()]
