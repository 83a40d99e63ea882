"""
Known-class lookup used when synthesizing association entity classes.

Built either from explicit class names or by scanning a source tree for
``namespace Foo\\Bar;`` + ``class Baz`` declarations.
"""

import logging
import re
from typing import Iterable, List

from ..base import find_source_files, read_file_safe, strip_php_comments

logger = logging.getLogger(__name__)

# namespace App\Model\Entity;
_NAMESPACE_RE = re.compile(r'^\s*namespace\s+([\w\\]+)\s*;', re.MULTILINE)

# abstract class Foo extends Bar / final class Foo / interface Foo / trait Foo
_CLASS_RE = re.compile(
    r'^\s*(?:(?:abstract|final|readonly)\s+)*(?:class|interface|trait|enum)\s+(\w+)',
    re.MULTILINE,
)


def _normalize(class_name: str) -> str:
    # PHP class names are case-insensitive.
    return '\\' + class_name.strip().lstrip('\\').lower()


class ClassRegistry:
    """Set of fully qualified class names."""

    def __init__(self, class_names: Iterable[str] = ()):
        self._classes = set()
        for name in class_names:
            self.add(name)

    def add(self, class_name: str) -> None:
        self._classes.add(_normalize(class_name))

    def exists(self, class_name: str) -> bool:
        return _normalize(class_name) in self._classes

    def __len__(self) -> int:
        return len(self._classes)

    def __contains__(self, class_name: str) -> bool:
        return self.exists(class_name)

    @classmethod
    def from_source_tree(cls, *paths: str) -> 'ClassRegistry':
        """Register every class declared in the .php files below paths."""
        registry = cls()
        for path in paths:
            for fpath in find_source_files(path, ['.php']):
                content = read_file_safe(fpath)
                if not content:
                    continue
                for class_name in declared_classes(content):
                    registry.add(class_name)
        logger.debug("Class registry holds %d classes", len(registry))
        return registry


def declared_classes(content: str) -> List[str]:
    """Fully qualified names of the classes declared in a PHP file."""
    stripped = strip_php_comments(content)
    namespace_match = _NAMESPACE_RE.search(stripped)
    namespace = namespace_match.group(1) if namespace_match else ''

    classes = []
    for match in _CLASS_RE.finditer(stripped):
        name = match.group(1)
        classes.append(f'{namespace}\\{name}' if namespace else name)
    return classes
