"""
Entity annotator.

Turns a table's column and association schema plus the entity's own
source into ``@property`` annotations and hands them to a writer.
"""

import logging
import os
from typing import Dict, List, Optional, Sequence

from .annotations import AnnotationFactory, PropertyAnnotation, property_hints
from .base import read_file_safe
from .hints import (
    AssociationHintBuilder, BaseHintBuilder, SchemaHintBuilder,
    VirtualPropertyHintBuilder, merge_property_hints,
)
from .hints.association_hints import DEFAULT_ENTITY_BASE_CLASS
from .schema_types import AssociationSchema, ColumnSchema
from .sources.class_registry import ClassRegistry
from .type_map import TypeMap
from .writer import DocBlockWriter

logger = logging.getLogger(__name__)

# The base entity class file itself is never annotated.
_BASE_ENTITY_FILE = 'Entity'


class EntityAnnotator:
    """Build and write property annotations for one entity class at a time.

    The TypeMap passed in is shared across every file the annotator sees.
    """

    def __init__(self, type_map: Optional[TypeMap] = None,
                 class_registry: Optional[ClassRegistry] = None,
                 app_namespace: str = 'App',
                 entity_base_class: str = DEFAULT_ENTITY_BASE_CLASS,
                 writer: Optional[DocBlockWriter] = None):
        self.type_map = type_map or TypeMap()
        self.class_registry = class_registry or ClassRegistry()
        self.writer = writer or DocBlockWriter()

        self.schema_hints = SchemaHintBuilder(self.type_map)
        self.base_hints = BaseHintBuilder()
        self.association_hints = AssociationHintBuilder(
            self.class_registry, app_namespace=app_namespace,
            entity_base_class=entity_base_class,
        )
        self.virtual_hints = VirtualPropertyHintBuilder()

    def build_property_hints(self, columns: Sequence[ColumnSchema],
                             associations: Sequence[AssociationSchema],
                             content: str) -> Dict[str, str]:
        """Merged ``{property: type}`` map for one entity."""
        return merge_property_hints(
            self.schema_hints.build(columns),
            self.association_hints.build(associations),
            self.virtual_hints.build(content),
            base_hints=self.base_hints.build(columns),
        )

    def build_annotations(self, columns: Sequence[ColumnSchema],
                          associations: Sequence[AssociationSchema],
                          content: str) -> List[PropertyAnnotation]:
        """Annotation objects for one entity.

        Raises:
            AnnotationError: if a hint does not render to a valid annotation.
        """
        hints = self.build_property_hints(columns, associations, content)
        return AnnotationFactory.create_all(property_hints(hints))

    def annotate(self, path: str, columns: Sequence[ColumnSchema],
                 associations: Sequence[AssociationSchema]) -> bool:
        """Annotate the entity file at path; True if the file changed."""
        name = os.path.splitext(os.path.basename(path))[0]
        if name == _BASE_ENTITY_FILE:
            return False

        content = read_file_safe(path)
        if content is None:
            return False

        annotations = self.build_annotations(columns, associations, content)
        result = self.writer.write(path, content, annotations)
        return result['changed']
