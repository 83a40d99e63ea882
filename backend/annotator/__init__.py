import logging

from .annotations import AnnotationError, AnnotationFactory, PropertyAnnotation, property_hints
from .annotator_manager import AnnotatorManager, MissingEntityDirectoryError, annotate_project
from .entity_annotator import EntityAnnotator
from .schema_types import AssociationSchema, ColumnSchema, PropertyHint
from .type_map import TypeMap
from .writer import DocBlockWriter

__all__ = [
    'AnnotationError', 'AnnotationFactory', 'PropertyAnnotation', 'property_hints',
    'AnnotatorManager', 'MissingEntityDirectoryError', 'annotate_project',
    'EntityAnnotator', 'DocBlockWriter', 'TypeMap',
    'AssociationSchema', 'ColumnSchema', 'PropertyHint',
    'configure_logging',
]


def configure_logging(level=None):
    """Set up root logging at level, defaulting to Config.ANNOTATOR_LOG_LEVEL."""
    if level is None:
        from config import Config
        level = Config.ANNOTATOR_LOG_LEVEL
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
