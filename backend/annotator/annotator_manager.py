"""
Annotator Manager: annotates every entity of a project.

Pairs each ``src/Model/Entity/<Name>.php`` with its
``src/Model/Table/<Names>Table.php``, reflects the table's columns from the
database and runs the EntityAnnotator. A failing file is recorded and the
run moves on to the next one.
"""

import logging
import os
from dataclasses import replace
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from config import Config

from .annotations import AnnotationError
from .base import find_source_files, read_file_safe
from .entity_annotator import EntityAnnotator
from .inflector import pluralize, underscore
from .schema_types import AssociationSchema
from .sources.class_registry import ClassRegistry
from .sources.sqlalchemy_columns import SQLAlchemyColumnSource
from .sources.table_parser import TableAssociationParser
from .type_map import TypeMap
from .writer import DocBlockWriter

logger = logging.getLogger(__name__)

ENTITY_DIR = os.path.join('src', 'Model', 'Entity')
TABLE_DIR = os.path.join('src', 'Model', 'Table')


class MissingEntityDirectoryError(Exception):
    """Raised when a project has no src/Model/Entity directory."""
    pass


class AnnotatorManager:
    """Drive entity annotation across a project."""

    def __init__(self, config=Config, column_source=None, dry_run: bool = False):
        self.config = config
        self.dry_run = dry_run
        self._column_source = column_source
        self.type_map = TypeMap(config.type_map_overrides())
        self.table_parser = TableAssociationParser()

    @property
    def column_source(self):
        if self._column_source is None:
            self._column_source = SQLAlchemyColumnSource(self.config.DATABASE_URL)
        return self._column_source

    def make_annotator(self, class_registry: ClassRegistry) -> EntityAnnotator:
        return EntityAnnotator(
            type_map=self.type_map,
            class_registry=class_registry,
            app_namespace=self.config.APP_NAMESPACE,
            entity_base_class=self.config.ENTITY_BASE_CLASS,
            writer=DocBlockWriter(dry_run=self.dry_run),
        )

    # -----------------------------------------------------------------------
    # Project run
    # -----------------------------------------------------------------------

    def annotate_project(self, project_path: str) -> Dict:
        """Annotate all entities below project_path and return a result dict."""
        entity_dir = os.path.join(project_path, ENTITY_DIR)
        if not os.path.isdir(entity_dir):
            raise MissingEntityDirectoryError(f"No entity directory at {entity_dir}")

        registry = ClassRegistry.from_source_tree(os.path.join(project_path, 'src'))
        annotator = self.make_annotator(registry)
        table_dir = os.path.join(project_path, TABLE_DIR)

        files = []
        for path in find_source_files(entity_dir, ['.php']):
            files.append(self._annotate_entity(annotator, path, table_dir))

        return {
            'project_path': project_path,
            'dry_run': self.dry_run,
            'files': files,
            'statistics': self._calculate_statistics(files),
        }

    def _annotate_entity(self, annotator: EntityAnnotator, path: str, table_dir: str) -> Dict:
        entity = os.path.splitext(os.path.basename(path))[0]
        alias = pluralize(entity)
        entry = {'path': path, 'entity': entity, 'table': None, 'status': 'unchanged', 'error': None}

        if entity == 'Entity' or read_file_safe(path) is None:
            entry['status'] = 'skipped'
            return entry

        table_content = self._read_table(table_dir, alias)
        table_name = self.table_parser.parse_table_name(table_content) or underscore(alias)
        entry['table'] = table_name

        try:
            associations = self.load_associations(table_content, table_dir)
            columns = self.column_source.columns(table_name)
            changed = annotator.annotate(path, columns, associations)
        except (AnnotationError, OSError, SQLAlchemyError) as e:
            logger.warning("Failed to annotate %s: %s", path, e)
            entry['status'] = 'failed'
            entry['error'] = str(e)
            return entry

        entry['status'] = 'changed' if changed else 'unchanged'
        return entry

    def load_associations(self, table_content: str, table_dir: str) -> List[AssociationSchema]:
        """Associations of a table, with explicit target entity classes filled in."""
        associations = []
        for association in self.table_parser.parse(table_content):
            target_entity = None
            if '.' not in association.target_alias and association.target_namespace is None:
                target_content = self._read_table(table_dir, association.target_alias)
                if target_content:
                    target_entity = self.table_parser.parse_entity_class(target_content)
            associations.append(replace(association, target_entity_type_name=target_entity))
        return associations

    @staticmethod
    def _read_table(table_dir: str, alias: str) -> str:
        path = os.path.join(table_dir, f'{alias}Table.php')
        if not os.path.isfile(path):
            return ''
        return read_file_safe(path) or ''

    @staticmethod
    def _calculate_statistics(files: List[Dict]) -> Dict:
        by_status: Dict[str, int] = {}
        for entry in files:
            by_status[entry['status']] = by_status.get(entry['status'], 0) + 1
        return {
            'total_files': len(files),
            'changed': by_status.get('changed', 0),
            'unchanged': by_status.get('unchanged', 0),
            'failed': by_status.get('failed', 0),
            'skipped': by_status.get('skipped', 0),
        }


def annotate_project(project_path: str, dry_run: bool = False,
                     config=Config, column_source=None) -> Optional[Dict]:
    """Convenience wrapper returning None when the project has no entities."""
    manager = AnnotatorManager(config=config, column_source=column_source, dry_run=dry_run)
    try:
        return manager.annotate_project(project_path)
    except MissingEntityDirectoryError as e:
        logger.warning("%s", e)
        return None
