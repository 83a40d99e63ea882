"""Column schema -> property hint translation."""

import logging
from typing import Dict, Iterable, Mapping, Optional

from ..schema_types import MIXED, ColumnSchema
from ..type_map import TypeMap

logger = logging.getLogger(__name__)

# Types that already admit anything and never get a null union.
_NULLABLE_EXEMPT = frozenset({MIXED, 'null'})

# Framework column type -> docblock type used for every column.
BASE_COLUMN_TYPES = {
    'char': 'string',
    'string': 'string',
    'text': 'string',
    'uuid': 'string',
    'binaryuuid': 'string',
    'integer': 'int',
    'biginteger': 'int',
    'smallinteger': 'int',
    'tinyinteger': 'int',
    'float': 'float',
    'decimal': 'float',
    'boolean': 'bool',
    'binary': 'string|resource',
    'date': '\\Cake\\I18n\\FrozenDate',
    'datetime': '\\Cake\\I18n\\FrozenTime',
    'datetimefractional': '\\Cake\\I18n\\FrozenTime',
    'timestamp': '\\Cake\\I18n\\FrozenTime',
    'timestampfractional': '\\Cake\\I18n\\FrozenTime',
    'timestamptimezone': '\\Cake\\I18n\\FrozenTime',
    'time': '\\Cake\\I18n\\FrozenTime',
}


def nullable_type(hint_type: str, nullable: bool) -> str:
    """Append ``|null`` for nullable columns unless the type is unconstrained."""
    if not nullable or hint_type in _NULLABLE_EXEMPT:
        return hint_type
    if 'null' in hint_type.split('|'):
        return hint_type
    return hint_type + '|null'


class SchemaHintBuilder:
    """Hints for columns whose storage type the TypeMap knows.

    Unmapped columns are left out so the base map can speak for them.
    """

    def __init__(self, type_map: TypeMap):
        self.type_map = type_map

    def build(self, columns: Iterable[ColumnSchema]) -> Dict[str, str]:
        hints: Dict[str, str] = {}
        for column in columns:
            hint_type = self.type_map.resolve(column.storage_type)
            if hint_type is None:
                continue
            hints[column.name] = nullable_type(hint_type, column.nullable)
        return hints


class BaseHintBuilder:
    """The framework's standard column hints, weaker than SchemaHintBuilder."""

    def __init__(self, column_types: Optional[Mapping[str, str]] = None):
        self.column_types = dict(BASE_COLUMN_TYPES if column_types is None else column_types)

    def build(self, columns: Iterable[ColumnSchema]) -> Dict[str, str]:
        hints: Dict[str, str] = {}
        for column in columns:
            hint_type = self.column_types.get(column.storage_type)
            if hint_type is None:
                logger.debug("No base hint for column %s (%s)", column.name, column.storage_type)
                continue
            hints[column.name] = nullable_type(hint_type, column.nullable)
        return hints
