"""
Column schema source backed by SQLAlchemy reflection.

Reflected dialect types are normalised to the framework's storage type
names (``VARCHAR(255)`` -> ``string``, ``DATETIME`` -> ``datetime``) so the
TypeMap and the base hint table can resolve them.
"""

import logging
import re
from typing import List, Union

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import CompileError

from ..schema_types import ColumnSchema

logger = logging.getLogger(__name__)

_SQL_TO_STORAGE = {
    'varchar': 'string',
    'nvarchar': 'string',
    'character varying': 'string',
    'string': 'string',
    'char': 'char',
    'nchar': 'char',
    'character': 'char',
    'text': 'text',
    'tinytext': 'text',
    'clob': 'text',
    'mediumtext': 'mediumtext',
    'longtext': 'longtext',
    'integer': 'integer',
    'int': 'integer',
    'mediumint': 'integer',
    'bigint': 'biginteger',
    'smallint': 'smallinteger',
    'tinyint': 'tinyinteger',
    'boolean': 'boolean',
    'bool': 'boolean',
    'float': 'float',
    'real': 'float',
    'double': 'float',
    'double precision': 'float',
    'decimal': 'decimal',
    'numeric': 'decimal',
    'date': 'date',
    'datetime': 'datetime',
    'timestamp': 'timestamp',
    'time': 'time',
    'json': 'json',
    'jsonb': 'json',
    'blob': 'binary',
    'binary': 'binary',
    'varbinary': 'binary',
    'bytea': 'binary',
    'uuid': 'uuid',
}

_TYPE_NAME_RE = re.compile(r'[A-Za-z][A-Za-z ]*')


def storage_type_for(sql_type) -> str:
    """Map a SQLAlchemy type instance to a storage type name."""
    try:
        raw = str(sql_type)
    except CompileError:
        raw = type(sql_type).__name__

    match = _TYPE_NAME_RE.match(raw)
    name = match.group(0).strip().lower() if match else raw.lower()
    return _SQL_TO_STORAGE.get(name, name)


class SQLAlchemyColumnSource:
    """Reflect table columns from a database through SQLAlchemy."""

    def __init__(self, engine_or_url: Union[str, Engine]):
        if isinstance(engine_or_url, str):
            engine_or_url = create_engine(engine_or_url)
        self.engine = engine_or_url

    def columns(self, table_name: str) -> List[ColumnSchema]:
        inspector = inspect(self.engine)
        if not inspector.has_table(table_name):
            logger.warning("Table %s not found in database", table_name)
            return []

        columns = []
        for col in inspector.get_columns(table_name):
            columns.append(ColumnSchema(
                name=col['name'],
                storage_type=storage_type_for(col['type']),
                nullable=bool(col.get('nullable', True)),
            ))
        return columns
