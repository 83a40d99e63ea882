from .class_registry import ClassRegistry, declared_classes
from .sqlalchemy_columns import SQLAlchemyColumnSource, storage_type_for
from .table_parser import TableAssociationParser, default_property_name

__all__ = [
    'ClassRegistry',
    'SQLAlchemyColumnSource',
    'TableAssociationParser',
    'declared_classes',
    'default_property_name',
    'storage_type_for',
]
