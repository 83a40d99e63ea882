from .association_hints import AssociationHintBuilder
from .merger import merge_property_hints, to_property_hints
from .return_type import resolve_return_type
from .schema_hints import BaseHintBuilder, SchemaHintBuilder, nullable_type
from .virtual_hints import VirtualPropertyHintBuilder, accessor_property_name

__all__ = [
    'AssociationHintBuilder',
    'BaseHintBuilder',
    'SchemaHintBuilder',
    'VirtualPropertyHintBuilder',
    'accessor_property_name',
    'merge_property_hints',
    'nullable_type',
    'resolve_return_type',
    'to_property_hints',
]
