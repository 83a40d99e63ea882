"""Value types exchanged between the schema sources and the hint builders."""

from dataclasses import dataclass
from typing import Optional

MIXED = 'mixed'

TO_MANY_KINDS = frozenset({'hasMany', 'belongsToMany'})
ASSOCIATION_KINDS = frozenset({'belongsTo', 'hasOne', 'hasMany', 'belongsToMany'})


@dataclass(frozen=True)
class ColumnSchema:
    """One stored column as reported by the schema source."""

    name: str
    storage_type: str
    nullable: bool = False


@dataclass(frozen=True)
class AssociationSchema:
    """One declared relation to another record type.

    ``target_alias`` may carry a plugin qualifier (``Vendor/Plugin.Wheels``).
    ``target_entity_type_name`` is the entity class configured on the target
    table, or None when only the generic base record type is known.
    """

    property_name: str
    target_alias: str
    target_entity_type_name: Optional[str] = None
    target_namespace: Optional[str] = None
    kind: str = 'belongsTo'

    @property
    def is_to_many(self) -> bool:
        return self.kind in TO_MANY_KINDS


@dataclass(frozen=True)
class PropertyHint:
    property_name: str
    type_expression: str


@dataclass(frozen=True)
class AssociationResult:
    """Outcome of resolving a single association.

    Exactly one of ``hint`` and ``reason`` is set.
    """

    property_name: str
    hint: Optional[str] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.hint is not None

    @classmethod
    def resolved(cls, property_name: str, hint: str) -> 'AssociationResult':
        return cls(property_name=property_name, hint=hint)

    @classmethod
    def skipped(cls, property_name: str, reason: str) -> 'AssociationResult':
        return cls(property_name=property_name, reason=reason)
