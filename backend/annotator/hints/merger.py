"""Merge the per-source hint maps into the final property -> type mapping."""

from typing import Dict, List, Mapping, Optional

from ..schema_types import PropertyHint


def merge_property_hints(schema_hints: Mapping[str, str],
                         association_hints: Mapping[str, str],
                         virtual_hints: Mapping[str, str],
                         base_hints: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Combine hint maps; the first source to name a property keeps it.

    Precedence (and iteration order): schema, base, association, virtual.
    Entries with an empty type are dropped rather than emitted blank.
    """
    merged: Dict[str, str] = {}
    for source in (schema_hints, base_hints or {}, association_hints, virtual_hints):
        for prop, hint_type in source.items():
            merged.setdefault(prop, hint_type)
    return {prop: hint_type for prop, hint_type in merged.items() if hint_type}


def to_property_hints(hints: Mapping[str, str]) -> List[PropertyHint]:
    return [PropertyHint(prop, hint_type) for prop, hint_type in hints.items()]
