"""Association schema -> property hint translation."""

import logging
import re
from typing import Dict, Iterable, List, Optional

from ..inflector import entity_name, plugin_split
from ..schema_types import ASSOCIATION_KINDS, AssociationResult, AssociationSchema

logger = logging.getLogger(__name__)

DEFAULT_ENTITY_BASE_CLASS = '\\Cake\\ORM\\Entity'

_ALIAS_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
_NAMESPACE_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*(?:\\[A-Za-z_][A-Za-z0-9_]*)*$')


def qualify(class_name: str) -> str:
    """``App\\Model\\Entity\\Wheel`` -> ``\\App\\Model\\Entity\\Wheel``."""
    return '\\' + class_name.lstrip('\\')


class AssociationHintBuilder:
    """Resolve the entity class behind each association.

    When the target table only knows the generic entity class, a class name
    is synthesized from the target alias (``Wheels`` -> ``\\App\\Model\\Entity\\Wheel``)
    and kept only if the class registry knows it.
    """

    def __init__(self, class_registry, app_namespace: str = 'App',
                 entity_base_class: str = DEFAULT_ENTITY_BASE_CLASS):
        self.class_registry = class_registry
        self.app_namespace = app_namespace
        self.entity_base_class = qualify(entity_base_class)

    def build(self, associations: Iterable[AssociationSchema]) -> Dict[str, str]:
        hints: Dict[str, str] = {}
        for result in self.resolve_all(associations):
            if not result.ok:
                logger.debug("Skipping association %s: %s", result.property_name, result.reason)
                continue
            if result.property_name in hints:
                logger.debug("Duplicate association property %s ignored", result.property_name)
                continue
            hints[result.property_name] = result.hint
        return hints

    def resolve_all(self, associations: Iterable[AssociationSchema]) -> List[AssociationResult]:
        return [self.resolve(association) for association in associations]

    def resolve(self, association: AssociationSchema) -> AssociationResult:
        if not association.property_name:
            return AssociationResult.skipped('', 'missing property name')
        if association.kind not in ASSOCIATION_KINDS:
            return AssociationResult.skipped(association.property_name,
                                             f'unknown association kind {association.kind}')

        entity_class = self._configured_class(association.target_entity_type_name)
        if entity_class is None:
            entity_class = self._synthesized_class(association)
            if entity_class is None:
                return AssociationResult.skipped(association.property_name,
                                                 f'malformed alias {association.target_alias!r}')

        if association.is_to_many:
            entity_class += '[]'
        return AssociationResult.resolved(association.property_name, entity_class)

    def _configured_class(self, target_entity_type_name: Optional[str]) -> Optional[str]:
        if not target_entity_type_name:
            return None
        entity_class = qualify(target_entity_type_name)
        if entity_class == self.entity_base_class:
            return None
        return entity_class

    def _synthesized_class(self, association: AssociationSchema) -> Optional[str]:
        plugin, alias = plugin_split(association.target_alias or '')
        if not _ALIAS_RE.match(alias):
            return None

        namespace = association.target_namespace or self.app_namespace
        if plugin is not None:
            namespace = plugin
        namespace = namespace.strip('\\').replace('/', '\\')
        if not _NAMESPACE_RE.match(namespace):
            return None

        candidate = f'\\{namespace}\\Model\\Entity\\{entity_name(alias)}'
        if not self.class_registry.exists(candidate):
            logger.debug("Entity class %s not found, using %s", candidate, self.entity_base_class)
            return self.entity_base_class
        return candidate
