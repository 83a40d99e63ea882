"""Storage column type -> docblock hint type lookup."""

import logging
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_TYPE_MAP = {
    'mediumtext': 'string',
    'longtext': 'string',
    'array': 'array',
    'json': 'array',
}


class TypeMap:
    """Resolve storage types through configured overrides layered over defaults.

    The merged table is computed on first use and never changes afterwards,
    so a single instance can be shared by every file of a run.
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None,
                 defaults: Optional[Mapping[str, str]] = None):
        self._overrides = dict(overrides or {})
        self._defaults = dict(DEFAULT_TYPE_MAP if defaults is None else defaults)
        self._table: Optional[Dict[str, str]] = None

    @property
    def table(self) -> Dict[str, str]:
        if self._table is None:
            table = dict(self._defaults)
            table.update(self._overrides)
            self._table = table
            logger.debug("Type map initialized with %d entries (%d overrides)",
                         len(table), len(self._overrides))
        return self._table

    def resolve(self, storage_type: str) -> Optional[str]:
        """Return the hint type for storage_type, or None when unmapped."""
        return self.table.get(storage_type)

    def __contains__(self, storage_type: str) -> bool:
        return storage_type in self.table
