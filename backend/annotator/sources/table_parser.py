"""
Table class association parser.

Reads the association calls a Table class makes in ``initialize()``:

    $this->belongsTo('Cars');
    $this->hasMany('Wheels', ['className' => 'Garage.Wheels']);
    $this->belongsToMany('Tags')->setProperty('labels');

and turns each into an AssociationSchema for the entity of that table.
"""

import logging
import re
from typing import List, Optional, Tuple

from ..base import extract_block_body, line_number_at, strip_php_comments
from ..inflector import singularize, underscore
from ..schema_types import TO_MANY_KINDS, AssociationSchema

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Compiled regex patterns
# ---------------------------------------------------------------------------

# $this->hasMany('Wheels'
_ASSOCIATION_RE = re.compile(
    r'\$this\s*->\s*(belongsTo|hasOne|hasMany|belongsToMany)\s*\(\s*'
    r"['\"]([^'\"]+)['\"]",
    re.MULTILINE,
)

# 'className' => 'Garage.Wheels'
_CLASS_NAME_OPTION_RE = re.compile(r"['\"]className['\"]\s*=>\s*['\"]([^'\"]+)['\"]")

# 'className' => WheelsTable::class
_CLASS_CONST_OPTION_RE = re.compile(r"['\"]className['\"]\s*=>\s*\\?([\w\\]+)::class")

# 'propertyName' => 'wheels'
_PROPERTY_OPTION_RE = re.compile(r"['\"]propertyName['\"]\s*=>\s*['\"](\w+)['\"]")

# ->setClassName('Garage.Wheels') / ->setProperty('wheels')
_SET_CLASS_NAME_RE = re.compile(r"->\s*setClassName\s*\(\s*['\"]([^'\"]+)['\"]")
_SET_PROPERTY_RE = re.compile(r"->\s*setProperty\s*\(\s*['\"](\w+)['\"]")

# $this->setTable('wheels')
_TABLE_NAME_RE = re.compile(r"->\s*setTable\s*\(\s*['\"](\w+)['\"]")

# $this->setEntityClass('App\Model\Entity\Car') / protected $_entityClass = '...'
_ENTITY_CLASS_RE = re.compile(
    r"(?:->\s*setEntityClass\s*\(\s*|\$_entityClass\s*=\s*)"
    r"(?:['\"]([\w\\.]+)['\"]|\\?([\w\\]+)::class)",
)

_TABLE_SUFFIX = 'Table'


def _split_table_class(class_name: str) -> Tuple[Optional[str], str]:
    """``Garage\\Model\\Table\\WheelsTable`` -> (``Garage``, ``Wheels``)."""
    namespace, _, short = class_name.strip('\\').rpartition('\\')
    if short.endswith(_TABLE_SUFFIX) and len(short) > len(_TABLE_SUFFIX):
        short = short[:-len(_TABLE_SUFFIX)]
    if namespace.endswith('\\Model\\Table'):
        namespace = namespace[:-len('\\Model\\Table')]
    return (namespace or None), short


def default_property_name(alias: str, kind: str) -> str:
    """``Wheels`` -> ``wheels`` for to-many, ``Cars`` -> ``car`` for to-one."""
    name = alias.rpartition('.')[2]
    if kind in TO_MANY_KINDS:
        return underscore(name)
    return underscore(singularize(name))


class TableAssociationParser:
    """Extract AssociationSchema entries from Table class source."""

    def parse(self, content: str) -> List[AssociationSchema]:
        stripped = strip_php_comments(content)
        associations: List[AssociationSchema] = []

        for match in _ASSOCIATION_RE.finditer(stripped):
            kind, alias = match.group(1), match.group(2)
            statement = self._statement(stripped, match.end())

            target_alias, target_namespace = alias, None
            class_name = self._option(statement, _CLASS_NAME_OPTION_RE, _SET_CLASS_NAME_RE)
            class_const = _CLASS_CONST_OPTION_RE.search(statement)
            if class_name and '\\' in class_name:
                target_namespace, target_alias = _split_table_class(class_name)
            elif class_name:
                target_alias = class_name
            elif class_const:
                target_namespace, target_alias = _split_table_class(class_const.group(1))

            prop = self._option(statement, _PROPERTY_OPTION_RE, _SET_PROPERTY_RE)
            if not prop:
                prop = default_property_name(alias, kind)

            logger.debug("Line %d: %s %s -> %s", line_number_at(content, match.start()),
                         kind, alias, prop)
            associations.append(AssociationSchema(
                property_name=prop,
                target_alias=target_alias,
                target_namespace=target_namespace,
                kind=kind,
            ))

        return associations

    def parse_entity_class(self, content: str) -> Optional[str]:
        """Entity class a Table configures explicitly, if any."""
        match = _ENTITY_CLASS_RE.search(strip_php_comments(content))
        if not match:
            return None
        return match.group(1) or match.group(2)

    def parse_table_name(self, content: str) -> Optional[str]:
        match = _TABLE_NAME_RE.search(strip_php_comments(content))
        return match.group(1) if match else None

    @staticmethod
    def _statement(content: str, start: int) -> str:
        """Text from start up to the ``;`` ending the association call.

        An options array is skipped as a whole so ``;`` inside it cannot
        end the statement early.
        """
        end = content.find(';', start)
        if end == -1:
            end = len(content)
        bracket = content.find('[', start, end)
        if bracket != -1:
            _, _, body_end = extract_block_body(content, bracket, '[', ']')
            if body_end != -1:
                end = content.find(';', body_end)
                if end == -1:
                    end = len(content)
        return content[start:end]

    @staticmethod
    def _option(statement: str, *patterns) -> Optional[str]:
        for pattern in patterns:
            match = pattern.search(statement)
            if match:
                return match.group(1)
        return None
