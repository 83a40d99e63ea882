"""
Word inflection helpers for class and property naming.

Follows the framework's naming conventions: table aliases are plural
CamelCase (``BlogPosts``), entity classes are singular CamelCase
(``BlogPost``) and properties are lower_underscored (``blog_posts``).
"""

import re
from functools import lru_cache
from typing import Optional, Tuple

_IRREGULAR = {
    'person': 'people',
    'man': 'men',
    'woman': 'women',
    'child': 'children',
    'foot': 'feet',
    'tooth': 'teeth',
    'goose': 'geese',
    'mouse': 'mice',
    'ox': 'oxen',
    'leaf': 'leaves',
    'criterion': 'criteria',
    'cookie': 'cookies',
    'move': 'moves',
    'sex': 'sexes',
    'cafe': 'cafes',
}
_IRREGULAR_PLURAL = {plural: singular for singular, plural in _IRREGULAR.items()}

_UNINFLECTED = frozenset({
    'audio', 'data', 'equipment', 'information', 'metadata', 'money',
    'news', 'research', 'rice', 'series', 'sheep', 'species',
    'fish', 'deer', 'media', 'feedback', 'staff', 'status',
})

# (pattern, replacement), first match wins.
_SINGULAR_RULES = [
    (r'(quiz)zes$', r'\1'),
    (r'(matr)ices$', r'\1ix'),
    (r'(vert|ind)ices$', r'\1ex'),
    (r'^(ox)en', r'\1'),
    (r'(alias|lens)(es)?$', r'\1'),
    (r'(octop|vir)(i|us)$', r'\1us'),
    (r'(cris|ax|test)es$', r'\1is'),
    (r'(shoe)s$', r'\1'),
    (r'(o)es$', r'\1'),
    (r'ouses$', 'ouse'),
    (r'([^a])uses$', r'\1us'),
    (r'([ml])ice$', r'\1ouse'),
    (r'(x|ch|ss|sh)es$', r'\1'),
    (r'(m)ovies$', r'\1ovie'),
    (r'(s)eries$', r'\1eries'),
    (r'([^aeiouy]|qu)ies$', r'\1y'),
    (r'([lr])ves$', r'\1f'),
    (r'(tive)s$', r'\1'),
    (r'(hive)s$', r'\1'),
    (r'(drive)s$', r'\1'),
    (r'([^fo])ves$', r'\1fe'),
    (r'(^analy)ses$', r'\1sis'),
    (r'(analy|diagno|^ba|(p)arenthe|(p)rogno|(s)ynop|(t)he)ses$', r'\1\2sis'),
    (r'([ti])a$', r'\1um'),
    (r'(p)eople$', r'\1erson'),
    (r'(m)en$', r'\1an'),
    (r'(c)hildren$', r'\1hild'),
    (r'(n)ews$', r'\1ews'),
    (r'eaus$', 'eau'),
    (r'^(.*us)$', r'\1'),
    (r'(ss)$', r'\1'),
    (r's$', ''),
]

_PLURAL_RULES = [
    (r'(quiz)$', r'\1zes'),
    (r'^(ox)$', r'\1en'),
    (r'([m|l])ouse$', r'\1ice'),
    (r'(matr|vert|ind)(ix|ex)$', r'\1ices'),
    (r'(x|ch|ss|sh)$', r'\1es'),
    (r'([^aeiouy]|qu)y$', r'\1ies'),
    (r'(hive)$', r'\1s'),
    (r'(?:([^f])fe|([lr])f)$', r'\1\2ves'),
    (r'sis$', 'ses'),
    (r'([ti])um$', r'\1a'),
    (r'(p)erson$', r'\1eople'),
    (r'(m)an$', r'\1en'),
    (r'(c)hild$', r'\1hildren'),
    (r'(buffal|tomat)o$', r'\1oes'),
    (r'(alumn|bacill|cact|foc|fung|nucle|radi|stimul|syllab|termin)us$', r'\1i'),
    (r'us$', 'uses'),
    (r'(alias)$', r'\1es'),
    (r'(ax|cris|test)is$', r'\1es'),
    (r's$', 's'),
    (r'$', 's'),
]

_SINGULAR_RULES = [(re.compile(p, re.IGNORECASE), r) for p, r in _SINGULAR_RULES]
_PLURAL_RULES = [(re.compile(p, re.IGNORECASE), r) for p, r in _PLURAL_RULES]

_LAST_WORD_RE = re.compile(r'(.*?)([A-Z][a-z0-9]*|[a-z0-9]+)$')
_UNDERSCORE_RE = re.compile(r'(?<=\w)([A-Z])')


def _inflect_last_word(word: str, irregular: dict, rules) -> str:
    """Inflect only the final word of a CamelCase or underscored name."""
    match = _LAST_WORD_RE.match(word)
    if not match:
        return word
    head, last = match.group(1), match.group(2)
    lower = last.lower()

    if lower in _UNINFLECTED:
        return word
    if lower in irregular:
        replacement = irregular[lower]
        if last[0].isupper():
            replacement = replacement[0].upper() + replacement[1:]
        return head + replacement

    for pattern, replacement in rules:
        if pattern.search(last):
            return head + pattern.sub(replacement, last, count=1)
    return word


@lru_cache(maxsize=1024)
def singularize(word: str) -> str:
    """Return the singular form of ``word`` (``BlogPosts`` -> ``BlogPost``)."""
    if not word:
        return word
    return _inflect_last_word(word, _IRREGULAR_PLURAL, _SINGULAR_RULES)


@lru_cache(maxsize=1024)
def pluralize(word: str) -> str:
    """Return the plural form of ``word`` (``BlogPost`` -> ``BlogPosts``)."""
    if not word:
        return word
    return _inflect_last_word(word, _IRREGULAR, _PLURAL_RULES)


def camelize(word: str) -> str:
    """``blog_posts`` -> ``BlogPosts``. Already camelized words are kept."""
    parts = re.split(r'[_\s]+', word)
    return ''.join(part[:1].upper() + part[1:] for part in parts if part)


def underscore(word: str) -> str:
    """Insert an underscore before every capital letter and lowercase.

    Runs of capitals are not treated as acronyms: ``HTMLContent`` becomes
    ``h_t_m_l_content``.
    """
    return _UNDERSCORE_RE.sub(r'_\1', word.replace('-', '_')).lower()


def entity_name(alias: str) -> str:
    """Singular entity class name for a table alias (``wheels`` -> ``Wheel``)."""
    return singularize(camelize(alias))


def plugin_split(name: str) -> Tuple[Optional[str], str]:
    """Split ``Vendor/Plugin.Wheels`` into (``Vendor/Plugin``, ``Wheels``)."""
    if '.' in name:
        plugin, _, rest = name.rpartition('.')
        return plugin, rest
    return None, name
