"""
Return type resolution for accessor methods.

Each resolver inspects one source of type information and returns the
type string or None. ``resolve_return_type`` tries them in order and the
first non-empty answer wins:

1. the ``@return`` tag of the docblock right above the method line;
2. the native return type declaration (``function _getFoo(): ?string``);
3. ``mixed``.
"""

import logging
import re
from typing import Callable, Optional, Sequence

from ..schema_types import MIXED
from ..tokenizer import (
    TokenStream, T_DOC_COMMENT_CLOSE_TAG, T_DOC_COMMENT_STRING,
    T_DOC_COMMENT_TAG, T_DOC_COMMENT_WHITESPACE, T_NULLABLE,
)

logger = logging.getLogger(__name__)

ReturnTypeResolver = Callable[[TokenStream, int], Optional[str]]

_WHITESPACE_RE = re.compile(r'\s')


def find_doc_block_close_tag(stream: TokenStream, function_index: int) -> Optional[int]:
    """Close tag of the docblock ending right before the function's line."""
    first_in_line = stream.first_in_line(function_index)
    previous = stream.find_previous_non_whitespace(first_in_line - 1)
    if previous is None or stream[previous].kind != T_DOC_COMMENT_CLOSE_TAG:
        return None
    if stream[previous].comment_opener is None:
        return None
    return previous


def extract_return_tag(stream: TokenStream, opener: int, closer: int) -> Optional[str]:
    """Type of the first usable ``@return`` tag between opener and closer.

    Trailing description text is dropped: ``@return string The name``
    yields ``string``.
    """
    for i in range(opener + 1, closer):
        token = stream[i]
        if token.kind != T_DOC_COMMENT_TAG or token.content != '@return':
            continue

        type_index = stream.find_next(T_DOC_COMMENT_WHITESPACE, i + 1, closer, exclude=True)
        if type_index is None or stream[type_index].kind != T_DOC_COMMENT_STRING:
            continue
        if stream[type_index].line != token.line:
            continue

        return _WHITESPACE_RE.split(stream[type_index].content, 1)[0]

    return None


def doc_block_return_type(stream: TokenStream, function_index: int) -> Optional[str]:
    closer = find_doc_block_close_tag(stream, function_index)
    if closer is None:
        return None
    return extract_return_tag(stream, stream[closer].comment_opener, closer)


def native_return_type(stream: TokenStream, function_index: int) -> Optional[str]:
    """Return type declared between the parameter list and the body."""
    function = stream[function_index]
    if function.parenthesis_closer is None or function.scope_opener is None:
        return None

    start = function.parenthesis_closer + 1
    type_index = stream.find_type_declaration(start, function.scope_opener)
    if type_index is None:
        return None

    return_type = stream[type_index].content
    if stream.find_next(T_NULLABLE, start, type_index) is not None:
        return_type += '|null'
    return return_type


def unconstrained_return_type(stream: TokenStream, function_index: int) -> Optional[str]:
    return MIXED


DEFAULT_RESOLVERS: Sequence[ReturnTypeResolver] = (
    doc_block_return_type,
    native_return_type,
    unconstrained_return_type,
)


def resolve_return_type(stream: TokenStream, function_index: int,
                        resolvers: Sequence[ReturnTypeResolver] = DEFAULT_RESOLVERS) -> str:
    """Run the resolver chain for the function token at function_index."""
    for resolver in resolvers:
        return_type = resolver(stream, function_index)
        if return_type:
            logger.debug("Line %d: return type %s via %s",
                         stream[function_index].line, return_type, resolver.__name__)
            return return_type
    return MIXED
