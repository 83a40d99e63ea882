"""
PHP tokenizer producing a PHP_CodeSniffer-style token stream.

The stream is consumed by the virtual property scanner and the docblock
writer. Token kinds use the familiar ``T_*`` names. Each token knows its
line number, and structural tokens are linked to their partners:

* ``T_CLASS``/``T_INTERFACE``/``T_TRAIT``/``T_FUNCTION``/``T_CLOSURE``
  carry ``scope_opener``/``scope_closer`` (the body braces);
* function and closure tokens carry ``parenthesis_opener``/``parenthesis_closer``;
* ``T_DOC_COMMENT_OPEN_TAG`` carries ``comment_closer`` and
  ``T_DOC_COMMENT_CLOSE_TAG`` carries ``comment_opener``;
* every brace or parenthesis carries ``bracket_match``.

Whitespace tokens never span a newline, so walking tokens backwards while
``line`` stays the same finds the first token of a line.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

T_OPEN_TAG = 'T_OPEN_TAG'
T_CLOSE_TAG = 'T_CLOSE_TAG'
T_INLINE_HTML = 'T_INLINE_HTML'
T_WHITESPACE = 'T_WHITESPACE'
T_COMMENT = 'T_COMMENT'
T_DOC_COMMENT_OPEN_TAG = 'T_DOC_COMMENT_OPEN_TAG'
T_DOC_COMMENT_CLOSE_TAG = 'T_DOC_COMMENT_CLOSE_TAG'
T_DOC_COMMENT_STAR = 'T_DOC_COMMENT_STAR'
T_DOC_COMMENT_WHITESPACE = 'T_DOC_COMMENT_WHITESPACE'
T_DOC_COMMENT_TAG = 'T_DOC_COMMENT_TAG'
T_DOC_COMMENT_STRING = 'T_DOC_COMMENT_STRING'
T_CONSTANT_ENCAPSED_STRING = 'T_CONSTANT_ENCAPSED_STRING'
T_HEREDOC = 'T_HEREDOC'
T_VARIABLE = 'T_VARIABLE'
T_STRING = 'T_STRING'
T_NAME_QUALIFIED = 'T_NAME_QUALIFIED'
T_NAME_FULLY_QUALIFIED = 'T_NAME_FULLY_QUALIFIED'
T_LNUMBER = 'T_LNUMBER'
T_CLASS = 'T_CLASS'
T_INTERFACE = 'T_INTERFACE'
T_TRAIT = 'T_TRAIT'
T_FUNCTION = 'T_FUNCTION'
T_CLOSURE = 'T_CLOSURE'
T_NULLABLE = 'T_NULLABLE'
T_INLINE_THEN = 'T_INLINE_THEN'
T_COLON = 'T_COLON'
T_DOUBLE_COLON = 'T_DOUBLE_COLON'
T_OPEN_CURLY_BRACKET = 'T_OPEN_CURLY_BRACKET'
T_CLOSE_CURLY_BRACKET = 'T_CLOSE_CURLY_BRACKET'
T_OPEN_PARENTHESIS = 'T_OPEN_PARENTHESIS'
T_CLOSE_PARENTHESIS = 'T_CLOSE_PARENTHESIS'
T_SEMICOLON = 'T_SEMICOLON'
T_COMMA = 'T_COMMA'
T_BITWISE_AND = 'T_BITWISE_AND'
T_OTHER = 'T_OTHER'

# Keywords with a dedicated kind. Everything else lexes as T_STRING,
# which includes type names such as array, self, int or null.
_KEYWORDS = {
    'abstract': 'T_ABSTRACT',
    'class': T_CLASS,
    'const': 'T_CONST',
    'extends': 'T_EXTENDS',
    'final': 'T_FINAL',
    'function': T_FUNCTION,
    'implements': 'T_IMPLEMENTS',
    'interface': T_INTERFACE,
    'namespace': 'T_NAMESPACE',
    'new': 'T_NEW',
    'private': 'T_PRIVATE',
    'protected': 'T_PROTECTED',
    'public': 'T_PUBLIC',
    'return': 'T_RETURN',
    'static': 'T_STATIC',
    'trait': T_TRAIT,
    'use': 'T_USE',
}

_PUNCTUATION = {
    '{': T_OPEN_CURLY_BRACKET,
    '}': T_CLOSE_CURLY_BRACKET,
    '(': T_OPEN_PARENTHESIS,
    ')': T_CLOSE_PARENTHESIS,
    '[': 'T_OPEN_SQUARE_BRACKET',
    ']': 'T_CLOSE_SQUARE_BRACKET',
    ';': T_SEMICOLON,
    ',': T_COMMA,
    '::': T_DOUBLE_COLON,
    ':': T_COLON,
    '->': 'T_OBJECT_OPERATOR',
    '?->': 'T_NULLSAFE_OBJECT_OPERATOR',
    '=>': 'T_DOUBLE_ARROW',
    '??': 'T_COALESCE',
    '?': T_INLINE_THEN,
    '&': T_BITWISE_AND,
    '|': 'T_TYPE_UNION',
    '=': 'T_EQUAL',
}

_PHP_RE = re.compile(
    r'(?P<close_tag>\?>)'
    r'|(?P<doc>/\*\*(?!/).*?\*/)'
    r'|(?P<block_comment>/\*.*?\*/)'
    r'|(?P<line_comment>(?://|#(?!\[))[^\n]*?(?=\?>|\r?\n|$))'
    r'|(?P<heredoc><<<[ \t]*(?P<hd_quote>["\']?)(?P<hd_label>\w+)(?P=hd_quote)\r?\n'
    r'.*?^[ \t]*(?P=hd_label)\b)'
    r'|(?P<string>\'(?:\\.|[^\'\\])*\'|"(?:\\.|[^"\\])*")'
    r'|(?P<variable>\$\w+)'
    r'|(?P<fq_name>\\[A-Za-z_\x80-\uffff][\w\x80-\uffff]*(?:\\[A-Za-z_\x80-\uffff][\w\x80-\uffff]*)*)'
    r'|(?P<q_name>[A-Za-z_\x80-\uffff][\w\x80-\uffff]*(?:\\[A-Za-z_\x80-\uffff][\w\x80-\uffff]*)+)'
    r'|(?P<name>[A-Za-z_\x80-\uffff][\w\x80-\uffff]*)'
    r'|(?P<number>\d[\w.]*)'
    r'|(?P<newline>\r\n|\n|\r)'
    r'|(?P<space>[ \t\f\v]+)'
    r'|(?P<punct>\?->|::|->|=>|\?\?|[{}()\[\];,:?&|=])'
    r'|(?P<other>.)',
    re.DOTALL | re.MULTILINE,
)

_OPEN_TAG_RE = re.compile(r'<\?php\b|<\?=|<\?')

_DOC_LINE_RE = re.compile(
    r'(?P<lead>[ \t]*)'
    r'(?P<star>\*(?!/))?'
    r'(?P<gap>[ \t]*)'
    r'(?P<tag>@[\w\-\\]+)?'
    r'(?P<rest>.*)',
    re.DOTALL,
)

_TYPE_DECLARATION_KINDS = (T_STRING, T_NAME_QUALIFIED, T_NAME_FULLY_QUALIFIED, 'T_STATIC')

Kinds = Union[str, Iterable[str]]


@dataclass
class Token:
    """A single lexical token."""

    kind: str
    content: str
    line: int
    index: int = -1
    scope_opener: Optional[int] = None
    scope_closer: Optional[int] = None
    parenthesis_opener: Optional[int] = None
    parenthesis_closer: Optional[int] = None
    comment_opener: Optional[int] = None
    comment_closer: Optional[int] = None
    bracket_match: Optional[int] = None


class TokenStream:
    """Indexed token sequence with PHP_CodeSniffer-like search helpers."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        for i, token in enumerate(tokens):
            token.index = i

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, index: int) -> Token:
        return self.tokens[index]

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens)

    @staticmethod
    def _kind_set(kinds: Kinds) -> frozenset:
        if isinstance(kinds, str):
            return frozenset((kinds,))
        return frozenset(kinds)

    def find_next(self, kinds: Kinds, start: int, end: Optional[int] = None,
                  exclude: bool = False) -> Optional[int]:
        """Index of the next token in [start, end) whose kind matches.

        With ``exclude=True`` the first token whose kind does NOT match is
        returned instead.
        """
        wanted = self._kind_set(kinds)
        stop = len(self.tokens) if end is None else min(end, len(self.tokens))
        for i in range(max(start, 0), stop):
            if (self.tokens[i].kind in wanted) != exclude:
                return i
        return None

    def find_previous(self, kinds: Kinds, start: int, end: Optional[int] = None,
                      exclude: bool = False) -> Optional[int]:
        """Index of the previous token in [end, start] whose kind matches."""
        wanted = self._kind_set(kinds)
        stop = -1 if end is None else end - 1
        for i in range(min(start, len(self.tokens) - 1), stop, -1):
            if (self.tokens[i].kind in wanted) != exclude:
                return i
        return None

    def find_previous_non_whitespace(self, start: int) -> Optional[int]:
        return self.find_previous(T_WHITESPACE, start, exclude=True)

    def find_next_non_whitespace(self, start: int, end: Optional[int] = None) -> Optional[int]:
        return self.find_next((T_WHITESPACE, T_COMMENT), start, end, exclude=True)

    def first_in_line(self, index: int) -> int:
        """Index of the first token on the same line as ``index``."""
        line = self.tokens[index].line
        while index > 0 and self.tokens[index - 1].line == line:
            index -= 1
        return index

    def find_type_declaration(self, start: int, end: int) -> Optional[int]:
        """First type identifier in [start, end), e.g. a return type."""
        return self.find_next(_TYPE_DECLARATION_KINDS, start, end)


# ---------------------------------------------------------------------------
# Lexing
# ---------------------------------------------------------------------------

def _split_lines(text: str) -> List[str]:
    """Split text into pieces that each end at (and include) a newline."""
    return re.findall(r'[^\r\n]*(?:\r\n|\n|\r)|[^\r\n]+', text)


def _doc_comment_tokens(content: str, line: int) -> List[Token]:
    """Expand a ``/** ... */`` comment into doc comment sub-tokens."""
    tokens = [Token(T_DOC_COMMENT_OPEN_TAG, '/**', line)]
    body = content[3:-2]

    for piece in _split_lines(body):
        text = piece.rstrip('\r\n')
        newline = piece[len(text):]
        match = _DOC_LINE_RE.match(text)
        if match.group('lead'):
            tokens.append(Token(T_DOC_COMMENT_WHITESPACE, match.group('lead'), line))
        if match.group('star'):
            tokens.append(Token(T_DOC_COMMENT_STAR, '*', line))
        if match.group('gap'):
            tokens.append(Token(T_DOC_COMMENT_WHITESPACE, match.group('gap'), line))
        if match.group('tag'):
            tokens.append(Token(T_DOC_COMMENT_TAG, match.group('tag'), line))

        rest = match.group('rest')
        stripped = rest.strip()
        if stripped:
            leading = rest[:len(rest) - len(rest.lstrip())]
            trailing = rest[len(rest.rstrip()):]
            if leading:
                tokens.append(Token(T_DOC_COMMENT_WHITESPACE, leading, line))
            tokens.append(Token(T_DOC_COMMENT_STRING, stripped, line))
            if trailing:
                tokens.append(Token(T_DOC_COMMENT_WHITESPACE, trailing, line))
        elif rest:
            tokens.append(Token(T_DOC_COMMENT_WHITESPACE, rest, line))

        if newline:
            tokens.append(Token(T_DOC_COMMENT_WHITESPACE, newline, line))
            line += 1

    tokens.append(Token(T_DOC_COMMENT_CLOSE_TAG, '*/', line))
    return tokens


def _classify_name(name: str, previous: Optional[Token]) -> str:
    kind = _KEYWORDS.get(name.lower(), T_STRING)
    if kind == T_STRING:
        return kind
    # Foo::class, $obj->function and friends are plain identifiers.
    if previous is not None and previous.kind in (T_DOUBLE_COLON, 'T_OBJECT_OPERATOR',
                                                  'T_NULLSAFE_OBJECT_OPERATOR'):
        return T_STRING
    return kind


def _lex(source: str) -> List[Token]:
    tokens: List[Token] = []
    line = 1
    pos = 0
    length = len(source)
    previous: Optional[Token] = None

    def emit(kind: str, content: str) -> None:
        nonlocal line, previous
        token = Token(kind, content, line)
        tokens.append(token)
        if kind not in (T_WHITESPACE, T_COMMENT):
            previous = token
        line += content.count('\n') if '\n' in content else content.count('\r')

    while pos < length:
        # Outside of PHP mode everything up to the next open tag is HTML.
        open_match = _OPEN_TAG_RE.search(source, pos)
        if open_match is None:
            for piece in _split_lines(source[pos:]):
                emit(T_INLINE_HTML, piece)
            break
        if open_match.start() > pos:
            for piece in _split_lines(source[pos:open_match.start()]):
                emit(T_INLINE_HTML, piece)
        emit(T_OPEN_TAG, open_match.group(0))
        pos = open_match.end()

        while pos < length:
            match = _PHP_RE.match(source, pos)
            group = match.lastgroup
            text = match.group(0)
            pos = match.end()

            if group == 'close_tag':
                emit(T_CLOSE_TAG, text)
                break
            if group == 'doc':
                for token in _doc_comment_tokens(text, line):
                    tokens.append(token)
                line += text.count('\n')
                previous = tokens[-1]
            elif group == 'block_comment':
                for piece in _split_lines(text):
                    emit(T_COMMENT, piece)
            elif group == 'line_comment':
                emit(T_COMMENT, text)
            elif group == 'heredoc':
                emit(T_HEREDOC, text)
            elif group == 'string':
                emit(T_CONSTANT_ENCAPSED_STRING, text)
            elif group == 'variable':
                emit(T_VARIABLE, text)
            elif group == 'fq_name':
                emit(T_NAME_FULLY_QUALIFIED, text)
            elif group == 'q_name':
                emit(T_NAME_QUALIFIED, text)
            elif group == 'name':
                emit(_classify_name(text, previous), text)
            elif group == 'number':
                emit(T_LNUMBER, text)
            elif group in ('newline', 'space'):
                emit(T_WHITESPACE, text)
            elif group == 'punct':
                emit(_PUNCTUATION[text], text)
            else:
                emit(T_OTHER, text)

    return tokens


# ---------------------------------------------------------------------------
# Structural linking
# ---------------------------------------------------------------------------

def _link_brackets(stream: TokenStream) -> None:
    pairs = {T_CLOSE_CURLY_BRACKET: T_OPEN_CURLY_BRACKET,
             T_CLOSE_PARENTHESIS: T_OPEN_PARENTHESIS}
    stack: List[int] = []
    for token in stream:
        if token.kind in (T_OPEN_CURLY_BRACKET, T_OPEN_PARENTHESIS):
            stack.append(token.index)
        elif token.kind in pairs:
            # Unbalanced closers are left unlinked.
            if stack and stream[stack[-1]].kind == pairs[token.kind]:
                opener = stack.pop()
                stream[opener].bracket_match = token.index
                token.bracket_match = opener


def _link_doc_comments(stream: TokenStream) -> None:
    opener = None
    for token in stream:
        if token.kind == T_DOC_COMMENT_OPEN_TAG:
            opener = token.index
        elif token.kind == T_DOC_COMMENT_CLOSE_TAG and opener is not None:
            stream[opener].comment_closer = token.index
            token.comment_opener = opener
            opener = None


def _link_scope(stream: TokenStream, token: Token, start: int) -> None:
    """Attach the body braces that follow ``start`` to ``token``."""
    brace = stream.find_next((T_OPEN_CURLY_BRACKET, T_SEMICOLON), start)
    if brace is None or stream[brace].kind != T_OPEN_CURLY_BRACKET:
        return
    token.scope_opener = brace
    token.scope_closer = stream[brace].bracket_match


def _link_scopes(stream: TokenStream) -> None:
    for token in stream:
        if token.kind in (T_CLASS, T_INTERFACE, T_TRAIT):
            _link_scope(stream, token, token.index + 1)
        elif token.kind == T_FUNCTION:
            name_index = stream.find_next_non_whitespace(token.index + 1)
            if name_index is not None and stream[name_index].kind == T_BITWISE_AND:
                name_index = stream.find_next_non_whitespace(name_index + 1)
            if name_index is not None and stream[name_index].kind == T_OPEN_PARENTHESIS:
                token.kind = T_CLOSURE

            paren = stream.find_next(T_OPEN_PARENTHESIS, token.index + 1)
            if paren is None:
                continue
            token.parenthesis_opener = paren
            token.parenthesis_closer = stream[paren].bracket_match
            if token.parenthesis_closer is not None:
                _link_scope(stream, token, token.parenthesis_closer + 1)


def _mark_nullable(stream: TokenStream) -> None:
    """Turn ``?`` in type position (``?string``) into T_NULLABLE."""
    for token in stream:
        if token.kind != T_INLINE_THEN:
            continue
        prev_index = stream.find_previous_non_whitespace(token.index - 1)
        next_index = stream.find_next_non_whitespace(token.index + 1)
        if prev_index is None or next_index is None:
            continue
        if (stream[prev_index].kind in (T_COLON, T_OPEN_PARENTHESIS, T_COMMA)
                and stream[next_index].kind in _TYPE_DECLARATION_KINDS):
            token.kind = T_NULLABLE


def tokenize_php(source: str) -> TokenStream:
    """Tokenize PHP source text into a linked TokenStream."""
    stream = TokenStream(_lex(source))
    _link_brackets(stream)
    _link_doc_comments(stream)
    _mark_nullable(stream)
    _link_scopes(stream)
    logger.debug("Tokenized %d tokens", len(stream))
    return stream
