from annotator.tokenizer import (
    T_CLASS, T_CLOSURE, T_DOC_COMMENT_CLOSE_TAG, T_DOC_COMMENT_OPEN_TAG,
    T_DOC_COMMENT_STRING, T_DOC_COMMENT_TAG, T_FUNCTION, T_INLINE_THEN,
    T_NAME_FULLY_QUALIFIED, T_NULLABLE, T_STRING, tokenize_php,
)

SOURCE = """<?php
namespace App\\Model\\Entity;

class Wheel extends Entity {

    /**
     * @return string|null The label
     */
    public function _getLabel(): ?string {
        $fn = function ($x) {
            return $x ? 1 : 2;
        };
        return Wheel::class;
    }

}
"""


def _kinds(stream, kind):
    return [t.index for t in stream if t.kind == kind]


class TestScopes:

    def test_class_scope_is_linked(self):
        stream = tokenize_php(SOURCE)
        class_index = stream.find_next(T_CLASS, 0)
        token = stream[class_index]
        assert token.line == 4
        assert stream[token.scope_opener].content == '{'
        assert stream[token.scope_closer].content == '}'
        assert stream[token.scope_closer].line == 16

    def test_class_constant_is_not_a_class(self):
        stream = tokenize_php(SOURCE)
        assert len(_kinds(stream, T_CLASS)) == 1

    def test_function_parenthesis_and_scope(self):
        stream = tokenize_php(SOURCE)
        function = stream[stream.find_next(T_FUNCTION, 0)]
        assert function.line == 9
        assert stream[function.parenthesis_opener].content == '('
        assert stream[function.parenthesis_closer].content == ')'
        assert stream[function.scope_opener].line == 9
        assert stream[function.scope_closer].line == 14

    def test_closure_is_distinguished(self):
        stream = tokenize_php(SOURCE)
        assert len(_kinds(stream, T_FUNCTION)) == 1
        closures = _kinds(stream, T_CLOSURE)
        assert len(closures) == 1
        assert stream[closures[0]].scope_closer is not None

    def test_abstract_function_has_no_scope(self):
        stream = tokenize_php('<?php abstract class A { abstract function foo(): int; }')
        function = stream[stream.find_next(T_FUNCTION, 0)]
        assert function.parenthesis_closer is not None
        assert function.scope_opener is None

    def test_unclosed_class_has_no_closer(self):
        stream = tokenize_php('<?php class A {\n function foo() {}\n')
        assert stream[stream.find_next(T_CLASS, 0)].scope_closer is None


class TestNullable:

    def test_return_type_question_mark_is_nullable(self):
        stream = tokenize_php(SOURCE)
        nullable = _kinds(stream, T_NULLABLE)
        assert len(nullable) == 1
        next_index = stream.find_next_non_whitespace(nullable[0] + 1)
        assert stream[next_index].content == 'string'

    def test_ternary_is_not_nullable(self):
        stream = tokenize_php(SOURCE)
        assert len(_kinds(stream, T_INLINE_THEN)) == 1


class TestDocComments:

    def test_doc_comment_tokens(self):
        stream = tokenize_php(SOURCE)
        opener = stream.find_next(T_DOC_COMMENT_OPEN_TAG, 0)
        closer = stream[opener].comment_closer
        assert stream[closer].kind == T_DOC_COMMENT_CLOSE_TAG
        assert stream[closer].comment_opener == opener
        assert stream[closer].line == 8

        tag = stream.find_next(T_DOC_COMMENT_TAG, opener, closer)
        assert stream[tag].content == '@return'
        assert stream[tag].line == 7
        assert stream[tag + 2].kind == T_DOC_COMMENT_STRING
        assert stream[tag + 2].content == 'string|null The label'

    def test_single_line_doc_comment(self):
        stream = tokenize_php('<?php /** @return int */ function a() {}')
        tag = stream.find_next(T_DOC_COMMENT_TAG, 0)
        assert stream[tag + 2].content == 'int'


class TestNames:

    def test_fully_qualified_names(self):
        stream = tokenize_php('<?php function a(): \\Cake\\I18n\\FrozenTime {}')
        index = stream.find_next(T_NAME_FULLY_QUALIFIED, 0)
        assert stream[index].content == '\\Cake\\I18n\\FrozenTime'

    def test_keywords_inside_strings_are_ignored(self):
        stream = tokenize_php("<?php $a = 'class function'; // function foo()\n")
        assert _kinds(stream, T_CLASS) == []
        assert _kinds(stream, T_FUNCTION) == []

    def test_source_is_reconstructed(self):
        stream = tokenize_php(SOURCE)
        assert ''.join(t.content for t in stream) == SOURCE


class TestStreamHelpers:

    def test_first_in_line(self):
        stream = tokenize_php(SOURCE)
        function_index = stream.find_next(T_FUNCTION, 0)
        first = stream.first_in_line(function_index)
        assert stream[first].line == stream[function_index].line
        assert stream[first - 1].line == stream[function_index].line - 1

    def test_find_next_respects_end(self):
        stream = tokenize_php(SOURCE)
        function_index = stream.find_next(T_FUNCTION, 0)
        assert stream.find_next(T_FUNCTION, 0, function_index) is None

    def test_find_next_exclude(self):
        stream = tokenize_php('<?php   foo')
        index = stream.find_next('T_WHITESPACE', 1, exclude=True)
        assert stream[index].kind == T_STRING
