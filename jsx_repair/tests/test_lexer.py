"""
Tests for the lossless JS/TS/JSX lexer.

Covers mode switching (JSX vs. comparison, regex vs. division, template
substitutions) and the unterminated-literal failures.
"""

import pytest

from jsx_repair.analyzers.lexer import Lexer
from jsx_repair.contracts.errors import LexError
from jsx_repair.contracts.syntax import TokenKind


def kinds(source):
    return [t.kind for t in Lexer(source).tokenize() if t.is_significant]


class TestLossless:
    """Joining token texts gives back the input."""

    def test_component_source_is_reproduced(self):
        source = (
            '"use client";\n'
            "\n"
            'import { useState } from "react";\n'
            "\n"
            "// counter\n"
            "export default function Counter({ start = 0 }: { start?: number }) {\n"
            "  const [n, setN] = useState(start);\n"
            "  const label = `Count: ${n > 9 ? `${n}+` : n}`;\n"
            "  const re = /[a-z]+\\/x/gi;\n"
            "  return (\n"
            "    <>\n"
            '      <button className="btn" onClick={() => setN(n + 1)}>{label}</button>\n'
            "      {/* note */}\n"
            "      <Card.Header title={<b>x</b>} {...rest} />\n"
            "    </>\n"
            "  );\n"
            "}\n"
        )
        tokens = Lexer(source).tokenize()
        assert "".join(t.text for t in tokens) == source

    def test_line_numbers(self):
        tokens = Lexer("a\n\nb").tokenize()
        idents = [t for t in tokens if t.kind is TokenKind.IDENTIFIER]
        assert [t.line for t in idents] == [1, 3]

    def test_start_line_offset(self):
        tokens = Lexer("x", start_line=7).tokenize()
        assert tokens[0].line == 7


class TestJsxDetection:
    """`<` is markup only where an expression may start."""

    def test_jsx_after_return(self):
        assert TokenKind.JSX_OPEN in kinds("function A() { return <div /> }")

    def test_less_than_after_identifier(self):
        result = kinds("const ok = a < b;")
        assert TokenKind.JSX_OPEN not in result

    def test_fragment(self):
        tokens = [t for t in Lexer("const x = <><i /></>;").tokenize() if t.is_significant]
        assert tokens[3].kind is TokenKind.JSX_OPEN
        assert tokens[4].kind is TokenKind.JSX_TAG_END

    def test_generic_arrow_is_not_jsx(self):
        assert TokenKind.JSX_OPEN not in kinds("const id = <T,>(x: T) => x;")

    def test_generic_extends_is_not_jsx(self):
        assert TokenKind.JSX_OPEN not in kinds("const id = <T extends object>(x: T) => x;")

    def test_member_and_attributes(self):
        tokens = Lexer('const x = <Card.Header id="a" hidden />;').tokenize()
        names = [t.text for t in tokens if t.kind is TokenKind.JSX_NAME]
        attrs = [t.text for t in tokens if t.kind is TokenKind.JSX_ATTR_NAME]
        assert names == ["Card.Header"]
        assert attrs == ["id", "hidden"]

    def test_text_children(self):
        tokens = Lexer("const x = <p>Hello, world</p>;").tokenize()
        text = [t.text for t in tokens if t.kind is TokenKind.JSX_TEXT]
        assert text == ["Hello, world"]


class TestLiterals:
    """Regex, template and string handling."""

    def test_regex_after_assignment(self):
        assert TokenKind.REGEX in kinds("const r = /ab+c/g;")

    def test_division_after_identifier(self):
        assert TokenKind.REGEX not in kinds("const half = total / 2 / 1;")

    def test_template_substitution_parts(self):
        tokens = [t for t in Lexer("`a ${b} c`").tokenize() if t.is_significant]
        assert [t.kind for t in tokens] == [
            TokenKind.TEMPLATE_PART,
            TokenKind.IDENTIFIER,
            TokenKind.TEMPLATE_PART,
        ]
        assert tokens[0].text == "`a ${"
        assert tokens[2].text == "} c`"

    def test_plain_template(self):
        assert kinds("`plain`") == [TokenKind.TEMPLATE]

    def test_escaped_quote_in_string(self):
        tokens = Lexer(r"'it\'s'").tokenize()
        assert len(tokens) == 1
        assert tokens[0].kind is TokenKind.STRING


class TestLexErrors:
    """Input the lexer cannot tokenize."""

    def test_unterminated_string(self):
        with pytest.raises(LexError) as exc_info:
            Lexer('const a = "oops\nconst b = 1;').tokenize()
        assert exc_info.value.code == 1002
        assert exc_info.value.line == 1

    def test_unterminated_template(self):
        with pytest.raises(LexError) as exc_info:
            Lexer("const a = `never closed").tokenize()
        assert exc_info.value.code == 1160

    def test_unterminated_comment(self):
        with pytest.raises(LexError) as exc_info:
            Lexer("/* open\nconst a = 1;").tokenize()
        assert exc_info.value.code == 1010

    def test_unterminated_attribute_string(self):
        with pytest.raises(LexError) as exc_info:
            Lexer('const x = <div className="grid').tokenize()
        assert exc_info.value.code == 1002

    def test_unclosed_element_is_not_an_error(self):
        tokens = Lexer("const x = <div><span>hi</span>;").tokenize()
        assert tokens[-1].kind is TokenKind.JSX_TEXT
