"""
Lexer - Lossless tokenizer for JavaScript/TypeScript modules with JSX.

Every character of the input ends up in exactly one token, so joining the
token texts reproduces the source. Three modes are handled by mutual
recursion:
- JS mode: identifiers, literals, punctuators, comments, regex literals
- template mode: literal chunks around `${ ... }` substitutions
- JSX mode: tags, attributes, text children and `{ ... }` containers

Closing tags pair with the innermost open element regardless of name,
so mismatched markup still lexes. Unterminated literals, comments and tags
at end of input raise LexError.

Usage:
    from jsx_repair.analyzers.lexer import Lexer

    tokens = Lexer(source).tokenize()
    assert "".join(t.text for t in tokens) == source
"""

from typing import List, Optional

from ..contracts.errors import LexError
from ..contracts.syntax import Token, TokenKind


PUNCTUATORS = (
    ">>>=", "...", "===", "!==", "**=", "<<=", ">>=", ">>>", "&&=", "||=", "??=",
    "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "?.", "++", "--",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "**", "<<", ">>",
)

# Keywords after which an expression (and so a regex or JSX) may start
EXPRESSION_KEYWORDS = frozenset({
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await", "default",
})

# Punctuators that end an expression
EXPRESSION_END_PUNCTUATORS = frozenset({")", "]", "}", "++", "--"})

_WHITESPACE = " \t\r\n\f\v\u00a0\ufeff\u2028\u2029"


def is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_$" or (ord(ch) > 127 and ch.isidentifier())


def is_identifier_part(ch: str) -> bool:
    return ch.isalnum() or ch in "_$" or (ord(ch) > 127 and ("a" + ch).isidentifier())


class Lexer:
    """
    Tokenizer for JS/TS/JSX source.

    A Lexer instance is single-use: call tokenize() once.
    """

    def __init__(self, text: str, start_line: int = 1):
        """
        Initialize the lexer.

        Args:
            text: Source text to tokenize
            start_line: Line number assigned to the first token
        """
        self._text = text
        self._length = len(text)
        self._pos = 0
        self._line = start_line
        self._tokens: List[Token] = []
        self._last: Optional[Token] = None

    def tokenize(self) -> List[Token]:
        """
        Tokenize the whole input.

        Returns:
            Token list covering every character of the input

        Raises:
            LexError: On unterminated literals, comments or JSX tags
        """
        self._lex_js(stop_at_brace=False)
        return self._tokens

    # =========================================================================
    # EMISSION
    # =========================================================================

    def _emit(self, kind: TokenKind, end: int) -> Token:
        token = Token(kind, self._text[self._pos:end], self._line)
        self._tokens.append(token)
        self._line += token.text.count("\n")
        self._pos = end
        if not kind.is_trivia:
            self._last = token
        return token

    def _peek(self, offset: int = 0) -> str:
        index = self._pos + offset
        return self._text[index] if index < self._length else ""

    def _startswith(self, value: str) -> bool:
        return self._text.startswith(value, self._pos)

    def _fail(self, message: str, code) -> None:
        raise LexError(message, line=self._line, code=code)

    # =========================================================================
    # JS MODE
    # =========================================================================

    def _lex_js(self, stop_at_brace: bool) -> None:
        """
        Lex JS tokens until end of input, or until the `}` closing the
        enclosing container when stop_at_brace is set (left unconsumed).
        """
        depth = 0
        while self._pos < self._length:
            ch = self._text[self._pos]

            if ch in _WHITESPACE:
                self._lex_whitespace()
            elif self._startswith("//"):
                end = self._text.find("\n", self._pos)
                self._emit(TokenKind.COMMENT, self._length if end == -1 else end)
            elif self._startswith("/*"):
                self._lex_block_comment()
            elif ch in "'\"":
                self._lex_string(ch)
            elif ch == "`":
                self._lex_template()
            elif is_identifier_start(ch) or (ch == "#" and is_identifier_start(self._peek(1))):
                end = self._pos + 1
                while end < self._length and is_identifier_part(self._text[end]):
                    end += 1
                self._emit(TokenKind.IDENTIFIER, end)
            elif ch.isdigit() or (ch == "." and self._peek(1).isdigit()):
                self._lex_number()
            elif ch == "{":
                depth += 1
                self._emit(TokenKind.PUNCTUATOR, self._pos + 1)
            elif ch == "}":
                if depth == 0 and stop_at_brace:
                    return
                depth = max(0, depth - 1)
                self._emit(TokenKind.PUNCTUATOR, self._pos + 1)
            elif ch == "<" and self._jsx_allowed():
                self._lex_jsx_element()
            elif ch == "/" and self._expression_allowed():
                self._lex_regex()
            else:
                self._lex_punctuator()

    def _lex_whitespace(self) -> None:
        end = self._pos
        while end < self._length and self._text[end] in _WHITESPACE:
            end += 1
        self._emit(TokenKind.WHITESPACE, end)

    def _lex_block_comment(self) -> None:
        end = self._text.find("*/", self._pos + 2)
        if end == -1:
            self._fail("'*/' expected.", 1010)
        self._emit(TokenKind.COMMENT, end + 2)

    def _lex_string(self, quote: str) -> None:
        end = self._pos + 1
        while end < self._length:
            ch = self._text[end]
            if ch == "\\":
                end += 2
                continue
            if ch == quote:
                self._emit(TokenKind.STRING, end + 1)
                return
            if ch == "\n":
                break
            end += 1
        self._fail("Unterminated string literal.", 1002)

    def _lex_number(self) -> None:
        end = self._pos + 1
        while end < self._length:
            ch = self._text[end]
            if ch.isalnum() or ch in "_.":
                end += 1
            elif ch in "+-" and self._text[end - 1] in "eE" and not self._text[self._pos:end].lower().startswith("0x"):
                end += 1
            else:
                break
        self._emit(TokenKind.NUMBER, end)

    def _lex_punctuator(self) -> None:
        for punct in PUNCTUATORS:
            if self._startswith(punct):
                # `?.5` is a conditional followed by a number
                if punct == "?." and self._peek(2).isdigit():
                    continue
                self._emit(TokenKind.PUNCTUATOR, self._pos + len(punct))
                return
        self._emit(TokenKind.PUNCTUATOR, self._pos + 1)

    def _expression_allowed(self) -> bool:
        """Check if an expression may start here, based on the last token."""
        last = self._last
        if last is None:
            return True
        if last.kind is TokenKind.PUNCTUATOR:
            return last.text not in EXPRESSION_END_PUNCTUATORS
        if last.kind is TokenKind.IDENTIFIER:
            return last.text in EXPRESSION_KEYWORDS
        if last.kind is TokenKind.TEMPLATE_PART:
            # Head/middle chunks end with `${`
            return last.text.endswith("${")
        return False

    def _lex_regex(self) -> None:
        end = self._pos + 1
        in_class = False
        while end < self._length:
            ch = self._text[end]
            if ch == "\\":
                end += 2
                continue
            if ch == "\n":
                break
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            elif ch == "/" and not in_class:
                end += 1
                while end < self._length and is_identifier_part(self._text[end]):
                    end += 1
                self._emit(TokenKind.REGEX, end)
                return
            end += 1
        self._fail("Unterminated regular expression literal.", 1161)

    # =========================================================================
    # TEMPLATE MODE
    # =========================================================================

    def _lex_template(self) -> None:
        end = self._pos + 1
        has_substitution = False
        while end < self._length:
            ch = self._text[end]
            if ch == "\\":
                end += 2
                continue
            if ch == "`":
                kind = TokenKind.TEMPLATE_PART if has_substitution else TokenKind.TEMPLATE
                self._emit(kind, end + 1)
                return
            if ch == "$" and self._text.startswith("{", end + 1):
                has_substitution = True
                self._emit(TokenKind.TEMPLATE_PART, end + 2)
                self._lex_js(stop_at_brace=True)
                if self._pos >= self._length:
                    break
                # Resume at the `}` closing the substitution
                end = self._pos + 1
                continue
            end += 1
        self._fail("Unterminated template literal.", 1160)

    # =========================================================================
    # JSX MODE
    # =========================================================================

    def _jsx_allowed(self) -> bool:
        """Decide whether `<` starts a JSX element rather than an operator."""
        if not self._expression_allowed():
            return False
        nxt = self._peek(1)
        if nxt == ">":
            return True
        if not is_identifier_start(nxt):
            return False
        # `<T,>(...)` and `<T extends X>(...)` are TypeScript generics
        end = self._pos + 1
        while end < self._length and is_identifier_part(self._text[end]):
            end += 1
        rest = self._text[end:end + 12].lstrip(" \t")
        return not (rest.startswith(",") or rest.startswith("extends "))

    def _lex_jsx_trivia(self) -> None:
        while self._pos < self._length:
            if self._text[self._pos] in _WHITESPACE:
                self._lex_whitespace()
            elif self._startswith("/*"):
                self._lex_block_comment()
            elif self._startswith("//"):
                end = self._text.find("\n", self._pos)
                self._emit(TokenKind.COMMENT, self._length if end == -1 else end)
            else:
                return

    def _scan_jsx_name(self, allow_member: bool = True) -> int:
        end = self._pos
        while end < self._length:
            ch = self._text[end]
            if is_identifier_part(ch) or ch in "-:" or (allow_member and ch == "."):
                end += 1
            else:
                break
        return end

    def _lex_jsx_container(self) -> None:
        """`{ ... }` inside a tag or among children."""
        self._emit(TokenKind.PUNCTUATOR, self._pos + 1)
        self._lex_js(stop_at_brace=True)
        if self._pos < self._length:
            self._emit(TokenKind.PUNCTUATOR, self._pos + 1)

    def _lex_jsx_element(self) -> None:
        """Lex one element (opening tag, children, closing tag)."""
        self._emit(TokenKind.JSX_OPEN, self._pos + 1)
        self._lex_jsx_trivia()

        if self._peek() != ">":
            end = self._scan_jsx_name()
            if end > self._pos:
                self._emit(TokenKind.JSX_NAME, end)

        # Attributes
        while True:
            self._lex_jsx_trivia()
            if self._pos >= self._length:
                self._fail("'>' expected.", 1005)
            ch = self._text[self._pos]
            if self._startswith("/>"):
                self._emit(TokenKind.JSX_SELF_CLOSE, self._pos + 2)
                return
            if ch == ">":
                self._emit(TokenKind.JSX_TAG_END, self._pos + 1)
                break
            if ch == "{":
                self._lex_jsx_container()
            elif is_identifier_start(ch):
                self._emit(TokenKind.JSX_ATTR_NAME, self._scan_jsx_name(allow_member=False))
                self._lex_jsx_trivia()
                if self._peek() == "=":
                    self._emit(TokenKind.PUNCTUATOR, self._pos + 1)
                    self._lex_jsx_trivia()
                    self._lex_jsx_attribute_value()
            else:
                self._emit(TokenKind.PUNCTUATOR, self._pos + 1)

        self._lex_jsx_children()

    def _lex_jsx_attribute_value(self) -> None:
        ch = self._peek()
        if ch in "'\"":
            end = self._text.find(ch, self._pos + 1)
            if end == -1:
                self._fail("Unterminated string literal.", 1002)
            self._emit(TokenKind.JSX_ATTR_STRING, end + 1)
        elif ch == "{":
            self._lex_jsx_container()
        elif ch == "<":
            self._lex_jsx_element()

    def _lex_jsx_children(self) -> None:
        """Lex children until the closing tag of the current element."""
        while self._pos < self._length:
            ch = self._text[self._pos]
            if self._startswith("</"):
                self._lex_jsx_closing_tag()
                return
            if ch == "<":
                self._lex_jsx_element()
            elif ch == "{":
                self._lex_jsx_container()
            else:
                end = self._pos
                while end < self._length and self._text[end] not in "<{":
                    end += 1
                self._emit(TokenKind.JSX_TEXT, end)
        # End of input: the element stays unclosed

    def _lex_jsx_closing_tag(self) -> None:
        self._emit(TokenKind.JSX_CLOSE_OPEN, self._pos + 2)
        self._lex_jsx_trivia()
        end = self._scan_jsx_name()
        if end > self._pos:
            self._emit(TokenKind.JSX_NAME, end)
        self._lex_jsx_trivia()
        if self._pos >= self._length:
            self._fail("'>' expected.", 1005)
        if self._peek() == ">":
            self._emit(TokenKind.JSX_TAG_END, self._pos + 1)
