"""
Source Parser - Builds a SyntaxTree from JS/TS/JSX source.

The parser is error-recovering: mismatched or unclosed tags and unbalanced
brackets still produce a best-effort tree. Only input the lexer cannot
tokenize (or that is not source at all) raises ParseError.

Usage:
    from jsx_repair.analyzers.parser import SourceParser

    tree = SourceParser().parse(code, "page.tsx")
    for element in tree.all_elements():
        print(element.tag_name, element.open_line)
"""

import logging
from typing import List, Optional, Tuple

from ..contracts.errors import ParseError
from ..contracts.syntax import (
    ElementNode,
    ImportRecord,
    Statement,
    StatementKind,
    SyntaxTree,
    Token,
    TokenKind,
)
from ..contracts.validation import SourceUnit
from .lexer import Lexer


logger = logging.getLogger(__name__)


# Keywords that start a new top-level statement after a line break
STATEMENT_STARTERS = frozenset({
    "import", "export", "const", "let", "var", "function", "class",
    "interface", "type", "enum", "async", "declare", "abstract",
    "if", "for", "while", "do", "switch", "try",
})

# Identifiers that continue the previous statement after a `}`
CONTINUATION_KEYWORDS = frozenset({
    "else", "catch", "finally", "as", "satisfies", "extends",
    "implements", "instanceof", "in", "of", "while",
})

# Statement kinds that only occur in source text
SOURCE_KINDS = frozenset({
    StatementKind.IMPORT, StatementKind.EXPORT, StatementKind.VARIABLE,
    StatementKind.FUNCTION, StatementKind.CLASS, StatementKind.INTERFACE,
    StatementKind.TYPE_ALIAS, StatementKind.ENUM, StatementKind.DIRECTIVE,
})

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}


class SourceParser:
    """
    Parser producing a lossless SyntaxTree.

    Stateless between calls; one instance can parse any number of units.
    """

    def parse(
        self,
        code: str,
        filename: str = "component.tsx",
        project_root: Optional[str] = None,
    ) -> SyntaxTree:
        """
        Parse source text into a SyntaxTree.

        Args:
            code: Source text
            filename: Filename hint
            project_root: Optional project directory, carried on the SourceUnit

        Returns:
            SyntaxTree with tokens, top-level statements and JSX elements

        Raises:
            ParseError: If the text is empty, binary, not source at all, or cannot be tokenized
        """
        if not code.strip():
            raise ParseError("parse failure: empty source", line=1, code="PARSE_FAILURE")
        if "\x00" in code:
            raise ParseError("parse failure: binary content", line=1, code="PARSE_FAILURE")

        unit = SourceUnit(raw_text=code, filename=filename, project_root=project_root)
        tokens = Lexer(code).tokenize()

        tree = SyntaxTree(source=unit, tokens=tokens)
        tree.elements = self._build_elements(tokens)
        tree.statements = self._build_statements(tokens)

        if not self._looks_like_source(tree):
            raise ParseError(
                "parse failure: no declarations, statements or markup found",
                line=1,
                code="PARSE_FAILURE",
            )

        logger.debug(f"Parsed {filename}: {tree.describe()}")
        return tree

    @staticmethod
    def _looks_like_source(tree: SyntaxTree) -> bool:
        """Prose and other languages lex fine but yield only bare expressions."""
        if tree.elements:
            return True
        for statement in tree.statements:
            if statement.kind in SOURCE_KINDS or statement.is_exported:
                return True
            if statement.start.kind is TokenKind.IDENTIFIER and statement.start.text in STATEMENT_STARTERS:
                return True
        return False

    # =========================================================================
    # ELEMENTS
    # =========================================================================

    def _build_elements(self, tokens: List[Token]) -> List[ElementNode]:
        """
        Rebuild the element forest from JSX tokens.

        The lexer pairs closing tags with the innermost open element, so a
        single frame stack reproduces its nesting. A frame is an element
        plus whether its opening tag is still being read; elements nested
        in attribute values become children of the element being opened.
        """
        roots: List[ElementNode] = []
        frames: List[Tuple[ElementNode, bool]] = []
        in_closing_tag = False

        for i, tok in enumerate(tokens):
            kind = tok.kind
            if kind is TokenKind.JSX_OPEN:
                in_closing_tag = False
                name_token = self._next_of_kind(tokens, i, TokenKind.JSX_NAME)
                element = ElementNode(
                    tag_name=name_token.text if name_token else "",
                    open_line=tok.line,
                    open_name_token=name_token,
                )
                if frames:
                    frames[-1][0].children.append(element)
                else:
                    roots.append(element)
                frames.append((element, True))
            elif kind is TokenKind.JSX_ATTR_NAME:
                if frames and frames[-1][1]:
                    frames[-1][0].attributes.append(tok.text)
            elif kind is TokenKind.JSX_SELF_CLOSE:
                if frames and frames[-1][1]:
                    element, _ = frames.pop()
                    element.self_closing = True
            elif kind is TokenKind.JSX_TAG_END:
                if in_closing_tag:
                    in_closing_tag = False
                elif frames and frames[-1][1]:
                    frames[-1] = (frames[-1][0], False)
            elif kind is TokenKind.JSX_CLOSE_OPEN:
                in_closing_tag = True
                if frames and not frames[-1][1]:
                    element, _ = frames.pop()
                    element.close_token = tok
                    element.close_line = tok.line
                    element.close_name_token = self._next_of_kind(tokens, i, TokenKind.JSX_NAME)

        return roots

    @staticmethod
    def _next_of_kind(tokens: List[Token], index: int, kind: TokenKind) -> Optional[Token]:
        """Name token directly following a `<` or `</` (trivia skipped)."""
        for j in range(index + 1, len(tokens)):
            tok = tokens[j]
            if tok.kind.is_trivia:
                continue
            return tok if tok.kind is kind else None
        return None

    # =========================================================================
    # STATEMENTS
    # =========================================================================

    def _build_statements(self, tokens: List[Token]) -> List[Statement]:
        sig: List[Token] = [t for t in tokens if t.is_significant]
        statements: List[Statement] = []
        in_prologue = True
        i = 0
        while i < len(sig):
            end = self._statement_end(sig, i)
            statement = self._classify(sig, i, end, in_prologue)
            if statement.kind is not StatementKind.DIRECTIVE:
                in_prologue = False
            statements.append(statement)
            i = end + 1
        return statements

    def _statement_end(self, sig: List[Token], start: int) -> int:
        """Index of the last significant token of the statement at start."""
        first = sig[start]
        if first.is_ident("import") and not self._is_import_call(sig, start):
            return self._import_end(sig, start)

        depth = 0
        i = start
        while i < len(sig):
            tok = sig[i]
            if tok.kind is TokenKind.PUNCTUATOR:
                if tok.text in _OPENERS:
                    depth += 1
                elif tok.text in _CLOSERS:
                    depth = max(0, depth - 1)
                elif tok.text == ";" and depth == 0:
                    return i
            if depth == 0 and i + 1 < len(sig) and self._starts_new_statement(sig, i):
                return i
            i += 1
        return len(sig) - 1

    def _starts_new_statement(self, sig: List[Token], i: int) -> bool:
        """Automatic semicolon insertion: does sig[i+1] begin a new statement?"""
        prev, nxt = sig[i], sig[i + 1]
        if nxt.line <= prev.line + prev.text.count("\n"):
            return False
        if nxt.kind is TokenKind.IDENTIFIER and nxt.text in STATEMENT_STARTERS:
            # `type` is only a keyword when followed by a name
            return nxt.text != "type" or (i + 2 < len(sig) and sig[i + 2].kind is TokenKind.IDENTIFIER)
        if prev.is_punct("}"):
            if nxt.kind is TokenKind.IDENTIFIER:
                return nxt.text not in CONTINUATION_KEYWORDS
            return nxt.kind in (TokenKind.STRING, TokenKind.JSX_OPEN)
        return False

    @staticmethod
    def _is_import_call(sig: List[Token], start: int) -> bool:
        nxt = sig[start + 1] if start + 1 < len(sig) else None
        return nxt is not None and nxt.is_punct("(", ".")

    def _import_end(self, sig: List[Token], start: int) -> int:
        """An import ends after its module string and optional `;`."""
        i = start + 1
        depth = 0
        while i < len(sig):
            tok = sig[i]
            if tok.is_punct("{"):
                depth += 1
            elif tok.is_punct("}"):
                depth = max(0, depth - 1)
            elif tok.kind is TokenKind.STRING and depth == 0:
                if i + 1 < len(sig) and sig[i + 1].is_punct(";"):
                    return i + 1
                return i
            elif tok.is_punct(";") and depth == 0:
                return i
            if depth == 0 and i + 1 < len(sig) and self._starts_new_statement(sig, i):
                return i
            i += 1
        return len(sig) - 1

    def _classify(self, sig: List[Token], start: int, end: int, in_prologue: bool) -> Statement:
        first = sig[start]
        statement = Statement(kind=StatementKind.OTHER, start=first, end=sig[end])

        if first.is_ident("import") and not self._is_import_call(sig, start):
            statement.kind = StatementKind.IMPORT
            statement.import_record = self._parse_import(sig, start, end)
            return statement

        if first.kind is TokenKind.STRING:
            only_string = end == start or (end == start + 1 and sig[end].is_punct(";"))
            if in_prologue and only_string:
                statement.kind = StatementKind.DIRECTIVE
            else:
                statement.kind = StatementKind.EXPRESSION
            return statement

        i = start
        if first.is_ident("export"):
            statement.is_exported = True
            i += 1
            if i <= end and sig[i].is_ident("default"):
                i += 1
            if i > end or sig[i].is_punct("{", "*"):
                statement.kind = StatementKind.EXPORT
                return statement

        kind, name = self._declaration_kind(sig, i, end)
        statement.kind = kind
        statement.name = name
        return statement

    @staticmethod
    def _declaration_kind(sig: List[Token], i: int, end: int) -> Tuple[StatementKind, Optional[str]]:
        def name_at(index: int) -> Optional[str]:
            if index <= end and sig[index].kind is TokenKind.IDENTIFIER:
                return sig[index].text
            return None

        while i <= end and sig[i].is_ident("declare", "abstract", "async"):
            i += 1
        if i > end:
            return StatementKind.OTHER, None

        tok = sig[i]
        if tok.is_ident("const") and name_at(i + 1) == "enum":
            return StatementKind.ENUM, name_at(i + 2)
        if tok.is_ident("const", "let", "var"):
            return StatementKind.VARIABLE, name_at(i + 1)
        if tok.is_ident("function"):
            offset = 2 if i + 1 <= end and sig[i + 1].is_punct("*") else 1
            return StatementKind.FUNCTION, name_at(i + offset)
        if tok.is_ident("class"):
            return StatementKind.CLASS, name_at(i + 1)
        if tok.is_ident("interface") and name_at(i + 1):
            return StatementKind.INTERFACE, name_at(i + 1)
        if tok.is_ident("type") and name_at(i + 1):
            return StatementKind.TYPE_ALIAS, name_at(i + 1)
        if tok.is_ident("enum"):
            return StatementKind.ENUM, name_at(i + 1)
        return StatementKind.EXPRESSION, None

    @staticmethod
    def _parse_import(sig: List[Token], start: int, end: int) -> ImportRecord:
        """
        Extract bindings from an import declaration.

        Handles default, namespace, named (with `as` renames), `type`
        modifiers and side-effect imports.
        """
        record = ImportRecord()
        i = start + 1
        if i <= end and sig[i].is_ident("type") and i + 1 <= end and not sig[i + 1].is_ident("from"):
            record.is_type_only = True
            i += 1

        in_braces = False
        while i <= end:
            tok = sig[i]
            if tok.kind is TokenKind.STRING:
                record.module_path = tok.string_value
                record.source_token = tok
                break
            if tok.is_punct("{"):
                in_braces = True
            elif tok.is_punct("}"):
                in_braces = False
            elif tok.is_punct("*"):
                # * as ns
                if i + 2 <= end and sig[i + 1].is_ident("as") and sig[i + 2].kind is TokenKind.IDENTIFIER:
                    record.add_name(sig[i + 2].text)
                    i += 2
            elif tok.kind is TokenKind.IDENTIFIER and tok.text != "from":
                if in_braces:
                    if tok.text == "type" and i + 1 <= end and sig[i + 1].kind is TokenKind.IDENTIFIER:
                        i += 1
                        tok = sig[i]
                    # `a as b` binds b
                    if i + 2 <= end and sig[i + 1].is_ident("as") and sig[i + 2].kind is TokenKind.IDENTIFIER:
                        record.add_name(sig[i + 2].text)
                        i += 2
                    else:
                        record.add_name(tok.text)
                else:
                    record.is_default_binding = True
                    record.add_name(tok.text)
            i += 1
        return record
