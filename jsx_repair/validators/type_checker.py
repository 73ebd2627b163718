"""
Type Checker - TypeScript-style diagnostics for repaired source.

Re-parses the regenerated text and reports what a compiler run with the
configured options would reject. Codes follow the TypeScript numbering so
downstream tooling can match on them:

    1002  Unterminated string literal.
    1005  'X' expected. (also ';' between two operands on one line)
    1010  '*/' expected.
    1109  Expression expected.
    1128  Declaration or statement expected.
    1134  Variable declaration expected.
    1160  Unterminated template literal.
    1161  Unterminated regular expression literal.
    2300  Duplicate identifier 'X'.
    7006  Parameter 'x' implicitly has an 'any' type.      (strict only)
    7019  Rest parameter 'x' implicitly has an 'any[]' type. (strict only)
    8006  'interface' / 'import type' declarations in a JavaScript file.
    8008  Type aliases in a JavaScript file.
    17002 Expected corresponding JSX closing tag for 'X'.
    17004 Cannot use JSX unless the '--jsx' flag is provided.
    17008 JSX element 'X' has no corresponding closing tag.
    17014 JSX fragment has no corresponding closing tag.
    17015 Expected corresponding closing tag for JSX fragment.

Two pipeline-specific checks are added: ENVIRONMENT_LEAK (a client module
importing server-only modules, error) and DIRECTIVE_POSITION (a client
pragma that is not in the directive prologue, warning).

Usage:
    from jsx_repair.validators import TypeChecker, CheckerOptions

    checker = TypeChecker(CheckerOptions(jsx=True, strict=False))
    for diagnostic in checker.check(code, "page.tsx"):
        print(diagnostic.describe())
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional

from ..analyzers.bindings import RESERVED_WORDS
from ..analyzers.parser import SourceParser
from ..config import DEFAULT_TABLES, RepairTables
from ..contracts.errors import ParseError, Severity
from ..contracts.syntax import StatementKind, SyntaxTree, Token, TokenKind
from ..contracts.validation import Diagnostic


logger = logging.getLogger(__name__)


_PAIRS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")": "(", "]": "[", "}": "{"}

# Words that may sit next to another operand without an operator
CONTEXTUAL_KEYWORDS = RESERVED_WORDS | frozenset({
    "from", "as", "of", "async", "get", "set", "type", "declare", "abstract",
    "readonly", "keyof", "infer", "is", "asserts", "satisfies", "namespace",
    "module", "global", "unique", "override", "accessor", "out",
})

_OPERAND_KINDS = (TokenKind.IDENTIFIER, TokenKind.NUMBER, TokenKind.STRING)


@dataclass(frozen=True)
class CheckerOptions:
    """Compiler options the diagnostics are computed for."""

    jsx: bool = True
    """Accept JSX markup (React transform)."""

    module: str = "esnext"
    target: str = "es2020"

    strict: bool = False
    """Report implicit-any parameters in TypeScript files."""


def flatten_message(message: str) -> str:
    """Collapse a possibly multi-line message onto one line."""
    return " ".join(message.split())


class TypeChecker:
    """
    Static checker over the token stream and element forest.

    check() never raises: an internal failure is logged and yields no
    diagnostics, so a checker bug can never block a repaired file.
    """

    def __init__(
        self,
        options: Optional[CheckerOptions] = None,
        tables: RepairTables = DEFAULT_TABLES,
    ):
        """
        Initialize the checker.

        Args:
            options: Compiler options (defaults: jsx, esnext, es2020, non-strict)
            tables: Tables holding the client pragma and server-only modules
        """
        self.options = options or CheckerOptions()
        self.tables = tables
        self._parser = SourceParser()

    def check(self, code: str, filename: str = "component.tsx") -> List[Diagnostic]:
        """
        Collect diagnostics for a source text.

        Args:
            code: Source text (already repaired)
            filename: Filename; a .js/.jsx extension enables JavaScript-only checks

        Returns:
            Diagnostics sorted by line
        """
        try:
            return self._check(code, filename)
        except Exception as e:
            logger.exception(f"Type check failed for {filename}: {e}")
            return []

    def _check(self, code: str, filename: str) -> List[Diagnostic]:
        try:
            tree = self._parser.parse(code, filename)
        except ParseError as e:
            return [Diagnostic(
                line=e.line,
                message=flatten_message(e.message),
                severity=Severity.ERROR,
                code=e.code,
            )]

        diagnostics: List[Diagnostic] = []
        diagnostics.extend(self._check_brackets(tree))
        diagnostics.extend(self._check_statements(tree))
        diagnostics.extend(self._check_jsx(tree))
        diagnostics.extend(self._check_duplicate_imports(tree))
        if tree.source.is_javascript:
            diagnostics.extend(self._check_typescript_only(tree))
        elif self.options.strict and tree.source.is_typescript:
            diagnostics.extend(self._check_implicit_any(tree))
        diagnostics.extend(self._check_client_module(tree))

        diagnostics.sort(key=lambda d: d.line)
        if diagnostics:
            logger.debug(f"{filename}: {len(diagnostics)} diagnostic(s)")
        return diagnostics

    # =========================================================================
    # SYNTAX
    # =========================================================================

    def _check_brackets(self, tree: SyntaxTree) -> List[Diagnostic]:
        """Unclosed and stray brackets."""
        diagnostics: List[Diagnostic] = []
        stack: List[Token] = []
        last_line = 1
        for tok in tree.tokens:
            if not tok.is_significant:
                continue
            last_line = tok.line + tok.text.count("\n")
            if tok.kind is not TokenKind.PUNCTUATOR:
                continue
            if tok.text in _PAIRS:
                stack.append(tok)
            elif tok.text in _CLOSERS:
                if stack and stack[-1].text == _CLOSERS[tok.text]:
                    stack.pop()
                elif stack:
                    expected = _PAIRS[stack.pop().text]
                    diagnostics.append(Diagnostic(tok.line, f"'{expected}' expected.", code=1005))
                else:
                    diagnostics.append(Diagnostic(tok.line, "Declaration or statement expected.", code=1128))

        for opener in reversed(stack):
            diagnostics.append(Diagnostic(last_line, f"'{_PAIRS[opener.text]}' expected.", code=1005))
        return diagnostics

    def _check_statements(self, tree: SyntaxTree) -> List[Diagnostic]:
        """Missing separators, declarators and expressions."""
        diagnostics: List[Diagnostic] = []
        sig = tree.significant_tokens()
        for i, tok in enumerate(sig):
            if tok.kind.is_jsx:
                continue
            prev = sig[i - 1] if i > 0 else None
            nxt = sig[i + 1] if i + 1 < len(sig) else None

            if (
                nxt is not None
                and tok.kind in _OPERAND_KINDS
                and nxt.kind in _OPERAND_KINDS
                and nxt.line == tok.line
                and tok.text not in CONTEXTUAL_KEYWORDS
                and nxt.text not in CONTEXTUAL_KEYWORDS
            ):
                diagnostics.append(Diagnostic(nxt.line, "';' expected.", code=1005))

            elif tok.is_ident("const", "let", "var") and self._is_declaration_keyword(prev, nxt):
                if nxt is None or not (nxt.kind is TokenKind.IDENTIFIER or nxt.is_punct("{", "[")):
                    diagnostics.append(Diagnostic(tok.line, "Variable declaration expected.", code=1134))

            elif tok.is_punct("="):
                if nxt is None or nxt.is_punct(";", ",", ")", "]", "}"):
                    diagnostics.append(Diagnostic(tok.line, "Expression expected.", code=1109))
        return diagnostics

    @staticmethod
    def _is_declaration_keyword(prev: Optional[Token], nxt: Optional[Token]) -> bool:
        # `obj.var`, `x as const`, `{ let: 1 }` and `<const T>` are not declarations
        if prev is not None and (prev.is_punct(".", "?.", "<") or prev.is_ident("as")):
            return False
        return nxt is None or not nxt.is_punct(":")

    def _check_jsx(self, tree: SyntaxTree) -> List[Diagnostic]:
        elements = tree.all_elements()
        if not elements:
            return []
        if not self.options.jsx:
            return [Diagnostic(
                elements[0].open_line,
                "Cannot use JSX unless the '--jsx' flag is provided.",
                code=17004,
            )]

        diagnostics: List[Diagnostic] = []
        for element in elements:
            if element.self_closing:
                continue
            if element.close_token is None:
                if element.is_fragment:
                    diagnostics.append(Diagnostic(
                        element.open_line, "JSX fragment has no corresponding closing tag.", code=17014,
                    ))
                else:
                    diagnostics.append(Diagnostic(
                        element.open_line,
                        f"JSX element '{element.tag_name}' has no corresponding closing tag.",
                        code=17008,
                    ))
            elif element.close_name != element.tag_name:
                if element.is_fragment:
                    diagnostics.append(Diagnostic(
                        element.close_line, "Expected corresponding closing tag for JSX fragment.", code=17015,
                    ))
                else:
                    diagnostics.append(Diagnostic(
                        element.close_line,
                        f"Expected corresponding JSX closing tag for '{element.tag_name}'.",
                        code=17002,
                    ))
        return diagnostics

    # =========================================================================
    # BINDINGS
    # =========================================================================

    def _check_duplicate_imports(self, tree: SyntaxTree) -> List[Diagnostic]:
        counts = Counter(
            name
            for record in tree.import_records()
            for name in record.bound_names
        )
        diagnostics: List[Diagnostic] = []
        for statement in tree.imports():
            for name in statement.import_record.bound_names:
                if counts[name] > 1:
                    diagnostics.append(Diagnostic(statement.line, f"Duplicate identifier '{name}'.", code=2300))
        return diagnostics

    def _check_typescript_only(self, tree: SyntaxTree) -> List[Diagnostic]:
        diagnostics: List[Diagnostic] = []
        for statement in tree.statements:
            if statement.kind is StatementKind.INTERFACE:
                diagnostics.append(Diagnostic(
                    statement.line, "'interface' declarations can only be used in TypeScript files.", code=8006,
                ))
            elif statement.kind is StatementKind.TYPE_ALIAS:
                diagnostics.append(Diagnostic(
                    statement.line, "Type aliases can only be used in TypeScript files.", code=8008,
                ))
            elif statement.import_record is not None and statement.import_record.is_type_only:
                diagnostics.append(Diagnostic(
                    statement.line, "'import type' declarations can only be used in TypeScript files.", code=8006,
                ))
        return diagnostics

    def _check_implicit_any(self, tree: SyntaxTree) -> List[Diagnostic]:
        """Unannotated parameters of `function` declarations and expressions."""
        diagnostics: List[Diagnostic] = []
        sig = [tok for tok in tree.significant_tokens() if not tok.kind.is_jsx]
        for i, tok in enumerate(sig):
            if not tok.is_ident("function"):
                continue
            j = i + 1
            while j < len(sig) and not sig[j].is_punct("("):
                if sig[j].is_punct("{", ";", "=>"):
                    break
                j += 1
            if j >= len(sig) or not sig[j].is_punct("("):
                continue

            depth = 0
            k = j
            while k < len(sig):
                cur = sig[k]
                if cur.is_punct("(", "[", "{"):
                    depth += 1
                elif cur.is_punct(")", "]", "}"):
                    depth -= 1
                    if depth == 0:
                        break
                elif depth == 1 and cur.kind is TokenKind.IDENTIFIER and sig[k - 1].is_punct("(", ",", "..."):
                    nxt = sig[k + 1] if k + 1 < len(sig) else None
                    if nxt is not None and nxt.is_punct("?"):
                        nxt = sig[k + 2] if k + 2 < len(sig) else None
                    if nxt is not None and nxt.is_punct(",", ")") and cur.text != "this":
                        if sig[k - 1].is_punct("..."):
                            message = f"Rest parameter '{cur.text}' implicitly has an 'any[]' type."
                            code = 7019
                        else:
                            message = f"Parameter '{cur.text}' implicitly has an 'any' type."
                            code = 7006
                        diagnostics.append(Diagnostic(cur.line, message, Severity.WARNING, code))
                k += 1
        return diagnostics

    # =========================================================================
    # CLIENT MODULES
    # =========================================================================

    def _check_client_module(self, tree: SyntaxTree) -> List[Diagnostic]:
        pragma = self.tables.client_directive
        diagnostics: List[Diagnostic] = []

        for statement in tree.statements:
            if self._is_misplaced_pragma(tree, statement, pragma):
                diagnostics.append(Diagnostic(
                    statement.line,
                    f"The '{pragma}' directive must be placed before other statements.",
                    Severity.WARNING,
                    "DIRECTIVE_POSITION",
                ))

        if not any(d.directive_value == pragma for d in tree.directives()):
            return diagnostics

        for statement in tree.imports():
            module_path = statement.import_record.module_path
            if self._is_server_only(module_path):
                diagnostics.append(Diagnostic(
                    statement.line,
                    f"Client component imports server-only module '{module_path}'",
                    Severity.ERROR,
                    "ENVIRONMENT_LEAK",
                ))
        return diagnostics

    def _is_server_only(self, module_path: str) -> bool:
        if module_path.startswith("node:"):
            return True
        return any(
            module_path == name or module_path.startswith(name + "/")
            for name in self.tables.server_only_modules
        )

    @staticmethod
    def _is_misplaced_pragma(tree: SyntaxTree, statement, pragma: str) -> bool:
        """A bare pragma string statement outside the directive prologue."""
        if statement.kind is not StatementKind.EXPRESSION:
            return False
        if statement.start.kind is not TokenKind.STRING or statement.start.string_value != pragma:
            return False
        tokens = [tok for tok in tree.statement_tokens(statement) if tok.is_significant]
        return len(tokens) == 1 or (len(tokens) == 2 and tokens[1].is_punct(";"))
