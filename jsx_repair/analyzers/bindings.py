"""
Bindings - Collects every identifier a module binds.

Sources of bindings:
- import specifiers (default, named, namespace)
- function, class, interface, type alias and enum names
- const/let/var declarators, including destructuring patterns
- function, arrow, method and catch parameters

Collection errs on the side of reporting too many names: a name wrongly
treated as bound only means no import is synthesized for it, while a
missed binding would produce a duplicate declaration.
"""

import re
from typing import List, Set

from ..contracts.syntax import SyntaxTree, Token, TokenKind


IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

RESERVED_WORDS = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "new",
    "null", "return", "super", "switch", "this", "throw", "true", "try",
    "typeof", "var", "void", "while", "with", "yield", "let", "static",
    "implements", "interface", "package", "private", "protected", "public",
    "await",
})

# TypeScript parameter modifiers that precede the bound name
PARAMETER_MODIFIERS = frozenset({"public", "private", "protected", "readonly", "override"})

CONTROL_KEYWORDS = frozenset({"if", "for", "while", "switch", "catch", "with", "return", "function"})


def is_valid_identifier(name: str) -> bool:
    """Check if name can be bound by an import declaration."""
    return bool(IDENTIFIER_RE.match(name)) and name not in RESERVED_WORDS


class BindingCollector:
    """
    Walks the significant tokens of a tree and collects bound names.

    Usage:
        names = BindingCollector().collect(tree)
        if "StatCard" not in names:
            ...
    """

    def collect(self, tree: SyntaxTree) -> Set[str]:
        """
        Collect all names bound anywhere in the module.

        Args:
            tree: Parsed syntax tree

        Returns:
            Set of bound identifier names
        """
        names: Set[str] = set()
        for record in tree.import_records():
            names.update(record.bound_names)

        sig = [t for t in tree.tokens if t.is_significant and not t.kind.is_jsx]
        for i, tok in enumerate(sig):
            prev = sig[i - 1] if i > 0 else None
            if prev is not None and prev.is_punct(".", "?."):
                continue

            if tok.is_ident("function"):
                self._function_declaration(sig, i, names)
            elif tok.is_ident("class", "interface", "enum"):
                self._named(sig, i + 1, names)
            elif tok.is_ident("type") and self._is_type_alias(sig, i):
                self._named(sig, i + 1, names)
            elif tok.is_ident("const", "let", "var"):
                self._declarators(sig, i + 1, names)
            elif tok.is_ident("catch") and i + 1 < len(sig) and sig[i + 1].is_punct("("):
                self._list_pattern(sig, i + 1, ")", names)
            elif tok.is_punct("=>"):
                self._arrow_parameters(sig, i, names)
            elif tok.is_punct(")") and i + 1 < len(sig) and sig[i + 1].is_punct("{"):
                self._method_parameters(sig, i, names)

        return names

    # =========================================================================
    # DECLARATIONS
    # =========================================================================

    @staticmethod
    def _named(sig: List[Token], i: int, names: Set[str]) -> None:
        if i < len(sig) and sig[i].kind is TokenKind.IDENTIFIER:
            names.add(sig[i].text)

    @staticmethod
    def _is_type_alias(sig: List[Token], i: int) -> bool:
        if i + 2 >= len(sig):
            return False
        return sig[i + 1].kind is TokenKind.IDENTIFIER and sig[i + 2].is_punct("=", "<")

    def _function_declaration(self, sig: List[Token], i: int, names: Set[str]) -> None:
        j = i + 1
        if j < len(sig) and sig[j].is_punct("*"):
            j += 1
        if j < len(sig) and sig[j].kind is TokenKind.IDENTIFIER:
            names.add(sig[j].text)
            j += 1
        if j < len(sig) and sig[j].is_punct("<"):
            j = self._skip_angle(sig, j)
        if j < len(sig) and sig[j].is_punct("("):
            self._list_pattern(sig, j, ")", names)

    def _declarators(self, sig: List[Token], i: int, names: Set[str]) -> None:
        """`const a = 1, { b } = c, [d] = e`."""
        while i < len(sig):
            i = self._binding_element(sig, i, names)
            depth = 0
            while i < len(sig):
                tok = sig[i]
                if tok.is_punct("(", "[", "{"):
                    depth += 1
                elif tok.is_punct(")", "]", "}"):
                    if depth == 0:
                        return
                    depth -= 1
                elif depth == 0 and (tok.is_punct(";") or tok.is_ident("const", "let", "var", "function", "return", "export", "import")):
                    return
                elif depth == 0 and tok.is_punct(","):
                    break
                i += 1
            else:
                return
            i += 1

    # =========================================================================
    # PARAMETERS
    # =========================================================================

    def _arrow_parameters(self, sig: List[Token], i: int, names: Set[str]) -> None:
        """Parameters of the arrow function whose `=>` is at index i."""
        if i == 0:
            return
        prev = sig[i - 1]
        if prev.kind is TokenKind.IDENTIFIER:
            if i >= 2 and sig[i - 2].is_punct(":"):
                # `(a): Ret =>`, walk back over the return type
                pass
            else:
                names.add(prev.text)
                return
        close = self._arrow_close_paren(sig, i)
        if close is None:
            return
        open_index = self._matching_open(sig, close)
        if open_index is not None:
            self._list_pattern(sig, open_index, ")", names)

    def _arrow_close_paren(self, sig: List[Token], i: int):
        """Index of the `)` ending an arrow parameter list, skipping a return type."""
        if sig[i - 1].is_punct(")"):
            return i - 1
        angle = 0
        j = i - 1
        while j > 0 and i - j < 40:
            tok = sig[j]
            if tok.is_punct(">"):
                angle += 1
            elif tok.is_punct("<"):
                angle -= 1
            elif tok.is_punct(":") and angle == 0:
                return j - 1 if sig[j - 1].is_punct(")") else None
            elif tok.is_punct(";", "{", "}", "=") and angle == 0:
                return None
            j -= 1
        return None

    def _method_parameters(self, sig: List[Token], close: int, names: Set[str]) -> None:
        """`name(params) {` in classes and object literals."""
        open_index = self._matching_open(sig, close)
        if open_index is None or open_index == 0:
            return
        callee = sig[open_index - 1]
        if callee.kind is TokenKind.IDENTIFIER and callee.text not in CONTROL_KEYWORDS:
            self._list_pattern(sig, open_index, ")", names)

    # =========================================================================
    # PATTERNS
    # =========================================================================

    def _binding_element(self, sig: List[Token], i: int, names: Set[str]) -> int:
        """Consume one binding target; return the index after it."""
        if i >= len(sig):
            return i
        tok = sig[i]
        if tok.is_punct("{"):
            return self._object_pattern(sig, i, names)
        if tok.is_punct("["):
            return self._list_pattern(sig, i, "]", names)
        if tok.kind is TokenKind.IDENTIFIER:
            if tok.text in PARAMETER_MODIFIERS and i + 1 < len(sig) and sig[i + 1].kind is TokenKind.IDENTIFIER:
                return self._binding_element(sig, i + 1, names)
            if tok.text != "this" and tok.text not in RESERVED_WORDS:
                names.add(tok.text)
            return i + 1
        return i

    def _list_pattern(self, sig: List[Token], i: int, closer: str, names: Set[str]) -> int:
        """Parameter list `( ... )` or array pattern `[ ... ]` starting at i."""
        i += 1
        while i < len(sig) and not sig[i].is_punct(closer):
            tok = sig[i]
            if tok.is_punct(",", "..."):
                i += 1
                continue
            start = i
            i = self._binding_element(sig, i, names)
            i = self._skip_to_separator(sig, i)
            if i == start:
                i += 1
        return i + 1

    def _object_pattern(self, sig: List[Token], i: int, names: Set[str]) -> int:
        """Object pattern `{ a, b: c, d = 1, ...rest }` starting at i."""
        i += 1
        while i < len(sig) and not sig[i].is_punct("}"):
            tok = sig[i]
            start = i
            if tok.is_punct(","):
                i += 1
                continue
            if tok.is_punct("..."):
                i = self._binding_element(sig, i + 1, names)
            elif tok.is_punct("["):
                # computed key, value must follow
                i = self._skip_balanced(sig, i)
                if i < len(sig) and sig[i].is_punct(":"):
                    i = self._binding_element(sig, i + 1, names)
            elif i + 1 < len(sig) and sig[i + 1].is_punct(":"):
                i = self._binding_element(sig, i + 2, names)
            else:
                i = self._binding_element(sig, i, names)
            i = self._skip_to_separator(sig, i)
            if i == start:
                i += 1
        return i + 1

    # =========================================================================
    # SKIPPING
    # =========================================================================

    @staticmethod
    def _skip_to_separator(sig: List[Token], i: int) -> int:
        """Skip defaults and type annotations up to `,` or the enclosing closer."""
        depth = 0
        while i < len(sig):
            tok = sig[i]
            if tok.is_punct("(", "[", "{"):
                depth += 1
            elif tok.is_punct(")", "]", "}"):
                if depth == 0:
                    return i
                depth -= 1
            elif tok.is_punct(",") and depth == 0:
                return i
            i += 1
        return i

    @staticmethod
    def _skip_balanced(sig: List[Token], i: int) -> int:
        depth = 0
        while i < len(sig):
            tok = sig[i]
            if tok.is_punct("(", "[", "{"):
                depth += 1
            elif tok.is_punct(")", "]", "}"):
                depth -= 1
                if depth == 0:
                    return i + 1
            i += 1
        return i

    @staticmethod
    def _skip_angle(sig: List[Token], i: int) -> int:
        depth = 0
        while i < len(sig):
            tok = sig[i]
            if tok.is_punct("<"):
                depth += 1
            elif tok.is_punct(">"):
                depth -= 1
                if depth == 0:
                    return i + 1
            elif tok.is_punct(">>"):
                depth -= 2
                if depth <= 0:
                    return i + 1
            i += 1
        return i

    @staticmethod
    def _matching_open(sig: List[Token], close: int):
        depth = 0
        j = close
        while j >= 0:
            tok = sig[j]
            if tok.is_punct(")"):
                depth += 1
            elif tok.is_punct("("):
                depth -= 1
                if depth == 0:
                    return j
            j -= 1
        return None
