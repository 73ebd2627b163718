"""
Syntax - Data structures for the lossless syntax tree.

The tree is a flat token list plus two structural overlays:
1. statements: top-level statement spans (imports, declarations, directives)
2. elements: the JSX element forest, each element pointing at its name tokens

Repairs mutate token text, or insert/remove tokens. Structural nodes hold
token objects rather than indices, so insertions never invalidate them.
Joining all token texts regenerates the source.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from .validation import SourceUnit


class TokenKind(Enum):
    """Lexical token kinds, including the JSX-mode tokens."""

    WHITESPACE = "whitespace"
    COMMENT = "comment"
    IDENTIFIER = "identifier"
    NUMBER = "number"
    STRING = "string"
    TEMPLATE = "template"
    """Template literal without substitutions."""
    TEMPLATE_PART = "template_part"
    """Head, middle or tail chunk of a template literal with substitutions."""
    REGEX = "regex"
    PUNCTUATOR = "punctuator"

    JSX_OPEN = "jsx_open"
    """`<` starting an opening tag or fragment."""
    JSX_CLOSE_OPEN = "jsx_close_open"
    """`</` starting a closing tag."""
    JSX_NAME = "jsx_name"
    """Qualified tag name, e.g. `Card.Header`."""
    JSX_ATTR_NAME = "jsx_attr_name"
    JSX_ATTR_STRING = "jsx_attr_string"
    JSX_TAG_END = "jsx_tag_end"
    """`>` ending an opening or closing tag."""
    JSX_SELF_CLOSE = "jsx_self_close"
    """`/>` ending a self-closing tag."""
    JSX_TEXT = "jsx_text"

    @property
    def is_trivia(self) -> bool:
        """Whitespace and comments carry no syntax."""
        return self in (TokenKind.WHITESPACE, TokenKind.COMMENT)

    @property
    def is_jsx(self) -> bool:
        return self.value.startswith("jsx_")


@dataclass(eq=False)
class Token:
    """
    A lexical token. Identity-compared so it can anchor tree edits.
    """

    kind: TokenKind
    text: str
    line: int = 1
    """1-based line of the first character (as lexed)."""

    @property
    def is_significant(self) -> bool:
        return not self.kind.is_trivia

    def is_punct(self, *values: str) -> bool:
        """Check if token is one of the given punctuators."""
        return self.kind is TokenKind.PUNCTUATOR and self.text in values

    def is_ident(self, *values: str) -> bool:
        """Check if token is an identifier, optionally one of the given names."""
        if self.kind is not TokenKind.IDENTIFIER:
            return False
        return not values or self.text in values

    @property
    def string_value(self) -> str:
        """Content of a string/template token without its delimiters."""
        return self.text[1:-1]

    def __repr__(self) -> str:
        return f"Token({self.kind.value}, {self.text!r}, line={self.line})"


@dataclass
class ImportRecord:
    """Bindings introduced by one import declaration."""

    bound_names: List[str] = field(default_factory=list)
    """Local names bound by the declaration (ordered, unique)."""

    module_path: str = ""
    """Module specifier without quotes."""

    is_default_binding: bool = False
    """True if the declaration has a default import binding."""

    is_type_only: bool = False
    """True for `import type { ... }` declarations."""

    source_token: Optional[Token] = None
    """STRING token holding the module specifier."""

    @property
    def is_side_effect_only(self) -> bool:
        return not self.bound_names

    def add_name(self, name: str) -> None:
        if name not in self.bound_names:
            self.bound_names.append(name)


@dataclass(eq=False)
class ElementNode:
    """
    A JSX element (or fragment, with an empty tag name).
    """

    tag_name: str
    """Qualified name from the opening tag (dot-separated for member tags)."""

    open_line: int
    """Line of the opening tag."""

    close_line: Optional[int] = None
    """Line of the closing tag (None if self-closing or unclosed)."""

    self_closing: bool = False

    children: List["ElementNode"] = field(default_factory=list)

    attributes: List[str] = field(default_factory=list)
    """Attribute names in source order (spreads excluded)."""

    open_name_token: Optional[Token] = None
    close_name_token: Optional[Token] = None
    close_token: Optional[Token] = None
    """The `</` token; set whenever a closing tag exists."""

    @property
    def is_fragment(self) -> bool:
        return self.tag_name == ""

    @property
    def is_closed(self) -> bool:
        return self.self_closing or self.close_token is not None

    @property
    def close_name(self) -> Optional[str]:
        """Qualified name of the closing tag, '' for `</>`, None if absent."""
        if self.close_token is None:
            return None
        if self.close_name_token is None:
            return ""
        return self.close_name_token.text

    @property
    def root_identifier(self) -> str:
        """Leftmost segment of a member tag (`Card` for `Card.Header`)."""
        return self.tag_name.split(".")[0]

    def walk(self) -> Iterator["ElementNode"]:
        """Pre-order traversal of this element and its descendants."""
        yield self
        for child in self.children:
            yield from child.walk()

    def walk_post_order(self) -> Iterator["ElementNode"]:
        """Children before parents."""
        for child in self.children:
            yield from child.walk_post_order()
        yield self

    def __repr__(self) -> str:
        return f"ElementNode(<{self.tag_name}> line {self.open_line})"


class StatementKind(Enum):
    """Kinds of top-level statements."""

    IMPORT = "import"
    EXPORT = "export"
    """`export { ... }` / `export * from` re-exports."""
    VARIABLE = "variable"
    FUNCTION = "function"
    CLASS = "class"
    INTERFACE = "interface"
    TYPE_ALIAS = "type_alias"
    ENUM = "enum"
    DIRECTIVE = "directive"
    """String-literal statement inside the leading directive prologue."""
    EXPRESSION = "expression"
    OTHER = "other"


@dataclass(eq=False)
class Statement:
    """A top-level statement spanning tokens start..end (inclusive)."""

    kind: StatementKind
    start: Token
    end: Token
    is_exported: bool = False
    name: Optional[str] = None
    """First declared name for declarations."""
    import_record: Optional[ImportRecord] = None

    @property
    def line(self) -> int:
        return self.start.line

    @property
    def directive_value(self) -> Optional[str]:
        """Pragma text for DIRECTIVE statements."""
        if self.kind is not StatementKind.DIRECTIVE:
            return None
        return self.start.string_value


@dataclass
class TreeSnapshot:
    """Pre-stage state used to roll a tree back after a stage crash."""

    tokens: List[Token]
    texts: List[str]
    statements: List[Statement]
    records: List[Tuple[ImportRecord, ImportRecord]]


@dataclass
class SyntaxTree:
    """
    Parsed representation of one source unit.

    Owned by a single pipeline invocation and mutated in place by the
    repair stages.
    """

    source: SourceUnit
    tokens: List[Token] = field(default_factory=list)
    statements: List[Statement] = field(default_factory=list)
    elements: List[ElementNode] = field(default_factory=list)
    """Root elements (elements not nested in another element)."""

    # =========================================================================
    # QUERIES
    # =========================================================================

    def significant_tokens(self) -> List[Token]:
        return [t for t in self.tokens if t.is_significant]

    def all_elements(self) -> List[ElementNode]:
        """Every element in pre-order."""
        out: List[ElementNode] = []
        for root in self.elements:
            out.extend(root.walk())
        return out

    def imports(self) -> List[Statement]:
        return [s for s in self.statements if s.kind is StatementKind.IMPORT]

    def import_records(self) -> List[ImportRecord]:
        return [s.import_record for s in self.imports() if s.import_record]

    def directives(self) -> List[Statement]:
        return [s for s in self.statements if s.kind is StatementKind.DIRECTIVE]

    def index_of(self, token: Token) -> int:
        """Position of a token in the token list (identity match)."""
        for i, tok in enumerate(self.tokens):
            if tok is token:
                return i
        raise ValueError(f"{token!r} is not part of this tree")

    def line_at(self, index: int) -> int:
        """1-based line of the token at index in the current text."""
        return 1 + sum(tok.text.count("\n") for tok in self.tokens[:index])

    def current_line(self, token: Token) -> int:
        """Line of a token after earlier edits (Token.line is the lexed line)."""
        return self.line_at(self.index_of(token))

    def token_lines(self) -> Dict[int, int]:
        """Current line of every token, keyed by id(token)."""
        lines: Dict[int, int] = {}
        line = 1
        for tok in self.tokens:
            lines[id(tok)] = line
            line += tok.text.count("\n")
        return lines

    def statement_tokens(self, statement: Statement) -> List[Token]:
        """All tokens of a statement, trivia included."""
        start = self.index_of(statement.start)
        end = self.index_of(statement.end)
        return self.tokens[start:end + 1]

    # =========================================================================
    # EDITS
    # =========================================================================

    def insert_at(self, index: int, tokens: List[Token]) -> None:
        self.tokens[index:index] = tokens

    def insert_after(self, anchor: Token, tokens: List[Token]) -> None:
        self.insert_at(self.index_of(anchor) + 1, tokens)

    def remove_statement(self, statement: Statement) -> None:
        """Remove a statement and the line break that follows it."""
        start = self.index_of(statement.start)
        end = self.index_of(statement.end) + 1
        if end < len(self.tokens):
            follower = self.tokens[end]
            if follower.kind is TokenKind.WHITESPACE and "\n" in follower.text:
                # Keep indentation of the next line, drop one line break
                follower.text = follower.text.split("\n", 1)[1]
        del self.tokens[start:end]
        self.statements.remove(statement)

    def regenerate(self) -> str:
        """Rebuild source text from the (possibly mutated) tokens."""
        return "".join(tok.text for tok in self.tokens)

    def snapshot(self) -> TreeSnapshot:
        records = [
            (s.import_record, replace(s.import_record, bound_names=list(s.import_record.bound_names)))
            for s in self.statements
            if s.import_record is not None
        ]
        return TreeSnapshot(
            tokens=list(self.tokens),
            texts=[tok.text for tok in self.tokens],
            statements=list(self.statements),
            records=records,
        )

    def restore(self, snapshot: TreeSnapshot) -> None:
        """Roll back every token, statement and import record edit."""
        self.tokens = list(snapshot.tokens)
        for tok, text in zip(self.tokens, snapshot.texts):
            tok.text = text
        self.statements = list(snapshot.statements)
        for record, saved in snapshot.records:
            record.bound_names = list(saved.bound_names)
            record.module_path = saved.module_path
            record.is_default_binding = saved.is_default_binding
            record.is_type_only = saved.is_type_only

    def describe(self) -> Dict[str, int]:
        return {
            "tokens": len(self.tokens),
            "statements": len(self.statements),
            "elements": len(self.all_elements()),
        }
