"""
MetadataNormalizer - Rewrites page metadata values to plain string literals.

Targets the top-level `metadata` declaration:

    export const metadata: Metadata = {
      title: 'Don\'t panic',        ->  title: "Don't panic",
      description: `Plain text`,    ->  description: "Plain text",
    };

Only allow-listed keys of the outer object are touched. A string is
re-quoted only when it escapes its own delimiter and does not contain the
other quote; a template literal is rewritten only when it has no
substitutions.
"""

import logging
from typing import List, Optional

from ..contracts.errors import FixType
from ..contracts.pipeline import PipelineStage, StageContext
from ..contracts.syntax import Statement, StatementKind, SyntaxTree, Token, TokenKind
from ..contracts.validation import Fix
from .base_stage import RepairStage


logger = logging.getLogger(__name__)


def requote_string(text: str) -> Optional[str]:
    """
    Swap the quotes of a string literal whose content escapes its delimiter.

    Returns:
        New literal text, or None if no rewrite is needed
    """
    quote = text[0]
    other = '"' if quote == "'" else "'"
    content = text[1:-1]
    if f"\\{quote}" not in content or other in content:
        return None
    return other + content.replace(f"\\{quote}", quote) + other


def template_to_string(text: str) -> str:
    """Convert a substitution-free template literal to a double-quoted string."""
    content = text[1:-1]
    out: List[str] = []
    i = 0
    while i < len(content):
        ch = content[i]
        if ch == "\\" and i + 1 < len(content):
            nxt = content[i + 1]
            out.append("`" if nxt == "`" else ch + nxt)
            i += 2
            continue
        if ch == '"':
            out.append('\\"')
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        else:
            out.append(ch)
        i += 1
    return '"' + "".join(out) + '"'


class MetadataNormalizer(RepairStage):
    """Normalizes quoting of allow-listed fields in the metadata export."""

    @property
    def stage(self) -> PipelineStage:
        return PipelineStage.METADATA

    def apply(self, tree: SyntaxTree, context: StageContext) -> List[Fix]:
        tables = context.tables
        statement = self._find_declaration(tree, tables.metadata_identifier)
        if statement is None:
            return []

        sig = [tok for tok in tree.statement_tokens(statement) if tok.is_significant]
        start = self._object_start(sig)
        if start is None:
            return []

        fixes: List[Fix] = []
        for key, value in self._properties(sig, start):
            if key not in tables.metadata_fields:
                continue
            if value.kind is TokenKind.STRING:
                new_text = requote_string(value.text)
            elif value.kind is TokenKind.TEMPLATE:
                new_text = template_to_string(value.text)
            else:
                new_text = None
            if new_text is None or new_text == value.text:
                continue

            old_text = value.text
            value.text = new_text
            logger.info(f"Normalized metadata field {key!r}")
            fixes.append(Fix(
                type=FixType.METADATA_NORMALIZED,
                from_value=old_text,
                to_value=new_text,
                location={"line": tree.current_line(value)},
                anchors={"line": value},
            ))
        return fixes

    @staticmethod
    def _find_declaration(tree: SyntaxTree, identifier: str) -> Optional[Statement]:
        for statement in tree.statements:
            if statement.kind is StatementKind.VARIABLE and statement.name == identifier:
                return statement
        return None

    @staticmethod
    def _object_start(sig: List[Token]) -> Optional[int]:
        """Index of the `{` of the initializer, if it is an object literal."""
        depth = 0
        for i, tok in enumerate(sig):
            if tok.is_punct("(", "[", "{", "<"):
                depth += 1
            elif tok.is_punct(")", "]", "}", ">"):
                depth -= 1
            elif tok.is_punct("=") and depth == 0:
                if i + 1 < len(sig) and sig[i + 1].is_punct("{"):
                    return i + 1
                return None
        return None

    @staticmethod
    def _properties(sig: List[Token], start: int):
        """Yield (key, value token) for single-token values of the outer object."""
        depth = 0
        i = start
        while i < len(sig):
            tok = sig[i]
            if tok.is_punct("(", "[", "{"):
                depth += 1
            elif tok.is_punct(")", "]", "}"):
                depth -= 1
                if depth == 0:
                    return
            elif depth == 1 and tok.is_punct(":") and i + 2 < len(sig):
                key_token = sig[i - 1]
                value = sig[i + 1]
                closer = sig[i + 2]
                if key_token.kind is TokenKind.IDENTIFIER:
                    key = key_token.text
                elif key_token.kind is TokenKind.STRING:
                    key = key_token.string_value
                else:
                    key = None
                if key is not None and closer.is_punct(",", "}"):
                    yield key, value
            i += 1
