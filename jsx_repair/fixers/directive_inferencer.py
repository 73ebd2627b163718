"""
DirectiveInferencer - Adds the "use client" pragma when the module needs
browser execution.

Triggers:
- a hook call: bare identifier matching `use[A-Z]` followed by `(` or `<`
- an event-handler attribute: JSX attribute matching `on[A-Z]`
- a browser global accessed as an object: `window.x`, `document?.x`,
  `localStorage[...]`

The presence check is a raw substring search over the source, so a pragma
anywhere in the text (either quoting) suppresses insertion.
"""

import logging
import re
from typing import List, Optional

from ..analyzers.lexer import Lexer
from ..contracts.errors import FixType
from ..contracts.pipeline import PipelineStage, StageContext
from ..contracts.syntax import Statement, StatementKind, SyntaxTree, Token, TokenKind
from ..contracts.validation import Fix
from .base_stage import RepairStage


logger = logging.getLogger(__name__)


class DirectiveInferencer(RepairStage):
    """Prepends `"use client";` to modules that use client-only features."""

    @property
    def stage(self) -> PipelineStage:
        return PipelineStage.DIRECTIVE

    def apply(self, tree: SyntaxTree, context: StageContext) -> List[Fix]:
        tables = context.tables
        source = tree.regenerate()
        if any(literal in source for literal in tables.client_directive_literals):
            return []

        trigger = self.find_trigger(tree, context)
        if trigger is None:
            return []

        text = f'"{tables.client_directive}";'
        tokens = Lexer(text).tokenize()
        tree.insert_at(0, tokens + [Token(TokenKind.WHITESPACE, "\n\n", 1)])
        tree.statements.insert(0, Statement(
            kind=StatementKind.DIRECTIVE,
            start=tokens[0],
            end=tokens[-1],
        ))

        logger.info(f"Added client directive (trigger: {trigger})")
        return [Fix(
            type=FixType.DIRECTIVE_ADDED,
            to_value=tables.client_directive,
            location={"line": 1},
            anchors={"line": tokens[0]},
        )]

    def find_trigger(self, tree: SyntaxTree, context: StageContext) -> Optional[str]:
        """
        Describe the first client-only feature found, or None.

        Args:
            tree: Syntax tree to scan
            context: Run context holding the trigger tables

        Returns:
            Short description such as "hook useState" or None
        """
        tables = context.tables
        hook_re = re.compile(tables.hook_pattern)
        handler_re = re.compile(tables.event_handler_pattern)

        sig = tree.significant_tokens()
        for i, tok in enumerate(sig):
            prev = sig[i - 1] if i > 0 else None
            nxt = sig[i + 1] if i + 1 < len(sig) else None

            if tok.kind is TokenKind.JSX_ATTR_NAME and handler_re.match(tok.text):
                return f"event handler {tok.text}"

            if tok.kind is not TokenKind.IDENTIFIER or nxt is None:
                continue
            if prev is not None and prev.is_punct(".", "?."):
                continue

            if hook_re.match(tok.text) and nxt.is_punct("(", "<"):
                if prev is not None and prev.is_ident("function"):
                    # declaring a custom hook is not calling one
                    continue
                return f"hook {tok.text}"

            if tok.text in tables.browser_globals and nxt.is_punct(".", "?.", "["):
                return f"browser global {tok.text}"

        return None
