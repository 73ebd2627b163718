"""
TagMatcher - Repairs mismatched closing tags and records unclosed ones.

The opening tag name is ground truth: `<CardHeader>...</CardHeaderr>`
becomes `<CardHeader>...</CardHeader>`. An element with no closing tag is
reported as an UnclosedTag and left alone, since where it should close
cannot be known.
"""

import logging
from typing import Dict, List, Optional

from ..contracts.errors import FixType
from ..contracts.pipeline import PipelineStage, StageContext
from ..contracts.syntax import ElementNode, SyntaxTree, Token, TokenKind
from ..contracts.validation import Fix, UnclosedTag
from .base_stage import RepairStage


logger = logging.getLogger(__name__)


class TagMatcher(RepairStage):
    """
    Walks the element forest children first.

    For each non-self-closing element:
    - no closing tag: UnclosedTag recorded
    - closing name differs: closing name token rewritten, TAG_MISMATCH fix
    """

    @property
    def stage(self) -> PipelineStage:
        return PipelineStage.TAG_MATCH

    def apply(self, tree: SyntaxTree, context: StageContext) -> List[Fix]:
        fixes: List[Fix] = []
        for root in tree.elements:
            for element in root.walk_post_order():
                if element.self_closing:
                    continue
                if element.close_token is None:
                    unclosed = UnclosedTag(
                        tag_name=element.tag_name,
                        line=element.open_line,
                        anchor=element.open_name_token,
                    )
                    context.unclosed_tags.append(unclosed)
                    logger.warning(unclosed.message)
                    continue
                fix = self._repair_close(tree, element)
                if fix is not None:
                    fixes.append(fix)

        if fixes:
            logger.info(f"Repaired {len(fixes)} mismatched closing tag(s)")
        return fixes

    def _repair_close(self, tree: SyntaxTree, element: ElementNode) -> Optional[Fix]:
        """Rename the closing tag of element to its opening name, if they differ."""
        close_name = element.close_name
        if close_name == element.tag_name:
            return None

        if element.close_name_token is not None:
            if element.is_fragment:
                # `<>...</div>`: drop the stray name
                element.close_name_token.text = ""
            else:
                element.close_name_token.text = element.tag_name
        else:
            # `<div>...</>`: give the closing tag a name
            name_token = Token(TokenKind.JSX_NAME, element.tag_name, element.close_token.line)
            tree.insert_after(element.close_token, [name_token])
            element.close_name_token = name_token

        logger.debug(f"Closing tag </{close_name}> renamed to </{element.tag_name}> (line {element.close_line})")
        return Fix(
            type=FixType.TAG_MISMATCH,
            from_value=close_name,
            to_value=element.tag_name,
            location={"open_line": element.open_line, "close_line": element.close_line},
            anchors=self._anchors(element),
        )

    @staticmethod
    def _anchors(element: ElementNode) -> Dict[str, Token]:
        anchors = {"close_line": element.close_token}
        if element.open_name_token is not None:
            anchors["open_line"] = element.open_name_token
        return anchors
