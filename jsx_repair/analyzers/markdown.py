"""
Markdown - Extracts source code from fenced generator output.

Generators often wrap the module in a markdown code fence, sometimes with
prose around it or several blocks. The largest block tagged as a JS/TS
language (or untagged) is taken to be the module.
"""

import logging
import re
from typing import List, Optional, Tuple


logger = logging.getLogger(__name__)


CODE_LANGUAGES = frozenset({"tsx", "typescript", "ts", "jsx", "javascript", "js", ""})

FENCE_RE = re.compile(r"^[ \t]*```[ \t]*([A-Za-z0-9_+-]*)[ \t]*$")


def _fenced_blocks(text: str) -> Tuple[List[Tuple[str, str]], Optional[Tuple[str, str]]]:
    """
    Split text into fenced blocks.

    Returns:
        (closed blocks as (language, body), trailing unclosed block or None)
    """
    blocks: List[Tuple[str, str]] = []
    language = ""
    body: Optional[List[str]] = None
    for line in text.splitlines(keepends=True):
        match = FENCE_RE.match(line.rstrip("\r\n"))
        if body is None:
            if match:
                language = match.group(1).lower()
                body = []
        elif match and not match.group(1):
            blocks.append((language, "".join(body)))
            body = None
        else:
            body.append(line)
    unclosed = (language, "".join(body)) if body is not None else None
    return blocks, unclosed


def extract_code(text: str) -> str:
    """
    Return the code inside the largest fenced block of text.

    Text with no fences is returned unchanged. A fence that is never
    closed runs to the end of the text.

    Args:
        text: Raw generator output

    Returns:
        Source text ending with a single newline when a block was extracted
    """
    blocks, unclosed = _fenced_blocks(text)
    candidates = [body for language, body in blocks if language in CODE_LANGUAGES]
    if candidates:
        largest = max(candidates, key=len)
        logger.debug(f"Extracted code block ({len(largest)} chars) from {len(candidates)} candidate(s)")
        return largest.strip() + "\n"

    if unclosed is not None and unclosed[0] in CODE_LANGUAGES and unclosed[1].strip():
        logger.debug("Unclosed code fence, taking the rest of the text")
        return unclosed[1].strip() + "\n"

    return text
