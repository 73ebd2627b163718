"""
Error Types - Classification of repairs, severities and pipeline failures.

The FixType values are the stable strings reported in ValidationResult.fixes:
- TAG_MISMATCH → closing tag renamed to its opening tag
- IMPORT_ADDED → missing component import synthesized
- DIRECTIVE_ADDED → client pragma prepended
- METADATA_NORMALIZED → metadata string literal re-quoted
- NAMESPACE_REMAP → vendor import path collapsed onto the local namespace
- EMPTY_IMPORT_REMOVED → `import {} from "x"` dropped
"""

from enum import Enum
from typing import Optional, Union


class FixType(Enum):
    """Classification of the structural repairs the pipeline performs."""

    TAG_MISMATCH = "tag mismatch"
    """Closing tag name rewritten to match its opening tag."""

    IMPORT_ADDED = "import added"
    """Import synthesized for a component used but never bound."""

    DIRECTIVE_ADDED = "directive added"
    """Client execution pragma prepended to the module."""

    METADATA_NORMALIZED = "metadata normalized"
    """Metadata field rewritten to a plain string literal."""

    NAMESPACE_REMAP = "namespace remap"
    """Import path rewritten from a vendor namespace to the local one."""

    EMPTY_IMPORT_REMOVED = "empty import removed"
    """Import declaration without any specifiers removed."""


class Severity(Enum):
    """Severity of a diagnostic. Only ERROR blocks success."""

    ERROR = "error"
    WARNING = "warning"

    @property
    def is_blocking(self) -> bool:
        return self is Severity.ERROR


# =============================================================================
# EXCEPTIONS
# =============================================================================


class JsxRepairError(Exception):
    """Base class for all pipeline errors."""


class ParseError(JsxRepairError):
    """
    Raised when the source cannot be turned into a syntax tree at all.

    Recoverable defects (unbalanced brackets, mismatched or unclosed tags)
    never raise; only input that cannot be tokenized does.
    """

    def __init__(
        self,
        message: str,
        line: int = 1,
        code: Optional[Union[int, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.line = line
        self.code = code

    def __str__(self) -> str:
        return f"{self.message} (line {self.line})"


class LexError(ParseError):
    """Raised by the lexer on unterminated literals, comments or tags."""


class RegenerationError(JsxRepairError):
    """Raised when source text cannot be rebuilt from a repaired tree."""
