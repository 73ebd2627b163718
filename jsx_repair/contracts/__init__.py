"""
Contracts - Data structures for the repair pipeline.

Provides:
- FixType, Severity: classification enums
- ParseError, LexError, RegenerationError: pipeline exceptions
- SourceUnit, Diagnostic, Fix, UnclosedTag: pipeline records
- Token, SyntaxTree, ElementNode, ImportRecord, Statement: the syntax tree
- PipelineStage, StageFailure, StageContext: pipeline bookkeeping
"""

from .errors import (
    FixType,
    Severity,
    JsxRepairError,
    ParseError,
    LexError,
    RegenerationError,
)
from .validation import (
    SourceUnit,
    Diagnostic,
    Fix,
    UnclosedTag,
)
from .pipeline import (
    PipelineStage,
    StageFailure,
    StageContext,
)
from .syntax import (
    TokenKind,
    Token,
    ImportRecord,
    ElementNode,
    StatementKind,
    Statement,
    SyntaxTree,
    TreeSnapshot,
)

__all__ = [
    "FixType",
    "Severity",
    "JsxRepairError",
    "ParseError",
    "LexError",
    "RegenerationError",
    "SourceUnit",
    "Diagnostic",
    "Fix",
    "UnclosedTag",
    "TokenKind",
    "Token",
    "ImportRecord",
    "ElementNode",
    "StatementKind",
    "Statement",
    "SyntaxTree",
    "TreeSnapshot",
    "PipelineStage",
    "StageFailure",
    "StageContext",
]
