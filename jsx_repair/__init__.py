"""
JSX Repair - Validation and auto-repair of generated JSX/TSX modules.

Repairs mismatched closing tags, missing component imports, a missing
"use client" pragma, metadata quoting and vendor import namespaces, then
reports TypeScript-style diagnostics for what remains.
"""

from .config import DEFAULT_TABLES, RepairTables, Settings, configure_logging, settings
from .contracts import (
    Diagnostic,
    Fix,
    FixType,
    ParseError,
    Severity,
    UnclosedTag,
)
from .orchestrator import (
    ValidationResult,
    Validator,
    validate,
    validate_sync,
)

__all__ = [
    "DEFAULT_TABLES",
    "RepairTables",
    "Settings",
    "configure_logging",
    "settings",
    "Diagnostic",
    "Fix",
    "FixType",
    "ParseError",
    "Severity",
    "UnclosedTag",
    "ValidationResult",
    "Validator",
    "validate",
    "validate_sync",
]
