"""
Validators - Diagnostics over repaired source.

Provides:
- TypeChecker: TypeScript-style diagnostics (syntax, JSX, bindings, client modules)
- CheckerOptions: compiler options the checker emulates
"""

from .type_checker import CheckerOptions, TypeChecker, flatten_message

__all__ = [
    "CheckerOptions",
    "TypeChecker",
    "flatten_message",
]
