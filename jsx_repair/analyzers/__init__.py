"""
Analyzers - Turning generator output into a syntax tree.

Provides:
- extract_code: pull the module out of markdown fences
- Lexer: lossless JS/TS/JSX tokenizer
- SourceParser: statement and element structure on top of the tokens
- BindingCollector: every identifier the module binds
"""

from .markdown import extract_code
from .lexer import Lexer
from .parser import SourceParser
from .bindings import BindingCollector, is_valid_identifier

__all__ = [
    "extract_code",
    "Lexer",
    "SourceParser",
    "BindingCollector",
    "is_valid_identifier",
]
