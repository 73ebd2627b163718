"""
Pytest configuration for jsx_repair tests.

Sets up the Python path so the package imports without installation and
provides shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add repository root to path (parent of jsx_repair)
repo_root = Path(__file__).resolve().parent.parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from jsx_repair.analyzers.parser import SourceParser
from jsx_repair.config import DEFAULT_TABLES
from jsx_repair.contracts.pipeline import StageContext


@pytest.fixture
def parse():
    """Parse source text into a SyntaxTree."""
    parser = SourceParser()

    def _parse(code, filename="component.tsx", project_root=None):
        return parser.parse(code, filename, project_root)

    return _parse


@pytest.fixture
def context():
    """Fresh stage context with the default tables."""
    return StageContext(tables=DEFAULT_TABLES)
