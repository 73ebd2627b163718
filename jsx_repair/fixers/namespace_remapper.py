"""
NamespaceRemapper - Collapses vendor component namespaces onto the local one.

Catalog components may be referenced under the namespace of the library
they were copied from (`@/components/magicui/marquee`), but they are all
installed in one place. Each import path is rewritten by the first
matching rule of the namespace table; rules never stack. Paths already
under the local namespace are never touched, so a second run is a no-op.
"""

import logging
from typing import List, Optional

from ..contracts.errors import FixType
from ..contracts.pipeline import PipelineStage, StageContext
from ..contracts.syntax import SyntaxTree
from ..contracts.validation import Fix
from .base_stage import RepairStage


logger = logging.getLogger(__name__)


def remap_path(module_path: str, namespace_map, canonical: Optional[str] = None) -> Optional[str]:
    """
    Apply the first matching namespace rule to a module path.

    Args:
        module_path: Import specifier without quotes
        namespace_map: Ordered (key, replacement) pairs
        canonical: Local namespace; paths already under it are left alone

    Returns:
        Rewritten path, or None if no rule matches
    """
    if canonical and (module_path == canonical or module_path.startswith(canonical.rstrip("/") + "/")):
        return None
    for key, replacement in namespace_map:
        if key in module_path:
            return module_path.replace(key, replacement, 1)
    return None


class NamespaceRemapper(RepairStage):
    """Rewrites import specifiers through the namespace table."""

    @property
    def stage(self) -> PipelineStage:
        return PipelineStage.NAMESPACE

    def apply(self, tree: SyntaxTree, context: StageContext) -> List[Fix]:
        fixes: List[Fix] = []
        for statement in tree.imports():
            record = statement.import_record
            if record is None or record.source_token is None:
                continue

            new_path = remap_path(
                record.module_path,
                context.tables.namespace_map,
                canonical=context.tables.component_alias,
            )
            if new_path is None or new_path == record.module_path:
                continue

            token = record.source_token
            quote = token.text[0]
            old_path = record.module_path
            token.text = f"{quote}{new_path}{quote}"
            record.module_path = new_path

            logger.info(f"Remapped import {old_path} -> {new_path}")
            fixes.append(Fix(
                type=FixType.NAMESPACE_REMAP,
                from_value=old_path,
                to_value=new_path,
                location={"line": tree.current_line(token)},
                anchors={"line": token},
            ))
        return fixes
