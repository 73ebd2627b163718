"""
Import Resolver - Synthesizes missing component imports and verifies
project-local import paths on disk.

Two parts:
1. ImportSynthesizer (repair stage): every capitalized component used in
   markup but bound nowhere in the module gets an import, inserted after
   the last existing import. Empty `import {} from "x"` declarations are
   dropped first.
2. ImportPathVerifier (async): every `@/` import is looked up under the
   project root with a fixed list of suffixes. Misses are advisories.

Usage:
    fixes = ImportSynthesizer().apply(tree, context)
    missing = await ImportPathVerifier().verify(tree, context)
"""

import asyncio
import logging
import os
from typing import List, Optional, Tuple

from ..analyzers.bindings import BindingCollector, is_valid_identifier
from ..analyzers.lexer import Lexer
from ..contracts.errors import FixType, Severity
from ..contracts.pipeline import PipelineStage, StageContext
from ..contracts.syntax import (
    ImportRecord,
    Statement,
    StatementKind,
    SyntaxTree,
    Token,
    TokenKind,
)
from ..contracts.validation import Diagnostic, Fix
from .base_stage import RepairStage


logger = logging.getLogger(__name__)


def used_component_names(tree: SyntaxTree) -> List[str]:
    """
    Capitalized root identifiers used as element names, in order of first use.

    `<Card.Header>` contributes `Card`; intrinsic elements (`<div>`),
    fragments and lowercase member roots (`<motion.div>`) contribute nothing.
    """
    names: List[str] = []
    for element in tree.all_elements():
        root = element.root_identifier
        if root and root[0].isupper() and root not in names:
            names.append(root)
    return names


class ImportSynthesizer(RepairStage):
    """
    Adds imports for components that are used but never bound.

    Framework components (Link, Image, ...) come from the framework table;
    anything else is assumed to be a local UI component under the
    component alias with a hyphenated file name.
    """

    def __init__(self):
        self._bindings = BindingCollector()

    @property
    def stage(self) -> PipelineStage:
        return PipelineStage.IMPORT_SYNTHESIS

    def apply(self, tree: SyntaxTree, context: StageContext) -> List[Fix]:
        fixes: List[Fix] = self._remove_empty_imports(tree)

        bound = self._bindings.collect(tree)
        for identifier in used_component_names(tree):
            if identifier in bound:
                continue
            if not is_valid_identifier(identifier):
                logger.debug(f"Skipping invalid component identifier: {identifier!r}")
                continue

            module_path, is_default = self._module_for(identifier, context)
            statement = self._insert_import(tree, identifier, module_path, is_default)
            line = tree.current_line(statement.start)
            bound.add(identifier)

            logger.info(f"Synthesized import for {identifier} from {module_path}")
            fixes.append(Fix(
                type=FixType.IMPORT_ADDED,
                from_value=identifier,
                to_value=module_path,
                location={"line": line},
                anchors={"line": statement.start},
            ))

        return fixes

    # =========================================================================
    # EMPTY IMPORTS
    # =========================================================================

    def _remove_empty_imports(self, tree: SyntaxTree) -> List[Fix]:
        """Drop `import {} from "x"`; bare side-effect imports are kept."""
        fixes: List[Fix] = []
        for statement in list(tree.imports()):
            record = statement.import_record
            if record is None or not record.is_side_effect_only:
                continue
            tokens = tree.statement_tokens(statement)
            if not any(tok.is_punct("{") for tok in tokens):
                continue

            line = tree.current_line(statement.start)
            tree.remove_statement(statement)
            logger.info(f"Removed empty import from {record.module_path!r}")
            fixes.append(Fix(
                type=FixType.EMPTY_IMPORT_REMOVED,
                from_value=record.module_path,
                location={"line": line},
            ))
        return fixes

    # =========================================================================
    # SYNTHESIS
    # =========================================================================

    @staticmethod
    def _module_for(identifier: str, context: StageContext) -> Tuple[str, bool]:
        """Module path and default-import flag for an identifier."""
        tables = context.tables
        known = tables.framework_imports.get(identifier)
        if known is not None:
            return known
        return tables.synthesized_path(identifier), False

    def _insert_import(self, tree: SyntaxTree, identifier: str, module_path: str, is_default: bool) -> Statement:
        """Insert the import declaration and its Statement."""
        if is_default:
            text = f'import {identifier} from "{module_path}";'
        else:
            text = f'import {{ {identifier} }} from "{module_path}";'

        imports = tree.imports()
        directives = tree.directives()
        if imports:
            anchor = imports[-1]
            lead, trail = "\n", ""
        elif directives:
            anchor = directives[-1]
            lead, trail = "\n\n", ""
        else:
            anchor = None
            lead, trail = "", "\n\n"

        index = tree.index_of(anchor.end) + 1 if anchor is not None else 0
        line = tree.line_at(index) + lead.count("\n")

        tokens = Lexer(text, start_line=line).tokenize()
        new_tokens: List[Token] = []
        if lead:
            new_tokens.append(Token(TokenKind.WHITESPACE, lead, line))
        new_tokens.extend(tokens)
        if trail:
            new_tokens.append(Token(TokenKind.WHITESPACE, trail, line))
        tree.insert_at(index, new_tokens)

        significant = [tok for tok in tokens if tok.is_significant]
        record = ImportRecord(
            bound_names=[identifier],
            module_path=module_path,
            is_default_binding=is_default,
            source_token=next(tok for tok in significant if tok.kind is TokenKind.STRING),
        )
        statement = Statement(
            kind=StatementKind.IMPORT,
            start=significant[0],
            end=significant[-1],
            import_record=record,
        )
        position = tree.statements.index(anchor) + 1 if anchor is not None else 0
        tree.statements.insert(position, statement)
        return statement


class ImportPathVerifier:
    """
    Checks `@/` imports against the project directory.

    Never raises: a path that cannot be checked (permission denied, bad
    characters, missing root) counts as not found.
    """

    @property
    def stage(self) -> PipelineStage:
        return PipelineStage.IMPORT_VERIFICATION

    async def verify(self, tree: SyntaxTree, context: StageContext) -> List[str]:
        """
        Verify local imports and record the unresolved ones.

        Args:
            tree: Repaired syntax tree
            context: Run context; its unit must carry a project root

        Returns:
            Module paths that matched no candidate file
        """
        project_root = context.unit.project_root if context.unit else None
        if not project_root:
            return []

        tables = context.tables
        unresolved: List[str] = []
        seen = set()
        for statement in tree.imports():
            record = statement.import_record
            if record is None or not record.module_path.startswith(tables.local_alias_prefix):
                continue
            if record.module_path in seen:
                continue
            seen.add(record.module_path)

            found = await self._resolve(project_root, record.module_path, context)
            if found:
                logger.debug(f"Resolved {record.module_path} -> {found}")
                continue

            unresolved.append(record.module_path)
            context.unresolved_imports.append(record.module_path)
            context.diagnostics.append(Diagnostic(
                line=tree.current_line(statement.start),
                message=f"Cannot resolve local import '{record.module_path}'",
                severity=Severity.WARNING,
                code="UNRESOLVED_IMPORT",
                anchor=statement.start,
            ))
            logger.warning(f"Unresolved local import: {record.module_path}")

        return unresolved

    async def _resolve(self, project_root: str, module_path: str, context: StageContext) -> Optional[str]:
        """First existing candidate file for a module path, or None."""
        for candidate in self.candidates(module_path, context):
            full_path = os.path.join(project_root, candidate)
            if await asyncio.to_thread(self._is_file, full_path):
                return full_path
        return None

    @staticmethod
    def candidates(module_path: str, context: StageContext) -> List[str]:
        """Relative file paths a module path may refer to, in lookup order."""
        tables = context.tables
        relative = module_path[len(tables.local_alias_prefix):].strip("/")
        if not relative:
            return []
        paths = []
        _, extension = os.path.splitext(relative)
        if extension:
            paths.append(relative)
        paths.extend(relative + suffix for suffix in tables.candidate_suffixes)
        return paths

    @staticmethod
    def _is_file(path: str) -> bool:
        try:
            return os.path.isfile(path)
        except (OSError, ValueError):
            return False
