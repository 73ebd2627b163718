"""
Orchestrator - Main coordinator for the validation and repair pipeline.

Runs the fixed stage sequence over one generated source file:
markdown extraction, parse, tag repair, import synthesis, import
verification, directive inference, metadata normalization, namespace
remapping, regeneration and type diagnostics.
"""

import asyncio
import logging
import time
from typing import List, Optional

from ..analyzers.markdown import extract_code
from ..analyzers.parser import SourceParser
from ..config import DEFAULT_TABLES, RepairTables, settings
from ..contracts.errors import ParseError, RegenerationError, Severity
from ..contracts.pipeline import PipelineStage, StageContext, StageFailure
from ..contracts.syntax import SyntaxTree
from ..contracts.validation import Diagnostic, Fix
from ..fixers import default_stages
from ..fixers.base_stage import RepairStage
from ..fixers.import_resolver import ImportPathVerifier
from ..validators.type_checker import CheckerOptions, TypeChecker

from .contracts import ValidationResult


logger = logging.getLogger("jsx_repair.orchestrator")


class Validator:
    """
    Main orchestrator for the validation pipeline.

    Coordinates:
    1. Markdown extraction
    2. Parsing (terminal on failure)
    3. Repair stages, each inside its own fault boundary
    4. On-disk import verification (only with a project root)
    5. Regeneration (terminal on failure)
    6. Type diagnostics

    A Validator holds only read-only configuration, so one instance can
    serve concurrent validate() calls.

    Usage:
        validator = Validator()
        result = await validator.validate(code, "StatCard", "stat-card.tsx")

        if result.success:
            write_file(result.code)
    """

    def __init__(
        self,
        tables: RepairTables = DEFAULT_TABLES,
        stages: Optional[List[RepairStage]] = None,
        checker: Optional[TypeChecker] = None,
        verifier: Optional[ImportPathVerifier] = None,
        strip_markdown: Optional[bool] = None,
        verify_imports: Optional[bool] = None,
    ):
        """
        Initialize the validator.

        Args:
            tables: Naming conventions and substitution maps
            stages: Repair stages in execution order (default pipeline if None)
            checker: TypeChecker instance
            verifier: ImportPathVerifier instance
            strip_markdown: Extract fenced code first (settings.STRIP_MARKDOWN if None)
            verify_imports: Check local imports on disk (settings.VERIFY_IMPORTS if None)

        Raises:
            ValueError: If a stage does not belong to a repair phase
        """
        self._tables = tables
        self._stages = stages if stages is not None else default_stages()
        for stage in self._stages:
            if not stage.stage.is_repair:
                raise ValueError(f"{stage.name} runs in the {stage.stage.value} phase, not a repair phase")
        self._checker = checker or TypeChecker(
            CheckerOptions(jsx=settings.CHECKER_JSX, strict=settings.CHECKER_STRICT),
            tables=tables,
        )
        self._verifier = verifier or ImportPathVerifier()
        self._parser = SourceParser()
        self._strip_markdown = settings.STRIP_MARKDOWN if strip_markdown is None else strip_markdown
        self._verify_imports = settings.VERIFY_IMPORTS if verify_imports is None else verify_imports

    @property
    def stages(self) -> List[RepairStage]:
        return list(self._stages)

    async def validate(
        self,
        code: str,
        component_name: str,
        filename: str,
        project_root: Optional[str] = None,
    ) -> ValidationResult:
        """
        Validate and repair one generated source file.

        Args:
            code: Generator output (may be wrapped in markdown fences)
            component_name: Component name, used for reporting
            filename: Target filename; its extension selects checks
            project_root: Project directory for on-disk import verification

        Returns:
            ValidationResult; its code is always usable
        """
        start_time = time.time()
        logger.info(f"Validating {component_name} ({filename})")

        result = ValidationResult(
            success=False,
            code=code,
            component_name=component_name,
            filename=filename,
        )

        # PHASE 1: Extract
        source = extract_code(code) if self._strip_markdown else code
        result.code = source

        # PHASE 2: Parse
        try:
            tree = self._parser.parse(source, filename, project_root)
        except ParseError as e:
            return self._parse_failure(result, e, start_time)
        except Exception as e:
            logger.exception(f"Parser crashed on {filename}: {e}")
            return self._parse_failure(result, ParseError(str(e)), start_time)

        # PHASE 3: Repair
        context = StageContext(tables=self._tables, unit=tree.source)
        for stage in self._stages:
            self._run_stage(stage, tree, context, result)
            if stage.stage is PipelineStage.IMPORT_SYNTHESIS:
                await self._run_verification(tree, context, result, project_root)
        # PHASE 4: Regenerate
        try:
            repaired = self._regenerate(tree)
        except RegenerationError as e:
            logger.exception(f"Regeneration failed for {filename}: {e}")
            result.code = source
            result.fixes = []
            result.diagnostics = [Diagnostic(
                line=1,
                message=f"regeneration failure: {e}",
                severity=Severity.ERROR,
                code="REGENERATION_FAILURE",
            )]
            result.unclosed_tags = list(context.unclosed_tags)
            return self._finish(result, start_time)
        result.code = repaired
        self._rebase_lines(tree, result.fixes, context)

        # PHASE 5: Type diagnostics
        diagnostics = self._checker.check(repaired, filename)
        result.diagnostics = diagnostics + context.diagnostics
        result.unclosed_tags = list(context.unclosed_tags)
        result.unresolved_imports = list(context.unresolved_imports)
        result.success = not result.unclosed_tags and not result.errors

        return self._finish(result, start_time)

    # =========================================================================
    # STAGES
    # =========================================================================

    def _run_stage(
        self,
        stage: RepairStage,
        tree: SyntaxTree,
        context: StageContext,
        result: ValidationResult,
    ) -> None:
        """Apply one stage; on a crash, roll the tree and context back."""
        snapshot = tree.snapshot()
        mark = context.mark()
        try:
            fixes: List[Fix] = stage.apply(tree, context)
        except Exception as e:
            tree.restore(snapshot)
            context.rollback(mark)
            result.stage_failures.append(StageFailure(stage.stage, f"{type(e).__name__}: {e}"))
            logger.exception(f"Stage {stage.name} failed, changes rolled back: {e}")
            return

        result.fixes.extend(fixes)
        if fixes:
            logger.info(f"{stage.name}: {len(fixes)} fix(es)")

    async def _run_verification(
        self,
        tree: SyntaxTree,
        context: StageContext,
        result: ValidationResult,
        project_root: Optional[str],
    ) -> None:
        if not project_root or not self._verify_imports:
            return
        mark = context.mark()
        try:
            unresolved = await self._verifier.verify(tree, context)
        except Exception as e:
            context.rollback(mark)
            result.stage_failures.append(
                StageFailure(PipelineStage.IMPORT_VERIFICATION, f"{type(e).__name__}: {e}")
            )
            logger.exception(f"Import verification failed: {e}")
            return
        if unresolved:
            logger.warning(f"{len(unresolved)} unresolved local import(s)")

    @staticmethod
    def _rebase_lines(tree: SyntaxTree, fixes: List[Fix], context: StageContext) -> None:
        """Report lines as they are in the repaired text, not as first lexed."""
        lines = tree.token_lines()
        for fix in fixes:
            for key, token in fix.anchors.items():
                if id(token) in lines:
                    fix.location[key] = lines[id(token)]
        for item in [*context.diagnostics, *context.unclosed_tags]:
            if item.anchor is not None and id(item.anchor) in lines:
                item.line = lines[id(item.anchor)]

    @staticmethod
    def _regenerate(tree: SyntaxTree) -> str:
        try:
            return tree.regenerate()
        except Exception as e:
            raise RegenerationError(str(e)) from e

    # =========================================================================
    # RESULTS
    # =========================================================================

    def _parse_failure(self, result: ValidationResult, error: ParseError, start_time: float) -> ValidationResult:
        message = error.message
        if not message.startswith("parse failure"):
            message = f"parse failure: {message}"
        logger.warning(f"{result.filename}: {message} (line {error.line})")
        result.success = False
        result.diagnostics = [Diagnostic(
            line=error.line,
            message=message,
            severity=Severity.ERROR,
            code="PARSE_FAILURE",
        )]
        return self._finish(result, start_time)

    @staticmethod
    def _finish(result: ValidationResult, start_time: float) -> ValidationResult:
        result.duration_ms = (time.time() - start_time) * 1000
        status = "passed" if result.success else "failed"
        logger.info(
            f"Validation {status} for {result.component_name}: "
            f"{len(result.fixes)} fixes, {len(result.errors)} errors, "
            f"{len(result.unclosed_tags)} unclosed tags ({result.duration_ms:.0f}ms)"
        )
        return result


# =============================================================================
# MODULE-LEVEL API
# =============================================================================

_default_validator: Optional[Validator] = None


def get_validator() -> Validator:
    """Get or create the process-wide Validator."""
    global _default_validator
    if _default_validator is None:
        _default_validator = Validator()
    return _default_validator


async def validate(
    code: str,
    component_name: str,
    filename: str,
    project_root: Optional[str] = None,
) -> ValidationResult:
    """Validate with the default Validator."""
    return await get_validator().validate(code, component_name, filename, project_root)


def validate_sync(
    code: str,
    component_name: str,
    filename: str,
    project_root: Optional[str] = None,
) -> ValidationResult:
    """Blocking wrapper around validate() for callers without an event loop."""
    return asyncio.run(validate(code, component_name, filename, project_root))
