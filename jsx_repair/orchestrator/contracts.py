"""
Orchestrator Contracts - Result of one validate() run.

PipelineStage and StageFailure live with the other pipeline contracts and
are re-exported here for callers that only import the orchestrator.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..contracts.pipeline import PipelineStage, StageFailure
from ..contracts.validation import Diagnostic, Fix, UnclosedTag


@dataclass
class ValidationResult:
    """
    Result of the validation pipeline.

    `code` is always usable: the repaired source on success, and the best
    available text (repaired, or untouched original after a terminal
    failure) otherwise.
    """

    success: bool
    """True if no tag is unclosed and no diagnostic is an error."""

    code: str
    """Repaired source text."""

    diagnostics: List[Diagnostic] = field(default_factory=list)
    """Checker diagnostics plus pipeline advisories."""

    fixes: List[Fix] = field(default_factory=list)
    """Repairs applied, in pipeline order."""

    unclosed_tags: List[UnclosedTag] = field(default_factory=list)
    """Opening tags without a closing tag (never auto-fixed)."""

    unresolved_imports: List[str] = field(default_factory=list)
    """Local import paths with no matching file under the project root."""

    component_name: str = ""
    filename: str = ""

    stage_failures: List[StageFailure] = field(default_factory=list)
    """Stages that crashed and were rolled back."""

    duration_ms: float = 0.0

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity.is_blocking]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if not d.severity.is_blocking]

    @property
    def fixed(self) -> bool:
        """Check if any repair was applied."""
        return bool(self.fixes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "code": self.code,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "fixes": [f.to_dict() for f in self.fixes],
            "unclosed_tags": [t.to_dict() for t in self.unclosed_tags],
            "unresolved_imports": list(self.unresolved_imports),
            "component_name": self.component_name,
            "filename": self.filename,
            "stage_failures": [s.to_dict() for s in self.stage_failures],
            "duration_ms": self.duration_ms,
        }

    def describe(self) -> str:
        """Generate human-readable summary."""
        status = "SUCCESS" if self.success else "FAILED"
        lines = [
            f"ValidationResult: {status} ({self.component_name or self.filename})",
            f"  Fixes: {len(self.fixes)}",
            f"  Errors: {len(self.errors)}, Warnings: {len(self.warnings)}",
            f"  Duration: {self.duration_ms:.0f}ms",
        ]
        for fix in self.fixes:
            lines.append(f"    {fix.describe()}")
        for tag in self.unclosed_tags:
            lines.append(f"  Unclosed: {tag.message}")
        for path in self.unresolved_imports:
            lines.append(f"  Unresolved import: {path}")
        for diagnostic in self.diagnostics:
            lines.append(f"  {diagnostic.describe()}")
        for failure in self.stage_failures:
            lines.append(f"  Stage failed: {failure.stage.value} ({failure.error})")
        return "\n".join(lines)


__all__ = ["PipelineStage", "StageFailure", "ValidationResult"]
