"""
Pipeline - Stage identifiers and per-run context shared by the stages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .validation import Diagnostic, SourceUnit, UnclosedTag


class PipelineStage(Enum):
    """
    Stages of the validation pipeline, in execution order.
    """

    EXTRACT = "extract"
    """Markdown code-fence stripping."""

    PARSE = "parse"
    """Source text turned into a SyntaxTree."""

    TAG_MATCH = "tag_match"
    """Closing tags repaired, unclosed tags recorded."""

    IMPORT_SYNTHESIS = "import_synthesis"
    """Imports added for unbound components."""

    IMPORT_VERIFICATION = "import_verification"
    """Local import paths checked on disk."""

    DIRECTIVE = "directive"
    """Client pragma inferred."""

    METADATA = "metadata"
    """Metadata string literals normalized."""

    NAMESPACE = "namespace"
    """Vendor import namespaces remapped."""

    REGENERATE = "regenerate"
    """Source text rebuilt from the tree."""

    TYPE_CHECK = "type_check"
    """Diagnostics collected from the repaired text."""

    @property
    def is_repair(self) -> bool:
        """Check if the stage may edit the tree."""
        return self in (
            PipelineStage.TAG_MATCH,
            PipelineStage.IMPORT_SYNTHESIS,
            PipelineStage.DIRECTIVE,
            PipelineStage.METADATA,
            PipelineStage.NAMESPACE,
        )


@dataclass
class StageFailure:
    """A stage that raised; its edits were rolled back."""

    stage: PipelineStage
    error: str
    """Exception type and message."""

    def to_dict(self) -> Dict[str, Any]:
        return {"stage": self.stage.value, "error": self.error}


@dataclass
class StageContext:
    """
    Mutable side channel of one pipeline run.

    Stages return their fixes and append everything else here.
    """

    tables: Any
    """RepairTables in effect for this run."""

    unit: Optional[SourceUnit] = None

    unclosed_tags: List[UnclosedTag] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    unresolved_imports: List[str] = field(default_factory=list)

    def mark(self) -> Dict[str, int]:
        """Current list lengths, for truncating after a failed stage."""
        return {
            "unclosed_tags": len(self.unclosed_tags),
            "diagnostics": len(self.diagnostics),
            "unresolved_imports": len(self.unresolved_imports),
        }

    def rollback(self, mark: Dict[str, int]) -> None:
        del self.unclosed_tags[mark["unclosed_tags"]:]
        del self.diagnostics[mark["diagnostics"]:]
        del self.unresolved_imports[mark["unresolved_imports"]:]
