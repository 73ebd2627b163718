"""
Validation - Data structures carried through the repair pipeline.

1. SourceUnit: immutable input to one pipeline run
2. Diagnostic: a reported problem (checker output, advisories, parse failure)
3. Fix: a repair that was applied to the tree
4. UnclosedTag: a structural defect that is reported but never repaired
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from .errors import FixType, Severity


@dataclass(frozen=True)
class SourceUnit:
    """Input to a single validate() call."""

    raw_text: str
    """Source text after markdown extraction."""

    filename: str = "component.tsx"
    """Target filename; its extension selects TypeScript-only checks."""

    project_root: Optional[str] = None
    """Project directory used for on-disk import verification."""

    @property
    def is_typescript(self) -> bool:
        return self.filename.endswith((".ts", ".tsx", ".mts", ".cts"))

    @property
    def is_javascript(self) -> bool:
        return self.filename.endswith((".js", ".jsx", ".mjs", ".cjs"))


@dataclass
class Diagnostic:
    """A problem found in the source."""

    line: int
    """1-based line number."""

    message: str
    """Single-line message."""

    severity: Severity = Severity.ERROR

    code: Optional[Union[int, str]] = None
    """Checker code (TypeScript-style number) or a symbolic pipeline code."""

    anchor: Any = field(default=None, repr=False, compare=False)
    """Token the line refers to while the tree is still being edited."""

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line": self.line,
            "message": self.message,
            "severity": self.severity.value,
            "code": self.code,
        }

    def describe(self) -> str:
        code = f" [{self.code}]" if self.code is not None else ""
        return f"{self.severity.value.upper()}{code} line {self.line}: {self.message}"


@dataclass
class Fix:
    """A repair applied by one of the stages."""

    type: FixType
    from_value: Optional[str] = None
    to_value: Optional[str] = None
    location: Dict[str, int] = field(default_factory=dict)
    """
    Where the fix applies, e.g. {"open_line": 3, "close_line": 7}.

    Lines are recorded when the stage runs and moved to the final text by
    the orchestrator, using the tokens in anchors.
    """

    anchors: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)
    """Location key -> token whose final line the key should report."""

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.type.value, "location": dict(self.location)}
        if self.from_value is not None:
            result["from"] = self.from_value
        if self.to_value is not None:
            result["to"] = self.to_value
        return result

    def describe(self) -> str:
        if self.from_value is not None and self.to_value is not None:
            return f"[{self.type.value}] {self.from_value} → {self.to_value}"
        if self.to_value is not None:
            return f"[{self.type.value}] {self.to_value}"
        return f"[{self.type.value}]"


@dataclass
class UnclosedTag:
    """An opening tag with no closing tag in its subtree."""

    tag_name: str
    line: int
    anchor: Any = field(default=None, repr=False, compare=False)

    @property
    def message(self) -> str:
        return f"Opening tag <{self.tag_name}> at line {self.line} was never closed"

    def to_dict(self) -> Dict[str, Any]:
        return {"tag": self.tag_name, "line": self.line, "message": self.message}
