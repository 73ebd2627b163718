"""
Orchestrator - Pipeline coordination.

Usage:
    from jsx_repair.orchestrator import Validator

    result = await Validator().validate(code, "Hero", "hero.tsx", project_root)
    print(result.describe())
"""

from .contracts import PipelineStage, StageFailure, ValidationResult
from .orchestrator import Validator, get_validator, validate, validate_sync

__all__ = [
    "PipelineStage",
    "StageFailure",
    "ValidationResult",
    "Validator",
    "get_validator",
    "validate",
    "validate_sync",
]
