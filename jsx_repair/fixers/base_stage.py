"""
RepairStage - Abstract base class for deterministic repair stages.

Each stage inspects the shared SyntaxTree, edits it in place and returns
the Fix records describing what it changed.

Usage:
    class MyStage(RepairStage):
        @property
        def stage(self) -> PipelineStage:
            return PipelineStage.METADATA

        def apply(self, tree: SyntaxTree, context: StageContext) -> List[Fix]:
            ...
            return fixes
"""

from abc import ABC, abstractmethod
from typing import List

from ..contracts.pipeline import PipelineStage, StageContext
from ..contracts.syntax import SyntaxTree
from ..contracts.validation import Fix


class RepairStage(ABC):
    """
    Abstract base class for repair stages.

    Subclasses must implement:
    - stage: The PipelineStage this class performs
    - apply(): Edit the tree and report fixes

    Stages never raise on malformed input they can skip. An exception
    escaping apply() is treated as a stage crash: the orchestrator rolls
    the tree back and carries on with the next stage.
    """

    @property
    @abstractmethod
    def stage(self) -> PipelineStage:
        """
        Pipeline stage implemented by this class.

        Returns:
            PipelineStage enum value
        """
        pass

    @property
    def name(self) -> str:
        """
        Stage name for logging and debugging.

        Returns:
            Class name by default
        """
        return self.__class__.__name__

    @abstractmethod
    def apply(self, tree: SyntaxTree, context: StageContext) -> List[Fix]:
        """
        Repair the tree in place.

        Args:
            tree: Syntax tree owned by the current run
            context: Run context (tables, side-channel lists)

        Returns:
            Fixes applied, in the order they were made
        """
        pass

    def __repr__(self) -> str:
        return f"{self.name}(stage={self.stage.value})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RepairStage):
            return False
        return self.__class__ == other.__class__

    def __hash__(self) -> int:
        return hash(self.__class__.__name__)
