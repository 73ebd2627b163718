"""
Fixers - Deterministic repair stages.

Stages run in this order, each editing the shared SyntaxTree:
1. TagMatcher: closing tag names, unclosed tag reporting
2. ImportSynthesizer: empty imports removed, missing imports added
   (ImportPathVerifier then checks local paths on disk)
3. DirectiveInferencer: "use client" pragma
4. MetadataNormalizer: metadata string quoting
5. NamespaceRemapper: vendor import namespaces

Usage:
    from jsx_repair.fixers import default_stages

    for stage in default_stages():
        fixes.extend(stage.apply(tree, context))
"""

from typing import List

from .base_stage import RepairStage
from .tag_matcher import TagMatcher
from .import_resolver import ImportSynthesizer, ImportPathVerifier, used_component_names
from .directive_inferencer import DirectiveInferencer
from .metadata_normalizer import MetadataNormalizer, requote_string, template_to_string
from .namespace_remapper import NamespaceRemapper, remap_path


def default_stages() -> List[RepairStage]:
    """Repair stages that run after parsing, in pipeline order (verification excluded)."""
    return [
        TagMatcher(),
        ImportSynthesizer(),
        DirectiveInferencer(),
        MetadataNormalizer(),
        NamespaceRemapper(),
    ]


__all__ = [
    "RepairStage",
    "TagMatcher",
    "ImportSynthesizer",
    "ImportPathVerifier",
    "used_component_names",
    "DirectiveInferencer",
    "MetadataNormalizer",
    "requote_string",
    "template_to_string",
    "NamespaceRemapper",
    "remap_path",
    "default_stages",
]
