"""Snippet extraction, evaluation and reload for SnipMate."""

from .evaluator import Evaluator
from .extract import DEFAULT_TAG, extract_blocks
from .model import Diagnostic, DocumentHandle, EvalResult, ReloadReport, RenderedBlock
from .registry import Registry, default_registry
from .reload import ReloadCoordinator
from .resolver import ConfigResolver

__all__ = [
    "extract_blocks",
    "DEFAULT_TAG",
    "Registry",
    "default_registry",
    "Evaluator",
    "ConfigResolver",
    "ReloadCoordinator",
    "Diagnostic",
    "DocumentHandle",
    "EvalResult",
    "ReloadReport",
    "RenderedBlock",
]
