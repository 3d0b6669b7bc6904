"""Prompt library: versioning, categories and library queries."""

from .categories import CategoryClassifier, get_classifier
from .errors import ImportFormatError, NotFoundError, PromptToolsError, VersionConflictError
from .library import PromptLibrary
from .policy import CurrentVersion, EditAction, EditDecision, decide_edit, decide_rollback
from .semver import INITIAL_VERSION, BumpKind, bump_version, parse_version
from .store import PromptView, VersionStore

__all__ = [
    "BumpKind",
    "CategoryClassifier",
    "CurrentVersion",
    "EditAction",
    "EditDecision",
    "INITIAL_VERSION",
    "ImportFormatError",
    "NotFoundError",
    "PromptLibrary",
    "PromptToolsError",
    "PromptView",
    "VersionConflictError",
    "VersionStore",
    "bump_version",
    "decide_edit",
    "decide_rollback",
    "get_classifier",
    "parse_version",
]
