"""Data models for git-branch-manager."""

from .branch import (
    BranchRef,
    CleanupReport,
    CommandResult,
    MutationOutcome,
    Page,
    RemoteBranchRef,
    UpdateResult,
)

__all__ = [
    "BranchRef",
    "CleanupReport",
    "CommandResult",
    "MutationOutcome",
    "Page",
    "RemoteBranchRef",
    "UpdateResult",
]
