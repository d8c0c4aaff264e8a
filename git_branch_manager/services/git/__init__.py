"""Git-related services for git-branch-manager."""

from .command_runner import GitCommandRunner
from .branch_queries import BranchQueries, RefRecord
from .operations import GitOperations

__all__ = [
    "GitCommandRunner",
    "BranchQueries",
    "RefRecord",
    "GitOperations",
]
