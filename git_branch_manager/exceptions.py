"""Custom exceptions for git-branch-manager"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from git_branch_manager.models.branch import CommandResult


class GitBranchManagerError(Exception):
    """Base exception for all git-branch-manager errors."""
    pass


class ConfigError(GitBranchManagerError, ValueError):
    """Exception raised for invalid configuration values."""
    pass


class BranchValidationError(GitBranchManagerError):
    """Exception raised when a request parameter is missing or invalid."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class GitOperationError(GitBranchManagerError):
    """Exception raised for errors in Git operations.

    Carries the failed ``CommandResult`` so callers can pass the raw
    stdout/stderr of git through to the client.
    """

    def __init__(
        self,
        operation: str,
        branch: Optional[str] = None,
        message: Optional[str] = None,
        result: Optional["CommandResult"] = None,
    ):
        self.operation = operation
        self.branch = branch
        self.message = message
        self.result = result

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class BranchNotFoundError(GitOperationError):
    """Exception raised when a branch is not found."""

    def __init__(self, branch: str, message: Optional[str] = None):
        super().__init__("find_branch", branch, message or "Branch not found")


class CurrentBranchError(GitOperationError):
    """Exception raised when attempting to delete the checked-out branch."""

    def __init__(self, branch: str):
        super().__init__("delete_branch", branch, "Cannot delete the current branch")
