"""Branch models and command results"""
from dataclasses import dataclass, field
from typing import Generic, List, Optional, Tuple, TypeVar

from git_branch_manager.constants import NO_BRANCHES_REMOVED, NO_BRANCHES_TO_REMOVE

T = TypeVar("T")


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one git invocation."""
    success: bool
    stdout: str
    stderr: str
    exit_code: int

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "code": self.exit_code,
        }


@dataclass
class BranchRef:
    """A local branch as shown to the user."""
    name: str
    is_current: bool = False
    has_remote: bool = False
    # Full upstream ref; internal, not serialized
    upstream: Optional[str] = None

    def to_dict(self) -> dict:
        # `current` duplicates `isCurrent` for older front-end builds
        return {
            "name": self.name,
            "current": self.is_current,
            "isCurrent": self.is_current,
            "hasRemote": self.has_remote,
        }


@dataclass
class RemoteBranchRef:
    """A branch on the remote, without the remote-name prefix."""
    name: str

    def to_dict(self) -> dict:
        return {"name": self.name}


@dataclass
class Page(Generic[T]):
    """One page of a branch listing."""
    items: List[T]
    page: int
    limit: int
    total: int
    has_more: bool

    def to_dict(self) -> dict:
        return {
            "branches": [item.to_dict() for item in self.items],
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "hasMore": self.has_more,
            },
        }


@dataclass
class UpdateResult:
    """Result of updating a single branch during a bulk update."""
    branch: str
    success: bool
    output: str
    stage: str  # "checkout" or "pull"

    def to_dict(self) -> dict:
        return {
            "branch": self.branch,
            "success": self.success,
            "output": self.output,
            "stage": self.stage,
        }


@dataclass
class CleanupReport:
    """Branches removed (or not) by a cleanup run."""
    candidates: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        return [f"Failed to delete {branch}: {output}" for branch, output in self.failures]

    @property
    def message(self) -> str:
        if not self.candidates:
            return NO_BRANCHES_TO_REMOVE
        if not self.deleted:
            return NO_BRANCHES_REMOVED
        lines = [f"Deleted branch {branch}" for branch in self.deleted]
        lines.append(f"{len(self.deleted)} deprecated branches removed.")
        return "\n".join(lines)


@dataclass
class MutationOutcome:
    """Successful result of a single-branch mutation."""
    message: str
    result: CommandResult
    branch: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "success": True,
            "message": self.message,
            "stdout": self.result.stdout,
            "stderr": self.result.stderr,
        }
