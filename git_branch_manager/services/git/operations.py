"""Git operations service"""

from typing import Optional

from git_branch_manager.models.branch import CommandResult
from git_branch_manager.services.git.command_runner import GitCommandRunner
from git_branch_manager.utils.logging import get_logger

logger = get_logger(__name__)


class GitOperations:
    """Service for mutating git commands.

    Callers are responsible for holding the repository's mutation lock;
    nothing here is cached.
    """

    def __init__(self, runner: GitCommandRunner, remote_name: str = "origin"):
        self.runner = runner
        self.remote_name = remote_name

    async def checkout(self, ref: str) -> CommandResult:
        """Switch to an existing branch (or commit)."""
        logger.info(f"Checking out {ref}")
        return await self.runner.run(["checkout", ref, "--"])

    async def checkout_from_remote(self, branch_name: str) -> CommandResult:
        """Create a local branch tracking <remote>/<branch_name> and switch to it."""
        logger.info(f"Creating {branch_name} from {self.remote_name}/{branch_name}")
        return await self.runner.run(
            ["checkout", "-b", branch_name, "--track", f"{self.remote_name}/{branch_name}"]
        )

    async def delete_branch(self, branch_name: str, force: bool = False) -> CommandResult:
        """Delete a local branch; without force git refuses unmerged branches."""
        logger.info(f"{'Force deleting' if force else 'Deleting'} branch {branch_name}")
        return await self.runner.run(["branch", "-D" if force else "-d", branch_name])

    async def pull(self, upstream_branch: Optional[str] = None) -> CommandResult:
        """Pull the current branch, or merge <upstream_branch> from the remote into it."""
        if upstream_branch:
            return await self.runner.run(["pull", self.remote_name, upstream_branch])
        return await self.runner.run(["pull"])

    async def fetch_remote(self) -> CommandResult:
        """Refresh the remote-tracking refs without pruning."""
        return await self.runner.run(["fetch", self.remote_name, "--quiet"])
