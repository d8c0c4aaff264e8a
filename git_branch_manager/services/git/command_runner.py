"""Runs git commands against the configured repository."""

import asyncio
import os
from typing import List, Optional, Sequence

import git

from git_branch_manager.constants import SPAWN_FAILURE_EXIT_CODE
from git_branch_manager.models.branch import CommandResult
from git_branch_manager.services.cache_service import CacheService
from git_branch_manager.utils.logging import get_logger

logger = get_logger(__name__)


class GitCommandRunner:
    """Executes git in the repository directory and optionally memoizes the output.

    Ordinary command failures (non-zero exit) and spawn failures are both
    returned as a ``CommandResult`` with ``success=False``; ``run`` never raises
    for them.
    """

    def __init__(self, repo_path: str, cache: CacheService):
        """Initialize the runner.

        Args:
            repo_path: Working directory for every git invocation
            cache: Cache used when a cache key is passed to ``run``
        """
        self.repo_path = repo_path
        self.cache = cache

    def _get_git(self) -> git.Git:
        """Get a git command wrapper bound to the repository directory.

        A fresh wrapper per call keeps worker threads from sharing state.
        """
        return git.Git(self.repo_path)

    def _execute(self, command: List[str]) -> CommandResult:
        """Run the command synchronously. Runs in a worker thread."""
        # GitPython falls back to the process cwd for an unusable working dir
        if not os.path.isdir(self.repo_path):
            message = f"Repository path not found: {self.repo_path}"
            logger.error(message)
            return CommandResult(
                success=False,
                stdout="",
                stderr=message,
                exit_code=SPAWN_FAILURE_EXIT_CODE,
            )

        try:
            status, stdout, stderr = self._get_git().execute(
                command,
                with_extended_output=True,
                with_exceptions=False,
            )
        except (git.exc.GitCommandNotFound, OSError) as e:
            # Missing binary, missing working directory, permission denied
            logger.error(f"Could not start '{' '.join(command)}': {e}")
            return CommandResult(
                success=False,
                stdout="",
                stderr=str(e),
                exit_code=SPAWN_FAILURE_EXIT_CODE,
            )

        status = status if status is not None else 0
        return CommandResult(
            success=status == 0,
            stdout=stdout or "",
            stderr=stderr or "",
            exit_code=status,
        )

    async def run(
        self,
        args: Sequence[str],
        cache_key: Optional[str] = None,
        ttl: float = 0,
    ) -> CommandResult:
        """Run ``git <args>``.

        Args:
            args: Arguments after ``git``, as an argv list
            cache_key: Memoize a successful result under this key
            ttl: Seconds to keep the result; 0 means do not cache

        Returns:
            CommandResult of the invocation (or the cached one)
        """
        if cache_key:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached

        command = ["git", *args]
        logger.debug(f"Running: {' '.join(command)}")
        result = await asyncio.to_thread(self._execute, command)

        if not result.success:
            logger.warning(
                f"Git command failed (exit {result.exit_code}): {' '.join(command)}: "
                f"{result.stderr.strip() or result.stdout.strip()}"
            )
        elif cache_key and ttl > 0:
            self.cache.set(cache_key, result, ttl)

        return result
