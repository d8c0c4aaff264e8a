"""Serializes mutating git commands per repository."""

import asyncio
import time
from contextlib import asynccontextmanager
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, TypeVar

from git_branch_manager.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class SerializerState(Enum):
    """Mutation state of a repository."""
    IDLE = "idle"
    BUSY = "busy"


class _RepositoryLock:
    """Lock and bookkeeping for one repository."""

    def __init__(self):
        # asyncio.Lock wakes waiters in arrival order
        self.lock = asyncio.Lock()
        self.pending = 0
        self.operation: Optional[str] = None


class MutationSerializer:
    """Runs mutating git operations one at a time per repository.

    git guards the index with a lock file and fails concurrent mutators
    instead of queueing them, so every checkout/delete/pull goes through
    ``exclusive``. Requests queue in FIFO order; a failed or cancelled
    mutation still releases the repository. Reads do not use this class.
    """

    def __init__(self):
        self._locks: Dict[str, _RepositoryLock] = {}

    def _get_lock(self, repository: str) -> _RepositoryLock:
        if repository not in self._locks:
            self._locks[repository] = _RepositoryLock()
        return self._locks[repository]

    def state(self, repository: str) -> SerializerState:
        repo_lock = self._locks.get(repository)
        if repo_lock and repo_lock.lock.locked():
            return SerializerState.BUSY
        return SerializerState.IDLE

    def pending(self, repository: str) -> int:
        """Number of mutations waiting for the repository."""
        repo_lock = self._locks.get(repository)
        return repo_lock.pending if repo_lock else 0

    def current_operation(self, repository: str) -> Optional[str]:
        repo_lock = self._locks.get(repository)
        return repo_lock.operation if repo_lock else None

    @asynccontextmanager
    async def exclusive(self, repository: str, operation: str):
        """Hold the repository for the duration of the block.

        Args:
            repository: Repository path (lock scope)
            operation: Name used in log messages
        """
        repo_lock = self._get_lock(repository)
        if repo_lock.lock.locked():
            logger.debug(
                f"'{operation}' waiting for '{repo_lock.operation}' "
                f"({repo_lock.pending} already queued)"
            )

        repo_lock.pending += 1
        try:
            await repo_lock.lock.acquire()
        finally:
            repo_lock.pending -= 1

        repo_lock.operation = operation
        started = time.monotonic()
        logger.debug(f"'{operation}' started")
        try:
            yield
        finally:
            logger.debug(f"'{operation}' finished in {time.monotonic() - started:.2f}s")
            repo_lock.operation = None
            repo_lock.lock.release()

    async def run(self, repository: str, operation: str, func: Callable[[], Awaitable[T]]) -> T:
        """Await ``func()`` while holding the repository."""
        async with self.exclusive(repository, operation):
            return await func()
