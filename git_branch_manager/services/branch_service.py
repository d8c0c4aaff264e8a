"""Branch service: reads, mutations and background refresh for one repository."""

import asyncio
import time
from typing import List, Optional, Set

from git_branch_manager.config import Config
from git_branch_manager.constants import (
    ALREADY_UP_TO_DATE,
    CACHE_NS_BRANCHES,
    CACHE_NS_REMOTE,
    CACHE_NS_STATUS,
    INITIAL_BACKGROUND_DELAY,
)
from git_branch_manager.exceptions import (
    BranchNotFoundError,
    BranchValidationError,
    CurrentBranchError,
    GitOperationError,
)
from git_branch_manager.models.branch import (
    BranchRef,
    CleanupReport,
    CommandResult,
    MutationOutcome,
    Page,
    RemoteBranchRef,
    UpdateResult,
)
from git_branch_manager.services.branch_reconciler import BranchReconciler
from git_branch_manager.services.cache_service import CacheService
from git_branch_manager.services.git import BranchQueries, GitCommandRunner, GitOperations
from git_branch_manager.services.git.branch_queries import split_local_refs
from git_branch_manager.services.mutation_serializer import MutationSerializer
from git_branch_manager.services.pagination import paginate, search
from git_branch_manager.utils.logging import get_logger

logger = get_logger(__name__)

INVALID_NAME_CHARS = set("~^:?*[\\")


def _output(result: CommandResult) -> str:
    """Most useful text of a result: stdout on success, stderr on failure."""
    first, second = (result.stdout, result.stderr) if result.success else (result.stderr, result.stdout)
    return first.strip() or second.strip()


class BranchService:
    """Main entry point for branch operations on the configured repository.

    One instance exists per process. Reads may run concurrently; every
    mutation runs inside the repository's ``MutationSerializer`` section and
    re-reads the state it depends on once it holds the repository.
    """

    def __init__(
        self,
        config: Config,
        cache: Optional[CacheService] = None,
        runner: Optional[GitCommandRunner] = None,
        serializer: Optional[MutationSerializer] = None,
    ):
        """Initialize the service.

        Args:
            config: Application configuration
            cache: Cache shared with the runner (created if omitted)
            runner: Command runner (created for config.repository_path if omitted)
            serializer: Mutation serializer (created if omitted)
        """
        self.config = config
        self.repo_path = config.repository_path
        self.cache = cache or CacheService()
        self.runner = runner or GitCommandRunner(self.repo_path, self.cache)
        self.serializer = serializer or MutationSerializer()
        self.queries = BranchQueries(self.runner, config.remote_name)
        self.operations = GitOperations(self.runner, config.remote_name)
        self.reconciler = BranchReconciler(config.protected_branches, config.remote_name)

        self.last_background_update: Optional[float] = None
        self._background_tasks: Set[asyncio.Task] = set()

        logger.info(f"Branch service initialized for {self.repo_path}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def validate_branch_name(branch: Optional[str]) -> str:
        """Return the stripped branch name or raise BranchValidationError."""
        if branch is None or not str(branch).strip():
            raise BranchValidationError("Branch name is required")
        branch = str(branch).strip()

        components = branch.split("/")
        invalid = (
            branch.startswith("-")
            or branch in ("@", "HEAD")
            or branch.endswith(".")
            or any(not part or part.startswith(".") or part.endswith(".lock") for part in components)
            or ".." in branch
            or "@{" in branch
            or any(ch.isspace() or ord(ch) < 32 or ch in INVALID_NAME_CHARS for ch in branch)
        )
        if invalid:
            raise BranchValidationError(f"Invalid branch name '{branch}'")
        return branch

    def _invalidate_after_mutation(self, include_remote: bool = False) -> None:
        self.cache.invalidate(CACHE_NS_BRANCHES)
        self.cache.invalidate(CACHE_NS_STATUS)
        if include_remote:
            self.cache.invalidate(CACHE_NS_REMOTE)

    def _tracks_other_remote(self, branch: BranchRef) -> bool:
        return bool(branch.upstream) and self.reconciler.strip_remote_prefix(branch.upstream) is None

    async def _live_remote_names(self, use_cache: bool = True) -> Set[str]:
        """Branch names present on the remote, used to verify upstreams."""
        if self.config.verify_remote:
            advertised = await self.queries.get_advertised_branches(use_cache)
            if advertised is not None:
                return advertised
            logger.debug(f"Remote '{self.config.remote_name}' unavailable, using remote-tracking refs")
        return await self.queries.get_remote_tracking_names(use_cache)

    async def get_local_branch_view(self, use_cache: bool = True) -> List[BranchRef]:
        """All local branches, annotated and sorted."""
        current, local_refs, remote_names = await asyncio.gather(
            self.queries.get_current_branch(use_cache),
            self.queries.get_local_refs(use_cache),
            self._live_remote_names(use_cache),
        )
        local_names, tracking = split_local_refs(local_refs)
        return self.reconciler.reconcile_local(local_names, tracking, remote_names, current)

    async def get_remote_branch_view(self, use_cache: bool = True) -> List[RemoteBranchRef]:
        """All branches of the remote (from remote-tracking refs), sorted."""
        return self.reconciler.reconcile_remote(await self.queries.get_remote_refs(use_cache))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_branches(self, page: int = 0, limit: int = 10, skip_refresh: bool = False) -> Page[BranchRef]:
        """One page of local branches.

        Args:
            skip_refresh: Read fresh from git and do not schedule a
                background remote fetch (used right after a mutation)
        """
        if skip_refresh:
            self.cache.invalidate(CACHE_NS_BRANCHES)
        branches = await self.get_local_branch_view()
        if not skip_refresh:
            self.schedule_background_update()
        return paginate(branches, page, limit)

    async def list_remote_branches(
        self, page: int = 0, limit: int = 10, skip_refresh: bool = False
    ) -> Page[RemoteBranchRef]:
        """One page of remote branches."""
        if skip_refresh:
            self.cache.invalidate(CACHE_NS_REMOTE)
        branches = await self.get_remote_branch_view()
        if not skip_refresh:
            self.schedule_background_update()
        return paginate(branches, page, limit)

    async def search_remote_branches(self, query: Optional[str], page: int = 0, limit: int = 10) -> Page[RemoteBranchRef]:
        """One page of remote branches whose name contains query (case-insensitive)."""
        branches = await self.get_remote_branch_view()
        return paginate(search(branches, query), page, limit)

    async def status(self) -> CommandResult:
        """Porcelain status of the working tree (cached briefly)."""
        return await self.queries.get_status()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def checkout(self, branch: Optional[str]) -> MutationOutcome:
        """Switch to branch, creating it from the remote when it only exists there."""
        branch = self.validate_branch_name(branch)
        self._invalidate_after_mutation()

        async with self.serializer.exclusive(self.repo_path, "checkout"):
            try:
                if await self.queries.branch_exists_locally(branch):
                    result = await self.operations.checkout(branch)
                elif await self.queries.branch_exists_remotely(branch):
                    result = await self.operations.checkout_from_remote(branch)
                else:
                    raise BranchNotFoundError(branch, f"Branch '{branch}' not found locally or remotely")
            finally:
                self._invalidate_after_mutation()

        if not result.success:
            raise GitOperationError(
                "checkout",
                branch,
                f"Failed to switch to branch '{branch}': {result.stderr.strip()}",
                result,
            )
        return MutationOutcome(f"Switched to branch '{branch}'", result, branch)

    async def delete_branch(self, branch: Optional[str]) -> MutationOutcome:
        """Delete a local branch, forcing the delete when git refuses the safe one."""
        branch = self.validate_branch_name(branch)
        self._invalidate_after_mutation()

        async with self.serializer.exclusive(self.repo_path, "delete_branch"):
            try:
                current = await self.queries.get_current_branch(use_cache=False)
                if current == branch:
                    raise CurrentBranchError(branch)
                if not await self.queries.branch_exists_locally(branch):
                    raise BranchNotFoundError(branch, f"Branch '{branch}' not found")

                forced = False
                result = await self.operations.delete_branch(branch)
                if not result.success:
                    logger.info(f"Regular delete of {branch} failed, trying force delete")
                    forced = True
                    result = await self.operations.delete_branch(branch, force=True)
            finally:
                self._invalidate_after_mutation()

        if not result.success:
            raise GitOperationError("delete_branch", branch, _output(result), result)
        verb = "Force deleted" if forced else "Deleted"
        return MutationOutcome(f"{verb} branch {branch}", result, branch)

    async def pull(self) -> MutationOutcome:
        """Pull the current branch."""
        self._invalidate_after_mutation()

        async with self.serializer.exclusive(self.repo_path, "pull"):
            try:
                result = await self.operations.pull()
            finally:
                self._invalidate_after_mutation(include_remote=True)

        if not result.success:
            raise GitOperationError("pull", message=_output(result) or "Pull failed", result=result)
        return MutationOutcome(result.stdout.strip() or ALREADY_UP_TO_DATE, result)

    async def _update_branch(self, branch: str, upstream_branch: str) -> UpdateResult:
        """Checkout one branch and pull its upstream into it. Caller holds the repository."""
        checkout = await self.operations.checkout(branch)
        if not checkout.success:
            return UpdateResult(
                branch=branch,
                success=False,
                output=f"Failed to checkout branch: {_output(checkout)}",
                stage="checkout",
            )

        pull = await self.operations.pull(upstream_branch)
        return UpdateResult(
            branch=branch,
            success=pull.success,
            output=_output(pull) or "No output",
            stage="pull",
        )

    async def update_all_branches(self) -> List[UpdateResult]:
        """Pull every local branch that has a live upstream.

        The branch (or detached commit) checked out beforehand is restored
        afterwards whatever the individual outcomes.
        """
        self._invalidate_after_mutation()

        async with self.serializer.exclusive(self.repo_path, "update_all_branches"):
            try:
                original = await self.queries.get_current_branch(use_cache=False)
                restore_ref = original or await self.queries.get_head_commit()

                branches = await self.get_local_branch_view(use_cache=False)
                candidates = [
                    (branch.name, self.reconciler.strip_remote_prefix(branch.upstream))
                    for branch in branches
                    if branch.has_remote
                ]
                logger.info(f"Updating {len(candidates)} branches with upstreams")

                results = []
                try:
                    for name, upstream_branch in candidates:
                        results.append(await self._update_branch(name, upstream_branch))
                finally:
                    restore = await self.operations.checkout(restore_ref)
                    if not restore.success:
                        logger.error(f"Could not switch back to {restore_ref}: {_output(restore)}")
            finally:
                self._invalidate_after_mutation(include_remote=True)

        failed = [result.branch for result in results if not result.success]
        if failed:
            logger.warning(f"Failed to update: {', '.join(failed)}")
        return results

    async def cleanup(self) -> CleanupReport:
        """Delete local branches whose upstream is gone or was never set.

        The current branch, protected branches and branches tracking another
        remote are never candidates. Each branch is handled independently.
        """
        self._invalidate_after_mutation()

        async with self.serializer.exclusive(self.repo_path, "cleanup"):
            try:
                branches = await self.get_local_branch_view(use_cache=False)
                candidates = [
                    branch.name
                    for branch in branches
                    if not branch.has_remote
                    and not branch.is_current
                    and not self.reconciler.is_protected(branch.name)
                    and not self._tracks_other_remote(branch)
                ]
                report = CleanupReport(candidates=candidates)

                for name in candidates:
                    result = await self.operations.delete_branch(name)
                    if not result.success:
                        result = await self.operations.delete_branch(name, force=True)
                    if result.success:
                        report.deleted.append(name)
                    else:
                        report.failures.append((name, _output(result)))
            finally:
                self._invalidate_after_mutation()

        logger.info(f"Cleanup removed {len(report.deleted)} of {len(report.candidates)} deprecated branches")
        return report

    # ------------------------------------------------------------------
    # Background work
    # ------------------------------------------------------------------

    def _background_update_due(self) -> bool:
        interval = self.config.background_update_interval
        if not interval:
            return False
        if self.last_background_update is None:
            return True
        return time.monotonic() - self.last_background_update > interval

    async def background_update(self) -> bool:
        """Refresh remote-tracking refs and drop the branch caches.

        Returns:
            True if git succeeded. Failures are logged, never raised.
        """
        self.last_background_update = time.monotonic()
        try:
            result = await self.serializer.run(self.repo_path, "fetch_remote", self.operations.fetch_remote)
        except Exception as e:
            logger.error(f"Background repository update failed: {e}")
            return False

        if not result.success:
            logger.error(f"Background repository update failed: {_output(result)}")
            return False

        logger.info("Background repository update completed")
        self.cache.invalidate(CACHE_NS_BRANCHES)
        self.cache.invalidate(CACHE_NS_REMOTE)
        return True

    def schedule_background_update(self) -> Optional[asyncio.Task]:
        """Start a background update if the interval has elapsed."""
        if not self._background_update_due():
            return None
        # Stamp now so concurrent requests do not start a second update
        self.last_background_update = time.monotonic()
        task = asyncio.get_running_loop().create_task(self.background_update())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def initial_background_update(self, delay: float = INITIAL_BACKGROUND_DELAY) -> None:
        """Run the first background update shortly after startup."""
        await asyncio.sleep(delay)
        if self._background_update_due():
            await self.background_update()

    async def sweep_cache(self) -> None:
        """Periodically reclaim expired cache entries until cancelled."""
        period = self.config.cache_check_period
        if not period:
            return
        while True:
            await asyncio.sleep(period)
            purged = self.cache.purge_expired()
            if purged:
                logger.debug(f"Purged {purged} expired cache entries")

    async def shutdown(self) -> None:
        """Cancel outstanding background updates."""
        for task in list(self._background_tasks):
            task.cancel()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
