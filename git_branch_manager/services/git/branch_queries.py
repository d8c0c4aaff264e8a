"""Branch query service for git-branch-manager."""

from typing import Dict, List, NamedTuple, Optional, Set, Tuple

from git_branch_manager.constants import (
    CACHE_KEY_CURRENT_BRANCH,
    CACHE_KEY_LOCAL_BRANCHES,
    CACHE_KEY_REMOTE_ADVERTISED,
    CACHE_KEY_REMOTE_REFS,
    CACHE_KEY_REMOTE_UNREACHABLE,
    CACHE_KEY_STATUS,
    TTL_LOCAL_BRANCHES,
    TTL_REMOTE_ADVERTISED,
    TTL_REMOTE_REFS,
    TTL_STATUS,
)
from git_branch_manager.exceptions import GitOperationError
from git_branch_manager.models.branch import CommandResult
from git_branch_manager.services.git.command_runner import GitCommandRunner
from git_branch_manager.utils.logging import get_logger

logger = get_logger(__name__)

LOCAL_PREFIX = "refs/heads/"
# NUL cannot appear in a ref name, so it is a safe field separator
FIELD_SEPARATOR = "\x00"


class RefRecord(NamedTuple):
    """A ref as reported by for-each-ref.

    ``target`` is the upstream of a local branch, or the symref target of a
    remote-tracking ref; empty when there is none.
    """
    refname: str
    target: str = ""


def _lines(output: str) -> List[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


def _records(output: str) -> List[RefRecord]:
    records = []
    for line in _lines(output):
        refname, _, target = line.partition(FIELD_SEPARATOR)
        records.append(RefRecord(refname.strip(), target.strip()))
    return records


def split_local_refs(records: List[RefRecord]) -> Tuple[List[str], Dict[str, str]]:
    """Split local ref records into short branch names and a name -> upstream map."""
    names = []
    tracking = {}
    for record in records:
        if not record.refname.startswith(LOCAL_PREFIX):
            continue
        name = record.refname[len(LOCAL_PREFIX):]
        names.append(name)
        if record.target:
            tracking[name] = record.target
    return names, tracking


class BranchQueries:
    """Service for querying branch information.

    Every method returns parsed values; git's text output does not leave
    this class.
    """

    def __init__(self, runner: GitCommandRunner, remote_name: str = "origin"):
        """Initialize the branch queries service.

        Args:
            runner: Command runner bound to the repository
            remote_name: Remote whose branches are considered
        """
        self.runner = runner
        self.remote_name = remote_name

    @property
    def remote_prefix(self) -> str:
        return f"refs/remotes/{self.remote_name}/"

    def _require(self, operation: str, result: CommandResult) -> CommandResult:
        if not result.success:
            raise GitOperationError(
                operation,
                message=result.stderr.strip() or result.stdout.strip() or f"exit code {result.exit_code}",
                result=result,
            )
        return result

    async def get_current_branch(self, use_cache: bool = True) -> Optional[str]:
        """Name of the checked-out branch, or None in detached HEAD state."""
        result = await self.runner.run(
            ["branch", "--show-current"],
            cache_key=CACHE_KEY_CURRENT_BRANCH if use_cache else None,
            ttl=TTL_LOCAL_BRANCHES,
        )
        self._require("current_branch", result)
        return result.stdout.strip() or None

    async def get_head_commit(self) -> str:
        """Full SHA of HEAD."""
        result = self._require("head_commit", await self.runner.run(["rev-parse", "HEAD"]))
        return result.stdout.strip()

    async def get_local_refs(self, use_cache: bool = True) -> List[RefRecord]:
        """Local branches with their configured upstream refs."""
        result = await self.runner.run(
            ["for-each-ref", "--format=%(refname)%00%(upstream)", LOCAL_PREFIX],
            cache_key=CACHE_KEY_LOCAL_BRANCHES if use_cache else None,
            ttl=TTL_LOCAL_BRANCHES,
        )
        self._require("list_local_branches", result)
        return _records(result.stdout)

    async def get_remote_refs(self, use_cache: bool = True) -> List[RefRecord]:
        """Remote-tracking refs of the configured remote, including symbolic ones."""
        result = await self.runner.run(
            ["for-each-ref", "--format=%(refname)%00%(symref)", self.remote_prefix],
            cache_key=CACHE_KEY_REMOTE_REFS if use_cache else None,
            ttl=TTL_REMOTE_REFS,
        )
        self._require("list_remote_branches", result)
        return _records(result.stdout)

    async def get_remote_tracking_names(self, use_cache: bool = True) -> Set[str]:
        """Short names of the non-symbolic remote-tracking refs."""
        return {
            record.refname[len(self.remote_prefix):]
            for record in await self.get_remote_refs(use_cache)
            if record.refname.startswith(self.remote_prefix) and not record.target
        }

    async def get_advertised_branches(self, use_cache: bool = True) -> Optional[Set[str]]:
        """Branch names the remote itself advertises (``git ls-remote --heads``).

        A failure is remembered for ``TTL_REMOTE_ADVERTISED`` seconds; cached
        reads return None during that window without contacting the remote.

        Returns:
            Set of short names, or None when the remote could not be reached
        """
        cache = self.runner.cache
        if use_cache and cache.has(CACHE_KEY_REMOTE_UNREACHABLE):
            return None

        result = await self.runner.run(
            ["ls-remote", "--heads", self.remote_name],
            cache_key=CACHE_KEY_REMOTE_ADVERTISED if use_cache else None,
            ttl=TTL_REMOTE_ADVERTISED,
        )
        if not result.success:
            logger.warning(
                f"Could not list branches on '{self.remote_name}', "
                "falling back to remote-tracking refs"
            )
            cache.set(CACHE_KEY_REMOTE_UNREACHABLE, True, TTL_REMOTE_ADVERTISED)
            return None
        cache.invalidate(CACHE_KEY_REMOTE_UNREACHABLE)

        names = set()
        for line in _lines(result.stdout):
            # Format: <sha>\t<refname>
            _, _, refname = line.partition("\t")
            refname = refname.strip()
            if refname.startswith(LOCAL_PREFIX):
                names.add(refname[len(LOCAL_PREFIX):])
        return names

    async def branch_exists_locally(self, branch_name: str) -> bool:
        """Fresh check that refs/heads/<branch_name> exists."""
        ref = f"{LOCAL_PREFIX}{branch_name}"
        result = self._require(
            "find_branch", await self.runner.run(["for-each-ref", "--format=%(refname)", ref])
        )
        # for-each-ref matches whole path components, so compare exactly
        return ref in _lines(result.stdout)

    async def branch_exists_remotely(self, branch_name: str) -> bool:
        """Fresh check that the remote-tracking ref for branch_name exists."""
        ref = f"{self.remote_prefix}{branch_name}"
        result = self._require(
            "find_branch", await self.runner.run(["for-each-ref", "--format=%(refname)", ref])
        )
        return ref in _lines(result.stdout)

    async def get_status(self, use_cache: bool = True) -> CommandResult:
        """Porcelain status of the working tree."""
        result = await self.runner.run(
            ["status", "--porcelain"],
            cache_key=CACHE_KEY_STATUS if use_cache else None,
            ttl=TTL_STATUS,
        )
        return self._require("status", result)
