"""Combines local, upstream and remote ref data into the branch views."""

from typing import Dict, Iterable, List, Optional, Sequence, Set, TypeVar, Union

from git_branch_manager.constants import DEFAULT_PROTECTED_BRANCHES, DEFAULT_REMOTE
from git_branch_manager.models.branch import BranchRef, RemoteBranchRef
from git_branch_manager.services.git.branch_queries import RefRecord

T = TypeVar("T", BranchRef, RemoteBranchRef)


class BranchReconciler:
    """Builds annotated, sorted branch listings.

    Protected branches are listed first, in the order they are configured;
    all other branches follow alphabetically.
    """

    def __init__(
        self,
        protected_branches: Optional[Sequence[str]] = None,
        remote_name: str = DEFAULT_REMOTE,
    ):
        if protected_branches is None:
            protected_branches = DEFAULT_PROTECTED_BRANCHES
        self.protected_branches = list(protected_branches)
        self.remote_name = remote_name
        self._priority = {name: index for index, name in enumerate(self.protected_branches)}

    def is_protected(self, branch_name: str) -> bool:
        return branch_name in self._priority

    def sort_key(self, branch_name: str):
        if branch_name in self._priority:
            return (0, self._priority[branch_name], "")
        return (1, 0, branch_name)

    def sort_branches(self, branches: Iterable[T]) -> List[T]:
        return sorted(branches, key=lambda branch: self.sort_key(branch.name))

    def strip_remote_prefix(self, ref: str) -> Optional[str]:
        """Short branch name of a ref on the configured remote.

        Accepts ``refs/remotes/<remote>/<name>`` and ``<remote>/<name>``.
        Returns None for refs that belong elsewhere (another remote, a local
        branch).
        """
        for prefix in (f"refs/remotes/{self.remote_name}/", f"{self.remote_name}/"):
            if ref.startswith(prefix):
                return ref[len(prefix):] or None
        return None

    def has_live_upstream(
        self, branch_name: str, tracking_map: Dict[str, str], remote_ref_set: Set[str]
    ) -> bool:
        """True iff the branch's configured upstream is in the remote's live ref set."""
        upstream = tracking_map.get(branch_name)
        if not upstream:
            return False
        upstream_name = self.strip_remote_prefix(upstream)
        return upstream_name is not None and upstream_name in remote_ref_set

    def reconcile_local(
        self,
        local_refs: Iterable[str],
        tracking_map: Dict[str, str],
        remote_ref_set: Set[str],
        current_ref: Optional[str],
    ) -> List[BranchRef]:
        """Annotate local branches with current/remote flags and sort them.

        Args:
            local_refs: Short names of local branches
            tracking_map: Local branch name -> configured upstream ref
            remote_ref_set: Branch names the remote actually has
            current_ref: Checked-out branch, None when HEAD is detached
        """
        branches = [
            BranchRef(
                name=name,
                is_current=current_ref is not None and name == current_ref,
                has_remote=self.has_live_upstream(name, tracking_map, remote_ref_set),
                upstream=tracking_map.get(name),
            )
            for name in local_refs
        ]
        return self.sort_branches(branches)

    def reconcile_remote(self, remote_refs: Iterable[Union[RefRecord, str]]) -> List[RemoteBranchRef]:
        """Remote branches without symbolic refs, prefix stripped, sorted."""
        branches = {}
        for record in remote_refs:
            if isinstance(record, str):
                record = RefRecord(record)
            if record.target:
                continue  # symbolic ref such as origin/HEAD
            name = self.strip_remote_prefix(record.refname)
            if not name or name == "HEAD":
                continue
            branches[name] = RemoteBranchRef(name=name)
        return self.sort_branches(branches.values())
