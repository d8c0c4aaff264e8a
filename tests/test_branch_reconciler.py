"""Tests for BranchReconciler"""
from git_branch_manager.services.branch_reconciler import BranchReconciler
from git_branch_manager.services.git.branch_queries import RefRecord


class TestSorting:
    """Test protected-first ordering."""

    def test_protected_first_in_configured_order(self):
        reconciler = BranchReconciler()
        branches = reconciler.reconcile_local(
            ["zeta", "develop", "alpha", "main", "master"], {}, set(), None
        )
        assert [b.name for b in branches] == ["main", "master", "develop", "alpha", "zeta"]

    def test_custom_protected_list(self):
        reconciler = BranchReconciler(protected_branches=["trunk", "staging"])
        branches = reconciler.reconcile_local(["main", "staging", "trunk", "b"], {}, set(), None)
        assert [b.name for b in branches] == ["trunk", "staging", "b", "main"]
        assert reconciler.is_protected("main") is False

    def test_is_protected(self):
        reconciler = BranchReconciler()
        assert reconciler.is_protected("main")
        assert reconciler.is_protected("develop")
        assert not reconciler.is_protected("feature/main")


class TestReconcileLocal:
    """Test current and remote annotations."""

    def test_current_branch_flag(self):
        reconciler = BranchReconciler()
        branches = reconciler.reconcile_local(["main", "feature/a"], {}, set(), "feature/a")
        current = [b.name for b in branches if b.is_current]
        assert current == ["feature/a"]

    def test_detached_head_marks_nothing_current(self):
        reconciler = BranchReconciler()
        branches = reconciler.reconcile_local(["main", "feature/a"], {}, set(), None)
        assert not any(b.is_current for b in branches)

    def test_has_remote_requires_live_upstream(self):
        reconciler = BranchReconciler()
        tracking = {
            "main": "refs/remotes/origin/main",
            "feature/gone": "refs/remotes/origin/feature/gone",
        }
        branches = reconciler.reconcile_local(
            ["main", "feature/gone", "feature/local"], tracking, {"main", "feature/local"}, "main"
        )
        flags = {b.name: b.has_remote for b in branches}
        # feature/local exists on the remote by name but has no upstream configured
        assert flags == {"main": True, "feature/gone": False, "feature/local": False}

    def test_upstream_on_other_remote_is_not_live(self):
        reconciler = BranchReconciler()
        tracking = {"feature/x": "refs/remotes/fork/feature/x"}
        branches = reconciler.reconcile_local(["feature/x"], tracking, {"feature/x"}, None)
        assert branches[0].has_remote is False

    def test_upstream_with_different_name(self):
        reconciler = BranchReconciler()
        tracking = {"local-name": "refs/remotes/origin/remote-name"}
        branches = reconciler.reconcile_local(["local-name"], tracking, {"remote-name"}, None)
        assert branches[0].has_remote is True

    def test_to_dict(self):
        reconciler = BranchReconciler()
        branch = reconciler.reconcile_local(
            ["main"], {"main": "refs/remotes/origin/main"}, {"main"}, "main"
        )[0]
        assert branch.to_dict() == {
            "name": "main",
            "current": True,
            "isCurrent": True,
            "hasRemote": True,
        }


class TestReconcileRemote:
    """Test remote listing."""

    def test_strips_prefix_and_skips_symbolic_refs(self):
        reconciler = BranchReconciler()
        records = [
            RefRecord("refs/remotes/origin/HEAD", "refs/remotes/origin/main"),
            RefRecord("refs/remotes/origin/main"),
            RefRecord("refs/remotes/origin/feature/x"),
            RefRecord("refs/remotes/origin/develop"),
        ]
        assert [b.name for b in reconciler.reconcile_remote(records)] == [
            "main",
            "develop",
            "feature/x",
        ]

    def test_accepts_short_names(self):
        reconciler = BranchReconciler()
        names = ["origin/HEAD", "origin/main", "origin/release/1.0"]
        assert [b.name for b in reconciler.reconcile_remote(names)] == ["main", "release/1.0"]

    def test_ignores_other_remotes_and_duplicates(self):
        reconciler = BranchReconciler()
        names = ["origin/a", "refs/remotes/origin/a", "fork/b", "refs/remotes/fork/c"]
        assert [b.name for b in reconciler.reconcile_remote(names)] == ["a"]

    def test_strip_remote_prefix(self):
        reconciler = BranchReconciler(remote_name="upstream")
        assert reconciler.strip_remote_prefix("refs/remotes/upstream/a/b") == "a/b"
        assert reconciler.strip_remote_prefix("upstream/a") == "a"
        assert reconciler.strip_remote_prefix("origin/a") is None
        assert reconciler.strip_remote_prefix("refs/heads/a") is None
