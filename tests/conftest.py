"""Pytest fixtures for git-branch-manager tests"""
import tempfile
from pathlib import Path

import git
import pytest

from git_branch_manager.config import Config
from git_branch_manager.services.branch_service import BranchService


def commit_file(repo, filename, content, message):
    """Write a file in the repo's working tree and commit it."""
    path = Path(repo.working_dir) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([filename])
    repo.index.commit(message)


def configure_user(repo):
    """Configure git user for commits."""
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def origin_path(temp_dir):
    """A bare repository acting as the 'origin' remote."""
    path = temp_dir / "origin.git"
    bare = git.Repo.init(path, bare=True)
    bare.git.symbolic_ref("HEAD", "refs/heads/main")
    bare.close()
    return path


@pytest.fixture
def git_repo(temp_dir, origin_path):
    """A working repository with 'main' pushed to origin."""
    repo_path = temp_dir / "work"
    repo_path.mkdir()
    repo = git.Repo.init(repo_path)
    configure_user(repo)

    commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")
    repo.git.branch("-M", "main")

    repo.create_remote("origin", str(origin_path))
    repo.git.push("-u", "origin", "main")

    yield repo

    repo.close()


@pytest.fixture
def git_repo_with_branches(git_repo, origin_path):
    """A repository exercising every remote situation.

    Local branches:
        main, develop, feature/b   upstream present on origin
        feature/a                  no upstream at all
        feature/stale              upstream deleted on origin, tracking ref left behind
    Remote only:
        release/1.0
    origin/HEAD points at origin/main.
    """
    repo = git_repo

    repo.git.checkout("-b", "develop")
    repo.git.push("-u", "origin", "develop")

    repo.git.checkout("main")
    repo.git.checkout("-b", "feature/a")
    commit_file(repo, "a.txt", "local only\n", "Add a")

    repo.git.checkout("main")
    repo.git.checkout("-b", "feature/b")
    commit_file(repo, "b.txt", "pushed\n", "Add b")
    repo.git.push("-u", "origin", "feature/b")

    repo.git.checkout("main")
    repo.git.checkout("-b", "feature/stale")
    commit_file(repo, "stale.txt", "gone upstream\n", "Add stale")
    repo.git.push("-u", "origin", "feature/stale")

    repo.git.checkout("main")
    repo.git.checkout("-b", "release/1.0")
    commit_file(repo, "release.txt", "1.0\n", "Release 1.0")
    repo.git.push("origin", "release/1.0")

    repo.git.checkout("main")
    repo.git.branch("-D", "release/1.0")
    repo.git.remote("set-head", "origin", "main")

    # Delete on the remote only; refs/remotes/origin/feature/stale survives locally
    bare = git.Repo(origin_path)
    bare.git.branch("-D", "feature/stale")
    bare.close()

    yield repo


@pytest.fixture
def cleanup_repo(git_repo):
    """main (protected), feature/a (no remote) and feature/b (remote)."""
    repo = git_repo

    repo.git.checkout("-b", "feature/a")
    commit_file(repo, "a.txt", "local only\n", "Add a")

    repo.git.checkout("main")
    repo.git.checkout("-b", "feature/b")
    commit_file(repo, "b.txt", "pushed\n", "Add b")
    repo.git.push("-u", "origin", "feature/b")

    repo.git.checkout("main")
    yield repo


@pytest.fixture
def other_clone(temp_dir, origin_path, git_repo_with_branches):
    """A second clone of origin, for pushing changes the working repo has not seen."""
    clone = git.Repo.clone_from(str(origin_path), temp_dir / "other")
    configure_user(clone)
    yield clone
    clone.close()


def make_config(repo, **overrides):
    """Config for a test repository with background work disabled."""
    values = {
        "repository_path": repo.working_dir,
        "background_update_interval": 0,
        "cache_check_period": 0,
    }
    values.update(overrides)
    return Config(**values)


@pytest.fixture
def config(git_repo_with_branches):
    return make_config(git_repo_with_branches)


@pytest.fixture
def service(config):
    return BranchService(config)
