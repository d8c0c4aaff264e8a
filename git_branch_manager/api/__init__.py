"""HTTP API for git-branch-manager."""

from .app import create_app

__all__ = ["create_app"]
