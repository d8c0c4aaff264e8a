"""Services for git-branch-manager."""
