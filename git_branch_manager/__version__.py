"""Version information for git-branch-manager."""

try:
    from git_branch_manager._version import __version__
except ImportError:
    # Fallback for development without tags or when running from source
    __version__ = "0.0.0+unknown"
