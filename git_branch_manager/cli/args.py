"""Command-line argument parsing for git-branch-manager."""

import argparse
from git_branch_manager.__version__ import __version__
from git_branch_manager.constants import DEFAULT_CONFIG_FILE


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Web UI backend for managing the branches of a git repository",
        epilog=f"Settings are read from {DEFAULT_CONFIG_FILE}, which is created with defaults "
        "on first run. Command-line options take precedence over the file.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG_FILE,
        help=f"Path to the config file (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument("--repo", help="Repository to manage (overrides repositoryPath)")
    parser.add_argument("--host", help="Interface to bind (default: 0.0.0.0)")
    parser.add_argument(
        "--port", type=int, help="Port to listen on (default: $PORT or 3001)"
    )
    parser.add_argument(
        "--static-dir", help="Directory with the built front end to serve at /"
    )
    parser.add_argument(
        "--no-verify-remote",
        action="store_true",
        help="Trust remote-tracking refs instead of asking the remote (git ls-remote)",
    )
    parser.add_argument("--log-file", help="Also write log records to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"git-branch-manager {__version__}")

    return parser.parse_args(argv)
