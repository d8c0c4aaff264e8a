"""
git-branch-manager - A web backend for managing git branches
"""

from .__version__ import __version__
from .config import Config, load_config
from .services.branch_service import BranchService

__all__ = ["BranchService", "Config", "load_config", "__version__"]
