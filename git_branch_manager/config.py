"""Configuration handling for git-branch-manager"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Union

from git_branch_manager.constants import (
    BACKGROUND_UPDATE_INTERVAL,
    CACHE_CHECK_PERIOD,
    DEFAULT_PORT,
    DEFAULT_PROTECTED_BRANCHES,
    DEFAULT_REMOTE,
)
from git_branch_manager.exceptions import ConfigError
from git_branch_manager.utils.logging import get_logger

logger = get_logger(__name__)

# config.json key -> Config attribute
JSON_FIELDS = {
    "repositoryPath": "repository_path",
    "headerLink": "header_link",
    "apiBaseUrl": "api_base_url",
    "basePath": "base_path",
    "protectedBranches": "protected_branches",
    "remoteName": "remote_name",
    "verifyRemote": "verify_remote",
    "staticDir": "static_dir",
}


@dataclass
class Config:
    """Configuration for git-branch-manager with validation."""

    # Repository and front-end settings (persisted in config.json)
    repository_path: str = "."
    header_link: str = ""
    api_base_url: str = f"http://localhost:{DEFAULT_PORT}/"
    base_path: str = "/"
    static_dir: Optional[str] = None

    # Branch policy
    protected_branches: List[str] = field(default_factory=lambda: list(DEFAULT_PROTECTED_BRANCHES))
    remote_name: str = DEFAULT_REMOTE
    verify_remote: bool = True  # Check upstreams against `git ls-remote`

    # Background work (seconds, 0 disables)
    background_update_interval: int = BACKGROUND_UPDATE_INTERVAL
    cache_check_period: int = CACHE_CHECK_PERIOD

    # Server
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT

    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_repository_path()
        self._validate_protected_branches()
        self._validate_remote_name()
        self._validate_intervals()
        self._validate_port()
        self._validate_base_path()

    def _validate_repository_path(self):
        """Validate repository_path is not empty."""
        if not self.repository_path or not str(self.repository_path).strip():
            raise ConfigError("repository_path cannot be empty")
        self.repository_path = str(self.repository_path).strip()

    def _validate_protected_branches(self):
        """Validate protected_branches is a list of names."""
        if not isinstance(self.protected_branches, list):
            raise ConfigError("protected_branches must be a list")
        if not all(isinstance(name, str) and name for name in self.protected_branches):
            raise ConfigError("protected_branches must contain non-empty strings")

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ConfigError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_intervals(self):
        """Validate background periods are not negative."""
        if self.background_update_interval < 0:
            raise ConfigError(
                f"background_update_interval must not be negative, got {self.background_update_interval}"
            )
        if self.cache_check_period < 0:
            raise ConfigError(f"cache_check_period must not be negative, got {self.cache_check_period}")

    def _validate_port(self):
        """Validate port is in range."""
        if not 0 < self.port < 65536:
            raise ConfigError(f"port must be between 1 and 65535, got {self.port}")

    def _validate_base_path(self):
        """Validate base_path starts with a slash."""
        if not self.base_path.startswith("/"):
            raise ConfigError(f"base_path must start with '/', got '{self.base_path}'")

    def public_dict(self) -> dict:
        """Configuration values that are safe to send to the front end."""
        return {
            "headerLink": self.header_link,
            "apiBaseUrl": self.api_base_url,
            "basePath": self.base_path,
        }

    def to_json_dict(self) -> dict:
        """Values persisted in config.json, keyed the way the file spells them."""
        data = {key: getattr(self, attr) for key, attr in JSON_FIELDS.items()}
        if data["staticDir"] is None:
            del data["staticDir"]
        return data

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "repository_path": self.repository_path,
            "header_link": self.header_link,
            "api_base_url": self.api_base_url,
            "base_path": self.base_path,
            "static_dir": self.static_dir,
            "protected_branches": self.protected_branches,
            "remote_name": self.remote_name,
            "verify_remote": self.verify_remote,
            "background_update_interval": self.background_update_interval,
            "cache_check_period": self.cache_check_period,
            "host": self.host,
            "port": self.port,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary.

        Accepts both attribute names and the camelCase keys of config.json.
        """
        known_fields = set(cls().to_dict())
        filtered = {}
        for key, value in config_dict.items():
            key = JSON_FIELDS.get(key, key)
            if key in known_fields:
                filtered[key] = value
        return cls(**filtered)


def load_config(path: Union[str, Path], **overrides) -> Config:
    """Load config.json, creating it with defaults when it does not exist.

    Args:
        path: Location of the config file
        **overrides: Attribute values that take precedence over the file
            (command-line arguments); ``None`` values are ignored

    Returns:
        Validated Config
    """
    path = Path(path)
    overrides = {k: v for k, v in overrides.items() if v is not None}

    if "port" not in overrides and os.environ.get("PORT"):
        try:
            overrides["port"] = int(os.environ["PORT"])
        except ValueError:
            raise ConfigError(f"PORT must be an integer, got '{os.environ['PORT']}'")

    if path.exists():
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a JSON object")
        logger.debug(f"Loaded config from {path}")
    else:
        data = Config().to_json_dict()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Created default config file at {path}")

    data = dict(data)
    data.update(overrides)
    config = Config.from_dict(data)

    if not Path(config.repository_path).exists():
        logger.error(f"Repository path not found: {config.repository_path}")
        logger.error("Please update the config.json file with a valid path.")

    return config
