"""Shared constants for git-branch-manager."""

# Branches that are never cleaned up, in the order they are listed first
DEFAULT_PROTECTED_BRANCHES = ["main", "master", "develop"]

DEFAULT_REMOTE = "origin"
DEFAULT_PORT = 3001
DEFAULT_CONFIG_FILE = "config.json"

# Pagination defaults used by the HTTP layer
DEFAULT_PAGE = 0
DEFAULT_LIMIT = 10

# Cache key namespaces; invalidation matches on substring
CACHE_NS_BRANCHES = "branches"
CACHE_NS_REMOTE = "remote"
CACHE_NS_STATUS = "status"

CACHE_KEY_CURRENT_BRANCH = "branches_current"
CACHE_KEY_LOCAL_BRANCHES = "branches_local"
CACHE_KEY_REMOTE_REFS = "remote_refs"
CACHE_KEY_REMOTE_ADVERTISED = "remote_advertised"
# Marker set while the remote cannot be reached, so listings stop retrying it
CACHE_KEY_REMOTE_UNREACHABLE = "remote_unreachable"
CACHE_KEY_STATUS = "status_porcelain"

# Time-to-live values in seconds
TTL_LOCAL_BRANCHES = 60
TTL_REMOTE_REFS = 120
TTL_REMOTE_ADVERTISED = 60
TTL_STATUS = 10

# Background refresh and cache sweep periods in seconds
BACKGROUND_UPDATE_INTERVAL = 15 * 60
CACHE_CHECK_PERIOD = 60
INITIAL_BACKGROUND_DELAY = 5

# Exit code reported when git could not be started at all
SPAWN_FAILURE_EXIT_CODE = 127

NO_BRANCHES_TO_REMOVE = "No deprecated branches to remove."
NO_BRANCHES_REMOVED = "No branches were removed."
ALREADY_UP_TO_DATE = "Already up to date."
