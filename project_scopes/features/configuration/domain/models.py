from enum import Enum, unique


@unique
class ConfigKey(str, Enum):
    """Keys stored under the project-scopes section."""
    ENABLED = "enabled"
    ACTIVE_SCOPES = "activeScopes"
    GLOBAL_EXCLUDE = "globalExclude"
    SCOPES = "scopes"


class ConfigWriteError(Exception):
    """
    Raised by a config backend when a write could not be committed.
    Callers treat writes as fire-and-forget and only log this.
    """
    pass
