"""
Configuration constants for the irongolem client runtime

Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value else default


# Connection defaults
DEFAULT_PORT = _get_env_int("GOLEM_DEFAULT_PORT", 25565)
DEFAULT_QUIT_REASON = _get_env_str("GOLEM_DEFAULT_QUIT_REASON", "disconnect.quitting")

# Session cache (auth server + on-disk cache)
AUTH_SERVER_URL = _get_env_str("GOLEM_AUTH_SERVER_URL", "https://authserver.mojang.com")
AUTH_AGENT_NAME = "Minecraft"
AUTH_AGENT_VERSION = 1
SESSION_CACHE_DIR = _get_env_str("GOLEM_SESSION_CACHE_DIR", ".")
SESSION_HTTP_TIMEOUT_SECONDS = _get_env_float("GOLEM_SESSION_HTTP_TIMEOUT_SECONDS", 10.0)
SESSION_RETRY_ATTEMPTS = _get_env_int("GOLEM_SESSION_RETRY_ATTEMPTS", 3)
SESSION_RETRY_MAX_WAIT_SECONDS = _get_env_float("GOLEM_SESSION_RETRY_MAX_WAIT_SECONDS", 10.0)

# Error aggregation
ERROR_HISTORY_PER_TYPE = _get_env_int("GOLEM_ERROR_HISTORY_PER_TYPE", 1000)
ERROR_ALERT_RATE_PER_HOUR = _get_env_float("GOLEM_ERROR_ALERT_RATE_PER_HOUR", 10.0)
