"""Client configuration model and known server profiles."""

from .model import ClientConfig
from .servers import BUILTIN_PROFILES, MINEPLEX, ServerProfile, find_profile

__all__ = ["ClientConfig", "ServerProfile", "BUILTIN_PROFILES", "MINEPLEX", "find_profile"]
