from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ..constants import DEFAULT_PORT


class ClientConfig(BaseModel):
    """Options recognized by :class:`~irongolem.client.core.GolemClient`.

    Attributes:
        server: Host name of the server to connect to.
        username: Account name (or offline name).
        password: Account password; None for offline/cached sessions.
        port: Server port.
        chat_delay: Minimum milliseconds between outbound messages. None
            means "use the server profile's delay, or 0".
        parse_chat: Classify incoming chat with the profile's rules.
        login_timeout: Milliseconds to wait for login before giving up.
        wait_for_login: Make ``init()`` wait until login completes.
        server_profile: Name of a profile to use instead of host matching.
        use_server_profiles: Resolve a profile at all.
        session_cache: Fetch credentials through the credential store.
        session_cache_name: Name suffix of the cached session file.
        chat_strip_extra_spaces: Collapse whitespace runs in chat text.
        emit_unknown_when_unparsed: Emit unknown-type events even when
            parsing is off.
    """

    server: str = Field(min_length=1)
    username: str = Field(min_length=1)
    password: str | None = None
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    chat_delay: int | None = Field(default=None, ge=0)
    parse_chat: bool = True
    login_timeout: int | None = Field(default=None, gt=0)
    wait_for_login: bool = False
    server_profile: str | None = None
    use_server_profiles: bool = True
    session_cache: bool = False
    session_cache_name: str | None = None
    chat_strip_extra_spaces: bool = True
    emit_unknown_when_unparsed: bool = False

    @field_validator("server", "username", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def validate_session_cache(self) -> ClientConfig:
        """A fresh session cannot be created without a password."""
        if self.session_cache and not self.password:
            raise ValueError("session_cache requires a password")
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ClientConfig:
        """Create a config from a dictionary, accepting camelCase keys.

        Args:
            data: Option mapping, e.g. loaded from JSON.

        Returns:
            ClientConfig instance.
        """
        aliases = {
            "chatDelay": "chat_delay",
            "parseChat": "parse_chat",
            "loginTimeout": "login_timeout",
            "waitForLogin": "wait_for_login",
            "serverProfile": "server_profile",
            "useServerProfiles": "use_server_profiles",
            "sessionCache": "session_cache",
            "sessionCacheName": "session_cache_name",
            "chatStripExtraSpaces": "chat_strip_extra_spaces",
            "emitUnknownWhenUnparsed": "emit_unknown_when_unparsed",
        }
        norm_data = {aliases.get(k, k): v for k, v in data.items()}
        return cls.model_validate(norm_data)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, exclude={"password"})

    @property
    def login_timeout_seconds(self) -> float | None:
        return self.login_timeout / 1000 if self.login_timeout else None
