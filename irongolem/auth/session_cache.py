"""Session cache: validated, refreshed and persisted login sessions.

Sessions are loaded from a JSON file, validated against the auth server,
refreshed when validation fails, and created from username/password when
nothing usable is cached. Every successful lookup is written back to disk.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass, field
from typing import Any

import aiohttp
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import (
    AUTH_AGENT_NAME,
    AUTH_AGENT_VERSION,
    AUTH_SERVER_URL,
    SESSION_CACHE_DIR,
    SESSION_HTTP_TIMEOUT_SECONDS,
    SESSION_RETRY_ATTEMPTS,
    SESSION_RETRY_MAX_WAIT_SECONDS,
)
from ..errors.internal import AuthenticationError, NetworkError

_RETRYABLE = (aiohttp.ClientConnectionError, asyncio.TimeoutError)


@dataclass(frozen=True)
class Session:
    """An authenticated game session. Never mutated; refresh returns a new one."""

    access_token: str
    client_token: str
    selected_profile: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Session:
        """Build from an auth server response or a cache file."""
        access = payload.get("accessToken") or payload.get("access_token")
        client = payload.get("clientToken") or payload.get("client_token")
        if not access or not client:
            raise AuthenticationError("Session payload is missing tokens")
        profile = payload.get("selectedProfile") or payload.get("selected_profile") or {}
        return cls(str(access), str(client), dict(profile))

    def to_payload(self) -> dict[str, Any]:
        return {
            "accessToken": self.access_token,
            "clientToken": self.client_token,
            "selectedProfile": self.selected_profile,
        }

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class AuthServerClient:
    """Minimal client for the Yggdrasil-style auth server.

    Handles the three calls the cache needs: authenticate, validate and
    refresh. Connection failures are retried with exponential backoff.
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        base_url: str = AUTH_SERVER_URL,
        *,
        max_attempts: int = SESSION_RETRY_ATTEMPTS,
    ) -> None:
        self.session = http_session
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max_attempts

    async def authenticate(self, username: str, password: str) -> Session:
        payload = await self._post(
            "authenticate",
            {
                "agent": {"name": AUTH_AGENT_NAME, "version": AUTH_AGENT_VERSION},
                "username": username,
                "password": password,
            },
        )
        return Session.from_payload(payload)

    async def validate(self, session: Session) -> bool:
        """Check a session remotely.

        Returns:
            True if the server accepted the session.
        """
        try:
            await self._post(
                "validate",
                {"accessToken": session.access_token, "clientToken": session.client_token},
            )
        except AuthenticationError as e:
            logging.debug(f"🔑 Session validation rejected error={str(e)}")
            return False
        return True

    async def refresh(self, session: Session) -> Session:
        payload = await self._post(
            "refresh",
            {
                "accessToken": session.access_token,
                "clientToken": session.client_token,
                "selectedProfile": session.selected_profile or None,
            },
        )
        return Session.from_payload(payload)

    async def _post(self, endpoint: str, body: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/{endpoint}"
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=0.5, max=SESSION_RETRY_MAX_WAIT_SECONDS),
            retry=retry_if_exception_type(_RETRYABLE),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._post_once(url, body)
        except _RETRYABLE as e:
            raise NetworkError(
                f"Auth server unreachable ({endpoint}): {type(e).__name__} {str(e)}",
                data={"endpoint": endpoint},
            ) from e
        raise NetworkError(f"Auth server call did not complete ({endpoint})")  # pragma: no cover

    async def _post_once(self, url: str, body: dict[str, Any]) -> dict[str, Any]:
        timeout = aiohttp.ClientTimeout(total=SESSION_HTTP_TIMEOUT_SECONDS)
        async with self.session.post(url, json=body, timeout=timeout) as resp:
            if resp.status == 204:
                return {}
            try:
                data = await resp.json(content_type=None)
            except (aiohttp.ContentTypeError, ValueError) as e:
                if resp.status >= 400:
                    raise AuthenticationError(
                        f"Auth server error status={resp.status}", data={"status": resp.status}
                    ) from e
                return {}
            data = data if isinstance(data, dict) else {}
            message = data.get("errorMessage") or data.get("error")
            if message:
                raise AuthenticationError(str(message), data={"status": resp.status})
            if resp.status >= 400:
                raise AuthenticationError(
                    f"Auth server error status={resp.status}", data={"status": resp.status}
                )
            return data


class SessionCache:
    """File-backed credential store.

    Attributes:
        cache_dir (str): Directory holding ``session[-name].json`` files.
    """

    def __init__(
        self,
        auth_client: AuthServerClient,
        cache_dir: str = SESSION_CACHE_DIR,
    ) -> None:
        self.auth_client = auth_client
        self.cache_dir = cache_dir

    def session_path(self, name: str | None = None) -> str:
        suffix = f"-{name.lower()}" if name else ""
        return os.path.join(self.cache_dir, f"session{suffix}.json")

    async def load(self, name: str | None = None) -> Session | None:
        """Load a cached session; None if missing or unreadable."""
        path = self.session_path(name)
        loop = asyncio.get_running_loop()

        def _read() -> dict[str, Any] | None:
            if not os.path.exists(path):
                return None
            with open(path, encoding="utf-8") as f:
                return json.load(f)

        try:
            payload = await loop.run_in_executor(None, _read)
        except (OSError, ValueError) as e:
            logging.warning(f"⚠️ Session cache unreadable path={path} error={str(e)}")
            return None
        if not isinstance(payload, dict):
            return None
        try:
            return Session.from_payload(payload)
        except AuthenticationError:
            logging.warning(f"⚠️ Session cache incomplete path={path}")
            return None

    async def save(self, session: Session, name: str | None = None) -> None:
        """Persist a session atomically."""
        path = self.session_path(name)
        loop = asyncio.get_running_loop()

        def _write() -> None:
            directory = os.path.dirname(path) or "."
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(session.to_payload(), f)
                os.replace(tmp_path, path)
            except OSError:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise

        await loop.run_in_executor(None, _write)

    async def _from_saved(self, name: str | None) -> Session | None:
        session = await self.load(name)
        if session is None:
            return None
        if await self.auth_client.validate(session):
            logging.debug("🔑 Cached session is valid")
            return session
        try:
            refreshed = await self.auth_client.refresh(session)
        except AuthenticationError as e:
            logging.info(f"🔄 Cached session could not be refreshed error={str(e)}")
            return None
        logging.info("🔄 Cached session refreshed")
        return refreshed

    async def get_valid_session(
        self, username: str, password: str, cache_name: str | None = None
    ) -> Session:
        """Return a usable session, creating one if the cache cannot help.

        Raises:
            AuthenticationError: If the credentials are rejected.
            NetworkError: If the auth server cannot be reached.
        """
        session = await self._from_saved(cache_name)
        if session is None:
            logging.info(f"🔐 Authenticating fresh session user={username}")
            session = await self.auth_client.authenticate(username, password)
        await self.save(session, cache_name)
        return session


__all__ = ["AuthServerClient", "Session", "SessionCache"]
