from __future__ import annotations

import asyncio
import json

import aiohttp
import pytest

from irongolem.auth.session_cache import AuthServerClient, Session, SessionCache
from irongolem.errors.internal import AuthenticationError, NetworkError

FRESH = {"accessToken": "fresh", "clientToken": "client", "selectedProfile": {"id": "1", "name": "Steve"}}
REFRESHED = {"accessToken": "refreshed", "clientToken": "client", "selectedProfile": {"id": "1", "name": "Steve"}}


class FakeResp:
    def __init__(self, status: int, payload: dict | None = None):
        self.status = status
        self._payload = payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, _exc_type, _exc, _tb):
        return False

    async def json(self, content_type=None):
        await asyncio.sleep(0)
        if self._payload is None:
            raise ValueError("no body")
        return self._payload


class FakeSession:
    """Routes posts by endpoint; each route is a list of responses or exceptions."""

    def __init__(self, **routes):
        self.routes = {name: list(responses) for name, responses in routes.items()}
        self.calls: list[tuple[str, dict]] = []

    def post(self, url, json=None, timeout=None):
        endpoint = url.rsplit("/", 1)[-1]
        self.calls.append((endpoint, json))
        outcome = self.routes[endpoint].pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def endpoints(self):
        return [endpoint for endpoint, _ in self.calls]


def make_cache(tmp_path, session, max_attempts=1):
    return SessionCache(AuthServerClient(session, "https://auth.test", max_attempts=max_attempts), str(tmp_path))


def write_cached(tmp_path, payload, name=None):
    suffix = f"-{name}" if name else ""
    (tmp_path / f"session{suffix}.json").write_text(json.dumps(payload), encoding="utf-8")


@pytest.mark.asyncio
async def test_valid_cached_session_reused(tmp_path):
    write_cached(tmp_path, FRESH)
    session = FakeSession(validate=[FakeResp(204)])
    cache = make_cache(tmp_path, session)

    result = await cache.get_valid_session("steve@example.net", "pw")

    assert result.access_token == "fresh"
    assert session.endpoints() == ["validate"]
    assert session.calls[0][1] == {"accessToken": "fresh", "clientToken": "client"}


@pytest.mark.asyncio
async def test_invalid_cached_session_refreshed_and_saved(tmp_path):
    write_cached(tmp_path, FRESH, name="alt")
    session = FakeSession(
        validate=[FakeResp(403, {"error": "ForbiddenOperationException", "errorMessage": "Invalid token"})],
        refresh=[FakeResp(200, REFRESHED)],
    )
    cache = make_cache(tmp_path, session)

    result = await cache.get_valid_session("steve@example.net", "pw", "ALT")

    assert result.access_token == "refreshed"
    assert session.endpoints() == ["validate", "refresh"]
    saved = json.loads((tmp_path / "session-alt.json").read_text(encoding="utf-8"))
    assert saved["accessToken"] == "refreshed"


@pytest.mark.asyncio
async def test_falls_back_to_authenticate_when_refresh_fails(tmp_path):
    write_cached(tmp_path, FRESH)
    session = FakeSession(
        validate=[FakeResp(403, {"errorMessage": "Invalid token"})],
        refresh=[FakeResp(403, {"errorMessage": "Invalid token"})],
        authenticate=[FakeResp(200, FRESH)],
    )
    cache = make_cache(tmp_path, session)

    result = await cache.get_valid_session("steve@example.net", "pw")

    assert result.access_token == "fresh"
    assert session.endpoints() == ["validate", "refresh", "authenticate"]


@pytest.mark.asyncio
async def test_authenticates_without_cache_file(tmp_path):
    session = FakeSession(authenticate=[FakeResp(200, FRESH)])
    cache = make_cache(tmp_path, session)

    result = await cache.get_valid_session("steve@example.net", "pw")

    assert result == Session.from_payload(FRESH)
    body = session.calls[0][1]
    assert body["agent"] == {"name": "Minecraft", "version": 1}
    assert body["username"] == "steve@example.net"
    saved = json.loads((tmp_path / "session.json").read_text(encoding="utf-8"))
    assert saved == FRESH


@pytest.mark.asyncio
async def test_corrupt_cache_file_ignored(tmp_path):
    (tmp_path / "session.json").write_text("{not json", encoding="utf-8")
    session = FakeSession(authenticate=[FakeResp(200, FRESH)])
    cache = make_cache(tmp_path, session)

    assert (await cache.get_valid_session("u", "pw")).access_token == "fresh"
    assert session.endpoints() == ["authenticate"]


@pytest.mark.asyncio
async def test_rejected_credentials_raise(tmp_path):
    session = FakeSession(
        authenticate=[FakeResp(403, {"error": "ForbiddenOperationException", "errorMessage": "Invalid credentials. Invalid username or password."})]
    )
    cache = make_cache(tmp_path, session)

    with pytest.raises(AuthenticationError, match="Invalid username or password"):
        await cache.get_valid_session("u", "bad")
    assert not (tmp_path / "session.json").exists()


@pytest.mark.asyncio
async def test_unreachable_auth_server_raises_network_error(tmp_path):
    session = FakeSession(authenticate=[aiohttp.ClientConnectionError("refused")])
    cache = make_cache(tmp_path, session)

    with pytest.raises(NetworkError) as exc_info:
        await cache.get_valid_session("u", "pw")
    assert exc_info.value.data == {"endpoint": "authenticate"}


@pytest.mark.asyncio
async def test_connection_errors_are_retried(tmp_path):
    session = FakeSession(
        authenticate=[aiohttp.ClientConnectionError("reset"), FakeResp(200, FRESH)]
    )
    cache = make_cache(tmp_path, session, max_attempts=2)

    result = await cache.get_valid_session("u", "pw")

    assert result.access_token == "fresh"
    assert session.endpoints() == ["authenticate", "authenticate"]


@pytest.mark.asyncio
async def test_server_error_without_body(tmp_path):
    session = FakeSession(authenticate=[FakeResp(500)])
    cache = make_cache(tmp_path, session)

    with pytest.raises(AuthenticationError, match="status=500"):
        await cache.get_valid_session("u", "pw")


def test_session_payload_requires_tokens():
    with pytest.raises(AuthenticationError):
        Session.from_payload({"accessToken": "only"})


def test_session_accepts_snake_case():
    session = Session.from_payload({"access_token": "a", "client_token": "c"})
    assert session.to_dict() == {"access_token": "a", "client_token": "c", "selected_profile": {}}


def test_session_path_lowercases_name(tmp_path):
    cache = make_cache(tmp_path, FakeSession())
    assert cache.session_path("Alt").endswith("session-alt.json")
    assert cache.session_path().endswith("session.json")
