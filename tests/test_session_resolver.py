"""Tests for per-request session resolution."""

import asyncio

from starlette.requests import Request
from starlette.responses import Response

from barn_gateway.domain.errors import ErrorKind
from barn_gateway.services.sessions import (
    CookieTokenStore,
    SessionOutcome,
    SessionResolver,
    current_identity,
    current_token,
)
from tests.conftest import ALICE, FakeIdentityClient


def _request(cookie: str | None = None, state: dict | None = None) -> Request:
    headers = [(b"cookie", cookie.encode())] if cookie else []
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": headers,
        "query_string": b"",
        "state": state or {},
    }
    return Request(scope)


def _resolver(client: FakeIdentityClient) -> SessionResolver:
    return SessionResolver(token_store=CookieTokenStore(), identity_client=client)


def test_no_cookie_proceeds_unauthenticated_without_remote_call() -> None:
    client = FakeIdentityClient()
    request = _request()

    resolution = asyncio.run(_resolver(client).resolve(request))

    assert resolution.outcome is SessionOutcome.NO_COOKIE
    assert not resolution.clear_cookie
    assert current_identity(request) is None
    assert client.calls == []


def test_valid_token_attaches_identity() -> None:
    client = FakeIdentityClient(identities={"good-token": ALICE})
    request = _request("jwt=good-token")

    resolution = asyncio.run(_resolver(client).resolve(request))

    assert resolution.outcome is SessionOutcome.AUTHENTICATED
    assert current_identity(request) == ALICE
    assert current_token(request) == "good-token"


def test_identity_already_attached_skips_remote_call() -> None:
    client = FakeIdentityClient(identities={"good-token": ALICE})
    request = _request("jwt=good-token", state={"identity": ALICE})

    resolution = asyncio.run(_resolver(client).resolve(request))

    assert resolution.outcome is SessionOutcome.ALREADY_ATTACHED
    assert resolution.identity == ALICE
    assert client.calls == []


def test_invalid_token_clears_cookie_at_root_path() -> None:
    client = FakeIdentityClient()
    resolver = _resolver(client)
    request = _request("jwt=expired-token")
    response = Response()

    resolution = asyncio.run(resolver.resolve(request))
    resolver.finalize(request, response)

    assert resolution.outcome is SessionOutcome.UNAUTHENTICATED
    assert resolution.clear_cookie
    assert current_identity(request) is None
    assert current_token(request) is None
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith('jwt="";')
    assert "Max-Age=0" in set_cookie
    assert "Path=/" in set_cookie


def test_unknown_failure_fails_closed() -> None:
    client = FakeIdentityClient(failures={"flaky-token": ErrorKind.UNKNOWN})
    resolver = _resolver(client)
    request = _request("jwt=flaky-token")
    response = Response()

    resolution = asyncio.run(resolver.resolve(request))
    resolver.finalize(request, response)

    assert resolution.outcome is SessionOutcome.UNAUTHENTICATED
    assert "Max-Age=0" in response.headers["set-cookie"]


def test_fresh_credential_is_not_deleted_by_finalize() -> None:
    client = FakeIdentityClient()
    resolver = _resolver(client)
    request = _request("jwt=expired-token")
    response = Response()

    asyncio.run(resolver.resolve(request))
    resolver.mark_issued(request, response, "new-token")
    resolver.finalize(request, response)

    cookies = response.headers.getlist("set-cookie")
    assert len(cookies) == 1
    assert cookies[0].startswith("jwt=new-token;")


def test_resolution_is_repeatable_per_request() -> None:
    client = FakeIdentityClient(identities={"good-token": ALICE})
    resolver = _resolver(client)

    first = asyncio.run(resolver.resolve(_request("jwt=good-token")))
    second = asyncio.run(resolver.resolve(_request("jwt=good-token")))

    assert first.identity == second.identity == ALICE
    assert client.calls == ["good-token", "good-token"]


def test_token_store_issue_sets_cookie_attributes() -> None:
    store = CookieTokenStore(ttl_hours=24, secure=True)
    response = Response()

    credential = store.issue(response, "abc")

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("jwt=abc;")
    assert "HttpOnly" in set_cookie
    assert "Secure" in set_cookie
    assert "Path=/" in set_cookie
    assert "SameSite=strict" in set_cookie
    assert credential.same_site == "strict"
    assert credential.secure
