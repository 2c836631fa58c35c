"""Identity authority client: bearer token to user."""

from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import ValidationError

from barn_gateway.adapters.payloads import UserPayload
from barn_gateway.domain.errors import ErrorKind, Ok, Result, classify_status, err
from barn_gateway.domain.identity import Identity


class IdentityClient(Protocol):
    """Interface for resolving a session token into an identity."""

    async def resolve(self, token: str) -> Result[Identity]:
        """Return the identity owning the token, or a classified error."""


def bearer(token: str) -> dict[str, str]:
    """Return an Authorization header for a bearer token."""
    return {"Authorization": f"Bearer {token}"}


def decode_identity(response: httpx.Response) -> Result[Identity]:
    """Decode a user body, reading the response exactly once."""
    try:
        payload = UserPayload.model_validate(response.json())
    except (ValueError, ValidationError):
        return err(ErrorKind.UNKNOWN, "Identity response could not be decoded")
    return Ok(payload.to_identity())


async def fetch_current_user(
    http_client: httpx.AsyncClient, api_url: str, token: str, timeout: float
) -> Result[Identity]:
    """Call ``GET /user/me`` and classify the outcome."""
    try:
        response = await http_client.get(
            f"{api_url}/user/me", headers=bearer(token), timeout=timeout
        )
    except httpx.HTTPError as exc:
        return err(ErrorKind.UNKNOWN, f"Identity request failed: {exc!r}")
    if response.status_code == httpx.codes.NOT_FOUND:
        # The token decoded upstream but its user no longer exists.
        return err(
            ErrorKind.INVALID_TOKEN,
            "Token owner not found",
            status=response.status_code,
        )
    if not response.is_success:
        return classify_status(response.status_code)
    return decode_identity(response)


@dataclass
class HttpxIdentityClient(IdentityClient):
    """Identity client backed by the API's "who am I" endpoint."""

    api_url: str
    http_client: httpx.AsyncClient
    timeout: float = 10

    @classmethod
    def create(cls, api_url: str, timeout: float = 10) -> "HttpxIdentityClient":
        """Create an identity client with a managed httpx session."""
        return cls(
            api_url=api_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def resolve(self, token: str) -> Result[Identity]:
        """Resolve a bearer token via ``GET /user/me``."""
        return await fetch_current_user(
            self.http_client, self.api_url, token, self.timeout
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
