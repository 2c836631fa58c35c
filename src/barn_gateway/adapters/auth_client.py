"""Credential login and registration client."""

from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import ValidationError

from barn_gateway.adapters.payloads import ErrorPayload, TokenPayload
from barn_gateway.domain.errors import (
    TOKEN_REJECTED_STATUSES,
    ErrorKind,
    Ok,
    Result,
    err,
)


class AuthClient(Protocol):
    """Interface for the API's password authentication endpoints."""

    async def login(self, username: str, password: str) -> Result[str]:
        """Return a session token for valid credentials."""

    async def register(self, username: str, email: str, password: str) -> Result[str]:
        """Create an account and return its session token."""


def _upstream_message(response: httpx.Response, default: str) -> str:
    try:
        message = ErrorPayload.model_validate(response.json()).message
    except (ValueError, ValidationError):
        return default
    return message or default


def _decode_token(response: httpx.Response) -> Result[str]:
    try:
        payload = TokenPayload.model_validate(response.json())
    except (ValueError, ValidationError):
        return err(ErrorKind.UNKNOWN, "Invalid response from authentication service")
    return Ok(payload.token)


@dataclass
class HttpxAuthClient(AuthClient):
    """Auth client implemented with httpx."""

    api_url: str
    http_client: httpx.AsyncClient
    timeout: float = 10

    @classmethod
    def create(cls, api_url: str, timeout: float = 10) -> "HttpxAuthClient":
        """Create an auth client with a managed httpx session."""
        return cls(
            api_url=api_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def login(self, username: str, password: str) -> Result[str]:
        """Call ``POST /auth/login``."""
        try:
            response = await self.http_client.post(
                f"{self.api_url}/auth/login",
                json={"username": username, "password": password},
                timeout=self.timeout,
            )
        except httpx.HTTPError:
            return err(
                ErrorKind.UNKNOWN, "Unable to connect to authentication service"
            )
        if response.status_code in TOKEN_REJECTED_STATUSES:
            return err(
                ErrorKind.INVALID_TOKEN,
                _upstream_message(response, "Invalid credentials"),
                status=response.status_code,
            )
        if not response.is_success:
            return err(
                ErrorKind.UNKNOWN,
                _upstream_message(response, "Login failed"),
                status=response.status_code,
            )
        return _decode_token(response)

    async def register(self, username: str, email: str, password: str) -> Result[str]:
        """Call ``POST /auth/register``."""
        try:
            response = await self.http_client.post(
                f"{self.api_url}/auth/register",
                json={
                    "username": username,
                    "email": email,
                    "password": password,
                    "password_confirmation": password,
                },
                timeout=self.timeout,
            )
        except httpx.HTTPError:
            return err(
                ErrorKind.UNKNOWN, "Failed to connect to server. Please try again."
            )
        if response.is_client_error:
            return err(
                ErrorKind.INVALID_REQUEST,
                _upstream_message(response, "Registration rejected"),
                status=response.status_code,
            )
        if not response.is_success:
            return err(
                ErrorKind.UNKNOWN,
                _upstream_message(response, "Registration failed"),
                status=response.status_code,
            )
        return _decode_token(response)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
