"""Domain models for resolved identities and session credentials."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class UserRole(Enum):
    """Role reported by the identity authority."""

    VIEWER = "viewer"
    CREATOR = "creator"
    ADMIN = "admin"


@dataclass(frozen=True)
class Identity:
    """A user resolved from a session credential."""

    id: str
    username: str
    email: str
    role: UserRole = UserRole.VIEWER


@dataclass(frozen=True)
class SessionCredential:
    """Bearer token carried in the session cookie.

    The value is opaque to the gateway; only the upstream identity authority
    interprets it.
    """

    value: str
    expires_at: datetime
    path: str = "/"
    http_only: bool = True
    secure: bool = False
    same_site: str = "strict"


@dataclass(frozen=True)
class ProvisionedAccount:
    """Result of reconciling a provider profile with a local account."""

    token: str
    created: bool
