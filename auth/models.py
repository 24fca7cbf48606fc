"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and services
do the work.

User has no password field. The hash lives in the users
table and is read through UserStore.get_password_hash(), which only the
CredentialStore calls. Any code path that hands a User to a caller therefore
cannot leak it.

Layer rule: no imports from api/ or messages/.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class User:
    """A registered account, keyed by username.

    joined_at is set by the store on insert. last_login_at stays None until
    the first successful login and is only ever written by record_login().
    """

    username: str
    first_name: str
    last_name: str
    phone: str
    joined_at: str = ""  # ISO 8601
    last_login_at: Optional[str] = None  # ISO 8601


@dataclass
class UserProfile:
    """Public subset of User embedded in message listings and details."""

    username: str
    first_name: str
    last_name: str
    phone: str


@dataclass(frozen=True)
class VerifiedIdentity:
    """The caller behind a request, as proven by a verified token.

    Immutable and request-scoped: the authentication gate builds one per
    request and it is passed explicitly down the call chain.
    """

    username: str
    issued_at: int
    expires_at: Optional[int] = None
