"""
auth/tokens.py -- JWT issue and verification (TokenIssuer).

Security design decisions:
  JWT: python-jose with HS256. Tokens carry only the identity claim:
       {sub: username, iat: int seconds, exp?: int seconds}. exp is present
       only when Settings.token_expire_seconds > 0.

  Verification is a pure function of (token, secret, current time). There is
       no storage lookup and no revocation list: a token is good for its whole
       un-expired lifetime once issued.

  Failures are typed. ExpiredToken when exp has passed, InvalidToken for
       everything else (bad signature, malformed payload, wrong claim types,
       non-canonical base64url). The authentication gate collapses both into
       Unauthenticated -- never return these to a client directly.

  Canonical encoding: base64url has spare bits in the last character of a
       segment, so two different strings can decode to the same bytes. Every
       segment is re-encoded and compared, which makes any textual change to a
       token fail verification rather than silently pass.

Layer rule: no imports from api/ or messages/.
"""

from __future__ import annotations

import binascii
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JOSEError
from jose.utils import base64url_decode, base64url_encode

from auth.exceptions import ExpiredToken, InvalidToken
from core.config import Settings

_ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    issued_at: int
    expires_at: Optional[int] = None


def _epoch_now() -> int:
    return int(time.time())


class TokenIssuer:
    """Creates and verifies signed identity tokens.

    The secret and expiry are copied out of Settings at construction and never
    change afterwards. clock exists so tests can issue tokens "in the past";
    verification always checks against the real current time.
    """

    def __init__(self, settings: Settings, clock: Callable[[], int] = _epoch_now) -> None:
        self._secret = settings.secret_key
        self._expire_seconds = settings.token_expire_seconds
        self._clock = clock

    def issue(self, username: str, expire_seconds: Optional[int] = None) -> str:
        """Encode a signed token for username.

        expire_seconds overrides the configured lifetime for this one token;
        0 means no exp claim.
        """
        duration = self._expire_seconds if expire_seconds is None else expire_seconds
        now = self._clock()
        payload: dict = {"sub": username, "iat": now}
        if duration > 0:
            payload["exp"] = now + duration
        return jwt.encode(payload, self._secret, algorithm=_ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        """Check signature, shape and expiry. Returns the claims or raises."""
        if not isinstance(token, str) or not _is_canonical(token):
            raise InvalidToken()
        try:
            payload = jwt.decode(token, self._secret, algorithms=[_ALGORITHM])
        except ExpiredSignatureError as exc:
            raise ExpiredToken() from exc
        except JOSEError as exc:
            raise InvalidToken() from exc

        subject = payload.get("sub")
        issued_at = payload.get("iat")
        expires_at = payload.get("exp")
        if not isinstance(subject, str) or not subject:
            raise InvalidToken()
        if not _is_int(issued_at):
            raise InvalidToken()
        if expires_at is not None and not _is_int(expires_at):
            raise InvalidToken()
        return TokenClaims(subject=subject, issued_at=issued_at, expires_at=expires_at)


def _is_int(value) -> bool:
    # bool is an int subclass; a claim of `true` is not a timestamp.
    return isinstance(value, int) and not isinstance(value, bool)


def _is_canonical(token: str) -> bool:
    """True if token is three base64url segments that re-encode to themselves."""
    segments = token.split(".")
    if len(segments) != 3:
        return False
    for segment in segments:
        raw = segment.encode("ascii", errors="replace")
        try:
            if base64url_encode(base64url_decode(raw)) != raw:
                return False
        except (binascii.Error, ValueError, TypeError):
            return False
    return True
