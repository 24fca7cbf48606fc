"""
auth/dependencies.py -- AuthenticationGate and the FastAPI Depends() helper.

One auth method: a header (name from Settings.auth_header_name, default
Authorization) carrying "Bearer <token>".

AuthenticationGate.authenticate() is framework-light: it needs only an object
with a .headers mapping, so it is unit-testable without an app. Every failure
(header absent, wrong scheme, extra parts, InvalidToken, ExpiredToken) becomes
the same Unauthenticated. The specific cause is logged at DEBUG only.

get_current_identity() is the dependency route handlers declare. It returns
an immutable VerifiedIdentity that the handler passes on explicitly. Nothing
is written to request.state.

Layer rule: no imports from api/ or messages/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Protocol

from fastapi import Request

from auth.exceptions import ExpiredToken, InvalidToken, Unauthenticated
from auth.models import VerifiedIdentity
from auth.tokens import TokenIssuer

logger = logging.getLogger("messagely.auth")

_SCHEME = "bearer"


class _HasHeaders(Protocol):
    headers: Mapping[str, str]


class AuthenticationGate:
    """Turns an inbound request into a VerifiedIdentity or refuses it."""

    def __init__(self, issuer: TokenIssuer, header_name: str = "Authorization") -> None:
        self._issuer = issuer
        self._header_name = header_name

    def authenticate(self, request: _HasHeaders) -> VerifiedIdentity:
        token = self._extract(request.headers.get(self._header_name))
        try:
            claims = self._issuer.verify(token)
        except (InvalidToken, ExpiredToken) as exc:
            logger.debug("Rejected token: %s", exc.code)
            raise Unauthenticated() from exc
        return VerifiedIdentity(
            username=claims.subject,
            issued_at=claims.issued_at,
            expires_at=claims.expires_at,
        )

    @staticmethod
    def _extract(header_value: str | None) -> str:
        if not header_value:
            logger.debug("Rejected request: missing auth header")
            raise Unauthenticated()
        parts = header_value.split()
        if len(parts) != 2 or parts[0].lower() != _SCHEME:
            logger.debug("Rejected request: malformed auth header")
            raise Unauthenticated()
        return parts[1]


def get_current_identity(request: Request) -> VerifiedIdentity:
    """Require authentication. Raises Unauthenticated (HTTP 401) on any failure.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: VerifiedIdentity = Depends(get_current_identity)): ...
    """
    gate: AuthenticationGate = request.app.state.auth_gate
    return gate.authenticate(request)
