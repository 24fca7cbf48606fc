"""
api/routes/v1/users.py -- User directory, profile, and per-user message listings.

Routes:
  GET /api/v1/users                    -- basic info on all users
  GET /api/v1/users/{username}         -- profile detail (self only)
  GET /api/v1/users/{username}/to      -- messages received by username
  GET /api/v1/users/{username}/from    -- messages sent by username

Listing scope for /to and /from follows Settings.message_listing_scope
("owner" by default: self only).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import (
    InboxResponse,
    InboxRow,
    OutboxResponse,
    OutboxRow,
    UserDetail,
    UserDetailResponse,
    UserListResponse,
    UserSummary,
)
from auth.dependencies import get_current_identity
from auth.models import VerifiedIdentity
from messages.service import MessagingService

router = APIRouter()


@router.get("/users", response_model=UserListResponse)
def list_users(
    request: Request,
    identity: VerifiedIdentity = Depends(get_current_identity),
) -> UserListResponse:
    service: MessagingService = request.app.state.messaging
    return UserListResponse(users=[UserSummary.from_domain(u) for u in service.list_users(identity)])


@router.get("/users/{username}", response_model=UserDetailResponse)
def get_user(
    request: Request,
    username: str,
    identity: VerifiedIdentity = Depends(get_current_identity),
) -> UserDetailResponse:
    """Return the caller's own profile, including joined_at and last_login_at."""
    service: MessagingService = request.app.state.messaging
    return UserDetailResponse(user=UserDetail.from_user(service.get_user(identity, username)))


@router.get("/users/{username}/to", response_model=InboxResponse)
def messages_to(
    request: Request,
    username: str,
    identity: VerifiedIdentity = Depends(get_current_identity),
) -> InboxResponse:
    service: MessagingService = request.app.state.messaging
    rows = service.messages_to(identity, username)
    return InboxResponse(messages=[InboxRow.from_domain(r) for r in rows])


@router.get("/users/{username}/from", response_model=OutboxResponse)
def messages_from(
    request: Request,
    username: str,
    identity: VerifiedIdentity = Depends(get_current_identity),
) -> OutboxResponse:
    service: MessagingService = request.app.state.messaging
    rows = service.messages_from(identity, username)
    return OutboxResponse(messages=[OutboxRow.from_domain(r) for r in rows])
