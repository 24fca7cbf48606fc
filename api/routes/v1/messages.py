"""
api/routes/v1/messages.py -- Message detail, send, and mark-as-read.

Routes:
  GET  /api/v1/messages/{message_id}        -- detail (sender or recipient only)
  POST /api/v1/messages                     -- send as the caller
  POST /api/v1/messages/{message_id}/read   -- mark read (recipient only)

A missing message is 404 before any ownership check runs. A caller who is not
a participant gets 403 whatever the message contains.

Mark-as-read is idempotent: repeating it returns 200 with the original read_at.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request

from api.models import (
    MessageCreate,
    MessageCreatedResponse,
    MessageDetailOut,
    MessageDetailResponse,
    MessageOut,
    ReadReceipt,
    ReadReceiptResponse,
)
from auth.dependencies import get_current_identity
from auth.models import VerifiedIdentity
from messages.service import MessagingService

# Message ids are SQLite INTEGER keys; anything outside that range is a 422.
MessageId = Annotated[int, Path(ge=1, le=2**63 - 1)]

# Every message route requires authentication; the identity is declared per
# handler because each one passes it on to the service.
router = APIRouter()


@router.get("/messages/{message_id}", response_model=MessageDetailResponse)
def get_message(
    request: Request,
    message_id: MessageId,
    identity: VerifiedIdentity = Depends(get_current_identity),
) -> MessageDetailResponse:
    service: MessagingService = request.app.state.messaging
    return MessageDetailResponse(message=MessageDetailOut.from_domain(service.get_message(identity, message_id)))


@router.post("/messages", response_model=MessageCreatedResponse, status_code=201)
def send_message(
    request: Request,
    body: MessageCreate,
    identity: VerifiedIdentity = Depends(get_current_identity),
) -> MessageCreatedResponse:
    """Send a message from the authenticated caller. 404 if the recipient does not exist."""
    service: MessagingService = request.app.state.messaging
    message = service.send_message(identity, body.to_username, body.body)
    return MessageCreatedResponse(message=MessageOut.from_domain(message))


@router.post("/messages/{message_id}/read", response_model=ReadReceiptResponse)
def mark_read(
    request: Request,
    message_id: MessageId,
    identity: VerifiedIdentity = Depends(get_current_identity),
) -> ReadReceiptResponse:
    service: MessagingService = request.app.state.messaging
    message = service.mark_read(identity, message_id)
    return ReadReceiptResponse(message=ReadReceipt(id=message.id, read_at=message.read_at))
