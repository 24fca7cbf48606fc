"""
API request and response models for Messagely REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
messages/models.py, which own the internal domain representation. Route
handlers map between the two.

No response model has a password field. That is the API half of the rule that
a password hash never leaves the store.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from auth.models import User, UserProfile
from messages.models import Message, MessageDetail, MessageSummary

# Usernames are path segments in /users/{username}; keep them to a safe charset.
USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"

# Profile text is trimmed. Usernames and passwords are taken byte for byte.
ProfileName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
Phone = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    username: str = Field(min_length=1, max_length=255)
    # bcrypt only looks at the first 72 bytes; the cap keeps request bodies sane.
    password: str = Field(min_length=1, max_length=255)


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register."""

    username: str = Field(min_length=1, max_length=255, pattern=USERNAME_PATTERN)
    password: str = Field(min_length=1, max_length=255)
    first_name: ProfileName
    last_name: ProfileName
    phone: Phone


class MessageCreate(BaseModel):
    """Request body for POST /api/v1/messages."""

    to_username: str = Field(min_length=1, max_length=255)
    body: str = Field(min_length=1, max_length=10_000)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class TokenResponse(BaseModel):
    """Returned by login and register."""

    token: str
    token_type: str = "bearer"


class UserSummary(BaseModel):
    username: str
    first_name: str
    last_name: str
    phone: str

    @classmethod
    def from_domain(cls, profile: UserProfile) -> "UserSummary":
        return cls(
            username=profile.username,
            first_name=profile.first_name,
            last_name=profile.last_name,
            phone=profile.phone,
        )


class UserDetail(UserSummary):
    joined_at: str
    last_login_at: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserDetail":
        return cls(
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            joined_at=user.joined_at,
            last_login_at=user.last_login_at,
        )


class UserListResponse(BaseModel):
    users: list[UserSummary]


class UserDetailResponse(BaseModel):
    user: UserDetail


class MessageOut(BaseModel):
    """A freshly sent message (POST /messages)."""

    id: int
    from_username: str
    to_username: str
    body: str
    sent_at: str

    @classmethod
    def from_domain(cls, message: Message) -> "MessageOut":
        return cls(
            id=message.id,
            from_username=message.from_username,
            to_username=message.to_username,
            body=message.body,
            sent_at=message.sent_at,
        )


class MessageCreatedResponse(BaseModel):
    message: MessageOut


class MessageDetailOut(BaseModel):
    id: int
    body: str
    sent_at: str
    read_at: Optional[str] = None
    from_user: UserSummary
    to_user: UserSummary

    @classmethod
    def from_domain(cls, detail: MessageDetail) -> "MessageDetailOut":
        return cls(
            id=detail.id,
            body=detail.body,
            sent_at=detail.sent_at,
            read_at=detail.read_at,
            from_user=UserSummary.from_domain(detail.from_user),
            to_user=UserSummary.from_domain(detail.to_user),
        )


class MessageDetailResponse(BaseModel):
    message: MessageDetailOut


class ReadReceipt(BaseModel):
    id: int
    read_at: str


class ReadReceiptResponse(BaseModel):
    message: ReadReceipt


class InboxRow(BaseModel):
    """GET /users/{username}/to row -- carries the sender."""

    id: int
    body: str
    sent_at: str
    read_at: Optional[str] = None
    from_user: UserSummary

    @classmethod
    def from_domain(cls, summary: MessageSummary) -> "InboxRow":
        return cls(
            id=summary.id,
            body=summary.body,
            sent_at=summary.sent_at,
            read_at=summary.read_at,
            from_user=UserSummary.from_domain(summary.other_user),
        )


class OutboxRow(BaseModel):
    """GET /users/{username}/from row -- carries the recipient."""

    id: int
    body: str
    sent_at: str
    read_at: Optional[str] = None
    to_user: UserSummary

    @classmethod
    def from_domain(cls, summary: MessageSummary) -> "OutboxRow":
        return cls(
            id=summary.id,
            body=summary.body,
            sent_at=summary.sent_at,
            read_at=summary.read_at,
            to_user=UserSummary.from_domain(summary.other_user),
        )


class InboxResponse(BaseModel):
    messages: list[InboxRow]


class OutboxResponse(BaseModel):
    messages: list[OutboxRow]


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
