"""
messages/models.py -- Domain dataclasses for messages.

These are pure data containers with zero logic. Authorization over them lives
in auth/policy.py; persistence lives in messages/store.py.
"""

from dataclasses import dataclass
from typing import Optional

from auth.models import UserProfile


@dataclass
class Message:
    """A message from one user to another.

    read_at moves from None to a timestamp exactly once, via the recipient's
    mark-as-read. It is never cleared.

    id is None before the record is written to the database.
    """

    from_username: str
    to_username: str
    body: str
    sent_at: str = ""  # ISO 8601, set by store on insert
    read_at: Optional[str] = None
    id: Optional[int] = None


@dataclass
class MessageDetail:
    """A message with both participants' public profiles attached."""

    id: int
    body: str
    sent_at: str
    read_at: Optional[str]
    from_user: UserProfile
    to_user: UserProfile


@dataclass
class MessageSummary:
    """A row in a user's inbox or outbox.

    other_user is the sender for an inbox listing and the recipient for an
    outbox listing.
    """

    id: int
    body: str
    sent_at: str
    read_at: Optional[str]
    other_user: UserProfile
