"""
auth/policy.py -- Ownership and participation rules (AuthorizationPolicy).

Every check here is a pure function of the caller's verified identity and the
ownership fields of the target resource. No I/O, no hidden state, no role or
admin override. Username comparison is exact and case-sensitive.

Resource existence is not decided here. Callers fetch the resource first and
raise NotFound themselves; a policy function only ever sees a real resource.

Each check returns a Decision. Decision.enforce() turns a deny into Forbidden,
so a service reads as: load -> decide -> enforce -> act.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from auth.exceptions import Forbidden
from auth.models import VerifiedIdentity
from messages.models import Message

ListingScope = Literal["owner", "any_authenticated"]


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(allowed=False, reason=reason)

    def enforce(self) -> None:
        """Raise Forbidden if this decision is a deny."""
        if not self.allowed:
            raise Forbidden()


def ensure_self(target_username: str, identity: VerifiedIdentity) -> Decision:
    """Allow only when the caller is the target user.

    Guards profile detail and per-owner message listings.
    """
    if identity.username == target_username:
        return Decision.allow()
    return Decision.deny("caller is not the target user")


def ensure_participant(message: Message, identity: VerifiedIdentity) -> Decision:
    """Allow the sender or the recipient of message. Guards message detail reads."""
    if identity.username in (message.from_username, message.to_username):
        return Decision.allow()
    return Decision.deny("caller is neither sender nor recipient")


def ensure_recipient(message: Message, identity: VerifiedIdentity) -> Decision:
    """Allow only the recipient. Guards mark-as-read; the sender is refused."""
    if identity.username == message.to_username:
        return Decision.allow()
    return Decision.deny("caller is not the recipient")


def ensure_can_list(owner_username: str, identity: VerifiedIdentity, scope: ListingScope) -> Decision:
    """Decide whether identity may list owner_username's sent/received messages.

    scope comes from Settings.message_listing_scope. "owner" applies
    ensure_self; "any_authenticated" lets every verified caller through.
    """
    if scope == "any_authenticated":
        return Decision.allow()
    return ensure_self(owner_username, identity)
