"""
messages/service.py -- The boundary operations as explicit pipelines.

Each method is one readable sequence:

    load resource (NotFound if missing) -> policy decision -> enforce -> act

Authentication has already happened by the time a method that takes a
VerifiedIdentity is called: the route obtains the identity from
get_current_identity() and passes it in as an argument. Nothing here reads
per-request state from anywhere else.

login and register are the two unauthenticated operations.
"""

from __future__ import annotations

import logging

from auth.credentials import CredentialStore
from auth.exceptions import InvalidCredentials, NotFound
from auth.models import User, UserProfile, VerifiedIdentity
from auth.policy import Decision, ListingScope, ensure_can_list, ensure_participant, ensure_recipient, ensure_self
from auth.store import UserStore
from auth.tokens import TokenIssuer
from messages.models import Message, MessageDetail, MessageSummary
from messages.store import MessageStore

logger = logging.getLogger("messagely.messages")


class MessagingService:
    def __init__(
        self,
        *,
        credentials: CredentialStore,
        users: UserStore,
        messages: MessageStore,
        tokens: TokenIssuer,
        listing_scope: ListingScope = "owner",
    ) -> None:
        self._credentials = credentials
        self._users = users
        self._messages = messages
        self._tokens = tokens
        self._listing_scope = listing_scope

    # ------------------------------------------------------------------
    # Unauthenticated
    # ------------------------------------------------------------------

    def login(self, username: str, password: str) -> str:
        """Verify credentials, stamp last_login_at, return a token.

        Unknown user and wrong password both raise InvalidCredentials.
        """
        if not self._credentials.verify_password(username, password):
            logger.info("Failed login for %r", username)
            raise InvalidCredentials()
        self._credentials.record_login(username)
        return self._tokens.issue(username)

    def register(self, user: User, password: str) -> str:
        """Create the identity, log it in, and return a token."""
        created = self._credentials.register(user, password)
        self._credentials.record_login(created.username)
        return self._tokens.issue(created.username)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def list_users(self, identity: VerifiedIdentity) -> list[UserProfile]:
        """Any authenticated caller may see the user directory."""
        return self._users.list_users()

    # User-targeted checks need only the username from the path, so the
    # decision runs before the lookup and another caller cannot probe which
    # usernames exist.

    def get_user(self, identity: VerifiedIdentity, username: str) -> User:
        _enforce(ensure_self(username, identity), identity)
        return self._require_user(username)

    def messages_to(self, identity: VerifiedIdentity, username: str) -> list[MessageSummary]:
        _enforce(ensure_can_list(username, identity, self._listing_scope), identity)
        self._require_user(username)
        return self._messages.list_to(username)

    def messages_from(self, identity: VerifiedIdentity, username: str) -> list[MessageSummary]:
        _enforce(ensure_can_list(username, identity, self._listing_scope), identity)
        self._require_user(username)
        return self._messages.list_from(username)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def get_message(self, identity: VerifiedIdentity, message_id: int) -> MessageDetail:
        message = self._require_message(message_id)
        _enforce(ensure_participant(message, identity), identity)
        detail = self._messages.get_detail(message_id)
        if detail is None:
            raise NotFound(f"No such message: {message_id}")
        return detail

    def send_message(self, identity: VerifiedIdentity, to_username: str, body: str) -> Message:
        """Send body from the caller to to_username.

        The sender is always the verified caller; there is no way to send on
        someone else's behalf.
        """
        self._require_user(to_username)
        message = self._messages.create(identity.username, to_username, body)
        logger.info("Message %s sent from %s to %s", message.id, identity.username, to_username)
        return message

    def mark_read(self, identity: VerifiedIdentity, message_id: int) -> Message:
        """Mark a message read. Only the recipient may do this.

        Repeating it is a no-op: the message comes back with its original
        read_at.
        """
        message = self._require_message(message_id)
        _enforce(ensure_recipient(message, identity), identity)
        updated = self._messages.mark_read(message_id)
        if updated is None:
            raise NotFound(f"No such message: {message_id}")
        return updated

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_user(self, username: str) -> User:
        user = self._users.get_by_username(username)
        if user is None:
            raise NotFound(f"No such user: {username}")
        return user

    def _require_message(self, message_id: int) -> Message:
        message = self._messages.get(message_id)
        if message is None:
            raise NotFound(f"No such message: {message_id}")
        return message


def _enforce(decision: Decision, identity: VerifiedIdentity) -> None:
    if not decision.allowed:
        logger.info("Denied %s: %s", identity.username, decision.reason)
    decision.enforce()
