"""
messages/store.py -- SQLAlchemy Core persistence layer for messages.

Pattern: Repository + Data Mapper (same as auth/store.py).

Single-record atomicity:
  mark_read() is one conditional UPDATE (... WHERE read_at IS NULL). Two
  concurrent mark-as-read calls cannot both write; the first timestamp wins
  and read_at never moves afterwards.

Listings join users so each row carries the other party's public profile.
The join selects named profile columns only -- never password_hash.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.engine import Engine

from auth.store import row_to_profile
from core.database import messages, now_iso, users
from messages.models import Message, MessageDetail, MessageSummary


def _profile_columns(alias, prefix: str) -> tuple:
    return (
        alias.c.username.label(f"{prefix}username"),
        alias.c.first_name.label(f"{prefix}first_name"),
        alias.c.last_name.label(f"{prefix}last_name"),
        alias.c.phone.label(f"{prefix}phone"),
    )


class MessageStore:
    """Repository for Message records."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create(self, from_username: str, to_username: str, body: str) -> Message:
        """Insert a message and return it with id and sent_at assigned."""
        sent_at = now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                messages.insert().values(
                    from_username=from_username,
                    to_username=to_username,
                    body=body,
                    sent_at=sent_at,
                )
            )
            conn.commit()
            message_id = result.inserted_primary_key[0]
        return Message(
            id=message_id,
            from_username=from_username,
            to_username=to_username,
            body=body,
            sent_at=sent_at,
        )

    def get(self, message_id: int) -> Message | None:
        """Fetch a message by id. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(messages.select().where(messages.c.id == message_id)).fetchone()
        return _row_to_message(row) if row is not None else None

    def get_detail(self, message_id: int) -> MessageDetail | None:
        """Fetch a message with both participants' profiles. Returns None if not found."""
        sender = users.alias("sender")
        recipient = users.alias("recipient")
        query = (
            select(
                messages.c.id,
                messages.c.body,
                messages.c.sent_at,
                messages.c.read_at,
                *_profile_columns(sender, "from_"),
                *_profile_columns(recipient, "to_"),
            )
            .select_from(
                messages.join(sender, sender.c.username == messages.c.from_username).join(
                    recipient, recipient.c.username == messages.c.to_username
                )
            )
            .where(messages.c.id == message_id)
        )
        with self.engine.connect() as conn:
            row = conn.execute(query).fetchone()
        if row is None:
            return None
        return MessageDetail(
            id=row.id,
            body=row.body,
            sent_at=row.sent_at,
            read_at=row.read_at,
            from_user=row_to_profile(row, "from_"),
            to_user=row_to_profile(row, "to_"),
        )

    def list_to(self, username: str) -> list[MessageSummary]:
        """Messages received by username, each with the sender's profile."""
        return self._list(owner_column=messages.c.to_username, other_column=messages.c.from_username, owner=username)

    def list_from(self, username: str) -> list[MessageSummary]:
        """Messages sent by username, each with the recipient's profile."""
        return self._list(owner_column=messages.c.from_username, other_column=messages.c.to_username, owner=username)

    def _list(self, owner_column, other_column, owner: str) -> list[MessageSummary]:
        other = users.alias("other")
        query = (
            select(
                messages.c.id,
                messages.c.body,
                messages.c.sent_at,
                messages.c.read_at,
                *_profile_columns(other, "other_"),
            )
            .select_from(messages.join(other, other.c.username == other_column))
            .where(owner_column == owner)
            .order_by(messages.c.id)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [
            MessageSummary(
                id=r.id,
                body=r.body,
                sent_at=r.sent_at,
                read_at=r.read_at,
                other_user=row_to_profile(r, "other_"),
            )
            for r in rows
        ]

    def mark_read(self, message_id: int) -> Message | None:
        """Set read_at if it is still NULL, then return the stored message.

        Returns None if the message does not exist. A message that was
        already read comes back unchanged.
        """
        with self.engine.connect() as conn:
            conn.execute(
                messages.update()
                .where((messages.c.id == message_id) & (messages.c.read_at.is_(None)))
                .values(read_at=now_iso())
            )
            conn.commit()
        return self.get(message_id)


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_message(row) -> Message:
    return Message(
        id=row.id,
        from_username=row.from_username,
        to_username=row.to_username,
        body=row.body,
        sent_at=row.sent_at,
        read_at=row.read_at,
    )
