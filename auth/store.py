"""
auth/store.py -- SQLAlchemy Core persistence layer for users.

Pattern: Repository + Data Mapper (same as messages/store.py).
UserStore is the repository; _row_to_user is the mapper. Route, service and
dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  The password hash is never part of a User. get_password_hash() is the one
  read path for it, and CredentialStore is its only caller.

Layer rule: no imports from api/ or messages/.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.engine import Engine

from auth.models import User, UserProfile
from core.database import now_iso, users

# Every users column except password_hash.
_PUBLIC_COLUMNS = (
    users.c.username,
    users.c.first_name,
    users.c.last_name,
    users.c.phone,
    users.c.joined_at,
    users.c.last_login_at,
)


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore(create_db_engine("sqlite:///:memory:"))
        store.create_user(User(username="alice", ...), password_hash)
        user = store.get_by_username("alice")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create_user(self, user: User, password_hash: str) -> User:
        """Insert a new user and return it with joined_at filled in.

        Raises sqlalchemy.exc.IntegrityError if the username already exists.
        CredentialStore.register() translates that into DuplicateIdentity.
        """
        joined_at = now_iso()
        with self.engine.connect() as conn:
            conn.execute(
                users.insert().values(
                    username=user.username,
                    password_hash=password_hash,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    phone=user.phone,
                    joined_at=joined_at,
                )
            )
            conn.commit()
        return User(
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            joined_at=joined_at,
        )

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(select(*_PUBLIC_COLUMNS).where(users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_password_hash(self, username: str) -> str | None:
        """Return the stored bcrypt hash for username, or None if not found."""
        with self.engine.connect() as conn:
            return conn.execute(select(users.c.password_hash).where(users.c.username == username)).scalar()

    def list_users(self) -> list[UserProfile]:
        """Return basic info on all users ordered by username."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(users.c.username, users.c.first_name, users.c.last_name, users.c.phone).order_by(
                    users.c.username
                )
            ).fetchall()
        return [row_to_profile(r) for r in rows]

    def update_last_login(self, username: str) -> str | None:
        """Stamp the current UTC time as last_login_at.

        Returns the new timestamp, or None if no such user exists. A single
        UPDATE statement, so the write is atomic per record.
        """
        stamp = now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(users.update().where(users.c.username == username).values(last_login_at=stamp))
            conn.commit()
        return stamp if result.rowcount > 0 else None


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        username=row.username,
        first_name=row.first_name,
        last_name=row.last_name,
        phone=row.phone,
        joined_at=row.joined_at,
        last_login_at=row.last_login_at,
    )


def row_to_profile(row, prefix: str = "") -> UserProfile:
    """Map a row (optionally with prefixed labels, e.g. "from_") to a UserProfile."""
    mapping = row._mapping
    return UserProfile(
        username=mapping[f"{prefix}username"],
        first_name=mapping[f"{prefix}first_name"],
        last_name=mapping[f"{prefix}last_name"],
        phone=mapping[f"{prefix}phone"],
    )
