"""
auth/credentials.py -- Password hashing and the CredentialStore.

Security design decisions:
  Passwords: bcrypt, used directly (no passlib wrapper). The work factor
       comes from Settings.bcrypt_rounds and is fixed for the life of the
       process. Inputs are UTF-8 encoded and cut to bcrypt's 72-byte limit
       the same way on hash and on verify, so bcrypt 4.x and 5.x behave alike.

  Unknown usernames: verify_password() returns False, exactly as for a wrong
       password. It also runs bcrypt against a dummy hash of the same cost so
       response time does not reveal whether a username exists [C1].

  The raw password is never stored and never logged.

Layer rule: no imports from api/ or messages/.
"""

from __future__ import annotations

import logging

import bcrypt
from sqlalchemy.exc import IntegrityError

from auth.exceptions import DuplicateIdentity, NotFound
from auth.models import User
from auth.store import UserStore
from core.config import Settings

logger = logging.getLogger("messagely.auth")

_BCRYPT_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str, rounds: int) -> str:
    """Return a salted bcrypt hash of plain at the given cost."""
    return bcrypt.hashpw(_encode(plain), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def check_password(plain: str, hashed: str) -> bool:
    """Return True if plain matches the bcrypt hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except ValueError:
        return False


class CredentialStore:
    """Registers identities and checks their passwords.

    Settings is injected once at startup; the work factor is read from it
    here and nowhere else.
    """

    def __init__(self, users: UserStore, settings: Settings) -> None:
        self._users = users
        self._rounds = settings.bcrypt_rounds
        # Computed once so the first unknown-user check is not slower than later ones.
        self._dummy_hash = hash_password("messagely_timing_dummy", self._rounds)

    def register(self, user: User, raw_password: str) -> User:
        """Hash raw_password and persist the new identity.

        Raises DuplicateIdentity if the username is taken, including when two
        concurrent registrations race for the same name (IntegrityError).
        """
        if self._users.get_by_username(user.username) is not None:
            raise DuplicateIdentity()
        password_hash = hash_password(raw_password, self._rounds)
        try:
            created = self._users.create_user(user, password_hash)
        except IntegrityError as exc:
            raise DuplicateIdentity() from exc
        logger.info("Registered user %s", created.username)
        return created

    def verify_password(self, username: str, raw_password: str) -> bool:
        stored = self._users.get_password_hash(username)
        if stored is None:
            # Equalize timing -- do NOT return before running bcrypt [C1]
            check_password(raw_password, self._dummy_hash)
            return False
        return check_password(raw_password, stored)

    def record_login(self, username: str) -> str:
        """Set last_login_at to now and return it. Raises NotFound for unknown users."""
        stamp = self._users.update_last_login(username)
        if stamp is None:
            raise NotFound(f"No such user: {username}")
        return stamp
