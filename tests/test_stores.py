"""Unit tests for auth/store.py and messages/store.py.

Covers:
- UserStore never returns the password hash through User or UserProfile
- update_last_login() reports missing users with None
- MessageStore.create/get/get_detail/list_to/list_from
- mark_read() writes read_at once and leaves it alone afterwards
"""

import pytest
from sqlalchemy.exc import IntegrityError

from auth.models import User
from messages.store import MessageStore


def _add(user_store, username: str) -> User:
    return user_store.create_user(
        User(username=username, first_name=username.title(), last_name="Test", phone="555-0100"),
        password_hash="$2b$04$notarealhashbutfinefortheselookups",
    )


@pytest.fixture
def people(user_store):
    for name in ("alice", "bob", "carol"):
        _add(user_store, name)


class TestUserStore:
    def test_create_and_get(self, user_store):
        created = _add(user_store, "alice")
        fetched = user_store.get_by_username("alice")
        assert fetched == created
        assert fetched.last_login_at is None

    def test_get_missing_returns_none(self, user_store):
        assert user_store.get_by_username("nobody") is None
        assert user_store.get_password_hash("nobody") is None

    def test_duplicate_raises_integrity_error(self, user_store):
        _add(user_store, "alice")
        with pytest.raises(IntegrityError):
            _add(user_store, "alice")

    def test_hash_is_not_exposed(self, user_store, people):
        for value in (user_store.get_by_username("alice"), *user_store.list_users()):
            assert "notarealhash" not in repr(value)

    def test_list_users_is_ordered(self, user_store, people):
        assert [u.username for u in user_store.list_users()] == ["alice", "bob", "carol"]

    def test_update_last_login(self, user_store, people):
        stamp = user_store.update_last_login("alice")
        assert user_store.get_by_username("alice").last_login_at == stamp
        assert user_store.update_last_login("nobody") is None


class TestMessageStore:
    def test_create_and_get(self, message_store: MessageStore, people):
        sent = message_store.create("alice", "bob", "hello")
        assert sent.id is not None
        assert sent.read_at is None
        assert message_store.get(sent.id) == sent

    def test_get_missing_returns_none(self, message_store, people):
        assert message_store.get(999) is None
        assert message_store.get_detail(999) is None
        assert message_store.mark_read(999) is None

    def test_unknown_recipient_violates_foreign_key(self, message_store, people):
        with pytest.raises(IntegrityError):
            message_store.create("alice", "nobody", "hello")

    def test_detail_has_both_profiles(self, message_store, people):
        sent = message_store.create("alice", "bob", "hello")
        detail = message_store.get_detail(sent.id)
        assert detail.body == "hello"
        assert detail.from_user.username == "alice"
        assert detail.from_user.first_name == "Alice"
        assert detail.to_user.username == "bob"

    def test_listings(self, message_store, people):
        m1 = message_store.create("alice", "bob", "one")
        m2 = message_store.create("carol", "bob", "two")
        message_store.create("bob", "alice", "three")

        inbox = message_store.list_to("bob")
        assert [m.id for m in inbox] == [m1.id, m2.id]
        assert [m.other_user.username for m in inbox] == ["alice", "carol"]

        outbox = message_store.list_from("alice")
        assert [m.body for m in outbox] == ["one"]
        assert outbox[0].other_user.username == "bob"

        assert message_store.list_from("carol")[0].other_user.username == "bob"
        assert message_store.list_to("carol") == []

    def test_mark_read_is_write_once(self, message_store, people):
        sent = message_store.create("alice", "bob", "hello")
        first = message_store.mark_read(sent.id)
        assert first.read_at is not None
        second = message_store.mark_read(sent.id)
        assert second.read_at == first.read_at
        assert message_store.get(sent.id).read_at == first.read_at
