"""Tests for the SQLite verified store."""

from datetime import datetime, timezone

from services.store import VerifiedStore, VerifiedUser, new_verified_user


def test_get_missing_user(store):
    assert store.get(42) is None


def test_add_and_get(store):
    verified_at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert store.add(VerifiedUser(42, "Steve", verified_at))

    user = store.get(42)
    assert user == VerifiedUser(42, "Steve", verified_at)


def test_second_record_for_same_user_rejected(store):
    assert store.add(new_verified_user(42, "Steve"))
    assert not store.add(new_verified_user(42, "Alex"))
    assert store.get(42).minecraft_username == "Steve"
    assert store.count() == 1


def test_records_survive_reopen(tmp_path):
    path = str(tmp_path / "verified.db")

    first = VerifiedStore(path)
    first.add(new_verified_user(42, "Steve"))
    first.close()

    second = VerifiedStore(path)
    try:
        assert second.get(42).minecraft_username == "Steve"
        assert not second.add(new_verified_user(42, "Alex"))
    finally:
        second.close()


def test_new_verified_user_is_utc():
    user = new_verified_user(1, "Steve")
    assert user.verified_at.tzinfo is timezone.utc
