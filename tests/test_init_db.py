import asyncio

from conftest import FakeAsyncSession, FakeResult, entity_handler, make_user
from app.db import init_db
from app.models.user import User


def test_seed_admin_skipped_without_email(monkeypatch) -> None:
    monkeypatch.setattr(init_db.settings, "seed_admin_email", "")
    session = FakeAsyncSession()

    assert asyncio.run(init_db.seed_admin(session)) is None
    assert session.added == []


def test_seed_admin_creates_admin(monkeypatch) -> None:
    monkeypatch.setattr(init_db.settings, "seed_admin_email", " Root@Example.com ")
    session = FakeAsyncSession()

    user = asyncio.run(init_db.seed_admin(session))

    assert user.email == "root@example.com"
    assert user.role == "admin"
    assert session.added == [user]
    assert session.committed is True


def test_seed_admin_is_idempotent(monkeypatch) -> None:
    monkeypatch.setattr(init_db.settings, "seed_admin_email", "root@example.com")
    existing = make_user(email="root@example.com", role="admin")
    session = FakeAsyncSession().on_execute(entity_handler(User, FakeResult(scalar=existing)))

    assert asyncio.run(init_db.seed_admin(session)) is existing
    assert session.added == []
