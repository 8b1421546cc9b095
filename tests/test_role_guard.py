import asyncio

import pytest

from conftest import FakeAsyncSession, FakeResult, entity_handler, make_user
from app.api import deps
from app.core.security import Identity
from app.main import app
from app.models.user import User
from app.schemas.common import UserRole
from app.services import authz


def _session_with(user):
    return FakeAsyncSession().on_execute(entity_handler(User, FakeResult(scalar=user)))


@pytest.mark.parametrize(
    ("role", "required", "allowed"),
    [
        ("manager", {UserRole.MANAGER}, True),
        ("admin", {UserRole.MANAGER}, False),
        ("admin", {UserRole.MANAGER, UserRole.ADMIN}, True),
        ("borrower", {UserRole.ADMIN}, False),
    ],
)
def test_check_role(role, required, allowed) -> None:
    user = make_user(email="someone@example.com", role=role)
    decision = asyncio.run(authz.check_role(_session_with(user), user.email, required))
    assert decision.allowed is allowed
    assert decision.actual_role == UserRole(role)


def test_check_role_unknown_user_has_no_role() -> None:
    decision = asyncio.run(authz.check_role(FakeAsyncSession(), "ghost@example.com", {UserRole.ADMIN}))
    assert decision.allowed is False
    assert decision.actual_role is None


def test_check_role_tolerates_unrecognised_stored_role() -> None:
    user = make_user(email="odd@example.com", role="superuser")
    decision = asyncio.run(authz.check_role(_session_with(user), user.email, {UserRole.ADMIN}))
    assert decision.allowed is False
    assert decision.actual_role is None


def test_borrower_cannot_create_loan(client, sign_in, fake_db) -> None:
    sign_in(make_user(email="borrower@example.com", role="borrower"))

    response = client.post("/loans", json={"title": "Loan", "max_loan_limit": 100})

    assert response.status_code == 403
    body = response.json()
    assert body["status"] is False
    assert body["code"] == "forbidden"
    assert body["message"] == "Forbidden: manager access required"
    assert body["role"] == "borrower"
    assert fake_db.added == []


def test_unregistered_identity_is_forbidden_with_null_role(client) -> None:
    async def _ghost():
        return Identity(email="ghost@example.com")

    app.dependency_overrides[deps.get_current_identity] = _ghost

    response = client.get("/admin/users")

    assert response.status_code == 403
    assert response.json()["role"] is None


def test_manager_cannot_use_admin_routes(client, sign_in) -> None:
    sign_in(make_user(email="manager@example.com", role="manager"))

    response = client.get("/admin/loans")

    assert response.status_code == 403
    assert response.json()["message"] == "Forbidden: admin access required"
    assert response.json()["role"] == "manager"
