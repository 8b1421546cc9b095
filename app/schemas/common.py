from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    BORROWER = "borrower"
    MANAGER = "manager"
    ADMIN = "admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class LoanApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApplicationFeeStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


def normalize_text(value: str | None) -> str | None:
    """Collapse whitespace and turn blank strings into ``None``."""
    if value is None:
        return None
    cleaned = " ".join(str(value).split())
    return cleaned or None


def normalize_email(value: str) -> str:
    return str(value).strip().lower()


LIKE_ESCAPE = "\\"


def contains_pattern(value: str) -> str:
    """``%value%`` for ILIKE with the LIKE wildcards in *value* matched literally (use ``escape=LIKE_ESCAPE``)."""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
