from __future__ import annotations

import logging
import math
import secrets
import string
import time
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.settings import settings
from app.models.loan import LoanProduct
from app.schemas.common import LIKE_ESCAPE, contains_pattern
from app.schemas.loans import LoanProductCreate, LoanProductUpdate
from app.services.exceptions import NotFound, ValidationFailed

logger = logging.getLogger(__name__)

_BASE36_ALPHABET = string.digits + string.ascii_uppercase

# Columns that must never be cleared by a partial update.
_NON_NULLABLE_UPDATE_FIELDS = {"title", "max_loan_limit", "required_documents", "emi_plans", "show_on_home"}


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_tracking_id(prefix: str | None = None, *, now_ms: int | None = None) -> str:
    """``PREFIX + base36(epoch millis) + 6 random base36 chars``, uppercased."""
    prefix = settings.loan_tracking_prefix if prefix is None else prefix
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(6))
    return f"{prefix}{to_base36(timestamp)}{suffix}".upper()


def validate_pagination(page: int, limit: int) -> tuple[int, int]:
    if page < 1:
        raise ValidationFailed("page must be a positive integer", details={"page": page})
    if limit < 1 or limit > settings.max_page_size:
        raise ValidationFailed(
            f"limit must be between 1 and {settings.max_page_size}",
            details={"limit": limit},
        )
    return page, limit


async def create_loan(db: AsyncSession, payload: LoanProductCreate, *, created_by: str) -> LoanProduct:
    loan = LoanProduct(
        tracking_id=generate_tracking_id(),
        title=payload.title,
        description=payload.description,
        category=payload.category,
        interest_rate=payload.interest_rate,
        max_loan_limit=payload.max_loan_limit,
        required_documents=list(payload.required_documents),
        emi_plans=list(payload.emi_plans),
        image_url=payload.image_url,
        show_on_home=bool(payload.show_on_home),
        created_by=created_by,
        created_at=datetime.now(timezone.utc),
    )
    db.add(loan)
    await db.flush()
    logger.info("Loan product created tracking_id=%s by=%s", loan.tracking_id, created_by)
    return loan


async def list_home_loans(db: AsyncSession, *, limit: int | None = None) -> list[LoanProduct]:
    stmt = (
        select(LoanProduct)
        .where(LoanProduct.show_on_home.is_(True))
        .order_by(LoanProduct.created_at.desc())
        .limit(limit or settings.home_loans_limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_loans_paginated(
    db: AsyncSession,
    *,
    page: int = 1,
    limit: int | None = None,
    search: str | None = None,
    category: str | None = None,
) -> tuple[list[LoanProduct], int, int, int]:
    """Return ``(items, total, page, limit)`` ordered newest first."""
    page, limit = validate_pagination(page, limit or settings.default_page_size)
    conditions = []
    if search and search.strip():
        conditions.append(LoanProduct.title.ilike(contains_pattern(search.strip()), escape=LIKE_ESCAPE))
    if category and category.strip():
        conditions.append(LoanProduct.category.ilike(contains_pattern(category.strip()), escape=LIKE_ESCAPE))

    count_stmt = select(func.count()).select_from(LoanProduct).where(*conditions)
    total = int((await db.execute(count_stmt)).scalar_one())

    stmt = (
        select(LoanProduct)
        .where(*conditions)
        .order_by(LoanProduct.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all()), total, page, limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


async def list_loans_by_manager(
    db: AsyncSession, manager_email: str, *, search: str | None = None
) -> list[LoanProduct]:
    conditions = [LoanProduct.created_by == manager_email]
    if search and search.strip():
        pattern = contains_pattern(search.strip())
        conditions.append(
            or_(
                LoanProduct.title.ilike(pattern, escape=LIKE_ESCAPE),
                LoanProduct.category.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    stmt = select(LoanProduct).where(*conditions).order_by(LoanProduct.created_at.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_all_loans(db: AsyncSession, *, category: str | None = None) -> list[LoanProduct]:
    stmt = select(LoanProduct)
    if category and category.strip():
        stmt = stmt.where(LoanProduct.category.ilike(contains_pattern(category.strip()), escape=LIKE_ESCAPE))
    stmt = stmt.order_by(LoanProduct.created_at.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_loan(db: AsyncSession, loan_id: UUID) -> LoanProduct:
    stmt = select(LoanProduct).where(LoanProduct.id == loan_id)
    result = await db.execute(stmt)
    loan = result.scalar_one_or_none()
    if loan is None:
        raise NotFound("Loan not found", details={"loan_id": str(loan_id)})
    return loan


async def update_loan(db: AsyncSession, loan_id: UUID, payload: LoanProductUpdate) -> LoanProduct:
    loan = await get_loan(db, loan_id)
    changes = payload.model_dump(exclude_unset=True)
    for name, value in changes.items():
        if value is None and name in _NON_NULLABLE_UPDATE_FIELDS:
            continue
        if name == "show_on_home":
            value = bool(value)
        setattr(loan, name, value)
    loan.updated_at = datetime.now(timezone.utc)
    db.add(loan)
    await db.flush()
    logger.info("Loan product updated id=%s fields=%s", loan.id, sorted(changes))
    return loan


async def set_show_on_home(db: AsyncSession, loan_id: UUID, show_on_home: bool) -> LoanProduct:
    loan = await get_loan(db, loan_id)
    loan.show_on_home = bool(show_on_home)
    loan.updated_at = datetime.now(timezone.utc)
    db.add(loan)
    await db.flush()
    return loan


async def delete_loan(db: AsyncSession, loan_id: UUID) -> LoanProduct:
    loan = await get_loan(db, loan_id)
    await db.delete(loan)
    await db.flush()
    logger.info("Loan product deleted id=%s tracking_id=%s", loan.id, loan.tracking_id)
    return loan
