from fastapi import APIRouter

from app.api.routers import health, loan_applications, loans, meta, payments, users

api_router = APIRouter()
api_router.include_router(meta.router)
api_router.include_router(health.router)
api_router.include_router(users.router)
api_router.include_router(loans.router)
api_router.include_router(loan_applications.router)
api_router.include_router(payments.router)

__all__ = ["api_router"]
