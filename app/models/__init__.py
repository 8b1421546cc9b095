from app.models.loan import LoanProduct
from app.models.loan_application import LoanApplication
from app.models.payment import PaymentRecord
from app.models.user import User

__all__ = [
    "LoanApplication",
    "LoanProduct",
    "PaymentRecord",
    "User",
]
