from typing import Any, Dict


class FinanceError(Exception):
    """Base class for recoverable ledger / engine failures.

    Every failure leaves the ledger exactly as it was before the call.
    """

    code = "finance_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, **self.details}


class InvalidAmount(FinanceError):
    code = "invalid_amount"


class UnknownCategory(FinanceError):
    code = "category_not_found"


class InsufficientFunds(FinanceError):
    code = "insufficient_funds"


class InvalidRiskTier(FinanceError):
    code = "invalid_risk_tier"


class AuthenticationRequired(FinanceError):
    code = "authentication_required"


class AuthenticationError(FinanceError):
    # failed sign-in / sign-up, raised by the session store
    code = "authentication_failed"
