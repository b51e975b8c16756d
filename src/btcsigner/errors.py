"""
Payment error taxonomy.

Every failure the caller can observe is a PaymentError; subclasses tag the
stage that failed.
"""

from __future__ import annotations

from typing import Any


class PaymentError(Exception):
    """Base error for batch payments, with optional diagnostic context."""

    code: int = 1070

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({details})"


class ValidationError(PaymentError):
    """Request failed structural validation."""

    def __init__(self, errors: list[str]):
        super().__init__("Invalid payment request", {"errors": list(errors)})
        self.errors = list(errors)


class InvalidAddress(PaymentError):
    pass


class InsufficientFunds(PaymentError):
    pass


class InvalidMnemonic(PaymentError):
    pass


class AddressGenerationFailed(PaymentError):
    pass


class SigningFailed(PaymentError):
    pass
