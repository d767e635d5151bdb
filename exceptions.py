"""
Domain-specific exceptions for the FitMarket backend.

Services raise these; the handler registered in main.py turns them into the
JSON error envelope with the matching HTTP status.
"""
from typing import Any, Dict, Optional

from fastapi import status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_response_body(self) -> Dict[str, Any]:
        return {
            "success": False,
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


class ValidationException(DomainException):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when the store or the payment processor fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# Specific business exceptions


class PaymentNotPendingException(NotFoundException):
    """Raised when a booking is unknown or was already finalized."""

    def __init__(self, booking_id: str):
        super().__init__(
            message="Payment not found or already updated",
            code="PAYMENT_NOT_PENDING",
            details={"booking_id": booking_id},
        )


class DuplicateSlotsException(ValidationException):
    """Raised when every proposed slot already exists for the trainer."""

    def __init__(self, trainer_id: str):
        super().__init__(
            message="All selected slots already exist",
            code="DUPLICATE_SLOTS",
            details={"trainer_id": trainer_id},
        )
