from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base exception for business rule violations.

    Every error carries a string ``code`` so callers (and the JSON layer) can
    branch on it without parsing messages.
    """

    default_code = "DOMAIN_ERROR"

    def __init__(self, message: str, code: str | None = None, **details: Any):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    default_code = "INVALID_DATA"


class NotFoundError(DomainError):
    default_code = "NOT_FOUND"


class RegistrationError(DomainError):
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    INVALID_DATA = "INVALID_DATA"
    INVALID_STATUS = "INVALID_STATUS"
    CONFERENCE_FULL = "CONFERENCE_FULL"
    WAITLIST_FULL = "WAITLIST_FULL"
    WAITLIST_DISABLED = "WAITLIST_DISABLED"

    default_code = INVALID_DATA


class DuplicateEmailError(RegistrationError):
    def __init__(self, email: str, existing_registration_id: str | None):
        super().__init__(
            "A registration with this email already exists",
            RegistrationError.DUPLICATE_EMAIL,
            existing_registration_id=existing_registration_id,
        )
        self.email = email
        self.existing_registration_id = existing_registration_id


class CheckInError(DomainError):
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    ATTENDEE_ALREADY_CHECKED_IN = "ATTENDEE_ALREADY_CHECKED_IN"
    NOT_CHECKED_IN = "NOT_CHECKED_IN"
    NOT_CONFIRMED = "NOT_CONFIRMED"
    CANCELLED = "CANCELLED"
    INVALID_QR_CODE = "INVALID_QR_CODE"
    INVALID_ATTENDEE_INDEX = "INVALID_ATTENDEE_INDEX"
    UPDATE_FAILED = "UPDATE_FAILED"

    default_code = UPDATE_FAILED


class InvoiceError(DomainError):
    INVOICE_NOT_FOUND = "INVOICE_NOT_FOUND"
    NO_INVOICE_REQUEST = "NO_INVOICE_REQUEST"
    INVALID_STATUS = "INVALID_STATUS"
    REGISTRATION_NOT_CONFIRMED = "REGISTRATION_NOT_CONFIRMED"
    GENERATION_FAILED = "GENERATION_FAILED"

    default_code = GENERATION_FAILED


class AdminError(DomainError):
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    INVALID_ROLE = "INVALID_ROLE"
    ADMIN_NOT_FOUND = "ADMIN_NOT_FOUND"
    INVALID_STATUS = "INVALID_STATUS"
    INVALID_INVITATION = "INVALID_INVITATION"

    default_code = ADMIN_NOT_FOUND


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    default_code = "AUTHENTICATION_FAILED"


class AuthorizationError(DomainError):
    """Raised when an admin lacks permission for an action."""

    default_code = "FORBIDDEN"


class RemoteFunctionError(DomainError):
    default_code = "FUNCTION_FAILED"


NOT_FOUND_CODES = frozenset(
    {
        NotFoundError.default_code,
        RegistrationError.REGISTRATION_NOT_FOUND,
        InvoiceError.INVOICE_NOT_FOUND,
        AdminError.ADMIN_NOT_FOUND,
    }
)
