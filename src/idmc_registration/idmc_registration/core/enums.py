from __future__ import annotations

from enum import Enum


class RegistrationStatus(str, Enum):
    """Lifecycle of a registration document."""

    PENDING_PAYMENT = "pending_payment"
    PENDING_VERIFICATION = "pending_verification"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    WAITLISTED = "waitlisted"
    WAITLIST_OFFERED = "waitlist_offered"
    WAITLIST_EXPIRED = "waitlist_expired"


class PaymentMethod(str, Enum):
    GCASH = "gcash"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    UPLOADED = "uploaded"
    SENT = "sent"
    FAILED = "failed"


class CheckInMethod(str, Enum):
    QR = "qr"
    MANUAL = "manual"


class AdminRole(str, Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    VOLUNTEER = "volunteer"


class AdminStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"


class ActivityType(str, Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"
    REJECT = "reject"
    CHECKIN = "checkin"
    EXPORT = "export"
    SETTINGS = "settings"


class EntityType(str, Enum):
    USER = "user"
    REGISTRATION = "registration"
    SPEAKER = "speaker"
    SESSION = "session"
    WORKSHOP = "workshop"
    FAQ = "faq"
    SETTINGS = "settings"
    PRICING = "pricing"
    INQUIRY = "inquiry"
    INVOICE = "invoice"
    FEEDBACK = "feedback"


class InquiryStatus(str, Enum):
    NEW = "new"
    READ = "read"
    REPLIED = "replied"


class EmailType(str, Enum):
    """Communication flags tracked on a registration."""

    CONFIRMATION = "confirmation"
    REMINDER = "reminder"
    TICKET = "ticket"


class AvailabilityStatus(str, Enum):
    OPEN = "open"
    WAITLIST = "waitlist"
    CLOSED = "closed"
