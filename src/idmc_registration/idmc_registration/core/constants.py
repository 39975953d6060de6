"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import AdminRole

CONFERENCE_YEAR = 2026

# Confusable characters (0/O, 1/I/L, 2/Z, 5/S, 8/B) are left out.
SAFE_SHORT_CODE_CHARS = "ACDEFGHJKMNPQRTUVWXY34679"
SHORT_CODE_LENGTH = 6
SHORT_CODE_SUFFIX_LENGTH = 4
REGISTRATION_ID_PREFIX = "REG"

PAYMENT_DEADLINE_DAYS = 7
WAITLIST_OFFER_HOURS = 48
INVITATION_EXPIRY_DAYS = 7

# Firestore has no substring queries, so fallbacks scan a bounded window.
SEARCH_MIN_LENGTH = 2
SEARCH_SCAN_MIN_LENGTH = 3
SEARCH_SCAN_LIMIT = 200
LOOKUP_SCAN_LIMIT = 500
SEARCH_RESULT_LIMIT = 20
# Admin search scans for partial names only on short terms.
ADMIN_SEARCH_SCAN_MAX_LENGTH = 10
REGISTRATION_PAGE_SIZE = 50

INVOICE_SEARCH_MIN_LENGTH = 3
INVOICE_SEARCH_LIMIT = 100
INVOICE_LIST_LIMIT = 50

CHECKIN_HOUR_START = 7
CHECKIN_HOUR_END = 18
RECENT_CHECKINS_LIMIT = 10

RECENT_REGISTRATIONS_LIMIT = 10
DASHBOARD_CHART_DAYS = 30

ACTIVITY_PAGE_SIZE = 25

FIRESTORE_BATCH_LIMIT = 500

ROLE_PERMISSIONS: dict[AdminRole, dict[str, bool]] = {
    AdminRole.SUPERADMIN: {
        "canManageUsers": True,
        "canManageSettings": True,
        "canManageContent": True,
        "canManageRegistrations": True,
        "canCheckIn": True,
        "canExport": True,
    },
    AdminRole.ADMIN: {
        "canManageUsers": False,
        "canManageSettings": True,
        "canManageContent": True,
        "canManageRegistrations": True,
        "canCheckIn": True,
        "canExport": True,
    },
    AdminRole.VOLUNTEER: {
        "canManageUsers": False,
        "canManageSettings": False,
        "canManageContent": False,
        "canManageRegistrations": False,
        "canCheckIn": True,
        "canExport": False,
    },
}

# Hours a waitlist offer stays open, tightened as the conference nears.
WAITLIST_DEADLINE_HOURS = {
    "LESS_THAN_12H": 2,
    "LESS_THAN_24H": 6,
    "LESS_THAN_48H": 12,
    "DEFAULT": WAITLIST_OFFER_HOURS,
}
