"""Firestore collection and document names."""

REGISTRATIONS = "registrations"
ADMINS = "admins"
SESSIONS = "sessions"
SPEAKERS = "speakers"
FAQ = "faq"
CONTACT_INQUIRIES = "contactInquiries"
ACTIVITY_LOGS = "activityLogs"
CHECKIN_LOGS = "checkInLogs"
BANK_ACCOUNTS = "bankAccounts"
DOWNLOADS = "downloads"
WHAT_TO_BRING = "whatToBring"
FOOD_MENU = "foodMenu"
STATS = "stats"
SETTINGS = "settings"
CONFERENCES = "conferences"
FEEDBACK = "feedback"

CONFERENCE_SETTINGS_DOC = "conference-settings"
PRICING_TIERS = "pricingTiers"
STATS_DOC = "conference"
INVOICE_COUNTER_DOC = "invoiceCounter"
