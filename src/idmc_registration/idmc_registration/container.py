from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .activity_log.firestore_activity_log_repository import FirestoreActivityLogRepository
from .activity_log.service import ActivityLogService
from .admins.firestore_admin_repository import FirestoreAdminRepository
from .admins.service import AdminService, AuthService
from .checkin.firestore_checkin_log_repository import FirestoreCheckInLogRepository
from .checkin.service import CheckInService
from .content.firestore_content_repository import FirestoreContentRepository
from .content.service import ContentService
from .core.constants import CONFERENCE_YEAR
from .dashboard.service import DashboardService
from .feedback.firestore_feedback_repository import FirestoreFeedbackRepository
from .feedback.service import FeedbackService
from .firestore.client import FirestoreConfig, create_client
from .functions.client import CallableFunctionsClient
from .inquiries.firestore_inquiry_repository import FirestoreInquiryRepository
from .inquiries.service import InquiryService
from .invoices.firestore_invoice_repository import FirestoreInvoiceRepository
from .invoices.service import InvoiceService
from .registrations.firestore_registration_repository import FirestoreRegistrationRepository
from .registrations.service import RegistrationService
from .settings.firestore_settings_repository import FirestoreSettingsRepository
from .settings.service import SettingsService
from .stats.firestore_stats_repository import FirestoreStatsRepository
from .stats.service import StatsService
from .workshops.firestore_session_repository import FirestoreSessionRepository
from .workshops.service import WorkshopService


@dataclass(frozen=True)
class Container:
    activity_service: ActivityLogService
    settings_service: SettingsService
    workshop_service: WorkshopService
    registration_service: RegistrationService
    checkin_service: CheckInService
    invoice_service: InvoiceService
    admin_service: AdminService
    auth_service: AuthService
    inquiry_service: InquiryService
    stats_service: StatsService
    content_service: ContentService
    dashboard_service: DashboardService
    feedback_service: FeedbackService


def wire_services(
    *,
    registrations,
    sessions,
    checkin_logs,
    activity_logs,
    settings,
    invoices,
    admins,
    inquiries,
    stats,
    content,
    feedback,
    functions: CallableFunctionsClient,
    year: int = CONFERENCE_YEAR,
    timezone: str = "Asia/Manila",
) -> Container:
    """Assemble services from repositories (Firestore in the app, fakes in tests)."""

    activity_service = ActivityLogService(activity_logs)
    settings_service = SettingsService(settings, activity_service)
    workshop_service = WorkshopService(sessions)

    return Container(
        activity_service=activity_service,
        settings_service=settings_service,
        workshop_service=workshop_service,
        registration_service=RegistrationService(
            registrations, workshop_service, settings_service, activity_service, year=year
        ),
        checkin_service=CheckInService(registrations, checkin_logs, activity_service, timezone=timezone),
        invoice_service=InvoiceService(invoices, registrations, activity_service),
        admin_service=AdminService(admins, activity_service),
        auth_service=AuthService(admins, activity_service),
        inquiry_service=InquiryService(inquiries, functions, activity_service),
        stats_service=StatsService(stats, functions),
        content_service=ContentService(content, activity_service),
        dashboard_service=DashboardService(registrations, content, timezone=timezone),
        feedback_service=FeedbackService(feedback, activity_service),
    )


def build_container(*, firestore_config: dict[str, Any], functions_region: str, year: int = CONFERENCE_YEAR) -> Container:
    config = FirestoreConfig(
        project_id=str(firestore_config["project_id"]),
        credentials_path=firestore_config.get("credentials_path") or None,
        emulator_host=firestore_config.get("emulator_host") or None,
    )
    client = create_client(config)
    functions = CallableFunctionsClient(
        project_id=config.project_id,
        region=functions_region,
        base_url=firestore_config.get("functions_base_url") or None,
    )

    return wire_services(
        registrations=FirestoreRegistrationRepository(client),
        sessions=FirestoreSessionRepository(client),
        checkin_logs=FirestoreCheckInLogRepository(client),
        activity_logs=FirestoreActivityLogRepository(client),
        settings=FirestoreSettingsRepository(client),
        invoices=FirestoreInvoiceRepository(client),
        admins=FirestoreAdminRepository(client),
        inquiries=FirestoreInquiryRepository(client),
        stats=FirestoreStatsRepository(client),
        content=FirestoreContentRepository(client),
        feedback=FirestoreFeedbackRepository(client),
        functions=functions,
        year=year,
    )
