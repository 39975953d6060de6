from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, Sequence

from ..core.enums import RegistrationStatus
from .model import Registration


class RegistrationRepository(Protocol):
    def get_by_id(self, registration_id: str) -> Optional[Registration]:
        raise NotImplementedError

    def find_by_email(self, email: str) -> Optional[Registration]:
        """Match on the normalized primary attendee email."""

        raise NotImplementedError

    def find_by_short_code(self, short_code: str) -> Optional[Registration]:
        raise NotImplementedError

    def find_by_suffix(self, suffix: str) -> Sequence[Registration]:
        raise NotImplementedError

    def find_by_phone(self, phones: Sequence[str]) -> Optional[Registration]:
        raise NotImplementedError

    def list_by_status(
        self,
        statuses: Sequence[RegistrationStatus],
        *,
        limit: Optional[int] = None,
    ) -> Sequence[Registration]:
        raise NotImplementedError

    def list_all(self, *, limit: Optional[int] = None) -> Sequence[Registration]:
        raise NotImplementedError

    def list_waitlisted(self) -> Sequence[Registration]:
        """Waitlisted registrations, oldest ``waitlistedAt`` first."""

        raise NotImplementedError

    def create_unique(self, registration: Registration) -> Registration:
        """Insert ``registration`` unless its primary email is already registered.

        The check and the insert happen atomically; raises DuplicateEmailError.
        """

        raise NotImplementedError

    def update_fields(self, registration_id: str, fields: dict[str, Any]) -> None:
        raise NotImplementedError

    def mutate(
        self,
        registration_id: str,
        fn: Callable[[Registration], Registration],
    ) -> Registration:
        """Transactional read-modify-write.

        Re-reads the document, applies ``fn`` and writes the result with a
        bumped ``version``. ``fn`` may raise to abort without writing.
        """

        raise NotImplementedError

    def count_by_status(self, statuses: Sequence[RegistrationStatus]) -> int:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError

    def list_page(
        self,
        *,
        status: Optional[RegistrationStatus] = None,
        limit: int,
        start_after: Optional[str] = None,
    ) -> Sequence[Registration]:
        """Newest first; ``start_after`` is the ID of the last registration already seen."""

        raise NotImplementedError
