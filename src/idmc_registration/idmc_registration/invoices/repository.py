from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..registrations.model import Registration


class InvoiceRepository(Protocol):
    def list_requests(
        self,
        *,
        status: Optional[str] = None,
        confirmed_only: bool = True,
        limit: int = 50,
    ) -> Sequence[Registration]:
        """Registrations with ``invoice.requested``, most recently verified first."""

        raise NotImplementedError

    def reserve_next_number(self, year: int) -> int:
        """Atomically bump the invoice counter; restarts at 1 for a new year."""

        raise NotImplementedError

    def count_requests(self, *, status: Optional[str] = None) -> int:
        """Confirmed registrations with an invoice request, optionally one invoice status."""

        raise NotImplementedError
