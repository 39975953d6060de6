from __future__ import annotations

from typing import Any, Optional, Protocol


class StatsRepository(Protocol):
    def get_stats(self) -> Optional[dict[str, Any]]:
        raise NotImplementedError
