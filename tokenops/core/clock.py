"""
Clock implementations.

Record timestamps (alias createdAt, credential createdAt, transaction ids)
come from an injected clock so tests can pin them.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone


class SystemClock:
    """Wall-clock UTC time source."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def now_iso(self) -> str:
        return self.now().isoformat()


@dataclass
class FixedClock:
    """
    Manually advanced time source.

    now() returns the current instant; tick() advances it.
    """
    current: datetime = field(default_factory=lambda: datetime(2025, 1, 1, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self.current

    def now_iso(self) -> str:
        return self.current.isoformat()

    def tick(self, seconds: float = 1.0) -> None:
        self.current = self.current + timedelta(seconds=seconds)
