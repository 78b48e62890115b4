"""Read-only views of catalog data as the intake rules see it."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SalesRoundWindow:
    """A sales round's identity and its open interval."""

    id: int
    event_id: int
    window_start: datetime
    window_end: datetime

    def __post_init__(self) -> None:
        if self.window_start >= self.window_end:
            raise ValueError("Sales round window must start before it ends")

    def is_open(self, now: datetime) -> bool:
        return self.window_start <= now <= self.window_end


@dataclass(frozen=True)
class CatalogEntry:
    """A resolvable ticket type."""

    id: int
    event_id: int
    name: str
