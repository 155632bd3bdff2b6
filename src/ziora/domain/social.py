"""Domain models for likes, reports and blocks."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class LikeRecord:
    """A viewer's like on a photo."""

    photo_id: UUID
    liker_id: UUID
    liker_country: str
    liker_country_code: str


@dataclass(frozen=True)
class ReportRecord:
    """A pending moderation report."""

    photo_id: UUID
    reporter_id: UUID
    reason: str
    status: str = "pending"
