"""Domain models for gacha draws."""

from dataclasses import dataclass
from enum import StrEnum

from ziora.domain.photos import PhotoRecord

NO_AD_SHOWN = -100


@dataclass(frozen=True)
class DrawState:
    """Per-session counters used for ad cadence."""

    draw_count: int = 0
    last_ad_draw_index: int = NO_AD_SHOWN


@dataclass(frozen=True)
class AdDecision:
    """Outcome of the ad gate for a single draw."""

    show_ad: bool
    state: DrawState


class DrawKind(StrEnum):
    """What a draw produced."""

    AD = "ad"
    PHOTO = "photo"
    EMPTY = "empty"
    COMPLETED = "completed"
    BUSY = "busy"


@dataclass(frozen=True)
class DrawOutcome:
    """Result handed back to the caller of a draw."""

    kind: DrawKind
    draw_count: int
    photo: PhotoRecord | None = None
    image: bytes | None = None
