"""Draw session controller: ad gate, sampling and image fetch."""

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

from ziora.domain.draws import DrawKind, DrawOutcome, DrawState
from ziora.domain.errors import ImageNotFound
from ziora.domain.photos import GachaScope, PhotoRecord
from ziora.services.ads import AdCadenceGate
from ziora.services.images import ImageService
from ziora.services.sampling import RandomPhotoSampler

logger = logging.getLogger(__name__)

MAX_RESAMPLES = 3


@dataclass
class DrawSession:
    """Owns the draw state of one interactive session.

    Only one draw runs at a time; a draw requested while another is in
    flight returns ``DrawKind.BUSY`` without touching the state. Once the ad
    gate has counted a draw, the new state is kept even if the photo query
    or the image download fails afterwards.
    """

    gate: AdCadenceGate
    sampler: RandomPhotoSampler
    images: ImageService
    viewer_id: UUID | None = None
    state: DrawState = field(default_factory=DrawState)
    seen_photo_ids: set[UUID] = field(default_factory=set)
    reset_at: datetime | None = None
    max_resamples: int = MAX_RESAMPLES
    _in_flight: bool = field(default=False, init=False, repr=False)

    @property
    def is_drawing(self) -> bool:
        return self._in_flight

    async def draw(self, scope: GachaScope | None = None) -> DrawOutcome:
        """Run one draw and return what it produced."""
        if self._in_flight:
            return DrawOutcome(kind=DrawKind.BUSY, draw_count=self.state.draw_count)
        self._in_flight = True
        try:
            return await self._draw(scope or GachaScope.world())
        finally:
            self._in_flight = False

    def reset_seen(self) -> None:
        """Forget seen photos and prefer photos submitted from now on."""
        self.seen_photo_ids = set()
        self.reset_at = datetime.now(tz=UTC)

    async def _draw(self, scope: GachaScope) -> DrawOutcome:
        decision = self.gate.decide(self.state)
        self.state = decision.state
        draw_count = self.state.draw_count
        if decision.show_ad:
            return DrawOutcome(kind=DrawKind.AD, draw_count=draw_count)

        for _ in range(self.max_resamples + 1):
            excluded = frozenset(self.seen_photo_ids)
            photo = await asyncio.to_thread(self._pick, scope, excluded)
            if photo is None:
                kind = DrawKind.COMPLETED if self.seen_photo_ids else DrawKind.EMPTY
                return DrawOutcome(kind=kind, draw_count=draw_count)
            try:
                image = await self.images.fetch_thumbnail(photo.image_ref)
            except ImageNotFound:
                logger.warning(
                    "Skipping photo with missing image",
                    extra={"photo_id": str(photo.id), "image_ref": photo.image_ref},
                )
                self.seen_photo_ids.add(photo.id)
                continue
            self.seen_photo_ids.add(photo.id)
            return DrawOutcome(
                kind=DrawKind.PHOTO, draw_count=draw_count, photo=photo, image=image
            )

        logger.warning("Giving up after repeated missing images")
        return DrawOutcome(kind=DrawKind.EMPTY, draw_count=draw_count)

    def _pick(self, scope: GachaScope, excluded: frozenset[UUID]) -> PhotoRecord | None:
        if self.reset_at is not None and scope.is_global:
            recent = self.sampler.sample_recent(
                self.reset_at,
                excluded_owner_id=self.viewer_id,
                excluded_photo_ids=excluded,
            )
            if recent is not None:
                return recent
        return self.sampler.sample(
            scope, excluded_owner_id=self.viewer_id, excluded_photo_ids=excluded
        )


@dataclass
class _SessionEntry:
    session: DrawSession
    last_used_at: datetime


@dataclass
class DrawSessionRegistry:
    """Keeps open draw sessions by id.

    Sessions idle for longer than ``idle_ttl_seconds`` are dropped, and once
    ``max_sessions`` are open the least recently used one makes room.
    """

    factory: Callable[[UUID | None], DrawSession]
    idle_ttl_seconds: int = 1800
    max_sessions: int = 10_000
    _sessions: OrderedDict[UUID, _SessionEntry] = field(
        default_factory=OrderedDict, init=False, repr=False
    )

    def __len__(self) -> int:
        return len(self._sessions)

    def open(self, viewer_id: UUID | None = None) -> UUID:
        """Start a session and return its id."""
        now = datetime.now(tz=UTC)
        self._evict_idle(now)
        session_id = uuid4()
        self._sessions[session_id] = _SessionEntry(
            session=self.factory(viewer_id), last_used_at=now
        )
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info(
                "Evicted draw session to make room",
                extra={"session_id": str(evicted_id)},
            )
        return session_id

    def get(self, session_id: UUID) -> DrawSession | None:
        """Return an open session, if any, and mark it as used."""
        now = datetime.now(tz=UTC)
        self._evict_idle(now)
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        entry.last_used_at = now
        self._sessions.move_to_end(session_id)
        return entry.session

    def close(self, session_id: UUID) -> bool:
        """Discard a session and its draw state."""
        return self._sessions.pop(session_id, None) is not None

    def _evict_idle(self, now: datetime) -> None:
        # Entries are ordered by last use, so the idle ones sit at the front.
        cutoff = now - timedelta(seconds=self.idle_ttl_seconds)
        while self._sessions:
            session_id, entry = next(iter(self._sessions.items()))
            if entry.last_used_at > cutoff:
                return
            del self._sessions[session_id]
