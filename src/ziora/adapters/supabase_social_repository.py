"""Supabase repository for likes, reports and blocks."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from ziora.adapters.supabase_query import execute
from ziora.domain.social import LikeRecord, ReportRecord
from ziora.services.social import SocialRepository


@dataclass
class SupabaseSocialRepository(SocialRepository):
    """Supabase implementation for social interactions."""

    client: Client

    def add_like(self, like: LikeRecord) -> bool:
        """Insert a like unless the viewer already liked the photo."""
        response = execute(
            self.client.table("photo_likes").upsert(
                {
                    "photo_id": str(like.photo_id),
                    "liker_id": str(like.liker_id),
                    "liker_country": like.liker_country,
                    "liker_country_code": like.liker_country_code,
                },
                on_conflict="photo_id,liker_id",
                ignore_duplicates=True,
            )
        )
        return bool(response.data)

    def remove_like(self, photo_id: UUID, liker_id: UUID) -> bool:
        """Delete a like and report whether one existed."""
        response = execute(
            self.client.table("photo_likes")
            .delete()
            .eq("photo_id", str(photo_id))
            .eq("liker_id", str(liker_id))
        )
        return bool(response.data)

    def adjust_like_count(self, photo_id: UUID, delta: int) -> None:
        """Atomically adjust the like counter via a database function."""
        execute(
            self.client.rpc(
                "adjust_like_count", {"target_id": str(photo_id), "delta": delta}
            )
        )

    def create_report(self, report: ReportRecord) -> None:
        """Insert a moderation report."""
        execute(
            self.client.table("reports").insert(
                {
                    "photo_id": str(report.photo_id),
                    "reporter_id": str(report.reporter_id),
                    "reason": report.reason,
                    "status": report.status,
                }
            )
        )

    def block_user(self, user_id: UUID, blocked_user_id: UUID) -> None:
        """Insert a block, ignoring repeats."""
        execute(
            self.client.table("blocked_users").upsert(
                {"user_id": str(user_id), "blocked_user_id": str(blocked_user_id)},
                on_conflict="user_id,blocked_user_id",
                ignore_duplicates=True,
            )
        )
