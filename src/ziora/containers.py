"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from uuid import UUID

from supabase import create_client

from ziora.adapters.supabase_blob_store import SupabaseBlobStore
from ziora.adapters.supabase_identity_provider import SupabaseIdentityProvider
from ziora.adapters.supabase_photo_repository import SupabasePhotoRepository
from ziora.adapters.supabase_social_repository import SupabaseSocialRepository
from ziora.config import Settings, parse_blocked_country_codes
from ziora.services.ads import AdCadenceGate
from ziora.services.cache import InMemoryImageCache
from ziora.services.draws import DrawSession, DrawSessionRegistry
from ziora.services.identity import IdentityService
from ziora.services.images import ImageService
from ziora.services.photos import PhotoService
from ziora.services.sampling import RandomPhotoSampler
from ziora.services.social import SocialService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_service: IdentityService
    photo_service: PhotoService
    image_service: ImageService
    social_service: SocialService
    draw_sessions: DrawSessionRegistry
    close_resources: Callable[[], Awaitable[None]]


def draw_session_factory(
    gate: AdCadenceGate, sampler: RandomPhotoSampler, images: ImageService
) -> Callable[[UUID | None], DrawSession]:
    """Return a factory that opens sessions sharing the given services."""

    def open_session(viewer_id: UUID | None) -> DrawSession:
        return DrawSession(
            gate=gate, sampler=sampler, images=images, viewer_id=viewer_id
        )

    return open_session


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    photo_repository = SupabasePhotoRepository(
        supabase_client, table=resolved_settings.photos_table
    )
    social_repository = SupabaseSocialRepository(supabase_client)
    identity_provider = SupabaseIdentityProvider(supabase_client)
    blob_store = SupabaseBlobStore.create(
        base_url=resolved_settings.supabase_url,
        service_key=resolved_settings.supabase_service_key,
        bucket=resolved_settings.storage_bucket,
        timeout=resolved_settings.image_timeout_seconds,
    )
    image_service = ImageService(
        blob_store=blob_store,
        cache=InMemoryImageCache(max_entries=resolved_settings.image_cache_entries),
        max_image_bytes=resolved_settings.max_image_bytes,
        max_thumbnail_bytes=resolved_settings.max_thumbnail_bytes,
        cache_ttl_seconds=resolved_settings.image_cache_ttl_seconds,
    )
    photo_service = PhotoService(
        repository=photo_repository,
        blob_store=blob_store,
        blocked_country_codes=parse_blocked_country_codes(
            resolved_settings.blocked_country_codes
        ),
        photo_ttl_days=resolved_settings.photo_ttl_days,
    )
    social_service = SocialService(
        repository=social_repository, photo_repository=photo_repository
    )
    gate = AdCadenceGate(ads_enabled=resolved_settings.ads_enabled)
    sampler = RandomPhotoSampler(photo_repository)
    draw_sessions = DrawSessionRegistry(
        factory=draw_session_factory(gate, sampler, image_service),
        idle_ttl_seconds=resolved_settings.session_idle_ttl_seconds,
        max_sessions=resolved_settings.max_draw_sessions,
    )

    async def close_resources() -> None:
        await blob_store.close()

    return AppContainer(
        settings=resolved_settings,
        identity_service=IdentityService(identity_provider),
        photo_service=photo_service,
        image_service=image_service,
        social_service=social_service,
        draw_sessions=draw_sessions,
        close_resources=close_resources,
    )
