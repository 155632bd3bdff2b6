"""FastAPI application factory."""

import base64
import binascii
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import UUID

from fastapi import FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from ziora.api.models import (
    BlockRequest,
    DrawResponse,
    ExistingPhotosRequest,
    ExistingPhotosResponse,
    ImageResponse,
    LikeRequest,
    LocationUpdateRequest,
    PhotoPayload,
    ReportRequest,
    SubmitPhotoRequest,
    SubmitPhotoResponse,
)
from ziora.app_logging import configure_logging
from ziora.containers import AppContainer
from ziora.domain.draws import DrawOutcome
from ziora.domain.errors import (
    ImageNotFound,
    NotPhotoOwner,
    NotSignedIn,
    PayloadTooLarge,
    PhotoNotFound,
    RegionBlocked,
    TransportError,
    ZioraError,
)
from ziora.domain.photos import GachaScope, PhotoRecord, PhotoStatus
from ziora.services.draws import DrawSession

_ERROR_STATUS: dict[type[ZioraError], int] = {
    NotSignedIn: status.HTTP_401_UNAUTHORIZED,
    RegionBlocked: status.HTTP_403_FORBIDDEN,
    NotPhotoOwner: status.HTTP_403_FORBIDDEN,
    PhotoNotFound: status.HTTP_404_NOT_FOUND,
    ImageNotFound: status.HTTP_404_NOT_FOUND,
    PayloadTooLarge: status.HTTP_413_CONTENT_TOO_LARGE,
    TransportError: status.HTTP_502_BAD_GATEWAY,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(ZioraError)
    async def handle_ziora_error(request: Request, exc: ZioraError) -> JSONResponse:
        status_code = _ERROR_STATUS.get(
            type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Request failed", extra={"path": request.url.path}, exc_info=exc
            )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/sessions", status_code=status.HTTP_201_CREATED)
    async def open_session(
        request: Request, authorization: str | None = Header(default=None)
    ) -> dict[str, str]:
        """Start a draw session for the caller."""
        state_container: AppContainer = request.app.state.container
        viewer_id = state_container.identity_service.identify(
            _bearer_token(authorization)
        )
        session_id = state_container.draw_sessions.open(viewer_id)
        return {"session_id": str(session_id)}

    @app.delete("/sessions/{session_id}")
    async def close_session(session_id: UUID, request: Request) -> dict[str, str]:
        """Discard a draw session."""
        state_container: AppContainer = request.app.state.container
        if not state_container.draw_sessions.close(session_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"status": "ok"}

    @app.post("/sessions/{session_id}/draws")
    async def draw(  # noqa: PLR0913
        session_id: UUID,
        request: Request,
        country_code: str | None = None,
        region: str | None = None,
        city: str | None = None,
    ) -> DrawResponse:
        """Spin the globe once."""
        session = _get_session(request, session_id)
        scope = _scope_from_query(country_code, region, city)
        outcome = await session.draw(scope)
        logger.info(
            "Draw finished",
            extra={"session_id": str(session_id), "kind": outcome.kind.value},
        )
        return _draw_response(outcome)

    @app.post("/sessions/{session_id}/reset")
    async def reset_seen(session_id: UUID, request: Request) -> dict[str, str]:
        """Forget which photos the session has already shown."""
        _get_session(request, session_id).reset_seen()
        return {"status": "ok"}

    @app.post("/photos", status_code=status.HTTP_201_CREATED)
    async def submit_photo(
        payload: SubmitPhotoRequest,
        request: Request,
        authorization: str | None = Header(default=None),
    ) -> SubmitPhotoResponse:
        """Add a photo to the shared pool."""
        state_container: AppContainer = request.app.state.container
        owner_id = state_container.identity_service.identify(
            _bearer_token(authorization)
        )
        submitted = await state_container.photo_service.submit(
            owner_id=owner_id,
            image=_decode_image(payload.image_base64),
            location=payload.location.to_domain() if payload.location else None,
            date_text=payload.date_text,
        )
        return SubmitPhotoResponse(id=submitted.id, image_ref=submitted.image_ref)

    @app.get("/photos/mine")
    async def my_photos(
        request: Request,
        limit: int = 20,
        before: datetime | None = None,
        authorization: str | None = Header(default=None),
    ) -> dict[str, list[PhotoPayload]]:
        """Return the caller's active submissions, newest first."""
        state_container: AppContainer = request.app.state.container
        owner_id = state_container.identity_service.require(
            _bearer_token(authorization)
        )
        photos = state_container.photo_service.list_mine(owner_id, limit, before)
        return {"photos": [PhotoPayload.from_domain(photo) for photo in photos]}

    @app.get("/photos/latest")
    async def latest_photo(request: Request) -> PhotoPayload:
        """Return the newest photo in the pool."""
        state_container: AppContainer = request.app.state.container
        photo = state_container.photo_service.latest()
        if photo is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return PhotoPayload.from_domain(photo)

    @app.post("/photos/existing")
    async def existing_photos(
        payload: ExistingPhotosRequest, request: Request
    ) -> ExistingPhotosResponse:
        """Report which of the given photos still exist."""
        state_container: AppContainer = request.app.state.container
        existing = state_container.photo_service.existing_ids(payload.photo_ids)
        return ExistingPhotosResponse(
            photo_ids=[
                photo_id for photo_id in payload.photo_ids if photo_id in existing
            ]
        )

    @app.get("/photos/{photo_id}")
    async def get_photo(photo_id: UUID, request: Request) -> PhotoPayload:
        """Return one active photo."""
        return PhotoPayload.from_domain(_get_active_photo(request, photo_id))

    @app.get("/photos/{photo_id}/image")
    async def get_photo_image(photo_id: UUID, request: Request) -> ImageResponse:
        """Return the full-size image of an active photo."""
        state_container: AppContainer = request.app.state.container
        photo = _get_active_photo(request, photo_id)
        image = await state_container.image_service.fetch(photo.image_ref)
        return ImageResponse(image_base64=base64.b64encode(image).decode("ascii"))

    @app.delete("/photos/{photo_id}")
    async def cancel_photo(
        photo_id: UUID,
        request: Request,
        purge: bool = False,
        authorization: str | None = Header(default=None),
    ) -> dict[str, str]:
        """Withdraw one of the caller's submissions.

        With ``purge`` the row and the stored image are removed for good.
        """
        state_container: AppContainer = request.app.state.container
        owner_id = state_container.identity_service.require(
            _bearer_token(authorization)
        )
        if purge:
            await state_container.photo_service.delete(owner_id, photo_id)
        else:
            state_container.photo_service.cancel(owner_id, photo_id)
        return {"status": "ok"}

    @app.patch("/photos/{photo_id}/location")
    async def update_location(
        photo_id: UUID,
        payload: LocationUpdateRequest,
        request: Request,
        authorization: str | None = Header(default=None),
    ) -> dict[str, str]:
        """Edit the place names shown for one of the caller's photos."""
        state_container: AppContainer = request.app.state.container
        owner_id = state_container.identity_service.require(
            _bearer_token(authorization)
        )
        state_container.photo_service.update_location(
            owner_id,
            photo_id,
            country=payload.country,
            region=payload.region,
            city=payload.city,
            sub_locality=payload.sub_locality,
        )
        return {"status": "ok"}

    @app.post("/photos/{photo_id}/likes")
    async def like_photo(
        photo_id: UUID,
        payload: LikeRequest,
        request: Request,
        authorization: str | None = Header(default=None),
    ) -> dict[str, bool]:
        """Like someone else's photo."""
        state_container: AppContainer = request.app.state.container
        viewer_id = state_container.identity_service.require(
            _bearer_token(authorization)
        )
        liked = state_container.social_service.like(
            viewer_id, photo_id, payload.country, payload.country_code
        )
        return {"liked": liked}

    @app.delete("/photos/{photo_id}/likes")
    async def unlike_photo(
        photo_id: UUID,
        request: Request,
        authorization: str | None = Header(default=None),
    ) -> dict[str, bool]:
        """Withdraw a like."""
        state_container: AppContainer = request.app.state.container
        viewer_id = state_container.identity_service.require(
            _bearer_token(authorization)
        )
        removed = state_container.social_service.unlike(viewer_id, photo_id)
        return {"removed": removed}

    @app.post("/photos/{photo_id}/reports", status_code=status.HTTP_201_CREATED)
    async def report_photo(
        photo_id: UUID,
        payload: ReportRequest,
        request: Request,
        authorization: str | None = Header(default=None),
    ) -> dict[str, str]:
        """Report a photo for moderation."""
        state_container: AppContainer = request.app.state.container
        reporter_id = state_container.identity_service.require(
            _bearer_token(authorization)
        )
        state_container.social_service.report(reporter_id, photo_id, payload.reason)
        return {"status": "ok"}

    @app.post("/users/blocks", status_code=status.HTTP_201_CREATED)
    async def block_user(
        payload: BlockRequest,
        request: Request,
        authorization: str | None = Header(default=None),
    ) -> dict[str, str]:
        """Block another user."""
        state_container: AppContainer = request.app.state.container
        user_id = state_container.identity_service.require(
            _bearer_token(authorization)
        )
        state_container.social_service.block(user_id, payload.blocked_user_id)
        return {"status": "ok"}

    return app


def _bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _get_session(request: Request, session_id: UUID) -> DrawSession:
    state_container: AppContainer = request.app.state.container
    session = state_container.draw_sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return session


def _get_active_photo(request: Request, photo_id: UUID) -> PhotoRecord:
    state_container: AppContainer = request.app.state.container
    photo = state_container.photo_service.get(photo_id)
    if photo is None or photo.status != PhotoStatus.ACTIVE:
        raise PhotoNotFound(photo_id)
    return photo


def _scope_from_query(
    country_code: str | None, region: str | None, city: str | None
) -> GachaScope:
    """Build a draw scope from optional query parameters.

    Empty values count as absent.
    """
    country_code = country_code or None
    region = region or None
    city = city or None
    if country_code is None:
        if region or city:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
                detail="country_code is required with region or city",
            )
        return GachaScope.world()
    if region and city:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail="Pass either region or city, not both",
        )
    if region:
        return GachaScope.in_region(country_code, region)
    if city:
        return GachaScope.in_city(country_code, city)
    return GachaScope.country(country_code)


def _decode_image(encoded: str) -> bytes:
    try:
        image = base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail="image_base64 is not valid base64",
        ) from exc
    if not image:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail="image_base64 is empty",
        )
    return image


def _draw_response(outcome: DrawOutcome) -> DrawResponse:
    return DrawResponse(
        kind=outcome.kind.value,
        draw_count=outcome.draw_count,
        photo=PhotoPayload.from_domain(outcome.photo) if outcome.photo else None,
        image_base64=(
            base64.b64encode(outcome.image).decode("ascii") if outcome.image else None
        ),
    )
