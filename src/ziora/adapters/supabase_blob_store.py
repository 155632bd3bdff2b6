"""Supabase Storage client for image payloads."""

from dataclasses import dataclass

import httpx

from ziora.domain.errors import ImageNotFound, PayloadTooLarge, TransportError
from ziora.services.images import BlobStore


@dataclass
class SupabaseBlobStore(BlobStore):
    """Blob store backed by the Supabase Storage REST API."""

    base_url: str
    service_key: str
    bucket: str
    http_client: httpx.AsyncClient
    timeout: float = 20.0

    @classmethod
    def create(
        cls, base_url: str, service_key: str, bucket: str, timeout: float = 20.0
    ) -> "SupabaseBlobStore":
        """Create a blob store with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            service_key=service_key,
            bucket=bucket,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def get(self, ref: str, max_bytes: int) -> bytes:
        """Download a payload, aborting once it grows past max_bytes."""
        try:
            async with self.http_client.stream(
                "GET",
                self._object_url(ref),
                headers=self._headers(),
                timeout=self.timeout,
            ) as response:
                if await _is_missing(response):
                    raise ImageNotFound(ref)
                response.raise_for_status()
                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > max_bytes:
                    raise PayloadTooLarge(ref, max_bytes)
                data = bytearray()
                async for chunk in response.aiter_bytes():
                    data.extend(chunk)
                    if len(data) > max_bytes:
                        raise PayloadTooLarge(ref, max_bytes)
                return bytes(data)
        except httpx.HTTPError as exc:
            raise TransportError(f"Failed to download {ref}: {exc}") from exc

    async def put(self, ref: str, data: bytes, content_type: str) -> str:
        """Upload a payload to ref."""
        headers = {**self._headers(), "content-type": content_type}
        try:
            response = await self.http_client.post(
                self._object_url(ref),
                content=data,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"Failed to upload {ref}: {exc}") from exc
        return ref

    async def delete(self, ref: str) -> None:
        """Remove a payload."""
        try:
            response = await self.http_client.request(
                "DELETE",
                f"{self.base_url}/storage/v1/object/{self.bucket}",
                json={"prefixes": [ref]},
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"Failed to delete {ref}: {exc}") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _object_url(self, ref: str) -> str:
        return f"{self.base_url}/storage/v1/object/{self.bucket}/{ref}"

    def _headers(self) -> dict[str, str]:
        return {
            "authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
        }


async def _is_missing(response: httpx.Response) -> bool:
    """Storage answers missing objects with 404, or 400 and a not_found body."""
    if response.status_code == httpx.codes.NOT_FOUND:
        return True
    if response.status_code != httpx.codes.BAD_REQUEST:
        return False
    body = await response.aread()
    return b"not_found" in body.lower()
