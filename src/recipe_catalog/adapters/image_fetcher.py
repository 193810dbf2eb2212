"""HTTP client for downloading remote recipe images."""

from dataclasses import dataclass

import httpx

from recipe_catalog.services.importer import ImageFetcher


@dataclass
class HttpxImageFetcher(ImageFetcher):
    """HTTPX-backed image downloader."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxImageFetcher":
        """Create a fetcher with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(follow_redirects=True))

    async def fetch(self, url: str) -> tuple[bytes, str | None]:
        """Download an image and return its bytes and content type."""
        response = await self.http_client.get(url, timeout=30)
        response.raise_for_status()
        content_type = response.headers.get("content-type")
        if content_type:
            content_type = content_type.split(";")[0].strip()
        return response.content, content_type

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
