"""Image asset preloading client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class AssetPreloader(Protocol):
    """Interface for warming image assets ahead of display."""

    async def preload(self, uri: str) -> None:
        """Ensure the bytes behind a URI are resident; raise on failure."""


@dataclass
class HttpxAssetPreloader(AssetPreloader):
    """Asset preloader that fetches images with httpx."""

    http_client: httpx.AsyncClient
    timeout_seconds: float = 10

    @classmethod
    def create(cls, timeout_seconds: float = 10) -> "HttpxAssetPreloader":
        """Create a preloader with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True),
            timeout_seconds=timeout_seconds,
        )

    async def preload(self, uri: str) -> None:
        """Fetch the asset so the CDN and connection pool are warm."""
        response = await self.http_client.get(uri, timeout=self.timeout_seconds)
        response.raise_for_status()
        if not response.content:
            raise RuntimeError(f"Empty asset body for {uri}")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
