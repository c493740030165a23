"""
JSON Web Key Set (JWKS) sources used to verify access token signatures.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Optional, Protocol, Tuple

import httpx

from shared.errors import KeySetFetchError
from shared.logging import get_logger


KeySet = Dict[str, Any]


class KeySetSource(Protocol):
    """Anything that can hand back the key set published at a URL."""

    async def get_key_set(self, url: str, *, force: bool = False) -> KeySet:
        ...


class StaticKeySetSource:
    """Key source backed by an in-memory key set, regardless of the URL asked for."""

    def __init__(self, key_set: KeySet) -> None:
        self.key_set = key_set
        self.requested_urls: list = []
        self.forced: list = []

    async def get_key_set(self, url: str, *, force: bool = False) -> KeySet:
        self.requested_urls.append(url)
        self.forced.append(force)
        return self.key_set


class RemoteKeySetSource:
    """Key source that fetches JWKS documents over HTTP and caches them per URL."""

    def __init__(
        self,
        *,
        cache_ttl: int = 300,
        http_timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.cache_ttl = cache_ttl
        self.logger = get_logger("gateway.auth.jwks")

        self._cache: Dict[str, Tuple[KeySet, float]] = {}
        self._lock = asyncio.Lock()
        self._client = client or httpx.AsyncClient(timeout=http_timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def get_key_set(self, url: str, *, force: bool = False) -> KeySet:
        """Return the cached key set for ``url``, refreshing it when stale or forced."""
        if not force:
            cached = self._fresh(url)
            if cached is not None:
                return cached

        async with self._lock:
            # Another request may have refreshed while we waited
            cached = None if force else self._fresh(url)
            if cached is not None:
                return cached

            key_set = await self._fetch(url)
            self._cache[url] = (key_set, time.time())
            self.logger.info("JWKS refreshed", url=url, keys_count=len(key_set["keys"]))
            return key_set

    def clear_cache(self) -> None:
        """Drop every cached key set."""
        self._cache.clear()

    def _fresh(self, url: str) -> Optional[KeySet]:
        entry = self._cache.get(url)
        if entry is None:
            return None
        key_set, fetched_at = entry
        if time.time() - fetched_at >= self.cache_ttl:
            return None
        return key_set

    async def _fetch(self, url: str) -> KeySet:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            self.logger.error("Failed to fetch JWKS", url=url, error=str(exc))
            raise KeySetFetchError(url, str(exc)) from exc
        except ValueError as exc:
            raise KeySetFetchError(url, "JWKS response is not valid JSON") from exc

        if not isinstance(payload, dict) or not isinstance(payload.get("keys"), list):
            raise KeySetFetchError(url, "JWKS response missing 'keys' array")
        if not all(isinstance(key, dict) for key in payload["keys"]):
            raise KeySetFetchError(url, "JWKS 'keys' array holds a non-object entry")

        return payload
