"""Letterboxd page client – async fetcher, one request per call, no retries."""

from __future__ import annotations

import logging

import httpx

from .config import LetterboxdConfig
from .errors import FetchError

logger = logging.getLogger("common_films.api")


class LetterboxdClient:
    """Thin async wrapper around Letterboxd's HTML pages.

    Every failure (transport error or non-success status) surfaces as
    :class:`FetchError`; callers decide how to degrade.
    """

    def __init__(self, cfg: LetterboxdConfig | None = None, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.cfg = cfg or LetterboxdConfig()
        self._client = httpx.AsyncClient(
            timeout=self.cfg.timeout,
            headers={"User-Agent": self.cfg.user_agent},
            follow_redirects=True,
            transport=transport,
        )

    # ── urls ─────────────────────────────────────────────────────

    def profile_url(self, handle: str) -> str:
        return f"{self.cfg.base_url}/{handle}/"

    def films_url(self, handle: str) -> str:
        return f"{self.cfg.base_url}/{handle}/films/"

    def watchlist_url(self, handle: str) -> str:
        return f"{self.cfg.base_url}/{handle}/watchlist/"

    def film_url(self, key: str) -> str:
        return f"{self.cfg.base_url}/film/{key}/"

    # ── fetching ─────────────────────────────────────────────────

    async def _get_text(self, url: str) -> str:
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning("%d: %s", exc.response.status_code, url)
            raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.warning("Request failed for %s: %s", url, exc)
            raise FetchError(url, str(exc) or type(exc).__name__) from exc
        return resp.text

    async def fetch_page(self, locator: str) -> str:
        """Fetch one listing page by absolute URL."""
        return await self._get_text(locator)

    async def fetch_film(self, key: str) -> str:
        """Fetch a film's detail page."""
        return await self._get_text(self.film_url(key))

    async def fetch_profile(self, handle: str) -> str:
        """Fetch a member's profile page."""
        return await self._get_text(self.profile_url(handle))

    # ── lifecycle ────────────────────────────────────────────────

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> LetterboxdClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
