"""Core comparison logic – orchestrates identities → harvests → intersection → posters."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from .api import LetterboxdClient
from .catalog import intersect, merge
from .config import ComparisonConfig
from .enrichment import PosterEnricher
from .errors import FetchError
from .extractor import extract_identity
from .harvester import PageHarvester
from .models import Catalog, Category, ComparisonResult, Identity
from .progress import ProgressCallback, null_progress, prefixed

logger = logging.getLogger("common_films.comparison")

FAILURE_MESSAGE = "An error occurred while fetching films."


class Fetcher(Protocol):
    def films_url(self, handle: str) -> str: ...
    def watchlist_url(self, handle: str) -> str: ...
    async def fetch_page(self, locator: str) -> str: ...
    async def fetch_film(self, key: str) -> str: ...
    async def fetch_profile(self, handle: str) -> str: ...
    async def aclose(self) -> None: ...


class Comparison:
    """Finds the films two members have in common."""

    def __init__(self, cfg: ComparisonConfig | None = None, *, client: Fetcher | None = None) -> None:
        self.cfg = cfg or ComparisonConfig()
        self.client: Fetcher = client or LetterboxdClient(self.cfg.letterboxd)
        self.harvester = PageHarvester(self.client, self.cfg.pacing)
        self.enricher = PosterEnricher(self.client, self.cfg.pacing)

    @property
    def stats(self) -> dict[str, int]:
        return {
            "pages": self.harvester.stats["pages"],
            "films": self.harvester.stats["films"],
            "posters": self.enricher.stats["posters"],
            "errors": self.harvester.stats["errors"] + self.enricher.stats["errors"],
        }

    # ── members ──────────────────────────────────────────────────

    async def resolve_identity(self, handle: str) -> Identity:
        try:
            content = await self.client.fetch_profile(handle)
        except FetchError as exc:
            logger.warning("Could not load profile for %s: %s", handle, exc.reason)
            return Identity.fallback(handle)
        return extract_identity(content, handle)

    async def build_catalog(self, handle: str, on_progress: ProgressCallback = null_progress) -> Catalog:
        """Harvest watched films then the watchlist, and merge them."""
        report = prefixed(on_progress, handle)
        watched = await self.harvester.harvest(self.client.films_url(handle), Category.PRIMARY, report)
        watchlist = await self.harvester.harvest(self.client.watchlist_url(handle), Category.SECONDARY, report)
        catalog = merge(watchlist, watched)
        logger.info("%s: %d watched, %d watchlist, %d unique", handle, len(watched), len(watchlist), len(catalog))
        return catalog

    # ── comparison ───────────────────────────────────────────────

    async def compare(self, handle_a: str, handle_b: str, on_progress: ProgressCallback = null_progress) -> ComparisonResult:
        """Run a full comparison.  Exceptions propagate; see :meth:`run`."""
        on_progress("Fetching user profiles...")
        identity_a, identity_b = await asyncio.gather(
            self.resolve_identity(handle_a),
            self.resolve_identity(handle_b),
        )

        on_progress(f"Scraping {identity_a.display_name}'s films...")
        catalog_a = await self.build_catalog(handle_a, on_progress)
        on_progress(f"Scraping {identity_b.display_name}'s films...")
        catalog_b = await self.build_catalog(handle_b, on_progress)

        on_progress("Finding common films...")
        pairs = intersect(catalog_a, catalog_b)
        logger.info("%d films in common between %s and %s", len(pairs), handle_a, handle_b)

        if pairs and self.cfg.fetch_posters:
            await self.enricher.enrich(
                [p.owner_a for p in pairs] + [p.owner_b for p in pairs],
                on_progress,
            )
        return ComparisonResult(identity_a=identity_a, identity_b=identity_b, pairs=pairs)

    async def run(self, handle_a: str, handle_b: str, on_progress: ProgressCallback = null_progress) -> ComparisonResult:
        """Like :meth:`compare`, but any failure becomes an errored result."""
        try:
            return await self.compare(handle_a, handle_b, on_progress)
        except Exception as exc:
            logger.exception("Comparison of %s and %s failed", handle_a, handle_b)
            return ComparisonResult(
                identity_a=Identity.fallback(handle_a),
                identity_b=Identity.fallback(handle_b),
                error=f"{FAILURE_MESSAGE} {exc}".strip(),
            )

    # ── lifecycle ────────────────────────────────────────────────

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> Comparison:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
