"""Paginated harvesting of one member's film list."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from .config import PacingConfig
from .errors import FetchError
from .extractor import PageExtraction, extract_listing
from .models import Category, Record
from .progress import ProgressCallback, null_progress

logger = logging.getLogger("common_films.harvester")


class PageFetcher(Protocol):
    async def fetch_page(self, locator: str) -> str: ...


class PageHarvester:
    """Walks a linked sequence of listing pages, deduplicating by film slug."""

    def __init__(self, fetcher: PageFetcher, pacing: PacingConfig | None = None) -> None:
        self.fetcher = fetcher
        self.pacing = pacing or PacingConfig()
        self.stats = {"pages": 0, "films": 0, "errors": 0}

    async def _fetch_extraction(self, locator: str) -> PageExtraction:
        try:
            content = await self.fetcher.fetch_page(locator)
        except FetchError as exc:
            # Treated as the end of the list; no retry.
            logger.warning("Stopping at %s: %s", locator, exc.reason)
            self.stats["errors"] += 1
            return PageExtraction()
        extraction = extract_listing(content, base_url=locator)
        logger.debug("Page %s – found %d films", locator, len(extraction.records))
        return extraction

    async def harvest(
        self,
        start_locator: str,
        category: Category,
        on_progress: ProgressCallback = null_progress,
    ) -> list[Record]:
        """Harvest every page reachable from *start_locator*.

        Stops on the last page or after ``pacing.max_pages`` fetches, whichever
        comes first.  A failed fetch ends the walk with what was collected.
        """
        records: dict[str, Record] = {}
        locator: str | None = start_locator
        page = 0

        while locator and page < self.pacing.max_pages:
            page += 1
            on_progress(f"Scraping {category.label} page {page}... ({len(records)} films found)")
            extraction = await self._fetch_extraction(locator)
            for raw in extraction.records:
                records[raw["key"]] = Record(category=category, **raw)
            locator = extraction.next_page
            if locator and page < self.pacing.max_pages and self.pacing.page_delay > 0:
                await asyncio.sleep(self.pacing.page_delay)

        if locator:
            logger.warning("Page limit (%d) reached for %s", self.pacing.max_pages, start_locator)
        self.stats["pages"] += page
        self.stats["films"] += len(records)
        on_progress(f"Scraped {page} {category.label} pages ({len(records)} films found)")
        return list(records.values())
