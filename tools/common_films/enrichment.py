"""Poster backfill – batched, concurrent film-page lookups with pacing."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Protocol

from .config import PacingConfig
from .errors import FetchError
from .extractor import extract_asset
from .models import Record
from .progress import ProgressCallback, null_progress

logger = logging.getLogger("common_films.enrichment")


class FilmFetcher(Protocol):
    async def fetch_film(self, key: str) -> str: ...


class PosterEnricher:
    """Fills in ``image_ref`` for records that only have a placeholder.

    Records are mutated in place; callers must not read them until
    :meth:`enrich` returns.
    """

    def __init__(self, fetcher: FilmFetcher, pacing: PacingConfig | None = None) -> None:
        self.fetcher = fetcher
        self.pacing = pacing or PacingConfig()
        self.stats = {"posters": 0, "errors": 0}

    async def _backfill(self, record: Record) -> None:
        try:
            content = await self.fetcher.fetch_film(record.key)
        except FetchError as exc:
            logger.warning("Poster lookup failed for %s: %s", record.key, exc.reason)
            self.stats["errors"] += 1
            record.image_ref = ""
            return
        record.image_ref = extract_asset(content)
        if record.image_ref:
            self.stats["posters"] += 1

    async def enrich(self, records: Iterable[Record], on_progress: ProgressCallback = null_progress) -> int:
        """Backfill posters and return the number of records looked up."""
        # The same object may appear twice (a member compared with themself).
        seen: set[int] = set()
        candidates: list[Record] = []
        for record in records:
            if record.has_placeholder and id(record) not in seen:
                seen.add(id(record))
                candidates.append(record)

        total = len(candidates)
        size = max(self.pacing.batch_size, 1)
        for start in range(0, total, size):
            batch = candidates[start:start + size]
            await asyncio.gather(*(self._backfill(r) for r in batch))
            done = min(start + size, total)
            on_progress(f"Fetching posters... {done}/{total}")
            if done < total and self.pacing.batch_delay > 0:
                await asyncio.sleep(self.pacing.batch_delay)

        logger.debug("Poster backfill: %d candidates, %d found", total, self.stats["posters"])
        return total
