"""Configuration and environment settings for common-films."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class LetterboxdConfig:
    base_url: str = "https://letterboxd.com"
    timeout: float = 30.0
    user_agent: str = "common-films/1.0 (+https://github.com/common-films/common-films)"

    @classmethod
    def from_env(cls) -> LetterboxdConfig:
        return cls(
            base_url=os.getenv("LETTERBOXD_BASE_URL", "https://letterboxd.com").rstrip("/"),
            timeout=float(os.getenv("LETTERBOXD_TIMEOUT", "30")),
        )


@dataclass(frozen=True)
class PacingConfig:
    """Request pacing.  Everything is sequential except poster batches."""
    page_delay: float = 0.3  # seconds between listing pages
    batch_delay: float = 0.2  # seconds between poster batches
    batch_size: int = 5
    max_pages: int = 100

    @classmethod
    def from_env(cls) -> PacingConfig:
        return cls(
            page_delay=float(os.getenv("COMMON_FILMS_PAGE_DELAY", "0.3")),
            batch_delay=float(os.getenv("COMMON_FILMS_BATCH_DELAY", "0.2")),
            batch_size=int(os.getenv("COMMON_FILMS_BATCH_SIZE", "5")),
            max_pages=int(os.getenv("COMMON_FILMS_MAX_PAGES", "100")),
        )


@dataclass
class ComparisonConfig:
    letterboxd: LetterboxdConfig = field(default_factory=LetterboxdConfig.from_env)
    pacing: PacingConfig = field(default_factory=PacingConfig.from_env)
    fetch_posters: bool = True
