"""HTML extraction – ordered strategy chains over parsed Letterboxd pages.

Listing pages yield raw film dicts plus the next-page link.  Film pages yield
a poster URL.  Profile pages yield an :class:`Identity`.  Each strategy
returns an empty result on a miss; the chain takes the first non-empty one.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, Sequence, TypeVar
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from .models import Identity, humanize_key, is_placeholder

logger = logging.getLogger("common_films.extractor")

T = TypeVar("T")

NEXT_PAGE_SELECTOR = ".pagination .paginate-next:not(.disabled) a, .paginate-nextprev a.next, a.next"
RATING_CLASS = re.compile(r"^rated-(\d+)$")
_JS_COMMENT = re.compile(r"/\*.*?\*/", re.S)


def parse_html(content: str) -> BeautifulSoup:
    return BeautifulSoup(content, "html.parser")


def rating_from_code(code: int | None) -> float | None:
    """Convert a 0–10 half-star code to the 0–5 scale.  ``None`` stays unrated."""
    if code is None or not 0 <= code <= 10:
        return None
    return code / 2


def _rating_code(container: Tag | None) -> int | None:
    if container is None:
        return None
    rating_el = container.select_one(".rating, [class*='rating']")
    if rating_el is None:
        return None
    for cls in rating_el.get("class") or []:
        m = RATING_CLASS.match(cls)
        if m:
            return int(m.group(1))
    return None


def _img_src(img: Tag | None) -> str:
    if img is None:
        return ""
    return img.get("src") or img.get("data-src") or ""


# ── strategy chain ───────────────────────────────────────────────


class Strategy(ABC, Generic[T]):
    name = "strategy"

    @abstractmethod
    def extract(self, soup: BeautifulSoup) -> T:
        """Return an empty value when nothing on the page matches."""


def first_match(strategies: Sequence[Strategy[T]], soup: BeautifulSoup, empty: T) -> T:
    for strategy in strategies:
        result = strategy.extract(soup)
        if result:
            logger.debug("Matched with %s strategy", strategy.name)
            return result
    return empty


# ── listing strategies ───────────────────────────────────────────


class LazyPosterStrategy(Strategy[list]):
    """React-rendered grids: ``data-component-class="LazyPoster"``."""
    name = "lazy-poster"

    def extract(self, soup: BeautifulSoup) -> list[dict[str, Any]]:
        films = []
        for poster in soup.select('[data-component-class="LazyPoster"]'):
            link = poster.get("data-item-link") or ""
            key = re.sub(r"^/film/", "", link).rstrip("/")
            if not key:
                continue
            img = poster.find("img")
            title = (img.get("alt") if img else None) or poster.get("data-film-name") or humanize_key(key)
            films.append({
                "key": key,
                "title": title,
                "image_ref": _img_src(img),
                "rating": rating_from_code(_rating_code(poster.css.closest("li, .poster-container, .film-poster"))),
            })
        return films


class FilmSlugStrategy(Strategy[list]):
    """Older markup: any element carrying ``data-film-slug``."""
    name = "film-slug"

    def extract(self, soup: BeautifulSoup) -> list[dict[str, Any]]:
        films = []
        for poster in soup.select("[data-film-slug]"):
            key = (poster.get("data-film-slug") or "").strip()
            if not key:
                continue
            link = poster.find("a")
            if link is None:
                item = poster.find_parent("li")
                link = item.find("a") if item else None
            img = poster.find("img")
            title = (
                (link.get("data-film-name") if link else None)
                or (img.get("alt") if img else None)
                or humanize_key(key)
            )
            films.append({
                "key": key,
                "title": title,
                "image_ref": _img_src(img),
                "rating": rating_from_code(_rating_code(poster.css.closest(".poster-container, .film-poster"))),
            })
        return films


LISTING_STRATEGIES: tuple[Strategy[list], ...] = (LazyPosterStrategy(), FilmSlugStrategy())


@dataclass
class PageExtraction:
    records: list[dict[str, Any]] = field(default_factory=list)
    next_page: str | None = None


def next_page_locator(soup: BeautifulSoup, base_url: str | None = None) -> str | None:
    link = soup.select_one(NEXT_PAGE_SELECTOR)
    href = link.get("href") if link else None
    if not href:
        return None
    return urljoin(base_url, href) if base_url else href


def extract_listing(
    content: str,
    base_url: str | None = None,
    strategies: Sequence[Strategy[list]] = LISTING_STRATEGIES,
) -> PageExtraction:
    """Extract films and the next-page link from one listing page."""
    soup = parse_html(content)
    return PageExtraction(
        records=first_match(strategies, soup, []),
        next_page=next_page_locator(soup, base_url),
    )


# ── poster strategies ────────────────────────────────────────────


class JsonLdImageStrategy(Strategy[str]):
    name = "json-ld"

    def extract(self, soup: BeautifulSoup) -> str:
        script = soup.find("script", attrs={"type": "application/ld+json"})
        if script is None:
            return ""
        # Letterboxd wraps the payload in /* <![CDATA[ */ … /* ]]> */
        text = _JS_COMMENT.sub("", script.get_text())
        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as exc:
            logger.debug("Unparseable JSON-LD: %s", exc)
            return ""
        if isinstance(data, list):
            data = next((d for d in data if isinstance(d, dict) and d.get("image")), {})
        if not isinstance(data, dict):
            return ""
        image = data.get("image")
        if isinstance(image, list):
            image = image[0] if image else ""
        if isinstance(image, dict):
            image = image.get("url", "")
        return image if isinstance(image, str) else ""


class OpenGraphImageStrategy(Strategy[str]):
    name = "og:image"

    def extract(self, soup: BeautifulSoup) -> str:
        meta = soup.select_one('meta[property="og:image"]')
        return (meta.get("content") or "") if meta else ""


class PosterImgStrategy(Strategy[str]):
    name = "poster-img"

    def extract(self, soup: BeautifulSoup) -> str:
        img = soup.select_one(".poster img")
        if img is None:
            return ""
        srcset = img.get("srcset") or ""
        url = srcset.split(" ")[0] if srcset else img.get("src") or ""
        return "" if is_placeholder(url) else url


ASSET_STRATEGIES: tuple[Strategy[str], ...] = (
    JsonLdImageStrategy(),
    OpenGraphImageStrategy(),
    PosterImgStrategy(),
)


def extract_asset(content: str, strategies: Sequence[Strategy[str]] = ASSET_STRATEGIES) -> str:
    """Find a poster URL on a film page, or ``""``."""
    return first_match(strategies, parse_html(content), "")


# ── profile ──────────────────────────────────────────────────────


def extract_identity(content: str, handle: str) -> Identity:
    soup = parse_html(content)
    name_el = soup.select_one(".profile-name h1, .person-summary h1")
    avatar_el = soup.select_one(".profile-avatar img, .person-summary img")
    display_name = name_el.get_text(strip=True) if name_el else ""
    return Identity(
        handle=handle,
        display_name=display_name or handle,
        avatar_ref=_img_src(avatar_el),
    )
