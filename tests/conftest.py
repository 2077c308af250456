from __future__ import annotations

import asyncio

import pytest

from common_films.config import PacingConfig
from common_films.errors import FetchError

BASE = "https://lb.test"


def poster_item(key: str, title: str | None = None, img: str = "", code: int | None = None) -> str:
    alt = f' alt="{title}"' if title else ""
    src = f' src="{img}"' if img else ""
    rating = f'<span class="rating rated-{code}"></span>' if code is not None else ""
    return (
        '<li class="poster-container">'
        f'<div class="react-component" data-component-class="LazyPoster" data-item-link="/film/{key}/">'
        f"<img{alt}{src}/></div>"
        f'<p class="poster-viewingdata">{rating}</p>'
        "</li>"
    )


def listing_page(items: list[str], next_href: str | None = None) -> str:
    nav = ""
    if next_href:
        nav = f'<div class="pagination"><div class="paginate-nextprev"><a class="next" href="{next_href}">Older</a></div></div>'
    return f'<html><body><ul class="poster-list">{"".join(items)}</ul>{nav}</body></html>'


def film_page(image: str) -> str:
    return f'<html><head><meta property="og:image" content="{image}"/></head><body></body></html>'


def profile_page(name: str, avatar: str) -> str:
    return (
        '<html><body><div class="profile-summary">'
        f'<div class="profile-avatar"><img src="{avatar}"/></div>'
        f'<div class="profile-name"><h1>{name}</h1></div>'
        "</div></body></html>"
    )


class FakeClient:
    """In-memory stand-in for LetterboxdClient.

    Values may be HTML strings or exceptions to raise.
    """

    def __init__(self, pages=None, films=None, profiles=None) -> None:
        self.pages: dict = pages or {}
        self.films: dict = films or {}
        self.profiles: dict = profiles or {}
        self.page_calls: list[str] = []
        self.film_calls: list[str] = []
        self.profile_calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.profiles_in_flight = 0
        self.max_profiles_in_flight = 0
        self.closed = False

    def films_url(self, handle: str) -> str:
        return f"{BASE}/{handle}/films/"

    def watchlist_url(self, handle: str) -> str:
        return f"{BASE}/{handle}/watchlist/"

    @staticmethod
    def _resolve(table: dict, key: str):
        value = table.get(key)
        if value is None:
            raise FetchError(key, "HTTP 404")
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch_page(self, locator: str) -> str:
        self.page_calls.append(locator)
        return self._resolve(self.pages, locator)

    async def fetch_film(self, key: str) -> str:
        self.film_calls.append(key)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            return self._resolve(self.films, key)
        finally:
            self.in_flight -= 1

    async def fetch_profile(self, handle: str) -> str:
        self.profile_calls.append(handle)
        self.profiles_in_flight += 1
        self.max_profiles_in_flight = max(self.max_profiles_in_flight, self.profiles_in_flight)
        try:
            await asyncio.sleep(0)
            return self._resolve(self.profiles, handle)
        finally:
            self.profiles_in_flight -= 1

    async def aclose(self) -> None:
        self.closed = True

    async def __aenter__(self) -> FakeClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


@pytest.fixture
def no_delay() -> PacingConfig:
    return PacingConfig(page_delay=0, batch_delay=0, batch_size=5, max_pages=100)
