"""Data model: films, members, catalogs and paired results."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from urllib.parse import urlparse

PLACEHOLDER_MARKERS = ("empty-poster", "empty.png")
PLACEHOLDER_POSTER = "https://letterboxd.com/static/img/empty-poster-230.c6baa486.png"
PLACEHOLDER_AVATAR = "https://letterboxd.com/static/img/avatar70.1b45ce0c.png"

# Top-level site paths that look like handles but are not members
RESERVED_PATHS = frozenset({
    "film", "films", "lists", "members", "activity", "journal", "search",
    "settings", "pro", "patron", "about", "contact", "help", "sign-in",
})


class Category(str, enum.Enum):
    """Which list a film was harvested from.  PRIMARY wins on merge."""
    PRIMARY = "watched"
    SECONDARY = "watchlist"

    @property
    def label(self) -> str:
        return "films" if self is Category.PRIMARY else "watchlist"


@dataclass
class Record:
    key: str
    title: str
    category: Category
    image_ref: str = ""
    rating: float | None = None

    @property
    def has_placeholder(self) -> bool:
        return is_placeholder(self.image_ref)


@dataclass(frozen=True)
class Identity:
    handle: str
    display_name: str
    avatar_ref: str = ""

    @classmethod
    def fallback(cls, handle: str) -> Identity:
        return cls(handle=handle, display_name=handle, avatar_ref="")


# key → Record, insertion ordered
Catalog = dict[str, Record]


@dataclass(frozen=True)
class PairedRecord:
    key: str
    owner_a: Record
    owner_b: Record


@dataclass
class ComparisonResult:
    identity_a: Identity
    identity_b: Identity
    pairs: list[PairedRecord] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        def _record(r: Record) -> dict:
            return {
                "title": r.title,
                "status": r.category.value,
                "rating": r.rating,
                "poster": r.image_ref or PLACEHOLDER_POSTER,
            }

        def _identity(i: Identity) -> dict:
            return {
                "handle": i.handle,
                "display_name": i.display_name,
                "avatar": i.avatar_ref or PLACEHOLDER_AVATAR,
            }

        return {
            "user_a": _identity(self.identity_a),
            "user_b": _identity(self.identity_b),
            "error": self.error,
            "films": [
                {"slug": p.key, "user_a": _record(p.owner_a), "user_b": _record(p.owner_b)}
                for p in self.pairs
            ],
        }


def is_placeholder(image_ref: str) -> bool:
    return not image_ref or any(marker in image_ref for marker in PLACEHOLDER_MARKERS)


def humanize_key(key: str) -> str:
    """'the-godfather-part-ii' → 'The Godfather Part Ii'."""
    return " ".join(word[:1].upper() + word[1:] for word in key.split("-") if word)


def normalize_handle(value: str) -> str:
    """Accept a bare handle or a profile URL and return the lowercase handle."""
    value = value.strip()
    if "://" in value:
        value = urlparse(value).path
    segments = [s for s in value.split("/") if s]
    if not segments:
        raise ValueError("empty member handle")
    handle = segments[0].lower()
    if handle in RESERVED_PATHS:
        raise ValueError(f"'{handle}' is not a member handle")
    return handle
