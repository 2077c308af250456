"""Per-member catalog merge and cross-member intersection."""

from __future__ import annotations

from typing import Iterable

from .models import Catalog, PairedRecord, Record


def merge(secondary: Iterable[Record], primary: Iterable[Record]) -> Catalog:
    """Fold both lists into one catalog; a primary entry replaces a secondary one."""
    catalog: Catalog = {}
    for record in secondary:
        catalog[record.key] = record
    for record in primary:
        catalog[record.key] = record
    return catalog


def intersect(catalog_a: Catalog, catalog_b: Catalog) -> list[PairedRecord]:
    """Pair the films both catalogs share, in *catalog_a*'s order."""
    return [
        PairedRecord(key=key, owner_a=record, owner_b=catalog_b[key])
        for key, record in catalog_a.items()
        if key in catalog_b
    ]
