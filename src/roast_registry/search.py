# SPDX-License-Identifier: MIT
"""Substring search over package records."""

from __future__ import annotations

from collections.abc import Iterable

from .records import PackageRecord
from .store.base import PackageStore


def matches(package: PackageRecord, query: str) -> bool:
    """Case-insensitive substring match on name, description or any keyword."""
    needle = query.lower()
    return (
        needle in package.name.lower()
        or needle in (package.description or "").lower()
        or any(needle in keyword.lower() for keyword in package.keywords)
    )


def filter_packages(packages: Iterable[PackageRecord], query: str) -> list[PackageRecord]:
    """Keep matching packages in input order."""
    return [p for p in packages if matches(p, query)]


class SearchIndex:
    """Query layer over a PackageStore's full listing.

    Results keep the store's list order; there is no relevance ranking.
    An empty query matches every package.
    """

    def __init__(self, store: PackageStore) -> None:
        self.store = store

    async def search(self, query: str) -> list[PackageRecord]:
        return filter_packages(await self.store.list(), query or "")
