# SPDX-License-Identifier: MIT
"""Tests for package search."""

import pytest
from hypothesis import given, strategies as st

from roast_registry.records import PackageDefaults, PackageRecord, VersionRecord
from roast_registry.search import SearchIndex, filter_packages, matches
from roast_registry.store import InMemoryPackageStore

valid_package_name = st.from_regex(r"[a-z][a-z0-9\-]{2,20}", fullmatch=True)


def package(name: str, description: str = "", keywords: list[str] | None = None) -> PackageRecord:
    return PackageRecord(name=name, description=description, keywords=keywords or [])


class TestMatches:
    def test_name_only(self):
        assert matches(package("json-lib"), "JSON")

    def test_description_only(self):
        assert matches(package("jl", description="Fast JSON parsing"), "parsing")

    def test_keyword_only(self):
        assert matches(package("jl", keywords=["Serialization"]), "serial")

    def test_no_match(self):
        assert not matches(package("json-lib", "JSON helpers", ["json"]), "nomatch-xyz")

    @given(name=valid_package_name)
    def test_every_name_finds_itself(self, name: str):
        assert matches(package(name), name)
        assert matches(package(name), name.upper())

    def test_filter_keeps_order(self):
        packages = [package("b-json"), package("a-yaml"), package("c-json")]
        assert [p.name for p in filter_packages(packages, "json")] == ["b-json", "c-json"]


@pytest.mark.asyncio
class TestSearchIndex:
    async def _index(self) -> SearchIndex:
        store = InMemoryPackageStore()
        for name, description, keywords in [
            ("json-lib", "JSON helpers", ["json"]),
            ("http-client", "Talk to web servers", ["network"]),
            ("toml-edit", "Edit config files", ["config", "json-compatible"]),
        ]:
            await store.create_or_append_version(
                name,
                VersionRecord(version="1.0.0", checksum="0" * 64, size=1),
                PackageDefaults(description=description, keywords=keywords),
            )
        return SearchIndex(store)

    async def test_search_over_store(self):
        index = await self._index()

        names = {p.name for p in await index.search("json")}
        assert names == {"json-lib", "toml-edit"}
        assert [p.name for p in await index.search("web")] == ["http-client"]

    async def test_nomatch(self):
        index = await self._index()
        assert await index.search("nomatch-xyz") == []

    async def test_empty_query_returns_all(self):
        index = await self._index()
        assert len(await index.search("")) == 3
