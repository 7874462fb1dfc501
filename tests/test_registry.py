# SPDX-License-Identifier: MIT
"""Tests for the registry facade: reads, downloads, yank and metadata."""

import pytest
from conftest import SAMPLE_TARBALL, make_request

from roast_registry.auth import Identity
from roast_registry.checksum import compute_sha256
from roast_registry.middleware.errors import (
    ArtifactMissingError,
    ErrorCode,
    ForbiddenError,
    GoneError,
    PackageNotFoundError,
    StorageFailureError,
    VersionExistsError,
    VersionNotFoundError,
)
from roast_registry.records import DescriptiveUpdate
from roast_registry.registry import Registry
from roast_registry.store import blob_key


@pytest.mark.asyncio
class TestDownload:
    async def test_download_returns_stored_bytes(self, registry: Registry, alice: Identity):
        await registry.publish(alice, make_request())

        artifact = await registry.download("json-lib", "1.0.0")

        assert artifact.data == SAMPLE_TARBALL
        assert artifact.checksum == compute_sha256(SAMPLE_TARBALL)
        assert artifact.size == 17
        assert artifact.filename == "json-lib-1.0.0.tar.gz"

    async def test_download_does_not_count(self, registry: Registry, alice: Identity):
        await registry.publish(alice, make_request())
        await registry.download("json-lib", "1.0.0")
        await registry.counter.drain()

        assert (await registry.store.get("json-lib")).downloads == 0

    async def test_unknown_package_and_version(self, registry: Registry, alice: Identity):
        await registry.publish(alice, make_request())

        with pytest.raises(PackageNotFoundError):
            await registry.download("missing", "1.0.0")
        with pytest.raises(VersionNotFoundError):
            await registry.download("json-lib", "9.9.9")

    async def test_missing_blob(self, registry: Registry, alice: Identity):
        await registry.publish(alice, make_request())
        await registry.blobs.delete(blob_key("json-lib", "1.0.0"))

        with pytest.raises(ArtifactMissingError) as exc_info:
            await registry.download("json-lib", "1.0.0")
        assert exc_info.value.status_code == 500

    async def test_corrupted_blob_is_refused(self, registry: Registry, alice: Identity):
        await registry.publish(alice, make_request())
        key = blob_key("json-lib", "1.0.0")
        await registry.blobs.delete(key)
        await registry.blobs.put(key, b"tampered tarball")

        with pytest.raises(StorageFailureError) as exc_info:
            await registry.download("json-lib", "1.0.0")
        assert exc_info.value.code == ErrorCode.STORAGE_FAILURE
        assert exc_info.value.status_code == 500


@pytest.mark.asyncio
class TestYank:
    async def test_yank_and_unyank(self, registry: Registry, alice: Identity):
        await registry.publish(alice, make_request(version="1.0.0"))
        await registry.publish(alice, make_request(version="1.1.0"))

        await registry.set_yanked(alice, "json-lib", "1.1.0", True)

        package = await registry.store.get("json-lib")
        assert package.latest_version.version == "1.0.0"
        assert [(v.version, v.yanked) for v in package.versions] == [("1.1.0", True), ("1.0.0", False)]
        with pytest.raises(GoneError):
            await registry.download("json-lib", "1.1.0")

        await registry.set_yanked(alice, "json-lib", "1.1.0", False)

        package = await registry.store.get("json-lib")
        assert package.latest_version.version == "1.1.0"
        assert (await registry.download("json-lib", "1.1.0")).data == SAMPLE_TARBALL

    async def test_all_yanked_means_no_latest(self, registry: Registry, alice: Identity):
        await registry.publish(alice, make_request())
        await registry.set_yanked(alice, "json-lib", "1.0.0", True)

        [package] = await registry.list_packages()
        assert package.latest_version is None

    async def test_yanked_version_still_blocks_republish(self, registry: Registry, alice: Identity):
        await registry.publish(alice, make_request())
        await registry.set_yanked(alice, "json-lib", "1.0.0", True)

        with pytest.raises(VersionExistsError):
            await registry.publish(alice, make_request(body=b"replacement"))

    async def test_non_owner_cannot_yank(self, registry: Registry, alice: Identity, bob: Identity):
        await registry.publish(alice, make_request())

        with pytest.raises(ForbiddenError):
            await registry.set_yanked(bob, "json-lib", "1.0.0", True)
        assert (await registry.store.get("json-lib")).versions[0].yanked is False

    async def test_superuser_can_yank(self, registry: Registry, alice: Identity, admin: Identity):
        await registry.publish(alice, make_request())
        await registry.set_yanked(admin, "json-lib", "1.0.0", True)
        assert (await registry.store.get("json-lib")).versions[0].yanked is True

    async def test_unknown_targets(self, registry: Registry, alice: Identity):
        with pytest.raises(PackageNotFoundError):
            await registry.set_yanked(alice, "missing", "1.0.0", True)

        await registry.publish(alice, make_request())
        with pytest.raises(VersionNotFoundError):
            await registry.set_yanked(alice, "json-lib", "2.0.0", True)


@pytest.mark.asyncio
class TestReads:
    async def test_get_package_counts_downloads(self, registry: Registry, alice: Identity):
        await registry.publish(alice, make_request())

        for _ in range(3):
            await registry.get_package("json-lib")
        await registry.counter.drain()

        assert (await registry.store.get("json-lib")).downloads == 3
        assert (await registry.stats()).total_downloads == 3

    async def test_get_unknown_package_does_not_count(self, registry: Registry):
        with pytest.raises(PackageNotFoundError):
            await registry.get_package("missing")
        assert registry.counter.pending == 0

    async def test_download_url(self, registry: Registry):
        assert registry.download_url("json-lib", "1.0.0") == "/api/v1/packages/json-lib/1.0.0/download"

    async def test_search_and_list(self, registry: Registry, alice: Identity):
        await registry.publish(alice, make_request(name="json-lib", description="JSON helpers"))
        await registry.publish(alice, make_request(name="http-client", description="Web requests"))

        assert [p.name for p in await registry.list_packages()] == ["http-client", "json-lib"]
        assert [p.name for p in await registry.search("web")] == ["http-client"]
        assert await registry.search("nomatch-xyz") == []


@pytest.mark.asyncio
class TestUpdateMetadata:
    async def test_owner_updates_fields(self, registry: Registry, alice: Identity):
        await registry.publish(alice, make_request(description="old"))

        package = await registry.update_metadata(
            alice, "json-lib", DescriptiveUpdate(description="new", homepage="https://example.com")
        )

        assert package.description == "new"
        assert package.homepage == "https://example.com"
        assert package.license == "MIT"

    async def test_non_owner_forbidden(self, registry: Registry, alice: Identity, bob: Identity):
        await registry.publish(alice, make_request(description="old"))

        with pytest.raises(ForbiddenError):
            await registry.update_metadata(bob, "json-lib", DescriptiveUpdate(description="hijacked"))
        assert (await registry.store.get("json-lib")).description == "old"


@pytest.mark.asyncio
class TestSqlRegistry:
    """End-to-end over the SQL store and local blob storage."""

    async def test_publish_read_download(self, sql_registry: Registry):
        alice, _ = await sql_registry.register_identity("alice@example.com", "Alice")

        result = await sql_registry.publish(alice, make_request())
        assert result.created is True
        assert await sql_registry.owners.owns_any(alice.owner_id, "json-lib")

        await sql_registry.get_package("json-lib")
        await sql_registry.get_package("json-lib")
        await sql_registry.counter.drain()

        package = await sql_registry.store.get("json-lib")
        assert package.downloads == 2
        assert package.authors == ["Alice"]

        artifact = await sql_registry.download("json-lib", "1.0.0")
        assert artifact.data == SAMPLE_TARBALL
        assert artifact.checksum == result.checksum

    async def test_yank_persists(self, sql_registry: Registry):
        alice, _ = await sql_registry.register_identity("alice@example.com", "Alice")
        await sql_registry.publish(alice, make_request())

        await sql_registry.set_yanked(alice, "json-lib", "1.0.0", True)

        with pytest.raises(GoneError):
            await sql_registry.download("json-lib", "1.0.0")
        stats = await sql_registry.stats()
        assert stats.total_packages == 1
        assert stats.total_versions == 1
