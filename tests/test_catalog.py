"""Tests for the release catalog."""

import asyncio

import pytest

import setup_eli.catalog
import setup_eli.errors
import setup_eli.github


def test_parse_artifact_reads_os_and_arch() -> None:
    """parse_artifact takes tokens 1 and 2 of the extensionless name."""
    asset = setup_eli.github.ReleaseAsset(
        name="eli-windows-x86_64.exe", url="https://e/eli-windows-x86_64.exe"
    )
    artifact = setup_eli.catalog.parse_artifact(asset)
    assert artifact.filename == "eli-windows-x86_64.exe"
    assert artifact.os == "windows"
    assert artifact.arch == "x86_64"
    assert artifact.download_url == "https://e/eli-windows-x86_64.exe"


def test_parse_artifact_missing_tokens() -> None:
    """parse_artifact leaves missing tokens empty."""
    asset = setup_eli.github.ReleaseAsset(name="checksums.txt", url="https://e")
    artifact = setup_eli.catalog.parse_artifact(asset)
    assert artifact.os == ""
    assert artifact.arch == ""


def test_build_catalog_filters_and_sorts(release_factory) -> None:
    """build_catalog drops old releases and orders newest first."""
    releases = (
        release_factory("v0.29.0"),
        release_factory("0.28.9"),
        release_factory("v0.30.0"),
        release_factory("0.29.10"),
    )
    catalog = setup_eli.catalog.build_catalog(releases)
    assert [entry.version for entry in catalog] == ["0.30.0", "0.29.10", "0.29.0"]
    assert catalog[0].tag == "v0.30.0"


def test_build_catalog_keeps_manifest_order_for_ties(release_factory) -> None:
    """Releases with equal versions keep their relative order."""
    releases = (
        release_factory("0.29.1", names=("eli-linux-x86_64",)),
        release_factory("v0.29.1", names=("eli-linux-aarch64",)),
        release_factory("0.29.2"),
    )
    catalog = setup_eli.catalog.build_catalog(releases)
    assert [entry.tag for entry in catalog] == ["0.29.2", "0.29.1", "v0.29.1"]


def test_build_catalog_skips_unparseable_tags(release_factory) -> None:
    """Tags that are not versions never reach the catalog."""
    releases = (release_factory("nightly"), release_factory("0.29.0"))
    catalog = setup_eli.catalog.build_catalog(releases)
    assert [entry.version for entry in catalog] == ["0.29.0"]


def test_build_catalog_stable_flag(release_factory) -> None:
    """Pre-releases and drafts are not stable."""
    releases = (
        release_factory("0.30.0-rc.1", prerelease=True),
        release_factory("0.29.9", draft=True),
        release_factory("0.29.8"),
    )
    catalog = setup_eli.catalog.build_catalog(releases)
    assert [entry.stable for entry in catalog] == [False, False, True]


def test_list_releases_uses_source(source) -> None:
    """list_releases builds a fresh catalog from the source on every call."""
    first = asyncio.run(setup_eli.catalog.list_releases(source))
    second = asyncio.run(setup_eli.catalog.list_releases(source))
    assert [entry.version for entry in first] == ["0.29.2", "0.29.1", "0.29.0"]
    assert first == second
    assert source.list_calls == 2


def test_list_releases_propagates_source_errors() -> None:
    """Source failures reach the caller unchanged."""

    class BrokenSource:
        async def list_releases(self):
            raise setup_eli.errors.CatalogUnavailableError(message="offline")

        async def download(self, url, dest_fpath):
            raise AssertionError("unreachable")

    with pytest.raises(setup_eli.errors.CatalogUnavailableError, match="offline"):
        asyncio.run(setup_eli.catalog.list_releases(BrokenSource()))
