"""Shared fixtures: an in-memory release source and a sample eli catalog."""

import collections.abc
import pathlib

import pytest

import setup_eli.cache
import setup_eli.github

_DOWNLOAD_BASE = "https://github.com/alis-is/eli/releases/download"

_PLATFORM_FILES = (
    "eli-linux-x86_64",
    "eli-linux-aarch64",
    "eli-linux-riscv64",
    "eli-macos-x86_64",
    "eli-macos-aarch64",
    "eli-windows-x86_64.exe",
)

ELI_SCRIPT = b"#!/bin/sh\necho 'eli 0.29.0  Copyright (C) 2019-2023 alis.is'\n"


class FakeSource:
    """Release source serving fixed releases and recording every call."""

    def __init__(
        self,
        releases: collections.abc.Iterable[setup_eli.github.Release],
        payload: bytes = ELI_SCRIPT,
        download_error: Exception | None = None,
    ) -> None:
        self.releases = tuple(releases)
        self.payload = payload
        self.download_error = download_error
        self.list_calls = 0
        self.downloads: list[tuple[str, pathlib.Path]] = []

    async def list_releases(self) -> tuple[setup_eli.github.Release, ...]:
        self.list_calls += 1
        return self.releases

    async def download(self, url: str, dest_fpath: pathlib.Path) -> pathlib.Path:
        self.downloads.append((url, dest_fpath))
        if self.download_error is not None:
            raise self.download_error
        dest_fpath.parent.mkdir(parents=True, exist_ok=True)
        dest_fpath.write_bytes(self.payload)
        return dest_fpath


def make_release(
    tag: str,
    names: tuple[str, ...] = _PLATFORM_FILES,
    prerelease: bool = False,
    draft: bool = False,
) -> setup_eli.github.Release:
    """Build a release whose assets follow the eli-<os>-<arch> convention."""
    assets = tuple(
        setup_eli.github.ReleaseAsset(name=name, url=f"{_DOWNLOAD_BASE}/{tag}/{name}")
        for name in names
    )
    return setup_eli.github.Release(
        tag=tag, assets=assets, prerelease=prerelease, draft=draft
    )


@pytest.fixture
def release_factory() -> collections.abc.Callable[..., setup_eli.github.Release]:
    return make_release


@pytest.fixture
def common_releases() -> tuple[setup_eli.github.Release, ...]:
    """0.29.x releases for all platforms, plus one release below the baseline."""
    return (
        make_release("0.29.2"),
        make_release("0.29.1"),
        make_release("0.29.0"),
        make_release("0.28.5"),
    )


@pytest.fixture
def source(common_releases: tuple[setup_eli.github.Release, ...]) -> FakeSource:
    return FakeSource(common_releases)


@pytest.fixture
def source_factory() -> type[FakeSource]:
    return FakeSource


@pytest.fixture
def tool_cache(tmp_path: pathlib.Path) -> setup_eli.cache.ToolCache:
    return setup_eli.cache.ToolCache(tmp_path / "tool-cache")
