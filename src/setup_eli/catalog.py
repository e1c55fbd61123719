"""Release catalog: published eli releases as version-sorted entries."""

import collections.abc
import dataclasses
import logging
import pathlib
import typing as tp

import beartype

import setup_eli.errors
import setup_eli.github
import setup_eli.versions

logger = logging.getLogger(__name__)

MIN_VERSION = "0.29.0"
"""Releases older than this are never offered."""


@tp.runtime_checkable
class ReleaseSource(tp.Protocol):
    """Where releases are listed and downloaded from."""

    async def list_releases(self) -> tuple[setup_eli.github.Release, ...]: ...

    async def download(self, url: str, dest_fpath: pathlib.Path) -> pathlib.Path: ...


@tp.runtime_checkable
class ArtifactLike(tp.Protocol):
    """Minimal view of a downloadable file used for stable-version resolution."""

    @property
    def arch(self) -> str: ...

    @property
    def filename(self) -> str: ...


@tp.runtime_checkable
class ReleaseLike(tp.Protocol):
    """Minimal view of a release used for stable-version resolution."""

    @property
    def version(self) -> str: ...

    @property
    def files(self) -> collections.abc.Sequence[ArtifactLike]: ...


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class ReleaseArtifact:
    """A release file tagged with the platform and architecture in its name."""

    filename: str
    os: str
    """Platform token, e.g. "linux", "windows", "macos"."""
    arch: str
    """Architecture token, e.g. "x86_64", "aarch64"."""
    download_url: str


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class ReleaseEntry:
    """One published release."""

    tag: str
    """Tag as published, e.g. "v0.29.1"."""
    version: str
    """Normalized semantic version of the tag."""
    stable: bool
    """False for pre-releases and drafts."""
    files: tuple[ReleaseArtifact, ...]


@beartype.beartype
def parse_artifact(asset: setup_eli.github.ReleaseAsset) -> ReleaseArtifact:
    """Read platform and architecture from an "eli-<os>-<arch>[.ext]" asset name."""
    base_name = pathlib.PurePosixPath(asset.name).stem
    tokens = base_name.split("-")
    return ReleaseArtifact(
        filename=asset.name,
        os=tokens[1] if len(tokens) > 1 else "",
        arch=tokens[2] if len(tokens) > 2 else "",
        download_url=asset.url,
    )


@beartype.beartype
def build_catalog(
    releases: collections.abc.Iterable[setup_eli.github.Release],
) -> tuple[ReleaseEntry, ...]:
    """Filter releases to MIN_VERSION and newer, newest first."""
    minimum = setup_eli.versions.compare_key(MIN_VERSION)
    entries = []
    for release in releases:
        try:
            version = setup_eli.versions.make_semver(release.tag)
        except setup_eli.errors.InvalidVersionFormatError:
            logger.debug("Skipping release %s: not a semantic version", release.tag)
            continue
        if setup_eli.versions.compare_key(version) < minimum:
            continue
        entries.append(
            ReleaseEntry(
                tag=release.tag,
                version=version,
                stable=not release.prerelease and not release.draft,
                files=tuple(parse_artifact(asset) for asset in release.assets),
            )
        )

    # sorted() is stable, so equal versions keep manifest order.
    return tuple(
        sorted(
            entries,
            key=lambda entry: setup_eli.versions.compare_key(entry.version),
            reverse=True,
        )
    )


async def list_releases(source: ReleaseSource) -> tuple[ReleaseEntry, ...]:
    """Fetch the catalog from source. Errors from the source propagate as-is."""
    releases = await source.list_releases()
    return build_catalog(releases)
