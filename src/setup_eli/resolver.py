"""Match version specs against the release catalog."""

import collections.abc
import dataclasses
import enum
import logging

import beartype

import setup_eli.catalog
import setup_eli.platform
import setup_eli.versions

logger = logging.getLogger(__name__)


class ReleaseAlias(str, enum.Enum):
    LATEST = "latest"


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class DownloadInfo:
    """Everything needed to download a matched release."""

    download_url: str
    resolved_version: str
    filename: str


async def find_match(
    spec: str,
    source: setup_eli.catalog.ReleaseSource,
    *,
    os_name: str | None = None,
    arch: str | None = None,
) -> setup_eli.catalog.ReleaseEntry | None:
    """Find the newest release satisfying spec with a file for the platform.

    The returned entry carries only the matching file. Returns None when no
    release both satisfies spec and ships a file for the platform.
    """
    arch_filter = setup_eli.platform.get_arch(
        arch or setup_eli.platform.get_host_arch()
    )
    plat_filter = setup_eli.platform.get_platform(os_name)

    candidates = await setup_eli.catalog.list_releases(source)
    return match_catalog(spec, candidates, plat_filter, arch_filter)


@beartype.beartype
def match_catalog(
    spec: str,
    candidates: collections.abc.Sequence[setup_eli.catalog.ReleaseEntry],
    platform: str,
    arch: str,
) -> setup_eli.catalog.ReleaseEntry | None:
    """Scan a newest-first catalog and return the first usable entry."""
    for candidate in candidates:
        logger.debug("check %s satisfies %s", candidate.version, spec)
        if not setup_eli.versions.satisfies(candidate.version, spec):
            continue

        match = next(
            (
                file
                for file in candidate.files
                if file.arch == arch and file.os == platform
            ),
            None,
        )
        if match is None:
            continue

        logger.debug("matched %s", candidate.version)
        return dataclasses.replace(candidate, files=(match,))

    return None


async def get_info_from_dist(
    spec: str,
    source: setup_eli.catalog.ReleaseSource,
    *,
    os_name: str | None = None,
    arch: str | None = None,
) -> DownloadInfo | None:
    match = await find_match(spec, source, os_name=os_name, arch=arch)
    if match is None:
        return None

    return DownloadInfo(
        download_url=match.files[0].download_url,
        resolved_version=match.version,
        filename=match.files[0].filename,
    )


async def resolve_latest_version(
    alias: str,
    source: setup_eli.catalog.ReleaseSource,
    *,
    os_name: str | None = None,
    arch: str | None = None,
) -> str | None:
    """Resolve an alias such as "latest" to a concrete stable version."""
    arch_filter = setup_eli.platform.get_arch(
        arch or setup_eli.platform.get_host_arch()
    )
    plat_filter = setup_eli.platform.get_platform(os_name)

    candidates = await setup_eli.catalog.list_releases(source)
    return resolve_stable_version(alias, arch_filter, plat_filter, candidates)


@beartype.beartype
def resolve_stable_version(
    alias: str,
    arch: str,
    platform: str,
    releases: collections.abc.Sequence[setup_eli.catalog.ReleaseLike],
) -> str | None:
    """Pick the newest stable version in the newest stable major.minor line.

    releases must already be ordered newest first. Only releases with a file
    for arch whose name mentions platform are considered.
    """
    stable = [
        release.version
        for release in releases
        if any(
            file.arch == arch and platform in file.filename for file in release.files
        )
        and not setup_eli.versions.is_prerelease(release.version)
    ]
    logger.debug("alias %s, stable releases: %s", alias, ", ".join(stable))
    if not stable:
        return None

    line = setup_eli.versions.major_minor(stable[0])
    return next(
        (
            version
            for version in stable
            if setup_eli.versions.major_minor(version) == line
        ),
        None,
    )
