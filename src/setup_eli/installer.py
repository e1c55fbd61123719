"""Acquire an eli release: resolve, consult the tool cache, download and cache."""

import asyncio
import logging
import os
import pathlib
import tempfile
import uuid

import beartype

import setup_eli.cache
import setup_eli.catalog
import setup_eli.config
import setup_eli.errors
import setup_eli.platform
import setup_eli.resolver
import setup_eli.versions

logger = logging.getLogger(__name__)

TOOL_NAME = "eli"


async def get_eli(
    version_spec: str | None,
    source: setup_eli.catalog.ReleaseSource,
    cache: setup_eli.cache.ToolCache,
    *,
    arch: str | None = None,
    os_name: str | None = None,
    temp_dpath: pathlib.Path | None = None,
) -> pathlib.Path:
    """Return the directory holding the eli executable for version_spec.

    A cache hit returns immediately without touching the release source.
    """
    arch = arch or setup_eli.platform.get_host_arch()
    os_name = os_name or setup_eli.platform.get_os()
    version_spec = await resolve_version_spec(
        version_spec, source, arch=arch, os_name=os_name
    )

    tool_dpath = await cache.find(TOOL_NAME, version_spec, arch)
    if tool_dpath is not None:
        logger.info("Found in cache @ %s", tool_dpath)
        return tool_dpath

    logger.info("Attempting to download %s-%s...", version_spec, arch)
    info = await setup_eli.resolver.get_info_from_dist(
        version_spec, source, os_name=os_name, arch=arch
    )
    if info is None:
        raise setup_eli.errors.VersionNotFoundError.make(version_spec, os_name, arch)

    try:
        logger.info("Install from dist")
        return await install_eli_version(
            info, source, cache, arch=arch, os_name=os_name, temp_dpath=temp_dpath
        )
    except Exception as err:
        raise setup_eli.errors.ToolAcquisitionFailedError(
            message=f"Failed to download version {version_spec}: {err}",
            version=version_spec,
        ) from err


async def resolve_version_spec(
    version_spec: str | None,
    source: setup_eli.catalog.ReleaseSource,
    *,
    arch: str,
    os_name: str,
) -> str:
    """Replace a missing spec or the "latest" alias with a concrete version."""
    latest = setup_eli.resolver.ReleaseAlias.LATEST.value
    if version_spec and version_spec != latest:
        return version_spec

    version = await setup_eli.resolver.resolve_latest_version(
        latest, source, os_name=os_name, arch=arch
    )
    logger.info("%s version resolved as %s", latest, version)
    if version is None:
        raise setup_eli.errors.NoStableVersionFoundError(
            message=(
                f"Unable to find a stable eli version for platform {os_name} "
                f"and architecture {arch}."
            ),
            hint="Pin an explicit version instead of 'latest'.",
        )
    return version


async def install_eli_version(
    info: setup_eli.resolver.DownloadInfo,
    source: setup_eli.catalog.ReleaseSource,
    cache: setup_eli.cache.ToolCache,
    *,
    arch: str,
    os_name: str | None = None,
    temp_dpath: pathlib.Path | None = None,
) -> pathlib.Path:
    """Download info into a scratch directory, normalize it and commit it to cache."""
    logger.info("Acquiring %s from %s", info.resolved_version, info.download_url)

    windows = setup_eli.platform.is_windows(os_name)
    base_dpath = temp_dpath or setup_eli.config.get_temp_dpath()
    base_dpath.mkdir(parents=True, exist_ok=True)

    with tempfile.TemporaryDirectory(
        prefix="setup-eli-", dir=base_dpath
    ) as work_dpath_str:
        work_dpath = pathlib.Path(work_dpath_str)
        # Windows tooling needs the original extension on the downloaded file.
        if windows:
            download_fpath = work_dpath / "download" / info.filename
        else:
            download_fpath = work_dpath / "download" / uuid.uuid4().hex

        download_fpath = await source.download(info.download_url, download_fpath)
        bin_fpath = await asyncio.to_thread(
            place_binary,
            download_fpath,
            work_dpath / TOOL_NAME,
            info.filename,
            executable=not windows,
        )
        logger.info("Successfully downloaded eli to %s", bin_fpath)

        logger.info("Adding to the cache ...")
        cached_dpath = await cache.cache_dir(
            bin_fpath.parent,
            TOOL_NAME,
            setup_eli.versions.make_semver(info.resolved_version),
            arch,
        )

    logger.info("Successfully cached eli to %s", cached_dpath)
    return cached_dpath


@beartype.beartype
def place_binary(
    download_fpath: pathlib.Path,
    bin_dpath: pathlib.Path,
    filename: str,
    *,
    executable: bool,
) -> pathlib.Path:
    """Move a downloaded artifact to <bin_dpath>/eli[.ext] and mark it executable."""
    bin_fpath = bin_dpath / f"{TOOL_NAME}{pathlib.PurePosixPath(filename).suffix}"

    bin_dpath.mkdir(parents=True, exist_ok=True)
    os.replace(download_fpath, bin_fpath)
    if executable:
        os.chmod(bin_fpath, 0o755)
    return bin_fpath
