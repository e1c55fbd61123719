"""CLI definition using tyro."""

import asyncio
import dataclasses
import logging
import pathlib
import shutil
import subprocess
import sys
import typing as tp

import beartype
import tyro

import setup_eli.cache
import setup_eli.catalog
import setup_eli.config
import setup_eli.errors
import setup_eli.github
import setup_eli.installer
import setup_eli.pipeline
import setup_eli.platform
import setup_eli.resolver

logger = logging.getLogger(__name__)


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class Install:
    """Install eli into the tool cache and add it to PATH."""

    version: tp.Annotated[str | None, tyro.conf.arg(name="eli-version")] = None
    """Version spec: exact, range, major/minor prefix, or "latest"."""

    version_file: tp.Annotated[
        pathlib.Path | None, tyro.conf.arg(name="eli-version-file")
    ] = None
    """File containing the version spec. Ignored when a version is given."""

    architecture: str | None = None
    """Target architecture. Defaults to the host architecture."""

    token: str | None = None
    """GitHub token. Defaults to GITHUB_TOKEN."""

    cache_dpath: tp.Annotated[pathlib.Path | None, tyro.conf.arg(name="cache-dir")] = (
        None
    )
    """Custom tool cache directory."""

    verify: bool = True
    """Run `eli -v` after installing and publish the version as a step output."""

    verbose: bool = False
    """Show detailed output."""


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class Resolve:
    """Show which release a version spec resolves to, without downloading."""

    version: tp.Annotated[str | None, tyro.conf.arg(name="eli-version")] = None
    """Version spec: exact, range, major/minor prefix, or "latest"."""

    version_file: tp.Annotated[
        pathlib.Path | None, tyro.conf.arg(name="eli-version-file")
    ] = None
    """File containing the version spec. Ignored when a version is given."""

    architecture: str | None = None
    """Target architecture. Defaults to the host architecture."""

    token: str | None = None
    """GitHub token. Defaults to GITHUB_TOKEN."""

    verbose: bool = False
    """Show detailed output."""


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class List:
    """List published eli versions available for this platform."""

    architecture: str | None = None
    """Target architecture. Defaults to the host architecture."""

    token: str | None = None
    """GitHub token. Defaults to GITHUB_TOKEN."""

    verbose: bool = False
    """Show detailed output."""


@beartype.beartype
def run_install(cmd: Install) -> None:
    """Run the install command."""
    inputs = setup_eli.config.read_inputs(
        cmd.version, cmd.version_file, cmd.architecture, cmd.token
    )
    version_spec = setup_eli.config.resolve_version_input(
        inputs.version, inputs.version_file
    )
    logger.info("Setup eli version spec %s", version_spec)

    arch = inputs.architecture or setup_eli.platform.get_host_arch()
    source = _make_source(inputs.token)
    cache = setup_eli.cache.ToolCache(cmd.cache_dpath)

    install_dpath = asyncio.run(
        setup_eli.installer.get_eli(version_spec, source, cache, arch=arch)
    )

    setup_eli.pipeline.add_path(install_dpath)
    logger.info("Added eli to the path")

    if not cmd.verify:
        return

    output = _run_eli_version(install_dpath)
    logger.info(output)
    eli_version = setup_eli.pipeline.parse_eli_version(output)
    setup_eli.pipeline.set_output("eli-version", eli_version)
    logger.info("Successfully set up eli version %s", eli_version)


@beartype.beartype
def run_resolve(cmd: Resolve) -> None:
    """Run the resolve command."""
    inputs = setup_eli.config.read_inputs(
        cmd.version, cmd.version_file, cmd.architecture, cmd.token
    )
    version_spec = setup_eli.config.resolve_version_input(
        inputs.version, inputs.version_file
    )
    os_name = setup_eli.platform.get_os()
    arch = inputs.architecture or setup_eli.platform.get_host_arch()
    source = _make_source(inputs.token)

    info = asyncio.run(_resolve(version_spec, source, os_name, arch))
    if info is None:
        raise setup_eli.errors.VersionNotFoundError.make(version_spec, os_name, arch)

    print(f"version: {info.resolved_version}")
    print(f"asset: {info.filename}")
    print(f"url: {info.download_url}")


@beartype.beartype
def run_list(cmd: List) -> None:
    """Run the list command."""
    inputs = setup_eli.config.read_inputs(
        architecture=cmd.architecture, token=cmd.token
    )
    platform = setup_eli.platform.get_platform()
    arch = setup_eli.platform.get_arch(
        inputs.architecture or setup_eli.platform.get_host_arch()
    )
    source = _make_source(inputs.token)

    entries = asyncio.run(setup_eli.catalog.list_releases(source))
    available = [
        entry
        for entry in entries
        if any(file.os == platform and file.arch == arch for file in entry.files)
    ]
    if not available:
        print(f"No eli releases for {platform}-{arch}.")
        return

    for entry in available:
        status = "" if entry.stable else "  (pre-release)"
        print(f"{entry.version}{status}")


@beartype.beartype
def main() -> None:
    """Main entry point."""
    command = tyro.cli(Install | Resolve | List)  # type: ignore[arg-type]
    _configure_logging(command.verbose)

    try:
        match command:
            case Install() as cmd:
                run_install(cmd)
            case Resolve() as cmd:
                run_resolve(cmd)
            case List() as cmd:
                run_list(cmd)
    except setup_eli.errors.EliError as err:
        setup_eli.pipeline.error(str(err))
        sys.exit(1)


async def _resolve(
    version_spec: str,
    source: setup_eli.catalog.ReleaseSource,
    os_name: str,
    arch: str,
) -> setup_eli.resolver.DownloadInfo | None:
    """Resolve a spec, including aliases, to download info."""
    version_spec = await setup_eli.installer.resolve_version_spec(
        version_spec, source, arch=arch, os_name=os_name
    )
    return await setup_eli.resolver.get_info_from_dist(
        version_spec, source, os_name=os_name, arch=arch
    )


@beartype.beartype
def _make_source(token: str | None) -> setup_eli.github.GitHubReleaseSource:
    if not token:
        logger.debug("No GitHub token set. API rate limited to 60 requests/hour.")
    client = setup_eli.github.GitHubClient(token=token)
    return setup_eli.github.GitHubReleaseSource(client)


@beartype.beartype
def _run_eli_version(install_dpath: pathlib.Path) -> str:
    """Run `eli -v` from install_dpath and return its combined output."""
    eli_fpath = shutil.which(setup_eli.installer.TOOL_NAME, path=str(install_dpath))
    if eli_fpath is None:
        raise setup_eli.errors.EliError(
            message=f"eli executable not found in {install_dpath}",
        )

    try:
        result = subprocess.run(
            [eli_fpath, "-v"], capture_output=True, text=True, check=False
        )
    except OSError as err:
        raise setup_eli.errors.EliError(
            message=f"Failed to run {eli_fpath}: {err}",
            hint="Use --no-verify when installing for a foreign architecture.",
        ) from None

    return (result.stdout + result.stderr).strip()


@beartype.beartype
def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stdout,
    )
