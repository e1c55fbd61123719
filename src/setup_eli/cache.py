"""On-disk tool cache keyed by (tool, version, arch)."""

import asyncio
import logging
import os
import pathlib
import shutil

import beartype
import filelock
import semantic_version

import setup_eli.versions

logger = logging.getLogger(__name__)


@beartype.beartype
def get_tool_cache_dpath() -> pathlib.Path:
    """Get the tool cache root, respecting RUNNER_TOOL_CACHE and XDG_CACHE_HOME."""
    runner_cache = os.environ.get("RUNNER_TOOL_CACHE")
    if runner_cache:
        return pathlib.Path(runner_cache)
    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    if xdg_cache:
        return pathlib.Path(xdg_cache) / "setup-eli" / "tool-cache"
    return pathlib.Path.home() / ".cache" / "setup-eli" / "tool-cache"


class ToolCache:
    """Installed tool directories under <root>/<tool>/<version>/<arch>.

    An entry only counts once its "<arch>.complete" marker exists. The marker
    is written after the directory is fully copied.
    """

    def __init__(self, root_dpath: pathlib.Path | None = None) -> None:
        self.root_dpath = root_dpath or get_tool_cache_dpath()

    async def find(
        self, tool: str, version_spec: str, arch: str
    ) -> pathlib.Path | None:
        """Return the cached directory for a version or the best cached match for a range."""
        return await asyncio.to_thread(self._find, tool, version_spec, arch)

    async def cache_dir(
        self, source_dpath: pathlib.Path, tool: str, version: str, arch: str
    ) -> pathlib.Path:
        """Copy source_dpath into the cache and return the cached directory."""
        return await asyncio.to_thread(
            self._cache_dir, source_dpath, tool, version, arch
        )

    @beartype.beartype
    def find_all_versions(self, tool: str, arch: str) -> tuple[str, ...]:
        """List complete cached versions of tool for arch."""
        tool_dpath = self.root_dpath / tool
        if not tool_dpath.is_dir():
            return ()

        versions = []
        for version_dpath in sorted(tool_dpath.iterdir()):
            if not version_dpath.is_dir():
                continue
            if self._is_complete(version_dpath / arch):
                versions.append(version_dpath.name)
        return tuple(versions)

    @beartype.beartype
    def _find(self, tool: str, version_spec: str, arch: str) -> pathlib.Path | None:
        if setup_eli.versions.is_explicit_version(version_spec):
            version = _clean(version_spec)
        else:
            version = self._evaluate_versions(
                self.find_all_versions(tool, arch), version_spec
            )
            if version is None:
                return None

        cache_dpath = self.root_dpath / tool / version / arch
        logger.debug("Checking tool cache: %s", cache_dpath)
        if self._is_complete(cache_dpath):
            return cache_dpath
        return None

    @beartype.beartype
    def _evaluate_versions(
        self, versions: tuple[str, ...], version_spec: str
    ) -> str | None:
        """Pick the highest cached version satisfying version_spec."""
        valid = [v for v in versions if semantic_version.validate(v)]
        for version in sorted(valid, key=setup_eli.versions.compare_key, reverse=True):
            if setup_eli.versions.satisfies(version, version_spec):
                logger.debug("Matched cached version %s for %s", version, version_spec)
                return version
        return None

    @beartype.beartype
    def _cache_dir(
        self, source_dpath: pathlib.Path, tool: str, version: str, arch: str
    ) -> pathlib.Path:
        if not source_dpath.is_dir():
            raise NotADirectoryError(f"Source directory does not exist: {source_dpath}")

        version = _clean(version)
        dest_dpath = self.root_dpath / tool / version / arch
        marker_fpath = _marker_fpath(dest_dpath)
        dest_dpath.parent.mkdir(parents=True, exist_ok=True)

        lock = filelock.FileLock(dest_dpath.with_name(f"{arch}.lock"))
        with lock:
            marker_fpath.unlink(missing_ok=True)
            if dest_dpath.exists():
                shutil.rmtree(dest_dpath)
            shutil.copytree(source_dpath, dest_dpath)
            marker_fpath.touch()

        return dest_dpath

    @staticmethod
    def _is_complete(dpath: pathlib.Path) -> bool:
        return dpath.is_dir() and _marker_fpath(dpath).exists()


@beartype.beartype
def _marker_fpath(dpath: pathlib.Path) -> pathlib.Path:
    return dpath.with_name(f"{dpath.name}.complete")


@beartype.beartype
def _clean(version: str) -> str:
    """Strip whitespace and a leading "v" from valid versions."""
    cleaned = version.strip()
    if cleaned.startswith("v"):
        cleaned = cleaned[1:]
    if semantic_version.validate(cleaned):
        return cleaned
    return version
