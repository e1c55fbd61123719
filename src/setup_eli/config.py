"""Step inputs from CLI flags and the pipeline environment."""

import dataclasses
import logging
import os
import pathlib
import tempfile

import beartype

import setup_eli.errors

logger = logging.getLogger(__name__)


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class Inputs:
    """Raw step inputs before version resolution."""

    version: str | None
    """Version spec, e.g. "0.29", "^0.29.0" or "latest"."""

    version_file: pathlib.Path | None
    """File containing the version spec."""

    architecture: str | None
    """Architecture override, None for the host architecture."""

    token: str | None
    """GitHub token used for API requests and downloads."""


@beartype.beartype
def get_input(name: str) -> str | None:
    """Read an Actions-style input from INPUT_<NAME>; empty counts as unset."""
    value = os.environ.get(f"INPUT_{name.replace(' ', '_').upper()}", "").strip()
    return value or None


@beartype.beartype
def read_inputs(
    version: str | None = None,
    version_file: pathlib.Path | None = None,
    architecture: str | None = None,
    token: str | None = None,
) -> Inputs:
    """Merge explicit values with environment inputs. Explicit values win."""
    if version_file is None:
        env_version_file = get_input("eli-version-file")
        if env_version_file:
            version_file = pathlib.Path(env_version_file)

    return Inputs(
        version=version or get_input("eli-version"),
        version_file=version_file,
        architecture=architecture or get_input("architecture"),
        token=token or get_input("token") or os.environ.get("GITHUB_TOKEN") or None,
    )


@beartype.beartype
def resolve_version_input(
    version: str | None, version_file: pathlib.Path | None
) -> str:
    """Choose the version spec: explicit version, then version file, then "latest"."""
    if version and version_file:
        logger.warning(
            "Both eli-version and eli-version-file inputs are specified, "
            "only eli-version will be used"
        )

    if version:
        return version

    if version_file:
        if not version_file.exists():
            raise setup_eli.errors.VersionFileMissingError.make(version_file)
        version = parse_version_file(version_file)

    return version or "latest"


@beartype.beartype
def parse_version_file(version_fpath: pathlib.Path) -> str:
    """Read a version spec from a file such as .eli-version."""
    try:
        contents = version_fpath.read_text()
    except FileNotFoundError:
        raise setup_eli.errors.VersionFileMissingError.make(version_fpath) from None
    return contents.strip()


@beartype.beartype
def get_temp_dpath() -> pathlib.Path:
    """Get the scratch directory for downloads, respecting RUNNER_TEMP."""
    runner_temp = os.environ.get("RUNNER_TEMP")
    if runner_temp:
        return pathlib.Path(runner_temp)
    return pathlib.Path(tempfile.gettempdir())
