"""Reporting to the invoking pipeline via GitHub Actions workflow commands."""

import os
import pathlib
import re

import beartype

import setup_eli.errors

_ELI_VERSION_RE = re.compile(r"eli (\d+\.\d+\.\d+)")


@beartype.beartype
def add_path(dpath: pathlib.Path) -> None:
    """Prepend dpath to PATH for this process and for later pipeline steps."""
    os.environ["PATH"] = f"{dpath}{os.pathsep}{os.environ.get('PATH', '')}"

    path_fpath = os.environ.get("GITHUB_PATH")
    if path_fpath:
        _append_line(pathlib.Path(path_fpath), str(dpath))
    else:
        print(f"::add-path::{dpath}")


@beartype.beartype
def set_output(name: str, value: str) -> None:
    """Publish a step output."""
    output_fpath = os.environ.get("GITHUB_OUTPUT")
    if output_fpath:
        _append_line(pathlib.Path(output_fpath), f"{name}={value}")
    else:
        print(f"::set-output name={name}::{_escape(value)}")


@beartype.beartype
def error(message: str) -> None:
    """Report a failure annotation."""
    print(f"::error::{_escape(message)}")


@beartype.beartype
def parse_eli_version(output: str) -> str:
    """Extract major.minor.patch from `eli -v` output."""
    match = _ELI_VERSION_RE.search(output)
    if match is None:
        raise setup_eli.errors.EliError(message="Eli version not found")
    return match.group(1)


@beartype.beartype
def _append_line(fpath: pathlib.Path, line: str) -> None:
    with fpath.open("a", encoding="utf-8") as fd:
        fd.write(f"{line}\n")


@beartype.beartype
def _escape(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
