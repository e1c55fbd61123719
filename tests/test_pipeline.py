"""Tests for pipeline reporting."""

import os
import pathlib

import pytest

import setup_eli.errors
import setup_eli.pipeline


def test_parse_eli_version() -> None:
    """parse_eli_version extracts major.minor.patch from `eli -v` output."""
    output = (
        "Lua 5.4.4  Copyright (C) 1994-2022 Lua.org, PUC-Rio\n"
        "eli 0.29.1  Copyright (C) 2019-2023 alis.is"
    )
    assert setup_eli.pipeline.parse_eli_version(output) == "0.29.1"


def test_parse_eli_version_missing() -> None:
    """parse_eli_version fails when the output has no eli version."""
    with pytest.raises(setup_eli.errors.EliError, match="Eli version not found"):
        setup_eli.pipeline.parse_eli_version("command not found")


def test_add_path_writes_github_path(tmp_path: pathlib.Path, monkeypatch) -> None:
    """add_path appends to GITHUB_PATH and updates PATH."""
    path_fpath = tmp_path / "github_path"
    monkeypatch.setenv("GITHUB_PATH", str(path_fpath))
    monkeypatch.setenv("PATH", "/usr/bin")
    tool_dpath = tmp_path / "eli" / "0.29.0" / "x64"

    setup_eli.pipeline.add_path(tool_dpath)

    assert path_fpath.read_text().splitlines() == [str(tool_dpath)]
    assert os.environ["PATH"].split(os.pathsep)[0] == str(tool_dpath)


def test_add_path_without_env_file(tmp_path: pathlib.Path, monkeypatch, capsys) -> None:
    """add_path falls back to the add-path workflow command."""
    monkeypatch.delenv("GITHUB_PATH", raising=False)
    monkeypatch.setenv("PATH", "/usr/bin")

    setup_eli.pipeline.add_path(tmp_path)

    assert capsys.readouterr().out == f"::add-path::{tmp_path}\n"


def test_set_output(tmp_path: pathlib.Path, monkeypatch, capsys) -> None:
    """set_output writes to GITHUB_OUTPUT, or prints a workflow command."""
    output_fpath = tmp_path / "github_output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(output_fpath))
    setup_eli.pipeline.set_output("eli-version", "0.29.1")
    assert output_fpath.read_text().splitlines() == ["eli-version=0.29.1"]

    monkeypatch.delenv("GITHUB_OUTPUT")
    setup_eli.pipeline.set_output("eli-version", "0.29.1")
    assert capsys.readouterr().out == "::set-output name=eli-version::0.29.1\n"


def test_error_escapes_newlines(capsys) -> None:
    """error keeps multi-line messages on one workflow command line."""
    setup_eli.pipeline.error("Failed\nHint: retry at 100%")
    assert capsys.readouterr().out == "::error::Failed%0AHint: retry at 100%25\n"
