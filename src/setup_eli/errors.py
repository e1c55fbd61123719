"""User-facing errors with actionable context.

Errors are messages for operators reading a pipeline log. Each error should answer:
1. What went wrong?
2. What was the context (spec, version, platform, path)?
3. What can the operator do about it?
"""

import dataclasses
import pathlib

import beartype


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class EliError(Exception):
    """Base error with structured context for user-facing messages."""

    message: str
    """What went wrong."""

    hint: str | None = None
    """What the user can do about it."""

    def __str__(self) -> str:
        parts = [self.message]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        return "\n".join(parts)


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class InvalidVersionFormatError(EliError):
    """A release tag or version spec is not expressible as a semantic version."""

    version: str = dataclasses.field(default="", kw_only=True)
    """The offending tag or spec."""

    @staticmethod
    def make(version: str) -> "InvalidVersionFormatError":
        """Create an InvalidVersionFormatError with the standard message."""
        return InvalidVersionFormatError(
            message=f"The version: {version} can't be changed to SemVer notation",
            version=version,
        )


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class CatalogUnavailableError(EliError):
    """The upstream release listing failed or returned unusable data."""


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class NoStableVersionFoundError(EliError):
    """No stable release exists for the platform and architecture."""


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class VersionNotFoundError(EliError):
    """No release satisfies the spec for the platform and architecture."""

    spec: str = dataclasses.field(default="", kw_only=True)
    platform: str = dataclasses.field(default="", kw_only=True)
    arch: str = dataclasses.field(default="", kw_only=True)

    @staticmethod
    def make(spec: str, platform: str, arch: str) -> "VersionNotFoundError":
        """Create a VersionNotFoundError with the standard message."""
        return VersionNotFoundError(
            message=(
                f"Unable to find eli version '{spec}' for platform {platform} "
                f"and architecture {arch}."
            ),
            spec=spec,
            platform=platform,
            arch=arch,
        )


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class ToolAcquisitionFailedError(EliError):
    """Download, placement or cache commit of a release failed."""

    version: str = dataclasses.field(default="", kw_only=True)
    """Version that was being acquired."""


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class VersionFileMissingError(EliError):
    """The configured version file does not exist."""

    path: pathlib.Path = dataclasses.field(kw_only=True)

    @staticmethod
    def make(path: pathlib.Path | str) -> "VersionFileMissingError":
        """Create a VersionFileMissingError with the standard message."""
        return VersionFileMissingError(
            message=f"The specified eli version file at: {path} does not exist",
            path=pathlib.Path(path),
        )


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class TransportError(EliError):
    """HTTP request to GitHub failed."""


@beartype.beartype
@dataclasses.dataclass(frozen=True)
class AuthError(TransportError):
    """GitHub authentication failed."""

    message: str = ""
    hint: str | None = None

    def __post_init__(self) -> None:
        if not self.message:
            object.__setattr__(self, "message", "GitHub authentication failed.")
        if not self.hint:
            object.__setattr__(
                self,
                "hint",
                "Check the token input or GITHUB_TOKEN. If invalid or expired, create a new one.",
            )
