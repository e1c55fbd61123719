"""Normalization and range matching of eli version strings."""

import re

import beartype
import semantic_version

import setup_eli.errors

_CORE_RE = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?")


@beartype.beartype
def make_semver(raw: str) -> str:
    """Normalize a release tag to a strict semantic version.

    A leading "v" is dropped and the numeric core is completed with zeros, so
    "v5" becomes "5.0.0" and "0.29-rc.1" becomes "0.29.0-rc.1". Anything after
    the first "-" must form a valid pre-release with the coerced core.
    """
    version = raw[1:] if raw.startswith("v") else raw
    core, _, suffix = version.partition("-")

    match = _CORE_RE.match(core)
    if match is None:
        raise setup_eli.errors.InvalidVersionFormatError.make(version)

    major, minor, patch = (int(group) if group else 0 for group in match.groups())
    sem_version = f"{major}.{minor}.{patch}"
    if not suffix:
        return sem_version

    full_version = f"{sem_version}-{suffix}"
    if not semantic_version.validate(full_version):
        raise setup_eli.errors.InvalidVersionFormatError.make(version)
    return full_version


@beartype.beartype
def satisfies(version: str, spec: str) -> bool:
    """Return True if a normalized version satisfies an npm-style range.

    "0" and "0.29" match anything within that prefix, "^0.29.0" follows caret
    rules. Pre-releases only match comparators on the same major.minor.patch.
    """
    try:
        npm_spec = semantic_version.NpmSpec(spec)
    except ValueError:
        raise setup_eli.errors.InvalidVersionFormatError(
            message=f"Invalid version spec '{spec}'",
            hint="Use an exact version, a range such as ^0.29.0, a prefix such as 0.29, or 'latest'.",
            version=spec,
        ) from None
    return npm_spec.match(semantic_version.Version(version))


@beartype.beartype
def is_explicit_version(spec: str) -> bool:
    """Return True if spec names a single full semantic version."""
    spec = spec.strip()
    if spec.startswith("v"):
        spec = spec[1:]
    return bool(semantic_version.validate(spec))


@beartype.beartype
def is_prerelease(version: str) -> bool:
    return bool(semantic_version.Version(version).prerelease)


@beartype.beartype
def major_minor(version: str) -> str:
    parsed = semantic_version.Version(version)
    return f"{parsed.major}.{parsed.minor}"


@beartype.beartype
def compare_key(version: str) -> semantic_version.Version:
    """Sort key for normalized versions."""
    return semantic_version.Version(version)
