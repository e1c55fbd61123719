"""OS/arch detection and normalization to release filename tokens."""

import platform

import beartype

_PLATFORM_MAP = {
    "darwin": "macos",
    "freebsd": "freebsd",
    "linux": "linux",
    "win32": "windows",
    "windows": "windows",
}

# eli publishes aarch64, riscv64 and x86_64 builds.
_ARCH_MAP = {
    "arm64": "aarch64",
    "x64": "x86_64",
    "amd64": "x86_64",
}


@beartype.beartype
def get_os() -> str:
    """Get the raw host OS name."""
    return platform.system().lower()


@beartype.beartype
def get_host_arch() -> str:
    """Get the raw host architecture name."""
    return platform.machine().lower()


@beartype.beartype
def get_platform(os_name: str | None = None) -> str:
    """Map an OS name to the platform token used in release filenames."""
    if os_name is None:
        os_name = get_os()
    os_name = os_name.lower()
    return _PLATFORM_MAP.get(os_name, os_name)


@beartype.beartype
def get_arch(arch: str) -> str:
    """Map an architecture name to the token used in release filenames."""
    arch = arch.lower()
    return _ARCH_MAP.get(arch, arch)


@beartype.beartype
def is_windows(os_name: str | None = None) -> bool:
    return get_platform(os_name) == "windows"
