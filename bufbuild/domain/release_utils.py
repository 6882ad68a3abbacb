import platform
import sys
from typing import Optional

from bufbuild.domain.models import ReleaseParameters

# platform.machine() spellings that differ from the upstream asset names
_ARCH_ALIASES = {
    "amd64": "x86_64",
}


def is_windows(platform_name: str) -> bool:
    return platform_name.startswith("win")


def executable_name(binary_name: str, platform_name: Optional[str] = None) -> str:
    """
    Return the file name of an executable on the given platform ('buf' or 'buf.exe').
    """
    platform_name = sys.platform if platform_name is None else platform_name
    return f"{binary_name}.exe" if is_windows(platform_name) else binary_name


def make_release_name(params: ReleaseParameters, binary_name: str = "buf") -> str:
    """
    Map platform, architecture and version to the upstream release name.

    The result doubles as the cache key and as the path of the binary below
    the cache root:

        win32 / x64 / 1.6.0    -> '1.6.0/buf-Windows-x86_64.exe'
        darwin / arm64 / 1.6.0 -> '1.6.0/buf-Darwin-arm64'
        linux / aarch64 / 1.6.0 -> '1.6.0/buf-Linux-aarch64'

    The version is not validated; a bad one only shows up later as an HTTP error.
    """
    platform_name = params.platform
    arch = params.arch
    ext = ""
    if is_windows(platform_name):
        platform_name = "windows"
        ext = ".exe"
    platform_name = platform_name[:1].upper() + platform_name[1:]

    if arch == "x64":
        arch = "x86_64"

    return f"{params.version}/{binary_name}-{platform_name}-{arch}{ext}"


def detect_host(version: str) -> ReleaseParameters:
    """Describe the running interpreter's host for the given version."""
    machine = platform.machine().lower()
    return ReleaseParameters(
        platform=sys.platform,
        arch=_ARCH_ALIASES.get(machine, machine),
        version=version,
    )
