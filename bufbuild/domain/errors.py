"""
Exceptions raised while resolving, downloading and installing buf.
"""
from __future__ import annotations

from pathlib import Path
from typing import List


class BufbuildError(Exception):
    """Base class for all installer failures."""


class TooManyRedirectsError(BufbuildError):
    def __init__(self, url: str, redirects: List[str]):
        self.url = url
        self.redirects = list(redirects)
        super().__init__(f"Too many redirects ({len(self.redirects)}) for {url}")


class RedirectLocationError(BufbuildError):
    """A redirect response arrived without a usable Location header."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"HTTP {status_code} redirect without a Location header for {url}")


class HttpStatusError(BufbuildError):
    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"HTTP {status_code} for {url}")


class UnexpectedResponseError(BufbuildError):
    """The server answered directly where a redirect was expected."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Did not get expected redirect for {url}")


class LatestVersionError(BufbuildError):
    pass


class DownloadError(BufbuildError):
    def __init__(self, version: str, reason: object):
        self.version = version
        super().__init__(
            f"bufbuild failed to download buf v{version}. \n"
            f"Did you misspell the version number? The version number must look like "
            f"\"1.6.0\", without a leading \"v\".\n{reason}"
        )


class DirectoryCollisionError(BufbuildError):
    """A path component that must be a directory exists as something else."""

    def __init__(self, path: Path, offending: Path):
        self.path = path
        self.offending = offending
        super().__init__(f"cannot mkdir '{path}'. '{offending}' is not a directory.")


class InstallVerificationError(BufbuildError):
    def __init__(self, version: str):
        self.version = version
        super().__init__(f"bufbuild failed to install buf v{version}.")


class ConfigurationError(BufbuildError):
    """Settings taken from the environment are unusable."""
