"""
Pydantic models for the buf installer.

This module defines the data models shared by the installer components:
- Release parameters (platform, architecture, version) used to name an artifact
- Entries discovered in the install cache
- Installer settings (cache root, upstream URLs, PATH exclusions)
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


BUF_LATEST_URL = "https://github.com/bufbuild/buf/releases/latest"
BUF_DOWNLOAD_URL_TEMPLATE = "https://github.com/bufbuild/buf/releases/download/v{release_name}"
DEFAULT_MAX_REDIRECTS = 3

# Directories that hold bufbuild's own `buf` shim rather than a real install
LOCAL_SHIM_DIRS = [".venv/bin", ".venv/Scripts", "node_modules/.bin"]
GLOBAL_SHIM_DIRS = [".local/bin", ".npm-global/bin"]


# ---------------------------------------------------------------------------
# Release Models
# ---------------------------------------------------------------------------


class ReleaseParameters(BaseModel):
    """
    Identify one installable buf artifact.

    Values are raw host values (e.g. ``win32``, ``x64``); normalization to
    the upstream naming happens in ``make_release_name``.
    """

    model_config = ConfigDict(frozen=True)

    platform: str = Field(description="Operating system name, e.g. 'linux', 'darwin', 'win32'.")
    arch: str = Field(description="CPU architecture, e.g. 'x64', 'arm64', 'aarch64'.")
    version: str = Field(description="Version without a leading 'v', e.g. '1.6.0'.")


class InstalledEntry(BaseModel):
    """A buf binary found in the install cache."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Release name, e.g. '1.6.0/buf-Darwin-arm64'.")
    version: str = Field(description="Version folder the binary lives in, e.g. '1.6.0'.")
    path: Path = Field(description="Absolute path to the executable.")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class InstallerSettings(BaseModel):
    """
    Runtime configuration for resolving and installing buf.

    Built once per process by ``bufbuild.core.dependencies.get_settings`` and
    passed explicitly to the cache and the installer.
    """

    install_dir: Path = Field(
        description="Cache root; artifacts are stored as <install_dir>/<version>/<binary>.",
    )
    binary_name: str = Field(
        default="buf",
        description="Executable name looked up on PATH and used as the cached file prefix.",
    )
    latest_url: str = Field(
        default=BUF_LATEST_URL,
        description="URL expected to redirect to the tag of the newest release.",
    )
    download_url_template: str = Field(
        default=BUF_DOWNLOAD_URL_TEMPLATE,
        description="Artifact URL; '{release_name}' is replaced by e.g. '1.6.0/buf-Linux-x86_64'.",
    )
    max_redirects: int = Field(
        default=DEFAULT_MAX_REDIRECTS,
        ge=0,
        description="Maximum number of redirect hops followed for a download.",
    )
    timeout: Optional[float] = Field(
        default=None,
        description="HTTP timeout in seconds. None waits indefinitely.",
    )
    excluded_path_suffixes: List[str] = Field(
        default_factory=lambda: LOCAL_SHIM_DIRS + GLOBAL_SHIM_DIRS,
        description="PATH entries ending with one of these hold bufbuild's own shim and are skipped.",
    )

    @field_validator("latest_url")
    @classmethod
    def _check_latest_url(cls, value: str) -> str:
        if not value.startswith(("https://", "http://")):
            raise ValueError(f"expected an http:// or https:// URL, got {value!r}")
        return value

    @field_validator("download_url_template")
    @classmethod
    def _check_download_url_template(cls, value: str) -> str:
        try:
            sample = value.format(release_name="1.0.0/buf-Linux-x86_64")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"only the {{release_name}} placeholder is supported, got {value!r}") from e
        if not sample.startswith(("https://", "http://")):
            raise ValueError(f"expected an http:// or https:// URL, got {value!r}")
        return value

    def download_url(self, release_name: str) -> str:
        return self.download_url_template.format(release_name=release_name)
