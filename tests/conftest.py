"""
Shared fixtures for the bufbuild tests.
"""

from typing import Callable, List

import httpx
import pytest

from bufbuild.domain.models import InstallerSettings, ReleaseParameters


LATEST_URL = "https://releases.example.com/bufbuild/buf/releases/latest"
DOWNLOAD_URL_TEMPLATE = "https://releases.example.com/bufbuild/buf/releases/download/v{release_name}"


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every URL it was asked for."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requested: List[str] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requested.append(str(request.url))
            return handler(request)

        super().__init__(record)


@pytest.fixture
def install_dir(tmp_path):
    return tmp_path / "installed"


@pytest.fixture
def settings(install_dir):
    return InstallerSettings(
        install_dir=install_dir,
        latest_url=LATEST_URL,
        download_url_template=DOWNLOAD_URL_TEMPLATE,
    )


@pytest.fixture
def darwin_arm64():
    """Host stub for an Apple Silicon machine."""
    return lambda version: ReleaseParameters(platform="darwin", arch="arm64", version=version)
