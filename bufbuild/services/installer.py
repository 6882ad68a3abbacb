"""
Install orchestration for buf releases.

This service handles:
- Resolving the requested version (including "latest")
- Naming the release for the current host
- Returning an already cached binary without network access
- Downloading, storing and re-checking a binary that is not cached yet
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

import httpx

from bufbuild.domain.errors import BufbuildError, DownloadError, InstallVerificationError
from bufbuild.domain.models import InstalledEntry, InstallerSettings, ReleaseParameters
from bufbuild.domain.release_utils import detect_host, make_release_name
from bufbuild.services.http_fetcher import HttpFetcher
from bufbuild.services.version_resolver import resolve_version
from bufbuild.storage.install_cache import InstallCache

logger = logging.getLogger(__name__)


class BufInstaller:
    """
    Make sure a given buf version is present in the install cache.

    Every step runs sequentially and nothing is retried; the first failure
    ends the call. Two processes installing the same version at once may
    both download it, and the last write wins.
    """

    def __init__(
        self,
        settings: InstallerSettings,
        cache: Optional[InstallCache] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        host: Callable[[str], ReleaseParameters] = detect_host,
    ):
        """
        Args:
            settings: Cache root, upstream URLs and HTTP limits
            cache: Install cache to use; defaults to one at settings.install_dir
            transport: Optional httpx transport, used by tests to stub the network
            host: Builds the release parameters of the running host for a version
        """
        self.settings = settings
        self.cache = cache or InstallCache(settings.install_dir, settings.binary_name)
        self.transport = transport
        self.host = host

    def _fetcher(self) -> HttpFetcher:
        return HttpFetcher(
            max_redirects=self.settings.max_redirects,
            timeout=self.settings.timeout,
            transport=self.transport,
        )

    async def ensure_installed(self, version: Optional[str] = None) -> InstalledEntry:
        """
        Return the cached binary for ``version``, installing it first if needed.

        Args:
            version: A concrete version such as "1.6.0", "latest", or None (latest)

        Returns:
            The InstalledEntry confirmed by re-scanning the cache

        Raises:
            LatestVersionError: if "latest" could not be resolved
            DownloadError: if the release could not be downloaded
            InstallVerificationError: if the written binary is not found afterwards
            OSError: if the binary could not be written
        """
        async with self._fetcher() as fetcher:
            version = await resolve_version(version, fetcher, self.settings.latest_url)

            release_name = make_release_name(self.host(version), self.settings.binary_name)

            installed = self.cache.find(release_name)
            if installed is not None:
                logger.debug(f"buf {release_name} already installed at {installed.path}")
                return installed

            url = self.settings.download_url(release_name)
            logger.info(f"Downloading buf v{version} from {url}")
            try:
                content = await fetcher.download(url)
            except (BufbuildError, httpx.HTTPError) as e:
                raise DownloadError(version, e) from e

        await self.cache.write_installed(release_name, content)

        # Sanity check
        installed = self.cache.find(release_name)
        if installed is None:
            raise InstallVerificationError(version)

        logger.info(f"bufbuild installed buf v{installed.version}.")
        return installed
