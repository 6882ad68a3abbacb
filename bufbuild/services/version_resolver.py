from __future__ import annotations

import logging
from typing import Optional

import httpx

from bufbuild.domain.errors import BufbuildError, LatestVersionError
from bufbuild.services.http_fetcher import HttpFetcher

logger = logging.getLogger(__name__)

LATEST = "latest"


def parse_version_from_location(location: str) -> str:
    """
    Extract the version from a release tag URL.

    Everything after the last '/v' is taken as the version, e.g.
    'https://github.com/bufbuild/buf/releases/tag/v1.6.0' -> '1.6.0'.
    """
    return location.split("/v")[-1]


async def resolve_version(
    version: Optional[str], fetcher: HttpFetcher, latest_url: str
) -> str:
    """
    Turn a requested version into a concrete one.

    A concrete version is returned unchanged without touching the network.
    ``None`` or ``"latest"`` is resolved by following the redirect that
    ``latest_url`` answers with.

    Raises:
        LatestVersionError: if the latest release could not be determined
    """
    if version is not None and version != LATEST:
        return version

    try:
        location = await fetcher.resolve_redirect_target(latest_url)
    except (BufbuildError, httpx.HTTPError) as e:
        raise LatestVersionError(f"bufbuild failed to retrieve latest buf version number: {e}") from e

    resolved = parse_version_from_location(location)
    logger.debug(f"Latest buf release resolved to {resolved} via {location}")
    return resolved
