"""
On-disk store of installed buf binaries.

Layout: <root>/<version>/<binary>-<Platform>-<arch>[.exe]

There is no index file. Every query scans the directory tree, so the
filesystem is the only record of what is installed.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

import aiofiles

from bufbuild.domain.errors import DirectoryCollisionError
from bufbuild.domain.models import InstalledEntry

logger = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o755


def make_dirs(path: Path) -> None:
    """
    Create ``path`` and any missing parents.

    Raises:
        DirectoryCollisionError: if ``path`` or one of its parents exists
            but is not a directory
    """
    path = Path(path).absolute()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except (FileExistsError, NotADirectoryError) as e:
        for candidate in [*reversed(path.parents), path]:
            if candidate.exists() and not candidate.is_dir():
                raise DirectoryCollisionError(path, candidate) from e
        raise


class InstallCache:
    """Query and populate the install cache rooted at ``root``."""

    def __init__(self, root: Path, binary_name: str = "buf"):
        self.root = Path(root).expanduser().absolute()
        self.binary_prefix = f"{binary_name}-"

    def path_for(self, release_name: str) -> Path:
        """Absolute path a release name is stored at."""
        return self.root.joinpath(*release_name.split("/"))

    def list_installed(self) -> List[InstalledEntry]:
        """
        Scan the cache root for installed binaries.

        Immediate subdirectories are version folders; inside each, only files
        starting with the binary prefix count, so binaries for several
        platforms can share one version folder. A missing root yields an
        empty list.
        """
        if not self.root.exists():
            return []

        entries: List[InstalledEntry] = []
        for version_dir in sorted(self.root.iterdir()):
            if version_dir.is_symlink() or not version_dir.is_dir():
                continue
            for binary in sorted(version_dir.iterdir()):
                if not binary.name.startswith(self.binary_prefix):
                    continue
                entries.append(
                    InstalledEntry(
                        name=f"{version_dir.name}/{binary.name}",
                        version=version_dir.name,
                        path=binary,
                    )
                )
        return entries

    def find(self, release_name: str) -> Optional[InstalledEntry]:
        for entry in self.list_installed():
            if entry.name == release_name:
                return entry
        return None

    async def write_installed(self, release_name: str, content: bytes) -> Path:
        """
        Store ``content`` as the binary for ``release_name`` and mark it executable.

        An existing file at the target is overwritten. The write goes straight
        to the final path, so an interrupted write leaves a truncated file.

        Returns:
            Path of the written binary
        """
        target = self.path_for(release_name)
        make_dirs(target.parent)

        async with aiofiles.open(target, "wb") as f:
            await f.write(content)
        os.chmod(target, EXECUTABLE_MODE)

        logger.debug(f"Wrote {len(content)} bytes to {target}")
        return target
