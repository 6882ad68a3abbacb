"""
Discover a pinned buf version from project manifests.

Each directory from the starting point up to the filesystem root is checked
for, in order:
* ``pyproject.toml`` with ``[tool.bufbuild] buf-version = "1.6.0"``
* ``package.json`` with ``{"config": {"bufVersion": "1.6.0"}}``

A missing file, a file that does not parse, or a missing or non-string key
all mean "not configured here" and the search moves on to the parent.
"""
from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

PYPROJECT_FILE = "pyproject.toml"
PACKAGE_JSON_FILE = "package.json"


def _lookup(data: Any, *keys: str) -> Optional[str]:
    for key in keys:
        if not isinstance(data, dict) or key not in data:
            return None
        data = data[key]
    return data if isinstance(data, str) else None


def read_pyproject_version(path: Path) -> Optional[str]:
    if not path.is_file():
        return None
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError):
        logger.debug(f"Ignoring unparseable {path}")
        return None
    return _lookup(data, "tool", "bufbuild", "buf-version")


def read_package_json_version(path: Path) -> Optional[str]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.debug(f"Ignoring unparseable {path}")
        return None
    return _lookup(data, "config", "bufVersion")


ManifestReader = Callable[[Path], Optional[str]]

MANIFEST_READERS: List[tuple[str, ManifestReader]] = [
    (PYPROJECT_FILE, read_pyproject_version),
    (PACKAGE_JSON_FILE, read_package_json_version),
]


def find_version_config(start_dir: Path) -> Optional[str]:
    """
    Walk upward from ``start_dir`` and return the first configured buf version.

    Returns:
        The version string, or None if no ancestor manifest defines one
    """
    directory = Path(start_dir).absolute()
    while True:
        for filename, reader in MANIFEST_READERS:
            version = reader(directory / filename)
            if version is not None:
                logger.debug(f"Found buf version {version} in {directory / filename}")
                return version
        parent = directory.parent
        if parent == directory:
            return None
        directory = parent
