"""
Look for an existing buf installation on PATH.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Optional

from bufbuild.domain.release_utils import executable_name


def _normalize_suffix(suffix: str) -> str:
    return suffix.replace("/", os.sep)


def _same_dir(entry: str, excluded: List[str]) -> bool:
    normalized = os.path.normcase(os.path.realpath(_expand_home(entry)))
    return normalized in excluded


def _expand_home(entry: str) -> str:
    if entry.startswith("~"):
        return str(Path.home()) + entry[1:]
    return entry


def path_candidates(
    env_path: Optional[str],
    binary_name: str = "buf",
    excluded_suffixes: Iterable[str] = (),
    platform_name: Optional[str] = None,
    excluded_dirs: Iterable[str] = (),
) -> List[Path]:
    """
    Build the list of executable paths worth probing, in PATH order.

    Entries ending with one of ``excluded_suffixes`` are dropped: those
    directories hold bufbuild's own ``buf`` shim, and picking it up would
    make the launcher run itself. ``excluded_dirs`` drops entries that
    are exactly one of the given directories, such as the folder the running
    shim was started from.
    """
    if not isinstance(env_path, str):
        return []

    suffixes = tuple(_normalize_suffix(s) for s in excluded_suffixes)
    exe = executable_name(binary_name, platform_name)
    skipped = [os.path.normcase(os.path.realpath(d)) for d in excluded_dirs if d]

    candidates = []
    for entry in env_path.split(os.pathsep):
        if suffixes and entry.rstrip(os.sep).endswith(suffixes):
            continue
        if skipped and entry and _same_dir(entry, skipped):
            continue
        candidates.append(Path(_expand_home(os.path.join(entry, exe))))
    return candidates


def find_in_path(
    env_path: Optional[str],
    binary_name: str = "buf",
    excluded_suffixes: Iterable[str] = (),
    platform_name: Optional[str] = None,
    excluded_dirs: Iterable[str] = (),
) -> Optional[Path]:
    """
    Return the first existing ``buf`` (or ``buf.exe``) on ``env_path``.

    Only existence is checked, not the executable bit. Returns None when
    ``env_path`` is unset or nothing matches.
    """
    for candidate in path_candidates(
        env_path, binary_name, excluded_suffixes, platform_name, excluded_dirs
    ):
        if candidate.exists():
            return candidate
    return None
