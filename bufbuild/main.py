"""
`buf` console script: find or install buf, then run it with the given arguments.

Resolution order:
1. A version pinned in the nearest pyproject.toml or package.json is installed and used.
2. Otherwise a buf already on PATH is used.
3. Otherwise the latest release is installed and used.
"""
from __future__ import annotations

import asyncio
import logging
import os
import subprocess
import sys
import sysconfig
from pathlib import Path
from typing import Iterable, List, Optional

from bufbuild.core.dependencies import get_installer, get_log_level, get_settings
from bufbuild.data.manifest import find_version_config
from bufbuild.domain.errors import BufbuildError
from bufbuild.domain.models import LOCAL_SHIM_DIRS
from bufbuild.services.installer import BufInstaller
from bufbuild.services.path_prober import find_in_path

logger = logging.getLogger(__name__)


async def resolve_command(
    cwd: Path,
    env_path: Optional[str],
    installer: BufInstaller,
    shim_dirs: Iterable[str] = (),
) -> Path:
    """
    Return the path of the buf executable to run.

    ``shim_dirs`` are directories known to hold this launcher's own ``buf``
    script; they are never picked from PATH.
    """
    settings = installer.settings
    configured_version = find_version_config(cwd)

    if configured_version:
        # A pinned version always wins over whatever is on PATH
        release = await installer.ensure_installed(configured_version)
        return release.path

    command = find_in_path(
        env_path,
        settings.binary_name,
        settings.excluded_path_suffixes,
        excluded_dirs=shim_dirs,
    )
    if command is not None:
        logger.debug(f"Using buf found on PATH: {command}")
        return command

    release = await installer.ensure_installed(None)
    return release.path


def get_shim_bin_path(script_path: str) -> Optional[str]:
    """
    Return the directory of the running shim if it is a project-local bin folder.

    Putting it on the child's PATH lets buf find protoc plugins installed
    into the same project.
    """
    if not script_path:
        return None
    shim_dir = os.path.dirname(os.path.abspath(script_path))
    for suffix in LOCAL_SHIM_DIRS:
        if shim_dir.endswith(suffix.replace("/", os.sep)):
            return shim_dir
    return None


def get_own_script_dirs(script_path: str) -> List[str]:
    """Directories the running `buf` script may have been installed into."""
    dirs = []
    if script_path:
        dirs.append(os.path.dirname(os.path.abspath(script_path)))
    scripts = sysconfig.get_path("scripts")
    if scripts:
        dirs.append(scripts)
    return dirs


def run_command(command: Path, args: List[str], env: dict) -> int:
    """Run buf with inherited stdio and return its exit status."""
    try:
        completed = subprocess.run([str(command), *args], env=env, shell=False)
    except OSError as e:
        raise BufbuildError(f"bufbuild was unable to spawn buf. {e}") from e
    if completed.returncode < 0:
        # Killed by a signal; report it the way a shell would
        return 128 - completed.returncode
    return completed.returncode


def run(argv: List[str]) -> int:
    installer = get_installer()
    command = asyncio.run(
        resolve_command(
            Path.cwd(),
            os.environ.get("PATH"),
            installer,
            shim_dirs=get_own_script_dirs(sys.argv[0]),
        )
    )

    env = dict(os.environ)
    shim_bin = get_shim_bin_path(sys.argv[0])
    if shim_bin:
        env["PATH"] = os.pathsep.join([shim_bin, env.get("PATH", "")])

    return run_command(command, argv, env)


def main() -> None:
    logging.basicConfig(
        level=get_log_level(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    try:
        logger.debug(f"Install cache at {get_settings().install_dir}")
        exit_code = run(sys.argv[1:])
    except (BufbuildError, OSError) as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
