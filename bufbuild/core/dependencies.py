from pathlib import Path
from typing import Optional
import os

from pydantic import ValidationError

from bufbuild.domain.errors import ConfigurationError
from bufbuild.domain.models import InstallerSettings
from bufbuild.services.installer import BufInstaller

INSTALL_DIR_ENV_VAR = "BUFBUILD_INSTALL_DIR"
LATEST_URL_ENV_VAR = "BUFBUILD_LATEST_URL"
DOWNLOAD_URL_ENV_VAR = "BUFBUILD_DOWNLOAD_URL"
LOG_LEVEL_ENV_VAR = "BUFBUILD_LOG_LEVEL"

_PACKAGE_ROOT = Path(__file__).resolve().parents[1]
_DEFAULT_INSTALL_DIR = _PACKAGE_ROOT / "installed"

_settings: Optional[InstallerSettings] = None
_installer: Optional[BufInstaller] = None


def get_install_dir() -> Path:
    """
    Determine the install cache root.

    Priority:
    1. Environment variable BUFBUILD_INSTALL_DIR
    2. 'installed' next to the bufbuild package

    The directory is not created here; that happens on first install.
    """
    env_path = os.environ.get(INSTALL_DIR_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return _DEFAULT_INSTALL_DIR


def get_log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").upper()


def get_settings() -> InstallerSettings:
    global _settings
    if _settings is None:
        overrides = {}
        if os.environ.get(LATEST_URL_ENV_VAR):
            overrides["latest_url"] = os.environ[LATEST_URL_ENV_VAR]
        if os.environ.get(DOWNLOAD_URL_ENV_VAR):
            overrides["download_url_template"] = os.environ[DOWNLOAD_URL_ENV_VAR]
        try:
            _settings = InstallerSettings(install_dir=get_install_dir(), **overrides)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigurationError(f"bufbuild settings are invalid: {problems}") from e
    return _settings


def get_installer() -> BufInstaller:
    global _installer
    if _installer is None:
        _installer = BufInstaller(get_settings())
    return _installer


def reset() -> None:
    """Forget cached settings so the environment is read again."""
    global _settings, _installer
    _settings = None
    _installer = None
