from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Mapping

COPILOT_CONFIG_SUBDIR = "github-copilot"
TOKEN_FILE_NAMES = ("hosts.json", "apps.json")


def get_config_dir(
    environ: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> Path | None:
    """
    Return the user's config directory.

    Order: non-empty XDG_CONFIG_HOME, then LOCALAPPDATA on Windows,
    otherwise $HOME/.config. Returns None when nothing is set.
    """
    env = os.environ if environ is None else environ
    platform = sys.platform if platform is None else platform

    if xdg := env.get("XDG_CONFIG_HOME"):
        return Path(xdg)
    if platform.startswith("win"):
        if local := env.get("LOCALAPPDATA"):
            return Path(local)
        return None
    if home := env.get("HOME"):
        return Path(home) / ".config"
    return None


def get_token_file_paths(
    environ: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> list[Path]:
    """Candidate Copilot credential files, in lookup order."""
    config_dir = get_config_dir(environ, platform)
    if config_dir is None:
        return []
    return [config_dir / COPILOT_CONFIG_SUBDIR / name for name in TOKEN_FILE_NAMES]
