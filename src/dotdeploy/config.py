import os
from pathlib import Path

XDG_CONFIG_HOME = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
CONFIG_DIR = XDG_CONFIG_HOME / "dotdeploy"
SETTINGS_PATH = Path(os.environ.get("DOTDEPLOY_SETTINGS") or CONFIG_DIR / "settings.json")
SOURCE_ENV_VAR = "DOTDEPLOY_SOURCE"
