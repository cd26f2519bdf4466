from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import ValidationError

from dotdeploy.config import SOURCE_ENV_VAR, XDG_CONFIG_HOME
from dotdeploy.models import DeploySettings, ResolvedSettings


class SettingsError(RuntimeError):
    pass


def load_settings(path: Path) -> DeploySettings:
    """Load settings from ``path``, falling back to defaults when it is absent."""
    if not path.exists():
        return DeploySettings()

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SettingsError(f"Cannot read settings: {exc}") from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Invalid JSON in settings: {exc}") from exc

    try:
        return DeploySettings.model_validate(data)
    except ValidationError as exc:
        raise SettingsError(f"Settings validation failed: {exc}") from exc


def write_settings(path: Path, settings: DeploySettings) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")


def resolve(settings: DeploySettings) -> ResolvedSettings:
    source = settings.source
    if source is None:
        env_source = os.environ.get(SOURCE_ENV_VAR)
        source = Path(env_source) if env_source else Path.cwd()

    destination = settings.destination or XDG_CONFIG_HOME

    return ResolvedSettings(
        source=source.expanduser().resolve(),
        destination=destination.expanduser().resolve(),
        mode=settings.mode,
        chezmoi_bin=settings.chezmoi_bin,
        git_bin=settings.git_bin,
        remote=settings.remote,
        branch=settings.branch,
    )
