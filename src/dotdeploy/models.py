from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


DeployMode = Literal["file", "symlink"]


class DeploySettings(BaseModel):
    source: Path | None = None
    destination: Path | None = None
    mode: DeployMode = "symlink"
    chezmoi_bin: str = Field(default="chezmoi", min_length=1)
    git_bin: str = Field(default="git", min_length=1)
    remote: str | None = None
    branch: str | None = None


@dataclass(frozen=True, slots=True)
class ResolvedSettings:
    source: Path
    destination: Path
    mode: DeployMode
    chezmoi_bin: str
    git_bin: str
    remote: str | None
    branch: str | None
