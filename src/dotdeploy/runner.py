from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from dotdeploy.models import ResolvedSettings

logger = logging.getLogger(__name__)


class RunnerError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class CommandResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


def format_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(arg) for arg in argv)


def run_command(argv: Sequence[str], cwd: Path | None = None, dry_run: bool = False) -> int:
    """Run ``argv`` attached to the terminal and return its exit code."""
    if not argv:
        raise RunnerError("No command provided")

    argv_list = list(argv)
    logger.info("CMD %s", format_argv(argv_list))
    if dry_run:
        return 0

    try:
        result = subprocess.run(argv_list, cwd=cwd, check=False)
    except FileNotFoundError as exc:
        raise RunnerError(f"Executable not found: {argv_list[0]}") from exc
    return result.returncode


def capture_command(argv: Sequence[str], cwd: Path | None = None) -> CommandResult:
    if not argv:
        raise RunnerError("No command provided")

    argv_list = list(argv)
    logger.debug("CMD %s", format_argv(argv_list))
    try:
        result = subprocess.run(
            argv_list,
            cwd=cwd,
            check=False,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise RunnerError(f"Executable not found: {argv_list[0]}") from exc

    if result.stderr:
        logger.debug("STDERR %s", result.stderr.strip())
    return CommandResult(
        argv=argv_list,
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )


class ChezmoiRunner:
    """Invokes chezmoi with the fixed source, destination and mode flags."""

    def __init__(self, settings: ResolvedSettings, dry_run: bool = False) -> None:
        self._settings = settings
        self._dry_run = dry_run

    def build_argv(self, *args: str) -> list[str]:
        return [
            self._settings.chezmoi_bin,
            f"--source={self._settings.source}",
            f"--destination={self._settings.destination}",
            f"--mode={self._settings.mode}",
            *args,
        ]

    def run(self, *args: str) -> int:
        return run_command(self.build_argv(*args), dry_run=self._dry_run)


class GitRunner:
    def __init__(self, settings: ResolvedSettings, dry_run: bool = False) -> None:
        self._settings = settings
        self._dry_run = dry_run

    @property
    def worktree(self) -> Path:
        return self._settings.source

    def is_repository(self) -> bool:
        return (self.worktree / ".git").exists()

    def run(self, *args: str) -> int:
        return run_command(
            [self._settings.git_bin, *args],
            cwd=self.worktree,
            dry_run=self._dry_run,
        )

    def has_staged_changes(self) -> bool:
        if self._dry_run:
            return True
        result = capture_command(
            [self._settings.git_bin, "diff", "--cached", "--quiet"],
            cwd=self.worktree,
        )
        # --quiet exits 1 when there are differences
        if result.returncode not in (0, 1):
            raise RunnerError(f"git diff failed: {result.stderr.strip()}")
        return result.returncode == 1
