from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass

from dotdeploy.models import ResolvedSettings
from dotdeploy.runner import ChezmoiRunner, GitRunner

logger = logging.getLogger(__name__)


class ServiceError(RuntimeError):
    pass


class NotARepositoryError(ServiceError):
    pass


@dataclass(frozen=True, slots=True)
class ChezmoiCommand:
    name: str
    announcement: str
    args: tuple[str, ...]
    help: str


CHEZMOI_COMMANDS: dict[str, ChezmoiCommand] = {
    command.name: command
    for command in (
        ChezmoiCommand(
            "init",
            "Initializing chezmoi...",
            ("init",),
            "Initialize chezmoi with this directory as source",
        ),
        ChezmoiCommand(
            "add",
            "Adding {target} to chezmoi source...",
            ("add",),
            "Add a new file to chezmoi source",
        ),
        ChezmoiCommand(
            "apply",
            "Applying dotfiles...",
            ("apply",),
            "Apply dotfiles to home directory",
        ),
        ChezmoiCommand(
            "diff",
            "Showing differences...",
            ("diff",),
            "Show differences between source and target",
        ),
        ChezmoiCommand(
            "status",
            "Showing status...",
            ("status",),
            "Show chezmoi status",
        ),
        ChezmoiCommand(
            "update",
            "Updating dotfiles from home directory...",
            ("re-add",),
            "Update dotfiles from home directory",
        ),
        ChezmoiCommand(
            "init-apply",
            "Initializing and applying chezmoi...",
            ("init", "--apply"),
            "Initialize and apply in one step",
        ),
    )
}

SYNC_ANNOUNCEMENT = "Syncing with git..."
NOT_A_REPOSITORY = "Not a git repository. Run 'git init' first."


class DeployService:
    def __init__(
        self,
        settings: ResolvedSettings,
        dry_run: bool = False,
        chezmoi: ChezmoiRunner | None = None,
        git: GitRunner | None = None,
    ) -> None:
        self._settings = settings
        self._chezmoi = chezmoi or ChezmoiRunner(settings, dry_run=dry_run)
        self._git = git or GitRunner(settings, dry_run=dry_run)

    @property
    def settings(self) -> ResolvedSettings:
        return self._settings

    def announcement(self, name: str, target: str | None = None) -> str:
        return _command(name).announcement.format(target=target)

    def run(self, name: str) -> int:
        command = _command(name)
        if command.name == "add":
            raise ServiceError("Use add() to add a file")
        return self._chezmoi.run(*command.args)

    def add(self, target: str | None) -> int:
        if not target:
            raise ServiceError("No file specified")
        return self._chezmoi.run(*CHEZMOI_COMMANDS["add"].args, target)

    def sync(
        self,
        read_message: Callable[[], str],
        announce: Callable[[str], None] | None = None,
    ) -> int:
        """Stage everything, show the staged stat, commit and push.

        The commit message is requested only after the stat has been shown.
        Returns the exit code of the first failing git step, or 0.
        """
        if not self._git.is_repository():
            raise NotARepositoryError(NOT_A_REPOSITORY)
        if announce is not None:
            announce(SYNC_ANNOUNCEMENT)

        code = self._git.run("add", "-A")
        if code != 0:
            return code

        if not self._git.has_staged_changes():
            raise ServiceError("Nothing to commit")

        code = self._git.run("diff", "--cached", "--stat")
        if code != 0:
            return code

        message = read_message().strip()
        if not message:
            raise ServiceError("Commit message cannot be empty")

        code = self._git.run("commit", "-m", message)
        if code != 0:
            return code

        push_args = ["push"]
        if self._settings.remote:
            push_args.append(self._settings.remote)
            if self._settings.branch:
                push_args.append(self._settings.branch)
        logger.info("Pushing %s", self._settings.source)
        return self._git.run(*push_args)

    def doctor(self) -> list[str]:
        failures: list[str] = []
        if shutil.which(self._settings.chezmoi_bin) is None:
            failures.append(f"chezmoi not found on PATH: {self._settings.chezmoi_bin}")
        if shutil.which(self._settings.git_bin) is None:
            failures.append(f"git not found on PATH: {self._settings.git_bin}")
        if not self._settings.source.is_dir():
            failures.append(f"source directory missing: {self._settings.source}")
        return failures


def _command(name: str) -> ChezmoiCommand:
    command = CHEZMOI_COMMANDS.get(name)
    if command is None:
        raise ServiceError(f"Unknown command: {name}")
    return command
