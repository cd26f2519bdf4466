from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from dotdeploy.models import ResolvedSettings
from dotdeploy.runner import (
    ChezmoiRunner,
    CommandResult,
    GitRunner,
    RunnerError,
    run_command,
)


def make_settings(source: Path) -> ResolvedSettings:
    return ResolvedSettings(
        source=source,
        destination=Path("/home/me/.config"),
        mode="symlink",
        chezmoi_bin="chezmoi",
        git_bin="git",
        remote=None,
        branch=None,
    )


def test_chezmoi_argv_carries_fixed_flags(tmp_path: Path) -> None:
    runner = ChezmoiRunner(make_settings(tmp_path))

    assert runner.build_argv("init", "--apply") == [
        "chezmoi",
        f"--source={tmp_path}",
        "--destination=/home/me/.config",
        "--mode=symlink",
        "init",
        "--apply",
    ]


def test_dry_run_does_not_execute(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(*args: object, **kwargs: object) -> None:
        raise AssertionError("subprocess.run should not be called")

    monkeypatch.setattr(subprocess, "run", fail)

    assert run_command(["chezmoi", "apply"], dry_run=True) == 0


def test_exit_code_is_returned(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        subprocess,
        "run",
        lambda argv, **kwargs: subprocess.CompletedProcess(argv, 3),
    )

    assert run_command(["chezmoi", "diff"]) == 3


def test_missing_executable_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def missing(argv: list[str], **kwargs: object) -> None:
        raise FileNotFoundError(argv[0])

    monkeypatch.setattr(subprocess, "run", missing)

    with pytest.raises(RunnerError, match="Executable not found: chezmoi"):
        run_command(["chezmoi", "status"])


def test_empty_command_raises() -> None:
    with pytest.raises(RunnerError):
        run_command([])


def test_git_runs_inside_source(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}

    def record(argv: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        seen["argv"] = argv
        seen["cwd"] = kwargs.get("cwd")
        return subprocess.CompletedProcess(argv, 0)

    monkeypatch.setattr(subprocess, "run", record)

    GitRunner(make_settings(tmp_path)).run("add", "-A")

    assert seen == {"argv": ["git", "add", "-A"], "cwd": tmp_path}


@pytest.mark.parametrize(("returncode", "expected"), [(0, False), (1, True)])
def test_has_staged_changes(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    returncode: int,
    expected: bool,
) -> None:
    monkeypatch.setattr(
        "dotdeploy.runner.capture_command",
        lambda argv, cwd=None: CommandResult(list(argv), returncode, "", ""),
    )

    assert GitRunner(make_settings(tmp_path)).has_staged_changes() is expected


def test_has_staged_changes_reports_git_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        "dotdeploy.runner.capture_command",
        lambda argv, cwd=None: CommandResult(list(argv), 128, "", "fatal: not a git repository"),
    )

    with pytest.raises(RunnerError, match="not a git repository"):
        GitRunner(make_settings(tmp_path)).has_staged_changes()
