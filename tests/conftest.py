from __future__ import annotations

import json
import os
import shutil
from pathlib import Path
from typing import Callable

import pytest
from git_helpers import run_cmd

FAKE_GIT = """#!/usr/bin/env python3
import json
import os
import sys

def main() -> int:
    with open(os.environ["FAKE_GIT_DATA"], encoding="utf-8") as f:
        data = json.load(f)
    args = sys.argv[1:]
    if not args:
        return 2
    cmd = args[0]
    key = args[-1] if cmd == "blame" else cmd
    entry = data.get(cmd, {}).get(key)
    if entry is None:
        sys.stderr.write("fatal: no such path " + key + "\\n")
        return 128
    if entry.get("stderr_bytes"):
        sys.stdout.write(entry.get("stdout", "")[: entry.get("split", 0)])
        sys.stdout.flush()
        sys.stderr.write("E" * int(entry["stderr_bytes"]))
        sys.stderr.flush()
        sys.stdout.write(entry.get("stdout", "")[entry.get("split", 0):])
    else:
        sys.stdout.write(entry.get("stdout", ""))
        sys.stderr.write(entry.get("stderr", ""))
    sys.stdout.flush()
    return int(entry.get("code", 0))

if __name__ == "__main__":
    raise SystemExit(main())
"""

@pytest.fixture
def fake_git(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Callable[[dict], Path]:
    """Install a `git` on PATH that replays canned output keyed by subcommand (and path for blame)."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "git"
    script.write_text(FAKE_GIT, encoding="utf-8")
    script.chmod(0o755)
    data_path = tmp_path / "fake_git.json"
    monkeypatch.setenv("PATH", str(bin_dir) + os.pathsep + os.environ.get("PATH", ""))
    monkeypatch.setenv("FAKE_GIT_DATA", str(data_path))

    def install(data: dict) -> Path:
        data_path.write_text(json.dumps(data), encoding="utf-8")
        return tmp_path

    return install


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    repo = tmp_path / "repo"
    repo.mkdir()
    run_cmd(["git", "init", "-q"], cwd=repo)
    run_cmd(["git", "config", "user.name", "Test User"], cwd=repo)
    run_cmd(["git", "config", "user.email", "test@example.com"], cwd=repo)
    run_cmd(["git", "config", "commit.gpgsign", "false"], cwd=repo)
    return repo
