from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path


def test_module_help(tmp_path: Path) -> None:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(Path(__file__).resolve().parents[1] / "src")
    cmd = [sys.executable, "-m", "git_ownership", "--help"]
    proc = subprocess.run(cmd, cwd=str(tmp_path), env=env, text=True, capture_output=True)
    assert proc.returncode == 0, proc.stderr
    out = proc.stdout
    assert "git-ownership" in out
    assert "--exclude" in out
    assert "--jobs" in out
    assert "summary" in out
