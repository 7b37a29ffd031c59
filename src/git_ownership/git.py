from __future__ import annotations

import io
import subprocess
import threading
from pathlib import Path
from typing import IO, Iterator, Optional

MAX_STDERR_CHARS = 50_000


class GitCommandError(RuntimeError):
    def __init__(self, args: list[str], returncode: int, stderr: str = "") -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip()[:500]
        msg = f"{' '.join(args)} exited {returncode}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


def run_git(args: list[str], cwd: Path, timeout_s: int = 300) -> tuple[int, str, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout_s,
    )
    return proc.returncode, proc.stdout, proc.stderr


def get_repo_toplevel(candidate: Path) -> Optional[Path]:
    try:
        code, out, _ = run_git(["rev-parse", "--show-toplevel"], cwd=candidate)
    except (OSError, subprocess.TimeoutExpired):
        return None
    if code != 0 or not out.strip():
        return None
    return Path(out.strip()).resolve()


def resolve_revision(repo: Path, revision: str) -> str:
    args = ["rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"]
    try:
        code, out, err = run_git(args, cwd=repo)
    except OSError as e:
        raise GitCommandError(["git", *args], -1, str(e)) from e
    if code != 0 or not out.strip():
        raise GitCommandError(["git", *args], code, err or f"unknown revision: {revision}")
    return out.strip()


class StderrDrain:
    """
    Reads a child's stderr on a daemon thread, keeping only the first
    MAX_STDERR_CHARS characters. Without it a child that fills the stderr
    pipe blocks while we are still reading stdout.
    """

    def __init__(self, stream: Optional[IO[str]]) -> None:
        self._stream = stream
        self._chunks: list[str] = []
        self._chars = 0
        self._thread: Optional[threading.Thread] = None
        if stream is not None:
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()

    def _run(self) -> None:
        assert self._stream is not None
        while True:
            chunk = self._stream.read(8192)
            if not chunk:
                return
            if self._chars >= MAX_STDERR_CHARS:
                continue
            take = chunk[: MAX_STDERR_CHARS - self._chars]
            self._chunks.append(take)
            self._chars += len(take)

    def text(self) -> str:
        if self._thread is not None:
            self._thread.join()
        return "".join(self._chunks)


def open_git_stream(args: list[str], cwd: Path, *, errors: str = "replace") -> subprocess.Popen:
    """
    Start git with piped stdout and stderr decoded as UTF-8 text.

    Lines end at LF only, so a stray CR inside a commit summary stays part
    of its metadata line. `errors` applies to stdout; pass
    "surrogateescape" when the output holds paths that are handed back to git.
    """
    cmd = ["git", *args]
    try:
        proc = subprocess.Popen(cmd, cwd=str(cwd), stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    except OSError as e:
        raise GitCommandError(cmd, -1, f"failed to start git: {e}") from e
    proc.stdout = io.TextIOWrapper(proc.stdout, encoding="utf-8", errors=errors, newline="\n")
    proc.stderr = io.TextIOWrapper(proc.stderr, encoding="utf-8", errors="replace")
    return proc


def _split_nul(stream: IO[str]) -> Iterator[str]:
    pending = ""
    while True:
        chunk = stream.read(8192)
        if not chunk:
            break
        pending += chunk
        *entries, pending = pending.split("\0")
        yield from entries
    if pending:
        yield pending


def iter_tracked_files(repo: Path, revision: str, paths: Optional[list[str]] = None) -> Iterator[str]:
    """
    Stream the blob paths recorded in `revision`, optionally limited to
    `paths`. Submodule entries are skipped since blame cannot follow them.
    Names that are not valid UTF-8 keep their bytes as lone surrogates, so
    they can be passed back to git unchanged.
    """
    args = ["ls-tree", "-r", "-z", revision, "--", *(paths or [])]
    proc = open_git_stream(args, cwd=repo, errors="surrogateescape")
    drain = StderrDrain(proc.stderr)
    assert proc.stdout is not None
    try:
        for entry in _split_nul(proc.stdout):
            # <mode> SP <type> SP <object> TAB <path>
            meta, sep, path = entry.partition("\t")
            if not sep or not path:
                continue
            fields = meta.split()
            if len(fields) < 2 or fields[1] != "blob":
                continue
            yield path
    finally:
        proc.stdout.close()
        code = proc.wait()
        stderr = drain.text()
    if code != 0:
        raise GitCommandError(["git", *args], code, stderr)
