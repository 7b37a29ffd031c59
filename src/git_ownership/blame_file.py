from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .blame_parse import iter_records
from .git import GitCommandError, StderrDrain, open_git_stream
from .models import AttributionRecord, AuthorMap, BlameOptions


def blame_command(file_path: str, revision: str, options: BlameOptions) -> list[str]:
    args = ["blame", "--incremental"]
    if options.detect_moves:
        # -M: moves within the file; -C -C: copies from any file in the creating commit.
        args.extend(["-M", "-C", "-C"])
    if options.ignore_whitespace:
        args.append("-w")
    args.extend([revision, "--", file_path])
    return args


def author_key(record: AttributionRecord, options: BlameOptions) -> str:
    if options.by_email:
        return record.author_mail or record.author
    return record.author


def fold_records(
    records: Iterable[AttributionRecord],
    file_path: str,
    acc: AuthorMap,
    *,
    options: BlameOptions = BlameOptions(),
) -> None:
    """
    Add each record's line count to acc[author][file_path].

    The author of a commit is fixed by its first record in this pass; git
    only repeats the header and `filename` for later hunks of the same
    commit, so those are credited to the same slot.
    """
    seen: dict[str, str] = {}
    for record in records:
        author = seen.get(record.commit_id)
        if author is None:
            author = author_key(record, options)
            seen[record.commit_id] = author
            acc.setdefault(author, {}).setdefault(file_path, 0)
        acc[author][file_path] += record.line_count


def attribute_file(
    repo: Path,
    file_path: str,
    revision: str,
    acc: AuthorMap,
    *,
    options: BlameOptions = BlameOptions(),
) -> None:
    args = blame_command(file_path, revision, options)
    proc = open_git_stream(args, cwd=repo)
    drain = StderrDrain(proc.stderr)

    assert proc.stdout is not None
    try:
        fold_records(iter_records(proc.stdout), file_path, acc, options=options)
        # Keep reading so git never blocks on a full pipe after a truncated record.
        for _ in proc.stdout:
            pass
    finally:
        proc.stdout.close()
        code = proc.wait()
        stderr = drain.text()
    if code != 0:
        raise GitCommandError(["git", *args], code, stderr)
