from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from .blame_file import attribute_file
from .blame_pool import attribute_all, resolve_jobs
from .git import iter_tracked_files, resolve_revision
from .models import AuthorMap, BlameOptions, OwnershipResult
from .paths import PathFilter


def format_startup_header(
    *,
    repo: Path,
    revision: str,
    paths: list[str],
    jobs: int,
    path_filter: PathFilter,
    options: BlameOptions,
    view: str,
    fmt: str,
) -> str:
    detection = []
    if options.detect_moves:
        detection.append("moves/copies (-M -C -C)")
    if options.ignore_whitespace:
        detection.append("ignore whitespace (-w)")
    excludes = path_filter.describe()
    lines = [
        "git-ownership",
        "",
        "Run plan (read-only; nothing in the repository is modified):",
        f"1) List files: {revision} in {repo}" + (f" limited to {', '.join(paths)}" if paths else ""),
        f"2) Filter: {', '.join(excludes) if excludes else 'no exclusions'}",
        f"3) Blame: {jobs} parallel git blame --incremental jobs; {', '.join(detection) or 'plain attribution'}",
        f"4) Group by: {'author email' if options.by_email else 'author name'}",
        f"5) Report: view={view} format={fmt}",
        "",
    ]
    return "\n".join(lines)


def run_ownership(
    repo: Path,
    revision: str = "HEAD",
    paths: Optional[list[str]] = None,
    *,
    jobs: int = 0,
    path_filter: Optional[PathFilter] = None,
    options: BlameOptions = BlameOptions(),
) -> OwnershipResult:
    """
    Attribute every tracked file of `revision` and merge the per-worker maps.

    Raises GitCommandError if the revision is invalid or any git call fails;
    ConfigError for an invalid job count. No partial result is returned.
    """
    workers = resolve_jobs(jobs)
    commit = resolve_revision(repo, revision)

    def attribute(file_path: str, acc: AuthorMap) -> None:
        attribute_file(repo, file_path, commit, acc, options=options)

    authors, pooled = attribute_all(
        iter_tracked_files(repo, commit, paths),
        jobs=workers,
        attribute=attribute,
        path_filter=path_filter,
    )
    return OwnershipResult(
        authors=authors,
        revision=commit,
        jobs=workers,
        files_attributed=pooled.files_attributed,
        files_excluded=pooled.files_excluded,
    )


def log(msg: str, *, quiet: bool = False) -> None:
    if not quiet:
        print(msg, file=sys.stderr)

