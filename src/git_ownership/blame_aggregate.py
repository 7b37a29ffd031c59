from __future__ import annotations

from collections import defaultdict
from typing import Callable

from .models import AuthorMap
from .paths import dir_key_for_path, language_for_path


def author_totals(authors: AuthorMap) -> dict[str, int]:
    return {author: sum(files.values()) for author, files in authors.items()}


def file_totals(authors: AuthorMap) -> dict[str, int]:
    out: dict[str, int] = defaultdict(int)
    for files in authors.values():
        for path, n in files.items():
            out[path] += n
    return dict(out)


def grand_total(authors: AuthorMap) -> int:
    return sum(author_totals(authors).values())


def author_file_counts(authors: AuthorMap) -> dict[str, int]:
    return {author: sum(1 for n in files.values() if n > 0) for author, files in authors.items()}


def _bucketed(authors: AuthorMap, key_fn: Callable[[str], str]) -> dict[str, dict[str, int]]:
    out: dict[str, dict[str, int]] = {}
    for author, files in authors.items():
        buckets: dict[str, int] = defaultdict(int)
        for path, n in files.items():
            buckets[key_fn(path)] += n
        out[author] = dict(buckets)
    return out


def language_totals(authors: AuthorMap) -> dict[str, dict[str, int]]:
    """author -> language -> lines"""
    return _bucketed(authors, language_for_path)


def dir_totals(authors: AuthorMap, depth: int = 1) -> dict[str, dict[str, int]]:
    """author -> top-level directory -> lines"""
    return _bucketed(authors, lambda p: dir_key_for_path(p, depth=depth))


def bucket_totals(by_author: dict[str, dict[str, int]]) -> dict[str, int]:
    out: dict[str, int] = defaultdict(int)
    for buckets in by_author.values():
        for key, n in buckets.items():
            out[key] += n
    return dict(out)


def top_author_by_file(authors: AuthorMap) -> dict[str, tuple[str, int]]:
    out: dict[str, tuple[str, int]] = {}
    for author, files in authors.items():
        for path, n in files.items():
            cur = out.get(path)
            # ties go to the alphabetically first author so the result is order-independent
            if cur is None or n > cur[1] or (n == cur[1] and author < cur[0]):
                out[path] = (author, n)
    return out


def share_pct(part: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return 100.0 * part / total


def author_rows(authors: AuthorMap) -> list[dict[str, object]]:
    totals = author_totals(authors)
    file_counts = author_file_counts(authors)
    total = sum(totals.values())
    rows: list[dict[str, object]] = []
    for author, lines in sorted(totals.items(), key=lambda kv: (-kv[1], kv[0])):
        rows.append(
            {
                "author": author,
                "lines": lines,
                "files": file_counts.get(author, 0),
                "share_pct": round(share_pct(lines, total), 2),
            }
        )
    return rows


def file_rows(authors: AuthorMap) -> list[dict[str, object]]:
    totals = file_totals(authors)
    owners = top_author_by_file(authors)
    contributors: dict[str, int] = defaultdict(int)
    for files in authors.values():
        for path, n in files.items():
            if n > 0:
                contributors[path] += 1
    rows: list[dict[str, object]] = []
    for path, lines in sorted(totals.items(), key=lambda kv: (-kv[1], kv[0])):
        owner, owner_lines = owners.get(path, ("", 0))
        rows.append(
            {
                "file": path,
                "lines": lines,
                "authors": contributors.get(path, 0),
                "top_author": owner,
                "top_author_share_pct": round(share_pct(owner_lines, lines), 2),
            }
        )
    return rows
