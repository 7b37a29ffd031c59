from __future__ import annotations

import csv
import io
import json
import sys
from pathlib import Path
from typing import IO, Optional

from .blame_aggregate import (
    author_rows,
    author_totals,
    bucket_totals,
    dir_totals,
    file_rows,
    file_totals,
    grand_total,
    language_totals,
)
from .blame_render import render_text
from .models import AuthorMap, OwnershipResult


def _csv_text(header: list[str], rows: list[list[object]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    for row in rows:
        writer.writerow(row)
    return buf.getvalue()


def _bucket_csv(label: str, by_author: dict[str, dict[str, int]]) -> str:
    rows: list[list[object]] = []
    for author in sorted(by_author):
        for key, n in sorted(by_author[author].items(), key=lambda kv: (-kv[1], kv[0])):
            rows.append([author, key, n])
    return _csv_text(["author", label, "lines"], rows)


def render_csv(view: str, authors: AuthorMap) -> str:
    if view in ("summary", "authors"):
        rows = [[r["author"], r["lines"], r["files"], r["share_pct"]] for r in author_rows(authors)]
        return _csv_text(["author", "lines", "files", "share_pct"], rows)
    if view == "files":
        rows = [[r["file"], r["lines"], r["authors"], r["top_author"], r["top_author_share_pct"]] for r in file_rows(authors)]
        return _csv_text(["file", "lines", "authors", "top_author", "top_author_share_pct"], rows)
    if view == "detail":
        rows = []
        for author in sorted(authors):
            for path, n in sorted(authors[author].items()):
                rows.append([author, path, n])
        return _csv_text(["author", "file", "lines"], rows)
    if view == "languages":
        return _bucket_csv("language", language_totals(authors))
    if view == "dirs":
        return _bucket_csv("dir", dir_totals(authors))
    raise ValueError(f"unknown view: {view!r}")


def json_payload(view: str, result: OwnershipResult) -> dict[str, object]:
    authors = result.authors
    payload: dict[str, object] = {
        "revision": result.revision,
        "jobs": result.jobs,
        "files_attributed": result.files_attributed,
        "files_excluded": result.files_excluded,
        "total_lines": grand_total(authors),
        "view": view,
    }
    if view == "summary":
        payload["authors"] = author_rows(authors)
    elif view == "authors":
        payload["authors"] = author_totals(authors)
    elif view == "files":
        payload["files"] = file_rows(authors)
        payload["file_totals"] = file_totals(authors)
    elif view == "detail":
        payload["authors"] = {a: dict(sorted(files.items())) for a, files in sorted(authors.items())}
    elif view == "languages":
        by_author = language_totals(authors)
        payload["totals"] = bucket_totals(by_author)
        payload["by_author"] = by_author
    elif view == "dirs":
        by_author = dir_totals(authors)
        payload["totals"] = bucket_totals(by_author)
        payload["by_author"] = by_author
    else:
        raise ValueError(f"unknown view: {view!r}")
    return payload


def render_report(view: str, fmt: str, result: OwnershipResult, *, repo_label: str = "") -> str:
    if fmt == "text":
        return render_text(view, result, repo_label=repo_label)
    if fmt == "csv":
        return render_csv(view, result.authors)
    if fmt == "json":
        return json.dumps(json_payload(view, result), indent=2, sort_keys=False) + "\n"
    raise ValueError(f"unknown format: {fmt!r}")


def printable(text: str) -> str:
    # File names that are not valid UTF-8 arrive as lone surrogates; show their raw bytes as \xNN.
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")


def write_report(text: str, output: Optional[Path], stdout: Optional[IO[str]] = None) -> None:
    text = printable(text)
    if output is None:
        (stdout or sys.stdout).write(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
