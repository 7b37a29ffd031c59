from __future__ import annotations

from .blame_aggregate import (
    author_rows,
    bucket_totals,
    dir_totals,
    file_rows,
    grand_total,
    language_totals,
    share_pct,
)
from .models import AuthorMap, OwnershipResult

RULE_WIDTH = 72


def fmt_int(n: int) -> str:
    return f"{int(n):,}"


def fmt_pct(value: float) -> str:
    return f"{value:.1f}%"


def trunc(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    if max_len <= 1:
        return s[:max_len]
    return s[: max_len - 1] + "…"


def bar(value: int, max_value: int, width: int = 22) -> str:
    if max_value <= 0:
        filled = 0
    else:
        filled = int(round((value / max_value) * width))
    filled = max(0, min(width, filled))
    return "[" + ("#" * filled) + ("-" * (width - filled)) + "]"


def display_author(author: str) -> str:
    return author if author else "(unknown)"


def render_authors_table(authors: AuthorMap, *, with_bars: bool = False) -> list[str]:
    rows = author_rows(authors)
    lines = [f"{'Author':<32} {'Lines':>10} {'Files':>7} {'Share':>7}", "-" * RULE_WIDTH]
    if not rows:
        lines.append("(no attributed lines)")
        return lines
    max_lines = int(rows[0]["lines"])
    for r in rows:
        line = (
            f"{trunc(display_author(str(r['author'])), 32):<32} "
            f"{fmt_int(int(r['lines'])):>10} "
            f"{fmt_int(int(r['files'])):>7} "
            f"{fmt_pct(float(r['share_pct'])):>7}"
        )
        if with_bars:
            line += "  " + bar(int(r["lines"]), max_lines, width=12)
        lines.append(line)
    return lines


def render_files_table(authors: AuthorMap) -> list[str]:
    rows = file_rows(authors)
    lines = [f"{'File':<40} {'Lines':>9} {'Authors':>7}  Top author", "-" * RULE_WIDTH]
    if not rows:
        lines.append("(no attributed lines)")
        return lines
    for r in rows:
        owner = f"{display_author(str(r['top_author']))} ({fmt_pct(float(r['top_author_share_pct']))})"
        lines.append(
            f"{trunc(str(r['file']), 40):<40} "
            f"{fmt_int(int(r['lines'])):>9} "
            f"{fmt_int(int(r['authors'])):>7}  "
            f"{owner}"
        )
    return lines


def render_detail(authors: AuthorMap) -> list[str]:
    lines: list[str] = []
    for r in author_rows(authors):
        author = str(r["author"])
        total = int(r["lines"])
        lines.append(f"{display_author(author)}  ({fmt_int(total)} lines, {fmt_int(int(r['files']))} files)")
        files = authors.get(author, {})
        for path, n in sorted(files.items(), key=lambda kv: (-kv[1], kv[0])):
            lines.append(f"  {fmt_int(n):>9}  {fmt_pct(share_pct(n, total)):>6}  {path}")
        lines.append("")
    if not lines:
        lines.append("(no attributed lines)")
    return lines


def render_buckets(title: str, by_author: dict[str, dict[str, int]]) -> list[str]:
    totals = bucket_totals(by_author)
    total = sum(totals.values())
    lines = [f"{title:<32} {'Lines':>10} {'Share':>7}", "-" * RULE_WIDTH]
    if not totals:
        lines.append("(no attributed lines)")
        return lines
    for key, n in sorted(totals.items(), key=lambda kv: (-kv[1], kv[0])):
        lines.append(f"{trunc(key, 32):<32} {fmt_int(n):>10} {fmt_pct(share_pct(n, total)):>7}")
    lines.append("")
    lines.append("By author")
    lines.append("-" * RULE_WIDTH)
    author_sums = {a: sum(b.values()) for a, b in by_author.items()}
    for author, author_total in sorted(author_sums.items(), key=lambda kv: (-kv[1], kv[0])):
        parts = sorted(by_author[author].items(), key=lambda kv: (-kv[1], kv[0]))
        breakdown = ", ".join(f"{k} {fmt_pct(share_pct(n, author_total))}" for k, n in parts[:5])
        if len(parts) > 5:
            breakdown += ", ..."
        lines.append(f"{trunc(display_author(author), 32):<32} {fmt_int(author_total):>10}  {breakdown}")
    return lines


def render_summary(result: OwnershipResult, *, repo_label: str = "") -> list[str]:
    total = grand_total(result.authors)
    lines = [
        f"Ownership at {result.revision[:12]}" + (f" in {repo_label}" if repo_label else ""),
        f"Files: {fmt_int(result.files_attributed)} attributed, {fmt_int(result.files_excluded)} excluded  (jobs={result.jobs})",
        f"Lines: {fmt_int(total)}  Authors: {fmt_int(len(result.authors))}",
        "",
    ]
    lines.extend(render_authors_table(result.authors, with_bars=True))
    return lines


def render_text(view: str, result: OwnershipResult, *, repo_label: str = "") -> str:
    if view == "summary":
        lines = render_summary(result, repo_label=repo_label)
    elif view == "authors":
        lines = render_authors_table(result.authors)
    elif view == "files":
        lines = render_files_table(result.authors)
    elif view == "detail":
        lines = render_detail(result.authors)
    elif view == "languages":
        lines = render_buckets("Language", language_totals(result.authors))
    elif view == "dirs":
        lines = render_buckets("Directory", dir_totals(result.authors))
    else:
        raise ValueError(f"unknown view: {view!r}")
    return "\n".join(lines).rstrip("\n") + "\n"
