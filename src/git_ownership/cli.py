from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

from .blame_pool import resolve_jobs
from .blame_write import render_report, write_report
from .config import FORMATS, VIEWS, ConfigError, OwnershipSettings, load_config, settings_from_config
from .git import GitCommandError, get_repo_toplevel
from .models import BlameOptions
from .paths import PathFilter
from .run import format_startup_header, log, run_ownership


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-ownership",
        description="Per-author, per-file line ownership of a git revision, computed with parallel `git blame`.",
    )
    parser.add_argument("paths", nargs="*", help="Limit attribution to these paths (default: whole tree).")
    parser.add_argument("--repo", type=Path, default=Path("."), help="Repository (or any directory inside it).")
    parser.add_argument("--rev", type=str, default=None, help="Revision to attribute (default: HEAD).")
    parser.add_argument("--exclude", type=str, default=None, help="Regular expression; matching file paths are skipped.")
    parser.add_argument("--jobs", "-j", type=int, default=None, help="Parallel git blame jobs (0 = one per CPU).")
    parser.add_argument("--view", choices=VIEWS, default=None, help="Report view (default: summary).")
    parser.add_argument("--format", choices=FORMATS, default=None, help="Output format (default: text).")
    parser.add_argument("--by-email", action="store_true", default=None, help="Group lines by author email instead of name.")
    parser.add_argument("--no-moves", action="store_true", help="Disable move/copy detection (-M -C -C).")
    parser.add_argument("--no-ignore-whitespace", action="store_true", help="Do not pass -w to git blame.")
    parser.add_argument("--config", type=Path, default=Path("config.json"), help="Path to config.json.")
    parser.add_argument("--output", "-o", type=Path, default=None, help="Write the report to this file instead of stdout.")
    parser.add_argument("--quiet", "-q", action="store_true", help="Do not print the run plan to stderr.")
    return parser


def repo_relative_paths(repo: Path, paths: list[str]) -> list[str]:
    out: list[str] = []
    for p in paths:
        try:
            rel = Path(p).resolve().relative_to(repo)
        except ValueError:
            out.append(p)
            continue
        out.append(rel.as_posix() if str(rel) != "." else ".")
    return out


def effective_settings(args: argparse.Namespace, config: dict) -> OwnershipSettings:
    settings = settings_from_config(config)
    overrides: dict[str, object] = {}
    if args.rev:
        overrides["revision"] = args.rev
    if args.jobs is not None:
        overrides["jobs"] = args.jobs
    if args.exclude is not None:
        overrides["exclude"] = args.exclude
    if args.view:
        overrides["view"] = args.view
    if args.format:
        overrides["format"] = args.format
    if args.by_email:
        overrides["by_email"] = True
    if args.no_moves:
        overrides["detect_moves"] = False
    if args.no_ignore_whitespace:
        overrides["ignore_whitespace"] = False
    return dataclasses.replace(settings, **overrides)


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _build_parser().parse_args(argv)

    try:
        settings = effective_settings(args, load_config(args.config))
        path_filter = PathFilter.build(
            settings.exclude,
            settings.exclude_path_prefixes,
            settings.exclude_path_globs,
        )
        repo = get_repo_toplevel(args.repo.resolve())
        if repo is None:
            print(f"error: not a git repository: {args.repo}", file=sys.stderr)
            return 2
        jobs = resolve_jobs(settings.jobs)
        scope = repo_relative_paths(repo, list(args.paths))
        options = BlameOptions(
            detect_moves=settings.detect_moves,
            ignore_whitespace=settings.ignore_whitespace,
            by_email=settings.by_email,
        )
        log(
            format_startup_header(
                repo=repo,
                revision=settings.revision,
                paths=scope,
                jobs=jobs,
                path_filter=path_filter,
                options=options,
                view=settings.view,
                fmt=settings.format,
            ),
            quiet=args.quiet,
        )
        result = run_ownership(
            repo,
            settings.revision,
            scope,
            jobs=jobs,
            path_filter=path_filter,
            options=options,
        )
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except GitCommandError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    log(
        f"Attributed {result.files_attributed} files ({result.files_excluded} excluded) with {result.jobs} jobs.",
        quiet=args.quiet,
    )
    report = render_report(settings.view, settings.format, result, repo_label=repo.name)
    try:
        write_report(report, args.output)
    except OSError as e:
        print(f"error: cannot write report: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
