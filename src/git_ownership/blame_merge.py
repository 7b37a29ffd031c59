from __future__ import annotations

from typing import Iterable

from .models import AuthorMap


def merge_author_maps(maps: Iterable[AuthorMap]) -> AuthorMap:
    """Sum per-worker maps into a new map; inputs are left untouched."""
    out: AuthorMap = {}
    for src in maps:
        for author, files in src.items():
            cur = out.get(author)
            if cur is None:
                out[author] = {path: int(n) for path, n in files.items()}
                continue
            for path, n in files.items():
                cur[path] = int(cur.get(path, 0)) + int(n)
    return out
