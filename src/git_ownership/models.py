from __future__ import annotations

import dataclasses
from typing import Union

# author -> file path -> attributed line count
AuthorMap = dict[str, dict[str, int]]


@dataclasses.dataclass
class AttributionRecord:
    commit_id: str
    source_line: int
    result_line: int
    line_count: int
    metadata: dict[str, str] = dataclasses.field(default_factory=dict)

    @property
    def author(self) -> str:
        return self.metadata.get("author", "")

    @property
    def author_mail(self) -> str:
        mail = self.metadata.get("author-mail", "").strip()
        if mail.startswith("<") and mail.endswith(">"):
            mail = mail[1:-1]
        return mail

    @property
    def filename(self) -> str:
        return self.metadata.get("filename", "")


@dataclasses.dataclass(frozen=True)
class FilePath:
    path: str


@dataclasses.dataclass(frozen=True)
class Stop:
    pass


WorkItem = Union[FilePath, Stop]


@dataclasses.dataclass(frozen=True)
class BlameOptions:
    detect_moves: bool = True
    ignore_whitespace: bool = True
    by_email: bool = False


@dataclasses.dataclass
class PoolResult:
    maps: list[AuthorMap]
    files_attributed: int = 0
    files_excluded: int = 0


@dataclasses.dataclass
class OwnershipResult:
    authors: AuthorMap
    revision: str
    jobs: int
    files_attributed: int = 0
    files_excluded: int = 0
