from __future__ import annotations

import dataclasses
import fnmatch
import re
from pathlib import Path
from typing import Optional

from .config import ConfigError


def compile_exclude(pattern: Optional[str]) -> Optional[re.Pattern[str]]:
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigError(f"invalid --exclude pattern {pattern!r}: {e}") from e


def normalize_path(path: str) -> str:
    p = path.replace("\\", "/")
    while p.startswith("./"):
        p = p[2:]
    return p.strip("/")


def in_directory(path: str, directory: str) -> bool:
    """True when `directory` names whole components of a parent directory of `path`, at any depth."""
    d = normalize_path(directory)
    if not d:
        return False
    return f"/{d}/" in f"/{normalize_path(path)}"


@dataclasses.dataclass(frozen=True)
class PathFilter:
    exclude_regex: Optional[re.Pattern[str]] = None
    exclude_prefixes: tuple[str, ...] = ()
    exclude_globs: tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        exclude: Optional[str] = None,
        exclude_prefixes: Optional[list[str]] = None,
        exclude_globs: Optional[list[str]] = None,
    ) -> "PathFilter":
        return cls(
            exclude_regex=compile_exclude(exclude),
            exclude_prefixes=tuple(exclude_prefixes or ()),
            exclude_globs=tuple(exclude_globs or ()),
        )

    @property
    def active(self) -> bool:
        return self.exclude_regex is not None or bool(self.exclude_prefixes) or bool(self.exclude_globs)

    def excludes(self, path: str) -> bool:
        if self.exclude_regex is not None and self.exclude_regex.search(path):
            return True
        if any(in_directory(path, d) for d in self.exclude_prefixes):
            return True
        p = normalize_path(path)
        return any(fnmatch.fnmatch(p, pat) for pat in self.exclude_globs if pat)

    def describe(self) -> list[str]:
        out: list[str] = []
        if self.exclude_regex is not None:
            out.append(f"/{self.exclude_regex.pattern}/")
        out.extend(self.exclude_prefixes)
        out.extend(self.exclude_globs)
        return out


LANGUAGE_SUFFIXES: dict[str, tuple[str, ...]] = {
    "Python": (".py", ".pyi"),
    "Jupyter": (".ipynb",),
    "JavaScript": (".js", ".jsx", ".mjs", ".cjs"),
    "TypeScript": (".ts", ".tsx"),
    "Java": (".java",),
    "Kotlin": (".kt", ".kts"),
    "Swift": (".swift",),
    "Go": (".go",),
    "Rust": (".rs",),
    "PHP": (".php",),
    "Ruby": (".rb",),
    "C#": (".cs",),
    "C": (".c",),
    "C/C++ Headers": (".h",),
    "C++": (".cc", ".cpp", ".cxx", ".hpp"),
    "Objective-C": (".m",),
    "Scala": (".scala",),
    "SQL": (".sql",),
    "Terraform": (".tf",),
    "YAML": (".yml", ".yaml"),
    "JSON": (".json",),
    "TOML": (".toml",),
    "INI": (".ini", ".cfg"),
    "Markdown": (".md",),
    "reStructuredText": (".rst",),
    "Text": (".txt",),
    "HTML": (".html", ".htm"),
    "CSS": (".css", ".scss"),
    "Shell": (".sh", ".bash", ".zsh"),
    "PowerShell": (".ps1",),
    "XML": (".xml",),
    "Protobuf": (".proto",),
}
_LANGUAGE_BY_SUFFIX = {suffix: lang for lang, suffixes in LANGUAGE_SUFFIXES.items() for suffix in suffixes}
_LANGUAGE_BY_NAME = {
    "Dockerfile": "Dockerfile",
    "Containerfile": "Dockerfile",
    "Makefile": "Makefile",
    "makefile": "Makefile",
}


def language_for_path(path: str) -> str:
    name = normalize_path(path).rsplit("/", 1)[-1]
    by_name = _LANGUAGE_BY_NAME.get(name.split(".", 1)[0])
    if by_name:
        return by_name
    return _LANGUAGE_BY_SUFFIX.get(Path(name).suffix.lower(), "Other")


def dir_key_for_path(path: str, depth: int = 1) -> str:
    p = normalize_path(path)
    if "/" not in p:
        return "(root)"
    parts = [x for x in p.split("/") if x]
    if len(parts) < 2:
        return "(root)"
    return "/".join(parts[: min(max(1, depth), len(parts) - 1)])
