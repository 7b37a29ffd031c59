from __future__ import annotations

import pytest

from git_ownership.config import ConfigError
from git_ownership.paths import PathFilter, compile_exclude, dir_key_for_path, in_directory, language_for_path


def test_language_for_path() -> None:
    assert language_for_path("Dockerfile") == "Dockerfile"
    assert language_for_path("Makefile") == "Makefile"
    assert language_for_path("src/main.py") == "Python"
    assert language_for_path("src/thing.unknownext") == "Other"
    assert language_for_path("docker/Dockerfile.dev") == "Dockerfile"
    assert language_for_path("src/lib.CPP") == "C++"
    assert language_for_path(".gitignore") == "Other"


def test_dir_key_for_path() -> None:
    assert dir_key_for_path("src/app/main.py", depth=1) == "src"
    assert dir_key_for_path("src/app/main.py", depth=2) == "src/app"
    assert dir_key_for_path("src/app/main.py", depth=5) == "src/app"
    assert dir_key_for_path("file.py", depth=1) == "(root)"
    assert dir_key_for_path(".github/workflows/ci.yml") == ".github"


def test_in_directory_matches_whole_components() -> None:
    assert in_directory("vendor/lib.c", "vendor")
    assert in_directory("src/vendor/lib.c", "vendor/")
    assert in_directory("./vendor/lib.c", "./vendor")
    assert in_directory("a/b/c.txt", "a/b")
    assert not in_directory("vendor", "vendor")
    assert not in_directory("vendored/lib.c", "vendor")
    assert not in_directory("lib.c", "")


def test_prefix_does_not_match_dotted_sibling() -> None:
    flt = PathFilter.build(None, ["github"])
    assert not flt.excludes(".github/workflows/ci.yml")
    assert flt.excludes("github/readme.md")
    assert PathFilter.build(None, [".github"]).excludes(".github/workflows/ci.yml")


def test_globs_match_normalized_path() -> None:
    flt = PathFilter.build(None, None, ["*.py"])
    assert flt.excludes("src/app.py")
    assert flt.excludes("./setup.py")
    assert not flt.excludes("src/app.js")


def test_compile_exclude_rejects_invalid_regex() -> None:
    assert compile_exclude("") is None
    assert compile_exclude(None) is None
    with pytest.raises(ConfigError, match="invalid --exclude"):
        compile_exclude("([unclosed")


def test_path_filter_combines_regex_prefixes_and_globs() -> None:
    flt = PathFilter.build(r"\.min\.js$", ["third_party"], ["*.lock"])
    assert flt.active
    assert flt.excludes("static/app.min.js")
    assert flt.excludes("third_party/x/y.c")
    assert flt.excludes("poetry.lock")
    assert not flt.excludes("src/app.js")
    assert flt.describe() == [r"/\.min\.js$/", "third_party", "*.lock"]


def test_empty_path_filter_keeps_everything() -> None:
    flt = PathFilter()
    assert not flt.active
    assert not flt.excludes("anything/at/all.txt")
