from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable

import pytest
from git_helpers import blame_record

from git_ownership.blame_file import attribute_file, blame_command, fold_records
from git_ownership.blame_parse import iter_records
from git_ownership.git import GitCommandError
from git_ownership.models import AuthorMap, BlameOptions

C1 = "a" * 40
C2 = "b" * 40
REV = "f" * 40


def test_blame_command_flags() -> None:
    assert blame_command("src/a.py", "HEAD", BlameOptions()) == [
        "blame",
        "--incremental",
        "-M",
        "-C",
        "-C",
        "-w",
        "HEAD",
        "--",
        "src/a.py",
    ]
    plain = blame_command("a.py", "v1", BlameOptions(detect_moves=False, ignore_whitespace=False))
    assert plain == ["blame", "--incremental", "v1", "--", "a.py"]


def test_fold_records_same_commit_split_hunks_single_slot() -> None:
    text = blame_record(C1, 1, 1, 2, filename="a.txt", author="alice") + blame_record(C1, 10, 8, 4, filename="a.txt")
    acc: AuthorMap = {}
    fold_records(iter_records(text.splitlines()), "a.txt", acc)
    assert acc == {"alice": {"a.txt": 6}}


def test_fold_records_adds_to_existing_accumulator() -> None:
    acc: AuthorMap = {"alice": {"other.txt": 10}}
    text = blame_record(C1, 1, 1, 3, filename="a.txt", author="alice") + blame_record(C2, 4, 4, 1, filename="a.txt", author="bob")
    fold_records(iter_records(text.splitlines()), "a.txt", acc)
    assert acc == {"alice": {"other.txt": 10, "a.txt": 3}, "bob": {"a.txt": 1}}


def test_fold_records_by_email() -> None:
    text = blame_record(C1, 1, 1, 3, filename="a.txt", author="Alice")
    acc: AuthorMap = {}
    fold_records(iter_records(text.splitlines()), "a.txt", acc, options=BlameOptions(by_email=True))
    assert acc == {"alice@example.com": {"a.txt": 3}}


def test_attribute_file_uses_git_blame_stream(fake_git: Callable[[dict], Path]) -> None:
    stdout = (
        blame_record(C1, 1, 1, 2, filename="a.txt", author="alice")
        + blame_record(C2, 3, 3, 1, filename="a.txt", author="bob")
        + blame_record(C1, 5, 4, 4, filename="a.txt")
    )
    repo = fake_git({"blame": {"a.txt": {"stdout": stdout}}})

    acc: AuthorMap = {}
    attribute_file(repo, "a.txt", REV, acc)
    assert acc == {"alice": {"a.txt": 6}, "bob": {"a.txt": 1}}


def test_attribute_file_keys_by_requested_path_not_record_filename(fake_git: Callable[[dict], Path]) -> None:
    # Lines copied from another file report that file as `filename`.
    stdout = blame_record(C1, 1, 1, 2, filename="old/source.txt", author="alice")
    repo = fake_git({"blame": {"new.txt": {"stdout": stdout}}})

    acc: AuthorMap = {}
    attribute_file(repo, "new.txt", REV, acc)
    assert acc == {"alice": {"new.txt": 2}}


def test_attribute_file_nonzero_exit_raises(fake_git: Callable[[dict], Path]) -> None:
    repo = fake_git({"blame": {"a.txt": {"stdout": "", "stderr": "fatal: no such path a.txt in HEAD\n", "code": 128}}})

    with pytest.raises(GitCommandError) as exc:
        attribute_file(repo, "a.txt", REV, {})
    assert exc.value.returncode == 128
    assert "no such path" in str(exc.value)


def test_attribute_file_truncated_stream_counts_complete_records(fake_git: Callable[[dict], Path]) -> None:
    stdout = blame_record(C1, 1, 1, 2, filename="a.txt", author="alice") + f"{C2} 3 3 1\nauthor bob\n"
    repo = fake_git({"blame": {"a.txt": {"stdout": stdout}}})

    acc: AuthorMap = {}
    attribute_file(repo, "a.txt", REV, acc)
    assert acc == {"alice": {"a.txt": 2}}


def test_attribute_file_does_not_deadlock_on_stderr(fake_git: Callable[[dict], Path]) -> None:
    first = blame_record(C1, 1, 1, 1, filename="a.txt", author="alice")
    second = blame_record(C2, 2, 2, 2, filename="a.txt", author="bob")
    repo = fake_git(
        {
            "blame": {
                "a.txt": {
                    "stdout": first + second,
                    "split": len(first),
                    "stderr_bytes": 2 * 1024 * 1024,
                }
            }
        }
    )

    acc: AuthorMap = {}
    errors: list[BaseException] = []

    def target() -> None:
        try:
            attribute_file(repo, "a.txt", REV, acc)
        except BaseException as e:
            errors.append(e)

    t = threading.Thread(target=target, daemon=True)
    t.start()
    t.join(timeout=20)
    if t.is_alive():
        raise AssertionError("attribute_file hung when git produced large stderr output")
    assert errors == []
    assert acc == {"alice": {"a.txt": 1}, "bob": {"a.txt": 2}}


def test_attribute_file_keeps_carriage_return_inside_summary(fake_git: Callable[[dict], Path]) -> None:
    stdout = blame_record(C1, 1, 1, 2, filename="a.txt", author="alice", summary="fix\rfilename a.txt") + blame_record(
        C2, 3, 3, 1, filename="a.txt", author="bob"
    )
    repo = fake_git({"blame": {"a.txt": {"stdout": stdout}}})

    acc: AuthorMap = {}
    attribute_file(repo, "a.txt", REV, acc)
    assert acc == {"alice": {"a.txt": 2}, "bob": {"a.txt": 1}}
