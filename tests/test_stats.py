import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from docgen.adapters.java_adapter import JavaAdapter
from docgen.cir.model import Commit, FileChange
from docgen.stats import (
    analysis_summary,
    author_commit_counts,
    file_change_counts,
    git_summary,
    most_changed_files,
    total_lines,
)


def change(path, added=0, deleted=0, kind="modify"):
    return FileChange(path=path, change_kind=kind, lines_added=added, lines_deleted=deleted)


COMMITS = [
    Commit(hash="3" * 40, author_name="Bob", parent_hashes=("2" * 40, "x" * 40),
           file_changes=(change("A.java", 1, 1),)),
    Commit(hash="2" * 40, author_name="Alice", parent_hashes=("1" * 40,),
           file_changes=(change("A.java", 4, 2), change("B.java", 2, 0))),
    Commit(hash="1" * 40, author_name="Alice",
           file_changes=(change("A.java", 10, kind="add"), change("C.java", 3, kind="add"), change("B.java", 1, kind="add"))),
]


def test_author_counts_most_active_first():
    assert list(author_commit_counts(COMMITS).items()) == [("Alice", 2), ("Bob", 1)]


def test_file_change_ranking():
    assert file_change_counts(COMMITS) == {"A.java": 3, "B.java": 2, "C.java": 1}
    assert most_changed_files(COMMITS) == [("A.java", 3), ("B.java", 2), ("C.java", 1)]
    assert most_changed_files(COMMITS, limit=1) == [("A.java", 3)]


def test_totals():
    assert total_lines(COMMITS) == (21, 3)
    assert total_lines([]) == (0, 0)


def test_git_summary():
    summary = git_summary(COMMITS)
    assert summary["commits"] == 3
    assert summary["merges"] == 1
    assert summary["lines_added"] == 21
    assert summary["most_changed_files"][0] == {"path": "A.java", "changes": 3}


def test_analysis_summary_counts_nested_types():
    adapter = JavaAdapter()
    files = [
        adapter.analyze_source("class A { int x, y; void m() {} interface I { void n(); } enum E { ONE } }"),
        adapter.analyze_source("@interface Tag {}"),
        adapter.analyze_source("class Broken {"),
    ]
    summary = analysis_summary(files)
    assert summary["files"] == 3
    assert summary["parsed"] == 2
    assert summary["classes"] == 1
    assert summary["interfaces"] == 1
    assert summary["enums"] == 1
    assert summary["annotations"] == 1
    assert summary["records"] == 0
    assert summary["methods"] == 2
    assert summary["fields"] == 2
