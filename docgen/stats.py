from __future__ import annotations

from collections import Counter
from typing import Dict, List, Tuple

from docgen.cir.model import Commit, SourceFile


def author_commit_counts(commits: List[Commit]) -> Dict[str, int]:
    """Commits per author name, most active first."""
    counts = Counter(c.author_name for c in commits)
    return dict(sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])))


def file_change_counts(commits: List[Commit]) -> Dict[str, int]:
    counts: Counter = Counter()
    for commit in commits:
        for change in commit.file_changes:
            counts[change.path] += 1
    return dict(counts)


def most_changed_files(commits: List[Commit], limit: int = 5) -> List[Tuple[str, int]]:
    ranked = sorted(file_change_counts(commits).items(), key=lambda kv: (-kv[1], kv[0]))
    return ranked[:limit]


def total_lines(commits: List[Commit]) -> Tuple[int, int]:
    """(lines added, lines deleted) over all commits."""
    return (
        sum(c.total_lines_added for c in commits),
        sum(c.total_lines_deleted for c in commits),
    )


def git_summary(commits: List[Commit]) -> Dict[str, object]:
    added, deleted = total_lines(commits)
    return {
        "commits": len(commits),
        "merges": sum(1 for c in commits if c.is_merge),
        "authors": author_commit_counts(commits),
        "most_changed_files": [{"path": p, "changes": n} for p, n in most_changed_files(commits)],
        "lines_added": added,
        "lines_deleted": deleted,
    }


def analysis_summary(files: List[SourceFile]) -> Dict[str, int]:
    summary = {
        "files": len(files),
        "parsed": 0,
        "classes": 0,
        "interfaces": 0,
        "enums": 0,
        "records": 0,
        "annotations": 0,
        "methods": 0,
        "fields": 0,
    }
    kind_keys = {
        "class": "classes",
        "interface": "interfaces",
        "enum": "enums",
        "record": "records",
        "annotation": "annotations",
    }
    for f in files:
        if not f.parsed:
            continue
        summary["parsed"] += 1
        for top in f.types:
            for t in top.walk():
                summary[kind_keys[t.kind]] += 1
                summary["methods"] += len(t.methods)
                summary["fields"] += len(t.fields)
    return summary
