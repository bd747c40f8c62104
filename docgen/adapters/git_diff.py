"""
docgen/adapters/git_diff.py

Turns GitPython Diff objects into FileChange records.

Line counts come from the edit list of a zero-context patch
(``--unified=0``), parsed with unidiff: every hunk is one replaced
region, an (old range, new range) pair, and

    lines_added   = sum(new_end - new_begin)
    lines_deleted = sum(old_end - old_begin)

Binary patches have no hunks and count as 0 / 0.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

from unidiff import PatchSet  # type: ignore
from unidiff.errors import UnidiffParseError  # type: ignore

from docgen.cir.model import ChangeKind, FileChange

logger = logging.getLogger(__name__)

DEV_NULL = "/dev/null"


@dataclass(frozen=True)
class EditSpan:
    """One replaced region; begins are 0-based, ends exclusive."""
    old_begin: int
    old_end: int
    new_begin: int
    new_end: int

    @property
    def lines_added(self) -> int:
        return self.new_end - self.new_begin

    @property
    def lines_deleted(self) -> int:
        return self.old_end - self.old_begin

    @classmethod
    def from_hunk(cls, hunk: Any) -> "EditSpan":
        old_begin, old_end = _range(hunk.source_start, hunk.source_length)
        new_begin, new_end = _range(hunk.target_start, hunk.target_length)
        return cls(old_begin, old_end, new_begin, new_end)


def _range(start: int, length: int) -> Tuple[int, int]:
    # an empty range names the line before the gap
    begin = start - 1 if length > 0 else start
    return begin, begin + length


def _with_headers(patch: str, source_path: Optional[str], target_path: Optional[str]) -> str:
    # GitPython strips the ---/+++ lines that unidiff needs to open a file
    source = f"a/{source_path}" if source_path else DEV_NULL
    target = f"b/{target_path}" if target_path else DEV_NULL
    return f"--- {source}\n+++ {target}\n{patch}"


def edit_spans(
    patch: Union[str, bytes, None],
    source_path: Optional[str] = "file",
    target_path: Optional[str] = "file",
) -> List[EditSpan]:
    """
    Edit spans of a single-file patch body as GitPython returns it
    (hunks only, no file headers).
    """
    if not patch:
        return []
    if isinstance(patch, bytes):
        patch = patch.decode("utf-8", errors="replace")
    if "@@" not in patch:
        return []

    spans: List[EditSpan] = []
    for patched_file in PatchSet(_with_headers(patch, source_path, target_path)):
        spans.extend(EditSpan.from_hunk(h) for h in patched_file)
    return spans


def count_lines(spans: List[EditSpan]) -> Tuple[int, int]:
    """Return (lines_added, lines_deleted)."""
    return sum(s.lines_added for s in spans), sum(s.lines_deleted for s in spans)


def classify(diff: Any) -> ChangeKind:
    if diff.new_file:
        return "add"
    if diff.deleted_file:
        return "delete"
    if getattr(diff, "copied_file", False):
        return "copy"
    if diff.renamed_file:
        return "rename"
    return "modify"


def to_file_change(diff: Any) -> FileChange:
    kind = classify(diff)
    if kind == "delete":
        path = diff.a_path
    else:
        path = diff.b_path or diff.a_path
    old_path = diff.a_path if kind in ("rename", "copy") else None

    source_path = None if kind == "add" else diff.a_path
    target_path = None if kind == "delete" else path
    try:
        added, deleted = count_lines(edit_spans(diff.diff, source_path, target_path))
    except (UnidiffParseError, TypeError, AttributeError) as e:
        logger.debug("Could not count lines for %s: %s", path, e)
        added, deleted = 0, 0

    return FileChange(
        path=path,
        change_kind=kind,
        old_path=old_path,
        lines_added=added,
        lines_deleted=deleted,
    )


__all__ = ["EditSpan", "classify", "count_lines", "edit_spans", "to_file_change"]
