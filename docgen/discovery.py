"""
docgen/discovery.py

Finding and reading the Java sources of a project.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import List

from docgen.cir.model import SourceFile
from docgen.config import AnalysisConfig

logger = logging.getLogger(__name__)

JAVA_EXTENSION = ".java"

_PACKAGE_RE = re.compile(r"^\s*package\s+([\w.]+)\s*;", re.MULTILINE)


def discover_java_files(config: AnalysisConfig) -> List[Path]:
    root = Path(config.project_path)
    if not root.exists():
        raise FileNotFoundError(f"Project path does not exist: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Project path is not a directory: {root}")

    found: List[Path] = []
    max_depth = config.max_depth if config.recursive else 1
    for path in _walk(root, max_depth):
        if path.suffix != JAVA_EXTENSION or not path.is_file():
            continue
        if config.should_exclude(path.relative_to(root).as_posix()):
            continue
        found.append(path)

    found.sort()
    logger.info("Found %d Java file(s) under %s", len(found), root)
    return found


def _walk(directory: Path, depth: int):
    # depth 1 = direct children only
    for entry in sorted(directory.iterdir()):
        if entry.is_dir():
            if depth > 1:
                yield from _walk(entry, depth - 1)
        else:
            yield entry


def extract_package_name(content: str) -> str:
    m = _PACKAGE_RE.search(content)
    return m.group(1) if m else ""


def read_source_file(path: Path, root: Path) -> SourceFile:
    source = SourceFile(path=path)
    try:
        source.relative_path = path.relative_to(root).as_posix()
    except ValueError:
        source.relative_path = path.as_posix()

    try:
        content = path.read_text(encoding="utf-8")
        stat = path.stat()
    except (OSError, UnicodeDecodeError) as e:
        source.read_error = f"Could not read file: {e}"
        logger.warning("Could not read %s: %s", path, e)
        return source

    source.content = content
    source.line_count = len(content.splitlines())
    source.size = stat.st_size
    source.last_modified = datetime.fromtimestamp(stat.st_mtime)
    source.package_name = extract_package_name(content)
    return source


def read_source_files(paths: List[Path], root: Path) -> List[SourceFile]:
    files = [read_source_file(p, root) for p in paths]
    failed = sum(1 for f in files if f.read_error)
    if failed:
        logger.warning("%d of %d file(s) could not be read", failed, len(files))
    return files
