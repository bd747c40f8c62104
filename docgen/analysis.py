"""
docgen/analysis.py

Whole-project run: discovery -> reading -> structure extraction, then git
history, then the join between the two.

The join is deliberately loose. A file's recorded path (relative to the
project root) and a FileChange path (relative to the repository root) do
not have to be spelled the same way, so a change matches a file when

  - the base names are equal, or
  - either path is a suffix or a prefix of the other.

Two files with the same name in different directories therefore share
history.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from docgen.adapters.git_adapter import GitAdapter, connect
from docgen.adapters.java_adapter import JavaAdapter
from docgen.cir.graph import AnalysisGraph
from docgen.cir.model import Commit, SourceFile
from docgen.config import AnalysisConfig
from docgen.discovery import discover_java_files, read_source_files

logger = logging.getLogger(__name__)


def paths_match(file_path: str, file_name: str, change_path: str) -> bool:
    if not change_path:
        return False
    if change_path.rsplit("/", 1)[-1] == file_name:
        return True
    if not file_path:
        return False
    return (
        file_path.endswith(change_path)
        or change_path.endswith(file_path)
        or file_path.startswith(change_path)
        or change_path.startswith(file_path)
    )


def commits_for_file(source: SourceFile, commits: List[Commit]) -> List[Commit]:
    """Commits (in the given order) with at least one change matching the file."""
    file_path = source.relative_path or source.path.as_posix()
    return [
        c for c in commits
        if any(paths_match(file_path, source.file_name, ch.path) for ch in c.file_changes)
    ]


@dataclass
class ProjectAnalysis:
    config: AnalysisConfig
    files: List[SourceFile] = field(default_factory=list)
    commits: List[Commit] = field(default_factory=list)
    connected: bool = False
    connection_error: Optional[str] = None

    @property
    def parsed_files(self) -> List[SourceFile]:
        return [f for f in self.files if f.parsed]

    @property
    def failed_files(self) -> List[SourceFile]:
        return [f for f in self.files if not f.parsed]

    def history_for(self, source: SourceFile) -> List[Commit]:
        return commits_for_file(source, self.commits)


def analyze_project(
    config: AnalysisConfig,
    java_adapter: Optional[JavaAdapter] = None,
    git_adapter: Optional[GitAdapter] = None,
) -> ProjectAnalysis:
    java_adapter = java_adapter or JavaAdapter()
    git_adapter = git_adapter or GitAdapter(config.diff_options())

    analysis = ProjectAnalysis(config=config)

    paths = discover_java_files(config)
    analysis.files = java_adapter.analyze_files(read_source_files(paths, config.project_path))

    with connect(config.project_path) as conn:
        analysis.connected = conn.connected
        analysis.connection_error = conn.error
        if conn.connected and conn.handle is not None:
            analysis.commits = git_adapter.commit_history(
                conn.handle,
                max_commits=config.max_commits,
                all_refs=config.all_refs,
            )

    logger.info(
        "Analysis of %s done: %d file(s), %d parsed, %d commit(s)",
        config.project_name, len(analysis.files), len(analysis.parsed_files), len(analysis.commits),
    )
    return analysis


def build_graph(analysis: ProjectAnalysis) -> AnalysisGraph:
    graph = AnalysisGraph()
    for commit in analysis.commits:
        graph.add_commit(commit)
    for commit in analysis.commits:
        graph.link_parents(commit)

    for source in analysis.files:
        source_id = graph.add_source_file(source)
        for commit in analysis.history_for(source):
            graph.link_history(source_id, commit)
    return graph
