import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException # type: ignore
from pydantic import BaseModel, Field # type: ignore

from docgen.adapters.git_adapter import GitAdapter, connect
from docgen.adapters.java_adapter import JavaAdapter
from docgen.analysis import analyze_project, build_graph
from docgen.cir.model import Commit, SourceFile
from docgen.config import LOG_LEVEL, AnalysisConfig
from docgen.stats import analysis_summary, git_summary

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="docgen-core")
java_adapter = JavaAdapter()


class ParseRequest(BaseModel):
    code: str
    filename: str | None = None


class AnalyzeRequest(BaseModel):
    project_path: str
    max_commits: int = Field(0, ge=0)
    exclude_patterns: List[str] | None = None


class HistoryRequest(BaseModel):
    repo_path: str
    max_commits: int = Field(0, ge=0)
    path: str | None = None
    author: str | None = None


def _file_json(source: SourceFile) -> Dict[str, Any]:
    return {
        "path": source.relative_path,
        "file_name": source.file_name,
        "package": source.package_name,
        "line_count": source.line_count,
        "parsed": source.parsed,
        "parse_error": source.parse_error,
        "read_error": source.read_error,
        "imports": source.imports,
        "types": [asdict(t) for t in source.types],
    }


def _commit_json(commit: Commit) -> Dict[str, Any]:
    data = asdict(commit)
    data["short_hash"] = commit.short_hash
    data["subject"] = commit.subject
    data["is_merge"] = commit.is_merge
    return data


@app.post("/parse")
def parse(req: ParseRequest):
    source = java_adapter.analyze_source(req.code, req.filename)
    return {
        "parsed": source.parsed,
        "parse_error": source.parse_error,
        "package": source.package_name,
        "imports": source.imports,
        "types": [asdict(t) for t in source.types],
    }


@app.post("/analyze")
def analyze(req: AnalyzeRequest):
    config = AnalysisConfig(
        project_path=Path(req.project_path),
        max_commits=req.max_commits,
        exclude_patterns=req.exclude_patterns or [],
    )
    try:
        analysis = analyze_project(config, java_adapter=java_adapter)
    except (FileNotFoundError, NotADirectoryError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "project": config.project_name,
        "summary": analysis_summary(analysis.files),
        "files": [_file_json(f) for f in analysis.files],
        "connected": analysis.connected,
        "connection_error": analysis.connection_error,
        "commits": [_commit_json(c) for c in analysis.commits],
        "git": git_summary(analysis.commits),
        "graph": build_graph(analysis).to_debug_json(),
    }


@app.post("/history")
def history(req: HistoryRequest):
    git_adapter = GitAdapter()
    with connect(req.repo_path) as conn:
        if not conn.connected or conn.handle is None:
            return {"connected": False, "error": conn.error, "commits": []}

        if req.path:
            commits = git_adapter.file_history(conn.handle, req.path, max_commits=req.max_commits)
        elif req.author:
            commits = git_adapter.commits_by_author(conn.handle, req.author, max_commits=req.max_commits)
        else:
            commits = git_adapter.commit_history(conn.handle, max_commits=req.max_commits)

    return {
        "connected": True,
        "error": None,
        "commits": [_commit_json(c) for c in commits],
        "git": git_summary(commits),
    }


if __name__ == "__main__":
    import uvicorn # type: ignore

    uvicorn.run(app, host="127.0.0.1", port=8020)
