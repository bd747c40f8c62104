from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator  # type: ignore

from docgen.adapters.git_adapter import DiffOptions

DEFAULT_PROJECT_NAME = "My Project"
DEFAULT_OUTPUT_DIR = "generated-docs"
DEFAULT_EXCLUDE_PATTERNS = ("target", "build", ".git", ".idea", "node_modules")
DEFAULT_MAX_DEPTH = 20

LOG_LEVEL = (os.getenv("DOCGEN_LOG_LEVEL") or "").strip().upper() or "INFO"


class AnalysisConfig(BaseModel):
    project_path: Path
    output_path: Optional[Path] = None
    project_name: str = DEFAULT_PROJECT_NAME
    exclude_patterns: List[str] = Field(default_factory=list)
    recursive: bool = True
    max_depth: int = Field(DEFAULT_MAX_DEPTH, ge=1)
    max_commits: int = Field(0, ge=0)       # 0 = unlimited
    all_refs: bool = True
    detect_renames: bool = True
    detect_copies: bool = True

    @model_validator(mode="after")
    def _fill_defaults(self) -> "AnalysisConfig":
        if self.output_path is None:
            self.output_path = self.project_path / DEFAULT_OUTPUT_DIR
        if not self.exclude_patterns:
            self.exclude_patterns = list(DEFAULT_EXCLUDE_PATTERNS)
        return self

    def should_exclude(self, path) -> bool:
        text = str(path).lower()
        return any(p.lower() in text for p in self.exclude_patterns)

    def diff_options(self) -> DiffOptions:
        return DiffOptions(detect_renames=self.detect_renames, detect_copies=self.detect_copies)
