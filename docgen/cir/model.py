from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import List, Literal, Optional, Tuple

TypeKind = Literal["class", "interface", "enum", "record", "annotation"]
ChangeKind = Literal["add", "modify", "delete", "rename", "copy"]

SHORT_HASH_LENGTH = 7


def _visibility(modifiers: Tuple[str, ...]) -> str:
    if "public" in modifiers:
        return "public"
    if "protected" in modifiers:
        return "protected"
    if "private" in modifiers:
        return "private"
    return "package-private"


# ---------------------------------------------------------------------------
# Structure entities (built once by the Java adapter, never mutated)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Parameter:
    name: str
    type_name: str                      # declared type text (e.g. List<User>)
    is_final: bool = False
    is_varargs: bool = False            # only ever set on the last parameter
    description: Optional[str] = None   # bound from @param <name>

    @property
    def full_type(self) -> str:
        return f"{self.type_name}..." if self.is_varargs else self.type_name

    @property
    def signature(self) -> str:
        prefix = "final " if self.is_final else ""
        return f"{prefix}{self.full_type} {self.name}"


@dataclass(frozen=True)
class Field:
    name: str
    type_name: str
    modifiers: Tuple[str, ...] = ()
    initial_value: Optional[str] = None
    javadoc: Optional[str] = None
    line: int = 0

    @property
    def visibility(self) -> str:
        return _visibility(self.modifiers)

    @property
    def is_public(self) -> bool:
        return "public" in self.modifiers

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    @property
    def is_final(self) -> bool:
        return "final" in self.modifiers

    @property
    def signature(self) -> str:
        mods = " ".join(self.modifiers)
        return f"{mods} {self.type_name} {self.name}".strip()


@dataclass(frozen=True)
class Method:
    name: str
    return_type: Optional[str]          # None for constructors
    parameters: Tuple[Parameter, ...] = ()
    modifiers: Tuple[str, ...] = ()
    thrown_exceptions: Tuple[str, ...] = ()
    annotations: Tuple[str, ...] = ()
    javadoc: Optional[str] = None
    return_description: Optional[str] = None
    is_constructor: bool = False
    start_line: int = 0
    end_line: int = 0

    @property
    def visibility(self) -> str:
        return _visibility(self.modifiers)

    @property
    def is_public(self) -> bool:
        return "public" in self.modifiers

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    @property
    def is_abstract(self) -> bool:
        return "abstract" in self.modifiers

    @property
    def line_count(self) -> int:
        if self.start_line > 0 and self.end_line > 0:
            return self.end_line - self.start_line + 1
        return 0

    @property
    def signature(self) -> str:
        """e.g. ``public String findUser(Long id) throws NotFound``"""
        parts: List[str] = list(self.modifiers)
        if not self.is_constructor and self.return_type:
            parts.append(self.return_type)
        params = ", ".join(f"{p.full_type} {p.name}" for p in self.parameters)
        sig = " ".join(parts + [f"{self.name}({params})"])
        if self.thrown_exceptions:
            sig += " throws " + ", ".join(self.thrown_exceptions)
        return sig

    @property
    def short_signature(self) -> str:
        return f"{self.name}({', '.join(p.full_type for p in self.parameters)})"


@dataclass(frozen=True)
class TypeDeclaration:
    """
    One class / interface / enum / record / annotation declaration.

    Nested declarations are owned by their parent; their qualified name is
    always ``<parent qualified name>.<simple name>``.
    """
    name: str
    qualified_name: str
    kind: TypeKind
    modifiers: Tuple[str, ...] = ()
    super_class: Optional[str] = None
    interfaces: Tuple[str, ...] = ()
    type_parameters: Tuple[str, ...] = ()
    annotations: Tuple[str, ...] = ()
    javadoc: Optional[str] = None
    start_line: int = 0
    end_line: int = 0
    fields: Tuple[Field, ...] = ()
    methods: Tuple[Method, ...] = ()          # constructors first, then methods
    nested_types: Tuple["TypeDeclaration", ...] = ()

    @property
    def is_public(self) -> bool:
        return "public" in self.modifiers

    @property
    def is_abstract(self) -> bool:
        return "abstract" in self.modifiers

    @property
    def is_final(self) -> bool:
        return "final" in self.modifiers

    @property
    def constructors(self) -> List[Method]:
        return [m for m in self.methods if m.is_constructor]

    @property
    def non_constructor_methods(self) -> List[Method]:
        return [m for m in self.methods if not m.is_constructor]

    @property
    def public_methods(self) -> List[Method]:
        return [m for m in self.methods if m.is_public]

    @property
    def line_count(self) -> int:
        if self.start_line > 0 and self.end_line > 0:
            return self.end_line - self.start_line + 1
        return 0

    @property
    def signature(self) -> str:
        """e.g. ``public abstract class Repo<T> extends Base implements Closeable``"""
        parts: List[str] = list(self.modifiers)
        name = self.name
        if self.type_parameters:
            name += "<" + ", ".join(self.type_parameters) + ">"
        parts += [self.kind, name]
        sig = " ".join(parts)
        if self.super_class:
            sig += f" extends {self.super_class}"
        if self.interfaces:
            sig += " implements " + ", ".join(self.interfaces)
        return sig

    def walk(self):
        """Yield this declaration and every nested declaration, depth first."""
        yield self
        for nested in self.nested_types:
            yield from nested.walk()


# ---------------------------------------------------------------------------
# History entities
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FileChange:
    path: str                       # new-side path; old-side path for deletes
    change_kind: ChangeKind
    old_path: Optional[str] = None  # only for rename / copy
    lines_added: int = 0
    lines_deleted: int = 0

    @property
    def file_name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def is_java_file(self) -> bool:
        return self.path.endswith(".java")

    @property
    def total_lines_changed(self) -> int:
        return self.lines_added + self.lines_deleted


@dataclass(frozen=True)
class Commit:
    hash: str
    author_name: str = ""
    author_email: str = ""
    author_date: Optional[datetime] = None
    committer_name: str = ""
    committer_email: str = ""
    commit_date: Optional[datetime] = None
    message: str = ""
    parent_hashes: Tuple[str, ...] = ()
    file_changes: Tuple[FileChange, ...] = ()
    diff_error: Optional[str] = None    # set when the diff for this commit failed

    @property
    def short_hash(self) -> Optional[str]:
        # hashes shorter than 7 characters have no short form
        if len(self.hash) < SHORT_HASH_LENGTH:
            return None
        return self.hash[:SHORT_HASH_LENGTH]

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0].strip()

    @property
    def is_merge(self) -> bool:
        return len(self.parent_hashes) > 1

    @property
    def file_count(self) -> int:
        return len(self.file_changes)

    @property
    def total_lines_added(self) -> int:
        return sum(c.lines_added for c in self.file_changes)

    @property
    def total_lines_deleted(self) -> int:
        return sum(c.lines_deleted for c in self.file_changes)

    @property
    def java_file_changes(self) -> List[FileChange]:
        return [c for c in self.file_changes if c.is_java_file]

    @property
    def author_string(self) -> str:
        if self.author_email:
            return f"{self.author_name} <{self.author_email}>"
        return self.author_name

    @property
    def short_date(self) -> str:
        if self.author_date is None:
            return ""
        return f"{self.author_date:%b} {self.author_date.day}, {self.author_date.year}"

    def files_by_kind(self, kind: ChangeKind) -> List[FileChange]:
        return [c for c in self.file_changes if c.change_kind == kind]

    def has_file_change(self, path: str) -> bool:
        return any(c.path == path for c in self.file_changes)

    def with_parent(self, parent_hash: str) -> "Commit":
        return replace(self, parent_hashes=self.parent_hashes + (parent_hash,))

    def one_line(self) -> str:
        """e.g. ``abc123d - Add user auth (John, Dec 18, 2024)``"""
        subject = self.subject or "(no message)"
        if len(subject) > 50:
            subject = subject[:47] + "..."
        first_name = self.author_name.split(" ")[0] if self.author_name else "Unknown"
        return f"{self.short_hash or self.hash} - {subject} ({first_name}, {self.short_date})"


# ---------------------------------------------------------------------------
# Per-file record (filled in step by step: read -> parse)
# ---------------------------------------------------------------------------

@dataclass
class SourceFile:
    path: Path
    relative_path: str = ""
    package_name: str = ""
    content: Optional[str] = None
    line_count: int = 0
    size: int = 0
    last_modified: Optional[datetime] = None
    imports: List[str] = field(default_factory=list)
    types: List[TypeDeclaration] = field(default_factory=list)
    parsed: bool = False
    parse_error: Optional[str] = None
    read_error: Optional[str] = None

    @property
    def file_name(self) -> str:
        return self.path.name

    @property
    def total_method_count(self) -> int:
        return sum(len(t.methods) for top in self.types for t in top.walk())

    @property
    def total_field_count(self) -> int:
        return sum(len(t.fields) for top in self.types for t in top.walk())

    @property
    def summary(self) -> str:
        return f"{self.file_name} ({self.line_count} lines)"
