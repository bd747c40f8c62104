import networkx as nx # type: ignore
from typing import Any, Dict, List

from docgen.cir.model import Commit, SourceFile, TypeDeclaration


def file_id(source: SourceFile) -> str:
    return f"file:{source.relative_path or source.path.as_posix()}"


def type_id(decl: TypeDeclaration) -> str:
    return f"type:{decl.qualified_name}"


def commit_id(commit_hash: str) -> str:
    return f"commit:{commit_hash}"


class AnalysisGraph:
    """
    Project graph over files, their declared types and the commits that
    touched them.
    Nodes: File, TypeDecl, Commit
    Edges: DECLARES (file -> type), NESTS (type -> nested type),
           TOUCHED_BY (file -> commit), PARENT (commit -> parent commit)
    """
    def __init__(self) -> None:
        self.g = nx.MultiDiGraph()

    # ---------------- building ----------------

    def add_commit(self, commit: Commit) -> str:
        node_id = commit_id(commit.hash)
        self.g.add_node(node_id, kind="Commit", payload={
            "hash": commit.hash,
            "short_hash": commit.short_hash,
            "author": commit.author_name,
            "subject": commit.subject,
            "is_merge": commit.is_merge,
            "files_changed": len(commit.file_changes),
        })
        return node_id

    def link_parents(self, commit: Commit) -> None:
        # parents outside the walked history get no edge
        src = commit_id(commit.hash)
        for parent in commit.parent_hashes:
            dst = commit_id(parent)
            if dst in self.g:
                self.g.add_edge(src, dst, etype="PARENT")

    def add_source_file(self, source: SourceFile) -> str:
        node_id = file_id(source)
        self.g.add_node(node_id, kind="File", payload={
            "path": source.relative_path,
            "package": source.package_name,
            "parsed": source.parsed,
            "parse_error": source.parse_error or source.read_error,
        })
        for decl in source.types:
            self._add_type(decl, node_id, "DECLARES")
        return node_id

    def _add_type(self, decl: TypeDeclaration, parent_id: str, etype: str) -> None:
        node_id = type_id(decl)
        self.g.add_node(node_id, kind="TypeDecl", payload={
            "name": decl.name,
            "qualified_name": decl.qualified_name,
            "kind": decl.kind,
            "methods": len(decl.methods),
            "fields": len(decl.fields),
            "start_line": decl.start_line,
            "end_line": decl.end_line,
        })
        self.g.add_edge(parent_id, node_id, etype=etype)
        for nested in decl.nested_types:
            self._add_type(nested, node_id, "NESTS")

    def link_history(self, source_id: str, commit: Commit) -> None:
        self.g.add_edge(source_id, commit_id(commit.hash), etype="TOUCHED_BY")

    # ---------------- queries ----------------

    def nodes_of_kind(self, kind: str) -> List[str]:
        return [n for n, data in self.g.nodes(data=True) if data.get("kind") == kind]

    def successors(self, node_id: str, etype: str) -> List[str]:
        return [dst for _, dst, data in self.g.out_edges(node_id, data=True) if data.get("etype") == etype]

    def history_of(self, source_id: str) -> List[str]:
        """Commits that touched a file, in history order (newest first)."""
        return self.successors(source_id, "TOUCHED_BY")

    def types_in(self, source_id: str) -> List[str]:
        """Every type declared in a file, nested ones included, depth first."""
        found: List[str] = []
        stack = list(reversed(self.successors(source_id, "DECLARES")))
        while stack:
            node_id = stack.pop()
            found.append(node_id)
            stack.extend(reversed(self.successors(node_id, "NESTS")))
        return found

    def ancestors_of(self, commit_hash: str) -> List[str]:
        """Commits reachable over PARENT edges, nearest first."""
        start = commit_id(commit_hash)
        if start not in self.g:
            return []
        parents = nx.subgraph_view(self.g, filter_edge=lambda u, v, k: self.g.edges[u, v, k].get("etype") == "PARENT")
        lengths = nx.single_source_shortest_path_length(parents, start)
        return [n for n, _ in sorted(lengths.items(), key=lambda item: item[1]) if n != start]

    def to_debug_json(self) -> Dict[str, Any]:
        """
        Plain-dict view of the graph for API responses.
        """
        nodes = []
        for node_id, data in self.g.nodes(data=True):
            payload = data.get("payload")
            nodes.append({
                "id": node_id,
                "kind": data.get("kind"),
                "attrs": dict(payload) if isinstance(payload, dict) else {},
            })

        edges = []
        for src, dst, data in self.g.edges(data=True):
            edges.append({
                "src": src,
                "dst": dst,
                "type": data.get("etype"),
            })

        return {"nodes": nodes, "edges": edges}
