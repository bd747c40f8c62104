"""
docgen/adapters/java_adapter.py

Java → documentation model builder.

Parses Java compilation units (through the javalang boundary in
java_syntax) and turns every top-level type declaration into a
TypeDeclaration, recursively including:

  - fields (one per declared variable)
  - constructors and methods, with @param / @return bound by name
  - nested types (qualified name = parent qualified name + "." + name)
  - Javadoc descriptions, annotations, modifiers, start/end lines

Files that fail to parse carry a parse error instead of structure; the
rest of a project keeps going.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from docgen.adapters.java_syntax import (
    DocComment,
    JavaSyntaxTree,
    NodeVariant,
    TypeNode,
    ordered_modifiers,
    parse_doc_comment,
    parse_java,
    render_annotations,
    render_type,
    start_line,
)
from docgen.cir.model import Field, Method, Parameter, SourceFile, TypeDeclaration, TypeKind

logger = logging.getLogger(__name__)


class JavaAdapter:

    language = "java"

    # ---------------- Parsing entry points ----------------

    def parse_to_ast(self, code: str) -> JavaSyntaxTree:
        return parse_java(code)

    def analyze_source(self, code: str, path: Optional[str] = None, package: Optional[str] = None) -> SourceFile:
        """
        Single-compilation-unit helper (for /parse).
        """
        source = SourceFile(
            path=Path(path or "<memory>.java"),
            relative_path=path or "",
            package_name=package or "",
            content=code,
            line_count=len(code.splitlines()),
            size=len(code.encode("utf-8")),
        )
        return self.analyze_file(source)

    def analyze_file(self, source: SourceFile) -> SourceFile:
        if source.read_error:
            return source
        if not source.content:
            source.parse_error = "No content to parse"
            return source

        try:
            tree = self.parse_to_ast(source.content)
        except ValueError as e:
            source.parse_error = f"Parse failed: {e}"
            logger.warning("Failed to parse %s: %s", source.file_name, e)
            return source

        namespace = tree.package_name or source.package_name or ""
        source.package_name = namespace
        source.imports = self.extract_imports(tree)
        source.types = self.extract_types(tree, namespace)
        source.parsed = True
        source.parse_error = None

        logger.info(
            "Parsed %s -> %d type(s), %d method(s)",
            source.file_name, len(source.types), source.total_method_count,
        )
        return source

    def analyze_files(self, sources: List[SourceFile]) -> List[SourceFile]:
        """
        Project-level helper. Unreadable or unparsable files are recorded
        and skipped; the others are still analysed.
        """
        logger.info("Analyzing %d Java file(s)", len(sources))
        ok = 0
        for source in sources:
            self.analyze_file(source)
            if source.parsed:
                ok += 1
        logger.info("Parse complete: %d success, %d errors", ok, len(sources) - ok)
        return sources

    # ---------------- Extraction ----------------

    def extract_imports(self, tree: JavaSyntaxTree) -> List[str]:
        imports: List[str] = []
        for imp in tree.imports:
            path = imp.path
            if getattr(imp, "wildcard", False):
                path += ".*"
            if getattr(imp, "static", False):
                path = "static " + path
            imports.append(path)
        return imports

    def extract_types(self, tree: JavaSyntaxTree, namespace: Optional[str]) -> List[TypeDeclaration]:
        """
        Top-level type declarations of one compilation unit, in source
        order. Nested declarations are embedded in their parents.
        """
        if tree is None:
            raise TypeError("extract_types() requires a parsed syntax tree")
        return [self._extract_type(tree, node, namespace or "") for node in tree.top_level_types()]

    def _extract_type(self, tree: JavaSyntaxTree, type_node: TypeNode, namespace: str) -> TypeDeclaration:
        node = type_node.node
        name = type_node.name
        qualified_name = f"{namespace}.{name}" if namespace else name

        kind: TypeKind
        super_class: Optional[str] = None
        interfaces: List[str] = []
        type_parameters: List[str] = []

        if type_node.variant is NodeVariant.CLASS_OR_INTERFACE:
            kind = "interface" if type_node.is_interface else "class"
            extends = type_node.extends()
            if extends:
                # interfaces may extend several types; the last one is kept
                super_class = extends[-1]
            interfaces = type_node.implements()
            type_parameters = type_node.type_parameters()
        elif type_node.variant is NodeVariant.ENUM:
            kind = "enum"
        elif type_node.variant is NodeVariant.RECORD:
            kind = "record"
        elif type_node.variant is NodeVariant.ANNOTATION:
            kind = "annotation"
        else:
            raise AssertionError(f"unhandled node variant: {type_node.variant}")

        field_decls, ctor_decls, method_decls, nested_nodes = type_node.members()

        fields: List[Field] = []
        for decl in field_decls:
            fields.extend(self._extract_fields(tree, decl))

        methods: List[Method] = [self._extract_method(tree, c, name, is_constructor=True) for c in ctor_decls]
        methods += [self._extract_method(tree, m, name, is_constructor=False) for m in method_decls]

        nested = [self._extract_type(tree, n, qualified_name) for n in nested_nodes]

        doc = parse_doc_comment(getattr(node, "documentation", None))

        return TypeDeclaration(
            name=name,
            qualified_name=qualified_name,
            kind=kind,
            modifiers=ordered_modifiers(node.modifiers),
            super_class=super_class,
            interfaces=tuple(interfaces),
            type_parameters=tuple(type_parameters),
            annotations=render_annotations(node.annotations),
            javadoc=_description(doc),
            start_line=start_line(node),
            end_line=tree.end_line(node),
            fields=tuple(fields),
            methods=tuple(methods),
            nested_types=tuple(nested),
        )

    def _extract_fields(self, tree: JavaSyntaxTree, decl: Any) -> List[Field]:
        """
        A single declaration can declare several variables:
            private int x, y, z;   -> 3 fields
        Type, modifiers and Javadoc are shared; names, initializers and
        lines are not.
        """
        type_name = render_type(decl.type)
        modifiers = ordered_modifiers(decl.modifiers)
        javadoc = _description(parse_doc_comment(getattr(decl, "documentation", None)))
        lines = tree.declarator_lines(decl)
        initializers = tree.declarator_initializers(decl)

        fields: List[Field] = []
        for declarator, init, line in zip(decl.declarators, initializers, lines):
            field_type = type_name + "[]" * len(getattr(declarator, "dimensions", None) or [])
            fields.append(
                Field(
                    name=declarator.name,
                    type_name=field_type,
                    modifiers=modifiers,
                    initial_value=init,
                    javadoc=javadoc,
                    line=line,
                )
            )
        return fields

    def _extract_method(self, tree: JavaSyntaxTree, decl: Any, owner_name: str, is_constructor: bool) -> Method:
        doc = parse_doc_comment(getattr(decl, "documentation", None))
        param_docs = _param_descriptions(doc)

        parameters = []
        for p in decl.parameters or []:
            parameters.append(
                Parameter(
                    name=p.name,
                    type_name=render_type(p.type),
                    is_final="final" in (p.modifiers or ()),
                    is_varargs=bool(getattr(p, "varargs", False)),
                    description=param_docs.get(p.name),
                )
            )

        return Method(
            name=owner_name if is_constructor else decl.name,
            return_type=None if is_constructor else render_type(decl.return_type),
            parameters=tuple(parameters),
            modifiers=ordered_modifiers(decl.modifiers),
            thrown_exceptions=tuple(decl.throws or ()),
            annotations=render_annotations(decl.annotations),
            javadoc=_description(doc),
            return_description=None if is_constructor else _return_description(doc),
            is_constructor=is_constructor,
            start_line=start_line(decl),
            end_line=tree.end_line(decl),
        )


# ---------------- Javadoc helpers ----------------

def _description(doc: Optional[DocComment]) -> Optional[str]:
    if doc is None or not doc.description.strip():
        return None
    return doc.description.strip()


def _param_descriptions(doc: Optional[DocComment]) -> Dict[str, str]:
    """@param name -> text, first tag per name wins."""
    descriptions: Dict[str, str] = {}
    if doc is None:
        return descriptions
    for tag in doc.tags_of("param"):
        if tag.name:
            descriptions.setdefault(tag.name, tag.text)
    return descriptions


def _return_description(doc: Optional[DocComment]) -> Optional[str]:
    if doc is None:
        return None
    returns = doc.tags_of("return")
    return returns[0].text if returns else None
