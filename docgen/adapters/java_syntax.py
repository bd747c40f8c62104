"""
docgen/adapters/java_syntax.py

Parsing boundary for Java sources, built on javalang.

javalang gives us the compilation unit, node start positions and raw
Javadoc text. What it does not give us is kept here, next to the token
stream it is computed from:

  - end lines for type / method declarations (brace matching)
  - field initializer source text (token slicing)
  - a closed classification of type-declaration nodes
  - parsed documentation comments (description + ordered tag list)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from javalang import javadoc as java_doc  # type: ignore
from javalang import parser as java_parser  # type: ignore
from javalang import tokenizer as java_tokenizer  # type: ignore
from javalang import tree as java_tree  # type: ignore

# Canonical Java modifier order (JLS recommendation)
MODIFIER_ORDER = (
    "public", "protected", "private",
    "abstract", "static", "final",
    "transient", "volatile", "synchronized",
    "native", "strictfp", "default",
)


# ---------------------------------------------------------------------------
# Node classification
# ---------------------------------------------------------------------------

class NodeVariant(enum.Enum):
    CLASS_OR_INTERFACE = "class-or-interface"
    ENUM = "enum"
    RECORD = "record"
    ANNOTATION = "annotation"


# javalang node class name -> (variant, is_interface)
# (javalang has no record support; the entry is kept for parsers that do)
_VARIANTS: Dict[str, Tuple[NodeVariant, bool]] = {
    "ClassDeclaration": (NodeVariant.CLASS_OR_INTERFACE, False),
    "InterfaceDeclaration": (NodeVariant.CLASS_OR_INTERFACE, True),
    "EnumDeclaration": (NodeVariant.ENUM, False),
    "RecordDeclaration": (NodeVariant.RECORD, False),
    "AnnotationDeclaration": (NodeVariant.ANNOTATION, False),
}


def is_type_declaration(node: Any) -> bool:
    return type(node).__name__ in _VARIANTS


@dataclass(frozen=True)
class TypeNode:
    """
    View over one type-declaration node.

    Members and directly nested type declarations are split out of the
    declaration body in a single pass, so the extractor never has to search
    the tree for children.
    """
    node: Any
    variant: NodeVariant
    is_interface: bool = False

    @classmethod
    def of(cls, node: Any) -> "TypeNode":
        variant, is_interface = _VARIANTS[type(node).__name__]
        return cls(node=node, variant=variant, is_interface=is_interface)

    @property
    def name(self) -> str:
        return self.node.name

    def body_declarations(self) -> List[Any]:
        body = getattr(self.node, "body", None)
        if body is None:
            return []
        # enum bodies wrap constants + declarations
        if isinstance(body, java_tree.EnumBody):
            body = body.declarations or []
        return [d for d in body if d is not None]

    def members(self) -> Tuple[List[Any], List[Any], List[Any], List["TypeNode"]]:
        """Return (fields, constructors, methods, nested types) in source order."""
        fields: List[Any] = []
        constructors: List[Any] = []
        methods: List[Any] = []
        nested: List[TypeNode] = []
        for decl in self.body_declarations():
            if isinstance(decl, java_tree.FieldDeclaration):
                fields.append(decl)
            elif isinstance(decl, java_tree.ConstructorDeclaration):
                constructors.append(decl)
            elif isinstance(decl, java_tree.MethodDeclaration):
                methods.append(decl)
            elif is_type_declaration(decl):
                nested.append(TypeNode.of(decl))
        return fields, constructors, methods, nested

    def extends(self) -> List[str]:
        if self.variant is not NodeVariant.CLASS_OR_INTERFACE:
            return []
        ext = getattr(self.node, "extends", None)
        if not ext:
            return []
        # classes extend one type, interfaces a list of them
        if isinstance(ext, list):
            return [render_type(e) for e in ext]
        return [render_type(ext)]

    def implements(self) -> List[str]:
        if self.variant is not NodeVariant.CLASS_OR_INTERFACE:
            return []
        return [render_type(i) for i in getattr(self.node, "implements", None) or []]

    def type_parameters(self) -> List[str]:
        if self.variant is not NodeVariant.CLASS_OR_INTERFACE:
            return []
        return [render_type_parameter(tp) for tp in getattr(self.node, "type_parameters", None) or []]


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------

def render_type(t: Any) -> str:
    """
    Render a javalang type node back to its declared form:
      List<Map.Entry<K, V>>, ? extends Number, int[][]
    """
    if t is None:
        return "void"
    text = t.name
    args = getattr(t, "arguments", None)
    if args:
        text += "<" + ", ".join(_render_type_argument(a) for a in args) + ">"
    sub_type = getattr(t, "sub_type", None)
    if sub_type is not None:
        text += "." + render_type(sub_type)
    dims = getattr(t, "dimensions", None) or []
    return text + "[]" * len(dims)


def _render_type_argument(arg: Any) -> str:
    pattern = getattr(arg, "pattern_type", None)
    inner = getattr(arg, "type", None)
    if inner is None:
        return "?"
    if pattern in ("extends", "super"):
        return f"? {pattern} {render_type(inner)}"
    return render_type(inner)


def render_type_parameter(tp: Any) -> str:
    bounds = getattr(tp, "extends", None) or []
    if not bounds:
        return tp.name
    return f"{tp.name} extends " + " & ".join(render_type(b) for b in bounds)


def ordered_modifiers(modifiers: Optional[Iterable[str]]) -> Tuple[str, ...]:
    mods = set(modifiers or ())
    known = [m for m in MODIFIER_ORDER if m in mods]
    return tuple(known + sorted(mods.difference(MODIFIER_ORDER)))


def render_annotations(annotations: Optional[Iterable[Any]]) -> Tuple[str, ...]:
    return tuple(f"@{a.name}" for a in annotations or ())


def start_line(node: Any) -> int:
    pos = getattr(node, "position", None)
    return pos[0] if pos else 0


# ---------------------------------------------------------------------------
# Documentation comments
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DocTag:
    kind: str                  # "param", "return", "throws", "author", ...
    name: Optional[str]        # argument for param / throws / exception
    text: str


@dataclass(frozen=True)
class DocComment:
    description: str
    tags: Tuple[DocTag, ...] = ()

    def tags_of(self, kind: str) -> List[DocTag]:
        return [t for t in self.tags if t.kind == kind]


_NAMED_TAGS = {"param", "throws", "exception"}


def parse_doc_comment(raw: Optional[str]) -> Optional[DocComment]:
    """Parse a raw ``/** ... */`` block; None when absent or malformed."""
    if not raw:
        return None
    try:
        block = java_doc.parse(raw)
    except ValueError:
        return None

    tags: List[DocTag] = []
    for kind, values in (getattr(block, "tags", None) or {}).items():
        for value in values:
            name: Optional[str] = None
            text = value
            if kind in _NAMED_TAGS:
                parts = value.split(None, 1)
                name = parts[0] if parts else ""
                text = parts[1] if len(parts) > 1 else ""
            tags.append(DocTag(kind=kind, name=name, text=text.strip()))
    return DocComment(description=(block.description or "").strip(), tags=tuple(tags))


# ---------------------------------------------------------------------------
# Parsed compilation unit
# ---------------------------------------------------------------------------

class JavaSyntaxTree:
    """
    A parsed compilation unit plus the token stream it came from.
    """

    def __init__(self, code: str, tokens: List[Any], unit: Any) -> None:
        self.code = code
        self.unit = unit
        self._tokens = tokens
        self._index_by_position = {tok.position: i for i, tok in enumerate(tokens)}
        self._closing_line = self._match_braces(tokens)
        self._line_starts = [0]
        for i, ch in enumerate(code):
            if ch == "\n":
                self._line_starts.append(i + 1)

    @property
    def package_name(self) -> Optional[str]:
        return getattr(getattr(self.unit, "package", None), "name", None)

    @property
    def imports(self) -> List[Any]:
        return list(getattr(self.unit, "imports", None) or [])

    def top_level_types(self) -> List[TypeNode]:
        return [TypeNode.of(t) for t in getattr(self.unit, "types", None) or [] if is_type_declaration(t)]

    # ---------------- positions ----------------

    @staticmethod
    def _match_braces(tokens: List[Any]) -> Dict[int, int]:
        """Map the index of every '{' token to the line of its matching '}'."""
        closing: Dict[int, int] = {}
        stack: List[int] = []
        for i, tok in enumerate(tokens):
            if not isinstance(tok, java_tokenizer.Separator):
                continue
            if tok.value == "{":
                stack.append(i)
            elif tok.value == "}" and stack:
                closing[stack.pop()] = tok.position[0]
        return closing

    def end_line(self, node: Any) -> int:
        """
        Last line of a declaration: the line of the '}' closing its body,
        or of the ';' ending a body-less declaration.
        """
        idx = self._index_by_position.get(getattr(node, "position", None))
        if idx is None:
            return 0
        for i in range(idx, len(self._tokens)):
            tok = self._tokens[i]
            if not isinstance(tok, java_tokenizer.Separator):
                continue
            if tok.value == "{":
                return self._closing_line.get(i, tok.position[0])
            if tok.value == ";":
                return tok.position[0]
        return 0

    # ---------------- field initializers ----------------

    def declarator_initializers(self, declaration: Any) -> List[Optional[str]]:
        """
        Source text of each declarator's initializer in a field declaration,
        aligned with ``declaration.declarators`` (None where absent).
        """
        return [init for _, init in self._scan_declarators(declaration)]

    def declarator_lines(self, declaration: Any) -> List[int]:
        """
        Line of each declarator's name, aligned with ``declaration.declarators``.
        Falls back to the declaration's own line where a name is not found.
        """
        line = start_line(declaration)
        return [
            self._tokens[i].position[0] if i is not None else line
            for i, _ in self._scan_declarators(declaration)
        ]

    def _scan_declarators(self, declaration: Any) -> List[Tuple[Optional[int], Optional[str]]]:
        # (name token index, initializer text) per declarator
        names = [d.name for d in declaration.declarators]
        result: List[Tuple[Optional[int], Optional[str]]] = [(None, None)] * len(names)
        i = self._index_by_position.get(getattr(declaration, "position", None))
        if i is None:
            return result

        for n, name in enumerate(names):
            i = self._find_declarator(i, name)
            if i is None:
                break
            result[n] = (i, None)
            j = i + 1
            while j < len(self._tokens) and self._tokens[j].value in ("[", "]"):
                j += 1
            if j >= len(self._tokens) or self._tokens[j].value != "=":
                i = j
                continue
            next_name = names[n + 1] if n + 1 < len(names) else None
            end = self._initializer_end(j + 1, next_name)
            if end is None:
                break
            result[n] = (i, self._text_between(j + 1, end))
            i = end
        return result

    def _is_declarator_at(self, i: int, name: str) -> bool:
        tokens = self._tokens
        if i + 1 >= len(tokens):
            return False
        tok = tokens[i]
        return (
            isinstance(tok, java_tokenizer.Identifier)
            and tok.value == name
            and tokens[i + 1].value in ("=", ",", ";", "[")
        )

    def _find_declarator(self, start: int, name: str) -> Optional[int]:
        for i in range(start, len(self._tokens)):
            if self._is_declarator_at(i, name):
                return i
            if self._tokens[i].value in ("{", "}"):
                return None
        return None

    def _initializer_end(self, start: int, next_name: Optional[str]) -> Optional[int]:
        depth = 0
        for k in range(start, len(self._tokens)):
            value = self._tokens[k].value
            if value in ("(", "[", "{"):
                depth += 1
            elif value in (")", "]", "}"):
                depth -= 1
            elif depth == 0 and value == ";":
                return k
            elif depth == 0 and value == "," and next_name and self._is_declarator_at(k + 1, next_name):
                return k
        return None

    def _offset(self, tok: Any) -> int:
        line, column = tok.position[0], tok.position[1]
        line_start = self._line_starts[line - 1]
        line_end = self._line_starts[line] if line < len(self._line_starts) else len(self.code)
        found = self.code.find(tok.value, line_start + max(column - 2, 0), line_end)
        return found if found >= 0 else line_start + max(column - 1, 0)

    def _text_between(self, first: int, end: int) -> str:
        return self.code[self._offset(self._tokens[first]):self._offset(self._tokens[end])].strip()


def parse_java(code: str) -> JavaSyntaxTree:
    """
    Tokenize and parse one compilation unit.
    Raises ValueError when the source cannot be parsed.
    """
    try:
        tokens = list(java_tokenizer.tokenize(code))
        unit = java_parser.Parser(tokens).parse()
    except java_parser.JavaSyntaxError as e:
        detail = getattr(e, "description", None) or str(e) or "invalid syntax"
        at = getattr(e, "at", None)
        if getattr(at, "position", None):
            detail += f" (line {at.position[0]})"
        raise ValueError(f"Java syntax error: {detail}")
    except Exception as e:
        raise ValueError(f"Failed to parse Java code: {e}")
    return JavaSyntaxTree(code, tokens, unit)


__all__ = [
    "DocComment",
    "DocTag",
    "JavaSyntaxTree",
    "MODIFIER_ORDER",
    "NodeVariant",
    "TypeNode",
    "is_type_declaration",
    "ordered_modifiers",
    "parse_doc_comment",
    "parse_java",
    "render_annotations",
    "render_type",
    "render_type_parameter",
    "start_line",
]
