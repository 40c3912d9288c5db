"""Tree-sitter powered extraction for JavaScript and TypeScript sources."""

from __future__ import annotations

from typing import Dict, List, Optional

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from .base import Extraction
from ..logging import get_logger

logger = get_logger("analyzers.tree_sitter")

_GRAMMARS = {
    "javascript": tree_sitter_javascript.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}

_FUNCTION_VALUES = {"arrow_function", "function_expression", "function", "generator_function"}
_FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}
_CLASS_DECLARATIONS = {"class_declaration", "abstract_class_declaration"}


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


class TreeSitterExtractor:
    """Walks a concrete syntax tree to collect module-level structure.

    Import and export constructs are recognised structurally, so text that
    merely looks like ``require('x')`` inside strings, templates or comments
    is never reported. Returns ``None`` when the grammar reports syntax errors
    so callers can fall back to pattern matching.
    """

    def __init__(self) -> None:
        self._parsers: Dict[str, Parser] = {}

    def extract(self, content: str, language: str, extension: str = "") -> Optional[Extraction]:
        grammar = self._grammar_for(language, extension)
        if grammar is None:
            return None
        source_bytes = content.encode("utf-8")
        tree = self._get_parser(grammar).parse(source_bytes)
        if tree.root_node.has_error:
            logger.debug("Syntax errors reported by %s grammar; falling back", grammar)
            return None
        return _Walker(source_bytes).run(tree.root_node)

    def _get_parser(self, grammar: str) -> Parser:
        parser = self._parsers.get(grammar)
        if parser is None:
            parser = Parser(Language(_GRAMMARS[grammar]()))
            self._parsers[grammar] = parser
        return parser

    @staticmethod
    def _grammar_for(language: str, extension: str) -> Optional[str]:
        if language == "javascript":
            return "javascript"
        if language == "typescript":
            return "tsx" if extension.lower() == ".tsx" else "typescript"
        return None


class _Walker:
    def __init__(self, source_bytes: bytes) -> None:
        self._source = source_bytes
        self._result = Extraction()

    def run(self, root: Node) -> Extraction:
        stack: List[Node] = [root]
        while stack:
            node = stack.pop()
            self._visit(node)
            stack.extend(reversed(node.children))
        return self._result

    def _visit(self, node: Node) -> None:
        kind = node.type
        if kind == "import_statement":
            if not self._has_token(node, "type"):
                self._add_source(node)
        elif kind == "import_require_clause":
            self._add_source(node)
        elif kind == "export_statement":
            self._visit_export(node)
        elif kind == "call_expression":
            self._visit_call(node)
        elif kind == "assignment_expression":
            self._visit_assignment(node)
        elif kind in _FUNCTION_DECLARATIONS:
            self._result.add("functions", self._name_of(node))
        elif kind == "variable_declarator":
            self._add_function_variable(node)
        elif kind in _CLASS_DECLARATIONS:
            self._result.add("classes", self._name_of(node))
        elif kind == "interface_declaration":
            self._result.add("interfaces", self._name_of(node))

    # ------------------------------------------------------------------
    # ES modules

    def _visit_export(self, node: Node) -> None:
        if not self._has_token(node, "type"):
            self._add_source(node)

        if self._has_token(node, "="):
            # TypeScript ``export = value``
            value = node.named_children[-1] if node.named_children else None
            for name in self._export_names_from_value(value):
                self._result.add("exports", name)
            return

        namespace = next((child for child in node.named_children if child.type == "namespace_export"), None)
        if namespace is not None:
            alias = namespace.named_children[-1] if namespace.named_children else None
            self._result.add("exports", self._identifier_name(alias) or "*")
        elif self._has_token(node, "*"):
            self._result.add("exports", "*")

        declaration = node.child_by_field_name("declaration")
        if self._has_token(node, "default"):
            self._result.add("exports", "default")
            target = declaration or node.child_by_field_name("value")
            if target is not None:
                self._collect_declaration(target, export=False)
            return

        if declaration is not None:
            self._collect_declaration(declaration, export=True)

        for child in node.named_children:
            if child.type != "export_clause":
                continue
            for specifier in child.named_children:
                if specifier.type != "export_specifier":
                    continue
                exported = specifier.child_by_field_name("alias") or specifier.child_by_field_name("name")
                self._result.add("exports", self._identifier_name(exported))

    def _collect_declaration(self, node: Node, *, export: bool) -> None:
        kind = node.type
        names: List[str] = []
        if kind in _FUNCTION_DECLARATIONS or kind in _FUNCTION_VALUES:
            name = self._name_of(node)
            self._result.add("functions", name)
            names.append(name or "")
        elif kind in _CLASS_DECLARATIONS or kind == "class":
            name = self._name_of(node)
            self._result.add("classes", name)
            names.append(name or "")
        elif kind in {"lexical_declaration", "variable_declaration"}:
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                names.append(self._identifier_name(declarator.child_by_field_name("name")) or "")
                self._add_function_variable(declarator)
        elif kind == "interface_declaration":
            name = self._name_of(node)
            self._result.add("interfaces", name)
            names.append(name or "")
        elif kind in {"type_alias_declaration", "enum_declaration"}:
            names.append(self._name_of(node) or "")
        if export:
            for name in names:
                self._result.add("exports", name)

    # ------------------------------------------------------------------
    # CommonJS and dynamic imports

    def _visit_call(self, node: Node) -> None:
        callee = node.child_by_field_name("function")
        if callee is None:
            return
        if callee.type == "import" or (
            callee.type == "identifier" and _node_text(callee, self._source) == "require"
        ):
            arguments = node.child_by_field_name("arguments")
            first = arguments.named_children[0] if arguments is not None and arguments.named_children else None
            self._result.add("imports", self._string_value(first))

    def _visit_assignment(self, node: Node) -> None:
        left = node.child_by_field_name("left")
        member_path = self._member_path(left)
        if not member_path:
            return
        if member_path == "module.exports":
            for name in self._export_names_from_value(node.child_by_field_name("right")):
                self._result.add("exports", name)
        elif member_path.startswith("exports."):
            self._result.add("exports", member_path[len("exports."):].split(".")[0])
        elif member_path.startswith("module.exports."):
            self._result.add("exports", member_path[len("module.exports."):].split(".")[0])

    def _member_path(self, node: Optional[Node]) -> Optional[str]:
        if node is None or node.type not in {"member_expression", "subscript_expression"}:
            return None
        target = node.child_by_field_name("object")
        if target is None:
            return None
        if target.type == "identifier":
            object_path: Optional[str] = _node_text(target, self._source)
        else:
            object_path = self._member_path(target)

        if node.type == "member_expression":
            prop = node.child_by_field_name("property")
            property_name = _node_text(prop, self._source) if prop is not None else None
        else:
            index = node.child_by_field_name("index")
            property_name = self._literal_key(index)

        if not object_path or not property_name:
            return None
        return f"{object_path}.{property_name}"

    # ------------------------------------------------------------------
    # Helpers

    def _export_names_from_value(self, node: Optional[Node]) -> List[str]:
        while node is not None and node.type == "parenthesized_expression" and node.named_children:
            node = node.named_children[0]
        if node is None:
            return []
        kind = node.type
        if kind == "identifier":
            return [_node_text(node, self._source)]
        if kind in _FUNCTION_VALUES or kind in _FUNCTION_DECLARATIONS or kind == "class" or kind in _CLASS_DECLARATIONS:
            return [self._name_of(node) or "default"]
        if kind == "object":
            names: List[str] = []
            for prop in node.named_children:
                if prop.type == "pair":
                    name = self._identifier_name(prop.child_by_field_name("key"))
                elif prop.type == "method_definition":
                    name = self._identifier_name(prop.child_by_field_name("name"))
                elif prop.type == "shorthand_property_identifier":
                    name = _node_text(prop, self._source)
                else:
                    name = None
                if name:
                    names.append(name)
            return names or ["default"]
        return ["default"]

    def _add_function_variable(self, declarator: Node) -> None:
        name_node = declarator.child_by_field_name("name")
        value = declarator.child_by_field_name("value")
        if name_node is None or name_node.type != "identifier" or value is None:
            return
        if value.type in _FUNCTION_VALUES:
            self._result.add("functions", _node_text(name_node, self._source))

    def _add_source(self, node: Node) -> None:
        source = node.child_by_field_name("source")
        self._result.add("imports", self._string_value(source))

    def _name_of(self, node: Node) -> Optional[str]:
        name = node.child_by_field_name("name")
        return _node_text(name, self._source) if name is not None else None

    def _identifier_name(self, node: Optional[Node]) -> Optional[str]:
        if node is None:
            return None
        if node.type in {"identifier", "property_identifier", "type_identifier", "number"}:
            return _node_text(node, self._source)
        if node.type == "string":
            return self._string_value(node)
        return None

    def _literal_key(self, node: Optional[Node]) -> Optional[str]:
        if node is None:
            return None
        if node.type == "number":
            return _node_text(node, self._source)
        return self._string_value(node)

    def _string_value(self, node: Optional[Node]) -> Optional[str]:
        if node is None or node.type != "string":
            return None
        text = _node_text(node, self._source)
        return text[1:-1] if len(text) >= 2 else None

    @staticmethod
    def _has_token(node: Node, token: str) -> bool:
        return any(not child.is_named and child.type == token for child in node.children)


__all__ = ["TreeSitterExtractor"]
