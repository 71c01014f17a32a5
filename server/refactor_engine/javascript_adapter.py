"""
JavaScript language adapter for tree-sitter.

Besides parsing, the adapter binds names: it walks the tree once and reports
scopes, symbol definitions and identifier references through the binding
hooks consumed by ``scopes.build_scopes``. The TypeScript adapter reuses the
same binder; type-only constructs simply never appear in JavaScript trees.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import tree_sitter

from .ast_utils import declaration_keyword
from .types import LanguageAdapter

logger = logging.getLogger(__name__)


BUILTIN_GLOBALS = frozenset({
    "arguments", "console", "Math", "JSON", "Object", "Array", "String", "Number",
    "Boolean", "Symbol", "BigInt", "Date", "RegExp", "Error", "TypeError",
    "RangeError", "SyntaxError", "ReferenceError", "EvalError", "URIError",
    "AggregateError", "Promise", "Map", "Set", "WeakMap", "WeakSet", "WeakRef",
    "Proxy", "Reflect", "Intl", "Function", "Atomics", "ArrayBuffer",
    "SharedArrayBuffer", "DataView", "Int8Array", "Uint8Array", "Uint8ClampedArray",
    "Int16Array", "Uint16Array", "Int32Array", "Uint32Array", "Float32Array",
    "Float64Array", "BigInt64Array", "BigUint64Array", "parseInt", "parseFloat",
    "isNaN", "isFinite", "NaN", "Infinity", "undefined", "eval", "globalThis",
    "encodeURIComponent", "decodeURIComponent", "encodeURI", "decodeURI",
    "structuredClone", "queueMicrotask", "setTimeout", "clearTimeout",
    "setInterval", "clearInterval", "setImmediate", "clearImmediate", "fetch",
    "URL", "URLSearchParams", "TextEncoder", "TextDecoder", "AbortController",
    "atob", "btoa", "window", "document", "navigator", "location", "history",
    "localStorage", "sessionStorage", "alert", "confirm", "prompt", "crypto",
    "performance", "Event", "EventTarget", "CustomEvent", "HTMLElement", "Element",
    "Node", "Response", "Request", "Headers", "FormData", "Blob", "File",
    "WebSocket", "Worker", "process", "require", "module", "exports", "Buffer",
    "__dirname", "__filename", "global",
})

BUILTIN_TYPES = frozenset({
    "Array", "ReadonlyArray", "Promise", "PromiseLike", "Record", "Partial",
    "Required", "Readonly", "Pick", "Omit", "Exclude", "Extract", "NonNullable",
    "ReturnType", "Parameters", "InstanceType", "ConstructorParameters", "Awaited",
    "Map", "ReadonlyMap", "Set", "ReadonlySet", "WeakMap", "WeakSet", "Date",
    "RegExp", "Error", "Function", "Object", "String", "Number", "Boolean",
    "Symbol", "BigInt", "Iterable", "Iterator", "IterableIterator", "AsyncIterable",
    "AsyncIterator", "AsyncIterableIterator", "Generator", "AsyncGenerator",
    "ArrayLike", "PropertyKey", "Uppercase", "Lowercase", "Capitalize",
    "Uncapitalize", "ThisType", "TemplateStringsArray", "JSX", "HTMLElement",
    "Element", "Node", "Event", "Response", "Request", "Headers", "ArrayBuffer",
    "DataView", "Uint8Array", "Int8Array", "Uint16Array", "Int16Array",
    "Uint32Array", "Int32Array", "Float32Array", "Float64Array", "Console",
})

FUNCTION_LIKE = {"function_expression", "function", "generator_function", "arrow_function"}

SIGNATURE_TYPES = {
    "function_signature", "method_signature", "abstract_method_signature",
    "call_signature", "construct_signature", "function_type", "constructor_type",
}

JSX_TAGS = {"jsx_opening_element", "jsx_self_closing_element"}


def _node_text_to_str(node_text: Any) -> str:
    """Helper to convert tree-sitter node.text to string, handling bytes/str."""
    if node_text is None:
        return ""
    if isinstance(node_text, bytes):
        return node_text.decode('utf-8', errors='ignore')
    return str(node_text)


def _is_strict_program(root) -> bool:
    """Modules and scripts opening with a "use strict" directive."""
    statements = [c for c in root.named_children if c.type not in ('comment', 'hash_bang_line')]
    if any(c.type in ('import_statement', 'export_statement') for c in statements):
        return True
    if statements and statements[0].type == 'expression_statement' and statements[0].named_child_count:
        directive = statements[0].named_children[0]
        if directive.type == 'string':
            return _node_text_to_str(directive.text)[1:-1] == 'use strict'
    return False


class _Binder:
    """Single walk producing scope, definition and reference records."""

    def __init__(self):
        self.scopes: List[Dict[str, Any]] = []
        self.defs: List[Dict[str, Any]] = []
        self.refs: List[Dict[str, Any]] = []
        self.strict = False

    # === Records ===

    def push_scope(self, kind: str, node, parent_id: Optional[int]) -> int:
        scope_id = len(self.scopes)
        self.scopes.append({
            'id': scope_id,
            'kind': kind,
            'start': node.start_byte,
            'end': node.end_byte,
            'parent_id': parent_id,
            'node': node,
        })
        return scope_id

    def hoist_target(self, scope_id: int) -> int:
        """Nearest function or module scope (where ``var`` lands)."""
        while self.scopes[scope_id]['kind'] not in ('function', 'module'):
            scope_id = self.scopes[scope_id]['parent_id']
        return scope_id

    def function_declaration_scope(self, node, scope_id: int) -> int:
        """Scope a function declaration binds its name in.

        Outside strict code a function declared in a block is also visible in
        the enclosing function, so it binds there like ``var`` does.
        """
        if self.strict or self.scopes[scope_id]['kind'] != 'block':
            return scope_id
        parent = node.parent
        while parent is not None:
            if parent.type == 'class_body':
                return scope_id
            parent = parent.parent
        return self.hoist_target(scope_id)

    def bind(self, name_node, scope_id: int, kind: str, declaration, meaning: str = 'value', **meta):
        self.defs.append({
            'name': _node_text_to_str(name_node.text),
            'kind': kind,
            'meaning': meaning,
            'scope_id': scope_id,
            'start': name_node.start_byte,
            'end': name_node.end_byte,
            'declaration': declaration,
            'name_node': name_node,
            'meta': meta,
        })

    def ref(self, node, scope_id: int, meaning: str = 'value'):
        self.refs.append({
            'name': _node_text_to_str(node.text),
            'meaning': meaning,
            'scope_id': scope_id,
            'byte': node.start_byte,
            'node': node,
        })

    # === Walk ===

    def run(self, root) -> "_Binder":
        self.strict = _is_strict_program(root)
        module_scope = self.push_scope('module', root, None)
        for child in root.children:
            self.visit(child, module_scope)
        return self

    def visit_children(self, node, scope_id: int):
        for child in node.children:
            self.visit(child, scope_id)

    def visit(self, node, scope_id: int):
        t = node.type
        if t in ('identifier', 'shorthand_property_identifier', 'shorthand_property_identifier_pattern'):
            self.ref(node, scope_id)
        elif t == 'type_identifier':
            self.ref(node, scope_id, meaning='type')
        elif t in ('function_declaration', 'generator_function_declaration'):
            name = node.child_by_field_name('name')
            if name is not None:
                self.bind(name, self.function_declaration_scope(node, scope_id), 'function', node)
            self.visit_function(node, self.push_scope('function', node, scope_id))
        elif t in FUNCTION_LIKE:
            function_scope = self.push_scope('function', node, scope_id)
            name = node.child_by_field_name('name')
            if name is not None:
                self.bind(name, function_scope, 'function', node)
            self.visit_function(node, function_scope)
        elif t == 'method_definition':
            name = node.child_by_field_name('name')
            if name is not None and name.type == 'computed_property_name':
                self.visit(name, scope_id)
            self.visit_function(node, self.push_scope('function', node, scope_id))
        elif t in SIGNATURE_TYPES:
            self.visit_signature(node, scope_id)
        elif t in ('class_declaration', 'abstract_class_declaration'):
            name = node.child_by_field_name('name')
            if name is not None:
                self.bind(name, scope_id, 'class', node, meaning='both')
            self.visit_class(node, scope_id, bind_name=False)
        elif t == 'class':
            self.visit_class(node, scope_id, bind_name=True)
        elif t in ('lexical_declaration', 'variable_declaration'):
            self.visit_variable_declaration(node, scope_id)
        elif t in ('statement_block', 'switch_body', 'class_static_block'):
            self.visit_children(node, self.push_scope('block', node, scope_id))
        elif t == 'for_statement':
            self.visit_children(node, self.push_scope('for', node, scope_id))
        elif t == 'for_in_statement':
            self.visit_for_in(node, scope_id)
        elif t == 'catch_clause':
            self.visit_catch(node, scope_id)
        elif t == 'import_statement':
            self.visit_import(node, scope_id)
        elif t == 'export_statement' and node.child_by_field_name('source') is not None:
            # re-exports name another module's bindings
            pass
        elif t == 'export_specifier':
            name = node.child_by_field_name('name')
            if name is not None and name.type == 'identifier':
                self.ref(name, scope_id)
        elif t == 'interface_declaration':
            self.visit_type_declaration(node, scope_id, 'interface')
        elif t == 'type_alias_declaration':
            self.visit_type_declaration(node, scope_id, 'type')
        elif t == 'enum_declaration':
            name = node.child_by_field_name('name')
            if name is not None:
                self.bind(name, scope_id, 'enum', node, meaning='both')
        elif t in ('module', 'internal_module'):
            name = node.child_by_field_name('name')
            if name is not None and name.type == 'identifier':
                self.bind(name, scope_id, 'namespace', node)
            body = node.child_by_field_name('body')
            if body is not None:
                self.visit(body, scope_id)
        elif t == 'index_signature':
            for child in node.children:
                if child.type != 'identifier':
                    self.visit(child, scope_id)
        elif t in JSX_TAGS:
            self.visit_jsx_tag(node, scope_id)
        elif t in ('nested_type_identifier', 'nested_identifier', 'jsx_closing_element',
                   'mapped_type_clause', 'infer_type', 'enum_body'):
            pass
        else:
            self.visit_children(node, scope_id)

    def visit_function(self, node, function_scope: int):
        type_parameters = node.child_by_field_name('type_parameters')
        if type_parameters is not None:
            self.bind_type_parameters(type_parameters, function_scope)
        parameters = node.child_by_field_name('parameters')
        if parameters is not None:
            self.bind_parameters(parameters, function_scope)
        parameter = node.child_by_field_name('parameter')
        if parameter is not None:
            self.bind_pattern(parameter, function_scope, 'param', parameter)
        return_type = node.child_by_field_name('return_type')
        if return_type is not None:
            self.visit(return_type, function_scope)
        body = node.child_by_field_name('body')
        if body is None:
            return
        if body.type == 'statement_block':
            # the body block shares the function scope
            self.visit_children(body, function_scope)
        else:
            self.visit(body, function_scope)

    def visit_signature(self, node, scope_id: int):
        if node.type == 'function_signature':
            name = node.child_by_field_name('name')
            if name is not None:
                self.bind(name, scope_id, 'function', node)
        signature_scope = self.push_scope('function', node, scope_id)
        for child in node.children:
            if child.type == 'type_parameters':
                self.bind_type_parameters(child, signature_scope)
            elif child.type == 'formal_parameters':
                self.bind_parameters(child, signature_scope)
            elif child.type in ('type_annotation', 'asserts_annotation', 'type_predicate_annotation') \
                    or child.type.endswith('_type') or child.type == 'type_identifier':
                self.visit(child, signature_scope)

    def bind_type_parameters(self, node, scope_id: int):
        for child in node.named_children:
            if child.type != 'type_parameter':
                continue
            name = child.child_by_field_name('name')
            if name is not None:
                self.bind(name, scope_id, 'type_param', child, meaning='type')
            for part in child.named_children:
                if name is None or part.start_byte != name.start_byte:
                    self.visit(part, scope_id)

    def bind_parameters(self, node, function_scope: int):
        for child in node.named_children:
            if child.type in ('required_parameter', 'optional_parameter'):
                pattern = child.child_by_field_name('pattern')
                if pattern is not None and pattern.type != 'this':
                    self.bind_pattern(pattern, function_scope, 'param', child)
                for field_name in ('type', 'value'):
                    part = child.child_by_field_name(field_name)
                    if part is not None:
                        self.visit(part, function_scope)
                for part in child.named_children:
                    if part.type == 'decorator':
                        self.visit(part, function_scope)
            elif child.type == 'comment':
                continue
            else:
                self.bind_pattern(child, function_scope, 'param', child)

    def bind_pattern(self, pattern, target_scope: int, kind: str, declaration, visit_scope: Optional[int] = None):
        """Bind every name introduced by a (possibly destructuring) pattern."""
        if visit_scope is None:
            visit_scope = target_scope
        t = pattern.type
        if t in ('identifier', 'shorthand_property_identifier_pattern'):
            self.bind(pattern, target_scope, kind, declaration)
        elif t in ('object_pattern', 'array_pattern'):
            for child in pattern.named_children:
                self.bind_pattern(child, target_scope, kind, declaration, visit_scope)
        elif t == 'pair_pattern':
            key = pattern.child_by_field_name('key')
            if key is not None and key.type == 'computed_property_name':
                self.visit(key, visit_scope)
            value = pattern.child_by_field_name('value')
            if value is not None:
                self.bind_pattern(value, target_scope, kind, declaration, visit_scope)
        elif t in ('assignment_pattern', 'object_assignment_pattern'):
            left = pattern.child_by_field_name('left')
            right = pattern.child_by_field_name('right')
            if left is not None:
                self.bind_pattern(left, target_scope, kind, declaration, visit_scope)
            if right is not None:
                self.visit(right, visit_scope)
        elif t == 'rest_pattern':
            for child in pattern.named_children:
                self.bind_pattern(child, target_scope, kind, declaration, visit_scope)
        elif t == 'comment':
            return
        else:
            self.visit(pattern, visit_scope)

    def visit_variable_declaration(self, node, scope_id: int):
        keyword = declaration_keyword(node) or 'var'
        target = self.hoist_target(scope_id) if keyword == 'var' else scope_id
        for declarator in node.named_children:
            if declarator.type != 'variable_declarator':
                self.visit(declarator, scope_id)
                continue
            name = declarator.child_by_field_name('name')
            if name is not None:
                self.bind_pattern(name, target, keyword, declarator, visit_scope=scope_id)
            for field_name in ('type', 'value'):
                part = declarator.child_by_field_name(field_name)
                if part is not None:
                    self.visit(part, scope_id)

    def visit_for_in(self, node, scope_id: int):
        for_scope = self.push_scope('for', node, scope_id)
        kind = node.child_by_field_name('kind')
        left = node.child_by_field_name('left')
        for child in node.children:
            if left is not None and child.start_byte == left.start_byte and child.type == left.type:
                if kind is not None:
                    keyword = kind.type
                    target = self.hoist_target(for_scope) if keyword == 'var' else for_scope
                    self.bind_pattern(left, target, keyword, node, visit_scope=for_scope)
                else:
                    self.visit(left, for_scope)
            elif kind is None or child.start_byte != kind.start_byte:
                self.visit(child, for_scope)

    def visit_catch(self, node, scope_id: int):
        catch_scope = self.push_scope('catch', node, scope_id)
        parameter = node.child_by_field_name('parameter')
        if parameter is not None:
            self.bind_pattern(parameter, catch_scope, 'catch', node)
        for child in node.children:
            if child.type == 'type_annotation':
                self.visit(child, catch_scope)
        body = node.child_by_field_name('body')
        if body is not None:
            self.visit_children(body, catch_scope)

    def visit_class(self, node, scope_id: int, bind_name: bool):
        class_scope = self.push_scope('class', node, scope_id)
        name = node.child_by_field_name('name')
        if bind_name and name is not None:
            self.bind(name, class_scope, 'class', node, meaning='both')
        for child in node.children:
            if name is not None and child.start_byte == name.start_byte and child.type == name.type:
                continue
            if child.type == 'type_parameters':
                self.bind_type_parameters(child, class_scope)
            elif child.type == 'class_heritage':
                self.visit(child, scope_id)
            elif child.type == 'class_body':
                self.visit_children(child, class_scope)
            else:
                self.visit(child, class_scope)

    def visit_import(self, node, scope_id: int):
        for child in node.named_children:
            if child.type != 'import_clause':
                continue
            for part in child.named_children:
                if part.type == 'identifier':
                    self.bind(part, scope_id, 'import', node, meaning='both')
                elif part.type == 'namespace_import':
                    for ident in part.named_children:
                        if ident.type == 'identifier':
                            self.bind(ident, scope_id, 'import', node, meaning='both')
                elif part.type == 'named_imports':
                    for specifier in part.named_children:
                        if specifier.type != 'import_specifier':
                            continue
                        local = specifier.child_by_field_name('alias')
                        if local is None:
                            local = specifier.child_by_field_name('name')
                        if local is not None and local.type == 'identifier':
                            self.bind(local, scope_id, 'import', specifier, meaning='both')

    def visit_type_declaration(self, node, scope_id: int, kind: str):
        name = node.child_by_field_name('name')
        if name is not None:
            self.bind(name, scope_id, kind, node, meaning='type')
        type_scope = self.push_scope('block', node, scope_id)
        for child in node.children:
            if name is not None and child.start_byte == name.start_byte and child.type == name.type:
                continue
            if child.type == 'type_parameters':
                self.bind_type_parameters(child, type_scope)
            else:
                self.visit(child, type_scope)

    def visit_jsx_tag(self, node, scope_id: int):
        name = node.child_by_field_name('name')
        for child in node.named_children:
            if name is not None and child.start_byte == name.start_byte and child.type == name.type:
                if child.type == 'identifier' and _node_text_to_str(child.text)[:1].isupper():
                    self.ref(child, scope_id)
                elif child.type == 'member_expression':
                    self.visit(child, scope_id)
            elif child.type == 'jsx_attribute':
                for part in child.named_children:
                    if part.type != 'property_identifier':
                        self.visit(part, scope_id)
            else:
                self.visit(child, scope_id)


class JavaScriptAdapter(LanguageAdapter):
    """Tree-sitter adapter for JavaScript language."""

    builtin_globals = BUILTIN_GLOBALS
    builtin_types = BUILTIN_TYPES

    def __init__(self):
        """Initialize JavaScript adapter; the parser is created lazily."""
        self._parser = None
        self._bound: Optional[Tuple[Any, _Binder]] = None

    @property
    def language_id(self) -> str:
        """Return the language identifier."""
        return "javascript"

    @property
    def file_extensions(self) -> Tuple[str, ...]:
        """Return supported file extensions."""
        return (".js", ".jsx", ".mjs", ".cjs")

    @property
    def reports_type_names(self) -> bool:
        return False

    def _get_parser(self, file_path: Optional[str] = None):
        """Get or create the tree-sitter parser."""
        if self._parser is None:
            try:
                from tree_sitter_javascript import language

                javascript_language = tree_sitter.Language(language())
                self._parser = tree_sitter.Parser()
                self._parser.language = javascript_language
                logger.debug("JavaScript parser initialized")
            except ImportError as e:
                logger.warning(f"tree-sitter-javascript not available: {e}")
                self._parser = None

        return self._parser

    def parse(self, text: str, file_path: Optional[str] = None) -> Any:
        """Parse text and return a Tree-sitter tree."""
        parser = self._get_parser(file_path)
        if parser is None:
            return None
        text_bytes = text if isinstance(text, bytes) else text.encode('utf-8')
        return parser.parse(text_bytes)

    def node_text(self, text: str, start_byte: int, end_byte: int) -> str:
        """Extract text between byte offsets."""
        try:
            text_bytes = text if isinstance(text, bytes) else text.encode('utf-8')
            return text_bytes[start_byte:end_byte].decode('utf-8')
        except (UnicodeDecodeError, IndexError):
            return ""

    def byte_to_linecol(self, text: str, byte: int) -> Tuple[int, int]:
        """Convert byte offset to (line, column) 1-based."""
        text_bytes = text.encode('utf-8')
        byte = max(0, min(byte, len(text_bytes)))
        lines = text_bytes[:byte].decode('utf-8', errors='ignore').split('\n')
        return (len(lines), len(lines[-1]) + 1)

    def line_col_to_byte(self, text: str, line: int, col: int) -> int:
        """Convert (line, column) 1-based to byte offset."""
        lines = text.split('\n')
        if line > len(lines):
            return len(text.encode('utf-8'))
        byte_offset = sum(len(lines[i].encode('utf-8')) + 1 for i in range(max(0, line - 1)))
        line_text = lines[max(0, line - 1)]
        col_offset = max(0, min(col - 1, len(line_text)))
        return byte_offset + len(line_text[:col_offset].encode('utf-8'))

    # === Binding hooks ===

    def _bind(self, tree) -> _Binder:
        bound = self._bound
        if bound is None or bound[0] is not tree:
            bound = (tree, _Binder().run(tree.root_node))
            self._bound = bound
        return bound[1]

    def iter_scope_nodes(self, tree) -> List[Dict[str, Any]]:
        """Scope records: id, kind, start, end, parent_id, node."""
        if tree is None:
            return []
        return list(self._bind(tree).scopes)

    def iter_symbol_defs(self, tree) -> List[Dict[str, Any]]:
        """Binding records: name, kind, meaning, scope_id, declaration, name_node."""
        if tree is None:
            return []
        return list(self._bind(tree).defs)

    def iter_identifier_refs(self, tree) -> List[Dict[str, Any]]:
        """Reference records: name, meaning, scope_id, node."""
        if tree is None:
            return []
        return list(self._bind(tree).refs)


# Default adapter instance
default_javascript_adapter = JavaScriptAdapter()
