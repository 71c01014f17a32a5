"""
Scopes and name resolution for the refactoring engine.

``build_scopes`` turns the adapter's binding records into a ``ScopeGraph``;
``ScopeChecker`` answers the resolver queries refactors and code fixes depend
on (symbol of a node, visible symbols, declaration of a symbol) plus the light
type and property lookups the code fixes need. Symbols compare by identity.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .ast_utils import CLASS_TYPES, FUNCTION_TYPES, NodeKey, find_ancestor, iter_nodes, node_key
from .diagnostic_messages import Diagnostics, format_message
from .spelling import get_spelling_suggestion
from .types import Diagnostic, LanguageAdapter

MEANINGS = ("value", "type")


@dataclass(frozen=True, eq=False)
class Symbol:
    """A symbol represents a name binding in a scope."""
    name: str
    kind: str            # "var"|"let"|"const"|"function"|"class"|"param"|"import"|"catch"|"interface"|"type"|...
    meaning: str         # "value"|"type"|"both"
    scope_id: int
    start_byte: int
    end_byte: int
    declaration: Any = field(default=None, repr=False)
    name_node: Any = field(default=None, repr=False)
    meta: dict = field(default_factory=dict, repr=False)


@dataclass(frozen=True)
class Ref:
    """A reference represents a use of a name in a scope."""
    name: str
    meaning: str
    scope_id: int
    byte: int
    node: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class Scope:
    """A scope represents a namespace boundary."""
    id: int
    kind: str           # "module"|"function"|"class"|"block"|"for"|"catch"
    parent_id: Optional[int]
    start_byte: int = 0
    end_byte: int = 0
    node: Any = field(default=None, repr=False, compare=False)


class ScopeGraph:
    """Graph of scopes, symbols, and references for a file."""

    def __init__(self, scopes: List[Scope], symbols: List[Symbol], refs: List[Ref],
                 bindings: Dict[NodeKey, Symbol], declarations: Dict[Symbol, List[Any]]):
        self._scopes = {s.id: s for s in scopes}
        self._symbols = symbols
        self._refs = refs
        self._bindings = bindings
        self._declarations = declarations

        # Build indexes for fast lookup
        self._table: Dict[int, Dict[str, Dict[str, Symbol]]] = {}
        self._refs_by_node: Dict[NodeKey, Ref] = {}
        self._children_by_scope: Dict[int, List[int]] = {}

        for symbol in symbols:
            table = self._table.setdefault(symbol.scope_id, {"value": {}, "type": {}})
            for meaning in _slots(symbol.meaning):
                table[meaning].setdefault(symbol.name, symbol)

        for ref in refs:
            if ref.node is not None:
                self._refs_by_node[node_key(ref.node)] = ref

        for scope in scopes:
            if scope.parent_id is not None:
                self._children_by_scope.setdefault(scope.parent_id, []).append(scope.id)

    def get_scope(self, scope_id: int) -> Optional[Scope]:
        """Get scope by ID."""
        return self._scopes.get(scope_id)

    def iter_symbols(self, kind: str = None) -> Iterable[Symbol]:
        """Iterate over all symbols, optionally filtered by kind."""
        for symbol in self._symbols:
            if kind is None or symbol.kind == kind:
                yield symbol

    def iter_refs(self) -> Iterable[Ref]:
        """Iterate over all references."""
        return iter(self._refs)

    def symbols_in_scope(self, scope_id: int, meaning: str = "value") -> Dict[str, Symbol]:
        """Symbols defined directly in a scope, by name."""
        return self._table.get(scope_id, {}).get(meaning, {})

    def resolve_visible(self, scope_id: int, name: str, meaning: str = "value") -> Optional[Symbol]:
        """
        Resolve a name to the visible symbol in scope hierarchy.

        Searches from the given scope upward through parent scopes to find
        the first matching symbol definition.
        """
        current_scope_id = scope_id
        while current_scope_id is not None:
            symbol = self.symbols_in_scope(current_scope_id, meaning).get(name)
            if symbol is not None:
                return symbol
            scope = self.get_scope(current_scope_id)
            current_scope_id = scope.parent_id if scope else None
        return None

    def scope_chain(self, scope_id: int) -> List[int]:
        chain = []
        current = scope_id
        while current is not None:
            chain.append(current)
            scope = self.get_scope(current)
            current = scope.parent_id if scope else None
        return chain

    def scope_at(self, node) -> int:
        """Innermost scope whose range contains ``node``."""
        best = 0
        best_size = None
        for scope in self._scopes.values():
            if scope.start_byte <= node.start_byte and node.end_byte <= scope.end_byte:
                size = scope.end_byte - scope.start_byte
                if best_size is None or size < best_size or (size == best_size and scope.id > best):
                    best, best_size = scope.id, size
        return best

    def children_of(self, scope_id: int) -> List[int]:
        """Get direct child scope IDs of a scope."""
        return self._children_by_scope.get(scope_id, [])

    def binding_for(self, node) -> Optional[Symbol]:
        """Symbol bound by ``node`` when it is a declaration name."""
        return self._bindings.get(node_key(node))

    def ref_for(self, node) -> Optional[Ref]:
        return self._refs_by_node.get(node_key(node))

    def declarations_of(self, symbol: Symbol) -> List[Any]:
        return self._declarations.get(symbol, [])

    def refs_to(self, symbol: Symbol) -> List[Ref]:
        """Get all references resolving to a symbol, in source order."""
        refs = []
        for ref in self._refs:
            if ref.name != symbol.name:
                continue
            for meaning in _slots(ref.meaning):
                if self.resolve_visible(ref.scope_id, ref.name, meaning) is symbol:
                    refs.append(ref)
                    break
        return refs

    def get_stats(self) -> Dict[str, int]:
        """Get statistics about the scope graph."""
        return {
            "scopes": len(self._scopes),
            "symbols": len(self._symbols),
            "refs": len(self._refs),
            "imports": len([s for s in self._symbols if s.kind == "import"])
        }


def _slots(meaning: str) -> Tuple[str, ...]:
    return MEANINGS if meaning == "both" else (meaning,)


def build_scopes(adapter: LanguageAdapter, tree, text: str) -> ScopeGraph:
    """
    Build a scope graph for a file using the language adapter.

    Repeated declarations of one name in one scope (``var x; var x;``,
    overload signatures) share a single symbol.

    Args:
        adapter: Language adapter with binding hooks
        tree: Parsed tree from tree-sitter
        text: Source text

    Returns:
        ScopeGraph containing scopes, symbols, and references
    """
    scopes = [
        Scope(
            id=scope_dict["id"],
            kind=scope_dict["kind"],
            parent_id=scope_dict.get("parent_id"),
            start_byte=scope_dict.get("start", 0),
            end_byte=scope_dict.get("end", 0),
            node=scope_dict.get("node"),
        )
        for scope_dict in adapter.iter_scope_nodes(tree)
    ]

    symbols: List[Symbol] = []
    bindings: Dict[NodeKey, Symbol] = {}
    declarations: Dict[Symbol, List[Any]] = {}
    existing: Dict[Tuple[int, str, str], Symbol] = {}

    for symbol_dict in adapter.iter_symbol_defs(tree):
        scope_id = symbol_dict.get("scope_id", 0)
        name = symbol_dict["name"]
        meaning = symbol_dict.get("meaning", "value")
        symbol = None
        for slot in _slots(meaning):
            symbol = symbol or existing.get((scope_id, name, slot))
        if symbol is None:
            symbol = Symbol(
                name=name,
                kind=symbol_dict["kind"],
                meaning=meaning,
                scope_id=scope_id,
                start_byte=symbol_dict["start"],
                end_byte=symbol_dict["end"],
                declaration=symbol_dict.get("declaration"),
                name_node=symbol_dict.get("name_node"),
                meta=symbol_dict.get("meta", {}),
            )
            symbols.append(symbol)
            for slot in _slots(meaning):
                existing[(scope_id, name, slot)] = symbol
        declarations.setdefault(symbol, []).append(symbol_dict.get("declaration"))
        if symbol_dict.get("name_node") is not None:
            bindings[node_key(symbol_dict["name_node"])] = symbol

    refs = [
        Ref(
            name=ref_dict["name"],
            meaning=ref_dict.get("meaning", "value"),
            scope_id=ref_dict.get("scope_id", 0),
            byte=ref_dict["byte"],
            node=ref_dict.get("node"),
        )
        for ref_dict in adapter.iter_identifier_refs(tree)
    ]

    return ScopeGraph(scopes, symbols, refs, bindings, declarations)


# === Object literal and type member helpers ===

def property_name_text(name_node, source: bytes) -> Optional[str]:
    """Static name of a property key, or None for computed keys."""
    if name_node is None:
        return None
    text = source[name_node.start_byte:name_node.end_byte].decode("utf-8")
    if name_node.type in ("property_identifier", "shorthand_property_identifier",
                          "private_property_identifier", "identifier", "number"):
        return text
    if name_node.type == "string":
        return text[1:-1]
    return None


def object_literal_keys(obj, source: bytes) -> Optional[List[str]]:
    """Static member names of an object literal; None if a spread or computed key hides some."""
    keys: List[str] = []
    for member in obj.named_children:
        if member.type == "pair":
            name = property_name_text(member.child_by_field_name("key"), source)
        elif member.type == "shorthand_property_identifier":
            name = property_name_text(member, source)
        elif member.type == "method_definition":
            name = property_name_text(member.child_by_field_name("name"), source)
        elif member.type == "comment":
            continue
        else:
            return None
        if name is None:
            return None
        keys.append(name)
    return keys


def is_optional_member(member) -> bool:
    return any(child.type == "?" for child in member.children)


def is_private_member(member) -> bool:
    return any(child.type == "accessibility_modifier" and child.text == b"private" for child in member.children)


TYPE_MEMBER_TYPES = {
    "property_signature", "method_signature", "public_field_definition",
    "method_definition", "abstract_method_signature",
}


class ScopeChecker:
    """Resolver over a ``ScopeGraph`` for one parsed file."""

    def __init__(self, graph: ScopeGraph, tree, source: bytes, file_path: str,
                 adapter: LanguageAdapter, extra_globals: Sequence[str] = ()):
        self.graph = graph
        self.tree = tree
        self.source = source
        self.file_path = file_path
        self.adapter = adapter
        self.globals = frozenset(getattr(adapter, "builtin_globals", frozenset())) | frozenset(extra_globals)
        self.global_types = frozenset(getattr(adapter, "builtin_types", frozenset()))

    def _text(self, node) -> str:
        return self.source[node.start_byte:node.end_byte].decode("utf-8")

    # === Resolver queries ===

    def symbol_of(self, node) -> Optional[Symbol]:
        """Symbol a name node binds or refers to; None for properties, labels and globals."""
        if node is None:
            return None
        symbol = self.graph.binding_for(node)
        if symbol is not None:
            return symbol
        ref = self.graph.ref_for(node)
        if ref is None:
            return None
        return self.graph.resolve_visible(ref.scope_id, ref.name, ref.meaning)

    def visible_symbols(self, node) -> Set[Symbol]:
        """Closest symbol per name (either meaning) along the scope chain at ``node``."""
        seen: Dict[Tuple[str, str], Symbol] = {}
        for scope_id in self.graph.scope_chain(self.graph.scope_at(node)):
            for meaning in MEANINGS:
                for name, symbol in self.graph.symbols_in_scope(scope_id, meaning).items():
                    seen.setdefault((name, meaning), symbol)
        return set(seen.values())

    def visible_names(self, node) -> Set[str]:
        return {symbol.name for symbol in self.visible_symbols(node)}

    def declaration_of(self, symbol: Symbol) -> Optional[Any]:
        return symbol.declaration if symbol is not None else None

    def declarations_of(self, symbol: Symbol) -> List[Any]:
        return self.graph.declarations_of(symbol)

    def scope_node_of(self, symbol: Symbol) -> Optional[Any]:
        """Node whose scope holds ``symbol``."""
        scope = self.graph.get_scope(symbol.scope_id)
        return scope.node if scope else None

    def is_declaration_name(self, node) -> bool:
        return self.graph.binding_for(node) is not None

    def references_to(self, symbol: Symbol) -> List[Any]:
        return [ref.node for ref in self.graph.refs_to(symbol)]

    def is_global_name(self, name: str) -> bool:
        return name in self.globals

    def resolve_name(self, name: str, node, meaning: str = "value") -> Optional[Symbol]:
        """What ``name`` would denote if written at ``node``."""
        return self.graph.resolve_visible(self.graph.scope_at(node), name, meaning)

    # === Types and properties ===

    def resolve_type(self, type_node, depth: int = 0):
        """Follow annotations, parentheses and local aliases to a type node or declaration."""
        if type_node is None or depth > 32:
            return type_node
        t = type_node.type
        if t in ("type_annotation", "parenthesized_type"):
            inner = type_node.named_children[0] if type_node.named_child_count else None
            return self.resolve_type(inner, depth + 1)
        if t == "generic_type":
            return self.resolve_type(type_node.child_by_field_name("name"), depth + 1)
        if t == "type_identifier":
            symbol = self.symbol_of(type_node)
            declaration = self.declaration_of(symbol)
            if declaration is None:
                return type_node
            if declaration.type == "type_alias_declaration":
                return self.resolve_type(declaration.child_by_field_name("value"), depth + 1)
            return declaration
        return type_node

    def get_properties_of_type(self, type_node, depth: int = 0) -> Optional[List[Any]]:
        """Member nodes of an interface or object type; None when unknown."""
        resolved = self.resolve_type(type_node)
        if resolved is None or depth > 32:
            return None
        if resolved.type == "object_type":
            return [m for m in resolved.named_children if m.type in TYPE_MEMBER_TYPES]
        if resolved.type != "interface_declaration":
            return None
        members: List[Any] = []
        for child in resolved.named_children:
            if child.type == "extends_type_clause":
                for base in child.named_children:
                    inherited = self.get_properties_of_type(base, depth + 1)
                    if inherited is None:
                        return None
                    members.extend(inherited)
        body = resolved.child_by_field_name("body")
        if body is not None:
            members.extend(m for m in body.named_children if m.type in TYPE_MEMBER_TYPES)
        return members

    def member_name(self, member) -> Optional[str]:
        return property_name_text(member.child_by_field_name("name"), self.source)

    def _class_members(self, class_node) -> Optional[List[str]]:
        if any(child.type == "class_heritage" for child in class_node.children):
            return None
        names: List[str] = []
        body = class_node.child_by_field_name("body")
        if body is None:
            return names
        for member in body.named_children:
            name_node = member.child_by_field_name("name")
            if name_node is None:
                name_node = member.child_by_field_name("property")
            name = property_name_text(name_node, self.source)
            if name is not None:
                names.append(name)
            if member.type == "method_definition" and name == "constructor":
                parameters = member.child_by_field_name("parameters")
                for parameter in parameters.named_children if parameters is not None else []:
                    if any(c.type in ("accessibility_modifier", "readonly") for c in parameter.children):
                        pattern = parameter.child_by_field_name("pattern")
                        if pattern is not None:
                            names.append(self._text(pattern))
        for node in iter_nodes(body, named_only=True):
            if node.type == "assignment_expression":
                left = node.child_by_field_name("left")
                if left is not None and left.type == "member_expression":
                    obj = left.child_by_field_name("object")
                    prop = left.child_by_field_name("property")
                    if obj is not None and obj.type == "this" and prop is not None:
                        names.append(self._text(prop))
        return names

    def _assigned_properties(self, symbol: Symbol) -> List[str]:
        names = []
        for ref_node in self.references_to(symbol):
            member = ref_node.parent
            if member is None or member.type != "member_expression":
                continue
            assignment = member.parent
            if assignment is not None and assignment.type == "assignment_expression" \
                    and node_key(assignment.child_by_field_name("left")) == node_key(member):
                prop = member.child_by_field_name("property")
                if prop is not None:
                    names.append(self._text(prop))
        return names

    def properties_of(self, expression) -> Optional[Tuple[str, List[str]]]:
        """(type name, member names) of an expression whose shape is known locally."""
        if expression is None:
            return None
        if expression.type == "this":
            current = expression.parent
            while current is not None:
                if current.type in CLASS_TYPES:
                    names = self._class_members(current)
                    if names is None:
                        return None
                    name = current.child_by_field_name("name")
                    return (self._text(name) if name is not None else "this", names)
                if current.type in FUNCTION_TYPES and current.type not in ("arrow_function", "method_definition"):
                    return None
                current = current.parent
            return None
        if expression.type != "identifier":
            return None
        symbol = self.symbol_of(expression)
        declaration = self.declaration_of(symbol)
        if declaration is None or declaration.type != "variable_declarator":
            return None
        name_node = declaration.child_by_field_name("name")
        if name_node is None or node_key(name_node) != node_key(symbol.name_node):
            return None
        type_annotation = declaration.child_by_field_name("type")
        if type_annotation is not None:
            members = self.get_properties_of_type(type_annotation)
            if members is None:
                return None
            resolved = self.resolve_type(type_annotation)
            type_name = self._text(type_annotation.named_children[0]) if type_annotation.named_child_count else \
                self._text(resolved)
            return (type_name, [n for n in (self.member_name(m) for m in members) if n is not None])
        value = declaration.child_by_field_name("value")
        if value is None or value.type != "object":
            return None
        keys = object_literal_keys(value, self.source)
        if keys is None:
            return None
        return (f"typeof {symbol.name}", keys + self._assigned_properties(symbol))

    # === Suggestions and diagnostics ===

    def get_suggestion_for_nonexistent_symbol(self, node, meaning: str = "value") -> Optional[str]:
        name = self._text(node)
        candidates: List[str] = []
        for scope_id in self.graph.scope_chain(self.graph.scope_at(node)):
            for candidate in self.graph.symbols_in_scope(scope_id, meaning):
                if candidate not in candidates:
                    candidates.append(candidate)
        builtins = self.globals if meaning == "value" else self.global_types
        candidates.extend(sorted(n for n in builtins if n not in candidates))
        return get_spelling_suggestion(name, candidates)

    def get_suggestion_for_nonexistent_property(self, node) -> Optional[str]:
        member = node.parent
        if member is None or member.type != "member_expression":
            return None
        known = self.properties_of(member.child_by_field_name("object"))
        if known is None:
            return None
        name = self._text(node)
        if name in known[1]:
            return None
        return get_spelling_suggestion(name, known[1])

    def get_diagnostics(self) -> List[Diagnostic]:
        """Unresolved names, misspelled properties and incomplete object literals."""
        diagnostics: List[Diagnostic] = []
        diagnostics.extend(self._unresolved_name_diagnostics())
        diagnostics.extend(self._property_diagnostics())
        if getattr(self.adapter, "reports_type_names", False):
            diagnostics.extend(self._assignability_diagnostics())
        diagnostics.sort(key=lambda d: (d.start_byte, d.code))
        return diagnostics

    def _diagnostic(self, message, node, *args) -> Diagnostic:
        return Diagnostic(
            code=message.code,
            category=message.category,
            message=format_message(message, *args),
            file=self.file_path,
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            args=tuple(args),
        )

    def _unresolved_name_diagnostics(self) -> List[Diagnostic]:
        diagnostics = []
        reports_types = getattr(self.adapter, "reports_type_names", False)
        for ref in self.graph.iter_refs():
            if ref.meaning == "type":
                if not reports_types or ref.name in self.global_types:
                    continue
            elif ref.name in self.globals:
                continue
            if self.graph.resolve_visible(ref.scope_id, ref.name, ref.meaning) is not None:
                continue
            suggestion = self.get_suggestion_for_nonexistent_symbol(ref.node, ref.meaning)
            if suggestion is not None:
                diagnostics.append(self._diagnostic(
                    Diagnostics.Cannot_find_name_0_Did_you_mean_1, ref.node, ref.name, suggestion))
            else:
                diagnostics.append(self._diagnostic(Diagnostics.Cannot_find_name_0, ref.node, ref.name))
        return diagnostics

    def _property_diagnostics(self) -> List[Diagnostic]:
        diagnostics = []
        for node in iter_nodes(self.tree.root_node, named_only=True):
            if node.type != "member_expression":
                continue
            prop = node.child_by_field_name("property")
            if prop is None or prop.type != "property_identifier":
                continue
            known = self.properties_of(node.child_by_field_name("object"))
            if known is None:
                continue
            name = self._text(prop)
            if name in known[1]:
                continue
            suggestion = get_spelling_suggestion(name, known[1])
            if suggestion is not None:
                diagnostics.append(self._diagnostic(
                    Diagnostics.Property_0_does_not_exist_on_type_1_Did_you_mean_2, prop,
                    name, known[0], suggestion))
        return diagnostics

    def missing_required_members(self, declarator) -> Optional[List[Any]]:
        """Required interface members absent from a typed object-literal initializer."""
        type_annotation = declarator.child_by_field_name("type")
        value = declarator.child_by_field_name("value")
        if type_annotation is None or value is None or value.type != "object":
            return None
        members = self.get_properties_of_type(type_annotation)
        keys = object_literal_keys(value, self.source)
        if members is None or keys is None:
            return None
        return [
            m for m in members
            if self.member_name(m) not in keys and not is_optional_member(m) and not is_private_member(m)
        ]

    def _assignability_diagnostics(self) -> List[Diagnostic]:
        diagnostics = []
        for node in iter_nodes(self.tree.root_node, named_only=True):
            if node.type != "variable_declarator":
                continue
            missing = self.missing_required_members(node)
            if not missing:
                continue
            value = node.child_by_field_name("value")
            keys = object_literal_keys(value, self.source) or []
            literal_type = "{ " + "".join(f"{k}: any; " for k in keys) + "}" if keys else "{}"
            type_annotation = node.child_by_field_name("type")
            type_name = self._text(type_annotation.named_children[0])
            name = node.child_by_field_name("name")
            diagnostics.append(self._diagnostic(
                Diagnostics.Type_0_is_not_assignable_to_type_1, name, literal_type, type_name))
        return diagnostics


def create_checker(adapter: LanguageAdapter, tree, text: str, file_path: str,
                   extra_globals: Sequence[str] = ()) -> ScopeChecker:
    """Bind ``tree`` and wrap the result in a checker."""
    graph = build_scopes(adapter, tree, text)
    return ScopeChecker(graph, tree, text.encode("utf-8"), file_path, adapter, extra_globals)
