"""
Helpers for navigating tree-sitter syntax trees.

Tree-sitter nodes are treated as immutable values: nothing here (or anywhere
in the engine) mutates a tree. Nodes are compared and used as dict keys via
``node_key`` because a parent walk may hand back a fresh wrapper object for
the same underlying node.
"""

from typing import Any, Callable, Iterable, Iterator, Optional, Tuple, Union

NodeKey = Tuple[int, int, str]

FUNCTION_TYPES = {
    "function_declaration", "generator_function_declaration",
    "function_expression", "function", "generator_function",
    "arrow_function", "method_definition",
}

CLASS_TYPES = {"class_declaration", "class", "abstract_class_declaration"}

STATEMENT_TYPES = {
    "expression_statement", "lexical_declaration", "variable_declaration",
    "function_declaration", "generator_function_declaration", "class_declaration",
    "abstract_class_declaration", "return_statement", "if_statement",
    "for_statement", "for_in_statement", "while_statement", "do_statement",
    "try_statement", "throw_statement", "switch_statement", "break_statement",
    "continue_statement", "statement_block", "labeled_statement",
    "empty_statement", "debugger_statement", "with_statement",
    "import_statement", "export_statement", "interface_declaration",
    "type_alias_declaration", "enum_declaration", "ambient_declaration",
    "module", "internal_module",
}

# Nodes whose children form a list of statements that may grow or shrink.
STATEMENT_LIST_TYPES = {"program", "statement_block", "switch_case", "switch_default"}

IDENTIFIER_TYPES = {
    "identifier", "shorthand_property_identifier",
    "shorthand_property_identifier_pattern", "type_identifier",
}

STRING_INNER_TYPES = {"string_fragment", "escape_sequence", '"', "'"}
TEMPLATE_INNER_TYPES = {"string_fragment", "escape_sequence", "`"}


def node_key(node) -> NodeKey:
    """Stable identity of a node within one tree."""
    return (node.start_byte, node.end_byte, node.type)


def same_node(a, b) -> bool:
    if a is None or b is None:
        return False
    return node_key(a) == node_key(b)


def iter_nodes(node, named_only: bool = False) -> Iterator[Any]:
    """Pre-order walk of ``node`` and its descendants in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if not named_only or current.is_named:
            yield current
        stack.extend(reversed(current.children))


def find_ancestor(node, match: Union[Callable[[Any], bool], Iterable[str]], include_self: bool = False):
    """First ancestor (optionally the node itself) that matches.

    ``match`` is either a predicate or a collection of node types.
    """
    if not callable(match):
        types = set(match)
        match = lambda n: n.type in types  # noqa: E731
    current = node if include_self else node.parent
    while current is not None:
        if match(current):
            return current
        current = current.parent
    return None


def is_ancestor_of(ancestor, node) -> bool:
    """True when ``node`` lies inside ``ancestor`` (or is it)."""
    return ancestor.start_byte <= node.start_byte and node.end_byte <= ancestor.end_byte


def get_token_at_position(root, position: int):
    """Token covering ``position``.

    Positions are half-open: a cursor right after ``foo`` and before ``(``
    lands on ``(``. Fragments inside a plain string literal, or a template
    without substitutions, are widened to the literal itself.
    """
    end = min(position + 1, root.end_byte)
    start = min(position, end)
    node = root.descendant_for_byte_range(start, end)
    if node is None:
        return root
    if node.type in STRING_INNER_TYPES and node.parent is not None and node.parent.type == "string":
        return node.parent
    if node.type in TEMPLATE_INNER_TYPES and node.parent is not None and node.parent.type == "template_string" \
            and not any(c.type == "template_substitution" for c in node.parent.children):
        return node.parent
    return node


def is_statement(node) -> bool:
    return node.type in STATEMENT_TYPES


def get_enclosing_statement(node):
    return find_ancestor(node, is_statement, include_self=True)


def is_field(parent, field_name: str, node) -> bool:
    """True when ``node`` occupies ``field_name`` of ``parent``."""
    if parent is None:
        return False
    return any(same_node(child, node) for child in parent.children_by_field_name(field_name))


def unwrap_parentheses(node):
    while node is not None and node.type == "parenthesized_expression" and node.named_child_count == 1:
        node = node.named_children[0]
    return node


def skip_parentheses_up(node):
    """Climb out of any parentheses wrapping ``node``."""
    while node.parent is not None and node.parent.type == "parenthesized_expression":
        node = node.parent
    return node


def line_start(source: bytes, byte: int) -> int:
    return source.rfind(b"\n", 0, byte) + 1


def line_end(source: bytes, byte: int) -> int:
    index = source.find(b"\n", byte)
    return len(source) if index < 0 else index


def indentation_at(source: bytes, byte: int) -> str:
    """Leading whitespace of the line containing ``byte``."""
    start = line_start(source, byte)
    end = start
    while end < len(source) and source[end:end + 1] in (b" ", b"\t"):
        end += 1
    return source[start:end].decode("utf-8")


def starts_line(source: bytes, byte: int) -> bool:
    """True when only whitespace precedes ``byte`` on its line."""
    return source[line_start(source, byte):byte].strip() == b""


def declaration_keyword(declaration) -> Optional[str]:
    """``var``/``let``/``const`` for a variable or lexical declaration."""
    if declaration is None:
        return None
    if declaration.type == "variable_declaration":
        return "var"
    if declaration.type == "lexical_declaration":
        kind = declaration.child_by_field_name("kind")
        if kind is not None:
            return kind.type
        for child in declaration.children:
            if child.type in ("let", "const"):
                return child.type
    return None


def has_export_modifier(node) -> bool:
    parent = node.parent
    return parent is not None and parent.type == "export_statement"


def get_enclosing_block_scope_container(node):
    """Nearest node that bounds the visibility of a declaration."""
    if node.type == "variable_declarator" and declaration_keyword(node.parent) == "var":
        return find_ancestor(node, lambda n: n.type in FUNCTION_TYPES or n.type == "program")
    return find_ancestor(
        node,
        lambda n: n.type in STATEMENT_LIST_TYPES or n.type in FUNCTION_TYPES
        or n.type in ("for_statement", "for_in_statement", "catch_clause", "switch_body", "class_body"),
    )
