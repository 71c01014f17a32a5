"""
Node factory: synthetic expression and statement nodes.

Tree-sitter trees are immutable, so every transformation builds new
``SyntheticNode`` values from source slices and constructor calls. A synthetic
node carries its kind and its rendered text; multi-line text is normalized to
a zero base indentation so the edit ledger can re-indent it at the insertion
point.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .ast_utils import IDENTIFIER_TYPES, indentation_at, iter_nodes
from .text_changes import apply_changes
from .types import Edit


@dataclass(frozen=True)
class SyntheticNode:
    """An expression or statement produced by a transformation."""
    type: str
    text: str
    operator: Optional[str] = None

    @property
    def start_byte(self) -> Optional[int]:
        return None


def node_operator(node) -> Optional[str]:
    """Operator token of a binary/unary/update/assignment node."""
    if isinstance(node, SyntheticNode):
        return node.operator
    operator = node.child_by_field_name("operator")
    if operator is not None:
        return operator.type
    if node.type == "assignment_expression":
        return "="
    return None


def dedent(text: str, indentation: str) -> str:
    """Strip ``indentation`` from every line after the first."""
    if not indentation or "\n" not in text:
        return text
    lines = text.split("\n")
    rest = []
    for line in lines[1:]:
        if line.startswith(indentation):
            line = line[len(indentation):]
        rest.append(line)
    return "\n".join([lines[0]] + rest)


def _slice(source: bytes, node) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8")


def clone_node(node, source: bytes) -> SyntheticNode:
    """Deep clone of a tree-sitter node as a synthetic node."""
    if isinstance(node, SyntheticNode):
        return node
    text = dedent(_slice(source, node), indentation_at(source, node.start_byte))
    return SyntheticNode(type=node.type, text=text, operator=node_operator(node))


def clone_with_renames(node, source: bytes, checker, rename_map: Dict[object, str]) -> SyntheticNode:
    """Clone ``node`` renaming every identifier bound to a symbol in ``rename_map``.

    Renaming is symbol-keyed: an identifier is rewritten only when the checker
    resolves it to one of the mapped symbols, so unrelated names with the same
    text are untouched. Shorthand properties expand to ``name: newName``.
    """
    if not rename_map:
        return clone_node(node, source)
    edits: List[Edit] = []
    for child in iter_nodes(node):
        if child.type not in IDENTIFIER_TYPES:
            continue
        symbol = checker.symbol_of(child)
        if symbol is None or symbol not in rename_map:
            continue
        new_name = rename_map[symbol]
        start = child.start_byte - node.start_byte
        end = child.end_byte - node.start_byte
        if child.type in ("shorthand_property_identifier", "shorthand_property_identifier_pattern"):
            replacement = f"{_slice(source, child)}: {new_name}"
        else:
            replacement = new_name
        edits.append(Edit(start_byte=start, end_byte=end, replacement=replacement))
    text = apply_changes(_slice(source, node), edits)
    text = dedent(text, indentation_at(source, node.start_byte))
    return SyntheticNode(type=node.type, text=text, operator=node_operator(node))


def create_paren(expression) -> SyntheticNode:
    return SyntheticNode(type="parenthesized_expression", text=f"({expression.text})")


def create_identifier(name: str) -> SyntheticNode:
    return SyntheticNode(type="identifier", text=name)


def create_string_literal(raw: str, quote: str = '"') -> SyntheticNode:
    """String literal from already-escaped ``raw`` content."""
    return SyntheticNode(type="string", text=f"{quote}{raw}{quote}")


def create_binary(left, operator: str, right) -> SyntheticNode:
    return SyntheticNode(type="binary_expression", text=f"{left.text} {operator} {right.text}", operator=operator)


def create_no_substitution_template(raw: str) -> SyntheticNode:
    return SyntheticNode(type="template_string", text=f"`{raw}`")


def create_template_expression(head: str, spans: Sequence[Tuple[object, str]]) -> SyntheticNode:
    """Template from head text and (expression, following literal text) spans."""
    parts = [head]
    for expression, literal in spans:
        parts.append("${" + expression.text + "}")
        parts.append(literal)
    return SyntheticNode(type="template_string", text="`" + "".join(parts) + "`")


def create_variable_statement(name: str, initializer, keyword: str = "const") -> SyntheticNode:
    return SyntheticNode(type="lexical_declaration", text=f"{keyword} {name} = {initializer.text};")


def create_const_statement(name: str, initializer) -> SyntheticNode:
    return create_variable_statement(name, initializer, "const")


def create_property_assignment(name: str, value) -> SyntheticNode:
    return SyntheticNode(type="pair", text=f"{name}: {value.text}")


def create_array_literal(elements: Iterable[object] = ()) -> SyntheticNode:
    return SyntheticNode(type="array", text="[" + ", ".join(e.text for e in elements) + "]")


def create_object_literal(members: Sequence[object], indent: str = "    ") -> SyntheticNode:
    """Multi-line object literal; member text is indented one level."""
    if not members:
        return SyntheticNode(type="object", text="{}")
    body = "".join("\n" + indent + m.text.replace("\n", "\n" + indent) + "," for m in members)
    return SyntheticNode(type="object", text="{" + body + "\n}")


def create_new_expression(constructor: str, arguments: Sequence[object] = ()) -> SyntheticNode:
    args = ", ".join(a.text for a in arguments)
    return SyntheticNode(type="new_expression", text=f"new {constructor}({args})")


def create_literal(text: str, kind: str = "number") -> SyntheticNode:
    """Numeric, bigint, boolean or null literal from its source text."""
    return SyntheticNode(type=kind, text=text)
