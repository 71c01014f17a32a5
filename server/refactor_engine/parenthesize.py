"""
Operator precedence and parenthesization for substituted expressions.

When one expression replaces another inside an existing tree, the replacement
may bind less tightly than the slot it lands in (``a + b`` in ``v * 2``).
``parenthesize_if_needed`` wraps the replacement exactly when the original
evaluation order would otherwise change.
"""

from enum import Enum, IntEnum
from typing import Optional

from .ast_utils import is_field, is_statement
from .factory import SyntheticNode, clone_node, create_paren, node_operator


class OperatorPrecedence(IntEnum):
    Comma = 0
    Spread = 1
    Yield = 2
    Assignment = 3
    Conditional = 4
    Coalesce = 4
    LogicalOR = 5
    LogicalAND = 6
    BitwiseOR = 7
    BitwiseXOR = 8
    BitwiseAND = 9
    Equality = 10
    Relational = 11
    Shift = 12
    Additive = 13
    Multiplicative = 14
    Exponentiation = 15
    Unary = 16
    Update = 17
    LeftHandSide = 18
    Member = 19
    Primary = 20


class Associativity(Enum):
    Left = "left"
    Right = "right"


BINARY_OPERATOR_PRECEDENCE = {
    "??": OperatorPrecedence.Coalesce,
    "||": OperatorPrecedence.LogicalOR,
    "&&": OperatorPrecedence.LogicalAND,
    "|": OperatorPrecedence.BitwiseOR,
    "^": OperatorPrecedence.BitwiseXOR,
    "&": OperatorPrecedence.BitwiseAND,
    "==": OperatorPrecedence.Equality,
    "!=": OperatorPrecedence.Equality,
    "===": OperatorPrecedence.Equality,
    "!==": OperatorPrecedence.Equality,
    "<": OperatorPrecedence.Relational,
    ">": OperatorPrecedence.Relational,
    "<=": OperatorPrecedence.Relational,
    ">=": OperatorPrecedence.Relational,
    "instanceof": OperatorPrecedence.Relational,
    "in": OperatorPrecedence.Relational,
    "<<": OperatorPrecedence.Shift,
    ">>": OperatorPrecedence.Shift,
    ">>>": OperatorPrecedence.Shift,
    "+": OperatorPrecedence.Additive,
    "-": OperatorPrecedence.Additive,
    "*": OperatorPrecedence.Multiplicative,
    "/": OperatorPrecedence.Multiplicative,
    "%": OperatorPrecedence.Multiplicative,
    "**": OperatorPrecedence.Exponentiation,
}

# x*(a*b) => x*a*b holds for these operators
ASSOCIATIVE_OPERATORS = {"*", "|", "&", "^"}

LITERAL_TYPES = {"string", "number", "regex", "template_string"}


def get_binary_operator_precedence(operator: str) -> OperatorPrecedence:
    return BINARY_OPERATOR_PRECEDENCE.get(operator, OperatorPrecedence.Primary)


def _has_arguments(node) -> bool:
    if isinstance(node, SyntheticNode):
        return node.text.rstrip().endswith(")")
    return node.child_by_field_name("arguments") is not None


def _is_prefix_update(node) -> bool:
    if isinstance(node, SyntheticNode):
        return node.text.startswith(("++", "--"))
    return bool(node.children) and node.children[0].type in ("++", "--")


def get_expression_precedence(node) -> OperatorPrecedence:
    """Top-level precedence of an expression node (tree-sitter or synthetic)."""
    node_type = node.type
    if node_type == "sequence_expression":
        return OperatorPrecedence.Comma
    if node_type == "spread_element":
        return OperatorPrecedence.Spread
    if node_type == "yield_expression":
        return OperatorPrecedence.Yield
    if node_type in ("assignment_expression", "augmented_assignment_expression", "arrow_function"):
        return OperatorPrecedence.Assignment
    if node_type == "ternary_expression":
        return OperatorPrecedence.Conditional
    if node_type == "binary_expression":
        return get_binary_operator_precedence(node_operator(node) or "")
    if node_type in ("as_expression", "satisfies_expression"):
        return OperatorPrecedence.Relational
    if node_type in ("unary_expression", "await_expression", "type_assertion"):
        return OperatorPrecedence.Unary
    if node_type == "update_expression":
        return OperatorPrecedence.Unary if _is_prefix_update(node) else OperatorPrecedence.Update
    if node_type == "call_expression":
        if not isinstance(node, SyntheticNode):
            arguments = node.child_by_field_name("arguments")
            if arguments is not None and arguments.type == "template_string":
                return OperatorPrecedence.Member
        return OperatorPrecedence.LeftHandSide
    if node_type == "new_expression":
        return OperatorPrecedence.Member if _has_arguments(node) else OperatorPrecedence.LeftHandSide
    if node_type in ("member_expression", "subscript_expression", "non_null_expression"):
        return OperatorPrecedence.Member
    return OperatorPrecedence.Primary


def get_expression_associativity(node) -> Associativity:
    node_type = node.type
    if node_type == "new_expression":
        return Associativity.Left if _has_arguments(node) else Associativity.Right
    if node_type in ("unary_expression", "await_expression", "ternary_expression", "yield_expression",
                     "assignment_expression", "augmented_assignment_expression", "arrow_function",
                     "type_assertion"):
        return Associativity.Right
    if node_type == "update_expression" and _is_prefix_update(node):
        return Associativity.Right
    if node_type == "binary_expression" and node_operator(node) == "**":
        return Associativity.Right
    return Associativity.Left


def _literal_kind_of_plus_operand(node) -> Optional[str]:
    """Literal kind shared by every leaf of a ``+`` chain, if any."""
    if node.type in LITERAL_TYPES:
        if node.type == "template_string" and not isinstance(node, SyntheticNode):
            if any(c.type == "template_substitution" for c in node.children):
                return None
        elif node.type == "template_string" and "${" in node.text:
            return None
        return node.type
    if node.type == "binary_expression" and node_operator(node) == "+" and not isinstance(node, SyntheticNode):
        left = _literal_kind_of_plus_operand(node.child_by_field_name("left"))
        if left is not None and left == _literal_kind_of_plus_operand(node.child_by_field_name("right")):
            return left
    return None


def _mixes_coalesce(binary_operator: str, operand_operator: Optional[str]) -> bool:
    if binary_operator == "??":
        return operand_operator in ("||", "&&")
    return binary_operator in ("||", "&&") and operand_operator == "??"


def binary_operand_needs_parentheses(binary_operator: str, operand, is_left_side_of_binary: bool,
                                     left_operand=None) -> bool:
    binary_precedence = get_binary_operator_precedence(binary_operator)
    binary_associativity = Associativity.Right if binary_operator == "**" else Associativity.Left

    # ?? cannot be mixed with || or && without parentheses
    if operand.type == "binary_expression" and _mixes_coalesce(binary_operator, node_operator(operand)):
        return True
    if binary_operator == "**" and is_left_side_of_binary and operand.type in (
            "unary_expression", "await_expression", "type_assertion"):
        return True
    if not is_left_side_of_binary and operand.type == "arrow_function" \
            and binary_precedence > OperatorPrecedence.Assignment:
        return True

    operand_precedence = get_expression_precedence(operand)
    if operand_precedence < binary_precedence:
        # right operand of a right-associative operator may be a yield expression
        return not (not is_left_side_of_binary and binary_associativity == Associativity.Right
                    and operand.type == "yield_expression")
    if operand_precedence > binary_precedence:
        return False

    if is_left_side_of_binary:
        # (a*b)/x -> a*b/x, but (a**b)**x keeps its parentheses
        return binary_associativity == Associativity.Right
    if operand.type == "binary_expression" and node_operator(operand) == binary_operator:
        if binary_operator in ASSOCIATIVE_OPERATORS:
            return False
        if binary_operator == "+":
            left_kind = _literal_kind_of_plus_operand(left_operand) if left_operand is not None else None
            if left_kind is not None and left_kind == _literal_kind_of_plus_operand(operand):
                return False
    # x/(a**b) -> x/a**b
    return get_expression_associativity(operand) == Associativity.Left


def _as_synthetic(expression, source: Optional[bytes]) -> SyntheticNode:
    if isinstance(expression, SyntheticNode):
        return expression
    return clone_node(expression, source)


def parenthesize_binary_operand(binary_operator: str, operand, is_left_side_of_binary: bool,
                                left_operand=None, source: Optional[bytes] = None) -> SyntheticNode:
    """Operand, wrapped when it would bind looser than ``binary_operator``."""
    synthetic = _as_synthetic(operand, source)
    if operand.type == "parenthesized_expression":
        return synthetic
    if binary_operand_needs_parentheses(binary_operator, operand, is_left_side_of_binary, left_operand):
        return create_paren(synthetic)
    return synthetic


def _starts_expression_statement(target) -> bool:
    """True when ``target`` is the first token run of an expression statement."""
    current = target
    parent = current.parent
    while parent is not None and parent.start_byte == current.start_byte and not is_statement(parent):
        current = parent
        parent = current.parent
    return parent is not None and parent.type == "expression_statement" and parent.start_byte == target.start_byte


def _has_ambiguous_leading_token(text: str) -> bool:
    stripped = text.lstrip()
    if stripped.startswith("{"):
        return True
    for keyword in ("function", "class"):
        if stripped.startswith(keyword) and (len(stripped) == len(keyword) or not (
                stripped[len(keyword)].isalnum() or stripped[len(keyword)] in "_$")):
            return True
    return stripped.startswith("let") and stripped[3:].lstrip().startswith("[")


def _required_precedence(target) -> Optional[OperatorPrecedence]:
    """Minimum precedence an expression needs to stand in ``target``'s slot."""
    parent = target.parent
    parent_type = parent.type

    if parent_type in ("member_expression", "subscript_expression") and is_field(parent, "object", target):
        return OperatorPrecedence.LeftHandSide
    if parent_type == "call_expression" and is_field(parent, "function", target):
        return OperatorPrecedence.LeftHandSide
    if parent_type == "new_expression" and is_field(parent, "constructor", target):
        return OperatorPrecedence.Member
    if parent_type in ("unary_expression", "await_expression"):
        return OperatorPrecedence.Unary
    if parent_type in ("update_expression", "non_null_expression"):
        return OperatorPrecedence.LeftHandSide
    if parent_type == "ternary_expression":
        if is_field(parent, "condition", target):
            return OperatorPrecedence.LogicalOR
        return OperatorPrecedence.Yield
    if parent_type in ("arguments", "array", "variable_declarator", "pair", "spread_element",
                       "assignment_expression", "augmented_assignment_expression", "assignment_pattern",
                       "object_assignment_pattern", "arrow_function", "required_parameter",
                       "optional_parameter", "public_field_definition", "field_definition"):
        return OperatorPrecedence.Yield
    if parent_type in ("as_expression", "satisfies_expression"):
        return OperatorPrecedence.Relational + 1
    if is_statement(parent) or parent_type in ("template_substitution", "parenthesized_expression",
                                                 "statement_block", "program", "sequence_expression"):
        return None
    return get_expression_precedence(parent)


def parenthesize_if_needed(target, expression, source: Optional[bytes] = None) -> SyntheticNode:
    """``expression`` ready to replace ``target``, in parentheses if required.

    ``target`` is the tree-sitter node being replaced; ``expression`` is a
    synthetic node or a tree-sitter node from ``source``.
    """
    synthetic = _as_synthetic(expression, source)
    if expression.type == "parenthesized_expression" or target.parent is None:
        return synthetic
    parent = target.parent

    if parent.type == "binary_expression":
        is_left = is_field(parent, "left", target)
        left_operand = None if is_left else parent.child_by_field_name("left")
        if binary_operand_needs_parentheses(node_operator(parent), expression, is_left, left_operand):
            return create_paren(synthetic)
    else:
        required = _required_precedence(target)
        if required is not None and get_expression_precedence(expression) < required:
            return create_paren(synthetic)
        if parent.type in ("member_expression", "subscript_expression", "call_expression") \
                and is_field(parent, "object" if parent.type != "call_expression" else "function", target):
            if expression.type == "new_expression" and not _has_arguments(expression):
                return create_paren(synthetic)
            if expression.type == "number" and synthetic.text.isdigit():
                return create_paren(synthetic)
        if parent.type == "new_expression" and expression.type == "call_expression":
            return create_paren(synthetic)
        if parent.type == "arrow_function" and is_field(parent, "body", target) \
                and synthetic.text.lstrip().startswith("{"):
            return create_paren(synthetic)

    if _starts_expression_statement(target) and _has_ambiguous_leading_token(synthetic.text):
        return create_paren(synthetic)
    return synthetic
