"""
Refactor: Convert string concatenation or template literal

"Convert to template literal" flattens a ``+`` chain that contains at least
one string literal into a template; "Convert to string concatenation" turns a
template back into a ``+`` chain (or a plain string when nothing is
interpolated). The two directions agree on the runtime string value, not on
the exact source text.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from refactor_engine.ast_utils import find_ancestor, is_field, iter_nodes
from refactor_engine.diagnostic_messages import Diagnostics, get_locale_specific_message
from refactor_engine.errors import InvalidActionError
from refactor_engine.factory import (SyntheticNode, clone_node, create_binary, create_no_substitution_template,
                                     create_string_literal, create_template_expression)
from refactor_engine.parenthesize import parenthesize_binary_operand, parenthesize_if_needed
from refactor_engine.text_changes import ChangeTracker
from refactor_engine.types import (ApplicableRefactorInfo, RefactorActionInfo, RefactorContext,
                                   RefactorEditInfo, RefactorMeta)

logger = logging.getLogger(__name__)

REFACTOR_NAME = "Convert string concatenation or template literal"
TO_TEMPLATE = "Convert to template literal"
TO_CONCATENATION = "Convert to string concatenation"

# Legacy octal escapes as JavaScript reads them: \0-\377, greedy
_STRING_ESCAPE = re.compile(r"\\(?:([0-3][0-7]{0,2}|[4-7][0-7]?)|([89])|(\r\n|.))", re.DOTALL)
_TEMPLATE_SPECIAL = re.compile(r"\\(?:\r\n|.)|`|\$\{", re.DOTALL)
_TEMPLATE_RAW = re.compile(r"\\(\r\n|.)|(\r\n|\r|\n)|([\"'])", re.DOTALL)


@dataclass(frozen=True)
class ConcatenationChain:
    """Flattened operands of a ``+`` chain."""
    nodes: List[object]
    contains_string: bool
    are_operators_valid: bool


def _operator(node) -> Optional[str]:
    operator = node.child_by_field_name("operator")
    return operator.type if operator is not None else None


def is_string_like(node) -> bool:
    """A string literal or a template without substitutions."""
    if node.type == "string":
        return True
    return node.type == "template_string" and not any(c.type == "template_substitution" for c in node.children)


def tree_to_array(node) -> ConcatenationChain:
    """Flatten a binary tree; sub-trees without string literals stay whole."""
    if node.type == "binary_expression":
        left = tree_to_array(node.child_by_field_name("left"))
        right = tree_to_array(node.child_by_field_name("right"))
        if not left.contains_string and not right.contains_string:
            return ConcatenationChain([node], False, True)
        valid = left.are_operators_valid and right.are_operators_valid and _operator(node) == "+"
        return ConcatenationChain(left.nodes + right.nodes, True, valid)
    return ConcatenationChain([node], is_string_like(node), True)


def get_node_or_parent_of_parentheses(ctx: RefactorContext):
    node = ctx.token_at_position()
    parent = node.parent
    if parent is not None and parent.type == "parenthesized_expression" \
            and parent.parent is not None and parent.parent.type == "binary_expression":
        return parent.parent
    return node


def get_parent_binary_expression(node):
    while node.parent is not None and node.parent.type == "binary_expression":
        node = node.parent
    return node


def is_string_concatenation_valid(node) -> bool:
    if node.type not in ("binary_expression", "string"):
        return False
    chain = tree_to_array(node)
    return chain.contains_string and chain.are_operators_valid


def get_template_literal(node):
    template = find_ancestor(node, ("template_string",), include_self=True)
    if template is None:
        return None
    parent = template.parent
    if parent is not None and parent.type == "call_expression" and is_field(parent, "arguments", template):
        return None
    return template


# === Literal text ===

def _decode_escape(match) -> str:
    octal, digit, other = match.groups()
    if octal is not None:
        following = match.string[match.end():match.end() + 1]
        if octal == "0" and not following.isdigit():
            return "\\0"
        char = chr(int(octal, 8))
        if char.isprintable() and char != "\\":
            return char
        return f"\\x{ord(char):02x}"
    if digit is not None:
        return digit
    return "\\" + other


def decode_raw_string(content: str) -> str:
    """Raw text of a string literal, without quotes, free of octal escapes."""
    return _STRING_ESCAPE.sub(_decode_escape, content[1:-1])


def escape_template_text(content: str) -> str:
    """Escape backticks and ``${`` that are not already part of an escape."""
    return _TEMPLATE_SPECIAL.sub(lambda m: m.group(0) if m.group(0).startswith("\\") else "\\" + m.group(0),
                                 content)


def template_raw_to_string_raw(raw: str, quote: str) -> str:
    """Template literal text rewritten as the body of a ``quote``-delimited string."""
    def replace(match):
        escaped, newline, quote_char = match.groups()
        if escaped is not None:
            if escaped in ("`", "$"):
                return escaped
            return "\\" + escaped
        if newline is not None:
            return "\\n"
        return "\\" + quote_char if quote_char == quote else quote_char
    return _TEMPLATE_RAW.sub(replace, raw)


def get_quote_preference(ctx: RefactorContext) -> str:
    preference = ctx.config.quote_preference if ctx.config is not None else "auto"
    if preference == "single":
        return "'"
    if preference == "double":
        return '"'
    for node in iter_nodes(ctx.root, named_only=True):
        if node.type == "string":
            return "'" if ctx.source[node.start_byte:node.start_byte + 1] == b"'" else '"'
    return '"'


# === To template ===

def _join_template_pieces(pieces: List[str]) -> str:
    """Concatenate template text so no piece boundary forms a new ${."""
    text = ""
    for piece in pieces:
        if piece.startswith("{") and _ends_with_bare_dollar(text):
            text = text[:-1] + "\\$"
        text += piece
    return text


def _ends_with_bare_dollar(text: str) -> bool:
    if not text.endswith("$"):
        return False
    backslashes = len(text[:-1]) - len(text[:-1].rstrip("\\"))
    return backslashes % 2 == 0


def concat_consecutive_strings(ctx: RefactorContext, index: int, nodes) -> Tuple[int, str]:
    pieces = []
    while index < len(nodes) and is_string_like(nodes[index]):
        node = nodes[index]
        if node.type == "string":
            pieces.append(escape_template_text(decode_raw_string(ctx.node_text(node))))
        else:
            pieces.append(ctx.node_text(node)[1:-1])
        index += 1
    return index, _join_template_pieces(pieces)


def nodes_to_template(ctx: RefactorContext, nodes) -> SyntheticNode:
    begin, head = concat_consecutive_strings(ctx, 0, nodes)
    if begin == len(nodes):
        return create_no_substitution_template(head)
    spans = []
    i = begin
    while i < len(nodes):
        expression = nodes[i]
        if expression.type == "parenthesized_expression" and expression.named_child_count == 1:
            expression = expression.named_children[0]
        i, literal = concat_consecutive_strings(ctx, i + 1, nodes)
        spans.append((clone_node(expression, ctx.source), literal))
    return create_template_expression(head, spans)


# === To concatenation ===

def template_parts(ctx: RefactorContext, template) -> Tuple[str, List[Tuple[object, str]]]:
    """Raw head text and (expression, following raw text) spans of a template."""
    inner_start = template.start_byte + 1
    inner_end = template.end_byte - 1
    substitutions = [c for c in template.children if c.type == "template_substitution"]
    head_end = substitutions[0].start_byte if substitutions else inner_end
    head = ctx.get_text(inner_start, head_end)
    spans = []
    for index, substitution in enumerate(substitutions):
        end = substitutions[index + 1].start_byte if index + 1 < len(substitutions) else inner_end
        expressions = [c for c in substitution.named_children if c.type != "comment"]
        spans.append((expressions[0], ctx.get_text(substitution.end_byte, end)))
    return head, spans


def array_to_tree(nodes, source: bytes) -> SyntheticNode:
    """Fold operands into a left-associative ``+`` chain."""
    accumulator = parenthesize_binary_operand("+", nodes[0], True, source=source)
    for node in nodes[1:]:
        right = parenthesize_binary_operand("+", node, False, source=source)
        accumulator = create_binary(accumulator, "+", right)
    return accumulator


def _is_string_operand(node) -> bool:
    return node.type == "string"


def template_to_concatenation(ctx: RefactorContext, template) -> SyntheticNode:
    quote = get_quote_preference(ctx)
    head, spans = template_parts(ctx, template)
    if not spans:
        return create_string_literal(template_raw_to_string_raw(head, quote), quote)
    nodes = []
    if head:
        nodes.append(create_string_literal(template_raw_to_string_raw(head, quote), quote))
    for expression, literal in spans:
        nodes.append(expression)
        if literal:
            nodes.append(create_string_literal(template_raw_to_string_raw(literal, quote), quote))
    if not any(_is_string_operand(n) for n in nodes[:2]):
        nodes.insert(0, create_string_literal("", quote))
    return array_to_tree(nodes, ctx.source)


class ConvertStringOrTemplateLiteralRefactor:
    """Convert between ``+`` concatenation and template literals."""

    meta = RefactorMeta(
        name=REFACTOR_NAME,
        description=get_locale_specific_message(Diagnostics.Convert_string_concatenation_or_template_literal),
    )

    def get_available_actions(self, ctx: RefactorContext) -> List[ApplicableRefactorInfo]:
        node = get_node_or_parent_of_parentheses(ctx)
        actions = []
        if is_string_concatenation_valid(get_parent_binary_expression(node)):
            actions.append(RefactorActionInfo(
                TO_TEMPLATE, get_locale_specific_message(Diagnostics.Convert_to_template_literal)))
        if get_template_literal(node) is not None:
            actions.append(RefactorActionInfo(
                TO_CONCATENATION, get_locale_specific_message(Diagnostics.Convert_to_string_concatenation)))
        if not actions:
            return []
        return [ApplicableRefactorInfo(name=REFACTOR_NAME, description=self.meta.description, actions=actions)]

    def get_edits_for_action(self, ctx: RefactorContext, action_name: str) -> Optional[RefactorEditInfo]:
        node = get_node_or_parent_of_parentheses(ctx)
        if action_name == TO_TEMPLATE:
            expression = get_parent_binary_expression(node)
            if not is_string_concatenation_valid(expression):
                return None
            template = nodes_to_template(ctx, tree_to_array(expression).nodes)
            edits = ChangeTracker.with_(ctx, lambda t: t.replace_node(ctx, expression, template))
            return RefactorEditInfo(edits=edits)
        if action_name == TO_CONCATENATION:
            template = get_template_literal(node)
            if template is None:
                return None
            replacement = parenthesize_if_needed(template, template_to_concatenation(ctx, template))
            edits = ChangeTracker.with_(ctx, lambda t: t.replace_node(ctx, template, replacement))
            return RefactorEditInfo(edits=edits)
        raise InvalidActionError(action_name, f"not an action of '{REFACTOR_NAME}'")


REFACTORS = [ConvertStringOrTemplateLiteralRefactor()]
