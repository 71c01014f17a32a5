"""
Helpers shared by the inline-local and inline-function refactors.

Both inliners move code from a declaration to its use sites. Moving is only
safe when every name the moved code mentions still denotes the same thing at
the destination, and when the names the move introduces capture nothing.
"""

from typing import Iterable, Optional, Set

from refactor_engine.ast_utils import IDENTIFIER_TYPES, is_ancestor_of, is_field, iter_nodes, skip_parentheses_up

PATTERN_TYPES = {
    "array_pattern", "object_pattern", "pair_pattern", "assignment_pattern",
    "object_assignment_pattern", "rest_pattern",
}

JSX_NAME_PARENTS = {"jsx_opening_element", "jsx_self_closing_element", "jsx_closing_element"}


def is_write_target(reference) -> bool:
    """True when ``reference`` is assigned, updated, or destructured into."""
    node = skip_parentheses_up(reference)
    parent = node.parent
    while parent is not None and parent.type in PATTERN_TYPES:
        if parent.type in ("assignment_pattern", "object_assignment_pattern") \
                and not is_field(parent, "left", node):
            return False
        if parent.type == "pair_pattern" and not is_field(parent, "value", node):
            return False
        node = parent
        parent = node.parent
    if parent is None:
        return False
    if parent.type in ("assignment_expression", "augmented_assignment_expression"):
        return is_field(parent, "left", node)
    if parent.type == "update_expression":
        return True
    if parent.type == "for_in_statement":
        return is_field(parent, "left", node)
    return False


def is_unmovable_usage(reference) -> bool:
    """Usages an expression cannot be substituted into."""
    parent = reference.parent
    if parent is None:
        return True
    if parent.type in ("export_specifier", "type_query") or parent.type in JSX_NAME_PARENTS:
        return True
    if reference.type == "type_identifier":
        return True
    return False


def free_names_resolve_same(checker, root, target, owner=None) -> bool:
    """
    Whether every free name under ``root`` means the same thing at ``target``.

    A name is free when it is bound outside ``owner`` (default: ``root``).
    Unresolved names (globals) must stay unresolved at ``target``.
    """
    owner = owner if owner is not None else root
    for node in iter_nodes(root, named_only=True):
        if node.type not in IDENTIFIER_TYPES:
            continue
        if checker.is_declaration_name(node):
            continue
        ref = checker.graph.ref_for(node)
        if ref is None:
            continue
        symbol = checker.symbol_of(node)
        if symbol is not None and symbol.name_node is not None and is_ancestor_of(owner, symbol.name_node):
            continue
        if checker.resolve_name(ref.name, target, ref.meaning) is not symbol:
            return False
    return True


def identifier_texts(root, exclude=None) -> Set[str]:
    """Text of every name node under ``root``, skipping the ``exclude`` sub-tree."""
    names = set()
    for node in iter_nodes(root, named_only=True):
        if node.type not in IDENTIFIER_TYPES:
            continue
        if exclude is not None and is_ancestor_of(exclude, node):
            continue
        names.add(node.text.decode("utf-8"))
    return names


def get_unique_name(base: str, taken: Iterable[str]) -> str:
    """``base_1``, ``base_2``, ... : the first not in ``taken``."""
    taken = set(taken)
    index = 1
    while f"{base}_{index}" in taken:
        index += 1
    return f"{base}_{index}"


def find_selected_reference(references, token) -> Optional[object]:
    for reference in references:
        if reference.start_byte == token.start_byte and reference.end_byte == token.end_byte:
            return reference
    return None
