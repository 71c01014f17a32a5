"""
Scope reference finder.

Collects, in source order, the name nodes under a scope node that the checker
resolves to a given symbol. Shadowed occurrences need no special handling:
the checker hands back a different symbol for them.
"""

from typing import Any, List

from .ast_utils import IDENTIFIER_TYPES, is_field, iter_nodes, skip_parentheses_up


def find_references(scope_node, symbol, checker, include_declaration_site: bool = False) -> List[Any]:
    """
    Every reference to ``symbol`` inside ``scope_node``.

    Args:
        scope_node: Root of the sub-tree to search
        symbol: Target symbol (compared by identity)
        checker: Resolver answering ``symbol_of`` and ``is_declaration_name``
        include_declaration_site: Also return binding-position name nodes

    Returns:
        Name nodes in source order, each occurrence at most once
    """
    references = []
    if symbol is None:
        return references
    for node in iter_nodes(scope_node, named_only=True):
        if node.type not in IDENTIFIER_TYPES:
            continue
        if checker.symbol_of(node) is not symbol:
            continue
        if not include_declaration_site and checker.is_declaration_name(node):
            continue
        references.append(node)
    return references


def get_call_expression(reference):
    """Call whose callee is ``reference`` (through parentheses), or None."""
    callee = skip_parentheses_up(reference)
    parent = callee.parent
    if parent is not None and parent.type == "call_expression" and is_field(parent, "function", callee):
        return parent
    return None
