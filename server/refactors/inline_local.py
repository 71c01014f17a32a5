"""
Refactor: Inline local

Replaces references to a local variable with its initializer and removes the
declaration. "Inline all" rewrites every reference; "Inline here" rewrites
only the reference under the cursor and drops the declaration when that was
the last one.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from refactor_engine.ast_utils import (declaration_keyword, get_enclosing_block_scope_container,
                                       has_export_modifier, is_ancestor_of, is_field)
from refactor_engine.diagnostic_messages import Diagnostics, get_locale_specific_message
from refactor_engine.errors import InvalidActionError
from refactor_engine.factory import clone_node, create_paren, SyntheticNode
from refactor_engine.parenthesize import OperatorPrecedence, get_expression_precedence, parenthesize_if_needed
from refactor_engine.references import find_references
from refactor_engine.text_changes import ChangeTracker
from refactor_engine.types import (ApplicableRefactorInfo, RefactorActionInfo, RefactorContext,
                                   RefactorEditInfo, RefactorMeta)

from .inline_support import (find_selected_reference, free_names_resolve_same, is_unmovable_usage,
                             is_write_target)

logger = logging.getLogger(__name__)

REFACTOR_NAME = "Inline local"
INLINE_ALL = "Inline all"
INLINE_HERE = "Inline here"


@dataclass(frozen=True)
class InlineLocalInfo:
    declaration: object
    usages: List[object]
    selected_usage: Optional[object] = None


def is_local_variable(node) -> bool:
    """A declarator of a statement-level var/let/const (not a for head)."""
    if node is None or node.type != "variable_declarator":
        return False
    statement = node.parent
    if statement is None or declaration_keyword(statement) is None:
        return False
    parent = statement.parent
    if parent is None or parent.type in ("for_statement", "for_in_statement"):
        return False
    return True


def get_local_info(ctx: RefactorContext) -> Optional[InlineLocalInfo]:
    token = ctx.token_at_position()
    if token is None:
        return None
    parent = token.parent
    if is_local_variable(parent) and is_field(parent, "name", token):
        return create_info(ctx, parent)
    if token.type in ("identifier", "shorthand_property_identifier"):
        symbol = ctx.checker.symbol_of(token)
        declaration = ctx.checker.declaration_of(symbol)
        if not is_local_variable(declaration):
            return None
        name = declaration.child_by_field_name("name")
        if name is None or symbol.name_node is None or name.start_byte != symbol.name_node.start_byte:
            return None
        return create_info(ctx, declaration, token)
    return None


def create_info(ctx: RefactorContext, declaration, token=None) -> Optional[InlineLocalInfo]:
    name = declaration.child_by_field_name("name")
    if name is None or name.type != "identifier":
        return None
    symbol = ctx.checker.symbol_of(name)
    if symbol is None:
        return None
    usages = find_references(get_enclosing_block_scope_container(declaration), symbol, ctx.checker)
    if not can_inline(ctx, declaration, symbol, usages):
        logger.debug(f"Cannot inline '{symbol.name}'")
        return None
    selected = find_selected_reference(usages, token) if token is not None else None
    return InlineLocalInfo(declaration=declaration, usages=usages, selected_usage=selected)


def can_inline(ctx: RefactorContext, declaration, symbol, usages) -> bool:
    initializer = declaration.child_by_field_name("value")
    if initializer is None:
        return False
    if has_export_modifier(declaration.parent):
        return False
    if len(ctx.checker.declarations_of(symbol)) != 1:
        return False
    for usage in usages:
        if is_write_target(usage) or is_unmovable_usage(usage):
            return False
        if is_ancestor_of(declaration, usage):
            return False
        if not free_names_resolve_same(ctx.checker, initializer, usage):
            return False
    return True


def inline_at(ctx: RefactorContext, tracker: ChangeTracker, usage, initializer) -> None:
    """Replace one reference with a copy of the initializer."""
    if usage.type == "shorthand_property_identifier":
        value = clone_node(initializer, ctx.source)
        if get_expression_precedence(initializer) < OperatorPrecedence.Yield:
            value = create_paren(value)
        tracker.replace_node(ctx, usage, SyntheticNode(type="pair", text=f"{ctx.node_text(usage)}: {value.text}"))
        return
    tracker.replace_node(ctx, usage, parenthesize_if_needed(usage, initializer, ctx.source))


class InlineLocalRefactor:
    """Inline a local variable into its references."""

    meta = RefactorMeta(
        name=REFACTOR_NAME,
        description=get_locale_specific_message(Diagnostics.Inline_local),
    )

    def get_available_actions(self, ctx: RefactorContext) -> List[ApplicableRefactorInfo]:
        info = get_local_info(ctx)
        if info is None:
            return []
        actions = [RefactorActionInfo(INLINE_ALL, get_locale_specific_message(Diagnostics.Inline_all))]
        if info.selected_usage is not None:
            actions.append(RefactorActionInfo(INLINE_HERE, get_locale_specific_message(Diagnostics.Inline_here)))
        return [ApplicableRefactorInfo(name=REFACTOR_NAME, description=self.meta.description, actions=actions)]

    def get_edits_for_action(self, ctx: RefactorContext, action_name: str) -> Optional[RefactorEditInfo]:
        if action_name not in (INLINE_ALL, INLINE_HERE):
            raise InvalidActionError(action_name, f"not an action of '{REFACTOR_NAME}'")
        info = get_local_info(ctx)
        if info is None:
            return None
        initializer = info.declaration.child_by_field_name("value")

        if action_name == INLINE_ALL:
            def inline_all(tracker: ChangeTracker) -> None:
                for usage in info.usages:
                    inline_at(ctx, tracker, usage, initializer)
                tracker.delete_declaration(ctx, info.declaration)
            return RefactorEditInfo(edits=ChangeTracker.with_(ctx, inline_all))

        if info.selected_usage is None:
            return None

        def inline_here(tracker: ChangeTracker) -> None:
            inline_at(ctx, tracker, info.selected_usage, initializer)
            if len(info.usages) == 1:
                tracker.delete_declaration(ctx, info.declaration)
        return RefactorEditInfo(edits=ChangeTracker.with_(ctx, inline_here))


REFACTORS = [InlineLocalRefactor()]
