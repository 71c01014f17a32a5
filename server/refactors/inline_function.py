"""
Refactor: Inline function

Replaces calls to a local function declaration with its body. Parameters
become ``const`` bindings inserted ahead of the calling statement, the body's
statements follow, and the call itself is replaced by the returned expression.
Parameters and top-level body locals whose names would collide with something
at the call site are renamed to fresh ``name_N`` identifiers.

Only the value path of the first top-level ``return`` is inlined; functions
with a ``return`` nested inside a block, loop or condition are rejected rather
than having their control flow merged.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from refactor_engine.ast_utils import (FUNCTION_TYPES, STATEMENT_LIST_TYPES, get_enclosing_statement,
                                       has_export_modifier, is_ancestor_of, is_field, iter_nodes, node_key,
                                       unwrap_parentheses)
from refactor_engine.diagnostic_messages import Diagnostics, get_locale_specific_message
from refactor_engine.errors import InvalidActionError
from refactor_engine.factory import (clone_node, clone_with_renames, create_identifier, create_variable_statement)
from refactor_engine.parenthesize import parenthesize_if_needed
from refactor_engine.references import find_references, get_call_expression
from refactor_engine.text_changes import ChangeTracker
from refactor_engine.types import (ApplicableRefactorInfo, RefactorActionInfo, RefactorContext,
                                   RefactorEditInfo, RefactorMeta)

from .inline_support import (find_selected_reference, free_names_resolve_same, get_unique_name,
                             identifier_texts, is_write_target)

logger = logging.getLogger(__name__)

REFACTOR_NAME = "Inline function"
INLINE_ALL = "Inline all"
INLINE_HERE = "Inline here"

# Functions that get their own `this`/`arguments`
THIS_BOUNDARIES = FUNCTION_TYPES - {"arrow_function"}

SHORT_CIRCUIT_OPERATORS = {"&&", "||", "??"}


@dataclass(frozen=True)
class InlineFunctionInfo:
    declaration: object
    usages: List[object]              # call expressions, source order
    selected_usage: Optional[object] = None


@dataclass
class InlineState:
    """Names generated and introduced while computing one request's edits."""
    file_names: Set[str]
    generated: Set[str] = field(default_factory=set)
    introduced: Dict[tuple, Set[str]] = field(default_factory=dict)


def get_parameters(declaration) -> Optional[List[tuple]]:
    """(name node, default node) per parameter; None if any parameter is not a plain name."""
    parameters = declaration.child_by_field_name("parameters")
    result = []
    for parameter in parameters.named_children if parameters is not None else []:
        if parameter.type == "comment":
            continue
        if parameter.type == "identifier":
            result.append((parameter, None))
        elif parameter.type == "assignment_pattern":
            left = parameter.child_by_field_name("left")
            if left is None or left.type != "identifier":
                return None
            result.append((left, parameter.child_by_field_name("right")))
        elif parameter.type in ("required_parameter", "optional_parameter"):
            pattern = parameter.child_by_field_name("pattern")
            if pattern is None or pattern.type != "identifier":
                return None
            if any(child.type in ("accessibility_modifier", "override_modifier", "readonly")
                   for child in parameter.children):
                return None
            result.append((pattern, parameter.child_by_field_name("value")))
        else:
            return None
    return result


def get_body_statements(declaration) -> List[object]:
    """Top-level body statements up to and including the first return."""
    body = declaration.child_by_field_name("body")
    statements = []
    for statement in body.named_children:
        if statement.type == "comment":
            continue
        statements.append(statement)
        if statement.type == "return_statement":
            break
    return statements


def get_return_expression(declaration):
    statements = get_body_statements(declaration)
    if statements and statements[-1].type == "return_statement":
        returned = statements[-1].named_children
        returned = [n for n in returned if n.type != "comment"]
        return returned[0] if returned else None
    return None


def _walk_own_body(node):
    """Nodes of a function body, not descending into nested non-arrow functions."""
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        yield current
        if current.type in THIS_BOUNDARIES:
            continue
        stack.extend(reversed(current.children))


def is_inlineable_function(ctx: RefactorContext, declaration) -> bool:
    if declaration is None or declaration.type != "function_declaration":
        return False
    if any(child.type == "async" for child in declaration.children):
        return False
    if has_export_modifier(declaration):
        return False
    body = declaration.child_by_field_name("body")
    name = declaration.child_by_field_name("name")
    if body is None or name is None or get_parameters(declaration) is None:
        return False
    symbol = ctx.checker.symbol_of(name)
    if symbol is None or len(ctx.checker.declarations_of(symbol)) != 1:
        return False
    top_level = {node_key(s) for s in body.named_children}
    for node in _walk_own_body(body):
        if node.type == "this" or (node.type == "identifier" and node.text == b"arguments"):
            return False
        if node.type == "return_statement" and node_key(node) not in top_level:
            return False
        if node.type in ("yield_expression", "await_expression"):
            return False
    for node in iter_nodes(body, named_only=True):
        if node.type == "identifier" and ctx.checker.symbol_of(node) is symbol:
            return False
    return True


def is_eligible_call_site(ctx: RefactorContext, declaration, call) -> bool:
    """Whether the body can be hoisted in front of the statement holding ``call``."""
    returned = get_return_expression(declaration)
    statement = get_enclosing_statement(call)
    if statement is None or statement.parent is None or statement.parent.type not in STATEMENT_LIST_TYPES:
        return False
    if returned is None:
        if statement.type != "expression_statement":
            return False
        expression = unwrap_parentheses(statement.named_children[0]) if statement.named_child_count else None
        if expression is None or expression.start_byte != call.start_byte or expression.end_byte != call.end_byte:
            return False
    parameters = get_parameters(declaration)
    arguments = call.child_by_field_name("arguments")
    if arguments is None or arguments.type != "arguments":
        return False
    args = [a for a in arguments.named_children if a.type != "comment"]
    if len(args) > len(parameters) or any(a.type == "spread_element" for a in args):
        return False

    if any(c.type == "optional_chain" for c in call.children):
        return False
    child, current = call, call.parent
    while current is not None and node_key(current) != node_key(statement):
        if current.type in FUNCTION_TYPES or current.type == "class_body":
            return False
        if current.type == "binary_expression" and is_field(current, "right", child):
            operator = current.child_by_field_name("operator")
            if operator is not None and operator.type in SHORT_CIRCUIT_OPERATORS:
                return False
        if current.type == "ternary_expression" and not is_field(current, "condition", child):
            return False
        if any(c.type == "optional_chain" for c in current.children):
            return False
        if current.type in ("augmented_assignment_expression", "assignment_expression") \
                and is_field(current, "right", child):
            operator = current.child_by_field_name("operator")
            if operator is not None and operator.type in ("&&=", "||=", "??="):
                return False
        child, current = current, current.parent
    if statement.type in ("while_statement", "do_statement"):
        condition = statement.child_by_field_name("condition")
        if condition is not None and is_ancestor_of(condition, call):
            return False
    if statement.type == "for_statement":
        for field_name in ("condition", "increment"):
            part = statement.child_by_field_name(field_name)
            if part is not None and is_ancestor_of(part, call):
                return False
    if statement.type in ("lexical_declaration", "variable_declaration"):
        declarators = [d for d in statement.named_children if d.type == "variable_declarator"]
        if declarators and not is_ancestor_of(declarators[0], call):
            return False

    body = declaration.child_by_field_name("body")
    parameters_node = declaration.child_by_field_name("parameters")
    if not free_names_resolve_same(ctx.checker, body, call, owner=declaration):
        return False
    if parameters_node is not None and not free_names_resolve_same(ctx.checker, parameters_node, call,
                                                                   owner=declaration):
        return False
    return True


def get_function_info(ctx: RefactorContext) -> Optional[InlineFunctionInfo]:
    token = ctx.token_at_position()
    if token is None or token.type != "identifier":
        return None
    parent = token.parent
    if parent is not None and parent.type == "function_declaration" and is_field(parent, "name", token):
        return create_info(ctx, parent)
    call = get_call_expression(token)
    if call is None:
        return None
    symbol = ctx.checker.symbol_of(token)
    declaration = ctx.checker.declaration_of(symbol)
    if declaration is None or declaration.type != "function_declaration":
        return None
    return create_info(ctx, declaration, token)


def create_info(ctx: RefactorContext, declaration, token=None) -> Optional[InlineFunctionInfo]:
    if not is_inlineable_function(ctx, declaration):
        logger.debug("Function is not inlineable")
        return None
    symbol = ctx.checker.symbol_of(declaration.child_by_field_name("name"))
    references = find_references(ctx.checker.scope_node_of(symbol), symbol, ctx.checker)
    usages = []
    for reference in references:
        call = get_call_expression(reference)
        if call is None or is_write_target(reference) or not is_eligible_call_site(ctx, declaration, call):
            logger.debug(f"Reference to '{symbol.name}' at {reference.start_byte} cannot be inlined")
            return None
        usages.append(call)
    for call in usages:
        if any(other is not call and is_ancestor_of(call, other) for other in usages):
            logger.debug(f"Nested calls to '{symbol.name}' cannot be inlined")
            return None
    selected = None
    if token is not None:
        reference = find_selected_reference(references, token)
        if reference is not None:
            selected = get_call_expression(reference)
    return InlineFunctionInfo(declaration=declaration, usages=usages, selected_usage=selected)


def _block_containers(statement):
    current = statement.parent
    while current is not None:
        if current.type in STATEMENT_LIST_TYPES:
            yield _lexical_scope(current)
        current = current.parent



def _lexical_scope(container):
    """Scope a statement list declares into; case clauses share their switch body."""
    if container.type in ("switch_case", "switch_default") and container.parent is not None:
        return container.parent
    return container

def _assigned_in(ctx: RefactorContext, symbol, body) -> bool:
    return any(is_write_target(ref) and is_ancestor_of(body, ref) for ref in ctx.checker.references_to(symbol))


def inline_at(ctx: RefactorContext, tracker: ChangeTracker, declaration, call, state: InlineState) -> None:
    """Inline one call site."""
    checker = ctx.checker
    statement = get_enclosing_statement(call)
    scope = _lexical_scope(statement.parent)
    body = declaration.child_by_field_name("body")
    parameters = get_parameters(declaration)
    args = [a for a in call.child_by_field_name("arguments").named_children if a.type != "comment"]

    taken = {s.name for s in checker.visible_symbols(call)}
    taken |= identifier_texts(scope, exclude=declaration)
    for block in _block_containers(statement):
        taken |= state.introduced.get(node_key(block), set())
    taken |= state.generated

    function_scope = checker.graph.scope_at(body)
    locals_ = []
    for node in iter_nodes(body, named_only=True):
        symbol = checker.symbol_of(node) if checker.is_declaration_name(node) else None
        if symbol is None:
            continue
        if symbol.scope_id == function_scope and symbol not in locals_:
            locals_.append(symbol)

    rename_map = {}
    chosen_names = {}
    introduced = state.introduced.setdefault(node_key(scope), set())
    for symbol in [checker.symbol_of(p) for p, _ in parameters] + locals_:
        name = symbol.name
        if name in taken:
            name = get_unique_name(symbol.name, state.file_names | taken)
            rename_map[symbol] = name
            state.generated.add(name)
        chosen_names[symbol] = name
        introduced.add(name)

    payloads = []
    for index, (name_node, default) in enumerate(parameters):
        symbol = checker.symbol_of(name_node)
        if index < len(args):
            value = clone_node(args[index], ctx.source)
        elif default is not None:
            value = clone_with_renames(default, ctx.source, checker, rename_map)
        else:
            value = create_identifier("undefined")
        keyword = "let" if _assigned_in(ctx, symbol, body) else "const"
        payloads.append(create_variable_statement(chosen_names[symbol], value, keyword))

    returned = get_return_expression(declaration)
    for body_statement in get_body_statements(declaration):
        if body_statement.type != "return_statement":
            payloads.append(clone_with_renames(body_statement, ctx.source, checker, rename_map))

    if returned is None:
        if payloads:
            tracker.replace_node_with_nodes(ctx, statement, payloads)
        else:
            tracker.delete_statement(ctx, statement)
        return
    tracker.insert_nodes_before(ctx, statement, payloads)
    expression = clone_with_renames(returned, ctx.source, checker, rename_map)
    tracker.replace_node(ctx, call, parenthesize_if_needed(call, expression))


class InlineFunctionRefactor:
    """Inline a local function into its call sites."""

    meta = RefactorMeta(
        name=REFACTOR_NAME,
        description=get_locale_specific_message(Diagnostics.Inline_function),
    )

    def get_available_actions(self, ctx: RefactorContext) -> List[ApplicableRefactorInfo]:
        info = get_function_info(ctx)
        if info is None:
            return []
        actions = [RefactorActionInfo(INLINE_ALL, get_locale_specific_message(Diagnostics.Inline_all))]
        if info.selected_usage is not None:
            actions.append(RefactorActionInfo(INLINE_HERE, get_locale_specific_message(Diagnostics.Inline_here)))
        return [ApplicableRefactorInfo(name=REFACTOR_NAME, description=self.meta.description, actions=actions)]

    def get_edits_for_action(self, ctx: RefactorContext, action_name: str) -> Optional[RefactorEditInfo]:
        if action_name not in (INLINE_ALL, INLINE_HERE):
            raise InvalidActionError(action_name, f"not an action of '{REFACTOR_NAME}'")
        info = get_function_info(ctx)
        if info is None:
            return None
        state = InlineState(file_names=identifier_texts(ctx.root))

        if action_name == INLINE_ALL:
            def inline_all(tracker: ChangeTracker) -> None:
                for call in info.usages:
                    inline_at(ctx, tracker, info.declaration, call, state)
                tracker.delete_statement(ctx, info.declaration)
            return RefactorEditInfo(edits=ChangeTracker.with_(ctx, inline_all))

        if info.selected_usage is None:
            return None

        def inline_here(tracker: ChangeTracker) -> None:
            inline_at(ctx, tracker, info.declaration, info.selected_usage, state)
            if len(info.usages) == 1:
                tracker.delete_statement(ctx, info.declaration)
        return RefactorEditInfo(edits=ChangeTracker.with_(ctx, inline_here))


REFACTORS = [InlineFunctionRefactor()]
