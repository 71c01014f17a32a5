"""
Code fix: Implement interface

For ``let n: I = { ... }`` where the object literal lacks required members of
the local interface (or object type) ``I``, inserts each missing member at the
start of the literal with a default value derived from its declared type.
"""

import logging
from typing import List, Optional

from refactor_engine.diagnostic_messages import Diagnostics, format_message, get_locale_specific_message
from refactor_engine.factory import (SyntheticNode, create_array_literal, create_literal, create_new_expression,
                                     create_object_literal, create_property_assignment)
from refactor_engine.scopes import is_optional_member, is_private_member
from refactor_engine.text_changes import ChangeTracker
from refactor_engine.types import CodeFixAction, CodeFixContext, CodeFixMeta, CombinedCodeActions

logger = logging.getLogger(__name__)

FIX_ID = "fixObjectLiteralIncorrectlyImplementsInterface"
ERROR_CODES = [Diagnostics.Type_0_is_not_assignable_to_type_1.code]

PREDEFINED_DEFAULTS = {
    "any": ('""', "string"),
    "string": ('""', "string"),
    "number": ("0", "number"),
    "bigint": ("0n", "number"),
    "boolean": ("false", "false"),
}

METHOD_STUB_BODY = 'throw new Error("Method not implemented.");'

MAX_DEPTH = 8


def get_declarator(ctx: CodeFixContext, position: int):
    token = ctx.token_at_position(position)
    parent = token.parent if token is not None else None
    if parent is None or parent.type != "variable_declarator":
        return None
    value = parent.child_by_field_name("value")
    if parent.child_by_field_name("type") is None or value is None or value.type != "object":
        return None
    return parent


def _unwrap_type(type_node):
    """Drop annotations, parentheses and all but the first union member."""
    while type_node is not None:
        if type_node.type in ("type_annotation", "parenthesized_type", "union_type"):
            type_node = type_node.named_children[0] if type_node.named_child_count else None
        else:
            return type_node
    return None


def _member_type(member):
    annotation = member.child_by_field_name("type")
    return _unwrap_type(annotation)


def default_value(ctx: CodeFixContext, type_node, depth: int = 0) -> Optional[SyntheticNode]:
    """Placeholder expression for a value of ``type_node``; None when unknown."""
    type_node = _unwrap_type(type_node)
    if type_node is None or depth > MAX_DEPTH:
        return None
    kind = type_node.type
    if kind == "predefined_type":
        default = PREDEFINED_DEFAULTS.get(ctx.node_text(type_node))
        return create_literal(*default) if default is not None else None
    if kind == "literal_type" and ctx.node_text(type_node) == "null":
        return create_literal("null", "null")
    if kind == "array_type":
        return create_array_literal()
    if kind == "tuple_type":
        elements = []
        for element in type_node.named_children:
            value = default_value(ctx, element, depth + 1)
            if value is None:
                return None
            elements.append(value)
        return create_array_literal(elements)
    if kind == "object_type":
        return create_object_literal(new_members(ctx, ctx.checker.get_properties_of_type(type_node), depth + 1))
    if kind == "generic_type":
        name = type_node.child_by_field_name("name")
        if name is not None and ctx.node_text(name) in ("Array", "ReadonlyArray"):
            return create_array_literal()
    if kind in ("type_identifier", "generic_type"):
        resolved = ctx.checker.resolve_type(type_node)
        if resolved is None:
            return None
        if resolved.type == "class_declaration":
            return create_new_expression(ctx.node_text(resolved.child_by_field_name("name")))
        if resolved.type == "interface_declaration":
            members = ctx.checker.get_properties_of_type(type_node)
            if members is None:
                return None
            return create_object_literal(new_members(ctx, members, depth + 1))
        if resolved.type in ("type_identifier", "generic_type"):
            return None
        return default_value(ctx, resolved, depth + 1)
    return None


def method_stub(ctx: CodeFixContext, name: str, parameters, return_type) -> SyntheticNode:
    params = ctx.node_text(parameters) if parameters is not None else "()"
    signature = f"{name}{params}"
    if return_type is not None:
        if return_type.type == "type_annotation" and return_type.named_child_count:
            return_type = return_type.named_children[0]
        signature += ": " + ctx.node_text(return_type)
    return SyntheticNode(type="method_definition", text=f"{signature} {{\n    {METHOD_STUB_BODY}\n}}")


def new_member(ctx: CodeFixContext, member, depth: int = 0) -> Optional[SyntheticNode]:
    name = ctx.node_text(member.child_by_field_name("name"))
    if member.type in ("method_signature", "abstract_method_signature", "method_definition"):
        return method_stub(ctx, name, member.child_by_field_name("parameters"),
                           member.child_by_field_name("return_type"))
    member_type = _member_type(member)
    if member_type is not None and member_type.type == "function_type":
        return method_stub(ctx, name, member_type.child_by_field_name("parameters"),
                           member_type.child_by_field_name("return_type"))
    value = default_value(ctx, member_type, depth)
    if value is None:
        logger.debug(f"No default value for member '{name}'")
        return None
    return create_property_assignment(name, value)


def new_members(ctx: CodeFixContext, members, depth: int = 0) -> List[SyntheticNode]:
    created = []
    for member in members or []:
        if is_optional_member(member) or is_private_member(member):
            continue
        node = new_member(ctx, member, depth)
        if node is not None:
            created.append(node)
    return created


def do_change(tracker: ChangeTracker, ctx: CodeFixContext, declarator) -> bool:
    missing = ctx.checker.missing_required_members(declarator)
    if not missing:
        return False
    members = new_members(ctx, missing)
    tracker.insert_nodes_at_object_start(ctx, declarator.child_by_field_name("value"), members)
    return bool(members)


class FixObjectLiteralImplementsInterface:
    """Fill an object literal with the members its declared interface requires."""

    meta = CodeFixMeta(
        fix_id=FIX_ID,
        error_codes=ERROR_CODES,
        description=get_locale_specific_message(Diagnostics.Implement_all_unimplemented_interfaces),
        langs=["typescript"],
    )

    def get_code_actions(self, ctx: CodeFixContext) -> List[CodeFixAction]:
        declarator = get_declarator(ctx, ctx.start_position)
        if declarator is None:
            return []
        tracker = ChangeTracker.from_context(ctx)
        if not do_change(tracker, ctx, declarator):
            return []
        type_annotation = _unwrap_type(declarator.child_by_field_name("type"))
        return [CodeFixAction(
            fix_name=FIX_ID,
            description=format_message(Diagnostics.Implement_interface_0, ctx.node_text(type_annotation)),
            changes=tracker.get_changes(),
            fix_id=FIX_ID,
            fix_all_description=self.meta.description,
        )]

    def get_all_code_actions(self, ctx: CodeFixContext) -> CombinedCodeActions:
        def fix_all(tracker: ChangeTracker) -> None:
            for diagnostic in ctx.checker.get_diagnostics():
                if diagnostic.code not in ERROR_CODES:
                    continue
                declarator = get_declarator(ctx, diagnostic.start_byte)
                if declarator is not None:
                    do_change(tracker, ctx, declarator)
        return CombinedCodeActions(changes=ChangeTracker.with_(ctx, fix_all))


CODE_FIXES = [FixObjectLiteralImplementsInterface()]
