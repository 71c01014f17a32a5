"""
Code fix: Change spelling

Responds to "Cannot find name 'x'. Did you mean 'y'?" and "Property 'x' does
not exist on type 'T'. Did you mean 'y'?" by replacing the misspelled name
with the checker's suggestion.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from refactor_engine.diagnostic_messages import Diagnostics, format_message, get_locale_specific_message
from refactor_engine.factory import SyntheticNode, clone_node, create_identifier, create_string_literal
from refactor_engine.text_changes import ChangeTracker
from refactor_engine.types import CodeFixAction, CodeFixContext, CodeFixMeta, CombinedCodeActions

logger = logging.getLogger(__name__)

FIX_ID = "fixSpelling"
ERROR_CODES = [
    Diagnostics.Cannot_find_name_0_Did_you_mean_1.code,
    Diagnostics.Property_0_does_not_exist_on_type_1_Did_you_mean_2.code,
]

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")


@dataclass(frozen=True)
class SpellingInfo:
    node: object
    suggestion: str


def is_identifier_text(text: str) -> bool:
    return bool(_IDENTIFIER.match(text))


def _is_property_name(node) -> bool:
    parent = node.parent
    if parent is None or parent.type != "member_expression":
        return False
    prop = parent.child_by_field_name("property")
    return prop is not None and prop.start_byte == node.start_byte


def get_info(ctx: CodeFixContext, position: int) -> Optional[SpellingInfo]:
    # The misspelled word, e.g.
    #   this.speling = 1;
    #        ^^^^^^^
    node = ctx.token_at_position(position)
    if node is None:
        return None
    checker = ctx.checker
    if _is_property_name(node):
        suggestion = checker.get_suggestion_for_nonexistent_property(node)
    else:
        ref = checker.graph.ref_for(node)
        meaning = ref.meaning if ref is not None else "value"
        suggestion = checker.get_suggestion_for_nonexistent_symbol(node, meaning)
    if suggestion is None:
        return None
    return SpellingInfo(node=node, suggestion=suggestion)


def do_change(tracker: ChangeTracker, ctx: CodeFixContext, info: SpellingInfo) -> None:
    node = info.node
    if not is_identifier_text(info.suggestion) and _is_property_name(node):
        member = node.parent
        obj = clone_node(member.child_by_field_name("object"), ctx.source)
        literal = create_string_literal(info.suggestion)
        tracker.replace_node(ctx, member, SyntheticNode(type="subscript_expression",
                                                         text=f"{obj.text}[{literal.text}]"))
    else:
        tracker.replace_node(ctx, node, create_identifier(info.suggestion))


class FixSpelling:
    """Replace a misspelled name with the closest known one."""

    meta = CodeFixMeta(
        fix_id=FIX_ID,
        error_codes=ERROR_CODES,
        description=get_locale_specific_message(Diagnostics.Fix_all_detected_spelling_errors),
    )

    def get_code_actions(self, ctx: CodeFixContext) -> List[CodeFixAction]:
        info = get_info(ctx, ctx.start_position)
        if info is None:
            return []
        changes = ChangeTracker.with_(ctx, lambda t: do_change(t, ctx, info))
        return [CodeFixAction(
            fix_name="spelling",
            description=format_message(Diagnostics.Change_spelling_to_0, info.suggestion),
            changes=changes,
            fix_id=FIX_ID,
            fix_all_description=self.meta.description,
        )]

    def get_all_code_actions(self, ctx: CodeFixContext) -> CombinedCodeActions:
        def fix_all(tracker: ChangeTracker) -> None:
            for diagnostic in ctx.checker.get_diagnostics():
                if diagnostic.code not in ERROR_CODES:
                    continue
                info = get_info(ctx, diagnostic.start_byte)
                if info is not None:
                    do_change(tracker, ctx, info)
                else:
                    logger.debug(f"No spelling suggestion at {diagnostic.start_byte}")
        return CombinedCodeActions(changes=ChangeTracker.with_(ctx, fix_all))


CODE_FIXES = [FixSpelling()]
