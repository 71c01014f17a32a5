"""
Message catalog for diagnostics, refactor and code-fix descriptions.

Messages use ``{0}``-style placeholders filled by ``format_message``.
"""

import re
from dataclasses import dataclass
from typing import Dict

from .types import DiagnosticCategory


@dataclass(frozen=True)
class DiagnosticMessage:
    code: int
    category: DiagnosticCategory
    key: str
    message: str


def _diag(code: int, category: DiagnosticCategory, key: str, message: str) -> DiagnosticMessage:
    return DiagnosticMessage(code=code, category=category, key=key, message=message)


class Diagnostics:
    """Catalog entries, addressed by attribute (``Diagnostics.Inline_all``)."""

    Cannot_find_name_0 = _diag(
        2304, "error", "Cannot_find_name_0_2304", "Cannot find name '{0}'.")
    Type_0_is_not_assignable_to_type_1 = _diag(
        2322, "error", "Type_0_is_not_assignable_to_type_1_2322", "Type '{0}' is not assignable to type '{1}'.")
    Property_0_does_not_exist_on_type_1_Did_you_mean_2 = _diag(
        2551, "error", "Property_0_does_not_exist_on_type_1_Did_you_mean_2_2551",
        "Property '{0}' does not exist on type '{1}'. Did you mean '{2}'?")
    Cannot_find_name_0_Did_you_mean_1 = _diag(
        2552, "error", "Cannot_find_name_0_Did_you_mean_1_2552", "Cannot find name '{0}'. Did you mean '{1}'?")

    Change_spelling_to_0 = _diag(
        90022, "message", "Change_spelling_to_0_90022", "Change spelling to '{0}'")
    Fix_all_detected_spelling_errors = _diag(
        90023, "message", "Fix_all_detected_spelling_errors_90023", "Fix all detected spelling errors")
    Implement_interface_0 = _diag(
        90006, "message", "Implement_interface_0_90006", "Implement interface '{0}'")
    Implement_all_unimplemented_interfaces = _diag(
        95032, "message", "Implement_all_unimplemented_interfaces_95032", "Implement all unimplemented interfaces")

    Inline_local = _diag(95150, "message", "Inline_local_95150", "Inline local")
    Inline_function = _diag(95151, "message", "Inline_function_95151", "Inline function")
    Inline_all = _diag(95152, "message", "Inline_all_95152", "Inline all")
    Inline_here = _diag(95153, "message", "Inline_here_95153", "Inline here")
    Convert_string_concatenation_or_template_literal = _diag(
        95154, "message", "Convert_string_concatenation_or_template_literal_95154",
        "Convert string concatenation or template literal")
    Convert_to_template_literal = _diag(
        95155, "message", "Convert_to_template_literal_95155", "Convert to template literal")
    Convert_to_string_concatenation = _diag(
        95156, "message", "Convert_to_string_concatenation_95156", "Convert to string concatenation")


def all_messages() -> Dict[int, DiagnosticMessage]:
    """All catalog entries indexed by code."""
    return {
        value.code: value
        for value in vars(Diagnostics).values()
        if isinstance(value, DiagnosticMessage)
    }


_PLACEHOLDER = re.compile(r"\{(\d+)\}")


def format_message(message, *args) -> str:
    """Fill ``{0}``-style placeholders; accepts an entry or its raw text."""
    text = message.message if isinstance(message, DiagnosticMessage) else message

    def substitute(match):
        index = int(match.group(1))
        return str(args[index]) if index < len(args) else match.group(0)

    return _PLACEHOLDER.sub(substitute, text)


def get_locale_specific_message(message: DiagnosticMessage) -> str:
    return message.message
