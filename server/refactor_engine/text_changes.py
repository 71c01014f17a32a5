"""
Edit ledger: records structural edits against the original source and renders
them into new text.

A ``ChangeTracker`` is created per request and never shared. The tree is never
touched; every operation appends an ``Edit`` keyed by file name. Rendering
splices edits in ascending range order and fails with ``OverlapError`` when two
recorded ranges intersect.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .ast_utils import indentation_at, line_end, line_start, starts_line
from .errors import OverlapError
from .types import Edit, EditMode, FileTextChanges

logger = logging.getLogger(__name__)

Payload = Union[str, Any]


def payload_text(payload: Payload) -> str:
    """Text of a payload: either a plain string or a synthetic node."""
    if isinstance(payload, str):
        return payload
    return payload.text


def reindent(text: str, indentation: str, new_line: str = "\n") -> str:
    """Prefix every line after the first with ``indentation``."""
    lines = text.split("\n")
    if len(lines) == 1:
        return text
    rest = [indentation + line if line.strip() else line for line in lines[1:]]
    return new_line.join([lines[0]] + rest)


def sort_edits(edits: Sequence[Edit]) -> List[Edit]:
    """Ascending range order; inserts at a position precede replacements there."""
    return sorted(edits, key=lambda e: (e.start_byte, 0 if e.start_byte == e.end_byte else 1))


def check_overlaps(edits: Sequence[Edit]) -> List[Edit]:
    """Sort edits and raise ``OverlapError`` if any two ranges intersect."""
    ordered = sort_edits(edits)
    previous: Optional[Edit] = None
    for edit in ordered:
        if previous is not None and edit.start_byte < previous.end_byte:
            logger.error(f"Edit ledger overlap: {previous.range} and {edit.range}")
            raise OverlapError(previous.range, edit.range)
        if previous is None or edit.end_byte >= previous.end_byte:
            previous = edit
    return ordered


def apply_changes(text: str, edits: Sequence[Edit]) -> str:
    """Render ``edits`` against ``text`` and return the new text."""
    source = text.encode("utf-8")
    pieces: List[bytes] = []
    cursor = 0
    for edit in check_overlaps(edits):
        pieces.append(source[cursor:edit.start_byte])
        pieces.append(edit.replacement.encode("utf-8"))
        cursor = max(cursor, edit.end_byte)
    pieces.append(source[cursor:])
    return b"".join(pieces).decode("utf-8")


def apply_file_changes(text: str, file_changes: Sequence[FileTextChanges], file_name: Optional[str] = None) -> str:
    """Apply every change set belonging to ``file_name`` (or all of them)."""
    edits: List[Edit] = []
    for changes in file_changes:
        if file_name is None or changes.file_name == file_name:
            edits.extend(changes.text_changes)
    return apply_changes(text, edits)


class ChangeTracker:
    """Accumulates edits for one request.

    Every method takes a ``source_file``: any object exposing ``file_path``
    and the UTF-8 ``source`` bytes (a ``RefactorContext`` qualifies).
    """

    def __init__(self, new_line: str = "\n", indent_size: int = 4):
        self.new_line = new_line
        self.indent_size = indent_size
        self._edits: Dict[str, List[Edit]] = {}

    @classmethod
    def from_context(cls, context) -> "ChangeTracker":
        config = getattr(context, "config", None)
        if config is None:
            return cls()
        return cls(new_line=config.new_line, indent_size=config.indent_size)

    @classmethod
    def with_(cls, context, callback: Callable[["ChangeTracker"], None]) -> List[FileTextChanges]:
        """Run ``callback`` against a fresh tracker and return its changes."""
        tracker = cls.from_context(context)
        callback(tracker)
        return tracker.get_changes()

    # === Recording ===

    def record(self, source_file, start_byte: int, end_byte: int, mode: EditMode, payload: Payload = "") -> Edit:
        edit = Edit(start_byte=start_byte, end_byte=end_byte, replacement=payload_text(payload), mode=mode)
        self._edits.setdefault(source_file.file_path, []).append(edit)
        return edit

    def replace_range(self, source_file, start_byte: int, end_byte: int, payload: Payload) -> None:
        self.record(source_file, start_byte, end_byte, "replace", payload)

    def replace_node(self, source_file, node, payload: Payload) -> None:
        self.record(source_file, node.start_byte, node.end_byte, "replace", payload)

    def replace_node_with_nodes(self, source_file, node, payloads: Sequence[Payload]) -> None:
        """Replace a statement with several statements, one per line."""
        indentation = indentation_at(source_file.source, node.start_byte)
        separator = self.new_line + indentation
        text = separator.join(reindent(payload_text(p), indentation, self.new_line) for p in payloads)
        self.replace_node(source_file, node, text)

    def insert_text(self, source_file, position: int, text: str) -> None:
        self.record(source_file, position, position, "insert-before", text)

    def insert_node_before(self, source_file, before, payload: Payload) -> None:
        self.insert_nodes_before(source_file, before, [payload])

    def insert_nodes_before(self, source_file, before, payloads: Sequence[Payload]) -> None:
        """Insert statements ahead of ``before``, matching its indentation."""
        if not payloads:
            return
        source = source_file.source
        if starts_line(source, before.start_byte):
            indentation = indentation_at(source, before.start_byte)
            suffix = self.new_line + indentation
            text = "".join(reindent(payload_text(p), indentation, self.new_line) + suffix for p in payloads)
        else:
            text = "".join(payload_text(p) + " " for p in payloads)
        self.insert_text(source_file, before.start_byte, text)

    def insert_nodes_at_object_start(self, source_file, obj, payloads: Sequence[Payload]) -> None:
        """Insert members right after the opening brace of an object literal."""
        if not payloads:
            return
        source = source_file.source
        base = indentation_at(source, obj.start_byte)
        inner = base + " " * self.indent_size
        members = "".join(
            self.new_line + inner + reindent(payload_text(p), inner, self.new_line) + ","
            for p in payloads
        )
        if obj.named_child_count == 0:
            self.replace_node(source_file, obj, "{" + members + self.new_line + base + "}")
        else:
            self.insert_text(source_file, obj.start_byte + 1, members)

    def delete_range(self, source_file, start_byte: int, end_byte: int) -> None:
        self.record(source_file, start_byte, end_byte, "delete")

    def delete_node(self, source_file, node) -> None:
        self.delete_range(source_file, node.start_byte, node.end_byte)

    def delete_statement(self, source_file, node) -> None:
        """Delete a statement, swallowing its whole line when it owns it."""
        source = source_file.source
        start, end = node.start_byte, node.end_byte
        rest_start = end
        rest_end = line_end(source, end)
        if starts_line(source, start) and source[rest_start:rest_end].strip() == b"":
            start = line_start(source, start)
            end = min(rest_end + 1, len(source))
        else:
            while end < len(source) and source[end:end + 1] in (b" ", b"\t"):
                end += 1
        self.delete_range(source_file, start, end)

    def delete_declaration(self, source_file, declarator) -> None:
        """Delete one declarator, or its whole statement if it is the only one."""
        declaration = declarator.parent
        siblings = [c for c in declaration.named_children if c.type == "variable_declarator"]
        if len(siblings) <= 1:
            self.delete_statement(source_file, declaration)
            return
        index = next(i for i, s in enumerate(siblings) if s.start_byte == declarator.start_byte)
        if index + 1 < len(siblings):
            self.delete_range(source_file, declarator.start_byte, siblings[index + 1].start_byte)
        else:
            self.delete_range(source_file, siblings[index - 1].end_byte, declarator.end_byte)

    # === Output ===

    def has_changes(self) -> bool:
        return any(self._edits.values())

    def get_changes(self) -> List[FileTextChanges]:
        """Change sets per file, edits in ascending range order."""
        return [
            FileTextChanges(file_name=name, text_changes=check_overlaps(edits))
            for name, edits in self._edits.items()
            if edits
        ]

    def render(self, file_name: str, text: str) -> str:
        """Apply the edits recorded for ``file_name`` to ``text``."""
        return apply_changes(text, self._edits.get(file_name, []))
