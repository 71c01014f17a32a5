"""
Tests for the edit ledger.
"""

import pytest

from refactor_engine.errors import OverlapError
from refactor_engine.service import RefactorService
from refactor_engine.text_changes import ChangeTracker, apply_changes, apply_file_changes, reindent
from refactor_engine.types import Edit, FileTextChanges


class TestApplyChanges:
    """Rendering edits against source text."""

    def test_edits_apply_in_range_order(self):
        """Edits recorded out of order still render left to right."""
        text = "let a = 1; let b = 2;"
        edits = [
            Edit(start_byte=19, end_byte=20, replacement="20"),
            Edit(start_byte=8, end_byte=9, replacement="10"),
        ]
        assert apply_changes(text, edits) == "let a = 10; let b = 20;"

    def test_insert_precedes_replacement_at_same_position(self):
        """An insertion and a replacement that start together keep insert first."""
        text = "foo();"
        edits = [
            Edit(start_byte=0, end_byte=5, replacement="bar()"),
            Edit(start_byte=0, end_byte=0, replacement="x; ", mode="insert-before"),
        ]
        assert apply_changes(text, edits) == "x; bar();"

    def test_overlapping_edits_raise(self):
        """Intersecting ranges are a hard failure."""
        edits = [
            Edit(start_byte=0, end_byte=5, replacement="a"),
            Edit(start_byte=3, end_byte=8, replacement="b"),
        ]
        with pytest.raises(OverlapError) as exc_info:
            apply_changes("0123456789", edits)
        assert exc_info.value.first == (0, 5)
        assert exc_info.value.second == (3, 8)

    def test_adjacent_edits_do_not_overlap(self):
        """Touching ranges are fine."""
        edits = [
            Edit(start_byte=0, end_byte=2, replacement="ab"),
            Edit(start_byte=2, end_byte=4, replacement="cd"),
        ]
        assert apply_changes("0123", edits) == "abcd"

    def test_multibyte_offsets_are_bytes(self):
        """Offsets count UTF-8 bytes, not characters."""
        text = 'const s = "é"; x;'
        start = len('const s = "é"; '.encode("utf-8"))
        edits = [Edit(start_byte=start, end_byte=start + 1, replacement="y")]
        assert apply_changes(text, edits) == 'const s = "é"; y;'

    def test_apply_file_changes_filters_by_file(self):
        """Only change sets for the requested file are applied."""
        changes = [
            FileTextChanges(file_name="a.ts", text_changes=[Edit(0, 1, "A")]),
            FileTextChanges(file_name="b.ts", text_changes=[Edit(1, 2, "B")]),
        ]
        assert apply_file_changes("xy", changes, "a.ts") == "Ay"
        assert apply_file_changes("xy", changes) == "AB"

    def test_reindent(self):
        """Every continuation line gains the indentation; blank lines stay blank."""
        assert reindent("a\nb\n\nc", "  ") == "a\n  b\n\n  c"


class TestChangeTracker:
    """Structural edit operations on a parsed file."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = RefactorService()

    def _context(self, text):
        return self.service.create_context("test.js", text)

    def test_delete_statement_removes_its_line(self):
        """A statement alone on its line takes the line with it."""
        text = "const a = 1;\nconst b = 2;\nuse(b);\n"
        ctx = self._context(text)
        statement = ctx.root.named_children[0]
        changes = ChangeTracker.with_(ctx, lambda t: t.delete_statement(ctx, statement))
        assert apply_file_changes(text, changes) == "const b = 2;\nuse(b);\n"

    def test_delete_declaration_keeps_siblings(self):
        """Deleting one declarator of several keeps the statement."""
        text = "let a = 1, b = 2;\n"
        ctx = self._context(text)
        declarators = [c for c in ctx.root.named_children[0].named_children if c.type == "variable_declarator"]
        changes = ChangeTracker.with_(ctx, lambda t: t.delete_declaration(ctx, declarators[0]))
        assert apply_file_changes(text, changes) == "let b = 2;\n"

        changes = ChangeTracker.with_(ctx, lambda t: t.delete_declaration(ctx, declarators[1]))
        assert apply_file_changes(text, changes) == "let a = 1;\n"

    def test_insert_nodes_before_matches_indentation(self):
        """Inserted statements line up with the statement they precede."""
        text = "function f() {\n    g();\n}\n"
        ctx = self._context(text)
        body = ctx.root.named_children[0].child_by_field_name("body")
        statement = body.named_children[0]
        changes = ChangeTracker.with_(ctx, lambda t: t.insert_nodes_before(ctx, statement, ["a();", "b();"]))
        assert apply_file_changes(text, changes) == "function f() {\n    a();\n    b();\n    g();\n}\n"

    def test_insert_at_empty_object_start(self):
        """Members inserted into an empty literal produce a multi-line object."""
        text = "let o = { };\n"
        ctx = self._context(text)
        obj = ctx.root.named_children[0].named_children[0].child_by_field_name("value")
        changes = ChangeTracker.with_(ctx, lambda t: t.insert_nodes_at_object_start(ctx, obj, ["x: 1"]))
        assert apply_file_changes(text, changes) == "let o = {\n    x: 1,\n};\n"

    def test_changes_are_grouped_per_file(self):
        """get_changes returns one change set for the context's file."""
        ctx = self._context("a;")
        tracker = ChangeTracker.from_context(ctx)
        assert not tracker.has_changes()
        tracker.replace_range(ctx, 0, 1, "b")
        changes = tracker.get_changes()
        assert len(changes) == 1
        assert changes[0].file_name == "test.js"
        assert tracker.render("test.js", "a;") == "b;"

    def test_render_twice_gives_same_text(self):
        """Rendering reads the ledger without consuming or reordering it."""
        text = "let a = 1;\nlet b = 2;\n"
        ctx = self._context(text)
        tracker = ChangeTracker.from_context(ctx)
        tracker.replace_range(ctx, text.index("2"), text.index("2") + 1, "20")
        tracker.insert_text(ctx, 0, "// head\n")
        tracker.delete_range(ctx, text.index(" = 1"), text.index(";"))
        first = tracker.render("test.js", text)
        assert first == "// head\nlet a;\nlet b = 20;\n"
        assert tracker.render("test.js", text) == first
        assert apply_file_changes(text, tracker.get_changes()) == first
