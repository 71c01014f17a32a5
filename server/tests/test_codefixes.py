"""
Tests for the spelling and implement-interface code fixes.
"""

from refactor_engine.service import RefactorService
from codefixes.fix_object_literal_implements_interface import FIX_ID as INTERFACE_FIX_ID
from codefixes.fix_spelling import FIX_ID as SPELLING_FIX_ID, is_identifier_text


class TestFixSpelling:
    """Change spelling to the checker's suggestion."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = RefactorService()

    def _fix(self, text, file_name="test.js"):
        diagnostics = self.service.get_diagnostics(file_name, text)
        assert len(diagnostics) == 1
        diagnostic = diagnostics[0]
        actions = self.service.get_code_fixes(
            file_name, text, diagnostic.start_byte, diagnostic.length, diagnostic.code)
        assert len(actions) == 1
        return actions[0]

    def _render(self, text, action, file_name="test.js"):
        from refactor_engine.text_changes import apply_file_changes
        return apply_file_changes(text, action.changes, file_name)

    def test_misspelled_local(self):
        text = "const value = 1;\nconsole.log(valeu);\n"
        action = self._fix(text)
        assert action.description == "Change spelling to 'value'"
        assert action.fix_id == SPELLING_FIX_ID
        assert self._render(text, action) == "const value = 1;\nconsole.log(value);\n"

    def test_misspelled_property(self):
        text = 'const user = { name: "a", email: "b" };\nuser.emial;\n'
        action = self._fix(text)
        assert self._render(text, action) == 'const user = { name: "a", email: "b" };\nuser.email;\n'

    def test_misspelled_class_member(self):
        """this.speling inside a class suggests the declared field."""
        text = "class A {\n    spelling = 1;\n    m() {\n        return this.speling;\n    }\n}\n"
        action = self._fix(text)
        assert "this.spelling;" in self._render(text, action)

    def test_misspelled_type_name(self):
        text = "interface Point {}\nlet p: Pointt;\n"
        action = self._fix(text, "test.ts")
        assert self._render(text, action, "test.ts") == "interface Point {}\nlet p: Point;\n"

    def test_no_fix_without_suggestion(self):
        text = "zzqqzzqq();\n"
        assert self.service.get_code_fixes("test.js", text, 0, 8, 2304) == []

    def test_fix_all(self):
        """Every spelling diagnostic in the file is fixed at once."""
        text = "const value = 1;\nconsole.log(valeu, valeu);\n"
        combined, new_text = self.service.fix_all("test.js", text, SPELLING_FIX_ID)
        assert len(combined.changes) == 1
        assert len(combined.changes[0].text_changes) == 2
        assert new_text == "const value = 1;\nconsole.log(value, value);\n"

    def test_identifier_text(self):
        assert is_identifier_text("value")
        assert is_identifier_text("$el")
        assert not is_identifier_text("data-id")
        assert not is_identifier_text("1st")


class TestFixObjectLiteralImplementsInterface:
    """Fill object literals with the members their interface requires."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = RefactorService()

    def _fix(self, text):
        diagnostics = [d for d in self.service.get_diagnostics("test.ts", text) if d.code == 2322]
        assert len(diagnostics) == 1
        diagnostic = diagnostics[0]
        actions = self.service.get_code_fixes(
            "test.ts", text, diagnostic.start_byte, diagnostic.length, diagnostic.code)
        assert len(actions) == 1
        return actions[0]

    def _render(self, text, action):
        from refactor_engine.text_changes import apply_file_changes
        return apply_file_changes(text, action.changes, "test.ts")

    def test_primitive_members_into_empty_literal(self):
        text = "interface Point {\n    x: number;\n    y: number;\n}\nlet p: Point = {};\n"
        action = self._fix(text)
        assert action.description == "Implement interface 'Point'"
        assert self._render(text, action).endswith("let p: Point = {\n    x: 0,\n    y: 0,\n};\n")

    def test_only_missing_members_are_added(self):
        text = "interface Point {\n    x: number;\n    y: number;\n}\nlet p: Point = { x: 1 };\n"
        action = self._fix(text)
        assert self._render(text, action).endswith("let p: Point = {\n    y: 0, x: 1 };\n")

    def test_tuple_through_type_alias(self):
        text = (
            "type T = [number, boolean, string];\n"
            "interface foo {\n"
            "    x: T;\n"
            "}\n"
            "let n: foo = {};\n"
        )
        action = self._fix(text)
        assert action.description == "Implement interface 'foo'"
        assert self._render(text, action).endswith('let n: foo = {\n    x: [0, false, ""],\n};\n')

    def test_method_signature_gets_stub(self):
        text = "interface Greeter {\n    greet(name: string): string;\n}\nlet g: Greeter = {};\n"
        action = self._fix(text)
        assert self._render(text, action).endswith(
            "let g: Greeter = {\n"
            "    greet(name: string): string {\n"
            '        throw new Error("Method not implemented.");\n'
            "    },\n"
            "};\n"
        )

    def test_nested_types_and_optional_members(self):
        """Arrays, classes and nested interfaces get defaults; optional members are skipped."""
        text = (
            "class Box {}\n"
            "interface Inner {\n"
            "    flag: boolean;\n"
            "}\n"
            "interface Outer {\n"
            "    items: string[];\n"
            "    box: Box;\n"
            "    inner: Inner;\n"
            "    note?: string;\n"
            "}\n"
            "let o: Outer = {};\n"
        )
        action = self._fix(text)
        assert self._render(text, action).endswith(
            "let o: Outer = {\n"
            "    items: [],\n"
            "    box: new Box(),\n"
            "    inner: {\n"
            "        flag: false,\n"
            "    },\n"
            "};\n"
        )

    def test_not_offered_for_javascript(self):
        text = "let p = {};\n"
        assert self.service.get_code_fixes("test.js", text, 4, 1, 2322) == []

    def test_fix_all(self):
        text = (
            "interface Point {\n    x: number;\n}\n"
            "let a: Point = {};\n"
            "let b: Point = {};\n"
        )
        combined, new_text = self.service.fix_all("test.ts", text, INTERFACE_FIX_ID)
        assert len(combined.changes[0].text_changes) == 2
        assert new_text.endswith("let a: Point = {\n    x: 0,\n};\nlet b: Point = {\n    x: 0,\n};\n")


class TestFixEverything:
    """Running every fix-all over one file."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = RefactorService()

    def test_applies_each_fix_once(self):
        text = (
            "interface Point {\n    x: number;\n}\n"
            "const point: Point = {};\n"
            "console.log(poitn);\n"
        )
        applied, new_text = self.service.fix_everything("test.ts", text)
        assert sorted(applied) == sorted([SPELLING_FIX_ID, INTERFACE_FIX_ID])
        assert new_text.endswith("const point: Point = {\n    x: 0,\n};\nconsole.log(point);\n")

    def test_nothing_to_fix(self):
        text = "const a = 1;\n"
        assert self.service.fix_everything("test.js", text) == ([], text)
