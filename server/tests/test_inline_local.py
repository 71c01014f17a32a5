"""
Tests for the inline-local refactor.
"""

import pytest

from refactor_engine.errors import InvalidActionError
from refactor_engine.service import RefactorService
from refactors.inline_local import INLINE_ALL, INLINE_HERE, REFACTOR_NAME


class TestInlineLocal:
    """Inline a variable's initializer into its references."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = RefactorService()

    def _actions(self, text, position, file_name="test.js"):
        infos = self.service.get_available_refactors(file_name, text, position)
        for info in infos:
            if info.name == REFACTOR_NAME:
                return [action.name for action in info.actions]
        return []

    def _apply(self, text, position, action, file_name="test.js"):
        _, new_text = self.service.apply_refactor(file_name, text, position, REFACTOR_NAME, action)
        return new_text

    def test_inline_all_from_declaration(self):
        """Every reference is replaced and the declaration goes away."""
        text = "const v = a + b;\nconst r = v * 2;\n"
        position = text.index("v =")
        assert self._actions(text, position) == [INLINE_ALL]
        assert self._apply(text, position, INLINE_ALL) == "const r = (a + b) * 2;\n"

    def test_inline_all_from_reference(self):
        text = "const v = 1;\nf(v);\ng(v);\n"
        position = text.index("g(v") + 2
        assert self._apply(text, position, INLINE_ALL) == "f(1);\ng(1);\n"

    def test_inline_here_keeps_other_references(self):
        """Only the selected reference changes while others remain."""
        text = "const v = 1;\nf(v);\ng(v);\n"
        position = text.index("f(v") + 2
        assert self._actions(text, position) == [INLINE_ALL, INLINE_HERE]
        assert self._apply(text, position, INLINE_HERE) == "const v = 1;\nf(1);\ng(v);\n"

    def test_inline_here_on_last_reference_drops_declaration(self):
        text = "const v = 1;\nf(v);\n"
        position = text.index("f(v") + 2
        assert self._apply(text, position, INLINE_HERE) == "f(1);\n"

    def test_shorthand_property_becomes_pair(self):
        """{ name } becomes { name: <initializer> }."""
        text = 'const name = "a";\nconst o = { name };\n'
        position = text.index("name =")
        assert self._apply(text, position, INLINE_ALL) == 'const o = { name: "a" };\n'

    def test_substituted_sites_are_not_candidates_afterwards(self):
        """After inline all the declaration is gone, so nothing is offered at the new sites."""
        text = "const v = a + b;\nconst r = v * 2;\nf(v);\n"
        new_text = self._apply(text, text.index("v ="), INLINE_ALL)
        assert new_text == "const r = (a + b) * 2;\nf(a + b);\n"
        assert self._actions(new_text, new_text.index("(a") + 1) == []
        assert self._actions(new_text, new_text.index("f(a") + 2) == []

    def test_logical_initializer_into_coalesce_is_wrapped(self):
        text = "const v = a || b;\nconst w = v ?? c;\n"
        assert self._apply(text, text.index("v ="), INLINE_ALL) == "const w = (a || b) ?? c;\n"

    def test_one_of_several_declarators(self):
        text = "let a = 1, b = 2;\nuse(a);\n"
        position = text.index("a =")
        assert self._apply(text, position, INLINE_ALL) == "let b = 2;\nuse(1);\n"

    def test_typescript_file(self):
        text = "const n: number = 40 + 2;\nconsole.log(n);\n"
        position = text.index("n:")
        assert self._apply(text, position, INLINE_ALL, "test.ts") == "console.log(40 + 2);\n"

    def test_reassigned_variable_is_not_offered(self):
        text = "let v = 1;\nv = 2;\nuse(v);\n"
        assert self._actions(text, text.index("v =")) == []

    def test_updated_variable_is_not_offered(self):
        text = "let v = 1;\nv++;\n"
        assert self._actions(text, text.index("v =")) == []

    def test_exported_variable_is_not_offered(self):
        text = "export const v = 1;\nuse(v);\n"
        assert self._actions(text, text.index("v =")) == []

    def test_variable_without_initializer_is_not_offered(self):
        text = "let v;\nuse(v);\n"
        assert self._actions(text, text.index("v;")) == []

    def test_captured_name_blocks_inlining(self):
        """The initializer's 'a' would resolve to the inner 'a' at the use site."""
        text = "const y = a;\nfunction f() {\n    const a = 2;\n    return y;\n}\n"
        assert self._actions(text, text.index("y =")) == []

    def test_for_loop_variable_is_not_offered(self):
        text = "for (let i = 0; i < 3; i++) {\n    use(i);\n}\n"
        assert self._actions(text, text.index("i =")) == []

    def test_unknown_action_raises(self):
        text = "const v = 1;\nf(v);\n"
        with pytest.raises(InvalidActionError):
            self._apply(text, text.index("v ="), "Inline everywhere")

    def test_unavailable_action_raises(self):
        """Inline here needs a selected reference."""
        text = "const v = 1;\nf(v);\n"
        with pytest.raises(InvalidActionError):
            self._apply(text, text.index("v ="), INLINE_HERE)
