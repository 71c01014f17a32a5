"""
Tests for the inline-function refactor.
"""

import pytest

from refactor_engine.errors import InvalidActionError
from refactor_engine.service import RefactorService
from refactors.inline_function import INLINE_ALL, INLINE_HERE, REFACTOR_NAME
from refactors.inline_support import get_unique_name


class TestInlineFunction:
    """Inline a local function into its call sites."""

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

    def test_inline_here_single_call(self):
        """The only call is inlined and the function removed."""
        text = (
            "function foo(num: number) {\n"
            "    return num;\n"
            "}\n"
            "function bar() {\n"
            "    const meaningOfLife = foo(42);\n"
            "}\n"
        )
        position = text.index("foo(42)")
        assert self._actions(text, position, "test.ts") == [INLINE_ALL, INLINE_HERE]
        assert self._apply(text, position, INLINE_HERE, "test.ts") == (
            "function bar() {\n"
            "    const num = 42;\n"
            "    const meaningOfLife = num;\n"
            "}\n"
        )

    def test_closure_over_outer_variable(self):
        text = (
            'const knife = "sharp";\n'
            "function cut() {\n"
            "    return knife;\n"
            "}\n"
            "function bar() { const meaningOfLife = cut(); }\n"
        )
        position = text.index("cut()")
        assert self._apply(text, position, INLINE_ALL) == (
            'const knife = "sharp";\n'
            "function bar() { const meaningOfLife = knife; }\n"
        )

    def test_parameter_colliding_with_call_site_name_is_renamed(self):
        text = (
            "function twice(x) {\n"
            "    return x * 2;\n"
            "}\n"
            "const x = 5;\n"
            "const r = twice(x) + 1;\n"
        )
        position = text.index("twice(x)")
        assert self._apply(text, position, INLINE_ALL) == (
            "const x = 5;\n"
            "const x_1 = x;\n"
            "const r = x_1 * 2 + 1;\n"
        )

    def test_void_function_replaces_statement(self):
        """A function without return is inlined in place of the call statement."""
        text = (
            "function log(m) {\n"
            "    console.log(m);\n"
            "}\n"
            'log("hi");\n'
        )
        position = text.index('log("hi")')
        assert self._apply(text, position, INLINE_ALL) == 'const m = "hi";\nconsole.log(m);\n'

    def test_default_parameter_value(self):
        text = (
            "function add(a, b = 10) {\n"
            "    return a + b;\n"
            "}\n"
            "const r = add(1);\n"
        )
        position = text.index("add(1)")
        assert self._apply(text, position, INLINE_ALL) == (
            "const a = 1;\n"
            "const b = 10;\n"
            "const r = a + b;\n"
        )

    def test_multiple_call_sites_get_distinct_names(self):
        text = (
            "function inc(n) {\n"
            "    return n + 1;\n"
            "}\n"
            "const n = 0;\n"
            "const a = inc(n);\n"
            "const b = inc(a);\n"
        )
        position = text.index("inc(n)")
        assert self._apply(text, position, INLINE_ALL) == (
            "const n = 0;\n"
            "const n_1 = n;\n"
            "const a = n_1 + 1;\n"
            "const n_2 = a;\n"
            "const b = n_2 + 1;\n"
        )

    def test_returned_expression_is_parenthesized(self):
        text = (
            "function double(x) {\n"
            "    return x + x;\n"
            "}\n"
            "const r = double(2) * 3;\n"
        )
        position = text.index("double(2)")
        assert self._apply(text, position, INLINE_ALL) == (
            "const x = 2;\n"
            "const r = (x + x) * 3;\n"
        )

    def test_parameter_shadowed_in_nested_block_is_renamed(self):
        """The inlined body's x must not pick up the block's own x."""
        text = "function f(x){ return x+1 } ; { const x = 5; f(x*2); }\n"
        position = text.index("f(x*2)")
        assert self._apply(text, position, INLINE_ALL) == "; { const x = 5; const x_1 = x*2; x_1+1; }\n"

    def test_switch_cases_share_one_scope(self):
        """Temporaries in different case clauses of one switch get distinct names."""
        text = (
            "function f(a) {\n"
            "    return a + 1;\n"
            "}\n"
            "switch (k) {\n"
            "    case 1:\n"
            "        g(f(1));\n"
            "        break;\n"
            "    case 2:\n"
            "        g(f(2));\n"
            "        break;\n"
            "}\n"
        )
        position = text.index("f(1)")
        assert self._apply(text, position, INLINE_ALL) == (
            "switch (k) {\n"
            "    case 1:\n"
            "        const a = 1;\n"
            "        g(a + 1);\n"
            "        break;\n"
            "    case 2:\n"
            "        const a_1 = 2;\n"
            "        g(a_1 + 1);\n"
            "        break;\n"
            "}\n"
        )

    def test_function_declared_in_block_is_inlined_outside(self):
        """A block-level function is callable from the enclosing scope in sloppy code."""
        text = (
            'const knife = "sharp";\n'
            "{\n"
            "    function foo() { return knife; }\n"
            "}\n"
            "function bar() { const meaningOfLife = foo(); }\n"
        )
        position = text.index("foo")
        assert self._actions(text, position, "test.ts") == [INLINE_ALL]
        assert self._apply(text, position, INLINE_ALL, "test.ts") == (
            'const knife = "sharp";\n'
            "{\n"
            "}\n"
            "function bar() { const meaningOfLife = knife; }\n"
        )

    def test_unused_function_offers_only_inline_all(self):
        """With no calls, Inline all just removes the declaration."""
        text = "function unused() {\n    return 1;\n}\n"
        position = text.index("unused")
        assert self._actions(text, position) == [INLINE_ALL]
        assert self._apply(text, position, INLINE_ALL) == ""

    def test_nested_return_is_rejected(self):
        text = (
            "function pick(a) {\n"
            "    if (a) {\n"
            "        return 1;\n"
            "    }\n"
            "    return 2;\n"
            "}\n"
            "pick(true);\n"
        )
        assert self._actions(text, text.index("pick(true)")) == []

    def test_recursive_function_is_rejected(self):
        text = "function loop(n) {\n    return loop(n - 1);\n}\nloop(3);\n"
        assert self._actions(text, text.index("loop(3)")) == []

    def test_this_is_rejected(self):
        text = "function self() {\n    return this;\n}\nself();\n"
        assert self._actions(text, text.index("self();")) == []

    def test_short_circuited_call_is_rejected(self):
        """A call that may not run cannot be hoisted ahead of its statement."""
        text = "function f(v) {\n    return v;\n}\nconst r = ok && f(1);\n"
        assert self._actions(text, text.index("f(1)")) == []

    def test_call_with_extra_arguments_is_rejected(self):
        text = "function f(v) {\n    return v;\n}\nconst r = f(1, 2);\n"
        assert self._actions(text, text.index("f(1")) == []

    def test_unknown_action_raises(self):
        text = "function f() {\n    return 1;\n}\nf();\n"
        with pytest.raises(InvalidActionError):
            self._apply(text, text.index("f()"), "Inline somewhere")


class TestUniqueNames:
    """Fresh-name generation."""

    def test_first_free_suffix(self):
        assert get_unique_name("x", {"x"}) == "x_1"
        assert get_unique_name("x", {"x", "x_1", "x_2"}) == "x_3"
