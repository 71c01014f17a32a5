"""
Tests for the scope checker: symbol resolution, references and diagnostics.
"""

from refactor_engine.ast_utils import iter_nodes
from refactor_engine.references import find_references, get_call_expression
from refactor_engine.service import RefactorService


class TestSymbolResolution:
    """Resolver queries consumed by refactors."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = RefactorService()

    def _identifiers(self, ctx, name):
        return [n for n in iter_nodes(ctx.root, named_only=True)
                if n.type == "identifier" and ctx.node_text(n) == name]

    def test_shadowed_name_resolves_to_inner_symbol(self):
        """An inner declaration hides the outer one."""
        text = "const x = 1;\nfunction f() {\n    const x = 2;\n    return x;\n}\nuse(x);\n"
        ctx = self.service.create_context("test.js", text)
        outer_decl, inner_decl, inner_use, outer_use = self._identifiers(ctx, "x")
        checker = ctx.checker

        assert checker.symbol_of(inner_use) is checker.symbol_of(inner_decl)
        assert checker.symbol_of(outer_use) is checker.symbol_of(outer_decl)
        assert checker.symbol_of(inner_use) is not checker.symbol_of(outer_use)

    def test_declaration_of_returns_declarator(self):
        text = "let count = 0;\ncount;\n"
        ctx = self.service.create_context("test.js", text)
        use = self._identifiers(ctx, "count")[1]
        declaration = ctx.checker.declaration_of(ctx.checker.symbol_of(use))
        assert declaration.type == "variable_declarator"
        assert ctx.node_text(declaration) == "count = 0"

    def test_globals_have_no_symbol(self):
        ctx = self.service.create_context("test.js", "console.log(1);\n")
        console = self._identifiers(ctx, "console")[0]
        assert ctx.checker.symbol_of(console) is None

    def test_visible_symbols_include_enclosing_scopes(self):
        text = "const a = 1;\nfunction f(b) {\n    {\n        const c = 3;\n        mark;\n    }\n}\n"
        ctx = self.service.create_context("test.js", text)
        mark = self._identifiers(ctx, "mark")[0]
        assert {"a", "f", "b", "c"} <= ctx.checker.visible_names(mark)

    def test_block_scoped_name_not_visible_outside(self):
        text = "{\n    const hidden = 1;\n}\nmark;\n"
        ctx = self.service.create_context("test.js", text)
        mark = self._identifiers(ctx, "mark")[0]
        assert "hidden" not in ctx.checker.visible_names(mark)

    def test_function_declarations_are_hoisted(self):
        """A call before the declaration still resolves."""
        text = "later();\nfunction later() {}\n"
        ctx = self.service.create_context("test.js", text)
        call_name, decl_name = self._identifiers(ctx, "later")
        assert ctx.checker.symbol_of(call_name) is ctx.checker.symbol_of(decl_name)

    def test_block_function_is_visible_in_enclosing_scope(self):
        """Outside strict code a function declared in a block binds like var."""
        text = "{\n    function foo() {}\n}\nfoo();\n"
        ctx = self.service.create_context("test.js", text)
        decl_name, call_name = self._identifiers(ctx, "foo")
        assert ctx.checker.symbol_of(call_name) is ctx.checker.symbol_of(decl_name)
        assert ctx.checker.scope_node_of(ctx.checker.symbol_of(decl_name)).type == "program"

    def test_block_function_stays_in_block_in_strict_code(self):
        for prologue in ('"use strict";\n', "export {};\n"):
            text = prologue + "{\n    function foo() {}\n}\nfoo();\n"
            ctx = self.service.create_context("test.js", text)
            _, call_name = self._identifiers(ctx, "foo")
            assert ctx.checker.symbol_of(call_name) is None


class TestFindReferences:
    """Reference finder over a scope node."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = RefactorService()

    def test_references_in_source_order_without_declaration(self):
        text = "const v = 1;\nf(v);\ng(v, v);\n"
        ctx = self.service.create_context("test.js", text)
        declaration_name = ctx.root.named_children[0].named_children[0].child_by_field_name("name")
        symbol = ctx.checker.symbol_of(declaration_name)

        references = find_references(ctx.root, symbol, ctx.checker)
        assert [r.start_byte for r in references] == sorted(r.start_byte for r in references)
        assert len(references) == 3

        with_declaration = find_references(ctx.root, symbol, ctx.checker, include_declaration_site=True)
        assert len(with_declaration) == 4

    def test_shadowed_occurrences_are_excluded(self):
        text = "const v = 1;\nfunction f(v) {\n    return v;\n}\nuse(v);\n"
        ctx = self.service.create_context("test.js", text)
        declaration_name = ctx.root.named_children[0].named_children[0].child_by_field_name("name")
        symbol = ctx.checker.symbol_of(declaration_name)
        references = find_references(ctx.root, symbol, ctx.checker)
        assert len(references) == 1
        assert ctx.get_text(references[0].start_byte - 4, references[0].end_byte) == "use(v"

    def test_call_expression_through_parentheses(self):
        text = "function f() {}\n(f)();\nf;\n"
        ctx = self.service.create_context("test.js", text)
        name = ctx.root.named_children[0].child_by_field_name("name")
        references = find_references(ctx.root, ctx.checker.symbol_of(name), ctx.checker)
        assert get_call_expression(references[0]) is not None
        assert get_call_expression(references[1]) is None


class TestDiagnostics:
    """Diagnostics that drive the code fixes."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = RefactorService()

    def test_misspelled_name_suggests_local(self):
        text = "const value = 1;\nconsole.log(valeu);\n"
        diagnostics = self.service.get_diagnostics("test.js", text)
        assert len(diagnostics) == 1
        diagnostic = diagnostics[0]
        assert diagnostic.code == 2552
        assert diagnostic.message == "Cannot find name 'valeu'. Did you mean 'value'?"
        assert text[diagnostic.start_byte:diagnostic.end_byte] == "valeu"

    def test_unknown_name_without_suggestion(self):
        diagnostics = self.service.get_diagnostics("test.js", "zzqqzzqq();\n")
        assert [d.code for d in diagnostics] == [2304]
        assert diagnostics[0].message == "Cannot find name 'zzqqzzqq'."

    def test_configured_globals_are_not_reported(self):
        from refactor_engine.config import EngineConfig
        service = RefactorService(EngineConfig(globals=["zzqqzzqq"]))
        assert service.get_diagnostics("test.js", "zzqqzzqq();\n") == []

    def test_misspelled_property_of_object_literal(self):
        text = 'const user = { name: "a", email: "b" };\nuser.emial;\n'
        diagnostics = self.service.get_diagnostics("test.js", text)
        assert [d.code for d in diagnostics] == [2551]
        assert diagnostics[0].message == \
            "Property 'emial' does not exist on type 'typeof user'. Did you mean 'email'?"

    def test_misspelled_property_of_interface(self):
        text = "interface Point {\n    x: number;\n    label: string;\n}\nlet p: Point = { x: 1, label: \"a\" };\np.lable;\n"
        diagnostics = [d for d in self.service.get_diagnostics("test.ts", text) if d.code == 2551]
        assert len(diagnostics) == 1
        assert diagnostics[0].args == ("lable", "Point", "label")

    def test_missing_interface_member_is_reported_for_typescript(self):
        text = "interface Point {\n    x: number;\n    y: number;\n}\nlet p: Point = { x: 1 };\n"
        diagnostics = self.service.get_diagnostics("test.ts", text)
        assert [d.code for d in diagnostics] == [2322]
        assert diagnostics[0].message == "Type '{ x: any; }' is not assignable to type 'Point'."
        assert text[diagnostics[0].start_byte:diagnostics[0].end_byte] == "p"

    def test_optional_members_are_not_required(self):
        text = "interface Point {\n    x: number;\n    y?: number;\n}\nlet p: Point = { x: 1 };\n"
        assert self.service.get_diagnostics("test.ts", text) == []

    def test_unresolved_type_names_only_in_typescript(self):
        text = "let p: Pointt;\ninterface Point {}\n"
        diagnostics = self.service.get_diagnostics("test.ts", text)
        assert [d.code for d in diagnostics] == [2552]
        assert diagnostics[0].args == ("Pointt", "Point")
