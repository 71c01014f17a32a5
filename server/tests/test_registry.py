"""
Tests for refactor and code fix registration and dispatch.
"""

import pytest

from refactor_engine.config import EngineConfig
from refactor_engine.errors import InvalidActionError, UnsupportedLanguageError
from refactor_engine.registry import (Registry, discover_refactors, get_adapter_for_file, get_code_fix,
                                      get_refactor_names, get_supported_error_codes, load_default_adapters)
from refactor_engine.service import RefactorService
from refactor_engine.types import RefactorMeta


class _StubRefactor:
    meta = RefactorMeta(name="Stub", description="Stub refactor")

    def get_available_actions(self, ctx):
        return []

    def get_edits_for_action(self, ctx, action_name):
        return None


class TestDiscovery:
    """Discovery of the built-in refactors and fixes."""

    def setup_method(self):
        """Set up test fixtures."""
        load_default_adapters()
        discover_refactors()

    def test_builtin_refactors_registered(self):
        names = get_refactor_names()
        assert "Inline local" in names
        assert "Inline function" in names
        assert "Convert string concatenation or template literal" in names

    def test_builtin_fixes_registered(self):
        assert get_code_fix("fixSpelling") is not None
        assert get_code_fix("fixObjectLiteralIncorrectlyImplementsInterface") is not None
        assert get_supported_error_codes() == [2322, 2551, 2552]

    def test_discovery_is_idempotent(self):
        assert discover_refactors() == 0

    def test_adapters_by_extension(self):
        assert get_adapter_for_file("a.js").language_id == "javascript"
        assert get_adapter_for_file("a.mjs").language_id == "javascript"
        assert get_adapter_for_file("a.tsx").language_id == "typescript"
        assert get_adapter_for_file("a.py") is None


class TestRegistryInstance:
    """A private registry behaves like the global one."""

    def test_duplicate_registration_is_ignored(self):
        registry = Registry()
        first = _StubRefactor()
        registry.register_refactor("Stub", first)
        registry.register_refactor("Stub", _StubRefactor())
        assert registry.get_refactor("Stub") is first
        assert registry.get_refactor_names() == ["Stub"]

    def test_missing_package_is_skipped(self):
        registry = Registry()
        assert registry.discover_refactors(["no_such_package_here"]) == 0

    def test_clear(self):
        registry = Registry()
        registry.register_refactor("Stub", _StubRefactor())
        registry.clear()
        assert registry.get_refactor_names() == []


class TestDispatch:
    """Requests routed through the service."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = RefactorService()

    def test_unknown_refactor(self):
        with pytest.raises(InvalidActionError) as exc_info:
            self.service.apply_refactor("a.js", "x;", 0, "Make it better", "Now")
        assert exc_info.value.name == "Make it better"

    def test_unknown_fix_id(self):
        with pytest.raises(InvalidActionError):
            self.service.fix_all("a.js", "x;", "fixEverythingPlease")

    def test_unsupported_language(self):
        with pytest.raises(UnsupportedLanguageError):
            self.service.get_available_refactors("a.rb", "x = 1", 0)

    def test_disabled_refactor_is_not_offered(self):
        """enabled_refactors filters what is advertised."""
        text = "const v = 1;\nf(v);\n"
        service = RefactorService(EngineConfig(enabled_refactors=["Inline function"]))
        assert service.get_available_refactors("a.js", text, 6) == []
        assert [i.name for i in self.service.get_available_refactors("a.js", text, 6)] == ["Inline local"]

    def test_disabled_fix_is_not_offered(self):
        text = "const value = 1;\nvaleu;\n"
        start = text.index("valeu")
        service = RefactorService(EngineConfig(enabled_code_fixes=[]))
        assert service.get_code_fixes("a.js", text, start, 5, 2552) == []
        assert len(self.service.get_code_fixes("a.js", text, start, 5, 2552)) == 1

    def test_typescript_only_fix_not_offered_for_javascript(self):
        text = "let p = {};\n"
        assert self.service.get_code_fixes("a.js", text, 4, 1, 2322) == []
