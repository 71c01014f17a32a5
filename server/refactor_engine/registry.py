"""
Registry for refactors, code fixes and language adapters.

This module provides a central registry to register and discover refactors,
code fixes and language adapters, and dispatches availability / edit / fix
requests to them.
"""

import importlib
import logging
import os
import pkgutil
from typing import Dict, List, Optional, Sequence

from .errors import InvalidActionError
from .types import (ApplicableRefactorInfo, CodeFix, CodeFixAction, CodeFixContext,
                    CombinedCodeActions, LanguageAdapter, Refactor,
                    RefactorContext, RefactorEditInfo)

logger = logging.getLogger(__name__)

DEFAULT_PACKAGES = ["refactors", "codefixes"]


class Registry:
    """Central registry for refactors, code fixes and adapters."""

    def __init__(self):
        self._refactors: Dict[str, Refactor] = {}
        self._code_fixes: Dict[str, CodeFix] = {}
        self._fixes_by_code: Dict[int, List[CodeFix]] = {}
        self._adapters: Dict[str, LanguageAdapter] = {}

    # === Adapters ===

    def register_adapter(self, language: str, adapter: LanguageAdapter) -> None:
        """Register a language adapter. Silently skips if already registered."""
        if language in self._adapters:
            return
        self._adapters[language] = adapter

    def get_adapter(self, language: str) -> Optional[LanguageAdapter]:
        """Get adapter for a language."""
        return self._adapters.get(language)

    def get_adapter_for_file(self, file_path: str) -> Optional[LanguageAdapter]:
        """Get adapter for a file based on its extension."""
        ext = os.path.splitext(file_path)[1].lower()
        for adapter in self._adapters.values():
            if ext in adapter.file_extensions:
                return adapter
        return None

    def list_supported_languages(self) -> List[str]:
        """List all supported languages."""
        return list(self._adapters.keys())

    # === Refactors ===

    def register_refactor(self, name: str, refactor: Refactor) -> None:
        """Register a refactor under its name."""
        if name in self._refactors:
            # Skip duplicate registration silently to avoid import noise
            return
        self._refactors[name] = refactor

    def get_refactor(self, name: str) -> Optional[Refactor]:
        return self._refactors.get(name)

    def get_refactor_names(self) -> List[str]:
        return list(self._refactors.keys())

    def get_applicable_refactors(self, context: RefactorContext) -> List[ApplicableRefactorInfo]:
        """Refactors offering at least one action at the context's position."""
        applicable: List[ApplicableRefactorInfo] = []
        for name, refactor in self._refactors.items():
            if context.language not in refactor.meta.langs:
                continue
            if context.config is not None and not context.config.is_refactor_enabled(name):
                continue
            infos = refactor.get_available_actions(context)
            if not infos:
                logger.debug(f"Refactor '{name}' not available at {context.start_position}")
            applicable.extend(infos)
        return applicable

    def get_edits_for_refactor(self, context: RefactorContext, refactor_name: str,
                               action_name: str) -> RefactorEditInfo:
        """
        Compute edits for one advertised action.

        Raises:
            InvalidActionError: unknown refactor, or the action is not
                available at the context's position
        """
        refactor = self._refactors.get(refactor_name)
        if refactor is None or context.language not in refactor.meta.langs:
            logger.error(f"Unknown refactor '{refactor_name}'")
            raise InvalidActionError(refactor_name, "unknown refactor")
        result = refactor.get_edits_for_action(context, action_name)
        if result is None:
            logger.error(f"Action '{action_name}' of '{refactor_name}' is not available at "
                         f"{context.start_position}")
            raise InvalidActionError(action_name, f"not available for '{refactor_name}' at this position")
        return result

    # === Code fixes ===

    def register_code_fix(self, code_fix: CodeFix) -> None:
        """Register a code fix under its fix id and every error code it handles."""
        fix_id = code_fix.meta.fix_id
        if fix_id in self._code_fixes:
            return
        self._code_fixes[fix_id] = code_fix
        for code in code_fix.meta.error_codes:
            self._fixes_by_code.setdefault(code, []).append(code_fix)

    def get_code_fix(self, fix_id: str) -> Optional[CodeFix]:
        return self._code_fixes.get(fix_id)

    def get_all_code_fixes(self) -> List[CodeFix]:
        """Get all registered code fixes."""
        return list(self._code_fixes.values())

    def get_supported_error_codes(self) -> List[int]:
        return sorted(self._fixes_by_code.keys())

    def get_fixes(self, context: CodeFixContext, error_code: Optional[int] = None) -> List[CodeFixAction]:
        """Fixes for the diagnostic span described by ``context``."""
        code = context.error_code if error_code is None else error_code
        actions: List[CodeFixAction] = []
        for code_fix in self._fixes_by_code.get(code, []):
            if context.language not in code_fix.meta.langs:
                continue
            if context.config is not None and not context.config.is_code_fix_enabled(code_fix.meta.fix_id):
                continue
            actions.extend(code_fix.get_code_actions(context))
        return actions

    def get_all_fixes(self, context: CodeFixContext, fix_id: str) -> CombinedCodeActions:
        """Apply one fix to every matching diagnostic in the file."""
        code_fix = self._code_fixes.get(fix_id)
        if code_fix is None:
            logger.error(f"Unknown fix id '{fix_id}'")
            raise InvalidActionError(fix_id, "unknown fix id")
        return code_fix.get_all_code_actions(context)

    # === Discovery ===

    def discover_refactors(self, entry_packages: Optional[Sequence[str]] = None) -> int:
        """
        Auto-discover and register refactors and code fixes from packages.

        Args:
            entry_packages: Package names to discover from (default: refactors, codefixes)

        Returns:
            Number of refactors and fixes discovered and registered
        """
        initial_count = len(self._refactors) + len(self._code_fixes)

        for package_name in entry_packages or DEFAULT_PACKAGES:
            try:
                self._discover_from_package(package_name)
            except ImportError as e:
                logger.warning(f"Failed to discover refactors from {package_name}: {e}")

        return len(self._refactors) + len(self._code_fixes) - initial_count

    def _discover_from_package(self, package_name: str) -> None:
        """Discover refactors from a specific package."""
        package = importlib.import_module(package_name)
        self._extract_from_module(package)

        if hasattr(package, '__path__'):
            for _importer, modname, _ispkg in pkgutil.walk_packages(package.__path__, package.__name__ + "."):
                self._extract_from_module(importlib.import_module(modname))

    def _extract_from_module(self, module) -> None:
        """Register the REFACTORS and CODE_FIXES lists of a module."""
        for refactor in getattr(module, 'REFACTORS', []):
            if isinstance(refactor, type):
                refactor = refactor()
            self.register_refactor(refactor.meta.name, refactor)
        for code_fix in getattr(module, 'CODE_FIXES', []):
            if isinstance(code_fix, type):
                code_fix = code_fix()
            self.register_code_fix(code_fix)

    def clear(self) -> None:
        """Clear all registered refactors, fixes and adapters (mainly for testing)."""
        self._refactors.clear()
        self._code_fixes.clear()
        self._fixes_by_code.clear()
        self._adapters.clear()


# Global registry instance
_global_registry = Registry()


def load_default_adapters() -> None:
    """Register the JavaScript and TypeScript adapters."""
    from .javascript_adapter import default_javascript_adapter
    from .typescript_adapter import default_typescript_adapter
    _global_registry.register_adapter(default_javascript_adapter.language_id, default_javascript_adapter)
    _global_registry.register_adapter(default_typescript_adapter.language_id, default_typescript_adapter)


# Convenience functions that operate on the global registry
def register_adapter(language: str, adapter: LanguageAdapter) -> None:
    """Register a language adapter in the global registry."""
    _global_registry.register_adapter(language, adapter)


def get_adapter(language: str) -> Optional[LanguageAdapter]:
    """Get adapter for a language from the global registry."""
    return _global_registry.get_adapter(language)


def get_adapter_for_file(file_path: str) -> Optional[LanguageAdapter]:
    """Get adapter for a file based on its extension from the global registry."""
    return _global_registry.get_adapter_for_file(file_path)


def list_supported_languages() -> List[str]:
    """List all supported languages from the global registry."""
    return _global_registry.list_supported_languages()


def register_refactor(name: str, refactor: Refactor) -> None:
    """Register a refactor in the global registry."""
    _global_registry.register_refactor(name, refactor)


def get_refactor(name: str) -> Optional[Refactor]:
    return _global_registry.get_refactor(name)


def get_refactor_names() -> List[str]:
    return _global_registry.get_refactor_names()


def get_applicable_refactors(context: RefactorContext) -> List[ApplicableRefactorInfo]:
    """Refactors available at the context's position."""
    return _global_registry.get_applicable_refactors(context)


def get_edits_for_refactor(context: RefactorContext, refactor_name: str, action_name: str) -> RefactorEditInfo:
    """Edits for one advertised refactor action."""
    return _global_registry.get_edits_for_refactor(context, refactor_name, action_name)


def register_code_fix(code_fix: CodeFix) -> None:
    """Register a code fix in the global registry."""
    _global_registry.register_code_fix(code_fix)


def get_code_fix(fix_id: str) -> Optional[CodeFix]:
    return _global_registry.get_code_fix(fix_id)


def get_all_code_fixes() -> List[CodeFix]:
    return _global_registry.get_all_code_fixes()


def get_supported_error_codes() -> List[int]:
    return _global_registry.get_supported_error_codes()


def get_fixes(context: CodeFixContext, error_code: Optional[int] = None) -> List[CodeFixAction]:
    """Fixes for one diagnostic."""
    return _global_registry.get_fixes(context, error_code)


def get_all_fixes(context: CodeFixContext, fix_id: str) -> CombinedCodeActions:
    """Fix-all for one fix id."""
    return _global_registry.get_all_fixes(context, fix_id)


def discover_refactors(entry_packages: Optional[Sequence[str]] = None) -> int:
    """Auto-discover and register refactors and code fixes from packages."""
    return _global_registry.discover_refactors(entry_packages)


def clear() -> None:
    """Clear the global registry (mainly for testing)."""
    _global_registry.clear()


def get_registry() -> Registry:
    """Get the global registry instance (for advanced usage)."""
    return _global_registry
