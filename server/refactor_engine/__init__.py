"""
Tree-sitter refactoring engine package.

This package provides refactors and code fixes for JavaScript and TypeScript
built on Tree-sitter: an edit ledger, a scope checker, expression rewriting
utilities and the registry that dispatches to refactor and fix modules.
"""

from .types import (
    Edit, FileTextChanges, RefactorActionInfo, ApplicableRefactorInfo, RefactorEditInfo,
    Diagnostic, CodeFixAction, CombinedCodeActions, RefactorMeta, CodeFixMeta,
    RefactorContext, CodeFixContext, Refactor, CodeFix, LanguageAdapter
)

from .errors import RefactorError, OverlapError, InvalidActionError, UnsupportedLanguageError

from .registry import (
    register_adapter, get_adapter, get_adapter_for_file, list_supported_languages,
    register_refactor, get_refactor, get_refactor_names, get_applicable_refactors, get_edits_for_refactor,
    register_code_fix, get_code_fix, get_fixes, get_all_fixes, discover_refactors, clear
)

from .config import (
    EngineConfig, load_config, get_default_config, save_config, find_config_file
)

from .text_changes import ChangeTracker, apply_changes, apply_file_changes

__all__ = [
    # Types
    "Edit", "FileTextChanges", "RefactorActionInfo", "ApplicableRefactorInfo", "RefactorEditInfo",
    "Diagnostic", "CodeFixAction", "CombinedCodeActions", "RefactorMeta", "CodeFixMeta",
    "RefactorContext", "CodeFixContext", "Refactor", "CodeFix", "LanguageAdapter",

    # Errors
    "RefactorError", "OverlapError", "InvalidActionError", "UnsupportedLanguageError",

    # Registry
    "register_adapter", "get_adapter", "get_adapter_for_file", "list_supported_languages",
    "register_refactor", "get_refactor", "get_refactor_names", "get_applicable_refactors",
    "get_edits_for_refactor", "register_code_fix", "get_code_fix", "get_fixes", "get_all_fixes",
    "discover_refactors", "clear",

    # Config
    "EngineConfig", "load_config", "get_default_config", "save_config", "find_config_file",

    # Edit ledger
    "ChangeTracker", "apply_changes", "apply_file_changes",
]
