"""
Refactoring service for the tree-sitter engine.

This module provides a clean, normalized interface for refactors and code
fixes that abstracts the complexity of adapter loading, refactor discovery,
parsing and binding.
"""

import logging
from typing import List, Optional, Tuple, Type

from .config import EngineConfig, get_default_config
from .errors import RefactorError, UnsupportedLanguageError
from .registry import (discover_refactors, get_adapter_for_file, get_all_fixes, get_applicable_refactors,
                       get_all_code_fixes, get_edits_for_refactor, get_fixes, get_refactor_names,
                       get_registry, load_default_adapters)
from .scopes import create_checker
from .text_changes import apply_file_changes
from .types import (ApplicableRefactorInfo, CodeFixAction, CodeFixContext, CombinedCodeActions,
                    Diagnostic, RefactorContext, RefactorEditInfo)

logger = logging.getLogger(__name__)


class RefactorService:
    """Service for listing and applying refactors and code fixes."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config
        self._loaded = False

    def ensure_loaded(self) -> None:
        """Ensure adapters, refactors and code fixes are registered."""
        if self._loaded:
            return
        load_default_adapters()
        count = discover_refactors()
        logger.info(f"Loaded {len(get_refactor_names())} refactors "
                    f"({count} new) and fixes for codes {get_registry().get_supported_error_codes()}")
        self._loaded = True

    def create_context(self, file_path: str, text: str, start_position: int = 0,
                       end_position: Optional[int] = None, config: Optional[EngineConfig] = None,
                       context_class: Type[RefactorContext] = RefactorContext, **extra) -> RefactorContext:
        """
        Parse and bind ``text`` and wrap it in a request context.

        Raises:
            UnsupportedLanguageError: no adapter handles the file's extension
            RefactorError: the grammar for the language is not installed
        """
        self.ensure_loaded()
        adapter = get_adapter_for_file(file_path)
        if adapter is None:
            raise UnsupportedLanguageError(file_path)
        tree = adapter.parse(text, file_path)
        if tree is None:
            raise RefactorError(f"Parser for {adapter.language_id} is not available")
        config = config or self.config or get_default_config()
        checker = create_checker(adapter, tree, text, file_path, config.globals)
        return context_class(
            file_path=file_path,
            text=text,
            tree=tree,
            adapter=adapter,
            checker=checker,
            start_position=start_position,
            end_position=end_position,
            config=config,
            **extra,
        )

    # === Refactors ===

    def get_available_refactors(self, file_path: str, text: str, start_position: int,
                                end_position: Optional[int] = None) -> List[ApplicableRefactorInfo]:
        """Refactors and actions available at a position."""
        context = self.create_context(file_path, text, start_position, end_position)
        return get_applicable_refactors(context)

    def apply_refactor(self, file_path: str, text: str, start_position: int, refactor_name: str,
                       action_name: str, end_position: Optional[int] = None) -> Tuple[RefactorEditInfo, str]:
        """Compute an action's edits and the resulting text."""
        context = self.create_context(file_path, text, start_position, end_position)
        result = get_edits_for_refactor(context, refactor_name, action_name)
        new_text = apply_file_changes(text, result.edits, file_path)
        logger.info(f"Applied '{refactor_name}/{action_name}' to {file_path} "
                    f"({sum(len(c.text_changes) for c in result.edits)} edits)")
        return result, new_text

    # === Diagnostics and code fixes ===

    def get_diagnostics(self, file_path: str, text: str) -> List[Diagnostic]:
        """Diagnostics the checker reports for a file."""
        return self.create_context(file_path, text).checker.get_diagnostics()

    def get_code_fixes(self, file_path: str, text: str, start_position: int, length: int,
                       error_code: int) -> List[CodeFixAction]:
        """Fixes for one diagnostic span."""
        context = self.create_context(
            file_path, text, start_position, start_position + length,
            context_class=CodeFixContext, error_code=error_code, span_length=length,
        )
        return get_fixes(context)

    def fix_all(self, file_path: str, text: str, fix_id: str) -> Tuple[CombinedCodeActions, str]:
        """Apply one fix to every matching diagnostic in the file."""
        context = self.create_context(file_path, text, context_class=CodeFixContext)
        combined = get_all_fixes(context, fix_id)
        return combined, apply_file_changes(text, combined.changes, file_path)

    def fix_everything(self, file_path: str, text: str) -> Tuple[List[str], str]:
        """Run every fix-all once, re-binding between fixes; returns applied fix ids and text."""
        self.ensure_loaded()
        applied = []
        config = self.config or get_default_config()
        for code_fix in get_all_code_fixes():
            fix_id = code_fix.meta.fix_id
            if not config.is_code_fix_enabled(fix_id):
                continue
            combined, new_text = self.fix_all(file_path, text, fix_id)
            if combined.changes:
                applied.append(fix_id)
                text = new_text
        return applied, text
