"""
Code Fixes Package

This package contains the fixes offered for checker diagnostics.
Each module defines a CODE_FIXES list; the registry indexes every fix by its
fix id and by the diagnostic codes it handles.
"""

from typing import List

from refactor_engine.registry import register_code_fix
from refactor_engine.types import CodeFix

CODE_FIXES: List[CodeFix] = []


def register(code_fix: CodeFix) -> None:
    """Register a code fix in the global registry."""
    register_code_fix(code_fix)
    CODE_FIXES.append(code_fix)
