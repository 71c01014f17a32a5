"""
Core types for the refactoring engine.

This module provides shared dataclasses and protocols used across the engine,
adapters, refactors and code fixes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Protocol, Set, Tuple
from abc import ABC, abstractmethod


# Type aliases for clarity
EditMode = Literal["insert-before", "replace", "delete"]
NodeRange = Tuple[int, int]  # (start_byte, end_byte) 0-based
DiagnosticCategory = Literal["error", "warning", "suggestion", "message"]


@dataclass(frozen=True)
class Edit:
    """A single text edit against the original source.

    Offsets are UTF-8 byte offsets, as delivered by tree-sitter.
    """
    start_byte: int
    end_byte: int
    replacement: str
    mode: EditMode = "replace"

    @property
    def range(self) -> NodeRange:
        return (self.start_byte, self.end_byte)


@dataclass(frozen=True)
class FileTextChanges:
    """All edits produced for one file by one request."""
    file_name: str
    text_changes: List[Edit]


@dataclass(frozen=True)
class RefactorActionInfo:
    """One action advertised by a refactor."""
    name: str
    description: str


@dataclass(frozen=True)
class ApplicableRefactorInfo:
    """A refactor together with the actions available at the cursor."""
    name: str
    description: str
    actions: List[RefactorActionInfo]


@dataclass(frozen=True)
class RefactorEditInfo:
    """Result of applying a refactor action."""
    edits: List[FileTextChanges]
    rename_filename: Optional[str] = None
    rename_location: Optional[int] = None


@dataclass(frozen=True)
class Diagnostic:
    """A diagnostic reported by the scope checker."""
    code: int
    category: DiagnosticCategory
    message: str
    file: str
    start_byte: int
    end_byte: int
    args: Tuple[str, ...] = ()

    @property
    def length(self) -> int:
        return self.end_byte - self.start_byte


@dataclass(frozen=True)
class CodeFixAction:
    """A fix for one diagnostic."""
    fix_name: str
    description: str
    changes: List[FileTextChanges]
    fix_id: Optional[str] = None
    fix_all_description: Optional[str] = None


@dataclass(frozen=True)
class CombinedCodeActions:
    """The merged result of applying one fix to every matching diagnostic."""
    changes: List[FileTextChanges]


@dataclass(frozen=True)
class RefactorMeta:
    """Metadata about a refactor.

    Attributes:
        name: Unique refactor name (e.g., "Inline local")
        description: Human-readable description from the message catalog
        langs: Languages the refactor supports
    """
    name: str
    description: str
    langs: List[str] = None

    def __post_init__(self):
        if self.langs is None:
            object.__setattr__(self, 'langs', ["javascript", "typescript"])


@dataclass(frozen=True)
class CodeFixMeta:
    """Metadata about a code fix.

    Attributes:
        fix_id: Identifier used for fix-all requests
        error_codes: Diagnostic codes the fix responds to
        description: Fix-all description from the message catalog
        langs: Languages the fix supports
    """
    fix_id: str
    error_codes: List[int]
    description: str = ""
    langs: List[str] = None

    def __post_init__(self):
        if self.langs is None:
            object.__setattr__(self, 'langs', ["javascript", "typescript"])


class Checker(Protocol):
    """Symbol-resolution capability consumed by refactors and fixes."""

    def symbol_of(self, node: Any) -> Optional["Symbol"]:
        ...

    def visible_symbols(self, node: Any) -> Set["Symbol"]:
        ...

    def declaration_of(self, symbol: "Symbol") -> Optional[Any]:
        ...


@dataclass
class RefactorContext:
    """Context passed to refactors for a single request."""
    file_path: str
    text: str
    tree: Any
    adapter: 'LanguageAdapter'  # Forward reference
    checker: Any
    start_position: int
    end_position: Optional[int] = None
    config: Any = None
    source: bytes = field(init=False, repr=False)

    def __post_init__(self):
        self.source = self.text.encode('utf-8')
        if self.end_position is None:
            self.end_position = self.start_position

    @property
    def root(self):
        return self.tree.root_node

    @property
    def language(self) -> str:
        return self.adapter.language_id

    def node_text(self, node) -> str:
        """Source text of a tree-sitter node."""
        return self.source[node.start_byte:node.end_byte].decode('utf-8')

    def get_text(self, start_byte: int, end_byte: int) -> str:
        """Get text slice from byte positions."""
        return self.source[start_byte:end_byte].decode('utf-8')

    def token_at_position(self, position: Optional[int] = None):
        """Token under the cursor (or under ``position``)."""
        from .ast_utils import get_token_at_position
        pos = self.start_position if position is None else position
        return get_token_at_position(self.root, pos)


@dataclass
class CodeFixContext(RefactorContext):
    """Context passed to code fixes for one diagnostic span."""
    error_code: int = 0
    span_length: int = 0


class Refactor(Protocol):
    """Protocol for all refactors.

    Refactors are stateless: availability and edits are computed fresh from
    the context on every request.
    """
    meta: RefactorMeta

    def get_available_actions(self, ctx: RefactorContext) -> List[ApplicableRefactorInfo]:
        ...

    def get_edits_for_action(self, ctx: RefactorContext, action_name: str) -> Optional[RefactorEditInfo]:
        ...


class CodeFix(Protocol):
    """Protocol for all code fixes."""
    meta: CodeFixMeta

    def get_code_actions(self, ctx: CodeFixContext) -> List[CodeFixAction]:
        ...

    def get_all_code_actions(self, ctx: CodeFixContext) -> CombinedCodeActions:
        ...


class LanguageAdapter(ABC):
    """Abstract base class for language adapters."""

    @property
    @abstractmethod
    def language_id(self) -> str:
        """Return the language identifier (e.g., 'typescript', 'javascript')."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> Tuple[str, ...]:
        """Return supported file extensions (e.g., ('.ts', '.tsx'))."""
        pass

    @abstractmethod
    def parse(self, text: str, file_path: Optional[str] = None) -> Any:
        """Parse text and return a Tree-sitter tree."""
        pass

    @abstractmethod
    def node_text(self, text: str, start_byte: int, end_byte: int) -> str:
        """Extract text between byte offsets."""
        pass

    @abstractmethod
    def byte_to_linecol(self, text: str, byte: int) -> Tuple[int, int]:
        """Convert byte offset to (line, column) 1-based."""
        pass

    @abstractmethod
    def line_col_to_byte(self, text: str, line: int, col: int) -> int:
        """Convert (line, column) 1-based to byte offset."""
        pass

    # === Binding hooks ===

    def iter_scope_nodes(self, tree: Any) -> List[Dict[str, Any]]:
        """
        Enumerate scope boundaries in the tree.

        Returns:
            List of dicts with keys: id, kind, start, end, parent_id, node
        """
        return []

    def iter_symbol_defs(self, tree: Any) -> List[Dict[str, Any]]:
        """
        Enumerate symbol definitions (bindings) in the tree.

        Returns:
            List of dicts with keys: name, kind, meaning, scope_id, declaration, name_node, meta
        """
        return []

    def iter_identifier_refs(self, tree: Any) -> List[Dict[str, Any]]:
        """
        Enumerate identifier references (uses) in the tree.

        Returns:
            List of dicts with keys: name, meaning, scope_id, node
        """
        return []
