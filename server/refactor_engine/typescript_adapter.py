"""
TypeScript language adapter for tree-sitter.
"""
import logging
from typing import Optional, Tuple

import tree_sitter

from .javascript_adapter import JavaScriptAdapter

logger = logging.getLogger(__name__)


class TypeScriptAdapter(JavaScriptAdapter):
    """Tree-sitter adapter for TypeScript language.

    Binding is shared with the JavaScript adapter; this class only swaps the
    grammar (``.tsx`` files use the TSX dialect) and turns on reporting of
    unresolved type names.
    """

    def __init__(self):
        """Initialize TypeScript adapter; parsers are created lazily."""
        super().__init__()
        self._ts_parser = None  # Parser for .ts files
        self._tsx_parser = None  # Parser for .tsx files

    @property
    def language_id(self) -> str:
        """Return the language identifier."""
        return "typescript"

    @property
    def file_extensions(self) -> Tuple[str, ...]:
        """Return supported file extensions."""
        return (".ts", ".tsx", ".mts", ".cts")

    @property
    def reports_type_names(self) -> bool:
        return True

    def _get_ts_parser(self):
        """Get or create the TypeScript parser for .ts files."""
        if self._ts_parser is None:
            try:
                from tree_sitter_typescript import language_typescript

                self._ts_parser = tree_sitter.Parser()
                self._ts_parser.language = tree_sitter.Language(language_typescript())
                logger.debug("TypeScript parser initialized")
            except ImportError as e:
                logger.warning(f"tree-sitter-typescript not available: {e}")
                self._ts_parser = None

        return self._ts_parser

    def _get_tsx_parser(self):
        """Get or create the TSX parser for .tsx files."""
        if self._tsx_parser is None:
            try:
                from tree_sitter_typescript import language_tsx

                self._tsx_parser = tree_sitter.Parser()
                self._tsx_parser.language = tree_sitter.Language(language_tsx())
                logger.debug("TSX parser initialized")
            except ImportError as e:
                logger.warning(f"tree-sitter-typescript (TSX) not available: {e}")
                self._tsx_parser = None

        return self._tsx_parser

    def _get_parser(self, file_path: Optional[str] = None):
        """Get the appropriate parser based on file extension."""
        if file_path and file_path.endswith('.tsx'):
            return self._get_tsx_parser()
        return self._get_ts_parser()


# Default adapter instance
default_typescript_adapter = TypeScriptAdapter()
