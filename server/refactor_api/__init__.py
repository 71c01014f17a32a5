"""HTTP API for the refactoring engine."""
