from typing import List, Optional, Literal
from pydantic import BaseModel

# ---- Shared Models ----

class TextEdit(BaseModel):
    """One edit against the request's source, in UTF-8 byte offsets."""
    start_byte: int
    end_byte: int
    replacement: str

class FileEdits(BaseModel):
    file_name: str
    edits: List[TextEdit] = []

class SourceRequest(BaseModel):
    """A source file sent inline with the request."""
    file_name: str  # Used for language detection (.js, .jsx, .ts, .tsx, ...)
    text: str

# ---- Refactor Models ----

class RefactorAction(BaseModel):
    name: str
    description: str

class ApplicableRefactor(BaseModel):
    name: str
    description: str
    actions: List[RefactorAction] = []

class AvailableRefactorsRequest(SourceRequest):
    position: int  # 0-based byte offset of the cursor
    end_position: Optional[int] = None

class AvailableRefactorsResponse(BaseModel):
    refactors: List[ApplicableRefactor] = []

class ApplyRefactorRequest(SourceRequest):
    position: int
    refactor: str  # e.g. "Inline local"
    action: str  # e.g. "Inline all"
    end_position: Optional[int] = None

class ApplyRefactorResponse(BaseModel):
    edits: List[FileEdits] = []
    new_text: str

# ---- Code Fix Models ----

class DiagnosticModel(BaseModel):
    code: int
    category: Literal["error", "warning", "suggestion", "message"] = "error"
    message: str
    start_byte: int
    end_byte: int

class DiagnosticsResponse(BaseModel):
    diagnostics: List[DiagnosticModel] = []

class CodeFixRequest(SourceRequest):
    """Either a diagnostic span (start, length, error_code) or a fix-all id."""
    start: Optional[int] = None
    length: int = 0
    error_code: Optional[int] = None
    fix_id: Optional[str] = None

class CodeFixModel(BaseModel):
    fix_name: str
    description: str
    fix_id: Optional[str] = None
    fix_all_description: Optional[str] = None
    edits: List[FileEdits] = []

class CodeFixResponse(BaseModel):
    fixes: List[CodeFixModel] = []
    new_text: Optional[str] = None  # Set for fix-all requests
