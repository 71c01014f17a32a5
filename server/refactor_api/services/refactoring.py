"""
Refactoring service for the HTTP API.

Wraps ``RefactorService`` and converts engine dataclasses to the API's
pydantic models.
"""

import logging
from typing import List, Optional

from refactor_engine.config import EngineConfig, load_config
from refactor_engine.registry import get_code_fix
from refactor_engine.service import RefactorService
from refactor_engine.types import FileTextChanges

from ..models import (ApplicableRefactor, ApplyRefactorRequest, ApplyRefactorResponse, AvailableRefactorsRequest,
                      AvailableRefactorsResponse, CodeFixModel, CodeFixRequest, CodeFixResponse, DiagnosticModel,
                      DiagnosticsResponse, FileEdits, RefactorAction, SourceRequest, TextEdit)

logger = logging.getLogger(__name__)


def to_file_edits(changes: List[FileTextChanges]) -> List[FileEdits]:
    return [
        FileEdits(
            file_name=change.file_name,
            edits=[TextEdit(start_byte=e.start_byte, end_byte=e.end_byte, replacement=e.replacement)
                   for e in change.text_changes],
        )
        for change in changes
    ]


class RefactoringService:
    """Service behind the /refactors and /codefixes endpoints."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.engine = RefactorService(config)

    def available(self, request: AvailableRefactorsRequest) -> AvailableRefactorsResponse:
        infos = self.engine.get_available_refactors(
            request.file_name, request.text, request.position, request.end_position)
        return AvailableRefactorsResponse(refactors=[
            ApplicableRefactor(
                name=info.name,
                description=info.description,
                actions=[RefactorAction(name=a.name, description=a.description) for a in info.actions],
            )
            for info in infos
        ])

    def apply(self, request: ApplyRefactorRequest) -> ApplyRefactorResponse:
        result, new_text = self.engine.apply_refactor(
            request.file_name, request.text, request.position, request.refactor, request.action,
            request.end_position)
        return ApplyRefactorResponse(edits=to_file_edits(result.edits), new_text=new_text)

    def diagnostics(self, request: SourceRequest) -> DiagnosticsResponse:
        found = self.engine.get_diagnostics(request.file_name, request.text)
        return DiagnosticsResponse(diagnostics=[
            DiagnosticModel(code=d.code, category=d.category, message=d.message,
                            start_byte=d.start_byte, end_byte=d.end_byte)
            for d in found
        ])

    def code_fixes(self, request: CodeFixRequest) -> CodeFixResponse:
        if request.fix_id is not None:
            combined, new_text = self.engine.fix_all(request.file_name, request.text, request.fix_id)
            description = get_code_fix(request.fix_id).meta.description
            fix = CodeFixModel(fix_name=request.fix_id, description=description, fix_id=request.fix_id,
                               fix_all_description=description, edits=to_file_edits(combined.changes))
            return CodeFixResponse(fixes=[fix] if combined.changes else [], new_text=new_text)
        if request.start is None or request.error_code is None:
            raise ValueError("Either fix_id or start and error_code are required")
        actions = self.engine.get_code_fixes(
            request.file_name, request.text, request.start, request.length, request.error_code)
        logger.debug(f"{len(actions)} fixes for error {request.error_code} at {request.start}")
        return CodeFixResponse(fixes=[
            CodeFixModel(
                fix_name=a.fix_name,
                description=a.description,
                fix_id=a.fix_id,
                fix_all_description=a.fix_all_description,
                edits=to_file_edits(a.changes),
            )
            for a in actions
        ])


def create_service(config_path: Optional[str] = None) -> RefactoringService:
    config = load_config(config_path) if config_path else None
    return RefactoringService(config)
