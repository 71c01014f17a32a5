import logging
import time

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from refactor_engine.errors import InvalidActionError, OverlapError, RefactorError, UnsupportedLanguageError
from refactor_engine.registry import get_refactor_names, get_supported_error_codes

from .models import (ApplyRefactorRequest, ApplyRefactorResponse, AvailableRefactorsRequest,
                     AvailableRefactorsResponse, CodeFixRequest, CodeFixResponse, DiagnosticsResponse,
                     SourceRequest)
from .services.refactoring import create_service
from .settings import settings

logging.basicConfig(
    level=logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Refactor Engine - JavaScript/TypeScript refactorings")

# CORS configuration from settings
# If no origins configured, allow localhost for development
allowed_origins = settings.allowed_origins if settings.allowed_origins else [
    "http://localhost:*",
    "http://127.0.0.1:*",
    "vscode-webview://*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)

service = create_service(settings.config_path)

# Server version for health checks
SERVER_VERSION = "0.1.0"


# --- Error mapping ---

@app.exception_handler(RefactorError)
async def refactor_error_handler(request: Request, exc: RefactorError):
    if isinstance(exc, InvalidActionError):
        status_code = 400
    elif isinstance(exc, UnsupportedLanguageError):
        status_code = 415
    else:
        status_code = 500
    if status_code == 500:
        logger.error(f"{request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.url.path} rejected: {exc}")
    return JSONResponse(status_code=status_code, content={
        "detail": str(exc),
        "error": type(exc).__name__,
        "overlap": [list(exc.first), list(exc.second)] if isinstance(exc, OverlapError) else None,
    })


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc), "error": "ValueError"})


def check_size(request: SourceRequest) -> None:
    size = len(request.text.encode("utf-8"))
    if size > settings.max_source_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Source is {size} bytes; the limit is {settings.max_source_bytes}",
        )


# --- Endpoints ---

@app.get("/health")
def health():
    """
    Health check endpoint.
    Used by load balancers and orchestrators.
    """
    service.engine.ensure_loaded()
    return {
        "status": "ok",
        "version": SERVER_VERSION,
        "engine": "tree-sitter",
        "timestamp": int(time.time()),
        "refactors": get_refactor_names(),
        "fixable_error_codes": get_supported_error_codes(),
    }


@app.post("/refactors/available", response_model=AvailableRefactorsResponse)
def refactors_available(request: AvailableRefactorsRequest):
    """Refactors and actions available at a cursor position."""
    check_size(request)
    return service.available(request)


@app.post("/refactors/apply", response_model=ApplyRefactorResponse)
def refactors_apply(request: ApplyRefactorRequest):
    """Apply one advertised action; returns its edits and the new text."""
    check_size(request)
    start = time.time()
    response = service.apply(request)
    logger.info(f"{request.refactor}/{request.action} on {request.file_name} "
                f"took {int((time.time() - start) * 1000)}ms")
    return response


@app.post("/codefixes/diagnostics", response_model=DiagnosticsResponse)
def codefixes_diagnostics(request: SourceRequest):
    """Diagnostics the engine's fixes can respond to."""
    check_size(request)
    return service.diagnostics(request)


@app.post("/codefixes/apply", response_model=CodeFixResponse)
def codefixes_apply(request: CodeFixRequest):
    """Fixes for one diagnostic span, or a fix-all when ``fix_id`` is set."""
    check_size(request)
    return service.code_fixes(request)


def cli():
    import uvicorn
    uvicorn.run("refactor_api.main:app", host="0.0.0.0", port=8000, reload=settings.debug)


if __name__ == "__main__":
    cli()
