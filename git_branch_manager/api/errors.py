"""Maps domain exceptions to JSON error envelopes."""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from git_branch_manager.exceptions import (
    BranchNotFoundError,
    BranchValidationError,
    CurrentBranchError,
    GitOperationError,
)
from git_branch_manager.utils.logging import get_logger

logger = get_logger(__name__)


def error_response(
    status_code: int,
    message: str,
    stdout: str = "",
    stderr: Optional[str] = None,
    code: Optional[int] = None,
) -> JSONResponse:
    """Build the ``{success: false, message, stdout, stderr, code?}`` envelope."""
    content = {
        "success": False,
        "message": message,
        "stdout": stdout,
        "stderr": message if stderr is None else stderr,
    }
    if code is not None:
        content["code"] = code
    return JSONResponse(status_code=status_code, content=content)


async def handle_validation_error(request: Request, exc: BranchValidationError) -> JSONResponse:
    return error_response(400, exc.message)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return error_response(400, "Invalid request: " + "; ".join(details))


async def handle_current_branch_error(request: Request, exc: CurrentBranchError) -> JSONResponse:
    return error_response(400, exc.message)


async def handle_branch_not_found(request: Request, exc: BranchNotFoundError) -> JSONResponse:
    return error_response(404, exc.message)


async def handle_git_operation_error(request: Request, exc: GitOperationError) -> JSONResponse:
    """git ran and failed: pass its output through verbatim."""
    logger.error(f"{request.method} {request.url.path}: {exc}")
    result = exc.result
    if result is None:
        return error_response(500, exc.message or str(exc), code=1)
    return error_response(
        500,
        exc.message or str(exc),
        stdout=result.stdout,
        stderr=result.stderr,
        code=result.exit_code,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers and a catch-all for unexpected errors."""
    # Starlette picks the handler of the most specific class in the MRO
    app.add_exception_handler(BranchValidationError, handle_validation_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(CurrentBranchError, handle_current_branch_error)
    app.add_exception_handler(BranchNotFoundError, handle_branch_not_found)
    app.add_exception_handler(GitOperationError, handle_git_operation_error)

    @app.middleware("http")
    async def catch_unexpected_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(f"Unexpected error handling {request.method} {request.url.path}")
            return error_response(500, f"Unexpected error: {e}", code=1)
