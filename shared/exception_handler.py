import logging

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from shared.core.errors import BulkOperationError, SequenceConflictError
from shared.core.schemas import JsonOutResult
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        # error_response() already packs a JsonOutResult into detail
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            wrapped = exc.detail
        else:
            wrapped = JsonOutResult(
                data=None,
                status="Failure",
                status_code=str(exc.status_code or AppStatusCode.OPERATION_FAILED),
                message=str(exc.detail)
            ).model_dump(mode="json")
        return JSONResponse(content=wrapped, status_code=exc.status_code or 400)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        wrapped = JsonOutResult(
            data=None,
            status="Failure",
            status_code=AppStatusCode.INVALID_INPUT,
            message=str(exc)
        ).model_dump(mode="json")
        return JSONResponse(content=wrapped, status_code=422)

    @app.exception_handler(BulkOperationError)
    async def bulk_operation_exception_handler(request: Request, exc: BulkOperationError):
        logger.error("Bulk operation partially failed: %s", exc)
        wrapped = JsonOutResult(
            data=exc.to_dict(),
            status="Failure",
            status_code=AppStatusCode.BULK_PARTIAL_FAILURE,
            message=str(exc)
        ).model_dump(mode="json")
        return JSONResponse(content=wrapped, status_code=409)

    @app.exception_handler(SequenceConflictError)
    async def sequence_conflict_exception_handler(request: Request, exc: SequenceConflictError):
        wrapped = JsonOutResult(
            data=None,
            status="Failure",
            status_code=AppStatusCode.SEQUENCE_CONFLICT,
            message=str(exc)
        ).model_dump(mode="json")
        return JSONResponse(content=wrapped, status_code=409)

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

        wrapped = JsonOutResult(
            data=None,
            status="Failure",
            status_code=AppStatusCode.OPERATION_FAILED,
            message=str(exc)
        ).model_dump(mode="json")
        return JSONResponse(content=wrapped, status_code=500)
