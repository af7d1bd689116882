# api/errors.py
"""
Translate sync-layer errors into HTTP responses.
"""
from fastapi import HTTPException, status

from core.errors import (
    AssetSyncError,
    PartialMultiStepFailure,
    RemoteGatewayError,
    RemoteWriteError,
    ValidationFailedError,
)


def to_http_error(exc: AssetSyncError) -> HTTPException:
    if isinstance(exc, ValidationFailedError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": exc.message, "errors": exc.errors},
        )
    if isinstance(exc, PartialMultiStepFailure):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": exc.message,
                "partial": True,
                "completed_step": exc.completed_step,
                "failed_step": exc.failed_step,
            },
        )
    if isinstance(exc, RemoteWriteError) and exc.not_found:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    if isinstance(exc, RemoteGatewayError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
