"""
app/api/errors.py

Translation of service-layer exceptions into HTTP responses.

    DatasetNotFoundError     -> 404 {"detail": {"code", "message"}}
    DatasetValidationError   -> 400 {"detail": {"code", "message"}}
    DatasetPersistenceError  -> 500 generic message, full detail in the log
    anything else            -> 500 generic message, full detail in the log
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.domain.errors import DatasetNotFoundError, DatasetValidationError
from db.repositories.errors import DatasetPersistenceError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_DETAIL = {"code": "INTERNAL", "message": "Internal server error; see server logs for details."}


@contextmanager
def http_errors(action: str) -> Iterator[None]:
    try:
        yield
    except HTTPException:
        raise
    except DatasetNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.to_dict(),
        ) from exc
    except DatasetValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except DatasetPersistenceError as exc:
        logger.exception("Persistence failure during %s", action)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        ) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unhandled failure during %s", action)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        ) from exc


async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Malformed request bodies are client errors like any other: 400, not 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "code": "VALIDATION",
                "message": "Request is malformed.",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )
