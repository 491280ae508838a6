"""Dependency injection and request helpers for FastAPI endpoints"""

import logging
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Header, HTTPException, Request
from sqlalchemy.orm import Session

from budget_nikal.config import settings
from budget_nikal.domain.exceptions import (
    CycleComputationError,
    DomainException,
    DuplicateMonthError,
    LimitExceededError,
    NotFoundError,
    ValidationError,
)

_STATUS_BY_ERROR = {
    ValidationError: 400,
    NotFoundError: 404,
    DuplicateMonthError: 409,
    LimitExceededError: 422,
    CycleComputationError: 422,
}


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Identity of the caller; authentication happens upstream"""
    user_id = x_user_id or settings.default_user_id
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-ID header")
    return user_id


def parse_id(value: str, entity: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {entity} ID format")


def http_error(error: DomainException) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))


@contextmanager
def unit_of_work(db: Session, request_id: str) -> Iterator[Session]:
    """
    Commit the request's changes on success, roll everything back on failure.

    Compound operations (an expense plus its statement, a budget plus its
    cash-out rows) either land together or not at all.
    """
    try:
        yield db
        db.commit()
    except DomainException as e:
        db.rollback()
        logging.warning(f"{type(e).__name__}: {e}", extra={"request_id": request_id})
        raise http_error(e)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
