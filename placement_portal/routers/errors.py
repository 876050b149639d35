"""Translation of service failures into HTTP errors."""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from placement_portal.core.exceptions import ApplicationError, to_http_exception

logger = logging.getLogger(__name__)


def rejected(operation: str, error: ApplicationError) -> HTTPException:
    """Log a refused operation and return the matching HTTP error."""
    logger.warning(f"{operation} rejected: {error.message}")
    return to_http_exception(error)


def database_error(operation: str, error: SQLAlchemyError) -> HTTPException:
    """Log a storage failure and return a generic 500."""
    logger.error(f"Database error during {operation}: {error}")
    return HTTPException(status_code=500, detail="Database error")
