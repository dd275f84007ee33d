from fastapi import HTTPException

from marketplace.application.exceptions import (
    ConflictError,
    ForbiddenError,
    MarketplaceError,
    NotFoundError,
    UpstreamUnavailable,
    ValidationError,
)

STATUS_BY_ERROR: tuple[tuple[type[MarketplaceError], int], ...] = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (ForbiddenError, 403),
    (ValidationError, 422),
    (UpstreamUnavailable, 503),
)


def to_http_exception(error: MarketplaceError) -> HTTPException:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
