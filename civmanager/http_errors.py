from fastapi import HTTPException, status

from civmanager.errors import (
    AlreadyFounded,
    AuthError,
    GameError,
    InsufficientResource,
    NotFound,
    TransientStoreFailure,
)


def http_error(exc: GameError) -> HTTPException:
    """Translate a domain error into the HTTP error a router should raise."""
    if isinstance(exc, InsufficientResource):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.as_detail())
    if isinstance(exc, AlreadyFounded):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, TransientStoreFailure):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    if isinstance(exc, AuthError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
