# Error taxonomy shared by every module.
# Services raise these; the handlers registered in be4real.main render them as
# {"status": "error", "kind": ..., "message": ...} with the matching HTTP status.

from typing import Any, Dict, Optional

from fastapi import status


class AppError(Exception):
    """Base class for errors that are reported to the client"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind: str = "internal"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"status": "error", "kind": self.kind, "message": self.message}


class InvalidInputError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "invalid_input"
    default_message = "Invalid fields"


class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "unauthenticated"
    default_message = "Could not validate credentials"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    kind = "forbidden"
    default_message = "Not enough permissions"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"
    default_message = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    kind = "conflict"
    default_message = "Conflict"


class InternalError(AppError):
    pass
