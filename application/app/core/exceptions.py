"""
Application error taxonomy.

Every error carries an HTTP status, a machine-readable code and the full
list of violations so callers can fix all of them at once.
"""
from typing import Dict, List, Optional

from app.core.constants import ErrorCode


class OMSError(Exception):
    status_code = 500
    error_code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, errors: Optional[List[Dict]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    def to_dict(self) -> Dict:
        payload = {"error_code": self.error_code, "message": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class InvalidInputError(OMSError):
    status_code = 400
    error_code = ErrorCode.INVALID_INPUT


class SlabRangeError(InvalidInputError):
    error_code = ErrorCode.INVALID_SLAB_RANGES


class RangeOverlapError(SlabRangeError):
    error_code = ErrorCode.RANGE_OVERLAP


class RangeOrderError(SlabRangeError):
    error_code = ErrorCode.RANGE_ORDER


class NotFoundError(OMSError):
    status_code = 404
    error_code = ErrorCode.NOT_FOUND


class ConflictError(OMSError):
    status_code = 409
    error_code = ErrorCode.CONFLICT


class InvalidStatusTransitionError(ConflictError):
    error_code = ErrorCode.INVALID_STATUS_TRANSITION


class InternalError(OMSError):
    pass
