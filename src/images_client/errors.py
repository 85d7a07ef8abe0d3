"""
Images client error classes.

Provides a clear taxonomy of errors that can surface from an update cycle or
any other resource operation. HTTP status codes are mapped onto these by the
transport so callers never have to inspect raw responses.
"""
from __future__ import annotations

from typing import List, Optional


class ImagesError(Exception):
    """Base class for all images client errors."""
    pass


class SchemaParseError(ImagesError):
    """
    The schema document served for a resource type could not be understood.
    
    Raised when:
    - the payload is not valid JSON
    - the document is not an object or has no ``properties`` map
    - a property descriptor is not an object
    """
    pass


class ValidationError(ImagesError):
    """
    Desired resource state violates the resource schema.
    
    Carries every violated constraint, not just the first one found.
    """
    
    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(self._aggregate(self.errors))
    
    @staticmethod
    def _aggregate(errors: List[str]) -> str:
        if not errors:
            return "Validation failed"
        lines = "\n".join(f"- {e}" for e in errors)
        return f"Provided data failed schema validation ({len(errors)} error(s)):\n{lines}"


class TransportError(ImagesError):
    """
    Network or HTTP failure reported by the transport.
    
    ``status_code`` is None for connection-level failures.
    """
    
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(TransportError):
    """HTTP 401 Unauthorized or 403 Forbidden."""
    pass


class NotFound(TransportError):
    """HTTP 404 Not Found."""
    pass


class Conflict(TransportError):
    """HTTP 409 Conflict (e.g. uploading data to an image that already has some)."""
    pass


class RateLimited(TransportError):
    """HTTP 429 Too Many Requests."""
    pass


__all__ = [
    "ImagesError",
    "SchemaParseError",
    "ValidationError",
    "TransportError",
    "AuthError",
    "NotFound",
    "Conflict",
    "RateLimited",
]
