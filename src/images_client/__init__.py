"""
Client for the OpenStack Images v2 API.

Provides Image and Member resources whose updates are computed as JSON Patch
documents from the schema the service publishes for each resource type.
"""
__version__ = "0.1.0"

from .errors import (
    AuthError,
    Conflict,
    ImagesError,
    NotFound,
    RateLimited,
    SchemaParseError,
    TransportError,
    ValidationError,
)
from .resources import Image, Member
from .service import ImagesService
from .settings import Settings, create_settings_from_env
from .transport import HttpTransport, Transport

__all__ = [
    "__version__",
    "Image",
    "Member",
    "ImagesService",
    "Settings",
    "create_settings_from_env",
    "Transport",
    "HttpTransport",
    "ImagesError",
    "SchemaParseError",
    "ValidationError",
    "TransportError",
    "AuthError",
    "NotFound",
    "Conflict",
    "RateLimited",
]
