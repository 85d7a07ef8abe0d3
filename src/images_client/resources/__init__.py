"""Images v2 resource models."""
from .base import Resource
from .image import Image
from .member import MEMBER_STATUSES, Member

__all__ = ["Resource", "Image", "Member", "MEMBER_STATUSES"]
