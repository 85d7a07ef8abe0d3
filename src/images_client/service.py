"""
Images service facade.

Entry point that hands out bound Image resources, so callers never construct
resources or wire a transport by hand.
"""
from __future__ import annotations

from typing import Any, Optional

from .resources import Image
from .settings import Settings, create_settings_from_env
from .transport import HttpTransport, Transport


class ImagesService:
    """Factory for Image resources sharing one transport."""

    def __init__(self, transport: Transport):
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> ImagesService:
        """
        Build a service over HTTP.

        Args:
            settings: Optional settings (defaults to loading from environment)
        """
        if settings is None:
            settings = create_settings_from_env()
        return cls(HttpTransport(settings))

    def image(self, image_id: Optional[str] = None) -> Image:
        """Unfetched handle on an image."""
        return Image(self.transport, id=image_id)

    def create_image(self, **data: Any) -> Image:
        return self.image().create(data)

    def get_image(self, image_id: str) -> Image:
        return self.image(image_id).retrieve()

    def delete_image(self, image_id: str) -> None:
        self.image(image_id).delete()


__all__ = ["ImagesService"]
