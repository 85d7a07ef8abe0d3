"""Test doubles for images_client."""
from .fake_transport import FakeTransport, RecordedCall

__all__ = ["FakeTransport", "RecordedCall"]
