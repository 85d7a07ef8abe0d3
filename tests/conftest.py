"""Root pytest configuration for images-client tests."""
import pytest

from images_client.service import ImagesService
from images_client.settings import Settings

from .fakes import FakeTransport
from .fixtures.image_documents import IMAGE_ID, IMAGE_SCHEMA, image_body


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Automatically set up test environment variables."""
    monkeypatch.setenv("IMAGES_ENDPOINT", "http://localhost:9292")
    monkeypatch.delenv("IMAGES_AUTH_TOKEN", raising=False)
    monkeypatch.delenv("IMAGES_HTTP_TIMEOUT", raising=False)
    monkeypatch.delenv("IMAGES_HTTP_RETRY", raising=False)
    monkeypatch.delenv("IMAGES_INSECURE", raising=False)


@pytest.fixture
def settings():
    """Standard test settings."""
    return Settings(endpoint="http://localhost:9292", auth_token="test-token")


@pytest.fixture
def transport():
    """Fake transport seeded with the image schema and one image."""
    fake = FakeTransport()
    fake.add("GET", "/v2/schemas/image", IMAGE_SCHEMA)
    fake.add("GET", f"/v2/images/{IMAGE_ID}", image_body())
    return fake


@pytest.fixture
def service(transport):
    return ImagesService(transport)


@pytest.fixture
def image(service):
    """Unfetched handle on the seeded image."""
    return service.image(IMAGE_ID)
