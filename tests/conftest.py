"""Shared pytest fixtures for binserial tests."""

import pytest
from PIL import Image

from binserial.config import SerializerConfig
from binserial.serialization.schema import SchemaService
from binserial.serialization.service import (
    ObjectDataInputImpl,
    ObjectDataOutputImpl,
    SerializationService,
)


@pytest.fixture
def default_config():
    """Create a default SerializerConfig."""
    return SerializerConfig()


@pytest.fixture
def strict_config():
    """Create a SerializerConfig with every limit switched on."""
    return SerializerConfig(max_collection_length=16, strict_image_dimensions=True)


@pytest.fixture
def service(default_config):
    """Create a SerializationService with default settings."""
    return SerializationService(default_config)


@pytest.fixture
def schema_service():
    """Create an isolated schema cache."""
    return SchemaService()


@pytest.fixture
def output():
    """Create an in-memory output cursor."""
    return ObjectDataOutputImpl()


@pytest.fixture
def make_input():
    """Create an input cursor over bytes."""

    def factory(data: bytes, max_length=None):
        return ObjectDataInputImpl(data, max_length=max_length)

    return factory


@pytest.fixture
def small_image():
    """Create a 2x2 RGB raster."""
    image = Image.new("RGB", (2, 2))
    image.putpixel((0, 0), (255, 0, 0))
    image.putpixel((1, 0), (0, 255, 0))
    image.putpixel((0, 1), (0, 0, 255))
    image.putpixel((1, 1), (255, 255, 255))
    return image


@pytest.fixture
def wide_image():
    """Create a 4x3 RGB raster."""
    return Image.new("RGB", (4, 3), (10, 20, 30))
