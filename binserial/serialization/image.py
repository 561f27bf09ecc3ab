"""Raster image codec.

An image is written as int32 width, int32 height, int32 byte count and
the JPEG bytes Pillow produces at quality 100. JPEG is lossy: a decoded
image has the original size but not necessarily the original pixels.
The quality is part of the wire contract and is not configurable.
"""

import io
from typing import List, Optional, Sequence

from PIL import Image

from binserial.exceptions import (
    ArgumentNullError,
    ImageDecodeError,
    SerializationError,
    UnsupportedTypeError,
)
from binserial.logging import get_logger
from binserial.serialization.api import ObjectDataInput, ObjectDataOutput, Serializer
from binserial.serialization.builtin import read_int32, write_int32
from binserial.serialization.collection import read_collection, write_collection
from binserial.serialization.types import type_name

JPEG_FORMAT = "JPEG"
JPEG_QUALITY = 100

_JPEG_MODES = ("L", "RGB", "CMYK")

_logger = get_logger("image")


def compress_image(image: Image.Image) -> bytes:
    """Compress a raster to JPEG bytes at the fixed wire quality.

    Modes JPEG cannot hold (alpha, palette, bilevel) are converted to RGB.

    Raises:
        SerializationError: If Pillow cannot compress the raster.
    """
    raster = image if image.mode in _JPEG_MODES else image.convert("RGB")
    buffer = io.BytesIO()
    try:
        raster.save(buffer, format=JPEG_FORMAT, quality=JPEG_QUALITY)
    except (OSError, ValueError) as e:
        raise SerializationError(f"Failed to compress {image.size} image", cause=e)
    return buffer.getvalue()


def decompress_image(data: bytes) -> Image.Image:
    """Decompress JPEG bytes into a fully loaded raster.

    Raises:
        ImageDecodeError: If the bytes are not a readable image.
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Failed to decompress {len(data)} image bytes", cause=e)
    return image


class ImageSerializer(Serializer[Image.Image]):
    """Serializer for Pillow images.

    The decompressed raster is what a read returns. If its size differs
    from the declared width and height the mismatch is logged, or raised
    as :class:`ImageDecodeError` when ``strict_dimensions`` is set.

    Args:
        strict_dimensions: Reject rasters whose size differs from the
            declared pair.
    """

    def __init__(self, strict_dimensions: bool = False):
        self._strict_dimensions = strict_dimensions

    @property
    def strict_dimensions(self) -> bool:
        return self._strict_dimensions

    def write(self, output: ObjectDataOutput, obj: Image.Image) -> None:
        if obj is None:
            raise ArgumentNullError("image")
        if not isinstance(obj, Image.Image):
            raise UnsupportedTypeError(type_name(type(obj)))

        width, height = obj.size
        data = compress_image(obj)
        write_int32(output, width)
        write_int32(output, height)
        write_int32(output, len(data))
        output.write_bytes(data)

    def read(self, input: ObjectDataInput) -> Image.Image:
        width = read_int32(input)
        height = read_int32(input)
        length = input.check_length(read_int32(input))
        image = decompress_image(input.read_bytes(length))

        if image.size != (width, height):
            if self._strict_dimensions:
                raise ImageDecodeError(
                    f"Decoded image is {image.size[0]}x{image.size[1]}, "
                    f"declared {width}x{height}"
                )
            _logger.warning(
                "Decoded image is %dx%d, declared %dx%d; keeping decoded size",
                image.size[0], image.size[1], width, height,
            )
        return image


def write_image_list(
    output: ObjectDataOutput, images: Optional[Sequence[Image.Image]], serializer: ImageSerializer = None
) -> None:
    """Write a count-prefixed list of images."""
    serializer = serializer or ImageSerializer()
    write_collection(output, serializer.write, images)


def read_image_list(input: ObjectDataInput, serializer: ImageSerializer = None) -> List[Image.Image]:
    """Read a count-prefixed list of images."""
    serializer = serializer or ImageSerializer()
    return read_collection(input, serializer.read)


def write_image(output: ObjectDataOutput, image: Image.Image) -> None:
    """Write one image: width, height, byte count and JPEG bytes."""
    ImageSerializer().write(output, image)


def read_image(input: ObjectDataInput, strict_dimensions: bool = False) -> Image.Image:
    """Read one image written by :func:`write_image`."""
    return ImageSerializer(strict_dimensions).read(input)
