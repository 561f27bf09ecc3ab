#!/usr/bin/env python3
"""Basic usage example for binserial.

This example demonstrates how to:
- Mark the fields of a dataclass for serialization
- Write a value to a file and read it back
- Inspect the schema built for a type
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from typing import List

from PIL import Image

from binserial import BinarySerializer, data_member
from binserial.logging import configure_logging, set_level


@dataclass
class CacheEntry:
    name: str = data_member(default="")
    words: List[str] = data_member(default_factory=list)
    thumbnail: Image.Image = data_member(default=None)
    # Not marked, so never written
    note: str = ""


def make_thumbnail() -> Image.Image:
    image = Image.new("RGB", (2, 2))
    image.putpixel((0, 0), (255, 0, 0))
    image.putpixel((1, 0), (0, 255, 0))
    image.putpixel((0, 1), (0, 0, 255))
    image.putpixel((1, 1), (255, 255, 255))
    return image


def main():
    configure_logging(level=logging.DEBUG)
    # Schema construction stays at DEBUG, field decode traces are muted
    set_level(logging.INFO, "serializer")

    serializer = BinarySerializer(CacheEntry)
    print("Schema fields:")
    for descriptor in serializer.schema:
        print(f"  {descriptor.index}: {descriptor.name} ({descriptor.category})")

    entry = CacheEntry(
        name="Cache",
        words=["Hello", "World", "From", "Codec"],
        thumbnail=make_thumbnail(),
        note="dropped",
    )

    with tempfile.TemporaryDirectory() as directory:
        path = os.path.join(directory, "entry.bin")

        with open(path, "wb") as f:
            serializer.serialize(f, entry)

        print(f"\nContents of {directory}:")
        for name in sorted(os.listdir(directory)):
            size = os.path.getsize(os.path.join(directory, name))
            print(f"  {name} ({size} bytes)")

        with open(path, "rb") as f:
            result = serializer.deserialize(f)

    print("\nRead back:")
    print(f"  name = {result.name}")
    print(f"  words = {result.words}")
    print(f"  thumbnail = {result.thumbnail.width}x{result.thumbnail.height}")
    print(f"  note = {result.note!r}")


if __name__ == "__main__":
    main()
