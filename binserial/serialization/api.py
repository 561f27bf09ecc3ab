"""Serialization API interfaces.

This module defines the byte cursors the codecs read from and write to,
and the :class:`Serializer` interface every codec implements.

Codecs only ever move whole runs of bytes through a cursor. Framing
(counts, lengths, scalar layouts) belongs to the codecs, so a cursor can
be backed by any binary stream.

Example:
    Implementing a codec for a two-int point::

        from binserial.serialization.api import Serializer, ObjectDataInput, ObjectDataOutput
        from binserial.serialization.builtin import get_scalar_serializers
        from binserial.serialization.types import ScalarKind

        INT32 = get_scalar_serializers()[ScalarKind.INT32]

        class PointSerializer(Serializer[Point]):
            def write(self, output: ObjectDataOutput, point: Point) -> None:
                INT32.write(output, point.x)
                INT32.write(output, point.y)

            def read(self, input: ObjectDataInput) -> Point:
                return Point(INT32.read(input), INT32.read(input))
"""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from binserial.exceptions import CorruptLengthError

T = TypeVar("T")


class ObjectDataInput(ABC):
    """Interface for reading serialized data.

    A cursor over a byte source, exclusively owned by one in-flight
    decode call.
    """

    @abstractmethod
    def read_bytes(self, length: int) -> bytes:
        """Read exactly ``length`` bytes.

        Args:
            length: Number of bytes to read.

        Returns:
            The bytes read.

        Raises:
            UnexpectedEndOfStreamError: If fewer bytes are available.
        """
        pass

    @abstractmethod
    def remaining(self) -> Optional[int]:
        """Get the number of unread bytes.

        Returns:
            The number of bytes left, or None if the source cannot tell.
        """
        pass

    @abstractmethod
    def position(self) -> int:
        """Get the number of bytes consumed so far."""
        pass

    def check_length(self, length: int) -> int:
        """Validate a decoded count or byte length before acting on it.

        Every encoded element takes at least one byte, so a count larger
        than the bytes left can never be satisfied.

        Args:
            length: The decoded count or byte length.

        Returns:
            The length, unchanged.

        Raises:
            CorruptLengthError: If the length is negative or exceeds the
                bytes left in the source.
        """
        if length < 0:
            raise CorruptLengthError(length, f"Negative length prefix: {length}")
        remaining = self.remaining()
        if remaining is not None and length > remaining:
            raise CorruptLengthError(
                length, f"Length prefix {length} exceeds the {remaining} bytes left"
            )
        return length


class ObjectDataOutput(ABC):
    """Interface for writing serialized data.

    A cursor over a byte sink, exclusively owned by one in-flight
    encode call.
    """

    @abstractmethod
    def write_bytes(self, value: bytes) -> None:
        """Write a run of raw bytes.

        Args:
            value: The bytes to append.
        """
        pass

    @abstractmethod
    def flush(self) -> None:
        """Flush buffered bytes to the underlying sink."""
        pass

    @abstractmethod
    def position(self) -> int:
        """Get the number of bytes written so far."""
        pass


class Serializer(ABC, Generic[T]):
    """Base interface for a codec of one wire shape.

    Type Parameters:
        T: The type of value this serializer handles.
    """

    @abstractmethod
    def write(self, output: ObjectDataOutput, obj: T) -> None:
        """Write a value to the output.

        Args:
            output: The output cursor to write to.
            obj: The value to encode.
        """
        pass

    @abstractmethod
    def read(self, input: ObjectDataInput) -> T:
        """Read a value from the input.

        Args:
            input: The input cursor to read from.

        Returns:
            The decoded value.
        """
        pass
