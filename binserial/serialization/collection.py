"""Length-prefixed collection codec.

Arrays and lists share one layout: an int32 element count followed by
each element in iteration order. A count of zero is the whole encoding
of an empty collection. Which container a read produces is up to the
caller; the codec only hands back elements in read order.
"""

from typing import Any, Callable, Iterable, List, Optional, Sequence, TypeVar

from binserial.exceptions import ScalarRangeError
from binserial.serialization.api import ObjectDataInput, ObjectDataOutput, Serializer
from binserial.serialization.builtin import read_int32, write_int32

T = TypeVar("T")

ElementWriter = Callable[[ObjectDataOutput, T], None]
ElementReader = Callable[[ObjectDataInput], T]


def write_collection(
    output: ObjectDataOutput, element_writer: ElementWriter, elements: Optional[Iterable[T]]
) -> None:
    """Write an int32 count, then every element.

    Args:
        output: The output cursor.
        element_writer: Writes a single element.
        elements: The elements to write. None is written as empty.
    """
    if elements is None:
        elements = ()
    elif not isinstance(elements, Sequence):
        elements = list(elements)
    write_int32(output, len(elements))
    for item in elements:
        element_writer(output, item)


def read_collection(input: ObjectDataInput, element_reader: ElementReader) -> List[T]:
    """Read an int32 count, then exactly that many elements.

    Raises:
        CorruptLengthError: If the count is negative or larger than the
            bytes left in the input.
    """
    count = input.check_length(read_int32(input))
    return [element_reader(input) for _ in range(count)]


class CollectionSerializer(Serializer[Sequence[T]]):
    """Serializer for a collection of one element shape.

    Args:
        element: Serializer for a single element.
        materialize: Builds the container handed back on read
            (``list`` for lists, ``tuple`` for fixed arrays).
    """

    def __init__(self, element: Serializer[T], materialize: Callable[[List[T]], Any] = list):
        self._element = element
        self._materialize = materialize

    @property
    def element(self) -> Serializer[T]:
        return self._element

    def write(self, output: ObjectDataOutput, obj: Sequence[T]) -> None:
        write_collection(output, self._element.write, obj)

    def read(self, input: ObjectDataInput) -> Sequence[T]:
        return self._materialize(read_collection(input, self._element.read))


class ByteArraySerializer(Serializer[bytes]):
    """Serializer for arrays of uint8, moved as one run of bytes.

    Same layout as a :class:`CollectionSerializer` of uint8 elements.
    """

    def write(self, output: ObjectDataOutput, obj: bytes) -> None:
        if obj is None:
            obj = b""
        if isinstance(obj, int):
            raise ScalarRangeError(f"{obj!r} is not a byte array")
        try:
            data = bytes(obj)
        except (ValueError, TypeError) as e:
            raise ScalarRangeError("Byte array elements must be in range(0, 256)", cause=e)
        write_int32(output, len(data))
        output.write_bytes(data)

    def read(self, input: ObjectDataInput) -> bytes:
        count = input.check_length(read_int32(input))
        return input.read_bytes(count)
