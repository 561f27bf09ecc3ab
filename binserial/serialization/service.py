"""Serialization service implementation.

The wire format is positional and untagged: a value is the concatenation
of its fields' encodings in schema order, or a single encoding when the
schema is empty. See :mod:`binserial.serialization.schema` for the
schema-identity obligation this places on callers.

Example:
    >>> serializer = BinarySerializer(Entry)
    >>> payload = serializer.to_bytes(Entry(name="Cache", tags=["a", "b"]))
    >>> serializer.from_bytes(payload).tags
    ['a', 'b']
"""

import io
from typing import Any, BinaryIO, Callable, Dict, Optional, Union

from binserial.config import SerializerConfig
from binserial.exceptions import (
    ArgumentNullError,
    CorruptLengthError,
    SerializationError,
    UnexpectedEndOfStreamError,
)
from binserial.logging import get_logger
from binserial.serialization.api import ObjectDataInput, ObjectDataOutput, Serializer
from binserial.serialization.builtin import StringSerializer, scalar_serializer
from binserial.serialization.collection import ByteArraySerializer, CollectionSerializer
from binserial.serialization.image import ImageSerializer
from binserial.serialization.schema import Schema, SchemaService, default_schema_service
from binserial.serialization.types import CategoryTag, ScalarKind, WireCategory, type_name

_logger = get_logger("serializer")

ValueFactory = Callable[[], Any]


class ObjectDataInputImpl(ObjectDataInput):
    """ObjectDataInput over a binary stream or a bytes-like object.

    For seekable sources the end position is captured up front so that
    decoded lengths can be checked against the bytes left.

    Args:
        source: A readable binary stream, or bytes to read from.
        max_length: Optional upper bound on any decoded count or length.
    """

    def __init__(
        self,
        source: Union[BinaryIO, bytes, bytearray, memoryview],
        max_length: Optional[int] = None,
    ):
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self._stream = source
        self._max_length = max_length
        self._pos = 0
        self._available: Optional[int] = None

        if _is_seekable(source):
            start = source.tell()
            end = source.seek(0, io.SEEK_END)
            source.seek(start)
            self._available = end - start

    def read_bytes(self, length: int) -> bytes:
        if length == 0:
            return b""
        data = self._stream.read(length)
        if len(data) < length:
            chunks = [data]
            received = len(data)
            while received < length:
                chunk = self._stream.read(length - received)
                if not chunk:
                    break
                chunks.append(chunk)
                received += len(chunk)
            data = b"".join(chunks)
        self._pos += len(data)
        if len(data) < length:
            raise UnexpectedEndOfStreamError(length, len(data))
        return data

    def remaining(self) -> Optional[int]:
        if self._available is None:
            return None
        return self._available - self._pos

    def position(self) -> int:
        return self._pos

    def check_length(self, length: int) -> int:
        super().check_length(length)
        if self._max_length is not None and length > self._max_length:
            raise CorruptLengthError(
                length, f"Length prefix {length} exceeds the configured maximum {self._max_length}"
            )
        return length


class ObjectDataOutputImpl(ObjectDataOutput):
    """ObjectDataOutput over a binary stream, in memory by default."""

    def __init__(self, sink: Optional[BinaryIO] = None):
        self._stream = sink if sink is not None else io.BytesIO()
        self._pos = 0

    def write_bytes(self, value: bytes) -> None:
        self._stream.write(value)
        self._pos += len(value)

    def flush(self) -> None:
        self._stream.flush()

    def position(self) -> int:
        return self._pos

    def to_byte_array(self) -> bytes:
        """Get everything written so far.

        Only available for the default in-memory sink.
        """
        if not isinstance(self._stream, io.BytesIO):
            raise SerializationError("to_byte_array is only available for in-memory output")
        return self._stream.getvalue()


def _is_seekable(stream: Any) -> bool:
    seekable = getattr(stream, "seekable", None)
    return bool(seekable and seekable())


class SerializationService:
    """Routes wire categories to their codecs.

    Holds one serializer per category; serializers are stateless, so a
    service can be shared across threads as long as each call brings its
    own stream and target value.
    """

    def __init__(self, config: Optional[SerializerConfig] = None):
        self._config = config or SerializerConfig()
        self._string_serializer = StringSerializer()
        self._image_serializer = ImageSerializer(self._config.strict_image_dimensions)
        self._serializers: Dict[WireCategory, Serializer] = {}

    @property
    def config(self) -> SerializerConfig:
        return self._config

    def serializer_for(self, category: WireCategory) -> Serializer:
        """Get the serializer for a wire category."""
        serializer = self._serializers.get(category)
        if serializer is None:
            serializer = self._create_serializer(category)
            self._serializers[category] = serializer
        return serializer

    def _create_serializer(self, category: WireCategory) -> Serializer:
        tag = category.tag
        if tag is CategoryTag.SCALAR:
            return scalar_serializer(category.kind)
        if tag is CategoryTag.SCALAR_ARRAY:
            if category.kind is ScalarKind.UINT8:
                return ByteArraySerializer()
            return CollectionSerializer(scalar_serializer(category.kind), tuple)
        if tag is CategoryTag.SCALAR_LIST:
            return CollectionSerializer(scalar_serializer(category.kind), list)
        if tag is CategoryTag.TEXT:
            return self._string_serializer
        if tag is CategoryTag.TEXT_LIST:
            return CollectionSerializer(self._string_serializer, list)
        if tag is CategoryTag.IMAGE:
            return self._image_serializer
        if tag is CategoryTag.IMAGE_LIST:
            return CollectionSerializer(self._image_serializer, list)
        raise SerializationError(f"No serializer for wire category {category}")

    def create_input(self, source: Union[BinaryIO, bytes]) -> ObjectDataInput:
        """Wrap a stream or bytes in an input cursor honouring the config."""
        if isinstance(source, ObjectDataInput):
            return source
        return ObjectDataInputImpl(source, self._config.max_collection_length)

    def write(self, output: ObjectDataOutput, value: Any, schema: Schema) -> None:
        """Encode a value field by field, or whole for an empty schema."""
        if schema.is_empty:
            self.serializer_for(schema.value_category).write(output, value)
            return
        for descriptor in schema.fields:
            self.serializer_for(descriptor.category).write(output, descriptor.get(value))

    def read(self, input: ObjectDataInput, schema: Schema, target: Any) -> Any:
        """Decode into ``target`` field by field, or whole for an empty schema."""
        if schema.is_empty:
            return self.serializer_for(schema.value_category).read(input)
        for descriptor in schema.fields:
            try:
                value = self.serializer_for(descriptor.category).read(input)
            except SerializationError:
                _logger.debug(
                    "Failed to decode field '%s' (%s) of %s at byte %d",
                    descriptor.name, descriptor.category, type_name(schema.shape), input.position(),
                )
                raise
            descriptor.set(target, value)
        return target

    def serialize(self, stream: Union[BinaryIO, ObjectDataOutput], value: Any, schema: Schema) -> None:
        """Encode a value into a stream.

        The value is encoded in memory first, so a failure writes nothing
        to the stream. The stream is flushed before returning.

        Raises:
            ArgumentNullError: If the value or stream is None.
            UnsupportedTypeError: If a field holds an unsupported runtime value.
            ScalarRangeError: If a value does not fit its scalar kind.
        """
        if value is None:
            raise ArgumentNullError("value")
        if stream is None:
            raise ArgumentNullError("stream")

        buffer = ObjectDataOutputImpl()
        self.write(buffer, value, schema)
        data = buffer.to_byte_array()

        if isinstance(stream, ObjectDataOutput):
            stream.write_bytes(data)
        else:
            stream.write(data)
        stream.flush()

    def deserialize(
        self,
        stream: Union[BinaryIO, bytes, ObjectDataInput],
        schema: Schema,
        value_factory: Optional[ValueFactory] = None,
    ) -> Any:
        """Decode one value from a stream.

        A fresh value is made with ``value_factory`` (the schema's shape by
        default) and its fields are assigned in schema order. For an empty
        schema the decoded value is returned directly.

        On error nothing usable is returned and the stream position is
        unspecified.

        Raises:
            ArgumentNullError: If the stream is None.
            UnexpectedEndOfStreamError: If the stream ends mid-value.
            CorruptLengthError: If a decoded count cannot be valid.
            ImageDecodeError: If image bytes cannot be decompressed.
        """
        if stream is None:
            raise ArgumentNullError("stream")

        input = self.create_input(stream)
        target = None
        if value_factory is not None:
            target = value_factory()
        elif not schema.is_empty:
            if not callable(schema.shape):
                raise ArgumentNullError("value_factory")
            target = schema.shape()

        return self.read(input, schema, target)


def serialize(
    stream: Union[BinaryIO, ObjectDataOutput],
    value: Any,
    schema: Schema,
    config: Optional[SerializerConfig] = None,
) -> None:
    """Encode a value into a stream with the given schema."""
    SerializationService(config).serialize(stream, value, schema)


def deserialize(
    stream: Union[BinaryIO, bytes, ObjectDataInput],
    schema: Schema,
    value_factory: Optional[ValueFactory] = None,
    config: Optional[SerializerConfig] = None,
) -> Any:
    """Decode a value from a stream with the given schema."""
    return SerializationService(config).deserialize(stream, schema, value_factory)


class BinarySerializer:
    """Serializer for one value shape.

    The schema is built once, on construction, and reused by every call.

    Args:
        shape: The type to serialize. Either a class with marked fields or
            a directly supported type such as ``List[str]``.
        value_factory: Zero-argument callable returning a fresh default
            value for decoding. Defaults to calling ``shape``.
        config: Decoding limits and image policy.
        schema_service: Schema cache to use. Defaults to the process-wide one.

    Example:
        >>> serializer = BinarySerializer(Entry)
        >>> with open("entry.bin", "wb") as f:
        ...     serializer.serialize(f, entry)
        >>> with open("entry.bin", "rb") as f:
        ...     entry = serializer.deserialize(f)
    """

    def __init__(
        self,
        shape: Any,
        value_factory: Optional[ValueFactory] = None,
        config: Optional[SerializerConfig] = None,
        schema_service: Optional[SchemaService] = None,
    ):
        if shape is None:
            raise ArgumentNullError("shape")
        service = schema_service or default_schema_service()
        self._schema = service.get_or_build(shape)
        self._value_factory = value_factory
        self._service = SerializationService(config)

    @classmethod
    def from_schema(
        cls,
        schema: Schema,
        value_factory: Optional[ValueFactory] = None,
        config: Optional[SerializerConfig] = None,
    ) -> "BinarySerializer":
        """Create a serializer for an explicitly built schema."""
        serializer = cls.__new__(cls)
        serializer._schema = schema
        serializer._value_factory = value_factory
        serializer._service = SerializationService(config)
        return serializer

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def config(self) -> SerializerConfig:
        return self._service.config

    def serialize(self, stream: Union[BinaryIO, ObjectDataOutput], value: Any) -> None:
        """Encode a value into a stream and flush it."""
        self._service.serialize(stream, value, self._schema)

    def deserialize(self, stream: Union[BinaryIO, bytes, ObjectDataInput]) -> Any:
        """Decode a value from a stream."""
        return self._service.deserialize(stream, self._schema, self._value_factory)

    def to_bytes(self, value: Any) -> bytes:
        """Encode a value to bytes."""
        buffer = io.BytesIO()
        self.serialize(buffer, value)
        return buffer.getvalue()

    def from_bytes(self, data: bytes) -> Any:
        """Decode a value from bytes."""
        if data is None:
            raise ArgumentNullError("data")
        return self.deserialize(data)
