"""Schema-driven binary serializer."""

from binserial.config import SerializerConfig
from binserial.exceptions import (
    SerializationError,
    ArgumentNullError,
    UnsupportedTypeError,
    UnexpectedEndOfStreamError,
    CorruptLengthError,
    ImageDecodeError,
    ScalarRangeError,
    ConfigurationError,
)
from binserial.serialization import (
    BinarySerializer,
    DataMember,
    Schema,
    SchemaBuilder,
    ScalarKind,
    WireCategory,
    build_schema,
    data_member,
    deserialize,
    serialize,
)

__version__ = "0.1.0"

__all__ = [
    "SerializerConfig",
    "SerializationError",
    "ArgumentNullError",
    "UnsupportedTypeError",
    "UnexpectedEndOfStreamError",
    "CorruptLengthError",
    "ImageDecodeError",
    "ScalarRangeError",
    "ConfigurationError",
    "BinarySerializer",
    "DataMember",
    "Schema",
    "SchemaBuilder",
    "ScalarKind",
    "WireCategory",
    "build_schema",
    "data_member",
    "deserialize",
    "serialize",
]
