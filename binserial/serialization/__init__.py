"""Schema-driven binary serialization package."""

from binserial.serialization.api import (
    ObjectDataInput,
    ObjectDataOutput,
    Serializer,
)
from binserial.serialization.types import (
    CategoryTag,
    ScalarKind,
    WireCategory,
    Boolean,
    Int8,
    UInt8,
    Int16,
    UInt16,
    Int32,
    UInt32,
    Int64,
    UInt64,
    Float32,
    Float64,
    Decimal128,
    Char,
    resolve,
)
from binserial.serialization.builtin import (
    read_scalar,
    write_scalar,
)
from binserial.serialization.collection import (
    read_collection,
    write_collection,
)
from binserial.serialization.image import (
    JPEG_QUALITY,
    ImageSerializer,
    read_image,
    read_image_list,
    write_image,
    write_image_list,
)
from binserial.serialization.schema import (
    DataMember,
    FieldDescriptor,
    Schema,
    SchemaBuilder,
    SchemaService,
    build_schema,
    data_member,
)
from binserial.serialization.service import (
    BinarySerializer,
    ObjectDataInputImpl,
    ObjectDataOutputImpl,
    SerializationService,
    deserialize,
    serialize,
)

__all__ = [
    "ObjectDataInput",
    "ObjectDataOutput",
    "Serializer",
    "CategoryTag",
    "ScalarKind",
    "WireCategory",
    "Boolean",
    "Int8",
    "UInt8",
    "Int16",
    "UInt16",
    "Int32",
    "UInt32",
    "Int64",
    "UInt64",
    "Float32",
    "Float64",
    "Decimal128",
    "Char",
    "resolve",
    "read_scalar",
    "write_scalar",
    "read_collection",
    "write_collection",
    "JPEG_QUALITY",
    "ImageSerializer",
    "read_image",
    "read_image_list",
    "write_image",
    "write_image_list",
    "DataMember",
    "FieldDescriptor",
    "Schema",
    "SchemaBuilder",
    "SchemaService",
    "build_schema",
    "data_member",
    "BinarySerializer",
    "ObjectDataInputImpl",
    "ObjectDataOutputImpl",
    "SerializationService",
    "deserialize",
    "serialize",
]
