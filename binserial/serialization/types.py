"""Wire categories and declared-type resolution.

Python has a single ``int`` and a single ``float``, so the fixed-width
scalar kinds are spelled with the ``NewType`` markers defined here::

    @dataclass
    class Reading:
        sensor: Annotated[UInt16, DataMember] = 0
        samples: Annotated[List[Float32], DataMember] = field(default_factory=list)

Plain built-ins resolve too: ``bool`` is a boolean, ``int`` an int32,
``float`` a float64 and ``decimal.Decimal`` a decimal.
"""

import collections.abc
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, NewType, Optional, get_args, get_origin

from PIL import Image

from binserial.exceptions import UnsupportedTypeError


class ScalarKind(Enum):
    """Fixed-width primitive kinds."""

    BOOLEAN = "boolean"
    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    DECIMAL = "decimal"
    CHAR = "char"

    @property
    def width(self) -> Optional[int]:
        """Encoded width in bytes, or None for the UTF-8 encoded char."""
        return _SCALAR_WIDTHS[self]


_SCALAR_WIDTHS = {
    ScalarKind.BOOLEAN: 1,
    ScalarKind.INT8: 1,
    ScalarKind.UINT8: 1,
    ScalarKind.INT16: 2,
    ScalarKind.UINT16: 2,
    ScalarKind.INT32: 4,
    ScalarKind.UINT32: 4,
    ScalarKind.INT64: 8,
    ScalarKind.UINT64: 8,
    ScalarKind.FLOAT32: 4,
    ScalarKind.FLOAT64: 8,
    ScalarKind.DECIMAL: 16,
    ScalarKind.CHAR: None,
}


Boolean = NewType("Boolean", bool)
Int8 = NewType("Int8", int)
UInt8 = NewType("UInt8", int)
Int16 = NewType("Int16", int)
UInt16 = NewType("UInt16", int)
Int32 = NewType("Int32", int)
UInt32 = NewType("UInt32", int)
Int64 = NewType("Int64", int)
UInt64 = NewType("UInt64", int)
Float32 = NewType("Float32", float)
Float64 = NewType("Float64", float)
Decimal128 = NewType("Decimal128", Decimal)
Char = NewType("Char", str)


_SCALAR_TYPES = {
    Boolean: ScalarKind.BOOLEAN,
    Int8: ScalarKind.INT8,
    UInt8: ScalarKind.UINT8,
    Int16: ScalarKind.INT16,
    UInt16: ScalarKind.UINT16,
    Int32: ScalarKind.INT32,
    UInt32: ScalarKind.UINT32,
    Int64: ScalarKind.INT64,
    UInt64: ScalarKind.UINT64,
    Float32: ScalarKind.FLOAT32,
    Float64: ScalarKind.FLOAT64,
    Decimal128: ScalarKind.DECIMAL,
    Char: ScalarKind.CHAR,
    bool: ScalarKind.BOOLEAN,
    int: ScalarKind.INT32,
    float: ScalarKind.FLOAT64,
    Decimal: ScalarKind.DECIMAL,
}

_LIST_ORIGINS = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
)


class CategoryTag(Enum):
    """Closed set of wire categories."""

    SCALAR = "scalar"
    SCALAR_ARRAY = "scalar_array"
    SCALAR_LIST = "scalar_list"
    TEXT = "text"
    TEXT_LIST = "text_list"
    IMAGE = "image"
    IMAGE_LIST = "image_list"


@dataclass(frozen=True)
class WireCategory:
    """The codec a declared type is routed to.

    ``kind`` is set exactly for the three scalar categories.
    """

    tag: CategoryTag
    kind: Optional[ScalarKind] = None

    def __post_init__(self):
        needs_kind = self.tag in (
            CategoryTag.SCALAR,
            CategoryTag.SCALAR_ARRAY,
            CategoryTag.SCALAR_LIST,
        )
        if needs_kind != (self.kind is not None):
            raise ValueError(f"Invalid wire category: {self.tag.name} with kind {self.kind}")

    @classmethod
    def scalar(cls, kind: ScalarKind) -> "WireCategory":
        return cls(CategoryTag.SCALAR, kind)

    @classmethod
    def scalar_array(cls, kind: ScalarKind) -> "WireCategory":
        return cls(CategoryTag.SCALAR_ARRAY, kind)

    @classmethod
    def scalar_list(cls, kind: ScalarKind) -> "WireCategory":
        return cls(CategoryTag.SCALAR_LIST, kind)

    @property
    def is_collection(self) -> bool:
        """Check if values of this category are count-prefixed."""
        return self.tag not in (CategoryTag.SCALAR, CategoryTag.TEXT, CategoryTag.IMAGE)

    def __str__(self) -> str:
        if self.kind is None:
            return self.tag.name
        return f"{self.tag.name}({self.kind.name})"


TEXT = WireCategory(CategoryTag.TEXT)
TEXT_LIST = WireCategory(CategoryTag.TEXT_LIST)
IMAGE = WireCategory(CategoryTag.IMAGE)
IMAGE_LIST = WireCategory(CategoryTag.IMAGE_LIST)


def type_name(declared_type: Any) -> str:
    """Get a readable name for a declared type."""
    if isinstance(declared_type, type):
        return declared_type.__qualname__
    name = getattr(declared_type, "__name__", None)
    if name and get_origin(declared_type) is None:
        return name
    return repr(declared_type)


def strip_annotated(declared_type: Any) -> Any:
    """Unwrap ``Annotated[T, ...]`` to ``T``."""
    if get_origin(declared_type) is Annotated:
        return get_args(declared_type)[0]
    return declared_type


def scalar_kind_of(declared_type: Any) -> Optional[ScalarKind]:
    """Get the scalar kind a declared type names, if any."""
    if isinstance(declared_type, ScalarKind):
        return declared_type
    try:
        return _SCALAR_TYPES.get(declared_type)
    except TypeError:
        # unhashable, so not one of ours
        return None


def is_image_type(declared_type: Any) -> bool:
    """Check if a declared type is a Pillow image or a subclass of one."""
    return isinstance(declared_type, type) and issubclass(declared_type, Image.Image)


def _list_element(declared_type: Any) -> Optional[Any]:
    if get_origin(declared_type) not in _LIST_ORIGINS:
        return None
    args = get_args(declared_type)
    if len(args) != 1:
        return None
    return strip_annotated(args[0])


def _array_element(declared_type: Any) -> Optional[Any]:
    if get_origin(declared_type) is not tuple:
        return None
    args = get_args(declared_type)
    if len(args) != 2 or args[1] is not Ellipsis:
        return None
    return strip_annotated(args[0])


def resolve(declared_type: Any) -> WireCategory:
    """Classify a declared type into its wire category.

    Categories are checked scalar kinds first, then text, then images,
    each at single and collection arity.

    Args:
        declared_type: A scalar marker or built-in, ``str``, a Pillow image
            class, ``Tuple[K, ...]``, ``bytes``, or a list form of those.

    Returns:
        The resolved wire category.

    Raises:
        UnsupportedTypeError: If the type has no wire-format mapping.
    """
    declared_type = strip_annotated(declared_type)
    list_element = _list_element(declared_type)
    array_element = _array_element(declared_type)

    kind = scalar_kind_of(declared_type)
    if kind is not None:
        return WireCategory.scalar(kind)
    if declared_type in (bytes, bytearray):
        return WireCategory.scalar_array(ScalarKind.UINT8)
    if array_element is not None:
        kind = scalar_kind_of(array_element)
        if kind is not None:
            return WireCategory.scalar_array(kind)
    if list_element is not None:
        kind = scalar_kind_of(list_element)
        if kind is not None:
            return WireCategory.scalar_list(kind)

    if declared_type is str:
        return TEXT
    if list_element is str:
        return TEXT_LIST

    if is_image_type(declared_type):
        return IMAGE
    if list_element is not None and is_image_type(list_element):
        return IMAGE_LIST

    raise UnsupportedTypeError(type_name(declared_type))
