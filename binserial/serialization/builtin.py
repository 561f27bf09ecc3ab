"""Built-in serializers for scalar kinds and text.

Every scalar kind has one fixed binary layout:

    - Integers: little-endian two's complement, 1/2/4/8 bytes
    - Floats: little-endian IEEE-754 binary32/binary64
    - Boolean: a single byte, 0 or 1 (any non-zero byte reads as True)
    - Char: the UTF-8 encoding of one character (1 to 4 bytes)
    - Decimal: 16 bytes, four little-endian uint32 words lo, mid, hi,
      flags. The 96-bit magnitude is hi:mid:lo, flags carries the scale
      (0 to 28) in bits 16-23 and the sign in bit 31.

Text is a 7-bit variable-length byte count followed by UTF-8 bytes.

A value is packed completely before any byte reaches the output, so a
value that does not fit its kind raises :class:`ScalarRangeError` and
leaves the output untouched.
"""

import struct
from decimal import Decimal
from typing import Any, Dict

from binserial.exceptions import (
    ArgumentNullError,
    CorruptLengthError,
    ScalarRangeError,
    SerializationError,
)
from binserial.serialization.api import ObjectDataInput, ObjectDataOutput, Serializer
from binserial.serialization.types import ScalarKind


DECIMAL_MAX_SCALE = 28
DECIMAL_SIGN_MASK = 0x80000000
DECIMAL_SCALE_MASK = 0x00FF0000
DECIMAL_SCALE_SHIFT = 16
DECIMAL_MAX_MAGNITUDE = (1 << 96) - 1
DECIMAL_MAX_DIGITS = len(str(DECIMAL_MAX_MAGNITUDE))

_UINT32_MASK = 0xFFFFFFFF
_INT32 = struct.Struct("<i")
_DECIMAL = struct.Struct("<4I")


def write_int32(output: ObjectDataOutput, value: int) -> None:
    """Write a 32-bit signed count or dimension."""
    try:
        data = _INT32.pack(value)
    except (struct.error, TypeError) as e:
        raise ScalarRangeError(f"{value!r} does not fit INT32", cause=e)
    output.write_bytes(data)


def read_int32(input: ObjectDataInput) -> int:
    """Read a 32-bit signed count or dimension."""
    return _INT32.unpack(input.read_bytes(_INT32.size))[0]


class StructScalarSerializer(Serializer[Any]):
    """Serializer for a scalar kind with a ``struct`` layout."""

    def __init__(self, kind: ScalarKind, fmt: str):
        self._kind = kind
        self._struct = struct.Struct(fmt)

    @property
    def kind(self) -> ScalarKind:
        return self._kind

    def write(self, output: ObjectDataOutput, obj: Any) -> None:
        if obj is None:
            raise ArgumentNullError("value", f"None cannot be written as {self._kind.name}")
        try:
            data = self._struct.pack(obj)
        except (struct.error, OverflowError, TypeError) as e:
            raise ScalarRangeError(f"{obj!r} does not fit {self._kind.name}", cause=e)
        output.write_bytes(data)

    def read(self, input: ObjectDataInput) -> Any:
        return self._struct.unpack(input.read_bytes(self._struct.size))[0]


class BooleanSerializer(StructScalarSerializer):
    """Serializer for booleans. Only ``bool`` values are accepted."""

    def __init__(self):
        super().__init__(ScalarKind.BOOLEAN, "<?")

    def write(self, output: ObjectDataOutput, obj: bool) -> None:
        if obj is not None and not isinstance(obj, bool):
            raise ScalarRangeError(f"{obj!r} is not a bool")
        super().write(output, obj)


class CharSerializer(Serializer[str]):
    """Serializer for single characters.

    Writes the UTF-8 encoding of the character. On read the lead byte
    tells how many continuation bytes follow.
    """

    @property
    def kind(self) -> ScalarKind:
        return ScalarKind.CHAR

    def write(self, output: ObjectDataOutput, obj: str) -> None:
        if obj is None:
            raise ArgumentNullError("value", "None cannot be written as CHAR")
        if not isinstance(obj, str) or len(obj) != 1:
            raise ScalarRangeError(f"{obj!r} is not a single character")
        try:
            data = obj.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ScalarRangeError(f"{obj!r} cannot be encoded as UTF-8", cause=e)
        output.write_bytes(data)

    def read(self, input: ObjectDataInput) -> str:
        lead = input.read_bytes(1)
        continuation = self._continuation_length(lead[0])
        data = lead + input.read_bytes(continuation) if continuation else lead
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SerializationError(f"Invalid UTF-8 character bytes: {data!r}", cause=e)

    @staticmethod
    def _continuation_length(lead: int) -> int:
        if lead < 0x80:
            return 0
        if 0xC2 <= lead <= 0xDF:
            return 1
        if 0xE0 <= lead <= 0xEF:
            return 2
        if 0xF0 <= lead <= 0xF4:
            return 3
        raise SerializationError(f"Invalid UTF-8 lead byte: 0x{lead:02X}")


class DecimalSerializer(Serializer[Decimal]):
    """Serializer for 128-bit decimal values.

    Accepts ``Decimal`` and ``int``. The scale keeps trailing zeros, so
    ``Decimal("1.50")`` reads back as ``Decimal("1.50")``. Values with a
    positive exponent are written with scale 0 and read back as the
    equal integer-valued decimal.
    """

    @property
    def kind(self) -> ScalarKind:
        return ScalarKind.DECIMAL

    def write(self, output: ObjectDataOutput, obj: Decimal) -> None:
        if obj is None:
            raise ArgumentNullError("value", "None cannot be written as DECIMAL")
        if isinstance(obj, int) and not isinstance(obj, bool):
            obj = Decimal(obj)
        if not isinstance(obj, Decimal):
            raise ScalarRangeError(f"{obj!r} is not a Decimal")
        if not obj.is_finite():
            raise ScalarRangeError(f"{obj!r} cannot be written as DECIMAL")

        sign, digits, exponent = obj.as_tuple()
        if not any(digits):
            magnitude = 0
            scale = min(max(-exponent, 0), DECIMAL_MAX_SCALE)
        elif exponent > 0:
            if len(digits) + exponent > DECIMAL_MAX_DIGITS:
                raise ScalarRangeError(f"{obj!r} exceeds the 96-bit DECIMAL range")
            magnitude = int("".join(map(str, digits))) * 10 ** exponent
            scale = 0
        else:
            magnitude = int("".join(map(str, digits)))
            scale = -exponent
            # bounded by the number of trailing zero digits
            while scale > DECIMAL_MAX_SCALE and magnitude % 10 == 0:
                magnitude //= 10
                scale -= 1

        if scale > DECIMAL_MAX_SCALE:
            raise ScalarRangeError(f"{obj!r} has more than {DECIMAL_MAX_SCALE} decimal places")
        if magnitude > DECIMAL_MAX_MAGNITUDE:
            raise ScalarRangeError(f"{obj!r} exceeds the 96-bit DECIMAL range")

        flags = scale << DECIMAL_SCALE_SHIFT
        if sign:
            flags |= DECIMAL_SIGN_MASK
        output.write_bytes(
            _DECIMAL.pack(
                magnitude & _UINT32_MASK,
                (magnitude >> 32) & _UINT32_MASK,
                (magnitude >> 64) & _UINT32_MASK,
                flags,
            )
        )

    def read(self, input: ObjectDataInput) -> Decimal:
        lo, mid, hi, flags = _DECIMAL.unpack(input.read_bytes(_DECIMAL.size))
        if flags & ~(DECIMAL_SCALE_MASK | DECIMAL_SIGN_MASK):
            raise SerializationError(f"Invalid DECIMAL flags: 0x{flags:08X}")
        scale = (flags & DECIMAL_SCALE_MASK) >> DECIMAL_SCALE_SHIFT
        if scale > DECIMAL_MAX_SCALE:
            raise SerializationError(f"Invalid DECIMAL scale: {scale}")

        magnitude = (hi << 64) | (mid << 32) | lo
        sign = 1 if flags & DECIMAL_SIGN_MASK else 0
        return Decimal((sign, tuple(int(d) for d in str(magnitude)), -scale))


def write_7bit_encoded_int(output: ObjectDataOutput, value: int) -> None:
    """Write a non-negative int in 7-bit groups, low group first."""
    if value < 0 or value > _UINT32_MASK:
        raise ScalarRangeError(f"{value!r} cannot be written as a length prefix")
    data = bytearray()
    while value >= 0x80:
        data.append((value & 0x7F) | 0x80)
        value >>= 7
    data.append(value)
    output.write_bytes(bytes(data))


def read_7bit_encoded_int(input: ObjectDataInput) -> int:
    """Read an int written by :func:`write_7bit_encoded_int`.

    Raises:
        CorruptLengthError: If the prefix runs past five bytes or does
            not fit 31 bits.
    """
    result = 0
    for shift in range(0, 35, 7):
        byte = input.read_bytes(1)[0]
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            if result > 0x7FFFFFFF:
                raise CorruptLengthError(result, f"Length prefix {result} does not fit 31 bits")
            return result
    raise CorruptLengthError(result, "Length prefix is longer than 5 bytes")


class StringSerializer(Serializer[str]):
    """Serializer for text.

    Writes a 7-bit encoded UTF-8 byte count followed by the bytes.
    None is written as the empty string.
    """

    def write(self, output: ObjectDataOutput, obj: str) -> None:
        if obj is None:
            obj = ""
        if not isinstance(obj, str):
            raise ScalarRangeError(f"{obj!r} is not a str")
        try:
            encoded = obj.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ScalarRangeError(f"{obj!r} cannot be encoded as UTF-8", cause=e)
        write_7bit_encoded_int(output, len(encoded))
        output.write_bytes(encoded)

    def read(self, input: ObjectDataInput) -> str:
        length = input.check_length(read_7bit_encoded_int(input))
        data = input.read_bytes(length)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SerializationError("Invalid UTF-8 text", cause=e)


_SCALAR_SERIALIZERS: Dict[ScalarKind, Serializer] = {
    ScalarKind.BOOLEAN: BooleanSerializer(),
    ScalarKind.INT8: StructScalarSerializer(ScalarKind.INT8, "<b"),
    ScalarKind.UINT8: StructScalarSerializer(ScalarKind.UINT8, "<B"),
    ScalarKind.INT16: StructScalarSerializer(ScalarKind.INT16, "<h"),
    ScalarKind.UINT16: StructScalarSerializer(ScalarKind.UINT16, "<H"),
    ScalarKind.INT32: StructScalarSerializer(ScalarKind.INT32, "<i"),
    ScalarKind.UINT32: StructScalarSerializer(ScalarKind.UINT32, "<I"),
    ScalarKind.INT64: StructScalarSerializer(ScalarKind.INT64, "<q"),
    ScalarKind.UINT64: StructScalarSerializer(ScalarKind.UINT64, "<Q"),
    ScalarKind.FLOAT32: StructScalarSerializer(ScalarKind.FLOAT32, "<f"),
    ScalarKind.FLOAT64: StructScalarSerializer(ScalarKind.FLOAT64, "<d"),
    ScalarKind.DECIMAL: DecimalSerializer(),
    ScalarKind.CHAR: CharSerializer(),
}


def get_scalar_serializers() -> Dict[ScalarKind, Serializer]:
    """Get the serializer for every scalar kind.

    Returns:
        Dictionary mapping each ScalarKind to its serializer.
    """
    return dict(_SCALAR_SERIALIZERS)


def scalar_serializer(kind: ScalarKind) -> Serializer:
    """Get the serializer for one scalar kind."""
    return _SCALAR_SERIALIZERS[kind]


def write_scalar(output: ObjectDataOutput, kind: ScalarKind, value: Any) -> None:
    """Write one scalar in the fixed layout of its kind."""
    _SCALAR_SERIALIZERS[kind].write(output, value)


def read_scalar(input: ObjectDataInput, kind: ScalarKind) -> Any:
    """Read one scalar in the fixed layout of its kind."""
    return _SCALAR_SERIALIZERS[kind].read(input)
