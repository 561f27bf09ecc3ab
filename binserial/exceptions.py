"""Serializer exceptions.

This module defines the exception hierarchy for binserial. All
exceptions inherit from :class:`SerializationError`.

The binary format carries no resynchronization markers, so any of these
errors invalidates the rest of the stream for the call that raised it.

Example:
    Handling codec errors::

        from binserial.exceptions import (
            SerializationError,
            UnexpectedEndOfStreamError,
            CorruptLengthError,
        )

        try:
            value = serializer.from_bytes(payload)
        except UnexpectedEndOfStreamError:
            print("Payload was truncated")
        except CorruptLengthError as e:
            print(f"Payload declares an impossible length: {e.length}")
        except SerializationError as e:
            print(f"Could not decode payload: {e}")
"""

from typing import Optional


class SerializationError(Exception):
    """Base class for all binserial exceptions.

    Args:
        message: The error message describing the exception.
        cause: The underlying exception that caused this error, if any.

    Attributes:
        cause: The underlying cause of this exception, if any.
    """

    def __init__(self, message: str = "", cause: Exception = None):
        super().__init__(message)
        self.cause = cause


class ArgumentNullError(SerializationError):
    """Raised when a required input is missing.

    Example:
        - Serializing ``None`` instead of a value
        - Deserializing from ``None`` instead of a stream
        - An image field holding ``None``
    """

    def __init__(self, argument: str, message: str = ""):
        super().__init__(message or f"Argument '{argument}' must not be None")
        self._argument = argument

    @property
    def argument(self) -> str:
        """Get the name of the missing argument."""
        return self._argument


class UnsupportedTypeError(SerializationError):
    """Raised when a declared type has no wire-format mapping.

    Raised while resolving types, before any byte is written or read.

    Args:
        type_name: Name of the offending type.
        message: Optional override for the default message.
    """

    def __init__(self, type_name: str, message: str = "", cause: Exception = None):
        super().__init__(
            message or f"Serialization for type '{type_name}' is not supported", cause
        )
        self._type_name = type_name

    @property
    def type_name(self) -> str:
        """Get the name of the unsupported type."""
        return self._type_name


class UnexpectedEndOfStreamError(SerializationError):
    """Raised when decoding runs out of bytes in the middle of a value.

    Args:
        requested: Number of bytes the decoder asked for.
        available: Number of bytes the stream actually returned.
    """

    def __init__(self, requested: int, available: int):
        super().__init__(
            f"Unexpected end of stream: needed {requested} bytes, got {available}"
        )
        self.requested = requested
        self.available = available


class CorruptLengthError(SerializationError):
    """Raised when a decoded count or length cannot be valid.

    A count is corrupt when it is negative, larger than the bytes left in
    the stream, or larger than the configured maximum.

    Args:
        length: The decoded count.
        message: Optional override for the default message.
    """

    def __init__(self, length: int, message: str = ""):
        super().__init__(message or f"Corrupt length prefix: {length}")
        self._length = length

    @property
    def length(self) -> int:
        """Get the offending count."""
        return self._length


class ImageDecodeError(SerializationError):
    """Raised when compressed image bytes cannot be decompressed."""
    pass


class ScalarRangeError(SerializationError):
    """Raised when a value does not fit the scalar kind it is written as.

    The check happens before any byte of the value is written.

    Example:
        - Writing 300 as an ``int8``
        - Writing a two-character string as a ``char``
        - Writing ``Decimal("NaN")`` as a ``decimal``
    """
    pass


class ConfigurationError(SerializationError):
    """Raised when the serializer configuration is invalid or unreadable."""

    def __init__(self, message: str = "", cause: Optional[Exception] = None):
        super().__init__(message, cause)
