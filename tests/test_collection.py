"""Tests for binserial/serialization/collection.py module."""

import pytest

from binserial.exceptions import CorruptLengthError, ScalarRangeError, UnexpectedEndOfStreamError
from binserial.serialization.builtin import StringSerializer, scalar_serializer
from binserial.serialization.collection import (
    ByteArraySerializer,
    CollectionSerializer,
    read_collection,
    write_collection,
)
from binserial.serialization.service import ObjectDataOutputImpl
from binserial.serialization.types import ScalarKind


@pytest.fixture
def int16_list():
    return CollectionSerializer(scalar_serializer(ScalarKind.INT16), list)


@pytest.fixture
def int16_array():
    return CollectionSerializer(scalar_serializer(ScalarKind.INT16), tuple)


class TestCollectionLayout:
    """Tests for the count-prefixed layout."""

    def test_empty(self, int16_list, output):
        int16_list.write(output, [])
        assert output.to_byte_array() == b"\x00\x00\x00\x00"

    def test_none_is_empty(self, int16_list, output):
        int16_list.write(output, None)
        assert output.to_byte_array() == b"\x00\x00\x00\x00"

    def test_elements_in_order(self, int16_list, output):
        int16_list.write(output, [1, -1, 256])
        assert output.to_byte_array() == (
            b"\x03\x00\x00\x00" + b"\x01\x00" + b"\xff\xff" + b"\x00\x01"
        )

    def test_generator_input(self, int16_list, output, make_input):
        int16_list.write(output, (i for i in range(3)))
        assert int16_list.read(make_input(output.to_byte_array())) == [0, 1, 2]

    def test_text_list(self, output):
        serializer = CollectionSerializer(StringSerializer())
        serializer.write(output, ["Hello", "World", "From", "Codec"])
        assert output.to_byte_array() == (
            b"\x04\x00\x00\x00"
            b"\x05Hello" b"\x05World" b"\x04From" b"\x05Codec"
        )


class TestCollectionRead:
    """Tests for reading collections."""

    def test_list_container(self, int16_list, output, make_input):
        int16_list.write(output, [5, 6])
        result = int16_list.read(make_input(output.to_byte_array()))
        assert result == [5, 6]
        assert isinstance(result, list)

    def test_array_container(self, int16_array, output, make_input):
        int16_array.write(output, (5, 6))
        result = int16_array.read(make_input(output.to_byte_array()))
        assert result == (5, 6)
        assert isinstance(result, tuple)

    def test_same_bytes_for_array_and_list(self, int16_list, int16_array):
        as_list = ObjectDataOutputImpl()
        as_array = ObjectDataOutputImpl()
        int16_list.write(as_list, [7, 8, 9])
        int16_array.write(as_array, (7, 8, 9))
        assert as_list.to_byte_array() == as_array.to_byte_array()

    def test_reads_exactly_count(self, int16_list, make_input):
        source = make_input(b"\x01\x00\x00\x00" + b"\x02\x00" + b"\x03\x00")
        assert int16_list.read(source) == [2]
        assert source.remaining() == 2

    def test_negative_count(self, int16_list, make_input):
        with pytest.raises(CorruptLengthError) as exc_info:
            int16_list.read(make_input(b"\xff\xff\xff\xff"))
        assert exc_info.value.length == -1

    def test_count_beyond_stream(self, int16_list, make_input):
        with pytest.raises(CorruptLengthError):
            int16_list.read(make_input(b"\x10\x00\x00\x00\x01\x00"))

    def test_huge_count_rejected_before_reading(self, int16_list, make_input):
        with pytest.raises(CorruptLengthError):
            int16_list.read(make_input(b"\xff\xff\xff\x7f"))

    def test_count_above_max_length(self, int16_list, output, make_input):
        int16_list.write(output, list(range(5)))
        with pytest.raises(CorruptLengthError):
            int16_list.read(make_input(output.to_byte_array(), max_length=4))

    def test_truncated_element(self, int16_list, make_input):
        with pytest.raises(UnexpectedEndOfStreamError):
            int16_list.read(make_input(b"\x02\x00\x00\x00" + b"\x01\x00" + b"\x02"))

    def test_truncated_count(self, int16_list, make_input):
        with pytest.raises(UnexpectedEndOfStreamError):
            int16_list.read(make_input(b"\x01\x00"))


class TestCollectionFunctions:
    """Tests for write_collection and read_collection."""

    def test_round_trip_with_callables(self, output, make_input):
        uint8 = scalar_serializer(ScalarKind.UINT8)
        write_collection(output, uint8.write, [1, 2, 3])
        assert read_collection(make_input(output.to_byte_array()), uint8.read) == [1, 2, 3]

    def test_element_error_propagates(self, output):
        uint8 = scalar_serializer(ScalarKind.UINT8)
        with pytest.raises(ScalarRangeError):
            write_collection(output, uint8.write, [1, 300])


class TestByteArraySerializer:
    """Tests for ByteArraySerializer."""

    @pytest.fixture
    def serializer(self):
        return ByteArraySerializer()

    def test_layout_matches_uint8_collection(self, serializer, output):
        serializer.write(output, b"\x01\x02\xff")
        assert output.to_byte_array() == b"\x03\x00\x00\x00\x01\x02\xff"

    @pytest.mark.parametrize("value", [b"abc", bytearray(b"abc"), [97, 98, 99], (97, 98, 99)])
    def test_accepts_byte_sequences(self, serializer, output, make_input, value):
        serializer.write(output, value)
        assert serializer.read(make_input(output.to_byte_array())) == b"abc"

    def test_none_is_empty(self, serializer, output):
        serializer.write(output, None)
        assert output.to_byte_array() == b"\x00\x00\x00\x00"

    @pytest.mark.parametrize("value", [[1, 256], [-1], 5, ["a"]])
    def test_rejects_non_bytes(self, serializer, output, value):
        with pytest.raises(ScalarRangeError):
            serializer.write(output, value)
        assert output.position() == 0

    def test_count_beyond_stream(self, serializer, make_input):
        with pytest.raises(CorruptLengthError):
            serializer.read(make_input(b"\x05\x00\x00\x00ab"))
