"""Tests for binserial/serialization/types.py module."""

import collections.abc
from decimal import Decimal
from typing import Annotated, Dict, List, MutableSequence, Sequence, Tuple

import pytest
from PIL import Image

from binserial.exceptions import UnsupportedTypeError
from binserial.serialization.types import (
    IMAGE,
    IMAGE_LIST,
    TEXT,
    TEXT_LIST,
    Boolean,
    CategoryTag,
    Char,
    Decimal128,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    ScalarKind,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    WireCategory,
    is_image_type,
    resolve,
    scalar_kind_of,
    type_name,
)


class Thumbnail(Image.Image):
    pass


class TestScalarKind:
    """Tests for ScalarKind enum."""

    def test_all_kinds_exist(self):
        expected = [
            "BOOLEAN", "INT8", "UINT8", "INT16", "UINT16", "INT32", "UINT32",
            "INT64", "UINT64", "FLOAT32", "FLOAT64", "DECIMAL", "CHAR",
        ]
        assert [k.name for k in ScalarKind] == expected

    @pytest.mark.parametrize("kind,width", [
        (ScalarKind.BOOLEAN, 1),
        (ScalarKind.INT8, 1),
        (ScalarKind.UINT16, 2),
        (ScalarKind.INT32, 4),
        (ScalarKind.FLOAT32, 4),
        (ScalarKind.UINT64, 8),
        (ScalarKind.FLOAT64, 8),
        (ScalarKind.DECIMAL, 16),
        (ScalarKind.CHAR, None),
    ])
    def test_width(self, kind, width):
        assert kind.width == width


class TestWireCategory:
    """Tests for WireCategory."""

    def test_scalar_requires_kind(self):
        with pytest.raises(ValueError):
            WireCategory(CategoryTag.SCALAR)

    def test_text_rejects_kind(self):
        with pytest.raises(ValueError):
            WireCategory(CategoryTag.TEXT, ScalarKind.INT8)

    def test_equality(self):
        assert WireCategory.scalar(ScalarKind.INT8) == WireCategory.scalar(ScalarKind.INT8)
        assert WireCategory.scalar(ScalarKind.INT8) != WireCategory.scalar_list(ScalarKind.INT8)
        assert hash(WireCategory.scalar(ScalarKind.INT8)) == hash(WireCategory.scalar(ScalarKind.INT8))

    @pytest.mark.parametrize("category,expected", [
        (WireCategory.scalar(ScalarKind.INT32), False),
        (WireCategory.scalar_array(ScalarKind.INT32), True),
        (WireCategory.scalar_list(ScalarKind.INT32), True),
        (TEXT, False),
        (TEXT_LIST, True),
        (IMAGE, False),
        (IMAGE_LIST, True),
    ])
    def test_is_collection(self, category, expected):
        assert category.is_collection is expected

    def test_str(self):
        assert str(WireCategory.scalar_list(ScalarKind.UINT16)) == "SCALAR_LIST(UINT16)"
        assert str(TEXT) == "TEXT"


class TestResolveScalars:
    """Tests for resolving scalar declared types."""

    @pytest.mark.parametrize("declared,kind", [
        (Boolean, ScalarKind.BOOLEAN),
        (Int8, ScalarKind.INT8),
        (UInt8, ScalarKind.UINT8),
        (Int16, ScalarKind.INT16),
        (UInt16, ScalarKind.UINT16),
        (Int32, ScalarKind.INT32),
        (UInt32, ScalarKind.UINT32),
        (Int64, ScalarKind.INT64),
        (UInt64, ScalarKind.UINT64),
        (Float32, ScalarKind.FLOAT32),
        (Float64, ScalarKind.FLOAT64),
        (Decimal128, ScalarKind.DECIMAL),
        (Char, ScalarKind.CHAR),
        (bool, ScalarKind.BOOLEAN),
        (int, ScalarKind.INT32),
        (float, ScalarKind.FLOAT64),
        (Decimal, ScalarKind.DECIMAL),
        (ScalarKind.UINT32, ScalarKind.UINT32),
    ])
    def test_scalar(self, declared, kind):
        assert resolve(declared) == WireCategory.scalar(kind)

    def test_annotated_scalar(self):
        assert resolve(Annotated[Int8, "meta"]) == WireCategory.scalar(ScalarKind.INT8)

    def test_scalar_kind_of_unhashable(self):
        assert scalar_kind_of([1, 2]) is None


class TestResolveCollections:
    """Tests for resolving array and list declared types."""

    @pytest.mark.parametrize("declared,category", [
        (Tuple[Int16, ...], WireCategory.scalar_array(ScalarKind.INT16)),
        (Tuple[Decimal128, ...], WireCategory.scalar_array(ScalarKind.DECIMAL)),
        (bytes, WireCategory.scalar_array(ScalarKind.UINT8)),
        (bytearray, WireCategory.scalar_array(ScalarKind.UINT8)),
        (List[Float32], WireCategory.scalar_list(ScalarKind.FLOAT32)),
        (Sequence[Int64], WireCategory.scalar_list(ScalarKind.INT64)),
        (MutableSequence[Char], WireCategory.scalar_list(ScalarKind.CHAR)),
        (list[int], WireCategory.scalar_list(ScalarKind.INT32)),
        (collections.abc.Sequence[bool], WireCategory.scalar_list(ScalarKind.BOOLEAN)),
        (List[Annotated[UInt8, "meta"]], WireCategory.scalar_list(ScalarKind.UINT8)),
    ])
    def test_scalar_collections(self, declared, category):
        assert resolve(declared) == category

    def test_text(self):
        assert resolve(str) == TEXT

    @pytest.mark.parametrize("declared", [List[str], Sequence[str], MutableSequence[str], list[str]])
    def test_text_list(self, declared):
        assert resolve(declared) == TEXT_LIST

    def test_image(self):
        assert resolve(Image.Image) == IMAGE

    def test_image_subclass(self):
        assert resolve(Thumbnail) == IMAGE
        assert is_image_type(Thumbnail)

    @pytest.mark.parametrize("declared", [List[Image.Image], Sequence[Thumbnail]])
    def test_image_list(self, declared):
        assert resolve(declared) == IMAGE_LIST


class TestResolveUnsupported:
    """Tests for declared types outside the supported set."""

    @pytest.mark.parametrize("declared", [
        List[List[Int32]],
        List[List[str]],
        Tuple[Int32, Int32],
        Tuple[str, ...],
        Dict[str, int],
        dict,
        object,
        List[object],
        list,
        None,
    ])
    def test_unsupported(self, declared):
        with pytest.raises(UnsupportedTypeError):
            resolve(declared)

    def test_error_carries_type_name(self):
        with pytest.raises(UnsupportedTypeError) as exc_info:
            resolve(dict)
        assert exc_info.value.type_name == "dict"
        assert "dict" in str(exc_info.value)

    def test_nested_list_name(self):
        with pytest.raises(UnsupportedTypeError) as exc_info:
            resolve(List[List[Int32]])
        assert "List" in exc_info.value.type_name


class TestTypeName:
    """Tests for type_name helper."""

    def test_class(self):
        assert type_name(Thumbnail) == "Thumbnail"

    def test_new_type(self):
        assert type_name(Int32) == "Int32"

    def test_generic(self):
        assert type_name(List[str]) == repr(List[str])
