"""Tests for perch.routing.params — path parameter conversion."""

import pytest

from perch.routing.params import CONVERTERS, convert_param


class TestConvertParam:
    def test_registered_converters(self) -> None:
        assert set(CONVERTERS) == {"str", "int", "float", "path"}

    def test_str_passthrough(self) -> None:
        assert convert_param("hello", "str") == "hello"

    def test_int(self) -> None:
        value = convert_param("42", "int")
        assert value == 42
        assert isinstance(value, int)

    def test_float(self) -> None:
        assert convert_param("1.5", "float") == 1.5

    def test_path_keeps_slashes(self) -> None:
        assert convert_param("a/b/c", "path") == "a/b/c"

    def test_bad_int_raises(self) -> None:
        with pytest.raises(ValueError):
            convert_param("abc", "int")

    def test_unknown_converter_raises(self) -> None:
        with pytest.raises(KeyError):
            convert_param("x", "uuid")
