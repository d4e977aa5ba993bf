"""
Unit tests for JSON value helpers.
"""

import pytest

from src.convert.errors import InvalidInput
from src.convert.json_types import (
    JsonType,
    detect_json_type,
    is_complex,
    type_name,
    unique_name,
    validate_json_value,
    validate_name,
)


class TestDetectJsonType:
    """Tests for type detection."""

    @pytest.mark.parametrize("value,expected", [
        (None, JsonType.NULL),
        (True, JsonType.BOOLEAN),
        (0, JsonType.INTEGER),
        (1.5, JsonType.FLOAT),
        ("", JsonType.STRING),
        ([], JsonType.ARRAY),
        ({}, JsonType.OBJECT),
    ])
    def test_detect(self, value, expected):
        assert detect_json_type(value) == expected

    def test_type_name(self):
        assert type_name([1]) == "array"
        assert type_name(False) == "boolean"

    def test_unsupported_type(self):
        with pytest.raises(InvalidInput):
            detect_json_type({1, 2})

    def test_is_complex(self):
        assert is_complex([])
        assert is_complex({})
        assert not is_complex("x")
        assert not is_complex(None)


class TestValidateJsonValue:
    """Tests for input validation."""

    def test_accepts_json_tree(self):
        validate_json_value({"a": [1, 2.5, "x", None, True, {"b": []}]})

    def test_shared_subtree_is_not_a_cycle(self):
        shared = {"x": 1}
        validate_json_value([shared, shared, {"again": shared}])

    def test_deep_nesting_is_accepted(self):
        value = {"leaf": 1}
        for _ in range(5000):
            value = {"next": [value]}

        validate_json_value(value)

    def test_rejects_deep_cycle(self):
        root = {"a": []}
        node = root
        for _ in range(3000):
            child = {"a": []}
            node["a"].append(child)
            node = child
        node["a"].append(root)

        with pytest.raises(InvalidInput, match="Cycle"):
            validate_json_value(root)

    def test_rejects_cycle(self):
        value = {"a": []}
        value["a"].append(value)

        with pytest.raises(InvalidInput, match="Cycle"):
            validate_json_value(value)

    @pytest.mark.parametrize("number", [float("nan"), float("inf"), float("-inf")])
    def test_rejects_non_finite_numbers(self, number):
        with pytest.raises(InvalidInput):
            validate_json_value([{"n": number}])

    def test_error_names_the_path(self):
        with pytest.raises(InvalidInput, match=r"at \$\.a\[1\]\.b"):
            validate_json_value({"a": [1, {"b": float("nan")}]})

    def test_rejects_non_string_keys(self):
        with pytest.raises(InvalidInput, match="not a string"):
            validate_json_value({1: "a"})

    def test_rejects_foreign_objects(self):
        with pytest.raises(InvalidInput):
            validate_json_value({"when": object()})


class TestNames:
    """Tests for name helpers."""

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_names_rejected(self, name):
        with pytest.raises(InvalidInput):
            validate_name(name, "table name")

    def test_valid_name_returned(self):
        assert validate_name("users") == "users"

    def test_unique_name_suffixes(self):
        taken = set()

        assert unique_name("t", taken) == "t"
        assert unique_name("t", taken) == "t_2"
        assert unique_name("t", taken) == "t_3"
        assert taken == {"t", "t_2", "t_3"}
