"""
Tests for the format and parse features
"""

import pytest

from percentfmt.features import FeatureRegistry, encode_text_args, error_message
from percentfmt.error_msg import CFormatParseError, ParseErrorKind

description = """Tests the 'format' and 'parse' features shared by the CLI and the API: registration, successful results, and how template and argument errors are reported."""


@pytest.mark.unit
def test_features_registered():
    features = FeatureRegistry.get_all_features()
    assert {"version", "format", "parse"} <= set(features)
    assert features["format"].api_endpoint == {"path": "/format", "methods": ["POST"]}
    assert features["parse"].api_endpoint == {"path": "/parse", "methods": ["POST"]}


@pytest.mark.unit
def test_format_feature_text():
    result = FeatureRegistry.get_feature("format").handler(template="%-6s|%3d", args=("ab", 7))
    assert result.success is True
    assert result.data == {
        "output": "ab    |  7",
        "as_bytes": False,
        "specifiers": 2,
        "binding": "positional",
    }


@pytest.mark.unit
def test_format_feature_bytes():
    handler = FeatureRegistry.get_feature("format").handler
    result = handler(template="%(k)s=%d", args={"k": "é"}, as_bytes=True)
    # the unkeyed %d receives the whole mapping
    assert result.success is False
    assert result.error == "%d format: a number is required, not dict"

    result = handler(template="%(k)s", args={"k": "é"}, as_bytes=True)
    assert result.success is True
    assert result.data["output"] == "é".encode("utf-8")
    assert result.data["binding"] == "mapping"


@pytest.mark.unit
@pytest.mark.parametrize(
    "template, args, message",
    [
        ("%s %s", ("a",), "not enough arguments for format string"),
        ("%s", ("a", "b"), "not all arguments converted during string formatting"),
        ("%(x)s", (1,), "format requires a mapping"),
        ("%(x)s", {}, "missing mapping key 'x'"),
        ("%c", (0x110000,), "%c arg not in range(0x110000)"),
        ("%*d", ("w", 1), "* wants int"),
        ("%g", (1.0,), "Not yet implemented for %g and %G"),
        ("Hello %n", (), "unsupported format character 'n' (0x6e) at index 7 (offset 7)"),
    ],
)
def test_format_feature_failures(template, args, message):
    result = FeatureRegistry.get_feature("format").handler(template=template, args=args)
    assert result.success is False
    assert result.error == message


@pytest.mark.unit
def test_format_feature_max_field_width():
    handler = FeatureRegistry.get_feature("format").handler
    assert handler(template="%8s", args="x", max_field_width=8).success is True
    result = handler(template="%9s", args="x", max_field_width=8)
    assert result.success is False
    assert result.error == "width/precision 9 exceeds the limit of 8"


@pytest.mark.unit
def test_parse_feature():
    result = FeatureRegistry.get_feature("parse").handler(template="%(a)-3s%%")
    assert result.success is True
    assert result.data["syntax"] == "%(a)-3s%%"
    assert result.data["parts"][0]["mapping_key"] == "a"
    assert result.data["parts"][1] == {"kind": "literal", "text": "%", "offset": 7}


@pytest.mark.unit
def test_parse_feature_failure():
    result = FeatureRegistry.get_feature("parse").handler(template="%(a")
    assert result.success is False
    assert result.error == "incomplete format key (offset 1)"


@pytest.mark.unit
def test_encode_text_args():
    assert encode_text_args(("a", 1, b"b")) == (b"a", 1, b"b")
    assert encode_text_args({"k": "v", "n": 2}) == {b"k": b"v", b"n": 2}
    assert encode_text_args("é") == "é".encode("utf-8")
    assert encode_text_args(5) == 5


@pytest.mark.unit
def test_error_message():
    assert error_message(KeyError("k")) == "missing mapping key 'k'"
    error = CFormatParseError(ParseErrorKind.INCOMPLETE_FORMAT, 3)
    assert error_message(error) == "incomplete format (offset 3)"
    assert error_message(ValueError("plain")) == "plain"


if __name__ == "__main__":
    print(f"\nTest Description: {description}\n")
    pytest.main([__file__])
