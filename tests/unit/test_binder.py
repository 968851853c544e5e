from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import sys

import pytest

from percentfmt.error_msg import (
    FieldTooWideError,
    FormatError,
    MappingRequiredError,
    NotAllConvertedError,
    NotEnoughArgumentsError,
    StarArgumentError,
)
from percentfmt.parser import parse_template, percent_format
from percentfmt.specifier import FROM_ARGS


def fmt(source, args, **kwargs):
    template = parse_template(source)
    if isinstance(source, bytes):
        return template.render_to_bytes(args, **kwargs)
    return template.render_to_text(args, **kwargs)


# ----------------- Binding mode -----------------


@pytest.mark.unit
def test_by_name():
    assert fmt("%(amount)d", {"amount": 5}) == "5"
    assert fmt("%(a)s-%(b)s-%(a)s", {"a": 1, "b": 2}) == "1-2-1"


@pytest.mark.unit
def test_by_name_requires_mapping():
    with pytest.raises(MappingRequiredError) as excinfo:
        fmt("%(amount)d", (5,))
    assert str(excinfo.value) == "format requires a mapping"
    assert isinstance(excinfo.value, TypeError)
    assert excinfo.value.code == "E_MAPPING_REQUIRED"


@pytest.mark.unit
def test_missing_key_raises_key_error():
    with pytest.raises(KeyError):
        fmt("%(missing)s", {"present": 1})


@pytest.mark.unit
def test_positional():
    assert fmt("%s %s", ("a", "b")) == "a b"
    assert fmt("%s", "x") == "x"
    assert fmt("%s", [1, 2]) == "[1, 2]"
    assert fmt("%s", ((1, 2),)) == "(1, 2)"


@pytest.mark.unit
def test_single_mapping_binds_positionally_without_keys():
    assert fmt("%s", {"a": 1}) == "{'a': 1}"


@pytest.mark.unit
def test_not_enough_arguments():
    with pytest.raises(NotEnoughArgumentsError) as excinfo:
        fmt("%s %s", ("a",))
    assert str(excinfo.value) == "not enough arguments for format string"


@pytest.mark.unit
def test_not_all_converted():
    with pytest.raises(NotAllConvertedError) as excinfo:
        fmt("%s", ("a", "b"))
    assert str(excinfo.value) == "not all arguments converted during string formatting"


@pytest.mark.unit
@pytest.mark.parametrize("args", [(), {}, {"unused": 1}])
def test_literal_only_template_accepts_empty_tuple_or_mapping(args):
    assert fmt("hello", args) == "hello"


@pytest.mark.unit
@pytest.mark.parametrize("source, args", [("hello", ("a",)), ("hello", "a"), ("", ("a",)), ("", 0)])
def test_literal_only_template_rejects_values(source, args):
    with pytest.raises(NotAllConvertedError):
        fmt(source, args)


@pytest.mark.unit
def test_empty_template():
    assert fmt("", ()) == ""


@pytest.mark.unit
def test_mixed_keyed_and_positional():
    with pytest.raises(MappingRequiredError):
        fmt("%(a)s %s", ("x",))
    assert fmt("%(a)s %s", {"a": 1}) == "1 {'a': 1}"


@pytest.mark.unit
def test_format_errors_share_a_base():
    with pytest.raises(FormatError):
        fmt("%d", ("x",))


# ----------------- Star quantities -----------------


@pytest.mark.unit
def test_star_width():
    assert fmt("%*d", (5, 42)) == "   42"
    assert fmt("%-*d", (5, 42)) == "42   "


@pytest.mark.unit
def test_negative_star_width_left_adjusts():
    assert fmt("%*d", (-5, 42)) == "42   "


@pytest.mark.unit
def test_star_precision():
    assert fmt("%.*f", (2, 3.14159)) == "3.14"
    assert fmt("%*.*f", (8, 2, 3.14159)) == "    3.14"
    assert fmt("%.*s", (-1, "abc")) == ""


@pytest.mark.unit
def test_star_wants_int():
    with pytest.raises(StarArgumentError) as excinfo:
        fmt("%*d", ("5", 42))
    assert str(excinfo.value) == "* wants int"


@pytest.mark.unit
def test_star_consumes_arguments():
    with pytest.raises(NotEnoughArgumentsError):
        fmt("%*d", (5,))
    with pytest.raises(NotAllConvertedError):
        fmt("%*d", (5, 1, 2))


@pytest.mark.unit
def test_star_resolution_does_not_touch_template():
    template = parse_template("%*d")
    assert template.render_to_text((3, 1)) == "  1"
    assert template.render_to_text((5, 1)) == "    1"
    assert template.specifiers[0].width is FROM_ARGS


@pytest.mark.unit
def test_shared_template_across_threads():
    template = parse_template("%*d|%-*s|")

    def render(width: int) -> str:
        return template.render_to_text((width, 7, width, "x"))

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(render, range(1, 40)))
    for width, result in zip(range(1, 40), results):
        assert result == "7".rjust(width) + "|" + "x".ljust(width) + "|"


# ----------------- Field width limits -----------------


@pytest.mark.unit
def test_max_field_width():
    assert fmt("%5s", ("x",), max_field_width=10) == "    x"
    with pytest.raises(FieldTooWideError):
        fmt("%20s", ("x",), max_field_width=10)
    with pytest.raises(FieldTooWideError):
        fmt("%*s", (50, "x"), max_field_width=10)
    with pytest.raises(FieldTooWideError):
        fmt("%.50s", ("x",), max_field_width=10)


@pytest.mark.unit
def test_star_value_beyond_platform_limit():
    with pytest.raises(FieldTooWideError) as excinfo:
        fmt("%*s", (sys.maxsize + 1, "x"))
    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.limit == sys.maxsize


# ----------------- Byte path -----------------


@pytest.mark.unit
def test_bytes_by_name_uses_byte_keys():
    assert fmt(b"%(k)s", {b"k": b"v"}) == b"v"
    with pytest.raises(KeyError):
        fmt(b"%(k)s", {"k": b"v"})


@pytest.mark.unit
def test_bytes_positional():
    assert fmt(b"%s-%d", (b"ab", 3)) == b"ab-3"
    assert fmt(b"\xff%s", (b"x",)) == b"\xffx"


@pytest.mark.unit
def test_text_template_rendered_to_bytes_encodes_utf8():
    assert parse_template("é%s").render_to_bytes((b"x",)) == "é".encode("utf-8") + b"x"
    assert parse_template("%(é)s").render_to_bytes({"é".encode("utf-8"): b"1"}) == b"1"


# ----------------- percent_format -----------------


@pytest.mark.unit
def test_percent_format():
    assert percent_format("%s=%d", ("x", 1)) == "x=1"
    assert percent_format(b"%s=%d", (b"x", 1)) == b"x=1"
    assert percent_format(bytearray(b"%c"), 65) == b"A"
    assert percent_format("%(k)s", {"k": "v"}) == "v"
