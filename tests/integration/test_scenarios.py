"""
End-to-end formatting scenarios through the public API
"""

import pytest

import percentfmt
from percentfmt import (
    CFormatParseError,
    MappingRequiredError,
    ParseErrorKind,
    parse_template,
    percent_format,
)


@pytest.mark.integration
def test_string_with_width_and_precision():
    assert percent_format("[%8.3s]", "abcdef") == "[     abc]"


@pytest.mark.integration
def test_alternate_hex_with_zero_pad():
    assert percent_format("%#08x", 255) == "0x0000ff"


@pytest.mark.integration
def test_mapping_only_template():
    assert percent_format("%(amount)d", {"amount": 5}) == "5"
    with pytest.raises(MappingRequiredError):
        percent_format("%(amount)d", (5,))


@pytest.mark.integration
def test_star_width():
    assert percent_format("%*d", (5, 42)) == "   42"


@pytest.mark.integration
def test_unsupported_character_is_reported_at_its_offset():
    with pytest.raises(CFormatParseError) as excinfo:
        parse_template("Hello %n")
    assert excinfo.value.kind is ParseErrorKind.UNSUPPORTED_FORMAT_CHAR
    assert excinfo.value.offset == 7


@pytest.mark.integration
def test_trailing_percent_is_incomplete():
    with pytest.raises(CFormatParseError) as excinfo:
        parse_template("Hello %")
    assert excinfo.value.kind is ParseErrorKind.INCOMPLETE_FORMAT
    assert excinfo.value.offset == 7


@pytest.mark.integration
def test_report_line():
    row = ("widget", 3, 4.5, 0.075)
    line = percent_format("%-10s|%5d|%8.2f|%+.1e", row)
    assert line == "widget    |    3|    4.50|+7.5e-02"


@pytest.mark.integration
def test_named_report_with_literals():
    template = parse_template("%(user)s used %(pct)5.1f%% of %(quota)d MB")
    assert template.requires_mapping
    text = template.render_to_text({"user": "ana", "pct": 42.25, "quota": 512, "extra": 1})
    assert text == "ana used  42.2% of 512 MB"


@pytest.mark.integration
def test_bytes_protocol_line():
    template = parse_template(b"%s %03d %-5s\r\n")
    assert template.render_to_bytes((b"GET", 7, b"ok")) == b"GET 007 ok   \r\n"


@pytest.mark.integration
def test_literal_round_trip():
    source = "100%% sure: %(x)s and %-*.*f!"
    template = parse_template(source)
    assert template.to_syntax() == source
    assert parse_template(template.to_syntax()) == template


@pytest.mark.integration
@pytest.mark.parametrize(
    "template, args",
    [
        ("%5s|%-5s", ("ab", "cd")),
        ("%+05d % d %x %#o", (12, 3, 255, 8)),
        ("%.3f %e", (2.5, 12345.678)),
        ("%c%c", (72, "i")),
        ("%r %a", ("é", "é")),
        ("%(a)s %(b)r", {"a": 1, "b": "x"}),
        ("%*.*s|", (6, 2, "hello")),
        ("%s", ([1, 2],)),
    ],
)
def test_matches_builtin_operator(template, args):
    assert percent_format(template, args) == template % args


@pytest.mark.integration
def test_package_exports():
    assert percentfmt.__version__
    assert percentfmt.Template is type(parse_template(""))
