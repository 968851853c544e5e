"""
percentfmt Parser module

Single left-to-right scan with one character of lookahead. Byte templates are
read one byte per character, so offsets are byte offsets for them and
character offsets for text templates.
"""

from __future__ import annotations

import logging
import sys
from functools import lru_cache
from typing import Any, List, Optional, Tuple, Union

from percentfmt.error_msg import CFormatParseError, ParseErrorKind
from percentfmt.specifier import (
    CONVERSION_TABLE,
    DEFAULT_FLOAT_PRECISION,
    FLAG_CHARS,
    FROM_ARGS,
    Amount,
    ConversionFlags,
    ConversionType,
    FloatType,
    FormatSpec,
    Literal,
    Part,
    Quantity,
)
from percentfmt.template import Template

logger = logging.getLogger("percentfmt.parser")

LENGTH_MODIFIERS = "hlL"


class _Scanner:
    """Cursor over the template characters"""

    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos

    def peek(self) -> Optional[str]:
        if self.pos < len(self.text):
            return self.text[self.pos]
        return None

    def next(self) -> Optional[Tuple[int, str]]:
        if self.pos >= len(self.text):
            return None
        index = self.pos
        self.pos += 1
        return index, self.text[index]


def _parse_mapping_key(scanner: _Scanner) -> Optional[str]:
    if scanner.peek() != "(":
        return None
    start = scanner.pos
    scanner.next()
    depth = 1
    key: List[str] = []
    while True:
        item = scanner.next()
        if item is None:
            raise CFormatParseError(ParseErrorKind.UNMATCHED_KEY_PARENTHESES, start)
        _, char = item
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return "".join(key)
        key.append(char)


def _parse_flags(scanner: _Scanner) -> ConversionFlags:
    flags = ConversionFlags.NONE
    while scanner.peek() is not None and scanner.peek() in FLAG_CHARS:
        _, char = scanner.next()
        flags |= FLAG_CHARS[char]
    return flags


def _parse_quantity(scanner: _Scanner) -> Optional[Quantity]:
    char = scanner.peek()
    if char == "*":
        scanner.next()
        return FROM_ARGS
    if char is None or not ("0" <= char <= "9"):
        return None
    amount = 0
    while True:
        char = scanner.peek()
        if char is None or not ("0" <= char <= "9"):
            return Amount(amount)
        amount = amount * 10 + int(char)
        if amount > sys.maxsize:
            raise CFormatParseError(ParseErrorKind.INT_TOO_BIG, scanner.pos)
        scanner.next()


def _parse_precision(scanner: _Scanner) -> Optional[Quantity]:
    if scanner.peek() != ".":
        return None
    scanner.next()
    return _parse_quantity(scanner)


def _consume_length(scanner: _Scanner) -> None:
    if scanner.peek() is not None and scanner.peek() in LENGTH_MODIFIERS:
        scanner.next()


def _parse_conversion(scanner: _Scanner) -> Tuple[ConversionType, str]:
    item = scanner.next()
    if item is None:
        raise CFormatParseError(ParseErrorKind.INCOMPLETE_FORMAT, scanner.pos)
    index, char = item
    conversion = CONVERSION_TABLE.get(char)
    if conversion is None:
        raise CFormatParseError(ParseErrorKind.UNSUPPORTED_FORMAT_CHAR, index, char)
    return conversion, char


def _parse_spec_body(scanner: _Scanner) -> FormatSpec:
    """Parse everything after the introducing ``%``"""
    mapping_key = _parse_mapping_key(scanner)
    flags = _parse_flags(scanner)
    width = _parse_quantity(scanner)
    precision = _parse_precision(scanner)
    _consume_length(scanner)
    conversion, conversion_char = _parse_conversion(scanner)
    if precision is None and isinstance(conversion, FloatType):
        precision = DEFAULT_FLOAT_PRECISION
    return FormatSpec(
        mapping_key=mapping_key,
        flags=flags,
        width=width,
        precision=precision,
        conversion=conversion,
        conversion_char=conversion_char,
    )


def _parse_parts(text: str) -> List[Tuple[int, Part]]:
    scanner = _Scanner(text)
    parts: List[Tuple[int, Part]] = []
    literal: List[str] = []
    part_offset = 0
    while True:
        item = scanner.next()
        if item is None:
            break
        index, char = item
        if char != "%":
            literal.append(char)
            continue

        following = scanner.peek()
        if following is None:
            raise CFormatParseError(ParseErrorKind.INCOMPLETE_FORMAT, index + 1)
        if following == "%":
            scanner.next()
            literal.append("%")
            continue

        if literal:
            parts.append((part_offset, Literal("".join(literal))))
            literal = []
        parts.append((index, _parse_spec_body(scanner)))
        if scanner.peek() is not None:
            part_offset = scanner.pos

    if literal:
        parts.append((part_offset, Literal("".join(literal))))
    return parts


def parse_template(source: Union[str, bytes, bytearray]) -> Template:
    """
    Parse a ``%``-style template

    Args:
        source: Template text, or a byte string read one byte per character

    Returns:
        The parsed Template

    Raises:
        CFormatParseError: If the template is malformed
    """
    if isinstance(source, (bytes, bytearray)):
        text = bytes(source).decode("latin-1")
        encoding = "latin-1"
    elif isinstance(source, str):
        text = source
        encoding = "utf-8"
    else:
        raise TypeError(f"template must be str or bytes, not {type(source).__name__}")

    parts = _parse_parts(text)
    logger.debug("Parsed template of %d chars into %d parts", len(text), len(parts))
    return Template(parts=tuple(parts), encoding=encoding)


@lru_cache(maxsize=256)
def _cached_template(source: Union[str, bytes]) -> Template:
    return parse_template(source)


def percent_format(source: Union[str, bytes, bytearray], args: Any) -> Union[str, bytes]:
    """Equivalent of ``source % args``; byte sources take the byte path"""
    if isinstance(source, bytearray):
        source = bytes(source)
    template = _cached_template(source)
    if isinstance(source, bytes):
        return template.render_to_bytes(args)
    return template.render_to_text(args)


def parse_specifier(text: str) -> FormatSpec:
    """Parse a single standalone specifier such as ``"%-#10x"``"""
    scanner = _Scanner(text)
    item = scanner.next()
    if item is None or item[1] != "%":
        raise CFormatParseError(ParseErrorKind.MISSING_MODULO_SIGN, 1)
    return _parse_spec_body(scanner)
