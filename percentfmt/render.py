"""
percentfmt Renderer

Pure functions turning one resolved value into formatted text or bytes
according to a FormatSpec. Width and precision are expected to be resolved
(``Amount`` or ``None``); an unresolved ``*`` is treated as absent.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Tuple, Type, TypeVar

from percentfmt.error_msg import (
    CharacterRangeError,
    ConversionTypeError,
    GeneralFormatNotImplementedError,
    UnsupportedConversionError,
)
from percentfmt.specifier import (
    Amount,
    Case,
    CharacterType,
    ConversionFlags,
    FloatStyle,
    FloatType,
    FormatSpec,
    NumberType,
    Preconversion,
    Quantity,
    Radix,
    StringType,
)
from percentfmt.values import DEFAULT_CONVERTER, ValueConverter, ValueKind, classify, type_name

UNICODE_LIMIT = 0x110000
BYTE_LIMIT = 256

C = TypeVar("C")


def _amount(quantity: Optional[Quantity]) -> Optional[int]:
    if isinstance(quantity, Amount):
        return quantity.value
    return None


def _conversion(spec: FormatSpec, expected: Type[C]) -> C:
    if not isinstance(spec.conversion, expected):
        raise TypeError(
            f"%{spec.conversion_char} is not a {expected.__name__} conversion"
        )
    return spec.conversion


# ----------------- Width and precision -----------------


def fill_string(spec: FormatSpec, content: str, fill_char: str = " ", prefix_len: int = 0) -> str:
    """
    Pad ``content`` to the specifier's width

    Args:
        spec: Specifier supplying width and the left-adjust flag
        content: Text to pad, counted in characters
        fill_char: Padding character
        prefix_len: Length of a sign/radix prefix the caller emits before
            ``content``; it counts toward the width but is not padded

    Returns:
        The padded text, without the prefix
    """
    num_chars = len(content) + prefix_len
    width = _amount(spec.width)
    if width is None or width <= num_chars:
        return content
    fill = fill_char * (width - num_chars)
    if spec.flags & ConversionFlags.LEFT_ADJUST:
        return content + fill
    return fill + content


def _truncate_and_fill(spec: FormatSpec, text: str, limit: Optional[int]) -> str:
    if limit is not None and len(text) > limit:
        text = text[:limit]
    return fill_string(spec, text)


def format_string(spec: FormatSpec, text: str) -> str:
    return _truncate_and_fill(spec, text, _amount(spec.precision))


def format_char(spec: FormatSpec, char: str) -> str:
    return _truncate_and_fill(spec, char, 1)


def fill_bytes(spec: FormatSpec, data: bytes) -> bytes:
    width = _amount(spec.width)
    if width is None or width <= len(data):
        return data
    fill = b" " * (width - len(data))
    if spec.flags & ConversionFlags.LEFT_ADJUST:
        return data + fill
    return fill + data


def format_bytes(spec: FormatSpec, data: bytes) -> bytes:
    limit = _amount(spec.precision)
    if limit is not None:
        data = data[:limit]
    return fill_bytes(spec, data)


# ----------------- Numbers -----------------


def _radix_digits(magnitude: int, number_type: NumberType) -> Tuple[str, str]:
    """Return (alternate-form prefix, digits) for a non-negative integer"""
    if number_type.radix is Radix.DECIMAL:
        return "", str(magnitude)
    if number_type.radix is Radix.OCTAL:
        return "0o", oct(magnitude)[2:]
    digits = hex(magnitude)[2:]
    if number_type.case is Case.UPPER:
        return "0X", digits.upper()
    return "0x", digits


def format_number(spec: FormatSpec, value: int) -> str:
    number_type = _conversion(spec, NumberType)
    prefix, digits = _radix_digits(abs(value), number_type)
    if not spec.flags & ConversionFlags.ALTERNATE_FORM:
        prefix = ""
    sign = "-" if value < 0 else spec.flags.sign_string()

    if spec.flags & ConversionFlags.ZERO_PAD:
        signed_prefix = sign + prefix
        return signed_prefix + fill_string(
            spec, digits, spec.flags.fill_char(), len(signed_prefix)
        )
    return fill_string(spec, sign + prefix + digits)


# ----------------- Floats -----------------


def normalize_float(magnitude: float) -> Tuple[float, int]:
    """Scale a non-negative finite float to one leading non-zero digit"""
    fraction = magnitude
    exponent = 0
    while True:
        if fraction >= 10.0:
            fraction /= 10.0
            exponent += 1
        elif 0.0 < fraction < 1.0:
            fraction *= 10.0
            exponent -= 1
        else:
            return fraction, exponent


def _format_exponent(magnitude: float, precision: int, case: Case) -> str:
    fraction, exponent = normalize_float(magnitude)
    mantissa = f"{fraction:.{precision}f}"
    if mantissa.startswith("10"):
        # rounding carried into a second integer digit
        fraction /= 10.0
        exponent += 1
        mantissa = f"{fraction:.{precision}f}"
    marker = "E" if case is Case.UPPER else "e"
    return f"{mantissa}{marker}{exponent:+03d}"


def format_float(spec: FormatSpec, value: float) -> str:
    float_type = _conversion(spec, FloatType)
    if float_type.style is FloatStyle.GENERAL:
        raise GeneralFormatNotImplementedError()

    negative = not math.isnan(value) and math.copysign(1.0, value) < 0
    sign = "-" if negative else spec.flags.sign_string()
    magnitude = abs(value)

    if not math.isfinite(magnitude):
        digits = "nan" if math.isnan(magnitude) else "inf"
        if float_type.case is Case.UPPER:
            digits = digits.upper()
        return fill_string(spec, sign + digits)

    precision = _amount(spec.precision)
    if precision is None:
        precision = 6
    if float_type.style is FloatStyle.FIXED_POINT:
        digits = f"{magnitude:.{precision}f}"
    else:
        digits = _format_exponent(magnitude, precision, float_type.case)

    if spec.flags & ConversionFlags.ZERO_PAD:
        return sign + fill_string(spec, digits, spec.flags.fill_char(), len(sign))
    return fill_string(spec, sign + digits)


# ----------------- Value coercion -----------------


def _coerce_integer(spec: FormatSpec, value: Any, converter: ValueConverter) -> int:
    number_type = _conversion(spec, NumberType)
    kind = classify(value)
    if kind is ValueKind.INTEGER:
        return converter.to_int(value)
    decimal = number_type.radix is Radix.DECIMAL
    if kind is ValueKind.FLOAT and decimal:
        return converter.to_int(value)
    required = "a number" if decimal else "an integer"
    actual = type_name(value)
    raise ConversionTypeError(
        f"%{spec.conversion_char} format: {required} is required, not {actual}",
        spec.conversion_char,
        required,
        actual,
    )


def _coerce_float(spec: FormatSpec, value: Any, converter: ValueConverter) -> float:
    if classify(value) in (ValueKind.INTEGER, ValueKind.FLOAT):
        return converter.to_float(value)
    required = "a floating point or integer"
    actual = type_name(value)
    raise ConversionTypeError(
        f"%{spec.conversion_char} format: {required} is required, not {actual}",
        spec.conversion_char,
        required,
        actual,
    )


def _coerce_char(value: Any, converter: ValueConverter) -> str:
    kind = classify(value)
    if kind is ValueKind.INTEGER:
        code = converter.to_int(value)
        if not 0 <= code < UNICODE_LIMIT:
            raise CharacterRangeError(code, UNICODE_LIMIT)
        return chr(code)
    if kind is ValueKind.TEXT and len(value) == 1:
        return value
    raise ConversionTypeError("%c requires int or char", "c", "int or char", type_name(value))


def _coerce_byte(value: Any, converter: ValueConverter) -> bytes:
    kind = classify(value)
    if kind is ValueKind.INTEGER:
        code = converter.to_int(value)
        if not 0 <= code < BYTE_LIMIT:
            raise CharacterRangeError(code, BYTE_LIMIT)
        return bytes([code])
    if kind is ValueKind.BYTES and len(value) == 1:
        return bytes(value)
    raise ConversionTypeError(
        "%c requires an integer in range(256) or a single byte",
        "c",
        "an integer in range(256) or a single byte",
        type_name(value),
    )


def _byte_buffer(spec: FormatSpec, value: Any, converter: ValueConverter) -> bytes:
    data = converter.buffer(value)
    if data is None:
        data = converter.to_bytes(value)
    if data is None:
        actual = type_name(value)
        raise ConversionTypeError(
            f"%{spec.conversion_char} requires a bytes-like object, "
            f"or an object that implements __bytes__, not '{actual}'",
            spec.conversion_char,
            "a bytes-like object",
            actual,
        )
    return data


# ----------------- Entry points -----------------


def render_text(spec: FormatSpec, value: Any, converter: ValueConverter = DEFAULT_CONVERTER) -> str:
    """Render one value as text"""
    conversion = spec.conversion
    if isinstance(conversion, StringType):
        if conversion.preconversion is Preconversion.STR:
            text = converter.display(value)
        elif conversion.preconversion is Preconversion.REPR:
            text = converter.debug(value)
        elif conversion.preconversion is Preconversion.ASCII:
            text = converter.ascii_debug(value)
        else:
            raise UnsupportedConversionError(spec.conversion_char)
        return format_string(spec, text)
    if isinstance(conversion, NumberType):
        return format_number(spec, _coerce_integer(spec, value, converter))
    if isinstance(conversion, FloatType):
        return format_float(spec, _coerce_float(spec, value, converter))
    if isinstance(conversion, CharacterType):
        return format_char(spec, _coerce_char(value, converter))
    raise TypeError(f"unknown conversion type {conversion!r}")


def render_bytes(spec: FormatSpec, value: Any, converter: ValueConverter = DEFAULT_CONVERTER) -> bytes:
    """Render one value as bytes; widths and precisions count bytes"""
    conversion = spec.conversion
    if isinstance(conversion, StringType):
        if conversion.preconversion in (Preconversion.STR, Preconversion.BYTES):
            return format_bytes(spec, _byte_buffer(spec, value, converter))
        text = format_string(spec, converter.ascii_debug(value))
        return text.encode("ascii", "backslashreplace")
    if isinstance(conversion, CharacterType):
        return fill_bytes(spec, _coerce_byte(value, converter))
    return render_text(spec, value, converter).encode("ascii")
