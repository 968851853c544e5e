"""
percentfmt specifier model

A template is made of two kinds of parts: literal runs of text and conversion
specifiers. Everything in here is immutable; per-call resolution of ``*``
quantities produces new records with ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Any, Dict, Optional, Union


class ConversionFlags(IntFlag):
    """Conversion flags accepted between ``%`` (or the mapping key) and the width"""

    NONE = 0
    ALTERNATE_FORM = 0b0000_0001
    ZERO_PAD = 0b0000_0010
    LEFT_ADJUST = 0b0000_0100
    BLANK_SIGN = 0b0000_1000
    SIGN_CHAR = 0b0001_0000

    def sign_string(self) -> str:
        """Sign prefix for a non-negative value"""
        if self & ConversionFlags.SIGN_CHAR:
            return "+"
        if self & ConversionFlags.BLANK_SIGN:
            return " "
        return ""

    def fill_char(self) -> str:
        # '-' overrides '0' if both are given
        if self & ConversionFlags.ZERO_PAD and not self & ConversionFlags.LEFT_ADJUST:
            return "0"
        return " "


FLAG_CHARS: Dict[str, ConversionFlags] = {
    "#": ConversionFlags.ALTERNATE_FORM,
    "0": ConversionFlags.ZERO_PAD,
    "-": ConversionFlags.LEFT_ADJUST,
    " ": ConversionFlags.BLANK_SIGN,
    "+": ConversionFlags.SIGN_CHAR,
}


@dataclass(frozen=True)
class Amount:
    """A width or precision fixed in the template text"""

    value: int

    def to_syntax(self) -> str:
        return str(self.value)


class QuantityMarker(Enum):
    """A width or precision taken from the argument stream at format time"""

    FROM_ARGS = "*"

    def to_syntax(self) -> str:
        return self.value


FROM_ARGS = QuantityMarker.FROM_ARGS

Quantity = Union[Amount, QuantityMarker]


class Case(Enum):
    LOWER = "lower"
    UPPER = "upper"


class Radix(Enum):
    DECIMAL = 10
    OCTAL = 8
    HEX = 16


class FloatStyle(Enum):
    EXPONENT = "exponent"
    FIXED_POINT = "fixed"
    GENERAL = "general"


class Preconversion(Enum):
    STR = "str"
    REPR = "repr"
    ASCII = "ascii"
    BYTES = "bytes"


@dataclass(frozen=True)
class NumberType:
    radix: Radix
    case: Case = Case.LOWER


@dataclass(frozen=True)
class FloatType:
    style: FloatStyle
    case: Case = Case.LOWER


@dataclass(frozen=True)
class CharacterType:
    pass


@dataclass(frozen=True)
class StringType:
    preconversion: Preconversion


ConversionType = Union[NumberType, FloatType, CharacterType, StringType]

CONVERSION_TABLE: Dict[str, ConversionType] = {
    "d": NumberType(Radix.DECIMAL),
    "i": NumberType(Radix.DECIMAL),
    "u": NumberType(Radix.DECIMAL),
    "o": NumberType(Radix.OCTAL),
    "x": NumberType(Radix.HEX, Case.LOWER),
    "X": NumberType(Radix.HEX, Case.UPPER),
    "e": FloatType(FloatStyle.EXPONENT, Case.LOWER),
    "E": FloatType(FloatStyle.EXPONENT, Case.UPPER),
    "f": FloatType(FloatStyle.FIXED_POINT),
    "F": FloatType(FloatStyle.FIXED_POINT),
    # TODO: pick fixed or exponent form by the C exponent threshold rule
    "g": FloatType(FloatStyle.GENERAL, Case.LOWER),
    "G": FloatType(FloatStyle.GENERAL, Case.UPPER),
    "c": CharacterType(),
    "r": StringType(Preconversion.REPR),
    "s": StringType(Preconversion.STR),
    "b": StringType(Preconversion.BYTES),
    "a": StringType(Preconversion.ASCII),
}

DEFAULT_FLOAT_PRECISION = Amount(6)


@dataclass(frozen=True)
class Literal:
    """Literal text copied to the output unchanged"""

    text: str

    def to_syntax(self) -> str:
        return self.text.replace("%", "%%")

    def describe(self) -> Dict[str, Any]:
        return {"kind": "literal", "text": self.text}


@dataclass(frozen=True)
class FormatSpec:
    """One ``%`` conversion specifier"""

    mapping_key: Optional[str]
    flags: ConversionFlags
    width: Optional[Quantity]
    precision: Optional[Quantity]
    conversion: ConversionType
    conversion_char: str

    @property
    def has_key(self) -> bool:
        return self.mapping_key is not None

    @property
    def is_dynamic(self) -> bool:
        return self.width is FROM_ARGS or self.precision is FROM_ARGS

    def to_syntax(self) -> str:
        out = ["%"]
        if self.mapping_key is not None:
            out.append(f"({self.mapping_key})")
        for char, flag in FLAG_CHARS.items():
            if self.flags & flag:
                out.append(char)
        if self.width is not None:
            out.append(self.width.to_syntax())
        if self.precision is not None:
            out.append("." + self.precision.to_syntax())
        out.append(self.conversion_char)
        return "".join(out)

    def describe(self) -> Dict[str, Any]:
        """Return a JSON-friendly description of this specifier"""

        def quantity(q: Optional[Quantity]) -> Any:
            if q is None:
                return None
            if q is FROM_ARGS:
                return "*"
            return q.value

        return {
            "kind": "spec",
            "mapping_key": self.mapping_key,
            "flags": [char for char, flag in FLAG_CHARS.items() if self.flags & flag],
            "width": quantity(self.width),
            "precision": quantity(self.precision),
            "conversion": self.conversion_char,
            "syntax": self.to_syntax(),
        }


Part = Union[Literal, FormatSpec]
