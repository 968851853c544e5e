"""
percentfmt - printf-style ``%`` formatting for text and bytes
"""

from percentfmt.error_msg import (
    CFormatParseError,
    CharacterRangeError,
    ConversionTypeError,
    FieldTooWideError,
    FormatError,
    GeneralFormatNotImplementedError,
    MappingRequiredError,
    NotAllConvertedError,
    NotEnoughArgumentsError,
    ParseErrorKind,
    StarArgumentError,
    UnsupportedConversionError,
)
from percentfmt.parser import parse_specifier, parse_template, percent_format
from percentfmt.specifier import ConversionFlags, FormatSpec, Literal
from percentfmt.template import Template
from percentfmt.values import ValueConverter
from percentfmt.version import __version__

__all__ = [
    "CFormatParseError",
    "CharacterRangeError",
    "ConversionFlags",
    "ConversionTypeError",
    "FieldTooWideError",
    "FormatError",
    "FormatSpec",
    "GeneralFormatNotImplementedError",
    "Literal",
    "MappingRequiredError",
    "NotAllConvertedError",
    "NotEnoughArgumentsError",
    "ParseErrorKind",
    "StarArgumentError",
    "Template",
    "UnsupportedConversionError",
    "ValueConverter",
    "__version__",
    "parse_specifier",
    "parse_template",
    "percent_format",
]
