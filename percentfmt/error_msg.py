"""
percentfmt error taxonomy

Parse-time failures carry a kind and the offset at which they were detected.
Format-time failures carry a stable ``code`` and also subclass the built-in
exception category a ``%`` operator would raise, so callers can catch either.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ParseErrorKind(Enum):
    """Kinds of template parse failures"""

    UNMATCHED_KEY_PARENTHESES = "E_UNMATCHED_KEY_PARENTHESES"
    MISSING_MODULO_SIGN = "E_MISSING_MODULO_SIGN"
    UNSUPPORTED_FORMAT_CHAR = "E_UNSUPPORTED_FORMAT_CHAR"
    INCOMPLETE_FORMAT = "E_INCOMPLETE_FORMAT"
    INT_TOO_BIG = "E_INT_TOO_BIG"


class CFormatParseError(ValueError):
    """Raised when a template cannot be parsed"""

    def __init__(self, kind: ParseErrorKind, offset: int, char: Optional[str] = None):
        self.kind = kind
        self.offset = offset
        self.char = char
        super().__init__(self.format_message())

    @property
    def code(self) -> str:
        return self.kind.value

    def format_message(self) -> str:
        if self.kind is ParseErrorKind.UNMATCHED_KEY_PARENTHESES:
            return "incomplete format key"
        if self.kind is ParseErrorKind.INCOMPLETE_FORMAT:
            return "incomplete format"
        if self.kind is ParseErrorKind.UNSUPPORTED_FORMAT_CHAR:
            return (
                f"unsupported format character '{self.char}' "
                f"({ord(self.char):#x}) at index {self.offset}"
            )
        if self.kind is ParseErrorKind.INT_TOO_BIG:
            return "width/precision too big"
        return "unexpected error parsing format string"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CFormatParseError):
            return NotImplemented
        return (self.kind, self.offset, self.char) == (other.kind, other.offset, other.char)

    def __hash__(self) -> int:
        return hash((self.kind, self.offset, self.char))


class FormatError(Exception):
    """Base class for failures raised while binding or rendering a template"""

    code = "E_FORMAT"

    def __init__(self, msg: str):
        self.msg = msg
        super().__init__(msg)


class MappingRequiredError(FormatError, TypeError):
    code = "E_MAPPING_REQUIRED"

    def __init__(self) -> None:
        super().__init__("format requires a mapping")


class NotEnoughArgumentsError(FormatError, TypeError):
    code = "E_NOT_ENOUGH_ARGUMENTS"

    def __init__(self) -> None:
        super().__init__("not enough arguments for format string")


class NotAllConvertedError(FormatError, TypeError):
    code = "E_NOT_ALL_CONVERTED"

    def __init__(self) -> None:
        super().__init__("not all arguments converted during string formatting")


class StarArgumentError(FormatError, TypeError):
    """A ``*`` width or precision was bound to a non-integer argument"""

    code = "E_STAR_WANTS_INT"

    def __init__(self) -> None:
        super().__init__("* wants int")


class ConversionTypeError(FormatError, TypeError):
    """The argument has the wrong type for the conversion character"""

    code = "E_CONVERSION_TYPE"

    def __init__(self, msg: str, conversion_char: str, required: str, actual: str):
        self.conversion_char = conversion_char
        self.required = required
        self.actual = actual
        super().__init__(msg)


class CharacterRangeError(FormatError, OverflowError):
    code = "E_CHARACTER_RANGE"

    def __init__(self, value: int, limit: int):
        self.value = value
        self.limit = limit
        super().__init__(f"%c arg not in range({limit:#x})" if limit > 256 else f"%c arg not in range({limit})")


class UnsupportedConversionError(FormatError, ValueError):
    """The conversion exists in the grammar but not for this output type"""

    code = "E_UNSUPPORTED_CONVERSION"

    def __init__(self, conversion_char: str):
        self.conversion_char = conversion_char
        super().__init__(
            f"unsupported format character '{conversion_char}' ({ord(conversion_char):#x})"
        )


class FieldTooWideError(FormatError, ValueError):
    code = "E_FIELD_TOO_WIDE"

    def __init__(self, amount: int, limit: int):
        self.amount = amount
        self.limit = limit
        super().__init__(f"width/precision {amount} exceeds the limit of {limit}")


class GeneralFormatNotImplementedError(FormatError, NotImplementedError):
    code = "E_NOT_IMPLEMENTED"

    def __init__(self) -> None:
        super().__init__("Not yet implemented for %g and %G")
