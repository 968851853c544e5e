"""
percentfmt Binder

Decides for a whole template whether arguments bind by name or by position,
resolves ``*`` widths and precisions from the argument stream and drives the
renderer. Resolution never touches the shared template: each specifier that
needs it is copied with ``dataclasses.replace`` for the duration of one call.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import sys
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple, TypeVar

from percentfmt.error_msg import (
    FieldTooWideError,
    MappingRequiredError,
    NotAllConvertedError,
    NotEnoughArgumentsError,
    StarArgumentError,
)
from percentfmt.render import render_bytes, render_text
from percentfmt.specifier import (
    FROM_ARGS,
    Amount,
    ConversionFlags,
    FormatSpec,
    Literal,
    Quantity,
)
from percentfmt.values import DEFAULT_CONVERTER, ValueConverter, ValueKind, classify

if TYPE_CHECKING:
    from percentfmt.template import Template

logger = logging.getLogger("percentfmt.binder")

T = TypeVar("T", str, bytes)


@dataclass
class _ArgumentStream:
    """Positional cursor over the normalized argument tuple"""

    values: Tuple[Any, ...]
    cursor: int = 0

    def next(self) -> Any:
        if self.cursor >= len(self.values):
            raise NotEnoughArgumentsError()
        value = self.values[self.cursor]
        self.cursor += 1
        return value

    @property
    def exhausted(self) -> bool:
        return self.cursor >= len(self.values)


def _check_limit(amount: int, max_field_width: Optional[int]) -> None:
    if amount > sys.maxsize:
        raise FieldTooWideError(amount, sys.maxsize)
    if max_field_width is not None and amount > max_field_width:
        raise FieldTooWideError(amount, max_field_width)


def _take_star(stream: _ArgumentStream) -> int:
    value = stream.next()
    if classify(value) is not ValueKind.INTEGER:
        raise StarArgumentError()
    return int(value)


def _resolve_spec(
    spec: FormatSpec,
    stream: Optional[_ArgumentStream],
    max_field_width: Optional[int],
) -> FormatSpec:
    """Return a copy of ``spec`` with ``*`` quantities taken from ``stream``

    Width is always resolved before precision. A negative ``*`` width means
    left-adjust; a negative ``*`` precision counts as zero.
    """
    flags = spec.flags
    width: Optional[Quantity] = spec.width
    precision: Optional[Quantity] = spec.precision

    if width is FROM_ARGS and stream is not None:
        amount = _take_star(stream)
        if amount < 0:
            flags |= ConversionFlags.LEFT_ADJUST
            amount = -amount
        width = Amount(amount)
    if precision is FROM_ARGS and stream is not None:
        precision = Amount(max(0, _take_star(stream)))

    for quantity in (width, precision):
        if isinstance(quantity, Amount):
            _check_limit(quantity.value, max_field_width)

    if (flags, width, precision) == (spec.flags, spec.width, spec.precision):
        return spec
    return replace(spec, flags=flags, width=width, precision=precision)


def _bind(
    template: "Template",
    args: Any,
    render: Callable[[FormatSpec, Any], T],
    literal: Callable[[str], T],
    key: Callable[[str], Any],
    max_field_width: Optional[int],
) -> List[T]:
    specs = template.specifiers
    num_specifiers = len(specs)
    args_kind = classify(args)
    args_is_mapping = args_kind is ValueKind.MAPPING
    by_name = num_specifiers > 0 and all(spec.has_key for spec in specs)

    stream: Optional[_ArgumentStream] = None
    if by_name:
        if not args_is_mapping:
            raise MappingRequiredError()
    else:
        # a template with only literals accepts () or a mapping
        empty_tuple = args_kind is ValueKind.SEQUENCE and len(args) == 0
        if num_specifiers == 0 and not (empty_tuple or args_is_mapping):
            raise NotAllConvertedError()
        values = args if args_kind is ValueKind.SEQUENCE else (args,)
        stream = _ArgumentStream(tuple(values))

    logger.debug(
        "Binding %d specifiers %s",
        num_specifiers,
        "by name" if by_name else "positionally",
    )

    output: List[T] = []
    for _, part in template.parts:
        if isinstance(part, Literal):
            output.append(literal(part.text))
            continue
        if part.has_key:
            if not args_is_mapping:
                raise MappingRequiredError()
            spec = _resolve_spec(part, None, max_field_width)
            value = args[key(part.mapping_key)]
        else:
            spec = _resolve_spec(part, stream, max_field_width)
            value = stream.next()
        output.append(render(spec, value))

    if stream is not None and not stream.exhausted and not args_is_mapping:
        raise NotAllConvertedError()
    return output


def format_text(
    template: "Template",
    args: Any,
    converter: Optional[ValueConverter] = None,
    max_field_width: Optional[int] = None,
) -> str:
    """
    Format ``args`` into ``template`` producing text

    Args:
        template: Parsed template
        args: A mapping, a tuple of positional values, or a single value
        converter: Host conversions, defaults to the Python protocols
        max_field_width: Optional upper bound on every width and precision

    Returns:
        The formatted text
    """
    converter = converter or DEFAULT_CONVERTER
    parts = _bind(
        template,
        args,
        lambda spec, value: render_text(spec, value, converter),
        lambda text: text,
        lambda name: name,
        max_field_width,
    )
    return "".join(parts)


def format_bytes(
    template: "Template",
    args: Any,
    converter: Optional[ValueConverter] = None,
    max_field_width: Optional[int] = None,
) -> bytes:
    """Format ``args`` into ``template`` producing bytes

    Literal text and mapping keys are encoded with the template's encoding, so
    templates parsed from bytes look up ``bytes`` keys.
    """
    converter = converter or DEFAULT_CONVERTER
    encoding = template.encoding
    parts = _bind(
        template,
        args,
        lambda spec, value: render_bytes(spec, value, converter),
        lambda text: text.encode(encoding),
        lambda name: name.encode(encoding),
        max_field_width,
    )
    return b"".join(parts)

