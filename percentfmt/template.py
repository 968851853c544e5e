"""Parsed template container and its rendering entry points."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from percentfmt.binder import format_bytes, format_text
from percentfmt.specifier import FormatSpec, Part
from percentfmt.values import ValueConverter


@dataclass(frozen=True)
class Template:
    """
    An immutable parsed template

    ``encoding`` is the codec used to turn literal text and mapping keys into
    bytes on the byte path: ``latin-1`` for templates parsed from bytes (one
    byte per character), ``utf-8`` for templates parsed from text.
    """

    parts: Tuple[Tuple[int, Part], ...]
    encoding: str = "utf-8"

    @property
    def specifiers(self) -> List[FormatSpec]:
        return [part for _, part in self.parts if isinstance(part, FormatSpec)]

    @property
    def requires_mapping(self) -> bool:
        specs = self.specifiers
        return bool(specs) and all(spec.has_key for spec in specs)

    def render_to_text(
        self,
        args: Any,
        converter: Optional[ValueConverter] = None,
        max_field_width: Optional[int] = None,
    ) -> str:
        return format_text(self, args, converter=converter, max_field_width=max_field_width)

    def render_to_bytes(
        self,
        args: Any,
        converter: Optional[ValueConverter] = None,
        max_field_width: Optional[int] = None,
    ) -> bytes:
        return format_bytes(self, args, converter=converter, max_field_width=max_field_width)

    def to_syntax(self) -> str:
        return "".join(part.to_syntax() for _, part in self.parts)

    def describe(self) -> List[Dict[str, Any]]:
        """Return a JSON-friendly description of every part with its offset"""
        return [dict(part.describe(), offset=offset) for offset, part in self.parts]

    def __str__(self) -> str:
        return self.to_syntax()
