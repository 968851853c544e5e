"""
percentfmt argument literals - typed values for the command line and service

Grammar-driven with Lark so that ``42``, ``4.2``, ``"text"``, ``b"raw"``,
``(1, 2)`` and ``{"key": 1}`` arrive at the binder as the value kinds they
spell, instead of as plain strings.
"""

from __future__ import annotations

import ast
import logging
from typing import Any

from lark import Lark, Transformer, v_args
from lark.exceptions import LarkError

logger = logging.getLogger("percentfmt.literals")


class LiteralSyntaxError(ValueError):
    """Raised when text is not a valid argument literal"""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"invalid argument literal {text!r}: {reason}")


# Lark grammar for argument literals
grammar = r"""
    ?start: value

    ?value: mapping
          | array
          | sequence
          | STRING -> string
          | BYTES -> byte_string
          | SIGNED_NUMBER -> number
          | "true" -> true
          | "false" -> false
          | "none" -> none

    mapping: "{" [pair ("," pair)*] "}"
    pair: value ":" value
    array: "[" [value ("," value)*] "]"
    sequence: "(" [value ("," value)*] ")"

    BYTES: /b"(\\.|[^"\\\n])*"/
    STRING: /"(\\.|[^"\\\n])*"/

    %import common.SIGNED_NUMBER
    %import common.WS
    %ignore WS
"""


class LiteralTransformer(Transformer):
    """Transform the parse tree into Python values"""

    @v_args(inline=True)
    def string(self, token):
        return ast.literal_eval(str(token))

    @v_args(inline=True)
    def byte_string(self, token):
        return ast.literal_eval(str(token))

    @v_args(inline=True)
    def number(self, token):
        text = str(token)
        if any(marker in text for marker in ".eE"):
            return float(text)
        return int(text)

    def true(self, _):
        return True

    def false(self, _):
        return False

    def none(self, _):
        return None

    def pair(self, children):
        key, value = children
        return key, value

    def mapping(self, pairs):
        return dict(pairs)

    def array(self, items):
        return list(items)

    def sequence(self, items):
        return tuple(items)


parser = Lark(grammar, start="start", parser="lalr", maybe_placeholders=False)


def parse_literal(text: str) -> Any:
    """
    Parse one argument literal

    Args:
        text: Literal source, e.g. ``'(1, "a", b"\\x00")'``

    Returns:
        The Python value it denotes

    Raises:
        LiteralSyntaxError: If the text is not a literal
    """
    try:
        tree = parser.parse(text)
        return LiteralTransformer().transform(tree)
    except LarkError as e:
        raise LiteralSyntaxError(text, str(e).splitlines()[0] if str(e) else type(e).__name__) from e


def parse_argument(text: str) -> Any:
    """Parse ``text`` as a literal, falling back to the raw text"""
    try:
        return parse_literal(text)
    except LiteralSyntaxError:
        logger.debug("Treating %r as plain text", text)
        return text
