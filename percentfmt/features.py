"""
This module defines all percentfmt features using a unified registry system.
The CLI and the HTTP service both dispatch through it.
"""

from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Optional,
    TypeVar,
)
from dataclasses import dataclass
import logging

from percentfmt.error_msg import CFormatParseError, FormatError
from percentfmt.parser import parse_template
from percentfmt.values import ValueKind, classify

logger = logging.getLogger("percentfmt.features")

T = TypeVar("T")

# Failures a template or its arguments can cause; anything else is a bug
USER_ERRORS = (CFormatParseError, FormatError, KeyError, ValueError, OverflowError)


class OperationResult(Generic[T]):
    """Wrapper for operation results with success/error handling"""

    def __init__(
        self, success: bool, data: Optional[T] = None, error: Optional[str] = None
    ):
        self.success = success
        self.data = data
        self.error = error

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "OperationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "OperationResult[T]":
        return cls(success=False, error=error)


@dataclass
class Feature:
    """A named operation shared by the CLI and the API"""

    name: str
    description: str
    handler: Callable
    api_endpoint: Optional[Dict[str, Any]] = None


class FeatureRegistry:
    """Registry for all percentfmt features"""

    _features: Dict[str, Feature] = {}

    @classmethod
    def register(cls, feature: Feature) -> Feature:
        """Register a new feature"""
        cls._features[feature.name] = feature
        return feature

    @classmethod
    def get_feature(cls, name: str) -> Optional[Feature]:
        """Get a feature by name"""
        return cls._features.get(name)

    @classmethod
    def get_all_features(cls) -> Dict[str, Feature]:
        """Get all registered features"""
        return cls._features.copy()


def error_message(error: Exception) -> str:
    """Human-readable message for a formatting failure"""
    if isinstance(error, KeyError):
        return f"missing mapping key {error.args[0]!r}"
    if isinstance(error, CFormatParseError):
        return f"{error} (offset {error.offset})"
    return str(error)


def encode_text_args(args: Any) -> Any:
    """UTF-8 encode text arguments so they satisfy ``%s`` on the byte path"""

    def encode(value: Any) -> Any:
        return value.encode("utf-8") if isinstance(value, str) else value

    kind = classify(args)
    if kind is ValueKind.SEQUENCE:
        return tuple(encode(value) for value in args)
    if kind is ValueKind.MAPPING:
        return {encode(key): encode(value) for key, value in args.items()}
    return encode(args)


def _display_bytes(text: str, encoding: str) -> str:
    return text.encode(encoding).decode("utf-8", "backslashreplace")


# ----------------- Feature Handlers -----------------


def handle_version(**kwargs) -> OperationResult[Dict[str, str]]:
    """Handle version request"""
    from percentfmt.version import get_version

    return OperationResult.ok({"version": get_version()})


def handle_format(
    template: str,
    args: Any = (),
    as_bytes: bool = False,
    max_field_width: Optional[int] = None,
    **kwargs,
) -> OperationResult[Dict[str, Any]]:
    """
    Format ``args`` into ``template``

    With ``as_bytes`` the template is UTF-8 encoded and formatted on the byte
    path, and text arguments are UTF-8 encoded first.
    """
    try:
        if as_bytes:
            parsed = parse_template(template.encode("utf-8"))
            output: Any = parsed.render_to_bytes(
                encode_text_args(args), max_field_width=max_field_width
            )
        else:
            parsed = parse_template(template)
            output = parsed.render_to_text(args, max_field_width=max_field_width)
    except USER_ERRORS as e:
        logger.debug("Formatting %r failed: %s", template, e)
        return OperationResult.fail(error_message(e))

    return OperationResult.ok(
        {
            "output": output,
            "as_bytes": as_bytes,
            "specifiers": len(parsed.specifiers),
            "binding": "mapping" if parsed.requires_mapping else "positional",
        }
    )


def handle_parse(template: str, as_bytes: bool = False, **kwargs) -> OperationResult[Dict[str, Any]]:
    """Parse ``template`` and describe its parts"""
    try:
        parsed = parse_template(template.encode("utf-8") if as_bytes else template)
    except USER_ERRORS as e:
        return OperationResult.fail(error_message(e))
    parts = parsed.describe()
    syntax = parsed.to_syntax()
    if as_bytes:
        # byte templates are read one byte per character; show the UTF-8 text
        parts = [
            {
                field: _display_bytes(value, parsed.encoding)
                if field in ("text", "mapping_key", "syntax") and isinstance(value, str)
                else value
                for field, value in part.items()
            }
            for part in parts
        ]
        syntax = _display_bytes(syntax, parsed.encoding)
    return OperationResult.ok({"parts": parts, "syntax": syntax})


# Register all features
version_feature = FeatureRegistry.register(
    Feature(
        name="version",
        description="Get the percentfmt version",
        handler=handle_version,
        api_endpoint={"path": "/version", "methods": ["GET"]},
    )
)

format_feature = FeatureRegistry.register(
    Feature(
        name="format",
        description="Format arguments into a %-style template",
        handler=handle_format,
        api_endpoint={"path": "/format", "methods": ["POST"]},
    )
)

parse_feature = FeatureRegistry.register(
    Feature(
        name="parse",
        description="Parse a %-style template and describe its parts",
        handler=handle_parse,
        api_endpoint={"path": "/parse", "methods": ["POST"]},
    )
)
