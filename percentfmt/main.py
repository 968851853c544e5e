"""
percentfmt Main module - command line and HTTP service
"""

import base64
import logging
import time
from typing import Any, List, Optional

import typer
import uvicorn
from fastapi import FastAPI, HTTPException, status
from fastapi.routing import APIRouter
from pydantic import BaseModel

from percentfmt.config import ConfigError, Settings, load_settings
from percentfmt.features import Feature, FeatureRegistry, OperationResult
from percentfmt.literals import parse_argument
from percentfmt.version import get_version

# Module-level logger
logger = logging.getLogger("percentfmt.main")


class ErrorResponse(BaseModel):
    """Standard error response model"""

    detail: str


# Create CLI app with Typer
app = typer.Typer(
    name="percentfmt",
    help="percentfmt - printf-style %-formatting of text and bytes",
    add_completion=False,
)

# Create FastAPI app for API server
api_app = FastAPI(
    title="percentfmt API",
    description="printf-style %-formatting as a service",
    version=get_version(),
)

# API router for versioned endpoints
api_router = APIRouter(prefix="/api/v1")


# Request models
class FormatRequest(BaseModel):
    template: str
    args: Any = None
    as_bytes: bool = False


class FormatResponse(BaseModel):
    result: str
    encoding: str
    specifiers: int
    binding: str


class ParseRequest(BaseModel):
    template: str
    as_bytes: bool = False


# ----------------- Helper Functions -----------------


class ElapsedMsFormatter(logging.Formatter):
    """Formatter that shows milliseconds since program start, right-aligned for up to 9999 seconds."""

    def __init__(self, fmt=None, datefmt=None, *args, **kwargs):
        super().__init__(fmt, datefmt, *args, **kwargs)
        self.start_time = time.monotonic()
        self.width = 8  # Enough for '9999000ms'

    def format(self, record):
        elapsed_ms = int((time.monotonic() - self.start_time) * 1000)
        if elapsed_ms < 10**7:  # up to 9999.999s
            elapsed = f"[{elapsed_ms:>{self.width}}ms]"
        else:
            elapsed = f"[{elapsed_ms}ms]"
        record.elapsed = elapsed
        return super().format(record)


VERBOSE_LEVEL = 15  # Between INFO (20) and DEBUG (10)
logging.addLevelName(VERBOSE_LEVEL, "VERBOSE")


def verbose(self, message, *args, **kwargs):
    if self.isEnabledFor(VERBOSE_LEVEL):
        self._log(VERBOSE_LEVEL, message, args, **kwargs)


logging.Logger.verbose = verbose  # type: ignore[attr-defined]


def _settings_or_exit() -> Settings:
    try:
        return load_settings()
    except ConfigError as e:
        logger.error("%s", e)
        raise typer.Exit(code=1)


def setup_logging(debug: bool = False, verbose: bool = False, settings: Optional[Settings] = None) -> None:
    """Set up logging configuration"""
    if debug:
        log_level = logging.DEBUG
    elif verbose:
        log_level = VERBOSE_LEVEL
    elif settings is not None:
        log_level = settings.log_level_number
    else:
        log_level = logging.INFO
    formatter = ElapsedMsFormatter("%(elapsed)s %(message)s")
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.handlers = []  # Remove any existing handlers
    root.addHandler(handler)
    root.setLevel(log_level)


def _feature_or_exit(name: str) -> Feature:
    feature = FeatureRegistry.get_feature(name)
    if not feature:
        logger.error("Unknown feature: %s", name)
        raise typer.Exit(code=1)
    return feature


def _handle_cli_result(feature_name: str, result: OperationResult) -> Any:
    if not result.success:
        logger.error("%s failed: %s", feature_name, result.error or "Unknown error")
        raise typer.Exit(code=1)
    return result.data


def _values_to_args(values: List[Any]) -> Any:
    """No values bind as (), one value as itself, several as a tuple"""
    if not values:
        return ()
    if len(values) == 1:
        return values[0]
    return tuple(values)


def _json_args(args: Any) -> Any:
    """JSON arrays bind positionally, objects by name, scalars as one value"""
    if args is None:
        return ()
    if isinstance(args, list):
        return tuple(args)
    return args


# ----------------- CLI Commands -----------------


@app.command()
def version() -> None:
    """Show the percentfmt version"""
    setup_logging(False)
    data = _handle_cli_result("version", _feature_or_exit("version").handler())
    typer.echo(f"percentfmt version: {data['version']}")


@app.command("format", context_settings={"ignore_unknown_options": True})
def format_command(
    template: str = typer.Argument(..., help="Template, e.g. '%-10s|%5.2f'"),
    values: Optional[List[str]] = typer.Argument(
        None, help="Argument literals: 42, -3, 4.2, \"text\", b\"raw\", (1, 2), {\"k\": 1}"
    ),
    as_bytes: bool = typer.Option(False, "--bytes", help="Format on the byte path and write raw bytes"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging (between info and debug)"),
) -> None:
    """Format VALUES into TEMPLATE"""
    settings = _settings_or_exit()
    setup_logging(debug, verbose, settings)

    parsed_values = [parse_argument(value) for value in values or []]
    logger.verbose("Arguments: %r", parsed_values)  # type: ignore[attr-defined]

    result = _feature_or_exit("format").handler(
        template=template,
        args=_values_to_args(parsed_values),
        as_bytes=as_bytes,
        max_field_width=settings.max_field_width,
    )
    data = _handle_cli_result("format", result)
    typer.echo(data["output"])


@app.command("parse")
def parse_command(
    template: str = typer.Argument(..., help="Template to parse"),
    as_bytes: bool = typer.Option(False, "--bytes", help="Parse the UTF-8 bytes of TEMPLATE"),
) -> None:
    """Show the literal and specifier parts of TEMPLATE"""
    setup_logging(False)
    data = _handle_cli_result(
        "parse", _feature_or_exit("parse").handler(template=template, as_bytes=as_bytes)
    )
    for part in data["parts"]:
        if part["kind"] == "literal":
            typer.echo(f"{part['offset']:>5}  literal  {part['text']!r}")
        else:
            typer.echo(f"{part['offset']:>5}  spec     {part['syntax']}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind the API server"),
    port: Optional[int] = typer.Option(None, help="Port to bind the API server"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
):
    """Start the percentfmt API server"""
    settings = _settings_or_exit()
    setup_logging(debug, settings=settings)
    host = host or settings.serve_host
    port = port or settings.serve_port

    logger.info(f"Starting percentfmt API server version {get_version()} on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")

    uvicorn.run(api_app, host=host, port=port)


# ----------------- API Endpoints -----------------


def _feature_or_404(name: str) -> Feature:
    feature = FeatureRegistry.get_feature(name)
    if not feature:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{name.capitalize()} feature not found",
        )
    return feature


def _data_or_400(result: OperationResult) -> Any:
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.error or "An error occurred",
        )
    return result.data


@api_router.get("/version")
async def get_version_endpoint():
    """Get percentfmt version"""
    return _data_or_400(_feature_or_404("version").handler())


@api_router.post(
    "/format",
    response_model=FormatResponse,
    responses={400: {"model": ErrorResponse}},
)
async def format_endpoint(request: FormatRequest):
    """Format arguments into a template"""
    try:
        settings = load_settings()
    except ConfigError as e:
        logger.error("Error in format endpoint: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Invalid server configuration",
        ) from e

    data = _data_or_400(
        _feature_or_404("format").handler(
            template=request.template,
            args=_json_args(request.args),
            as_bytes=request.as_bytes,
            max_field_width=settings.max_field_width,
        )
    )
    output = data["output"]
    if isinstance(output, bytes):
        result, encoding = base64.b64encode(output).decode("ascii"), "base64"
    else:
        result, encoding = output, "text"
    return FormatResponse(
        result=result,
        encoding=encoding,
        specifiers=data["specifiers"],
        binding=data["binding"],
    )


@api_router.post("/parse", responses={400: {"model": ErrorResponse}})
async def parse_endpoint(request: ParseRequest):
    """Describe the parts of a template"""
    return _data_or_400(
        _feature_or_404("parse").handler(template=request.template, as_bytes=request.as_bytes)
    )


# Include the router in the FastAPI app
api_app.include_router(api_router)


if __name__ == "__main__":
    app()
