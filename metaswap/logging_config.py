"""
Structured logging for the quote service and the CLI.

Every line carries the request id bound by the HTTP middleware; lines from
provider adapters also carry the provider id, so the fan-out of one quote
can be followed across providers. JSON lines in production, console output
at DEBUG.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from .config import settings
from .core.models import ProviderId

# adapter loggers are named "<ADAPTER_LOGGER>.<provider id in lower case>"
ADAPTER_LOGGER = "metaswap.providers"

# request lines come from RequestLoggingMiddleware, provider calls from the adapters
QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx")

_PROVIDER_IDS = {provider_id.value for provider_id in ProviderId}


def resolve_level(name: Optional[str], default: int = logging.INFO) -> int:
    if not name:
        return default
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default


def add_provider_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag adapter log lines with the provider that emitted them."""

    name = event_dict.get("logger") or ""
    prefix = ADAPTER_LOGGER + "."
    if "provider" not in event_dict and name.startswith(prefix):
        provider = name[len(prefix):].upper()
        if provider in _PROVIDER_IDS:
            event_dict["provider"] = provider
    return event_dict


def _renderer(is_dev: bool) -> Processor:
    if is_dev:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(log_level: Optional[str] = None, provider_log_level: Optional[str] = None) -> None:
    """Route structlog and stdlib loggers through one renderer.

    Args:
        log_level: Override the root level (default: settings.log_level)
        provider_log_level: Override the adapter level (default:
            settings.provider_log_level, else inherit the root level)
    """
    level = resolve_level(log_level or settings.log_level)
    is_dev = level == logging.DEBUG

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_provider_id,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if not is_dev:
        # ConsoleRenderer prints tracebacks itself
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # adapters log through stdlib; give their records the same processors
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(is_dev),
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger(ADAPTER_LOGGER).setLevel(
        resolve_level(provider_log_level or settings.provider_log_level, logging.NOTSET)
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
