"""
Structured logging for the orchestration layer.

Events render as JSON lines or console output and carry the current request
id. Outside development, emails, card and account numbers and API keys are
masked before rendering, since payloads carry users' financial data.
"""

import logging
import re
import sys
from contextvars import ContextVar
from typing import Any, List, Optional
from uuid import uuid4

import orjson
import structlog
from structlog.processors import CallsiteParameter
from structlog.typing import Processor

from stackr_ai.config import Settings, get_settings

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="")

# Card numbers go before the shorter account and phone patterns
_REDACTIONS = (
    (re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"), "[EMAIL_REDACTED]"),
    (re.compile(r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}\b"), "[CC_REDACTED]"),
    (re.compile(r"\b(?:\+?1[-.]?)?\(?[0-9]{3}\)?[-.]?[0-9]{3}[-.]?[0-9]{4}\b"), "[PHONE_REDACTED]"),
    (re.compile(r"\b\d{8,17}\b"), "[ACCOUNT_REDACTED]"),
    (re.compile(r"\b(sk-|pplx-|api[_-]?key[\s=:]+)[\w-]{20,}\b", re.IGNORECASE), "[API_KEY_REDACTED]"),
)

_UNREDACTED_KEYS = frozenset({"timestamp", "level", "logger", "request_id"})

_QUIET_LOGGERS = ("uvicorn.access", "httpx", "openai", "anthropic")


class PIIRedactor:
    """Masks personal and financial identifiers in log values."""

    @staticmethod
    def redact(value: Any) -> Any:
        if isinstance(value, str):
            for pattern, label in _REDACTIONS:
                value = pattern.sub(label, value)
            return value
        if isinstance(value, dict):
            return {k: PIIRedactor.redact(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return type(value)(PIIRedactor.redact(v) for v in value)
        return value


def add_context_vars(logger, method_name, event_dict):
    """Add the bound request and user ids to the event."""
    if request_id := request_id_var.get():
        event_dict["request_id"] = request_id
    if user_id := user_id_var.get():
        event_dict["user_id"] = user_id
    return event_dict


def redact_sensitive_data(logger, method_name, event_dict):
    return {
        key: value if key in _UNREDACTED_KEYS else PIIRedactor.redact(value)
        for key, value in event_dict.items()
    }


def _orjson_dumps(obj: Any, **kwargs: Any) -> str:
    return orjson.dumps(obj, default=str).decode()


def build_processors(log_format: str, redact_pii: bool) -> List[Processor]:
    """Processor chain for the given output format."""
    processors: List[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_context_vars,
    ]
    if redact_pii:
        processors.append(redact_sensitive_data)

    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[CallsiteParameter.FILENAME, CallsiteParameter.FUNC_NAME, CallsiteParameter.LINENO]
        ),
        structlog.processors.ExceptionRenderer(),
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer(serializer=_orjson_dumps))
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def setup_logging(
    level: Optional[str] = None,
    format: Optional[str] = None,
    redact_pii: Optional[bool] = None,
    settings: Optional[Settings] = None,
) -> None:
    """
    Route structlog through stdlib logging.

    Args:
        level: Log level name; defaults to ``settings.log_level``
        format: ``json`` or ``console``; defaults to ``settings.log_format``
        redact_pii: Mask identifiers in event values; defaults to on outside development
        settings: Configuration the defaults come from
    """
    settings = settings or get_settings()
    log_level = (level or settings.log_level).upper()
    if redact_pii is None:
        redact_pii = not settings.is_development

    structlog.configure(
        processors=build_processors(format or settings.log_format, redact_pii),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=getattr(logging, log_level))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class RequestContext:
    """Binds a request id, and optionally a user id, to every event logged inside the block."""

    def __init__(self, request_id: Optional[str] = None, user_id: Optional[str] = None):
        self.request_id = request_id or uuid4().hex
        self.user_id = user_id
        self._tokens: list = []

    def __enter__(self) -> "RequestContext":
        bindings = [(request_id_var, self.request_id)]
        if self.user_id:
            bindings.append((user_id_var, self.user_id))
        self._tokens = [(var, var.set(value)) for var, value in bindings]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)
        return False
