"""Telemetry module for observability."""

from stackr_ai.telemetry.logger import RequestContext, get_logger, setup_logging

__all__ = ["get_logger", "setup_logging", "RequestContext"]
