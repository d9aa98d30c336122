"""HTTP surface for the orchestration layer."""

from .main import create_app, run_server

__all__ = ["create_app", "run_server"]
