from .base import DISPATCHABLE_PROVIDERS, AIProvider, BaseProvider
from .callable_provider import CallableProvider
from .factory import build_providers

__all__ = [
    "AIProvider",
    "DISPATCHABLE_PROVIDERS",
    "BaseProvider",
    "CallableProvider",
    "build_providers",
]
