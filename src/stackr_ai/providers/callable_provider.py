"""Adapter turning a plain zero-argument callable into a provider."""

import asyncio
import inspect
from collections.abc import Callable
from typing import Any

from .base import AIProvider, BaseProvider


class CallableProvider(BaseProvider):
    """Provider backed by a caller-supplied function.

    The function takes no arguments; the request it fulfils is already bound
    into it by the caller. Coroutine functions are awaited, plain functions
    run in a worker thread.
    """

    def __init__(self, provider: AIProvider | str, func: Callable[[], Any]):
        self.provider = AIProvider(provider)
        self.func = func

    async def attempt(self, payload: Any) -> Any:
        if inspect.iscoroutinefunction(self.func):
            return await self.func()
        result = await asyncio.to_thread(self.func)
        if inspect.isawaitable(result):
            return await result
        return result
