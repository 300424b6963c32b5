"""
Shared request dependencies for the web layer.

The property store and configuration live on app.state so each app
instance (and each test) carries its own handles instead of module globals.
"""

import asyncio
import functools
from datetime import datetime
from typing import Any, Callable, Optional

from fastapi import Request

from core.storage import PropertyStore, create_property_store
from utils.config import Config


class RequestTimeout(Exception):
    """A bounded engine call did not finish in time."""


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_clock(request: Request) -> Optional[Callable[[], datetime]]:
    """Timestamp source for generated reports (None means wall clock)."""
    return request.app.state.clock


def get_store(request: Request) -> PropertyStore:
    """
    Property store for this app, created on first use.

    Raises:
        StorageError: If the configured backend cannot be reached
    """
    state = request.app.state
    if state.store is None:
        state.store = create_property_store(state.config)
    return state.store


async def run_bounded(func: Callable[..., Any], *args: Any, timeout: float) -> Any:
    """
    Run a blocking engine call in the default executor with a deadline.

    The executor future is abandoned on timeout; the worker thread finishes
    its storage call in the background.

    Raises:
        RequestTimeout: If the call exceeds timeout seconds
    """
    try:
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, functools.partial(func, *args))
        return await asyncio.wait_for(future, timeout=timeout)
    except asyncio.TimeoutError as e:
        raise RequestTimeout(f"Request timed out after {timeout:g}s") from e
