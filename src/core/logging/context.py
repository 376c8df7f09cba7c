"""
Request Context Management
=========================

Carries the id of the keyword-processing run through every log line emitted
while that run is active. Backed by a ContextVar, so the id follows the run
across ``await`` points and into tasks spawned from it.

Usage:
------
```python
from src.core.logging.context import RequestContext, get_request_id

async with RequestContext(request_id="req_1700000000000_k3j2h1g0f"):
    logger.info("Fetching")   # ... | [req_1700000000000_k3j2h1g0f] Fetching
```
"""

import random
import string
import time
from contextvars import ContextVar
from typing import Optional

_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_request_id(prefix: str = "req") -> str:
    """
    Build a run id of the form ``{prefix}_{epoch_ms}_{9 base36 chars}``.
    """
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return _request_id_var.get()


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Set request ID in context.

    Args:
        request_id: Custom request ID. If None, a new one is generated.

    Returns:
        The request ID that was set.
    """
    if request_id is None:
        request_id = generate_request_id()
    _request_id_var.set(request_id)
    return request_id


def clear_request_id() -> None:
    """Clear the request ID from context."""
    _request_id_var.set(None)


class RequestContext:
    """
    Context manager scoping a request ID, restored on exit even on errors.
    """

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id or generate_request_id()
        self._token = None

    def __enter__(self):
        self._token = _request_id_var.set(self.request_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _request_id_var.reset(self._token)
        return False  # Don't suppress exceptions

    async def __aenter__(self):
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return self.__exit__(exc_type, exc_val, exc_tb)
