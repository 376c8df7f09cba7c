"""
Logging
=======

- Console output: colored text in development, JSON in production
- Optional daily-rotated files (LOG_DIR)
- Request ID tracing via contextvars: every line logged while a keyword
  run is active carries its request id

```python
from src.core.logging import setup_logging, get_logger, RequestContext

setup_logging()
logger = get_logger(__name__)

async with RequestContext(request_id):
    logger.info("Processing keyword")
```
"""

from src.core.logging.config import setup_logging, get_logger, shutdown_logging
from src.core.logging.context import (
    RequestContext,
    generate_request_id,
    get_request_id,
    set_request_id,
    clear_request_id,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "shutdown_logging",
    "RequestContext",
    "generate_request_id",
    "get_request_id",
    "set_request_id",
    "clear_request_id",
]
