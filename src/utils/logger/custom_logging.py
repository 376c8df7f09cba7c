"""
Custom Logging
==============

Class-level access to the logging system.

Usage:
    from src.utils.logger.custom_logging import LoggerMixin

    class SourceFetcher(LoggerMixin):
        def __init__(self):
            super().__init__()  # Sets up self.logger
            self.logger.info("[Fetcher] Initialized")
"""

from src.core.logging import get_logger


class LoggerMixin:
    """
    Mixin class that provides a ``self.logger`` named
    ``{module}.{ClassName}``.
    """

    def __init__(self) -> None:
        logger_name = f"{self.__class__.__module__}.{self.__class__.__name__}"
        self.logger = get_logger(logger_name)
