# src/news_briefing/services/strategy.py
"""
Primary / fallback resolution for per-item pipeline stages.

Each item is resolved independently: a failing item never affects its
neighbours, and results come back in input order.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class StrategyOutcome(Generic[R]):
    value: R
    used_fallback: bool = False
    error: Optional[BaseException] = None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error else None


class TwoStrategyResolver(Generic[T, R]):
    """
    Try primary(item); on any exception run fallback(item).

    The primary's error is recorded on the outcome and never propagates.
    An exception from the fallback does propagate.
    """

    def __init__(
        self,
        primary: Optional[Callable[[T], Awaitable[R]]],
        fallback: Callable[[T], Awaitable[R]],
        name: str = "stage",
    ):
        self.primary = primary
        self.fallback = fallback
        self.name = name

    async def resolve(self, item: T) -> StrategyOutcome[R]:
        if self.primary is None:
            return StrategyOutcome(value=await self.fallback(item), used_fallback=True)

        try:
            return StrategyOutcome(value=await self.primary(item))
        except Exception as e:
            logger.debug(f"[{self.name}] Primary failed, using fallback: {e}")
            value = await self.fallback(item)
            return StrategyOutcome(value=value, used_fallback=True, error=e)


async def run_per_item(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    concurrency: int = 5,
) -> List[R]:
    """
    Run worker over items with bounded concurrency.

    Results are written back by index, so output order equals input order
    regardless of completion order.
    """
    results: List[Optional[R]] = [None] * len(items)
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _run(index: int, item: T):
        async with semaphore:
            results[index] = await worker(item)

    await asyncio.gather(*[_run(i, item) for i, item in enumerate(items)])
    return results
