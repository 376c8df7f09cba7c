"""
Graceful Degradation Utilities

Settle-all execution of independent async tasks. Each task ends as a
TaskResult (value or error), a failing or slow task never cancels its
siblings, and the strategy only decides whether the aggregate is usable.

Usage:
    from src.utils.graceful_degradation import (
        execute_with_degradation,
        DegradationConfig,
        DegradationStrategy,
    )

    outcome = await execute_with_degradation(
        tasks=[fetch_newsapi, fetch_guardian, fetch_nyt],
        config=DegradationConfig(strategy=DegradationStrategy.ANY_SUCCESS, task_timeout=10),
        task_names=["newsapi", "guardian", "nyt"],
    )
    for task_result in outcome.all_results:   # task order, not completion order
        ...
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

TaskLike = Union[Awaitable[T], Callable[[], Awaitable[T]]]


class DegradationStrategy(str, Enum):
    """When is a partially failed batch still usable?"""

    # At least min_required tasks succeeded
    THRESHOLD = "threshold"

    # At least one task succeeded
    ANY_SUCCESS = "any_success"

    # Always (the caller copes with an all-failed batch)
    BEST_EFFORT = "best_effort"


@dataclass
class DegradationConfig:
    strategy: DegradationStrategy = DegradationStrategy.THRESHOLD
    min_required: int = 1

    # Per-task timeout in seconds; None waits indefinitely
    task_timeout: Optional[float] = 30.0

    log_failures: bool = True


@dataclass
class TaskResult(Generic[T]):
    index: int
    success: bool
    result: Optional[T] = None
    error: Optional[BaseException] = None
    task_name: Optional[str] = None
    elapsed_ms: float = 0.0

    @property
    def timed_out(self) -> bool:
        return isinstance(self.error, asyncio.TimeoutError)


@dataclass
class DegradationResult(Generic[T]):
    should_proceed: bool
    all_results: List[TaskResult[T]]

    @property
    def successful_results(self) -> List[T]:
        return [r.result for r in self.all_results if r.success]

    @property
    def failed_results(self) -> List[TaskResult[T]]:
        return [r for r in self.all_results if not r.success]

    @property
    def total_count(self) -> int:
        return len(self.all_results)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.all_results if r.success)

    @property
    def is_partial(self) -> bool:
        return self.should_proceed and self.success_count < self.total_count

    def summary(self) -> str:
        failed = ", ".join(r.task_name or str(r.index) for r in self.failed_results)
        text = f"{self.success_count}/{self.total_count} succeeded"
        return f"{text} (failed: {failed})" if failed else text


async def _execute_single(index: int, task: TaskLike, name: str, config: DegradationConfig) -> TaskResult:
    start_time = time.time()

    def _elapsed() -> float:
        return (time.time() - start_time) * 1000

    try:
        awaitable = task() if callable(task) else task
        if config.task_timeout:
            result = await asyncio.wait_for(awaitable, timeout=config.task_timeout)
        else:
            result = await awaitable
        return TaskResult(index=index, success=True, result=result, task_name=name, elapsed_ms=_elapsed())

    except asyncio.TimeoutError as e:
        if config.log_failures:
            logger.warning(f"[DEGRADATION] Task '{name}' timed out after {config.task_timeout}s")
        return TaskResult(index=index, success=False, error=e, task_name=name, elapsed_ms=_elapsed())

    except Exception as e:
        if config.log_failures:
            logger.warning(f"[DEGRADATION] Task '{name}' failed: {e}")
        return TaskResult(index=index, success=False, error=e, task_name=name, elapsed_ms=_elapsed())


def _evaluate_degradation_strategy(config: DegradationConfig, success_count: int) -> bool:
    if config.strategy == DegradationStrategy.BEST_EFFORT:
        return True
    if config.strategy == DegradationStrategy.ANY_SUCCESS:
        return success_count > 0
    return success_count >= config.min_required


async def execute_with_degradation(
    tasks: List[TaskLike],
    config: Optional[DegradationConfig] = None,
    task_names: Optional[List[str]] = None,
) -> DegradationResult:
    """
    Run tasks concurrently and wait for every one of them.

    Args:
        tasks: Awaitables or zero-argument async callables
        config: Timeout and strategy
        task_names: Optional names used in logs and results

    Returns:
        DegradationResult whose ``all_results`` follow task order
    """
    config = config or DegradationConfig()
    names = list(task_names or [])
    names += [f"task_{i}" for i in range(len(names), len(tasks))]

    task_results: List[TaskResult] = await asyncio.gather(
        *[_execute_single(i, task, names[i], config) for i, task in enumerate(tasks)]
    )

    outcome = DegradationResult(
        should_proceed=_evaluate_degradation_strategy(
            config, sum(1 for r in task_results if r.success)
        ),
        all_results=list(task_results),
    )
    logger.debug(f"[DEGRADATION] {outcome.summary()}, proceed={outcome.should_proceed}")
    return outcome
