"""
Partial-success parallel joins for independent API calls.

Controllers issue several independent requests at once (six random recipes,
name + ingredient search). Instead of a join that fails as a whole when any
single call fails, run_all_settled() waits for every task and returns one
TaskOutcome per task, in submission order, so callers can render whatever
succeeded and report the rest.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Upper bound on worker threads per join; the API calls are I/O bound
MAX_PARALLEL_REQUESTS = 8


@dataclass
class TaskOutcome(Generic[T]):
    """Result of one task in a settled join: either a value or an error."""
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _settle(task: Callable[[], T]) -> TaskOutcome[T]:
    try:
        return TaskOutcome(value=task())
    except Exception as e:
        logger.debug("Parallel task failed: %s", e)
        return TaskOutcome(error=e)


def run_all_settled(tasks: Sequence[Callable[[], T]], max_workers: Optional[int] = None) -> List[TaskOutcome[T]]:
    """
    Run tasks concurrently and wait for all of them.

    Args:
        tasks: Zero-argument callables
        max_workers: Thread pool size (default: one per task, capped at MAX_PARALLEL_REQUESTS)

    Returns:
        One TaskOutcome per task, in the same order as tasks. A failing task
        never affects the others.
    """
    if not tasks:
        return []

    workers = max_workers or min(len(tasks), MAX_PARALLEL_REQUESTS)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_settle, task) for task in tasks]
        outcomes = [future.result() for future in futures]

    failed = sum(1 for outcome in outcomes if not outcome.ok)
    if failed:
        logger.info("Settled join: %d/%d tasks failed", failed, len(outcomes))
    return outcomes


def successful_values(outcomes: Sequence[TaskOutcome[Any]]) -> List[Any]:
    """Values of the successful outcomes, in order."""
    return [outcome.value for outcome in outcomes if outcome.ok]
