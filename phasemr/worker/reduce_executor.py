"""
Reduce Task Executor
Counts occurrences per source key for one token and delivers the count
table to the shared result collector
"""

import time
import logging
from typing import Iterable, List

from phasemr.common.errors import TaskFailure
from phasemr.common.types import PhaseName, ReducedCounts

logger = logging.getLogger(__name__)


def count_occurrences(source_keys: Iterable[str]) -> ReducedCounts:
    """First sighting of a key sets its count to 1, later sightings increment it"""
    counts: ReducedCounts = {}
    for key in source_keys:
        occurrences = counts.get(key)
        if occurrences is None:
            counts[key] = 1
        else:
            counts[key] = occurrences + 1
    return counts


class ReduceExecutor:
    """Executes the reduce task of a single token"""

    def __init__(self, task_id: int, token: str, source_keys: List[str], collector):
        """
        Initialize the reduce executor

        Args:
            task_id: Unique ID for this reduce task
            token: The token this task is responsible for
            source_keys: One source key per occurrence of the token
            collector: ResultCollector shared by all reduce tasks
        """
        self.task_id = task_id
        self.token = token
        self.source_keys = source_keys
        self.collector = collector

    def execute(self) -> int:
        """
        Execute the reduce task

        Returns:
            Number of occurrences counted

        Raises:
            TaskFailure: If counting or delivering fails
        """
        start_time = time.time()

        try:
            counts = count_occurrences(self.source_keys)
            self.collector.deliver(self.token, counts)
        except Exception as e:
            logger.error(f"Reduce task {self.task_id} ({self.token!r}) failed: {e}")
            raise TaskFailure(PhaseName.REDUCE, self.task_id, e) from e

        execution_time = int((time.time() - start_time) * 1000)
        logger.debug(f"Reduce task {self.task_id} ({self.token!r}): "
                     f"{len(counts)} keys in {execution_time}ms")
        return len(self.source_keys)
