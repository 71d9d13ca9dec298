"""
Map Task Executor
Tokenizes one work item and delivers its (token, key) pairs to the
shared mapped-item collector
"""

import time
import logging
from typing import List

from phasemr.common.errors import TaskFailure
from phasemr.common.types import MappedItem, PhaseName

logger = logging.getLogger(__name__)


def tokenize(content: str) -> List[str]:
    """Split content on runs of whitespace; empty content yields no tokens"""
    return content.split()


class MapExecutor:
    """Executes a single map task"""

    def __init__(self, task_id: int, source_key: str, content: str, collector):
        """
        Initialize the map executor

        Args:
            task_id: Unique ID for this map task
            source_key: Key of the work item (e.g. file name)
            content: Raw text of the work item
            collector: MappedItemCollector shared by all map tasks
        """
        self.task_id = task_id
        self.source_key = source_key
        self.content = content
        self.collector = collector

    def map_items(self) -> List[MappedItem]:
        """Build one MappedItem per token, in token order"""
        return [MappedItem(token, self.source_key) for token in tokenize(self.content)]

    def execute(self) -> int:
        """
        Execute the map task

        Returns:
            Number of mapped items delivered

        Raises:
            TaskFailure: If tokenizing or delivering fails
        """
        start_time = time.time()

        try:
            items = self.map_items()
            self.collector.deliver(self.source_key, items)
        except Exception as e:
            logger.error(f"Map task {self.task_id} ({self.source_key}) failed: {e}")
            raise TaskFailure(PhaseName.MAP, self.task_id, e) from e

        execution_time = int((time.time() - start_time) * 1000)
        logger.debug(f"Map task {self.task_id} ({self.source_key}): "
                     f"{len(items)} items in {execution_time}ms")
        return len(items)
