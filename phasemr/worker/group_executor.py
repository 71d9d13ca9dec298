"""
Group Task Executor
Folds mapped items into token -> source key lists
"""

import time
import logging
from typing import Iterable, List

from phasemr.common.errors import TaskFailure
from phasemr.common.types import GroupedItems, MappedItem, PhaseName

logger = logging.getLogger(__name__)


def group_sequential(items: Iterable[MappedItem]) -> GroupedItems:
    """
    Single-threaded fold of mapped items.

    Tokens appear in first-seen order and each key list mirrors the order
    of the input sequence.
    """
    grouped: GroupedItems = {}
    for item in items:
        keys = grouped.get(item.token)
        if keys is None:
            keys = []
            grouped[item.token] = keys
        keys.append(item.source_key)
    return grouped


def batch_items(items, batch_size: int) -> List[List[MappedItem]]:
    """Split the mapped items into consecutive batches for parallel grouping"""
    items = list(items)
    return [items[i:i + batch_size] for i in range(0, len(items), batch_size)]


class GroupExecutor:
    """Appends one batch of mapped items to the shared grouped-items table"""

    def __init__(self, task_id: int, batch: List[MappedItem], table):
        self.task_id = task_id
        self.batch = batch
        self.table = table

    def execute(self) -> int:
        start_time = time.time()

        try:
            self.table.extend(self.batch)
        except Exception as e:
            logger.error(f"Group task {self.task_id} failed: {e}")
            raise TaskFailure(PhaseName.GROUP, self.task_id, e) from e

        execution_time = int((time.time() - start_time) * 1000)
        logger.debug(f"Group task {self.task_id}: {len(self.batch)} items in {execution_time}ms")
        return len(self.batch)
