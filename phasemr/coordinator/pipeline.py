"""
Word-count pipeline: Map, Group and Reduce phases separated by barriers.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from phasemr.common.config import PipelineConfig
from phasemr.common.errors import InterruptedWait, PhaseFailed
from phasemr.common.types import (
    FinalResult, GroupStrategy, GroupedItems, PhaseName, PipelineStatus, WorkItemStore,
)
from phasemr.coordinator.aggregation import GroupedItemsTable, MappedItemCollector, ResultCollector
from phasemr.coordinator.barrier import PhaseBarrier, UnboundedExecutor
from phasemr.coordinator.metrics import PhaseTimer, PipelineMetrics
from phasemr.worker.group_executor import GroupExecutor, batch_items, group_sequential
from phasemr.worker.map_executor import MapExecutor
from phasemr.worker.reduce_executor import ReduceExecutor

logger = logging.getLogger(__name__)


@dataclass
class PipelineContext:
    """Every structure of one run; created fresh per run and dropped afterwards"""
    mapped: MappedItemCollector = field(default_factory=MappedItemCollector)
    grouped: Optional[GroupedItems] = None
    results: ResultCollector = field(default_factory=ResultCollector)


@dataclass
class PipelineResult:
    """Outcome of a completed run"""
    counts: FinalResult
    metrics: PipelineMetrics
    status: PipelineStatus = PipelineStatus.COMPLETED


class WordCountPipeline:
    """Runs the three phases over a work item store"""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = (config or PipelineConfig()).validate()
        self._status = PipelineStatus.PENDING
        self.lock = threading.Lock()

    @property
    def status(self) -> PipelineStatus:
        with self.lock:
            return self._status

    def _set_status(self, status: PipelineStatus):
        with self.lock:
            self._status = status
        logger.debug(f"Pipeline status: {status.value}")

    def run(self, store: WorkItemStore) -> PipelineResult:
        """
        Execute Map, Group and Reduce over the store

        Args:
            store: Mapping from source key to text content

        Returns:
            PipelineResult with the final counts and timing metrics

        Raises:
            PhaseFailed: If any task of a phase failed
            InterruptedWait: If the caller was interrupted on a barrier
        """
        config = self.config
        ctx = PipelineContext()
        metrics = PipelineMetrics(
            pool_size=config.pool_size,
            reduce_pool_size=config.reduce_pool_size,
            group_strategy=config.group_strategy.value,
            num_work_items=len(store),
        )
        timer = PhaseTimer(metrics, record_memory=config.record_memory)
        timer.start()

        try:
            self._map_phase(store, ctx)
            metrics.num_mapped_items = len(ctx.mapped)
            logger.info(f"Map phase done: {metrics.num_mapped_items} items from "
                        f"{len(store)} work items with {config.pool_size} threads "
                        f"({timer.mark(PhaseName.MAP):.1f}ms)")

            self._group_phase(ctx)
            metrics.num_distinct_tokens = len(ctx.grouped)
            logger.info(f"Group phase done: {metrics.num_distinct_tokens} distinct tokens "
                        f"({timer.mark(PhaseName.GROUP):.1f}ms)")

            self._reduce_phase(ctx)
            logger.info(f"Reduce phase done: {len(ctx.results)} tokens reduced "
                        f"({timer.mark(PhaseName.REDUCE):.1f}ms)")
        except BaseException:
            self._set_status(PipelineStatus.FAILED)
            raise

        self._set_status(PipelineStatus.COMPLETED)
        return PipelineResult(counts=ctx.results.snapshot(), metrics=metrics)

    def _map_phase(self, store: WorkItemStore, ctx: PipelineContext):
        self._set_status(PipelineStatus.MAP_PHASE)
        with ThreadPoolExecutor(max_workers=self.config.pool_size,
                                thread_name_prefix="map") as pool:
            barrier = PhaseBarrier(PhaseName.MAP, pool)
            for task_id, (key, content) in enumerate(store.items()):
                executor = MapExecutor(task_id, key, content, ctx.mapped)
                barrier.submit(task_id, executor.execute)
            logger.debug(f"Submitted {len(barrier)} map tasks")
            self._wait(barrier, ctx.mapped)

    def _group_phase(self, ctx: PipelineContext):
        self._set_status(PipelineStatus.GROUP_PHASE)
        items = ctx.mapped.snapshot()

        if self.config.group_strategy is GroupStrategy.SEQUENTIAL:
            ctx.grouped = group_sequential(items)
            return

        table = GroupedItemsTable()
        with ThreadPoolExecutor(max_workers=self.config.pool_size,
                                thread_name_prefix="group") as pool:
            barrier = PhaseBarrier(PhaseName.GROUP, pool)
            for task_id, batch in enumerate(batch_items(items, self.config.group_batch_size)):
                executor = GroupExecutor(task_id, batch, table)
                barrier.submit(task_id, executor.execute)
            logger.debug(f"Submitted {len(barrier)} group tasks")
            self._wait(barrier, table)
        ctx.grouped = table.snapshot()

    def _reduce_phase(self, ctx: PipelineContext):
        self._set_status(PipelineStatus.REDUCE_PHASE)
        if self.config.reduce_pool_size is None:
            pool = UnboundedExecutor(thread_name_prefix="reduce")
        else:
            pool = ThreadPoolExecutor(max_workers=self.config.reduce_pool_size,
                                      thread_name_prefix="reduce")

        with pool:
            barrier = PhaseBarrier(PhaseName.REDUCE, pool)
            for task_id, (token, source_keys) in enumerate(ctx.grouped.items()):
                executor = ReduceExecutor(task_id, token, source_keys, ctx.results)
                barrier.submit(task_id, executor.execute)
            logger.debug(f"Submitted {len(barrier)} reduce tasks")
            self._wait(barrier, ctx.results)

    def _wait(self, barrier: PhaseBarrier, collector):
        """Cross a barrier, then freeze the structure the phase populated"""
        try:
            barrier.wait()
        except PhaseFailed as e:
            collector.freeze()
            e.partial = collector.snapshot()
            logger.error(str(e))
            raise
        except InterruptedWait:
            logger.error(f"Pipeline aborted during {barrier.phase.value} phase")
            raise
        collector.freeze()


def run_pipeline(store: WorkItemStore, pool_size: int, **options) -> PipelineResult:
    """Run the pipeline once with a config built from keyword options"""
    config = PipelineConfig(pool_size=pool_size, **options)
    return WordCountPipeline(config).run(store)
