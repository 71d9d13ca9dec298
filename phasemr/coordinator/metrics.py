"""
Timing and resource metrics for pipeline runs.
"""

import time
import json
import psutil
from dataclasses import dataclass, asdict, field
from typing import Dict, Optional

from phasemr.common.types import PhaseName


@dataclass
class PipelineMetrics:
    """Metrics for a single pipeline run."""

    pool_size: int
    reduce_pool_size: Optional[int]
    group_strategy: str
    start_time: float = 0.0
    end_time: float = 0.0
    map_elapsed_ms: float = 0.0
    group_elapsed_ms: float = 0.0
    reduce_elapsed_ms: float = 0.0
    num_work_items: int = 0
    num_mapped_items: int = 0
    num_distinct_tokens: int = 0
    rss_bytes: Dict[str, int] = field(default_factory=dict)

    @property
    def total_time_ms(self) -> float:
        """Wall-clock time from start to the last barrier."""
        return (self.end_time - self.start_time) * 1000

    @property
    def map_phase_ms(self) -> float:
        return self.map_elapsed_ms

    @property
    def group_phase_ms(self) -> float:
        return self.group_elapsed_ms - self.map_elapsed_ms

    @property
    def reduce_phase_ms(self) -> float:
        return self.reduce_elapsed_ms - self.group_elapsed_ms

    def to_dict(self) -> dict:
        """Convert metrics to dictionary, including the derived phase times."""
        data = asdict(self)
        data['total_time_ms'] = self.total_time_ms
        data['map_phase_ms'] = self.map_phase_ms
        data['group_phase_ms'] = self.group_phase_ms
        data['reduce_phase_ms'] = self.reduce_phase_ms
        return data

    def save_to_file(self, filepath: str):
        """Save metrics to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


class PhaseTimer:
    """Records elapsed time since pipeline start at each barrier crossing."""

    def __init__(self, metrics: PipelineMetrics, record_memory: bool = False):
        self.metrics = metrics
        self.record_memory = record_memory
        self.process = psutil.Process() if record_memory else None

    def start(self):
        self.metrics.start_time = time.time()

    def elapsed_ms(self) -> float:
        return (time.time() - self.metrics.start_time) * 1000

    def mark(self, phase: PhaseName) -> float:
        """Record the boundary at the end of a phase; returns elapsed ms."""
        elapsed = self.elapsed_ms()
        setattr(self.metrics, f"{phase.value}_elapsed_ms", elapsed)
        if self.process is not None:
            self.metrics.rss_bytes[phase.value] = self.process.memory_info().rss
        if phase is PhaseName.REDUCE:
            self.metrics.end_time = time.time()
        return elapsed
