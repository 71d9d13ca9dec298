"""
Shared data types for the word-count phase pipeline
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, List, Mapping


class PipelineStatus(Enum):
    """Status of a single pipeline run"""
    PENDING = "pending"
    MAP_PHASE = "map_phase"
    GROUP_PHASE = "group_phase"
    REDUCE_PHASE = "reduce_phase"
    COMPLETED = "completed"
    FAILED = "failed"


class PhaseName(Enum):
    """Phases separated by a barrier"""
    MAP = "map"
    GROUP = "group"
    REDUCE = "reduce"


class GroupStrategy(Enum):
    """How the Group phase folds mapped items into lists"""
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


@dataclass(frozen=True)
class MappedItem:
    """One occurrence of a token inside one work item"""
    token: str
    source_key: str

    def __str__(self):
        return f'["{self.token}","{self.source_key}"]'


# source key -> raw text content
WorkItemStore = Mapping[str, str]

# token -> source keys, one entry per occurrence
GroupedItems = Dict[str, List[str]]

# source key -> occurrence count
ReducedCounts = Dict[str, int]

# token -> per-key counts
FinalResult = Dict[str, ReducedCounts]
