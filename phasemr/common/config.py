"""
Pipeline configuration
"""

from dataclasses import dataclass
from typing import Optional

from phasemr.common.errors import ConfigError
from phasemr.common.types import GroupStrategy

# Defaults
DEFAULT_POOL_SIZE = 4
DEFAULT_GROUP_BATCH_SIZE = 1000


@dataclass
class PipelineConfig:
    """
    Settings for one pipeline run.

    pool_size bounds the Map pool (and the Group pool for the parallel
    strategy). reduce_pool_size of None spawns one thread per distinct
    token; an integer routes Reduce tasks through a bounded pool instead.
    """
    pool_size: int = DEFAULT_POOL_SIZE
    reduce_pool_size: Optional[int] = None
    group_strategy: GroupStrategy = GroupStrategy.SEQUENTIAL
    group_batch_size: int = DEFAULT_GROUP_BATCH_SIZE
    record_memory: bool = False

    def validate(self):
        """Raise ConfigError if any setting is out of range"""
        if isinstance(self.pool_size, bool) or not isinstance(self.pool_size, int):
            raise ConfigError(f"pool_size must be an integer, got {self.pool_size!r}")
        if self.pool_size < 1:
            raise ConfigError(f"pool_size must be >= 1, got {self.pool_size}")
        if self.reduce_pool_size is not None and self.reduce_pool_size < 1:
            raise ConfigError(f"reduce_pool_size must be >= 1, got {self.reduce_pool_size}")
        if self.group_batch_size < 1:
            raise ConfigError(f"group_batch_size must be >= 1, got {self.group_batch_size}")
        if not isinstance(self.group_strategy, GroupStrategy):
            try:
                self.group_strategy = GroupStrategy(self.group_strategy)
            except ValueError:
                raise ConfigError(f"Unknown group strategy: {self.group_strategy!r}")
        return self
