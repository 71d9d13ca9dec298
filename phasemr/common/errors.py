"""
Exceptions raised by the pipeline
"""

from typing import List, Optional


class PipelineError(Exception):
    """Base class for every pipeline error"""


class ConfigError(PipelineError):
    """Invalid pipeline configuration"""


class InputUnavailable(PipelineError):
    """A work item's content could not be obtained"""

    def __init__(self, source: str, reason: str):
        super().__init__(f"Input unavailable: {source}: {reason}")
        self.source = source
        self.reason = reason


class TaskFailure(PipelineError):
    """A single map, group or reduce task raised"""

    def __init__(self, phase, task_id, cause: Optional[BaseException] = None):
        detail = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown error"
        super().__init__(f"{phase.value} task {task_id} failed: {detail}")
        self.phase = phase
        self.task_id = task_id
        self.cause = cause


class PhaseFailed(PipelineError):
    """One or more tasks of a phase failed; raised once the barrier is crossed"""

    def __init__(self, phase, failures: List[TaskFailure], completed: int, partial=None):
        super().__init__(
            f"{phase.value} phase failed: {len(failures)} task(s) failed, "
            f"{completed} completed"
        )
        self.phase = phase
        self.failures = failures
        self.completed = completed
        self.partial = partial


class InterruptedWait(PipelineError):
    """The caller was interrupted while blocked on a phase barrier"""

    def __init__(self, phase):
        super().__init__(f"Interrupted while waiting for {phase.value} phase")
        self.phase = phase
