"""
Phase barrier: submit the tasks of one phase, then block until all of them
have finished before the next phase may start.
"""

import logging
import threading
from concurrent import futures
from typing import Callable, Dict, List, Optional

from phasemr.common.errors import InterruptedWait, PhaseFailed, TaskFailure
from phasemr.common.types import PhaseName

logger = logging.getLogger(__name__)


class UnboundedExecutor(futures.Executor):
    """Runs every submitted task on its own thread"""

    def __init__(self, thread_name_prefix: str = "reduce"):
        self.thread_name_prefix = thread_name_prefix
        self._threads: List[threading.Thread] = []
        self._lock = threading.Lock()
        self._shutdown = False

    def submit(self, fn, /, *args, **kwargs):
        with self._lock:
            if self._shutdown:
                raise RuntimeError("cannot submit after shutdown")

            future = futures.Future()

            def _run():
                if not future.set_running_or_notify_cancel():
                    return
                try:
                    result = fn(*args, **kwargs)
                except BaseException as e:
                    future.set_exception(e)
                else:
                    future.set_result(result)

            thread = threading.Thread(
                target=_run,
                name=f"{self.thread_name_prefix}-{len(self._threads)}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)
            return future

    @property
    def threads_started(self) -> int:
        with self._lock:
            return len(self._threads)

    def shutdown(self, wait=True, *, cancel_futures=False):
        with self._lock:
            self._shutdown = True
            threads = list(self._threads)
        if wait:
            for thread in threads:
                thread.join()


class PhaseBarrier:
    """Tracks the futures of one phase and waits on all of them"""

    def __init__(self, phase: PhaseName, executor: futures.Executor):
        self.phase = phase
        self.executor = executor
        self.futures: Dict[futures.Future, object] = {}
        self.submit_error: Optional[BaseException] = None
        self.skipped = 0

    def submit(self, task_id, fn: Callable, *args) -> Optional[futures.Future]:
        """
        Hand one task to the executor.

        If the executor refuses a task (e.g. no thread can be started), that
        task is recorded as failed and later submissions of the phase are
        skipped; wait() then raises PhaseFailed once the accepted tasks finish.
        """
        if self.submit_error is not None:
            self.skipped += 1
            return None

        try:
            future = self.executor.submit(fn, *args)
        except RuntimeError as e:
            logger.error(f"{self.phase.value} task {task_id} could not be started: {e}")
            self.submit_error = e
            failure = TaskFailure(self.phase, task_id, e)
            failure.__cause__ = e
            future = futures.Future()
            future.set_exception(failure)

        self.futures[future] = task_id
        return future

    def __len__(self):
        return len(self.futures)

    def wait(self) -> List:
        """
        Block until every submitted task is done.

        Returns:
            Results of the successful tasks, in submission order

        Raises:
            PhaseFailed: If any task raised
            InterruptedWait: If the caller was interrupted while blocked
        """
        try:
            futures.wait(self.futures, return_when=futures.ALL_COMPLETED)
        except KeyboardInterrupt:
            cancelled = sum(1 for f in self.futures if f.cancel())
            logger.error(f"{self.phase.value} barrier interrupted, cancelled {cancelled} pending task(s)")
            raise InterruptedWait(self.phase)

        results = []
        failures = []
        for future, task_id in self.futures.items():
            error = future.exception()
            if error is None:
                results.append(future.result())
            elif isinstance(error, TaskFailure):
                failures.append(error)
            else:
                failure = TaskFailure(self.phase, task_id, error)
                failure.__cause__ = error
                failures.append(failure)

        logger.debug(f"{self.phase.value} barrier crossed: {len(results)} ok, {len(failures)} failed, "
                     f"{self.skipped} skipped")
        if failures:
            raise PhaseFailed(self.phase, failures, completed=len(results))
        return results
