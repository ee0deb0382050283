"""Host: tracking of child processes and worker threads.

The Host is shared by a Context and all of its clones. Background pipelines
hand their processes and threads to it; an interrupt asks it to kill every
tracked process and join every tracked thread.
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from typing import Optional

logger = logging.getLogger(__name__)


class WorkerThread(threading.Thread):
    """A thread running a builtin or function inside a pipeline.

    The target returns an exit code, stored in ``exit_code``. Exceptions
    raised by the target are stored in ``error`` and re-raised by wait().
    """

    def __init__(self, target, name: Optional[str] = None):
        super().__init__(name=name, daemon=True)
        self._work = target
        self.exit_code: Optional[int] = None
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        try:
            self.exit_code = self._work()
        except BaseException as e:  # re-raised in wait()
            self.error = e

    def wait(self) -> int:
        self.join()
        if self.error is not None:
            raise self.error
        return self.exit_code if self.exit_code is not None else 0


class Host:
    """Process and thread tracker."""

    def __init__(self):
        self._lock = threading.Lock()
        self._processes: list[subprocess.Popen] = []
        self._threads: list[WorkerThread] = []

    def process_id(self) -> int:
        return os.getpid()

    def add_child_process(self, process: subprocess.Popen) -> None:
        logger.debug("tracking background process %d", process.pid)
        with self._lock:
            self._processes.append(process)

    def add_thread(self, thread: WorkerThread) -> None:
        logger.debug("tracking background thread %s", thread.name)
        with self._lock:
            self._threads.append(thread)

    def kill_all_processes(self) -> None:
        with self._lock:
            processes, self._processes = self._processes, []
        for process in processes:
            if process.poll() is None:
                logger.debug("killing process %d", process.pid)
                process.kill()
            process.wait()

    def join_all_threads(self) -> None:
        with self._lock:
            threads, self._threads = self._threads, []
        for thread in threads:
            thread.join()
            if thread.error is not None:
                logger.warning("background thread %s failed: %s", thread.name, thread.error)

    def take_exited_child_processes(self) -> set[int]:
        """Return the ids of background processes that have exited.

        Exited processes are no longer tracked afterwards.
        """
        exited: set[int] = set()
        with self._lock:
            running = []
            for process in self._processes:
                if process.poll() is None:
                    running.append(process)
                else:
                    exited.add(process.pid)
            self._processes = running
        return exited

    @property
    def child_processes(self) -> list[subprocess.Popen]:
        with self._lock:
            return list(self._processes)

    @property
    def threads(self) -> list[WorkerThread]:
        with self._lock:
            return list(self._threads)
