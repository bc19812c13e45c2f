"""Process table: PID allocation, exit status and join/exit rendezvous."""

from __future__ import annotations

import threading
from typing import Optional, Union

from .bitmap import Bitmap
from .pcb import PCB, ProcessStatus

MAX_PROCESSES = 32


class ProcessManager:
    """Keeps track of live processes and lets processes wait on each other.

    A PID stays reserved while its process runs and while any other process
    is still joining on it; it is only handed out again once every holder
    has let go.
    """

    def __init__(self, max_processes: int = MAX_PROCESSES) -> None:
        self._max_processes = max_processes
        self._pids = Bitmap(max_processes)
        self._pcbs: dict[int, PCB] = {}
        self._statuses: dict[int, Union[ProcessStatus, int]] = {}
        self._holders: dict[int, int] = {}
        self._lock = threading.Lock()
        self._conditions: dict[int, threading.Condition] = {}
        self._generations: dict[int, int] = {}

    def allocate_pid(self) -> int:
        """Reserve and return the lowest free PID.

        Raises BitmapFullError when every PID is in use.
        """
        with self._lock:
            pid = self._pids.find()
            self._holders[pid] = 1
            self._statuses.pop(pid, None)
            self._pcbs.pop(pid, None)
            return pid

    def clear_pid(self, pid: int) -> None:
        """Drop one hold on ``pid``; free it once nobody holds it."""
        with self._lock:
            self._release_hold(pid)

    def _release_hold(self, pid: int) -> None:
        count = self._holders.get(pid, 0)
        if count <= 0:
            raise ValueError(f"PID {pid} is not allocated")
        count -= 1
        self._holders[pid] = count
        if count == 0:
            self._pids.clear(pid)

    def add_process(self, pcb: PCB, pid: int) -> None:
        """Register ``pcb`` as the process with id ``pid``."""
        with self._lock:
            self._pcbs[pid] = pcb

    def join(self, pid: int, timeout: Optional[float] = None) -> bool:
        """Wait until process ``pid`` announces a change of status.

        Returns True if woken by a broadcast, False if ``timeout`` seconds
        passed first. The caller holds ``pid`` while waiting.
        """
        with self._lock:
            condition = self._conditions.get(pid)
            if condition is None:
                condition = threading.Condition(self._lock)
                self._conditions[pid] = condition
            self._holders[pid] = self._holders.get(pid, 0) + 1
            start = self._generations.get(pid, 0)
            woken = condition.wait_for(
                lambda: self._generations.get(pid, 0) != start, timeout
            )
            self._release_hold(pid)
            return bool(woken)

    def broadcast(self, pid: int) -> None:
        """Record the status of process ``pid`` and wake everyone joining on it."""
        with self._lock:
            pcb = self._pcbs.get(pid)
            if pcb is None:
                raise KeyError(f"no process registered with PID {pid}")
            self._statuses[pid] = pcb.status
            condition = self._conditions.get(pid)
            if condition is not None:
                self._generations[pid] = self._generations.get(pid, 0) + 1
                condition.notify_all()

    def get_status(self, pid: int) -> Union[ProcessStatus, int]:
        """Return the status of ``pid``, or -1 if the PID is no longer in use."""
        with self._lock:
            if not self._pids.test(pid):
                return -1
            if pid in self._statuses:
                return self._statuses[pid]
            pcb = self._pcbs.get(pid)
            return pcb.status if pcb is not None else ProcessStatus.GOOD

    def all_finished(self) -> bool:
        """Return True if no process other than PID 0 is still in use."""
        with self._lock:
            return not any(pid != 0 for pid in self._pids.set_bits())