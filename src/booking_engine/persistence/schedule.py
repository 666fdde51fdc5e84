"""Schedule sink contract and an in-memory reference store."""

from __future__ import annotations

import threading
from datetime import date, time
from typing import Iterable, Optional, Protocol

from ..models.domain import Job
from ..services.optimization.models import ScheduleAssignment


class ScheduleSink(Protocol):
    """Transaction-like target for rewritten job times.

    ``stage`` may raise to refuse a write; nothing becomes visible before ``commit``.
    """

    def stage(self, assignment: ScheduleAssignment) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class InMemoryScheduleStore:
    """Holds scheduled times per job and applies staged writes all at once."""

    def __init__(self, times: dict[str, tuple[Optional[date], Optional[time]]] | None = None) -> None:
        self.times: dict[str, tuple[Optional[date], Optional[time]]] = dict(times or {})
        self._staged: list[ScheduleAssignment] = []
        self._lock = threading.Lock()

    @classmethod
    def from_jobs(cls, jobs: Iterable[Job]) -> "InMemoryScheduleStore":
        return cls({job.job_id: (job.scheduled_date, job.scheduled_time) for job in jobs})

    def stage(self, assignment: ScheduleAssignment) -> None:
        if assignment.job_id not in self.times:
            raise LookupError(f"Job {assignment.job_id} is not known to this store.")
        self._staged.append(assignment)

    def commit(self) -> None:
        with self._lock:
            for assignment in self._staged:
                self.times[assignment.job_id] = (assignment.scheduled_date, assignment.scheduled_time)
            self._staged.clear()

    def rollback(self) -> None:
        self._staged.clear()

    def scheduled_time(self, job_id: str) -> Optional[time]:
        return self.times[job_id][1]
