"""Background solver jobs tracked by id."""

from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from groupmixer.engine import run_solver
from groupmixer.models import ApiInput, SolverResult

logger = logging.getLogger(__name__)

Runner = Callable[[ApiInput], SolverResult]


class JobStatus(Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"


@dataclass
class Job:
    """A solver run: its id, where it stands, and the JSON-encoded result once done."""

    id: uuid.UUID
    status: JobStatus = JobStatus.PENDING
    result: Optional[str] = None

    def to_dict(self) -> dict:
        """Return the JSON-shaped dict form of this job."""
        return {"id": str(self.id), "status": self.status.value, "result": self.result}


class JobManager:
    """Starts solver runs on background threads and keeps track of them."""

    def __init__(self, runner: Optional[Runner] = None):
        self._runner = runner if runner is not None else run_solver
        self._jobs: dict[uuid.UUID, Job] = {}
        self._lock = threading.Lock()

    def create_job(self, api_input: ApiInput) -> uuid.UUID:
        """Register a pending job, start solving it in the background and return its id."""
        job_id = uuid.uuid4()
        with self._lock:
            self._jobs[job_id] = Job(job_id)
        thread = threading.Thread(
            target=self._run, args=(job_id, api_input), name=f"job-{job_id}", daemon=True
        )
        thread.start()
        return job_id

    def get_job(self, job_id: uuid.UUID) -> Optional[Job]:
        """Return a snapshot of the job, or ``None`` if no job has that id."""
        with self._lock:
            job = self._jobs.get(job_id)
            return replace(job) if job is not None else None

    def _update(self, job_id: uuid.UUID, **changes) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return
            for name, value in changes.items():
                setattr(job, name, value)

    def _run(self, job_id: uuid.UUID, api_input: ApiInput) -> None:
        self._update(job_id, status=JobStatus.RUNNING)
        try:
            result = self._runner(api_input)
        except Exception:
            logger.exception("job %s failed", job_id)
            self._update(job_id, status=JobStatus.FAILED)
            return
        try:
            encoded: Optional[str] = json.dumps(result.to_dict(), separators=(",", ":"))
        except (TypeError, ValueError):
            encoded = None
        self._update(job_id, status=JobStatus.COMPLETED, result=encoded)