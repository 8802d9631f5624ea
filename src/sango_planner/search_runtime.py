"""Asynchronous runtime that keeps combination searches off the event loop."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Mapping, Sequence
from uuid import uuid4

from sango_planner.models import Building, CombinationResult, Slot, StatLine, TraitEffect
from sango_planner.planning.solver import DEFAULT_MAX_RESULTS, estimate_combinations, iter_results, rank_results


class SearchJobStatus(str, Enum):
    """Lifecycle states for submitted search jobs."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"
    SUPERSEDED = "superseded"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


_FINISHED = {
    SearchJobStatus.SUCCEEDED,
    SearchJobStatus.CANCELLED,
    SearchJobStatus.SUPERSEDED,
    SearchJobStatus.TIMED_OUT,
    SearchJobStatus.FAILED,
}


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """Everything one search needs; read-only while the search runs."""

    slot_candidates: Mapping[Slot, Sequence[Building]]
    enabled_slots: Mapping[str, bool]
    targets: StatLine = field(default_factory=StatLine)
    trait_effects: Mapping[str, TraitEffect] = field(default_factory=dict)
    max_results: int = DEFAULT_MAX_RESULTS


@dataclass(slots=True)
class SearchJob:
    """Represents search execution state and final ranking."""

    id: str
    request: SearchRequest
    submitted_at: datetime
    status: SearchJobStatus
    estimated_combinations: int = 0
    results: list[CombinationResult] = field(default_factory=list)
    error: str | None = None
    finished_at: datetime | None = None

    @property
    def done(self) -> bool:
        return self.status in _FINISHED


def run_search(request: SearchRequest, stop_event: threading.Event | None = None) -> list[CombinationResult]:
    """Blocking search that gives up early once ``stop_event`` is set."""
    should_stop = stop_event.is_set if stop_event is not None else None
    results = iter_results(
        request.slot_candidates,
        request.enabled_slots,
        request.targets,
        request.trait_effects,
        should_stop=should_stop,
    )
    return rank_results(results, request.max_results)


class SearchRuntime:
    """Runs one search at a time; a new submission supersedes the one in flight."""

    def __init__(
        self,
        *,
        search_timeout_seconds: float = 30.0,
        max_jobs: int = 100,
        logger: logging.Logger | None = None,
    ) -> None:
        self._search_timeout_seconds = search_timeout_seconds
        self._max_jobs = max_jobs
        self._logger = logger or logging.getLogger("sango_planner.search_runtime")

        self._jobs: dict[str, SearchJob] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._stop_events: dict[str, threading.Event] = {}
        self._active_job_id: str | None = None

    @property
    def active_job_id(self) -> str | None:
        return self._active_job_id

    def submit_search(self, request: SearchRequest) -> str:
        """Schedule a search on the running loop and return its job id."""
        if self._active_job_id is not None:
            self.cancel(self._active_job_id, status=SearchJobStatus.SUPERSEDED)

        job_id = uuid4().hex
        job = SearchJob(
            id=job_id,
            request=request,
            submitted_at=datetime.now(timezone.utc),
            status=SearchJobStatus.QUEUED,
            estimated_combinations=estimate_combinations(request.slot_candidates, request.enabled_slots),
        )
        stop_event = threading.Event()
        self._jobs[job_id] = job
        self._stop_events[job_id] = stop_event
        self._tasks[job_id] = asyncio.create_task(self._execute_job(job, stop_event), name=f"search-{job_id}")
        self._active_job_id = job_id
        self._evict_finished()

        self._logger.info(
            "search_submitted",
            extra={"job_id": job_id, "estimated_combinations": job.estimated_combinations},
        )
        return job_id

    def get_job(self, job_id: str) -> SearchJob:
        """Return job state for the given id."""
        if job_id not in self._jobs:
            raise KeyError(f"Unknown search job id: {job_id}")
        return self._jobs[job_id]

    def list_recent_jobs(self, limit: int = 20) -> list[SearchJob]:
        return sorted(self._jobs.values(), key=lambda job: job.submitted_at, reverse=True)[:limit]

    async def wait(self, job_id: str, timeout: float | None = None) -> SearchJob:
        """Wait until the job finishes (or ``timeout`` elapses) and return it."""
        job = self.get_job(job_id)
        task = self._tasks.get(job_id)
        if task is not None and not task.done():
            await asyncio.wait({task}, timeout=timeout)
        return job

    def cancel(self, job_id: str, *, status: SearchJobStatus = SearchJobStatus.CANCELLED) -> bool:
        """Stop a job that has not finished yet. Returns whether anything was cancelled."""
        job = self.get_job(job_id)
        if job.done:
            return False

        stop_event = self._stop_events.get(job_id)
        if stop_event is not None:
            stop_event.set()
        job.status = status
        job.finished_at = datetime.now(timezone.utc)
        task = self._tasks.get(job_id)
        if task is not None:
            task.cancel()
        if self._active_job_id == job_id:
            self._active_job_id = None

        self._logger.info(f"search_{status.value}", extra={"job_id": job_id})
        return True

    async def stop(self) -> None:
        """Cancel in-flight searches and wait for their tasks to unwind."""
        for job_id in list(self._tasks):
            if not self._jobs[job_id].done:
                self.cancel(job_id)

        pending = [task for task in self._tasks.values() if not task.done()]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._logger.info("search_runtime_stopped")

    async def _execute_job(self, job: SearchJob, stop_event: threading.Event) -> None:
        job.status = SearchJobStatus.RUNNING
        self._logger.info("search_started", extra={"job_id": job.id})

        try:
            results = await asyncio.wait_for(
                asyncio.to_thread(run_search, job.request, stop_event),
                timeout=self._search_timeout_seconds,
            )
        except asyncio.TimeoutError:
            stop_event.set()
            job.status = SearchJobStatus.TIMED_OUT
            job.error = f"Search timed out after {self._search_timeout_seconds}s"
            self._logger.warning(
                "search_timeout",
                extra={"job_id": job.id, "estimated_combinations": job.estimated_combinations},
            )
        except asyncio.CancelledError:
            stop_event.set()
            raise
        except Exception as exc:  # noqa: BLE001 - runtime should capture search failures.
            job.status = SearchJobStatus.FAILED
            job.error = f"{type(exc).__name__}: {exc}"
            self._logger.exception("search_failed", extra={"job_id": job.id})
        else:
            if job.status is SearchJobStatus.RUNNING:
                job.results = results
                job.status = SearchJobStatus.SUCCEEDED
                self._logger.info("search_succeeded", extra={"job_id": job.id, "results": len(results)})
        finally:
            if job.finished_at is None:
                job.finished_at = datetime.now(timezone.utc)
            self._stop_events.pop(job.id, None)
            self._tasks.pop(job.id, None)
            if self._active_job_id == job.id:
                self._active_job_id = None

    def _evict_finished(self) -> None:
        overflow = len(self._jobs) - self._max_jobs
        if overflow <= 0:
            return
        for job_id in [job_id for job_id, job in self._jobs.items() if job.done][:overflow]:
            del self._jobs[job_id]
            self._tasks.pop(job_id, None)
            self._stop_events.pop(job_id, None)
