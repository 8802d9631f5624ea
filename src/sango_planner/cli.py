"""CLI-side handler wrappers around the async search runtime."""

from __future__ import annotations

import asyncio

from sango_planner.search_runtime import SearchJob, SearchRequest, SearchRuntime


class CliSearchHandler:
    """Simple sync-friendly facade over the async search runtime."""

    def __init__(self, runtime: SearchRuntime) -> None:
        self._runtime = runtime

    def run_search(self, request: SearchRequest) -> SearchJob:
        """Submit a search, block until it finishes, and return the job record."""

        async def _run() -> SearchJob:
            job_id = self._runtime.submit_search(request)
            job = await self._runtime.wait(job_id)
            await self._runtime.stop()
            return job

        return asyncio.run(_run())

    def get_job(self, job_id: str) -> SearchJob:
        return self._runtime.get_job(job_id)

    def list_recent_jobs(self, limit: int = 20) -> list[SearchJob]:
        return self._runtime.list_recent_jobs(limit=limit)
