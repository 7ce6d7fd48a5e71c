"""Submits an actor run, polls it to a terminal status and fetches its output."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping, Optional

import anyio
from pydantic import ValidationError

from actor_runner.errors import ActorRunnerError, PollTimeout, RunCancelled, RunFailed, UnexpectedResponse
from actor_runner.models.run_record import RunRecord
from actor_runner.models.run_result import RunResult
from actor_runner.models.run_status import RunStatus, is_active
from actor_runner.platform_client import PlatformClient, listing_items, unwrap_data


logger = logging.getLogger(__name__)

DEFAULT_MEMORY_MBYTES = 512
DEFAULT_POLL_INTERVAL_SECONDS = 2.0


class RunOrchestrator:
    """
    Drives one run through SUBMITTING -> READY/RUNNING -> terminal.

    The run record is only ever replaced by a fresh copy from the platform. Without a
    wait budget or cancel token, polling continues until the platform reports a
    terminal status.
    """

    def __init__(
        self,
        client: PlatformClient,
        *,
        memory_mbytes: int = DEFAULT_MEMORY_MBYTES,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        max_wait_seconds: Optional[float] = None,
        abort_on_stop: bool = False,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        self._client: PlatformClient = client
        self._memory_mbytes: int = memory_mbytes
        self._poll_interval: float = poll_interval_seconds
        self._max_wait: Optional[float] = max_wait_seconds
        self._abort_on_stop: bool = abort_on_stop
        self._sleep: Callable[[float], Awaitable[Any]] = sleep or anyio.sleep

    async def run(
        self,
        credential: str,
        actor_id: str,
        run_input: Mapping[str, Any],
        cancel: anyio.Event | None = None,
    ) -> RunResult:
        run = await self.submit(credential, actor_id, run_input)
        run = await self.wait_for_terminal(credential, run, cancel=cancel)
        if run.status != RunStatus.SUCCEEDED.value:
            logger.error("Run %s finished with status %s", run.id, run.status)
            raise RunFailed(run.status, run.id)
        items = await self.fetch_items(credential, run)
        return RunResult(run=run, items=items)

    async def submit(self, credential: str, actor_id: str, run_input: Mapping[str, Any]) -> RunRecord:
        body = await self._client.start_run(
            credential,
            actor_id,
            run_input,
            memory_mbytes=self._memory_mbytes,
        )
        run = to_run_record(body)
        logger.info("Started run %s for %s (status %s)", run.id, actor_id, run.status)
        return run

    async def wait_for_terminal(
        self,
        credential: str,
        run: RunRecord,
        cancel: anyio.Event | None = None,
    ) -> RunRecord:
        waited = 0.0
        while is_active(run.status):
            if self._max_wait is not None and waited >= self._max_wait:
                await self._stop(credential, run)
                raise PollTimeout(run.id, waited, run.status)
            await self._wait(cancel)
            waited += self._poll_interval
            if cancel is not None and cancel.is_set():
                await self._stop(credential, run)
                raise RunCancelled(run.id, run.status)
            run = to_run_record(await self._client.get_run(credential, run.id))
            logger.info("Polled run %s: %s", run.id, run.status)
        return run

    async def fetch_items(self, credential: str, run: RunRecord) -> list[Any]:
        if not run.default_dataset_id:
            logger.warning("Run %s has no default dataset", run.id)
            return []
        body = unwrap_data(await self._client.get_dataset_items(credential, run.default_dataset_id))
        if isinstance(body, list):
            items = body
        elif isinstance(body, Mapping) and isinstance(body.get("items"), list):
            items = listing_items(body)
        else:
            raise UnexpectedResponse("Dataset items are not a list.", body=body)
        logger.info("Fetched %d item(s) from dataset %s", len(items), run.default_dataset_id)
        return items

    async def _wait(self, cancel: anyio.Event | None) -> None:
        if cancel is None:
            await self._sleep(self._poll_interval)
            return
        with anyio.move_on_after(self._poll_interval):
            await cancel.wait()

    async def _stop(self, credential: str, run: RunRecord) -> None:
        if not self._abort_on_stop:
            return
        try:
            await self._client.abort_run(credential, run.id)
        except ActorRunnerError as exc:
            logger.warning("Abort of run %s failed: %s", run.id, exc)
        else:
            logger.info("Aborted run %s", run.id)


def to_run_record(body: Any) -> RunRecord:
    payload = unwrap_data(body)
    try:
        return RunRecord.model_validate(payload)
    except ValidationError as exc:
        raise UnexpectedResponse("Run record is missing id or status.", body=payload) from exc
