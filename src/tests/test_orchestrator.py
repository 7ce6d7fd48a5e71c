from typing import Any, Mapping

import anyio
import pytest

from actor_runner.errors import PollTimeout
from actor_runner.errors import RemoteError
from actor_runner.errors import RunCancelled
from actor_runner.errors import RunFailed
from actor_runner.errors import UnexpectedResponse
from actor_runner.orchestrator import RunOrchestrator
from actor_runner.platform_client import PlatformClient


def _run(status: str, dataset_id: str | None = None, run_id: str = "run-1") -> dict[str, Any]:
    data: dict[str, Any] = {"id": run_id, "status": status, "actId": "act-1"}
    if dataset_id is not None:
        data["defaultDatasetId"] = dataset_id
    return {"data": data}


class FakePlatformClient(PlatformClient):
    def __init__(
        self,
        start: Any,
        polls: list[Any] | None = None,
        items: Any = None,
        abort: Any = None,
    ) -> None:
        self.start = start
        self.polls = list(polls or [])
        self.items = items if items is not None else []
        self.abort = abort
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def called(self) -> list[str]:
        return [name for name, _, _ in self.calls]

    async def start_run(
        self,
        credential: str,
        actor_id: str,
        run_input: Mapping[str, Any],
        *,
        memory_mbytes: int,
    ) -> Any:
        self.calls.append(("start_run", (credential, actor_id, dict(run_input)), {"memory_mbytes": memory_mbytes}))
        if isinstance(self.start, Exception):
            raise self.start
        return self.start

    async def get_run(self, credential: str, run_id: str) -> Any:
        self.calls.append(("get_run", (credential, run_id), {}))
        return self.polls.pop(0)

    async def get_dataset_items(self, credential: str, dataset_id: str) -> Any:
        self.calls.append(("get_dataset_items", (credential, dataset_id), {}))
        return self.items

    async def abort_run(self, credential: str, run_id: str) -> Any:
        self.calls.append(("abort_run", (credential, run_id), {}))
        if isinstance(self.abort, Exception):
            raise self.abort
        return _run("ABORTING")


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.mark.anyio
async def test_ready_running_succeeded_waits_twice_and_fetches_final_dataset() -> None:
    client = FakePlatformClient(
        start=_run("READY", "ds-1"),
        polls=[_run("RUNNING", "ds-2"), _run("SUCCEEDED", "ds-3")],
        items=[{"title": "a"}, {"title": "b"}],
    )
    sleep = SleepRecorder()
    orchestrator = RunOrchestrator(client, sleep=sleep)

    result = await orchestrator.run("token", "owner/scraper", {"maxItems": 2})

    assert sleep.calls == [2.0, 2.0]
    assert result.items == [{"title": "a"}, {"title": "b"}]
    assert result.run.status == "SUCCEEDED"
    assert result.run.default_dataset_id == "ds-3"
    assert client.calls[-1] == ("get_dataset_items", ("token", "ds-3"), {})
    assert client.calls[0] == ("start_run", ("token", "owner/scraper", {"maxItems": 2}), {"memory_mbytes": 512})


@pytest.mark.anyio
async def test_aborted_run_fails_without_dataset_fetch() -> None:
    client = FakePlatformClient(start=_run("RUNNING"), polls=[_run("ABORTED", "ds-1")])
    orchestrator = RunOrchestrator(client, sleep=SleepRecorder())

    with pytest.raises(RunFailed) as excinfo:
        await orchestrator.run("token", "owner/scraper", {})

    assert excinfo.value.final_status == "ABORTED"
    assert excinfo.value.run_id == "run-1"
    assert "get_dataset_items" not in client.called()


@pytest.mark.anyio
@pytest.mark.parametrize("status", ["FAILED", "TIMED-OUT", "SOMETHING-NEW"])
async def test_other_terminal_statuses_fail(status: str) -> None:
    client = FakePlatformClient(start=_run("READY"), polls=[_run(status)])
    orchestrator = RunOrchestrator(client, sleep=SleepRecorder())

    with pytest.raises(RunFailed) as excinfo:
        await orchestrator.run("token", "owner/scraper", {})

    assert excinfo.value.final_status == status


@pytest.mark.anyio
async def test_rejected_submission_never_polls() -> None:
    client = FakePlatformClient(start=RemoteError(400, {"error": {"message": "Input is not valid"}}))
    sleep = SleepRecorder()
    orchestrator = RunOrchestrator(client, sleep=sleep)

    with pytest.raises(RemoteError) as excinfo:
        await orchestrator.run("token", "owner/scraper", {"bad": True})

    assert excinfo.value.remote_status == 400
    assert client.called() == ["start_run"]
    assert sleep.calls == []


@pytest.mark.anyio
async def test_already_succeeded_submission_skips_waiting() -> None:
    client = FakePlatformClient(start=_run("SUCCEEDED", "ds-9"), items=[1, 2, 3])
    sleep = SleepRecorder()
    orchestrator = RunOrchestrator(client, sleep=sleep, memory_mbytes=1024)

    result = await orchestrator.run("token", "act", {})

    assert sleep.calls == []
    assert result.items == [1, 2, 3]
    assert client.calls[0][2] == {"memory_mbytes": 1024}


@pytest.mark.anyio
async def test_succeeded_without_dataset_returns_no_items() -> None:
    client = FakePlatformClient(start=_run("SUCCEEDED"))
    orchestrator = RunOrchestrator(client, sleep=SleepRecorder())

    result = await orchestrator.run("token", "act", {})

    assert result.items == []
    assert "get_dataset_items" not in client.called()


@pytest.mark.anyio
async def test_wait_budget_raises_poll_timeout() -> None:
    client = FakePlatformClient(start=_run("READY"), polls=[_run("RUNNING"), _run("RUNNING")])
    sleep = SleepRecorder()
    orchestrator = RunOrchestrator(client, sleep=sleep, poll_interval_seconds=2.0, max_wait_seconds=4.0)

    with pytest.raises(PollTimeout) as excinfo:
        await orchestrator.run("token", "act", {})

    assert sleep.calls == [2.0, 2.0]
    assert excinfo.value.waited_seconds == 4.0
    assert excinfo.value.last_status == "RUNNING"
    assert "abort_run" not in client.called()


@pytest.mark.anyio
async def test_poll_timeout_aborts_remote_run_when_configured() -> None:
    client = FakePlatformClient(start=_run("READY"), abort=RemoteError(500, "boom"))
    orchestrator = RunOrchestrator(client, sleep=SleepRecorder(), max_wait_seconds=0, abort_on_stop=True)

    with pytest.raises(PollTimeout):
        await orchestrator.run("token", "act", {})

    assert client.called() == ["start_run", "abort_run"]


@pytest.mark.anyio
async def test_cancel_token_stops_polling() -> None:
    client = FakePlatformClient(start=_run("RUNNING"), polls=[_run("RUNNING")])
    orchestrator = RunOrchestrator(client, poll_interval_seconds=30.0, abort_on_stop=True)
    cancel = anyio.Event()
    cancel.set()

    with anyio.fail_after(5):
        with pytest.raises(RunCancelled) as excinfo:
            await orchestrator.run("token", "act", {}, cancel=cancel)

    assert excinfo.value.run_id == "run-1"
    assert client.called() == ["start_run", "abort_run"]


@pytest.mark.anyio
async def test_cancel_token_unset_keeps_polling() -> None:
    client = FakePlatformClient(start=_run("READY"), polls=[_run("SUCCEEDED", "ds-1")], items=[{"ok": True}])
    orchestrator = RunOrchestrator(client, poll_interval_seconds=0.01)

    result = await orchestrator.run("token", "act", {}, cancel=anyio.Event())

    assert result.items == [{"ok": True}]


@pytest.mark.anyio
async def test_malformed_run_record_is_reported() -> None:
    client = FakePlatformClient(start={"data": {"status": "READY"}})
    orchestrator = RunOrchestrator(client, sleep=SleepRecorder())

    with pytest.raises(UnexpectedResponse):
        await orchestrator.run("token", "act", {})


@pytest.mark.anyio
async def test_dataset_listing_object_is_unwrapped() -> None:
    client = FakePlatformClient(start=_run("SUCCEEDED", "ds-1"), items={"data": {"items": [{"a": 1}], "total": 1}})
    orchestrator = RunOrchestrator(client, sleep=SleepRecorder())

    result = await orchestrator.run("token", "act", {})

    assert result.items == [{"a": 1}]


@pytest.mark.anyio
async def test_non_list_dataset_body_is_reported() -> None:
    client = FakePlatformClient(start=_run("SUCCEEDED", "ds-1"), items={"data": {"error": "unexpected"}})
    orchestrator = RunOrchestrator(client, sleep=SleepRecorder())

    with pytest.raises(UnexpectedResponse):
        await orchestrator.run("token", "act", {})
