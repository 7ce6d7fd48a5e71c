"""Error taxonomy shared by the client, resolver, orchestrator and boundary."""

from __future__ import annotations

from typing import Any


class ActorRunnerError(Exception):
    """Base class for every failure surfaced to a caller."""

    status_code: int = 500

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.details: Any | None = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body

    def __str__(self) -> str:
        return self.message


class MissingField(ActorRunnerError):
    status_code = 400

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"Missing required field: {field}.")
        self.field: str = field


class MissingCredential(MissingField):
    def __init__(self) -> None:
        super().__init__("apiKey", "API key is required.")


class InvalidInput(ActorRunnerError):
    status_code = 400


class RemoteError(ActorRunnerError):
    """The platform answered with a non-success status."""

    status_code = 502

    def __init__(self, remote_status: int, body: Any, url: str | None = None) -> None:
        super().__init__(
            f"Remote call failed with status {remote_status}.",
            details={"statusCode": remote_status, "body": body},
        )
        self.remote_status: int = remote_status
        self.body: Any = body
        self.url: str | None = url


class TransportError(ActorRunnerError):
    """The call could not be completed (connection, timeout, protocol)."""

    status_code = 502

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url: str | None = url


class SchemaResolutionFailed(ActorRunnerError):
    status_code = 404

    def __init__(self, actor_id: str) -> None:
        super().__init__(
            "No schema or usable input could be resolved.",
            details={"actorId": actor_id},
        )
        self.actor_id: str = actor_id


class RunFailed(ActorRunnerError):
    status_code = 400

    def __init__(self, final_status: str, run_id: str | None = None) -> None:
        super().__init__(
            f"Actor did not complete successfully. Final status: {final_status}",
            details={"finalStatus": final_status, "runId": run_id},
        )
        self.final_status: str = final_status
        self.run_id: str | None = run_id


class GenerationParseFailed(ActorRunnerError):
    status_code = 502

    def __init__(self, raw_text: str) -> None:
        super().__init__(
            "Generated input is not a JSON object.",
            details={"raw": raw_text[:500]},
        )
        self.raw_text: str = raw_text


class PollTimeout(ActorRunnerError):
    status_code = 504

    def __init__(self, run_id: str, waited_seconds: float, last_status: str) -> None:
        super().__init__(
            f"Run {run_id} still {last_status} after waiting {waited_seconds:g}s.",
            details={"runId": run_id, "waitedSeconds": waited_seconds, "lastStatus": last_status},
        )
        self.run_id: str = run_id
        self.waited_seconds: float = waited_seconds
        self.last_status: str = last_status


class RunCancelled(ActorRunnerError):
    status_code = 499

    def __init__(self, run_id: str, last_status: str) -> None:
        super().__init__(
            f"Polling of run {run_id} was cancelled while {last_status}.",
            details={"runId": run_id, "lastStatus": last_status},
        )
        self.run_id: str = run_id
        self.last_status: str = last_status


class UnexpectedResponse(ActorRunnerError):
    """A success response whose body does not have the expected shape."""

    status_code = 502

    def __init__(self, message: str, body: Any = None) -> None:
        super().__init__(message, details={"body": body} if body is not None else None)
