"""The three operations offered to callers: list actors, resolve input, run an actor."""

from __future__ import annotations

import json
import logging
from typing import Any

import anyio

from actor_runner.errors import ActorRunnerError, MissingCredential, MissingField
from actor_runner.generation import InputGenerator
from actor_runner.input_normalizer import DEFAULT_RULES, CoercionRule, coerce_input
from actor_runner.models.boundary_response import BoundaryResponse
from actor_runner.orchestrator import RunOrchestrator
from actor_runner.platform_client import PlatformClient, mask_credential
from actor_runner.schema_resolver import SchemaResolver
from actor_runner.settings import RunnerSettings


logger = logging.getLogger(__name__)


class RequestBoundary:
    """
    Validates required arguments before any network call and turns every failure into
    a JSON error body: {"error": message, "details": ...}.
    """

    def __init__(
        self,
        client: PlatformClient,
        resolver: SchemaResolver,
        orchestrator: RunOrchestrator,
        rules: tuple[CoercionRule, ...] = DEFAULT_RULES,
    ) -> None:
        self._client: PlatformClient = client
        self._resolver: SchemaResolver = resolver
        self._orchestrator: RunOrchestrator = orchestrator
        self._rules: tuple[CoercionRule, ...] = rules

    @classmethod
    def from_settings(
        cls,
        settings: RunnerSettings,
        client: PlatformClient,
        generator: InputGenerator | None = None,
    ) -> "RequestBoundary":
        orchestrator = RunOrchestrator(
            client,
            memory_mbytes=settings.memory_mbytes,
            poll_interval_seconds=settings.poll_interval_seconds,
            max_wait_seconds=settings.max_wait_seconds,
            abort_on_stop=settings.abort_on_stop,
        )
        return cls(client, SchemaResolver(client, generator), orchestrator)

    async def list_jobs(self, credential: str | None) -> BoundaryResponse:
        try:
            token = _require_credential(credential)
            logger.info("Listing actors (key %s)", mask_credential(token))
            listing = await self._client.list_actors(token)
        except ActorRunnerError as exc:
            return _error_response("list-jobs", exc)
        logger.info("Actors listed")
        return BoundaryResponse(body=listing)

    async def resolve_schema(self, credential: str | None, actor_id: str | None) -> BoundaryResponse:
        try:
            token = _require_credential(credential)
            actor = _require_field(actor_id, "actorId")
            logger.info("Resolving input for %s (key %s)", actor, mask_credential(token))
            resolved = await self._resolver.resolve(token, actor)
        except ActorRunnerError as exc:
            return _error_response("resolve-schema", exc)
        return BoundaryResponse(body=resolved.model_dump(by_alias=True, mode="json"))

    async def run_job(
        self,
        credential: str | None,
        actor_id: str | None,
        run_input: Any = None,
        cancel: anyio.Event | None = None,
    ) -> BoundaryResponse:
        try:
            token = _require_credential(credential)
            actor = _require_field(actor_id, "actorId")
            payload = coerce_input({} if run_input is None else run_input, self._rules)
            logger.info("Running %s (key %s)", actor, mask_credential(token))
            logger.info("Input payload: %s", json.dumps(payload, indent=2, default=str))
            result = await self._orchestrator.run(token, actor, payload, cancel=cancel)
        except ActorRunnerError as exc:
            return _error_response("run-job", exc)
        logger.info("Run %s returned %d item(s)", result.run.id, len(result.items))
        return BoundaryResponse(
            body={
                "result": result.items,
                "run": result.run.model_dump(by_alias=True, mode="json"),
            }
        )


def _require_credential(credential: str | None) -> str:
    if not credential or not credential.strip():
        raise MissingCredential()
    return credential.strip()


def _require_field(value: str | None, field: str) -> str:
    if not value or not value.strip():
        raise MissingField(field)
    return value.strip()


def _error_response(operation: str, exc: ActorRunnerError) -> BoundaryResponse:
    logger.error("%s failed: %s", operation, exc)
    return BoundaryResponse(status_code=exc.status_code, body=exc.to_dict())
