"""Best-effort input resolution for an actor, degrading through several sources."""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional

from actor_runner.errors import ActorRunnerError, SchemaResolutionFailed
from actor_runner.generation import InputGenerator
from actor_runner.input_normalizer import extract_input
from actor_runner.models.input_schema import InputSchema
from actor_runner.models.resolved_input import InputSource, ResolvedInput
from actor_runner.models.run_status import RunStatus
from actor_runner.platform_client import PlatformClient, listing_items, unwrap_data


logger = logging.getLogger(__name__)

Tier = Callable[[str, str], Awaitable[Optional[ResolvedInput]]]


class SchemaResolver:
    """
    Tries, in order: the declared input schema, the latest build's schema, the input of
    the last successful run, and finally a generated example. Only the first source
    with a non-empty result is used; individual source failures are logged and skipped.
    """

    def __init__(self, client: PlatformClient, generator: InputGenerator | None = None) -> None:
        self._client: PlatformClient = client
        self._generator: InputGenerator | None = generator

    def _tiers(self) -> list[tuple[InputSource, Tier]]:
        return [
            ("input-schema", self._from_declared_schema),
            ("build", self._from_latest_build),
            ("last-run", self._from_last_run),
            ("generated", self._from_generation),
        ]

    async def resolve(self, credential: str, actor_id: str) -> ResolvedInput:
        for source, tier in self._tiers():
            try:
                resolved = await tier(credential, actor_id)
            except ActorRunnerError as exc:
                logger.warning("Source %s failed for %s: %s", source, actor_id, exc)
                if exc.details is not None:
                    logger.debug("Source %s details: %s", source, exc.details)
                continue
            except Exception:
                logger.exception("Source %s raised unexpectedly for %s", source, actor_id)
                continue
            if resolved is not None:
                logger.info("Resolved input for %s from %s", actor_id, source)
                return resolved
            logger.info("Source %s has no usable input for %s", source, actor_id)
        logger.error("All input sources exhausted for %s", actor_id)
        raise SchemaResolutionFailed(actor_id)

    async def _from_declared_schema(self, credential: str, actor_id: str) -> ResolvedInput | None:
        raw = unwrap_data(await self._client.get_input_schema(credential, actor_id))
        schema = parse_input_schema(raw)
        if schema is None or schema.is_empty():
            return None
        extracted = extract_input(schema)
        return ResolvedInput(
            source="input-schema",
            input=extracted.values,
            input_schema=raw if isinstance(raw, dict) else schema.model_dump(exclude_unset=True),
            missing_required=extracted.missing_required,
        )

    async def _from_latest_build(self, credential: str, actor_id: str) -> ResolvedInput | None:
        listing = unwrap_data(await self._client.list_builds(credential, actor_id))
        builds = listing_items(listing)
        if not builds:
            return None
        latest = builds[-1]
        build_id = latest.get("id") if isinstance(latest, Mapping) else None
        if not build_id:
            return None

        build = unwrap_data(await self._client.get_build(credential, build_id))
        if not isinstance(build, Mapping):
            return None
        schema = parse_input_schema(_build_schema_payload(build))
        if schema is None or schema.is_empty():
            return None
        extracted = extract_input(schema)
        return ResolvedInput(
            source="build",
            input=extracted.values,
            missing_required=extracted.missing_required,
        )

    async def _from_last_run(self, credential: str, actor_id: str) -> ResolvedInput | None:
        last = unwrap_data(
            await self._client.get_last_run(credential, actor_id, status=RunStatus.SUCCEEDED.value)
        )
        run_id = last.get("id") if isinstance(last, Mapping) else None
        if not run_id:
            return None

        run = unwrap_data(await self._client.get_run(credential, run_id))
        if not isinstance(run, Mapping):
            return None
        run_input = run.get("input")
        store_id = run.get("defaultKeyValueStoreId")
        if not run_input and store_id:
            run_input = await self._client.get_record(credential, store_id, "INPUT")
        if not isinstance(run_input, dict) or not run_input:
            return None
        return ResolvedInput(source="last-run", input=run_input)

    async def _from_generation(self, credential: str, actor_id: str) -> ResolvedInput | None:
        if self._generator is None:
            logger.info("No completion model configured; skipping generated input")
            return None
        generated = await self._generator.generate(actor_id)
        if not generated:
            return None
        return ResolvedInput(source="generated", input=generated)


def parse_input_schema(raw: Any) -> InputSchema | None:
    """Accepts a schema object or its JSON text; anything unparsable means no schema."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Input schema text is not valid JSON")
            return None
    if not isinstance(raw, Mapping):
        return None
    try:
        return InputSchema.model_validate(raw)
    except ValueError as exc:
        logger.warning("Input schema is malformed: %s", exc)
        return None


def _build_schema_payload(build: Mapping[str, Any]) -> Any:
    payload = build.get("inputSchema")
    if payload:
        return payload
    definition = build.get("actorDefinition")
    if isinstance(definition, Mapping):
        return definition.get("input")
    return None
