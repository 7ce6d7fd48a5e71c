"""Generated example input for actors without a usable schema."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from openai import APIConnectionError
from openai import AsyncOpenAI
from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelAPIError
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.exceptions import UnexpectedModelBehavior
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings

from actor_runner.errors import GenerationParseFailed
from actor_runner.errors import RemoteError
from actor_runner.errors import TransportError
from actor_runner.errors import UnexpectedResponse
from actor_runner.json_utils import parse_json_object
from actor_runner.models.model_spec import ModelSpec
from actor_runner.prompting import GENERATION_SYSTEM_PROMPT
from actor_runner.prompting import make_generation_prompt


logger = logging.getLogger(__name__)


class InputGenerator:
    def __init__(self, model: OpenAIChatModel, model_spec: ModelSpec) -> None:
        self.model: OpenAIChatModel = model
        self.model_settings: ModelSettings | None = self._build_model_settings(model_spec)

    def _build_model_settings(self, model_spec: ModelSpec) -> ModelSettings | None:
        settings: ModelSettings = {
            "temperature": model_spec.temperature,
            "max_tokens": model_spec.max_tokens,
        }
        if model_spec.provider == "openai-compatible":
            # Ollama OpenAI-compatible API uses "format": "json" to force JSON output.
            if model_spec.base_url != "https://api.openai.com/v1":
                settings["extra_body"] = {"format": "json"}
        return settings

    async def generate(self, actor_id: str) -> dict[str, Any]:
        agent = Agent(
            self.model,
            instructions=GENERATION_SYSTEM_PROMPT,
            output_type=str,
            model_settings=self.model_settings,
        )
        try:
            result = await agent.run(make_generation_prompt(actor_id))
        except ModelHTTPError as exc:
            raise RemoteError(exc.status_code, exc.body) from exc
        except (ModelAPIError, APIConnectionError) as exc:
            raise TransportError(f"Completion service unreachable: {exc}") from exc
        except UnexpectedModelBehavior as exc:
            raise UnexpectedResponse(f"Completion service misbehaved: {exc.message}", body=exc.body) from exc

        text = result.output
        try:
            generated = parse_json_object(text)
        except ValueError as exc:
            logger.warning("Generated input for %s is not a JSON object", actor_id)
            raise GenerationParseFailed(text) from exc
        logger.info("Generated input for %s with %d field(s)", actor_id, len(generated))
        return generated


def build_model(
    model_spec: ModelSpec,
    api_key: str,
    http_client: httpx.AsyncClient | None = None,
) -> OpenAIChatModel:
    # Failed completions are reported once; the SDK would otherwise resend them.
    client = AsyncOpenAI(
        base_url=model_spec.base_url,
        api_key=api_key,
        max_retries=0,
        http_client=http_client,
    )
    provider = OpenAIProvider(openai_client=client)
    return OpenAIChatModel(model_spec.model_name, provider=provider)
