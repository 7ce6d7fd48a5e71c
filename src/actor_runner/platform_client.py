"""Typed async client for the Apify REST API."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from actor_runner.errors import RemoteError, TransportError
from actor_runner.settings import DEFAULT_API_BASE_URL


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


def mask_credential(credential: str) -> str:
    # At most half of the token is ever shown.
    return credential[: min(8, len(credential) // 2)] + "..."


def actor_path_id(actor_id: str) -> str:
    # The API addresses "owner/name" actors as "owner~name".
    return actor_id.strip().replace("/", "~")


def unwrap_data(body: Any) -> Any:
    if isinstance(body, Mapping) and "data" in body:
        return body["data"]
    return body


def listing_items(listing: Any) -> list[Any]:
    """Items of a paginated listing (`{"items": [...]}`) or a bare list."""
    if isinstance(listing, Mapping):
        items = listing.get("items")
        return list(items) if isinstance(items, list) else []
    if isinstance(listing, list):
        return listing
    return []


class PlatformClient:
    """
    One coroutine per platform capability. The credential is passed on every call and
    sent as a bearer token; nothing about the caller is kept on the client.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url: str = base_url.rstrip("/")
        self._owns_client: bool = http_client is None
        self._client: httpx.AsyncClient = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> PlatformClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def list_actors(self, credential: str, *, my: bool = False) -> Any:
        params = {"my": "1"} if my else None
        return await self._request("GET", "/acts", credential, params=params)

    async def get_input_schema(self, credential: str, actor_id: str) -> Any:
        return await self._request("GET", f"/acts/{actor_path_id(actor_id)}/input-schema", credential)

    async def list_builds(self, credential: str, actor_id: str) -> Any:
        return await self._request("GET", f"/acts/{actor_path_id(actor_id)}/builds", credential)

    async def get_build(self, credential: str, build_id: str) -> Any:
        return await self._request("GET", f"/actor-builds/{build_id}", credential)

    async def get_last_run(self, credential: str, actor_id: str, *, status: str = "SUCCEEDED") -> Any:
        return await self._request(
            "GET",
            f"/acts/{actor_path_id(actor_id)}/runs/last",
            credential,
            params={"status": status},
        )

    async def get_run(self, credential: str, run_id: str) -> Any:
        return await self._request("GET", f"/actor-runs/{run_id}", credential)

    async def get_record(self, credential: str, store_id: str, key: str) -> Any:
        return await self._request("GET", f"/key-value-stores/{store_id}/records/{key}", credential)

    async def start_run(
        self,
        credential: str,
        actor_id: str,
        run_input: Mapping[str, Any],
        *,
        memory_mbytes: int,
    ) -> Any:
        return await self._request(
            "POST",
            f"/acts/{actor_path_id(actor_id)}/runs",
            credential,
            params={"memory": str(memory_mbytes)},
            json_body=dict(run_input),
        )

    async def abort_run(self, credential: str, run_id: str) -> Any:
        return await self._request("POST", f"/actor-runs/{run_id}/abort", credential)

    async def get_dataset_items(self, credential: str, dataset_id: str) -> Any:
        return await self._request(
            "GET",
            f"/datasets/{dataset_id}/items",
            credential,
            params={"format": "json", "clean": "1"},
        )

    async def _request(
        self,
        method: str,
        path: str,
        credential: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any | None = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        headers = {"Authorization": f"Bearer {credential}"}
        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            logger.warning("Timeout calling %s %s", method, url)
            raise TransportError(f"Timeout calling {method} {url}", url=url) from exc
        except httpx.HTTPError as exc:
            logger.warning("HTTP error calling %s %s: %s", method, url, exc)
            raise TransportError(f"Request to {url} failed: {exc}", url=url) from exc

        body = _parse_body(response)
        if not response.is_success:
            logger.warning("%s %s returned %s", method, url, response.status_code)
            raise RemoteError(response.status_code, body, url=url)
        logger.debug("%s %s returned %s", method, url, response.status_code)
        return body


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
