from __future__ import annotations

import logging
from typing import Any

import httpx

from marketplace.application.exceptions import ConflictError, UpstreamUnavailable
from marketplace.core.config import settings

UNIQUE_VIOLATION = "23505"


class SupabaseClient:
    """Thin async PostgREST client (the REST surface of a hosted Supabase project)."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        base_url = base_url or settings.SUPABASE_URL
        api_key = api_key or settings.SUPABASE_KEY
        if not base_url or not api_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY are required for the Supabase store")

        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )
        self._logger = logging.getLogger(__name__)

    async def select(self, table: str, params: dict[str, str] | None = None) -> list[dict[str, Any]]:
        query = {"select": "*"}
        query.update(params or {})
        return await self._request("GET", f"/{table}", params=query)

    async def insert(
        self,
        table: str,
        rows: list[dict[str, Any]],
        on_conflict: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        A single POST is one statement, so a multi-row insert commits as a unit.
        With ``on_conflict`` the rows are upserted (merge on that column).
        """
        prefer = "return=representation"
        params: dict[str, str] = {}
        if on_conflict:
            prefer += ",resolution=merge-duplicates"
            params["on_conflict"] = on_conflict
        return await self._request("POST", f"/{table}", json=rows, params=params, headers={"Prefer": prefer})

    async def update(self, table: str, values: dict[str, Any], filters: dict[str, str]) -> list[dict[str, Any]]:
        return await self._request(
            "PATCH",
            f"/{table}",
            json=values,
            params=filters,
            headers={"Prefer": "return=representation"},
        )

    async def delete(self, table: str, filters: dict[str, str]) -> list[dict[str, Any]]:
        return await self._request("DELETE", f"/{table}", params=filters, headers={"Prefer": "return=representation"})

    async def rpc(self, function: str, args: dict[str, Any]) -> Any:
        return await self._request("POST", f"/rpc/{function}", json=args)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            self._logger.error("Supabase request failed", extra={"reason": str(e), "path": path})
            raise UpstreamUnavailable(f"Supabase request to {path} failed: {e}") from e

        if response.status_code == 409 or _error_code(response) == UNIQUE_VIOLATION:
            raise ConflictError(_error_message(response) or f"Conflict on {path}")

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self._logger.error(
                "Supabase returned an error",
                extra={"reason": _error_message(response), "path": path, "status": response.status_code},
            )
            raise UpstreamUnavailable(f"Supabase {method} {path} returned {response.status_code}") from e

        if not response.content:
            return []
        return response.json()


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_code(response: httpx.Response) -> str | None:
    if response.is_success:
        return None
    return _error_body(response).get("code")


def _error_message(response: httpx.Response) -> str:
    return str(_error_body(response).get("message") or response.text)
