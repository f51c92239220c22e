"""Tech Insights HTTP adapter — latest facts per retriever for one entity."""

from __future__ import annotations

from typing import Any

import httpx

from traffic_light.collaborators import FactBatch
from traffic_light.models import EntityRef


class TechInsightsClient:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def get_latest_facts_by_ids(
        self, retriever_ids: list[str], entity_ref: EntityRef | str
    ) -> FactBatch:
        """Return ``{retriever_id: {"facts": {...}, ...}}`` as served by the backend."""
        params = [("entity", str(EntityRef.parse(entity_ref)))]
        params.extend(("ids[]", retriever_id) for retriever_id in retriever_ids)
        resp = await self._client.get("/facts/latest", params=params)
        resp.raise_for_status()
        return resp.json() or {}

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> TechInsightsClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
