"""Catalog HTTP adapter — resolves entity references to Entity models."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from traffic_light.models import Entity, EntityRef


class CatalogClient:
    """Reads entities from a Backstage-style catalog backend.

    Annotations become the entity's configuration map and ``spec.system``
    becomes its owning group. A 404 means the entity does not exist.
    """

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

    async def get_by_ref(self, ref: EntityRef | str) -> Entity | None:
        ref = EntityRef.parse(ref)
        path = "/entities/by-name/" + "/".join(
            quote(part, safe="") for part in (ref.kind, ref.namespace, ref.name)
        )
        resp = await self._client.get(path)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return _to_entity(resp.json(), ref)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> CatalogClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _to_entity(raw: dict, ref: EntityRef) -> Entity:
    metadata = raw.get("metadata") or {}
    spec = raw.get("spec") or {}
    annotations = metadata.get("annotations") or {}
    system = spec.get("system")
    return Entity(
        kind=str(raw.get("kind") or ref.kind).lower(),
        namespace=metadata.get("namespace") or ref.namespace,
        name=metadata.get("name") or ref.name,
        group=str(system) if system else None,
        configuration={str(k): str(v) for k, v in annotations.items()},
    )
