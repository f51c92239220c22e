"""Catalog and fact store interfaces consumed by the checker and the aggregators.

In-memory implementations back tests and local runs.
Production: HTTP adapters in traffic_light.clients.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol

from traffic_light.models import Entity, EntityRef

FactBatch = dict[str, dict[str, Any]]


class DirectoryService(Protocol):
    async def get_by_ref(self, ref: EntityRef) -> Entity | None: ...


class FactStore(Protocol):
    async def get_latest_facts_by_ids(
        self, retriever_ids: list[str], entity_ref: EntityRef
    ) -> FactBatch: ...


class InMemoryDirectory:
    def __init__(self, entities: Iterable[Entity] = ()) -> None:
        self._entities: dict[str, Entity] = {}
        for entity in entities:
            self.add(entity)

    def add(self, entity: Entity) -> None:
        self._entities[str(entity.ref)] = entity

    async def get_by_ref(self, ref: EntityRef) -> Entity | None:
        return self._entities.get(str(ref))


class InMemoryFactStore:
    """Latest facts per entity, keyed by retriever id.

    ``fail_for`` makes lookups for one entity raise, to stand in for an
    unreachable upstream.
    """

    def __init__(self) -> None:
        self._facts: dict[str, dict[str, dict[str, Any]]] = {}
        self._failures: dict[str, Exception] = {}
        self.calls: list[tuple[list[str], str]] = []

    def set_facts(self, entity_ref: EntityRef, retriever_id: str, facts: dict[str, Any]) -> None:
        self._facts.setdefault(str(entity_ref), {})[retriever_id] = dict(facts)

    def fail_for(self, entity_ref: EntityRef, error: Exception) -> None:
        self._failures[str(entity_ref)] = error

    async def get_latest_facts_by_ids(
        self, retriever_ids: list[str], entity_ref: EntityRef
    ) -> FactBatch:
        key = str(entity_ref)
        self.calls.append((list(retriever_ids), key))
        if key in self._failures:
            raise self._failures[key]
        stored = self._facts.get(key, {})
        return {
            retriever_id: {"id": retriever_id, "entity": key, "facts": dict(stored[retriever_id])}
            for retriever_id in retriever_ids
            if retriever_id in stored
        }
