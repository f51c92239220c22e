"""Pydantic v2 models for checks, catalog entities, facts and status decisions."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ── Checks ──────────────────────────────────────────────────────────────────


class Check(BaseModel):
    """Threshold check definition.

    ``fact_reference`` is ``[retriever_id, fact_key]``. The owning group
    stores the threshold and the operator under the two annotation keys.
    ``type`` is advisory only (``number``, ``percentage``, ``boolean``).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    type: str = "number"
    fact_reference: tuple[str, ...] = ()
    threshold_annotation_key: str = ""
    operator_annotation_key: str = ""
    description: str = ""

    @property
    def retriever_id(self) -> str:
        return self.fact_reference[0] if self.fact_reference else ""

    @property
    def fact_key(self) -> str:
        return self.fact_reference[1] if len(self.fact_reference) > 1 else ""


class ValidationResult(BaseModel):
    valid: bool
    message: str | None = None


# ── Catalog ─────────────────────────────────────────────────────────────────


class EntityRef(BaseModel):
    """Reference to a catalog entity, rendered as ``kind:namespace/name``."""

    model_config = ConfigDict(frozen=True)

    kind: str
    namespace: str = "default"
    name: str

    @classmethod
    def parse(
        cls,
        ref: str | EntityRef,
        default_kind: str = "component",
        default_namespace: str = "default",
    ) -> EntityRef:
        if isinstance(ref, EntityRef):
            return ref
        kind, sep, rest = ref.partition(":")
        if not sep:
            kind, rest = default_kind, ref
        namespace, sep, name = rest.partition("/")
        if not sep:
            namespace, name = default_namespace, rest
        if not kind or not namespace or not name:
            raise ValueError(f"Malformed entity reference: {ref!r}")
        return cls(kind=kind.lower(), namespace=namespace, name=name)

    def __str__(self) -> str:
        return f"{self.kind.lower()}:{self.namespace}/{self.name}"


class Entity(BaseModel):
    """Catalog entity as seen by the checker: identity, owning group, annotations."""

    kind: str = "component"
    namespace: str = "default"
    name: str
    group: str | None = None
    configuration: dict[str, str] = Field(default_factory=dict)

    @property
    def ref(self) -> EntityRef:
        return EntityRef(kind=self.kind.lower(), namespace=self.namespace, name=self.name)

    def get_config(self, key: str) -> str | None:
        return self.configuration.get(key)


# ── Results ─────────────────────────────────────────────────────────────────


class Fact(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    description: str
    value: Any = None


class CheckResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    check: Check
    facts: dict[str, Fact] = Field(default_factory=dict)
    result: bool = False


class StatusColor(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    GRAY = "gray"


class StatusDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    color: StatusColor
    reason: str

    @property
    def is_verdict(self) -> bool:
        """Gray means no verdict could be computed."""
        return self.color != StatusColor.GRAY

    @classmethod
    def gray(cls, reason: str) -> StatusDecision:
        return cls(color=StatusColor.GRAY, reason=reason)
