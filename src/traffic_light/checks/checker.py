"""Dynamic threshold checker — runs registered checks for one component.

Thresholds and operators come from the component's owning group (a
System entity), keyed by each check's annotation keys. Facts for every
selected check are fetched in one batch; each check is then evaluated
independently.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from traffic_light.collaborators import DirectoryService, FactBatch, FactStore
from traffic_light.errors import EntityNotFoundError, GroupNotFoundError, InvalidConfigurationError
from traffic_light.evaluation import Diagnostics, LoggingDiagnostics, ThresholdEvaluator, resolve_threshold
from traffic_light.evaluation.operators import is_number
from traffic_light.models import Check, CheckResult, Entity, EntityRef, Fact, ValidationResult
from traffic_light.schema import load_checks, validate_check


class DynamicThresholdChecker:
    """Evaluates threshold checks against the latest facts of a component."""

    def __init__(
        self,
        directory: DirectoryService,
        fact_store: FactStore,
        checks: list[Check],
        diagnostics: Diagnostics | None = None,
        group_kind: str = "system",
    ) -> None:
        self._directory = directory
        self._fact_store = fact_store
        self._checks = list(checks)
        self._diagnostics = diagnostics or LoggingDiagnostics()
        self._evaluator = ThresholdEvaluator(self._diagnostics)
        self._group_kind = group_kind

    @classmethod
    def from_checks_file(
        cls,
        directory: DirectoryService,
        fact_store: FactStore,
        path: Path | str | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> DynamicThresholdChecker:
        """Build a checker from a YAML registry (the packaged one by default)."""
        checks = load_checks(path)
        for check in checks:
            result = validate_check(check)
            if not result.valid:
                raise InvalidConfigurationError(f"Check {check.id}: {result.message}")
        return cls(directory, fact_store, checks, diagnostics=diagnostics)

    async def get_checks(self) -> list[Check]:
        return list(self._checks)

    async def validate(self, check: Check) -> ValidationResult:
        return validate_check(check)

    async def _resolve_group(self, entity_ref: EntityRef) -> tuple[Entity, Entity]:
        entity = await self._directory.get_by_ref(entity_ref)
        if entity is None:
            raise EntityNotFoundError(str(entity_ref))

        if not entity.group:
            raise InvalidConfigurationError(
                f"Component {entity.name} does not specify a system."
            )

        group_ref = EntityRef.parse(
            entity.group,
            default_kind=self._group_kind,
            default_namespace=entity.namespace or "default",
        )
        group = await self._directory.get_by_ref(group_ref)
        if group is None:
            raise GroupNotFoundError(
                str(group_ref), f"System entity '{entity.group}' not found in catalog."
            )
        return entity, group

    async def run_checks(
        self, entity_ref: EntityRef | str, check_ids: list[str] | None = None
    ) -> list[CheckResult]:
        """Run the selected checks (all when ``check_ids`` is None) for one component."""
        ref = EntityRef.parse(entity_ref)
        _, group = await self._resolve_group(ref)

        checks_to_run = [c for c in self._checks if check_ids is None or c.id in check_ids]
        if not checks_to_run:
            return []

        retriever_ids = list(dict.fromkeys(c.retriever_id for c in checks_to_run))
        fact_batch = await self._fact_store.get_latest_facts_by_ids(retriever_ids, ref)

        return list(
            await asyncio.gather(
                *(self._run_check(check, ref, group, fact_batch) for check in checks_to_run)
            )
        )

    async def _run_check(
        self, check: Check, ref: EntityRef, group: Entity, fact_batch: FactBatch
    ) -> CheckResult:
        threshold_str = group.get_config(check.threshold_annotation_key)
        threshold = resolve_threshold(threshold_str)

        if threshold is None:
            self._diagnostics.warning(
                f"Missing threshold for {check.id} on entity {ref} part of system "
                f"{group.name}, annotation {check.threshold_annotation_key} is not set"
            )
            return CheckResult(check=check, facts={}, result=False)

        raw_value = _lookup_fact(fact_batch, check.retriever_id, check.fact_key)
        operator = group.get_config(check.operator_annotation_key)
        evaluation = self._evaluator.evaluate(raw_value, threshold, operator)

        self._diagnostics.info(
            f"The result from the check is {evaluation.result} for {check.id} on entity "
            f"{ref} part of system {group.name}, threshold is {operator} {threshold!r}, "
            f"raw value is {raw_value!r}"
        )

        fact = Fact(
            id=check.retriever_id,
            type="integer" if is_number(raw_value) else "string",
            description=f"Fact for {check.retriever_id}",
            value=evaluation.display_value,
        )
        return CheckResult(check=check, facts={check.retriever_id: fact}, result=evaluation.result)


def _lookup_fact(fact_batch: FactBatch, retriever_id: str, fact_key: str) -> Any:
    container = fact_batch.get(retriever_id) or {}
    facts = container.get("facts") or {}
    return facts.get(fact_key)
