"""Status aggregation — one traffic-light decision for a cohort of components.

Pipeline:
  1. resolve every member in the catalog (concurrently, settle all)
  2. filter the cohort (enabled flag, owning group, configured members)
  3. resolve the owning group and its thresholds
  4. drop members without the required annotations, dedupe by sub-group
  5. collect each member's pass/fail outcome (concurrently, settle all)
  6. hand the counts to the domain's policy

Gray is returned from any step that cannot produce a verdict. Member
lookup failures are excluded or counted as failures per the domain's
ErrorRule; when every member fails the result is gray.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Sequence

from traffic_light.checks.checker import DynamicThresholdChecker
from traffic_light.collaborators import DirectoryService, FactStore
from traffic_light.models import Entity, EntityRef, StatusDecision
from traffic_light.schema import load_checks
from traffic_light.status.domains import (
    AZURE_BUGS,
    BLACKDUCK,
    DEPENDABOT,
    FOUNDATION,
    GITHUB_SECURITY,
    PREPRODUCTION,
    REPORTING,
    SONARQUBE,
    Domain,
    ErrorRule,
)
from traffic_light.status.policies import CohortOutcome

logger = logging.getLogger(__name__)


@dataclass
class _MemberOutcome:
    ref: EntityRef
    tier_failed: dict[str, bool]
    error: BaseException | None = None


def _split_configured(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


async def _resolve_members(
    refs: Sequence[EntityRef], directory: DirectoryService
) -> list[Entity]:
    settled = await asyncio.gather(
        *(directory.get_by_ref(ref) for ref in refs), return_exceptions=True
    )
    resolved: list[Entity] = []
    for ref, outcome in zip(refs, settled):
        if isinstance(outcome, BaseException) or outcome is None:
            logger.warning("Could not resolve cohort member %s: %s", ref, outcome)
        else:
            resolved.append(outcome)
    return resolved


def _dedupe(domain: Domain, members: list[Entity]) -> list[Entity]:
    members = [
        m for m in members if all(m.get_config(key) for key in domain.required_annotations)
    ]
    if domain.subgroup_annotation is None:
        return members
    seen: set[str] = set()
    unique: list[Entity] = []
    for member in members:
        key = member.get_config(domain.subgroup_annotation)
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(member)
    return unique


async def _member_outcome(
    domain: Domain,
    ref: EntityRef,
    fact_store: FactStore,
    checker: DynamicThresholdChecker | None,
) -> _MemberOutcome:
    if domain.fact_outcome is not None:
        source = domain.fact_outcome
        batch = await fact_store.get_latest_facts_by_ids([source.retriever_id], ref)
        facts = (batch.get(source.retriever_id) or {}).get("facts") or {}
        value = facts.get(source.fact_key)
        value = source.missing_value if value is None else str(value)
        return _MemberOutcome(ref=ref, tier_failed={"default": value != source.passing_value})

    assert checker is not None
    results = await checker.run_checks(ref, domain.check_ids)
    passed = {r.check.id: r.result for r in results}
    if domain.issue_when_true:
        failed = {tier: passed.get(check_id) is True for tier, check_id in domain.tier_checks}
    else:
        failed = {tier: passed.get(check_id) is not True for tier, check_id in domain.tier_checks}
    return _MemberOutcome(ref=ref, tier_failed=failed)


async def _collect_outcomes(
    domain: Domain,
    members: list[Entity],
    fact_store: FactStore,
    checker: DynamicThresholdChecker | None,
) -> list[_MemberOutcome]:
    refs = [m.ref for m in members]
    settled = await asyncio.gather(
        *(_member_outcome(domain, ref, fact_store, checker) for ref in refs),
        return_exceptions=True,
    )
    outcomes: list[_MemberOutcome] = []
    for ref, outcome in zip(refs, settled):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning("%s lookup failed for %s: %s", domain.label, ref, outcome)
            outcomes.append(_MemberOutcome(ref=ref, tier_failed={}, error=outcome))
        else:
            outcomes.append(outcome)
    return outcomes


def _tally(domain: Domain, outcomes: list[_MemberOutcome]) -> CohortOutcome:
    counted = [o for o in outcomes if o.error is None]
    errored = len(outcomes) - len(counted)
    tiers = domain.tiers or ("default",)

    tier_failures = {tier: sum(1 for o in counted if o.tier_failed.get(tier)) for tier in tiers}
    failures = sum(1 for o in counted if any(o.tier_failed.values()))
    total = len(counted)

    if domain.error_rule == ErrorRule.COUNT_AS_FAILURE:
        total += errored
        failures += errored
        tier_failures = {tier: count + errored for tier, count in tier_failures.items()}
    elif domain.error_rule == ErrorRule.COUNT_AS_PASSING:
        total += errored

    return CohortOutcome(total=total, failures=failures, tier_failures=tier_failures)


async def determine_status(
    domain: Domain,
    refs: Sequence[EntityRef | str],
    directory: DirectoryService,
    fact_store: FactStore,
    checker: DynamicThresholdChecker | None = None,
    group_kind: str = "system",
) -> StatusDecision:
    """Reduce a cohort of components to one StatusDecision for ``domain``."""
    if not refs:
        return StatusDecision.gray("No entities selected")

    error_reason = f"Error fetching {domain.label} data"
    try:
        cohort = [EntityRef.parse(ref) for ref in refs]
        members = await _resolve_members(cohort, directory)
        if not members:
            return StatusDecision.gray(error_reason)

        group_name = members[0].group
        if not group_name:
            return StatusDecision.gray("System metadata is missing")

        if domain.enabled_annotation:
            members = [m for m in members if m.get_config(domain.enabled_annotation) == "true"]
            if not members:
                return StatusDecision.gray(f"No entities have {domain.label} enabled")
        if domain.same_group_only:
            members = [m for m in members if m.group == group_name]

        group_ref = EntityRef.parse(
            group_name, default_kind=group_kind, default_namespace=members[0].namespace
        )
        group = await directory.get_by_ref(group_ref)
        if group is None:
            return StatusDecision.gray(f"System '{group_name}' not found")

        if domain.configured_members_key:
            configured = _split_configured(group.get_config(domain.configured_members_key))
            if configured:
                members = [m for m in members if m.name in configured]
            if not members:
                return StatusDecision.gray(
                    f"No configured repositories found for {domain.label} checks"
                )

        members = _dedupe(domain, members)
        if not members:
            return StatusDecision.gray(f"No entities configured for {domain.label}")

        if checker is None and domain.fact_outcome is None:
            checker = DynamicThresholdChecker(
                directory, fact_store, load_checks(), group_kind=group_kind
            )

        outcomes = await _collect_outcomes(domain, members, fact_store, checker)
        if all(o.error is not None for o in outcomes):
            return StatusDecision.gray(error_reason)

        outcome = _tally(domain, outcomes)
        decision = domain.build_policy(group).decide(outcome)
        logger.info(
            "%s status for system %s: %s (%s)",
            domain.label, group_name, decision.color.value, decision.reason,
        )
        return decision
    except Exception:
        logger.exception("%s status computation failed", domain.label)
        return StatusDecision.gray(error_reason)


# ── Domain entry points ─────────────────────────────────────────────────────


async def determine_azure_bugs_status(
    refs: Sequence[EntityRef | str],
    directory: DirectoryService,
    fact_store: FactStore,
    checker: DynamicThresholdChecker | None = None,
) -> StatusDecision:
    return await determine_status(AZURE_BUGS, refs, directory, fact_store, checker)


async def determine_foundation_status(
    refs: Sequence[EntityRef | str],
    directory: DirectoryService,
    fact_store: FactStore,
    checker: DynamicThresholdChecker | None = None,
) -> StatusDecision:
    return await determine_status(FOUNDATION, refs, directory, fact_store, checker)


async def determine_preproduction_status(
    refs: Sequence[EntityRef | str],
    directory: DirectoryService,
    fact_store: FactStore,
    checker: DynamicThresholdChecker | None = None,
) -> StatusDecision:
    return await determine_status(PREPRODUCTION, refs, directory, fact_store, checker)


async def determine_reporting_status(
    refs: Sequence[EntityRef | str],
    directory: DirectoryService,
    fact_store: FactStore,
    checker: DynamicThresholdChecker | None = None,
) -> StatusDecision:
    return await determine_status(REPORTING, refs, directory, fact_store, checker)


async def determine_sonarqube_status(
    refs: Sequence[EntityRef | str],
    directory: DirectoryService,
    fact_store: FactStore,
    checker: DynamicThresholdChecker | None = None,
) -> StatusDecision:
    return await determine_status(SONARQUBE, refs, directory, fact_store, checker)


async def determine_blackduck_status(
    refs: Sequence[EntityRef | str],
    directory: DirectoryService,
    fact_store: FactStore,
    checker: DynamicThresholdChecker | None = None,
) -> StatusDecision:
    return await determine_status(BLACKDUCK, refs, directory, fact_store, checker)


async def determine_dependabot_status(
    refs: Sequence[EntityRef | str],
    directory: DirectoryService,
    fact_store: FactStore,
    checker: DynamicThresholdChecker | None = None,
) -> StatusDecision:
    return await determine_status(DEPENDABOT, refs, directory, fact_store, checker)


async def determine_github_security_status(
    refs: Sequence[EntityRef | str],
    directory: DirectoryService,
    fact_store: FactStore,
    checker: DynamicThresholdChecker | None = None,
) -> StatusDecision:
    return await determine_status(GITHUB_SECURITY, refs, directory, fact_store, checker)
