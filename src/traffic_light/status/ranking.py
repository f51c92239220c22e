"""Per-component severity counts and the "top critical" ranking shown next to a status."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from traffic_light.collaborators import FactStore
from traffic_light.evaluation.operators import is_number
from traffic_light.models import Check, EntityRef
from traffic_light.schema import load_checks
from traffic_light.status.domains import Domain

logger = logging.getLogger(__name__)


@dataclass
class SeveritySummary:
    name: str
    counts: dict[str, int] = field(default_factory=dict)

    def count(self, tier: str) -> int:
        return self.counts.get(tier, 0)


def top_critical(
    rows: Sequence[SeveritySummary], tiers: Sequence[str], limit: int = 5
) -> list[SeveritySummary]:
    """Pick up to ``limit`` rows, most severe tier first.

    Rows with findings in the first tier are taken in descending order of
    that count, then the next tier fills the remaining slots, and so on.
    Leftover slots are filled with the remaining rows in input order.
    """
    # by position: equal rows from different namespaces are distinct entries
    picked: list[int] = []
    for tier in tiers:
        if len(picked) >= limit:
            break
        candidates = [i for i, r in enumerate(rows) if i not in picked and r.count(tier) > 0]
        candidates.sort(key=lambda i: rows[i].count(tier), reverse=True)
        picked.extend(candidates[: limit - len(picked)])

    if len(picked) < limit:
        leftovers = [i for i in range(len(rows)) if i not in picked]
        picked.extend(leftovers[: limit - len(picked)])
    return [rows[i] for i in picked]


def _as_count(value: Any) -> int:
    if is_number(value):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return 0
    return 0


async def collect_severity_counts(
    domain: Domain,
    refs: Sequence[EntityRef | str],
    fact_store: FactStore,
    checks: list[Check] | None = None,
) -> list[SeveritySummary]:
    """Read each component's per-tier finding counts from its latest facts.

    A component whose lookup fails is reported with zero counts.
    """
    registry = {c.id: c for c in (checks if checks is not None else load_checks())}
    tier_facts = [
        (tier, registry[check_id]) for tier, check_id in domain.tier_checks if check_id in registry
    ]
    retriever_ids = list(dict.fromkeys(check.retriever_id for _, check in tier_facts))
    parsed = [EntityRef.parse(ref) for ref in refs]

    settled = await asyncio.gather(
        *(fact_store.get_latest_facts_by_ids(retriever_ids, ref) for ref in parsed),
        return_exceptions=True,
    )

    summaries: list[SeveritySummary] = []
    for ref, batch in zip(parsed, settled):
        if isinstance(batch, Exception):
            logger.warning("Could not fetch %s facts for %s: %s", domain.label, ref, batch)
            batch = {}
        elif isinstance(batch, BaseException):
            raise batch
        counts = {}
        for tier, check in tier_facts:
            facts = (batch.get(check.retriever_id) or {}).get("facts") or {}
            counts[tier] = _as_count(facts.get(check.fact_key))
        summaries.append(SeveritySummary(name=ref.name, counts=counts))
    return summaries
