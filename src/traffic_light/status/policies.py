"""Status policies — reduce a cohort's pass/fail counts to a traffic-light decision.

Three policy shapes, one per tiering:
  none:     SimpleRatioPolicy   red when failures/total >= red threshold, else green
  dual:     DualRatioPolicy     red / yellow percentage bands, else green
  severity: SeverityCountPolicy per-tier failure counts, critical tier always red
  threshold: ThresholdCountPolicy per-tier failure counts against configured limits

An empty cohort is gray for every policy.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from traffic_light.models import StatusColor, StatusDecision

DEFAULT_RED_RATIO = 0.33
DEFAULT_RED_PERCENT = 50.0
DEFAULT_YELLOW_PERCENT = 25.0
DEFAULT_SEVERITY_PERCENT = 33.0


class Tiering(str, Enum):
    NONE = "none"
    DUAL = "dual"
    SEVERITY = "severity"
    THRESHOLD = "threshold"


@dataclass(frozen=True)
class CohortOutcome:
    """Counts for one cohort. ``tier_failures`` is used by severity policies only."""

    total: int
    failures: int = 0
    tier_failures: dict[str, int] = field(default_factory=dict)


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


class StatusPolicy(ABC):
    tiering: Tiering

    @abstractmethod
    def decide(self, outcome: CohortOutcome) -> StatusDecision:
        ...


class SimpleRatioPolicy(StatusPolicy):
    tiering = Tiering.NONE

    def __init__(self, red_threshold: float = DEFAULT_RED_RATIO) -> None:
        self.red_threshold = red_threshold

    def decide(self, outcome: CohortOutcome) -> StatusDecision:
        if outcome.total <= 0:
            return StatusDecision.gray("No entities selected")

        failures = outcome.failures
        if failures == 0:
            return StatusDecision(color=StatusColor.GREEN, reason="All checks passed.")

        ratio = failures / outcome.total
        if ratio >= self.red_threshold:
            return StatusDecision(
                color=StatusColor.RED,
                reason=(
                    f"{failures} {_plural(failures, 'failure', 'failures')} out of "
                    f"{outcome.total} ({ratio:.0%}) reaches the red threshold of "
                    f"{self.red_threshold:.0%}."
                ),
            )
        return StatusDecision(
            color=StatusColor.GREEN,
            reason=(
                f"{failures} {_plural(failures, 'failure', 'failures')} out of "
                f"{outcome.total} is below the red threshold of {self.red_threshold:.0%}."
            ),
        )


class DualRatioPolicy(StatusPolicy):
    tiering = Tiering.DUAL

    def __init__(
        self,
        red_percent: float = DEFAULT_RED_PERCENT,
        yellow_percent: float = DEFAULT_YELLOW_PERCENT,
    ) -> None:
        self.red_percent = red_percent
        self.yellow_percent = yellow_percent

    def decide(self, outcome: CohortOutcome) -> StatusDecision:
        if outcome.total <= 0:
            return StatusDecision.gray("No entities selected")

        failures = outcome.failures
        percent = failures * 100 / outcome.total
        reason = (
            f"{failures} of {outcome.total} {_plural(outcome.total, 'entity', 'entities')} "
            f"failed the quality gate check"
        )
        if percent >= self.red_percent:
            return StatusDecision(color=StatusColor.RED, reason=reason)
        if percent >= self.yellow_percent:
            return StatusDecision(color=StatusColor.YELLOW, reason=reason)
        return StatusDecision(color=StatusColor.GREEN, reason=reason)


class SeverityCountPolicy(StatusPolicy):
    """Severity tiers, most severe first.

    Green needs zero failures in every tier of ``green_tiers`` (all tiers
    by default). Any failure in ``critical_tier`` is red regardless of the
    count. With a ``percentage``, a tier whose failure count exceeds
    ``total * percentage / 100`` is red as well. Everything else is yellow.
    """

    tiering = Tiering.SEVERITY

    def __init__(
        self,
        tiers: tuple[str, ...],
        critical_tier: str | None = None,
        percentage: float | None = DEFAULT_SEVERITY_PERCENT,
        green_tiers: tuple[str, ...] | None = None,
    ) -> None:
        if not tiers:
            raise ValueError("SeverityCountPolicy needs at least one tier")
        self.tiers = tiers
        self.critical_tier = critical_tier or tiers[0]
        self.percentage = percentage
        self.green_tiers = green_tiers or tiers

    def decide(self, outcome: CohortOutcome) -> StatusDecision:
        if outcome.total <= 0:
            return StatusDecision.gray("No entities selected")

        counts = {tier: outcome.tier_failures.get(tier, 0) for tier in self.tiers}

        if all(counts.get(tier, 0) == 0 for tier in self.green_tiers):
            return StatusDecision(color=StatusColor.GREEN, reason="All checks passed")

        critical = counts.get(self.critical_tier, 0)
        if critical > 0:
            return StatusDecision(
                color=StatusColor.RED,
                reason=(
                    f"{critical} {_plural(critical, 'entity', 'entities')} failed the "
                    f"{self.critical_tier} check"
                ),
            )

        if self.percentage is not None:
            red_limit = outcome.total * self.percentage / 100
            exceeded = [tier for tier in self.tiers if counts[tier] > red_limit]
            if exceeded:
                return StatusDecision(
                    color=StatusColor.RED,
                    reason=(
                        f"Failures exceed {self.percentage:g}% of {outcome.total} entities "
                        f"for: {', '.join(exceeded)}"
                    ),
                )

        failing = [f"{tier}={counts[tier]}" for tier in self.tiers if counts[tier] > 0]
        return StatusDecision(
            color=StatusColor.YELLOW,
            reason=f"Some issues detected ({', '.join(failing)})",
        )


@dataclass(frozen=True)
class TierLimit:
    """A tier is over its limit when its failure count exceeds ``limit``.

    With ``per_entity`` the limit is a ratio and is multiplied by the
    cohort size first.
    """

    tier: str
    label: str
    limit: float
    per_entity: bool = False

    def resolve(self, total: int) -> float:
        return self.limit * total if self.per_entity else self.limit


class ThresholdCountPolicy(StatusPolicy):
    """Red when any red limit is exceeded, yellow when any yellow limit is, else green."""

    tiering = Tiering.THRESHOLD

    def __init__(
        self,
        red_limits: tuple[TierLimit, ...],
        yellow_limits: tuple[TierLimit, ...] = (),
        green_reason: str = "All checks passed for all entities",
    ) -> None:
        self.red_limits = red_limits
        self.yellow_limits = yellow_limits
        self.green_reason = green_reason

    @staticmethod
    def _exceeded(limits: tuple[TierLimit, ...], outcome: CohortOutcome) -> list[str]:
        lines = []
        for limit in limits:
            count = outcome.tier_failures.get(limit.tier, 0)
            threshold = limit.resolve(outcome.total)
            if count > threshold:
                lines.append(
                    f"{limit.label} issues are exceeded by {count} repos, "
                    f"the threshold for this system is: {threshold:g}"
                )
        return lines

    def decide(self, outcome: CohortOutcome) -> StatusDecision:
        if outcome.total <= 0:
            return StatusDecision.gray("No entities selected")

        red = self._exceeded(self.red_limits, outcome)
        if red:
            return StatusDecision(color=StatusColor.RED, reason="\n".join(red))
        yellow = self._exceeded(self.yellow_limits, outcome)
        if yellow:
            return StatusDecision(color=StatusColor.YELLOW, reason="\n".join(yellow))
        return StatusDecision(color=StatusColor.GREEN, reason=self.green_reason)
