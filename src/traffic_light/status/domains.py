"""Per-domain parameters for the status policies.

Each quality domain names where its pass/fail signal comes from, which
group configuration keys hold its thresholds, how the cohort is filtered
and deduplicated, and what happens to a member whose lookup fails.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from traffic_light.evaluation.evaluator import parse_leading_float
from traffic_light.models import Entity
from traffic_light.status.policies import (
    DEFAULT_RED_PERCENT,
    DEFAULT_RED_RATIO,
    DEFAULT_SEVERITY_PERCENT,
    DEFAULT_YELLOW_PERCENT,
    DualRatioPolicy,
    SeverityCountPolicy,
    SimpleRatioPolicy,
    StatusPolicy,
    ThresholdCountPolicy,
    Tiering,
    TierLimit,
)


class ErrorRule(str, Enum):
    """What a failed member lookup contributes to the cohort."""

    EXCLUDE = "exclude"
    COUNT_AS_FAILURE = "count_as_failure"
    # stays in the cohort size, adds no failures
    COUNT_AS_PASSING = "count_as_passing"


@dataclass(frozen=True)
class ThresholdSetting:
    key: str
    default: float

    def resolve(self, group: Entity | None) -> float:
        raw = group.get_config(self.key) if group is not None else None
        value = parse_leading_float(raw)
        return self.default if value is None else value


@dataclass(frozen=True)
class TierThreshold:
    tier: str
    label: str
    setting: ThresholdSetting
    per_entity: bool = False

    def resolve(self, group: Entity | None) -> TierLimit:
        return TierLimit(self.tier, self.label, self.setting.resolve(group), self.per_entity)


@dataclass(frozen=True)
class FactOutcome:
    """Pass/fail read straight from a fact: passing when the value equals ``passing_value``."""

    retriever_id: str
    fact_key: str
    passing_value: str
    missing_value: str = "NONE"


@dataclass(frozen=True)
class Domain:
    name: str
    label: str
    tiering: Tiering
    # (tier, check id), most severe first
    tier_checks: tuple[tuple[str, str], ...] = ()
    fact_outcome: FactOutcome | None = None
    red_threshold: ThresholdSetting | None = None
    yellow_threshold: ThresholdSetting | None = None
    percentage: ThresholdSetting | None = None
    green_tiers: tuple[str, ...] | None = None
    enabled_annotation: str | None = None
    required_annotations: tuple[str, ...] = ()
    subgroup_annotation: str | None = None
    configured_members_key: str | None = None
    same_group_only: bool = False
    red_limits: tuple[TierThreshold, ...] = ()
    yellow_limits: tuple[TierThreshold, ...] = ()
    # a tier fails when its check result is True rather than False
    issue_when_true: bool = False
    green_reason: str | None = None
    error_rule: ErrorRule = ErrorRule.EXCLUDE

    @property
    def tiers(self) -> tuple[str, ...]:
        return tuple(tier for tier, _ in self.tier_checks)

    @property
    def check_ids(self) -> list[str]:
        return [check_id for _, check_id in self.tier_checks]

    def build_policy(self, group: Entity | None) -> StatusPolicy:
        if self.tiering == Tiering.NONE:
            red = self.red_threshold or ThresholdSetting("", DEFAULT_RED_RATIO)
            return SimpleRatioPolicy(red_threshold=red.resolve(group))
        if self.tiering == Tiering.DUAL:
            red = self.red_threshold or ThresholdSetting("", DEFAULT_RED_PERCENT)
            yellow = self.yellow_threshold or ThresholdSetting("", DEFAULT_YELLOW_PERCENT)
            return DualRatioPolicy(
                red_percent=red.resolve(group), yellow_percent=yellow.resolve(group)
            )
        if self.tiering == Tiering.THRESHOLD:
            return ThresholdCountPolicy(
                red_limits=tuple(t.resolve(group) for t in self.red_limits),
                yellow_limits=tuple(t.resolve(group) for t in self.yellow_limits),
                green_reason=self.green_reason or "All checks passed for all entities",
            )
        return SeverityCountPolicy(
            tiers=self.tiers,
            percentage=self.percentage.resolve(group) if self.percentage else None,
            green_tiers=self.green_tiers,
        )


def _pipeline_domain(name: str, label: str) -> Domain:
    return Domain(
        name=name,
        label=label,
        tiering=Tiering.NONE,
        tier_checks=(("success_rate", f"{name}-success-rate"),),
        red_threshold=ThresholdSetting(f"{name}-check-threshold-red", DEFAULT_RED_RATIO),
        configured_members_key=f"{name}-configured-repositories",
        error_rule=ErrorRule.COUNT_AS_FAILURE,
    )


AZURE_BUGS = Domain(
    name="azure-bugs",
    label="Azure DevOps bugs",
    tiering=Tiering.NONE,
    tier_checks=(("bugs", "azure-bugs"),),
    red_threshold=ThresholdSetting("azure-bugs-check-threshold-red", DEFAULT_RED_RATIO),
    required_annotations=("azure.com/bugs-query-id",),
    subgroup_annotation="azure.com/project",
    error_rule=ErrorRule.COUNT_AS_FAILURE,
)

FOUNDATION = _pipeline_domain("foundation", "Foundation pipeline")
PREPRODUCTION = _pipeline_domain("preproduction", "Preproduction pipeline")
REPORTING = _pipeline_domain("reporting", "Reporting pipeline")

SONARQUBE = Domain(
    name="sonarqube",
    label="SonarQube",
    tiering=Tiering.DUAL,
    fact_outcome=FactOutcome("sonarcloud-fact-retriever", "quality_gate", passing_value="OK"),
    red_threshold=ThresholdSetting(
        "tech-insights.io/sonarcloud-quality-gate-red-threshold-percentage", DEFAULT_RED_PERCENT
    ),
    yellow_threshold=ThresholdSetting(
        "tech-insights.io/sonarcloud-quality-gate-yellow-threshold-percentage",
        DEFAULT_YELLOW_PERCENT,
    ),
    enabled_annotation="sonarcloud.io/enabled",
    error_rule=ErrorRule.COUNT_AS_FAILURE,
)

BLACKDUCK = Domain(
    name="blackduck",
    label="BlackDuck",
    tiering=Tiering.SEVERITY,
    tier_checks=(
        ("critical", "blackduck-critical-security-risk"),
        ("high", "blackduck-high-security-risk"),
        ("medium", "blackduck-medium-security-risk"),
    ),
    percentage=ThresholdSetting(
        "tech-insights.io/blackduck-critical-check-percentage", DEFAULT_SEVERITY_PERCENT
    ),
    enabled_annotation="tech-insights.io/blackduck-enabled",
    error_rule=ErrorRule.COUNT_AS_FAILURE,
)

# Medium alerts never block green; there is no percentage rule.
DEPENDABOT = Domain(
    name="dependabot",
    label="Dependabot",
    tiering=Tiering.SEVERITY,
    tier_checks=(
        ("critical", "dependabot-critical-alerts"),
        ("high", "dependabot-high-alerts"),
        ("medium", "dependabot-medium-alerts"),
    ),
    green_tiers=("critical", "high"),
    same_group_only=True,
    error_rule=ErrorRule.COUNT_AS_FAILURE,
)

_GHAS_KEY = "github-advanced-security-system-{}-threshold-{}"


def _ghas_limit(
    tier: str, label: str, color: str, default: float, per_entity: bool = False
) -> TierThreshold:
    return TierThreshold(
        tier, label, ThresholdSetting(_GHAS_KEY.format(tier, color), default), per_entity
    )


# A tier counts a member when its check result is True. Failed lookups
# count towards the cohort size only.
GITHUB_SECURITY = Domain(
    name="github-security",
    label="GitHub Security",
    tiering=Tiering.THRESHOLD,
    tier_checks=(
        ("critical", "critical-count"),
        ("high", "high-count"),
        ("medium", "medium-count"),
        ("low", "low-count"),
        ("secrets", "open-secret-scanning-alert-count"),
    ),
    red_limits=(
        _ghas_limit("critical", "Critical severity", "red", 0),
        _ghas_limit("secrets", "Secret scanning", "red", 0),
        _ghas_limit("high", "High severity", "red", 0),
        _ghas_limit("medium", "Medium severity", "red", 0.5, per_entity=True),
    ),
    yellow_limits=(
        _ghas_limit("medium", "Medium severity", "yellow", 0.1, per_entity=True),
        _ghas_limit("low", "Low severity", "yellow", 0.2, per_entity=True),
    ),
    issue_when_true=True,
    green_reason="All GitHub security checks passed for all entities",
    error_rule=ErrorRule.COUNT_AS_PASSING,
)

DOMAINS: dict[str, Domain] = {
    domain.name: domain
    for domain in (
        AZURE_BUGS,
        FOUNDATION,
        PREPRODUCTION,
        REPORTING,
        SONARQUBE,
        BLACKDUCK,
        DEPENDABOT,
        GITHUB_SECURITY,
    )
}


def get_domain(name: str) -> Domain:
    try:
        return DOMAINS[name]
    except KeyError:
        raise KeyError(f"Unknown status domain: {name}") from None
