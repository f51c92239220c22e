"""Status Aggregator — cohort policies, domain parameters, entry points."""

from traffic_light.status.aggregator import (
    determine_azure_bugs_status,
    determine_blackduck_status,
    determine_dependabot_status,
    determine_foundation_status,
    determine_github_security_status,
    determine_preproduction_status,
    determine_reporting_status,
    determine_sonarqube_status,
    determine_status,
)
from traffic_light.status.domains import DOMAINS, Domain, ErrorRule, get_domain
from traffic_light.status.policies import (
    CohortOutcome,
    DualRatioPolicy,
    SeverityCountPolicy,
    SimpleRatioPolicy,
    StatusPolicy,
    ThresholdCountPolicy,
    Tiering,
    TierLimit,
)
from traffic_light.status.ranking import SeveritySummary, collect_severity_counts, top_critical

__all__ = [
    "CohortOutcome",
    "DOMAINS",
    "Domain",
    "DualRatioPolicy",
    "ErrorRule",
    "SeverityCountPolicy",
    "SeveritySummary",
    "SimpleRatioPolicy",
    "StatusPolicy",
    "ThresholdCountPolicy",
    "TierLimit",
    "Tiering",
    "collect_severity_counts",
    "determine_azure_bugs_status",
    "determine_blackduck_status",
    "determine_dependabot_status",
    "determine_foundation_status",
    "determine_github_security_status",
    "determine_preproduction_status",
    "determine_reporting_status",
    "determine_sonarqube_status",
    "determine_status",
    "get_domain",
    "top_critical",
]
