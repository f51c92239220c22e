"""Tests for the status policies."""

from traffic_light.models import StatusColor
from traffic_light.status.policies import (
    CohortOutcome,
    DualRatioPolicy,
    SeverityCountPolicy,
    SimpleRatioPolicy,
    ThresholdCountPolicy,
    TierLimit,
)

TIERS = ("critical", "high", "medium")


class TestSimpleRatioPolicy:

    def test_one_of_three_is_red_at_default_threshold(self):
        decision = SimpleRatioPolicy().decide(CohortOutcome(total=3, failures=1))
        assert decision.color == StatusColor.RED

    def test_below_threshold_is_green(self):
        decision = SimpleRatioPolicy().decide(CohortOutcome(total=4, failures=1))
        assert decision.color == StatusColor.GREEN
        assert "below the red threshold" in decision.reason

    def test_no_failures(self):
        decision = SimpleRatioPolicy(red_threshold=0.0).decide(CohortOutcome(total=2))
        assert decision.color == StatusColor.GREEN
        assert decision.reason == "All checks passed."

    def test_custom_threshold_inclusive(self):
        decision = SimpleRatioPolicy(red_threshold=0.5).decide(CohortOutcome(total=4, failures=2))
        assert decision.color == StatusColor.RED

    def test_empty_cohort_is_gray(self):
        decision = SimpleRatioPolicy().decide(CohortOutcome(total=0))
        assert decision.color == StatusColor.GRAY
        assert decision.is_verdict is False


class TestDualRatioPolicy:

    def test_yellow_boundary_is_inclusive(self):
        decision = DualRatioPolicy().decide(CohortOutcome(total=4, failures=1))
        assert decision.color == StatusColor.YELLOW
        assert decision.reason == "1 of 4 entities failed the quality gate check"

    def test_red_boundary_is_inclusive(self):
        decision = DualRatioPolicy().decide(CohortOutcome(total=4, failures=2))
        assert decision.color == StatusColor.RED

    def test_green(self):
        decision = DualRatioPolicy().decide(CohortOutcome(total=5, failures=1))
        assert decision.color == StatusColor.GREEN

    def test_custom_thresholds(self):
        policy = DualRatioPolicy(red_percent=80, yellow_percent=10)
        assert policy.decide(CohortOutcome(total=10, failures=5)).color == StatusColor.YELLOW

    def test_empty_cohort_is_gray(self):
        assert DualRatioPolicy().decide(CohortOutcome(total=0)).color == StatusColor.GRAY


class TestSeverityCountPolicy:

    def test_all_clear_is_green(self):
        outcome = CohortOutcome(total=3, tier_failures={"critical": 0, "high": 0, "medium": 0})
        decision = SeverityCountPolicy(TIERS).decide(outcome)
        assert decision.color == StatusColor.GREEN

    def test_single_critical_failure_is_red(self):
        outcome = CohortOutcome(total=10, tier_failures={"critical": 1})
        decision = SeverityCountPolicy(TIERS).decide(outcome)
        assert decision.color == StatusColor.RED
        assert "critical" in decision.reason

    def test_tier_over_percentage_is_red(self):
        # limit is 10 * 33 / 100 = 3.3
        outcome = CohortOutcome(total=10, tier_failures={"high": 4})
        assert SeverityCountPolicy(TIERS).decide(outcome).color == StatusColor.RED

    def test_tier_under_percentage_is_yellow(self):
        outcome = CohortOutcome(total=10, tier_failures={"high": 3, "medium": 1})
        decision = SeverityCountPolicy(TIERS).decide(outcome)
        assert decision.color == StatusColor.YELLOW
        assert decision.reason == "Some issues detected (high=3, medium=1)"

    def test_green_tiers_ignore_medium(self):
        policy = SeverityCountPolicy(TIERS, percentage=None, green_tiers=("critical", "high"))
        outcome = CohortOutcome(total=2, tier_failures={"medium": 2})
        assert policy.decide(outcome).color == StatusColor.GREEN

    def test_without_percentage_high_is_yellow(self):
        policy = SeverityCountPolicy(TIERS, percentage=None, green_tiers=("critical", "high"))
        outcome = CohortOutcome(total=2, tier_failures={"high": 2})
        assert policy.decide(outcome).color == StatusColor.YELLOW

    def test_empty_cohort_is_gray(self):
        assert SeverityCountPolicy(TIERS).decide(CohortOutcome(total=0)).color == StatusColor.GRAY


class TestThresholdCountPolicy:

    @staticmethod
    def policy():
        return ThresholdCountPolicy(
            red_limits=(
                TierLimit("critical", "Critical severity", 0),
                TierLimit("medium", "Medium severity", 0.5, per_entity=True),
            ),
            yellow_limits=(TierLimit("medium", "Medium severity", 0.1, per_entity=True),),
            green_reason="Nothing to report",
        )

    def test_per_entity_limit_scales(self):
        assert TierLimit("low", "Low", 0.2, per_entity=True).resolve(10) == 2.0
        assert TierLimit("critical", "Critical", 3).resolve(10) == 3

    def test_green(self):
        decision = self.policy().decide(CohortOutcome(total=4, tier_failures={"critical": 0}))
        assert decision.color == StatusColor.GREEN
        assert decision.reason == "Nothing to report"

    def test_red_limit_is_strict(self):
        decision = self.policy().decide(CohortOutcome(total=4, tier_failures={"medium": 2}))
        # 2 is not above 0.5 * 4
        assert decision.color == StatusColor.YELLOW

    def test_red_over_yellow(self):
        decision = self.policy().decide(
            CohortOutcome(total=4, tier_failures={"critical": 1, "medium": 3})
        )
        assert decision.color == StatusColor.RED
        assert decision.reason.splitlines() == [
            "Critical severity issues are exceeded by 1 repos, the threshold for this system is: 0",
            "Medium severity issues are exceeded by 3 repos, the threshold for this system is: 2",
        ]

    def test_yellow_reason(self):
        decision = self.policy().decide(CohortOutcome(total=10, tier_failures={"medium": 2}))
        assert decision.color == StatusColor.YELLOW
        assert decision.reason == (
            "Medium severity issues are exceeded by 2 repos, the threshold for this system is: 1"
        )

    def test_empty_cohort_is_gray(self):
        decision = self.policy().decide(CohortOutcome(total=0))
        assert decision.color == StatusColor.GRAY
