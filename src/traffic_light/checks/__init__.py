"""Check Runner — resolves component, owning group and facts, then evaluates checks."""

from traffic_light.checks.checker import DynamicThresholdChecker

__all__ = ["DynamicThresholdChecker"]
