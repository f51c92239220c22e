"""Threshold Evaluator — operators, threshold resolution, diagnostics."""

from traffic_light.evaluation.diagnostics import Diagnostics, LoggingDiagnostics, RecordingDiagnostics
from traffic_light.evaluation.evaluator import (
    Evaluation,
    ResolvedThreshold,
    ThresholdEvaluator,
    format_display_value,
    parse_leading_float,
    resolve_threshold,
)
from traffic_light.evaluation.operators import OPERATORS, get_operator

__all__ = [
    "Diagnostics",
    "Evaluation",
    "LoggingDiagnostics",
    "OPERATORS",
    "RecordingDiagnostics",
    "ResolvedThreshold",
    "ThresholdEvaluator",
    "format_display_value",
    "get_operator",
    "parse_leading_float",
    "resolve_threshold",
]
