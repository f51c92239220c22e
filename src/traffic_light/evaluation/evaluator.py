"""Threshold evaluator — compares one fact value against a resolved threshold.

Threshold resolution:
  - configuration value absent → no threshold (caller fails the check)
  - value starts with a finite number (leading whitespace allowed, trailing
    text ignored, so "80%" → 80.0) → float
  - anything else → the raw string, usable with equal / notEqual

Display values:
  - numbers, strings and booleans pass through unchanged
  - empty list → the empty list itself; non-empty list → comma-joined string
  - anything else (including a missing fact) → str(value)
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Union

from traffic_light.evaluation.diagnostics import Diagnostics
from traffic_light.evaluation.operators import get_operator, is_number

ResolvedThreshold = Union[float, str]

_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True)
class Evaluation:
    result: bool
    display_value: Any


def parse_leading_float(raw: str | None) -> float | None:
    """Longest numeric prefix of ``raw`` as a finite float, or None."""
    if not raw:
        return None
    match = _LEADING_FLOAT.match(raw)
    if match is None:
        return None
    number = float(match.group(1))
    return number if math.isfinite(number) else None


def resolve_threshold(raw: str | None) -> ResolvedThreshold | None:
    if raw is None:
        return None
    number = parse_leading_float(raw)
    return raw if number is None else number


def _join_element(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(_join_element(v) for v in value)
    return str(value)


def format_display_value(value: Any) -> Any:
    if is_number(value) or isinstance(value, (str, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [] if len(value) == 0 else _join_element(value)
    return str(value)


class ThresholdEvaluator:
    """Evaluates a raw fact value with a named operator."""

    def __init__(self, diagnostics: Diagnostics | None = None) -> None:
        self._diagnostics = diagnostics

    def evaluate(
        self,
        raw_value: Any,
        threshold: ResolvedThreshold | None,
        operator: str | None,
    ) -> Evaluation:
        display = format_display_value(raw_value)
        predicate = get_operator(operator)
        if predicate is None:
            if self._diagnostics is not None:
                self._diagnostics.info(f"Unknown operator {operator!r}, check evaluates to false")
            return Evaluation(result=False, display_value=display)
        if raw_value is None or threshold is None or isinstance(raw_value, (list, tuple)):
            return Evaluation(result=False, display_value=display)
        return Evaluation(result=predicate(raw_value, threshold), display_value=display)
