"""Comparison operators — operator name to binary predicate.

Numeric operators need a numeric fact and a numeric threshold.
Equality operators accept numbers or strings and compare type-strictly:
a string fact never equals a numeric threshold, so ``notEqual`` holds
for such a pair while ``equal`` does not. Booleans are never comparable.
"""

from __future__ import annotations

import operator as _op
from typing import Any, Callable

Predicate = Callable[[Any, Any], bool]


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _comparable(value: Any) -> bool:
    return is_number(value) or isinstance(value, str)


def _numeric(compare: Callable[[Any, Any], bool]) -> Predicate:
    def predicate(raw: Any, threshold: Any) -> bool:
        return is_number(raw) and is_number(threshold) and compare(raw, threshold)

    return predicate


def _strict_equal(raw: Any, threshold: Any) -> bool:
    if is_number(raw) and is_number(threshold):
        return raw == threshold
    if isinstance(raw, str) and isinstance(threshold, str):
        return raw == threshold
    return False


def _equal(raw: Any, threshold: Any) -> bool:
    return _comparable(raw) and threshold is not None and _strict_equal(raw, threshold)


def _not_equal(raw: Any, threshold: Any) -> bool:
    return _comparable(raw) and threshold is not None and not _strict_equal(raw, threshold)


OPERATORS: dict[str, Predicate] = {
    "greaterThan": _numeric(_op.gt),
    "greaterThanInclusive": _numeric(_op.ge),
    "lessThan": _numeric(_op.lt),
    "lessThanInclusive": _numeric(_op.le),
    "equal": _equal,
    "notEqual": _not_equal,
}


def get_operator(name: str | None) -> Predicate | None:
    if name is None:
        return None
    return OPERATORS.get(name)
