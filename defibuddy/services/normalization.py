"""
Portfolio Percentage Normalization

Turns a list of non-negative weights into whole-number percentages that
sum to exactly 100. Shared by personality lookup, wallet lookup, chat
editing, the buddies ledger and deployment.

Rules:
- Empty input gives an empty output.
- All-zero weights split 100 evenly; the remainder goes one point at a
  time to the first items.
- Otherwise each share is rounded half-up and the whole rounding error
  is applied to the first item.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from numbers import Real
from typing import Iterable, List, Sequence

from ..exceptions import InvalidWeightError


def round_half_up(value: float, places: int = 0) -> float:
    """Round half away from zero for non-negative values (2.5 -> 3, 0.125 -> 0.13)"""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _check_weights(weights: Sequence) -> List[float]:
    checked = []
    for index, weight in enumerate(weights):
        if isinstance(weight, bool) or not isinstance(weight, (Real, Decimal)):
            raise InvalidWeightError(index, weight)
        value = float(weight)
        if not math.isfinite(value) or value < 0:
            raise InvalidWeightError(index, weight)
        checked.append(value)
    return checked


def equal_split(n: int) -> List[int]:
    """100 split over n items, first items absorbing the remainder"""
    if n <= 0:
        return []
    base, remainder = divmod(100, n)
    return [base + 1 if i < remainder else base for i in range(n)]


def normalize_weights(weights: Sequence) -> List[int]:
    """
    Normalize weights to integer percentages summing to 100.

    Args:
        weights: Non-negative finite numbers

    Returns:
        Percentages aligned index-for-index with the input

    Raises:
        InvalidWeightError: a weight is negative, NaN, infinite or not a number

    Examples:
        [70, 20, 10] -> [70, 20, 10]
        [1, 1, 1] -> [34, 33, 33]
        [0, 0, 0] -> [34, 33, 33]
    """
    values = _check_weights(weights)
    n = len(values)
    if n == 0:
        return []

    total = sum(values)
    if total == 0:
        return equal_split(n)

    percentages = [int(round_half_up(v / total * 100)) for v in values]

    # Single-point correction; with many near-ties this can push item 0 below zero
    percentages[0] += 100 - sum(percentages)
    return percentages


def normalize_items(items: Iterable, weight_attr: str = 'percentage') -> List[dict]:
    """
    Normalize a list of dicts (or objects) carrying a weight field.

    Returns new dicts with the weight replaced by the integer percentage.
    """
    rows = [dict(item) if isinstance(item, dict) else dict(vars(item)) for item in items]
    percentages = normalize_weights([row.get(weight_attr, 0) for row in rows])
    for row, pct in zip(rows, percentages):
        row['percentage'] = pct
        if weight_attr != 'percentage':
            row.pop(weight_attr, None)
    return rows


def rescale_percentages(percentages: Sequence, tolerance: float = 0.5) -> List[int]:
    """
    Repair percentages returned by a model that should already sum to 100.

    Integral values within `tolerance` of 100 are kept as-is; anything
    else is rescaled by 100/total with the remainder on the first item.
    """
    values = _check_weights(percentages)
    if not values:
        return []

    total = sum(values)
    integral = all(v == int(v) for v in values)
    if integral and abs(total - 100) <= tolerance:
        return [int(v) for v in values]

    return normalize_weights(values)


def contribution_shares(amounts: Sequence) -> List[float]:
    """Each amount's share of the total, in percent with one decimal (0.0 when the total is 0)"""
    values = _check_weights(amounts)
    total = sum(values)
    if total == 0:
        return [0.0 for _ in values]
    return [round_half_up(v / total * 100, 1) for v in values]
