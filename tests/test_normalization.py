"""
Tests for Percentage Normalization (defibuddy/services/normalization.py)
"""

import pytest
from decimal import Decimal

from defibuddy.exceptions import InvalidWeightError
from defibuddy.services.normalization import (
    contribution_shares,
    equal_split,
    normalize_items,
    normalize_weights,
    rescale_percentages,
    round_half_up,
)

pytestmark = pytest.mark.unit


class TestRoundHalfUp:

    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4

    def test_two_places(self):
        assert round_half_up(0.125, 2) == 0.13
        assert round_half_up(1234.565, 2) == 1234.57

    def test_below_half_rounds_down(self):
        assert round_half_up(33.333) == 33


class TestEqualSplit:

    def test_three_items(self):
        assert equal_split(3) == [34, 33, 33]

    def test_remainder_goes_to_first_items(self):
        assert equal_split(7) == [15, 15, 14, 14, 14, 14, 14]

    def test_zero_items(self):
        assert equal_split(0) == []


class TestNormalizeWeights:

    def test_empty(self):
        assert normalize_weights([]) == []

    def test_already_normalized_is_unchanged(self):
        assert normalize_weights([70, 20, 10]) == [70, 20, 10]

    def test_equal_weights(self):
        assert normalize_weights([1, 1, 1]) == [34, 33, 33]

    def test_all_zero_splits_evenly(self):
        assert normalize_weights([0, 0, 0]) == [34, 33, 33]
        assert normalize_weights([0, 0, 0, 0, 0, 0, 0]) == [15, 15, 14, 14, 14, 14, 14]

    def test_single_item(self):
        assert normalize_weights([0.0001]) == [100]

    def test_rounding_error_applied_to_first_item(self):
        assert normalize_weights([1, 1, 1, 1, 1, 1]) == [15, 17, 17, 17, 17, 17]

    def test_first_item_can_go_negative(self):
        # Whole correction lands on item 0 even when it is the smallest
        assert normalize_weights([0, 1, 1, 1, 1, 1, 1]) == [-2, 17, 17, 17, 17, 17, 17]

    @pytest.mark.parametrize("weights", [
        [40, 30, 20, 10],
        [100],
        [55, 28, 17, 0],
        [50, 50],
    ])
    def test_idempotent_on_normalized_lists(self, weights):
        assert normalize_weights(weights) == weights
        assert normalize_weights(normalize_weights(weights)) == weights

    @pytest.mark.parametrize("weights", [
        [3, 7],
        [0.2, 0.3, 0.5],
        [5000, 2500, 1500, 0],
        [1, 2, 3, 4, 5],
        [Decimal("250.50"), Decimal("100.00")],
    ])
    def test_sums_to_100(self, weights):
        assert sum(normalize_weights(weights)) == 100

    def test_preserves_order(self):
        assert normalize_weights([10, 30, 60]) == [10, 30, 60]

    @pytest.mark.parametrize("bad", [-1, float("nan"), float("inf"), "10", True, None])
    def test_rejects_invalid_weights(self, bad):
        with pytest.raises(InvalidWeightError) as exc_info:
            normalize_weights([10, bad])
        assert exc_info.value.details["index"] == 1
        assert exc_info.value.status_code == 400


class TestNormalizeItems:

    def test_replaces_weight_field(self):
        rows = normalize_items(
            [{"name": "Bitcoin", "weight": 3}, {"name": "Dogecoin", "weight": 1}],
            weight_attr="weight",
        )
        assert rows == [
            {"name": "Bitcoin", "percentage": 75},
            {"name": "Dogecoin", "percentage": 25},
        ]

    def test_does_not_mutate_input(self):
        items = [{"name": "Bitcoin", "percentage": 2}]
        normalize_items(items)
        assert items[0]["percentage"] == 2


class TestRescalePercentages:

    def test_integral_sum_100_kept(self):
        assert rescale_percentages([60, 40]) == [60, 40]

    def test_fractional_values_rescaled(self):
        result = rescale_percentages([33.3, 33.3, 33.4])
        assert result == [34, 33, 33]

    def test_short_total_rescaled(self):
        assert rescale_percentages([50, 30]) == [62, 38]

    def test_empty(self):
        assert rescale_percentages([]) == []


class TestContributionShares:

    def test_one_decimal_shares(self):
        assert contribution_shares([100, 200]) == [33.3, 66.7]

    def test_zero_total(self):
        assert contribution_shares([0, 0]) == [0.0, 0.0]

    def test_decimal_amounts(self):
        assert contribution_shares([Decimal("50.00"), Decimal("150.00")]) == [25.0, 75.0]
