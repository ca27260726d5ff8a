"""
Tests for the freelancer value index.
"""
from decimal import Decimal

import pytest


class TestValueIndex:
    """Tests for calculate_value_index function."""

    def test_quality_squared_over_rate(self):
        """80² / (0.10 * 100) = 640."""
        from shared.metrics import calculate_value_index

        assert calculate_value_index(80, 0.10) == pytest.approx(640.0)

    def test_rounds_to_two_decimals(self):
        """88² / 7 = 1106.2857…"""
        from shared.metrics import calculate_value_index

        assert calculate_value_index(88, 0.07) == 1106.29

    def test_accepts_dynamodb_decimals(self):
        """Decimal inputs from DynamoDB are accepted."""
        from shared.metrics import calculate_value_index

        assert calculate_value_index(Decimal('90'), Decimal('0.09')) == pytest.approx(900.0)

    @pytest.mark.parametrize('score,rate', [
        (None, 0.1),
        (80, None),
        (0, 0.1),
        (80, 0),
        (-5, 0.1),
        (80, -0.1),
    ])
    def test_requires_positive_inputs(self, score, rate):
        """Missing or non-positive inputs give no index."""
        from shared.metrics import calculate_value_index

        assert calculate_value_index(score, rate) is None


class TestPrimaryRate:
    """Tests for picking the freelancer's primary rate."""

    def test_prefers_per_word_rate(self):
        """A per-word rate wins over other units."""
        from shared.metrics import get_primary_rate

        freelancer = {'rates': [
            {'rate_type': 'hourly', 'rate_value': '35'},
            {'rate_type': 'per_word', 'rate_value': Decimal('0.08')},
        ]}
        assert get_primary_rate(freelancer) == pytest.approx(0.08)

    def test_falls_back_to_first_positive_rate(self):
        """Without a per-word rate the first positive rate is used."""
        from shared.metrics import get_primary_rate

        freelancer = {'rates': [
            {'rate_type': 'per_word', 'rate_value': '0'},
            {'rate_type': 'hourly', 'rate_value': '40'},
        ]}
        assert get_primary_rate(freelancer) == pytest.approx(40.0)

    def test_no_rates(self):
        from shared.metrics import get_primary_rate

        assert get_primary_rate({}) is None
        assert get_primary_rate({'rates': [{'rate_type': 'per_word', 'rate_value': ''}]}) is None
