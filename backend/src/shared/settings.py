"""
Quality settings: the tenant-editable knobs for score blending, dispute windows and alerting.

Scoring functions receive a QualitySettings instance explicitly; only handlers
load it from DynamoDB.
"""
import math
from typing import Any, Dict, Optional

from shared.config import config
from shared.dynamo import get_item
from shared.errors import ValidationError
from shared.utils import to_decimal, to_float

SETTINGS_KEY = 'default'

DEFAULT_LQA_WEIGHT = 4.0
DEFAULT_QS_MULTIPLIER = 20.0
DEFAULT_DISPUTE_PERIOD_DAYS = 7
DEFAULT_PROBATION_THRESHOLD = 70.0
DEFAULT_LQA_ERROR_WEIGHTS = {
    'Critical': 10.0,
    'Major': 5.0,
    'Minor': 2.0,
    'Preferential': 0.5,
}

NUMERIC_FIELDS = ('lqa_weight', 'qs_multiplier', 'dispute_period_days', 'probation_threshold')


def _required_number(name: str, value: Any) -> float:
    number = None if isinstance(value, bool) else to_float(value)
    if number is None or not math.isfinite(number):
        raise ValidationError(f"{name} must be a number")
    return number


class QualitySettings:
    """Immutable-by-convention settings value."""

    def __init__(
        self,
        lqa_weight: float = DEFAULT_LQA_WEIGHT,
        qs_multiplier: float = DEFAULT_QS_MULTIPLIER,
        dispute_period_days: int = DEFAULT_DISPUTE_PERIOD_DAYS,
        probation_threshold: float = DEFAULT_PROBATION_THRESHOLD,
        lqa_error_weights: Optional[Dict[str, float]] = None
    ):
        self.lqa_weight = lqa_weight
        self.qs_multiplier = qs_multiplier
        self.dispute_period_days = dispute_period_days
        self.probation_threshold = probation_threshold
        self.lqa_error_weights = dict(lqa_error_weights or DEFAULT_LQA_ERROR_WEIGHTS)

    @classmethod
    def from_item(cls, item: Optional[Dict[str, Any]]) -> 'QualitySettings':
        """Build settings from a stored record, falling back to defaults per field."""
        if not item:
            return cls()

        def _number(key, default):
            value = to_float(item.get(key))
            return default if value is None else value

        weights = item.get('lqa_error_weights') or {}
        error_weights = dict(DEFAULT_LQA_ERROR_WEIGHTS)
        for severity, weight in weights.items():
            value = to_float(weight)
            if value is not None:
                error_weights[severity] = value

        return cls(
            lqa_weight=_number('lqa_weight', DEFAULT_LQA_WEIGHT),
            qs_multiplier=_number('qs_multiplier', DEFAULT_QS_MULTIPLIER),
            dispute_period_days=int(_number('dispute_period_days', DEFAULT_DISPUTE_PERIOD_DAYS)),
            probation_threshold=_number('probation_threshold', DEFAULT_PROBATION_THRESHOLD),
            lqa_error_weights=error_weights
        )

    def validate(self) -> None:
        if self.lqa_weight < 0:
            raise ValidationError('lqa_weight must be zero or greater')
        if self.qs_multiplier <= 0:
            raise ValidationError('qs_multiplier must be greater than zero')
        if self.dispute_period_days < 1:
            raise ValidationError('dispute_period_days must be at least 1')
        if not 0 <= self.probation_threshold <= 100:
            raise ValidationError('probation_threshold must be between 0 and 100')
        for severity, weight in self.lqa_error_weights.items():
            if weight < 0:
                raise ValidationError(f"Error weight for {severity} must be zero or greater")

    def with_changes(self, changes: Dict[str, Any]) -> 'QualitySettings':
        """
        Apply an admin's partial update on top of these settings.

        Unlike `from_item`, bad input is rejected rather than replaced by a default.
        Fields absent from `changes` (or null) keep their current value; error
        weights are merged per severity.

        Raises:
            ValidationError: non-numeric value, fractional dispute_period_days,
                non-object lqa_error_weights, or a value out of range
        """
        if not isinstance(changes, dict):
            raise ValidationError('Settings update must be an object')

        merged = self.to_dict()
        for field in NUMERIC_FIELDS:
            if changes.get(field) is not None:
                merged[field] = _required_number(field, changes[field])

        days = merged['dispute_period_days']
        if days != int(days):
            raise ValidationError('dispute_period_days must be a whole number of days')
        merged['dispute_period_days'] = int(days)

        weights = changes.get('lqa_error_weights')
        if weights is not None:
            if not isinstance(weights, dict):
                raise ValidationError('lqa_error_weights must be an object of severity to weight')
            for severity, weight in weights.items():
                merged['lqa_error_weights'][severity] = _required_number(f"Error weight for {severity}", weight)

        updated = QualitySettings(**merged)
        updated.validate()
        return updated

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lqa_weight': self.lqa_weight,
            'qs_multiplier': self.qs_multiplier,
            'dispute_period_days': self.dispute_period_days,
            'probation_threshold': self.probation_threshold,
            'lqa_error_weights': dict(self.lqa_error_weights),
        }

    def to_item(self) -> Dict[str, Any]:
        """DynamoDB representation (numbers as Decimal)."""
        return {
            'setting_key': SETTINGS_KEY,
            'lqa_weight': to_decimal(self.lqa_weight),
            'qs_multiplier': to_decimal(self.qs_multiplier),
            'dispute_period_days': self.dispute_period_days,
            'probation_threshold': to_decimal(self.probation_threshold),
            'lqa_error_weights': {k: to_decimal(v) for k, v in self.lqa_error_weights.items()},
        }


def load_quality_settings() -> QualitySettings:
    """Read the tenant's settings record; defaults when absent."""
    item = get_item(config.QUALITY_SETTINGS_TABLE, {'setting_key': SETTINGS_KEY})
    return QualitySettings.from_item(item)
