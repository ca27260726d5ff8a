"""
Freelancer metrics - cost-effectiveness ranking.
"""
from typing import Any, Dict, Optional

from shared.utils import round_half_up, to_float

PER_WORD_RATE = 'per_word'


def calculate_value_index(quality_score: Any, rate: Any) -> Optional[float]:
    """
    Value Index = quality_score^2 / (rate * 100), rounded to 2 decimals.

    Quality is rewarded quadratically while the rate penalises linearly, so a
    slightly better translator at a slightly higher rate still ranks higher.

    Args:
        quality_score: Combined quality score (0-100)
        rate: Per-word rate in USD

    Returns:
        Value index, or None unless both inputs are positive
    """
    score = to_float(quality_score)
    rate_value = to_float(rate)
    if not score or score <= 0 or not rate_value or rate_value <= 0:
        return None
    return round_half_up((score ** 2) / (rate_value * 100), 2)


def get_primary_rate(freelancer: Dict[str, Any]) -> Optional[float]:
    """
    Pick the rate used for value ranking.
    Prefers the first positive per-word rate, falling back to any positive rate.
    """
    rates = freelancer.get('rates') or []
    if not rates:
        return None

    for rate in rates:
        value = to_float(rate.get('rate_value'))
        if rate.get('rate_type') == PER_WORD_RATE and value and value > 0:
            return value

    for rate in rates:
        value = to_float(rate.get('rate_value'))
        if value and value > 0:
            return value

    return None
