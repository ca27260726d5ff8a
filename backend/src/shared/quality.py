"""
Quality score engine.

Pure functions over QualityReport records (plain dicts as stored in DynamoDB).
Blending rule, used everywhere a combined score is shown or stored:

    both scores : (avg_lqa * lqa_weight + avg_qs * qs_multiplier) / (lqa_weight + 1)
    LQA only    : avg_lqa
    QS only     : avg_qs * qs_multiplier
    neither     : None

QS is a 0-5 star rating; qs_multiplier puts it on LQA's 0-100 scale before blending.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from shared.config import config
from shared.models import AlertType, ReportStatus
from shared.settings import QualitySettings
from shared.utils import parse_datetime, round_half_up, to_float

# Reports that count towards a freelancer's rollups
ELIGIBLE_STATUSES = (ReportStatus.FINALIZED, ReportStatus.TRANSLATOR_ACCEPTED)

# Default weight for a severity missing from the settings table
UNKNOWN_SEVERITY_WEIGHT = 1.0


def is_eligible(report: Dict[str, Any]) -> bool:
    return report.get('status') in ELIGIBLE_STATUSES


def eligible_reports(reports: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [r for r in reports if is_eligible(r)]


def average(values: Iterable[Any]) -> Optional[float]:
    """Arithmetic mean of the non-null values; None when there are none."""
    numbers = [v for v in (to_float(x) for x in values) if v is not None]
    if not numbers:
        return None
    return sum(numbers) / len(numbers)


def combined_score(
    avg_lqa: Optional[float],
    avg_qs: Optional[float],
    settings: QualitySettings
) -> Optional[float]:
    """Blend an LQA score and a QS score into a single 0-100 value."""
    lqa = to_float(avg_lqa)
    qs = to_float(avg_qs)

    if lqa is not None and qs is not None:
        return ((lqa * settings.lqa_weight) + (qs * settings.qs_multiplier)) / (settings.lqa_weight + 1)
    if lqa is not None:
        return lqa
    if qs is not None:
        return qs * settings.qs_multiplier
    return None


def report_combined_score(report: Dict[str, Any], settings: QualitySettings) -> Optional[float]:
    """Combined score of a single report (report detail view)."""
    return combined_score(report.get('lqa_score'), report.get('qs_score'), settings)


def aggregate(reports: Iterable[Dict[str, Any]], settings: QualitySettings) -> Dict[str, Any]:
    """
    Roll up a freelancer's quality from their reports.

    Only finalized and translator-accepted reports are counted; drafts and
    open disputes are ignored.

    Returns:
        Dict with avg_lqa, avg_qs, combined_score and report_count
    """
    counted = eligible_reports(reports)
    avg_lqa = average(r.get('lqa_score') for r in counted)
    avg_qs = average(r.get('qs_score') for r in counted)

    return {
        'avg_lqa': avg_lqa,
        'avg_qs': avg_qs,
        'combined_score': combined_score(avg_lqa, avg_qs, settings),
        'report_count': len(counted)
    }


def calculate_lqa_from_errors(
    lqa_errors: Optional[List[Dict[str, Any]]],
    words_reviewed: Any,
    settings: QualitySettings
) -> Optional[float]:
    """
    Derive an LQA score from logged errors.

    Each error contributes count * severity weight; the total is normalised per
    1000 reviewed words and subtracted from 100 (floored at 0).

    Returns:
        Score rounded to one decimal, or None when no words were reviewed
    """
    words = to_float(words_reviewed)
    if not words or words <= 0:
        return None

    total_penalty = 0.0
    for error in lqa_errors or []:
        weight = settings.lqa_error_weights.get(error.get('severity'), UNKNOWN_SEVERITY_WEIGHT)
        total_penalty += (to_float(error.get('count')) or 0) * weight

    penalty_per_1000 = (total_penalty / words) * 1000
    return round_half_up(max(0.0, 100 - penalty_per_1000), 1)


def _report_sort_key(report: Dict[str, Any]):
    moment = parse_datetime(report.get('report_date')) or parse_datetime(report.get('created_date'))
    return moment or datetime.min.replace(tzinfo=timezone.utc)


def most_recent_lqa_reports(reports: Iterable[Dict[str, Any]], count: int) -> List[Dict[str, Any]]:
    """Most recent eligible reports carrying an LQA score, newest first."""
    with_lqa = [r for r in eligible_reports(reports) if to_float(r.get('lqa_score')) is not None]
    with_lqa.sort(key=_report_sort_key, reverse=True)
    return with_lqa[:count]


def check_quality_alerts(reports: Iterable[Dict[str, Any]], settings: QualitySettings) -> List[Dict[str, Any]]:
    """
    Decide which quality warnings a freelancer should receive.

    - low_combined_score: combined score under the probation threshold
    - consecutive_low_lqa: the last N LQA scores are all under the low-LQA threshold

    Freelancers with fewer than MIN_REPORTS_FOR_ALERT eligible reports get no alerts.
    """
    counted = eligible_reports(reports)
    min_reports = config.MIN_REPORTS_FOR_ALERT
    if len(counted) < min_reports:
        return []

    alerts = []
    summary = aggregate(counted, settings)
    score = summary['combined_score']
    if score is not None and score < settings.probation_threshold:
        alerts.append({
            'type': AlertType.LOW_COMBINED_SCORE,
            'score': score,
            'threshold': settings.probation_threshold,
            'total_assessments': len(counted)
        })

    recent = most_recent_lqa_reports(counted, min_reports)
    low_lqa = config.CONSECUTIVE_LOW_LQA_THRESHOLD
    if len(recent) >= min_reports and all(to_float(r['lqa_score']) < low_lqa for r in recent):
        alerts.append({
            'type': AlertType.CONSECUTIVE_LOW_LQA,
            'scores': [to_float(r['lqa_score']) for r in recent],
            'threshold': low_lqa
        })

    return alerts
