"""
Quality report review/dispute lifecycle.

    draft --submit--> pending_translator_review --accept--> translator_accepted
                                                --dispute--> translator_disputed --escalate--> pending_final_review
                                                             translator_disputed | pending_final_review --finalize--> finalized
    draft --import--> finalized   (historical data, skips review)

`transition` never touches storage: it validates the request and returns the
fields the caller must persist.
"""
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from shared.auth import can_finalize_reports, can_manage_reports, can_review_as_translator
from shared.errors import InvalidTransitionError, PermissionDeniedError, ValidationError
from shared.models import ReportAction, ReportStatus, ReportType, Severity
from shared.quality import calculate_lqa_from_errors
from shared.settings import QualitySettings
from shared.utils import parse_datetime, to_float, to_iso, utc_now

# Statuses in which the translator is expected to respond
AWAITING_TRANSLATOR = (ReportStatus.SUBMITTED, ReportStatus.PENDING_TRANSLATOR_REVIEW)

SEVERITIES = (Severity.CRITICAL, Severity.MAJOR, Severity.MINOR, Severity.PREFERENTIAL)

# Optional descriptive fields copied verbatim from a create request
METADATA_FIELDS = (
    'project_name', 'client_account', 'source_language', 'target_language',
    'content_type', 'job_type', 'report_date', 'reviewer_comments'
)

# (current status, action) -> next status
TRANSITIONS = {
    (ReportStatus.DRAFT, ReportAction.SUBMIT): ReportStatus.PENDING_TRANSLATOR_REVIEW,
    (ReportStatus.DRAFT, ReportAction.IMPORT): ReportStatus.FINALIZED,
    (ReportStatus.SUBMITTED, ReportAction.ACCEPT): ReportStatus.TRANSLATOR_ACCEPTED,
    (ReportStatus.SUBMITTED, ReportAction.DISPUTE): ReportStatus.TRANSLATOR_DISPUTED,
    (ReportStatus.PENDING_TRANSLATOR_REVIEW, ReportAction.ACCEPT): ReportStatus.TRANSLATOR_ACCEPTED,
    (ReportStatus.PENDING_TRANSLATOR_REVIEW, ReportAction.DISPUTE): ReportStatus.TRANSLATOR_DISPUTED,
    (ReportStatus.TRANSLATOR_DISPUTED, ReportAction.ESCALATE): ReportStatus.PENDING_FINAL_REVIEW,
    (ReportStatus.TRANSLATOR_DISPUTED, ReportAction.FINALIZE): ReportStatus.FINALIZED,
    (ReportStatus.PENDING_FINAL_REVIEW, ReportAction.FINALIZE): ReportStatus.FINALIZED,
}


def has_score(report: Dict[str, Any]) -> bool:
    return to_float(report.get('lqa_score')) is not None or to_float(report.get('qs_score')) is not None


def next_status(current_status: str, action: str) -> str:
    """Look up the target state, or raise InvalidTransitionError."""
    try:
        return TRANSITIONS[(current_status, action)]
    except KeyError:
        raise InvalidTransitionError(current_status, action)


def require_comments(comments: Optional[str], message: str) -> str:
    if comments is None or not str(comments).strip():
        raise ValidationError(message)
    return str(comments).strip()


def _check_manager(user, freelancer, action):
    if not can_manage_reports(user):
        raise PermissionDeniedError(f"Only admins and project managers can {action} reports")


def _check_translator(user, freelancer, action):
    if not can_review_as_translator(user, freelancer):
        raise PermissionDeniedError(f"Only the assessed translator can {action} this report")


def _check_admin(user, freelancer, action):
    if not can_finalize_reports(user):
        raise PermissionDeniedError(f"Only admins can {action} reports")


PERMISSION_CHECKS: Dict[str, Callable] = {
    ReportAction.SUBMIT: _check_manager,
    ReportAction.IMPORT: _check_manager,
    ReportAction.ESCALATE: _check_manager,
    ReportAction.ACCEPT: _check_translator,
    ReportAction.DISPUTE: _check_translator,
    ReportAction.FINALIZE: _check_admin,
}


def allowed_actions(status: Optional[str], user: Optional[dict], freelancer: Optional[dict] = None) -> list:
    """
    Review actions `user` may take on a report in `status`.
    Import is a bulk path, never offered on a single report.
    """
    current = status or ReportStatus.DRAFT
    actions = []
    for (state, action) in TRANSITIONS:
        if state != current or action == ReportAction.IMPORT:
            continue
        try:
            PERMISSION_CHECKS[action](user, freelancer, action)
        except PermissionDeniedError:
            continue
        actions.append(action)
    return actions


def transition(
    report: Dict[str, Any],
    action: str,
    user: Optional[dict],
    settings: QualitySettings,
    freelancer: Optional[dict] = None,
    comments: Optional[str] = None,
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Apply `action` to `report` on behalf of `user`.

    Args:
        report: Current report record
        action: One of ReportAction
        user: Acting user {id, email, role}
        settings: Injected quality settings (dispute window)
        freelancer: The assessed freelancer (needed for translator actions)
        comments: Dispute / final review comments
        now: Clock override

    Returns:
        Dict of fields to persist, including the new `status`

    Raises:
        InvalidTransitionError: action not allowed from the current status
        PermissionDeniedError: user may not perform the action
        ValidationError: missing dispute comments or no score on a draft
    """
    current = report.get('status') or ReportStatus.DRAFT
    target = next_status(current, action)
    PERMISSION_CHECKS[action](user, freelancer, action)

    now = now or utc_now()
    updates: Dict[str, Any] = {'status': target}

    if current == ReportStatus.DRAFT and not has_score(report):
        raise ValidationError('A report needs an LQA or QS score before it leaves draft')

    if action == ReportAction.SUBMIT:
        deadline = now + timedelta(days=settings.dispute_period_days)
        updates['submission_date'] = to_iso(now)
        updates['review_deadline'] = to_iso(deadline)

    elif action == ReportAction.ACCEPT:
        updates['finalization_date'] = to_iso(now)

    elif action == ReportAction.DISPUTE:
        updates['translator_comments'] = require_comments(
            comments, 'Translator comments are required when disputing a report'
        )

    elif action == ReportAction.ESCALATE:
        if comments and str(comments).strip():
            updates['final_reviewer_comments'] = str(comments).strip()

    elif action == ReportAction.FINALIZE:
        updates['final_reviewer_comments'] = (comments or '').strip()
        updates['finalization_date'] = to_iso(now)

    elif action == ReportAction.IMPORT:
        updates['imported'] = True
        updates['finalization_date'] = to_iso(now)

    return updates


def _score_field(body: Dict[str, Any], field: str, upper: float) -> Optional[float]:
    raw = body.get(field)
    if raw is None or raw == '':
        return None
    value = to_float(raw)
    if value is None or not 0 <= value <= upper:
        raise ValidationError(f"{field} must be a number between 0 and {upper:g}")
    return value


def _error_entries(body: Dict[str, Any]) -> list:
    entries = []
    for entry in body.get('lqa_errors') or []:
        severity = entry.get('severity')
        if severity not in SEVERITIES:
            raise ValidationError(f"Invalid severity '{severity}'")
        count = to_float(entry.get('count'))
        if count is None or count < 0:
            raise ValidationError('Error count must be zero or greater')
        entries.append({
            'error_type': entry.get('error_type', ''),
            'severity': severity,
            'count': int(count),
            'examples': entry.get('examples', '')
        })
    return entries


def build_draft_report(
    body: Dict[str, Any],
    user: dict,
    settings: QualitySettings,
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Validate a create request and assemble a draft report.
    LQA reports logged as errors without an explicit score get one derived from the errors.
    """
    freelancer_id = body.get('freelancer_id')
    if not freelancer_id:
        raise ValidationError('freelancer_id is required')

    report_type = str(body.get('report_type') or '').upper()
    if report_type not in (ReportType.LQA, ReportType.QS):
        raise ValidationError('report_type must be LQA or QS')

    lqa_errors = _error_entries(body)
    words_reviewed = to_float(body.get('lqa_words_reviewed'))
    lqa_score = _score_field(body, 'lqa_score', 100)
    qs_score = _score_field(body, 'qs_score', 5)

    if report_type == ReportType.LQA and lqa_score is None and lqa_errors:
        lqa_score = calculate_lqa_from_errors(lqa_errors, words_reviewed, settings)

    report = {
        'id': str(uuid.uuid4()),
        'freelancer_id': freelancer_id,
        'report_type': report_type,
        'lqa_score': lqa_score,
        'qs_score': qs_score,
        'lqa_errors': lqa_errors,
        'status': ReportStatus.DRAFT,
        'reviewer_id': user.get('id', ''),
        'created_date': to_iso(now or utc_now())
    }
    if words_reviewed is not None:
        report['lqa_words_reviewed'] = int(words_reviewed)
    for field in METADATA_FIELDS:
        if body.get(field):
            report[field] = body[field]
    return report


def is_report_overdue(report: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    """
    A report awaiting the translator past its review deadline.
    Derived on read; never stored and never moves the report.
    """
    if report.get('status') not in AWAITING_TRANSLATOR:
        return False
    deadline = parse_datetime(report.get('review_deadline'))
    if deadline is None:
        return False
    return (now or utc_now()) > deadline
