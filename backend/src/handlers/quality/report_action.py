"""
Quality Report Action Handler.
Moves a report through its review lifecycle: submit to translator, translator
accept / dispute, escalate to final review, and admin finalize.
"""
from botocore.exceptions import ClientError
from shared.config import config
from shared.logging import logger, log_event
from shared.auth import get_current_user
from shared.audit import log_action
from shared.dynamo import get_item, update_fields, is_conditional_failure
from shared.errors import ConflictError, LifecycleError, NotFoundError, ValidationError
from shared.models import AuditAction, ReportAction
from shared import notifications
from shared.report_lifecycle import require_comments, transition
from shared.settings import load_quality_settings
from shared.utils import format_response, error_response, parse_body, get_path_param, to_dynamo

ACTIONS = (
    ReportAction.SUBMIT,
    ReportAction.ACCEPT,
    ReportAction.DISPUTE,
    ReportAction.ESCALATE,
    ReportAction.FINALIZE,
)

MESSAGES = {
    ReportAction.SUBMIT: 'Report submitted for translator review',
    ReportAction.ACCEPT: 'Report accepted',
    ReportAction.DISPUTE: 'Report disputed and assigned for review',
    ReportAction.ESCALATE: 'Report moved to final review',
    ReportAction.FINALIZE: 'Report finalized',
}


def handler(event, context):
    """
    POST /quality/reports/{reportId}/actions
    Body: { "action": "submit" | "accept" | "dispute" | "escalate" | "finalize", "comments": "..." }
    """
    log_event(event)

    try:
        user = get_current_user(event)
        if not user:
            return format_response(401, {'message': 'Unauthorized'})

        report_id = get_path_param(event, 'reportId')
        if not report_id:
            raise ValidationError('Report ID required')

        body = parse_body(event)
        action = (body.get('action') or '').strip().lower()
        comments = body.get('comments')

        if action not in ACTIONS:
            raise ValidationError(f"Invalid action '{action}'")

        # Reject blank disputes before touching the store
        if action == ReportAction.DISPUTE:
            comments = require_comments(comments, 'Translator comments are required when disputing a report')

        report = get_item(config.QUALITY_REPORTS_TABLE, {'id': report_id})
        if not report:
            raise NotFoundError('Report not found')

        freelancer = get_item(config.FREELANCERS_TABLE, {'id': report.get('freelancer_id')}) or {}
        settings = load_quality_settings()

        updates = transition(report, action, user, settings, freelancer=freelancer, comments=comments)
        try:
            updated = update_fields(
                config.QUALITY_REPORTS_TABLE,
                {'id': report_id},
                to_dynamo(updates),
                expected={'status': report['status']} if report.get('status') else None
            )
        except ClientError as e:
            if is_conditional_failure(e):
                raise ConflictError('Report was updated by someone else; reload and try again')
            raise
        logger.info(f"Report {report_id}: {report.get('status')} -> {updates['status']} by {user['email']}")

        response = {
            'message': MESSAGES[action],
            'report': updated
        }
        response.update(_after_transition(action, report, updates, freelancer, user, settings))

        return format_response(200, response)

    except LifecycleError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error handling report action: {e}")
        return format_response(500, {'message': 'Internal Server Error'})


def _after_transition(action, report, updates, freelancer, user, settings) -> dict:
    """Notifications and audit entries for a committed transition."""
    report_id = report.get('id')
    audit_metadata = {
        'freelancer_id': report.get('freelancer_id'),
        'freelancer_name': freelancer.get('full_name'),
        'project_name': report.get('project_name'),
        'old_status': report.get('status'),
        'new_status': updates['status']
    }

    if action == ReportAction.SUBMIT:
        notifications.notify_review_required(
            report, freelancer, settings.dispute_period_days, updates['review_deadline']
        )
        log_action(user, AuditAction.QUALITY_REPORT_SUBMITTED, 'QualityReport', report_id, audit_metadata)
        return {'deadline': updates['review_deadline']}

    if action == ReportAction.DISPUTE:
        notified = notifications.notify_dispute(report, freelancer, updates['translator_comments'])
        log_action(user, AuditAction.QUALITY_REPORT_DISPUTED, 'QualityReport', report_id, audit_metadata)
        return {'reviewers_notified': notified}

    if action == ReportAction.ESCALATE:
        log_action(user, AuditAction.QUALITY_REPORT_ESCALATED, 'QualityReport', report_id, audit_metadata)
        return {}

    if action == ReportAction.FINALIZE:
        notifications.notify_final_decision(report, freelancer, updates['final_reviewer_comments'])
        audit_metadata['final_comments'] = updates['final_reviewer_comments']
        log_action(user, AuditAction.QUALITY_REPORT_FINALIZED, 'QualityReport', report_id, audit_metadata)
        return {}

    return {}
