"""
Import Quality Reports Handler.
Bulk-loads historical assessments. Imported reports skip translator review and
are stored directly as finalized.
"""
from shared.config import config
from shared.logging import logger, log_event
from shared.auth import get_current_user, can_manage_reports
from shared.audit import log_action
from shared.dynamo import batch_write_items, get_item
from shared.errors import LifecycleError, PermissionDeniedError, ValidationError
from shared.models import AuditAction, ReportAction
from shared.report_lifecycle import build_draft_report, transition
from shared.settings import load_quality_settings
from shared.utils import format_response, error_response, parse_body, to_dynamo

MAX_IMPORT_ROWS = 500


def handler(event, context):
    """
    POST /quality/reports/import
    Body: { "reports": [ { "freelancer_id": "...", "report_type": "LQA", "lqa_score": 85.5, ... } ] }
    """
    log_event(event)

    try:
        user = get_current_user(event)
        if not user:
            return format_response(401, {'message': 'Unauthorized'})
        if not can_manage_reports(user):
            raise PermissionDeniedError('Only admins and project managers can import reports')

        rows = parse_body(event).get('reports') or []
        if not rows:
            raise ValidationError('No reports provided')
        if len(rows) > MAX_IMPORT_ROWS:
            raise ValidationError(f"At most {MAX_IMPORT_ROWS} reports per import")

        settings = load_quality_settings()
        results = {'success': 0, 'failed': 0, 'errors': []}
        items = []
        known_freelancers = {}

        for index, row in enumerate(rows):
            label = row.get('freelancer_name') or row.get('freelancer_id') or f"row {index + 1}"
            try:
                report = build_draft_report(row, user, settings)
                freelancer_id = report['freelancer_id']
                if freelancer_id not in known_freelancers:
                    known_freelancers[freelancer_id] = get_item(config.FREELANCERS_TABLE, {'id': freelancer_id}) is not None
                if not known_freelancers[freelancer_id]:
                    raise ValidationError('No matching freelancer found')

                report.update(transition(report, ReportAction.IMPORT, user, settings))
                items.append(to_dynamo(report))
            except ValidationError as e:
                results['failed'] += 1
                results['errors'].append(f"{label}: {e.message}")

        if items:
            results['success'] = batch_write_items(config.QUALITY_REPORTS_TABLE, items)

        log_action(user, AuditAction.QUALITY_REPORTS_IMPORTED, 'QualityReport', 'bulk', {
            'imported': results['success'],
            'failed': results['failed']
        })
        logger.info(f"Imported {results['success']} quality reports, {results['failed']} failed")

        return format_response(200, {
            'message': f"Imported {results['success']} reports",
            'results': results
        })

    except LifecycleError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error importing quality reports: {e}")
        return format_response(500, {'message': 'Failed to import reports'})
