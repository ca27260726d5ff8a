"""
Get Quality Report Handler.
Returns a report with its derived fields: combined score, overdue flag and the
actions the caller may take next.
"""
from shared.config import config
from shared.logging import logger, log_event
from shared.auth import get_current_user, can_view_freelancer
from shared.dynamo import get_item
from shared.errors import LifecycleError, NotFoundError, PermissionDeniedError
from shared.quality import report_combined_score
from shared.report_lifecycle import allowed_actions, is_report_overdue
from shared.settings import load_quality_settings
from shared.utils import format_response, error_response, get_path_param


def handler(event, context):
    """
    GET /quality/reports/{reportId}
    """
    log_event(event)

    try:
        user = get_current_user(event)
        if not user:
            return format_response(401, {'message': 'Unauthorized'})

        report_id = get_path_param(event, 'reportId')
        report = get_item(config.QUALITY_REPORTS_TABLE, {'id': report_id}) if report_id else None
        if not report:
            raise NotFoundError('Report not found')

        freelancer = get_item(config.FREELANCERS_TABLE, {'id': report.get('freelancer_id')})
        if not can_view_freelancer(user, freelancer):
            raise PermissionDeniedError('Not authorized for this report')

        settings = load_quality_settings()

        return format_response(200, {
            'report': report,
            'freelancer_name': (freelancer or {}).get('full_name'),
            'combined_score': report_combined_score(report, settings),
            'is_overdue': is_report_overdue(report),
            'allowed_actions': allowed_actions(report.get('status'), user, freelancer)
        })

    except LifecycleError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error getting report: {e}")
        return format_response(500, {'message': 'Internal Server Error'})
