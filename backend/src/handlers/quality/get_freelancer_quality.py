"""
Freelancer Quality Summary Handler.
Aggregates a freelancer's finalized and accepted reports into average LQA,
average QS and the combined score.
"""
from shared.config import config
from shared.logging import logger, log_event
from shared.auth import get_current_user, can_view_freelancer
from shared.dynamo import get_item, find_by
from shared.errors import LifecycleError, NotFoundError, PermissionDeniedError
from shared.quality import aggregate
from shared.report_lifecycle import is_report_overdue
from shared.settings import load_quality_settings
from shared.utils import format_response, error_response, get_path_param, utc_now


def handler(event, context):
    """
    GET /freelancers/{freelancerId}/quality
    """
    log_event(event)

    try:
        user = get_current_user(event)
        if not user:
            return format_response(401, {'message': 'Unauthorized'})

        freelancer_id = get_path_param(event, 'freelancerId')
        freelancer = get_item(config.FREELANCERS_TABLE, {'id': freelancer_id}) if freelancer_id else None
        if not freelancer:
            raise NotFoundError('Freelancer not found')
        if not can_view_freelancer(user, freelancer):
            raise PermissionDeniedError('Not authorized for this freelancer')

        reports = find_by(config.QUALITY_REPORTS_TABLE, freelancer_id=freelancer_id)
        settings = load_quality_settings()
        summary = aggregate(reports, settings)

        now = utc_now()
        status_counts = {}
        for report in reports:
            status = report.get('status')
            status_counts[status] = status_counts.get(status, 0) + 1

        summary.update({
            'freelancer_id': freelancer_id,
            'total_reports': len(reports),
            'status_counts': status_counts,
            'overdue_reviews': sum(1 for r in reports if is_report_overdue(r, now))
        })

        return format_response(200, summary)

    except LifecycleError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error building quality summary: {e}")
        return format_response(500, {'message': 'Internal Server Error'})
