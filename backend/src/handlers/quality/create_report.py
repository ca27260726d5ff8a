"""
Create Quality Report Handler.
Admins and PMs record an LQA or QS assessment for a freelancer. Reports start in draft.
"""
from shared.config import config
from shared.logging import logger, log_event
from shared.auth import get_current_user, can_manage_reports
from shared.dynamo import get_item, put_item
from shared.errors import LifecycleError, NotFoundError, PermissionDeniedError
from shared.quality import report_combined_score
from shared.report_lifecycle import build_draft_report
from shared.settings import load_quality_settings
from shared.utils import format_response, error_response, parse_body, to_dynamo


def handler(event, context):
    """
    POST /quality/reports
    Body: { "freelancer_id": "...", "report_type": "LQA" | "QS", "lqa_score"?, "qs_score"?,
            "lqa_errors"?: [...], "lqa_words_reviewed"?, "project_name"?, ... }
    """
    log_event(event)

    try:
        user = get_current_user(event)
        if not user:
            return format_response(401, {'message': 'Unauthorized'})
        if not can_manage_reports(user):
            raise PermissionDeniedError('Only admins and project managers can create reports')

        body = parse_body(event)
        settings = load_quality_settings()
        report = build_draft_report(body, user, settings)

        freelancer = get_item(config.FREELANCERS_TABLE, {'id': report['freelancer_id']})
        if not freelancer:
            raise NotFoundError('Freelancer not found')

        put_item(config.QUALITY_REPORTS_TABLE, to_dynamo(report))
        logger.info(f"Created {report['report_type']} report {report['id']} for freelancer {report['freelancer_id']}")

        return format_response(201, {
            'message': 'Report created',
            'report': report,
            'combined_score': report_combined_score(report, settings)
        })

    except LifecycleError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error creating quality report: {e}")
        return format_response(500, {'message': 'Internal Server Error'})
