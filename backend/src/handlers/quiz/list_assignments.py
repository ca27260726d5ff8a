"""
List Quiz Assignments Handler.
Returns a freelancer's quiz assignments with the derived `is_overdue` flag.
"""
from shared.config import config
from shared.logging import logger, log_event
from shared.auth import get_current_user, can_view_freelancer
from shared.dynamo import get_item, find_by
from shared.errors import LifecycleError, NotFoundError, PermissionDeniedError
from shared.quiz import with_overdue_flag
from shared.utils import format_response, error_response, get_path_param, get_query_param, utc_now


def handler(event, context):
    """
    GET /freelancers/{freelancerId}/quiz-assignments?status=pending
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

        status = get_query_param(event, 'status')
        conditions = {'freelancer_id': freelancer_id}
        if status:
            conditions['status'] = status
        assignments = find_by(config.QUIZ_ASSIGNMENTS_TABLE, **conditions)

        now = utc_now()
        items = [with_overdue_flag(a, now) for a in assignments]
        items.sort(key=lambda a: a.get('created_date', ''), reverse=True)

        return format_response(200, {
            'assignments': items,
            'overdue_count': sum(1 for a in items if a['is_overdue'])
        })

    except LifecycleError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error listing quiz assignments: {e}")
        return format_response(500, {'message': 'Internal Server Error'})
