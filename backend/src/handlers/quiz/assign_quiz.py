"""
Assign Quiz Handler.
Assigns a quiz to one or more freelancers with an optional deadline and emails them.
A freelancer with an open assignment for the same quiz keeps it (deadline refreshed);
completed assignments allow a retake.
"""
from shared.config import config
from shared.logging import logger, log_event
from shared.auth import get_current_user, can_assign_quizzes
from shared.dynamo import get_item, put_item, find_by, update_fields
from shared.errors import LifecycleError, NotFoundError, PermissionDeniedError, ValidationError
from shared import notifications
from shared.quiz import build_assignment, find_open_assignment
from shared.utils import format_response, error_response, parse_body, get_path_param, parse_datetime


def handler(event, context):
    """
    POST /quizzes/{quizId}/assignments
    Body: { "freelancer_ids": ["..."], "deadline": "2024-02-01", "notes": "..." }
    """
    log_event(event)

    try:
        user = get_current_user(event)
        if not user:
            return format_response(401, {'message': 'Unauthorized'})
        if not can_assign_quizzes(user):
            raise PermissionDeniedError('Forbidden: Admin or Project Manager access required')

        quiz_id = get_path_param(event, 'quizId')
        body = parse_body(event)
        freelancer_ids = body.get('freelancer_ids') or []
        if isinstance(freelancer_ids, str):
            freelancer_ids = [freelancer_ids]
        deadline = body.get('deadline') or None
        notes = body.get('notes', '')

        if not quiz_id or not freelancer_ids:
            raise ValidationError('quizId and freelancer_ids are required')
        if deadline and parse_datetime(deadline) is None:
            raise ValidationError(f"Invalid deadline: {deadline}")

        quiz = get_item(config.QUIZZES_TABLE, {'id': quiz_id})
        if not quiz:
            raise NotFoundError('Quiz not found')

        results = {'assigned': [], 'reused': [], 'not_found': [], 'emails_sent': 0}

        for freelancer_id in freelancer_ids:
            freelancer = get_item(config.FREELANCERS_TABLE, {'id': freelancer_id})
            if not freelancer:
                results['not_found'].append(freelancer_id)
                continue

            assignment, created = assign(freelancer_id, quiz_id, deadline, user['email'], notes)
            results['assigned' if created else 'reused'].append(assignment['id'])

            if notifications.notify_quiz_assigned(freelancer, quiz, deadline):
                results['emails_sent'] += 1

        logger.info(
            f"Quiz {quiz_id}: {len(results['assigned'])} assigned, "
            f"{len(results['reused'])} reused, {len(results['not_found'])} not found"
        )

        return format_response(200, {
            'message': f"Assigned {len(results['assigned'])} quizzes",
            'assigned_count': len(results['assigned']),
            'results': results
        })

    except LifecycleError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error assigning quiz: {e}")
        return format_response(500, {'message': 'Internal Server Error'})


def assign(freelancer_id: str, quiz_id: str, deadline, assigned_by: str, notes: str = ''):
    """
    Upsert the (freelancer, quiz) assignment.

    Returns:
        tuple: (assignment, created)
    """
    existing = find_by(config.QUIZ_ASSIGNMENTS_TABLE, freelancer_id=freelancer_id, quiz_id=quiz_id)
    open_assignment = find_open_assignment(existing)

    if open_assignment:
        if deadline and deadline != open_assignment.get('deadline'):
            open_assignment = update_fields(
                config.QUIZ_ASSIGNMENTS_TABLE, {'id': open_assignment['id']}, {'deadline': deadline}
            )
        return open_assignment, False

    assignment = build_assignment(freelancer_id, quiz_id, deadline, assigned_by, notes)
    put_item(config.QUIZ_ASSIGNMENTS_TABLE, assignment)
    return assignment, True
