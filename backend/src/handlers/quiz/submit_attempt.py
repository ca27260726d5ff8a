"""
Submit Quiz Attempt Handler.
Grades the caller's answers against the answer key, stores the attempt and
completes the matching assignment.
"""
import uuid
from shared.config import config
from shared.logging import logger, log_event
from shared.auth import get_current_user
from shared.dynamo import get_item, put_item, find_by, update_fields
from shared.errors import ConflictError, LifecycleError, NotFoundError, PermissionDeniedError, ValidationError
from shared.models import AssignmentStatus, AttemptStatus
from shared.quiz import complete_assignment, find_open_assignment, score_attempt
from shared.utils import format_response, error_response, parse_body, get_path_param, to_dynamo, to_float, to_iso, utc_now


def handler(event, context):
    """
    POST /quizzes/{quizId}/attempts
    Body: { "answers": { "<question_id>": "<answer>" | ["<label>", ...] }, "assignment_id"?: "..." }
    """
    log_event(event)

    try:
        user = get_current_user(event)
        if not user:
            return format_response(401, {'message': 'Unauthorized'})

        quiz_id = get_path_param(event, 'quizId')
        body = parse_body(event)
        answers = body.get('answers')
        if not quiz_id or not isinstance(answers, dict):
            raise ValidationError('quizId and answers are required')

        quiz = get_item(config.QUIZZES_TABLE, {'id': quiz_id})
        if not quiz:
            raise NotFoundError('Quiz not found')

        freelancer = find_freelancer_by_email(user['email'])
        if not freelancer:
            raise PermissionDeniedError('No freelancer profile for this account')

        assignment = resolve_assignment(body.get('assignment_id'), freelancer['id'], quiz_id)

        questions = load_questions(quiz_id)
        if not questions:
            raise ValidationError('Quiz has no questions')

        result = score_attempt(quiz, questions, answers)
        now = utc_now()
        attempt = {
            'id': str(uuid.uuid4()),
            'quiz_id': quiz_id,
            'freelancer_id': freelancer['id'],
            'assignment_id': assignment['id'] if assignment else None,
            'answers': result['per_question'],
            'score': result['score'],
            'total_possible': result['total_points'],
            'percentage': result['percentage'],
            'passed': result['passed'],
            'status': AttemptStatus.SUBMITTED,
            'completed_date': to_iso(now)
        }
        put_item(config.QUIZ_ATTEMPTS_TABLE, to_dynamo(attempt))

        if assignment:
            update_fields(
                config.QUIZ_ASSIGNMENTS_TABLE,
                {'id': assignment['id']},
                complete_assignment(attempt, now)
            )

        logger.info(
            f"Attempt {attempt['id']} on quiz {quiz_id} by {freelancer['id']}: "
            f"{result['percentage']}% passed={result['passed']}"
        )

        return format_response(201, {
            'message': 'Quiz submitted',
            'attempt_id': attempt['id'],
            'score': result['score'],
            'total_possible': result['total_points'],
            'percentage': result['percentage'],
            'passed': result['passed']
        })

    except LifecycleError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error submitting quiz attempt: {e}")
        return format_response(500, {'message': 'Internal Server Error'})


def find_freelancer_by_email(email: str):
    if not email:
        return None
    matches = find_by(config.FREELANCERS_TABLE, email=email)
    if not matches:
        matches = find_by(config.FREELANCERS_TABLE, email=email.strip().lower())
    return matches[0] if matches else None


def load_questions(quiz_id: str) -> list:
    """The quiz's questions in display order."""
    questions = find_by(config.QUESTIONS_TABLE, quiz_id=quiz_id)
    return sorted(questions, key=lambda q: to_float(q.get('order')) or 0)


def resolve_assignment(assignment_id, freelancer_id: str, quiz_id: str):
    """
    The assignment this attempt completes: the one named in the request, or the
    freelancer's open assignment for the quiz. Unassigned attempts are allowed.
    A completed assignment is never reopened.
    """
    if assignment_id:
        assignment = get_item(config.QUIZ_ASSIGNMENTS_TABLE, {'id': assignment_id})
        if not assignment:
            raise NotFoundError('Assignment not found')
        if assignment.get('freelancer_id') != freelancer_id or assignment.get('quiz_id') != quiz_id:
            raise PermissionDeniedError('Not authorized for this assignment')
        if assignment.get('status') == AssignmentStatus.COMPLETED:
            raise ConflictError('Assignment already completed')
        return assignment

    existing = find_by(config.QUIZ_ASSIGNMENTS_TABLE, freelancer_id=freelancer_id, quiz_id=quiz_id)
    return find_open_assignment(existing)
