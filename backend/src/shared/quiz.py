"""
Quiz engine: grading attempts and assignment bookkeeping.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from shared.models import AssignmentStatus
from shared.utils import parse_datetime, round_half_up, to_float, to_iso, utc_now

# Multi-select category questions store their correct set as "Accuracy|Punctuation"
MULTI_ANSWER_SEPARATOR = '|'


def _answer_set(value: Any) -> frozenset:
    if isinstance(value, (list, tuple, set, frozenset)):
        parts = value
    else:
        parts = str(value).split(MULTI_ANSWER_SEPARATOR)
    return frozenset(str(p).strip() for p in parts if str(p).strip())


def is_multi_select(question: Dict[str, Any]) -> bool:
    return MULTI_ANSWER_SEPARATOR in str(question.get('correct_answer') or '')


def is_answer_correct(question: Dict[str, Any], submitted: Any) -> bool:
    """
    Single-answer questions: exact, case-sensitive match against the stored answer.
    Multi-select questions: the submitted set must equal the correct set (order
    ignored); a partial selection earns nothing.
    """
    correct = question.get('correct_answer')
    if submitted is None or correct is None:
        return False

    if is_multi_select(question):
        chosen = _answer_set(submitted)
        return bool(chosen) and chosen == _answer_set(correct)

    if isinstance(submitted, (list, tuple)):
        return False
    return str(submitted) == str(correct)


def question_points(question: Dict[str, Any]) -> float:
    return to_float(question.get('points')) or 0.0


def score_attempt(
    quiz: Dict[str, Any],
    questions: List[Dict[str, Any]],
    answers: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Grade a submitted attempt.

    Args:
        quiz: Quiz record (passing_score is a percentage)
        questions: The quiz's questions, in display order
        answers: question_id -> submitted answer

    Returns:
        Dict with score, total_points, percentage, passed and per_question results.
        `passed` is None when the quiz has no passing score.
    """
    answers = answers or {}
    per_question = []
    score = 0.0
    total_points = 0.0

    for question in questions:
        question_id = question.get('id')
        points = question_points(question)
        submitted = answers.get(question_id)
        correct = is_answer_correct(question, submitted)
        earned = points if correct else 0.0

        total_points += points
        score += earned
        per_question.append({
            'question_id': question_id,
            'user_answer': submitted,
            'is_correct': correct,
            'points_earned': earned
        })

    if total_points > 0:
        percentage = int(round_half_up(score / total_points * 100))
    else:
        percentage = 0

    passing_score = to_float(quiz.get('passing_score'))
    passed = None if passing_score is None else percentage >= passing_score

    return {
        'score': score,
        'total_points': total_points,
        'percentage': percentage,
        'passed': passed,
        'per_question': per_question
    }


def is_overdue(assignment: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    """Open assignment whose deadline has passed. Derived only, never stored."""
    if assignment.get('status') == AssignmentStatus.COMPLETED:
        return False
    deadline = parse_datetime(assignment.get('deadline'))
    if deadline is None:
        return False
    return deadline < (now or utc_now())


def with_overdue_flag(assignment: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    return dict(assignment, is_overdue=is_overdue(assignment, now))


def build_assignment(
    freelancer_id: str,
    quiz_id: str,
    deadline: Optional[str] = None,
    assigned_by: str = '',
    notes: str = '',
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """New pending QuizAssignment record."""
    if deadline and parse_datetime(deadline) is None:
        raise ValueError(f"Invalid deadline: {deadline}")
    item = {
        'id': str(uuid.uuid4()),
        'freelancer_id': freelancer_id,
        'quiz_id': quiz_id,
        'assigned_by': assigned_by,
        'status': AssignmentStatus.PENDING,
        'notes': notes,
        'created_date': to_iso(now or utc_now())
    }
    if deadline:
        item['deadline'] = deadline
    return item


def find_open_assignment(assignments: Iterable[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """First assignment that has not been completed (pending or in progress)."""
    for assignment in assignments:
        if assignment.get('status') != AssignmentStatus.COMPLETED:
            return assignment
    return None


def complete_assignment(attempt: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Fields to set on an assignment once its attempt is submitted."""
    return {
        'status': AssignmentStatus.COMPLETED,
        'completed_date': to_iso(now or utc_now()),
        'attempt_id': attempt['id']
    }
