"""
Handler tests for quiz assignment, submission and listing.
"""
from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import PM, TRANSLATOR, OUTSIDER


@pytest.fixture
def quiz(seed):
    seed(
        'Questions',
        {'id': 'q-2', 'quiz_id': 'quiz-1', 'order': 2, 'points': Decimal('1'),
         'question_type': 'multiple_choice', 'correct_answer': 'Accuracy|Style'},
        {'id': 'q-1', 'quiz_id': 'quiz-1', 'order': 1, 'points': Decimal('1'),
         'question_type': 'true_false', 'correct_answer': 'True'},
    )
    return seed('Quizzes', {
        'id': 'quiz-1', 'title': 'Legal Terminology', 'description': 'EN>TR legal basics',
        'passing_score': Decimal('70')
    })


def assignments(aws):
    return aws.Table('QuizAssignments').scan()['Items']


class TestAssignQuiz:
    """Tests for the assign quiz endpoint."""

    def _assign(self, claims, freelancer_ids, deadline=None):
        from conftest import api_event
        from handlers.quiz.assign_quiz import handler

        body = {'freelancer_ids': freelancer_ids}
        if deadline:
            body['deadline'] = deadline
        return handler(api_event(claims=claims, path={'quizId': 'quiz-1'}, body=body), None)

    def test_assign_creates_pending_and_emails(self, aws, quiz, freelancer, body_of):
        """Assigning creates a pending assignment and emails the freelancer."""
        response = self._assign(PM, ['fl-1', 'fl-404'], deadline='2024-07-01')

        assert response['statusCode'] == 200
        results = body_of(response)['results']
        assert len(results['assigned']) == 1
        assert results['not_found'] == ['fl-404']
        assert results['emails_sent'] == 1

        stored = assignments(aws)
        assert len(stored) == 1
        assert stored[0]['status'] == 'pending'
        assert stored[0]['assigned_by'] == 'pm@agency.test'

    def test_reassigning_reuses_open_assignment(self, aws, quiz, freelancer, body_of):
        """An open assignment is reused rather than duplicated."""
        first = body_of(self._assign(PM, ['fl-1'], deadline='2024-07-01'))['results']
        second = body_of(self._assign(PM, ['fl-1'], deadline='2024-08-15'))['results']

        assert second['assigned'] == []
        assert second['reused'] == first['assigned']

        stored = assignments(aws)
        assert len(stored) == 1
        assert stored[0]['deadline'] == '2024-08-15'

    def test_completed_assignment_allows_retake(self, aws, seed, quiz, freelancer, body_of):
        """A completed assignment leaves room for a new one."""
        seed('QuizAssignments', {
            'id': 'done-1', 'freelancer_id': 'fl-1', 'quiz_id': 'quiz-1', 'status': 'completed'
        })

        results = body_of(self._assign(PM, ['fl-1']))['results']

        assert len(results['assigned']) == 1
        assert len(assignments(aws)) == 2

    def test_bad_deadline(self, aws, quiz, freelancer):
        assert self._assign(PM, ['fl-1'], deadline='soon')['statusCode'] == 400

    def test_applicant_forbidden(self, aws, quiz, freelancer):
        """Applicants cannot assign quizzes."""
        assert self._assign(TRANSLATOR, ['fl-1'])['statusCode'] == 403

    def test_unknown_quiz(self, aws, freelancer):
        assert self._assign(PM, ['fl-1'])['statusCode'] == 404


class TestSubmitAttempt:
    """Tests for the submit attempt endpoint."""

    def _submit(self, claims, answers, assignment_id=None):
        from conftest import api_event
        from handlers.quiz.submit_attempt import handler

        body = {'answers': answers}
        if assignment_id:
            body['assignment_id'] = assignment_id
        return handler(api_event(claims=claims, path={'quizId': 'quiz-1'}, body=body), None)

    def test_grades_and_completes_assignment(self, aws, seed, quiz, freelancer, body_of):
        """A full-marks attempt is stored and completes the open assignment."""
        seed('QuizAssignments', {
            'id': 'as-1', 'freelancer_id': 'fl-1', 'quiz_id': 'quiz-1', 'status': 'pending'
        })

        response = self._submit(TRANSLATOR, {'q-1': 'True', 'q-2': ['Style', 'Accuracy']})

        assert response['statusCode'] == 201
        body = body_of(response)
        assert body['percentage'] == 100
        assert body['passed'] is True

        assignment = aws.Table('QuizAssignments').get_item(Key={'id': 'as-1'})['Item']
        assert assignment['status'] == 'completed'
        assert assignment['attempt_id'] == body['attempt_id']

        attempt = aws.Table('QuizAttempts').get_item(Key={'id': body['attempt_id']})['Item']
        assert attempt['assignment_id'] == 'as-1'
        assert [a['question_id'] for a in attempt['answers']] == ['q-1', 'q-2']

    def test_partial_multi_select_fails_quiz(self, aws, quiz, freelancer, body_of):
        """A partly answered multi-select earns nothing."""
        response = self._submit(TRANSLATOR, {'q-1': 'True', 'q-2': ['Accuracy']})

        body = body_of(response)
        assert body['score'] == 1
        assert body['percentage'] == 50
        assert body['passed'] is False

    def test_cannot_use_someone_elses_assignment(self, aws, seed, quiz, freelancer):
        """Naming another freelancer's assignment is forbidden."""
        seed('QuizAssignments', {
            'id': 'as-9', 'freelancer_id': 'fl-9', 'quiz_id': 'quiz-1', 'status': 'pending'
        })

        response = self._submit(TRANSLATOR, {'q-1': 'True'}, assignment_id='as-9')

        assert response['statusCode'] == 403

    def test_completed_assignment_is_not_overwritten(self, aws, seed, quiz, freelancer):
        """Resubmitting against a finished assignment conflicts and keeps the first result."""
        seed('QuizAssignments', {
            'id': 'as-2', 'freelancer_id': 'fl-1', 'quiz_id': 'quiz-1',
            'status': 'completed', 'attempt_id': 'att-old'
        })

        response = self._submit(TRANSLATOR, {'q-1': 'True', 'q-2': ['Style', 'Accuracy']}, assignment_id='as-2')

        assert response['statusCode'] == 409
        assignment = aws.Table('QuizAssignments').get_item(Key={'id': 'as-2'})['Item']
        assert assignment['attempt_id'] == 'att-old'
        assert aws.Table('QuizAttempts').scan()['Items'] == []

    def test_caller_without_freelancer_profile(self, aws, quiz, freelancer):
        """Callers with no freelancer record cannot submit."""
        assert self._submit(OUTSIDER, {'q-1': 'True'})['statusCode'] == 403

    def test_answers_required(self, aws, quiz, freelancer):
        assert self._submit(TRANSLATOR, None)['statusCode'] == 400


class TestListAssignments:
    """Tests for the list assignments endpoint."""

    def test_overdue_is_derived(self, aws, seed, freelancer, make_event, body_of):
        """The overdue flag is computed on read."""
        from handlers.quiz.list_assignments import handler
        from shared.utils import to_iso, utc_now

        past = to_iso(utc_now() - timedelta(days=1))
        future = to_iso(utc_now() + timedelta(days=3))
        seed(
            'QuizAssignments',
            {'id': 'a-1', 'freelancer_id': 'fl-1', 'quiz_id': 'quiz-1', 'status': 'pending', 'deadline': past},
            {'id': 'a-2', 'freelancer_id': 'fl-1', 'quiz_id': 'quiz-2', 'status': 'completed', 'deadline': past},
            {'id': 'a-3', 'freelancer_id': 'fl-1', 'quiz_id': 'quiz-3', 'status': 'pending', 'deadline': future},
            {'id': 'a-4', 'freelancer_id': 'fl-2', 'quiz_id': 'quiz-1', 'status': 'pending', 'deadline': past},
        )

        response = handler(make_event(claims=TRANSLATOR, path={'freelancerId': 'fl-1'}, method='GET'), None)

        assert response['statusCode'] == 200
        body = body_of(response)
        flags = {a['id']: a['is_overdue'] for a in body['assignments']}
        assert flags == {'a-1': True, 'a-2': False, 'a-3': False}
        assert body['overdue_count'] == 1
        assert 'is_overdue' not in aws.Table('QuizAssignments').get_item(Key={'id': 'a-1'})['Item']

    def test_status_filter(self, aws, seed, freelancer, make_event, body_of):
        from handlers.quiz.list_assignments import handler

        seed(
            'QuizAssignments',
            {'id': 'a-1', 'freelancer_id': 'fl-1', 'quiz_id': 'quiz-1', 'status': 'pending'},
            {'id': 'a-2', 'freelancer_id': 'fl-1', 'quiz_id': 'quiz-2', 'status': 'completed'},
        )

        response = handler(make_event(
            claims=PM, path={'freelancerId': 'fl-1'}, method='GET', query={'status': 'completed'}
        ), None)

        assert [a['id'] for a in body_of(response)['assignments']] == ['a-2']

    def test_other_applicant_forbidden(self, aws, freelancer, make_event):
        """Applicants cannot list another freelancer's assignments."""
        from handlers.quiz.list_assignments import handler

        response = handler(make_event(claims=OUTSIDER, path={'freelancerId': 'fl-1'}, method='GET'), None)

        assert response['statusCode'] == 403
