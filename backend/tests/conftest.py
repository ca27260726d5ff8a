"""
Shared fixtures: environment, moto-backed DynamoDB/SES and API Gateway event builders.
"""
import json
import os
import sys

import boto3
import pytest
from moto import mock_aws

# Handlers import `shared.*` the way they do inside the Lambda layer
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

# Must be set before shared.config is first imported
TEST_ENV = {
    'AWS_ACCESS_KEY_ID': 'testing',
    'AWS_SECRET_ACCESS_KEY': 'testing',
    'AWS_SECURITY_TOKEN': 'testing',
    'AWS_SESSION_TOKEN': 'testing',
    'AWS_REGION': 'us-east-1',
    'AWS_DEFAULT_REGION': 'us-east-1',
    'FREELANCERS_TABLE': 'Freelancers',
    'QUALITY_REPORTS_TABLE': 'QualityReports',
    'QUALITY_SETTINGS_TABLE': 'QualitySettings',
    'QUIZZES_TABLE': 'Quizzes',
    'QUESTIONS_TABLE': 'Questions',
    'QUIZ_ATTEMPTS_TABLE': 'QuizAttempts',
    'QUIZ_ASSIGNMENTS_TABLE': 'QuizAssignments',
    'USERS_TABLE': 'Users',
    'AUDIT_LOG_TABLE': 'AdminAuditLog',
    'NOTIFICATION_SENDER': 'quality@agency.test',
    'APP_URL': 'https://app.agency.test',
}
for _key, _value in TEST_ENV.items():
    os.environ[_key] = _value

ID_TABLES = (
    'Freelancers', 'QualityReports', 'Quizzes', 'Questions',
    'QuizAttempts', 'QuizAssignments', 'Users', 'AdminAuditLog',
)

ADMIN = {'sub': 'admin-1', 'email': 'admin@agency.test', 'name': 'Ada Admin', 'cognito:groups': 'admin'}
PM = {'sub': 'pm-1', 'email': 'pm@agency.test', 'name': 'Pat Manager', 'custom:role': 'project_manager'}
TRANSLATOR = {'sub': 'tr-1', 'email': 'deniz@translators.test', 'name': 'Deniz Yilmaz', 'cognito:groups': 'applicant'}
OUTSIDER = {'sub': 'tr-2', 'email': 'someone@else.test', 'name': 'Someone Else'}


def _reset_clients():
    from shared import dynamo, notifications
    dynamo._dynamodb = None
    notifications._ses_client = None


@pytest.fixture
def aws():
    """
    Mocked AWS account with every table created and the sender identity verified.
    Yields the DynamoDB resource.
    """
    with mock_aws():
        _reset_clients()
        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
        for name in ID_TABLES:
            dynamodb.create_table(
                TableName=name,
                KeySchema=[{'AttributeName': 'id', 'KeyType': 'HASH'}],
                AttributeDefinitions=[{'AttributeName': 'id', 'AttributeType': 'S'}],
                BillingMode='PAY_PER_REQUEST'
            )
        dynamodb.create_table(
            TableName='QualitySettings',
            KeySchema=[{'AttributeName': 'setting_key', 'KeyType': 'HASH'}],
            AttributeDefinitions=[{'AttributeName': 'setting_key', 'AttributeType': 'S'}],
            BillingMode='PAY_PER_REQUEST'
        )
        boto3.client('ses', region_name='us-east-1').verify_email_identity(
            EmailAddress=TEST_ENV['NOTIFICATION_SENDER']
        )
        yield dynamodb
        _reset_clients()


@pytest.fixture
def seed(aws):
    """Insert items into a table: seed('Freelancers', {...}, {...})."""
    def _seed(table_name, *items):
        table = aws.Table(table_name)
        for item in items:
            table.put_item(Item=item)
        return items[0] if len(items) == 1 else items
    return _seed


@pytest.fixture
def staff(seed):
    """Admin and PM user records (notification recipients)."""
    seed(
        'Users',
        {'id': 'admin-1', 'email': 'admin@agency.test', 'full_name': 'Ada Admin', 'role': 'admin'},
        {'id': 'pm-1', 'email': 'pm@agency.test', 'full_name': 'Pat Manager', 'role': 'project_manager'},
    )


@pytest.fixture
def freelancer(seed):
    return seed('Freelancers', {
        'id': 'fl-1',
        'full_name': 'Deniz Yilmaz',
        'email': 'deniz@translators.test',
        'status': 'Approved',
        'rates': [{'rate_type': 'per_word', 'rate_value': '0.10'}],
    })


def api_event(claims=None, path=None, body=None, method='POST', query=None):
    """Build an API Gateway proxy event with Cognito authorizer claims."""
    event = {
        'httpMethod': method,
        'pathParameters': path or {},
        'queryStringParameters': query,
        'body': json.dumps(body) if body is not None else None,
        'requestContext': {'authorizer': {'claims': claims} if claims else {}},
    }
    return event


@pytest.fixture
def make_event():
    return api_event


def response_body(response):
    return json.loads(response['body'])


@pytest.fixture
def body_of():
    return response_body
