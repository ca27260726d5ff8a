"""
Configuration module for Lambda handlers.
Loads all environment variables needed by the quality and quiz backend.
"""
import os


class Config:
    """Centralized configuration from environment variables."""

    # AWS Region
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')

    # DynamoDB Tables
    FREELANCERS_TABLE = os.environ.get('FREELANCERS_TABLE', '')
    QUALITY_REPORTS_TABLE = os.environ.get('QUALITY_REPORTS_TABLE', '')
    QUALITY_SETTINGS_TABLE = os.environ.get('QUALITY_SETTINGS_TABLE', '')
    QUIZZES_TABLE = os.environ.get('QUIZZES_TABLE', '')
    QUESTIONS_TABLE = os.environ.get('QUESTIONS_TABLE', '')
    QUIZ_ATTEMPTS_TABLE = os.environ.get('QUIZ_ATTEMPTS_TABLE', '')
    QUIZ_ASSIGNMENTS_TABLE = os.environ.get('QUIZ_ASSIGNMENTS_TABLE', '')
    USERS_TABLE = os.environ.get('USERS_TABLE', '')
    AUDIT_LOG_TABLE = os.environ.get('AUDIT_LOG_TABLE', '')

    # Notifications (SES)
    NOTIFICATION_SENDER = os.environ.get('NOTIFICATION_SENDER', '')
    APP_URL = os.environ.get('APP_URL', '')

    # Quality alerting
    CONSECUTIVE_LOW_LQA_THRESHOLD = float(os.environ.get('CONSECUTIVE_LOW_LQA_THRESHOLD', '70'))
    MIN_REPORTS_FOR_ALERT = int(os.environ.get('MIN_REPORTS_FOR_ALERT', '3'))


config = Config()
