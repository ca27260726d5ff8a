"""
Email notifications sent through Amazon SES.
Failures are logged and reported as False; a committed state change is never rolled back.
"""
import boto3
from typing import Any, Dict, List, Optional
from boto3.dynamodb.conditions import Attr
from .config import config
from .dynamo import scan_all
from .logging import logger
from .utils import to_float

# Initialize SES client lazily
_ses_client = None

SIGNATURE = "Best regards,\nQuality Management Team"


def get_ses_client():
    """Get or create SES client."""
    global _ses_client
    if _ses_client is None:
        _ses_client = boto3.client('ses', region_name=config.AWS_REGION)
    return _ses_client


def send_email(to: str, subject: str, body: str) -> bool:
    """
    Send a plain-text email.

    Args:
        to: Recipient address
        subject: Subject line
        body: Plain-text body

    Returns:
        True if SES accepted the message, False otherwise
    """
    if not to:
        logger.warning(f"Skipping email '{subject}': no recipient")
        return False
    if not config.NOTIFICATION_SENDER:
        logger.warning(f"Skipping email '{subject}': NOTIFICATION_SENDER not configured")
        return False

    try:
        get_ses_client().send_email(
            Source=config.NOTIFICATION_SENDER,
            Destination={'ToAddresses': [to]},
            Message={
                'Subject': {'Data': subject},
                'Body': {'Text': {'Data': body}}
            }
        )
        logger.info(f"Email sent to {to}: {subject}")
        return True
    except Exception as e:
        logger.error(f"Error sending email to {to}: {e}")
        return False


def list_users_by_role(*roles: str) -> List[Dict[str, Any]]:
    """Users holding any of `roles` (notification recipients)."""
    if not roles:
        return []
    return scan_all(config.USERS_TABLE, Attr('role').is_in(list(roles)))


def _score_text(value: Any) -> str:
    number = to_float(value)
    if number is None:
        return '-'
    return f"{number:g}"


def _report_link(report_id: str) -> str:
    if config.APP_URL:
        return f"{config.APP_URL}/QualityReportDetail?id={report_id}"
    return '(Access via Dashboard)'


def _name(freelancer: Optional[Dict[str, Any]]) -> str:
    return (freelancer or {}).get('full_name') or 'Unknown'


def notify_review_required(report: Dict[str, Any], freelancer: Dict[str, Any], dispute_period_days: int, deadline: str) -> bool:
    body = f"""Dear {_name(freelancer)},

A quality assessment report has been created for you and is awaiting your review.

Project: {report.get('project_name') or 'Not specified'}
Report Type: {report.get('report_type', '-')}
LQA Score: {_score_text(report.get('lqa_score'))}
QS Score: {_score_text(report.get('qs_score'))}

Reviewer Comments:
{report.get('reviewer_comments') or 'No comments'}

You have {dispute_period_days} days to accept or dispute this report.
Deadline: {deadline[:10]}

{SIGNATURE}"""
    return send_email(freelancer.get('email'), '[Review Required] Quality Assessment Report', body)


def notify_dispute(report: Dict[str, Any], freelancer: Optional[Dict[str, Any]], comments: str) -> int:
    """Tell every admin/PM, and the original reviewer, that a report was disputed."""
    try:
        reviewers = list_users_by_role('admin', 'project_manager')
    except Exception as e:
        logger.error(f"Could not load reviewers for disputed report {report.get('id')}: {e}")
        reviewers = []

    body = f"""A quality report has been disputed and requires your review.

Translator: {_name(freelancer)}
Project: {report.get('project_name') or 'Not specified'}
Report Type: {report.get('report_type', '-')}
LQA Score: {_score_text(report.get('lqa_score'))}
QS Score: {_score_text(report.get('qs_score'))}

Translator's Dispute:
{comments}

Reviewer Comments:
{report.get('reviewer_comments') or 'No comments'}

Please review the report and provide your final decision.

Report Link: {_report_link(report.get('id', ''))}"""

    subject = f"[Dispute Notice] Quality Report Disputed - {_name(freelancer)}"
    notified = 0
    for reviewer in reviewers:
        if send_email(reviewer.get('email'), subject, body):
            notified += 1

    reviewer_id = report.get('reviewer_id')
    original = next((r for r in reviewers if r.get('id') == reviewer_id), None) if reviewer_id else None
    if original:
        send_email(
            original.get('email'),
            '[Notice] Your Report Has Been Disputed',
            f"""Your quality report has been disputed by the translator.

Translator: {_name(freelancer)}
Project: {report.get('project_name') or 'Not specified'}

Translator's Dispute:
{comments}

The report has been assigned to senior PMs for review."""
        )
    return notified


def notify_final_decision(report: Dict[str, Any], freelancer: Dict[str, Any], comments: str) -> bool:
    score_lines = []
    if to_float(report.get('lqa_score')) is not None:
        score_lines.append(f"LQA Score: {_score_text(report.get('lqa_score'))}")
    if to_float(report.get('qs_score')) is not None:
        score_lines.append(f"QS Score: {_score_text(report.get('qs_score'))}")
    scores = ('\n' + '\n'.join(score_lines)) if score_lines else ''

    body = f"""Dear {_name(freelancer)},

Your disputed quality report has been reviewed and a final decision has been made.

Project: {report.get('project_name') or 'Not specified'}{scores}

Final Assessment:
{comments or 'No comments provided'}

If you have any questions, please contact our quality management team.

{SIGNATURE}"""
    return send_email(freelancer.get('email'), '[Final Decision] Quality Report Finalized', body)


def notify_low_score(freelancer: Dict[str, Any], alert: Dict[str, Any], admins: List[Dict[str, Any]]) -> int:
    score = alert['score']
    threshold = alert['threshold']
    sent = 0
    if send_email(
        freelancer.get('email'),
        f"Quality Warning - Combined Score: {score:.1f}",
        f"""Dear {_name(freelancer)},

Based on your quality assessments, your Combined Score has been calculated as {score:.1f}.
This score is below the established threshold ({threshold:g}).

To improve your quality performance:
- Review our translation quality guidelines
- Examine the feedback from previous LQA reports
- Ensure compliance with terminology and style guides

If you have any questions, please contact our quality management team.

{SIGNATURE}"""
    ):
        sent += 1

    admin_body = f"""Quality warning for {_name(freelancer)}:

Combined Score: {score:.1f}
Probation Threshold: {threshold:g}
Total Assessments: {alert['total_assessments']}

Please contact the freelancer and create a quality improvement plan."""
    for admin in admins:
        if send_email(admin.get('email'), f"[Admin Notice] Low Quality Score: {_name(freelancer)}", admin_body):
            sent += 1
    return sent


def notify_consecutive_low_lqa(freelancer: Dict[str, Any], alert: Dict[str, Any]) -> bool:
    lines = '\n'.join(f"{i + 1}. LQA: {score:g}" for i, score in enumerate(alert['scores']))
    body = f"""Dear {_name(freelancer)},

You have received low scores in your last {len(alert['scores'])} LQA assessments:
{lines}

This is a serious warning regarding our quality standards.
Please contact our quality management team as soon as possible.

{SIGNATURE}"""
    return send_email(freelancer.get('email'), 'Urgent Quality Warning - Consecutive Low LQA Scores', body)


def notify_quiz_assigned(freelancer: Dict[str, Any], quiz: Dict[str, Any], deadline: Optional[str] = None) -> bool:
    deadline_line = f"\nDeadline: {deadline[:10]}\n" if deadline else ''
    body = f"""Dear {freelancer.get('full_name') or 'Freelancer'},

You have been assigned a new quiz: "{quiz.get('title', '')}"

{quiz.get('description') or ''}
{deadline_line}
Please visit your application dashboard to take the quiz.

{SIGNATURE}"""
    return send_email(freelancer.get('email'), f"You've been assigned a new quiz: {quiz.get('title', '')}", body)
