"""
Quality Alerts Handler.
Checks one freelancer's finalized reports and emails warnings when the combined
score falls under the probation threshold or the recent LQA scores are all low.
"""
from shared.config import config
from shared.logging import logger, log_event
from shared.auth import get_current_user, is_admin
from shared.dynamo import get_item, find_by
from shared.errors import LifecycleError, NotFoundError, PermissionDeniedError, ValidationError
from shared.models import AlertType, UserRole
from shared import notifications
from shared.quality import check_quality_alerts
from shared.settings import load_quality_settings
from shared.utils import format_response, error_response, get_path_param


def handler(event, context):
    """
    POST /freelancers/{freelancerId}/quality/alerts
    """
    log_event(event)

    try:
        user = get_current_user(event)
        if not user:
            return format_response(401, {'message': 'Unauthorized'})
        if not is_admin(user):
            raise PermissionDeniedError('Admin access required')

        freelancer_id = get_path_param(event, 'freelancerId')
        if not freelancer_id:
            raise ValidationError('freelancerId is required')

        freelancer = get_item(config.FREELANCERS_TABLE, {'id': freelancer_id})
        if not freelancer:
            raise NotFoundError('Freelancer not found')

        reports = find_by(config.QUALITY_REPORTS_TABLE, freelancer_id=freelancer_id)
        settings = load_quality_settings()
        alerts = check_quality_alerts(reports, settings)

        emails_sent = 0
        if alerts:
            admins = notifications.list_users_by_role(UserRole.ADMIN)
            for alert in alerts:
                if alert['type'] == AlertType.LOW_COMBINED_SCORE:
                    emails_sent += notifications.notify_low_score(freelancer, alert, admins)
                elif alert['type'] == AlertType.CONSECUTIVE_LOW_LQA:
                    emails_sent += int(notifications.notify_consecutive_low_lqa(freelancer, alert))

        logger.info(f"Quality check for {freelancer_id}: {len(alerts)} alerts, {emails_sent} emails")

        return format_response(200, {
            'freelancer_id': freelancer_id,
            'notifications_sent': emails_sent,
            'alerts': alerts
        })

    except LifecycleError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error checking quality alerts: {e}")
        return format_response(500, {'message': 'Internal Server Error'})
