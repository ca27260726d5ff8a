"""
Quality Settings Handler.
GET returns the effective settings (defaults filled in); PUT lets an admin change them.
"""
from shared.config import config
from shared.logging import logger, log_event
from shared.auth import get_current_user, can_edit_settings
from shared.audit import log_action
from shared.dynamo import put_item
from shared.errors import LifecycleError, PermissionDeniedError
from shared.models import AuditAction
from shared.settings import load_quality_settings
from shared.utils import format_response, error_response, parse_body


def handler(event, context):
    """
    GET /settings/quality
    PUT /settings/quality
    Body: { "lqa_weight"?, "qs_multiplier"?, "dispute_period_days"?, "probation_threshold"?, "lqa_error_weights"? }
    """
    log_event(event)

    try:
        user = get_current_user(event)
        if not user:
            return format_response(401, {'message': 'Unauthorized'})

        current = load_quality_settings()

        if event.get('httpMethod', 'GET').upper() == 'GET':
            return format_response(200, {'settings': current.to_dict()})

        if not can_edit_settings(user):
            raise PermissionDeniedError('Only admins can change quality settings')

        updated = current.with_changes(parse_body(event))
        put_item(config.QUALITY_SETTINGS_TABLE, updated.to_item())

        log_action(user, AuditAction.QUALITY_SETTINGS_UPDATED, 'QualitySettings', 'default', {
            'before': current.to_dict(),
            'after': updated.to_dict()
        })
        logger.info(f"Quality settings updated by {user['email']}")

        return format_response(200, {'message': 'Settings saved', 'settings': updated.to_dict()})

    except LifecycleError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error handling quality settings: {e}")
        return format_response(500, {'message': 'Internal Server Error'})
