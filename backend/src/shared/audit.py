"""
Admin audit log.
"""
import uuid
from typing import Any, Dict, Optional
from .config import config
from .dynamo import put_item
from .logging import logger
from .utils import to_dynamo, to_iso, utc_now


def log_action(
    actor: Dict[str, Any],
    action_type: str,
    target_entity: str,
    target_id: str,
    metadata: Optional[Dict[str, Any]] = None
) -> bool:
    """
    Record an administrative action. Never raises: an audit failure must not
    fail the action it describes.
    """
    try:
        put_item(config.AUDIT_LOG_TABLE, {
            'id': str(uuid.uuid4()),
            'actor_id': actor.get('id', ''),
            'actor_email': actor.get('email', ''),
            'action_type': action_type,
            'target_entity': target_entity,
            'target_id': target_id,
            'metadata': to_dynamo(metadata or {}),
            'created_date': to_iso(utc_now())
        })
        return True
    except Exception as e:
        logger.error(f"Failed to log admin action {action_type} on {target_id}: {e}")
        return False
