"""
Calculate Freelancer Metrics Handler.
Triggered by EventBridge (nightly) or manually by an admin.
Recomputes each approved freelancer's combined quality score and value index.
"""
from shared.config import config
from shared.logging import logger, log_event
from shared.auth import get_current_user, is_admin
from shared.dynamo import find_by, update_fields
from shared.metrics import calculate_value_index, get_primary_rate
from shared.models import FreelancerStatus
from shared.quality import aggregate
from shared.settings import load_quality_settings
from shared.utils import format_response, round_half_up, to_decimal, to_float, to_iso, utc_now


def handler(event, context):
    """
    Scheduled or POST /admin/freelancers/metrics.
    API calls must come from an admin; scheduled events carry no user.
    """
    log_event(event)

    if 'requestContext' in event:
        user = get_current_user(event)
        if not is_admin(user):
            return format_response(403, {'message': 'Forbidden: Admin access required'})

    try:
        results = recalculate_all()
    except Exception as e:
        logger.error(f"Error calculating freelancer metrics: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    message = f"Processed {results['processed']} freelancers, updated {results['updated']}"
    logger.info(message)

    if 'requestContext' in event:
        return format_response(200, {'message': message, 'results': results})
    return results


def recalculate_all() -> dict:
    settings = load_quality_settings()
    freelancers = find_by(config.FREELANCERS_TABLE, status=FreelancerStatus.APPROVED)

    results = {
        'processed': 0,
        'updated': 0,
        'skipped': 0,
        'errors': []
    }

    for freelancer in freelancers:
        results['processed'] += 1
        try:
            if update_freelancer_metrics(freelancer, settings):
                results['updated'] += 1
            else:
                results['skipped'] += 1
        except Exception as e:
            logger.error(f"Error updating metrics for {freelancer.get('id')}: {e}")
            results['errors'].append({'freelancer_id': freelancer.get('id'), 'error': str(e)})

    return results


def update_freelancer_metrics(freelancer: dict, settings) -> bool:
    """
    Store the freelancer's combined score and value index.
    Returns True if anything changed, False otherwise.
    """
    reports = find_by(config.QUALITY_REPORTS_TABLE, freelancer_id=freelancer['id'])
    combined = aggregate(reports, settings)['combined_score']
    if combined is None:
        return False

    combined = round_half_up(combined, 2)
    value_index = calculate_value_index(combined, get_primary_rate(freelancer))

    if (to_float(freelancer.get('combined_quality_score')) == combined
            and to_float(freelancer.get('value_index')) == value_index):
        return False

    update_fields(config.FREELANCERS_TABLE, {'id': freelancer['id']}, {
        'combined_quality_score': to_decimal(combined),
        'value_index': to_decimal(value_index),
        'metrics_updated_at': to_iso(utc_now())
    })
    return True
