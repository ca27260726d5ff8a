"""
Authentication utilities for extracting user info from Cognito tokens,
plus the capability checks every handler uses to gate mutations.
"""
from typing import Optional

from shared.models import UserRole

MANAGER_ROLES = (UserRole.ADMIN, UserRole.PROJECT_MANAGER)


def _get_claims(event: dict) -> Optional[dict]:
    try:
        return event['requestContext']['authorizer']['claims']
    except (KeyError, TypeError):
        return None


def get_user_groups(event: dict) -> list:
    """Extract user groups (admin, project_manager, applicant) from Cognito claims."""
    claims = _get_claims(event)
    if not claims:
        return []
    groups = claims.get('cognito:groups', '')
    if isinstance(groups, str):
        return groups.split(',') if groups else []
    return groups or []


def resolve_role(event: dict) -> str:
    """
    Role comes from the `custom:role` attribute when present, otherwise from group
    membership. Anyone else is treated as an applicant.
    """
    claims = _get_claims(event) or {}
    role = claims.get('custom:role')
    if role in (UserRole.ADMIN, UserRole.PROJECT_MANAGER, UserRole.APPLICANT):
        return role

    groups = get_user_groups(event)
    if UserRole.ADMIN in groups:
        return UserRole.ADMIN
    if UserRole.PROJECT_MANAGER in groups:
        return UserRole.PROJECT_MANAGER
    return UserRole.APPLICANT


def get_current_user(event: dict) -> Optional[dict]:
    """
    Build the acting user from the request: {id, email, full_name, role}.
    Returns None when the request carries no authenticated identity.
    """
    claims = _get_claims(event)
    if not claims or not claims.get('sub'):
        return None
    return {
        'id': claims['sub'],
        'email': claims.get('email', ''),
        'full_name': claims.get('name', ''),
        'role': resolve_role(event),
    }


def _same_email(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return a.strip().lower() == b.strip().lower()


def is_admin(user: Optional[dict]) -> bool:
    return bool(user) and user.get('role') == UserRole.ADMIN


def can_manage_reports(user: Optional[dict]) -> bool:
    """Create, submit, escalate and import quality reports."""
    return bool(user) and user.get('role') in MANAGER_ROLES


def can_finalize_reports(user: Optional[dict]) -> bool:
    """Only admins close disputes."""
    return is_admin(user)


def can_review_as_translator(user: Optional[dict], freelancer: Optional[dict]) -> bool:
    """The translator named on a report is the freelancer whose email matches the user."""
    if not user or not freelancer:
        return False
    return _same_email(user.get('email'), freelancer.get('email'))


def can_assign_quizzes(user: Optional[dict]) -> bool:
    return bool(user) and user.get('role') in MANAGER_ROLES


def can_view_freelancer(user: Optional[dict], freelancer: Optional[dict]) -> bool:
    """Managers see everyone; applicants only see their own record."""
    if can_manage_reports(user):
        return True
    return can_review_as_translator(user, freelancer)


def can_edit_settings(user: Optional[dict]) -> bool:
    return is_admin(user)
