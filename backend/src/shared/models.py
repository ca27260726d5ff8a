"""
Data models and status constants for the quality and quiz backend.
Quality report lifecycle: draft → pending_translator_review → translator_accepted | translator_disputed → pending_final_review → finalized
"""


class ReportStatus:
    """Quality report lifecycle statuses."""
    DRAFT = 'draft'
    SUBMITTED = 'submitted'  # Older records, treated like pending_translator_review
    PENDING_TRANSLATOR_REVIEW = 'pending_translator_review'
    TRANSLATOR_ACCEPTED = 'translator_accepted'
    TRANSLATOR_DISPUTED = 'translator_disputed'
    PENDING_FINAL_REVIEW = 'pending_final_review'
    FINALIZED = 'finalized'


class ReportAction:
    """Actions accepted by the report lifecycle."""
    SUBMIT = 'submit'
    ACCEPT = 'accept'
    DISPUTE = 'dispute'
    ESCALATE = 'escalate'
    FINALIZE = 'finalize'
    IMPORT = 'import'


class ReportType:
    """Quality report types."""
    LQA = 'LQA'
    QS = 'QS'


class Severity:
    """LQA error severities."""
    CRITICAL = 'Critical'
    MAJOR = 'Major'
    MINOR = 'Minor'
    PREFERENTIAL = 'Preferential'


class AssignmentStatus:
    """Quiz assignment statuses."""
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'


class AttemptStatus:
    """Quiz attempt statuses."""
    IN_PROGRESS = 'in_progress'
    SUBMITTED = 'submitted'


class FreelancerStatus:
    """Freelancer pipeline stages."""
    NEW_APPLICATION = 'New Application'
    FORM_SENT = 'Form Sent'
    PRICE_NEGOTIATION = 'Price Negotiation'
    TEST_SENT = 'Test Sent'
    APPROVED = 'Approved'
    ON_HOLD = 'On Hold'
    REJECTED = 'Rejected'
    RED_FLAG = 'Red Flag'


class UserRole:
    """Application roles."""
    ADMIN = 'admin'
    PROJECT_MANAGER = 'project_manager'
    APPLICANT = 'applicant'


class AlertType:
    """Quality alert kinds."""
    LOW_COMBINED_SCORE = 'low_combined_score'
    CONSECUTIVE_LOW_LQA = 'consecutive_low_lqa'


class AuditAction:
    """Admin audit log action types."""
    QUALITY_REPORT_SUBMITTED = 'QUALITY_REPORT_SUBMITTED'
    QUALITY_REPORT_DISPUTED = 'QUALITY_REPORT_DISPUTED'
    QUALITY_REPORT_ESCALATED = 'QUALITY_REPORT_ESCALATED'
    QUALITY_REPORT_FINALIZED = 'QUALITY_REPORT_FINALIZED'
    QUALITY_REPORTS_IMPORTED = 'QUALITY_REPORTS_IMPORTED'
    QUALITY_SETTINGS_UPDATED = 'QUALITY_SETTINGS_UPDATED'
