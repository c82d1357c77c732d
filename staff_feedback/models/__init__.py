"""
Data models for the staff feedback form.
"""
from .feedback_data import UNANSWERED, FeedbackRecord, SubmissionResult, is_valid_rating
from .identity import SessionIdentity
from .staff_record import StaffRecord, to_display

__all__ = [
    'UNANSWERED', 'FeedbackRecord', 'SubmissionResult', 'is_valid_rating',
    'SessionIdentity', 'StaffRecord', 'to_display'
]
