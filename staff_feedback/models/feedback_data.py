"""
Data models for staff evaluations and their submission.
"""
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple

from ..config.settings import (
    CRITERIA,
    FEEDBACK_REMARKS_COLUMN,
    FEEDBACK_STAFF_COLUMNS,
    FEEDBACK_UNIT_COLUMN,
    RATING_MAX,
    RATING_MIN,
    SUBMITTER_ID_COLUMN,
    SUBMITTER_NAME_COLUMN,
)
from .identity import SessionIdentity
from .staff_record import StaffRecord


class _Unanswered:
    """Marker for a criterion without a chosen rating."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return 'UNANSWERED'


UNANSWERED = _Unanswered()


def is_valid_rating(value: Any) -> bool:
    """
    Check that a value is an integer rating within the scale.

    Returns:
        bool: True if value is an int (not bool) between RATING_MIN and RATING_MAX
    """
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and RATING_MIN <= value <= RATING_MAX
    )


@dataclass(frozen=True)
class FeedbackRecord:
    """
    Immutable snapshot of one evaluation, built at submit time.

    Holds a copy of the evaluated staff member, every criterion rating in
    display order, the free-text remarks and the submitter identity.
    """
    unit: str
    staff: StaffRecord
    ratings: Tuple[Tuple[str, int], ...]
    remarks: str
    submitter: SessionIdentity
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Enforce completeness; a record cannot exist for a partial form."""
        if self.staff is None:
            raise ValueError("A feedback record requires a selected staff member")

        rated = dict(self.ratings)
        missing = [c.key for c in CRITERIA if not is_valid_rating(rated.get(c.key, UNANSWERED))]
        if missing:
            raise ValueError(f"Missing or invalid ratings: {', '.join(missing)}")

        if self.created_at is None:
            object.__setattr__(self, 'created_at', datetime.now())

    @classmethod
    def build(cls,
              unit: str,
              staff: StaffRecord,
              answers: Mapping[str, Any],
              remarks: str,
              submitter: SessionIdentity) -> 'FeedbackRecord':
        """
        Assemble a record from the current form values.

        Args:
            unit: Selected unit name
            staff: Selected staff member
            answers: Criterion key -> rating
            remarks: Free-text remarks
            submitter: Identity of the person submitting

        Returns:
            FeedbackRecord: The snapshot

        Raises:
            ValueError: If staff is missing or any criterion is unanswered
        """
        ratings = tuple((c.key, answers.get(c.key, UNANSWERED)) for c in CRITERIA)
        return cls(
            unit=unit,
            staff=staff,
            ratings=ratings,
            remarks=remarks or '',
            submitter=submitter,
        )

    def get_ratings(self) -> Dict[str, int]:
        return dict(self.ratings)

    def _flatten(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {FEEDBACK_UNIT_COLUMN: self.unit}
        for attribute, column in FEEDBACK_STAFF_COLUMNS.items():
            row[column] = getattr(self.staff, attribute)
        rated = dict(self.ratings)
        for criterion in CRITERIA:
            row[criterion.column] = rated[criterion.key]
        row[FEEDBACK_REMARKS_COLUMN] = self.remarks
        return row

    def to_store_row(self) -> Dict[str, Any]:
        """
        Flatten into a feedback table row including the submitter id.

        Returns:
            Dict[str, Any]: Column name -> value
        """
        row = {SUBMITTER_ID_COLUMN: self.submitter.user_id}
        row.update(self._flatten())
        return row

    def to_mirror_row(self) -> Dict[str, Any]:
        """
        Flatten into a spreadsheet row including submitter id and display name.

        Returns:
            Dict[str, Any]: Column name -> value
        """
        row = {
            SUBMITTER_ID_COLUMN: self.submitter.user_id,
            SUBMITTER_NAME_COLUMN: self.submitter.display_name,
        }
        row.update(self._flatten())
        return row

    def get_summary(self) -> str:
        return f"Unit: {self.unit}, Staff: {self.staff.name} ({self.staff.registration_id})"


@dataclass
class SubmissionResult:
    """
    Outcome of one submission attempt.
    """
    status: str  # "submitted", "invalid", "unauthenticated", "failed", "busy"
    error_message: Optional[str] = None
    field: Optional[str] = None
    record: Optional[FeedbackRecord] = None
    mirror_future: Optional[Future] = None

    def is_successful(self) -> bool:
        """
        Check if the durable write succeeded.

        Returns:
            bool: True if status is "submitted", False otherwise
        """
        return self.status == "submitted"

    def wait_for_mirror(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the spreadsheet mirror attempt for this submission ends.

        Args:
            timeout: Seconds to wait; None waits indefinitely

        Returns:
            bool: True if the row reached the mirror
        """
        if self.mirror_future is None:
            return False
        return self.mirror_future.result(timeout=timeout)
