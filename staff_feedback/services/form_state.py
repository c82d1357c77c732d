"""
In-memory state of one evaluation form.
"""
import logging
import threading
from typing import Any, Dict, List, Optional

from ..config.settings import CRITERIA, CRITERIA_BY_KEY, RATING_MAX, RATING_MIN
from ..models.feedback_data import UNANSWERED, is_valid_rating
from ..models.staff_record import StaffRecord
from ..utils.text import normalize_unit_name


class FormValidationError(Exception):
    """Raised when the form is not complete enough to submit."""

    def __init__(self, field: str, message: str, missing: Optional[List[str]] = None):
        super().__init__(message)
        self.field = field
        self.message = message
        self.missing = missing or [field]


class FormBusyError(Exception):
    """Raised when the form is changed while a submission is in flight."""
    pass


class EvaluationFormState:
    """
    Current selections, ratings and remarks of an evaluation form.

    Changing the unit replaces the roster wholesale. Each unit change
    advances a generation counter; a roster computed for an older
    generation is dropped when it arrives, so a slow lookup cannot
    overwrite the result of a later selection.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._lock = threading.RLock()
        self.generation = 0
        self.submitting = False
        self.unit = ''
        self.roster: List[StaffRecord] = []
        self.selected_staff: Optional[StaffRecord] = None
        self.answers: Dict[str, Any] = {}
        self.remarks = ''
        self._clear_form()

    def _clear_form(self) -> None:
        self.unit = ''
        self.roster = []
        self.selected_staff = None
        self.answers = {criterion.key: UNANSWERED for criterion in CRITERIA}
        self.remarks = ''

    def begin_unit_change(self, unit_name: str) -> int:
        """
        Select a unit and start a new roster generation.

        Clears the roster and the selected staff member; ratings are kept.

        Args:
            unit_name: Unit chosen by the user

        Returns:
            int: Generation the roster lookup must present to apply_roster
        """
        with self._lock:
            self._ensure_editable()
            self.unit = normalize_unit_name(unit_name)
            self.roster = []
            self.selected_staff = None
            self.generation += 1
            return self.generation

    def apply_roster(self, generation: int, roster: List[StaffRecord]) -> bool:
        """
        Install a roster if it belongs to the current generation.

        Args:
            generation: Generation returned by begin_unit_change
            roster: Resolved staff list

        Returns:
            bool: False if the roster was stale and discarded
        """
        with self._lock:
            if generation != self.generation:
                self.logger.info(
                    f"Discarding stale roster (generation {generation}, current {self.generation})"
                )
                return False
            self.roster = list(roster)
            return True

    def select_staff(self, registration_id: str) -> Optional[StaffRecord]:
        """
        Select a staff member from the roster by registration id.

        An unknown id clears the selection. Ratings are left untouched.

        Returns:
            StaffRecord or None
        """
        with self._lock:
            self._ensure_editable()
            self.selected_staff = next(
                (staff for staff in self.roster if staff.registration_id == str(registration_id)),
                None
            )
            return self.selected_staff

    def set_answer(self, criterion_key: str, value: Any) -> None:
        """
        Record the rating for a criterion; None clears it.

        Raises:
            KeyError: If the criterion is unknown
            ValueError: If the rating is outside the scale
        """
        if criterion_key not in CRITERIA_BY_KEY:
            raise KeyError(f"Unknown criterion: {criterion_key}")
        if value is None or value is UNANSWERED:
            value = UNANSWERED
        elif not is_valid_rating(value):
            raise ValueError(
                f"Rating for {criterion_key} must be an integer between {RATING_MIN} and {RATING_MAX}"
            )
        with self._lock:
            self._ensure_editable()
            self.answers[criterion_key] = value

    def set_remarks(self, remarks: str) -> None:
        with self._lock:
            self._ensure_editable()
            self.remarks = remarks or ''

    def missing_criteria(self) -> List[str]:
        return [c.key for c in CRITERIA if self.answers.get(c.key, UNANSWERED) is UNANSWERED]

    def validate(self) -> None:
        """
        Check that a staff member is selected and every criterion is rated.

        Nothing is changed, so partial answers survive a failed check.

        Raises:
            FormValidationError: Naming the first missing field
        """
        with self._lock:
            if self.selected_staff is None:
                raise FormValidationError(
                    'staff', "Please select a staff member before submitting."
                )
            missing = self.missing_criteria()
            if missing:
                first = CRITERIA_BY_KEY[missing[0]]
                raise FormValidationError(
                    first.key,
                    f"Please rate every criterion. Missing: {first.title}"
                    + (f" and {len(missing) - 1} more." if len(missing) > 1 else "."),
                    missing=missing
                )

    def validated_snapshot(self) -> Dict[str, Any]:
        """
        Validate the form and copy what is on screen in one step.

        Returns:
            Dict with unit, staff, answers and remarks, ready for FeedbackRecord.build

        Raises:
            FormValidationError: Naming the first missing field
        """
        with self._lock:
            self.validate()
            return {
                'unit': self.unit,
                'staff': self.selected_staff,
                'answers': dict(self.answers),
                'remarks': self.remarks,
            }

    def _ensure_editable(self) -> None:
        if self.submitting:
            raise FormBusyError("The form cannot be changed while it is being submitted.")

    def reset(self) -> None:
        """
        Clear unit, roster, staff, ratings and remarks.

        The generation advances so that an outstanding roster lookup is dropped.
        """
        with self._lock:
            self._clear_form()
            self.generation += 1

    def begin_submission(self) -> bool:
        """
        Mark the form as being submitted.

        Returns:
            bool: False if a submission is already in flight
        """
        with self._lock:
            if self.submitting:
                return False
            self.submitting = True
            return True

    def end_submission(self) -> None:
        with self._lock:
            self.submitting = False

    def is_empty(self) -> bool:
        with self._lock:
            return (
                not self.unit
                and not self.roster
                and self.selected_staff is None
                and not self.remarks
                and all(value is UNANSWERED for value in self.answers.values())
            )

    def snapshot(self) -> Dict[str, Any]:
        """
        JSON-friendly view of the form for the web layer.

        Returns:
            Dict with unit, staff, roster, answers (None when unanswered) and remarks
        """
        with self._lock:
            return {
                'unit': self.unit,
                'staff': self.selected_staff.to_dict() if self.selected_staff else None,
                'roster': [
                    {'registration_id': s.registration_id, 'label': s.display_label}
                    for s in self.roster
                ],
                'answers': {
                    key: (None if value is UNANSWERED else value)
                    for key, value in self.answers.items()
                },
                'remarks': self.remarks,
                'submitting': self.submitting,
            }
