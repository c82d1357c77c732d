"""
One user's evaluation form: unit catalog, roster lookups, answers and submission.
"""
import logging
from typing import Any, List, Optional

from ..models.feedback_data import SubmissionResult
from ..models.identity import SessionIdentity
from ..models.staff_record import StaffRecord
from .form_state import EvaluationFormState
from .notifier import Notifier
from .staff_resolver import StaffResolver
from .submission import SubmissionPipeline
from .unit_catalog import UnitCatalogLoader


class FormSession:
    """
    Handlers for the user actions of the form.

    Everything here belongs to this session; only the store client and
    the mirror are shared between sessions.
    """

    def __init__(self,
                 catalog: UnitCatalogLoader,
                 resolver: StaffResolver,
                 pipeline: SubmissionPipeline,
                 notifier: Notifier,
                 state: Optional[EvaluationFormState] = None):
        self.catalog = catalog
        self.resolver = resolver
        self.pipeline = pipeline
        self.notifier = notifier
        self.state = state or EvaluationFormState()
        self.logger = logging.getLogger(__name__)

    def units(self) -> List[str]:
        return self.catalog.load()

    def change_unit(self, unit_name: str) -> List[StaffRecord]:
        """
        Select a unit and load its roster.

        Returns:
            List[StaffRecord]: The roster now held by the form (empty when the
            lookup was superseded by a later unit change)
        """
        generation = self.state.begin_unit_change(unit_name)
        if not self.state.unit:
            return []

        roster = self.resolver.resolve(self.state.unit)
        self.state.apply_roster(generation, roster)
        return list(self.state.roster)

    def select_staff(self, registration_id: str) -> Optional[StaffRecord]:
        staff = self.state.select_staff(registration_id)
        if staff is None and registration_id:
            self.logger.warning(f"Staff {registration_id} is not in the roster for '{self.state.unit}'")
        return staff

    def set_answer(self, criterion_key: str, value: Any) -> None:
        self.state.set_answer(criterion_key, value)

    def set_remarks(self, remarks: str) -> None:
        self.state.set_remarks(remarks)

    def submit(self, identity: SessionIdentity) -> SubmissionResult:
        return self.pipeline.submit(self.state, identity)
