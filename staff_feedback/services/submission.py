"""
Submission pipeline for staff evaluations.
Validates the form, writes the record to the primary store, resets the form
and queues the spreadsheet mirror.
"""
import logging
from typing import Optional, Union

from ..models.feedback_data import FeedbackRecord, SubmissionResult
from ..models.identity import SessionIdentity
from ..utils.logging_config import ErrorHandler
from .form_state import EvaluationFormState, FormValidationError
from .mirror_sink import BackgroundMirror, MirrorSink
from .notifier import Notifier
from .store_client import StoreAPIError


class SubmissionPipeline:
    """
    Runs one submission attempt.

    The primary store write is authoritative: if it fails nothing else
    happens and the form is left as it was so the user can retry. Once the
    write succeeds the user is told so and the form is reset; the
    spreadsheet mirror is then queued on a worker thread and its failures
    are logged and otherwise ignored.
    """

    def __init__(self,
                 store,
                 feedback_table: str,
                 notifier: Notifier,
                 mirror: Optional[Union[MirrorSink, BackgroundMirror]] = None,
                 require_auth: bool = False,
                 error_handler: Optional[ErrorHandler] = None):
        """
        Initialize the pipeline.

        Args:
            store: Primary store client exposing insert(table, rows)
            feedback_table: Table receiving feedback rows
            notifier: Where user-facing messages go
            mirror: Optional spreadsheet sink, or a BackgroundMirror shared
                between pipelines; a bare sink gets its own worker
            require_auth: Refuse submissions from unauthenticated sessions
            error_handler: Error tracker shared with the other services
        """
        self.store = store
        self.feedback_table = feedback_table
        self.notifier = notifier
        self.require_auth = require_auth
        self.logger = logging.getLogger(__name__)
        self.error_handler = error_handler or ErrorHandler(self.logger)
        if mirror is not None and not isinstance(mirror, BackgroundMirror):
            mirror = BackgroundMirror(mirror, self.error_handler)
        self.mirror = mirror

    def submit(self, state: EvaluationFormState, identity: SessionIdentity) -> SubmissionResult:
        """
        Submit the current form.

        Args:
            state: Form being submitted
            identity: Submitter identity for this session

        Returns:
            SubmissionResult: Outcome; only "submitted" resets the form
        """
        if not state.begin_submission():
            self.notifier.warning("Submission in progress", "Please wait for the current submission to finish.")
            return SubmissionResult(status="busy")

        try:
            return self._submit(state, identity)
        finally:
            state.end_submission()

    def _submit(self, state: EvaluationFormState, identity: SessionIdentity) -> SubmissionResult:
        # Step 1: completeness gate and copy of what is on screen, under one lock
        try:
            draft = state.validated_snapshot()
        except FormValidationError as e:
            self.logger.info(f"Submission rejected, missing {', '.join(e.missing)}")
            title = "Select a staff member" if e.field == 'staff' else "Required fields"
            self.notifier.error(title, e.message)
            return SubmissionResult(status="invalid", error_message=e.message, field=e.field)

        if self.require_auth and not identity.authenticated:
            message = "Please sign in before submitting feedback."
            self.notifier.error("Sign-in required", message)
            return SubmissionResult(status="unauthenticated", error_message=message)

        # Step 2: immutable record
        record = FeedbackRecord.build(submitter=identity, **draft)

        # Step 3: durable write
        try:
            self.store.insert(self.feedback_table, [record.to_store_row()])
        except StoreAPIError as e:
            self.error_handler.handle_store_error(e, "feedback insert", context=record.get_summary())
            self.notifier.error(
                "Could not submit feedback",
                str(e) or "An error occurred while saving the feedback."
            )
            return SubmissionResult(status="failed", error_message=str(e), record=record)

        self.logger.info(f"Feedback stored: {record.get_summary()}")

        # Step 4: confirm and start over
        self.notifier.success("Feedback submitted", "The feedback was saved and sent.")
        state.reset()

        # Step 5: best-effort mirror, off the request path
        mirror_future = None
        if self.mirror is not None:
            mirror_future = self.mirror.submit(record.to_mirror_row(), record.get_summary())
        return SubmissionResult(status="submitted", record=record, mirror_future=mirror_future)
