"""Application wizard service for the multi-step application form"""

from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from portal.app.core.exceptions import (
    AuthenticationException,
    ErrorCategory,
    PortalException,
    error_category,
    user_message,
)
from portal.app.core.logging import get_logger
from portal.app.models.application import ApplicationTarget, SubmissionStatus, WizardStep
from portal.app.repositories.draft_repository import DraftStore
from portal.app.schemas.application import (
    FILE_FIELDS,
    ApplicationRecord,
    SubmissionResult,
    UploadedFile,
)
from portal.app.schemas.auth import Identity
from portal.app.services.api_service import RecruitmentAPIService
from portal.app.services.validation import STEP_FIELDS, validate_step

logger = get_logger(__name__)

NO_JOB_SELECTED = "No job selected. Please apply from the Job Board."
INCOMPLETE_FORM = "Please complete all steps before submitting."
FIX_ERRORS = "Please correct the highlighted fields."
SUBMITTED_MESSAGE = "Application submitted successfully!"


class ApplicationWizard:
    """
    Drives one applicant through the nine-step form.

    Holds the application record plus the wizard state (current step,
    field errors, submission status). Validation results are stored on
    ``errors``; remote failures are stored on ``submission_error`` as
    user-facing text.
    """

    def __init__(
        self,
        api: RecruitmentAPIService,
        target: ApplicationTarget = ApplicationTarget.JOB,
        draft_store: Optional[DraftStore] = None,
        identity: Optional[Identity] = None,
        job_title: str = "",
        jobpost_id: Optional[Union[int, str]] = None
    ):
        self.api = api
        self.target = target
        self.draft_store = draft_store
        self.identity = identity
        self.job_title = job_title
        self.jobpost_id = jobpost_id

        self.record = ApplicationRecord.blank(identity)
        self.current_step = WizardStep.PERSONAL
        self.errors: Dict[str, str] = {}
        self.submission_status = SubmissionStatus.EDITING
        self.submission_error: Optional[str] = None

    @property
    def step_title(self) -> str:
        return self.current_step.title

    @property
    def is_first_step(self) -> bool:
        return self.current_step.is_first

    @property
    def is_last_step(self) -> bool:
        return self.current_step.is_last

    @property
    def draft_key(self) -> Optional[str]:
        if self.identity is None or not self.identity.email:
            return None
        return self.identity.email

    def visible_fields(self) -> List[str]:
        """Wire names of the current step's fields, hiding inactive dependents"""
        return [
            field for field in STEP_FIELDS[self.current_step]
            if self.record.is_visible(field)
        ]

    async def start(self, identity: Optional[Identity] = None) -> None:
        """
        Begin a session: restore the saved draft, then auto-fill from identity

        Args:
            identity: Signed-in user; replaces the current identity if given
        """
        if identity is not None:
            self.identity = identity

        draft = None
        key = self.draft_key
        if self.draft_store is not None and key:
            try:
                draft = await self.draft_store.load(key)
            except Exception as e:
                logger.error(f"Failed to load draft for {key}: {e}")

        if draft:
            self.record = ApplicationRecord.from_draft(draft, self.identity)
            logger.info(f"Restored draft for {key}")
        else:
            self.record = ApplicationRecord.blank(self.identity)

        self.current_step = WizardStep.PERSONAL
        self.errors = {}
        self.submission_status = SubmissionStatus.EDITING
        self.submission_error = None

    def apply_identity(self, identity: Identity) -> None:
        """Adopt a (possibly late-arriving) identity without overwriting edits"""
        self.identity = identity
        self.record.apply_identity(identity)

    def set_field(self, field: str, value: Any) -> None:
        """
        Change one field and clear its error

        Raises:
            KeyError: If the field is unknown
            ValidationError: If the value does not fit the field's type;
                the record is left unchanged
        """
        name = ApplicationRecord.attribute_for(field)
        wire = ApplicationRecord.wire_name(field)

        try:
            setattr(self.record, name, value)
        except ValidationError as e:
            logger.debug(f"Rejected value for {wire}: {e.errors()[0]['msg']}")
            raise

        self.errors.pop(wire, None)

    def toggle_selection(self, field: str, value: str) -> bool:
        """Toggle one option of a multi-select field"""
        selected = self.record.toggle_selection(field, value)
        self.errors.pop(ApplicationRecord.wire_name(field), None)
        return selected

    def attach_file(self, field: str, upload: Optional[UploadedFile]) -> None:
        if ApplicationRecord.wire_name(field) not in FILE_FIELDS:
            raise KeyError(f"Not a document field: {field}")
        self.set_field(field, upload)

    def advance(self) -> bool:
        """
        Validate the current step and move forward if it is clean

        Returns:
            True if the step was valid
        """
        errors = validate_step(self.current_step, self.record)
        if errors:
            self.errors = errors
            logger.debug(
                f"Step {self.current_step.name} has {len(errors)} error(s)",
                extra={"step": self.current_step.value},
            )
            return False

        self.current_step = self.current_step.next()
        self.errors = {}
        return True

    def retreat(self) -> None:
        self.current_step = self.current_step.previous()
        self.errors = {}

    async def autosave(self) -> bool:
        """
        Write the current record to the draft store

        Returns:
            True if a draft was written
        """
        key = self.draft_key
        if self.draft_store is None or not key:
            return False

        try:
            await self.draft_store.save(key, self.record.to_draft())
        except Exception as e:
            logger.error(f"Failed to save draft for {key}: {e}")
            return False
        return True

    async def restart(self) -> None:
        """Discard the record and the saved draft and go back to the first step"""
        self._reset_record()
        self.submission_status = SubmissionStatus.EDITING
        self.submission_error = None
        await self._clear_draft()

    def _reset_record(self) -> None:
        self.record = ApplicationRecord.blank(self.identity)
        self.current_step = WizardStep.PERSONAL
        self.errors = {}

    async def _clear_draft(self) -> None:
        key = self.draft_key
        if self.draft_store is None or not key:
            return
        try:
            await self.draft_store.clear(key)
        except Exception as e:
            logger.error(f"Failed to clear draft for {key}: {e}")

    def _submission_extra(self) -> Dict[str, Any]:
        if self.target != ApplicationTarget.JOB:
            return {}
        return {
            "jobTitle": self.job_title,
            "jobpost_id": self.jobpost_id,
            "user_id": self.identity.id if self.identity else None,
        }

    def _local_failure(self, message: str) -> SubmissionResult:
        self.submission_status = SubmissionStatus.FAILED
        self.submission_error = message
        return SubmissionResult(
            status=SubmissionStatus.FAILED,
            message=message,
            category=ErrorCategory.LOCAL,
        )

    async def submit(self) -> Optional[SubmissionResult]:
        """
        Submit the application with a single network call

        Returns:
            Submission result, or None if a submission is already in flight
        """
        if self.submission_status == SubmissionStatus.SUBMITTING:
            logger.info("Submission already in progress, ignoring")
            return None

        if not self.current_step.is_last:
            return SubmissionResult(
                status=SubmissionStatus.FAILED,
                message=INCOMPLETE_FORM,
                category=ErrorCategory.LOCAL,
            )

        errors = validate_step(self.current_step, self.record)
        if errors:
            self.errors = errors
            return SubmissionResult(
                status=SubmissionStatus.FAILED,
                message=FIX_ERRORS,
                category=ErrorCategory.LOCAL,
            )

        if self.target == ApplicationTarget.JOB and not self.jobpost_id:
            return self._local_failure(NO_JOB_SELECTED)

        # Claimed before the first await so a concurrent call sees it
        self.submission_status = SubmissionStatus.SUBMITTING
        self.submission_error = None

        try:
            response = await self.api.submit_application(
                self.target,
                self.record.to_submission_data(self._submission_extra()),
                self.record.resume,
                self.record.academics,
            )
        except PortalException as e:
            message = user_message(e)
            logger.warning(
                f"Application submission failed: {e.message}",
                extra={"target": self.target.value, "status_code": e.status_code},
            )
            self.submission_status = SubmissionStatus.FAILED
            self.submission_error = message
            return SubmissionResult(
                status=SubmissionStatus.FAILED,
                message=message,
                category=error_category(e),
                requires_sign_in=isinstance(e, AuthenticationException),
            )
        except Exception:
            self.submission_status = SubmissionStatus.FAILED
            raise

        logger.info("Application submitted", extra={"target": self.target.value})
        self._reset_record()
        await self._clear_draft()
        self.submission_status = SubmissionStatus.SUBMITTED

        return SubmissionResult(
            status=SubmissionStatus.SUBMITTED,
            message=response.get("message") or SUBMITTED_MESSAGE,
            response=response,
        )
