"""Hiring pipeline service for reviewer decisions"""

import asyncio
from typing import Dict, List, Optional, Tuple, Union

from portal.app.core.config import settings
from portal.app.core.exceptions import (
    AuthenticationException,
    IllegalTransitionException,
    InvalidDecisionException,
    PortalException,
    user_message,
)
from portal.app.core.logging import get_logger
from portal.app.models.candidate import (
    STAGE_TRANSITIONS,
    DecisionOutcome,
    Department,
    RoundStatus,
    Stage,
)
from portal.app.schemas.candidate import Candidate, NotificationDraft, Pagination, PipelineCounts
from portal.app.services.api_service import RecruitmentAPIService, department_slug
from portal.app.services.search_service import CandidateFilter, FacetOptions, facet_options

logger = get_logger(__name__)

NOTIFICATION_BODIES = {
    DecisionOutcome.CLEARED: "Congratulations! You have been shortlisted for the next round.",
    DecisionOutcome.REJECTED: "We regret to inform you that you have not been selected.",
}


def legal_targets(stage: Stage) -> Tuple[Stage, ...]:
    """Stages a candidate at ``stage`` may be advanced to"""
    return STAGE_TRANSITIONS[stage]


def advance(candidate: Candidate, target_stage: Stage) -> Candidate:
    """
    Clear a candidate's current stage towards a later one

    The stage pointer itself moves when the candidate is fetched again.

    Args:
        candidate: Candidate under review
        target_stage: Stage strictly after the current one

    Returns:
        Copy of the candidate with ``round_status`` cleared

    Raises:
        IllegalTransitionException: If the move is not allowed
    """
    if candidate.round_status != RoundStatus.IN_PROGRESS:
        raise IllegalTransitionException(
            f"Candidate {candidate.applicant_id} is already {candidate.round_status.value}",
            details={"applicant_id": candidate.applicant_id},
        )
    if target_stage not in legal_targets(candidate.stage):
        raise IllegalTransitionException(
            f"Cannot move from {candidate.stage.value} to {target_stage.value}",
            details={"from": candidate.stage.value, "to": target_stage.value},
        )

    return candidate.model_copy(update={"round_status": RoundStatus.CLEARED})


def reject(candidate: Candidate) -> Candidate:
    """
    Reject a candidate at their current stage

    Raises:
        IllegalTransitionException: If the candidate is selected or already decided
    """
    if candidate.stage.is_terminal:
        raise IllegalTransitionException(
            f"Candidate {candidate.applicant_id} has already been selected",
            details={"applicant_id": candidate.applicant_id},
        )
    if candidate.round_status != RoundStatus.IN_PROGRESS:
        raise IllegalTransitionException(
            f"Candidate {candidate.applicant_id} is already {candidate.round_status.value}",
            details={"applicant_id": candidate.applicant_id},
        )

    return candidate.model_copy(update={"round_status": RoundStatus.REJECTED})


def default_notification(candidate: Candidate, outcome: DecisionOutcome) -> NotificationDraft:
    return NotificationDraft(
        outcome=outcome,
        message=f"Dear {candidate.full_name},\n\n{NOTIFICATION_BODIES[outcome]}",
        link=settings.DEFAULT_NOTIFICATION_LINK,
    )


class CandidateReview:
    """
    A reviewer's pending decision for one listed candidate.

    Choosing an outcome only prepares a notification draft; nothing is
    changed remotely until the pipeline sends it.
    """

    def __init__(self, candidate: Candidate):
        self.candidate = candidate
        self.outcome: Optional[DecisionOutcome] = None
        self.target_stage: Optional[Stage] = None
        self.notification: Optional[NotificationDraft] = None
        self.mail_sent = False
        self.in_flight = False
        self.error: Optional[str] = None
        self._drafts: Dict[DecisionOutcome, NotificationDraft] = {}

    @property
    def applicant_id(self) -> Union[int, str]:
        return self.candidate.applicant_id

    @property
    def locked(self) -> bool:
        """Already decided remotely; only a refetch can unlock it"""
        return self.candidate.is_decided or self.candidate.is_terminal

    @property
    def legal_targets(self) -> Tuple[Stage, ...]:
        return legal_targets(self.candidate.stage)

    @property
    def can_send(self) -> bool:
        if self.locked or self.in_flight or self.mail_sent or self.notification is None:
            return False
        if self.outcome == DecisionOutcome.REJECTED:
            return True
        return (
            self.outcome == DecisionOutcome.CLEARED
            and self.target_stage in self.legal_targets
        )

    def decide(self, outcome: DecisionOutcome, target_stage: Optional[Stage] = None) -> None:
        """
        Record the reviewer's choice and prepare the notification

        Args:
            outcome: Cleared or rejected
            target_stage: Stage to advance to; ignored for rejections

        Raises:
            InvalidDecisionException: If the review can no longer change
            IllegalTransitionException: If the target stage is not reachable
        """
        if self.locked or self.mail_sent:
            raise InvalidDecisionException(
                "This candidate has already been decided",
                details={"applicant_id": self.applicant_id},
            )
        if self.in_flight:
            raise InvalidDecisionException("A notification is being sent for this candidate")

        if outcome == DecisionOutcome.REJECTED:
            target_stage = None
        elif target_stage is not None and target_stage not in self.legal_targets:
            raise IllegalTransitionException(
                f"Cannot move from {self.candidate.stage.value} to {target_stage.value}",
                details={"from": self.candidate.stage.value, "to": target_stage.value},
            )

        self.outcome = outcome
        self.target_stage = target_stage
        # An edited draft survives switching outcome back and forth
        if outcome not in self._drafts:
            self._drafts[outcome] = default_notification(self.candidate, outcome)
        self.notification = self._drafts[outcome]
        self.error = None

    def edit_notification(self, message: Optional[str] = None, link: Optional[str] = None) -> None:
        if self.outcome is None or self.notification is None:
            raise InvalidDecisionException("Choose a decision before editing the notification")

        draft = NotificationDraft(
            outcome=self.outcome,
            message=message if message is not None else self.notification.message,
            link=link if link is not None else self.notification.link,
        )
        self._drafts[self.outcome] = draft
        self.notification = draft


class HiringPipeline:
    """Reviewer view of one department stage: listing, filters and decisions"""

    def __init__(
        self,
        api: RecruitmentAPIService,
        department: Optional[Union[Department, str]] = None,
        stage: Stage = Stage.APPLIED,
        page_size: Optional[int] = None
    ):
        self.api = api
        self.department = department
        self.stage = stage
        self.page_size = page_size or settings.DEFAULT_PAGE_SIZE
        self.pagination = Pagination(limit=self.page_size)
        self.reviews: List[CandidateReview] = []
        self.filter = CandidateFilter()
        self.counts: Optional[PipelineCounts] = None
        self.error: Optional[str] = None
        self.requires_sign_in = False

    @property
    def candidates(self) -> List[Candidate]:
        return [review.candidate for review in self.reviews]

    @property
    def visible_reviews(self) -> List[CandidateReview]:
        """Reviews on the current page that pass the active filter"""
        return [review for review in self.reviews if self.filter.matches(review.candidate)]

    def set_filter(self, candidate_filter: CandidateFilter) -> None:
        self.filter = candidate_filter

    def clear_filter(self) -> None:
        self.filter = CandidateFilter()

    def facets(self) -> FacetOptions:
        return facet_options(self.candidates)

    def review_for(self, applicant_id: Union[int, str]) -> CandidateReview:
        for review in self.reviews:
            if review.applicant_id == applicant_id:
                return review
        raise KeyError(f"No candidate {applicant_id} on this page")

    def _record_failure(self, exc: PortalException) -> str:
        message = user_message(exc)
        self.error = message
        if isinstance(exc, AuthenticationException):
            self.requires_sign_in = True
        return message

    def _rebuild_reviews(self, candidates: List[Candidate]) -> None:
        # Undecided reviews of unchanged candidates keep the reviewer's choices
        previous = {
            review.applicant_id: review
            for review in self.reviews
            if not review.mail_sent
        }
        reviews = []
        for candidate in candidates:
            review = previous.get(candidate.applicant_id)
            if review is None or review.candidate != candidate:
                review = CandidateReview(candidate)
            reviews.append(review)
        self.reviews = reviews

    async def load_stage(
        self,
        department: Union[Department, str],
        stage: Stage,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> bool:
        """
        Fetch one page of candidates at a stage and build their reviews

        Returns:
            True if the page was loaded; on failure ``error`` holds the message
        """
        page_size = page_size or self.page_size
        try:
            result = await self.api.fetch_candidates(department, stage, page, page_size)
        except PortalException as e:
            self._record_failure(e)
            logger.warning(
                f"Failed to load {stage.value} candidates: {e.message}",
                extra={"department": department_slug(department), "stage": stage.value},
            )
            return False

        if department != self.department or stage != self.stage:
            self.reviews = []
        self.department = department
        self.stage = stage
        self.page_size = page_size
        self.pagination = result.pagination
        self._rebuild_reviews(result.candidates)
        self.error = None

        logger.info(
            f"Loaded {len(result.candidates)} candidates",
            extra={"department": department_slug(department), "stage": stage.value},
        )
        return True

    async def change_page(self, page: int) -> bool:
        """Load another page of the current stage; out-of-range pages are ignored"""
        if self.department is None:
            raise InvalidDecisionException("No department loaded")
        if page < 1 or page > self.pagination.total_pages or page == self.pagination.current_page:
            return False
        return await self.load_stage(self.department, self.stage, page, self.page_size)

    async def refresh(self) -> bool:
        if self.department is None:
            raise InvalidDecisionException("No department loaded")
        return await self.load_stage(
            self.department, self.stage, self.pagination.current_page, self.page_size
        )

    async def load_counts(
        self,
        department: Optional[Union[Department, str]] = None
    ) -> Optional[PipelineCounts]:
        """Fetch badge counts; returns None and sets ``error`` on failure"""
        department = department or self.department
        if department is None:
            raise InvalidDecisionException("No department loaded")

        try:
            self.counts = await self.api.fetch_counts(department)
        except PortalException as e:
            self._record_failure(e)
            return None
        return self.counts

    async def send_notification(self, review: CandidateReview) -> bool:
        """
        Commit a review: move the candidate and notify them concurrently

        Both remote calls must succeed for the review to count as sent.
        A failure of either leaves the candidate unchanged and the review
        ready to retry.

        Args:
            review: Review with a sendable decision

        Returns:
            True if the review is (now or already) sent

        Raises:
            InvalidDecisionException: If the decision is incomplete
        """
        if review.mail_sent:
            return True
        if review.in_flight:
            return False
        if not review.can_send:
            raise InvalidDecisionException(
                "Choose a decision and a target stage first",
                details={"applicant_id": review.applicant_id},
            )

        candidate = review.candidate
        if review.outcome == DecisionOutcome.CLEARED:
            decided = advance(candidate, review.target_stage)
        else:
            decided = reject(candidate)

        department = self.department or candidate.department
        notification = review.notification

        review.in_flight = True
        review.error = None
        try:
            move_result, notify_result = await asyncio.gather(
                self.api.move_candidate(
                    department, candidate.applicant_id, review.target_stage, review.outcome
                ),
                self.api.send_notification(
                    candidate.email, notification.message, notification.link, review.outcome
                ),
                return_exceptions=True,
            )
        finally:
            review.in_flight = False

        failures = [r for r in (move_result, notify_result) if isinstance(r, BaseException)]
        for failure in failures:
            if not isinstance(failure, PortalException):
                raise failure

        if failures:
            if len(failures) == 1:
                succeeded = "notify" if isinstance(move_result, BaseException) else "move"
                logger.warning(
                    f"Partial decision for applicant {candidate.applicant_id}: "
                    f"{succeeded} succeeded, {failures[0].message}",
                    extra={"applicant_id": candidate.applicant_id, "department": department_slug(department)},
                )
            review.error = self._record_failure(failures[0])
            return False

        review.candidate = decided
        review.mail_sent = True
        logger.info(
            f"Decision sent for applicant {candidate.applicant_id}: {review.outcome.value}",
            extra={"applicant_id": candidate.applicant_id, "department": department_slug(department)},
        )
        return True
