"""Integration tests for the wizard and pipeline over a mocked HTTP backend"""

import json

import httpx
import pytest

from portal.app.core.security import CredentialStore
from portal.app.models.application import ApplicationTarget, SubmissionStatus, WizardStep
from portal.app.models.candidate import DecisionOutcome, Department, Stage
from portal.app.repositories.draft_repository import InMemoryDraftStore
from portal.app.services.pipeline_service import HiringPipeline
from portal.app.services.search_service import CandidateFilter
from portal.app.services.wizard_service import ApplicationWizard


FORM_INPUT = [
    # (step, field, value)
    (WizardStep.PERSONAL, "dob", "2001-04-12"),
    (WizardStep.PERSONAL, "gender", "Female"),
    (WizardStep.PERSONAL, "mobile", "9876543210"),
    (WizardStep.LOCATION, "currentCity", "Rohtak"),
    (WizardStep.LOCATION, "homeTown", "Rohtak"),
    (WizardStep.LOCATION, "willingToRelocate", "Yes"),
    (WizardStep.EDUCATION, "qualification", "B.Tech"),
    (WizardStep.EDUCATION, "course", "Computer Science"),
    (WizardStep.EDUCATION, "college", "Maharshi Dayanand University"),
    (WizardStep.EDUCATION, "graduationYear", "2024"),
    (WizardStep.EDUCATION, "marks", "8.2"),
    (WizardStep.EDUCATION, "allSemCleared", "Yes"),
    (WizardStep.EXPERIENCE, "hasInternship", "Yes"),
    (WizardStep.EXPERIENCE, "projectDesc", "Inventory dashboard in Django"),
    (WizardStep.PREFERENCES, "preferredRole", "Backend Developer"),
    (WizardStep.PREFERENCES, "preferredLocations", ["Gurgaon", "Rohtak"]),
    (WizardStep.PREFERENCES, "joining", "Notice Period"),
    (WizardStep.PREFERENCES, "shifts", "Yes"),
    (WizardStep.GENERAL, "source", "Campus drive"),
    (WizardStep.GENERAL, "onlineTest", "Yes"),
    (WizardStep.GENERAL, "laptop", "Yes"),
    (WizardStep.GENERAL, "pan", "ABCDE1234F"),
    (WizardStep.DECLARATION, "agree", True),
]

APPLICANTS = [
    {"id": 1, "fullName": "Priya Patel", "email": "priya.patel@example.com",
     "gender": "Female", "jobTitle": "Engineer", "jobType": "Full Time"},
    {"id": 2, "fullName": "Wei Chen", "email": "wei.chen@example.com",
     "gender": "Male", "jobTitle": "Engineer", "jobType": "Full Time"},
    {"id": 3, "fullName": "Fatima Al-Farsi", "email": "fatima.alfarsi@example.com",
     "gender": "Female", "jobTitle": "Designer", "jobType": "Internship"},
    {"id": 4, "fullName": "Sophie Dubois", "email": "sophie.dubois@example.com",
     "gender": "Female", "jobTitle": "Engineer", "jobType": "Internship"},
    {"id": 5, "fullName": "Liam O'Connor", "email": "liam.oconnor@example.com",
     "gender": "Male", "jobTitle": "Analyst", "jobType": "Full Time"},
]


class FakeBackend:
    """Routes MockTransport requests to canned recruitment API responses"""

    def __init__(self):
        self.moved = {}
        self.emails = []
        self.email_status = 200
        self.email_error = None
        self.extra_rows = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path

        if path == "/application/upload":
            return httpx.Response(201, json={"message": "Application submitted successfully!"})

        if path.endswith("/move"):
            applicant_id = int(path.split("/")[-2])
            self.moved[applicant_id] = json.loads(request.content)
            return httpx.Response(200, json={"success": True})

        if path == "/application/api/send-email":
            if self.email_error:
                return httpx.Response(self.email_status, json={"error": self.email_error})
            self.emails.append(json.loads(request.content))
            return httpx.Response(200, json={"message": "Email sent"})

        if path == "/application/api/applicants/engineering":
            rows = [row for row in APPLICANTS if row["id"] not in self.moved] + self.extra_rows
            return httpx.Response(200, json={
                "data": rows,
                "pagination": {"currentPage": 1, "totalPages": 1,
                               "totalCandidates": len(rows), "limit": 10},
            })

        return httpx.Response(404, json={"error": "Not found"})


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.mark.asyncio
async def test_complete_application_flow(make_api, backend, identity, resume_file):
    """Fill every step, autosave along the way, then submit once"""
    api, handler = make_api(backend, creds=CredentialStore())
    store = InMemoryDraftStore()
    wizard = ApplicationWizard(
        api,
        target=ApplicationTarget.JOB,
        draft_store=store,
        job_title="Backend Engineer",
        jobpost_id=12,
    )
    await wizard.start(identity)

    for step in WizardStep:
        assert wizard.current_step == step
        for field_step, field, value in FORM_INPUT:
            if field_step == step:
                wizard.set_field(field, value)
        if step == WizardStep.SKILLS:
            wizard.toggle_selection("techSkills", "Python")
            wizard.toggle_selection("techSkills", "Others")
            wizard.set_field("otherTechSkills", "Go")
        if step == WizardStep.DOCUMENTS:
            wizard.attach_file("resume", resume_file)

        assert await wizard.autosave() is True
        if not step.is_last:
            assert wizard.advance() is True, wizard.errors

    saved = await store.load(identity.email)
    assert saved["preferredLocations"] == ["Gurgaon", "Rohtak"]

    result = await wizard.submit()

    assert result.ok, result.message
    assert len(handler.requests) == 1
    content = handler.requests[0].content
    assert b'"jobpost_id": 12' in content
    assert b'"projectDesc": "Inventory dashboard in Django"' in content
    assert b'"otherTechSkills": "Go"' in content
    assert b'"fullName": "Priya Patel"' in content
    assert b'filename="resume.pdf"' in content

    assert wizard.current_step == WizardStep.PERSONAL
    assert wizard.submission_status == SubmissionStatus.SUBMITTED
    assert await store.load(identity.email) is None


@pytest.mark.asyncio
async def test_review_and_notify_flow(make_api, backend):
    """Filter a stage, clear one candidate, then see them leave the stage"""
    api, _ = make_api(backend)
    pipeline = HiringPipeline(api)

    assert await pipeline.load_stage(Department.ENGINEERING, Stage.RESUME_SCREENING)
    assert len(pipeline.visible_reviews) == 5

    pipeline.set_filter(CandidateFilter(gender="Female", job_title="Engineer"))
    assert [r.applicant_id for r in pipeline.visible_reviews] == [1, 4]

    review = pipeline.review_for(4)
    review.decide(DecisionOutcome.CLEARED)
    assert review.can_send is False
    review.decide(DecisionOutcome.CLEARED, Stage.ROUND_1)
    assert review.can_send is True

    assert await pipeline.send_notification(review) is True

    assert backend.moved[4] == {"targetStage": "Round 1", "outcome": "cleared"}
    assert backend.emails[0]["to"] == "sophie.dubois@example.com"
    assert backend.emails[0]["message"].startswith("Dear Sophie Dubois,")

    await pipeline.refresh()
    assert [r.applicant_id for r in pipeline.visible_reviews] == [1]


@pytest.mark.asyncio
async def test_session_conflict_during_send(make_api, backend, credentials):
    """A conflicting session forces sign-in and leaves the review retryable"""
    api, _ = make_api(backend)
    pipeline = HiringPipeline(api)
    await pipeline.load_stage(Department.ENGINEERING, Stage.RESUME_SCREENING)

    backend.email_status = 409
    backend.email_error = "SESSION_CONFLICT"
    review = pipeline.review_for(2)
    review.decide(DecisionOutcome.REJECTED)

    assert await pipeline.send_notification(review) is False

    assert pipeline.requires_sign_in is True
    assert credentials.token is None
    assert review.mail_sent is False
    assert review.can_send is True


@pytest.mark.asyncio
async def test_malformed_stage_payload_is_retryable(make_api, backend):
    """An unreadable applicant list becomes a user-facing error, not a crash"""
    api, _ = make_api(backend)
    pipeline = HiringPipeline(api)
    assert await pipeline.load_stage(Department.ENGINEERING, Stage.RESUME_SCREENING)

    backend.extra_rows = [{"id": 6, "fullName": "Ana Costa", "roundStatus": "pending"}]
    assert await pipeline.refresh() is False

    assert pipeline.error == "Something went wrong on our side. Please try again later."
    assert pipeline.requires_sign_in is False
    assert [r.applicant_id for r in pipeline.visible_reviews] == [1, 2, 3, 4, 5]

    backend.extra_rows = []
    assert await pipeline.refresh() is True
    assert pipeline.error is None
