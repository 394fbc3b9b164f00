"""Pytest configuration and shared fixtures"""

import json
from typing import Callable, List

import httpx
import pytest

from portal.app.core.security import CredentialStore
from portal.app.models.candidate import UserRole
from portal.app.schemas.application import ApplicationRecord, UploadedFile
from portal.app.schemas.auth import Identity
from portal.app.services.api_service import RecruitmentAPIService


TEST_BASE_URL = "http://testserver"


@pytest.fixture
def identity() -> Identity:
    """Signed-in applicant"""
    return Identity(id=7, name="Priya Patel", email="priya.patel@example.com")


@pytest.fixture
def hr_identity() -> Identity:
    return Identity(id=1, name="Asha Rao", email="asha.rao@rft.example.com", role=UserRole.HR)


@pytest.fixture
def resume_file() -> UploadedFile:
    return UploadedFile(
        filename="resume.pdf",
        content=b"%PDF-1.4 test resume",
        content_type="application/pdf",
    )


@pytest.fixture
def valid_record(resume_file) -> ApplicationRecord:
    """An application record that passes every step"""
    return ApplicationRecord(
        full_name="Priya Patel",
        dob="2001-04-12",
        gender="Female",
        mobile="9876543210",
        email="priya.patel@example.com",
        current_city="Rohtak",
        home_town="Rohtak",
        willing_to_relocate="Yes",
        qualification="B.Tech",
        course="Computer Science",
        college="Maharshi Dayanand University",
        graduation_year="2023",
        marks="78.5",
        all_sem_cleared="Yes",
        tech_skills={"Python", "SQL/Databases"},
        has_internship="No",
        preferred_role="Backend Developer",
        preferred_locations={"Gurgaon"},
        joining="Yes",
        shifts="Yes",
        expected_ctc="600000",
        source="LinkedIn",
        online_test="Yes",
        laptop="Yes",
        languages={"English"},
        resume=resume_file,
        agree=True,
    )


@pytest.fixture
def credentials(hr_identity) -> CredentialStore:
    return CredentialStore(token="test-token", identity=hr_identity)


class RecordingHandler:
    """MockTransport handler that records requests and replays queued responses"""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def json_bodies(self) -> List[dict]:
        return [json.loads(r.content) for r in self.requests if r.content]


@pytest.fixture
async def make_api(credentials):
    """Build a RecruitmentAPIService backed by an httpx.MockTransport"""
    created = []

    def factory(responder, creds=None):
        handler = RecordingHandler(responder)
        api = RecruitmentAPIService(
            credentials=creds if creds is not None else credentials,
            base_url=TEST_BASE_URL,
            transport=httpx.MockTransport(handler),
        )
        created.append(api)
        return api, handler

    yield factory

    for api in created:
        await api.close()
