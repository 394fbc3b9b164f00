"""HTTP client for the remote recruitment API"""

import json
from typing import Any, Dict, Optional, Union

import httpx
from pydantic import ValidationError

from portal.app.core.config import settings
from portal.app.core.exceptions import (
    AuthenticationException,
    BusinessRuleException,
    ConnectivityException,
    ExternalServiceException,
)
from portal.app.core.logging import get_logger
from portal.app.core.middleware import build_event_hooks
from portal.app.core.security import CredentialStore
from portal.app.models.application import ApplicationTarget
from portal.app.models.candidate import DecisionOutcome, Department, Stage
from portal.app.schemas.application import UploadedFile
from portal.app.schemas.candidate import CandidatePage, PipelineCounts

logger = get_logger(__name__)

SERVICE_NAME = "recruitment-api"
SESSION_CONFLICT = "SESSION_CONFLICT"
MALFORMED_RESPONSE = "Malformed response"


def department_slug(department: Union[Department, str]) -> str:
    if isinstance(department, Department):
        return department.value
    return str(department).strip().lower()


class RecruitmentAPIService:
    """
    Thin async wrapper over the recruitment API.

    Every method either returns parsed data or raises one of
    ConnectivityException, BusinessRuleException, AuthenticationException
    or ExternalServiceException. An authentication failure also resets the
    local credentials.
    """

    def __init__(
        self,
        credentials: Optional[CredentialStore] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.credentials = credentials or CredentialStore()
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS,
            headers={"User-Agent": f"{settings.APP_NAME}/{settings.APP_VERSION}"},
            event_hooks=build_event_hooks(),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RecruitmentAPIService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _auth_headers(self, required: bool) -> Dict[str, str]:
        if required:
            return self.credentials.bearer_headers()
        if self.credentials.token and not self.credentials.is_expired():
            return {"Authorization": f"Bearer {self.credentials.token}"}
        return {}

    async def _request(
        self,
        method: str,
        path: str,
        require_auth: bool = True,
        **kwargs: Any
    ) -> Dict[str, Any]:
        headers = self._auth_headers(require_auth)

        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"{method} {path} timed out: {e}")
            raise ConnectivityException("The request timed out")
        except httpx.TransportError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ConnectivityException(f"Could not reach the server: {e}")

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Dict[str, Any]:
        """
        Parse a response body or raise the matching exception

        Args:
            response: Completed HTTP response

        Returns:
            JSON body as a dictionary (empty if the body is not JSON)
        """
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"data": body}

        if response.is_success:
            return body

        status_code = response.status_code
        error = body.get("error") or body.get("message")
        if isinstance(error, (dict, list)):
            error = json.dumps(error)
        message = str(error) if error else f"Request failed with status {status_code}"

        if error == SESSION_CONFLICT or status_code in (401, 403):
            logger.warning(f"Authentication rejected by server: {message}")
            self.credentials.reset()
            raise AuthenticationException(message, status_code=status_code)

        if 400 <= status_code < 500:
            raise BusinessRuleException(message, status_code=status_code, details=body)

        raise ExternalServiceException(SERVICE_NAME, message, status_code=status_code)

    async def submit_application(
        self,
        target: ApplicationTarget,
        data: Dict[str, Any],
        resume: Optional[UploadedFile],
        academics: Optional[UploadedFile] = None
    ) -> Dict[str, Any]:
        """
        Submit a completed application as one multipart POST

        Args:
            target: Job application or general enquiry
            data: JSON field bundle
            resume: Resume document
            academics: Optional academic transcript

        Returns:
            Response body
        """
        path = (
            settings.APPLICATION_UPLOAD_PATH
            if target == ApplicationTarget.JOB
            else settings.ENQUIRY_UPLOAD_PATH
        )

        files = {}
        if resume is not None:
            files["resume"] = resume.as_upload()
        if academics is not None:
            files["academics"] = academics.as_upload()

        logger.info(f"Submitting {target.value} application", extra={"target": target.value})
        return await self._request(
            "POST",
            path,
            require_auth=False,
            data={"data": json.dumps(data)},
            files=files or None,
        )

    async def fetch_candidates(
        self,
        department: Union[Department, str],
        stage: Stage,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> CandidatePage:
        """
        Fetch one page of candidates at a stage

        Args:
            department: Department
            stage: Hiring stage
            page: 1-based page number
            page_size: Page size, defaults to DEFAULT_PAGE_SIZE

        Returns:
            Candidates with pagination metadata
        """
        slug = department_slug(department)
        limit = page_size or settings.DEFAULT_PAGE_SIZE
        limit = max(1, min(limit, settings.MAX_PAGE_SIZE))
        page = max(1, page)

        body = await self._request(
            "GET",
            f"{settings.APPLICANTS_PATH}/{slug}",
            params={"round": stage.value, "page": page, "limit": limit},
        )

        rows = body.get("data") or body.get("candidates") or []
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            logger.error(f"Unexpected candidate rows for {slug}", extra={"department": slug})
            raise ExternalServiceException(SERVICE_NAME, MALFORMED_RESPONSE)
        candidates = [{"department": slug, "stage": stage.value, **row} for row in rows]
        pagination = body.get("pagination") or {
            "current_page": page,
            "total_pages": 1,
            "total_count": len(candidates),
            "limit": limit,
        }

        try:
            return CandidatePage.model_validate({"candidates": candidates, "pagination": pagination})
        except ValidationError as e:
            logger.error(f"Unexpected candidate payload for {slug}: {e}", extra={"department": slug})
            raise ExternalServiceException(SERVICE_NAME, MALFORMED_RESPONSE)

    async def move_candidate(
        self,
        department: Union[Department, str],
        applicant_id: Union[int, str],
        target_stage: Optional[Stage],
        outcome: DecisionOutcome
    ) -> Dict[str, Any]:
        """Move a candidate to a later stage, or mark them rejected"""
        slug = department_slug(department)
        payload = {
            "targetStage": target_stage.value if target_stage else None,
            "outcome": outcome.value,
        }

        logger.info(
            f"Moving applicant {applicant_id}: {outcome.value}",
            extra={"applicant_id": applicant_id, "department": slug},
        )
        return await self._request(
            "POST",
            f"{settings.APPLICANTS_PATH}/{slug}/{applicant_id}/move",
            json=payload,
        )

    async def send_notification(
        self,
        email: str,
        message: str,
        link: Optional[str],
        outcome: DecisionOutcome
    ) -> Dict[str, Any]:
        """Ask the remote service to email a candidate about a decision"""
        payload = {
            "to": email,
            "message": message,
            "link": link,
            "outcome": outcome.value,
        }
        return await self._request("POST", settings.SEND_EMAIL_PATH, json=payload)

    async def fetch_counts(self, department: Union[Department, str]) -> PipelineCounts:
        """Badge counts for a department, overall and per stage"""
        slug = department_slug(department)
        body = await self._request("GET", f"{settings.APPLICANTS_PATH}/{slug}/counts")

        try:
            return PipelineCounts.model_validate({
                "department": slug,
                "totals": body.get("totals") or {},
                "stages": body.get("stages") or {},
            })
        except ValidationError as e:
            logger.error(f"Unexpected counts payload for {slug}: {e}", extra={"department": slug})
            raise ExternalServiceException(SERVICE_NAME, MALFORMED_RESPONSE)
