"""Candidate schemas for the hiring pipeline"""

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from portal.app.models.candidate import DecisionOutcome, RoundStatus, Stage


class Candidate(BaseModel):
    """HR-side view of a submitted application"""
    applicant_id: Union[int, str] = Field(
        ..., validation_alias=AliasChoices("applicant_id", "applicantId", "id")
    )
    full_name: str = Field("", validation_alias=AliasChoices("full_name", "fullName", "name"))
    email: str = ""
    gender: str = ""
    department: str = ""
    job_title: str = Field("", validation_alias=AliasChoices("job_title", "jobTitle"))
    job_type: str = Field("", validation_alias=AliasChoices("job_type", "jobType"))
    applied_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("applied_at", "appliedAt", "createdAt")
    )
    stage: Stage = Field(Stage.APPLIED, validation_alias=AliasChoices("stage", "round"))
    round_status: RoundStatus = Field(
        RoundStatus.IN_PROGRESS, validation_alias=AliasChoices("round_status", "roundStatus")
    )

    @field_validator("stage", mode="before")
    @classmethod
    def parse_stage(cls, v):
        if isinstance(v, Stage):
            return v
        return Stage.parse(v)

    @field_validator("full_name", "email", "gender", "department", "job_title", "job_type", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @property
    def is_decided(self) -> bool:
        return self.round_status != RoundStatus.IN_PROGRESS

    @property
    def is_terminal(self) -> bool:
        return self.stage.is_terminal or self.round_status == RoundStatus.REJECTED

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "applicant_id": 42,
                "full_name": "Priya Patel",
                "email": "priya.patel@example.com",
                "gender": "Female",
                "department": "engineering",
                "job_title": "Engineer",
                "job_type": "Full Time",
                "applied_at": "2024-05-02T10:30:00Z",
                "stage": "Round 1",
                "round_status": "in_progress"
            }
        }
    )


class Pagination(BaseModel):
    """Pagination metadata returned with a candidate page"""
    current_page: int = Field(1, ge=1, validation_alias=AliasChoices("current_page", "currentPage", "page"))
    total_pages: int = Field(1, ge=0, validation_alias=AliasChoices("total_pages", "totalPages"))
    total_count: int = Field(
        0, ge=0, validation_alias=AliasChoices("total_count", "totalCandidates", "totalCount", "total")
    )
    limit: int = Field(10, ge=1)

    model_config = ConfigDict(populate_by_name=True)


class CandidatePage(BaseModel):
    """One fetched page of candidates"""
    candidates: List[Candidate] = Field(
        default_factory=list, validation_alias=AliasChoices("candidates", "data")
    )
    pagination: Pagination = Field(default_factory=Pagination)

    model_config = ConfigDict(populate_by_name=True)


class StageCounts(BaseModel):
    """Badge counts for one stage or one department"""
    active: int = Field(0, ge=0)
    rejected: int = Field(0, ge=0)
    accepted: int = Field(0, ge=0)

    @property
    def total(self) -> int:
        return self.active + self.rejected + self.accepted


class PipelineCounts(BaseModel):
    """Badge counts for a department, overall and per stage"""
    department: str
    totals: StageCounts = Field(default_factory=StageCounts)
    stages: Dict[Stage, StageCounts] = Field(default_factory=dict)

    @field_validator("stages", mode="before")
    @classmethod
    def parse_stage_keys(cls, v):
        if not v:
            return {}
        return {Stage.parse(k) if not isinstance(k, Stage) else k: counts for k, counts in v.items()}

    def for_stage(self, stage: Stage) -> StageCounts:
        return self.stages.get(stage, StageCounts())


class NotificationDraft(BaseModel):
    """Message a reviewer sends with a decision"""
    outcome: DecisionOutcome
    message: str = Field(..., min_length=1)
    link: Optional[str] = None

    @field_validator("link")
    @classmethod
    def blank_link_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v
