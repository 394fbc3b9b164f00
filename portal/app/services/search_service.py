"""Candidate filtering for the reviewer listing"""

from datetime import date
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from portal.app.schemas.candidate import Candidate


class CandidateFilter(BaseModel):
    """
    Reviewer filter over an already-fetched page of candidates.

    All criteria are AND-combined; an empty criterion matches everything.
    Name and email match as case-insensitive substrings, job title, job
    type and gender match exactly, and the applied-date range is inclusive.
    """
    name: str = ""
    email: str = ""
    job_title: str = ""
    job_type: str = ""
    gender: str = ""
    applied_from: Optional[date] = None
    applied_to: Optional[date] = None

    @field_validator("name", "email", "job_title", "job_type", "gender", mode="before")
    @classmethod
    def strip_text(cls, v):
        return (v or "").strip()

    @model_validator(mode="after")
    def check_range(self):
        if self.applied_from and self.applied_to and self.applied_from > self.applied_to:
            raise ValueError("applied_from must not be after applied_to")
        return self

    @property
    def is_empty(self) -> bool:
        return self == CandidateFilter()

    def matches(self, candidate: Candidate) -> bool:
        if self.name and self.name.lower() not in candidate.full_name.lower():
            return False
        if self.email and self.email.lower() not in candidate.email.lower():
            return False
        if self.job_title and candidate.job_title != self.job_title:
            return False
        if self.job_type and candidate.job_type != self.job_type:
            return False
        if self.gender and candidate.gender != self.gender:
            return False

        if self.applied_from or self.applied_to:
            if candidate.applied_at is None:
                return False
            applied = candidate.applied_at.date()
            if self.applied_from and applied < self.applied_from:
                return False
            if self.applied_to and applied > self.applied_to:
                return False

        return True

    def apply(self, candidates: Iterable[Candidate]) -> List[Candidate]:
        """Matching candidates, in their original order"""
        return [c for c in candidates if self.matches(c)]


class FacetOptions(BaseModel):
    """Choices for the exact-match filter dropdowns"""
    job_titles: List[str] = Field(default_factory=list)
    job_types: List[str] = Field(default_factory=list)
    genders: List[str] = Field(default_factory=list)


def facet_options(candidates: Iterable[Candidate]) -> FacetOptions:
    """
    Distinct non-empty job titles, job types and genders

    Args:
        candidates: Fetched candidates

    Returns:
        Sorted option lists
    """
    values: Dict[str, set] = {"job_titles": set(), "job_types": set(), "genders": set()}
    for candidate in candidates:
        if candidate.job_title:
            values["job_titles"].add(candidate.job_title)
        if candidate.job_type:
            values["job_types"].add(candidate.job_type)
        if candidate.gender:
            values["genders"].add(candidate.gender)

    return FacetOptions(**{key: sorted(options) for key, options in values.items()})
