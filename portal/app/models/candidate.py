"""Hiring pipeline enumerations"""

import enum
from typing import Dict, Tuple


class UserRole(str, enum.Enum):
    """User role enumeration"""
    USER = "user"
    HR = "hr"


class Department(str, enum.Enum):
    """Departments with their own applicant routes"""
    ENGINEERING = "engineering"
    DESIGN = "design"
    MARKETING = "marketing"
    SALES = "sales"
    HR = "hr"
    FINANCE = "finance"
    OPERATIONS = "operations"


class RoundStatus(str, enum.Enum):
    """Outcome of the candidate's attempt at their current stage"""
    IN_PROGRESS = "in_progress"
    CLEARED = "cleared"
    REJECTED = "rejected"


class DecisionOutcome(str, enum.Enum):
    """Reviewer decision for the current stage"""
    CLEARED = "cleared"
    REJECTED = "rejected"


class Stage(str, enum.Enum):
    """Hiring stages, declared in pipeline order"""
    APPLIED = "Applied"
    RESUME_SCREENING = "Resume Screening"
    ROUND_1 = "Round 1"
    ROUND_2 = "Round 2"
    FINAL_ROUND = "Final Round"
    HR_ROUND = "HR Round"
    SELECTED = "Selected"

    @property
    def position(self) -> int:
        return STAGE_ORDER.index(self)

    @property
    def slug(self) -> str:
        """URL form used by the HR dashboard, e.g. ``resume-screening``"""
        return self.value.lower().replace(" ", "-")

    @property
    def is_terminal(self) -> bool:
        return self is Stage.SELECTED

    def is_after(self, other: "Stage") -> bool:
        return self.position > other.position

    @classmethod
    def parse(cls, value: str) -> "Stage":
        """
        Parse a stage from its label or slug, ignoring case

        Raises:
            ValueError: If the value names no stage
        """
        key = str(value or "").strip().lower().replace("-", " ")
        for stage in cls:
            if stage.value.lower() == key:
                return stage
        raise ValueError(f"Unknown stage: {value!r}")


STAGE_ORDER: Tuple[Stage, ...] = tuple(Stage)

# Accepting a candidate may move them to any later stage
STAGE_TRANSITIONS: Dict[Stage, Tuple[Stage, ...]] = {
    stage: STAGE_ORDER[index + 1:] for index, stage in enumerate(STAGE_ORDER)
}

# Stages shown on the department hiring board
REVIEW_STAGES: Tuple[Stage, ...] = STAGE_ORDER[:-1]
