"""Domain enumerations"""

from portal.app.models.application import (
    WizardStep,
    SubmissionStatus,
    ApplicationTarget,
)
from portal.app.models.candidate import (
    UserRole,
    Department,
    Stage,
    RoundStatus,
    DecisionOutcome,
    STAGE_ORDER,
    STAGE_TRANSITIONS,
)

__all__ = [
    "WizardStep",
    "SubmissionStatus",
    "ApplicationTarget",
    "UserRole",
    "Department",
    "Stage",
    "RoundStatus",
    "DecisionOutcome",
    "STAGE_ORDER",
    "STAGE_TRANSITIONS",
]
