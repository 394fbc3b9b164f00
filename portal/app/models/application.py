"""Application form enumerations and option catalogues"""

import enum
from typing import Tuple


class WizardStep(enum.IntEnum):
    """The nine application form screens, in order"""
    PERSONAL = 0
    LOCATION = 1
    EDUCATION = 2
    SKILLS = 3
    EXPERIENCE = 4
    PREFERENCES = 5
    GENERAL = 6
    DOCUMENTS = 7
    DECLARATION = 8

    @property
    def title(self) -> str:
        return STEP_TITLES[self]

    @property
    def is_first(self) -> bool:
        return self is WizardStep.PERSONAL

    @property
    def is_last(self) -> bool:
        return self is WizardStep.DECLARATION

    def next(self) -> "WizardStep":
        # Saturates at the declaration step
        return WizardStep(min(self + 1, WizardStep.DECLARATION))

    def previous(self) -> "WizardStep":
        return WizardStep(max(self - 1, WizardStep.PERSONAL))


STEP_TITLES = {
    WizardStep.PERSONAL: "Personal Details",
    WizardStep.LOCATION: "Location Details",
    WizardStep.EDUCATION: "Education",
    WizardStep.SKILLS: "Skills",
    WizardStep.EXPERIENCE: "Experience",
    WizardStep.PREFERENCES: "Preferences",
    WizardStep.GENERAL: "General",
    WizardStep.DOCUMENTS: "Documents",
    WizardStep.DECLARATION: "Declaration",
}


class SubmissionStatus(str, enum.Enum):
    """Submission lifecycle of a wizard session"""
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    FAILED = "failed"


class ApplicationTarget(str, enum.Enum):
    """Which form the wizard is collecting"""
    JOB = "job"          # application to a job post
    ENQUIRY = "enquiry"  # general candidate enquiry (contact form)


YES = "Yes"
NO = "No"
OTHERS = "Others"

GENDER_OPTIONS: Tuple[str, ...] = ("Male", "Female", "Other")
YES_NO_OPTIONS: Tuple[str, ...] = (YES, NO)
SHIFT_OPTIONS: Tuple[str, ...] = (YES, NO)
JOINING_OPTIONS: Tuple[str, ...] = (YES, NO, "Notice Period")
QUALIFICATION_OPTIONS: Tuple[str, ...] = (
    "Diploma", "B.Tech", "B.Sc", "B.Com", "BA", "M.Tech", "M.Sc", "MBA", OTHERS,
)
TECH_SKILL_OPTIONS: Tuple[str, ...] = (
    "Python", "Java", "C++", "JavaScript", "Web Development", "SQL/Databases",
    "Data Structures & Algorithms", "Cloud/DevOps", "Machine Learning/AI",
    "Cybersecurity", OTHERS,
)
LOCATION_OPTIONS: Tuple[str, ...] = (
    "Rohtak", "Gurgaon", "North India", "East India", "Central India",
    "West India", "South India", "All over India",
)
LANGUAGE_OPTIONS: Tuple[str, ...] = ("English", "Hindi")
