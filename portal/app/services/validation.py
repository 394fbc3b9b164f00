"""Per-step validation rules for the application form

Every rule returns data, never raises: a mapping from the field's wire name
to a message, with at most one message per field. A step only looks at the
fields collected on that step.
"""

import re
from typing import Callable, Dict, Tuple, Union

from portal.app.core.config import settings
from portal.app.models.application import WizardStep, YES
from portal.app.schemas.application import ApplicationRecord

ErrorMap = Dict[str, str]

MOBILE_PATTERN = re.compile(r"[0-9]{10}")
EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
YEAR_PATTERN = re.compile(r"[0-9]{4}")
MARKS_PATTERN = re.compile(r"[0-9]{1,2}(\.[0-9]{1,2})?")
CTC_PATTERN = re.compile(r"[0-9]+")
AADHAR_PATTERN = re.compile(r"[0-9]{12}")
PAN_PATTERN = re.compile(r"[A-Z]{5}[0-9]{4}[A-Z]")
PASSPORT_PATTERN = re.compile(r"[A-Z0-9]{8,9}", re.IGNORECASE)

MARKS_MIN = 0.0
MARKS_MAX = 101.0

FIELD_REQUIRED = "This field is required"
INVALID_MOBILE = "Enter valid 10-digit number"

# Every field collected on each step, in display order
STEP_FIELDS: Dict[WizardStep, Tuple[str, ...]] = {
    WizardStep.PERSONAL: ("fullName", "dob", "gender", "mobile", "altMobile", "email"),
    WizardStep.LOCATION: ("currentCity", "homeTown", "willingToRelocate"),
    WizardStep.EDUCATION: (
        "qualification", "course", "college", "affiliatedUniv",
        "graduationYear", "marks", "allSemCleared",
    ),
    WizardStep.SKILLS: ("techSkills", "otherTechSkills", "certifications"),
    WizardStep.EXPERIENCE: ("hasInternship", "projectDesc", "github", "linkedin"),
    WizardStep.PREFERENCES: (
        "preferredRole", "preferredLocations", "joining", "shifts", "expectedCTC",
    ),
    WizardStep.GENERAL: (
        "source", "onlineTest", "laptop", "languages", "aadhar", "pan", "passport",
    ),
    WizardStep.DOCUMENTS: ("resume", "academics"),
    WizardStep.DECLARATION: ("agree",),
}

# Unconditionally required fields per step
REQUIRED_FIELDS: Dict[WizardStep, Tuple[str, ...]] = {
    WizardStep.PERSONAL: ("fullName", "dob", "gender", "mobile", "email"),
    WizardStep.LOCATION: ("currentCity", "homeTown", "willingToRelocate"),
    WizardStep.EDUCATION: (
        "qualification", "course", "college", "graduationYear", "marks", "allSemCleared",
    ),
    WizardStep.SKILLS: ("techSkills",),
    WizardStep.EXPERIENCE: ("hasInternship",),
    WizardStep.PREFERENCES: ("preferredRole", "preferredLocations", "joining", "shifts"),
    WizardStep.GENERAL: ("source", "onlineTest", "laptop"),
    WizardStep.DOCUMENTS: ("resume",),
    WizardStep.DECLARATION: ("agree",),
}


def _blank(value: str) -> bool:
    return not value or not value.strip()


def _validate_personal(record: ApplicationRecord) -> ErrorMap:
    errors: ErrorMap = {}

    if _blank(record.full_name):
        errors["fullName"] = "Full Name is required"
    if not record.dob:
        errors["dob"] = "Date of Birth is required"
    if not record.gender:
        errors["gender"] = "Gender is required"

    if _blank(record.mobile):
        errors["mobile"] = "Mobile Number is required"
    elif not MOBILE_PATTERN.fullmatch(record.mobile):
        errors["mobile"] = INVALID_MOBILE

    if record.alt_mobile and not MOBILE_PATTERN.fullmatch(record.alt_mobile):
        errors["altMobile"] = INVALID_MOBILE

    if _blank(record.email):
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.search(record.email):
        errors["email"] = "Email is invalid"

    return errors


def _validate_location(record: ApplicationRecord) -> ErrorMap:
    errors: ErrorMap = {}

    if _blank(record.current_city):
        errors["currentCity"] = "Current City is required"
    if _blank(record.home_town):
        errors["homeTown"] = "Home Town is required"
    if not record.willing_to_relocate:
        errors["willingToRelocate"] = FIELD_REQUIRED

    return errors


def _validate_education(record: ApplicationRecord) -> ErrorMap:
    errors: ErrorMap = {}

    if not record.qualification:
        errors["qualification"] = "Qualification is required"
    if _blank(record.course):
        errors["course"] = "Course Name is required"
    if _blank(record.college):
        errors["college"] = "College/University is required"

    year_min, year_max = settings.GRADUATION_YEAR_MIN, settings.GRADUATION_YEAR_MAX
    if _blank(record.graduation_year):
        errors["graduationYear"] = "Year of Passing is required"
    elif (
        not YEAR_PATTERN.fullmatch(record.graduation_year)
        or not year_min <= int(record.graduation_year) <= year_max
    ):
        errors["graduationYear"] = f"Year must be between {year_min} and {year_max}"

    if _blank(record.marks):
        errors["marks"] = "Aggregate Marks/CGPA is required"
    elif (
        not MARKS_PATTERN.fullmatch(record.marks)
        or not MARKS_MIN <= float(record.marks) <= MARKS_MAX
    ):
        errors["marks"] = "Marks must be between 0 and 100"

    if not record.all_sem_cleared:
        errors["allSemCleared"] = FIELD_REQUIRED

    return errors


def _validate_skills(record: ApplicationRecord) -> ErrorMap:
    # "Others" reveals otherTechSkills but never makes it mandatory
    if not record.tech_skills:
        return {"techSkills": "Select at least one skill"}
    return {}


def _validate_experience(record: ApplicationRecord) -> ErrorMap:
    errors: ErrorMap = {}

    if not record.has_internship:
        errors["hasInternship"] = FIELD_REQUIRED
    if record.has_internship == YES and _blank(record.project_desc):
        errors["projectDesc"] = "Description required"

    return errors


def _validate_preferences(record: ApplicationRecord) -> ErrorMap:
    errors: ErrorMap = {}

    if _blank(record.preferred_role):
        errors["preferredRole"] = "Preferred Role is required"
    if not record.preferred_locations:
        errors["preferredLocations"] = "Select at least one location"
    if not record.joining:
        errors["joining"] = FIELD_REQUIRED
    if not record.shifts:
        errors["shifts"] = FIELD_REQUIRED

    ctc = record.expected_ctc
    if ctc and (not CTC_PATTERN.fullmatch(ctc) or int(ctc) > settings.MAX_EXPECTED_CTC):
        errors["expectedCTC"] = "CTC must be an integer between 0 and 1,00,00,000"

    return errors


def _validate_general(record: ApplicationRecord) -> ErrorMap:
    errors: ErrorMap = {}

    if _blank(record.source):
        errors["source"] = FIELD_REQUIRED
    if not record.online_test:
        errors["onlineTest"] = FIELD_REQUIRED
    if not record.laptop:
        errors["laptop"] = FIELD_REQUIRED

    if record.aadhar and not AADHAR_PATTERN.fullmatch(record.aadhar):
        errors["aadhar"] = "Aadhar must be 12 digits"
    if record.pan and not PAN_PATTERN.fullmatch(record.pan):
        errors["pan"] = "PAN must be 10 characters (e.g., ABCDE1234F)"
    if record.passport and not PASSPORT_PATTERN.fullmatch(record.passport):
        errors["passport"] = "Passport should be 8-9 alphanumeric characters"

    return errors


def _validate_documents(record: ApplicationRecord) -> ErrorMap:
    # The academics transcript is optional
    if record.resume is None:
        return {"resume": "Resume is required"}
    return {}


def _validate_declaration(record: ApplicationRecord) -> ErrorMap:
    if record.agree is not True:
        return {"agree": "You must agree to the declaration"}
    return {}


STEP_VALIDATORS: Dict[WizardStep, Callable[[ApplicationRecord], ErrorMap]] = {
    WizardStep.PERSONAL: _validate_personal,
    WizardStep.LOCATION: _validate_location,
    WizardStep.EDUCATION: _validate_education,
    WizardStep.SKILLS: _validate_skills,
    WizardStep.EXPERIENCE: _validate_experience,
    WizardStep.PREFERENCES: _validate_preferences,
    WizardStep.GENERAL: _validate_general,
    WizardStep.DOCUMENTS: _validate_documents,
    WizardStep.DECLARATION: _validate_declaration,
}


def validate_step(step: Union[WizardStep, int], record: ApplicationRecord) -> ErrorMap:
    """
    Validate the fields collected on one step

    Args:
        step: Step to validate
        record: Application record

    Returns:
        Field wire name to message; empty when the step is valid
    """
    return STEP_VALIDATORS[WizardStep(step)](record)


def validate_all(record: ApplicationRecord) -> Dict[WizardStep, ErrorMap]:
    """Errors of every step that currently fails"""
    results = {}
    for step in WizardStep:
        errors = validate_step(step, record)
        if errors:
            results[step] = errors
    return results
