"""Unit tests for per-step application validation"""

import pytest

from portal.app.models.application import WizardStep
from portal.app.schemas.application import ApplicationRecord
from portal.app.services.validation import (
    REQUIRED_FIELDS,
    STEP_FIELDS,
    validate_all,
    validate_step,
)


class TestPersonalStep:
    """Test cases for the personal details step"""

    def test_valid_step_has_no_errors(self, valid_record):
        assert validate_step(WizardStep.PERSONAL, valid_record) == {}

    def test_short_mobile_rejected(self, valid_record):
        """A five digit mobile number gets the format message"""
        valid_record.mobile = "12345"

        errors = validate_step(WizardStep.PERSONAL, valid_record)

        assert errors == {"mobile": "Enter valid 10-digit number"}

    def test_ten_digit_mobile_accepted(self, valid_record):
        valid_record.mobile = "9876543210"
        assert "mobile" not in validate_step(WizardStep.PERSONAL, valid_record)

    @pytest.mark.parametrize("mobile", ["98765432101", "98765-4321", "abcdefghij", " 9876543210"])
    def test_malformed_mobile_rejected(self, valid_record, mobile):
        valid_record.mobile = mobile
        assert validate_step(WizardStep.PERSONAL, valid_record)["mobile"] == "Enter valid 10-digit number"

    def test_blank_mobile_is_required(self, valid_record):
        valid_record.mobile = ""
        assert validate_step(WizardStep.PERSONAL, valid_record)["mobile"] == "Mobile Number is required"

    def test_alt_mobile_optional_but_checked(self, valid_record):
        valid_record.alt_mobile = ""
        assert validate_step(WizardStep.PERSONAL, valid_record) == {}

        valid_record.alt_mobile = "123"
        assert validate_step(WizardStep.PERSONAL, valid_record) == {
            "altMobile": "Enter valid 10-digit number"
        }

    @pytest.mark.parametrize("email", ["priya", "priya@example", "priya example.com"])
    def test_invalid_email(self, valid_record, email):
        valid_record.email = email
        assert validate_step(WizardStep.PERSONAL, valid_record)["email"] == "Email is invalid"

    def test_missing_email(self, valid_record):
        valid_record.email = "   "
        assert validate_step(WizardStep.PERSONAL, valid_record)["email"] == "Email is required"


class TestEducationStep:
    """Test cases for the education step"""

    def test_year_before_lower_bound(self, valid_record):
        valid_record.graduation_year = "1899"

        errors = validate_step(WizardStep.EDUCATION, valid_record)

        assert list(errors) == ["graduationYear"]
        assert errors["graduationYear"].startswith("Year must be between")

    def test_year_within_bounds(self, valid_record):
        valid_record.graduation_year = "2026"
        assert validate_step(WizardStep.EDUCATION, valid_record) == {}

    @pytest.mark.parametrize("year", ["2031", "23", "20x3", "12345"])
    def test_year_out_of_range_or_malformed(self, valid_record, year):
        valid_record.graduation_year = year
        assert "graduationYear" in validate_step(WizardStep.EDUCATION, valid_record)

    @pytest.mark.parametrize("marks", ["0", "78", "78.5", "99.99", "9.5"])
    def test_marks_accepted(self, valid_record, marks):
        valid_record.marks = marks
        assert validate_step(WizardStep.EDUCATION, valid_record) == {}

    @pytest.mark.parametrize("marks", ["100.5", "-1", "78.555", "abc", "7.", "150"])
    def test_marks_rejected(self, valid_record, marks):
        valid_record.marks = marks
        assert validate_step(WizardStep.EDUCATION, valid_record)["marks"] == "Marks must be between 0 and 100"

    def test_all_required_fields_reported(self):
        errors = validate_step(WizardStep.EDUCATION, ApplicationRecord())

        assert set(errors) == set(REQUIRED_FIELDS[WizardStep.EDUCATION])


class TestDependentFields:
    """Test cases for fields that only matter when another field is set"""

    def test_no_internship_needs_no_description(self, valid_record):
        valid_record.has_internship = "No"
        valid_record.project_desc = ""

        assert validate_step(WizardStep.EXPERIENCE, valid_record) == {}

    def test_internship_requires_description(self, valid_record):
        valid_record.has_internship = "Yes"
        valid_record.project_desc = ""

        assert validate_step(WizardStep.EXPERIENCE, valid_record) == {
            "projectDesc": "Description required"
        }

    def test_others_skill_does_not_require_free_text(self, valid_record):
        valid_record.tech_skills = {"Others"}
        valid_record.other_tech_skills = ""

        assert validate_step(WizardStep.SKILLS, valid_record) == {}

    def test_no_skill_selected(self, valid_record):
        valid_record.tech_skills = set()
        assert validate_step(WizardStep.SKILLS, valid_record) == {
            "techSkills": "Select at least one skill"
        }


class TestPreferencesAndGeneral:
    """Test cases for the preferences and general steps"""

    @pytest.mark.parametrize("ctc", ["", "0", "10000000"])
    def test_ctc_accepted(self, valid_record, ctc):
        valid_record.expected_ctc = ctc
        assert validate_step(WizardStep.PREFERENCES, valid_record) == {}

    @pytest.mark.parametrize("ctc", ["10000001", "6.5", "-5", "six lakh"])
    def test_ctc_rejected(self, valid_record, ctc):
        valid_record.expected_ctc = ctc
        assert "expectedCTC" in validate_step(WizardStep.PREFERENCES, valid_record)

    def test_locations_required(self, valid_record):
        valid_record.preferred_locations = set()
        assert validate_step(WizardStep.PREFERENCES, valid_record) == {
            "preferredLocations": "Select at least one location"
        }

    def test_identity_documents_optional(self, valid_record):
        valid_record.aadhar = valid_record.pan = valid_record.passport = ""
        assert validate_step(WizardStep.GENERAL, valid_record) == {}

    def test_identity_documents_validated_when_present(self, valid_record):
        valid_record.aadhar = "12345"
        valid_record.pan = "abcde1234f"
        valid_record.passport = "A12"

        errors = validate_step(WizardStep.GENERAL, valid_record)

        assert set(errors) == {"aadhar", "pan", "passport"}

    def test_valid_identity_documents(self, valid_record):
        valid_record.aadhar = "123412341234"
        valid_record.pan = "ABCDE1234F"
        valid_record.passport = "j1234567"

        assert validate_step(WizardStep.GENERAL, valid_record) == {}


class TestDocumentsAndDeclaration:
    """Test cases for the last two steps"""

    def test_resume_required(self, valid_record):
        valid_record.resume = None
        assert validate_step(WizardStep.DOCUMENTS, valid_record) == {"resume": "Resume is required"}

    def test_academics_optional(self, valid_record):
        valid_record.academics = None
        assert validate_step(WizardStep.DOCUMENTS, valid_record) == {}

    def test_declaration_must_be_accepted(self, valid_record):
        valid_record.agree = False
        assert validate_step(WizardStep.DECLARATION, valid_record) == {
            "agree": "You must agree to the declaration"
        }


class TestValidateAll:
    """Test cases for whole-record validation"""

    def test_valid_record_is_clean(self, valid_record):
        assert validate_all(valid_record) == {}

    def test_step_accepts_plain_int(self, valid_record):
        valid_record.mobile = "1"
        assert "mobile" in validate_step(0, valid_record)

    def test_only_fields_of_the_step_are_checked(self, valid_record):
        valid_record.mobile = "1"
        valid_record.resume = None

        results = validate_all(valid_record)

        assert set(results) == {WizardStep.PERSONAL, WizardStep.DOCUMENTS}
        for step, errors in results.items():
            assert set(errors) <= set(STEP_FIELDS[step])
