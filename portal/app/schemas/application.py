"""Application form schemas"""

from typing import Any, Callable, Dict, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from portal.app.core.exceptions import ErrorCategory
from portal.app.models.application import OTHERS, YES, SubmissionStatus
from portal.app.schemas.auth import Identity


class UploadedFile(BaseModel):
    """A document attached to the application"""
    filename: str = Field(..., min_length=1)
    content: bytes
    content_type: str = "application/octet-stream"

    def as_upload(self) -> tuple:
        """Tuple form accepted by httpx ``files=``"""
        return (self.filename, self.content, self.content_type)


SET_FIELDS = ("techSkills", "preferredLocations", "languages")
FILE_FIELDS = ("resume", "academics")

# Fields shown only while their controlling field has the qualifying value
DEPENDENT_FIELDS: Dict[str, Callable[["ApplicationRecord"], bool]] = {
    "otherTechSkills": lambda record: OTHERS in record.tech_skills,
    "projectDesc": lambda record: record.has_internship == YES,
}


class ApplicationRecord(BaseModel):
    """
    The in-progress application, one per wizard session.

    Attribute names are snake_case; the wire and error-map names are the
    camelCase aliases the remote service expects (``fullName``,
    ``projectDesc``...). Both spellings are accepted on input.
    """

    # Personal
    full_name: str = Field("", alias="fullName")
    dob: str = ""
    gender: str = ""
    mobile: str = ""
    alt_mobile: str = Field("", alias="altMobile")
    email: str = ""

    # Location
    current_city: str = Field("", alias="currentCity")
    home_town: str = Field("", alias="homeTown")
    willing_to_relocate: str = Field("", alias="willingToRelocate")

    # Education
    qualification: str = ""
    course: str = ""
    college: str = ""
    affiliated_univ: str = Field("", alias="affiliatedUniv")
    graduation_year: str = Field("", alias="graduationYear")
    marks: str = ""
    all_sem_cleared: str = Field("", alias="allSemCleared")

    # Skills
    tech_skills: Set[str] = Field(default_factory=set, alias="techSkills")
    other_tech_skills: str = Field("", alias="otherTechSkills")
    certifications: str = ""

    # Experience
    has_internship: str = Field("", alias="hasInternship")
    project_desc: str = Field("", alias="projectDesc")
    github: str = ""
    linkedin: str = ""

    # Preferences
    preferred_role: str = Field("", alias="preferredRole")
    preferred_locations: Set[str] = Field(default_factory=set, alias="preferredLocations")
    joining: str = ""
    shifts: str = ""
    expected_ctc: str = Field("", alias="expectedCTC")

    # General
    source: str = ""
    online_test: str = Field("", alias="onlineTest")
    laptop: str = ""
    languages: Set[str] = Field(default_factory=set)
    aadhar: str = ""
    pan: str = ""
    passport: str = ""

    # Documents
    resume: Optional[UploadedFile] = None
    academics: Optional[UploadedFile] = None

    # Declaration
    agree: bool = False

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    @classmethod
    def blank(cls, identity: Optional[Identity] = None) -> "ApplicationRecord":
        """Initial shape of a record, pre-filled from the signed-in user"""
        record = cls()
        if identity is not None:
            record.apply_identity(identity)
        return record

    @classmethod
    def attribute_for(cls, field: str) -> str:
        """
        Map a wire name or attribute name to the attribute name

        Raises:
            KeyError: If no such field exists
        """
        if field in cls.model_fields:
            return field
        for name, info in cls.model_fields.items():
            if info.alias == field:
                return name
        raise KeyError(f"Unknown application field: {field}")

    @classmethod
    def wire_name(cls, field: str) -> str:
        """Map an attribute name or wire name to the wire name"""
        name = cls.attribute_for(field)
        return cls.model_fields[name].alias or name

    def get(self, field: str) -> Any:
        return getattr(self, self.attribute_for(field))

    def apply_identity(self, identity: Identity) -> None:
        """Fill name and email from the identity, never over user input"""
        if identity.name and not self.full_name.strip():
            self.full_name = identity.name
        if identity.email and not self.email.strip():
            self.email = identity.email

    def toggle_selection(self, field: str, value: str) -> bool:
        """
        Add ``value`` to a multi-select field, or remove it if present

        Returns:
            True if the value is selected afterwards
        """
        if self.wire_name(field) not in SET_FIELDS:
            raise KeyError(f"Not a multi-select field: {field}")

        selection: Set[str] = self.get(field)
        if value in selection:
            selection.remove(value)
            return False
        selection.add(value)
        return True

    def is_visible(self, field: str) -> bool:
        rule = DEPENDENT_FIELDS.get(self.wire_name(field))
        return rule is None or rule(self)

    def to_draft(self) -> Dict[str, Any]:
        """All non-file fields, JSON ready; multi-selects become sorted lists"""
        data = self.model_dump(by_alias=True, exclude=set(FILE_FIELDS))
        for field in SET_FIELDS:
            data[field] = sorted(data[field])
        return data

    @classmethod
    def from_draft(cls, data: Dict[str, Any], identity: Optional[Identity] = None) -> "ApplicationRecord":
        """Rebuild a record from ``to_draft`` output; attachments are never restored"""
        fields = {k: v for k, v in (data or {}).items() if k not in FILE_FIELDS}
        record = cls.model_validate(fields)
        if identity is not None:
            record.apply_identity(identity)
        return record

    def to_submission_data(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        JSON field bundle for the multipart submission

        Hidden dependent fields are sent empty; the stored values stay on
        the record.

        Args:
            extra: Additional keys merged into the bundle (job post, user id)

        Returns:
            Field bundle
        """
        data = self.to_draft()
        for field in DEPENDENT_FIELDS:
            if not self.is_visible(field):
                data[field] = ""
        if extra:
            data.update(extra)
        return data


class SubmissionResult(BaseModel):
    """Outcome of a wizard submission"""
    status: SubmissionStatus
    message: str
    category: Optional[ErrorCategory] = None
    requires_sign_in: bool = False
    response: Dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == SubmissionStatus.SUBMITTED

