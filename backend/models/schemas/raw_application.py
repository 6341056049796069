"""Raw applicant data as it arrives from the portal database.

Each application can carry two independent sources:

    profile  flat applicant_profiles row with pre-aggregated fields
    pds      Personal Data Sheet with structured sub-documents

Either may be missing. Loose fields (skills, eligibilities) stay ``Any`` here
and are resolved by the normalizer. Every source model is lenient: a field
that fails validation falls back to its default instead of rejecting the
application.
"""

import logging
import re
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from models.schemas.base import CamelModel, LenientModel, entry_list

logger = logging.getLogger(__name__)

# "2019 - 2021", "Jan 2019 – Present", "2019 to 2021"
_RANGE_SPLIT = re.compile(r"\s+(?:-|–|—|to)\s+", re.IGNORECASE)


class ProfileSource(LenientModel):
    """Flattened applicant_profiles row."""
    id: str | None = None
    first_name: str | None = None
    surname: str | None = None
    highest_educational_attainment: str | None = None
    total_years_experience: float | None = None
    skills: Any = None  # list of strings, or comma-separated string
    eligibilities: Any = None  # list of strings or {eligibilityTitle} objects


class Period(LenientModel):
    from_: str | None = Field(None, alias="from")
    to: str | None = None


def _period(value):
    """Accept a period object, or a "from - to" string."""
    if isinstance(value, str):
        parts = _RANGE_SPLIT.split(value.strip(), maxsplit=1)
        if len(parts) == 2:
            return {"from": parts[0], "to": parts[1]}
        logger.warning("Unrecognized period %r", value)
        return None
    return value


class EducationEntry(LenientModel):
    level: str | None = None  # ELEMENTARY, SECONDARY, VOCATIONAL, COLLEGE, GRADUATE STUDIES
    name_of_school: str | None = None
    basic_education_degree_course: str | None = None
    period_of_attendance: Period | None = None
    year_graduated: str | None = None

    @field_validator("period_of_attendance", mode="before")
    @classmethod
    def _parse_period(cls, value):
        return _period(value)


class WorkExperienceEntry(LenientModel):
    position_title: str | None = None
    department_agency_office_company: str | None = None
    period_of_service: Period | None = None

    @field_validator("period_of_service", mode="before")
    @classmethod
    def _parse_period(cls, value):
        return _period(value)


class EligibilityEntry(LenientModel):
    career_service: str | None = Field(
        None,
        validation_alias=AliasChoices(
            "careerService", "career_service", "eligibilityTitle", "eligibility_title", "title"
        ),
    )
    rating: str | None = None
    license_number: str | None = None


class PersonalInformation(LenientModel):
    first_name: str | None = None
    surname: str | None = None


class OtherInformation(LenientModel):
    skills: Any = None  # objects, strings, or a JSON-encoded string of either


class PDSSource(LenientModel):
    """Personal Data Sheet sub-documents."""
    id: str | None = None
    personal_information: PersonalInformation | None = None
    educational_background: list[EducationEntry] = []
    eligibility: list[EligibilityEntry] = []
    work_experience: list[WorkExperienceEntry] = []
    other_information: OtherInformation | None = None

    @field_validator("educational_background", "eligibility", "work_experience", mode="before")
    @classmethod
    def _entries(cls, value, info):
        return entry_list(value, info.field_name)


class RawApplication(CamelModel):
    """One pending application with its optional data sources."""
    application_id: str = Field(
        ..., validation_alias=AliasChoices("applicationId", "application_id", "id")
    )
    applicant_id: str = ""
    applicant_profile_id: str = ""
    profile: ProfileSource | None = None
    pds: PDSSource | None = None

    @field_validator("applicant_id", "applicant_profile_id", mode="before")
    @classmethod
    def _null_ids(cls, value):
        return "" if value is None else value

    @field_validator("profile", "pds", mode="wrap")
    @classmethod
    def _drop_unreadable_source(cls, value, handler, info):
        # A source that is not an object at all is treated as absent
        if value is not None and not isinstance(value, (dict, ProfileSource, PDSSource)):
            logger.warning("Ignoring %s: expected an object, got %s", info.field_name, type(value).__name__)
            return None
        return handler(value)
