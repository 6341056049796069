"""Normalizer output: one canonical record per rankable application."""

from models.schemas.base import CamelModel

NOT_SPECIFIED = "Not specified"
UNKNOWN_NAME = "Unknown"


class EligibilityRecord(CamelModel):
    eligibility_title: str


class ApplicantRecord(CamelModel):
    """Canonical applicant record.

    Built fresh for every ranking run; never persisted by the pipeline.
    """
    application_id: str
    applicant_id: str = ""
    applicant_profile_id: str = ""
    applicant_name: str = UNKNOWN_NAME
    highest_educational_attainment: str = NOT_SPECIFIED  # "LEVEL - course" or "LEVEL"
    total_years_experience: float = 0.0  # rounded to 1 decimal
    skills: list[str] = []
    eligibilities: list[EligibilityRecord] = []
    work_experience_titles: list[str] = []  # original listing order
    data_source: dict[str, str] = {}  # field -> "pds" | "profile" | "none"
