"""Extractor output: comparable features derived from an ApplicantRecord."""

from pydantic import BaseModel


class ApplicantFeatures(BaseModel):
    """Features in comparison-ready form.

    Token sets hold casefolded, whitespace-collapsed keys mapped to the
    applicant's original spelling.
    """
    education_level: str = ""  # canonical level token, "" if unknown
    education_rank: int = 0  # 0 (unknown) .. 5 (GRADUATE STUDIES)
    years_experience: float = 0.0
    skill_tokens: dict[str, str] = {}
    eligibility_tokens: dict[str, str] = {}
    title_words: list[str] = []  # lowercase words from work-experience titles
