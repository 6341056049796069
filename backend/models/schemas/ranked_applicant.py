"""Ranker output."""

from typing import Any

from models.schemas.applicant_record import ApplicantRecord
from models.schemas.applicant_score import ALGORITHM_WEIGHTED_SUM
from models.schemas.base import CamelModel

INSIGHTS_SUFFIX = " + Gemini Insights"
ALGORITHM_WITH_INSIGHTS = ALGORITHM_WEIGHTED_SUM + INSIGHTS_SUFFIX


class RankedApplicant(ApplicantRecord):
    rank: int
    match_score: float = 0.0
    education_score: float = 0.0
    experience_score: float = 0.0
    skills_score: float = 0.0
    eligibility_score: float = 0.0
    matched_skills_count: int = 0
    matched_eligibilities_count: int = 0
    algorithm_used: str = ALGORITHM_WEIGHTED_SUM
    ranking_reasoning: str
    algorithm_details: dict[str, Any] | None = None
    insights: str | None = None  # optional enrichment, never affects rank


class EmptyResult(CamelModel):
    """Successful "nothing to rank" outcome, distinct from a failure."""
    reason: str = "No rankable applications"
    total_applications: int = 0
    excluded_application_ids: list[str] = []
