"""Scoring Engine inputs and outputs."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

ALGORITHM_WEIGHTED_SUM = "Weighted Sum Model"
ALGORITHM_SKILL_EXPERIENCE = "Skill-Experience Composite"
ALGORITHM_ENSEMBLE_TIEBREAK = "Ensemble (Tie-breaker)"
ALGORITHM_ENSEMBLE_BLEND = "Multi-Factor Assessment"


class ScoringStrategy(str, Enum):
    """How the component scores become one match score."""
    WEIGHTED_SUM = "weighted_sum"
    SKILL_EXPERIENCE = "skill_experience"
    ENSEMBLE = "ensemble"  # weighted sum + skill-experience, tie-breaker when close


class ScoringWeights(BaseModel):
    """Composite weights for the weighted sum model.

    Immutable and passed explicitly into every scoring call, so each run sees
    exactly one set of weights.
    """
    model_config = ConfigDict(frozen=True)

    education: float = Field(0.30, ge=0.0)
    experience: float = Field(0.25, ge=0.0)
    skills: float = Field(0.25, ge=0.0)
    eligibility: float = Field(0.20, ge=0.0)

    @model_validator(mode="after")
    def _sums_to_one(self):
        total = self.education + self.experience + self.skills + self.eligibility
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Scoring weights must sum to 1.0, got {total:.4f}")
        return self

    def as_dict(self) -> dict[str, float]:
        return {
            "education": self.education,
            "experience": self.experience,
            "skills": self.skills,
            "eligibility": self.eligibility,
        }


class ApplicantScore(BaseModel):
    """Component and composite scores for one applicant against one job."""
    education_score: float = 0.0  # 0-100
    experience_score: float = 0.0  # 0-100
    skills_score: float = 0.0  # 0-100
    eligibility_score: float = 0.0  # 0-100
    match_score: float = 0.0  # weighted composite, 0-100

    matched_skills: list[str] = []  # job spelling
    missing_skills: list[str] = []
    matched_eligibilities: list[str] = []
    missing_eligibilities: list[str] = []

    # Requirement context, kept for reasoning and algorithm details
    applicant_level: str = ""
    required_level: str = ""
    education_gap: int = 0  # applicant rank - required rank
    years_experience: float = 0.0
    required_years: float = 0.0
    title_relevance: float = 0.0  # 0.0-1.0, informational only
    relevant_titles: list[str] = []

    algorithm_used: str = ALGORITHM_WEIGHTED_SUM  # path that produced match_score
    strategy_scores: dict[str, float] = {}  # every candidate composite, for algorithm details

    @property
    def matched_skills_count(self) -> int:
        return len(self.matched_skills)

    @property
    def matched_eligibilities_count(self) -> int:
        return len(self.matched_eligibilities)
