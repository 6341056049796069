from models.schemas.base import CamelModel
from models.schemas.ranked_applicant import EmptyResult, RankedApplicant


class RankingSummary(CamelModel):
    rank: int
    applicant_name: str
    match_score: float
    algorithm: str


class PersistenceFailure(CamelModel):
    application_id: str
    error: str


class RankResponse(CamelModel):
    success: bool = True
    message: str = ""
    job_id: str
    job_title: str = ""
    total_applicants: int = 0
    rankings: list[RankingSummary] = []
    score_statistics: dict[str, float] = {}
    excluded_application_ids: list[str] = []
    persistence_failures: list[PersistenceFailure] = []


class NothingToRankResponse(CamelModel):
    message: str
    result: EmptyResult


class StoredRanking(CamelModel):
    """One application row as read back from the store."""
    id: str
    rank: int | None = None
    match_score: float | None = None
    education_score: float | None = None
    experience_score: float | None = None
    skills_score: float | None = None
    eligibility_score: float | None = None
    algorithm_used: str | None = None
    ranking_reasoning: str | None = None
    status: str = "pending"
    applicant_name: str = ""
    highest_educational_attainment: str | None = None
    total_years_experience: float | None = None


class RankingsResponse(CamelModel):
    success: bool = True
    total_applicants: int = 0
    ranked_applicants: int = 0
    unranked_applicants: int = 0
    applications: list[StoredRanking] = []


class StatelessRankResponse(CamelModel):
    """Result of ranking a job and applications supplied in the request body."""
    empty: bool = False
    rankings: list[RankedApplicant] = []
    score_statistics: dict[str, float] = {}
    result: EmptyResult | None = None
