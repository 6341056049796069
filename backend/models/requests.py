from pydantic import Field

from models.schemas.applicant_score import ScoringStrategy
from models.schemas.base import CamelModel
from models.schemas.job_requirement import JobRequirement
from models.schemas.raw_application import RawApplication


class RankRequest(CamelModel):
    job: JobRequirement = Field(..., description="Job to rank against")
    applications: list[RawApplication] = Field(
        default_factory=list, max_length=2000, description="Applications with profile and/or PDS data"
    )
    strategy: ScoringStrategy | None = Field(
        None, description="Scoring strategy; defaults to the configured one"
    )
