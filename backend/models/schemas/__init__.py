"""Pydantic contracts between the ranking pipeline stages."""

from models.schemas.job_requirement import JobRequirement
from models.schemas.raw_application import PDSSource, ProfileSource, RawApplication
from models.schemas.applicant_record import ApplicantRecord, EligibilityRecord
from models.schemas.applicant_features import ApplicantFeatures
from models.schemas.applicant_score import ApplicantScore, ScoringStrategy, ScoringWeights
from models.schemas.ranked_applicant import EmptyResult, RankedApplicant

__all__ = [
    "JobRequirement",
    "RawApplication",
    "ProfileSource",
    "PDSSource",
    "ApplicantRecord",
    "EligibilityRecord",
    "ApplicantFeatures",
    "ApplicantScore",
    "ScoringWeights",
    "ScoringStrategy",
    "RankedApplicant",
    "EmptyResult",
]
