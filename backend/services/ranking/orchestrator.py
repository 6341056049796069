"""Ranking orchestrator: wires the pipeline stages together.

Flow:
    job + raw applications
      ├─ validate_job(job)                      → InvalidJobRequirementError on bad input
      ├─ normalize_batch(applications)          → ApplicantRecord[] (+ excluded ids)
      ├─ score_batch(job, records, weights,
      │              strategy)                  → (record, ApplicantScore)[]
      └─ rank_scored(scored, weights)           → RankedApplicant[]

The whole run is a pure function of its inputs: no shared state, no I/O.
Persisting the output is the caller's job.
"""

import logging
import math
from datetime import date

from config import settings
from models.schemas.applicant_score import ScoringStrategy, ScoringWeights
from models.schemas.job_requirement import JobRequirement
from models.schemas.ranked_applicant import EmptyResult, RankedApplicant
from models.schemas.raw_application import RawApplication
from services.ranking.errors import InvalidJobRequirementError
from services.ranking.normalizer import normalize_batch
from services.ranking.ranker import rank_scored
from services.ranking.scoring import score_batch

logger = logging.getLogger(__name__)


def default_weights() -> ScoringWeights:
    """Weights from settings; a bad configuration fails loudly here."""
    return ScoringWeights(
        education=settings.weight_education,
        experience=settings.weight_experience,
        skills=settings.weight_skills,
        eligibility=settings.weight_eligibility,
    )


def default_strategy() -> ScoringStrategy:
    return ScoringStrategy(settings.scoring_strategy)


def validate_job(job: JobRequirement) -> None:
    years = job.years_of_experience
    if math.isnan(years) or math.isinf(years) or years < 0:
        raise InvalidJobRequirementError(
            f"Job {job.id}: years_of_experience must be a non-negative number, got {years}"
        )


def rank_applicants_for_job(
    job: JobRequirement,
    applications: list[RawApplication],
    weights: ScoringWeights | None = None,
    today: date | None = None,
    strategy: ScoringStrategy | None = None,
) -> list[RankedApplicant] | EmptyResult:
    """Rank the applications of one job.

    Returns EmptyResult (not an error) when there is nothing to rank.
    """
    validate_job(job)
    weights = weights or default_weights()
    strategy = strategy or default_strategy()

    if not applications:
        logger.info("Job %s: no applications to rank", job.id)
        return EmptyResult(reason="No pending applications to rank")

    records, excluded = normalize_batch(applications, today=today)
    if not records:
        logger.info("Job %s: none of %d applications has applicant data", job.id, len(applications))
        return EmptyResult(
            reason="No applications with profile or PDS data to rank",
            total_applications=len(applications),
            excluded_application_ids=excluded,
        )

    logger.info(
        "Ranking %d applicants for job %s (%s) with %s, %d excluded",
        len(records), job.id, job.title, strategy.value, len(excluded),
    )
    scored = score_batch(job, records, weights, strategy)
    return rank_scored(scored, weights)
