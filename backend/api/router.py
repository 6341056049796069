import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_repository
from config import settings
from models.requests import RankRequest
from models.responses import (
    NothingToRankResponse,
    RankingsResponse,
    RankingSummary,
    RankResponse,
    StatelessRankResponse,
)
from models.schemas.applicant_score import ScoringStrategy
from models.schemas.ranked_applicant import EmptyResult
from services.ranking.errors import (
    InvalidJobRequirementError,
    JobNotFoundError,
    UpstreamLookupError,
)
from services.ranking.insights import enrich_with_insights, insights_available
from services.ranking.orchestrator import rank_applicants_for_job
from services.ranking.statistics import score_statistics
from services.repository import ApplicationRepository

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "gemini_configured": bool(settings.gemini_api_key),
        "insights_enabled": insights_available(),
        "data_file": settings.data_file,
    }


@router.post(
    "/jobs/{job_id}/rank",
    response_model=RankResponse | NothingToRankResponse,
)
@limiter.limit(settings.rank_rate_limit)
async def rank_job(
    request: Request,
    job_id: str,
    strategy: ScoringStrategy | None = None,
    repository: ApplicationRepository = Depends(get_repository),
):
    try:
        job = repository.get_job(job_id)
        applications = repository.list_pending_applications(job_id)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    except UpstreamLookupError as e:
        logger.error("Failed to fetch ranking inputs for job %s: %s", job_id, e)
        raise HTTPException(status_code=500, detail=f"Failed to fetch applications: {e}")

    try:
        result = rank_applicants_for_job(job, applications, strategy=strategy)
    except InvalidJobRequirementError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if isinstance(result, EmptyResult):
        return NothingToRankResponse(message=result.reason, result=result)

    ranked = await enrich_with_insights(job, result)

    # Ranking is complete at this point; write failures are reported, not fatal
    failures = repository.save_rankings(job_id, ranked)
    if failures:
        logger.warning("Job %s: %d ranking rows failed to persist", job_id, len(failures))

    ranked_ids = {r.application_id for r in ranked}
    return RankResponse(
        message=f"Successfully ranked {len(ranked)} applicants for {job.title}",
        job_id=job.id,
        job_title=job.title,
        total_applicants=len(ranked),
        rankings=[
            RankingSummary(
                rank=r.rank,
                applicant_name=r.applicant_name,
                match_score=r.match_score,
                algorithm=r.algorithm_used,
            )
            for r in ranked
        ],
        score_statistics=score_statistics(ranked),
        excluded_application_ids=[
            a.application_id for a in applications if a.application_id not in ranked_ids
        ],
        persistence_failures=failures,
    )


@router.get("/jobs/{job_id}/rankings", response_model=RankingsResponse)
async def get_rankings(
    job_id: str,
    repository: ApplicationRepository = Depends(get_repository),
):
    try:
        rows = repository.list_rankings(job_id)
    except UpstreamLookupError as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch rankings: {e}")

    ranked = sum(1 for r in rows if r.rank is not None)
    return RankingsResponse(
        total_applicants=len(rows),
        ranked_applicants=ranked,
        unranked_applicants=len(rows) - ranked,
        applications=rows,
    )


@router.post("/rank", response_model=StatelessRankResponse)
@limiter.limit(settings.rank_rate_limit)
async def rank_stateless(request: Request, body: RankRequest):
    try:
        result = rank_applicants_for_job(body.job, body.applications, strategy=body.strategy)
    except InvalidJobRequirementError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if isinstance(result, EmptyResult):
        return StatelessRankResponse(empty=True, result=result)
    return StatelessRankResponse(rankings=result, score_statistics=score_statistics(result))
