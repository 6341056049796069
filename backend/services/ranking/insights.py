"""Optional Gemini insights pass over an already-ranked list.

Runs after deterministic ranking and only adds prose: ranks and scores are
never touched. Any failure leaves the ranking exactly as it was.
"""

import logging

from config import settings
from models.schemas.job_requirement import JobRequirement
from models.schemas.ranked_applicant import INSIGHTS_SUFFIX, RankedApplicant
from services import gemini_client

logger = logging.getLogger(__name__)


def insights_available() -> bool:
    return settings.insights_enabled and bool(settings.gemini_api_key)


def build_insights_prompt(job: JobRequirement, ranked: list[RankedApplicant]) -> str:
    lines = []
    for r in ranked:
        lines.append(
            f"- applicationId={r.application_id} | rank {r.rank} | {r.applicant_name} | "
            f"match {r.match_score:.1f} | education: {r.highest_educational_attainment} | "
            f"experience: {r.total_years_experience:g} years | "
            f"skills: {', '.join(r.skills) or 'none'} | "
            f"eligibilities: {', '.join(e.eligibility_title for e in r.eligibilities) or 'none'}"
        )

    return f"""You are assisting a municipal HR officer reviewing applicants.

JOB: {job.title}
Description: {job.description or 'N/A'}
Required education: {job.degree_requirement or 'None'}
Required eligibilities: {', '.join(job.eligibilities) or 'None'}
Required skills: {', '.join(job.skills) or 'None'}
Required experience: {job.years_of_experience:g} years

RANKED APPLICANTS (the ranking is final, do not re-rank):
{chr(10).join(lines)}

For each applicant write ONE sentence of practical insight for the interviewer
(what to verify, notable strength, or risk). Do not mention scores.

Respond with JSON only:
{{"insights": [{{"applicationId": "...", "insight": "..."}}]}}"""


def apply_insights(
    ranked: list[RankedApplicant], insights: dict[str, str]
) -> list[RankedApplicant]:
    """Attach insights by application id. Applicants without one are unchanged."""
    out: list[RankedApplicant] = []
    for r in ranked:
        text = (insights.get(r.application_id) or "").strip()
        if text:
            algorithm = r.algorithm_used
            if not algorithm.endswith(INSIGHTS_SUFFIX):
                algorithm += INSIGHTS_SUFFIX
            r = r.model_copy(update={"insights": text, "algorithm_used": algorithm})
        out.append(r)
    return out


async def enrich_with_insights(
    job: JobRequirement, ranked: list[RankedApplicant]
) -> list[RankedApplicant]:
    if not ranked or not insights_available():
        return ranked

    top = ranked[: max(0, settings.insights_top_n)]
    if not top:
        return ranked

    data = await gemini_client.generate_json(build_insights_prompt(job, top))
    if not isinstance(data, dict) or not isinstance(data.get("insights"), list):
        logger.warning("Gemini insights unavailable for job %s, keeping deterministic output", job.id)
        return ranked

    top_ids = {r.application_id for r in top}
    insights: dict[str, str] = {}
    for item in data["insights"]:
        if not isinstance(item, dict) or not isinstance(item.get("insight"), str):
            continue
        app_id = str(item.get("applicationId") or "")
        if app_id in top_ids:
            insights[app_id] = item["insight"]
    logger.info("Gemini insights attached to %d of %d applicants", len(insights), len(top))
    return apply_insights(ranked, insights)
