"""Ranker: deterministic ordering, dense ranks and reasoning text.

Sort keys, each consulted only when all previous keys are equal:
    1. match_score       descending
    2. experience_score  descending
    3. education_score   descending
    4. applicant_name    ascending, case-insensitive
    5. application_id    ascending

Ranks are 1..N by sorted position; ties never share a rank.
"""

import logging

from models.schemas.applicant_record import ApplicantRecord
from models.schemas.applicant_score import ALGORITHM_ENSEMBLE_TIEBREAK, ApplicantScore, ScoringWeights
from models.schemas.ranked_applicant import RankedApplicant

logger = logging.getLogger(__name__)


def sort_key(item: tuple[ApplicantRecord, ApplicantScore]) -> tuple:
    record, score = item
    return (
        -score.match_score,
        -score.experience_score,
        -score.education_score,
        record.applicant_name.casefold(),
        record.application_id,
    )


def rank_scored(
    scored: list[tuple[ApplicantRecord, ApplicantScore]],
    weights: ScoringWeights,
) -> list[RankedApplicant]:
    ordered = sorted(scored, key=sort_key)
    ranked: list[RankedApplicant] = []
    for position, (record, score) in enumerate(ordered, start=1):
        ranked.append(RankedApplicant(
            **record.model_dump(),
            rank=position,
            match_score=score.match_score,
            education_score=score.education_score,
            experience_score=score.experience_score,
            skills_score=score.skills_score,
            eligibility_score=score.eligibility_score,
            matched_skills_count=score.matched_skills_count,
            matched_eligibilities_count=score.matched_eligibilities_count,
            algorithm_used=score.algorithm_used,
            ranking_reasoning=build_reasoning(record, score),
            algorithm_details=build_algorithm_details(score, weights),
        ))
    logger.debug("Assigned ranks 1..%d", len(ranked))
    return ranked


# ---------------------------------------------------------------------------
# Template builders
# ---------------------------------------------------------------------------

def _join(items: list[str]) -> str:
    if len(items) <= 1:
        return "".join(items)
    return ", ".join(items[:-1]) + " and " + items[-1]


def _fit_label(match_score: float) -> str:
    if match_score >= 80:
        return "strong"
    elif match_score >= 60:
        return "moderate"
    elif match_score >= 40:
        return "partial"
    return "weak"


def _years(value: float) -> str:
    return f"{value:g} year" + ("" if value == 1 else "s")


def build_strengths(record: ApplicantRecord, score: ApplicantScore) -> list[str]:
    strengths: list[str] = []
    if score.required_level and score.education_gap >= 0:
        strengths.append(f"meets the {score.required_level.lower()} education requirement")
    if score.required_years > 0 and score.years_experience >= score.required_years:
        strengths.append(
            f"has {_years(score.years_experience)} of experience against "
            f"{_years(score.required_years)} required"
        )
    if score.matched_skills:
        strengths.append(f"holds required skills {_join(score.matched_skills)}")
    if score.matched_eligibilities:
        strengths.append(f"holds {_join(score.matched_eligibilities)}")
    if score.relevant_titles:
        strengths.append(f"has related work as {_join(score.relevant_titles[:2])}")
    return strengths


def build_gaps(record: ApplicantRecord, score: ApplicantScore) -> list[str]:
    gaps: list[str] = []
    if score.required_level and score.education_gap < 0:
        attained = score.applicant_level.lower() or "unspecified"
        gaps.append(
            f"education ({attained}) is below the {score.required_level.lower()} requirement"
        )
    if score.required_years > 0 and score.years_experience < score.required_years:
        gaps.append(
            f"has {_years(score.years_experience)} of experience against "
            f"{_years(score.required_years)} required"
        )
    if score.missing_skills:
        gaps.append(f"lacks {_join(score.missing_skills)}")
    if score.missing_eligibilities:
        gaps.append(f"does not hold {_join(score.missing_eligibilities)}")
    return gaps


def build_reasoning(record: ApplicantRecord, score: ApplicantScore) -> str:
    """Short prose explanation of what drove the applicant's score."""
    strengths = build_strengths(record, score)
    gaps = build_gaps(record, score)

    parts: list[str] = []
    if strengths:
        parts.append(f"Candidate {_join(strengths)}.")
    if gaps:
        lead = "However, the candidate" if strengths else "Candidate"
        parts.append(f"{lead} {_join(gaps)}.")
    if not parts:
        parts.append("Job lists no specific requirements; candidate evaluated on the available profile.")
    if score.algorithm_used == ALGORITHM_ENSEMBLE_TIEBREAK:
        parts.append(
            "Weighted sum and skill-experience scores were within 5 points, "
            "so the eligibility-education tie-breaker decided."
        )
    parts.append(f"Overall {_fit_label(score.match_score)} fit ({score.match_score:.1f}/100).")
    return " ".join(parts)


def build_algorithm_details(score: ApplicantScore, weights: ScoringWeights) -> dict:
    return {
        "model": score.algorithm_used,
        "weights": weights.as_dict(),
        "strategy": dict(score.strategy_scores),
        "education": {
            "applicantLevel": score.applicant_level or None,
            "requiredLevel": score.required_level or None,
            "gap": score.education_gap,
            "score": score.education_score,
        },
        "experience": {
            "years": score.years_experience,
            "requiredYears": score.required_years,
            "score": score.experience_score,
        },
        "skills": {
            "matched": score.matched_skills,
            "missing": score.missing_skills,
            "score": score.skills_score,
        },
        "eligibility": {
            "matched": score.matched_eligibilities,
            "missing": score.missing_eligibilities,
            "score": score.eligibility_score,
        },
        "titleRelevance": {
            "score": score.title_relevance,
            "relevantTitles": score.relevant_titles,
        },
    }
