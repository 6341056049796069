"""Scoring Engine: component scores and the strategies that combine them.

Component scores (each 0-100):
    education    applicant level vs. required level in the fixed level order
    experience   total years vs. required years
    skills       share of required skills the applicant holds
    eligibility  share of required eligibilities the applicant holds

A component with no requirement scores 100: applicants are never penalized
for a requirement the job does not have. Component scores are the same under
every strategy; a strategy only decides how they become the match score:

    weighted_sum      sum of weight_i * component_i (ScoringWeights)
    skill_experience  0.40 * Dice(skills) * experience factor
                      + 0.35 * education + 0.25 * eligibility
    ensemble          the two above blended 60/40; when they are within
                      5 points the eligibility-education tie-breaker
                      (0.40 eligibility, 0.30 education, 0.20 experience,
                      0.10 skills) decides instead
"""

import logging
import math

from models.schemas.applicant_features import ApplicantFeatures
from models.schemas.applicant_record import ApplicantRecord
from models.schemas.applicant_score import (
    ALGORITHM_ENSEMBLE_BLEND,
    ALGORITHM_ENSEMBLE_TIEBREAK,
    ALGORITHM_SKILL_EXPERIENCE,
    ALGORITHM_WEIGHTED_SUM,
    ApplicantScore,
    ScoringStrategy,
    ScoringWeights,
)
from models.schemas.base import token_key
from models.schemas.job_requirement import JobRequirement
from services.ranking.extractors import extract_features, title_words
from services.ranking.normalizer import education_rank, resolve_education_level

logger = logging.getLogger(__name__)

FULL_SCORE = 100.0

# Education curve: at level 70, +15 per level above, -20 per level below
EDU_AT_LEVEL = 70.0
EDU_ABOVE_STEP = 15.0
EDU_BELOW_STEP = 20.0

# Experience curve: meeting the requirement is worth at least EXP_MEETS
EXP_MEETS = 80.0
EXP_SURPLUS_BONUS = 20.0


def _clamp(value: float) -> float:
    return max(0.0, min(FULL_SCORE, value))


def score_education(applicant_rank: int, required_rank: int) -> tuple[float, int]:
    """Return (score, gap). Monotonic non-decreasing in applicant_rank."""
    if required_rank <= 0:
        return FULL_SCORE, applicant_rank
    gap = applicant_rank - required_rank
    if gap >= 0:
        return _clamp(EDU_AT_LEVEL + gap * EDU_ABOVE_STEP), gap
    return _clamp(EDU_AT_LEVEL + gap * EDU_BELOW_STEP), gap


def score_experience(years: float, required_years: float) -> float:
    """Monotonic non-decreasing in years; meeting the requirement always scores >= 80."""
    if required_years <= 0:
        return FULL_SCORE
    years = max(0.0, years)
    if years < required_years:
        return _clamp(EXP_MEETS * years / required_years)
    surplus = min(1.0, (years - required_years) / required_years)
    return _clamp(EXP_MEETS + EXP_SURPLUS_BONUS * surplus)


def score_token_overlap(
    applicant_tokens: dict[str, str], required: list[str]
) -> tuple[float, list[str], list[str]]:
    """Case-insensitive set intersection against a requirement list.

    Returns (score, matched, missing) with matched/missing in the job's
    spelling and order.
    """
    matched: list[str] = []
    missing: list[str] = []
    seen: set[str] = set()
    for req in required:
        key = token_key(req)
        if not key or key in seen:
            continue
        seen.add(key)
        (matched if key in applicant_tokens else missing).append(req)
    total = len(matched) + len(missing)
    if total == 0:
        return FULL_SCORE, [], []
    return FULL_SCORE * len(matched) / total, matched, missing


def compute_title_relevance(
    job_title: str, work_titles: list[str], words: list[str]
) -> tuple[float, list[str]]:
    """Lexical overlap between the job title and past position titles.

    Informational only; it feeds reasoning and algorithm details, never the
    composite score.
    """
    job_words = set(title_words(job_title))
    if not job_words or not words:
        return 0.0, []
    overlap = job_words & set(words)
    relevant = [t for t in work_titles if job_words & set(title_words(t))]
    return round(len(overlap) / len(job_words), 3), relevant


def composite_score(
    education: float,
    experience: float,
    skills: float,
    eligibility: float,
    weights: ScoringWeights,
) -> float:
    total = (
        weights.education * education
        + weights.experience * experience
        + weights.skills * skills
        + weights.eligibility * eligibility
    )
    return round(_clamp(total), 2)


# Skill-experience composite
SKILL_EXP_WEIGHT = 0.40
SKILL_EXP_EDUCATION = 0.35
SKILL_EXP_ELIGIBILITY = 0.25
EXP_GROWTH_RATE = 0.5
EXP_RATIO_CAP = 2.0

# Ensemble: within this many points the tie-breaker decides
ENSEMBLE_TIE_BAND = 5.0
ENSEMBLE_PRIMARY_SHARE = 0.6

TIEBREAK_WEIGHTS = ScoringWeights(eligibility=0.40, education=0.30, experience=0.20, skills=0.10)


def dice_coefficient(matched: int, applicant_count: int, required_count: int) -> float:
    """Sorensen-Dice similarity of the two skill sets, scaled to 0-100."""
    if required_count <= 0:
        return FULL_SCORE
    return FULL_SCORE * 2 * matched / (applicant_count + required_count)


def experience_factor(years: float, required_years: float) -> float:
    """Exponential growth in the experience ratio, capped at 2x the requirement.

    1.0 at the cap (and when nothing is required), 1/e with no experience.
    """
    if required_years <= 0:
        return 1.0
    ratio = min(max(0.0, years) / required_years, EXP_RATIO_CAP)
    return math.exp(EXP_GROWTH_RATE * ratio) / math.exp(EXP_GROWTH_RATE * EXP_RATIO_CAP)


def skill_experience_score(dice: float, factor: float, education: float, eligibility: float) -> float:
    total = (
        SKILL_EXP_WEIGHT * dice * factor
        + SKILL_EXP_EDUCATION * education
        + SKILL_EXP_ELIGIBILITY * eligibility
    )
    return round(_clamp(total), 2)


def tiebreak_score(education: float, experience: float, skills: float, eligibility: float) -> float:
    return composite_score(education, experience, skills, eligibility, TIEBREAK_WEIGHTS)


def select_match_score(
    strategy: ScoringStrategy, weighted: float, skill_exp: float, tiebreak: float
) -> tuple[float, str]:
    """Return (match score, algorithm label) for the chosen strategy."""
    if strategy == ScoringStrategy.SKILL_EXPERIENCE:
        return skill_exp, ALGORITHM_SKILL_EXPERIENCE
    if strategy == ScoringStrategy.ENSEMBLE:
        if abs(weighted - skill_exp) <= ENSEMBLE_TIE_BAND:
            return tiebreak, ALGORITHM_ENSEMBLE_TIEBREAK
        blended = ENSEMBLE_PRIMARY_SHARE * weighted + (1 - ENSEMBLE_PRIMARY_SHARE) * skill_exp
        return round(_clamp(blended), 2), ALGORITHM_ENSEMBLE_BLEND
    return weighted, ALGORITHM_WEIGHTED_SUM


def required_education_rank(job: JobRequirement) -> tuple[str, int]:
    level = resolve_education_level(job.degree_requirement)
    if job.degree_requirement and not level:
        logger.warning(
            "Job %s: unrecognized degree requirement %r, treating as none",
            job.id, job.degree_requirement,
        )
    return level, education_rank(level)


def score_applicant(
    job: JobRequirement,
    record: ApplicantRecord,
    weights: ScoringWeights,
    features: ApplicantFeatures | None = None,
    required: tuple[str, int] | None = None,
    strategy: ScoringStrategy = ScoringStrategy.WEIGHTED_SUM,
) -> ApplicantScore:
    features = features or extract_features(record)
    required_level, required_rank = required or required_education_rank(job)

    edu_score, edu_gap = score_education(features.education_rank, required_rank)
    exp_score = score_experience(features.years_experience, job.years_of_experience)
    skills_score, matched_skills, missing_skills = score_token_overlap(
        features.skill_tokens, job.skills
    )
    elig_score, matched_elig, missing_elig = score_token_overlap(
        features.eligibility_tokens, job.eligibilities
    )
    relevance, relevant_titles = compute_title_relevance(
        job.title, record.work_experience_titles, features.title_words
    )

    weighted = composite_score(edu_score, exp_score, skills_score, elig_score, weights)
    dice = dice_coefficient(
        len(matched_skills), len(features.skill_tokens), len(matched_skills) + len(missing_skills)
    )
    factor = experience_factor(features.years_experience, job.years_of_experience)
    skill_exp = skill_experience_score(dice, factor, edu_score, elig_score)
    tiebreak = tiebreak_score(edu_score, exp_score, skills_score, elig_score)
    match, algorithm = select_match_score(strategy, weighted, skill_exp, tiebreak)

    return ApplicantScore(
        education_score=round(edu_score, 2),
        experience_score=round(exp_score, 2),
        skills_score=round(skills_score, 2),
        eligibility_score=round(elig_score, 2),
        match_score=match,
        algorithm_used=algorithm,
        strategy_scores={
            "weightedSum": weighted,
            "skillExperience": skill_exp,
            "tieBreaker": tiebreak,
            "skillsDice": round(dice, 2),
            "experienceFactor": round(factor, 3),
        },
        matched_skills=matched_skills,
        missing_skills=missing_skills,
        matched_eligibilities=matched_elig,
        missing_eligibilities=missing_elig,
        applicant_level=features.education_level,
        required_level=required_level,
        education_gap=edu_gap if required_rank > 0 else 0,
        years_experience=features.years_experience,
        required_years=job.years_of_experience,
        title_relevance=relevance,
        relevant_titles=relevant_titles,
    )


def score_batch(
    job: JobRequirement,
    records: list[ApplicantRecord],
    weights: ScoringWeights,
    strategy: ScoringStrategy = ScoringStrategy.WEIGHTED_SUM,
) -> list[tuple[ApplicantRecord, ApplicantScore]]:
    """Score every record against the same job with the same weights and strategy."""
    required = required_education_rank(job)
    return [
        (record, score_applicant(job, record, weights, required=required, strategy=strategy))
        for record in records
    ]
