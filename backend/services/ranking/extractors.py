"""Feature Extractors: canonical record -> comparison-ready features.

Four independent extractors (education level, experience years, skill set,
eligibility set) plus the work-title words used for lexical relevance.
"""

import re

from models.schemas.applicant_features import ApplicantFeatures
from models.schemas.applicant_record import ApplicantRecord
from models.schemas.base import token_key
from services.ranking.normalizer import education_rank, resolve_education_level

_WORD_RE = re.compile(r"[a-z0-9]+")

# Words that carry no signal when comparing job titles
TITLE_STOPWORDS = {
    "and", "of", "the", "for", "in", "to", "a", "an", "i", "ii", "iii", "iv", "v",
    "officer", "staff", "assistant", "position",
}


def extract_education_level(record: ApplicantRecord) -> tuple[str, int]:
    level = resolve_education_level(record.highest_educational_attainment)
    return level, education_rank(level)


def extract_experience_years(record: ApplicantRecord) -> float:
    return max(0.0, record.total_years_experience)


def token_map(values: list[str]) -> dict[str, str]:
    """Map comparison keys to the first original spelling."""
    out: dict[str, str] = {}
    for v in values:
        key = token_key(v)
        if key and key not in out:
            out[key] = v.strip()
    return out


def extract_skill_set(record: ApplicantRecord) -> dict[str, str]:
    return token_map(record.skills)


def extract_eligibility_set(record: ApplicantRecord) -> dict[str, str]:
    return token_map([e.eligibility_title for e in record.eligibilities])


def title_words(text: str) -> list[str]:
    return [w for w in _WORD_RE.findall(text.lower()) if w not in TITLE_STOPWORDS]


def extract_features(record: ApplicantRecord) -> ApplicantFeatures:
    level, rank = extract_education_level(record)
    words: list[str] = []
    for title in record.work_experience_titles:
        words.extend(title_words(title))
    return ApplicantFeatures(
        education_level=level,
        education_rank=rank,
        years_experience=extract_experience_years(record),
        skill_tokens=extract_skill_set(record),
        eligibility_tokens=extract_eligibility_set(record),
        title_words=words,
    )
