"""Record Normalizer: profile + PDS sources -> canonical ApplicantRecord.

The PDS is the richer source and wins field by field (education, experience,
skills, eligibilities). The flat profile row is only consulted for a field the
PDS leaves empty. Applications with neither source are excluded.
"""

import json
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from models.schemas.applicant_record import (
    NOT_SPECIFIED,
    UNKNOWN_NAME,
    ApplicantRecord,
    EligibilityRecord,
)
from models.schemas.base import collapse_tokens
from models.schemas.raw_application import (
    EligibilityEntry,
    PDSSource,
    ProfileSource,
    RawApplication,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Education levels
# ---------------------------------------------------------------------------

EDUCATION_LEVEL_ORDER: dict[str, int] = {
    "GRADUATE STUDIES": 5,
    "COLLEGE": 4,
    "VOCATIONAL": 3,
    "SECONDARY": 2,
    "ELEMENTARY": 1,
}

# Free-text fallback, tried in this order. Degree words come first, then
# school-type phrases, so a school name ("Sta. Ma. National High School",
# "Don Bosco Technical High School") is not promoted by an incidental word.
# A bare institution word ("College of ...") is the last resort.
LEVEL_PATTERNS: list[tuple[str, list[str]]] = [
    ("GRADUATE STUDIES", [
        r"graduate\s+stud", r"post\s*-?\s*graduate", r"master(?:'?s)?\b", r"doctor(?:ate|al)?\b",
        r"ph\.?\s?d\b", r"mba\b", r"m\.?a\.?\s+(?:in|of)\b", r"m\.?s\.?\s+(?:in|of)\b",
    ]),
    ("COLLEGE", [
        r"bachelor(?:'?s)?\b", r"undergraduate\b", r"b\.?s\.?(?:\s|$)", r"a\.?b\.?(?:\s|$)",
    ]),
    ("SECONDARY", [r"secondary\b", r"high\s*school", r"senior\s+high", r"junior\s+high"]),
    ("ELEMENTARY", [r"elementary\b", r"primary\b", r"grade\s+school"]),
    ("VOCATIONAL", [r"vocational\b", r"tesda\b", r"trade\s+course", r"technical\b", r"nc\s+i{1,3}v?\b"]),
    ("COLLEGE", [r"college\b"]),
]

_LEVEL_COMPILED: list[tuple[str, re.Pattern]] = [
    (level, re.compile(rf"\b(?:{'|'.join(patterns)})", re.IGNORECASE))
    for level, patterns in LEVEL_PATTERNS
]

# Check highest first
_LEVEL_PRIORITY = sorted(EDUCATION_LEVEL_ORDER, key=EDUCATION_LEVEL_ORDER.get, reverse=True)


def resolve_education_level(text: str | None) -> str:
    """Map a level token or free-text attainment to a canonical level token.

    "COLLEGE", "College - BS Accountancy" and "Bachelor of Science" all map to
    "COLLEGE". Returns "" when nothing matches.
    """
    if not text:
        return ""
    upper = " ".join(text.split()).upper()
    if upper == NOT_SPECIFIED.upper():
        return ""
    # Exact token or "TOKEN - course" prefix
    for level in _LEVEL_PRIORITY:
        if upper == level or upper.startswith(level + " "):
            return level
    for level, pattern in _LEVEL_COMPILED:
        if pattern.search(text + " "):
            return level
    return ""


def education_rank(level: str) -> int:
    return EDUCATION_LEVEL_ORDER.get(level, 0)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_PRESENT_TOKENS = {"present", "current", "to date", "now"}
_DATE_FORMATS = ("%Y-%m-%d", "%Y-%m", "%m/%d/%Y", "%Y/%m/%d", "%B %Y", "%b %Y", "%B %d, %Y", "%Y")
DAYS_PER_YEAR = 365.25


def parse_service_date(value: str, today: date) -> date:
    """Parse a PDS period-of-service date. "Present" means ``today``.

    Raises ValueError for anything unparseable.
    """
    text = value.strip()
    if text.lower() in _PRESENT_TOKENS:
        return today
    if "T" in text and text[:4].isdigit():
        text = text.split("T", 1)[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized date: {value!r}")


# ---------------------------------------------------------------------------
# Skill payloads
# ---------------------------------------------------------------------------

class SkillPayloadKind(str, Enum):
    OBJECT_LIST = "object_list"
    STRING_LIST = "string_list"
    ENCODED_STRING = "encoded_string"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SkillPayload:
    """A skills value resolved once at normalization time."""
    kind: SkillPayloadKind
    skills: tuple[str, ...] = ()


_SKILL_NAME_KEYS = ("skillName", "skill_name", "name", "skill", "title")


def _skill_from_object(obj: dict) -> str:
    for key in _SKILL_NAME_KEYS:
        v = obj.get(key)
        if isinstance(v, (str, int, float)) and not isinstance(v, bool):
            return str(v)
    return ""


def _skills_from_list(items: list) -> tuple[SkillPayloadKind, list[str]]:
    kind = SkillPayloadKind.STRING_LIST
    out: list[str] = []
    for item in items:
        if isinstance(item, dict):
            kind = SkillPayloadKind.OBJECT_LIST
            out.append(_skill_from_object(item))
        elif isinstance(item, str):
            out.append(item)
        elif isinstance(item, (int, float)) and not isinstance(item, bool):
            out.append(str(item))
    return kind, out


def parse_skill_payload(value: Any) -> SkillPayload:
    """Resolve a loosely-typed skills value.

    Accepted shapes, tried in order:
        [{"skillName": "Excel"}, ...]   OBJECT_LIST
        ["Excel", "SQL"]                STRING_LIST
        '["Excel", "SQL"]'              ENCODED_STRING (decoded, then re-parsed)
    A string that is not valid JSON is kept whole as a single skill.
    """
    if value is None:
        return SkillPayload(SkillPayloadKind.UNKNOWN)

    if isinstance(value, dict):
        value = [value]

    if isinstance(value, list):
        kind, skills = _skills_from_list(value)
        return SkillPayload(kind, tuple(collapse_tokens(skills)))

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return SkillPayload(SkillPayloadKind.UNKNOWN)
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            if raw[0] in "[{\"":
                logger.warning("Malformed skills JSON, keeping raw string: %.80s", raw)
            return SkillPayload(SkillPayloadKind.ENCODED_STRING, (raw,))

        if isinstance(decoded, dict):
            decoded = [decoded]
        if isinstance(decoded, list):
            _, skills = _skills_from_list(decoded)
            return SkillPayload(SkillPayloadKind.ENCODED_STRING, tuple(collapse_tokens(skills)))
        if isinstance(decoded, str):
            return SkillPayload(SkillPayloadKind.ENCODED_STRING, tuple(collapse_tokens([decoded])))
        return SkillPayload(SkillPayloadKind.ENCODED_STRING, (raw,))

    logger.warning("Unsupported skills payload type: %s", type(value).__name__)
    return SkillPayload(SkillPayloadKind.UNKNOWN)


# ---------------------------------------------------------------------------
# Per-field extraction
# ---------------------------------------------------------------------------

def build_applicant_name(profile: ProfileSource | None, pds: PDSSource | None) -> str:
    first = surname = ""
    if profile is not None:
        first, surname = profile.first_name or "", profile.surname or ""
    if not (first.strip() or surname.strip()) and pds is not None and pds.personal_information:
        first = pds.personal_information.first_name or ""
        surname = pds.personal_information.surname or ""
    name = " ".join(f"{first.strip()} {surname.strip()}".split())
    return name or UNKNOWN_NAME


def extract_education(pds: PDSSource | None) -> str:
    """Highest PDS education entry as "LEVEL - course" / "LEVEL", or "" if none qualifies."""
    if pds is None:
        return ""
    best = None
    best_rank = -1
    for entry in pds.educational_background:
        level = (entry.level or "").strip()
        if not level:
            continue
        rank = education_rank(resolve_education_level(level))
        if rank > best_rank:  # first listed wins among equals
            best, best_rank = entry, rank
    if best is None:
        return ""
    level = " ".join(best.level.split()).upper()
    course = (best.basic_education_degree_course or "").strip()
    return f"{level} - {course}" if course else level


def extract_experience_years(pds: PDSSource | None, today: date) -> float | None:
    """Sum of PDS service periods in years, or None if the PDS lists no work entries."""
    if pds is None or not pds.work_experience:
        return None
    total = 0.0
    for entry in pds.work_experience:
        period = entry.period_of_service
        if period is None or not period.from_ or not period.to:
            continue
        try:
            start = parse_service_date(period.from_, today)
            end = parse_service_date(period.to, today)
        except ValueError as e:
            logger.warning(
                "Skipping work entry %r: %s", entry.position_title or "(untitled)", e
            )
            continue
        # Out-of-order dates must not reduce the total
        total += max(0.0, (end - start).days / DAYS_PER_YEAR)
    return round(total, 1)


def extract_pds_skills(pds: PDSSource | None) -> list[str]:
    if pds is None or pds.other_information is None:
        return []
    return list(parse_skill_payload(pds.other_information.skills).skills)


def extract_profile_skills(profile: ProfileSource | None) -> list[str]:
    if profile is None:
        return []
    value = profile.skills
    # Profile columns may hold a comma-separated string
    if isinstance(value, str) and not value.strip().startswith(("[", "{", '"')):
        return collapse_tokens(value.split(","))
    return list(parse_skill_payload(value).skills)


def _eligibility_records(titles: list[str]) -> list[EligibilityRecord]:
    return [EligibilityRecord(eligibility_title=t) for t in collapse_tokens(titles)]


def extract_pds_eligibilities(pds: PDSSource | None) -> list[EligibilityRecord]:
    if pds is None:
        return []
    return _eligibility_records([e.career_service for e in pds.eligibility if e.career_service])


def extract_profile_eligibilities(profile: ProfileSource | None) -> list[EligibilityRecord]:
    if profile is None or not profile.eligibilities:
        return []
    value = profile.eligibilities
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, dict):
        value = [value]
    titles: list[str] = []
    for item in value:
        if isinstance(item, str):
            titles.append(item)
        elif isinstance(item, dict):
            title = EligibilityEntry.model_validate(item).career_service
            if title:
                titles.append(title)
    return _eligibility_records(titles)


def extract_work_titles(pds: PDSSource | None) -> list[str]:
    if pds is None:
        return []
    return [
        e.position_title.strip()
        for e in pds.work_experience
        if e.position_title and e.position_title.strip()
    ]


# ---------------------------------------------------------------------------
# Record assembly
# ---------------------------------------------------------------------------

def normalize_application(raw: RawApplication, today: date | None = None) -> ApplicantRecord | None:
    """Build the canonical record for one application, or None if it has no data source."""
    profile, pds = raw.profile, raw.pds
    if profile is None and pds is None:
        logger.info("Excluding application %s: no profile or PDS data", raw.application_id)
        return None

    today = today or date.today()
    sources: dict[str, str] = {}

    education = extract_education(pds)
    if education:
        sources["education"] = "pds"
    elif profile is not None and (profile.highest_educational_attainment or "").strip():
        education = profile.highest_educational_attainment.strip()
        sources["education"] = "profile"
    else:
        education = NOT_SPECIFIED
        sources["education"] = "none"

    years = extract_experience_years(pds, today)
    if years is not None:
        sources["experience"] = "pds"
    elif profile is not None and profile.total_years_experience is not None:
        years = round(max(0.0, float(profile.total_years_experience)), 1)
        sources["experience"] = "profile"
    else:
        years = 0.0
        sources["experience"] = "none"

    skills = extract_pds_skills(pds)
    sources["skills"] = "pds"
    if not skills:
        skills = extract_profile_skills(profile)
        sources["skills"] = "profile" if skills else "none"

    eligibilities = extract_pds_eligibilities(pds)
    sources["eligibilities"] = "pds"
    if not eligibilities:
        eligibilities = extract_profile_eligibilities(profile)
        sources["eligibilities"] = "profile" if eligibilities else "none"

    return ApplicantRecord(
        application_id=raw.application_id,
        applicant_id=raw.applicant_id,
        applicant_profile_id=raw.applicant_profile_id or (profile.id if profile and profile.id else ""),
        applicant_name=build_applicant_name(profile, pds),
        highest_educational_attainment=education,
        total_years_experience=years,
        skills=skills,
        eligibilities=eligibilities,
        work_experience_titles=extract_work_titles(pds),
        data_source=sources,
    )


def normalize_batch(
    applications: list[RawApplication], today: date | None = None
) -> tuple[list[ApplicantRecord], list[str]]:
    """Normalize a batch. Returns (records, excluded application ids)."""
    today = today or date.today()
    records: list[ApplicantRecord] = []
    excluded: list[str] = []
    for raw in applications:
        record = normalize_application(raw, today)
        if record is None:
            excluded.append(raw.application_id)
        else:
            records.append(record)
    return records, excluded
