"""Persistence boundary for the ranking service.

The portal's managed database is an external collaborator; the service only
needs four operations from it, defined by ApplicationRepository. The
JSON-file implementation keeps the whole store in one document:

    {
      "jobs": [...],
      "applications": [...],          # job_id, applicant_id, applicant_profile_id, pds_id, status
      "applicant_profiles": [...],
      "applicant_pds": [...]
    }
"""

from __future__ import annotations

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from models.responses import PersistenceFailure, StoredRanking
from models.schemas.job_requirement import JobRequirement
from models.schemas.ranked_applicant import RankedApplicant
from models.schemas.raw_application import PDSSource, ProfileSource, RawApplication
from services.ranking.errors import JobNotFoundError, UpstreamLookupError

logger = logging.getLogger(__name__)

INSIGHT_SEPARATOR = " | Gemini Insight: "


class ApplicationRepository(ABC):
    """What the ranking service needs from the portal database."""

    @abstractmethod
    def get_job(self, job_id: str) -> JobRequirement:
        """Return the job or raise JobNotFoundError."""

    @abstractmethod
    def list_pending_applications(self, job_id: str) -> list[RawApplication]:
        """Return pending applications with their sources, or raise UpstreamLookupError."""

    @abstractmethod
    def save_rankings(self, job_id: str, ranked: list[RankedApplicant]) -> list[PersistenceFailure]:
        """Write every ranked row. Individual failures are returned, not raised."""

    @abstractmethod
    def list_rankings(self, job_id: str) -> list[StoredRanking]:
        """All applications of a job ordered by rank, unranked last."""


def ranking_row(applicant: RankedApplicant) -> dict[str, Any]:
    """Columns written back to the applications table for one ranked applicant."""
    reasoning = applicant.ranking_reasoning
    if applicant.insights:
        reasoning += INSIGHT_SEPARATOR + applicant.insights
    return {
        "rank": applicant.rank,
        "match_score": applicant.match_score,
        "education_score": applicant.education_score,
        "experience_score": applicant.experience_score,
        "skills_score": applicant.skills_score,
        "eligibility_score": applicant.eligibility_score,
        "algorithm_used": applicant.algorithm_used,
        "ranking_reasoning": reasoning,
        "algorithm_details": (
            json.dumps(applicant.algorithm_details) if applicant.algorithm_details else None
        ),
    }


class JsonFileRepository(ApplicationRepository):
    """Simple JSON-backed store."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Generic helpers
    # ------------------------------------------------------------------
    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise UpstreamLookupError(f"Could not read store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise UpstreamLookupError(f"Store {self.path} is not a JSON object")
        return data

    def _dump(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    @staticmethod
    def _rows(data: dict[str, Any], collection: str) -> list[dict[str, Any]]:
        """Object rows of one collection; anything else is skipped."""
        rows = data.get(collection) or []
        if not isinstance(rows, list):
            logger.warning("Store collection %r is not a list, ignoring it", collection)
            return []
        return [r for r in rows if isinstance(r, dict)]

    @classmethod
    def _index(cls, data: dict[str, Any], collection: str, key: str = "id") -> dict[str, dict[str, Any]]:
        return {str(r[key]): r for r in cls._rows(data, collection) if r.get(key) is not None}

    # ------------------------------------------------------------------
    # Jobs and applications
    # ------------------------------------------------------------------
    def get_job(self, job_id: str) -> JobRequirement:
        row = self._index(self._load(), "jobs").get(str(job_id))
        if row is None:
            raise JobNotFoundError(job_id)
        try:
            return JobRequirement.model_validate(row)
        except ValidationError as e:
            raise UpstreamLookupError(f"Malformed job row {job_id}: {e}") from e

    def list_pending_applications(self, job_id: str) -> list[RawApplication]:
        data = self._load()
        profiles = self._index(data, "applicant_profiles")
        pds_by_id = self._index(data, "applicant_pds")
        pds_by_user = self._index(data, "applicant_pds", key="user_id")

        out: list[RawApplication] = []
        for app in self._rows(data, "applications"):
            if str(app.get("job_id")) != str(job_id) or app.get("status", "pending") != "pending":
                continue
            if app.get("id") is None:
                logger.warning("Skipping application row without id for job %s", job_id)
                continue
            app_id = str(app["id"])
            profile_row = profiles.get(str(app.get("applicant_profile_id")))
            pds_row = pds_by_id.get(str(app.get("pds_id"))) or pds_by_user.get(str(app.get("applicant_id")))
            try:
                out.append(RawApplication(
                    application_id=app_id,
                    applicant_id=app.get("applicant_id"),
                    applicant_profile_id=app.get("applicant_profile_id"),
                    profile=self._source(ProfileSource, profile_row, app_id),
                    pds=self._source(PDSSource, pds_row, app_id),
                ))
            except ValidationError as e:
                logger.warning("Skipping malformed application %s: %s", app_id, e)
        return out

    @staticmethod
    def _source(model, row: dict[str, Any] | None, app_id: str):
        """Validate one data source on its own; an unreadable source counts as absent."""
        if not row:
            return None
        try:
            return model.model_validate(row)
        except ValidationError as e:
            logger.warning("Ignoring %s for application %s: %s", model.__name__, app_id, e)
            return None

    # ------------------------------------------------------------------
    # Rankings
    # ------------------------------------------------------------------
    def save_rankings(self, job_id: str, ranked: list[RankedApplicant]) -> list[PersistenceFailure]:
        failures: list[PersistenceFailure] = []
        with self._lock:
            try:
                data = self._load()
            except UpstreamLookupError as e:
                logger.error("Failed to read store before writing rankings for job %s: %s", job_id, e)
                return [PersistenceFailure(application_id=a.application_id, error=str(e)) for a in ranked]
            apps = self._index(data, "applications")
            for applicant in ranked:
                row = apps.get(applicant.application_id)
                if row is None or str(row.get("job_id")) != str(job_id):
                    logger.error("Failed to update application %s: not found", applicant.application_id)
                    failures.append(PersistenceFailure(
                        application_id=applicant.application_id, error="Application not found"
                    ))
                    continue
                row.update(ranking_row(applicant))
            try:
                self._dump(data)
            except OSError as e:
                logger.error("Failed to write rankings for job %s: %s", job_id, e)
                already_failed = {f.application_id for f in failures}
                failures.extend(
                    PersistenceFailure(application_id=a.application_id, error=str(e))
                    for a in ranked if a.application_id not in already_failed
                )
        return failures

    def list_rankings(self, job_id: str) -> list[StoredRanking]:
        data = self._load()
        profiles = self._index(data, "applicant_profiles")
        rows: list[StoredRanking] = []
        for app in self._rows(data, "applications"):
            if str(app.get("job_id")) != str(job_id) or app.get("id") is None:
                continue
            app_id = str(app["id"])
            profile = self._source(ProfileSource, profiles.get(str(app.get("applicant_profile_id"))), app_id)
            name = ""
            if profile is not None:
                name = " ".join(f"{profile.first_name or ''} {profile.surname or ''}".split())
            try:
                rows.append(StoredRanking(
                    id=app_id,
                    rank=app.get("rank"),
                    match_score=app.get("match_score"),
                    education_score=app.get("education_score"),
                    experience_score=app.get("experience_score"),
                    skills_score=app.get("skills_score"),
                    eligibility_score=app.get("eligibility_score"),
                    algorithm_used=app.get("algorithm_used"),
                    ranking_reasoning=app.get("ranking_reasoning"),
                    status=app.get("status", "pending"),
                    applicant_name=name,
                    highest_educational_attainment=profile.highest_educational_attainment if profile else None,
                    total_years_experience=profile.total_years_experience if profile else None,
                ))
            except ValidationError as e:
                raise UpstreamLookupError(f"Malformed ranking row {app_id}: {e}") from e
        rows.sort(key=lambda r: (r.rank is None, r.rank or 0, r.id))
        return rows
