"""Shared test configuration, pytest markers and fixtures."""

import json
from datetime import date

import pytest

from models.schemas.job_requirement import JobRequirement
from models.schemas.raw_application import RawApplication

TODAY = date(2024, 6, 1)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "api: exercises the FastAPI app through TestClient"
    )


@pytest.fixture(autouse=True)
def _no_rate_limit():
    from api.router import limiter
    original = limiter.enabled
    limiter.enabled = False
    yield
    limiter.enabled = original


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_job():
    def _make(**overrides) -> JobRequirement:
        fields = {
            "id": "job-1",
            "title": "Administrative Aide",
            "description": "Clerical support for the municipal office",
            "degree_requirement": "",
            "eligibilities": [],
            "skills": [],
            "years_of_experience": 0,
        }
        fields.update(overrides)
        return JobRequirement(**fields)
    return _make


@pytest.fixture
def make_profile_app():
    """Application backed only by a flat applicant profile."""
    def _make(
        app_id: str,
        first_name: str = "Juan",
        surname: str = "Dela Cruz",
        skills=None,
        years: float = 0.0,
        education: str | None = None,
        eligibilities=None,
    ) -> RawApplication:
        return RawApplication.model_validate({
            "applicationId": app_id,
            "applicantId": f"user-{app_id}",
            "applicantProfileId": f"profile-{app_id}",
            "profile": {
                "first_name": first_name,
                "surname": surname,
                "highest_educational_attainment": education,
                "total_years_experience": years,
                "skills": skills or [],
                "eligibilities": eligibilities or [],
            },
        })
    return _make


@pytest.fixture
def store_file(tmp_path):
    """Write a JSON store document and return its path."""
    def _write(data: dict):
        path = tmp_path / "store.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def sample_store():
    return {
        "jobs": [
            {
                "id": "job-1",
                "title": "Bookkeeper",
                "description": "Maintains municipal ledgers",
                "degree_requirement": "COLLEGE",
                "eligibilities": ["Career Service Professional"],
                "skills": ["Excel", "SQL"],
                "years_of_experience": 2,
            },
            {"id": "job-empty", "title": "Utility Worker", "years_of_experience": 0},
        ],
        "applications": [
            {"id": "app-1", "job_id": "job-1", "applicant_id": "u1",
             "applicant_profile_id": "p1", "status": "pending", "rank": None},
            {"id": "app-2", "job_id": "job-1", "applicant_id": "u2",
             "applicant_profile_id": "p2", "pds_id": "pds-2", "status": "pending", "rank": None},
            {"id": "app-3", "job_id": "job-1", "applicant_id": "u3",
             "applicant_profile_id": "missing", "status": "pending", "rank": None},
            {"id": "app-4", "job_id": "job-1", "applicant_id": "u4",
             "applicant_profile_id": "p4", "status": "approved", "rank": None},
        ],
        "applicant_profiles": [
            {"id": "p1", "first_name": "Maria", "surname": "Santos",
             "highest_educational_attainment": "COLLEGE - BS Accountancy",
             "total_years_experience": 3, "skills": ["Excel", "SQL", "Python"],
             "eligibilities": [{"eligibilityTitle": "Career Service Professional"}]},
            {"id": "p2", "first_name": "Jose", "surname": "Rizal",
             "highest_educational_attainment": "SECONDARY",
             "total_years_experience": 0, "skills": [], "eligibilities": []},
            {"id": "p4", "first_name": "Ana", "surname": "Reyes"},
        ],
        "applicant_pds": [
            {
                "id": "pds-2",
                "user_id": "u2",
                "educational_background": [
                    {"level": "SECONDARY", "nameOfSchool": "Rizal High"},
                    {"level": "COLLEGE", "basicEducationDegreeCourse": "BS Commerce"},
                ],
                "work_experience": [
                    {"positionTitle": "Bookkeeping Clerk",
                     "periodOfService": {"from": "2022-01-01", "to": "2023-01-01"}},
                ],
                "other_information": {"skills": '[{"skillName": "Excel"}]'},
                "eligibility": [],
            }
        ],
    }
