import os
from typing import Literal

from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    data_file: str = "data/store.json"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    debug: bool = False
    rank_rate_limit: str = "10/minute"

    # Weighted sum model (must add up to 1.0)
    weight_education: float = 0.30
    weight_experience: float = 0.25
    weight_skills: float = 0.25
    weight_eligibility: float = 0.20

    # weighted_sum, skill_experience or ensemble (see services/ranking/scoring.py)
    scoring_strategy: Literal["weighted_sum", "skill_experience", "ensemble"] = "weighted_sum"

    # Optional Gemini insights pass, applied after deterministic ranking
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    insights_enabled: bool = False
    insights_top_n: int = 5

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
