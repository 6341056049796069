"""Batch-level match score statistics."""

import numpy as np

from models.schemas.ranked_applicant import RankedApplicant


def score_statistics(ranked: list[RankedApplicant]) -> dict[str, float]:
    """Mean, median, population std dev, min and max of match scores."""
    if not ranked:
        return {}
    scores = np.array([r.match_score for r in ranked], dtype=float)
    return {
        "mean": round(float(np.mean(scores)), 2),
        "median": round(float(np.median(scores)), 2),
        "stdDev": round(float(np.std(scores)), 2),
        "min": round(float(np.min(scores)), 2),
        "max": round(float(np.max(scores)), 2),
    }
