"""Batch-level failures of a ranking run.

Per-field problems (bad dates, malformed skill JSON, missing sources) never
raise; they fall back locally inside the normalizer.
"""


class RankingError(Exception):
    """Base class for failures that abort a ranking run."""


class InvalidJobRequirementError(RankingError, ValueError):
    """The caller supplied a job requirement the pipeline cannot rank against."""


class JobNotFoundError(RankingError):
    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class UpstreamLookupError(RankingError):
    """The job or application batch could not be fetched."""
