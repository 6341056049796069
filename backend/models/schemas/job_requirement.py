"""Hiring criteria for one job posting."""

from pydantic import ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from models.schemas.base import CamelModel, collapse_tokens


class JobRequirement(CamelModel):
    """A job posting as seen by the ranking pipeline.

    Frozen: a ranking run must not be able to mutate the job it ranks against.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        frozen=True,
    )

    id: str
    title: str = ""
    description: str = ""
    degree_requirement: str = ""  # level token, e.g. "COLLEGE"; free text is mapped later
    eligibilities: list[str] = []
    skills: list[str] = []
    years_of_experience: float = 0.0  # minimum required years

    @field_validator("title", "description", "degree_requirement", mode="before")
    @classmethod
    def _null_text(cls, value):
        return "" if value is None else value

    @field_validator("eligibilities", "skills", mode="before")
    @classmethod
    def _dedupe(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return collapse_tokens(value)

    @field_validator("years_of_experience", mode="before")
    @classmethod
    def _null_years(cls, value):
        return 0.0 if value is None else value
