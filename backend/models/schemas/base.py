"""Shared Pydantic base for ranking schemas.

Python attributes are snake_case; JSON payloads use the portal's camelCase
keys. Both spellings are accepted on input.
"""

import logging

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class LenientModel(CamelModel):
    """Source document that never fails on a single bad field.

    A value that does not validate falls back to the field's default and the
    problem is logged, so one malformed column cannot sink a whole batch.
    """

    @field_validator("*", mode="wrap")
    @classmethod
    def _fallback_to_default(cls, value, handler, info):
        try:
            return handler(value)
        except ValidationError as e:
            error = e.errors()[0]
            logger.warning(
                "Ignoring malformed %s.%s (%s): %.80r",
                cls.__name__, info.field_name, error["msg"], value,
            )
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)


def entry_list(value, name: str = "entries") -> list:
    """Sub-document array: null -> [], single object -> [object], non-objects dropped."""
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if not isinstance(value, list):
        logger.warning("Ignoring %s: expected a list, got %s", name, type(value).__name__)
        return []
    kept = [v for v in value if isinstance(v, dict)]
    if len(kept) != len(value):
        logger.warning("Dropped %d non-object %s", len(value) - len(kept), name)
    return kept


def token_key(value: str) -> str:
    """Comparison key: trimmed, inner whitespace collapsed, casefolded."""
    return " ".join(str(value).split()).casefold()


def collapse_tokens(values) -> list[str]:
    """Trim, drop empties and collapse case-insensitive duplicates (first spelling wins)."""
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        v = str(v).strip()
        key = token_key(v)
        if v and key not in seen:
            seen.add(key)
            out.append(v)
    return out
