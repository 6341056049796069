"""Shared dependencies for API routes."""

from functools import lru_cache

from config import settings
from services.repository import ApplicationRepository, JsonFileRepository


@lru_cache
def get_repository() -> ApplicationRepository:
    return JsonFileRepository(settings.data_file)
