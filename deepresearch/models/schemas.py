from __future__ import annotations

from pydantic import BaseModel, Field


# --- Requests ---


class ResearchRequest(BaseModel):
    topic: str = Field(min_length=1, max_length=500)


# --- Responses ---


class CacheStatsResponse(BaseModel):
    size: int
    max_size: int
    ttl_seconds: float
    hits: int
    misses: int
