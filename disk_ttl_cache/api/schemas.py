from typing import Any, Optional

from pydantic import BaseModel, Field


class PutItemRequest(BaseModel):
    item: Any = Field(..., description="Any JSON value")
    ttl: Optional[int] = Field(None, description="Time to live in milliseconds")


class ItemResponse(BaseModel):
    segment: str
    id: str
    item: Any
    stored: float
    ttl: float


class StatusResponse(BaseModel):
    ready: bool
    cache_path: str
    clean_every: int
