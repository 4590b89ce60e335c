"""Request and response models for the cache API."""

from pydantic import BaseModel, Field
from typing import Optional, List, Any


class PutRequest(BaseModel):
    """Cache an answer under a key."""
    key: str = Field(..., min_length=1, description="Cache key (typically the normalized query)")
    value: Any = Field(..., description="Cached payload, usually the LLM response")
    similarity_score: float = Field(
        1.0, description="Similarity of the query to the answer, in [0, 1]"
    )


class PutResponse(BaseModel):
    success: bool = True
    key: str
    refreshed: bool = Field(False, description="True if the key was already cached and got overwritten")
    evicted: List[str] = Field(default_factory=list, description="Keys evicted to make room")


class GetRequest(BaseModel):
    """Look up a cached answer."""
    key: str = Field(..., min_length=1, description="Cache key")
    similarity_score: Optional[float] = Field(
        None, description="Similarity of this query to the cached answer; feeds quality scoring"
    )


class GetResponse(BaseModel):
    found: bool
    key: str
    value: Optional[Any] = None


class FlushResponse(BaseModel):
    success: bool = True


class SwitchPolicyRequest(BaseModel):
    """Switch the active eviction policy. Omitted fields take defaults."""
    policy: str = Field(..., description="LRU, LFU, FIFO, RR or quality_score (case-insensitive)")
    maxsize: Optional[int] = Field(None, description="Maximum number of cached entries")
    clean_size: Optional[int] = Field(None, description="Entries evicted per overflow event")
    learning_rate: Optional[float] = Field(None, description="Quality Score moving-average step")
    quality_weight: Optional[float] = Field(None, description="Quality Score weight of answer quality")
    recency_weight: Optional[float] = Field(None, description="Quality Score weight of recency")
    frequency_weight: Optional[float] = Field(None, description="Quality Score weight of frequency")


class SwitchPolicyResponse(BaseModel):
    success: bool = True
    message: str
    policy: str
    maxsize: int
    clean_size: int
    cache_reset: bool = True
