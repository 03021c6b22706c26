"""
Retrieval configuration settings.

Chunking target size, BM25 parameters, fusion weight and the embedding
concurrency limit used while indexing.

Dependencies: pydantic, pydantic_settings
System role: Hybrid retrieval configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrievalSettings(BaseSettings):
    """Hybrid retrieval configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LIBRARIAN_RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    alpha: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Weight of the lexical (BM25) signal in the hybrid score",
    )
    bm25_k1: float = Field(default=1.5, gt=0.0, description="BM25 term-frequency saturation")
    bm25_b: float = Field(default=0.75, ge=0.0, le=1.0, description="BM25 length normalization")
    normalization_floor: float = Field(
        default=0.001,
        gt=0.0,
        description="Lower bound on the per-signal maximum used for normalization",
    )
    top_k: int = Field(default=5, ge=1, description="Number of fused results returned")

    chunk_target_words: int = Field(
        default=150,
        gt=0,
        description="Soft target size of a chunk in words",
    )
    embedding_concurrency: int = Field(
        default=1,
        ge=1,
        description="Concurrent embedding calls while indexing (1 for a shared model)",
    )
