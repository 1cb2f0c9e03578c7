"""Section-level content chunks written for on-demand loading."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel

from .base import CamelModel


class ContentChunk(BaseModel):
    """One section subtree and the relative path it is written to."""

    path: str
    data: Dict[str, Any]
    size: int


class ChunkStats(CamelModel):
    total_chunks: int = 0
    total_size: int = 0
    average_size: float = 0.0
    min_size: int = 0
    max_size: int = 0
