"""Navigation tree and quick-access entries."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import field_validator

from .base import CamelModel


class NavigationNode(CamelModel):
    id: str
    type: str
    number: Optional[str] = None
    title: str = ""
    path: str
    children: Optional[List[NavigationNode]] = None

    @field_validator("number", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> Any:
        return None if value is None else str(value)


class QuickAccessEntry(CamelModel):
    id: str
    title: str
    path: str
    description: Optional[str] = None
