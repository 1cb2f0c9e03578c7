"""Errors raised by the loading and search layers."""

from __future__ import annotations

from typing import Sequence


class BuildCodeError(Exception):
    """Base error for the package."""


class ContentNotFoundError(BuildCodeError):
    """A section chunk does not exist for the requested location."""

    def __init__(self, division: str, part: str, section: str) -> None:
        self.division = division
        self.part = part
        self.section = section
        super().__init__(f"Content not found: {division}/{part}/{section}")


class ContentLoadError(BuildCodeError):
    """Transport failure, non-success status or unreadable payload."""

    def __init__(self, status_text: str) -> None:
        self.status_text = status_text
        super().__init__(f"Failed to load content: {status_text}")


class ContentValidationError(BuildCodeError):
    """A loaded section payload is missing required fields."""

    def __init__(self, missing_fields: Sequence[str]) -> None:
        self.missing_fields = list(missing_fields)
        super().__init__(
            "Invalid content structure: missing required fields "
            + ", ".join(self.missing_fields)
        )


class FetchCancelledError(BuildCodeError):
    """Raised inside a fetch whose cancellation token was cancelled."""


class SearchIndexNotInitializedError(BuildCodeError):
    """The search client was queried before its index was built."""

    def __init__(self) -> None:
        super().__init__("Search client not initialized. Call build() first.")


class NodeNotFoundError(BuildCodeError):
    """A subsection or article id is absent from a loaded section."""

    def __init__(self, kind: str, node_id: str) -> None:
        self.kind = kind
        self.node_id = node_id
        super().__init__(f"{kind.capitalize()} not found: {node_id}")
