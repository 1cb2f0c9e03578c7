"""Fetch-by-path transport and caller-scoped cancellation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from buildcode.exceptions import FetchCancelledError


class CancellationToken:
    """Cooperative cancellation flag threaded through one fetch."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise FetchCancelledError()


class ViewSlot:
    """The "current view" of one caller: starting a fetch supersedes the previous one."""

    def __init__(self) -> None:
        self._current: Optional[CancellationToken] = None

    @property
    def current(self) -> Optional[CancellationToken]:
        return self._current

    def begin(self) -> CancellationToken:
        if self._current is not None:
            self._current.cancel()
        self._current = CancellationToken()
        return self._current

    def release(self, token: CancellationToken) -> None:
        if self._current is token:
            self._current = None

    def cancel(self) -> None:
        if self._current is not None:
            self._current.cancel()
            self._current = None


@dataclass(frozen=True)
class FetchResponse:
    status: int
    status_text: str
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Fetcher(Protocol):
    async def fetch(self, path: str, token: CancellationToken) -> FetchResponse:
        ...


class FileFetcher:
    """Serves artifact paths from a local data root."""

    def __init__(self, root: Path):
        self.root = Path(root)

    async def fetch(self, path: str, token: CancellationToken) -> FetchResponse:
        token.raise_if_cancelled()
        root = self.root.resolve()
        target = (root / path).resolve()
        if root not in target.parents or not target.is_file():
            return FetchResponse(404, "Not Found")
        body = await asyncio.to_thread(target.read_bytes)
        token.raise_if_cancelled()
        return FetchResponse(200, "OK", body)
