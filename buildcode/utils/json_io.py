"""Reading and writing the JSON artifacts."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

COMPACT_SEPARATORS = (",", ":")


def dumps_compact(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, separators=COMPACT_SEPARATORS)


def byte_size(data: Any) -> int:
    """UTF-8 size of ``data`` serialised compactly."""
    return len(dumps_compact(data).encode("utf-8"))


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def write_json(path: Path, data: Any, indent: Optional[int] = None) -> int:
    """Write ``data`` to ``path``, creating parents; returns bytes written."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if indent is None:
        payload = dumps_compact(data)
    else:
        payload = json.dumps(data, ensure_ascii=False, indent=indent)
    encoded = payload.encode("utf-8")
    path.write_bytes(encoded)
    return len(encoded)
