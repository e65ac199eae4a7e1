"""Simple JSON storage for generated tests and results (placeholder for DB)."""
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class JsonStorage:
    """Persist records as ``<root>/<kind>/<record_id>.json``."""

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, kind: str, record_id: str) -> Path:
        if not _SAFE_ID.match(kind) or not _SAFE_ID.match(record_id):
            raise FileNotFoundError(record_id)
        return self.root / kind / f"{record_id}.json"

    def save(self, kind: str, record_id: str, payload: Dict[str, Any]) -> Path:
        path = self._path(kind, record_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2))
        return path

    def load(self, kind: str, record_id: str) -> Dict[str, Any]:
        path = self._path(kind, record_id)
        if not path.exists():
            raise FileNotFoundError(record_id)
        return json.loads(path.read_text())
