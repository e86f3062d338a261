"""
Flat-file storage for the relay record.

One JSON object, overwritten wholesale on every write. No history, no
versioning, no concurrency token: the last writer wins.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

STORE_PATH = os.getenv("STORE_PATH", "data.json")

DEFAULT_RECORD: dict[str, str] = {
    "text": "",
    "sourceLang": "en",
    "targetLang": "pl",
}


class FileStore:
    """Last-write-wins JSON record on disk."""

    def __init__(self, path: str | Path = STORE_PATH) -> None:
        self.path = Path(path)

    def read(self) -> dict[str, Any]:
        """Return the stored record, or the default when nothing was written yet."""
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return dict(DEFAULT_RECORD)
        except (OSError, json.JSONDecodeError) as e:
            print(f"Store file unreadable ({self.path}): {e}")
            return dict(DEFAULT_RECORD)

        if not isinstance(data, dict):
            return dict(DEFAULT_RECORD)
        return data

    def write(self, record: dict[str, Any]) -> None:
        """Replace the stored record atomically (temp file + rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(record, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self.path)
