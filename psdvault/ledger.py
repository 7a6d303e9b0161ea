"""Append-only JSONL record of the actions a reconcile pass performed."""
from __future__ import annotations

import json
from pathlib import Path

from psdvault.models import ActionRecord


class ActionLedger:
    """One JSON object per line, appended as each action completes."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def write(self, record: ActionRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record.to_dict()) + "\n")

    def read(self) -> list[dict]:
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
