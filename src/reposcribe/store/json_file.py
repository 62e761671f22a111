"""JSON file sink.

Stores all summaries in one JSON document:

    {"summaries": [{"repository_id": ..., "branch_name": ..., ...}, ...]}

The whole document is rewritten on every put. Writes go to a temporary file
in the same directory which then replaces the document, so a failed write
leaves the previous contents intact. The sink is meant for local use, not
for concurrent writers.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from reposcribe.store.base import SummaryKey

logger = logging.getLogger(__name__)


class JsonFileSink:
    """KeyValueSink persisted to a JSON file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load(self) -> dict[SummaryKey, dict[str, Any]]:
        if not self.path.exists():
            return {}

        data = json.loads(self.path.read_text(encoding="utf-8"))
        records: dict[SummaryKey, dict[str, Any]] = {}
        for record in data.get("summaries", []):
            records[(record["repository_id"], record["branch_name"])] = record
        return records

    def _save(self, records: dict[SummaryKey, dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        ordered = [records[key] for key in sorted(records)]
        payload = json.dumps({"summaries": ordered}, indent=2, ensure_ascii=False)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: SummaryKey) -> dict[str, Any] | None:
        return self._load().get(key)

    def put(self, key: SummaryKey, record: dict[str, Any]) -> None:
        records = self._load()
        records[key] = record
        self._save(records)
        logger.debug("Wrote summary %s@%s to %s", key[0], key[1], self.path)

    def values(self) -> list[dict[str, Any]]:
        return list(self._load().values())
