"""JSON file storage adapter."""

import json
import logging
from pathlib import Path

from .memory_store import KINDS, MemoryStore

logger = logging.getLogger(__name__)


class JsonFileStore(MemoryStore):
    """
    File-backed row store.

    One JSON file per entity kind (event_types.json, task_definitions.json,
    events.json) under data_dir, rewritten on every change.
    """

    def __init__(self, data_dir: Path | str):
        super().__init__()
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for kind in KINDS:
            self._load(kind)

    def _path_for_kind(self, kind: str) -> Path:
        return self.data_dir / f"{kind}.json"

    def _load(self, kind: str) -> None:
        path = self._path_for_kind(kind)
        if not path.exists():
            return
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt store file {path}: {e}")
            raise
        records = {int(r["id"]): r for r in data.get("records", [])}
        self._tables[kind] = records
        self._next_ids[kind] = max(
            data.get("next_id", 1), max(records, default=0) + 1
        )

    def _persist(self, kind: str) -> None:
        path = self._path_for_kind(kind)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(
            json.dumps(
                {
                    "next_id": self._next_ids[kind],
                    "records": [self._tables[kind][i] for i in sorted(self._tables[kind])],
                },
                indent=2,
            )
        )
        tmp.replace(path)
