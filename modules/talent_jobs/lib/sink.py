from __future__ import annotations

import json
import os
import threading

from .models import JobRecord


class ListSink:
    """In-memory sink; records are kept in emission order."""

    def __init__(self) -> None:
        self.records: list[JobRecord] = []
        self._lock = threading.Lock()

    def push(self, record: JobRecord) -> None:
        with self._lock:
            self.records.append(record)

    def __len__(self) -> int:
        return len(self.records)

    def close(self) -> None:
        pass


class JsonlSink:
    """Appends one JSON object per record to `path` (parent dirs created)."""

    def __init__(self, path: str):
        self.path = path
        self.count = 0
        self._lock = threading.Lock()
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        self._fh = open(path, "a", encoding="utf-8")

    def push(self, record: JobRecord) -> None:
        line = json.dumps(record.to_dict(), ensure_ascii=False) + "\n"
        with self._lock:
            self._fh.write(line)
            self._fh.flush()
            self.count += 1

    def __len__(self) -> int:
        return self.count

    def close(self) -> None:
        with self._lock:
            if not self._fh.closed:
                self._fh.close()
