from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


@dataclass
class InMemoryKeyValueStore:
    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class JsonFileKeyValueStore:
    """All keys in a single JSON object on disk.

    An unreadable file is logged and reads as empty; the next ``set``
    rewrites it, dropping whatever it held.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (ValueError, RecursionError, OSError) as exc:
            logger.warning(
                "kv_store_file_unreadable",
                extra={"path": str(self.path), "exception_type": type(exc).__name__},
            )
            return {}
        if not isinstance(payload, dict):
            logger.warning("kv_store_file_unreadable", extra={"path": str(self.path), "payload_type": type(payload).__name__})
            return {}
        return {str(key): value for key, value in payload.items() if isinstance(value, str)}

    def _write_all(self, values: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(values, ensure_ascii=False, indent=2), encoding="utf-8")

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._read_all()
        values[key] = value
        self._write_all(values)

    def delete(self, key: str) -> None:
        values = self._read_all()
        if key in values:
            del values[key]
            self._write_all(values)
