"""
History Ledger - bounded list of recent generations, newest first

The ledger keeps at most HISTORY_LIMIT entries and is replaced wholesale on
every mutation; persistence goes through a small store port (load on start,
save on every change). Entries are never edited or deleted individually.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from Procuracao_Functions.config import HISTORY_LIMIT
from Procuracao_Functions.procuracao_record import ProcuracaoRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryItem:
    id: str
    timestamp: str
    file_name: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "file_name": self.file_name,
            "data": dict(self.data),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryItem":
        return cls(
            id=str(data["id"]),
            timestamp=str(data.get("timestamp", "")),
            file_name=str(data.get("file_name", "")),
            data=dict(data.get("data") or {}),
        )

    def record(self) -> ProcuracaoRecord:
        return ProcuracaoRecord.from_dict(self.data)


def make_history_item(record: ProcuracaoRecord, file_name: str,
                      now: Optional[datetime] = None) -> HistoryItem:
    now = now or datetime.now()
    return HistoryItem(
        id=now.isoformat(),
        timestamp=now.strftime("%d/%m/%Y %H:%M:%S"),
        file_name=file_name,
        data=record.to_dict(),
    )


# ============================================================================
# Stores
# ============================================================================

class MemoryHistoryStore:
    """Keeps the ledger for the lifetime of the process only"""

    def __init__(self, items: Optional[List[Dict[str, Any]]] = None):
        self.saved: List[Dict[str, Any]] = list(items or [])

    def load(self) -> List[Dict[str, Any]]:
        return list(self.saved)

    def save(self, items: List[Dict[str, Any]]):
        self.saved = list(items)


class JsonHistoryStore:
    """Key-value style store backed by a single JSON file"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load history from {self.path}: {e}")
            return []
        return data if isinstance(data, list) else []

    def save(self, items: List[Dict[str, Any]]):
        try:
            self.path.write_text(json.dumps(items, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not save history to {self.path}: {e}")


# ============================================================================
# Ledger
# ============================================================================

class HistoryLedger:
    def __init__(self, store=None, limit: int = HISTORY_LIMIT):
        self.store = store if store is not None else MemoryHistoryStore()
        self.limit = limit
        self._items: Tuple[HistoryItem, ...] = tuple(self._load())

    def _load(self) -> List[HistoryItem]:
        items = []
        for raw in self.store.load():
            try:
                items.append(HistoryItem.from_dict(raw))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed history entry: {e}")
        return items[: self.limit]

    @property
    def items(self) -> List[HistoryItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: HistoryItem) -> List[HistoryItem]:
        self._items = ((item,) + self._items)[: self.limit]
        self.store.save([entry.to_dict() for entry in self._items])
        return self.items
