import json
import logging
import os
import threading
from typing import Any, Dict

logger = logging.getLogger("flag_quiz")

BEST_SCORE_KEY = "best_score"

class JsonFileStore:
    """Tiny durable key-value store backed by one JSON file."""

    def __init__(self, path: str) -> None:
        self.path = path

    def _read(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.exception("score_store_read_failed")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = self.path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
        os.replace(tmp_path, self.path)

class ScoreRecord:
    def __init__(self, store: JsonFileStore, key: str = BEST_SCORE_KEY) -> None:
        self.store = store
        self.key = key
        self._lock = threading.Lock()

    def load(self) -> int:
        value = self.store.get(self.key, 0)
        try:
            return max(int(value), 0)
        except (TypeError, ValueError):
            logger.warning({"event": "best_score_invalid", "value": value})
            return 0

    def record_if_better(self, points: int) -> bool:
        with self._lock:
            best = self.load()
            if points <= best:
                return False
            self.store.set(self.key, points)
        logger.info({"event": "best_score_updated", "previous": best, "best": points})
        return True
