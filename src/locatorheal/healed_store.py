from __future__ import annotations

import json
import sqlite3
import threading
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from .models import HealedLocator
from .settings import default_home_dir


class HealedLocatorStore:
    """Keeps exported healed locators between runs so they can be promoted into page objects."""

    def __init__(self, base_dir: Path | None = None) -> None:
        root = base_dir or default_home_dir()
        root.mkdir(parents=True, exist_ok=True)
        self.db_path = root / "healed.db"
        self.json_path = root / "healed.json"
        self._lock = threading.Lock()
        self._use_sqlite = self._initialize_sqlite()
        if not self._use_sqlite:
            self._initialize_json()

    @property
    def uses_sqlite(self) -> bool:
        return self._use_sqlite

    def _initialize_sqlite(self) -> bool:
        try:
            with sqlite3.connect(self.db_path) as conn:
                cur = conn.cursor()
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS healed_locators (
                        original TEXT PRIMARY KEY,
                        healed TEXT NOT NULL,
                        strategy_kind TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                    """
                )
                conn.commit()
            return True
        except sqlite3.Error:
            return False

    def _initialize_json(self) -> None:
        if self.json_path.exists():
            return
        self._write_json({"healed": []})

    def save(self, entries: Iterable[HealedLocator]) -> int:
        rows = [entry for entry in entries if entry.original and entry.healed]
        if not rows:
            return 0
        with self._lock:
            if self._use_sqlite:
                try:
                    self._save_sqlite(rows)
                    return len(rows)
                except sqlite3.Error:
                    self._fall_back_to_json()
            self._save_json(rows)
        return len(rows)

    def _save_sqlite(self, rows: list[HealedLocator]) -> None:
        timestamp = _utc_now()
        with sqlite3.connect(self.db_path) as conn:
            cur = conn.cursor()
            cur.executemany(
                """
                INSERT INTO healed_locators (original, healed, strategy_kind, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(original) DO UPDATE SET
                    healed = excluded.healed,
                    strategy_kind = excluded.strategy_kind,
                    updated_at = excluded.updated_at
                """,
                [(row.original, row.healed, row.strategy_kind, timestamp) for row in rows],
            )
            conn.commit()

    def _save_json(self, rows: list[HealedLocator]) -> None:
        payload = self._read_json()
        by_original = {str(item.get("original", "")): item for item in payload["healed"]}
        timestamp = _utc_now()
        for row in rows:
            by_original[row.original] = {**asdict(row), "updated_at": timestamp}
        payload["healed"] = list(by_original.values())
        self._write_json(payload)

    def load(self) -> list[HealedLocator]:
        with self._lock:
            if self._use_sqlite:
                try:
                    with sqlite3.connect(self.db_path) as conn:
                        cur = conn.cursor()
                        cur.execute("SELECT original, healed, strategy_kind FROM healed_locators ORDER BY original")
                        return [
                            HealedLocator(original=str(row[0]), healed=str(row[1]), strategy_kind=str(row[2]))
                            for row in cur.fetchall()
                        ]
                except sqlite3.Error:
                    self._fall_back_to_json()
            items = sorted(self._read_json()["healed"], key=lambda item: str(item.get("original", "")))
            return [_entry_from_json(item) for item in items]

    def get(self, original: str) -> HealedLocator | None:
        for entry in self.load():
            if entry.original == original:
                return entry
        return None

    def reset(self) -> None:
        with self._lock:
            if self._use_sqlite:
                try:
                    with sqlite3.connect(self.db_path) as conn:
                        cur = conn.cursor()
                        cur.execute("DELETE FROM healed_locators")
                        conn.commit()
                    return
                except sqlite3.Error:
                    self._fall_back_to_json()
            self._write_json({"healed": []})

    def _fall_back_to_json(self) -> None:
        self._use_sqlite = False
        self._initialize_json()

    def _read_json(self) -> dict:
        if not self.json_path.exists():
            return {"healed": []}
        payload = json.loads(self.json_path.read_text(encoding="utf-8"))
        payload.setdefault("healed", [])
        return payload

    def _write_json(self, payload: dict) -> None:
        self.json_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def _entry_from_json(item: dict) -> HealedLocator:
    return HealedLocator(
        original=str(item.get("original", "")),
        healed=str(item.get("healed", "")),
        strategy_kind=str(item.get("strategy_kind", "")),
    )


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()
