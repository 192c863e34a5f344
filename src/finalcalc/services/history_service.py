from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from finalcalc.config.settings import settings
from finalcalc.core.models import (
    Achievable,
    CalculationMode,
    Completed,
    ComponentSet,
    DirectCombination,
    Result,
    ThresholdInversion,
    Unachievable,
)

logger = logging.getLogger(__name__)

MINIMUM_FINAL_MODE = "minimum_final"
YEAR_END_MODE = "year_end"


class HistoryServiceError(Exception):
    pass


@dataclass
class HistoryRecord:
    mode: str
    scheme: str
    passing_grade: float
    scores: List[Optional[float]]
    weights: List[float]
    result: Dict[str, Any]
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    id: Optional[int] = None


def result_to_dict(result: Result) -> Dict[str, Any]:
    if isinstance(result, Achievable):
        return {"outcome": "achievable", "required_score": result.required_score}
    if isinstance(result, Unachievable):
        return {"outcome": "unachievable", "required_score": result.required_score}
    if isinstance(result, Completed):
        return {"outcome": "completed", "final_score": result.final_score, "passed": result.passed}
    raise TypeError(f"Unsupported result: {result!r}")


def result_from_dict(data: Dict[str, Any]) -> Result:
    outcome = data.get("outcome")
    try:
        if outcome == "achievable":
            return Achievable(required_score=float(data["required_score"]))
        if outcome == "unachievable":
            return Unachievable(required_score=float(data["required_score"]))
        if outcome == "completed":
            return Completed(final_score=float(data["final_score"]), passed=bool(data["passed"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise HistoryServiceError(f"Malformed {outcome} result: {exc}") from exc
    raise HistoryServiceError(f"Unknown result outcome: {outcome}")


def mode_name(mode: CalculationMode) -> str:
    if isinstance(mode, ThresholdInversion):
        return MINIMUM_FINAL_MODE
    if isinstance(mode, DirectCombination):
        return YEAR_END_MODE
    raise TypeError(f"Unsupported calculation mode: {mode!r}")


def record_from_calculation(component_set: ComponentSet, mode: CalculationMode, result: Result) -> HistoryRecord:
    return HistoryRecord(
        mode=mode_name(mode),
        scheme=component_set.scheme,
        passing_grade=mode.passing_grade,
        scores=list(component_set.scores),
        weights=list(component_set.weights),
        result=result_to_dict(result),
    )


class HistoryStore:
    """Append/remove list of saved calculations kept in a local SQLite file."""

    def __init__(self, db_path: str = "finalcalc.db") -> None:
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    @classmethod
    def from_settings(cls) -> "HistoryStore":
        return cls(settings.history_db_path)

    def _init_schema(self) -> None:
        self.conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS calculations (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              mode TEXT NOT NULL,
              scheme TEXT NOT NULL,
              passing_grade REAL NOT NULL,
              scores TEXT NOT NULL,
              weights TEXT NOT NULL,
              result TEXT NOT NULL,
              created_at TEXT NOT NULL
            );
            """
        )
        self.conn.commit()

    @staticmethod
    def _to_record(row: sqlite3.Row) -> HistoryRecord:
        return HistoryRecord(
            id=int(row["id"]),
            mode=row["mode"],
            scheme=row["scheme"],
            passing_grade=float(row["passing_grade"]),
            scores=json.loads(row["scores"]),
            weights=json.loads(row["weights"]),
            result=json.loads(row["result"]),
            created_at=row["created_at"],
        )

    def add_record(self, record: HistoryRecord) -> int:
        try:
            cur = self.conn.execute(
                """INSERT INTO calculations(mode, scheme, passing_grade, scores, weights, result, created_at)
                   VALUES(?,?,?,?,?,?,?)""",
                (
                    record.mode,
                    record.scheme,
                    record.passing_grade,
                    json.dumps(record.scores),
                    json.dumps(record.weights),
                    json.dumps(record.result),
                    record.created_at,
                ),
            )
            self.conn.commit()
        except sqlite3.Error as exc:
            raise HistoryServiceError(f"Failed to save calculation: {exc}") from exc
        record.id = int(cur.lastrowid)
        logger.info("Saved %s calculation %d", record.mode, record.id)
        return record.id

    def list_records(self) -> List[HistoryRecord]:
        try:
            cur = self.conn.execute("SELECT * FROM calculations ORDER BY id")
            return [self._to_record(row) for row in cur.fetchall()]
        except sqlite3.Error as exc:
            raise HistoryServiceError(f"Failed to load history: {exc}") from exc

    def delete_record(self, record_id: int) -> None:
        try:
            cur = self.conn.execute("DELETE FROM calculations WHERE id=?", (record_id,))
            self.conn.commit()
        except sqlite3.Error as exc:
            raise HistoryServiceError(f"Failed to delete calculation: {exc}") from exc
        if cur.rowcount == 0:
            raise HistoryServiceError(f"No saved calculation with id {record_id}")
        logger.info("Deleted calculation %d", record_id)

    def clear(self) -> None:
        try:
            self.conn.execute("DELETE FROM calculations")
            self.conn.commit()
        except sqlite3.Error as exc:
            raise HistoryServiceError(f"Failed to clear history: {exc}") from exc
        logger.info("Cleared calculation history")

    def close(self) -> None:
        self.conn.close()
