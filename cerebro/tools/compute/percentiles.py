# cerebro/tools/compute/percentiles.py
from __future__ import annotations
import json
import logging
import math
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from config import settings
from cerebro.capabilities.manifest import MANIFEST

logger = logging.getLogger(__name__)

PERCENTILE_METRICS: List[str] = list(MANIFEST["percentile_metrics"])


class PercentileCacheEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    generated_at: datetime = Field(alias="generatedAt")
    min_games: float = Field(alias="minGames")
    percentile: float
    sample_size: int = Field(alias="sampleSize")
    thresholds: Dict[str, float] = Field(default_factory=dict)


def _finite(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def percentile_nearest_rank(values: Iterable[Any], percentile: float = settings.ELITE_PERCENTILE) -> Optional[float]:
    """Nearest-rank percentile, rounding the rank up. None when no finite values."""
    ordered = sorted(v for v in (_finite(x) for x in values) if v is not None)
    n = len(ordered)
    if n == 0:
        return None
    # round first so 0.9 * 100 ranks 90, not 91
    rank = math.ceil(round(percentile * n, 6))
    index = min(max(rank - 1, 0), n - 1)
    return ordered[index]


def compute_thresholds(
    rows: Sequence[Mapping[str, Any]],
    metrics: Sequence[str] = PERCENTILE_METRICS,
    percentile: float = settings.ELITE_PERCENTILE,
) -> Dict[str, float]:
    thresholds: Dict[str, float] = {}
    for metric in metrics:
        value = percentile_nearest_rank((row.get(metric) for row in rows), percentile)
        if value is not None:
            thresholds[metric] = value
    return thresholds


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PercentileCache:
    """
    Cache-aside store for per-metric percentile thresholds.

    get_thresholds(min_games) serves the in-memory copy or the JSON file while
    they are fresh, and otherwise recomputes from `fetch_rows(min_games)` and
    rewrites the file. An entry is stale when it is older than `max_age`, was
    built for a different min_games, or lacks a tracked metric. Concurrent
    rebuilds may race; the last writer wins.
    """

    def __init__(
        self,
        fetch_rows: Callable[[float], Sequence[Mapping[str, Any]]],
        path: str | Path = settings.PERCENTILE_CACHE_PATH,
        clock: Callable[[], datetime] = _utcnow,
        max_age: timedelta = timedelta(hours=settings.PERCENTILE_CACHE_MAX_AGE_HOURS),
        percentile: float = settings.ELITE_PERCENTILE,
        metrics: Sequence[str] = PERCENTILE_METRICS,
    ):
        self.fetch_rows = fetch_rows
        self.path = Path(path)
        self.clock = clock
        self.max_age = max_age
        self.percentile = percentile
        self.metrics = list(metrics)
        self._entry: Optional[PercentileCacheEntry] = None

    # ---------- public API ----------
    def get_thresholds(self, min_games: Any = settings.DEFAULT_MIN_GAMES) -> Dict[str, float]:
        return self.get_entry(min_games).thresholds

    def get_entry(self, min_games: Any = settings.DEFAULT_MIN_GAMES) -> PercentileCacheEntry:
        min_games = float(min_games or 0)
        for entry in (self._entry, self._read()):
            if entry is not None and self.is_fresh(entry, min_games):
                self._entry = entry
                return entry
        return self.rebuild(min_games)

    def rebuild(self, min_games: float) -> PercentileCacheEntry:
        rows = self.fetch_rows(min_games)
        entry = PercentileCacheEntry(
            generated_at=self.clock(),
            min_games=min_games,
            percentile=self.percentile,
            sample_size=len(rows),
            thresholds=compute_thresholds(rows, self.metrics, self.percentile),
        )
        self._write(entry)
        self._entry = entry
        logger.info(
            "rebuilt percentile cache min_games=%s sample_size=%d path=%s",
            min_games, entry.sample_size, self.path,
        )
        return entry

    def is_fresh(self, entry: PercentileCacheEntry, min_games: float) -> bool:
        generated_at = entry.generated_at
        if generated_at.tzinfo is None:
            generated_at = generated_at.replace(tzinfo=timezone.utc)
        if self.clock() - generated_at > self.max_age:
            return False
        if entry.min_games != min_games:
            return False
        return all(metric in entry.thresholds for metric in self.metrics)

    # ---------- file I/O ----------
    def _read(self) -> Optional[PercentileCacheEntry]:
        if not self.path.exists():
            return None
        try:
            return PercentileCacheEntry.model_validate(json.loads(self.path.read_text(encoding="utf-8")))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("ignoring unreadable percentile cache %s: %s", self.path, e)
            return None

    def _write(self, entry: PercentileCacheEntry) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = entry.model_dump(mode="json", by_alias=True)
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
