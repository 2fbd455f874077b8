# cerebro/tools/compute/top_players.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, Field, field_validator
from langchain_core.tools import StructuredTool

from config import settings
from cerebro.tools.base.player_store import (
    DEFAULT_METRIC,
    RANKABLE_METRICS,
    PlayerStore,
    safe_limit,
)
from cerebro.tools.compute.percentiles import PercentileCache

logger = logging.getLogger(__name__)

# Tie-breakers after focus metric and elite count
TIE_BREAK_METRICS = ("ts", "ppp")


# --- Args schemas for StructuredTool ---
class RankingArgs(BaseModel):
    metric: Optional[str] = Field(default=None, description="Column to rank by, from the allowed metric list")
    position: Optional[str] = Field(default=None, description="Position filter, e.g. PG, SG, SF, PF, C")
    team: Optional[str] = Field(default=None, description="Team name filter (substring)")
    limit: Optional[int] = Field(default=None, description="Number of players to return")
    minGames: Optional[float] = Field(default=None, description="Minimum games played")

    @field_validator("position", "team", "metric", mode="before")
    @classmethod
    def _coerce_text(cls, v):
        return v.strip() if isinstance(v, str) else None

    # Model-written args are untrusted; junk numbers become "use the default"
    @field_validator("limit", mode="before")
    @classmethod
    def _coerce_limit(cls, v):
        try:
            return int(float(v))
        except (TypeError, ValueError, OverflowError):
            return None

    @field_validator("minGames", mode="before")
    @classmethod
    def _coerce_min_games(cls, v):
        try:
            return float(v)
        except (TypeError, ValueError):
            return None


# --- Ranking helpers ---
def _value(row: Mapping[str, Any], metric: Optional[str]) -> float:
    if not metric:
        return float("-inf")
    v = row.get(metric)
    return float(v) if isinstance(v, (int, float)) and v == v else float("-inf")


def elite_metrics(row: Mapping[str, Any], thresholds: Mapping[str, float]) -> List[str]:
    """Metrics where the player is strictly above the cached threshold."""
    hits = []
    for metric, threshold in thresholds.items():
        v = row.get(metric)
        if isinstance(v, (int, float)) and v == v and v > threshold:
            hits.append(metric)
    return hits


def rank_by_elite_count(
    pool: Sequence[Mapping[str, Any]],
    thresholds: Mapping[str, float],
    limit: int,
    focus_metric: Optional[str] = None,
) -> List[Dict[str, Any]]:
    scored = []
    for row in pool:
        hits = elite_metrics(row, thresholds)
        if not hits:
            continue
        scored.append({**row, "elite_count": len(hits), "elite_metrics": hits})
    scored.sort(
        key=lambda r: (
            _value(r, focus_metric),
            r["elite_count"],
            _value(r, TIE_BREAK_METRICS[0]),
            _value(r, TIE_BREAK_METRICS[1]),
        ),
        reverse=True,
    )
    return scored[:limit]


# --- Core callables ---
def run_top_players(
    store: PlayerStore,
    metric: Optional[str] = DEFAULT_METRIC,
    position: Optional[str] = None,
    team: Optional[str] = None,
    limit: Optional[int] = None,
    minGames: Optional[float] = None,
) -> Dict[str, Any]:
    return store.top_by_metric(
        metric=metric,
        position=position or "",
        team=team or "",
        limit=limit or settings.DEFAULT_TOP_LIMIT,
        min_games=settings.DEFAULT_MIN_GAMES if minGames is None else minGames,
    )


def run_top_players_by_position(
    store: PlayerStore,
    cache: PercentileCache,
    position: Optional[str] = None,
    team: Optional[str] = None,
    limit: Optional[int] = None,
    minGames: Optional[float] = None,
    metric: Optional[str] = None,
) -> Dict[str, Any]:
    n = safe_limit(limit, settings.DEFAULT_TOP_LIMIT)
    min_games = settings.DEFAULT_MIN_GAMES if minGames is None else minGames
    focus = metric if metric in RANKABLE_METRICS else None

    thresholds = cache.get_thresholds(min_games)
    pool = store.candidate_pool(
        position=position or "",
        team=team or "",
        min_games=min_games,
        limit=max(n * 5, 25),
        order_metric=focus or DEFAULT_METRIC,
    )
    players = rank_by_elite_count(pool, thresholds, n, focus)
    logger.info(
        "position ranking position=%s pool=%d ranked=%d focus=%s",
        position, len(pool), len(players), focus,
    )
    return {
        "position": position or "",
        "team": team or "",
        "minGames": min_games,
        "focusMetric": focus,
        "percentile": cache.percentile,
        "thresholds": thresholds,
        "players": players,
    }


# --- Structured Tools ---
def make_top_players_tool(store: PlayerStore) -> StructuredTool:
    def _run(**kwargs: Any) -> Dict[str, Any]:
        return run_top_players(store, **kwargs)

    return StructuredTool.from_function(
        name="top_players",
        description=(
            "Rank players by one metric. "
            f"Args: metric (one of {sorted(RANKABLE_METRICS)}), position, team, limit, minGames."
        ),
        func=_run,
        args_schema=RankingArgs,
    )


def make_top_players_by_position_tool(store: PlayerStore, cache: PercentileCache) -> StructuredTool:
    def _run(**kwargs: Any) -> Dict[str, Any]:
        return run_top_players_by_position(store, cache, **kwargs)

    return StructuredTool.from_function(
        name="top_players_by_position",
        description=(
            "Most effective players at a position: counts how many metrics each player has above "
            "the 90th percentile. Args: position, team, limit, minGames, metric (optional focus)."
        ),
        func=_run,
        args_schema=RankingArgs,
    )
