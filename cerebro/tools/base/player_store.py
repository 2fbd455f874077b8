# cerebro/tools/base/player_store.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Sequence

import duckdb

from config import settings
from cerebro.capabilities.manifest import CANDIDATE_COLUMNS, MANIFEST, PLAYER_COLUMNS
from cerebro.errors import PlayerLookupError, PlayerNotFoundError

logger = logging.getLogger(__name__)

RANKABLE_METRICS = frozenset(MANIFEST["rankable_metrics"])
DEFAULT_METRIC = MANIFEST["default_metric"]
RANKING_COLUMNS = MANIFEST["ranking_columns"]
PERCENTILE_METRICS = MANIFEST["percentile_metrics"]


def _cols(names: Sequence[str]) -> str:
    return ", ".join(f'"{c}"' for c in names)


def sql_string(value: Any) -> str:
    """Quoted SQL string literal for paths that DuckDB table functions take inline."""
    return "'" + str(value).replace("'", "''") + "'"


def safe_limit(limit: Any, default: int, cap: int = settings.MAX_SEARCH_LIMIT) -> int:
    try:
        value = int(limit)
    except (TypeError, ValueError):
        value = 0
    if value <= 0:
        value = default
    return min(max(value, 1), cap)


def safe_metric(metric: Optional[str]) -> str:
    return metric if metric in RANKABLE_METRICS else DEFAULT_METRIC


def safe_min_games(min_games: Any) -> float:
    try:
        return float(min_games or 0)
    except (TypeError, ValueError):
        return 0.0


class PlayerStore:
    """
    Read-only access to the player statistics table through DuckDB.

    `source` is either a Parquet path (read with read_parquet) or the name of a
    table already created on `con`. Values are always bound as
    parameters; the only identifiers spliced into SQL are allow-listed columns.
    """

    def __init__(self, source: str = settings.PLAYERS_PARQUET, con: Optional[duckdb.DuckDBPyConnection] = None):
        self.source = source
        self._con = con or duckdb.connect(database=":memory:")
        if source.endswith(".parquet"):
            self._relation = f"read_parquet({sql_string(source)})"
        else:
            self._relation = source

    # ---------- queries ----------
    def search(self, query: str = "", team: str = "", position: str = "", limit: Any = settings.DEFAULT_SEARCH_LIMIT) -> List[Dict[str, Any]]:
        n = safe_limit(limit, settings.DEFAULT_SEARCH_LIMIT)
        clauses, params = self._base_filters(name=query, team=team, position=position)
        sql = (
            f"SELECT {_cols(CANDIDATE_COLUMNS)} FROM {self._relation} "
            f"WHERE {' AND '.join(clauses)} ORDER BY name_split, unique_id LIMIT {n}"
        )
        logger.info("search sql=%s params=%s", sql, params)
        return self._execute(sql, params, "Player search failed")

    def get(self, player_id: Any) -> Dict[str, Any]:
        sql = (
            f"SELECT {_cols(PLAYER_COLUMNS)} FROM {self._relation} "
            f"WHERE CAST(unique_id AS VARCHAR) = ? LIMIT 1"
        )
        logger.info("get sql=%s id=%s", sql, player_id)
        rows = self._execute(sql, [str(player_id)], "Player lookup failed")
        if not rows:
            raise PlayerNotFoundError(str(player_id))
        return rows[0]

    def top_by_metric(
        self,
        metric: Optional[str] = DEFAULT_METRIC,
        position: str = "",
        team: str = "",
        limit: Any = settings.DEFAULT_TOP_LIMIT,
        min_games: Any = settings.DEFAULT_MIN_GAMES,
    ) -> Dict[str, Any]:
        column = safe_metric(metric)
        if column != metric:
            logger.info("metric %r not rankable, using %s", metric, column)
        players = self.candidate_pool(
            position=position,
            team=team,
            min_games=min_games,
            limit=safe_limit(limit, settings.DEFAULT_TOP_LIMIT),
            order_metric=column,
        )
        return {"metric": column, "players": players}

    def candidate_pool(
        self,
        position: str = "",
        team: str = "",
        min_games: Any = settings.DEFAULT_MIN_GAMES,
        limit: Any = settings.DEFAULT_TOP_LIMIT,
        order_metric: Optional[str] = DEFAULT_METRIC,
    ) -> List[Dict[str, Any]]:
        column = safe_metric(order_metric)
        n = safe_limit(limit, settings.DEFAULT_TOP_LIMIT)
        clauses, params = self._base_filters(team=team, position=position)
        clauses.append("g >= ?")
        params.append(safe_min_games(min_games))
        sql = (
            f"SELECT {_cols(RANKING_COLUMNS)} FROM {self._relation} "
            f"WHERE {' AND '.join(clauses)} ORDER BY \"{column}\" DESC NULLS LAST, unique_id LIMIT {n}"
        )
        logger.info("ranking sql=%s params=%s", sql, params)
        return self._execute(sql, params, "Top players query failed")

    def percentile_rows(self, min_games: Any = settings.DEFAULT_MIN_GAMES) -> List[Dict[str, Any]]:
        sql = f"SELECT {_cols(PERCENTILE_METRICS)} FROM {self._relation} WHERE g >= ?"
        return self._execute(sql, [safe_min_games(min_games)], "Percentile query failed")

    # ---------- helpers ----------
    def _base_filters(self, name: str = "", team: str = "", position: str = ""):
        clauses: List[str] = ["name_split IS NOT NULL", "name_split <> ''"]
        params: List[Any] = []
        for column, value in (("name_split", name), ("team", team), ("position", position)):
            value = (value or "").strip()
            if value:
                clauses.append(f"{column} ILIKE ?")
                params.append(f"%{value}%")
        return clauses, params

    def _execute(self, sql: str, params: Sequence[Any], failure: str) -> List[Dict[str, Any]]:
        try:
            with self._con.cursor() as cur:
                cur.execute(sql, list(params))
                cols = [d[0] for d in cur.description]
                return [{cols[i]: row[i] for i in range(len(cols))} for row in cur.fetchall()]
        except duckdb.Error as e:
            raise PlayerLookupError(f"{failure}: {e}") from e


def create_players_table(con: duckdb.DuckDBPyConnection, name: str = "players") -> None:
    """Empty typed player table, used by ingestion checks and tests."""
    text_cols = [f'"{c}" VARCHAR' for c in MANIFEST["tables"]["players"]["text_columns"]]
    metric_cols = [f'"{c}" DOUBLE' for c in MANIFEST["tables"]["players"]["metric_columns"]]
    con.execute(f"CREATE TABLE {name} ({', '.join(text_cols + metric_cols)})")
