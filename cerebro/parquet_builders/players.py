# cerebro/parquet_builders/players.py
import argparse
import logging
from pathlib import Path
from typing import List, Optional

import duckdb

from config import settings
from cerebro.capabilities.manifest import MANIFEST
from cerebro.tools.base.player_store import sql_string

logger = logging.getLogger(__name__)

TEXT_COLUMNS = MANIFEST["tables"]["players"]["text_columns"]
METRIC_COLUMNS = MANIFEST["tables"]["players"]["metric_columns"]


def csv_columns(con, src_csv: Path) -> List[str]:
    rel = con.execute(f"DESCRIBE SELECT * FROM read_csv_auto({sql_string(src_csv.as_posix())}, header=true, all_varchar=true)")
    return [row[0] for row in rel.fetchall()]


def players_select_sql(src_csv: Path, present: Optional[List[str]] = None) -> str:
    """Text columns as VARCHAR, metrics TRY_CAST to DOUBLE so bad cells become NULL.
    Columns missing from the CSV are written as typed NULLs."""
    have = set(TEXT_COLUMNS + METRIC_COLUMNS) if present is None else set(present)
    text = [
        f'CAST("{c}" AS VARCHAR) AS "{c}"' if c in have else f'CAST(NULL AS VARCHAR) AS "{c}"'
        for c in TEXT_COLUMNS
    ]
    metrics = [
        f'TRY_CAST("{c}" AS DOUBLE) AS "{c}"' if c in have else f'CAST(NULL AS DOUBLE) AS "{c}"'
        for c in METRIC_COLUMNS
    ]
    return (
        f"SELECT {', '.join(text + metrics)} "
        f"FROM read_csv_auto({sql_string(src_csv.as_posix())}, header=true, all_varchar=true) "
        "WHERE name_split IS NOT NULL AND trim(name_split) <> ''"
    )


def build_players_parquet(src_csv=settings.PLAYERS_CSV, out_path=settings.PLAYERS_PARQUET) -> Path:
    """
    Read the raw player CSV and write the typed Parquet file the PlayerStore reads.
    Rows without a name are dropped.
    """
    src_csv, out_path = Path(src_csv), Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    con = duckdb.connect()  # in-memory
    try:
        present = csv_columns(con, src_csv)
        missing = [c for c in TEXT_COLUMNS + METRIC_COLUMNS if c not in present]
        if missing:
            logger.warning("csv missing columns=%s, writing NULLs", missing)
        con.execute(f"COPY ({players_select_sql(src_csv, present)}) TO {sql_string(out_path.as_posix())} (FORMAT PARQUET)")
        rows = con.execute("SELECT count(*) FROM read_parquet(?)", [out_path.as_posix()]).fetchone()[0]
    finally:
        con.close()
    logger.info("wrote %s rows=%d", out_path, rows)
    return out_path


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--csv", default=settings.PLAYERS_CSV, help="Raw player CSV")
    ap.add_argument("--out", default=settings.PLAYERS_PARQUET, help="Parquet output path")
    args = ap.parse_args()
    logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT, datefmt=settings.LOG_DATE_FORMAT)
    build_players_parquet(args.csv, args.out)
