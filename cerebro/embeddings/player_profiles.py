# cerebro/embeddings/player_profiles.py
# Builds the FAISS index of per-player profile documents used to ground small talk.
from __future__ import annotations
import argparse
import logging
import os
from typing import List

import duckdb
import pandas as pd
from langchain_community.vectorstores import FAISS
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings

from config import settings
from cerebro.agents.synthesis_agent import format_stat_line
from cerebro.llm.client import build_embeddings

logger = logging.getLogger(__name__)


def load_profile_frame(parquet_path: str = settings.PLAYERS_PARQUET) -> pd.DataFrame:
    return duckdb.connect().execute(
        "SELECT * FROM read_parquet(?) WHERE name_split IS NOT NULL AND name_split <> ''",
        [parquet_path],
    ).df()


def profile_documents(df: pd.DataFrame) -> List[Document]:
    # metric NaNs must stay None so the stat line prints N/A
    df = df.astype(object).where(pd.notna(df), None)
    documents = []
    for _, row in df.iterrows():
        record = row.to_dict()
        content = (
            f"Player: {record.get('name_split')}\n"
            f"League: {record.get('league') or 'N/A'}\n"
            f"{format_stat_line(record)}"
        )
        metadata = {
            "unique_id": str(record.get("unique_id")),
            "name_split": record.get("name_split"),
            "team": record.get("team"),
            "position": record.get("position"),
        }
        documents.append(Document(page_content=content, metadata=metadata))
    return documents


def build_index(df: pd.DataFrame, embeddings: Embeddings, out_dir: str = settings.PLAYER_PROFILES_INDEX) -> FAISS:
    documents = profile_documents(df)
    if not documents:
        raise ValueError("no player rows to index")
    vectorstore = FAISS.from_documents(documents, embeddings)
    os.makedirs(out_dir, exist_ok=True)
    vectorstore.save_local(out_dir)
    logger.info("player profile index built docs=%d dir=%s", len(documents), out_dir)
    return vectorstore


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Build the player profile FAISS index")
    parser.add_argument("--parquet", default=settings.PLAYERS_PARQUET)
    parser.add_argument("--out", default=settings.PLAYER_PROFILES_INDEX)
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT, datefmt=settings.LOG_DATE_FORMAT)
    build_index(load_profile_frame(args.parquet), build_embeddings(), args.out)


if __name__ == "__main__":
    main()
