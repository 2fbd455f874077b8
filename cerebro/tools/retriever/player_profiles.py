# cerebro/tools/retriever/player_profiles.py
from __future__ import annotations
import logging
import os
from typing import Any, Dict, List, Optional

from langchain_community.vectorstores import FAISS
from langchain_core.embeddings import Embeddings
from langchain_core.tools import Tool

from config import settings
from cerebro.llm.client import build_embeddings

logger = logging.getLogger(__name__)


class PlayerProfileRetriever:
    """Similarity search over the player profile index, loaded on first use."""

    def __init__(
        self,
        index_dir: str = settings.PLAYER_PROFILES_INDEX,
        embeddings: Optional[Embeddings] = None,
        num_results: int = settings.PROFILE_RESULTS,
    ):
        self.index_dir = index_dir
        self.embeddings = embeddings
        self.num_results = num_results
        self._vectorstore: Optional[FAISS] = None

    def available(self) -> bool:
        return self._vectorstore is not None or os.path.exists(os.path.join(self.index_dir, "index.faiss"))

    def run(self, query: str) -> List[Dict[str, Any]]:
        docs = self._store().similarity_search(query, k=self.num_results)
        logger.info("profile search query=%r hits=%d", query, len(docs))
        return [{"profile": d.page_content, **d.metadata} for d in docs]

    def _store(self) -> FAISS:
        if self._vectorstore is None:
            self._vectorstore = FAISS.load_local(
                self.index_dir,
                self.embeddings or build_embeddings(),
                allow_dangerous_deserialization=True,
            )
        return self._vectorstore


def make_player_profiles_tool(retriever: PlayerProfileRetriever) -> Tool:
    return Tool(
        name="player_profiles",
        description="Finds player profiles similar to a free-text question.",
        func=retriever.run,
    )
