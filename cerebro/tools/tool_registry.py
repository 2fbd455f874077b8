# cerebro/tools/tool_registry.py
from __future__ import annotations
from typing import Dict, List, Optional

from langchain_core.tools import BaseTool

from cerebro.tools.base.player_store import PlayerStore
from cerebro.tools.compute.percentiles import PercentileCache
from cerebro.tools.compute.top_players import make_top_players_by_position_tool, make_top_players_tool
from cerebro.tools.retriever.player_search import make_get_player_tool, make_search_players_tool


def build_percentile_cache(store: PlayerStore, **kwargs) -> PercentileCache:
    return PercentileCache(fetch_rows=store.percentile_rows, **kwargs)


def build_tools(store: PlayerStore, cache: Optional[PercentileCache] = None) -> List[BaseTool]:
    cache = cache or build_percentile_cache(store)
    return [
        # Retriever
        make_search_players_tool(store),
        make_get_player_tool(store),
        # Compute / ranking
        make_top_players_tool(store),
        make_top_players_by_position_tool(store, cache),
    ]


def build_tool_index(tools: List[BaseTool]) -> Dict[str, BaseTool]:
    return {t.name: t for t in tools}
