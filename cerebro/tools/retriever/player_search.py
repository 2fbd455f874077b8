# cerebro/tools/retriever/player_search.py
from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator
from langchain_core.tools import StructuredTool

from config import settings
from cerebro.tools.base.player_store import PlayerStore


class SearchPlayersArgs(BaseModel):
    query: Optional[str] = Field(default=None, description="Player name or search text")
    team: Optional[str] = Field(default=None)
    position: Optional[str] = Field(default=None)
    limit: Optional[int] = Field(default=None)

    @field_validator("query", "team", "position", mode="before")
    @classmethod
    def _coerce_text(cls, v):
        if v is None:
            return None
        return str(v).strip()

    @field_validator("limit", mode="before")
    @classmethod
    def _coerce_limit(cls, v):
        try:
            return int(float(v))
        except (TypeError, ValueError, OverflowError):
            return None


class GetPlayerArgs(BaseModel):
    id: str = Field(description="Player unique_id")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v):
        return str(v).strip() if v is not None else v


def search_query_from_args(args: Dict[str, Any]) -> str:
    """Routers sometimes put the name under 'name' or 'playerName'."""
    for key in ("query", "name", "playerName"):
        value = args.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def make_search_players_tool(store: PlayerStore) -> StructuredTool:
    def _run(
        query: Optional[str] = None,
        team: Optional[str] = None,
        position: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return store.search(
            query=query or "",
            team=team or "",
            position=position or "",
            limit=limit or settings.DEFAULT_SEARCH_LIMIT,
        )

    return StructuredTool.from_function(
        name="search_players",
        description="Find players by name, team or position (case-insensitive substring match).",
        func=_run,
        args_schema=SearchPlayersArgs,
    )


def make_get_player_tool(store: PlayerStore) -> StructuredTool:
    def _run(id: str) -> Dict[str, Any]:
        return store.get(id)

    return StructuredTool.from_function(
        name="get_player_by_id",
        description="Fetch the full statistics record of one player by unique_id.",
        func=_run,
        args_schema=GetPlayerArgs,
    )
