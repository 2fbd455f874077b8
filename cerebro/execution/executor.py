# cerebro/execution/executor.py
from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from langchain_core.tools import BaseTool

from config import settings
from cerebro.agents.model_output import ToolPlan
from cerebro.resolution.player_resolver import PlayerResolver
from cerebro.tools.base.player_store import DEFAULT_METRIC
from cerebro.tools.retriever.player_search import search_query_from_args
from cerebro.tools.tool_registry import build_tool_index

logger = logging.getLogger(__name__)

Tools = Union[List[BaseTool], Mapping[str, BaseTool]]


def log_tool_call(tool: str, args: Mapping[str, Any]) -> None:
    try:
        logger.info("tool_call=%s args=%s", tool, json.dumps(args, default=str))
    except (TypeError, ValueError):
        logger.info("tool_call=%s args=[unserializable]", tool)


def _index(tools: Tools) -> Mapping[str, BaseTool]:
    return tools if isinstance(tools, Mapping) else build_tool_index(tools)


def _search_args(args: Mapping[str, Any], default_limit: int) -> Dict[str, Any]:
    return {
        "query": search_query_from_args(args),
        "team": args.get("team") or "",
        "position": args.get("position") or "",
        "limit": args.get("limit") or default_limit,
    }


def _ranking_args(args: Mapping[str, Any], with_metric_default: bool) -> Dict[str, Any]:
    out = {
        "metric": args.get("metric") or (DEFAULT_METRIC if with_metric_default else None),
        "position": args.get("position") or "",
        "team": args.get("team") or "",
        "limit": args.get("limit") or settings.DEFAULT_TOP_LIMIT,
        "minGames": settings.DEFAULT_MIN_GAMES if args.get("minGames") is None else args["minGames"],
    }
    if out["metric"] is None:
        del out["metric"]
    return out


def execute_plan(
    plan: Union[ToolPlan, Mapping[str, Any]],
    tools: Tools,
    resolver: Optional[PlayerResolver] = None,
    search_limit: int = settings.DEFAULT_SEARCH_LIMIT,
) -> Dict[str, Any]:
    """
    Runs one ToolPlan and returns {tool, result} (plus `resolution` when the
    resolver disambiguated a search). With a resolver, search_players goes
    through name resolution; without one it is a plain substring search.
    """
    plan = plan if isinstance(plan, ToolPlan) else ToolPlan.model_validate(dict(plan))
    name_to_tool = _index(tools)
    args = plan.args or {}

    if plan.tool == "search_players":
        call_args = _search_args(args, search_limit)
        log_tool_call("search_players", call_args)
        if resolver is not None:
            resolution = resolver.resolve(**call_args)
            if resolution.player is not None:
                log_tool_call("get_player_by_id", {"id": resolution.best_match["unique_id"]})
            return {"tool": resolution.tool_used, "result": resolution.to_evidence(), "resolution": resolution}
        return {"tool": "search_players", "result": name_to_tool["search_players"].invoke(call_args)}

    if plan.tool == "get_player_by_id" and args.get("id"):
        call_args = {"id": str(args["id"])}
        log_tool_call("get_player_by_id", call_args)
        return {"tool": "get_player_by_id", "result": name_to_tool["get_player_by_id"].invoke(call_args)}

    if plan.tool == "top_players":
        call_args = _ranking_args(args, with_metric_default=True)
        log_tool_call("top_players", call_args)
        return {"tool": "top_players", "result": name_to_tool["top_players"].invoke(call_args)}

    if plan.tool == "top_players_by_position":
        call_args = _ranking_args(args, with_metric_default=False)
        log_tool_call("top_players_by_position", call_args)
        return {
            "tool": "top_players_by_position",
            "result": name_to_tool["top_players_by_position"].invoke(call_args),
        }

    return {"tool": "none", "result": None}
