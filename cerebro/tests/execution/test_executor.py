import pytest

from cerebro.agents.model_output import ToolPlan
from cerebro.errors import PlayerNotFoundError
from cerebro.execution.executor import execute_plan
from cerebro.resolution.player_resolver import PlayerResolver
from cerebro.tools.tool_registry import build_percentile_cache, build_tools


@pytest.fixture
def tools(store, tmp_path):
    return build_tools(store, build_percentile_cache(store, path=tmp_path / "p.json"))


def test_report_path_search_is_plain_substring(tools):
    out = execute_plan({"tool": "search_players", "args": {"playerName": "John Smith"}}, tools)
    assert out["tool"] == "search_players"
    assert [p["unique_id"] for p in out["result"]] == ["p2", "p3"]
    assert "resolution" not in out


def test_chat_path_search_goes_through_resolver(store, tools):
    out = execute_plan(ToolPlan(tool="search_players", args={"query": "Jane Doe"}), tools, resolver=PlayerResolver(store))
    assert out["tool"] == "search_players+get_player_by_id"
    assert out["result"]["player"]["unique_id"] == "p1"
    assert out["resolution"].kind.value == "exact"


def test_get_player_without_id_degrades_to_none(tools):
    assert execute_plan(ToolPlan(tool="get_player_by_id", args={}), tools) == {"tool": "none", "result": None}


def test_get_player_missing_raises(tools):
    with pytest.raises(PlayerNotFoundError):
        execute_plan(ToolPlan(tool="get_player_by_id", args={"id": "ghost"}), tools)


def test_top_players_defaults(tools):
    out = execute_plan(ToolPlan(tool="top_players", args={}), tools)
    assert out["tool"] == "top_players"
    assert out["result"]["metric"] == "pts_g"
    # default minGames of 5 excludes the 3-game scorer
    assert "p7" not in [p["unique_id"] for p in out["result"]["players"]]


def test_top_players_by_position_plan(tools):
    out = execute_plan(ToolPlan(tool="top_players_by_position", args={"position": "PG", "limit": 2}), tools)
    assert out["tool"] == "top_players_by_position"
    assert out["result"]["position"] == "PG"
    assert len(out["result"]["players"]) <= 2


def test_every_call_is_logged(tools, caplog):
    with caplog.at_level("INFO", logger="cerebro.execution.executor"):
        execute_plan(ToolPlan(tool="top_players", args={"metric": "reb_g", "limit": 3}), tools)
    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("tool_call=top_players args=") and '"metric": "reb_g"' in m for m in messages)


def test_none_plan(tools):
    assert execute_plan(ToolPlan(), tools) == {"tool": "none", "result": None}
