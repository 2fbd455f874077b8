import pytest

from conftest import RoutedLLM
from cerebro.errors import PlayerNotFoundError
from cerebro.services import build_services
from cerebro.tools.tool_registry import build_percentile_cache


def services_for(store, tmp_path, **llm_kwargs):
    llm = RoutedLLM(**llm_kwargs)
    cache = build_percentile_cache(store, path=tmp_path / "p.json")
    return build_services(store=store, llm=llm, cache=cache), llm


def report_prompt(llm):
    return llm.prompts_starting("You are the report-generation agent")[-1]


def test_report_by_player_id(store, tmp_path):
    services, llm = services_for(store, tmp_path, default="## Report")
    out = services.report_agent.invoke(player_id="p6")
    assert out["report"] == "## Report"
    assert out["toolUsed"] == "get_player_by_id"
    assert out["evidence"]["player"]["name_split"] == "Ava Point"
    assert llm.prompts_starting("Extract report target fields") == []


def test_report_by_unknown_id_raises(store, tmp_path):
    services, _ = services_for(store, tmp_path)
    with pytest.raises(PlayerNotFoundError):
        services.report_agent.invoke(player_id="ghost")


def test_report_by_provided_player_searches_directly(store, tmp_path):
    services, _ = services_for(store, tmp_path)
    out = services.report_agent.invoke(player={"name_split": "John Smith", "team": "Tech"})
    assert out["toolUsed"] == "search_players"
    assert [m["unique_id"] for m in out["evidence"]["matches"]] == ["p2"]
    assert out["evidence"]["providedPlayer"]["team"] == "Tech"


def test_report_for_named_player_includes_stat_line(store, tmp_path):
    services, llm = services_for(store, tmp_path, target={"playerName": "Jane Doe", "team": "", "position": ""})
    out = services.report_agent.invoke(message="write me a scouting report for Jane Doe")
    assert out["toolUsed"] == "search_players+get_player_by_id"
    assert out["evidence"]["bestMatch"]["unique_id"] == "p1"
    assert out["evidence"]["extractedTarget"]["playerName"] == "Jane Doe"
    prompt = report_prompt(llm)
    assert "Jane Doe (State U, PG, Jr) - PTS 18.2" in prompt
    assert "write me a scouting report for Jane Doe" in prompt


def test_report_on_duplicate_names_takes_first_match(store, tmp_path):
    services, _ = services_for(store, tmp_path, target={"playerName": "John Smith"})
    out = services.report_agent.invoke(message="report on John Smith")
    assert out["evidence"]["bestMatch"]["unique_id"] == "p2"
    assert len(out["evidence"]["candidateMatches"]) == 2


def test_report_falls_back_to_remembered_player(store, tmp_path):
    services, _ = services_for(store, tmp_path)
    out = services.report_agent.invoke(message="write a report on him", remembered={"unique_id": "p1"})
    assert out["toolUsed"] == "get_player_by_id"
    assert out["evidence"]["player"]["unique_id"] == "p1"


def test_report_without_target_uses_scoring_leaders(store, tmp_path):
    services, llm = services_for(store, tmp_path)
    out = services.report_agent.invoke(message="give me a report on the league")
    assert out["toolUsed"] == "top_players"
    assert out["evidence"]["userRequest"] == "give me a report on the league"
    assert out["evidence"]["result"]["metric"] == "pts_g"
    assert out["evidence"]["result"]["players"][0]["unique_id"] == "p1"
    assert len(llm.prompts_starting("You are a routing agent")) == 1
