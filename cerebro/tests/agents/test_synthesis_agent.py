import json

from conftest import FakeLLM
from cerebro.agents.synthesis_agent import (
    REPORT_SECTIONS,
    SynthesisAgent,
    build_chat_prompt,
    build_clarification_reply,
    build_report_prompt,
    build_scouting_prompt,
    closest_match_note,
    format_stat,
    format_stat_line,
)
from cerebro.resolution.player_resolver import Resolution, ResolutionResult

JANE = {"unique_id": "p1", "name_split": "Jane Doe", "team": "State U", "position": "PG", "class": "Jr",
        "pts_g": 18.2, "reb_g": 4.1, "ast_g": 7.4, "fg": 0.475, "c_3pt": 0.381, "ft": None}


def test_format_stat():
    assert format_stat(18.24) == "18.2"
    assert format_stat(0.4751, True) == "47.5%"
    assert format_stat(None) == "N/A"
    assert format_stat(float("nan")) == "N/A"
    assert format_stat("n/a", True) == "N/A"


def test_stat_line():
    line = format_stat_line(JANE)
    assert line.startswith("Jane Doe (State U, PG, Jr) - PTS 18.2 | REB 4.1 | AST 7.4")
    assert "FG 47.5%" in line
    assert "3PT 38.1%" in line
    assert "FT N/A" in line


def test_chat_prompt_inlines_tool_result():
    prompt = build_chat_prompt("who leads in assists?", "top_players", {"metric": "ast_g", "players": []})
    assert "use ONLY the tool result" in prompt
    assert "Do NOT use outside knowledge" in prompt
    assert "Tool used: top_players" in prompt
    assert json.dumps({"metric": "ast_g", "players": []}) in prompt


def test_report_prompt_sections_in_order_and_stat_line():
    prompt = build_report_prompt("scout Jane", {"player": JANE})
    positions = [prompt.index(section) for section in REPORT_SECTIONS]
    assert positions == sorted(positions)
    assert "Use ONLY the evidence JSON" in prompt
    assert format_stat_line(JANE) in prompt


def test_report_prompt_renders_empty_evidence():
    prompt = build_report_prompt("", {})
    assert "Evidence JSON:\n{}" in prompt
    assert "Generate a scouting report from provided player data." in prompt
    assert "Stat line" not in prompt
    assert build_report_prompt("x", {"a": 1}) == build_report_prompt("x", {"a": 1})


def test_clarification_replies():
    candidates = [
        {"unique_id": "p2", "name_split": "John Smith", "team": "Tech", "position": "SG"},
        {"unique_id": "p3", "name_split": "John Smith", "team": None, "position": None},
    ]
    dup = ResolutionResult(Resolution.DUPLICATE_EXACT_NAME, "John Smith", candidates=candidates)
    reply = build_clarification_reply(dup)
    assert reply.startswith('I found multiple players with the exact name "John Smith".')
    assert "1. John Smith - Tech (SG) [id: p2]" in reply
    assert "2. John Smith - Unknown team (N/A) [id: p3]" in reply

    similar = ResolutionResult(Resolution.SIMILAR_NAME_CANDIDATES, "Jon Smyth", candidates=candidates * 4)
    reply = build_clarification_reply(similar)
    assert reply.startswith('I couldn\'t find an exact name match for "Jon Smyth"')
    assert "5. " in reply and "6. " not in reply


def test_closest_match_note():
    assert closest_match_note("Jane Doe", "jane doe") is None
    assert closest_match_note("Jane Doe", "Jane Q Doe") == 'I used "Jane Doe" as the closest matching player name.'
    assert closest_match_note(None, "x") is None


def test_scouting_prompt_and_agent():
    prompt = build_scouting_prompt({"name": "Jane Doe", "team": "State U", "fg": 0.5, "pts_g": 18})
    assert "scouting report for Jane Doe from State U" in prompt
    assert "- Field goal percentage: 50.0%" in prompt
    assert "- Points per game: 18.0" in prompt
    assert "Class: N/A" in prompt

    llm = FakeLLM("A report.")
    assert SynthesisAgent(llm).scouting_report({"name": "Jane Doe", "team": "State U"}) == "A report."
    assert llm.prompts[0].startswith("You are an expert college basketball scout.")
