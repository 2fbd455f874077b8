import pytest

from cerebro.agents.heuristics import (
    detect_effectiveness_ranking,
    detect_metric,
    detect_position,
    detect_position_metric_ranking,
    is_report_request,
    names_a_player,
    refers_to_previous_player,
)


@pytest.mark.parametrize(
    "message",
    ["write me a scouting report for Jane Doe", "Can I get a write-up on him?", "player REPORT please"],
)
def test_report_requests(message):
    assert is_report_request(message)


def test_report_word_must_stand_alone():
    assert not is_report_request("who reported the best assists")


@pytest.mark.parametrize(
    "message,position",
    [
        ("best point guards", "PG"),
        ("top SGs by scoring", "SG"),
        ("most productive big men", "C"),
        ("who is the best center", "C"),
        ("leading guard in steals", "G"),
        ("best power forward", "PF"),
        ("top forwards", "F"),
        ("best players overall", None),
    ],
)
def test_detect_position(message, position):
    assert detect_position(message) == position


@pytest.mark.parametrize(
    "message,metric",
    [
        ("points per possession", "ppp"),
        ("best true shooting", "ts"),
        ("effective field goal percentage", "efg"),
        ("assist-to-turnover ratio", "a_to"),
        ("offensive rebounds", "orb_40"),
        ("rebounds", "reb_g"),
        ("three point shooting", "c_3pt"),
        ("free throw percentage", "ft"),
        ("top scorers", "pts_g"),
        ("assists", "ast_g"),
        ("nothing here", None),
    ],
)
def test_detect_metric(message, metric):
    assert detect_metric(message) == metric


def test_best_pg_by_assists():
    plan = detect_position_metric_ranking("who is the best PG by assists")
    assert plan.tool == "top_players"
    assert plan.args == {"metric": "ast_g", "position": "PG", "limit": 10, "minGames": 5}


def test_top_n_sets_limit():
    plan = detect_position_metric_ranking("top 5 small forwards by true shooting")
    assert plan.args["limit"] == 5
    assert plan.args["metric"] == "ts"
    assert plan.args["position"] == "SF"


def test_ranking_needs_all_three_parts():
    assert detect_position_metric_ranking("best assists") is None
    assert detect_position_metric_ranking("PG assists") is None
    assert detect_position_metric_ranking("best PG") is None


def test_effectiveness_ranking():
    plan = detect_effectiveness_ranking("Who are the most effective centers?")
    assert plan.tool == "top_players_by_position"
    assert plan.args == {"position": "C", "limit": 10}
    assert detect_effectiveness_ranking("most effective players") is None


@pytest.mark.parametrize(
    "message,expected",
    [("tell me more about that player", True), ("how many assists does he average", True),
     ("what about her shooting", True), ("who leads the league in blocks", False)],
)
def test_pronoun_reference(message, expected):
    assert refers_to_previous_player(message) is expected


@pytest.mark.parametrize(
    "message,expected",
    [("Tell me about Ava Point and her assists", True), ("is Marcus Johnson-Reed a real center", True),
     ("How many games did he play?", False), ("Is she a better PG than most?", False)],
)
def test_message_names_a_player(message, expected):
    assert names_a_player(message) is expected
