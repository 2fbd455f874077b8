import json
from datetime import datetime, timezone

import duckdb
import pytest

from cerebro.capabilities.manifest import PLAYER_COLUMNS
from cerebro.tools.base.player_store import PlayerStore, create_players_table

ROSTER = [
    {"unique_id": "p1", "name_split": "Jane Doe", "team": "State U", "position": "PG", "class": "Jr",
     "league": "D1", "g": 30, "pts_g": 18.2, "reb_g": 4.1, "ast_g": 7.4, "fg": 0.475, "c_3pt": 0.381,
     "ft": 0.842, "ts": 0.601, "ppp": 1.05},
    {"unique_id": "p2", "name_split": "John Smith", "team": "Tech", "position": "SG", "class": "So",
     "league": "D1", "g": 28, "pts_g": 12.0, "ast_g": 2.5},
    {"unique_id": "p3", "name_split": "John Smith", "team": "Valley", "position": "SF", "class": "Sr",
     "league": "D1", "g": 31, "pts_g": 9.5, "ast_g": 1.1},
    {"unique_id": "p4", "name_split": "Marcus Johnson-Reed", "team": "Coastal", "position": "C",
     "class": "Fr", "league": "D1", "g": 25, "pts_g": 11.0, "reb_g": 9.8},
    {"unique_id": "p5", "name_split": "Marcus Reed", "team": "North", "position": "PF", "class": "Jr",
     "league": "D1", "g": 22, "pts_g": 8.0, "reb_g": 6.5},
    {"unique_id": "p6", "name_split": "Ava Point", "team": "State U", "position": "PG", "class": "Sr",
     "league": "D1", "g": 29, "pts_g": 14.0, "ast_g": 8.9},
    {"unique_id": "p7", "name_split": "Bench Guard", "team": "Tech", "position": "PG", "class": "Fr",
     "league": "D1", "g": 3, "pts_g": 30.0, "ast_g": 12.0},
]


def insert_players(con, rows, table="players"):
    for row in rows:
        values = [row.get(c) for c in PLAYER_COLUMNS]
        cols = ", ".join(f'"{c}"' for c in PLAYER_COLUMNS)
        marks = ", ".join("?" for _ in PLAYER_COLUMNS)
        con.execute(f"INSERT INTO {table} ({cols}) VALUES ({marks})", values)


def make_store(rows):
    con = duckdb.connect(database=":memory:")
    create_players_table(con)
    insert_players(con, rows)
    return PlayerStore(source="players", con=con)


@pytest.fixture
def store():
    return make_store(ROSTER)


class FakeLLM:
    """Scripted stand-in for LLMClient: pops replies in order and records prompts."""

    def __init__(self, *replies, default="ok"):
        self.replies = list(replies)
        self.default = default
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.replies:
            reply = self.replies.pop(0)
            return reply(prompt) if callable(reply) else reply
        return self.default


class RoutedLLM(FakeLLM):
    """Answers by prompt type so tests don't depend on call order."""

    def __init__(self, plan=None, target=None, default="Grounded answer."):
        super().__init__(default=default)
        self.plan = plan if plan is not None else {"tool": "none", "args": {}}
        self.target = target if target is not None else {"playerName": "", "team": "", "position": ""}

    def generate(self, prompt):
        self.prompts.append(prompt)
        if prompt.startswith("You are a routing agent"):
            return json.dumps(self.plan)
        if prompt.startswith("Extract report target fields"):
            return json.dumps(self.target)
        return self.default

    def prompts_starting(self, prefix):
        return [p for p in self.prompts if p.startswith(prefix)]


class FrozenClock:
    def __init__(self, now=None):
        self.now = now or datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now
