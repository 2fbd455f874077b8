# cerebro/agents/heuristics.py
# Regex checks that settle a message without asking a model.
from __future__ import annotations
import re
from typing import Optional

from config import settings
from cerebro.agents.model_output import ToolPlan
from cerebro.capabilities.manifest import MANIFEST

REPORT_PATTERN = re.compile(
    r"\b(report|scouting report|scout report|write up|write-up|player report)\b", re.IGNORECASE
)
PRONOUN_PATTERN = re.compile(
    r"\b(?:that|this|the same) (?:player|guy|prospect)\b|\b(?:him|her|his|he|she)\b", re.IGNORECASE
)
TOP_N_PATTERN = re.compile(r"\btop\s+(\d{1,3})\b", re.IGNORECASE)
# Two or more capitalised words in a row, e.g. "Ava Point" or "Marcus Johnson-Reed"
NAMED_PLAYER_PATTERN = re.compile(r"\b[A-Z][a-z'.]+(?:-[A-Z][a-z'.]+)?(?:\s+[A-Z][a-z'.]+(?:-[A-Z][a-z'.]+)?)+\b")

_POSITIONS = [(re.compile(p, re.IGNORECASE), canon) for p, canon in MANIFEST["position_synonyms"]]
_EFFICIENCY = [(re.compile(p, re.IGNORECASE), m) for p, m in MANIFEST["efficiency_keywords"]]
_METRICS = [(re.compile(p, re.IGNORECASE), m) for p, m in MANIFEST["metric_keywords"]]
_RANKING = re.compile(MANIFEST["ranking_words"], re.IGNORECASE)
_EFFECTIVENESS = re.compile(MANIFEST["effectiveness_words"], re.IGNORECASE)


def is_report_request(message: str) -> bool:
    return bool(REPORT_PATTERN.search(message or ""))


def refers_to_previous_player(message: str) -> bool:
    return bool(PRONOUN_PATTERN.search(message or ""))


def names_a_player(message: str) -> bool:
    return bool(NAMED_PLAYER_PATTERN.search(message or ""))


def detect_position(message: str) -> Optional[str]:
    for pattern, canonical in _POSITIONS:
        if pattern.search(message or ""):
            return canonical
    return None


def detect_efficiency_metric(message: str) -> Optional[str]:
    for pattern, metric in _EFFICIENCY:
        if pattern.search(message or ""):
            return metric
    return None


def detect_metric(message: str) -> Optional[str]:
    # "points per possession" would otherwise read as points
    efficiency = detect_efficiency_metric(message)
    if efficiency:
        return efficiency
    for pattern, metric in _METRICS:
        if pattern.search(message or ""):
            return metric
    return None


def requested_limit(message: str, default: int = settings.DEFAULT_TOP_LIMIT) -> int:
    match = TOP_N_PATTERN.search(message or "")
    if not match:
        return default
    return min(max(int(match.group(1)), 1), settings.MAX_SEARCH_LIMIT)


def detect_position_metric_ranking(message: str) -> Optional[ToolPlan]:
    """'best PG by assists' -> top_players. Needs position, ranking word and metric."""
    position = detect_position(message)
    if not position or not _RANKING.search(message or ""):
        return None
    metric = detect_metric(message)
    if not metric:
        return None
    return ToolPlan(
        tool="top_players",
        args={
            "metric": metric,
            "position": position,
            "limit": requested_limit(message),
            "minGames": settings.DEFAULT_MIN_GAMES,
        },
    )


def detect_effectiveness_ranking(message: str) -> Optional[ToolPlan]:
    """'most effective centers' -> composite top_players_by_position."""
    if not _EFFECTIVENESS.search(message or ""):
        return None
    position = detect_position(message)
    if not position:
        return None
    return ToolPlan(tool="top_players_by_position", args={"position": position, "limit": requested_limit(message)})
