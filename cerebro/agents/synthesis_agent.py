# cerebro/agents/synthesis_agent.py
from __future__ import annotations
import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from cerebro.capabilities.manifest import MANIFEST
from cerebro.llm.client import build_llm_client
from cerebro.resolution.player_resolver import Resolution, ResolutionResult, normalize_name

logger = logging.getLogger(__name__)

PERCENTAGE_METRICS = frozenset(MANIFEST["percentage_metrics"])

# (label, column) pairs shown in stat lines and scouting prompts
STAT_LINE_FIELDS = [
    ("PTS", "pts_g"), ("REB", "reb_g"), ("AST", "ast_g"), ("STL", "stl_g"), ("BLK", "blk_g"),
    ("TO", "to_g"), ("MIN", "min_g"), ("FG", "fg"), ("3PT", "c_3pt"), ("FT", "ft"),
    ("eFG", "efg"), ("TS", "ts"), ("USG", "usg"), ("PPP", "ppp"), ("G", "g"),
]

SCOUTING_FIELDS = [
    ("Points per game", "pts_g"),
    ("Rebounds per game", "reb_g"),
    ("Assists per game", "ast_g"),
    ("Minutes per game", "min_g"),
    ("Field goal percentage", "fg"),
    ("Three-point percentage", "c_3pt"),
    ("Free throw percentage", "ft"),
    ("Steals per game", "stl_g"),
    ("Blocks per game", "blk_g"),
    ("Turnovers per game", "to_g"),
]

REPORT_SECTIONS = [
    "Player/Cohort Overview",
    "Key Strengths",
    "Key Concerns",
    "Metrics Snapshot",
    "Projection / Recommendation",
]


# ---------- Formatting ----------
def format_stat(value: Any, is_percentage: bool = False) -> str:
    if value is None or isinstance(value, bool):
        return "N/A"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "N/A"
    if number != number:
        return "N/A"
    return f"{number * 100:.1f}%" if is_percentage else f"{number:.1f}"


def format_stat_line(player: Mapping[str, Any]) -> str:
    """'Jane Doe (State U, PG, Jr) - PTS 18.2 | REB 4.1 | ... | FG 47.5%'"""
    context = ", ".join(str(player.get(k) or "N/A") for k in ("team", "position", "class"))
    stats = " | ".join(
        f"{label} {format_stat(player.get(col), col in PERCENTAGE_METRICS)}" for label, col in STAT_LINE_FIELDS
    )
    return f"{player.get('name_split') or 'Unknown player'} ({context}) - {stats}"


def _evidence_json(evidence: Any) -> str:
    return json.dumps(evidence, ensure_ascii=False, default=str)


def single_player(evidence: Any) -> Optional[Mapping[str, Any]]:
    """The one resolved player record inside an evidence object, if there is one."""
    if isinstance(evidence, Mapping):
        player = evidence.get("player")
        if isinstance(player, Mapping) and player.get("name_split"):
            return player
        if evidence.get("name_split") and evidence.get("unique_id"):
            return evidence
    return None


# ---------- Prompt builders ----------
def build_chat_prompt(message: str, tool: str, result: Any) -> str:
    return (
        "You are the chat agent for a basketball analytics app.\n"
        "You must use ONLY the tool result below for factual claims.\n"
        "Do NOT use outside knowledge, assumptions, or any external data.\n"
        "If the tool result is null/empty or does not contain enough data, say you do not have enough "
        "database evidence and ask a clarifying question.\n\n"
        f"User message:\n{message}\n\n"
        f"Tool used: {tool}\n"
        f"Tool result JSON:\n{_evidence_json(result)}\n\n"
        "Return a concise, helpful response grounded only in the tool result."
    )


def build_report_prompt(message: str, evidence: Any) -> str:
    player = single_player(evidence)
    stat_line = f"Stat line:\n{format_stat_line(player)}\n\n" if player else ""
    sections = "\n".join(f"{i}) {name}" for i, name in enumerate(REPORT_SECTIONS, 1))
    return (
        "You are the report-generation agent for basketball scouting.\n"
        "Generate a coach-friendly, evidence-based report from the data below.\n"
        "Use ONLY the evidence JSON for factual claims.\n"
        "Do NOT use outside knowledge, assumptions, memory, or any external data.\n"
        "If data is incomplete, explicitly state limitations.\n\n"
        f"User request:\n{message or 'Generate a scouting report from provided player data.'}\n\n"
        f"{stat_line}"
        f"Evidence JSON:\n{_evidence_json(evidence if evidence is not None else {})}\n\n"
        f"Required output format:\n{sections}\n\n"
        "Use markdown and include specific numbers from evidence where available."
    )


def build_scouting_prompt(player: Mapping[str, Any]) -> str:
    stats = "\n".join(
        f"- {label}: {format_stat(player.get(col), col in PERCENTAGE_METRICS)}" for label, col in SCOUTING_FIELDS
    )
    return (
        "You are an expert college basketball scout. Generate a detailed scouting report for "
        f"{player.get('name')} from {player.get('team')}.\n\n"
        f"Position: {player.get('position') or 'N/A'}\n"
        f"Class: {player.get('class') or 'N/A'}\n\n"
        f"Statistics:\n{stats}\n\n"
        "Write a **dense, information-packed** 2-3 paragraph scouting report. Be concise but "
        "comprehensive. Focus on:\n"
        "- Playing style and role in team system\n"
        "- Key statistical strengths backed by their actual numbers\n"
        "- Offensive and defensive impact\n"
        "- Efficiency metrics and shot selection\n"
        "- Physical tools and intangibles\n"
        "- Pro potential indicators\n\n"
        "Use **bold** for critical attributes and statistics."
    )


# ---------- Deterministic replies ----------
def candidate_lines(candidates: Iterable[Mapping[str, Any]], limit: int = 5) -> str:
    lines: List[str] = []
    for idx, p in enumerate(list(candidates)[:limit], 1):
        lines.append(
            f"{idx}. {p.get('name_split')} - {p.get('team') or 'Unknown team'} "
            f"({p.get('position') or 'N/A'}) [id: {p.get('unique_id')}]"
        )
    return "\n".join(lines)


def build_clarification_reply(resolution: ResolutionResult) -> str:
    summary = candidate_lines(resolution.candidates)
    if resolution.kind == Resolution.DUPLICATE_EXACT_NAME:
        return (
            f'I found multiple players with the exact name "{resolution.query}". '
            f"Please clarify which one you mean:\n{summary}\n\n"
            "You can reply with the player id, team, or position."
        )
    return (
        f'I couldn\'t find an exact name match for "{resolution.query}", but I found similar players:\n'
        f"{summary}\n\nWhich player did you mean? You can reply with the player id, team, or position."
    )


def closest_match_note(resolved_name: Optional[str], query: Optional[str]) -> Optional[str]:
    if resolved_name and query and normalize_name(resolved_name) != normalize_name(query):
        return f'I used "{resolved_name}" as the closest matching player name.'
    return None


class SynthesisAgent:
    """Renders evidence into prompts and returns the model's text unchanged."""

    def __init__(self, llm: Optional[Any] = None):
        self.llm = llm or build_llm_client()

    def reply(self, message: str, tool: str, result: Any) -> str:
        return self.llm.generate(build_chat_prompt(message, tool, result))

    def report(self, message: str, evidence: Any) -> str:
        return self.llm.generate(build_report_prompt(message, evidence))

    def scouting_report(self, player: Mapping[str, Any]) -> str:
        return self.llm.generate(build_scouting_prompt(player))

    def stream(self, message: str, tool: str, result: Any):
        for line in self.reply(message, tool, result).splitlines(True):
            yield line
