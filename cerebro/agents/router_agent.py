# cerebro/agents/router_agent.py
from __future__ import annotations
import json
import logging
from typing import Any, Dict, Optional

from cerebro.agents.model_output import NO_TOOL, ToolPlan, parse_tool_plan
from cerebro.capabilities.manifest import MANIFEST
from cerebro.errors import ModelOutputParseError
from cerebro.llm.client import build_llm_client

logger = logging.getLogger(__name__)


# ---------- Router Agent ----------
class RouterAgent:
    """
    Asks the model which single tool answers a chat message.
    Returns a ToolPlan; anything unparseable becomes {tool: none}.
    """

    def __init__(self, llm: Optional[Any] = None):
        self.llm = llm or build_llm_client()
        self.allowed_tools = ["search_players", "get_player_by_id", "top_players", "top_players_by_position", "none"]
        self.allowed_metrics = list(MANIFEST["rankable_metrics"])

        # Brief arg shapes to guide the model
        self.tool_arg_hints = {
            "search_players": {"query": "<player name or search text>", "team": "", "position": "", "limit": 20},
            "get_player_by_id": {"id": "<unique_id>"},
            "top_players": {"metric": "pts_g", "position": "", "team": "", "limit": 10, "minGames": 5},
            "top_players_by_position": {"position": "PG|SG|SF|PF|C|G|F", "team": "", "limit": 10, "minGames": 5},
        }

        self.system_instruction = (
            "You are a routing agent for basketball database tools.\n"
            "Return ONLY valid JSON with this schema:\n"
            "{\n"
            f'  "tool": {" | ".join(json.dumps(t) for t in self.allowed_tools)},\n'
            '  "args": { ... }\n'
            "}\n\n"
            "Guidelines:\n"
            '- Use "search_players" when user asks to find players by name/team/position.\n'
            '- Use "get_player_by_id" only if user explicitly provides an id.\n'
            '- Use "top_players" when user asks for top/best/ranking by a metric.\n'
            '- Use "top_players_by_position" when user asks who is most effective at a position without naming a metric.\n'
            '- Use "none" for pure conversation.\n'
            f"- For top/best:\n  allowed metrics: {', '.join(self.allowed_metrics)}\n"
            f"- Arg shapes: {json.dumps(self.tool_arg_hints)}\n"
            '- Do not use "name" as a key. Put player names in "query".\n'
        )

    # ---------- public API ----------
    def build_prompt(self, message: str) -> str:
        return f"{self.system_instruction}\nUser message:\n{message}"

    def plan(self, message: str) -> ToolPlan:
        """Fallible step: raises ModelOutputParseError on malformed output."""
        return parse_tool_plan(self.llm.generate(self.build_prompt(message)))

    def invoke(self, message: str) -> ToolPlan:
        try:
            return self.plan(message)
        except ModelOutputParseError as e:
            logger.warning("router output unusable, defaulting to none: %s", e)
            return NO_TOOL.model_copy(deep=True)

    def stream(self, message: str):
        pretty = json.dumps(self.invoke(message).model_dump(), indent=2)
        for line in pretty.splitlines(True):
            yield line
