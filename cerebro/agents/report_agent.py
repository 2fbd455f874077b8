# cerebro/agents/report_agent.py
from __future__ import annotations
import logging
from typing import Any, Dict, Mapping, Optional

from config import settings
from cerebro.agents.intent_classifier import IntentClassifier
from cerebro.agents.model_output import ToolPlan
from cerebro.agents.synthesis_agent import SynthesisAgent
from cerebro.execution.executor import Tools, execute_plan
from cerebro.resolution.player_resolver import pick_best_match

logger = logging.getLogger(__name__)

REPORT_FALLBACK_PLAN = ToolPlan(
    tool="top_players",
    args={"metric": "pts_g", "limit": settings.DEFAULT_TOP_LIMIT},
)


class ReportAgent:
    """
    Gathers evidence for a scouting report and asks the model to write it.

    Target precedence: explicit id, provided player, player named in the
    message, the session's remembered player, then whatever tool the
    classifier picks (league scoring leaders when it picks nothing).
    """

    def __init__(self, tools: Tools, classifier: IntentClassifier, synthesis: SynthesisAgent):
        self.tools = tools
        self.classifier = classifier
        self.synthesis = synthesis

    # ---------- public API ----------
    def invoke(
        self,
        message: str = "",
        player: Optional[Mapping[str, Any]] = None,
        player_id: str = "",
        remembered: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        tool_used, evidence = self.gather(message, player, player_id, remembered)
        report = self.synthesis.report(message, evidence)
        return {"report": report, "toolUsed": tool_used, "evidence": evidence}

    def gather(
        self,
        message: str = "",
        player: Optional[Mapping[str, Any]] = None,
        player_id: str = "",
        remembered: Optional[Mapping[str, Any]] = None,
    ):
        player = player or {}
        target_id = player.get("unique_id") or player_id
        if target_id:
            return "get_player_by_id", {"player": self._fetch(target_id)}

        if player.get("name_split"):
            matches = self._search(player["name_split"], player.get("team"), player.get("position"), limit=5)
            return "search_players", {"providedPlayer": dict(player), "matches": matches}

        target = self.classifier.extractor.invoke(message)
        if target is not None and target.playerName:
            matches = self._search(target.playerName, target.team, target.position, limit=10)
            best = pick_best_match(target.playerName, matches)
            if best is not None and best.get("unique_id"):
                return "search_players+get_player_by_id", {
                    "extractedTarget": target.model_dump(),
                    "bestMatch": best,
                    "player": self._fetch(best["unique_id"]),
                    "candidateMatches": matches[: settings.MAX_CANDIDATES],
                }
            return "search_players", {"extractedTarget": target.model_dump(), "candidateMatches": matches}

        if remembered and remembered.get("unique_id"):
            logger.info("report falls back to remembered player id=%s", remembered["unique_id"])
            return "get_player_by_id", {
                "rememberedPlayer": dict(remembered),
                "player": self._fetch(remembered["unique_id"]),
            }

        plan = self.classifier.classify(message, extract_target=False).plan
        if plan.tool == "none":
            plan = REPORT_FALLBACK_PLAN
        outcome = execute_plan(plan, self.tools)
        return outcome["tool"], {"userRequest": message, "result": outcome["result"]}

    # ---------- helpers ----------
    def _fetch(self, player_id: Any) -> Dict[str, Any]:
        plan = ToolPlan(tool="get_player_by_id", args={"id": str(player_id)})
        return execute_plan(plan, self.tools)["result"]

    def _search(self, query: str, team: Optional[str], position: Optional[str], limit: int):
        plan = ToolPlan(
            tool="search_players",
            args={"query": query, "team": team or "", "position": position or "", "limit": limit},
        )
        return execute_plan(plan, self.tools)["result"]
