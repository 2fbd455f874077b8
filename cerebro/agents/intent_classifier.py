# cerebro/agents/intent_classifier.py
from __future__ import annotations
import logging
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from config import settings
from cerebro.agents.extractor_agent import TargetExtractorAgent
from cerebro.agents.heuristics import (
    detect_effectiveness_ranking,
    detect_position_metric_ranking,
    names_a_player,
    refers_to_previous_player,
)
from cerebro.agents.model_output import ToolPlan
from cerebro.agents.router_agent import RouterAgent

logger = logging.getLogger(__name__)


class Classification(BaseModel):
    plan: ToolPlan
    source: Literal["position_metric", "effectiveness", "session_memory", "router", "extractor"] = Field(
        ..., description="Which layer produced the plan."
    )


class IntentClassifier:
    """
    Maps a chat message to a ToolPlan, cheapest layer first:
    ranking regexes, then the remembered player for pronoun follow-ups that
    name nobody, then the router model, then the target extractor when the
    router says none.
    """

    def __init__(self, router: RouterAgent, extractor: TargetExtractorAgent):
        self.router = router
        self.extractor = extractor

    def classify(
        self,
        message: str,
        remembered: Optional[Dict[str, Any]] = None,
        extract_target: bool = True,
    ) -> Classification:
        plan = detect_position_metric_ranking(message)
        if plan is not None:
            return self._chosen(plan, "position_metric")

        plan = detect_effectiveness_ranking(message)
        if plan is not None:
            return self._chosen(plan, "effectiveness")

        # a pronoun only points back when the message names nobody else
        if (
            remembered
            and remembered.get("unique_id")
            and refers_to_previous_player(message)
            and not names_a_player(message)
        ):
            plan = ToolPlan(tool="get_player_by_id", args={"id": remembered["unique_id"]})
            return self._chosen(plan, "session_memory")

        plan = self.router.invoke(message)
        if plan.tool != "none" or not extract_target:
            return self._chosen(plan, "router")

        target = self.extractor.invoke(message)
        if target is not None and target.playerName:
            plan = ToolPlan(
                tool="search_players",
                args={
                    "query": target.playerName,
                    "team": target.team,
                    "position": target.position,
                    "limit": settings.DEFAULT_SEARCH_LIMIT,
                },
            )
            return self._chosen(plan, "extractor")
        return self._chosen(plan, "router")

    def _chosen(self, plan: ToolPlan, source: str) -> Classification:
        logger.info("plan_selected source=%s tool=%s args=%s", source, plan.tool, plan.args)
        return Classification(plan=plan, source=source)
