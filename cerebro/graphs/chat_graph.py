# cerebro/graphs/chat_graph.py
from __future__ import annotations
import logging
from typing import Any, Dict, Optional, TypedDict

from langgraph.graph import END, StateGraph

from cerebro.agents.heuristics import is_report_request
from cerebro.agents.intent_classifier import IntentClassifier
from cerebro.agents.model_output import ToolPlan
from cerebro.agents.report_agent import ReportAgent
from cerebro.agents.synthesis_agent import SynthesisAgent, build_clarification_reply, closest_match_note
from cerebro.execution.executor import Tools, execute_plan, log_tool_call
from cerebro.memory.session_memory import SessionMemory
from cerebro.resolution.player_resolver import PlayerResolver, ResolutionResult
from cerebro.tools.retriever.player_profiles import PlayerProfileRetriever, make_player_profiles_tool

logger = logging.getLogger(__name__)


# ---------- State ----------
class ChatState(TypedDict, total=False):
    message: str
    session_id: Optional[str]
    remembered: Optional[Dict[str, Any]]
    plan: ToolPlan
    source: str
    tool: str
    result: Any
    resolution: Optional[ResolutionResult]
    reply: str
    tool_used: str
    evidence: Any


def remembered_player(state: ChatState) -> Optional[Dict[str, Any]]:
    """The player this turn settled on, if any."""
    resolution = state.get("resolution")
    if resolution is not None:
        return resolution.player
    result = state.get("result")
    if state.get("tool") == "get_player_by_id" and isinstance(result, dict):
        return result
    evidence = state.get("evidence")
    if (state.get("tool_used") or "").startswith("chat->report:") and isinstance(evidence, dict):
        player = evidence.get("player")
        return player if isinstance(player, dict) else None
    return None


class ChatAgent:
    """
    recall -> report                                   -> remember
           -> classify -> dispatch -> clarify
                                   -> respond          -> remember

    invoke(message, session_id) -> {reply, toolUsed, evidence}
    """

    def __init__(
        self,
        tools: Tools,
        resolver: PlayerResolver,
        classifier: IntentClassifier,
        synthesis: SynthesisAgent,
        report_agent: ReportAgent,
        memory: SessionMemory,
        profiles: Optional[PlayerProfileRetriever] = None,
    ):
        self.tools = tools
        self.resolver = resolver
        self.classifier = classifier
        self.synthesis = synthesis
        self.report_agent = report_agent
        self.memory = memory
        self.profiles_tool = make_player_profiles_tool(profiles) if profiles is not None else None
        self._profiles = profiles
        self.app = self.build_graph()

    # ---------- Nodes ----------
    def n_recall(self, state: ChatState) -> ChatState:
        return {**state, "remembered": self.memory.get(state.get("session_id"))}

    def n_report(self, state: ChatState) -> ChatState:
        delegated = self.report_agent.invoke(message=state["message"], remembered=state.get("remembered"))
        return {
            **state,
            "reply": delegated["report"],
            "tool_used": f"chat->report:{delegated['toolUsed']}",
            "evidence": delegated["evidence"],
        }

    def n_classify(self, state: ChatState) -> ChatState:
        decision = self.classifier.classify(state["message"], state.get("remembered"))
        return {**state, "plan": decision.plan, "source": decision.source}

    def n_dispatch(self, state: ChatState) -> ChatState:
        outcome = execute_plan(state["plan"], self.tools, resolver=self.resolver)
        if outcome["tool"] == "none" and self._profiles_ready():
            log_tool_call("player_profiles", {"query": state["message"]})
            outcome = {"tool": "player_profiles", "result": self.profiles_tool.invoke(state["message"])}
        return {
            **state,
            "tool": outcome["tool"],
            "result": outcome["result"],
            "resolution": outcome.get("resolution"),
        }

    def n_clarify(self, state: ChatState) -> ChatState:
        return {
            **state,
            "reply": build_clarification_reply(state["resolution"]),
            "tool_used": state["tool"],
            "evidence": state["result"],
        }

    def n_respond(self, state: ChatState) -> ChatState:
        reply = self.synthesis.reply(state["message"], state["tool"], state["result"])
        resolution = state.get("resolution")
        if resolution is not None:
            note = closest_match_note(resolution.resolved_name, resolution.query)
            if note:
                reply = f"{note}\n\n{reply}"
        return {**state, "reply": reply, "tool_used": state["tool"], "evidence": state["result"]}

    def n_remember(self, state: ChatState) -> ChatState:
        player = remembered_player(state)
        if player is not None:
            self.memory.set(state.get("session_id"), player)
        return state

    # ---------- Routing ----------
    @staticmethod
    def branch_intent(state: ChatState) -> str:
        return "report" if is_report_request(state["message"]) else "classify"

    @staticmethod
    def branch_resolution(state: ChatState) -> str:
        resolution = state.get("resolution")
        return "clarify" if resolution is not None and resolution.is_ambiguous else "respond"

    # ---------- Graph Builder ----------
    def build_graph(self):
        g = StateGraph(ChatState)
        g.set_entry_point("recall")

        g.add_node("recall", self.n_recall)
        g.add_node("report", self.n_report)
        g.add_node("classify", self.n_classify)
        g.add_node("dispatch", self.n_dispatch)
        g.add_node("clarify", self.n_clarify)
        g.add_node("respond", self.n_respond)
        g.add_node("remember", self.n_remember)

        g.add_conditional_edges("recall", self.branch_intent, {"report": "report", "classify": "classify"})
        g.add_edge("classify", "dispatch")
        g.add_conditional_edges("dispatch", self.branch_resolution, {"clarify": "clarify", "respond": "respond"})
        g.add_edge("report", "remember")
        g.add_edge("respond", "remember")
        g.add_edge("clarify", END)
        g.add_edge("remember", END)

        return g.compile()

    # ---------- public API ----------
    def invoke(self, message: str, session_id: Optional[str] = None) -> Dict[str, Any]:
        state = self.app.invoke({"message": message, "session_id": session_id})
        return {"reply": state["reply"], "toolUsed": state["tool_used"], "evidence": state.get("evidence")}

    def stream(self, message: str, session_id: Optional[str] = None):
        for line in self.invoke(message, session_id)["reply"].splitlines(True):
            yield line

    def _profiles_ready(self) -> bool:
        return self._profiles is not None and self._profiles.available()
