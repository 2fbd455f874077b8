# cerebro/services.py
# Wires the store, tools, agents and memory into one object shared by the API and UI.
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

from langchain_core.tools import BaseTool

from cerebro.agents.extractor_agent import TargetExtractorAgent
from cerebro.agents.intent_classifier import IntentClassifier
from cerebro.agents.report_agent import ReportAgent
from cerebro.agents.router_agent import RouterAgent
from cerebro.agents.synthesis_agent import SynthesisAgent
from cerebro.graphs.chat_graph import ChatAgent
from cerebro.llm.client import build_llm_client
from cerebro.memory.session_memory import SessionMemory
from cerebro.resolution.player_resolver import PlayerResolver
from cerebro.tools.base.player_store import PlayerStore
from cerebro.tools.compute.percentiles import PercentileCache
from cerebro.tools.retriever.player_profiles import PlayerProfileRetriever
from cerebro.tools.tool_registry import build_percentile_cache, build_tool_index, build_tools


@dataclass
class Services:
    store: PlayerStore
    tools: Dict[str, BaseTool]
    synthesis: SynthesisAgent
    report_agent: ReportAgent
    chat_agent: ChatAgent
    memory: SessionMemory


def build_services(
    store: Optional[PlayerStore] = None,
    llm: Optional[Any] = None,
    cache: Optional[PercentileCache] = None,
    memory: Optional[SessionMemory] = None,
    profiles: Optional[PlayerProfileRetriever] = None,
) -> Services:
    store = store or PlayerStore()
    llm = llm or build_llm_client()
    tools = build_tool_index(build_tools(store, cache or build_percentile_cache(store)))
    memory = memory or SessionMemory()

    classifier = IntentClassifier(RouterAgent(llm), TargetExtractorAgent(llm))
    synthesis = SynthesisAgent(llm)
    report_agent = ReportAgent(tools, classifier, synthesis)
    chat_agent = ChatAgent(
        tools=tools,
        resolver=PlayerResolver(store),
        classifier=classifier,
        synthesis=synthesis,
        report_agent=report_agent,
        memory=memory,
        profiles=profiles,
    )
    return Services(store, tools, synthesis, report_agent, chat_agent, memory)
