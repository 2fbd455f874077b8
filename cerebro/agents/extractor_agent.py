# cerebro/agents/extractor_agent.py
from __future__ import annotations
import logging
from typing import Any, Optional

from pydantic import BaseModel, ValidationError, field_validator

from cerebro.agents.model_output import parse_json_from_model
from cerebro.errors import ModelOutputParseError
from cerebro.llm.client import build_llm_client

logger = logging.getLogger(__name__)


class ReportTarget(BaseModel):
    playerName: str = ""
    team: str = ""
    position: str = ""

    @field_validator("playerName", "team", "position", mode="before")
    @classmethod
    def _strings_only(cls, v):
        return v.strip() if isinstance(v, str) else ""


class TargetExtractorAgent:
    """Pulls {playerName, team, position} out of a free-text request."""

    def __init__(self, llm: Optional[Any] = None):
        self.llm = llm or build_llm_client()

    def build_prompt(self, message: str) -> str:
        return (
            "Extract report target fields from this basketball request.\n"
            "Return ONLY valid JSON with this exact schema:\n"
            "{\n"
            '  "playerName": "",\n'
            '  "team": "",\n'
            '  "position": ""\n'
            "}\n\n"
            "Rules:\n"
            "- If a field is unknown, return empty string.\n"
            "- playerName should be a full player name if present.\n\n"
            f"Request:\n{message}"
        )

    def extract(self, message: str) -> ReportTarget:
        """Raises ModelOutputParseError when the reply is not a JSON object."""
        data = parse_json_from_model(self.llm.generate(self.build_prompt(message)))
        if not isinstance(data, dict):
            raise ModelOutputParseError("extractor output is not an object")
        try:
            return ReportTarget.model_validate(data)
        except ValidationError as e:
            raise ModelOutputParseError(f"invalid report target: {e}") from e

    def invoke(self, message: str) -> Optional[ReportTarget]:
        if not (message or "").strip():
            return None
        try:
            return self.extract(message)
        except ModelOutputParseError as e:
            logger.warning("extractor output unusable: %s", e)
            return None
