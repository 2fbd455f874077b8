# cerebro/agents/model_output.py
from __future__ import annotations
import json
import re
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from cerebro.errors import ModelOutputParseError

_FENCED = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)

ToolName = Literal["search_players", "get_player_by_id", "top_players", "top_players_by_position", "none"]


class ToolPlan(BaseModel):
    tool: ToolName = "none"
    args: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("args", mode="before")
    @classmethod
    def _coerce_args(cls, v):
        return v if isinstance(v, dict) else {}


NO_TOOL = ToolPlan()


def parse_json_from_model(text: str) -> Any:
    """Direct JSON parse, then the first fenced code block. Raises ModelOutputParseError."""
    cleaned = (text or "").strip()
    if not cleaned:
        raise ModelOutputParseError("empty model output", raw=text)
    try:
        return json.loads(cleaned)
    except ValueError:
        pass
    match = _FENCED.search(cleaned)
    if not match:
        raise ModelOutputParseError("model output is not JSON", raw=text)
    try:
        return json.loads(match.group(1).strip())
    except ValueError as e:
        raise ModelOutputParseError(f"fenced block is not JSON: {e}", raw=text) from e


def parse_tool_plan(text: str) -> ToolPlan:
    data = parse_json_from_model(text)
    if not isinstance(data, dict) or not data.get("tool"):
        raise ModelOutputParseError("model output has no tool", raw=text)
    try:
        return ToolPlan.model_validate(data)
    except ValidationError as e:
        raise ModelOutputParseError(f"invalid tool plan: {e.errors()[0]['msg']}", raw=text) from e
