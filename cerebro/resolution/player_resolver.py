"""Player name resolution for the chat path.

Turns a free-text name into either one confirmed player record or a short list
of candidates the user has to choose from. Exact matches short-circuit; token
overlap is only tried when plain substring search finds nothing, so a loose
guess is never presented as a confirmed player.
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from config import settings
from cerebro.capabilities.manifest import CANDIDATE_COLUMNS
from cerebro.tools.base.player_store import PlayerStore

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9 ]")
_SPACES = re.compile(r"\s+")


def normalize_name(value: Any) -> str:
    text = _NON_ALNUM.sub(" ", str(value or "").lower())
    return _SPACES.sub(" ", text).strip()


def tokenize_name(value: Any) -> List[str]:
    normalized = normalize_name(value)
    return normalized.split(" ") if normalized else []


def name_similarity(a: Any, b: Any) -> float:
    """Token-set overlap: |A & B| / max(|A|, |B|)."""
    left, right = set(tokenize_name(a)), set(tokenize_name(b))
    if not left or not right:
        return 0.0
    return len(left & right) / max(len(left), len(right))


def candidate_projection(player: Dict[str, Any], score: Optional[float] = None) -> Dict[str, Any]:
    out = {col: player.get(col) for col in CANDIDATE_COLUMNS}
    if score is not None:
        out["similarity_score"] = round(score, 4)
    return out


class Resolution(str, Enum):
    EXACT = "exact"
    SINGLE_CANDIDATE = "single_candidate"
    FUZZY_SINGLE = "fuzzy_single"
    DUPLICATE_EXACT_NAME = "duplicate_exact_name"
    SIMILAR_NAME_CANDIDATES = "similar_name_candidates"
    NO_MATCH = "no_match"


AMBIGUOUS = {Resolution.DUPLICATE_EXACT_NAME, Resolution.SIMILAR_NAME_CANDIDATES}


@dataclass
class ResolutionResult:
    kind: Resolution
    query: str
    best_match: Optional[Dict[str, Any]] = None
    player: Optional[Dict[str, Any]] = None
    candidates: List[Dict[str, Any]] = field(default_factory=list)
    matches: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_ambiguous(self) -> bool:
        return self.kind in AMBIGUOUS

    @property
    def resolved_name(self) -> Optional[str]:
        return self.best_match.get("name_split") if self.best_match else None

    @property
    def tool_used(self) -> str:
        return "search_players+get_player_by_id" if self.player is not None else "search_players"

    def to_evidence(self) -> Any:
        if self.kind == Resolution.NO_MATCH:
            return self.matches
        if self.is_ambiguous:
            return {"query": self.query, "ambiguity": self.kind.value, "candidates": self.candidates}
        evidence: Dict[str, Any] = {
            "query": self.query,
            "bestMatch": self.best_match,
            "resolution": self.kind.value,
            "resolvedName": self.resolved_name,
            "player": self.player,
        }
        if self.kind != Resolution.SINGLE_CANDIDATE:
            evidence["candidateMatches"] = self.candidates
        return evidence


class PlayerResolver:
    def __init__(
        self,
        store: PlayerStore,
        threshold: float = settings.FUZZY_MATCH_THRESHOLD,
        max_candidates: int = settings.MAX_CANDIDATES,
    ):
        self.store = store
        self.threshold = threshold
        self.max_candidates = max_candidates

    def resolve(
        self,
        query: str,
        team: str = "",
        position: str = "",
        limit: Any = settings.DEFAULT_SEARCH_LIMIT,
    ) -> ResolutionResult:
        query = (query or "").strip()
        matches = self.store.search(query=query, team=team, position=position, limit=limit)
        if not query:
            return ResolutionResult(Resolution.NO_MATCH, query, matches=matches)

        target = normalize_name(query)
        exact = [p for p in matches if normalize_name(p.get("name_split")) == target]

        if len(exact) == 1:
            return self._fetched(Resolution.EXACT, query, exact[0], candidates=matches[: self.max_candidates])

        if len(exact) > 1:
            logger.info("duplicate exact name query=%r count=%d", query, len(exact))
            return ResolutionResult(
                Resolution.DUPLICATE_EXACT_NAME,
                query,
                candidates=[candidate_projection(p) for p in exact[: self.max_candidates]],
            )

        if len(matches) == 1:
            return self._fetched(Resolution.SINGLE_CANDIDATE, query, matches[0])

        if not matches:
            return self._resolve_by_tokens(query, team, position)

        return ResolutionResult(Resolution.NO_MATCH, query, matches=matches)

    # ---------- helpers ----------
    def _resolve_by_tokens(self, query: str, team: str, position: str) -> ResolutionResult:
        tokens = tokenize_name(query)
        fallback_tokens: List[str] = []
        for token in (tokens[:1] + tokens[-1:]):
            if len(token) >= 2 and token not in fallback_tokens:
                fallback_tokens.append(token)
        fallback_tokens = fallback_tokens[:2]

        seen: Dict[str, Dict[str, Any]] = {}
        for token in fallback_tokens:
            for player in self.store.search(query=token, team=team, position=position, limit=settings.FUZZY_TOKEN_LIMIT):
                seen.setdefault(str(player.get("unique_id")), player)

        ranked = [(name_similarity(query, p.get("name_split")), p) for p in seen.values()]
        ranked = [(score, p) for score, p in ranked if score >= self.threshold]
        ranked.sort(key=lambda pair: pair[0], reverse=True)
        logger.info("token fallback query=%r tokens=%s survivors=%d", query, fallback_tokens, len(ranked))

        top = [candidate_projection(p, score) for score, p in ranked[: self.max_candidates]]
        if len(ranked) == 1:
            return self._fetched(Resolution.FUZZY_SINGLE, query, ranked[0][1], candidates=top)
        if ranked:
            return ResolutionResult(Resolution.SIMILAR_NAME_CANDIDATES, query, candidates=top)
        return ResolutionResult(Resolution.NO_MATCH, query, matches=[])

    def _fetched(self, kind: Resolution, query: str, match: Dict[str, Any], candidates=None) -> ResolutionResult:
        player = self.store.get(match["unique_id"])
        logger.info("resolved query=%r kind=%s id=%s", query, kind.value, match["unique_id"])
        return ResolutionResult(kind, query, best_match=match, player=player, candidates=list(candidates or []))


def pick_best_match(name: str, matches: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Report path: exact name, then prefix, then contains, then the first row."""
    if not name or not matches:
        return None
    target = normalize_name(name)
    normalized = [(normalize_name(p.get("name_split")), p) for p in matches]
    for accept in (
        lambda n: n == target,
        lambda n: n.startswith(target),
        lambda n: target in n,
    ):
        for candidate_name, player in normalized:
            if accept(candidate_name):
                return player
    return matches[0]
