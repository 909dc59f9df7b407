"""
Pluggable external scoring for resource matching.

An external strategy (typically an LLM) may rank aid offers for a request
with richer judgement than the deterministic heuristic.  It is optional and
never trusted to be up:

- ``MatchScoringStrategy`` is the one-method contract a scorer implements.
- ``GuardedMatchScorer`` wraps every call with a timeout and turns any
  failure into ``None``, which the matching service reads as "use the
  deterministic fallback".
- ``LLMMatchScorer`` is the shipped strategy, backed by ``LLMRouter``.
"""

import asyncio
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

from ..models import AidOffer, ResourceRequest
from ..utils.llm_parsing import parse_llm_json, extract_list
from .llm_errors import LLMError, ErrorCategory, classify_scoring_error
from .llm_provider import LLMRouter

logger = logging.getLogger(__name__)


@dataclass
class OfferCandidate:
    """A type-matched offer plus its distance from the request, if known."""
    offer: AidOffer
    distance_km: Optional[float] = None


@dataclass
class ExternalScore:
    """One entry returned by an external scorer."""
    offer_id: str
    score: float
    reasoning: str = ""


class MatchScoringStrategy(ABC):
    """
    Contract for external match scorers.

    Implementations are synchronous and may block on I/O; the guard runs
    them in a worker thread.
    """

    name: str = "external"

    @abstractmethod
    def score(
        self,
        request: ResourceRequest,
        candidates: List[OfferCandidate],
        timeout: float,
    ) -> List[ExternalScore]:
        """
        Score each candidate offer for the request on a 0-100 scale.

        Args:
            request: The resource request being matched
            candidates: Offers of the same resource type, with distances
            timeout: Seconds the caller will wait for an answer

        Returns:
            One ExternalScore per offer the scorer has an opinion on
        """
        pass


def _coerce_entry(entry: Any) -> Optional[ExternalScore]:
    """One ExternalScore or ``{offerId, score, reasoning}`` dict; None if unusable."""
    if isinstance(entry, ExternalScore):
        offer_id, raw_score, reasoning = entry.offer_id, entry.score, entry.reasoning
    elif isinstance(entry, dict):
        offer_id = entry.get("offerId", entry.get("offer_id"))
        raw_score = entry.get("score")
        reasoning = entry.get("reasoning")
    else:
        return None

    if offer_id is None or raw_score is None or isinstance(raw_score, bool):
        return None
    try:
        value = float(raw_score)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return ExternalScore(offer_id=str(offer_id), score=value, reasoning=str(reasoning or ""))


def coerce_scores(entries: Any, provider: str) -> List[ExternalScore]:
    """
    Validate a strategy's answer into ExternalScore entries.

    Unusable entries are skipped. Raises LLMError when the answer is not a
    list, or when it has entries and none of them is usable.
    """
    if not isinstance(entries, (list, tuple)):
        raise LLMError(
            category=ErrorCategory.PARTIAL,
            error_code="invalid_response",
            message=f"Expected a list of scores, got {type(entries).__name__}",
            provider=provider,
        )

    scores = []
    for entry in entries:
        score = _coerce_entry(entry)
        if score is None:
            logger.debug(f"Skipping unusable score entry from {provider}: {entry!r:.200}")
            continue
        scores.append(score)

    if entries and not scores:
        raise LLMError(
            category=ErrorCategory.PARTIAL,
            error_code="invalid_response",
            message="No usable match entries in scorer response",
            provider=provider,
        )
    return scores


class GuardedMatchScorer:
    """Time-bounded wrapper that never lets a scorer failure escape."""

    def __init__(self, strategy: MatchScoringStrategy, timeout_seconds: float):
        self.strategy = strategy
        self.timeout_seconds = timeout_seconds

    @property
    def name(self) -> str:
        return self.strategy.name

    async def score(
        self,
        request: ResourceRequest,
        candidates: List[OfferCandidate],
    ) -> Optional[List[ExternalScore]]:
        """Run the strategy and validate its answer; None means the caller must fall back."""
        try:
            raw = await asyncio.wait_for(
                asyncio.to_thread(
                    self.strategy.score, request, candidates, self.timeout_seconds
                ),
                timeout=self.timeout_seconds,
            )
            return coerce_scores(raw, self.strategy.name)
        except Exception as exc:
            err = classify_scoring_error(exc, self.strategy.name)
            logger.warning(
                "Match scoring degraded to fallback for request %s (%s/%s): %s",
                request.id, err.category.value, err.error_code, str(err.message)[:200],
            )
            return None


MATCHING_SYSTEM_PROMPT = (
    "You are a disaster relief resource matching AI. Respond only with valid JSON."
)


def build_matching_prompt(request: ResourceRequest, candidates: List[OfferCandidate]) -> str:
    """Describe the request and candidate offers for the LLM."""
    lines = [
        "You are an AI matchmaker for disaster relief resources. Analyze the following "
        "resource request and available aid offers to find the best matches.",
        "",
        "Resource Request:",
        f"- Type: {request.resource_type.value}",
        f"- Quantity needed: {request.quantity}",
        f"- Urgency: {request.urgency.value}",
        f"- Location: {request.location or 'N/A'}",
    ]
    if request.coordinates:
        lines.append(f"- GPS: {request.latitude}, {request.longitude}")
    lines.append(f"- Description: {request.description or 'N/A'}")
    lines += ["", "Available Aid Offers:"]

    for index, candidate in enumerate(candidates, start=1):
        offer = candidate.offer
        lines.append(f"{index}. Offer ID: {offer.id}")
        lines.append(f"   - Type: {offer.resource_type.value}")
        lines.append(f"   - Quantity available: {offer.quantity}")
        lines.append(f"   - Location: {offer.location or 'N/A'}")
        if offer.coordinates:
            lines.append(f"   - GPS: {offer.latitude}, {offer.longitude}")
        if candidate.distance_km is not None:
            lines.append(f"   - Distance: {candidate.distance_km:.1f} km")
        lines.append(f"   - Description: {offer.description or 'N/A'}")

    lines += [
        "",
        "For each offer, provide a match score (0-100) and reasoning. Consider:",
        "1. Proximity (distance) - closer is better",
        "2. Quantity match - meeting or exceeding need is important",
        "3. Urgency of request vs. availability",
        "4. Any special considerations from descriptions",
        "",
        'Respond with a JSON object {"matches": [...]}, sorted by score (highest first). '
        "Include only matches with score >= 40.",
        "Format:",
        '{"matches": [{"offerId": "offer-id", "score": <number 0-100>, '
        '"reasoning": "<brief explanation>"}]}',
    ]
    return "\n".join(lines)


def parse_external_scores(text: str, provider: str) -> List[ExternalScore]:
    """Parse an LLM answer into ExternalScore entries; raise LLMError if unusable."""
    try:
        entries = extract_list(parse_llm_json(text), "matches")
    except ValueError as exc:
        # json.JSONDecodeError is a ValueError
        raise LLMError(
            category=ErrorCategory.PARTIAL,
            error_code="invalid_json",
            message=str(exc),
            provider=provider,
            original=exc,
        ) from exc

    return coerce_scores(entries, provider)


class LLMMatchScorer(MatchScoringStrategy):
    """Scores offers by asking an LLM through the provider router."""

    name = "llm"

    def __init__(self, router: LLMRouter):
        self.router = router

    def score(
        self,
        request: ResourceRequest,
        candidates: List[OfferCandidate],
        timeout: float,
    ) -> List[ExternalScore]:
        prompt = build_matching_prompt(request, candidates)
        response = self.router.call(MATCHING_SYSTEM_PROMPT, prompt, timeout=timeout)
        logger.debug(
            f"LLM match scoring for {request.id}: provider={response.provider} "
            f"model={response.model} latency_ms={response.latency_ms}"
        )
        return parse_external_scores(response.text, response.provider)
