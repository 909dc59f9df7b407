"""
Resource matching: pairs resource requests with aid offers.

Scores are on a 0-100 scale.  Only equal resource types are ever paired.

Deterministic heuristic (always available):

    score = base (50)
          + sufficiency  min(20, floor(20 * offer_qty / request_qty))
          + proximity    30 (<5 km), 20 (<20 km), 10 (<50 km), else 10
          [+ urgency     critical 15, high 10, medium 5, low 0 -- offer side only]

Request-initiated matching may use an external scorer first; any failure,
timeout or unusable answer drops back to the heuristic.  Offer-initiated
matching is heuristic-only and adds the urgency term so the most urgent
unmet need ranks first.

Both directions clamp every score, drop scores below ``min_match_score``
(40), sort best-first (ties keep the caller's pool order) and return at most
``max_matches`` (5) proposals.  Nothing here changes request or offer state.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..models import AidOffer, ResourceRequest
from ..utils.geo import distance_between
from .match_scoring import ExternalScore, GuardedMatchScorer, OfferCandidate
from .settings import MatchingSettings

logger = logging.getLogger(__name__)

FALLBACK = "fallback"


@dataclass
class Match:
    """A proposed pairing awaiting human approval."""
    request_id: str
    offer_id: str
    score: float
    reasoning: str
    distance_km: Optional[float] = None
    scored_by: str = FALLBACK

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "offer_id": self.offer_id,
            "score": self.score,
            "distance_km": self.distance_km,
            "reasoning": self.reasoning,
            "scored_by": self.scored_by,
        }


def clamp_score(score: float) -> float:
    return max(0.0, min(100.0, float(score)))


def format_distance(distance_km: Optional[float]) -> str:
    if distance_km is None:
        return ""
    return f" Distance: {distance_km:.1f}km."


class MatchingService:
    """Ranks aid offers for requests and requests for offers."""

    def __init__(
        self,
        settings: Optional[MatchingSettings] = None,
        scorer: Optional[GuardedMatchScorer] = None,
    ):
        self.settings = settings or MatchingSettings()
        self.scorer = scorer

    # ------------------------------------------------------------------
    # Heuristic terms
    # ------------------------------------------------------------------

    def sufficiency_bonus(self, offered: int, needed: int) -> int:
        """Up to ``max_sufficiency_bonus`` points for covering the need."""
        cap = self.settings.max_sufficiency_bonus
        if needed <= 0:
            return cap
        return min(cap, math.floor(cap * offered / needed))

    def proximity_bonus(self, distance_km: Optional[float]) -> int:
        """Banded bonus; unknown or far distances get the flat default."""
        if distance_km is not None:
            for limit, bonus in self.settings.proximity_bands:
                if distance_km < limit:
                    return bonus
        return self.settings.default_proximity_bonus

    def urgency_bonus(self, request: ResourceRequest) -> int:
        return self.settings.urgency_bonus.get(request.urgency.value, 0)

    def fallback_score(
        self,
        request: ResourceRequest,
        offer: AidOffer,
        distance_km: Optional[float],
        with_urgency: bool = False,
    ) -> float:
        score = (
            self.settings.base_score
            + self.sufficiency_bonus(offer.quantity, request.quantity)
            + self.proximity_bonus(distance_km)
        )
        if with_urgency:
            score += self.urgency_bonus(request)
        return clamp_score(score)

    # ------------------------------------------------------------------
    # Request -> offers
    # ------------------------------------------------------------------

    def _fallback_for_request(self, request: ResourceRequest, candidate: OfferCandidate) -> Match:
        offer = candidate.offer
        covered = offer.quantity >= request.quantity
        quantity_note = (
            "Sufficient quantity available." if covered
            else f"Partial quantity available ({offer.quantity} of {request.quantity})."
        )
        return Match(
            request_id=request.id,
            offer_id=offer.id,
            score=self.fallback_score(request, offer, candidate.distance_km),
            distance_km=candidate.distance_km,
            reasoning=(
                f"Resource type match: {request.resource_type.value}."
                f"{format_distance(candidate.distance_km)} {quantity_note}"
            ),
        )

    def _from_external(
        self,
        request: ResourceRequest,
        candidates: List[OfferCandidate],
        external: List[ExternalScore],
        scorer_name: str,
    ) -> List[Match]:
        """Keep external entries that name a known candidate, first entry wins."""
        by_id = {c.offer.id: c for c in candidates}
        seen = set()
        matches = []
        for entry in external:
            candidate = by_id.get(entry.offer_id)
            if candidate is None:
                logger.debug(f"Ignoring external score for unknown offer {entry.offer_id}")
                continue
            if entry.offer_id in seen:
                continue
            seen.add(entry.offer_id)
            matches.append(Match(
                request_id=request.id,
                offer_id=entry.offer_id,
                score=clamp_score(entry.score),
                distance_km=candidate.distance_km,
                reasoning=entry.reasoning or f"Resource type match: {request.resource_type.value}.",
                scored_by=f"external:{scorer_name}",
            ))
        return matches

    async def score_request_against_offers(
        self,
        request: ResourceRequest,
        offers: Iterable[AidOffer],
    ) -> List[Match]:
        """Rank available offers of the same resource type for a request."""
        candidates = [
            OfferCandidate(offer=offer, distance_km=distance_between(request, offer))
            for offer in offers
            if offer.resource_type == request.resource_type
        ]
        if not candidates:
            return []

        matches: List[Match] = []
        if self.scorer is not None:
            external = await self.scorer.score(request, candidates)
            if external is not None:
                matches = self._from_external(request, candidates, external, self.scorer.name)
                if not matches:
                    logger.warning(
                        f"External scorer '{self.scorer.name}' returned no usable matches "
                        f"for request {request.id}; using fallback"
                    )

        if not matches:
            matches = [self._fallback_for_request(request, c) for c in candidates]

        ranked = self._rank(matches)
        logger.info(
            f"Request {request.id}: {len(ranked)} matches from {len(candidates)} "
            f"{request.resource_type.value} offers"
        )
        return ranked

    # ------------------------------------------------------------------
    # Offer -> requests
    # ------------------------------------------------------------------

    def _fallback_for_offer(
        self,
        offer: AidOffer,
        request: ResourceRequest,
        distance_km: Optional[float],
    ) -> Match:
        covered = offer.quantity >= request.quantity
        quantity_note = "Offer covers full need." if covered else "Offer partially covers need."
        return Match(
            request_id=request.id,
            offer_id=offer.id,
            score=self.fallback_score(request, offer, distance_km, with_urgency=True),
            distance_km=distance_km,
            reasoning=(
                f"{request.urgency.value.capitalize()} urgency {request.resource_type.value} request."
                f"{format_distance(distance_km)} {quantity_note}"
            ),
        )

    def score_offer_against_requests(
        self,
        offer: AidOffer,
        requests: Iterable[ResourceRequest],
    ) -> List[Match]:
        """Rank pending requests of the same resource type for a new offer."""
        matches = [
            self._fallback_for_offer(offer, request, distance_between(offer, request))
            for request in requests
            if request.resource_type == offer.resource_type
        ]
        ranked = self._rank(matches)
        logger.info(f"Offer {offer.id}: {len(ranked)} matching requests")
        return ranked

    def _rank(self, matches: List[Match]) -> List[Match]:
        kept = [m for m in matches if m.score >= self.settings.min_match_score]
        kept.sort(key=lambda m: -m.score)
        return kept[:self.settings.max_matches]
