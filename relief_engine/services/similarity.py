"""
Pairwise similarity between incident reports.

Combines up to six signals into a weighted score in [0, 1]:

- Title text similarity
- Description text similarity
- Same disaster type (category)
- Same severity
- Geographic proximity (haversine distance)
- Temporal proximity (creation time)

A signal only takes part when it clears its own gate.  A gated-out signal
adds nothing to the numerator *or* the denominator, so weak noise does not
drag a strong match down, and each included signal contributes exactly one
human-readable reason.  Only attribute pairs are compared, so
``score(a, b)`` and ``score(b, a)`` agree.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..models import IncidentReport
from ..utils.geo import distance_between
from ..utils.text import text_similarity
from .settings import SimilaritySettings

logger = logging.getLogger(__name__)


@dataclass
class SimilarityResult:
    """Similarity of one candidate report to a target report."""
    report_id: str
    score: float
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "report_id": self.report_id,
            "score": self.score,
            "reasons": list(self.reasons),
        }


# (weight, strength, reason)
Signal = Tuple[float, float, str]


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class IncidentSimilarityScorer:
    """Scores how likely two reports describe the same real-world incident."""

    def __init__(self, settings: Optional[SimilaritySettings] = None):
        self.settings = settings or SimilaritySettings()

    def _text(self, a: str, b: str) -> float:
        return text_similarity(
            a, b,
            jaccard_weight=self.settings.text_jaccard_weight,
            edit_weight=self.settings.text_edit_weight,
        )

    def time_similarity(self, report_a: IncidentReport, report_b: IncidentReport) -> Tuple[float, float]:
        """
        Return (strength, hours_apart) for two creation timestamps.

        Strength is 1.0 for identical timestamps and fades linearly to 0 at
        the end of the time window.
        """
        hours = abs((report_a.created_at - report_b.created_at).total_seconds()) / 3600.0
        window = self.settings.time_window_hours
        if hours == 0:
            return 1.0, hours
        if hours > window:
            return 0.0, hours
        return 1.0 - hours / window, hours

    def signals(self, report_a: IncidentReport, report_b: IncidentReport) -> List[Signal]:
        """Collect every signal that clears its gate."""
        s = self.settings
        found: List[Signal] = []

        title_sim = self._text(report_a.title, report_b.title)
        if title_sim > s.title_gate:
            found.append((s.title_weight, title_sim, f"Title similarity: {title_sim * 100:.0f}%"))

        desc_sim = self._text(report_a.description, report_b.description)
        if desc_sim > s.description_gate:
            found.append((s.description_weight, desc_sim, f"Description similarity: {desc_sim * 100:.0f}%"))

        if report_a.category == report_b.category:
            found.append((s.category_weight, 1.0, f"Same disaster type: {report_a.category.value}"))

        if report_a.severity == report_b.severity:
            found.append((s.severity_weight, 1.0, f"Same severity: {report_a.severity.value}"))

        distance = distance_between(report_a, report_b)
        if distance is not None and distance <= s.proximity_radius_km:
            geo_score = 1.0 - distance / s.proximity_radius_km
            found.append((s.proximity_weight, geo_score, f"Close proximity: {distance:.2f} km away"))

        time_score, hours = self.time_similarity(report_a, report_b)
        if hours <= s.time_window_hours and time_score > s.time_gate:
            found.append((s.time_weight, time_score, f"Reported within {hours:.1f} hours"))

        return found

    def score(self, report_a: IncidentReport, report_b: IncidentReport) -> SimilarityResult:
        """
        Weighted similarity of ``report_b`` to ``report_a``.

        Returns a result for ``report_b.id``; score 0 with no reasons when no
        signal clears its gate.
        """
        found = self.signals(report_a, report_b)
        weight_sum = sum(weight for weight, _, _ in found)
        if weight_sum <= 0:
            return SimilarityResult(report_id=report_b.id, score=0.0)

        total = sum(weight * strength for weight, strength, _ in found)
        result = SimilarityResult(
            report_id=report_b.id,
            score=clamp(total / weight_sum),
            reasons=[reason for _, _, reason in found],
        )
        logger.debug(
            "similarity %s~%s = %.3f (%d signals)",
            report_a.id, report_b.id, result.score, len(found),
        )
        return result
