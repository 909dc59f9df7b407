"""Duplicate detection for incident reports.

Runs a new report against a bounded pool of recent reports supplied by the
caller and ranks the ones that look like the same real-world incident.

Similarity comes from ``IncidentSimilarityScorer``; this module applies the
acceptance rules on top of it:

1. **Similar** -- combined score >= ``min_similarity`` (0.70) *and* backed by
   at least ``min_reasons`` (2) independent signals.  A single strong signal,
   e.g. two reports that merely share a disaster type, is never enough.
2. **Duplicate** -- the best similar report scores >= ``duplicate_threshold``
   (0.85).

Output contract:
    - ``find_similar()`` returns ``SimilarityResult`` objects sorted by score,
      best first; ties go to the earlier-created report, then to id.
    - ``detect_duplicate()`` returns a ``DuplicateVerdict``; ``confidence`` is
      the top score (0.0 if nothing qualified) and ``reasons`` are the top
      result's reasons even when it falls short of a duplicate.
    - ``propose_links()`` returns undirected ``LinkProposal`` edges.  Nothing
      here writes to storage; ``apply_link_proposals()`` shows the persistence
      layer how to record each edge in both directions.

Known limitations:
    - The pool is compared pairwise (O(n) per report, O(n^2) for clustering),
      so callers must bound it; ``most_recent()`` does that.
    - Text similarity is lexical.  Two accounts of one fire written in very
      different words rely on category, location and time to corroborate.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..models import IncidentReport
from .settings import DuplicateDetectionSettings
from .similarity import IncidentSimilarityScorer, SimilarityResult

logger = logging.getLogger(__name__)


@dataclass
class DuplicateVerdict:
    """Outcome of checking one report against a pool."""
    is_duplicate: bool
    confidence: float
    duplicate_of_id: Optional[str] = None
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "is_duplicate": self.is_duplicate,
            "duplicate_of_id": self.duplicate_of_id,
            "confidence": self.confidence,
            "reasons": list(self.reasons),
        }


@dataclass(frozen=True)
class LinkProposal:
    """An undirected similarity edge between two reports."""
    report_id: str
    similar_report_id: str
    score: float

    def to_dict(self) -> dict:
        return {
            "report_id": self.report_id,
            "similar_report_id": self.similar_report_id,
            "score": self.score,
        }


def most_recent(reports: Iterable[IncidentReport], limit: int) -> List[IncidentReport]:
    """Keep the ``limit`` newest reports, returned oldest first."""
    ordered = sorted(reports, key=lambda r: r.sort_key)
    if limit <= 0:
        return []
    return ordered[-limit:]


def apply_link_proposals(
    adjacency: Dict[str, Iterable[str]],
    proposals: Iterable[LinkProposal],
) -> Dict[str, List[str]]:
    """
    Fold link proposals into a report-id -> similar-ids map.

    Every edge is recorded on both endpoints.  Returns a new map with sorted,
    de-duplicated id lists; ``adjacency`` itself is left untouched.
    """
    merged: Dict[str, set] = {rid: set(ids) for rid, ids in adjacency.items()}
    for proposal in proposals:
        a, b = proposal.report_id, proposal.similar_report_id
        if a == b:
            continue
        merged.setdefault(a, set()).add(b)
        merged.setdefault(b, set()).add(a)
    return {rid: sorted(ids - {rid}) for rid, ids in merged.items()}


class DuplicateDetector:
    """Finds similar and duplicate reports within a caller-supplied pool."""

    def __init__(
        self,
        scorer: Optional[IncidentSimilarityScorer] = None,
        settings: Optional[DuplicateDetectionSettings] = None,
    ):
        self.scorer = scorer or IncidentSimilarityScorer()
        self.config = settings or DuplicateDetectionSettings()

    def is_similar(self, result: SimilarityResult) -> bool:
        """Apply the score threshold and the corroboration rule."""
        return (
            result.score >= self.config.min_similarity
            and len(result.reasons) >= self.config.min_reasons
        )

    def find_similar(
        self,
        target: IncidentReport,
        pool: Iterable[IncidentReport],
    ) -> List[SimilarityResult]:
        """Rank the reports in ``pool`` that qualify as similar to ``target``."""
        ranked = []
        for report in pool:
            if report.id == target.id:
                continue
            result = self.scorer.score(target, report)
            if self.is_similar(result):
                ranked.append((result, report.sort_key))

        ranked.sort(key=lambda pair: (-pair[0].score, pair[1]))
        return [result for result, _ in ranked]

    def detect_duplicate(
        self,
        new_report: IncidentReport,
        pool: Iterable[IncidentReport],
    ) -> DuplicateVerdict:
        """Decide whether ``new_report`` duplicates something already in ``pool``."""
        similar = self.find_similar(new_report, pool)
        if not similar:
            return DuplicateVerdict(is_duplicate=False, confidence=0.0)

        top = similar[0]
        is_duplicate = top.score >= self.config.duplicate_threshold
        if is_duplicate:
            logger.info(
                f"Report {new_report.id} looks like a duplicate of {top.report_id} "
                f"(confidence {top.score:.2f})"
            )
        return DuplicateVerdict(
            is_duplicate=is_duplicate,
            duplicate_of_id=top.report_id if is_duplicate else None,
            confidence=top.score,
            reasons=list(top.reasons),
        )

    def propose_links(
        self,
        report: IncidentReport,
        pool: Iterable[IncidentReport],
    ) -> List[LinkProposal]:
        """
        Propose similarity edges for a newly submitted report.

        Edges go to the top ``max_links`` similar reports, and only when the
        duplicate verdict's confidence exceeds ``link_confidence_threshold``.
        """
        similar = self.find_similar(report, pool)
        if not similar or similar[0].score <= self.config.link_confidence_threshold:
            return []
        return [
            LinkProposal(report_id=report.id, similar_report_id=s.report_id, score=s.score)
            for s in similar[:self.config.max_links]
        ]
