"""
Report clustering for grouping reports of the same real-world incident.

Reports are walked in creation order.  Each report that is not yet part of
a cluster acts as an anchor: every qualifying similar report (see
``DuplicateDetector.find_similar``) that is still unassigned joins the
anchor's cluster.  A cluster is only kept when it gained at least one
member; singletons carry no grouping information.

Determinism:
- The walk order is (created_at, id), independent of input order.
- The primary report is the earliest-created member, never the best-scored
  one, so re-running over an unchanged pool reproduces the same clusters.

Cost is O(n^2) similarity comparisons; callers bound the pool (e.g. the
most recent 200 reports).
"""

import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Set

from ..models import IncidentReport
from .duplicate_detection import DuplicateDetector, LinkProposal

logger = logging.getLogger(__name__)


def _union_reasons(*groups: Iterable[str]) -> List[str]:
    """Order-preserving union of reason strings."""
    seen: Dict[str, None] = {}
    for group in groups:
        for reason in group:
            seen.setdefault(reason, None)
    return list(seen)


@dataclass
class ReportCluster:
    """A group of reports judged to describe the same incident."""
    reports: List[IncidentReport]
    confidence: float
    reasons: List[str] = field(default_factory=list)

    def __post_init__(self):
        unique: Dict[str, IncidentReport] = {}
        for report in self.reports:
            unique.setdefault(report.id, report)
        self.reports = sorted(unique.values(), key=lambda r: r.sort_key)

    @property
    def primary_report(self) -> IncidentReport:
        return self.reports[0]

    @property
    def primary_report_id(self) -> str:
        return self.primary_report.id

    @property
    def cluster_id(self) -> str:
        return self.primary_report.id

    @property
    def member_ids(self) -> List[str]:
        return [r.id for r in self.reports]

    @property
    def size(self) -> int:
        return len(self.reports)

    def to_dict(self) -> dict:
        return {
            "cluster_id": self.cluster_id,
            "primary_report_id": self.primary_report_id,
            "member_ids": self.member_ids,
            "related_report_ids": self.member_ids[1:],
            "total_reports": self.size,
            "confidence": self.confidence,
            "reasons": list(self.reasons),
        }


def merge_clusters(cluster1: ReportCluster, cluster2: ReportCluster) -> ReportCluster:
    """
    Reconcile two independently discovered clusters.

    Members are unioned by id, the earlier of the two primaries stays
    primary, confidence is the average and reasons are unioned.
    """
    return ReportCluster(
        reports=cluster1.reports + cluster2.reports,
        confidence=(cluster1.confidence + cluster2.confidence) / 2,
        reasons=_union_reasons(cluster1.reasons, cluster2.reasons),
    )


def cluster_link_proposals(clusters: Iterable[ReportCluster]) -> List[LinkProposal]:
    """Link every pair of members inside each cluster, scored by cluster confidence."""
    proposals = []
    for cluster in clusters:
        for a, b in combinations(cluster.member_ids, 2):
            proposals.append(LinkProposal(report_id=a, similar_report_id=b, score=cluster.confidence))
    return proposals


def summarize_clusters(clusters: List[ReportCluster]) -> dict:
    """Counts for dashboards and job logs."""
    return {
        "total_clusters": len(clusters),
        "total_reports_in_clusters": sum(c.size for c in clusters),
    }


class ReportClusteringService:
    """Groups a bounded pool of reports into incident clusters."""

    def __init__(self, detector: Optional[DuplicateDetector] = None):
        self.detector = detector or DuplicateDetector()

    def cluster_reports(self, reports: Iterable[IncidentReport]) -> List[ReportCluster]:
        """Cluster a report pool; singletons are dropped."""
        by_id: Dict[str, IncidentReport] = {}
        for report in reports:
            by_id.setdefault(report.id, report)
        ordered = sorted(by_id.values(), key=lambda r: r.sort_key)

        assigned: Set[str] = set()
        clusters: List[ReportCluster] = []

        for anchor in ordered:
            if anchor.id in assigned:
                continue

            members = [anchor]
            scores = []
            reasons: List[List[str]] = []
            for sim in self.detector.find_similar(anchor, ordered):
                if sim.report_id in assigned or sim.report_id == anchor.id:
                    continue
                members.append(by_id[sim.report_id])
                assigned.add(sim.report_id)
                scores.append(sim.score)
                reasons.append(sim.reasons)

            if not scores:
                continue

            assigned.add(anchor.id)
            clusters.append(ReportCluster(
                reports=members,
                confidence=sum(scores) / len(scores),
                reasons=_union_reasons(*reasons),
            ))

        clusters.sort(key=lambda c: (-c.size, c.primary_report.sort_key))

        logger.info(f"Clustered {len(ordered)} reports into {len(clusters)} clusters")
        return clusters
