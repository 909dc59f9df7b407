"""
Engine facade wiring the correlation and matching services together.

Callers build one ``ReliefEngine`` from an ``AllSettings`` object and pass
it where it is needed; nothing here is a module-level singleton.
"""

import logging
from typing import Iterable, List, Optional

from ..models import AidOffer, IncidentReport, ResourceRequest
from .duplicate_detection import DuplicateDetector, DuplicateVerdict, LinkProposal
from .llm_provider import LLMRouter
from .match_scoring import GuardedMatchScorer, LLMMatchScorer, MatchScoringStrategy
from .matching import Match, MatchingService
from .report_clustering import ReportCluster, ReportClusteringService, merge_clusters
from .settings import AllSettings, load_settings
from .similarity import IncidentSimilarityScorer, SimilarityResult

logger = logging.getLogger(__name__)


class ReliefEngine:
    """The six correlation/matching operations behind one object."""

    def __init__(
        self,
        settings: Optional[AllSettings] = None,
        strategy: Optional[MatchScoringStrategy] = None,
    ):
        self.settings = settings or AllSettings()
        self.scorer = IncidentSimilarityScorer(self.settings.similarity)
        self.detector = DuplicateDetector(self.scorer, self.settings.duplicate_detection)
        self.clustering = ReportClusteringService(self.detector)

        guarded = None
        if strategy is not None:
            guarded = GuardedMatchScorer(strategy, self.settings.matching.scorer_timeout_seconds)
        self.matching = MatchingService(self.settings.matching, guarded)

    def similarity(self, report_a: IncidentReport, report_b: IncidentReport) -> SimilarityResult:
        return self.scorer.score(report_a, report_b)

    def find_similar(self, report: IncidentReport, pool: Iterable[IncidentReport]) -> List[SimilarityResult]:
        return self.detector.find_similar(report, pool)

    def detect_duplicate(self, report: IncidentReport, pool: Iterable[IncidentReport]) -> DuplicateVerdict:
        return self.detector.detect_duplicate(report, pool)

    def propose_links(self, report: IncidentReport, pool: Iterable[IncidentReport]) -> List[LinkProposal]:
        return self.detector.propose_links(report, pool)

    def cluster_reports(self, pool: Iterable[IncidentReport]) -> List[ReportCluster]:
        return self.clustering.cluster_reports(pool)

    def merge_clusters(self, cluster1: ReportCluster, cluster2: ReportCluster) -> ReportCluster:
        return merge_clusters(cluster1, cluster2)

    async def score_request_against_offers(
        self,
        request: ResourceRequest,
        offers: Iterable[AidOffer],
    ) -> List[Match]:
        return await self.matching.score_request_against_offers(request, offers)

    def score_offer_against_requests(
        self,
        offer: AidOffer,
        requests: Iterable[ResourceRequest],
    ) -> List[Match]:
        return self.matching.score_offer_against_requests(offer, requests)


def build_engine(settings: Optional[AllSettings] = None) -> ReliefEngine:
    """
    Build an engine from settings (environment-derived when omitted).

    Attaches the LLM match scorer when external scoring is enabled.
    """
    settings = settings or load_settings()
    strategy = None
    if settings.matching.enable_external_scoring:
        strategy = LLMMatchScorer(LLMRouter(settings.llm))
        logger.info(
            f"External match scoring enabled via {settings.llm.provider} "
            f"(timeout {settings.matching.scorer_timeout_seconds}s)"
        )
    return ReliefEngine(settings, strategy)
